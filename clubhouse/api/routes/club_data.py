"""Season, team and player endpoints, all under `/clubs/{club_id}`."""

from typing import Annotated

from fastapi import APIRouter, Depends

from clubhouse.api.auth import get_current_context
from clubhouse.api.dependencies import AuthorizedClubId, get_club_data_service
from clubhouse.db.context import RequestContext
from clubhouse.middleware.club_membership import require_club_membership
from clubhouse.models.clubs import (
    CreatePlayerRequest,
    CreateSeasonRequest,
    CreateTeamRequest,
    PlayerDto,
    SeasonDto,
    TeamDto,
    UpdateTeamRequest,
)
from clubhouse.services.club_data import ClubDataService

router = APIRouter(
    prefix="/clubs/{club_id}",
    tags=["club-data"],
    dependencies=[Depends(require_club_membership)],
)

Context = Annotated[RequestContext, Depends(get_current_context)]
Service = Annotated[ClubDataService, Depends(get_club_data_service)]


@router.get("/seasons", response_model=list[SeasonDto])
async def list_seasons(
    authorized_club_id: AuthorizedClubId, ctx: Context, service: Service
) -> list[SeasonDto]:
    return await service.list_seasons(ctx, authorized_club_id)


@router.post("/seasons", response_model=SeasonDto, status_code=201)
async def create_season(
    request: CreateSeasonRequest,
    authorized_club_id: AuthorizedClubId,
    ctx: Context,
    service: Service,
) -> SeasonDto:
    return await service.create_season(ctx, authorized_club_id, request)


@router.get("/seasons/{season_id}", response_model=SeasonDto)
async def get_season(
    season_id: int, authorized_club_id: AuthorizedClubId, ctx: Context, service: Service
) -> SeasonDto:
    return await service.get_season(ctx, authorized_club_id, season_id)


@router.get("/teams", response_model=list[TeamDto])
async def list_teams(
    authorized_club_id: AuthorizedClubId, ctx: Context, service: Service
) -> list[TeamDto]:
    return await service.list_teams(ctx, authorized_club_id)


@router.post("/teams", response_model=TeamDto, status_code=201)
async def create_team(
    request: CreateTeamRequest,
    authorized_club_id: AuthorizedClubId,
    ctx: Context,
    service: Service,
) -> TeamDto:
    return await service.create_team(ctx, authorized_club_id, request)


@router.patch("/teams/{team_id}", response_model=TeamDto)
async def update_team(
    team_id: int,
    request: UpdateTeamRequest,
    authorized_club_id: AuthorizedClubId,
    ctx: Context,
    service: Service,
) -> TeamDto:
    """Rename a team or change its graduation year."""
    return await service.update_team(ctx, authorized_club_id, team_id, request)


@router.get("/players", response_model=list[PlayerDto])
async def list_players(
    authorized_club_id: AuthorizedClubId, ctx: Context, service: Service
) -> list[PlayerDto]:
    return await service.list_players(ctx, authorized_club_id)


@router.post("/players", response_model=PlayerDto, status_code=201)
async def create_player(
    request: CreatePlayerRequest,
    authorized_club_id: AuthorizedClubId,
    ctx: Context,
    service: Service,
) -> PlayerDto:
    return await service.create_player(ctx, authorized_club_id, request)
