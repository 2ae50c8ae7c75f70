"""Seasons, teams and players of a club.

Everything here goes through the enforcing accessor: callers have already
passed the club membership gate, and the row filter checks again.
"""

import logging

from sqlalchemy import select

from clubhouse.db.accessors import DataAccessorFactory
from clubhouse.db.context import RequestContext
from clubhouse.db.models import Player, Season, Team
from clubhouse.errors import BadRequestError, NotFoundError
from clubhouse.models.clubs import (
    CreatePlayerRequest,
    CreateSeasonRequest,
    CreateTeamRequest,
    PlayerDto,
    SeasonDto,
    TeamDto,
    UpdateTeamRequest,
)

logger = logging.getLogger(__name__)


class ClubDataService:
    """Reads and writes of club-scoped seasons, teams and players."""

    def __init__(self, accessors: DataAccessorFactory) -> None:
        self._accessors = accessors

    async def list_seasons(self, ctx: RequestContext, club_id: int) -> list[SeasonDto]:
        """Seasons of the club, most recent first."""
        statement = (
            select(Season)
            .where(Season.club_id == club_id)
            .order_by(Season.start_date.desc(), Season.season_id.desc())
        )
        async with self._accessors.enforcing(ctx, read_only=True) as db:
            seasons = await db.scalars(statement)
            logger.debug(
                f"[club_data] {len(seasons)} seasons for club_id={club_id} user_id={ctx.user_id}"
            )
            return [SeasonDto.model_validate(season) for season in seasons]

    async def get_season(self, ctx: RequestContext, club_id: int, season_id: int) -> SeasonDto:
        statement = select(Season).where(
            Season.season_id == season_id, Season.club_id == club_id
        )
        async with self._accessors.enforcing(ctx, read_only=True) as db:
            season = await db.first(statement)
            if season is None:
                raise NotFoundError("Season not found")
            return SeasonDto.model_validate(season)

    async def create_season(
        self, ctx: RequestContext, club_id: int, request: CreateSeasonRequest
    ) -> SeasonDto:
        """Create a season; audit fields are stamped on save."""
        season = Season(
            club_id=club_id,
            name=request.name,
            start_date=request.start_date,
            end_date=request.end_date,
            created_by=ctx.require_user_id(),
        )
        async with self._accessors.enforcing(ctx) as db:
            db.add(season)
            await db.save()
            logger.info(
                f"[club_data] created season {season.season_id} for club_id={club_id} "
                f"by user_id={ctx.user_id}"
            )
            return SeasonDto.model_validate(season)

    async def list_teams(self, ctx: RequestContext, club_id: int) -> list[TeamDto]:
        """Teams of the club ordered by graduation year, then name."""
        statement = (
            select(Team)
            .where(Team.club_id == club_id)
            .order_by(Team.graduation_year, Team.name)
        )
        async with self._accessors.enforcing(ctx, read_only=True) as db:
            teams = await db.scalars(statement)
            return [TeamDto.model_validate(team) for team in teams]

    async def create_team(
        self, ctx: RequestContext, club_id: int, request: CreateTeamRequest
    ) -> TeamDto:
        team = Team(
            club_id=club_id,
            name=request.name,
            graduation_year=request.graduation_year,
            created_by=ctx.require_user_id(),
        )
        async with self._accessors.enforcing(ctx) as db:
            db.add(team)
            await db.save()
            logger.info(
                f"[club_data] created team {team.team_id} for club_id={club_id} "
                f"by user_id={ctx.user_id}"
            )
            return TeamDto.model_validate(team)

    async def update_team(
        self, ctx: RequestContext, club_id: int, team_id: int, request: UpdateTeamRequest
    ) -> TeamDto:
        """Apply a partial update to a team.

        Raises:
            BadRequestError: If the request changes nothing.
            NotFoundError: If the team is not in the club.
        """
        if request.name is None and request.graduation_year is None:
            raise BadRequestError("Nothing to update")

        statement = select(Team).where(Team.team_id == team_id, Team.club_id == club_id)

        async with self._accessors.enforcing(ctx) as db:
            team = await db.first(statement)
            if team is None:
                raise NotFoundError("Team not found")

            if request.name is not None:
                team.name = request.name
            if request.graduation_year is not None:
                team.graduation_year = request.graduation_year

            await db.save()
            return TeamDto.model_validate(team)

    async def list_players(self, ctx: RequestContext, club_id: int) -> list[PlayerDto]:
        """Players of the club ordered by last name, then first name."""
        statement = (
            select(Player)
            .where(Player.club_id == club_id)
            .order_by(Player.last_name, Player.first_name, Player.player_id)
        )
        async with self._accessors.enforcing(ctx, read_only=True) as db:
            players = await db.scalars(statement)
            return [PlayerDto.model_validate(player) for player in players]

    async def create_player(
        self, ctx: RequestContext, club_id: int, request: CreatePlayerRequest
    ) -> PlayerDto:
        player = Player(
            club_id=club_id,
            first_name=request.first_name,
            last_name=request.last_name,
            graduation_year=request.graduation_year,
            jersey_number=request.jersey_number,
            created_by=ctx.require_user_id(),
        )
        async with self._accessors.enforcing(ctx) as db:
            db.add(player)
            await db.save()
            logger.info(
                f"[club_data] created player {player.player_id} for club_id={club_id} "
                f"by user_id={ctx.user_id}"
            )
            return PlayerDto.model_validate(player)
