"""Club endpoints.

`/clubs` lists, browses and creates clubs for the caller. Everything under
`/clubs/{club_id}` requires membership of that club.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status

from clubhouse.api.auth import get_current_context
from clubhouse.api.dependencies import AuthorizedClubId, get_membership_service
from clubhouse.db.context import RequestContext
from clubhouse.middleware.club_membership import require_club_membership
from clubhouse.models.clubs import ClubDto, ClubMemberDto, CreateClubRequest
from clubhouse.models.membership import ClubSummary
from clubhouse.services.memberships import MembershipService

router = APIRouter(prefix="/clubs", tags=["clubs"])

club_router = APIRouter(
    prefix="/clubs/{club_id}",
    tags=["clubs"],
    dependencies=[Depends(require_club_membership)],
)


@router.get("", response_model=list[ClubSummary])
async def list_my_clubs(
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    service: Annotated[MembershipService, Depends(get_membership_service)],
) -> list[ClubSummary]:
    """Clubs the caller belongs to."""
    return list(await service.list_my_clubs(ctx))


@router.get("/browse", response_model=list[ClubDto])
async def browse_clubs(
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    service: Annotated[MembershipService, Depends(get_membership_service)],
) -> list[ClubDto]:
    """All clubs, for choosing one to join."""
    return await service.browse_clubs(ctx)


@router.post("", response_model=ClubDto, status_code=status.HTTP_201_CREATED)
async def create_club(
    request: CreateClubRequest,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    service: Annotated[MembershipService, Depends(get_membership_service)],
) -> ClubDto:
    """Create a club; the caller becomes its admin.

    Args:
        request: Club details
        ctx: Request context
        service: Membership service

    Returns:
        The created club
    """
    return await service.create_club(ctx, request)


@club_router.get("", response_model=ClubDto)
async def get_club(
    authorized_club_id: AuthorizedClubId,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    service: Annotated[MembershipService, Depends(get_membership_service)],
) -> ClubDto:
    return await service.get_club(ctx, authorized_club_id)


@club_router.post("/leave", status_code=status.HTTP_204_NO_CONTENT)
async def leave_club(
    authorized_club_id: AuthorizedClubId,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    service: Annotated[MembershipService, Depends(get_membership_service)],
) -> Response:
    """Leave the club. Club admins cannot leave."""
    await service.leave_club(ctx, authorized_club_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@club_router.get("/members", response_model=list[ClubMemberDto])
async def list_members(
    authorized_club_id: AuthorizedClubId,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    service: Annotated[MembershipService, Depends(get_membership_service)],
) -> list[ClubMemberDto]:
    """Other members of the club."""
    return await service.list_members(ctx, authorized_club_id)


@club_router.delete("/members/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_member(
    user_id: int,
    authorized_club_id: AuthorizedClubId,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    service: Annotated[MembershipService, Depends(get_membership_service)],
) -> Response:
    """Remove a member from the club (club admins only)."""
    await service.remove_member(ctx, authorized_club_id, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
