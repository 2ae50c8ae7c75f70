"""Join request endpoints.

`/join-requests` acts on the caller's own request and is not club-gated: the
caller is not a member yet. Club admins review requests under
`/clubs/{club_id}/join-requests`.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status

from clubhouse.api.auth import get_current_context
from clubhouse.api.dependencies import AuthorizedClubId, get_join_request_service
from clubhouse.db.context import RequestContext
from clubhouse.middleware.club_membership import require_club_membership
from clubhouse.models.clubs import (
    CreateJoinRequest,
    JoinRequestDecision,
    JoinRequestDto,
    JoinRequestWithUserDto,
)
from clubhouse.services.join_requests import JoinRequestService

router = APIRouter(prefix="/join-requests", tags=["join-requests"])

club_router = APIRouter(
    prefix="/clubs/{club_id}/join-requests",
    tags=["join-requests"],
    dependencies=[Depends(require_club_membership)],
)


@router.post("", response_model=JoinRequestDto, status_code=status.HTTP_201_CREATED)
async def create_join_request(
    request: CreateJoinRequest,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    service: Annotated[JoinRequestService, Depends(get_join_request_service)],
) -> JoinRequestDto:
    """Ask to join a club."""
    return await service.create(ctx, request.club_id)


@router.get("/me", response_model=JoinRequestDto)
async def get_my_join_request(
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    service: Annotated[JoinRequestService, Depends(get_join_request_service)],
) -> JoinRequestDto:
    return await service.get_mine(ctx)


@router.delete("/me", status_code=status.HTTP_204_NO_CONTENT)
async def cancel_my_join_request(
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    service: Annotated[JoinRequestService, Depends(get_join_request_service)],
) -> Response:
    """Withdraw the caller's pending request."""
    await service.cancel_mine(ctx)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@club_router.get("", response_model=list[JoinRequestWithUserDto])
async def list_pending_join_requests(
    authorized_club_id: AuthorizedClubId,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    service: Annotated[JoinRequestService, Depends(get_join_request_service)],
) -> list[JoinRequestWithUserDto]:
    """Pending requests for the club (club admins only)."""
    return await service.list_pending(ctx, authorized_club_id)


@club_router.patch("/{request_id}", status_code=status.HTTP_204_NO_CONTENT)
async def decide_join_request(
    request_id: int,
    decision: JoinRequestDecision,
    authorized_club_id: AuthorizedClubId,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    service: Annotated[JoinRequestService, Depends(get_join_request_service)],
) -> Response:
    """Approve or reject a pending request (club admins only).

    Args:
        request_id: Join request to decide
        decision: Target status, approved or rejected
        authorized_club_id: Club id validated by the membership gate
        ctx: Request context
        service: Join request service
    """
    await service.decide(ctx, authorized_club_id, request_id, decision.status)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
