"""Club join requests.

A user holds at most one join request. Creating, viewing and cancelling it
happen outside any club scope; listing and deciding requests are club admin
operations under `/clubs/{club_id}`.
"""

import logging

from sqlalchemy import select

from clubhouse.cache.membership import MembershipCacheService
from clubhouse.db.accessors import DataAccessorFactory
from clubhouse.db.context import RequestContext
from clubhouse.db.models import (
    Club,
    ClubJoinRequest,
    ClubMembership,
    ClubRole,
    JoinRequestStatus,
    User,
)
from clubhouse.errors import BadRequestError, ConflictError, NotFoundError
from clubhouse.models.clubs import JoinRequestDto, JoinRequestWithUserDto
from clubhouse.services.memberships import find_membership, require_club_admin
from clubhouse.utils.logging import AccessAuditLogger

logger = logging.getLogger(__name__)


class JoinRequestService:
    """Lifecycle of join requests: create, cancel, approve, reject."""

    def __init__(
        self,
        accessors: DataAccessorFactory,
        cache: MembershipCacheService,
        access_logger: AccessAuditLogger | None = None,
    ) -> None:
        self._accessors = accessors
        self._cache = cache
        self._access_logger = access_logger or AccessAuditLogger()

    async def create(self, ctx: RequestContext, club_id: int) -> JoinRequestDto:
        """Ask to join a club.

        The caller is not a member yet, so the club lookup bypasses the row
        filter.

        Raises:
            NotFoundError: If the club does not exist.
            ConflictError: If the caller already belongs to a club or has a
                pending request.
        """
        user_id = ctx.require_user_id()

        async with self._accessors.trusted(ctx) as db:
            if await db.get(Club, club_id, ignore_filter=True) is None:
                raise NotFoundError("Club not found")

            if await find_membership(db, user_id) is not None:
                raise ConflictError("You are already a member of a club")

            existing = await db.first(
                select(ClubJoinRequest).where(ClubJoinRequest.requesting_user_id == user_id)
            )
            if existing is not None:
                if existing.status == JoinRequestStatus.pending:
                    raise ConflictError("You already have a pending join request")
                await db.delete(existing)
                await db.flush()

            join_request = ClubJoinRequest(
                club_id=club_id,
                requesting_user_id=user_id,
                status=JoinRequestStatus.pending,
                created_by=user_id,
            )
            db.add(join_request)
            await db.save()

            logger.info(
                f"[join_requests] user_id={user_id} requested to join club_id={club_id}"
            )
            return JoinRequestDto.model_validate(join_request)

    async def get_mine(self, ctx: RequestContext) -> JoinRequestDto:
        """The caller's join request.

        Raises:
            NotFoundError: If the caller has none.
        """
        user_id = ctx.require_user_id()
        statement = select(ClubJoinRequest).where(ClubJoinRequest.requesting_user_id == user_id)

        async with self._accessors.trusted(ctx, read_only=True) as db:
            join_request = await db.first(statement)
            if join_request is None:
                raise NotFoundError("No join request found")
            return JoinRequestDto.model_validate(join_request)

    async def cancel_mine(self, ctx: RequestContext) -> None:
        """Withdraw the caller's pending join request.

        Raises:
            NotFoundError: If the caller has no pending request.
        """
        user_id = ctx.require_user_id()
        statement = select(ClubJoinRequest).where(
            ClubJoinRequest.requesting_user_id == user_id,
            ClubJoinRequest.status == JoinRequestStatus.pending,
        )

        async with self._accessors.trusted(ctx) as db:
            join_request = await db.first(statement)
            if join_request is None:
                raise NotFoundError("No pending join request found")
            await db.delete(join_request)
            await db.save()

        logger.info(f"[join_requests] user_id={user_id} cancelled join request")

    async def list_pending(self, ctx: RequestContext, club_id: int) -> list[JoinRequestWithUserDto]:
        """Pending requests for a club, oldest first. Club admins only."""
        # Joining Club applies the row filter to the listing
        statement = (
            select(ClubJoinRequest, User)
            .join(Club, Club.club_id == ClubJoinRequest.club_id)
            .join(User, User.user_id == ClubJoinRequest.requesting_user_id)
            .where(
                ClubJoinRequest.club_id == club_id,
                ClubJoinRequest.status == JoinRequestStatus.pending,
            )
            .order_by(ClubJoinRequest.created_at, ClubJoinRequest.join_request_id)
        )

        async with self._accessors.trusted(ctx, read_only=True) as db:
            await require_club_admin(db, ctx, club_id)
            result = await db.execute(statement)
            return [
                JoinRequestWithUserDto(
                    join_request_id=join_request.join_request_id,
                    club_id=join_request.club_id,
                    requesting_user_id=join_request.requesting_user_id,
                    status=join_request.status,
                    created_at=join_request.created_at,
                    requesting_user_name=user.full_name,
                    requesting_user_email=user.email,
                )
                for join_request, user in result.all()
            ]

    async def decide(
        self,
        ctx: RequestContext,
        club_id: int,
        request_id: int,
        status: JoinRequestStatus,
    ) -> None:
        """Approve or reject a pending request.

        Approval adds the requester as a standard member, deletes the request
        and invalidates the requester's membership snapshot. Rejection keeps
        the request with status `rejected`.

        Raises:
            BadRequestError: If `status` is neither approved nor rejected.
            NotFoundError: If the request does not exist for this club.
            ConflictError: If the request is no longer pending.
        """
        if status not in (JoinRequestStatus.approved, JoinRequestStatus.rejected):
            raise BadRequestError("Status must be approved or rejected")

        actor_id = ctx.require_user_id()
        statement = select(ClubJoinRequest).where(
            ClubJoinRequest.join_request_id == request_id,
            ClubJoinRequest.club_id == club_id,
        )

        async with self._accessors.trusted(ctx) as db:
            await require_club_admin(db, ctx, club_id)

            join_request = await db.first(statement)
            if join_request is None:
                raise NotFoundError("Join request not found")
            if join_request.status != JoinRequestStatus.pending:
                raise ConflictError("Only pending join requests can be changed")

            requester_id = join_request.requesting_user_id

            if status == JoinRequestStatus.approved:
                db.add(
                    ClubMembership(
                        club_id=club_id, user_id=requester_id, role=ClubRole.standard_user
                    )
                )
                await db.delete(join_request)
            else:
                join_request.status = JoinRequestStatus.rejected

            await db.save()

        if status == JoinRequestStatus.approved:
            await self._cache.invalidate(requester_id)
            self._access_logger.log_membership_change("approved", club_id, requester_id, actor_id)
        else:
            logger.info(
                f"[join_requests] request {request_id} for club_id={club_id} rejected "
                f"by user_id={actor_id}"
            )
