"""Club creation, browsing and membership management.

Every operation that changes who belongs to a club invalidates the affected
user's membership snapshot before returning.
"""

from sqlalchemy import case, select

from clubhouse.cache.membership import MembershipCacheService
from clubhouse.db.accessors import DataAccessorFactory, TrustedDataAccessor
from clubhouse.db.context import RequestContext
from clubhouse.db.models import (
    Club,
    ClubJoinRequest,
    ClubMembership,
    ClubRole,
    JoinRequestStatus,
    User,
)
from clubhouse.errors import ConflictError, ForbiddenError, NotFoundError
from clubhouse.models.clubs import ClubDto, ClubMemberDto, CreateClubRequest
from clubhouse.models.membership import ClubSummary
from clubhouse.utils.logging import AccessAuditLogger


async def find_membership(
    db: TrustedDataAccessor, user_id: int, club_id: int | None = None
) -> ClubMembership | None:
    """Membership row for a user, optionally restricted to one club."""
    statement = select(ClubMembership).where(ClubMembership.user_id == user_id)
    if club_id is not None:
        statement = statement.where(ClubMembership.club_id == club_id)
    return await db.first(statement)


async def require_club_admin(db: TrustedDataAccessor, ctx: RequestContext, club_id: int) -> None:
    """Raise ForbiddenError unless the actor administers the club."""
    membership = await find_membership(db, ctx.require_user_id(), club_id)
    if membership is None or membership.role != ClubRole.club_admin:
        raise ForbiddenError("Only club admins can perform this action")


class MembershipService:
    """Operations on clubs and their member lists."""

    def __init__(
        self,
        accessors: DataAccessorFactory,
        cache: MembershipCacheService,
        access_logger: AccessAuditLogger | None = None,
    ) -> None:
        self._accessors = accessors
        self._cache = cache
        self._access_logger = access_logger or AccessAuditLogger()

    async def list_my_clubs(self, ctx: RequestContext) -> tuple[ClubSummary, ...]:
        """Clubs the caller belongs to, served from the membership cache."""
        return await self._cache.list_clubs(ctx.require_user_id())

    async def browse_clubs(self, ctx: RequestContext) -> list[ClubDto]:
        """All clubs, for users looking for one to join.

        Bypasses the row filter on purpose: only the public club fields are
        returned.
        """
        statement = select(Club).order_by(Club.state, Club.city, Club.name)
        async with self._accessors.trusted(ctx, read_only=True) as db:
            clubs = await db.scalars(statement, ignore_filter=True)
            return [ClubDto.model_validate(club) for club in clubs]

    async def get_club(self, ctx: RequestContext, club_id: int) -> ClubDto:
        """Raises NotFoundError when the club is missing or not visible."""
        async with self._accessors.enforcing(ctx, read_only=True) as db:
            club = await db.get(Club, club_id)
            if club is None:
                raise NotFoundError("Club not found")
            return ClubDto.model_validate(club)

    async def create_club(self, ctx: RequestContext, request: CreateClubRequest) -> ClubDto:
        """Create a club with the caller as its admin.

        Raises:
            ConflictError: If the caller already belongs to a club or has a
                pending join request.
        """
        user_id = ctx.require_user_id()

        async with self._accessors.trusted(ctx) as db:
            if await find_membership(db, user_id) is not None:
                raise ConflictError("You are already a member of a club")

            join_request = await db.first(
                select(ClubJoinRequest).where(ClubJoinRequest.requesting_user_id == user_id)
            )
            if join_request is not None:
                if join_request.status == JoinRequestStatus.pending:
                    raise ConflictError("You have a pending request to join a club")
                await db.delete(join_request)

            club = Club(
                name=request.name,
                city=request.city,
                state=request.state,
                created_by=user_id,
            )
            db.add(club)
            await db.flush()

            db.add(ClubMembership(club_id=club.club_id, user_id=user_id, role=ClubRole.club_admin))
            await db.save()
            result = ClubDto.model_validate(club)

        await self._cache.invalidate(user_id)
        self._access_logger.log_membership_change("created_club", result.club_id, user_id, user_id)
        return result

    async def leave_club(self, ctx: RequestContext, club_id: int) -> None:
        """Remove the caller from a club.

        Raises:
            NotFoundError: If the caller is not a member.
            ForbiddenError: If the caller is the club admin.
        """
        user_id = ctx.require_user_id()

        async with self._accessors.trusted(ctx) as db:
            membership = await find_membership(db, user_id, club_id)
            if membership is None:
                raise NotFoundError("You are not a member of this club")
            if membership.role == ClubRole.club_admin:
                raise ForbiddenError("Club admins cannot leave their club")

            await db.delete(membership)
            await db.save()

        await self._cache.invalidate(user_id)
        self._access_logger.log_membership_change("left", club_id, user_id, user_id)

    async def list_members(self, ctx: RequestContext, club_id: int) -> list[ClubMemberDto]:
        """Other members of the club, admins first, then by name."""
        actor_id = ctx.require_user_id()
        admins_first = case((ClubMembership.role == ClubRole.club_admin, 0), else_=1)

        # Joining Club brings the row filter into play for memberships too
        statement = (
            select(ClubMembership, User)
            .join(Club, Club.club_id == ClubMembership.club_id)
            .join(User, User.user_id == ClubMembership.user_id)
            .where(ClubMembership.club_id == club_id, ClubMembership.user_id != actor_id)
            .order_by(admins_first, User.last_name, User.first_name)
        )

        async with self._accessors.enforcing(ctx, read_only=True) as db:
            result = await db.execute(statement)
            return [
                ClubMemberDto(
                    user_id=user.user_id,
                    full_name=user.full_name,
                    email=user.email,
                    role=membership.role,
                )
                for membership, user in result.all()
            ]

    async def remove_member(self, ctx: RequestContext, club_id: int, user_id: int) -> None:
        """Remove another user from the club.

        Raises:
            ForbiddenError: If the caller targets themself or is not an admin.
            NotFoundError: If the user is not a member of the club.
        """
        actor_id = ctx.require_user_id()
        if user_id == actor_id:
            raise ForbiddenError("You cannot remove yourself from the club")

        async with self._accessors.trusted(ctx) as db:
            await require_club_admin(db, ctx, club_id)

            membership = await find_membership(db, user_id, club_id)
            if membership is None:
                raise NotFoundError("User is not a member of this club")

            await db.delete(membership)
            await db.save()

        await self._cache.invalidate(user_id)
        self._access_logger.log_membership_change("removed", club_id, user_id, actor_id)

