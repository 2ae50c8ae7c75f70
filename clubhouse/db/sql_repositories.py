"""SQL implementations of repository interfaces."""

import logging

from sqlalchemy import select

from clubhouse.db.accessors import DataAccessorFactory
from clubhouse.db.context import RequestContext
from clubhouse.db.models import Club, ClubMembership
from clubhouse.models.membership import ClubSummary

logger = logging.getLogger(__name__)


class SqlMembershipLoader:
    """SQL implementation of MembershipLoader.

    Establishes tenant scope, so it cannot depend on the tenant filter: it
    reads through a trusted accessor with the filter bypassed and restricts
    rows by the membership join itself.
    """

    def __init__(self, accessors: DataAccessorFactory) -> None:
        self._accessors = accessors

    async def load_clubs(self, user_id: int) -> list[ClubSummary]:
        """Load clubs for a user straight from the membership table."""
        statement = (
            select(Club)
            .join(ClubMembership, ClubMembership.club_id == Club.club_id)
            .where(ClubMembership.user_id == user_id)
            .order_by(Club.name)
        )

        async with self._accessors.trusted(RequestContext(user_id=user_id), read_only=True) as db:
            clubs = await db.scalars(statement, ignore_filter=True)

        logger.debug(f"[membership_loader] loaded {len(clubs)} clubs for user_id={user_id}")

        return [
            ClubSummary(club_id=c.club_id, name=c.name, city=c.city, state=c.state)
            for c in clubs
        ]
