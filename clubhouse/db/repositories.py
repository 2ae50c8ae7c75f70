"""Repository protocol interfaces for data access."""

from typing import Protocol

from clubhouse.models.membership import ClubSummary


class MembershipLoader(Protocol):
    """Source of truth for a user's club memberships."""

    async def load_clubs(self, user_id: int) -> list[ClubSummary]:
        """Load the clubs a user belongs to, ordered by club name.

        Args:
            user_id: User ID

        Returns:
            Clubs the user is a member of (empty if none)
        """
        ...
