"""In-memory implementations of repository interfaces."""

import asyncio

from clubhouse.models.membership import ClubSummary


class InMemoryMembershipLoader:
    """In-memory implementation of MembershipLoader.

    Counts loads and can be slowed down or made to fail, which makes it the
    stand-in system of record for cache tests.
    """

    def __init__(self, delay_seconds: float = 0.0) -> None:
        """Initialize loader.

        Args:
            delay_seconds: Artificial latency added to every load
        """
        self._clubs: dict[int, ClubSummary] = {}
        self._members: dict[int, set[int]] = {}
        self._delay_seconds = delay_seconds
        self._failure: Exception | None = None
        self.load_count = 0
        self.loads_by_user: dict[int, int] = {}

    def add_club(self, club_id: int, name: str, city: str = "", state: str = "") -> ClubSummary:
        club = ClubSummary(club_id=club_id, name=name, city=city, state=state)
        self._clubs[club_id] = club
        return club

    def add_member(self, user_id: int, club_id: int) -> None:
        self._members.setdefault(user_id, set()).add(club_id)

    def remove_member(self, user_id: int, club_id: int) -> None:
        self._members.get(user_id, set()).discard(club_id)

    def is_member(self, user_id: int, club_id: int) -> bool:
        return club_id in self._members.get(user_id, set())

    def fail_with(self, error: Exception | None) -> None:
        """Make subsequent loads raise `error` (None restores normal loads)."""
        self._failure = error

    async def load_clubs(self, user_id: int) -> list[ClubSummary]:
        """Load clubs for a user."""
        self.load_count += 1
        self.loads_by_user[user_id] = self.loads_by_user.get(user_id, 0) + 1

        if self._delay_seconds:
            await asyncio.sleep(self._delay_seconds)

        if self._failure is not None:
            raise self._failure

        clubs = [self._clubs[club_id] for club_id in self._members.get(user_id, set())]
        return sorted(clubs, key=lambda c: c.name)
