"""Membership snapshot models held by the membership cache."""

from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ClubSummary(BaseModel):
    """Lightweight club record kept in a membership snapshot."""

    model_config = ConfigDict(frozen=True)

    club_id: int
    name: str
    city: str
    state: str


class MembershipSnapshot(BaseModel):
    """Immutable view of one user's club memberships.

    `club_ids` is always exactly the id projection of `clubs`. Instances are
    built with `from_clubs` and replaced whole, never mutated.
    """

    model_config = ConfigDict(frozen=True)

    clubs: tuple[ClubSummary, ...] = ()
    club_ids: frozenset[int] = Field(default_factory=frozenset)

    @model_validator(mode="after")
    def _ids_match_clubs(self) -> "MembershipSnapshot":
        if self.club_ids != frozenset(club.club_id for club in self.clubs):
            raise ValueError("club_ids must be the id projection of clubs")
        return self

    @classmethod
    def from_clubs(cls, clubs: Iterable[ClubSummary]) -> "MembershipSnapshot":
        """Build a snapshot with ids derived from the club list."""
        club_list = tuple(clubs)
        return cls(clubs=club_list, club_ids=frozenset(c.club_id for c in club_list))

    @classmethod
    def empty(cls) -> "MembershipSnapshot":
        """Snapshot for a user who belongs to no club."""
        return cls()

    def contains(self, club_id: int) -> bool:
        """O(1) membership check."""
        return club_id in self.club_ids
