"""Unit tests for membership snapshot models."""

import pytest
from pydantic import ValidationError

from clubhouse.models.membership import ClubSummary, MembershipSnapshot


def _club(club_id: int, name: str) -> ClubSummary:
    return ClubSummary(club_id=club_id, name=name, city="Austin", state="TX")


def test_from_clubs_derives_ids() -> None:
    """Test ids are the projection of the club list."""
    snapshot = MembershipSnapshot.from_clubs([_club(1, "Arsenal Youth"), _club(2, "Boca Juniors")])

    assert snapshot.club_ids == frozenset({1, 2})
    assert [c.name for c in snapshot.clubs] == ["Arsenal Youth", "Boca Juniors"]
    assert snapshot.contains(1)
    assert not snapshot.contains(3)


def test_empty_snapshot() -> None:
    snapshot = MembershipSnapshot.empty()

    assert snapshot.clubs == ()
    assert snapshot.club_ids == frozenset()
    assert not snapshot.contains(1)


def test_mismatched_ids_rejected() -> None:
    """Test a snapshot whose ids disagree with its clubs cannot be built."""
    with pytest.raises(ValidationError):
        MembershipSnapshot(clubs=(_club(1, "Arsenal Youth"),), club_ids=frozenset({1, 2}))


def test_snapshot_is_frozen() -> None:
    snapshot = MembershipSnapshot.from_clubs([_club(1, "Arsenal Youth")])

    with pytest.raises(ValidationError):
        snapshot.clubs = ()  # type: ignore[misc]


def test_decoded_snapshot_revalidated() -> None:
    """Test JSON from the shared tier goes through the same validation."""
    snapshot = MembershipSnapshot.from_clubs([_club(1, "Arsenal Youth")])
    assert MembershipSnapshot.model_validate_json(snapshot.model_dump_json()) == snapshot

    tampered = '{"clubs": [{"club_id": 1, "name": "A", "city": "", "state": ""}], "club_ids": [9]}'
    with pytest.raises(ValidationError):
        MembershipSnapshot.model_validate_json(tampered)
