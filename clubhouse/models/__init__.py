"""Pydantic models shared across the cache and API layers."""

from clubhouse.models.clubs import (
    ClubDto,
    ClubMemberDto,
    CreateClubRequest,
    CreateJoinRequest,
    CreatePlayerRequest,
    CreateSeasonRequest,
    CreateTeamRequest,
    JoinRequestDecision,
    JoinRequestDto,
    JoinRequestWithUserDto,
    PlayerDto,
    SeasonDto,
    TeamDto,
    UpdateTeamRequest,
)
from clubhouse.models.membership import ClubSummary, MembershipSnapshot

__all__ = [
    "ClubDto",
    "ClubMemberDto",
    "ClubSummary",
    "CreateClubRequest",
    "CreateJoinRequest",
    "CreatePlayerRequest",
    "CreateSeasonRequest",
    "CreateTeamRequest",
    "JoinRequestDecision",
    "JoinRequestDto",
    "JoinRequestWithUserDto",
    "PlayerDto",
    "MembershipSnapshot",
    "SeasonDto",
    "TeamDto",
    "UpdateTeamRequest",
]
