"""Request and response models for clubs, members and club-scoped data."""

from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, model_validator

from clubhouse.db.models import ClubRole, JoinRequestStatus


class ClubDto(BaseModel):
    """Club as returned by the API."""

    model_config = ConfigDict(from_attributes=True)

    club_id: int
    name: str
    city: str
    state: str


class CreateClubRequest(BaseModel):
    """Request body for POST /clubs."""

    name: str = Field(..., min_length=1, max_length=200)
    city: str = Field(..., min_length=1, max_length=100)
    state: str = Field(..., min_length=1, max_length=100)


class ClubMemberDto(BaseModel):
    """Member of a club, as seen by another member."""

    user_id: int
    full_name: str
    email: str
    role: ClubRole


class JoinRequestDto(BaseModel):
    """Join request as returned by the API."""

    model_config = ConfigDict(from_attributes=True)

    join_request_id: int
    club_id: int
    requesting_user_id: int
    status: JoinRequestStatus
    created_at: datetime


class JoinRequestWithUserDto(JoinRequestDto):
    """Join request listed for club admins, with the requester's details."""

    requesting_user_name: str
    requesting_user_email: str


class CreateJoinRequest(BaseModel):
    """Request body for POST /join-requests."""

    club_id: int = Field(..., gt=0)


class JoinRequestDecision(BaseModel):
    """Request body for PATCH /clubs/{club_id}/join-requests/{request_id}."""

    status: JoinRequestStatus


class SeasonDto(BaseModel):
    """Season as returned by the API."""

    model_config = ConfigDict(from_attributes=True)

    season_id: int
    club_id: int
    name: str
    start_date: datetime
    end_date: datetime | None


class CreateSeasonRequest(BaseModel):
    """Request body for POST /clubs/{club_id}/seasons."""

    name: str = Field(..., min_length=1, max_length=100)
    start_date: datetime
    end_date: datetime | None = None

    @model_validator(mode="after")
    def _end_after_start(self) -> "CreateSeasonRequest":
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class TeamDto(BaseModel):
    """Team as returned by the API."""

    model_config = ConfigDict(from_attributes=True)

    team_id: int
    club_id: int
    name: str
    graduation_year: int


class CreateTeamRequest(BaseModel):
    """Request body for POST /clubs/{club_id}/teams."""

    name: str = Field(..., min_length=1, max_length=100)
    graduation_year: int = Field(..., ge=1900, le=2200)


class UpdateTeamRequest(BaseModel):
    """Request body for PATCH /clubs/{club_id}/teams/{team_id}."""

    name: str | None = Field(None, min_length=1, max_length=100)
    graduation_year: int | None = Field(None, ge=1900, le=2200)


class PlayerDto(BaseModel):
    """Player as returned by the API."""

    model_config = ConfigDict(from_attributes=True)

    player_id: int
    club_id: int
    first_name: str
    last_name: str
    full_name: str
    graduation_year: int
    jersey_number: int | None


class CreatePlayerRequest(BaseModel):
    """Request body for POST /clubs/{club_id}/players."""

    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    graduation_year: int = Field(..., ge=1900, le=2200)
    jersey_number: int | None = Field(None, ge=0, le=999)
