"""SQLAlchemy ORM models for clubs, memberships and club-scoped data."""

import enum
from datetime import datetime

from sqlalchemy import (
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy.sql import func


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class AuditMixin:
    """Audit envelope carried by every club-scoped entity.

    Values are stamped by `clubhouse.db.audit.AuditInterceptor`; `created_by`
    is the only field the business layer sets itself.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    created_by: Mapped[int] = mapped_column(Integer, nullable=False)
    modified_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    modified_by: Mapped[int | None] = mapped_column(Integer, nullable=True)


class ClubRole(str, enum.Enum):
    """Role of a member within their club."""

    club_admin = "club_admin"
    standard_user = "standard_user"


class JoinRequestStatus(str, enum.Enum):
    """Lifecycle of a club join request."""

    pending = "pending"
    approved = "approved"
    rejected = "rejected"


class User(Base):
    """User account. Identity plumbing lives elsewhere; this is the FK target."""

    __tablename__ = "app_user"

    user_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    first_name: Mapped[str] = mapped_column(Text, nullable=False, default="")
    last_name: Mapped[str] = mapped_column(Text, nullable=False, default="")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    memberships: Mapped[list["ClubMembership"]] = relationship(
        "ClubMembership", back_populates="user", cascade="all, delete-orphan"
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class Club(AuditMixin, Base):
    """Club table - the tenancy boundary."""

    __tablename__ = "club"

    club_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    city: Mapped[str] = mapped_column(Text, nullable=False)
    state: Mapped[str] = mapped_column(Text, nullable=False)

    memberships: Mapped[list["ClubMembership"]] = relationship(
        "ClubMembership", back_populates="club", cascade="all, delete-orphan"
    )
    seasons: Mapped[list["Season"]] = relationship("Season", back_populates="club")
    teams: Mapped[list["Team"]] = relationship("Team", back_populates="club")
    players: Mapped[list["Player"]] = relationship("Player", back_populates="club")


class ClubMembership(Base):
    """Membership table - system of record for who belongs to which club."""

    __tablename__ = "club_membership"
    __table_args__ = (
        UniqueConstraint("club_id", "user_id", name="uq_membership_club_user"),
        Index("idx_membership_user", "user_id"),
    )

    membership_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    club_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("club.club_id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("app_user.user_id", ondelete="CASCADE"), nullable=False
    )
    role: Mapped[ClubRole] = mapped_column(
        Enum(ClubRole, native_enum=False), nullable=False, default=ClubRole.standard_user
    )
    joined_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    club: Mapped["Club"] = relationship("Club", back_populates="memberships")
    user: Mapped["User"] = relationship("User", back_populates="memberships")


class ClubJoinRequest(AuditMixin, Base):
    """Pending or rejected request from a user to join a club.

    Not tenant-filtered: the requesting user is not a member of the club yet.
    """

    __tablename__ = "club_join_request"
    __table_args__ = (Index("idx_join_request_user", "requesting_user_id"),)

    join_request_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    club_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("club.club_id", ondelete="CASCADE"), nullable=False
    )
    requesting_user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("app_user.user_id", ondelete="CASCADE"), nullable=False
    )
    status: Mapped[JoinRequestStatus] = mapped_column(
        Enum(JoinRequestStatus, native_enum=False),
        nullable=False,
        default=JoinRequestStatus.pending,
    )

    club: Mapped["Club"] = relationship("Club")
    requesting_user: Mapped["User"] = relationship("User")


class Season(AuditMixin, Base):
    """Season table - club-scoped."""

    __tablename__ = "season"
    __table_args__ = (Index("idx_season_club", "club_id"),)

    season_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    club_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("club.club_id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    start_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    club: Mapped["Club"] = relationship("Club", back_populates="seasons")


class Team(AuditMixin, Base):
    """Team table - club-scoped."""

    __tablename__ = "team"
    __table_args__ = (Index("idx_team_club", "club_id"),)

    team_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    club_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("club.club_id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    graduation_year: Mapped[int] = mapped_column(Integer, nullable=False)

    club: Mapped["Club"] = relationship("Club", back_populates="teams")


class Player(AuditMixin, Base):
    """Player table - club-scoped."""

    __tablename__ = "player"
    __table_args__ = (Index("idx_player_club", "club_id"),)

    player_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    club_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("club.club_id", ondelete="CASCADE"), nullable=False
    )
    first_name: Mapped[str] = mapped_column(Text, nullable=False)
    last_name: Mapped[str] = mapped_column(Text, nullable=False)
    graduation_year: Mapped[int] = mapped_column(Integer, nullable=False)
    jersey_number: Mapped[int | None] = mapped_column(Integer, nullable=True)

    club: Mapped["Club"] = relationship("Club", back_populates="players")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
