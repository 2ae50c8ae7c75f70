"""Initial schema

Revision ID: 001
Revises:
Create Date: 2026-10-19

Creates:
- app_user
- club, club_membership, club_join_request
- season, team, player
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _audit_columns() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("created_by", sa.Integer(), nullable=False),
        sa.Column("modified_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("modified_by", sa.Integer(), nullable=True),
    ]


def upgrade() -> None:
    """Create all tables."""
    op.create_table(
        "app_user",
        sa.Column("user_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("email", sa.Text(), nullable=False, unique=True),
        sa.Column("first_name", sa.Text(), nullable=False),
        sa.Column("last_name", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    op.create_table(
        "club",
        sa.Column("club_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("city", sa.Text(), nullable=False),
        sa.Column("state", sa.Text(), nullable=False),
        *_audit_columns(),
    )

    op.create_table(
        "club_membership",
        sa.Column("membership_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("club_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("role", sa.String(13), nullable=False),
        sa.Column("joined_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(["club_id"], ["club.club_id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["app_user.user_id"], ondelete="CASCADE"),
        sa.UniqueConstraint("club_id", "user_id", name="uq_membership_club_user"),
    )
    op.create_index("idx_membership_user", "club_membership", ["user_id"])

    op.create_table(
        "club_join_request",
        sa.Column("join_request_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("club_id", sa.Integer(), nullable=False),
        sa.Column("requesting_user_id", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(8), nullable=False),
        *_audit_columns(),
        sa.ForeignKeyConstraint(["club_id"], ["club.club_id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["requesting_user_id"], ["app_user.user_id"], ondelete="CASCADE"),
    )
    op.create_index("idx_join_request_user", "club_join_request", ["requesting_user_id"])

    op.create_table(
        "season",
        sa.Column("season_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("club_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_date", sa.DateTime(timezone=True), nullable=True),
        *_audit_columns(),
        sa.ForeignKeyConstraint(["club_id"], ["club.club_id"], ondelete="CASCADE"),
    )
    op.create_index("idx_season_club", "season", ["club_id"])

    op.create_table(
        "team",
        sa.Column("team_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("club_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("graduation_year", sa.Integer(), nullable=False),
        *_audit_columns(),
        sa.ForeignKeyConstraint(["club_id"], ["club.club_id"], ondelete="CASCADE"),
    )
    op.create_index("idx_team_club", "team", ["club_id"])

    op.create_table(
        "player",
        sa.Column("player_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("club_id", sa.Integer(), nullable=False),
        sa.Column("first_name", sa.Text(), nullable=False),
        sa.Column("last_name", sa.Text(), nullable=False),
        sa.Column("graduation_year", sa.Integer(), nullable=False),
        sa.Column("jersey_number", sa.Integer(), nullable=True),
        *_audit_columns(),
        sa.ForeignKeyConstraint(["club_id"], ["club.club_id"], ondelete="CASCADE"),
    )
    op.create_index("idx_player_club", "player", ["club_id"])


def downgrade() -> None:
    """Drop all tables."""
    op.drop_index("idx_player_club", table_name="player")
    op.drop_table("player")
    op.drop_index("idx_team_club", table_name="team")
    op.drop_table("team")
    op.drop_index("idx_season_club", table_name="season")
    op.drop_table("season")
    op.drop_index("idx_join_request_user", table_name="club_join_request")
    op.drop_table("club_join_request")
    op.drop_index("idx_membership_user", table_name="club_membership")
    op.drop_table("club_membership")
    op.drop_table("club")
    op.drop_table("app_user")
