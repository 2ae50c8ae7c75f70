"""Shared pytest fixtures for all test suites."""

from collections.abc import AsyncGenerator
from dataclasses import dataclass
from datetime import UTC, datetime
from unittest.mock import MagicMock

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from clubhouse.cache.defaults import CacheEntryOptions
from clubhouse.cache.membership import MembershipCacheService
from clubhouse.cache.store import MembershipCacheStore
from clubhouse.config import Settings
from clubhouse.db.accessors import DataAccessorFactory
from clubhouse.db.engine import create_session_factory
from clubhouse.db.models import (
    Base,
    Club,
    ClubMembership,
    ClubRole,
    Player,
    Season,
    Team,
    User,
)
from clubhouse.db.sql_repositories import SqlMembershipLoader
from clubhouse.main import create_app, init_app_state


@dataclass(frozen=True)
class SeededData:
    """Ids of the rows created by the `seeded` fixture.

    Club A: alice (admin) and bob. Club B: carol (admin). Dave has no club.
    """

    alice: int = 1
    bob: int = 2
    carol: int = 3
    dave: int = 4
    club_a: int = 1
    club_b: int = 2
    season_a: int = 1
    season_b: int = 2
    team_a: int = 1
    team_b: int = 2


@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """In-memory SQLite engine; StaticPool keeps one shared connection."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return create_session_factory(engine)


@pytest.fixture
def accessors(session_factory: async_sessionmaker[AsyncSession]) -> DataAccessorFactory:
    return DataAccessorFactory(session_factory)


@pytest_asyncio.fixture
async def seeded(session_factory: async_sessionmaker[AsyncSession]) -> SeededData:
    """Two clubs with members, seasons, teams and players."""
    ids = SeededData()
    start = datetime(2026, 3, 1, tzinfo=UTC)

    async with session_factory() as session:
        session.add_all(
            [
                User(user_id=ids.alice, email="alice@example.com", first_name="Alice", last_name="Adams"),
                User(user_id=ids.bob, email="bob@example.com", first_name="Bob", last_name="Brown"),
                User(user_id=ids.carol, email="carol@example.com", first_name="Carol", last_name="Clark"),
                User(user_id=ids.dave, email="dave@example.com", first_name="Dave", last_name="Davis"),
            ]
        )
        session.add_all(
            [
                Club(club_id=ids.club_a, name="Arsenal Youth", city="Austin", state="TX", created_by=ids.alice),
                Club(club_id=ids.club_b, name="Boca Juniors", city="Boston", state="MA", created_by=ids.carol),
            ]
        )
        await session.flush()

        session.add_all(
            [
                ClubMembership(club_id=ids.club_a, user_id=ids.alice, role=ClubRole.club_admin),
                ClubMembership(club_id=ids.club_a, user_id=ids.bob, role=ClubRole.standard_user),
                ClubMembership(club_id=ids.club_b, user_id=ids.carol, role=ClubRole.club_admin),
                Season(season_id=ids.season_a, club_id=ids.club_a, name="Spring 2026", start_date=start, created_by=ids.alice),
                Season(season_id=ids.season_b, club_id=ids.club_b, name="Fall 2026", start_date=start, created_by=ids.carol),
                Team(team_id=ids.team_a, club_id=ids.club_a, name="U12 Red", graduation_year=2032, created_by=ids.alice),
                Team(team_id=ids.team_b, club_id=ids.club_b, name="U14 Blue", graduation_year=2030, created_by=ids.carol),
                Player(club_id=ids.club_a, first_name="Sam", last_name="Reyes", graduation_year=2032, created_by=ids.alice),
                Player(club_id=ids.club_b, first_name="Lia", last_name="Moreno", graduation_year=2030, created_by=ids.carol),
            ]
        )
        await session.commit()

    return ids


@pytest.fixture
def membership_cache(accessors: DataAccessorFactory) -> MembershipCacheService:
    """Process-local membership cache backed by the SQL loader."""
    return MembershipCacheService(
        MembershipCacheStore(CacheEntryOptions()),
        SqlMembershipLoader(accessors),
        metrics=MagicMock(),
    )


@pytest_asyncio.fixture
async def app(engine: AsyncEngine, seeded: SeededData) -> FastAPI:
    """Application wired to the seeded test database (lifespan not run)."""
    application = create_app()
    init_app_state(application, engine, Settings(database_url="sqlite+aiosqlite:///:memory:"))
    return application


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
