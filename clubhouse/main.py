"""FastAPI application."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import redis.asyncio as redis
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncEngine

from clubhouse.api.routes.club_data import router as club_data_router
from clubhouse.api.routes.clubs import club_router
from clubhouse.api.routes.clubs import router as clubs_router
from clubhouse.api.routes.health import router as health_router
from clubhouse.api.routes.join_requests import club_router as club_join_requests_router
from clubhouse.api.routes.join_requests import router as join_requests_router
from clubhouse.api.routes.metrics import router as metrics_router
from clubhouse.cache.defaults import CacheEntryOptions
from clubhouse.cache.membership import MembershipCacheService
from clubhouse.cache.store import MembershipCacheStore, create_redis_client
from clubhouse.config import Settings, get_settings
from clubhouse.db.accessors import DataAccessorFactory
from clubhouse.db.engine import create_async_engine_from_settings, create_session_factory
from clubhouse.db.models import Base
from clubhouse.db.sql_repositories import SqlMembershipLoader
from clubhouse.errors import ClubhouseError
from clubhouse.middleware.club_membership import ClubMembershipGate
from clubhouse.services.club_data import ClubDataService
from clubhouse.services.join_requests import JoinRequestService
from clubhouse.services.memberships import MembershipService
from clubhouse.utils.logging import AccessAuditLogger, configure_logging


def init_app_state(
    app: FastAPI,
    engine: AsyncEngine,
    settings: Settings,
    redis_client: redis.Redis | None = None,
) -> None:
    """Wire long-lived services onto `app.state`.

    Args:
        app: Application to configure
        engine: Async engine for the system of record
        settings: Application settings
        redis_client: Shared cache tier client, if any
    """
    accessors = DataAccessorFactory(create_session_factory(engine))
    access_logger = AccessAuditLogger()

    store = MembershipCacheStore(CacheEntryOptions.from_settings(settings), redis_client)
    cache = MembershipCacheService(
        store,
        SqlMembershipLoader(accessors),
        key_prefix=settings.membership_cache_key_prefix,
    )

    app.state.engine = engine
    app.state.accessors = accessors
    app.state.cache_store = store
    app.state.membership_cache = cache
    app.state.club_gate = ClubMembershipGate(cache, access_logger)
    app.state.membership_service = MembershipService(accessors, cache, access_logger)
    app.state.join_request_service = JoinRequestService(accessors, cache, access_logger)
    app.state.club_data_service = ClubDataService(accessors)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings = get_settings()
    configure_logging(settings)

    engine = create_async_engine_from_settings(settings)
    if engine.dialect.name == "sqlite":
        # Local development; Postgres schemas come from Alembic
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    init_app_state(app, engine, settings, create_redis_client(settings.redis_url))
    try:
        yield
    finally:
        await app.state.cache_store.close()
        await engine.dispose()


async def clubhouse_error_handler(request: Request, exc: ClubhouseError) -> JSONResponse:
    """Translate service errors into their HTTP status."""
    return JSONResponse(status_code=exc.status_code, content={"detail": str(exc)})


def create_app() -> FastAPI:
    application = FastAPI(title="Clubhouse API", version="0.1.0", lifespan=lifespan)

    application.add_exception_handler(ClubhouseError, clubhouse_error_handler)

    # Register routes; /clubs/browse must precede /clubs/{club_id}
    application.include_router(health_router, tags=["health"])
    application.include_router(metrics_router, tags=["metrics"])
    application.include_router(clubs_router)
    application.include_router(club_router)
    application.include_router(club_join_requests_router)
    application.include_router(club_data_router)
    application.include_router(join_requests_router)

    @application.get("/")
    async def root() -> dict[str, str]:
        """Root endpoint."""
        return {"message": "Clubhouse API", "version": "0.1.0"}

    return application


app = create_app()
