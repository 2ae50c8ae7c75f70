"""Health check endpoints.

- `/health` answers as long as the process is up
- `/healthz` checks DB and Redis connectivity and reports each component
"""

import json
from typing import Any

from fastapi import APIRouter, Request, Response
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine

from clubhouse.cache.store import MembershipCacheStore

router = APIRouter()


async def check_db(engine: AsyncEngine) -> tuple[bool, str]:
    """Check database connectivity.

    Returns:
        (is_ok, status_message)
    """
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return (True, "ok")
    except Exception as e:
        return (False, f"error: {type(e).__name__}")


async def check_redis(store: MembershipCacheStore) -> tuple[bool, str]:
    """Check the shared cache tier.

    Returns:
        (is_ok, status_message)
    """
    if not store.has_shared_tier:
        return (True, "not_configured")

    if await store.ping():
        return (True, "ok")
    return (False, "error: unreachable")


@router.get("/health")
async def health() -> dict[str, str]:
    """Simple health check for Docker/k8s.

    Returns:
        200 OK always (application is running)
    """
    return {"status": "ok"}


@router.get("/healthz", response_model=None)
async def healthz(request: Request) -> dict[str, Any] | Response:
    """Component health check.

    Redis is only checked when the shared cache tier is configured.

    Returns:
        200 with component status if DB and Redis are ok
        503 if either fails
    """
    store: MembershipCacheStore = request.app.state.cache_store
    db_ok, db_status = await check_db(request.app.state.engine)
    redis_ok, redis_status = await check_redis(store)

    healthy = db_ok and redis_ok
    body = {
        "status": "ok" if healthy else "degraded",
        "components": {"db": db_status, "redis": redis_status},
        "membership_cache": "local+redis" if store.has_shared_tier else "local",
    }

    if healthy:
        return body
    return Response(content=json.dumps(body), status_code=503, media_type="application/json")
