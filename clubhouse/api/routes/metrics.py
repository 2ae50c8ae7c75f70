"""Prometheus metrics endpoint."""

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

router = APIRouter()


@router.get("/metrics")
async def metrics() -> Response:
    """Expose registered Prometheus metrics, including:

    - membership_cache_lookups_total{result}
    - membership_cache_loads_total{outcome}
    - membership_cache_invalidations_total
    - club_gate_decisions_total{decision}
    """
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
