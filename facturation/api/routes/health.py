"""
Liveness and database readiness endpoints.
"""

import time

import aiosqlite
from fastapi import APIRouter

from facturation import __version__
from facturation.application.dto.responses import DatabaseHealthResponse, HealthResponse
from facturation.config import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api/health", tags=["health"])

_started = time.monotonic()


def _uptime() -> float:
    return round(time.monotonic() - _started, 3)


@router.get("", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Process liveness; does not touch the database."""
    return HealthResponse(status="healthy", version=__version__, uptime_seconds=_uptime())


@router.get("/db", response_model=HealthResponse)
async def db_health() -> HealthResponse:
    """
    Database readiness.

    Reports the latest applied migration. The service is ``degraded`` while
    bundled migrations are still pending and ``unhealthy`` when the
    database cannot be reached.
    """
    from facturation.infrastructure.storage.sqlite import get_pool
    from facturation.infrastructure.storage.sqlite.migrations.migrator import (
        discover_migrations,
        get_current_version,
    )

    bundled = discover_migrations()
    latest = bundled[-1].version if bundled else None
    start = time.perf_counter()

    try:
        pool = await get_pool()
        async with pool.acquire() as conn:
            schema_version = await get_current_version(conn)
    except (aiosqlite.Error, OSError) as e:
        logger.warning("db_health_check_failed", error=str(e))
        return HealthResponse(
            status="unhealthy",
            version=__version__,
            uptime_seconds=_uptime(),
            database=DatabaseHealthResponse(
                available=False, latest_version=latest, error=str(e)
            ),
        )

    return HealthResponse(
        status="healthy" if schema_version == latest else "degraded",
        version=__version__,
        uptime_seconds=_uptime(),
        database=DatabaseHealthResponse(
            available=True,
            latency_ms=round((time.perf_counter() - start) * 1000, 2),
            schema_version=schema_version,
            latest_version=latest,
        ),
    )
