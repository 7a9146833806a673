"""Tests for health endpoints."""

from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, MagicMock, patch

from httpx import AsyncClient

from facturation import __version__
from facturation.infrastructure.storage.sqlite.migrations.migrator import discover_migrations

MIGRATOR = "facturation.infrastructure.storage.sqlite.migrations.migrator"


def _pool():
    pool = MagicMock()

    @asynccontextmanager
    async def acquire():
        yield MagicMock()

    pool.acquire = acquire
    return pool


async def test_root_health(api_client: AsyncClient):
    response = await api_client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "version": __version__}
    assert len(response.headers["X-Request-ID"]) == 8
    assert response.headers["X-Response-Time"].endswith("ms")


async def test_incoming_request_id_is_echoed(api_client: AsyncClient):
    response = await api_client.get("/health", headers={"X-Request-ID": "trace-abc-123"})

    assert response.headers["X-Request-ID"] == "trace-abc-123"


async def test_oversized_request_id_is_replaced(api_client: AsyncClient):
    response = await api_client.get("/health", headers={"X-Request-ID": "x" * 200})

    assert len(response.headers["X-Request-ID"]) == 8


async def test_api_health(api_client: AsyncClient):
    response = await api_client.get("/api/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["uptime_seconds"] >= 0
    assert data["database"] is None


async def test_db_health_up_to_date(api_client: AsyncClient):
    latest = discover_migrations()[-1].version

    with patch(
        "facturation.infrastructure.storage.sqlite.get_pool",
        AsyncMock(return_value=_pool()),
    ), patch(f"{MIGRATOR}.get_current_version", AsyncMock(return_value=latest)):
        response = await api_client.get("/api/health/db")

    data = response.json()
    assert data["status"] == "healthy"
    assert data["database"]["name"] == "sqlite"
    assert data["database"]["available"] is True
    assert data["database"]["latency_ms"] is not None
    assert data["database"]["schema_version"] == latest
    assert data["database"]["latest_version"] == latest


async def test_db_health_degraded_with_pending_migrations(api_client: AsyncClient):
    with patch(
        "facturation.infrastructure.storage.sqlite.get_pool",
        AsyncMock(return_value=_pool()),
    ), patch(f"{MIGRATOR}.get_current_version", AsyncMock(return_value="001")):
        response = await api_client.get("/api/health/db")

    data = response.json()
    assert data["status"] == "degraded"
    assert data["database"]["schema_version"] == "001"


async def test_db_health_unavailable(api_client: AsyncClient):
    with patch(
        "facturation.infrastructure.storage.sqlite.get_pool",
        AsyncMock(side_effect=OSError("disk I/O error")),
    ):
        response = await api_client.get("/api/health/db")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "unhealthy"
    assert data["database"]["available"] is False
    assert data["database"]["error"] == "disk I/O error"
