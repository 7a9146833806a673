"""Fixtures for API endpoint tests."""

from collections.abc import AsyncGenerator
from datetime import UTC, date, datetime

import pytest
from httpx import ASGITransport, AsyncClient

from facturation.api.main import app
from facturation.core.entities import Invoice, InvoiceStatus

NOW = datetime(2024, 3, 15, 10, 30, 0, tzinfo=UTC)


@pytest.fixture
async def api_client() -> AsyncGenerator[AsyncClient, None]:
    """Async client on the app; dependency overrides are dropped afterwards."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def override():
    """Replace a FastAPI dependency with a fixed object."""

    def _override(dependency, value):
        app.dependency_overrides[dependency] = lambda: value
        return value

    return _override


@pytest.fixture
def api_invoice() -> Invoice:
    return Invoice(
        id=1,
        client_id=3,
        invoice_number="INV-202403-00001",
        invoice_sequence=1,
        invoice_date=date(2024, 3, 1),
        due_date=date(2024, 3, 31),
        status=InvoiceStatus.DRAFT,
        created_at=NOW,
        updated_at=NOW,
    )
