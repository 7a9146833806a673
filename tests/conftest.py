"""Pytest configuration and shared fixtures."""

from collections.abc import Generator
from datetime import UTC, date, datetime
from decimal import Decimal

import pytest

from facturation.application.services import reset_services
from facturation.core.clock import DeterministicClock, set_clock
from facturation.core.entities import Invoice, InvoiceStatus, LineItem

FIXED_NOW = datetime(2024, 3, 15, 10, 30, 0, tzinfo=UTC)


@pytest.fixture
def clock() -> Generator[DeterministicClock, None, None]:
    """Deterministic clock installed as the process-wide clock."""
    fixed = DeterministicClock(FIXED_NOW)
    set_clock(fixed)
    yield fixed
    set_clock(None)


@pytest.fixture(autouse=True)
def _reset_service_singletons() -> Generator[None, None, None]:
    reset_services()
    yield
    reset_services()


@pytest.fixture
def draft_invoice() -> Invoice:
    return Invoice(
        id=1,
        client_id=1,
        invoice_number="INV-202403-00001",
        invoice_sequence=1,
        invoice_date=date(2024, 3, 1),
        due_date=date(2024, 3, 31),
        status=InvoiceStatus.DRAFT,
        created_at=FIXED_NOW,
        updated_at=FIXED_NOW,
    )


@pytest.fixture
def line_item() -> LineItem:
    return LineItem(
        id=10,
        invoice_id=1,
        description="Développement site web",
        quantity=Decimal("5"),
        unit_price=Decimal("100"),
        tax_rate=Decimal("20"),
        created_at=FIXED_NOW,
        updated_at=FIXED_NOW,
    )
