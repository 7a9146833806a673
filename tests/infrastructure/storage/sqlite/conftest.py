"""Pytest fixtures for SQLite storage tests."""

from collections.abc import AsyncGenerator
from datetime import UTC, date, datetime
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

import facturation.infrastructure.storage.sqlite.connection as conn_module
import facturation.infrastructure.storage.sqlite.migrations.migrator as migrator_module
from facturation.core.entities import Client, Invoice
from facturation.infrastructure.storage.sqlite import (
    SQLiteClientStore,
    SQLiteInvoiceStore,
    SQLiteLineItemStore,
    SQLiteStatusHistoryStore,
    close_pool,
)
from facturation.infrastructure.storage.sqlite.migrations.migrator import (
    initialize_database,
)

CREATED_AT = datetime(2024, 3, 15, 10, 30, 0, tzinfo=UTC)


@pytest.fixture
def temp_db_path(tmp_path: Path) -> Path:
    """Create a temporary database path."""
    return tmp_path / "test.db"


@pytest.fixture
def mock_settings(temp_db_path: Path):
    """Mock settings with temp database path."""
    mock = MagicMock()
    mock.storage.db_path = temp_db_path
    mock.storage.pool_size = 2
    mock.storage.busy_timeout = 5000
    mock.storage.acquire_timeout = 5.0
    return mock


@pytest.fixture
async def initialized_db(
    temp_db_path: Path, mock_settings
) -> AsyncGenerator[Path, None]:
    """
    Migrated temporary database with the global pool pointed at it.

    The pool is reset before and closed after each test.
    """
    conn_module._pool = None
    with (
        patch.object(conn_module, "get_settings", return_value=mock_settings),
        patch.object(migrator_module, "get_settings", return_value=mock_settings),
    ):
        results = await initialize_database(temp_db_path, create_backup_before=False)
        assert all(r.success for r in results)
        yield temp_db_path
        await close_pool()


@pytest.fixture
def client_store(initialized_db) -> SQLiteClientStore:
    return SQLiteClientStore()


@pytest.fixture
def invoice_store(initialized_db) -> SQLiteInvoiceStore:
    return SQLiteInvoiceStore()


@pytest.fixture
def line_item_store(initialized_db) -> SQLiteLineItemStore:
    return SQLiteLineItemStore()


@pytest.fixture
def history_store(initialized_db) -> SQLiteStatusHistoryStore:
    return SQLiteStatusHistoryStore()


@pytest.fixture
async def stored_client(client_store) -> Client:
    return await client_store.create_client(
        Client(
            name="Atelier Dupont",
            email="compta@dupont.fr",
            city="Lyon",
            created_at=CREATED_AT,
            updated_at=CREATED_AT,
        )
    )


@pytest.fixture
def new_invoice(stored_client) -> Invoice:
    """Unsaved DRAFT invoice for the stored client."""
    return Invoice(
        client_id=stored_client.id,
        invoice_date=date(2024, 3, 1),
        due_date=date(2024, 3, 31),
        created_at=CREATED_AT,
        updated_at=CREATED_AT,
    )


@pytest.fixture
async def stored_invoice(invoice_store, new_invoice) -> Invoice:
    return await invoice_store.create_invoice(new_invoice)
