"""SQLite storage implementations."""

from facturation.infrastructure.storage.sqlite.client_store import SQLiteClientStore
from facturation.infrastructure.storage.sqlite.connection import (
    ConnectionPool,
    close_pool,
    get_connection,
    get_pool,
    get_transaction,
)
from facturation.infrastructure.storage.sqlite.invoice_store import SQLiteInvoiceStore
from facturation.infrastructure.storage.sqlite.line_item_store import SQLiteLineItemStore
from facturation.infrastructure.storage.sqlite.status_history_store import (
    SQLiteStatusHistoryStore,
)

# Singleton instances
_client_store: SQLiteClientStore | None = None
_invoice_store: SQLiteInvoiceStore | None = None
_line_item_store: SQLiteLineItemStore | None = None
_status_history_store: SQLiteStatusHistoryStore | None = None


async def get_client_store() -> SQLiteClientStore:
    """Get singleton client store instance."""
    global _client_store
    if _client_store is None:
        _client_store = SQLiteClientStore()
    return _client_store


async def get_invoice_store() -> SQLiteInvoiceStore:
    """Get singleton invoice store instance."""
    global _invoice_store
    if _invoice_store is None:
        _invoice_store = SQLiteInvoiceStore()
    return _invoice_store


async def get_line_item_store() -> SQLiteLineItemStore:
    """Get singleton line item store instance."""
    global _line_item_store
    if _line_item_store is None:
        _line_item_store = SQLiteLineItemStore()
    return _line_item_store


async def get_status_history_store() -> SQLiteStatusHistoryStore:
    """Get singleton status history store instance."""
    global _status_history_store
    if _status_history_store is None:
        _status_history_store = SQLiteStatusHistoryStore()
    return _status_history_store


__all__ = [
    # Connection
    "ConnectionPool",
    "get_pool",
    "close_pool",
    "get_connection",
    "get_transaction",
    # Store classes
    "SQLiteClientStore",
    "SQLiteInvoiceStore",
    "SQLiteLineItemStore",
    "SQLiteStatusHistoryStore",
    # Factory functions
    "get_client_store",
    "get_invoice_store",
    "get_line_item_store",
    "get_status_history_store",
]
