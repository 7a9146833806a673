"""Core interfaces (ports) for dependency injection."""

from facturation.core.interfaces.client_store import IClientStore
from facturation.core.interfaces.invoice_store import IInvoiceStore, LineItemWrite
from facturation.core.interfaces.line_item_store import ILineItemStore
from facturation.core.interfaces.status_history_store import (
    IStatusHistoryStore,
    SortOrder,
)

__all__ = [
    "IClientStore",
    "IInvoiceStore",
    "ILineItemStore",
    "IStatusHistoryStore",
    "LineItemWrite",
    "SortOrder",
]
