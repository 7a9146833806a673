"""Core domain entities."""

from facturation.core.entities.client import Client, ClientStatus
from facturation.core.entities.invoice import Invoice, InvoiceStatus, StatusTimestamp
from facturation.core.entities.line_item import LineItem
from facturation.core.entities.status_history import StatusHistoryEntry

__all__ = [
    "Client",
    "ClientStatus",
    "Invoice",
    "InvoiceStatus",
    "StatusTimestamp",
    "LineItem",
    "StatusHistoryEntry",
]
