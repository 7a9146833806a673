"""Abstract interface for invoice storage."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

from facturation.core.entities.invoice import Invoice, InvoiceStatus, StatusTimestamp
from facturation.core.entities.line_item import LineItem
from facturation.core.entities.status_history import StatusHistoryEntry
from facturation.core.services.line_item_calculator import InvoiceTotals


@dataclass(frozen=True)
class LineItemWrite:
    """State of an invoice after a line item change and its totals rewrite."""

    invoice: Invoice
    totals: InvoiceTotals
    line_item: LineItem | None = None


class IInvoiceStore(ABC):
    """
    Interface for invoice persistence.

    The invoice owns its line items: every line item write goes through
    here so the item and the invoice totals commit together.
    """

    @abstractmethod
    async def create_invoice(self, invoice: Invoice, number_prefix: str = "INV") -> Invoice:
        """
        Create an invoice.

        Assigns the id and the next invoice sequence; when the invoice has
        no number yet, one is generated from ``number_prefix`` in the same
        write.
        """
        pass

    @abstractmethod
    async def get_invoice(self, invoice_id: int) -> Invoice | None:
        """Get a non-deleted invoice by ID."""
        pass

    @abstractmethod
    async def list_invoices(
        self,
        status: InvoiceStatus | None = None,
        client_id: int | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[Invoice]:
        """List non-deleted invoices, newest first."""
        pass

    @abstractmethod
    async def count_invoices(
        self,
        status: InvoiceStatus | None = None,
        client_id: int | None = None,
    ) -> int:
        """Count non-deleted invoices matching the filters."""
        pass

    @abstractmethod
    async def update_invoice(
        self, invoice_id: int, fields: dict[str, Any], updated_at: datetime
    ) -> Invoice:
        """Update descriptive fields. Never touches status, stamps or totals."""
        pass

    @abstractmethod
    async def soft_delete_invoice(self, invoice_id: int, deleted_at: datetime) -> int:
        """
        Mark an invoice and its active line items deleted in one write.

        Returns:
            Number of line items deleted with it

        Raises:
            InvoiceNotFoundError: if the invoice is missing or already deleted
        """
        pass

    @abstractmethod
    async def add_line_item(self, item: LineItem) -> LineItemWrite:
        """
        Append a line item and rewrite the invoice totals atomically.

        The item gets the next line order; ``item.updated_at`` becomes the
        invoice's ``updated_at``.
        """
        pass

    @abstractmethod
    async def edit_line_item(self, item: LineItem, changed_at: datetime) -> LineItemWrite:
        """
        Persist an edited line item and rewrite the totals atomically.

        Raises:
            LineItemNotFoundError: if the item is deleted or belongs to
                another invoice
        """
        pass

    @abstractmethod
    async def remove_line_item(
        self, invoice_id: int, line_item_id: int, changed_at: datetime
    ) -> LineItemWrite:
        """Soft-delete a line item and rewrite the totals atomically."""
        pass

    @abstractmethod
    async def recompute_totals(self, invoice_id: int, changed_at: datetime) -> LineItemWrite:
        """Rebuild the stored totals from the active line items."""
        pass

    @abstractmethod
    async def find_past_due(
        self, status: InvoiceStatus, before: date
    ) -> list[Invoice]:
        """Invoices in ``status`` whose due date is strictly before ``before``."""
        pass

    @abstractmethod
    async def commit_status_change(
        self,
        invoice_id: int,
        expected_status: InvoiceStatus,
        new_status: InvoiceStatus,
        timestamp_field: StatusTimestamp | None,
        changed_at: datetime,
        entry: StatusHistoryEntry,
    ) -> tuple[Invoice, StatusHistoryEntry]:
        """
        Atomically move an invoice to ``new_status`` and append ``entry``.

        The update only applies while the stored status still equals
        ``expected_status``; the ledger entry is written in the same
        transaction, so either both land or neither does.

        Raises:
            ConcurrentModificationError: if the status no longer matches
        """
        pass
