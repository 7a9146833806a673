"""Abstract interface for line item reads."""

from abc import ABC, abstractmethod

from facturation.core.entities.line_item import LineItem


class ILineItemStore(ABC):
    """
    Interface for line item lookups.

    Writes go through ``IInvoiceStore`` so the invoice totals move with them.
    """

    @abstractmethod
    async def get_line_item(self, line_item_id: int) -> LineItem | None:
        """Get a non-deleted line item by ID."""
        pass

    @abstractmethod
    async def find_active_line_items(self, invoice_id: int) -> list[LineItem]:
        """Non-deleted line items of an invoice, in line order."""
        pass
