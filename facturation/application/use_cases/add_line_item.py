"""
Add Line Item Use Case.

Appends a line item to an invoice and refreshes the invoice totals.
"""

from dataclasses import dataclass

from facturation.application.dto.requests import CreateLineItemRequest
from facturation.application.dto.responses import (
    InvoiceTotalsResponse,
    LineItemChangeResponse,
    LineItemResponse,
)
from facturation.application.locks import InvoiceLockRegistry
from facturation.application.services import get_invoice_locks
from facturation.config import get_logger, get_settings
from facturation.core.clock import Clock, get_clock
from facturation.core.entities.invoice import Invoice
from facturation.core.entities.line_item import LineItem
from facturation.core.interfaces import IInvoiceStore, LineItemWrite
from facturation.core.services.line_item_calculator import (
    InvoiceTotals,
    validate_line_item_values,
)

logger = get_logger(__name__)


@dataclass
class LineItemChangeResult:
    """Outcome of a line item mutation."""

    line_item: LineItem | None
    invoice: Invoice
    totals: InvoiceTotals

    @classmethod
    def from_write(cls, write: LineItemWrite) -> "LineItemChangeResult":
        return cls(line_item=write.line_item, invoice=write.invoice, totals=write.totals)


def change_response(result: LineItemChangeResult) -> LineItemChangeResponse:
    return LineItemChangeResponse(
        line_item=(
            LineItemResponse.from_entity(result.line_item)
            if result.line_item is not None
            else None
        ),
        invoice_totals=InvoiceTotalsResponse.from_totals(result.totals),
    )


def validate_create_request(request: CreateLineItemRequest) -> None:
    """Raise ``LineItemValueError`` when the pricing inputs are out of range."""
    validate_line_item_values(
        quantity=request.quantity,
        unit_price=request.unit_price,
        tax_rate=request.tax_rate,
    )


class AddLineItemUseCase:
    """Use case for adding a line item to an invoice."""

    def __init__(
        self,
        invoice_store: IInvoiceStore | None = None,
        locks: InvoiceLockRegistry | None = None,
        clock: Clock | None = None,
    ):
        self._invoice_store = invoice_store
        self._locks = locks
        self._clock = clock

    async def _get_invoice_store(self) -> IInvoiceStore:
        if self._invoice_store is None:
            from facturation.infrastructure.storage.sqlite import get_invoice_store

            self._invoice_store = await get_invoice_store()
        return self._invoice_store

    def _get_locks(self) -> InvoiceLockRegistry:
        if self._locks is None:
            self._locks = get_invoice_locks()
        return self._locks

    async def execute(
        self, invoice_id: int, request: CreateLineItemRequest
    ) -> LineItemChangeResult:
        """
        Add a line item and recompute the invoice totals.

        The item and the new totals are committed together.

        Args:
            invoice_id: Owning invoice
            request: Line item fields

        Returns:
            LineItemChangeResult with the stored item and new totals

        Raises:
            LineItemValueError: If quantity, unit price or tax rate is invalid
            InvoiceNotFoundError: If the invoice is missing or deleted
        """
        validate_create_request(request)

        async with self._get_locks().hold(invoice_id):
            return await self.apply(invoice_id, request)

    async def apply(
        self, invoice_id: int, request: CreateLineItemRequest
    ) -> LineItemChangeResult:
        """Add the item without taking the lock; the caller must hold it."""
        invoice_store = await self._get_invoice_store()

        tax_rate = request.tax_rate
        if tax_rate is None:
            tax_rate = get_settings().billing.default_tax_rate

        now = (self._clock or get_clock()).now()
        item = LineItem(
            invoice_id=invoice_id,
            description=request.description,
            quantity=request.quantity,
            unit_price=request.unit_price,
            tax_rate=tax_rate,
            tax_included=request.tax_included,
            metadata=request.metadata,
            created_at=now,
            updated_at=now,
        )
        result = LineItemChangeResult.from_write(await invoice_store.add_line_item(item))

        logger.info(
            "line_item_added",
            invoice_id=invoice_id,
            line_item_id=result.line_item.id,  # type: ignore[union-attr]
            invoice_total=str(result.totals.total_amount),
        )
        return result

    def to_response(self, result: LineItemChangeResult) -> LineItemChangeResponse:
        """Convert to API response format."""
        return change_response(result)
