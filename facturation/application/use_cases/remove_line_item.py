"""Remove Line Item Use Case."""

from facturation.application.dto.responses import LineItemChangeResponse
from facturation.application.locks import InvoiceLockRegistry
from facturation.application.services import get_invoice_locks
from facturation.application.use_cases.add_line_item import (
    LineItemChangeResult,
    change_response,
)
from facturation.config import get_logger
from facturation.core.clock import Clock, get_clock
from facturation.core.interfaces import IInvoiceStore

logger = get_logger(__name__)


class RemoveLineItemUseCase:
    """Soft-delete a line item and refresh the invoice totals."""

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

    async def execute(self, invoice_id: int, line_item_id: int) -> LineItemChangeResult:
        """
        Remove a line item from an invoice.

        The remaining items keep their order values.

        Raises:
            InvoiceNotFoundError: If the invoice is missing or deleted
            LineItemNotFoundError: If the item is missing, already removed
                or belongs to another invoice
        """
        invoice_store = await self._get_invoice_store()

        async with self._get_locks().hold(invoice_id):
            write = await invoice_store.remove_line_item(
                invoice_id, line_item_id, (self._clock or get_clock()).now()
            )

        logger.info(
            "line_item_removed",
            invoice_id=invoice_id,
            line_item_id=line_item_id,
            invoice_total=str(write.totals.total_amount),
        )
        return LineItemChangeResult(line_item=None, invoice=write.invoice, totals=write.totals)

    def to_response(self, result: LineItemChangeResult) -> LineItemChangeResponse:
        return change_response(result)
