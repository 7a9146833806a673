"""Delete Invoice Use Case."""

from facturation.application.locks import InvoiceLockRegistry
from facturation.application.services import get_invoice_locks
from facturation.config import get_logger
from facturation.core.clock import Clock, get_clock
from facturation.core.interfaces import IInvoiceStore

logger = get_logger(__name__)


class DeleteInvoiceUseCase:
    """Soft-delete an invoice and its line items. The ledger is kept."""

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

    async def execute(self, invoice_id: int) -> int:
        """
        Delete the invoice.

        Returns:
            Number of line items removed with it

        Raises:
            InvoiceNotFoundError: If the invoice is missing or already deleted
        """
        invoice_store = await self._get_invoice_store()

        async with self._get_locks().hold(invoice_id):
            removed = await invoice_store.soft_delete_invoice(
                invoice_id, (self._clock or get_clock()).now()
            )

        logger.info("delete_invoice_complete", invoice_id=invoice_id, line_items=removed)
        return removed
