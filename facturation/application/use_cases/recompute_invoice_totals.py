"""Recompute Invoice Totals Use Case."""

from dataclasses import dataclass

from facturation.application.dto.responses import InvoiceTotalsResponse
from facturation.application.locks import InvoiceLockRegistry
from facturation.application.services import get_invoice_locks
from facturation.config import get_logger
from facturation.core.clock import Clock, get_clock
from facturation.core.entities.invoice import Invoice
from facturation.core.interfaces import IInvoiceStore
from facturation.core.services.line_item_calculator import InvoiceTotals

logger = get_logger(__name__)


@dataclass
class RecomputeTotalsResult:
    """Invoice after its totals were rewritten."""

    invoice: Invoice
    totals: InvoiceTotals


class RecomputeInvoiceTotalsUseCase:
    """
    Rebuild an invoice's subtotal, tax and total from its active line items.

    Line item changes already rewrite the totals in their own transaction;
    this repairs an invoice whose stored totals have drifted.
    """

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

    async def execute(self, invoice_id: int) -> RecomputeTotalsResult:
        """
        Recompute and persist the totals of an invoice.

        Raises:
            InvoiceNotFoundError: If the invoice is missing or deleted
        """
        invoice_store = await self._get_invoice_store()

        async with self._get_locks().hold(invoice_id):
            write = await invoice_store.recompute_totals(
                invoice_id, (self._clock or get_clock()).now()
            )

        totals = write.totals
        logger.info(
            "invoice_totals_recomputed",
            invoice_id=invoice_id,
            subtotal=str(totals.subtotal_amount),
            tax=str(totals.total_tax_amount),
            total=str(totals.total_amount),
        )
        return RecomputeTotalsResult(invoice=write.invoice, totals=totals)

    def to_response(self, result: RecomputeTotalsResult) -> InvoiceTotalsResponse:
        return InvoiceTotalsResponse.from_totals(result.totals)
