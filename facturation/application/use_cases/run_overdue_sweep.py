"""
Run Overdue Sweep Use Case.

Moves every SENT invoice whose due date has passed to OVERDUE. Running it
twice in a row updates nothing the second time.
"""

from dataclasses import dataclass, field
from datetime import datetime

from facturation.application.dto.responses import OverdueSweepResponse
from facturation.application.locks import InvoiceLockRegistry
from facturation.application.services import get_invoice_locks, get_status_workflow
from facturation.config import get_logger, invoice_log_context
from facturation.core.clock import Clock, get_clock
from facturation.core.entities.invoice import InvoiceStatus
from facturation.core.exceptions import (
    ConcurrentModificationError,
    IllegalTransitionError,
    InvoiceNotFoundError,
    TransitionNotAllowedError,
)
from facturation.core.interfaces import IInvoiceStore
from facturation.core.services.status_workflow import StatusWorkflow

logger = get_logger(__name__)

OVERDUE_REASON = "Auto-marked as overdue (due date passed)"


@dataclass
class OverdueSweepResult:
    """Counts of one sweep run."""

    run_at: datetime
    updated_count: int = 0
    skipped_count: int = 0
    updated_invoice_ids: list[int] = field(default_factory=list)


class RunOverdueSweepUseCase:
    """Use case for the automatic SENT to OVERDUE transition."""

    def __init__(
        self,
        invoice_store: IInvoiceStore | None = None,
        workflow: StatusWorkflow | None = None,
        locks: InvoiceLockRegistry | None = None,
        clock: Clock | None = None,
    ):
        self._invoice_store = invoice_store
        self._workflow = workflow
        self._locks = locks
        self._clock = clock

    async def _get_invoice_store(self) -> IInvoiceStore:
        if self._invoice_store is None:
            from facturation.infrastructure.storage.sqlite import get_invoice_store

            self._invoice_store = await get_invoice_store()
        return self._invoice_store

    async def _get_workflow(self) -> StatusWorkflow:
        if self._workflow is None:
            self._workflow = await get_status_workflow(clock=self._clock)
        return self._workflow

    def _get_locks(self) -> InvoiceLockRegistry:
        if self._locks is None:
            self._locks = get_invoice_locks()
        return self._locks

    async def execute(self) -> OverdueSweepResult:
        """
        Mark past-due SENT invoices as OVERDUE.

        Invoices that were paid, cancelled, deleted or otherwise moved
        between the scan and their transition are counted as skipped.
        """
        clock = self._clock or get_clock()
        today = clock.today()
        result = OverdueSweepResult(run_at=clock.now())

        store = await self._get_invoice_store()
        workflow = await self._get_workflow()
        locks = self._get_locks()

        candidates = await store.find_past_due(InvoiceStatus.SENT, today)
        logger.info("overdue_sweep_started", candidates=len(candidates), today=today.isoformat())

        for invoice in candidates:
            invoice_id: int = invoice.id  # type: ignore[assignment]
            try:
                with invoice_log_context(invoice_id, automatic=True):
                    async with locks.hold(invoice_id):
                        await workflow.change_status(
                            invoice_id,
                            InvoiceStatus.OVERDUE,
                            reason=OVERDUE_REASON,
                            metadata={"automatic": True},
                        )
            except (
                ConcurrentModificationError,
                IllegalTransitionError,
                TransitionNotAllowedError,
                InvoiceNotFoundError,
            ) as e:
                result.skipped_count += 1
                logger.info(
                    "overdue_sweep_skipped",
                    invoice_id=invoice_id,
                    error_code=e.code,
                )
                continue

            result.updated_count += 1
            result.updated_invoice_ids.append(invoice_id)

        logger.info(
            "overdue_sweep_complete",
            updated=result.updated_count,
            skipped=result.skipped_count,
        )
        return result

    def to_response(self, result: OverdueSweepResult) -> OverdueSweepResponse:
        return OverdueSweepResponse(
            updated_count=result.updated_count,
            skipped_count=result.skipped_count,
            updated_invoice_ids=result.updated_invoice_ids,
            run_at=result.run_at,
        )
