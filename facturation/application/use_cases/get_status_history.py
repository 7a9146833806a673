"""
Get Status History Use Case.

Reads the transition ledger of an invoice together with its current
position in the workflow.
"""

from dataclasses import dataclass

from facturation.application.dto.responses import (
    AllowedTransitionsResponse,
    PaginationResponse,
    StatusHistoryEntryResponse,
    StatusHistoryResponse,
    TransitionOptionResponse,
)
from facturation.application.services import get_status_history_ledger
from facturation.config import get_logger, get_settings
from facturation.core.clock import Clock, get_clock
from facturation.core.entities.invoice import Invoice
from facturation.core.entities.status_history import StatusHistoryEntry
from facturation.core.exceptions import InvoiceNotFoundError
from facturation.core.interfaces import IInvoiceStore
from facturation.core.services.status_history_ledger import StatusHistoryLedger
from facturation.core.services.status_workflow import (
    allowed_next_statuses,
    is_automatic_transition,
    is_overdue,
    transition_description,
)

logger = get_logger(__name__)


@dataclass
class StatusHistoryResult:
    """One page of ledger entries for an invoice."""

    invoice: Invoice
    entries: list[StatusHistoryEntry]
    total: int
    limit: int
    offset: int


class GetStatusHistoryUseCase:
    """Use case for reading an invoice's status history."""

    def __init__(
        self,
        invoice_store: IInvoiceStore | None = None,
        ledger: StatusHistoryLedger | None = None,
        clock: Clock | None = None,
    ):
        self._invoice_store = invoice_store
        self._ledger = ledger
        self._clock = clock

    async def _get_invoice_store(self) -> IInvoiceStore:
        if self._invoice_store is None:
            from facturation.infrastructure.storage.sqlite import get_invoice_store

            self._invoice_store = await get_invoice_store()
        return self._invoice_store

    async def _get_ledger(self) -> StatusHistoryLedger:
        if self._ledger is None:
            self._ledger = await get_status_history_ledger()
        return self._ledger

    async def _get_invoice(self, invoice_id: int) -> Invoice:
        store = await self._get_invoice_store()
        invoice = await store.get_invoice(invoice_id)
        if invoice is None:
            raise InvoiceNotFoundError(invoice_id)
        return invoice

    async def execute(
        self,
        invoice_id: int,
        limit: int | None = None,
        offset: int = 0,
    ) -> StatusHistoryResult:
        """
        Get a page of an invoice's status history, newest first.

        Raises:
            InvoiceNotFoundError: If the invoice is missing or deleted
        """
        page_limit = limit if limit is not None else get_settings().billing.history_page_limit

        invoice = await self._get_invoice(invoice_id)
        ledger = await self._get_ledger()

        entries = await ledger.history_for(invoice_id, limit=page_limit, offset=offset)
        total = await ledger.count_for(invoice_id)

        return StatusHistoryResult(
            invoice=invoice,
            entries=entries,
            total=total,
            limit=page_limit,
            offset=offset,
        )

    async def allowed_transitions(self, invoice_id: int) -> AllowedTransitionsResponse:
        """Statuses the invoice may move to next, with their labels."""
        invoice = await self._get_invoice(invoice_id)
        clock = self._clock or get_clock()
        current = invoice.status

        return AllowedTransitionsResponse(
            invoice_id=invoice_id,
            current_status=current,
            is_overdue=is_overdue(invoice, clock.today()),
            transitions=[
                TransitionOptionResponse(
                    status=target,
                    description=transition_description(current, target),
                    automatic=is_automatic_transition(current, target),
                )
                for target in allowed_next_statuses(current)
            ],
        )

    def to_response(self, result: StatusHistoryResult) -> StatusHistoryResponse:
        """Convert to API response format."""
        return StatusHistoryResponse(
            invoice_id=result.invoice.id,  # type: ignore[arg-type]
            current_status=result.invoice.status,
            allowed_next_statuses=allowed_next_statuses(result.invoice.status),
            history=[StatusHistoryEntryResponse.from_entity(e) for e in result.entries],
            pagination=PaginationResponse(
                limit=result.limit,
                offset=result.offset,
                total=result.total,
            ),
        )
