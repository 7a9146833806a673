"""
Change Invoice Status Use Case.

Entry point for every manual status change. The state machine itself
lives in ``StatusWorkflow``; this use case serializes changes per invoice
and shapes the result for the API.
"""

from facturation.application.dto.requests import ChangeStatusRequest
from facturation.application.dto.responses import (
    InvoiceResponse,
    StatusChangeResponse,
    StatusHistoryEntryResponse,
)
from facturation.application.locks import InvoiceLockRegistry
from facturation.application.services import get_invoice_locks, get_status_workflow
from facturation.config import get_logger, invoice_log_context
from facturation.core.services.status_workflow import StatusChangeResult, StatusWorkflow

logger = get_logger(__name__)


class ChangeInvoiceStatusUseCase:
    """Use case for moving an invoice through its status workflow."""

    def __init__(
        self,
        workflow: StatusWorkflow | None = None,
        locks: InvoiceLockRegistry | None = None,
    ):
        self._workflow = workflow
        self._locks = locks

    async def _get_workflow(self) -> StatusWorkflow:
        if self._workflow is None:
            self._workflow = await get_status_workflow()
        return self._workflow

    def _get_locks(self) -> InvoiceLockRegistry:
        if self._locks is None:
            self._locks = get_invoice_locks()
        return self._locks

    async def execute(
        self,
        invoice_id: int,
        request: ChangeStatusRequest,
        user_id: str | None = None,
    ) -> StatusChangeResult:
        """
        Change the status of an invoice.

        Args:
            invoice_id: Invoice to transition
            request: Requested status with optional reason and metadata
            user_id: Opaque actor recorded in the ledger

        Returns:
            StatusChangeResult with the updated invoice, the ledger entry
            and the statuses reachable next

        Raises:
            InvoiceNotFoundError: If the invoice is missing or deleted
            IllegalTransitionError: If the edge does not exist
            TransitionNotAllowedError: If a precondition failed
            ConcurrentModificationError: If the status moved underneath us
        """
        with invoice_log_context(invoice_id, user_id=user_id):
            logger.info("change_invoice_status_started", requested_status=request.status)

            workflow = await self._get_workflow()
            async with self._get_locks().hold(invoice_id):
                return await workflow.change_status(
                    invoice_id,
                    request.status,
                    reason=request.reason,
                    metadata=request.metadata,
                    user_id=user_id,
                )

    def to_response(self, result: StatusChangeResult) -> StatusChangeResponse:
        """Convert to API response format."""
        return StatusChangeResponse(
            invoice=InvoiceResponse.from_entity(result.invoice),
            history_entry=StatusHistoryEntryResponse.from_entity(result.history_entry),
            allowed_next_statuses=result.allowed_next_statuses,
        )
