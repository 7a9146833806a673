"""
Invoice status workflow endpoints.
"""

from fastapi import APIRouter, Depends, Header, Query

from facturation.api.dependencies import (
    get_change_status_use_case,
    get_overdue_sweep_use_case,
    get_status_history_use_case,
)
from facturation.application.dto.requests import ChangeStatusRequest
from facturation.application.dto.responses import (
    AllowedTransitionsResponse,
    ErrorResponse,
    OverdueSweepResponse,
    StatusChangeResponse,
    StatusHistoryResponse,
)
from facturation.application.use_cases import (
    ChangeInvoiceStatusUseCase,
    GetStatusHistoryUseCase,
    RunOverdueSweepUseCase,
)

router = APIRouter(prefix="/api/invoices", tags=["invoice-status"])


@router.post("/overdue-sweep", response_model=OverdueSweepResponse)
async def run_overdue_sweep(
    use_case: RunOverdueSweepUseCase = Depends(get_overdue_sweep_use_case),
) -> OverdueSweepResponse:
    """Mark every past-due SENT invoice as OVERDUE now."""
    result = await use_case.execute()
    return use_case.to_response(result)


@router.patch(
    "/{invoice_id}/status",
    response_model=StatusChangeResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Transition illegal or not allowed"},
        404: {"model": ErrorResponse, "description": "Invoice not found"},
        409: {"model": ErrorResponse, "description": "Status changed concurrently"},
    },
)
async def change_status(
    invoice_id: int,
    request: ChangeStatusRequest,
    x_user_id: str | None = Header(default=None),
    use_case: ChangeInvoiceStatusUseCase = Depends(get_change_status_use_case),
) -> StatusChangeResponse:
    """
    Move an invoice to another status.

    The optional ``X-User-ID`` header is recorded in the status history
    as-is.
    """
    result = await use_case.execute(invoice_id, request, user_id=x_user_id)
    return use_case.to_response(result)


@router.get(
    "/{invoice_id}/status-history",
    response_model=StatusHistoryResponse,
    responses={404: {"model": ErrorResponse, "description": "Invoice not found"}},
)
async def get_status_history(
    invoice_id: int,
    limit: int | None = Query(default=None, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    use_case: GetStatusHistoryUseCase = Depends(get_status_history_use_case),
) -> StatusHistoryResponse:
    """Status history of an invoice, newest first."""
    result = await use_case.execute(invoice_id, limit=limit, offset=offset)
    return use_case.to_response(result)


@router.get(
    "/{invoice_id}/allowed-transitions",
    response_model=AllowedTransitionsResponse,
    responses={404: {"model": ErrorResponse, "description": "Invoice not found"}},
)
async def get_allowed_transitions(
    invoice_id: int,
    use_case: GetStatusHistoryUseCase = Depends(get_status_history_use_case),
) -> AllowedTransitionsResponse:
    """Statuses the invoice can move to next."""
    return await use_case.allowed_transitions(invoice_id)
