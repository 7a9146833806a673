"""
Invoice management endpoints.
"""

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import Response

from facturation.api.dependencies import (
    get_create_invoice_use_case,
    get_delete_invoice_use_case,
    get_invoices,
    get_line_items,
    get_recompute_totals_use_case,
    get_update_invoice_use_case,
)
from facturation.application.dto.requests import CreateInvoiceRequest, UpdateInvoiceRequest
from facturation.application.dto.responses import (
    ErrorResponse,
    InvoiceListResponse,
    InvoiceResponse,
    InvoiceTotalsResponse,
)
from facturation.application.use_cases import (
    CreateInvoiceUseCase,
    DeleteInvoiceUseCase,
    RecomputeInvoiceTotalsUseCase,
    UpdateInvoiceUseCase,
)
from facturation.core.entities.invoice import InvoiceStatus
from facturation.core.exceptions import InvoiceNotFoundError
from facturation.core.interfaces import IInvoiceStore, ILineItemStore

router = APIRouter(prefix="/api/invoices", tags=["invoices"])


@router.post(
    "",
    response_model=InvoiceResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid dates or line items"},
        404: {"model": ErrorResponse, "description": "Client not found"},
    },
)
async def create_invoice(
    request: CreateInvoiceRequest,
    use_case: CreateInvoiceUseCase = Depends(get_create_invoice_use_case),
) -> InvoiceResponse:
    """
    Create a draft invoice.

    The invoice number is generated; the due date defaults to the invoice
    date plus the configured payment delay.
    """
    result = await use_case.execute(request)
    return use_case.to_response(result)


@router.get("", response_model=InvoiceListResponse)
async def list_invoices(
    invoice_status: InvoiceStatus | None = Query(default=None, alias="status"),
    client_id: int | None = None,
    limit: int = Query(default=50, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    store: IInvoiceStore = Depends(get_invoices),
) -> InvoiceListResponse:
    """List invoices, newest first."""
    invoices = await store.list_invoices(
        status=invoice_status, client_id=client_id, limit=limit, offset=offset
    )
    total = await store.count_invoices(status=invoice_status, client_id=client_id)

    return InvoiceListResponse(
        invoices=[InvoiceResponse.from_entity(inv) for inv in invoices],
        total=total,
        limit=limit,
        offset=offset,
    )


@router.get(
    "/{invoice_id}",
    response_model=InvoiceResponse,
    responses={404: {"model": ErrorResponse, "description": "Invoice not found"}},
)
async def get_invoice(
    invoice_id: int,
    store: IInvoiceStore = Depends(get_invoices),
    line_item_store: ILineItemStore = Depends(get_line_items),
) -> InvoiceResponse:
    """Get an invoice with its active line items."""
    invoice = await store.get_invoice(invoice_id)
    if invoice is None:
        raise InvoiceNotFoundError(invoice_id)

    items = await line_item_store.find_active_line_items(invoice_id)
    return InvoiceResponse.from_entity(invoice, items)


@router.patch(
    "/{invoice_id}",
    response_model=InvoiceResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid dates"},
        404: {"model": ErrorResponse, "description": "Invoice or client not found"},
    },
)
async def update_invoice(
    invoice_id: int,
    request: UpdateInvoiceRequest,
    use_case: UpdateInvoiceUseCase = Depends(get_update_invoice_use_case),
) -> InvoiceResponse:
    """
    Update the descriptive fields of an invoice.

    Status changes go through PATCH /api/invoices/{id}/status.
    """
    result = await use_case.execute(invoice_id, request)
    return use_case.to_response(result)


@router.delete(
    "/{invoice_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={404: {"model": ErrorResponse, "description": "Invoice not found"}},
)
async def delete_invoice(
    invoice_id: int,
    use_case: DeleteInvoiceUseCase = Depends(get_delete_invoice_use_case),
) -> Response:
    """Soft-delete an invoice and its line items."""
    await use_case.execute(invoice_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{invoice_id}/recompute-totals",
    response_model=InvoiceTotalsResponse,
    responses={404: {"model": ErrorResponse, "description": "Invoice not found"}},
)
async def recompute_totals(
    invoice_id: int,
    use_case: RecomputeInvoiceTotalsUseCase = Depends(get_recompute_totals_use_case),
) -> InvoiceTotalsResponse:
    """Rebuild the invoice totals from its active line items."""
    result = await use_case.execute(invoice_id)
    return use_case.to_response(result)
