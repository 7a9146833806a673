"""
Line item endpoints, nested under their invoice.

Every mutation answers with the item and the refreshed invoice totals.
"""

from fastapi import APIRouter, Depends, status

from facturation.api.dependencies import (
    get_add_line_item_use_case,
    get_invoices,
    get_line_items,
    get_remove_line_item_use_case,
    get_update_line_item_use_case,
)
from facturation.application.dto.requests import CreateLineItemRequest, UpdateLineItemRequest
from facturation.application.dto.responses import (
    ErrorResponse,
    InvoiceTotalsResponse,
    LineItemChangeResponse,
    LineItemListResponse,
    LineItemResponse,
)
from facturation.application.use_cases import (
    AddLineItemUseCase,
    RemoveLineItemUseCase,
    UpdateLineItemUseCase,
)
from facturation.core.exceptions import InvoiceNotFoundError, LineItemNotFoundError
from facturation.core.interfaces import IInvoiceStore, ILineItemStore
from facturation.core.services.line_item_calculator import calculate_invoice_totals

router = APIRouter(prefix="/api/invoices/{invoice_id}/line-items", tags=["line-items"])

NOT_FOUND = {404: {"model": ErrorResponse, "description": "Invoice or line item not found"}}
BAD_VALUES = {400: {"model": ErrorResponse, "description": "Invalid quantity, price or tax rate"}}


@router.get("", response_model=LineItemListResponse, responses=NOT_FOUND)
async def list_line_items(
    invoice_id: int,
    invoice_store: IInvoiceStore = Depends(get_invoices),
    line_item_store: ILineItemStore = Depends(get_line_items),
) -> LineItemListResponse:
    """List active line items in order, with their totals."""
    if await invoice_store.get_invoice(invoice_id) is None:
        raise InvoiceNotFoundError(invoice_id)

    items = await line_item_store.find_active_line_items(invoice_id)
    return LineItemListResponse(
        line_items=[LineItemResponse.from_entity(i) for i in items],
        invoice_totals=InvoiceTotalsResponse.from_totals(calculate_invoice_totals(items)),
    )


@router.post(
    "",
    response_model=LineItemChangeResponse,
    status_code=status.HTTP_201_CREATED,
    responses={**NOT_FOUND, **BAD_VALUES},
)
async def add_line_item(
    invoice_id: int,
    request: CreateLineItemRequest,
    use_case: AddLineItemUseCase = Depends(get_add_line_item_use_case),
) -> LineItemChangeResponse:
    """Append a line item to the invoice."""
    result = await use_case.execute(invoice_id, request)
    return use_case.to_response(result)


@router.get("/{line_item_id}", response_model=LineItemResponse, responses=NOT_FOUND)
async def get_line_item(
    invoice_id: int,
    line_item_id: int,
    line_item_store: ILineItemStore = Depends(get_line_items),
) -> LineItemResponse:
    """Get one line item of the invoice."""
    item = await line_item_store.get_line_item(line_item_id)
    if item is None or item.invoice_id != invoice_id:
        raise LineItemNotFoundError(line_item_id, invoice_id)
    return LineItemResponse.from_entity(item)


@router.put(
    "/{line_item_id}",
    response_model=LineItemChangeResponse,
    responses={**NOT_FOUND, **BAD_VALUES},
)
async def update_line_item(
    invoice_id: int,
    line_item_id: int,
    request: UpdateLineItemRequest,
    use_case: UpdateLineItemUseCase = Depends(get_update_line_item_use_case),
) -> LineItemChangeResponse:
    """Edit a line item; omitted fields keep their value."""
    result = await use_case.execute(invoice_id, line_item_id, request)
    return use_case.to_response(result)


@router.delete(
    "/{line_item_id}",
    response_model=LineItemChangeResponse,
    responses=NOT_FOUND,
)
async def remove_line_item(
    invoice_id: int,
    line_item_id: int,
    use_case: RemoveLineItemUseCase = Depends(get_remove_line_item_use_case),
) -> LineItemChangeResponse:
    """Remove a line item; the others keep their order."""
    result = await use_case.execute(invoice_id, line_item_id)
    return use_case.to_response(result)
