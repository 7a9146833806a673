"""Update Line Item Use Case."""

from facturation.application.dto.requests import UpdateLineItemRequest
from facturation.application.dto.responses import LineItemChangeResponse
from facturation.application.locks import InvoiceLockRegistry
from facturation.application.services import get_invoice_locks
from facturation.application.use_cases.add_line_item import (
    LineItemChangeResult,
    change_response,
)
from facturation.config import get_logger
from facturation.core.clock import Clock, get_clock
from facturation.core.exceptions import InvoiceNotFoundError, LineItemNotFoundError
from facturation.core.interfaces import IInvoiceStore, ILineItemStore
from facturation.core.services.line_item_calculator import validate_line_item_values

logger = get_logger(__name__)


class UpdateLineItemUseCase:
    """
    Apply a partial edit to a line item.

    Derived amounts are rebuilt from the edited pricing inputs; the item
    and the recomputed invoice totals are committed together under the
    invoice lock.
    """

    def __init__(
        self,
        invoice_store: IInvoiceStore | None = None,
        line_item_store: ILineItemStore | None = None,
        locks: InvoiceLockRegistry | None = None,
        clock: Clock | None = None,
    ):
        self._invoice_store = invoice_store
        self._line_item_store = line_item_store
        self._locks = locks
        self._clock = clock

    async def _get_invoice_store(self) -> IInvoiceStore:
        if self._invoice_store is None:
            from facturation.infrastructure.storage.sqlite import get_invoice_store

            self._invoice_store = await get_invoice_store()
        return self._invoice_store

    async def _get_line_item_store(self) -> ILineItemStore:
        if self._line_item_store is None:
            from facturation.infrastructure.storage.sqlite import get_line_item_store

            self._line_item_store = await get_line_item_store()
        return self._line_item_store

    def _get_locks(self) -> InvoiceLockRegistry:
        if self._locks is None:
            self._locks = get_invoice_locks()
        return self._locks

    async def execute(
        self,
        invoice_id: int,
        line_item_id: int,
        request: UpdateLineItemRequest,
    ) -> LineItemChangeResult:
        """
        Update a line item of an invoice.

        Raises:
            LineItemValueError: If a supplied pricing value is invalid
            InvoiceNotFoundError: If the invoice is missing or deleted
            LineItemNotFoundError: If the item is missing, deleted or
                belongs to another invoice
        """
        changes = {
            k: v for k, v in request.model_dump(exclude_unset=True).items()
            if v is not None
        }
        validate_line_item_values(
            quantity=changes.get("quantity"),
            unit_price=changes.get("unit_price"),
            tax_rate=changes.get("tax_rate"),
        )

        invoice_store = await self._get_invoice_store()
        line_item_store = await self._get_line_item_store()

        async with self._get_locks().hold(invoice_id):
            if await invoice_store.get_invoice(invoice_id) is None:
                raise InvoiceNotFoundError(invoice_id)

            item = await line_item_store.get_line_item(line_item_id)
            if item is None or item.invoice_id != invoice_id:
                raise LineItemNotFoundError(line_item_id, invoice_id)

            write = await invoice_store.edit_line_item(
                item.with_changes(**changes), (self._clock or get_clock()).now()
            )

        logger.info(
            "line_item_edited",
            invoice_id=invoice_id,
            line_item_id=line_item_id,
            fields=sorted(changes),
        )
        return LineItemChangeResult.from_write(write)

    def to_response(self, result: LineItemChangeResult) -> LineItemChangeResponse:
        return change_response(result)
