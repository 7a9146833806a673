"""Update Invoice Use Case."""

from dataclasses import dataclass

from facturation.application.dto.requests import UpdateInvoiceRequest
from facturation.application.dto.responses import InvoiceResponse
from facturation.config import get_logger
from facturation.core.clock import Clock, get_clock
from facturation.core.entities.invoice import Invoice
from facturation.core.exceptions import (
    ClientNotFoundError,
    InvoiceNotFoundError,
    ValidationError,
)
from facturation.core.interfaces import IClientStore, IInvoiceStore

logger = get_logger(__name__)


@dataclass
class UpdateInvoiceResult:
    invoice: Invoice
    updated_fields: list[str]


class UpdateInvoiceUseCase:
    """
    Edit the descriptive fields of an invoice.

    Status, the sent/paid stamps and the totals are out of reach here:
    they change only through the status workflow and totals recompute.
    """

    def __init__(
        self,
        invoice_store: IInvoiceStore | None = None,
        client_store: IClientStore | None = None,
        clock: Clock | None = None,
    ):
        self._invoice_store = invoice_store
        self._client_store = client_store
        self._clock = clock

    async def _get_invoice_store(self) -> IInvoiceStore:
        if self._invoice_store is None:
            from facturation.infrastructure.storage.sqlite import get_invoice_store

            self._invoice_store = await get_invoice_store()
        return self._invoice_store

    async def _get_client_store(self) -> IClientStore:
        if self._client_store is None:
            from facturation.infrastructure.storage.sqlite import get_client_store

            self._client_store = await get_client_store()
        return self._client_store

    async def execute(
        self, invoice_id: int, request: UpdateInvoiceRequest
    ) -> UpdateInvoiceResult:
        """
        Apply a partial update.

        Raises:
            InvoiceNotFoundError: If the invoice is missing or deleted
            ClientNotFoundError: If a new client_id is missing or archived
            ValidationError: If the resulting due date precedes the invoice date
        """
        store = await self._get_invoice_store()
        invoice = await store.get_invoice(invoice_id)
        if invoice is None:
            raise InvoiceNotFoundError(invoice_id)

        fields = request.model_dump(exclude_unset=True)

        for required in ("client_id", "invoice_date", "due_date", "currency"):
            if required in fields and fields[required] is None:
                raise ValidationError(required, "Field cannot be cleared")

        new_client_id = fields.get("client_id")
        if new_client_id is not None and new_client_id != invoice.client_id:
            client_store = await self._get_client_store()
            client = await client_store.get_client(new_client_id)
            if client is None or client.is_archived:
                raise ClientNotFoundError(new_client_id)

        invoice_date = fields.get("invoice_date", invoice.invoice_date)
        due_date = fields.get("due_date", invoice.due_date)
        if due_date < invoice_date:
            raise ValidationError(
                "due_date", "Due date must be on or after the invoice date", due_date
            )

        if "currency" in fields:
            fields["currency"] = fields["currency"].upper()

        updated = await store.update_invoice(
            invoice_id, fields, (self._clock or get_clock()).now()
        )

        logger.info("update_invoice_complete", invoice_id=invoice_id, fields=sorted(fields))

        return UpdateInvoiceResult(invoice=updated, updated_fields=sorted(fields))

    def to_response(self, result: UpdateInvoiceResult) -> InvoiceResponse:
        return InvoiceResponse.from_entity(result.invoice)
