"""Create Invoice Use Case - drafts an invoice with its initial line items."""

from dataclasses import dataclass, field
from datetime import timedelta

from facturation.application.dto.requests import CreateInvoiceRequest
from facturation.application.dto.responses import InvoiceResponse
from facturation.application.locks import InvoiceLockRegistry
from facturation.application.services import get_invoice_locks
from facturation.application.use_cases.add_line_item import (
    AddLineItemUseCase,
    validate_create_request,
)
from facturation.config import get_logger, get_settings
from facturation.core.clock import Clock, get_clock
from facturation.core.entities.invoice import Invoice, InvoiceStatus
from facturation.core.entities.line_item import LineItem
from facturation.core.exceptions import ClientNotFoundError, ValidationError
from facturation.core.interfaces import IClientStore, IInvoiceStore

logger = get_logger(__name__)


@dataclass
class CreateInvoiceResult:
    """Result of creating an invoice."""

    invoice: Invoice
    line_items: list[LineItem] = field(default_factory=list)


class CreateInvoiceUseCase:
    """Create a DRAFT invoice, number it and add its initial line items."""

    def __init__(
        self,
        invoice_store: IInvoiceStore | None = None,
        client_store: IClientStore | None = None,
        locks: InvoiceLockRegistry | None = None,
        clock: Clock | None = None,
    ):
        self._invoice_store = invoice_store
        self._client_store = client_store
        self._locks = locks
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

    def _get_locks(self) -> InvoiceLockRegistry:
        if self._locks is None:
            self._locks = get_invoice_locks()
        return self._locks

    async def execute(self, request: CreateInvoiceRequest) -> CreateInvoiceResult:
        """
        Execute create invoice use case.

        Args:
            request: Invoice header and initial line items

        Returns:
            CreateInvoiceResult with the stored invoice and its line items

        Raises:
            ClientNotFoundError: If the client is missing or archived
            ValidationError: If the due date precedes the invoice date
            LineItemValueError: If an initial line item has invalid values
        """
        billing = get_settings().billing
        clock = self._clock or get_clock()

        logger.info(
            "create_invoice_started",
            client_id=request.client_id,
            line_items=len(request.line_items),
        )

        client_store = await self._get_client_store()
        client = await client_store.get_client(request.client_id)
        if client is None or client.is_archived:
            raise ClientNotFoundError(request.client_id)

        invoice_date = request.invoice_date or clock.today()
        due_date = request.due_date or invoice_date + timedelta(days=billing.default_due_days)
        if due_date < invoice_date:
            raise ValidationError(
                "due_date", "Due date must be on or after the invoice date", due_date
            )

        # Reject bad items before anything is written
        for item_request in request.line_items:
            validate_create_request(item_request)

        now = clock.now()
        invoice = Invoice(
            client_id=request.client_id,
            invoice_date=invoice_date,
            due_date=due_date,
            status=InvoiceStatus.DRAFT,
            description=request.description,
            notes=request.notes,
            currency=(request.currency or billing.default_currency).upper(),
            payment_terms=request.payment_terms,
            payment_instructions=request.payment_instructions,
            metadata=request.metadata,
            created_at=now,
            updated_at=now,
        )

        invoice_store = await self._get_invoice_store()
        created = await invoice_store.create_invoice(
            invoice, number_prefix=billing.invoice_number_prefix
        )
        invoice_id: int = created.id  # type: ignore[assignment]

        line_items: list[LineItem] = []
        if request.line_items:
            add_item = AddLineItemUseCase(
                invoice_store=invoice_store,
                locks=self._get_locks(),
                clock=clock,
            )
            async with self._get_locks().hold(invoice_id):
                for item_request in request.line_items:
                    change = await add_item.apply(invoice_id, item_request)
                    line_items.append(change.line_item)  # type: ignore[arg-type]
                    created = change.invoice

        logger.info(
            "create_invoice_complete",
            invoice_id=invoice_id,
            invoice_number=created.invoice_number,
            total=str(created.total_amount),
        )

        return CreateInvoiceResult(invoice=created, line_items=line_items)

    def to_response(self, result: CreateInvoiceResult) -> InvoiceResponse:
        """Convert to API response format."""
        return InvoiceResponse.from_entity(result.invoice, result.line_items)
