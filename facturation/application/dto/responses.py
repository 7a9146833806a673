"""Response DTOs for API endpoints.

Pydantic v2 models for API response serialization.
These are the ONLY contracts between use cases and API layer.
Amounts are exposed as JSON numbers rounded to the cent.
"""

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, Field

from facturation.core.entities.client import Client
from facturation.core.entities.invoice import Invoice, InvoiceStatus
from facturation.core.entities.line_item import LineItem
from facturation.core.entities.status_history import StatusHistoryEntry
from facturation.core.services.line_item_calculator import InvoiceTotals
from facturation.core.services.status_workflow import transition_description


class ClientResponse(BaseModel):
    """Client response DTO."""

    id: int
    name: str
    email: str
    phone: str | None = None
    address: str | None = None
    postal_code: str | None = None
    city: str | None = None
    country: str | None = None
    company_name: str | None = None
    siret: str | None = None
    vat_number: str | None = None
    status: str
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, client: Client) -> "ClientResponse":
        return cls(
            id=client.id,  # type: ignore[arg-type]
            name=client.name,
            email=client.email,
            phone=client.phone,
            address=client.address,
            postal_code=client.postal_code,
            city=client.city,
            country=client.country,
            company_name=client.company_name,
            siret=client.siret,
            vat_number=client.vat_number,
            status=client.status.value,
            metadata=client.metadata,
            created_at=client.created_at,
            updated_at=client.updated_at,
        )


class ClientListResponse(BaseModel):
    clients: list[ClientResponse]
    total: int


class LineItemResponse(BaseModel):
    """Line item with its derived amounts."""

    id: int
    invoice_id: int
    description: str
    quantity: float
    unit_price: float
    tax_rate: float
    tax_included: bool
    amount: float = Field(..., description="quantity x unit_price, rounded")
    tax_amount: float
    total: float
    line_order: int
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, item: LineItem) -> "LineItemResponse":
        return cls(
            id=item.id,  # type: ignore[arg-type]
            invoice_id=item.invoice_id,
            description=item.description,
            quantity=item.quantity,
            unit_price=item.unit_price,
            tax_rate=item.tax_rate,
            tax_included=item.tax_included,
            amount=item.amount,
            tax_amount=item.tax_amount,
            total=item.total,
            line_order=item.line_order,
            metadata=item.metadata,
            created_at=item.created_at,
            updated_at=item.updated_at,
        )


class InvoiceTotalsResponse(BaseModel):
    """Aggregate totals of an invoice."""

    subtotal_amount: float
    total_tax_amount: float
    total_amount: float

    @classmethod
    def from_totals(cls, totals: InvoiceTotals) -> "InvoiceTotalsResponse":
        return cls(
            subtotal_amount=totals.subtotal_amount,
            total_tax_amount=totals.total_tax_amount,
            total_amount=totals.total_amount,
        )


class InvoiceResponse(BaseModel):
    """Invoice response DTO."""

    id: int
    client_id: int | None = None
    invoice_number: str | None = None
    invoice_date: date
    due_date: date
    status: InvoiceStatus
    description: str | None = None
    notes: str | None = None
    currency: str
    payment_terms: str | None = None
    payment_instructions: str | None = None
    subtotal_amount: float
    tax_amount: float
    total_amount: float
    sent_at: datetime | None = None
    paid_at: datetime | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime
    updated_at: datetime
    line_items: list[LineItemResponse] | None = Field(
        default=None, description="Active line items, when requested"
    )

    @classmethod
    def from_entity(
        cls, invoice: Invoice, line_items: list[LineItem] | None = None
    ) -> "InvoiceResponse":
        return cls(
            id=invoice.id,  # type: ignore[arg-type]
            client_id=invoice.client_id,
            invoice_number=invoice.invoice_number,
            invoice_date=invoice.invoice_date,
            due_date=invoice.due_date,
            status=invoice.status,
            description=invoice.description,
            notes=invoice.notes,
            currency=invoice.currency,
            payment_terms=invoice.payment_terms,
            payment_instructions=invoice.payment_instructions,
            subtotal_amount=invoice.subtotal_amount,
            tax_amount=invoice.tax_amount,
            total_amount=invoice.total_amount,
            sent_at=invoice.sent_at,
            paid_at=invoice.paid_at,
            metadata=invoice.metadata,
            created_at=invoice.created_at,
            updated_at=invoice.updated_at,
            line_items=(
                [LineItemResponse.from_entity(i) for i in line_items]
                if line_items is not None
                else None
            ),
        )


class InvoiceListResponse(BaseModel):
    invoices: list[InvoiceResponse]
    total: int
    limit: int
    offset: int


class LineItemListResponse(BaseModel):
    line_items: list[LineItemResponse]
    invoice_totals: InvoiceTotalsResponse


class LineItemChangeResponse(BaseModel):
    """Result of adding, editing or removing a line item."""

    line_item: LineItemResponse | None = Field(
        default=None, description="The item after the change; null after removal"
    )
    invoice_totals: InvoiceTotalsResponse


class StatusHistoryEntryResponse(BaseModel):
    """One ledger entry."""

    id: int
    invoice_id: int
    user_id: str | None = None
    from_status: InvoiceStatus | None = None
    to_status: InvoiceStatus
    description: str
    reason: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime

    @classmethod
    def from_entity(cls, entry: StatusHistoryEntry) -> "StatusHistoryEntryResponse":
        description = (
            transition_description(entry.from_status, entry.to_status)
            if entry.from_status is not None
            else f"Created as {entry.to_status.value}"
        )
        return cls(
            id=entry.id,  # type: ignore[arg-type]
            invoice_id=entry.invoice_id,
            user_id=entry.user_id,
            from_status=entry.from_status,
            to_status=entry.to_status,
            description=description,
            reason=entry.reason,
            metadata=entry.metadata,
            created_at=entry.created_at,
        )


class StatusChangeResponse(BaseModel):
    """Outcome of an accepted status change."""

    invoice: InvoiceResponse
    history_entry: StatusHistoryEntryResponse
    allowed_next_statuses: list[InvoiceStatus]


class PaginationResponse(BaseModel):
    limit: int
    offset: int
    total: int


class StatusHistoryResponse(BaseModel):
    """Ledger page of an invoice plus its current workflow position."""

    invoice_id: int
    current_status: InvoiceStatus
    allowed_next_statuses: list[InvoiceStatus]
    history: list[StatusHistoryEntryResponse]
    pagination: PaginationResponse


class TransitionOptionResponse(BaseModel):
    status: InvoiceStatus
    description: str
    automatic: bool = False


class AllowedTransitionsResponse(BaseModel):
    invoice_id: int
    current_status: InvoiceStatus
    is_overdue: bool
    transitions: list[TransitionOptionResponse]


class OverdueSweepResponse(BaseModel):
    """Outcome of an overdue sweep."""

    updated_count: int
    skipped_count: int
    updated_invoice_ids: list[int] = Field(default_factory=list)
    run_at: datetime


class DatabaseHealthResponse(BaseModel):
    """Reachability and schema state of the invoice database."""

    name: str = "sqlite"
    available: bool
    latency_ms: float | None = None
    schema_version: str | None = Field(
        default=None, description="Latest applied migration"
    )
    latest_version: str | None = Field(
        default=None, description="Latest bundled migration"
    )
    error: str | None = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(..., description="healthy, degraded or unhealthy")
    version: str
    uptime_seconds: float | None = None
    database: DatabaseHealthResponse | None = Field(
        default=None, description="Database status"
    )


class ErrorResponse(BaseModel):
    """Standardized error response DTO.

    Every error response includes:
    - error_code: machine-readable code (e.g. ILLEGAL_TRANSITION)
    - message: human-readable description
    - hint: suggested recovery action
    - path: request path that triggered the error
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error description")
    hint: str | None = Field(default=None, description="Suggested recovery action")
    detail: str | None = Field(default=None, description="Additional details")
    details: dict[str, Any] = Field(
        default_factory=dict, description="Structured error details"
    )
    path: str | None = Field(default=None, description="Request path")
    timestamp: datetime = Field(default_factory=datetime.now)
