"""Invoice domain entities."""

from datetime import UTC, date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class InvoiceStatus(str, Enum):
    """Lifecycle status of an invoice."""

    DRAFT = "DRAFT"
    SENT = "SENT"
    PAID = "PAID"
    OVERDUE = "OVERDUE"
    CANCELLED = "CANCELLED"


class StatusTimestamp(str, Enum):
    """Invoice columns stamped by a status transition."""

    SENT_AT = "sent_at"
    PAID_AT = "paid_at"


class Invoice(BaseModel):
    """
    An invoice billed to a client.

    ``status``, ``sent_at`` and ``paid_at`` only change through the status
    workflow. The amount fields are aggregates of the active line items and
    are only written by a totals recompute.
    """

    id: int | None = None
    client_id: int | None = None
    invoice_number: str | None = None
    invoice_sequence: int = 0

    invoice_date: date
    due_date: date
    status: InvoiceStatus = InvoiceStatus.DRAFT

    description: str | None = None
    notes: str | None = None
    currency: str = "EUR"
    payment_terms: str | None = None
    payment_instructions: str | None = None

    subtotal_amount: Decimal = Decimal("0.00")
    tax_amount: Decimal = Decimal("0.00")
    total_amount: Decimal = Decimal("0.00")

    sent_at: datetime | None = None
    paid_at: datetime | None = None

    metadata: dict[str, Any] = Field(default_factory=dict)

    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    deleted_at: datetime | None = None

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    @property
    def is_terminal(self) -> bool:
        """Cancelled invoices accept no further transitions."""
        return self.status == InvoiceStatus.CANCELLED
