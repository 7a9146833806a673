"""Request DTOs for API endpoints.

Pydantic v2 models for API request validation.
These are the ONLY contracts between API and use cases.
"""

from datetime import date
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from facturation.core.entities.client import ClientStatus
from facturation.core.entities.invoice import InvoiceStatus


class CreateClientRequest(BaseModel):
    """Request to create a client."""

    name: str = Field(..., min_length=1, max_length=255, examples=["Atelier Dupont"])
    email: str = Field(
        ...,
        max_length=255,
        pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$",
        examples=["compta@dupont.fr"],
    )
    phone: str | None = Field(default=None, max_length=20)
    address: str | None = None
    postal_code: str | None = Field(default=None, max_length=10)
    city: str | None = Field(default=None, max_length=100)
    country: str = Field(default="France", max_length=100)
    company_name: str | None = Field(default=None, max_length=255)
    siret: str | None = Field(default=None, max_length=14)
    vat_number: str | None = Field(default=None, max_length=20)
    metadata: dict[str, Any] = Field(default_factory=dict)


class UpdateClientRequest(BaseModel):
    """Partial update of a client; omitted fields are left unchanged."""

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, min_length=1, max_length=255)
    email: str | None = Field(
        default=None,
        max_length=255,
        pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$",
    )
    phone: str | None = Field(default=None, max_length=20)
    address: str | None = None
    postal_code: str | None = Field(default=None, max_length=10)
    city: str | None = Field(default=None, max_length=100)
    country: str | None = Field(default=None, max_length=100)
    company_name: str | None = Field(default=None, max_length=255)
    siret: str | None = Field(default=None, max_length=14)
    vat_number: str | None = Field(default=None, max_length=20)
    status: ClientStatus | None = Field(
        default=None, description="active or inactive; archive with DELETE"
    )
    metadata: dict[str, Any] | None = None

    @field_validator("status")
    @classmethod
    def status_not_archived(cls, value: ClientStatus | None) -> ClientStatus | None:
        if value == ClientStatus.ARCHIVED:
            raise ValueError("Clients are archived with DELETE /api/clients/{id}")
        return value


class CreateLineItemRequest(BaseModel):
    """
    Request to add a line item.

    Numeric ranges are checked by the use case so they surface as
    ``VALUE_ERROR`` rather than schema errors.
    """

    description: str = Field(
        ..., min_length=1, max_length=500, examples=["Développement site web"]
    )
    quantity: Decimal = Field(..., description="Positive quantity", examples=[5])
    unit_price: Decimal = Field(..., description="Positive unit price", examples=[100])
    tax_rate: Decimal | None = Field(
        default=None,
        description="Tax percentage 0-100 (defaults to the configured rate)",
        examples=[20],
    )
    tax_included: bool = Field(
        default=False, description="Unit price already includes tax"
    )
    metadata: dict[str, Any] = Field(default_factory=dict)


class UpdateLineItemRequest(BaseModel):
    """Partial update of a line item; omitted fields are left unchanged."""

    model_config = ConfigDict(extra="forbid")

    description: str | None = Field(default=None, min_length=1, max_length=500)
    quantity: Decimal | None = None
    unit_price: Decimal | None = None
    tax_rate: Decimal | None = None
    tax_included: bool | None = None
    metadata: dict[str, Any] | None = None


class CreateInvoiceRequest(BaseModel):
    """Request to create a draft invoice."""

    client_id: int = Field(..., description="Client billed by the invoice")
    invoice_date: date | None = Field(
        default=None, description="Defaults to today"
    )
    due_date: date | None = Field(
        default=None, description="Defaults to invoice date + configured days"
    )
    description: str | None = Field(default=None, max_length=2000)
    notes: str | None = Field(default=None, max_length=5000)
    currency: str | None = Field(
        default=None, min_length=3, max_length=3, examples=["EUR"]
    )
    payment_terms: str | None = Field(default=None, max_length=100)
    payment_instructions: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    line_items: list[CreateLineItemRequest] = Field(
        default_factory=list, description="Initial line items"
    )

    @model_validator(mode="after")
    def check_dates(self) -> "CreateInvoiceRequest":
        if self.invoice_date and self.due_date and self.due_date < self.invoice_date:
            raise ValueError("due_date must be on or after invoice_date")
        return self


class UpdateInvoiceRequest(BaseModel):
    """
    Partial update of an invoice's descriptive fields.

    Status is not accepted here; it only changes through the status
    endpoint.
    """

    model_config = ConfigDict(extra="forbid")

    client_id: int | None = None
    invoice_date: date | None = None
    due_date: date | None = None
    description: str | None = Field(default=None, max_length=2000)
    notes: str | None = Field(default=None, max_length=5000)
    currency: str | None = Field(default=None, min_length=3, max_length=3)
    payment_terms: str | None = Field(default=None, max_length=100)
    payment_instructions: str | None = None
    metadata: dict[str, Any] | None = None


class ChangeStatusRequest(BaseModel):
    """Request to move an invoice to another status."""

    status: InvoiceStatus = Field(..., description="Requested status", examples=["SENT"])
    reason: str | None = Field(
        default=None, max_length=500, examples=["Sent to client by email"]
    )
    metadata: dict[str, Any] = Field(default_factory=dict)
