"""Invoice line item entity."""

from datetime import UTC, datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field, model_validator

from facturation.core.services.line_item_calculator import calculate_amounts


class LineItem(BaseModel):
    """
    A billable line on an invoice.

    ``amount``, ``tax_amount`` and ``total`` are derived from quantity,
    unit price, tax rate and the tax-included flag on every validation, so
    building a new instance with ``model_validate`` is how an edit
    recomputes them.
    """

    id: int | None = None
    invoice_id: int
    description: str
    quantity: Decimal
    unit_price: Decimal
    tax_rate: Decimal = Decimal("20")
    tax_included: bool = False

    amount: Decimal = Decimal("0.00")
    tax_amount: Decimal = Decimal("0.00")
    total: Decimal = Decimal("0.00")

    line_order: int = 0
    metadata: dict[str, Any] = Field(default_factory=dict)

    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    deleted_at: datetime | None = None

    @model_validator(mode="after")
    def compute_amounts(self) -> "LineItem":
        """Derive amount, tax_amount and total from the pricing inputs."""
        amounts = calculate_amounts(
            self.quantity, self.unit_price, self.tax_rate, self.tax_included
        )
        self.amount = amounts.amount
        self.tax_amount = amounts.tax_amount
        self.total = amounts.total
        return self

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def with_changes(self, **changes: Any) -> "LineItem":
        """Return a revalidated copy with ``changes`` applied."""
        data = self.model_dump()
        data.update(changes)
        return LineItem.model_validate(data)
