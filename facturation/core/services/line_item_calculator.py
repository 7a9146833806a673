"""
Line item and invoice total calculation.

Pure functions over ``Decimal``. Amounts are rounded half-up to the cent
in a fixed order: the line amount first, then tax and total from the
rounded amount.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Protocol

from facturation.core.exceptions import LineItemValueError

CENT = Decimal("0.01")
ZERO = Decimal("0.00")
HUNDRED = Decimal("100")


def to_decimal(value: Any) -> Decimal:
    """Coerce ints, floats and strings to Decimal without binary noise."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(repr(value))
    return Decimal(value)


def round2(value: Any) -> Decimal:
    """Round half-up to 2 decimal places."""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class LineAmounts:
    """Derived amounts of a single line item."""

    amount: Decimal
    tax_amount: Decimal
    total: Decimal


@dataclass(frozen=True)
class InvoiceTotals:
    """Aggregated amounts of an invoice's active line items."""

    subtotal_amount: Decimal
    total_tax_amount: Decimal
    total_amount: Decimal


class PricedLine(Protocol):
    amount: Decimal
    tax_amount: Decimal
    total: Decimal
    deleted_at: Any


def calculate_amounts(
    quantity: Any,
    unit_price: Any,
    tax_rate: Any,
    tax_included: bool,
) -> LineAmounts:
    """
    Compute amount, tax and total for one line.

    With ``tax_included`` the price is already gross: no tax is added and
    the total equals the amount.
    """
    amount = round2(to_decimal(quantity) * to_decimal(unit_price))

    if tax_included:
        return LineAmounts(amount=amount, tax_amount=ZERO, total=amount)

    raw_tax = amount * to_decimal(tax_rate) / HUNDRED
    return LineAmounts(
        amount=amount,
        tax_amount=round2(raw_tax),
        total=round2(amount + raw_tax),
    )


def calculate_invoice_totals(line_items: Iterable[PricedLine]) -> InvoiceTotals:
    """Sum amount, tax and total over the non-deleted lines."""
    subtotal = ZERO
    tax = ZERO
    total = ZERO
    for item in line_items:
        if item.deleted_at is not None:
            continue
        subtotal += item.amount
        tax += item.tax_amount
        total += item.total

    return InvoiceTotals(
        subtotal_amount=round2(subtotal),
        total_tax_amount=round2(tax),
        total_amount=round2(total),
    )


def validate_line_item_values(
    quantity: Any = None,
    unit_price: Any = None,
    tax_rate: Any = None,
) -> None:
    """
    Check the pricing inputs of a line item.

    Arguments left as ``None`` are not checked, which lets partial updates
    validate only what they change. All failures are reported together.

    Raises:
        LineItemValueError: if any supplied value is out of range
    """
    errors: list[str] = []
    fields: list[str] = []

    if quantity is not None and to_decimal(quantity) <= 0:
        errors.append("Quantity must be positive")
        fields.append("quantity")
    if unit_price is not None and to_decimal(unit_price) <= 0:
        errors.append("Unit price must be positive")
        fields.append("unit_price")
    if tax_rate is not None and not (0 <= to_decimal(tax_rate) <= 100):
        errors.append("Tax rate must be between 0 and 100")
        fields.append("tax_rate")

    if errors:
        raise LineItemValueError(errors, fields)
