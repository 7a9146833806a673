"""Invoice number formatting: ``PREFIX-YYYYMM-NNNNN``."""

from datetime import date


def format_invoice_number(prefix: str, issued_on: date, sequence: int) -> str:
    """
    Build an invoice number.

    The sequence is global and keeps growing across months; the period
    only reflects when the number was issued.
    """
    if sequence < 1:
        raise ValueError("Invoice sequence starts at 1")
    return f"{prefix}-{issued_on:%Y%m}-{sequence:05d}"
