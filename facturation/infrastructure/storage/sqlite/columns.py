"""
Column encoding shared by the SQLite stores.

Money is stored as decimal TEXT so nothing passes through binary floats.
Timestamps are fixed-width ISO-8601 with microseconds, which keeps
lexicographic order equal to chronological order.
"""

import json
from datetime import UTC, date, datetime
from decimal import Decimal
from typing import Any


def dt_to_db(value: datetime | None) -> str | None:
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).isoformat(timespec="microseconds")


def dt_from_db(value: str | None) -> datetime | None:
    if not value:
        return None
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def date_to_db(value: date) -> str:
    return value.isoformat()


def date_from_db(value: str) -> date:
    return date.fromisoformat(value)


def money_to_db(value: Decimal) -> str:
    return str(value)


def money_from_db(value: Any) -> Decimal:
    if value is None:
        return Decimal("0.00")
    return Decimal(str(value))


def json_to_db(value: dict[str, Any] | None) -> str:
    return json.dumps(value or {}, default=str)


def json_from_db(value: str | None) -> dict[str, Any]:
    if not value:
        return {}
    return json.loads(value)
