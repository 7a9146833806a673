"""Invoice status history (ledger) entity."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from facturation.core.entities.invoice import InvoiceStatus


class StatusHistoryEntry(BaseModel):
    """One accepted status transition. Immutable once written."""

    model_config = ConfigDict(frozen=True)

    id: int | None = None
    invoice_id: int
    user_id: str | None = None
    from_status: InvoiceStatus | None = None
    to_status: InvoiceStatus
    reason: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime
