"""Client entity."""

from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class ClientStatus(str, Enum):
    """Client account status."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    ARCHIVED = "archived"


class Client(BaseModel):
    """A customer that invoices are billed to."""

    id: int | None = None
    name: str
    email: str
    phone: str | None = None
    address: str | None = None
    postal_code: str | None = None
    city: str | None = None
    country: str = "France"
    company_name: str | None = None
    siret: str | None = None
    vat_number: str | None = None
    status: ClientStatus = ClientStatus.ACTIVE
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @property
    def is_archived(self) -> bool:
        return self.status == ClientStatus.ARCHIVED
