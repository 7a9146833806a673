"""Abstract interface for the invoice status ledger."""

from abc import ABC, abstractmethod
from typing import Literal

from facturation.core.entities.invoice import InvoiceStatus
from facturation.core.entities.status_history import StatusHistoryEntry

SortOrder = Literal["asc", "desc"]


class IStatusHistoryStore(ABC):
    """
    Append-only storage of status transitions.

    There is deliberately no update or delete operation. Reads are ordered
    by ``created_at`` with insertion order as the tiebreak.
    """

    @abstractmethod
    async def append(self, entry: StatusHistoryEntry) -> StatusHistoryEntry:
        """Insert an entry and return it with its id."""
        pass

    @abstractmethod
    async def list_for_invoice(
        self,
        invoice_id: int,
        limit: int = 100,
        offset: int = 0,
        order: SortOrder = "desc",
    ) -> list[StatusHistoryEntry]:
        """Entries of an invoice."""
        pass

    @abstractmethod
    async def count_for_invoice(self, invoice_id: int) -> int:
        """Number of entries recorded for an invoice."""
        pass

    @abstractmethod
    async def list_for_user(
        self, user_id: str, limit: int = 100, offset: int = 0
    ) -> list[StatusHistoryEntry]:
        """Entries recorded by a user, newest first."""
        pass

    @abstractmethod
    async def find_last_to_status(
        self, invoice_id: int, status: InvoiceStatus
    ) -> StatusHistoryEntry | None:
        """Most recent entry of an invoice with ``to_status == status``."""
        pass
