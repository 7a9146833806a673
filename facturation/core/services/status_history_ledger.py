"""
Invoice status ledger.

Append-only record of accepted status transitions, used for the audit
trail and for "has this invoice ever been in status X" queries.
"""

from typing import Any

from facturation.config import get_logger
from facturation.core.clock import Clock, get_clock
from facturation.core.entities.invoice import InvoiceStatus
from facturation.core.entities.status_history import StatusHistoryEntry
from facturation.core.interfaces.status_history_store import (
    IStatusHistoryStore,
    SortOrder,
)

logger = get_logger(__name__)


class StatusHistoryLedger:
    """Reads and appends status history entries through a store."""

    def __init__(self, store: IStatusHistoryStore, clock: Clock | None = None):
        self._store = store
        self._clock = clock or get_clock()

    def build_entry(
        self,
        invoice_id: int,
        user_id: str | None,
        to_status: InvoiceStatus,
        from_status: InvoiceStatus | None = None,
        reason: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> StatusHistoryEntry:
        """Build an unsaved entry stamped with the current time."""
        return StatusHistoryEntry(
            invoice_id=invoice_id,
            user_id=user_id,
            from_status=from_status,
            to_status=to_status,
            reason=reason,
            metadata=metadata or {},
            created_at=self._clock.now(),
        )

    async def append(
        self,
        invoice_id: int,
        user_id: str | None,
        to_status: InvoiceStatus,
        from_status: InvoiceStatus | None = None,
        reason: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> StatusHistoryEntry:
        """Record a transition on its own."""
        entry = self.build_entry(
            invoice_id, user_id, to_status, from_status, reason, metadata
        )
        saved = await self._store.append(entry)
        logger.debug(
            "status_history_appended",
            invoice_id=invoice_id,
            entry_id=saved.id,
            to_status=to_status.value,
        )
        return saved

    async def history_for(
        self,
        invoice_id: int,
        limit: int = 100,
        offset: int = 0,
        order: SortOrder = "desc",
    ) -> list[StatusHistoryEntry]:
        return await self._store.list_for_invoice(
            invoice_id, limit=limit, offset=offset, order=order
        )

    async def count_for(self, invoice_id: int) -> int:
        return await self._store.count_for_invoice(invoice_id)

    async def recent_transitions(
        self, invoice_id: int, limit: int = 5
    ) -> list[StatusHistoryEntry]:
        return await self._store.list_for_invoice(invoice_id, limit=limit, order="desc")

    async def user_history(
        self, user_id: str, limit: int = 100, offset: int = 0
    ) -> list[StatusHistoryEntry]:
        return await self._store.list_for_user(user_id, limit=limit, offset=offset)

    async def last_transition_to(
        self, invoice_id: int, status: InvoiceStatus
    ) -> StatusHistoryEntry | None:
        return await self._store.find_last_to_status(invoice_id, status)

    async def has_been_in_status(self, invoice_id: int, status: InvoiceStatus) -> bool:
        """
        Whether the invoice has ever held ``status``.

        Every invoice starts in DRAFT without a ledger entry, so DRAFT is
        always true.
        """
        if status == InvoiceStatus.DRAFT:
            return True
        return await self._store.find_last_to_status(invoice_id, status) is not None
