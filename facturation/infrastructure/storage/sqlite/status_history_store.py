"""SQLite implementation of the invoice status ledger."""

import aiosqlite

from facturation.config import get_logger
from facturation.core.entities.invoice import InvoiceStatus
from facturation.core.entities.status_history import StatusHistoryEntry
from facturation.core.interfaces.status_history_store import (
    IStatusHistoryStore,
    SortOrder,
)
from facturation.infrastructure.storage.sqlite.columns import (
    dt_from_db,
    dt_to_db,
    json_from_db,
    json_to_db,
)
from facturation.infrastructure.storage.sqlite.connection import (
    get_connection,
    get_transaction,
)

logger = get_logger(__name__)

_ORDER_SQL = {
    "asc": "ORDER BY created_at ASC, id ASC",
    "desc": "ORDER BY created_at DESC, id DESC",
}


class SQLiteStatusHistoryStore(IStatusHistoryStore):
    """Append-only ledger backed by ``invoice_status_history``."""

    @staticmethod
    async def insert_entry(
        conn: aiosqlite.Connection, entry: StatusHistoryEntry
    ) -> StatusHistoryEntry:
        """Insert on an existing connection so callers can share a transaction."""
        cursor = await conn.execute(
            """
            INSERT INTO invoice_status_history (
                invoice_id, user_id, from_status, to_status,
                reason, metadata, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                entry.invoice_id,
                entry.user_id,
                entry.from_status.value if entry.from_status else None,
                entry.to_status.value,
                entry.reason,
                json_to_db(entry.metadata),
                dt_to_db(entry.created_at),
            ),
        )
        return entry.model_copy(update={"id": cursor.lastrowid})

    async def append(self, entry: StatusHistoryEntry) -> StatusHistoryEntry:
        async with get_transaction() as conn:
            saved = await self.insert_entry(conn, entry)
        logger.info(
            "status_history_entry_created",
            entry_id=saved.id,
            invoice_id=saved.invoice_id,
            to_status=saved.to_status.value,
        )
        return saved

    async def list_for_invoice(
        self,
        invoice_id: int,
        limit: int = 100,
        offset: int = 0,
        order: SortOrder = "desc",
    ) -> list[StatusHistoryEntry]:
        async with get_connection() as conn:
            cursor = await conn.execute(
                f"""
                SELECT * FROM invoice_status_history
                WHERE invoice_id = ?
                {_ORDER_SQL[order]}
                LIMIT ? OFFSET ?
                """,
                (invoice_id, limit, offset),
            )
            rows = await cursor.fetchall()
            return [self._row_to_entry(r) for r in rows]

    async def count_for_invoice(self, invoice_id: int) -> int:
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT COUNT(*) FROM invoice_status_history WHERE invoice_id = ?",
                (invoice_id,),
            )
            row = await cursor.fetchone()
            return row[0] if row else 0

    async def list_for_user(
        self, user_id: str, limit: int = 100, offset: int = 0
    ) -> list[StatusHistoryEntry]:
        async with get_connection() as conn:
            cursor = await conn.execute(
                f"""
                SELECT * FROM invoice_status_history
                WHERE user_id = ?
                {_ORDER_SQL["desc"]}
                LIMIT ? OFFSET ?
                """,
                (user_id, limit, offset),
            )
            rows = await cursor.fetchall()
            return [self._row_to_entry(r) for r in rows]

    async def find_last_to_status(
        self, invoice_id: int, status: InvoiceStatus
    ) -> StatusHistoryEntry | None:
        async with get_connection() as conn:
            cursor = await conn.execute(
                f"""
                SELECT * FROM invoice_status_history
                WHERE invoice_id = ? AND to_status = ?
                {_ORDER_SQL["desc"]}
                LIMIT 1
                """,
                (invoice_id, InvoiceStatus(status).value),
            )
            row = await cursor.fetchone()
            return self._row_to_entry(row) if row else None

    @staticmethod
    def _row_to_entry(row: aiosqlite.Row) -> StatusHistoryEntry:
        return StatusHistoryEntry(
            id=row["id"],
            invoice_id=row["invoice_id"],
            user_id=row["user_id"],
            from_status=InvoiceStatus(row["from_status"]) if row["from_status"] else None,
            to_status=InvoiceStatus(row["to_status"]),
            reason=row["reason"],
            metadata=json_from_db(row["metadata"]),
            created_at=dt_from_db(row["created_at"]),
        )
