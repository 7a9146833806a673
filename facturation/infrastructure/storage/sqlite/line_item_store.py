"""SQLite implementation of line item storage."""

from datetime import datetime

import aiosqlite

from facturation.core.entities.line_item import LineItem
from facturation.core.exceptions import LineItemNotFoundError
from facturation.core.interfaces.line_item_store import ILineItemStore
from facturation.infrastructure.storage.sqlite.columns import (
    dt_from_db,
    dt_to_db,
    json_from_db,
    json_to_db,
    money_from_db,
    money_to_db,
)
from facturation.infrastructure.storage.sqlite.connection import get_connection

_ACTIVE_SQL = """
    SELECT * FROM line_items
    WHERE invoice_id = ? AND deleted_at IS NULL
    ORDER BY line_order ASC
"""


class SQLiteLineItemStore(ILineItemStore):
    """
    SQLite implementation of line item storage.

    The write helpers run on a caller's connection so the invoice store can
    pair each item change with its totals rewrite in one transaction.
    """

    @staticmethod
    async def insert_item(conn: aiosqlite.Connection, item: LineItem) -> LineItem:
        """
        Insert a line item at the end of its invoice.

        The order is one past the highest order ever used on the invoice,
        soft-deleted rows included, so orders are never reused.
        """
        cursor = await conn.execute(
            "SELECT MAX(line_order) FROM line_items WHERE invoice_id = ?",
            (item.invoice_id,),
        )
        row = await cursor.fetchone()
        line_order = 0 if row is None or row[0] is None else row[0] + 1

        cursor = await conn.execute(
            """
            INSERT INTO line_items (
                invoice_id, description, quantity, unit_price,
                tax_rate, tax_included, amount, tax_amount, total,
                line_order, metadata, created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                item.invoice_id,
                item.description,
                money_to_db(item.quantity),
                money_to_db(item.unit_price),
                money_to_db(item.tax_rate),
                int(item.tax_included),
                money_to_db(item.amount),
                money_to_db(item.tax_amount),
                money_to_db(item.total),
                line_order,
                json_to_db(item.metadata),
                dt_to_db(item.created_at),
                dt_to_db(item.updated_at),
            ),
        )
        return item.model_copy(update={"id": cursor.lastrowid, "line_order": line_order})

    @staticmethod
    async def update_item(
        conn: aiosqlite.Connection, item: LineItem, updated_at: datetime
    ) -> LineItem:
        cursor = await conn.execute(
            """
            UPDATE line_items
            SET description = ?, quantity = ?, unit_price = ?,
                tax_rate = ?, tax_included = ?,
                amount = ?, tax_amount = ?, total = ?,
                metadata = ?, updated_at = ?
            WHERE id = ? AND invoice_id = ? AND deleted_at IS NULL
            """,
            (
                item.description,
                money_to_db(item.quantity),
                money_to_db(item.unit_price),
                money_to_db(item.tax_rate),
                int(item.tax_included),
                money_to_db(item.amount),
                money_to_db(item.tax_amount),
                money_to_db(item.total),
                json_to_db(item.metadata),
                dt_to_db(updated_at),
                item.id,
                item.invoice_id,
            ),
        )
        if cursor.rowcount == 0:
            raise LineItemNotFoundError(item.id, item.invoice_id)  # type: ignore[arg-type]
        return item.model_copy(update={"updated_at": updated_at})

    @staticmethod
    async def mark_deleted(
        conn: aiosqlite.Connection,
        invoice_id: int,
        line_item_id: int,
        deleted_at: datetime,
    ) -> None:
        cursor = await conn.execute(
            """
            UPDATE line_items SET deleted_at = ?
            WHERE id = ? AND invoice_id = ? AND deleted_at IS NULL
            """,
            (dt_to_db(deleted_at), line_item_id, invoice_id),
        )
        if cursor.rowcount == 0:
            raise LineItemNotFoundError(line_item_id, invoice_id)

    @staticmethod
    async def mark_all_deleted(
        conn: aiosqlite.Connection, invoice_id: int, deleted_at: datetime
    ) -> int:
        cursor = await conn.execute(
            """
            UPDATE line_items SET deleted_at = ?
            WHERE invoice_id = ? AND deleted_at IS NULL
            """,
            (dt_to_db(deleted_at), invoice_id),
        )
        return cursor.rowcount

    @classmethod
    async def select_active(
        cls, conn: aiosqlite.Connection, invoice_id: int
    ) -> list[LineItem]:
        cursor = await conn.execute(_ACTIVE_SQL, (invoice_id,))
        rows = await cursor.fetchall()
        return [cls._row_to_line_item(r) for r in rows]

    async def get_line_item(self, line_item_id: int) -> LineItem | None:
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM line_items WHERE id = ? AND deleted_at IS NULL",
                (line_item_id,),
            )
            row = await cursor.fetchone()
            return self._row_to_line_item(row) if row else None

    async def find_active_line_items(self, invoice_id: int) -> list[LineItem]:
        async with get_connection() as conn:
            return await self.select_active(conn, invoice_id)

    @staticmethod
    def _row_to_line_item(row: aiosqlite.Row) -> LineItem:
        return LineItem(
            id=row["id"],
            invoice_id=row["invoice_id"],
            description=row["description"],
            quantity=money_from_db(row["quantity"]),
            unit_price=money_from_db(row["unit_price"]),
            tax_rate=money_from_db(row["tax_rate"]),
            tax_included=bool(row["tax_included"]),
            line_order=row["line_order"],
            metadata=json_from_db(row["metadata"]),
            created_at=dt_from_db(row["created_at"]),
            updated_at=dt_from_db(row["updated_at"]),
            deleted_at=dt_from_db(row["deleted_at"]),
        )
