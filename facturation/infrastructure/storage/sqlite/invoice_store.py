"""SQLite implementation of invoice storage."""

from collections.abc import Awaitable, Callable
from datetime import date, datetime
from typing import Any

import aiosqlite

from facturation.config import get_logger
from facturation.core.entities.invoice import Invoice, InvoiceStatus, StatusTimestamp
from facturation.core.entities.line_item import LineItem
from facturation.core.entities.status_history import StatusHistoryEntry
from facturation.core.exceptions import ConcurrentModificationError, InvoiceNotFoundError
from facturation.core.interfaces.invoice_store import IInvoiceStore, LineItemWrite
from facturation.core.services.invoice_numbering import format_invoice_number
from facturation.core.services.line_item_calculator import (
    InvoiceTotals,
    calculate_invoice_totals,
)
from facturation.infrastructure.storage.sqlite.columns import (
    date_from_db,
    date_to_db,
    dt_from_db,
    dt_to_db,
    json_from_db,
    json_to_db,
    money_from_db,
    money_to_db,
)
from facturation.infrastructure.storage.sqlite.connection import (
    get_connection,
    get_transaction,
)
from facturation.infrastructure.storage.sqlite.line_item_store import SQLiteLineItemStore
from facturation.infrastructure.storage.sqlite.status_history_store import (
    SQLiteStatusHistoryStore,
)

logger = get_logger(__name__)

# Columns the general update may touch; status, stamps and totals are excluded
UPDATABLE_COLUMNS = frozenset({
    "client_id",
    "invoice_date",
    "due_date",
    "description",
    "notes",
    "currency",
    "payment_terms",
    "payment_instructions",
    "metadata",
})


def _encode_column(column: str, value: Any) -> Any:
    if value is None:
        return None
    if column in ("invoice_date", "due_date"):
        return date_to_db(value)
    if column == "metadata":
        return json_to_db(value)
    return value


class SQLiteInvoiceStore(IInvoiceStore):
    """SQLite implementation of invoice storage."""

    async def create_invoice(self, invoice: Invoice, number_prefix: str = "INV") -> Invoice:
        async with get_transaction(immediate=True) as conn:
            cursor = await conn.execute(
                "SELECT COALESCE(MAX(invoice_sequence), 0) FROM invoices"
            )
            row = await cursor.fetchone()
            sequence = row[0] + 1

            invoice_number = invoice.invoice_number or format_invoice_number(
                number_prefix, invoice.created_at.date(), sequence
            )

            cursor = await conn.execute(
                """
                INSERT INTO invoices (
                    client_id, invoice_number, invoice_sequence,
                    invoice_date, due_date, status,
                    description, notes, currency,
                    payment_terms, payment_instructions,
                    subtotal_amount, tax_amount, total_amount,
                    sent_at, paid_at, metadata,
                    created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    invoice.client_id,
                    invoice_number,
                    sequence,
                    date_to_db(invoice.invoice_date),
                    date_to_db(invoice.due_date),
                    invoice.status.value,
                    invoice.description,
                    invoice.notes,
                    invoice.currency,
                    invoice.payment_terms,
                    invoice.payment_instructions,
                    money_to_db(invoice.subtotal_amount),
                    money_to_db(invoice.tax_amount),
                    money_to_db(invoice.total_amount),
                    dt_to_db(invoice.sent_at),
                    dt_to_db(invoice.paid_at),
                    json_to_db(invoice.metadata),
                    dt_to_db(invoice.created_at),
                    dt_to_db(invoice.updated_at),
                ),
            )
            created = invoice.model_copy(
                update={
                    "id": cursor.lastrowid,
                    "invoice_number": invoice_number,
                    "invoice_sequence": sequence,
                }
            )

        logger.info(
            "invoice_created",
            invoice_id=created.id,
            invoice_number=created.invoice_number,
            client_id=created.client_id,
        )
        return created

    async def get_invoice(self, invoice_id: int) -> Invoice | None:
        async with get_connection() as conn:
            return await self._fetch(conn, invoice_id)

    async def list_invoices(
        self,
        status: InvoiceStatus | None = None,
        client_id: int | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[Invoice]:
        where, params = self._filters(status, client_id)
        async with get_connection() as conn:
            cursor = await conn.execute(
                f"""
                SELECT * FROM invoices
                WHERE {where}
                ORDER BY created_at DESC, id DESC
                LIMIT ? OFFSET ?
                """,
                (*params, limit, offset),
            )
            rows = await cursor.fetchall()
            return [self._row_to_invoice(r) for r in rows]

    async def count_invoices(
        self,
        status: InvoiceStatus | None = None,
        client_id: int | None = None,
    ) -> int:
        where, params = self._filters(status, client_id)
        async with get_connection() as conn:
            cursor = await conn.execute(
                f"SELECT COUNT(*) FROM invoices WHERE {where}",
                params,
            )
            row = await cursor.fetchone()
            return row[0] if row else 0

    async def update_invoice(
        self, invoice_id: int, fields: dict[str, Any], updated_at: datetime
    ) -> Invoice:
        unknown = set(fields) - UPDATABLE_COLUMNS
        if unknown:
            raise ValueError(f"Invoice fields not updatable: {sorted(unknown)}")

        columns = sorted(fields)
        assignments = ", ".join(f"{c} = ?" for c in columns)
        params = [_encode_column(c, fields[c]) for c in columns]

        async with get_transaction() as conn:
            cursor = await conn.execute(
                f"""
                UPDATE invoices SET {assignments}{", " if columns else ""}updated_at = ?
                WHERE id = ? AND deleted_at IS NULL
                """,
                (*params, dt_to_db(updated_at), invoice_id),
            )
            if cursor.rowcount == 0:
                raise InvoiceNotFoundError(invoice_id)
            invoice = await self._fetch(conn, invoice_id)

        logger.info("invoice_updated", invoice_id=invoice_id, fields=columns)
        return invoice  # type: ignore[return-value]

    async def soft_delete_invoice(self, invoice_id: int, deleted_at: datetime) -> int:
        async with get_transaction(immediate=True) as conn:
            cursor = await conn.execute(
                """
                UPDATE invoices SET deleted_at = ?
                WHERE id = ? AND deleted_at IS NULL
                """,
                (dt_to_db(deleted_at), invoice_id),
            )
            if cursor.rowcount == 0:
                raise InvoiceNotFoundError(invoice_id)
            removed = await SQLiteLineItemStore.mark_all_deleted(conn, invoice_id, deleted_at)

        logger.info("invoice_deleted", invoice_id=invoice_id, line_items=removed)
        return removed

    async def add_line_item(self, item: LineItem) -> LineItemWrite:
        async def write(conn: aiosqlite.Connection) -> LineItem:
            return await SQLiteLineItemStore.insert_item(conn, item)

        result = await self._commit_with_totals(item.invoice_id, item.updated_at, write)
        logger.info(
            "line_item_created",
            line_item_id=result.line_item.id,  # type: ignore[union-attr]
            invoice_id=item.invoice_id,
            line_order=result.line_item.line_order,  # type: ignore[union-attr]
            total=str(item.total),
        )
        return result

    async def edit_line_item(self, item: LineItem, changed_at: datetime) -> LineItemWrite:
        async def write(conn: aiosqlite.Connection) -> LineItem:
            return await SQLiteLineItemStore.update_item(conn, item, changed_at)

        result = await self._commit_with_totals(item.invoice_id, changed_at, write)
        logger.info("line_item_updated", line_item_id=item.id, invoice_id=item.invoice_id)
        return result

    async def remove_line_item(
        self, invoice_id: int, line_item_id: int, changed_at: datetime
    ) -> LineItemWrite:
        async def write(conn: aiosqlite.Connection) -> None:
            await SQLiteLineItemStore.mark_deleted(conn, invoice_id, line_item_id, changed_at)

        result = await self._commit_with_totals(invoice_id, changed_at, write)
        logger.info("line_item_deleted", line_item_id=line_item_id, invoice_id=invoice_id)
        return result

    async def recompute_totals(self, invoice_id: int, changed_at: datetime) -> LineItemWrite:
        async def write(conn: aiosqlite.Connection) -> None:
            return None

        return await self._commit_with_totals(invoice_id, changed_at, write)

    async def _commit_with_totals(
        self,
        invoice_id: int,
        changed_at: datetime,
        write: Callable[[aiosqlite.Connection], Awaitable[LineItem | None]],
    ) -> LineItemWrite:
        """
        Run ``write`` and the totals rewrite in one immediate transaction.

        Any failure after ``write`` rolls the item change back with it.
        """
        async with get_transaction(immediate=True) as conn:
            if await self._fetch(conn, invoice_id) is None:
                raise InvoiceNotFoundError(invoice_id)

            line_item = await write(conn)
            totals = await self._rewrite_totals(conn, invoice_id, changed_at)
            invoice = await self._fetch(conn, invoice_id)

        return LineItemWrite(invoice=invoice, totals=totals, line_item=line_item)  # type: ignore[arg-type]

    async def _rewrite_totals(
        self, conn: aiosqlite.Connection, invoice_id: int, changed_at: datetime
    ) -> InvoiceTotals:
        items = await SQLiteLineItemStore.select_active(conn, invoice_id)
        totals = calculate_invoice_totals(items)
        cursor = await conn.execute(
            """
            UPDATE invoices
            SET subtotal_amount = ?, tax_amount = ?, total_amount = ?, updated_at = ?
            WHERE id = ? AND deleted_at IS NULL
            """,
            (
                money_to_db(totals.subtotal_amount),
                money_to_db(totals.total_tax_amount),
                money_to_db(totals.total_amount),
                dt_to_db(changed_at),
                invoice_id,
            ),
        )
        if cursor.rowcount == 0:
            raise InvoiceNotFoundError(invoice_id)

        logger.debug(
            "invoice_totals_rewritten",
            invoice_id=invoice_id,
            line_items=len(items),
            total=str(totals.total_amount),
        )
        return totals

    async def find_past_due(self, status: InvoiceStatus, before: date) -> list[Invoice]:
        async with get_connection() as conn:
            cursor = await conn.execute(
                """
                SELECT * FROM invoices
                WHERE status = ? AND due_date < ? AND deleted_at IS NULL
                ORDER BY due_date ASC, id ASC
                """,
                (InvoiceStatus(status).value, date_to_db(before)),
            )
            rows = await cursor.fetchall()
            return [self._row_to_invoice(r) for r in rows]

    async def commit_status_change(
        self,
        invoice_id: int,
        expected_status: InvoiceStatus,
        new_status: InvoiceStatus,
        timestamp_field: StatusTimestamp | None,
        changed_at: datetime,
        entry: StatusHistoryEntry,
    ) -> tuple[Invoice, StatusHistoryEntry]:
        assignments = ["status = ?", "updated_at = ?"]
        params: list[Any] = [InvoiceStatus(new_status).value, dt_to_db(changed_at)]
        if timestamp_field is not None:
            assignments.append(f"{StatusTimestamp(timestamp_field).value} = ?")
            params.append(dt_to_db(changed_at))

        async with get_transaction() as conn:
            cursor = await conn.execute(
                f"""
                UPDATE invoices SET {", ".join(assignments)}
                WHERE id = ? AND status = ? AND deleted_at IS NULL
                """,
                (*params, invoice_id, InvoiceStatus(expected_status).value),
            )
            if cursor.rowcount != 1:
                raise ConcurrentModificationError(invoice_id, InvoiceStatus(expected_status).value)

            saved_entry = await SQLiteStatusHistoryStore.insert_entry(conn, entry)
            invoice = await self._fetch(conn, invoice_id)

        return invoice, saved_entry  # type: ignore[return-value]

    async def _fetch(self, conn: aiosqlite.Connection, invoice_id: int) -> Invoice | None:
        cursor = await conn.execute(
            "SELECT * FROM invoices WHERE id = ? AND deleted_at IS NULL",
            (invoice_id,),
        )
        row = await cursor.fetchone()
        return self._row_to_invoice(row) if row else None

    @staticmethod
    def _filters(
        status: InvoiceStatus | None, client_id: int | None
    ) -> tuple[str, list[Any]]:
        clauses = ["deleted_at IS NULL"]
        params: list[Any] = []
        if status is not None:
            clauses.append("status = ?")
            params.append(InvoiceStatus(status).value)
        if client_id is not None:
            clauses.append("client_id = ?")
            params.append(client_id)
        return " AND ".join(clauses), params

    @staticmethod
    def _row_to_invoice(row: aiosqlite.Row) -> Invoice:
        return Invoice(
            id=row["id"],
            client_id=row["client_id"],
            invoice_number=row["invoice_number"],
            invoice_sequence=row["invoice_sequence"],
            invoice_date=date_from_db(row["invoice_date"]),
            due_date=date_from_db(row["due_date"]),
            status=InvoiceStatus(row["status"]),
            description=row["description"],
            notes=row["notes"],
            currency=row["currency"],
            payment_terms=row["payment_terms"],
            payment_instructions=row["payment_instructions"],
            subtotal_amount=money_from_db(row["subtotal_amount"]),
            tax_amount=money_from_db(row["tax_amount"]),
            total_amount=money_from_db(row["total_amount"]),
            sent_at=dt_from_db(row["sent_at"]),
            paid_at=dt_from_db(row["paid_at"]),
            metadata=json_from_db(row["metadata"]),
            created_at=dt_from_db(row["created_at"]),
            updated_at=dt_from_db(row["updated_at"]),
            deleted_at=dt_from_db(row["deleted_at"]),
        )
