"""Unit tests for SQLiteStatusHistoryStore."""

from datetime import UTC, datetime, timedelta

import aiosqlite
import pytest

from facturation.core.entities import InvoiceStatus, StatusHistoryEntry

T0 = datetime(2024, 3, 15, 10, 30, 0, tzinfo=UTC)


def _entry(invoice_id, from_status, to_status, at=T0, user_id=None) -> StatusHistoryEntry:
    return StatusHistoryEntry(
        invoice_id=invoice_id,
        user_id=user_id,
        from_status=from_status,
        to_status=to_status,
        reason="test",
        metadata={"source": "test"},
        created_at=at,
    )


@pytest.fixture
async def ledger_entries(history_store, stored_invoice):
    """DRAFT -> SENT -> PAID, one second apart."""
    s = InvoiceStatus
    return [
        await history_store.append(_entry(stored_invoice.id, s.DRAFT, s.SENT, T0, "u-1")),
        await history_store.append(
            _entry(stored_invoice.id, s.SENT, s.PAID, T0 + timedelta(seconds=1), "u-2")
        ),
    ]


class TestAppend:
    async def test_round_trip(self, history_store, ledger_entries, stored_invoice):
        entries = await history_store.list_for_invoice(stored_invoice.id, order="asc")

        assert entries == ledger_entries
        assert entries[0].metadata == {"source": "test"}


class TestQueries:
    async def test_newest_first_by_default(self, history_store, ledger_entries, stored_invoice):
        entries = await history_store.list_for_invoice(stored_invoice.id)

        assert [e.to_status for e in entries] == [InvoiceStatus.PAID, InvoiceStatus.SENT]

    async def test_same_timestamp_breaks_tie_by_insertion(self, history_store, stored_invoice):
        s = InvoiceStatus
        first = await history_store.append(_entry(stored_invoice.id, s.DRAFT, s.SENT))
        second = await history_store.append(_entry(stored_invoice.id, s.SENT, s.CANCELLED))

        asc = await history_store.list_for_invoice(stored_invoice.id, order="asc")
        desc = await history_store.list_for_invoice(stored_invoice.id, order="desc")

        assert [e.id for e in asc] == [first.id, second.id]
        assert [e.id for e in desc] == [second.id, first.id]

    async def test_paging_and_count(self, history_store, ledger_entries, stored_invoice):
        page = await history_store.list_for_invoice(stored_invoice.id, limit=1, offset=1)

        assert [e.to_status for e in page] == [InvoiceStatus.SENT]
        assert await history_store.count_for_invoice(stored_invoice.id) == 2

    async def test_by_user(self, history_store, ledger_entries):
        entries = await history_store.list_for_user("u-2")

        assert [e.to_status for e in entries] == [InvoiceStatus.PAID]

    async def test_last_to_status(self, history_store, ledger_entries, stored_invoice):
        paid = await history_store.find_last_to_status(stored_invoice.id, InvoiceStatus.PAID)
        overdue = await history_store.find_last_to_status(stored_invoice.id, InvoiceStatus.OVERDUE)

        assert paid.id == ledger_entries[1].id
        assert overdue is None


class TestAppendOnly:
    async def test_update_rejected(self, initialized_db, ledger_entries):
        async with aiosqlite.connect(initialized_db) as conn:
            with pytest.raises(aiosqlite.IntegrityError, match="append-only"):
                await conn.execute("UPDATE invoice_status_history SET reason = 'edited'")

    async def test_delete_rejected(self, initialized_db, ledger_entries):
        async with aiosqlite.connect(initialized_db) as conn:
            with pytest.raises(aiosqlite.IntegrityError, match="append-only"):
                await conn.execute("DELETE FROM invoice_status_history")
