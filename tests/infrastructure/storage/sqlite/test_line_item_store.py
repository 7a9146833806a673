"""Unit tests for SQLiteLineItemStore."""

from datetime import UTC, datetime
from decimal import Decimal

import pytest

from facturation.core.entities import LineItem
from facturation.core.exceptions import LineItemNotFoundError

CHANGED_AT = datetime(2024, 3, 16, 9, 0, 0, tzinfo=UTC)


def _item(invoice_id, quantity="5", unit_price="100", **kwargs) -> LineItem:
    return LineItem(
        invoice_id=invoice_id,
        description=kwargs.pop("description", "Développement"),
        quantity=Decimal(quantity),
        unit_price=Decimal(unit_price),
        **kwargs,
    )


async def _add(invoice_store, invoice_id, **kwargs) -> LineItem:
    write = await invoice_store.add_line_item(_item(invoice_id, **kwargs))
    return write.line_item


class TestInsertLineItem:
    async def test_assigns_id_and_order(self, invoice_store, stored_invoice):
        first = await _add(invoice_store, stored_invoice.id)
        second = await _add(invoice_store, stored_invoice.id)

        assert first.id is not None
        assert first.line_order == 0
        assert second.line_order == 1

    async def test_amounts_stored_exactly(self, invoice_store, line_item_store, stored_invoice):
        created = await _add(invoice_store, stored_invoice.id, quantity="3", unit_price="33.33")

        fetched = await line_item_store.get_line_item(created.id)

        assert fetched.quantity == Decimal("3")
        assert fetched.unit_price == Decimal("33.33")
        assert fetched.amount == Decimal("99.99")
        assert fetched.tax_amount == Decimal("20.00")
        assert fetched.total == Decimal("119.99")

    async def test_order_never_reused_after_delete(self, invoice_store, stored_invoice):
        first = await _add(invoice_store, stored_invoice.id)
        second = await _add(invoice_store, stored_invoice.id)
        await invoice_store.remove_line_item(stored_invoice.id, second.id, CHANGED_AT)

        third = await _add(invoice_store, stored_invoice.id)

        assert third.line_order == 2
        assert third.line_order not in (first.line_order, second.line_order)


class TestFindActiveLineItems:
    async def test_ordered_and_filtered(self, invoice_store, line_item_store, stored_invoice):
        a = await _add(invoice_store, stored_invoice.id, description="A")
        b = await _add(invoice_store, stored_invoice.id, description="B")
        c = await _add(invoice_store, stored_invoice.id, description="C")
        await invoice_store.remove_line_item(stored_invoice.id, b.id, CHANGED_AT)

        items = await line_item_store.find_active_line_items(stored_invoice.id)

        assert [i.id for i in items] == [a.id, c.id]
        assert await line_item_store.get_line_item(b.id) is None

    async def test_double_delete(self, invoice_store, stored_invoice):
        item = await _add(invoice_store, stored_invoice.id)
        await invoice_store.remove_line_item(stored_invoice.id, item.id, CHANGED_AT)

        with pytest.raises(LineItemNotFoundError):
            await invoice_store.remove_line_item(stored_invoice.id, item.id, CHANGED_AT)


class TestUpdateLineItem:
    async def test_persists_recomputed_amounts(
        self, invoice_store, line_item_store, stored_invoice
    ):
        item = await _add(invoice_store, stored_invoice.id)

        write = await invoice_store.edit_line_item(
            item.with_changes(tax_included=True), CHANGED_AT
        )
        fetched = await line_item_store.get_line_item(item.id)

        assert write.line_item.updated_at == CHANGED_AT
        assert fetched.tax_included is True
        assert fetched.tax_amount == Decimal("0.00")
        assert fetched.total == Decimal("500.00")
        assert fetched.updated_at == CHANGED_AT

    async def test_deleted_item(self, invoice_store, stored_invoice):
        item = await _add(invoice_store, stored_invoice.id)
        await invoice_store.remove_line_item(stored_invoice.id, item.id, CHANGED_AT)

        with pytest.raises(LineItemNotFoundError):
            await invoice_store.edit_line_item(
                item.with_changes(quantity=Decimal("1")), CHANGED_AT
            )

    async def test_item_of_another_invoice(
        self, invoice_store, line_item_store, stored_invoice, new_invoice
    ):
        other = await invoice_store.create_invoice(new_invoice)
        item = await _add(invoice_store, stored_invoice.id)

        with pytest.raises(LineItemNotFoundError):
            await invoice_store.remove_line_item(other.id, item.id, CHANGED_AT)

        assert await line_item_store.get_line_item(item.id) is not None
