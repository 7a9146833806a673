"""Tests for line item endpoints."""

from datetime import datetime
from decimal import Decimal
from unittest.mock import MagicMock, patch

import pytest
from httpx import AsyncClient

import facturation.application.use_cases.add_line_item as add_line_item_module
from facturation.api.dependencies import (
    get_add_line_item_use_case,
    get_invoices,
    get_line_items,
    get_remove_line_item_use_case,
    get_update_line_item_use_case,
)
from facturation.application.locks import InvoiceLockRegistry
from facturation.application.use_cases import (
    AddLineItemUseCase,
    RemoveLineItemUseCase,
    UpdateLineItemUseCase,
)
from facturation.core.entities import Invoice, LineItem
from facturation.core.exceptions import InvoiceNotFoundError, LineItemNotFoundError
from facturation.core.interfaces import LineItemWrite
from facturation.core.services.line_item_calculator import calculate_invoice_totals


class MemoryInvoiceLines:
    """One invoice and its line items, kept in dicts."""

    def __init__(self, invoice: Invoice):
        self.invoice: Invoice | None = invoice
        self.items: dict[int, LineItem] = {}

    async def get_invoice(self, invoice_id: int) -> Invoice | None:
        return self.invoice

    async def get_line_item(self, line_item_id: int) -> LineItem | None:
        item = self.items.get(line_item_id)
        return item if item is not None and item.deleted_at is None else None

    async def find_active_line_items(self, invoice_id: int) -> list[LineItem]:
        return [
            i for i in self.items.values()
            if i.invoice_id == invoice_id and i.deleted_at is None
        ]

    async def _written(self, invoice_id: int, changed_at: datetime, item=None) -> LineItemWrite:
        if self.invoice is None:
            raise InvoiceNotFoundError(invoice_id)
        totals = calculate_invoice_totals(await self.find_active_line_items(invoice_id))
        self.invoice = self.invoice.model_copy(update={
            "total_amount": totals.total_amount,
            "updated_at": changed_at,
        })
        return LineItemWrite(invoice=self.invoice, totals=totals, line_item=item)

    async def add_line_item(self, item: LineItem) -> LineItemWrite:
        if self.invoice is None:
            raise InvoiceNotFoundError(item.invoice_id)
        item_id = len(self.items) + 1
        created = item.model_copy(update={"id": item_id, "line_order": item_id - 1})
        self.items[item_id] = created
        return await self._written(item.invoice_id, item.updated_at, created)

    async def edit_line_item(self, item: LineItem, changed_at: datetime) -> LineItemWrite:
        if await self.get_line_item(item.id) is None:
            raise LineItemNotFoundError(item.id, item.invoice_id)
        self.items[item.id] = item.model_copy(update={"updated_at": changed_at})
        return await self._written(item.invoice_id, changed_at, self.items[item.id])

    async def remove_line_item(
        self, invoice_id: int, line_item_id: int, changed_at: datetime
    ) -> LineItemWrite:
        item = await self.get_line_item(line_item_id)
        if item is None or item.invoice_id != invoice_id:
            raise LineItemNotFoundError(line_item_id, invoice_id)
        self.items[line_item_id] = item.model_copy(update={"deleted_at": changed_at})
        return await self._written(invoice_id, changed_at)


@pytest.fixture
def store(api_invoice) -> MemoryInvoiceLines:
    return MemoryInvoiceLines(api_invoice)


@pytest.fixture
def wired(override, store, clock):
    locks = InvoiceLockRegistry()

    settings = MagicMock()
    settings.billing.default_tax_rate = Decimal("20")

    override(get_invoices, store)
    override(get_line_items, store)
    override(
        get_add_line_item_use_case,
        AddLineItemUseCase(invoice_store=store, locks=locks, clock=clock),
    )
    override(
        get_update_line_item_use_case,
        UpdateLineItemUseCase(
            invoice_store=store, line_item_store=store, locks=locks, clock=clock
        ),
    )
    override(
        get_remove_line_item_use_case,
        RemoveLineItemUseCase(invoice_store=store, locks=locks, clock=clock),
    )

    with patch.object(add_line_item_module, "get_settings", return_value=settings):
        yield


async def _add(api_client: AsyncClient, quantity, unit_price, **extra):
    return await api_client.post(
        "/api/invoices/1/line-items",
        json={"description": "Prestation", "quantity": quantity, "unit_price": unit_price, **extra},
    )


class TestAddLineItem:
    async def test_totals_accumulate(self, api_client: AsyncClient, wired):
        await _add(api_client, 5, 100)
        response = await _add(api_client, 3, 200)

        assert response.status_code == 201
        data = response.json()
        assert data["line_item"]["amount"] == 600.0
        assert data["line_item"]["tax_rate"] == 20.0
        assert data["line_item"]["line_order"] == 1
        assert data["invoice_totals"] == {
            "subtotal_amount": 1100.0,
            "total_tax_amount": 220.0,
            "total_amount": 1320.0,
        }

    async def test_tax_included_price(self, api_client: AsyncClient, wired):
        response = await _add(api_client, 1, 120, tax_included=True)

        item = response.json()["line_item"]
        assert item["tax_amount"] == 0.0
        assert item["total"] == 120.0

    @pytest.mark.parametrize(
        "body",
        [
            {"quantity": 0, "unit_price": 100},
            {"quantity": 1, "unit_price": -5},
            {"quantity": 1, "unit_price": 100, "tax_rate": 120},
        ],
    )
    async def test_invalid_values(self, api_client: AsyncClient, wired, store, body):
        response = await _add(api_client, **body)

        assert response.status_code == 400
        assert response.json()["error_code"] == "VALUE_ERROR"
        assert store.items == {}

    async def test_unknown_invoice(self, api_client: AsyncClient, wired, store):
        store.invoice = None

        response = await _add(api_client, 1, 100)

        assert response.status_code == 404
        assert response.json()["error_code"] == "INVOICE_NOT_FOUND"


class TestListAndGet:
    async def test_list_in_order(self, api_client: AsyncClient, wired):
        await _add(api_client, 1, 10)
        await _add(api_client, 2, 10)

        response = await api_client.get("/api/invoices/1/line-items")

        data = response.json()
        assert [i["line_order"] for i in data["line_items"]] == [0, 1]
        assert data["invoice_totals"]["total_amount"] == 36.0

    async def test_item_of_other_invoice(self, api_client: AsyncClient, wired):
        await _add(api_client, 1, 10)

        response = await api_client.get("/api/invoices/2/line-items/1")

        assert response.status_code == 404
        assert response.json()["error_code"] == "LINE_ITEM_NOT_FOUND"


class TestEditAndRemove:
    async def test_update_keeps_omitted_fields(self, api_client: AsyncClient, wired):
        await _add(api_client, 5, 100)

        response = await api_client.put(
            "/api/invoices/1/line-items/1", json={"quantity": 2}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["line_item"]["unit_price"] == 100.0
        assert data["line_item"]["amount"] == 200.0
        assert data["invoice_totals"]["total_amount"] == 240.0

    async def test_update_rejects_bad_value(self, api_client: AsyncClient, wired):
        await _add(api_client, 5, 100)

        response = await api_client.put(
            "/api/invoices/1/line-items/1", json={"tax_rate": -1}
        )

        assert response.status_code == 400

    async def test_remove(self, api_client: AsyncClient, wired):
        await _add(api_client, 5, 100)
        await _add(api_client, 3, 200)

        response = await api_client.delete("/api/invoices/1/line-items/1")

        assert response.status_code == 200
        data = response.json()
        assert data["line_item"] is None
        assert data["invoice_totals"]["total_amount"] == 720.0

        again = await api_client.delete("/api/invoices/1/line-items/1")
        assert again.status_code == 404

    async def test_edit_stamped_with_the_clock(self, api_client: AsyncClient, wired, store, clock):
        await _add(api_client, 5, 100)
        clock.advance(120)

        response = await api_client.put(
            "/api/invoices/1/line-items/1", json={"description": "Audit"}
        )

        stamped = datetime.fromisoformat(response.json()["line_item"]["updated_at"])
        assert stamped == clock.now()
        assert store.invoice.updated_at == clock.now()
