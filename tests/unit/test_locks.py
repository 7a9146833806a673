"""Tests for the per-invoice lock registry."""

import asyncio
import gc

import pytest

from facturation.application.locks import InvoiceLockRegistry


@pytest.fixture
def locks():
    return InvoiceLockRegistry()


class TestInvoiceLockRegistry:
    async def test_same_invoice_serialized(self, locks):
        order = []

        async def worker(name):
            async with locks.hold(1):
                order.append(f"{name}-start")
                await asyncio.sleep(0.01)
                order.append(f"{name}-end")

        await asyncio.gather(worker("a"), worker("b"))

        assert order in (
            ["a-start", "a-end", "b-start", "b-end"],
            ["b-start", "b-end", "a-start", "a-end"],
        )

    async def test_different_invoices_do_not_contend(self, locks):
        async with locks.hold(1):
            assert locks.is_locked(1)
            assert not locks.is_locked(2)
            async with locks.hold(2):
                assert locks.is_locked(2)

    async def test_same_lock_while_referenced(self, locks):
        lock = locks.lock_for(3)
        assert locks.lock_for(3) is lock

    async def test_locks_released_when_unused(self, locks):
        async with locks.hold(7):
            assert len(locks) == 1

        gc.collect()
        assert len(locks) == 0
