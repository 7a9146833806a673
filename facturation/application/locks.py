"""
Per-invoice locks.

Status changes and line-item mutations on the same invoice run one at a
time inside this process; different invoices never contend. Locks are
held weakly and disappear once no coroutine holds or waits on them.
"""

import asyncio
import weakref
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager


class InvoiceLockRegistry:
    """Hands out one ``asyncio.Lock`` per invoice id."""

    def __init__(self) -> None:
        self._locks: weakref.WeakValueDictionary[int, asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )

    def lock_for(self, invoice_id: int) -> asyncio.Lock:
        lock = self._locks.get(invoice_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[invoice_id] = lock
        return lock

    @asynccontextmanager
    async def hold(self, invoice_id: int) -> AsyncIterator[None]:
        lock = self.lock_for(invoice_id)
        async with lock:
            yield

    def is_locked(self, invoice_id: int) -> bool:
        lock = self._locks.get(invoice_id)
        return lock is not None and lock.locked()

    def __len__(self) -> int:
        return len(self._locks)
