"""
In-process overdue sweep scheduler.

Runs ``RunOverdueSweepUseCase`` every ``interval_seconds`` on the event
loop until stopped. A failing run is logged and the loop carries on.
"""

import asyncio
import contextlib

from facturation.application.use_cases.run_overdue_sweep import (
    OverdueSweepResult,
    RunOverdueSweepUseCase,
)
from facturation.config import get_logger

logger = get_logger(__name__)


class OverdueSweepScheduler:
    """Periodic background task around the overdue sweep."""

    def __init__(
        self,
        interval_seconds: float,
        use_case: RunOverdueSweepUseCase | None = None,
    ):
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self._interval = interval_seconds
        self._use_case = use_case or RunOverdueSweepUseCase()
        self._stop_event = asyncio.Event()
        self._task: asyncio.Task[None] | None = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def tick(self) -> OverdueSweepResult | None:
        """Run one sweep; returns None when it failed."""
        try:
            return await self._use_case.execute()
        except Exception:
            logger.exception("overdue_sweep_failed")
            return None

    def start(self) -> None:
        if self.is_running:
            return
        self._stop_event.clear()
        self._task = asyncio.create_task(self._run_loop(), name="overdue-sweep")
        logger.info("overdue_sweep_scheduler_started", interval_seconds=self._interval)

    async def stop(self) -> None:
        self._stop_event.set()
        if self._task is not None:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
            self._task = None
        logger.info("overdue_sweep_scheduler_stopped")

    async def _run_loop(self) -> None:
        while not self._stop_event.is_set():
            await self.tick()
            with contextlib.suppress(asyncio.TimeoutError):
                await asyncio.wait_for(self._stop_event.wait(), timeout=self._interval)
