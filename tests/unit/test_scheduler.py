"""Tests for the background overdue sweep scheduler."""

import asyncio
from datetime import UTC, datetime
from unittest.mock import AsyncMock

import pytest

from facturation.application.scheduler import OverdueSweepScheduler
from facturation.application.use_cases.run_overdue_sweep import OverdueSweepResult


@pytest.fixture
def mock_use_case():
    uc = AsyncMock()
    uc.execute.return_value = OverdueSweepResult(run_at=datetime(2024, 3, 15, tzinfo=UTC))
    return uc


class TestOverdueSweepScheduler:
    def test_rejects_non_positive_interval(self, mock_use_case):
        with pytest.raises(ValueError):
            OverdueSweepScheduler(0, use_case=mock_use_case)

    async def test_tick_returns_result(self, mock_use_case):
        scheduler = OverdueSweepScheduler(60, use_case=mock_use_case)

        result = await scheduler.tick()

        assert result is mock_use_case.execute.return_value

    async def test_tick_survives_failures(self, mock_use_case):
        mock_use_case.execute.side_effect = RuntimeError("database locked")
        scheduler = OverdueSweepScheduler(60, use_case=mock_use_case)

        assert await scheduler.tick() is None

    async def test_runs_until_stopped(self, mock_use_case):
        scheduler = OverdueSweepScheduler(0.01, use_case=mock_use_case)

        scheduler.start()
        assert scheduler.is_running
        await asyncio.sleep(0.05)
        await scheduler.stop()

        assert not scheduler.is_running
        assert mock_use_case.execute.await_count >= 2

    async def test_loop_continues_after_failure(self, mock_use_case):
        ok = mock_use_case.execute.return_value
        calls = []

        async def execute():
            calls.append(1)
            if len(calls) == 1:
                raise RuntimeError("boom")
            return ok

        mock_use_case.execute.side_effect = execute
        scheduler = OverdueSweepScheduler(0.01, use_case=mock_use_case)

        scheduler.start()
        await asyncio.sleep(0.05)
        await scheduler.stop()

        assert mock_use_case.execute.await_count >= 2
