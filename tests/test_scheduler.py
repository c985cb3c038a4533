"""
Tribunal - Auto-Resolution Scheduler Tests
==========================================

Tests for the background sweep loop.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from tribunal.services.escalation.resolver import SweepResult
from tribunal.services.escalation.scheduler import AutoResolutionScheduler


@pytest.fixture
def sweep_resolver():
    resolver = MagicMock()
    resolver.run_sweep = AsyncMock(return_value=SweepResult(processed=1, succeeded=1))
    return resolver


class TestRunOnce:
    """Tests for run_once()."""

    @pytest.mark.asyncio
    async def test_returns_sweep_result(self, mock_bot, sweep_resolver):
        scheduler = AutoResolutionScheduler(mock_bot, sweep_resolver, interval=60)
        result = await scheduler.run_once()
        assert result.succeeded == 1
        sweep_resolver.run_sweep.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_skips_while_sweep_running(self, mock_bot, sweep_resolver):
        scheduler = AutoResolutionScheduler(mock_bot, sweep_resolver, interval=60)
        async with scheduler._sweep_lock:
            assert await scheduler.run_once() is None
        sweep_resolver.run_sweep.assert_not_called()


class TestLifecycle:
    """Tests for start() and stop()."""

    @pytest.mark.asyncio
    async def test_start_sweeps_after_ready(self, mock_bot, sweep_resolver):
        scheduler = AutoResolutionScheduler(mock_bot, sweep_resolver, interval=3600)
        await scheduler.start()
        for _ in range(5):
            await asyncio.sleep(0)

        assert scheduler.running is True
        mock_bot.wait_until_ready.assert_awaited_once()
        sweep_resolver.run_sweep.assert_awaited_once()

        await scheduler.stop()
        assert scheduler.running is False
        assert scheduler.task.done()

    @pytest.mark.asyncio
    async def test_loop_survives_sweep_error(self, mock_bot, sweep_resolver):
        sweep_resolver.run_sweep.side_effect = RuntimeError("boom")
        scheduler = AutoResolutionScheduler(mock_bot, sweep_resolver, interval=3600)
        await scheduler.start()
        for _ in range(5):
            await asyncio.sleep(0)

        assert not scheduler.task.done()
        await scheduler.stop()

    @pytest.mark.asyncio
    async def test_stop_without_start(self, mock_bot, sweep_resolver):
        scheduler = AutoResolutionScheduler(mock_bot, sweep_resolver, interval=60)
        await scheduler.stop()
        assert scheduler.task is None
