"""
Tribunal - Auto-Resolution Scheduler
====================================

Background loop that sweeps due escalations on a fixed interval.

DESIGN:
    One task, one sweep at a time. run_once() takes a lock without
    waiting; if a sweep (scheduled or manual) is still running, the tick
    is skipped. An escalation can resolve up to one interval after its
    deadline.
"""

import asyncio
from typing import TYPE_CHECKING, Optional

from tribunal.core.logger import logger
from tribunal.services.escalation.resolver import EscalationResolver, SweepResult

if TYPE_CHECKING:
    from tribunal.bot import TribunalBot


class AutoResolutionScheduler:
    """
    Periodic driver for EscalationResolver.run_sweep().

    Attributes:
        bot: Main bot instance.
        resolver: Escalation resolver.
        interval: Seconds between sweeps.
        task: Background task reference.
        running: Whether the scheduler is active.
    """

    # =========================================================================
    # Initialization
    # =========================================================================

    def __init__(self, bot: "TribunalBot", resolver: EscalationResolver, interval: int) -> None:
        self.bot = bot
        self.resolver = resolver
        self.interval = interval
        self.task: Optional[asyncio.Task] = None
        self.running: bool = False
        self._sweep_lock = asyncio.Lock()

    # =========================================================================
    # Lifecycle Management
    # =========================================================================

    async def start(self) -> None:
        """
        Start the background task, replacing any previous one.
        """
        if self.task and not self.task.done():
            self.task.cancel()

        self.running = True
        self.task = asyncio.create_task(self._scheduler_loop())

        logger.tree("Auto-Resolution Scheduler Started", [
            ("Check Interval", f"{self.interval}s"),
            ("Status", "Running"),
        ], emoji="⏰")

    async def stop(self) -> None:
        """Stop the background task."""
        self.running = False

        if self.task and not self.task.done():
            self.task.cancel()
            try:
                await self.task
            except asyncio.CancelledError:
                pass

        logger.info("Auto-Resolution Scheduler Stopped")

    # =========================================================================
    # Scheduler Loop
    # =========================================================================

    async def _scheduler_loop(self) -> None:
        """
        Main loop. Keeps running when a sweep raises.
        """
        await self.bot.wait_until_ready()

        while self.running:
            try:
                await self.run_once()
                await asyncio.sleep(self.interval)
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error("Auto-Resolution Scheduler Error", [
                    ("Error Type", type(e).__name__),
                    ("Error", str(e)[:100]),
                ])
                await asyncio.sleep(self.interval)

    async def run_once(self) -> Optional[SweepResult]:
        """
        Run one sweep unless one is already in progress.

        Returns:
            The sweep summary, or None if the tick was skipped.
        """
        if self._sweep_lock.locked():
            logger.debug("Escalation Sweep Skipped (previous still running)")
            return None

        async with self._sweep_lock:
            return await self.resolver.run_sweep()


__all__ = ["AutoResolutionScheduler"]
