"""Cancelable periodic trigger running on the asyncio event loop."""

from __future__ import annotations

import asyncio
import logging
import numbers
from typing import Callable, Optional


class RainScheduler:
    """Invoke a callback every `period_ms` milliseconds until stopped.

    States are Stopped (``interval is None``) and Running(period_ms).
    Starting while running replaces the previous schedule. Every start and
    stop bumps a generation counter; a tick only fires while its generation
    is current, so no callback runs once :meth:`stop` has returned.
    A callback that raises is logged and ends the schedule.
    """

    def __init__(self):
        self._task: Optional[asyncio.Task] = None
        self._period_ms: Optional[float] = None
        self._generation = 0

    @property
    def interval(self) -> Optional[float]:
        return self._period_ms

    @property
    def running(self) -> bool:
        return self._period_ms is not None

    def start(self, period_ms: float, on_tick: Callable[[], None]) -> None:
        if isinstance(period_ms, bool) or not isinstance(period_ms, numbers.Real):
            raise ValueError(f"period_ms must be a number, got {period_ms!r}")
        if not period_ms > 0:
            raise ValueError("period_ms must be positive")
        loop = asyncio.get_running_loop()

        self.stop()
        self._generation += 1
        self._period_ms = period_ms
        self._task = loop.create_task(self._run(self._generation, period_ms / 1000.0, on_tick))
        logging.info("Rain started (every %s ms)", period_ms)

    def stop(self) -> None:
        if self._task is None:
            return
        self._generation += 1
        task, self._task = self._task, None
        self._period_ms = None
        task.cancel()
        logging.info("Rain stopped")

    async def aclose(self) -> None:
        """Stop and wait for the background task to finish cancelling."""
        task = self._task
        self.stop()
        if task is not None:
            try:
                await task
            except asyncio.CancelledError:
                pass

    async def __aenter__(self) -> "RainScheduler":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def _run(self, generation: int, period: float, on_tick: Callable[[], None]) -> None:
        loop = asyncio.get_running_loop()
        next_at = loop.time() + period
        while True:
            await asyncio.sleep(max(0.0, next_at - loop.time()))
            if generation != self._generation:
                return
            try:
                on_tick()
            except Exception:
                logging.exception("Rain tick failed; stopping rain")
                if generation == self._generation:
                    self._generation += 1
                    self._task = None
                    self._period_ms = None
                return
            next_at += period
            # fell behind by more than a full period: resync instead of bursting
            if next_at < loop.time():
                next_at = loop.time() + period
