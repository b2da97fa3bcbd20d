# state.py
"""Rain session: one gauge fed by manual drops and the rain scheduler."""

from __future__ import annotations

import logging
from typing import Optional

from .gauge import RainGauge
from .sampler import rain
from .scheduler import RainScheduler


class RainingError(RuntimeError):
    """Raised when a manual drop is requested while it is raining."""


class RainSession:
    """Centralized simulation state for the server."""

    def __init__(self, gauge: Optional[RainGauge] = None,
                 scheduler: Optional[RainScheduler] = None,
                 rain_batch_size: int = 100):
        self.gauge = gauge if gauge is not None else RainGauge()
        self.scheduler = scheduler if scheduler is not None else RainScheduler()
        self.rain_batch_size = rain_batch_size
        # Action tag of the append in progress, read by gauge listeners.
        self.current_action: Optional[str] = None

    @property
    def raining(self) -> bool:
        return self.scheduler.running

    @property
    def interval(self) -> Optional[float]:
        return self.scheduler.interval

    def drop(self, count: int) -> None:
        """Add `count` drops by hand. Refused while it rains."""
        if self.raining:
            logging.warning("Refusing manual drop of %s while raining", count)
            raise RainingError("Stop the rain before adding drops by hand.")
        self._append("drop", count)

    def start_rain(self, interval_ms: float) -> None:
        self.scheduler.start(interval_ms, self._tick)

    def stop_rain(self) -> None:
        self.scheduler.stop()

    async def aclose(self) -> None:
        await self.scheduler.aclose()

    def _tick(self) -> None:
        self._append("rain", self.rain_batch_size)

    def _append(self, action: str, count: int) -> None:
        batch = rain(count)
        self.current_action = action
        try:
            self.gauge.append(batch)
        finally:
            self.current_action = None
