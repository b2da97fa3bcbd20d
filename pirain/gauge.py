"""Accumulated raindrops and the Pi approximation derived from them."""

from __future__ import annotations

import logging
import math
from typing import Any, Callable, Dict, Iterable, List, Tuple

from .sampler import Raindrop

Listener = Callable[[List[Raindrop]], None]


class RainGauge:
    """Append-only collection of raindrops.

    The gauge is the only owner of the collection. Readers receive copies,
    and the only mutation is :meth:`append`.
    """

    def __init__(self):
        self._drops: List[Raindrop] = []
        self._inside = 0
        self._listeners: List[Listener] = []

    def append(self, batch: Iterable[Raindrop]) -> None:
        """Append `batch`, then notify listeners.

        The batch is committed before any listener runs; a listener that
        raises does not roll it back.
        """
        batch = list(batch)
        for drop in batch:
            if not isinstance(drop, Raindrop):
                raise TypeError(f"Expected Raindrop, got {type(drop).__name__}")
        self._drops.extend(batch)
        self._inside += sum(1 for d in batch if d.is_inside)
        logging.debug("Appended %d drops (total=%d)", len(batch), len(self._drops))
        for listener in list(self._listeners):
            listener(batch)

    def subscribe(self, listener: Listener) -> None:
        """Call `listener(batch)` after every append."""
        self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    @property
    def drops(self) -> Tuple[Raindrop, ...]:
        return tuple(self._drops)

    def inside(self) -> List[Raindrop]:
        return [d for d in self._drops if d.is_inside]

    def outside(self) -> List[Raindrop]:
        return [d for d in self._drops if not d.is_inside]

    @property
    def total_count(self) -> int:
        return len(self._drops)

    @property
    def inside_count(self) -> int:
        return self._inside

    @property
    def outside_count(self) -> int:
        return len(self._drops) - self._inside

    def approximation(self) -> float:
        """Return 4 * inside / total, or NaN while the gauge is empty."""
        if not self._drops:
            return math.nan
        return 4.0 * self._inside / len(self._drops)

    def snapshot(self) -> Dict[str, Any]:
        return {
            "total": self.total_count,
            "inside": self.inside_count,
            "outside": self.outside_count,
            "approximation": self.approximation(),
        }

    def __len__(self) -> int:
        return len(self._drops)
