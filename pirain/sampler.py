"""Raindrop sampling in the unit square."""

from __future__ import annotations

import math
import random
from dataclasses import dataclass
from typing import List, Optional


@dataclass(frozen=True)
class Raindrop:
    """A sampled point and its quarter-circle classification."""

    x: float
    y: float
    distance: float
    is_inside: bool

    @classmethod
    def at(cls, x: float, y: float) -> "Raindrop":
        """Build a drop at (x, y), deriving distance and classification."""

        distance = math.sqrt(x * x + y * y)
        return cls(x=x, y=y, distance=distance, is_inside=distance < 1.0)


def rain(count: int, rng: Optional[random.Random] = None) -> List[Raindrop]:
    """Return `count` drops drawn uniformly from [0, 1) x [0, 1)."""

    if isinstance(count, bool) or not isinstance(count, int):
        raise ValueError(f"count must be an integer, got {count!r}")
    if count < 0:
        raise ValueError("count must be non-negative")

    source = rng or random
    drops = []
    for _ in range(count):
        x = source.random()
        y = source.random()
        drops.append(Raindrop.at(x, y))
    return drops
