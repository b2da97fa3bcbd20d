"""Quarter-circle boundary and coordinate helpers for plotting."""

from __future__ import annotations

import math
from typing import Iterable, List, Sequence, Tuple

import numpy as np

from .sampler import Raindrop

# Finest step the server accepts.
MIN_RESOLUTION = 1e-6


def circle_boundary_path(resolution: float = 0.001) -> List[Tuple[float, float]]:
    """Trace y = sqrt(1 - x^2) for x stepped from 0 to 1.

    The first point is (0, 1). Steps that do not divide 1 evenly stop at the
    last x not exceeding 1.
    """

    if isinstance(resolution, bool) or not math.isfinite(resolution) or not resolution > 0:
        raise ValueError("resolution must be a finite positive number")
    steps = int(math.floor(1.0 / resolution + 1e-9))
    points = []
    for i in range(steps + 1):
        x = i * resolution
        points.append((x, math.sqrt(max(0.0, 1.0 - x * x))))
    return points


def svg_path(points: Sequence[Tuple[float, float]]) -> str:
    """Render boundary points as an SVG path string for a Plotly shape."""
    return "M0,1 " + " ".join(f"L{x},{y}" for x, y in points)


def columns(drops: Iterable[Raindrop]) -> Tuple[np.ndarray, np.ndarray]:
    drops = list(drops)
    xs = np.fromiter((d.x for d in drops), dtype=float, count=len(drops))
    ys = np.fromiter((d.y for d in drops), dtype=float, count=len(drops))
    return xs, ys
