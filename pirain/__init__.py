"""Monte Carlo estimation of Pi by letting it rain on the unit square."""

__version__ = "0.1.0"

from .gauge import RainGauge
from .geometry import circle_boundary_path, columns, svg_path
from .sampler import Raindrop, rain
from .scheduler import RainScheduler
from .state import RainingError, RainSession

__all__ = [
    "Raindrop",
    "rain",
    "RainGauge",
    "RainScheduler",
    "RainSession",
    "RainingError",
    "circle_boundary_path",
    "columns",
    "svg_path",
]
