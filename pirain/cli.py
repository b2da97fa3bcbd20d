"""Command line entry point: `pirain serve`, `pirain estimate`, `pirain boundary`."""

import logging
import math

from fire import Fire

from .config import load_settings
from .gauge import RainGauge
from .geometry import circle_boundary_path, svg_path
from .sampler import rain


def serve(host=None, port=None, reload=False):
    """Run the rain server with uvicorn."""
    import uvicorn

    settings = load_settings()
    logging.basicConfig(level=settings.log_level, format='%(asctime)s - %(levelname)s - %(message)s')
    uvicorn.run(
        "pirain.server:create_app",
        factory=True,
        host=host or settings.host,
        port=int(port or settings.port),
        reload=reload,
        log_level=settings.log_level.lower(),
    )


def estimate(drops=1000, batch=100):
    """Rain `drops` drops in batches of `batch` without a server and report Pi."""
    if batch <= 0:
        raise ValueError("batch must be positive")
    gauge = RainGauge()
    remaining = drops
    while remaining > 0:
        n = min(batch, remaining)
        gauge.append(rain(n))
        remaining -= n
    approx = gauge.approximation()
    print(f"Raindrops: {gauge.total_count}")
    print(f"Inside:    {gauge.inside_count}")
    print(f"Outside:   {gauge.outside_count}")
    if math.isnan(approx):
        print("Approximation of Pi: undefined (no drops)")
    else:
        print(f"Approximation of Pi: {approx:.6f} (error {abs(approx - math.pi):.6f})")
    return approx


def boundary(resolution=None, svg=False):
    """Print the quarter-circle boundary, one `x y` pair per line, or as an SVG path."""
    res = load_settings().resolution if resolution is None else resolution
    points = circle_boundary_path(res)
    if svg:
        print(svg_path(points))
        return
    for x, y in points:
        print(f"{x:.6f} {y:.6f}")


def main():
    Fire({"serve": serve, "estimate": estimate, "boundary": boundary})


if __name__ == "__main__":
    main()
