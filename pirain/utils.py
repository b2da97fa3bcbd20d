from __future__ import annotations

import math
from typing import Any, Dict, Iterable, Optional

from starlette.middleware.base import BaseHTTPMiddleware

from .geometry import columns
from .sampler import Raindrop


def finite_or_none(value: Optional[float]) -> Optional[float]:
    """JSON has no NaN: the undefined approximation travels as null."""
    if value is None or math.isnan(value):
        return None
    return value


def xy_payload(drops: Iterable[Raindrop]) -> Dict[str, Any]:
    xs, ys = columns(drops)
    return {"x": xs.tolist(), "y": ys.tolist()}


class NoCacheHTMLMiddleware(BaseHTTPMiddleware):
    """Keep browsers from serving a stale copy of the UI page."""

    async def dispatch(self, request, call_next):
        response = await call_next(request)
        ct = response.headers.get('content-type', '')
        if 'text/html' in ct:
            response.headers['Cache-Control'] = 'no-store, no-cache, must-revalidate, max-age=0'
            response.headers['Pragma'] = 'no-cache'
            response.headers['Expires'] = '0'
        return response
