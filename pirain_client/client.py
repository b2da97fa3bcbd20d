import json
import math
from typing import Any, Dict, List, Optional

import requests


class RainClientError(Exception):
    """Base exception for rain client errors."""


class RainServerError(RainClientError):
    """Raised when the server returns a non-2xx response."""


class RainConflictError(RainServerError):
    """Raised when the server refuses an action in its current state (HTTP 409)."""


class RainNetworkError(RainClientError):
    """Raised when there is a network/transport error reaching the server."""


class RainProtocolError(RainClientError):
    """Raised when the server responds successfully but the payload is invalid."""


class RainClient:
    """A client for the Monte Carlo Pi rain server."""

    def __init__(self, server_url: str, timeout: float = 10.0):
        self.server_url = server_url.rstrip('/')
        self.timeout = timeout

    def _request(self, method: str, path: str, **kwargs) -> Any:
        url = f"{self.server_url}{path}"
        try:
            response = requests.request(method, url, timeout=self.timeout, **kwargs)
        except requests.exceptions.RequestException as e:
            raise RainNetworkError(f"Network error calling {path}: {e}") from e

        if not response.ok:
            status = response.status_code
            try:
                detail = response.json().get("detail")
            except Exception:
                detail = response.text or response.reason
            if status == 409:
                raise RainConflictError(f"{detail} (HTTP 409)")
            raise RainServerError(f"Server error calling {path}: {detail or 'unknown error'} (HTTP {status})")

        try:
            return response.json()
        except json.JSONDecodeError as e:
            raise RainProtocolError(f"Invalid JSON response from {path}: {e}") from e

    def health(self) -> Dict[str, Any]:
        return self._request("GET", "/api/health")

    def config(self) -> Dict[str, Any]:
        return self._request("GET", "/api/config")

    def state(self) -> Dict[str, Any]:
        return self._request("GET", "/api/state")

    def approximation(self) -> float:
        """Current estimate of Pi; NaN while no drops have fallen."""
        value = self.state().get("approximation")
        return math.nan if value is None else float(value)

    def points(self) -> Dict[str, Dict[str, List[float]]]:
        payload = self._request("GET", "/api/points")
        if "inside" not in payload or "outside" not in payload:
            raise RainProtocolError("Missing 'inside'/'outside' in /api/points response.")
        return payload

    def drop(self, count: int) -> Dict[str, Any]:
        """Add `count` drops by hand. Raises RainConflictError while raining."""
        return self._request("POST", "/api/drops", json={"count": count})

    def start_rain(self, interval_ms: Optional[float] = None) -> Dict[str, Any]:
        body = {} if interval_ms is None else {"interval_ms": interval_ms}
        return self._request("POST", "/api/rain/start", json=body)

    def stop_rain(self) -> Dict[str, Any]:
        return self._request("POST", "/api/rain/stop")

    def boundary(self, resolution: Optional[float] = None) -> List[List[float]]:
        params = {} if resolution is None else {"resolution": resolution}
        return self._request("GET", "/api/boundary", params=params)["points"]


if __name__ == '__main__':
    SERVER_URL = "http://localhost:9000"

    client = RainClient(SERVER_URL)
    try:
        print(client.health())
        for size in client.config()["drop_sizes"]:
            state = client.drop(size)
            print(f"+{size:>5} drops -> total={state['total']} pi~{state['approximation']}")
    except RainClientError as e:
        print(f"Rain client error: {e}")
