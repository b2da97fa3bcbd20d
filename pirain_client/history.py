import requests
from typing import Optional, List, Dict, Any, Literal


class HistoryClient:
    """A client for the convergence history kept by the rain server."""

    def __init__(self, server_url: str):
        """Initializes the client with the server URL.

        Args:
            server_url: The base URL of the server (e.g., http://localhost:9000).
        """
        self.server_url = server_url.rstrip('/')

    def fetch_events(
        self,
        action: Optional[Literal["drop", "rain"]] = None,
        n: int = 100,
        order: Literal["latest", "earliest"] = "latest",
        start_time: Optional[str] = None,
        end_time: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """Fetches logged batches from the server with optional filters.

        Args:
            action: Optional action to filter by ('drop' or 'rain').
            n: Maximum number of events to return.
            order: Order of events to return ('latest' or 'earliest').
            start_time: Optional start time in ISO 8601 format.
            end_time: Optional end time in ISO 8601 format.

        Returns:
            A list of event dictionaries.

        Raises:
            requests.exceptions.RequestException: For network and HTTP errors.
            ValueError: If the server returns an invalid response.
        """
        params = {
            "action": action,
            "n": n,
            "order": order,
            "start_time": start_time,
            "end_time": end_time,
        }
        # Remove None values so they are not sent as empty query parameters
        params = {k: v for k, v in params.items() if v is not None}

        response = requests.get(f"{self.server_url}/api/history", params=params)
        response.raise_for_status()

        try:
            data = response.json()
        except ValueError:
            raise ValueError("Invalid JSON response from server")
        return data.get("events", [])

    def convergence(self, n: int = 10_000) -> List[Dict[str, Any]]:
        """Return (total, approximation) pairs in the order the drops fell."""
        events = self.fetch_events(n=n, order="earliest")
        return [
            {"total": e["total"], "approximation": e["approximation"]}
            for e in events
            if e.get("approximation") is not None
        ]


if __name__ == '__main__':
    client = HistoryClient("http://localhost:9000")
    for point in client.convergence():
        print(point)
