from .client import (
    RainClient,
    RainClientError,
    RainConflictError,
    RainNetworkError,
    RainProtocolError,
    RainServerError,
)
from .history import HistoryClient

__all__ = [
    "RainClient",
    "RainClientError",
    "RainConflictError",
    "RainNetworkError",
    "RainProtocolError",
    "RainServerError",
    "HistoryClient",
]
