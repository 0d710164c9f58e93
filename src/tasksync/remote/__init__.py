"""Client for the remote sync authority."""

from .client import NetworkError, SyncClient, SyncClientError

__all__ = [
    "NetworkError",
    "SyncClient",
    "SyncClientError",
]
