"""Remote document store access."""

from .client import RemoteStoreClient, RemoteStoreError

__all__ = ["RemoteStoreClient", "RemoteStoreError"]
