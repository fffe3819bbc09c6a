"""Entry synchronization between the local store and the remote store."""

from .coordinator import SyncCoordinator

__all__ = ["SyncCoordinator"]
