"""Local persistence for OneLine.

Holds the journal entry collection and the remote sync configuration in
a single SQLite key-value table, scoped to one install.
"""

from .local_store import (
    CONFIG_KEY,
    ENTRIES_KEY,
    LocalStore,
    LocalStoreError,
    sample_entries,
)

__all__ = [
    "CONFIG_KEY",
    "ENTRIES_KEY",
    "LocalStore",
    "LocalStoreError",
    "sample_entries",
]
