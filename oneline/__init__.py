"""OneLine - a one-line-a-day mood journal with optional remote sync."""

from .models import EntryDraft, JournalEntry, Mood, RemoteConfig, SaveOutcome

__version__ = "0.1.0"

__all__ = [
    "EntryDraft",
    "JournalEntry",
    "Mood",
    "RemoteConfig",
    "SaveOutcome",
    "__version__",
]
