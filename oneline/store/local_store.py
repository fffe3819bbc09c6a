"""Local SQLite storage for journal entries and the remote sync config."""

import json
import logging
import sqlite3
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

from ..models import InvalidDraftError, JournalEntry, Mood, RemoteConfig, format_iso

logger = logging.getLogger(__name__)

ENTRIES_KEY = "oneline_entries"
CONFIG_KEY = "oneline_config"

# Key-value table: each value is an opaque JSON blob
SCHEMA = """
CREATE TABLE IF NOT EXISTS kv_store (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT DEFAULT CURRENT_TIMESTAMP
);
"""


class LocalStoreError(Exception):
    """Local persistence failed. There is no fallback layer below this one."""


def sample_entries(now: datetime | None = None) -> list[JournalEntry]:
    """Entries shown on first launch so the history is not empty."""
    now = now or datetime.now(timezone.utc)
    return [
        JournalEntry(
            id="seed-1",
            text="Had a great coffee today, finally finished the book.",
            mood=Mood.HAPPY,
            date=format_iso(now - timedelta(days=2)),
        ),
        JournalEntry(
            id="seed-2",
            text="Feeling a bit under the weather, slept early.",
            mood=Mood.TIRED,
            date=format_iso(now - timedelta(days=1)),
        ),
    ]


class LocalStore:
    """SQLite-backed key-value store holding the entry list and config.

    The whole entry collection lives under a single key and is rewritten
    on every append, so concurrent writers are last-writer-wins.
    """

    def __init__(self, db_path: str | Path):
        """Initialize the local store.

        Args:
            db_path: Path to SQLite database file, or ":memory:".
        """
        self.db_path = Path(db_path).expanduser()
        self._conn: sqlite3.Connection | None = None

    def connect(self) -> None:
        """Initialize database connection and schema."""
        if self._conn is not None:
            return

        if str(self.db_path) != ":memory:":
            self.db_path.parent.mkdir(parents=True, exist_ok=True)

        try:
            self._conn = sqlite3.connect(str(self.db_path), check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
            self._conn.executescript(SCHEMA)
            self._conn.commit()
        except sqlite3.Error as e:
            raise LocalStoreError(f"Cannot open local store at {self.db_path}: {e}") from e

        logger.info(f"LocalStore connected to {self.db_path}")

    def close(self) -> None:
        """Close database connection."""
        if self._conn:
            self._conn.close()
            self._conn = None
            logger.info("LocalStore connection closed")

    def _ensure_connected(self) -> sqlite3.Connection:
        """Ensure we have a database connection."""
        if self._conn is None:
            self.connect()
        return self._conn

    def _get(self, key: str) -> str | None:
        conn = self._ensure_connected()
        row = conn.execute(
            "SELECT value FROM kv_store WHERE key = ?", (key,)
        ).fetchone()
        return row["value"] if row else None

    @staticmethod
    def _put(conn: sqlite3.Connection, key: str, value: str) -> None:
        conn.execute(
            """
            INSERT INTO kv_store (key, value, updated_at)
            VALUES (?, ?, CURRENT_TIMESTAMP)
            ON CONFLICT(key) DO UPDATE SET
                value = excluded.value,
                updated_at = excluded.updated_at
            """,
            (key, value),
        )

    @staticmethod
    def _decode_entries(raw: str | None) -> list[JournalEntry]:
        """Decode the stored entry list. Malformed payloads read as empty."""
        if raw is None:
            return []
        try:
            data = json.loads(raw)
            if not isinstance(data, list):
                raise TypeError(f"expected a list, got {type(data).__name__}")
            return [JournalEntry.from_dict(item) for item in data]
        except (json.JSONDecodeError, TypeError, KeyError, InvalidDraftError) as e:
            logger.warning(f"Ignoring malformed stored entries: {e}")
            return []

    # ==================== Entries ====================

    def load_entries(self) -> list[JournalEntry]:
        """Get all stored entries, most recently appended first.

        Returns:
            List of JournalEntry objects, empty if nothing stored yet.
        """
        return self._decode_entries(self._get(ENTRIES_KEY))

    def append_entry(self, entry: JournalEntry) -> None:
        """Add an entry to the front of the stored collection.

        The read-modify-write runs in one transaction.

        Raises:
            LocalStoreError: If the entry could not be persisted.
        """
        conn = self._ensure_connected()

        try:
            with conn:
                row = conn.execute(
                    "SELECT value FROM kv_store WHERE key = ?", (ENTRIES_KEY,)
                ).fetchone()
                entries = self._decode_entries(row["value"] if row else None)
                entries.insert(0, entry)
                payload = json.dumps([e.to_dict() for e in entries])
                self._put(conn, ENTRIES_KEY, payload)
        except sqlite3.Error as e:
            raise LocalStoreError(f"Failed to persist entry {entry.id}: {e}") from e

        logger.debug(f"Appended entry {entry.id}, {len(entries)} stored")

    def has_entries(self) -> bool:
        """Check whether the entries key has ever been written."""
        return self._get(ENTRIES_KEY) is not None

    def seed_if_empty(self, seed: list[JournalEntry] | None = None) -> bool:
        """Write sample entries if the store has never held any.

        Safe to call on every start-up: an existing entries key, even an
        empty or malformed one, is never overwritten.

        Args:
            seed: Entries to write. Defaults to sample_entries().

        Returns:
            True if the seed was written.
        """
        conn = self._ensure_connected()
        seed = sample_entries() if seed is None else seed

        try:
            with conn:
                cursor = conn.execute(
                    "INSERT OR IGNORE INTO kv_store (key, value) VALUES (?, ?)",
                    (ENTRIES_KEY, json.dumps([e.to_dict() for e in seed])),
                )
        except sqlite3.Error as e:
            raise LocalStoreError(f"Failed to seed local store: {e}") from e

        seeded = cursor.rowcount > 0
        if seeded:
            logger.info(f"Seeded local store with {len(seed)} sample entries")
        return seeded

    # ==================== Config ====================

    def load_config(self) -> RemoteConfig | None:
        """Get the stored remote config, or None if never saved."""
        raw = self._get(CONFIG_KEY)
        if raw is None:
            return None
        try:
            data = json.loads(raw)
            if not isinstance(data, dict):
                raise TypeError(f"expected an object, got {type(data).__name__}")
            return RemoteConfig.from_dict(data)
        except (json.JSONDecodeError, TypeError) as e:
            logger.warning(f"Ignoring malformed stored config: {e}")
            return None

    def save_config(self, config: RemoteConfig) -> None:
        """Persist the remote config, replacing any previous value.

        Raises:
            LocalStoreError: If the config could not be persisted.
        """
        conn = self._ensure_connected()
        try:
            with conn:
                self._put(conn, CONFIG_KEY, json.dumps(config.to_dict()))
        except sqlite3.Error as e:
            raise LocalStoreError(f"Failed to persist config: {e}") from e

    def clear_config(self) -> None:
        """Remove the stored remote config, returning to preview mode."""
        conn = self._ensure_connected()
        try:
            with conn:
                conn.execute("DELETE FROM kv_store WHERE key = ?", (CONFIG_KEY,))
        except sqlite3.Error as e:
            raise LocalStoreError(f"Failed to clear config: {e}") from e

    def get_stats(self) -> dict[str, Any]:
        """Get storage statistics."""
        return {
            "db_path": str(self.db_path),
            "entry_count": len(self.load_entries()),
            "config_stored": self._get(CONFIG_KEY) is not None,
        }
