"""Sync coordinator: the single read/write authority for journal entries.

Every save lands in the local store first. When a remote store is
configured the entry is then written there on a best-effort basis, and
reads come from the remote store instead of the local one.
"""

import logging
import uuid
from typing import Callable

from ..config import Config
from ..models import EntryDraft, JournalEntry, RemoteConfig, SaveOutcome
from ..remote import RemoteStoreClient, RemoteStoreError
from ..store import LocalStore

logger = logging.getLogger(__name__)


def _new_entry_id() -> str:
    return str(uuid.uuid4())


class SyncCoordinator:
    """Reads and writes journal entries across the local and remote stores.

    Construct one per process and pass it to whatever needs it. There is
    no locking: two concurrent saves both rewrite the local collection
    and the later write wins.
    """

    def __init__(
        self,
        store: LocalStore,
        remote: RemoteStoreClient,
        remote_config: RemoteConfig | None = None,
        id_factory: Callable[[], str] = _new_entry_id,
    ):
        """Initialize the coordinator.

        Args:
            store: Local store holding entries and config.
            remote: Client for the remote store.
            remote_config: Initial config. If None, loaded from the store.
            id_factory: Generates ids for new entries.
        """
        self.store = store
        self.remote = remote
        self._id_factory = id_factory
        self._remote_config = (
            remote_config if remote_config is not None else store.load_config()
        )

        if self.is_remote_active:
            logger.info("Remote sync enabled")
        else:
            logger.info("No remote store configured, running in preview mode")

    @classmethod
    def from_config(cls, config: Config) -> "SyncCoordinator":
        """Build the coordinator and its collaborators from app config.

        Credentials from the config file only seed the stored config; once
        a config has been saved the stored one wins.
        """
        store = LocalStore(config.storage.db_path)
        store.connect()

        if config.storage.seed_sample_entries:
            store.seed_if_empty()

        remote_config = store.load_config()
        if remote_config is None and config.remote.api_key and config.remote.store_id:
            remote_config = RemoteConfig(
                api_key=config.remote.api_key,
                store_id=config.remote.store_id,
            )
            store.save_config(remote_config)
            logger.info("Stored remote credentials from config file")

        remote = RemoteStoreClient(
            endpoint_url=config.remote.endpoint_url,
            timeout=config.remote.timeout_seconds,
        )

        return cls(store, remote, remote_config=remote_config or RemoteConfig())

    @property
    def remote_config(self) -> RemoteConfig:
        """The config currently in effect (empty when never set)."""
        return self._remote_config or RemoteConfig()

    @property
    def is_remote_active(self) -> bool:
        return self._remote_config is not None and self._remote_config.is_active

    async def get_entries(self) -> list[JournalEntry]:
        """Get journal entries from the store of record.

        With a remote store configured, entries come from the remote side
        only. A failed remote read returns an empty list; the local copy
        is not used as a fallback.

        Without a remote store, returns the local entries in storage
        order. Sorting for display is up to the caller.
        """
        if not self.is_remote_active:
            return self.store.load_entries()

        try:
            return await self.remote.fetch_entries(self._remote_config)
        except RemoteStoreError as e:
            logger.error(f"Remote read failed, returning no entries: {e}")
            return []

    async def save_entry(self, draft: EntryDraft) -> SaveOutcome:
        """Persist a new entry locally, then sync it if configured.

        Args:
            draft: Text, mood and date of the new entry.

        Returns:
            SaveOutcome describing whether the remote write happened.

        Raises:
            InvalidDraftError: If the draft text is empty.
            LocalStoreError: If the local write failed.
        """
        draft.validate()

        entry = JournalEntry(
            id=self._id_factory(),
            text=draft.text,
            mood=draft.mood,
            date=draft.date,
        )
        self.store.append_entry(entry)

        if not self.is_remote_active:
            logger.debug(f"Saved entry {entry.id} locally, sync skipped")
            return SaveOutcome(entry=entry)

        # Snapshot so a concurrent update_config cannot change the target mid-write
        config = self._remote_config
        try:
            await self.remote.create_entry(config, draft)
        except RemoteStoreError as e:
            logger.warning(f"Entry {entry.id} saved locally but sync failed: {e}")
            return SaveOutcome(entry=entry, synced=False, error=e.message)

        logger.info(f"Entry {entry.id} synced to remote store")
        return SaveOutcome(entry=entry, synced=True)

    def update_config(self, config: RemoteConfig) -> None:
        """Replace the remote config and persist it.

        Credentials are not checked here; a bad key shows up on the next
        read or write. Entries saved earlier are not re-synced.
        """
        self.store.save_config(config)
        self._remote_config = config
        logger.info(
            "Remote sync enabled" if config.is_active else "Remote sync disabled"
        )

    def clear_config(self) -> None:
        """Drop the remote config and return to preview mode."""
        self.store.clear_config()
        self._remote_config = None
        logger.info("Remote config cleared")

    async def close(self) -> None:
        """Release the HTTP client and the database connection."""
        await self.remote.close()
        self.store.close()
