"""Data types shared by the local store, remote client and coordinator."""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)

# Producers (CLI, web API) enforce this cap; the coordinator only rejects empty text.
MAX_TEXT_LENGTH = 280

# Defaults applied to partially populated remote records
REMOTE_DEFAULT_TEXT = "No Title"
REMOTE_DEFAULT_DATE = ""


class Mood(Enum):
    """Closed set of moods an entry can be tagged with."""

    HAPPY = "Happy"
    NEUTRAL = "Neutral"
    SAD = "Sad"
    ENERGETIC = "Energetic"
    TIRED = "Tired"

    @classmethod
    def parse(cls, value: "str | Mood") -> "Mood":
        """Parse a mood name, case-insensitively.

        Raises:
            InvalidDraftError: If the value is not a known mood.
        """
        if isinstance(value, Mood):
            return value
        for mood in cls:
            if mood.value.lower() == str(value).strip().lower():
                return mood
        raise InvalidDraftError(f"Unknown mood: {value!r}")


class InvalidDraftError(ValueError):
    """A draft entry cannot be saved (empty text, unknown mood, ...)."""


@dataclass(frozen=True)
class JournalEntry:
    """A single journal entry. Never mutated after creation."""

    id: str
    text: str
    mood: Mood
    date: str  # ISO-8601 timestamp

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "text": self.text,
            "mood": self.mood.value,
            "date": self.date,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "JournalEntry":
        """Create from a locally stored dictionary."""
        return cls(
            id=data["id"],
            text=data["text"],
            mood=Mood.parse(data["mood"]),
            date=data["date"],
        )

    @classmethod
    def from_remote(cls, data: dict[str, Any]) -> "JournalEntry":
        """Create from a remote record, filling in missing fields.

        Unlike from_dict this never raises: remote records are only
        partially under our control.
        """
        try:
            mood = Mood.parse(data.get("mood") or Mood.NEUTRAL)
        except InvalidDraftError:
            logger.debug(f"Unknown remote mood {data.get('mood')!r}, using Neutral")
            mood = Mood.NEUTRAL

        return cls(
            id=str(data.get("id") or ""),
            text=str(data.get("text") or REMOTE_DEFAULT_TEXT),
            mood=mood,
            date=str(data.get("date") or REMOTE_DEFAULT_DATE),
        )


@dataclass(frozen=True)
class EntryDraft:
    """An entry as submitted by a caller, before it has an id."""

    text: str
    mood: Mood
    date: str

    def validate(self) -> None:
        """Reject drafts the coordinator cannot persist.

        Raises:
            InvalidDraftError: If the text is empty or whitespace only.
        """
        if not isinstance(self.text, str) or not self.text.strip():
            raise InvalidDraftError("Entry text must not be empty")
        if not isinstance(self.mood, Mood):
            raise InvalidDraftError(f"Unknown mood: {self.mood!r}")

    def to_remote_payload(self) -> dict[str, str]:
        """Body of a remote write. The local id is deliberately absent."""
        return {
            "text": self.text,
            "mood": self.mood.value,
            "date": self.date,
        }


@dataclass(frozen=True)
class RemoteConfig:
    """Credentials for the remote store."""

    api_key: str = ""
    store_id: str = ""

    @property
    def is_active(self) -> bool:
        """Sync is enabled only when both fields are filled in."""
        return bool(self.api_key) and bool(self.store_id)

    def masked(self) -> str:
        """The api key with all but the last four characters hidden."""
        if not self.api_key:
            return ""
        if len(self.api_key) <= 4:
            return "*" * len(self.api_key)
        return "*" * (len(self.api_key) - 4) + self.api_key[-4:]

    def to_dict(self) -> dict[str, str]:
        return {"apiKey": self.api_key, "storeId": self.store_id}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RemoteConfig":
        return cls(
            api_key=str(data.get("apiKey") or ""),
            store_id=str(data.get("storeId") or ""),
        )


@dataclass(frozen=True)
class SaveOutcome:
    """Result of a save attempt.

    The entry is always persisted locally. ``error`` is set only when a
    remote write was attempted and failed.
    """

    entry: JournalEntry
    synced: bool = False
    error: str | None = None

    @property
    def message(self) -> str:
        """User-facing summary of what happened."""
        if self.synced:
            return "Entry saved and synced."
        if self.error is not None:
            return f"Saved locally, but failed to sync: {self.error}"
        return "Entry saved locally."

    def to_dict(self) -> dict[str, Any]:
        return {
            "entry": self.entry.to_dict(),
            "synced": self.synced,
            "error": self.error,
            "message": self.message,
        }


def validate_text(text: str, max_length: int = MAX_TEXT_LENGTH) -> str:
    """Producer-side check of entry text.

    Returns:
        The text unchanged.

    Raises:
        InvalidDraftError: If the text is empty or longer than max_length.
    """
    if not text or not text.strip():
        raise InvalidDraftError("Entry text must not be empty")
    if len(text) > max_length:
        raise InvalidDraftError(
            f"Entry text is {len(text)} characters, the limit is {max_length}"
        )
    return text


def format_iso(moment: datetime) -> str:
    """UTC ISO string with millisecond precision and a Z suffix, the stored date format."""
    stamp = moment.astimezone(timezone.utc).isoformat(timespec="milliseconds")
    return stamp.replace("+00:00", "Z")


def now_iso() -> str:
    """Current time in the stored date format."""
    return format_iso(datetime.now(timezone.utc))


def parse_entry_date(value: str) -> datetime | None:
    """Parse an entry's ISO date, returning None if it is not a date."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.astimezone()
    return parsed


def sort_newest_first(entries: list[JournalEntry]) -> list[JournalEntry]:
    """Order entries by date descending. Entries without a valid date go last."""
    dated = []
    undated = []
    for entry in entries:
        parsed = parse_entry_date(entry.date)
        if parsed is None:
            undated.append(entry)
        else:
            dated.append((parsed, entry))

    dated.sort(key=lambda pair: pair[0], reverse=True)
    return [entry for _, entry in dated] + undated


def format_entry_date(value: str) -> str:
    """Short display form of an entry date, e.g. ``Jan 2, 10:00 AM``."""
    parsed = parse_entry_date(value)
    if parsed is None:
        return value
    local = parsed.astimezone()
    hour = local.strftime("%I").lstrip("0") or "12"
    return f"{local.strftime('%b')} {local.day}, {hour}:{local.strftime('%M %p')}"
