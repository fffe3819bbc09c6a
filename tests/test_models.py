"""Tests for journal data types and helpers."""

from datetime import datetime, timedelta, timezone

import pytest

from oneline.models import (
    MAX_TEXT_LENGTH,
    EntryDraft,
    InvalidDraftError,
    JournalEntry,
    Mood,
    RemoteConfig,
    SaveOutcome,
    format_entry_date,
    format_iso,
    now_iso,
    parse_entry_date,
    sort_newest_first,
    validate_text,
)


def make_entry(entry_id: str, date: str, text: str = "A day") -> JournalEntry:
    return JournalEntry(id=entry_id, text=text, mood=Mood.NEUTRAL, date=date)


class TestMood:
    """Tests for Mood parsing."""

    def test_parse_exact(self):
        assert Mood.parse("Happy") is Mood.HAPPY

    def test_parse_case_insensitive(self):
        assert Mood.parse("  energetic ") is Mood.ENERGETIC

    def test_parse_passes_through_mood(self):
        assert Mood.parse(Mood.SAD) is Mood.SAD

    def test_parse_unknown_raises(self):
        with pytest.raises(InvalidDraftError):
            Mood.parse("Grumpy")


class TestJournalEntry:
    """Tests for JournalEntry serialization."""

    def test_to_dict_uses_mood_value(self):
        entry = JournalEntry("abc", "Good day", Mood.HAPPY, "2024-01-01T10:00:00Z")

        assert entry.to_dict() == {
            "id": "abc",
            "text": "Good day",
            "mood": "Happy",
            "date": "2024-01-01T10:00:00Z",
        }

    def test_from_dict(self):
        entry = JournalEntry.from_dict(
            {"id": "x", "text": "Slept in", "mood": "Tired", "date": "2024-02-01T08:00:00Z"}
        )

        assert entry.id == "x"
        assert entry.mood is Mood.TIRED

    def test_from_dict_missing_field_raises(self):
        with pytest.raises(KeyError):
            JournalEntry.from_dict({"id": "x", "text": "no mood"})

    def test_from_remote_fills_defaults(self):
        entry = JournalEntry.from_remote({"id": "page-1"})

        assert entry.id == "page-1"
        assert entry.text == "No Title"
        assert entry.mood is Mood.NEUTRAL
        assert entry.date == ""

    def test_from_remote_unknown_mood_is_neutral(self):
        entry = JournalEntry.from_remote(
            {"id": "p", "text": "hi", "mood": "Ecstatic", "date": "2024-01-01"}
        )

        assert entry.mood is Mood.NEUTRAL
        assert entry.text == "hi"

    def test_entry_is_immutable(self):
        entry = make_entry("a", "2024-01-01T00:00:00Z")

        with pytest.raises(AttributeError):
            entry.text = "changed"


class TestEntryDraft:
    """Tests for draft validation."""

    def test_valid_draft(self):
        EntryDraft("Good day", Mood.HAPPY, "2024-01-01T10:00:00Z").validate()

    @pytest.mark.parametrize("text", ["", "   ", "\n\t"])
    def test_empty_text_rejected(self, text):
        with pytest.raises(InvalidDraftError):
            EntryDraft(text, Mood.HAPPY, "2024-01-01T10:00:00Z").validate()

    def test_non_mood_rejected(self):
        with pytest.raises(InvalidDraftError):
            EntryDraft("ok", "Happy", "2024-01-01T10:00:00Z").validate()

    def test_remote_payload_has_no_id(self):
        payload = EntryDraft("Good day", Mood.HAPPY, "2024-01-01T10:00:00Z").to_remote_payload()

        assert payload == {"text": "Good day", "mood": "Happy", "date": "2024-01-01T10:00:00Z"}


class TestRemoteConfig:
    """Tests for RemoteConfig."""

    def test_active_needs_both_fields(self):
        assert RemoteConfig("key", "db").is_active
        assert not RemoteConfig("key", "").is_active
        assert not RemoteConfig("", "db").is_active
        assert not RemoteConfig().is_active

    def test_dict_roundtrip_uses_camel_case(self):
        config = RemoteConfig("secret_abc", "db-1")

        assert config.to_dict() == {"apiKey": "secret_abc", "storeId": "db-1"}
        assert RemoteConfig.from_dict(config.to_dict()) == config

    def test_from_dict_tolerates_missing(self):
        assert RemoteConfig.from_dict({}) == RemoteConfig()

    def test_masked(self):
        assert RemoteConfig("secret_abcd1234", "db").masked() == "***********1234"
        assert RemoteConfig("abc", "db").masked() == "***"
        assert RemoteConfig().masked() == ""


class TestSaveOutcome:
    """Tests for the three user-facing outcome messages."""

    def test_synced_message(self):
        outcome = SaveOutcome(make_entry("a", ""), synced=True)
        assert outcome.message == "Entry saved and synced."

    def test_failed_sync_message(self):
        outcome = SaveOutcome(make_entry("a", ""), error="db locked")
        assert outcome.message == "Saved locally, but failed to sync: db locked"

    def test_preview_message(self):
        outcome = SaveOutcome(make_entry("a", ""))
        assert outcome.message == "Entry saved locally."
        assert outcome.error is None

    def test_to_dict(self):
        data = SaveOutcome(make_entry("a", ""), error="boom").to_dict()

        assert data["synced"] is False
        assert data["error"] == "boom"
        assert data["entry"]["id"] == "a"


class TestValidateText:
    """Tests for producer-side text checks."""

    def test_accepts_limit(self):
        text = "x" * MAX_TEXT_LENGTH
        assert validate_text(text) == text

    def test_rejects_over_limit(self):
        with pytest.raises(InvalidDraftError, match="limit is 280"):
            validate_text("x" * (MAX_TEXT_LENGTH + 1))

    def test_rejects_blank(self):
        with pytest.raises(InvalidDraftError):
            validate_text("   ")


class TestDates:
    """Tests for date parsing, ordering and display."""

    def test_format_iso_normalises_to_utc(self):
        moment = datetime(2024, 1, 1, 12, 30, 15, 123456, tzinfo=timezone(timedelta(hours=2)))

        assert format_iso(moment) == "2024-01-01T10:30:15.123Z"

    def test_now_iso_is_utc_with_z(self):
        stamp = now_iso()

        assert stamp.endswith("Z")
        assert parse_entry_date(stamp) is not None

    def test_parse_invalid(self):
        assert parse_entry_date("") is None
        assert parse_entry_date("yesterday") is None

    def test_sort_newest_first(self):
        entries = [
            make_entry("old", "2024-01-01T10:00:00Z"),
            make_entry("new", "2024-03-01T10:00:00Z"),
            make_entry("mid", "2024-02-01T10:00:00+00:00"),
        ]

        assert [e.id for e in sort_newest_first(entries)] == ["new", "mid", "old"]

    def test_sort_puts_undated_last(self):
        entries = [
            make_entry("blank", ""),
            make_entry("dated", "2024-01-01T10:00:00Z"),
        ]

        assert [e.id for e in sort_newest_first(entries)] == ["dated", "blank"]

    def test_format_entry_date_falls_back_to_raw(self):
        assert format_entry_date("not a date") == "not a date"

    def test_format_entry_date_short_form(self):
        formatted = format_entry_date("2024-06-15T12:00:00Z")

        assert "," in formatted
        assert formatted.endswith(("AM", "PM"))
