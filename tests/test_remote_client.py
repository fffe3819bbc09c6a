"""Tests for the remote store HTTP client."""

import json

import httpx
import pytest

from oneline.models import EntryDraft, Mood, RemoteConfig
from oneline.remote import RemoteStoreClient, RemoteStoreError
from oneline.remote.client import API_KEY_HEADER, STORE_ID_HEADER

ENDPOINT = "http://remote.test/api/notion"


@pytest.fixture
def remote_config():
    return RemoteConfig(api_key="secret_abc", store_id="db-123")


@pytest.fixture
def draft():
    return EntryDraft(text="Good day", mood=Mood.HAPPY, date="2024-01-01T10:00:00Z")


def make_client(handler) -> RemoteStoreClient:
    return RemoteStoreClient(ENDPOINT, transport=httpx.MockTransport(handler))


class TestFetchEntries:
    """Tests for remote reads."""

    @pytest.mark.asyncio
    async def test_request_shape(self, remote_config):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=[])

        client = make_client(handler)
        await client.fetch_entries(remote_config)
        await client.close()

        request = seen[0]
        assert request.method == "GET"
        assert request.headers[API_KEY_HEADER] == "secret_abc"
        assert request.headers[STORE_ID_HEADER] == "db-123"
        assert request.url.params["sort"] == "date"
        assert request.url.params["direction"] == "descending"

    @pytest.mark.asyncio
    async def test_maps_records(self, remote_config):
        records = [
            {"id": "p2", "text": "Second", "mood": "Sad", "date": "2024-01-02T10:00:00Z"},
            {"id": "p1", "text": "First", "mood": "Happy", "date": "2024-01-01T10:00:00Z"},
        ]
        client = make_client(lambda request: httpx.Response(200, json=records))

        entries = await client.fetch_entries(remote_config)

        assert [e.id for e in entries] == ["p2", "p1"]
        assert entries[0].mood is Mood.SAD

    @pytest.mark.asyncio
    async def test_partial_records_tolerated(self, remote_config):
        records = [
            {"id": "p1"},
            "not a record",
            {"id": "p2", "text": "Ok", "mood": "Unknown", "date": "2024-01-01"},
        ]
        client = make_client(lambda request: httpx.Response(200, json=records))

        entries = await client.fetch_entries(remote_config)

        assert len(entries) == 2
        assert entries[0].text == "No Title"
        assert entries[0].mood is Mood.NEUTRAL
        assert entries[0].date == ""
        assert entries[1].mood is Mood.NEUTRAL

    @pytest.mark.asyncio
    async def test_error_response_raises(self, remote_config):
        client = make_client(
            lambda request: httpx.Response(401, json={"error": "Missing API Key or Database ID"})
        )

        with pytest.raises(RemoteStoreError) as exc_info:
            await client.fetch_entries(remote_config)

        assert exc_info.value.message == "Missing API Key or Database ID"
        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_non_json_body_raises(self, remote_config):
        client = make_client(lambda request: httpx.Response(200, text="<html>oops</html>"))

        with pytest.raises(RemoteStoreError, match="Malformed response"):
            await client.fetch_entries(remote_config)

    @pytest.mark.asyncio
    async def test_non_list_body_raises(self, remote_config):
        client = make_client(lambda request: httpx.Response(200, json={"results": []}))

        with pytest.raises(RemoteStoreError, match="expected a list"):
            await client.fetch_entries(remote_config)

    @pytest.mark.asyncio
    async def test_connection_error_raises(self, remote_config):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("Connection refused", request=request)

        client = make_client(handler)

        with pytest.raises(RemoteStoreError, match="Connection failed") as exc_info:
            await client.fetch_entries(remote_config)

        assert exc_info.value.status_code is None


class TestCreateEntry:
    """Tests for remote writes."""

    @pytest.mark.asyncio
    async def test_request_shape(self, remote_config, draft):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"success": True})

        client = make_client(handler)
        await client.create_entry(remote_config, draft)

        request = seen[0]
        assert request.method == "POST"
        assert request.headers[API_KEY_HEADER] == "secret_abc"
        assert request.headers[STORE_ID_HEADER] == "db-123"
        assert json.loads(request.content) == {
            "text": "Good day",
            "mood": "Happy",
            "date": "2024-01-01T10:00:00Z",
        }

    @pytest.mark.asyncio
    async def test_error_field_extracted(self, remote_config, draft):
        client = make_client(
            lambda request: httpx.Response(
                500, json={"error": "Failed to sync with Notion", "details": "db locked"}
            )
        )

        with pytest.raises(RemoteStoreError) as exc_info:
            await client.create_entry(remote_config, draft)

        assert exc_info.value.message == "Failed to sync with Notion"
        assert exc_info.value.status_code == 500

    @pytest.mark.asyncio
    async def test_error_without_json_body(self, remote_config, draft):
        client = make_client(lambda request: httpx.Response(502, text="Bad Gateway"))

        with pytest.raises(RemoteStoreError) as exc_info:
            await client.create_entry(remote_config, draft)

        assert exc_info.value.message == "HTTP 502: Bad Gateway"

    @pytest.mark.asyncio
    async def test_timeout_raises(self, remote_config, draft):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        client = make_client(handler)

        with pytest.raises(RemoteStoreError, match="timed out"):
            await client.create_entry(remote_config, draft)


class TestRequestBuilding:
    """Failures raised before a request reaches the transport."""

    @pytest.mark.asyncio
    async def test_non_ascii_api_key(self, draft):
        calls = []
        client = make_client(lambda request: calls.append(request) or httpx.Response(200))

        with pytest.raises(RemoteStoreError, match="Invalid remote credentials") as exc_info:
            await client.create_entry(RemoteConfig("secret_é", "db"), draft)

        assert exc_info.value.status_code is None
        assert calls == []


class TestClientLifecycle:
    """Tests for client setup and teardown."""

    @pytest.mark.asyncio
    async def test_client_reused_and_closed(self):
        client = RemoteStoreClient(ENDPOINT)

        first = await client._get_client()
        second = await client._get_client()
        assert first is second

        await client.close()
        assert client._client is None

    def test_no_timeout_by_default(self):
        assert RemoteStoreClient(ENDPOINT).timeout is None
