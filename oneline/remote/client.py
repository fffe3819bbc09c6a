"""HTTP client for the remote document store.

The remote store sits behind a small proxy endpoint that accepts the
credentials as headers. GET lists entries, POST creates one.
"""

import logging
from typing import Any

import httpx

from ..models import EntryDraft, JournalEntry, RemoteConfig

logger = logging.getLogger(__name__)

API_KEY_HEADER = "x-notion-token"
STORE_ID_HEADER = "x-database-id"


class RemoteStoreError(Exception):
    """A remote read or write did not succeed.

    Covers both transport failures (status_code is None) and error
    responses from the remote side.
    """

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class RemoteStoreClient:
    """Client for the remote journal store.

    No retries are performed; each failure is raised once as a
    RemoteStoreError for the caller to handle.
    """

    def __init__(
        self,
        endpoint_url: str,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the remote client.

        Args:
            endpoint_url: URL of the remote store endpoint.
            timeout: Request timeout in seconds. None waits until the
                transport gives up.
            transport: Optional httpx transport, mainly for tests.
        """
        self.endpoint_url = endpoint_url
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    @staticmethod
    def _headers(config: RemoteConfig) -> dict[str, str]:
        return {
            API_KEY_HEADER: config.api_key,
            STORE_ID_HEADER: config.store_id,
        }

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        """Pull a diagnostic out of an error response."""
        try:
            body = response.json()
        except ValueError:
            body = None

        if isinstance(body, dict) and body.get("error"):
            return str(body["error"])
        return f"HTTP {response.status_code}: {response.text}"

    async def _request(
        self,
        method: str,
        config: RemoteConfig,
        params: dict[str, str] | None = None,
        json_data: Any = None,
    ) -> httpx.Response:
        """Send one request, converting every failure to RemoteStoreError."""
        client = await self._get_client()

        try:
            response = await client.request(
                method,
                self.endpoint_url,
                headers=self._headers(config),
                params=params,
                json=json_data,
            )
        except httpx.TimeoutException as e:
            raise RemoteStoreError(f"Request to remote store timed out: {e}") from e
        except httpx.ConnectError as e:
            raise RemoteStoreError(f"Connection failed: {e}") from e
        except httpx.HTTPError as e:
            raise RemoteStoreError(f"Request failed: {e}") from e
        except (UnicodeEncodeError, httpx.InvalidURL) as e:
            # Raised while building the request, before anything is sent
            raise RemoteStoreError(f"Invalid remote credentials or endpoint: {e}") from e

        if not response.is_success:
            raise RemoteStoreError(
                self._error_message(response), status_code=response.status_code
            )

        return response

    async def fetch_entries(self, config: RemoteConfig) -> list[JournalEntry]:
        """List all entries in the configured store, newest first.

        The order is requested explicitly rather than relying on the
        remote default.

        Raises:
            RemoteStoreError: On transport failure, error response, or a
                body that is not a list of records.
        """
        response = await self._request(
            "GET",
            config,
            params={"sort": "date", "direction": "descending"},
        )

        try:
            data = response.json()
        except ValueError as e:
            raise RemoteStoreError(
                f"Malformed response from remote store: {e}",
                status_code=response.status_code,
            ) from e

        if not isinstance(data, list):
            raise RemoteStoreError(
                f"Malformed response from remote store: expected a list, "
                f"got {type(data).__name__}",
                status_code=response.status_code,
            )

        entries = []
        for record in data:
            if not isinstance(record, dict):
                logger.warning(f"Skipping malformed remote record: {record!r}")
                continue
            entries.append(JournalEntry.from_remote(record))

        logger.debug(f"Fetched {len(entries)} entries from remote store")
        return entries

    async def create_entry(self, config: RemoteConfig, draft: EntryDraft) -> None:
        """Write one entry to the configured store.

        Only text, mood and date are sent; the remote side assigns its
        own identifier.

        Raises:
            RemoteStoreError: On transport failure or error response.
        """
        await self._request("POST", config, json_data=draft.to_remote_payload())
        logger.debug("Entry written to remote store")
