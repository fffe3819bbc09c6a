"""FastAPI web API for writing and browsing journal entries."""

import logging
from datetime import datetime
from typing import Any

from fastapi import FastAPI, HTTPException, Query
from pydantic import BaseModel, ConfigDict, Field

from .. import __version__
from ..config import Config
from ..models import (
    EntryDraft,
    InvalidDraftError,
    Mood,
    RemoteConfig,
    now_iso,
    sort_newest_first,
    validate_text,
)
from ..store import LocalStoreError
from ..sync import SyncCoordinator

logger = logging.getLogger(__name__)


class EntryRequest(BaseModel):
    """Body of POST /api/entries."""

    text: str
    mood: str = Mood.NEUTRAL.value


class ConfigRequest(BaseModel):
    """Body of PUT /api/config."""

    model_config = ConfigDict(populate_by_name=True)

    api_key: str = Field(default="", alias="apiKey")
    store_id: str = Field(default="", alias="storeId")


def _config_view(coordinator: SyncCoordinator) -> dict[str, Any]:
    remote_config = coordinator.remote_config
    return {
        "active": remote_config.is_active,
        "mode": "sync" if remote_config.is_active else "preview",
        "apiKey": remote_config.masked(),
        "storeId": remote_config.store_id,
    }


def create_app(config: Config, coordinator: SyncCoordinator) -> FastAPI:
    """Create the FastAPI application.

    Args:
        config: Application configuration.
        coordinator: The process-wide sync coordinator.

    Returns:
        Configured FastAPI application.
    """
    app = FastAPI(
        title="OneLine",
        description="One line a day mood journal",
        version=__version__,
    )

    # Store references for route handlers
    app.state.config = config
    app.state.coordinator = coordinator

    # ==================== Entries ====================

    @app.get("/api/entries")
    async def api_entries(limit: int | None = Query(None, ge=0)) -> dict[str, Any]:
        """List entries, newest first."""
        entries = sort_newest_first(await coordinator.get_entries())
        if limit is not None:
            entries = entries[:limit]

        return {
            "mode": "sync" if coordinator.is_remote_active else "preview",
            "count": len(entries),
            "entries": [e.to_dict() for e in entries],
        }

    @app.post("/api/entries")
    async def api_create_entry(body: EntryRequest) -> dict[str, Any]:
        """Save a new entry dated now."""
        try:
            draft = EntryDraft(
                text=validate_text(body.text),
                mood=Mood.parse(body.mood),
                date=now_iso(),
            )
            outcome = await coordinator.save_entry(draft)
        except InvalidDraftError as e:
            raise HTTPException(status_code=422, detail=str(e)) from e
        except LocalStoreError as e:
            logger.error(f"Failed to save entry: {e}")
            raise HTTPException(
                status_code=500, detail="Failed to save entry. Please try again."
            ) from e

        return outcome.to_dict()

    # ==================== Settings ====================

    @app.get("/api/config")
    async def api_config() -> dict[str, Any]:
        """Current remote sync settings, with the api key masked."""
        return _config_view(coordinator)

    @app.put("/api/config")
    async def api_update_config(body: ConfigRequest) -> dict[str, Any]:
        """Replace the remote sync settings."""
        try:
            coordinator.update_config(
                RemoteConfig(
                    api_key=body.api_key.strip(),
                    store_id=body.store_id.strip(),
                )
            )
        except LocalStoreError as e:
            logger.error(f"Failed to save config: {e}")
            raise HTTPException(status_code=500, detail="Failed to save settings.") from e

        return _config_view(coordinator)

    @app.get("/api/health")
    async def api_health() -> dict[str, Any]:
        """Health check endpoint.

        Always returns 200 OK even if components are unavailable.
        """
        health: dict[str, Any] = {
            "status": "ok",
            "timestamp": datetime.now().isoformat(),
            "version": __version__,
            "components": {
                "remote_sync": coordinator.is_remote_active,
            },
        }

        try:
            health["components"].update(coordinator.store.get_stats())
        except Exception as e:
            health["components"]["store_error"] = str(e)

        return health

    return app
