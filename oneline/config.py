"""Configuration loading for OneLine."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml


@dataclass
class StorageConfig:
    """Where the local store lives."""

    db_path: str = "~/.oneline/oneline.db"
    seed_sample_entries: bool = True


@dataclass
class RemoteSection:
    """Remote store endpoint settings.

    api_key and store_id only seed the stored credentials on first run;
    afterwards they are managed with `oneline config set`.
    """

    endpoint_url: str = "http://localhost:3000/api/notion"
    timeout_seconds: float | None = None  # None: wait for the transport
    api_key: str = ""
    store_id: str = ""


@dataclass
class DashboardConfig:
    host: str = "127.0.0.1"
    port: int = 8080


@dataclass
class Config:
    storage: StorageConfig = field(default_factory=StorageConfig)
    remote: RemoteSection = field(default_factory=RemoteSection)
    dashboard: DashboardConfig = field(default_factory=DashboardConfig)


def _get_env(key: str, default: Any = None) -> Any:
    """Get environment variable with ONELINE_ prefix."""
    return os.environ.get(f"ONELINE_{key}", default)


def _parse_bool(value: str) -> bool:
    return value.lower() in ("true", "1", "yes")


def _parse_timeout(value: Any) -> float | None:
    """Timeouts of None, "none" or 0 mean no timeout."""
    if value is None:
        return None
    if isinstance(value, str) and value.strip().lower() in ("", "none", "null"):
        return None
    timeout = float(value)
    return timeout if timeout > 0 else None


def _apply_env_overrides(config: Config) -> Config:
    """Apply environment variable overrides to config."""
    # Storage overrides
    if db_path := _get_env("DB_PATH"):
        config.storage.db_path = db_path
    if seed := _get_env("SEED_SAMPLE_ENTRIES"):
        config.storage.seed_sample_entries = _parse_bool(seed)

    # Remote overrides
    if endpoint := _get_env("REMOTE_ENDPOINT_URL"):
        config.remote.endpoint_url = endpoint
    if (timeout := _get_env("REMOTE_TIMEOUT")) is not None:
        config.remote.timeout_seconds = _parse_timeout(timeout)
    if api_key := _get_env("REMOTE_API_KEY"):
        config.remote.api_key = api_key
    if store_id := _get_env("REMOTE_STORE_ID"):
        config.remote.store_id = store_id

    # Dashboard overrides
    if host := _get_env("DASHBOARD_HOST"):
        config.dashboard.host = host
    if port := _get_env("DASHBOARD_PORT"):
        config.dashboard.port = int(port)

    return config


def load_config(config_path: str | Path | None = None) -> Config:
    """Load configuration from YAML file with environment variable overrides.

    Args:
        config_path: Path to YAML config file. If None or missing, uses
            defaults.

    Returns:
        Loaded Config object.
    """
    config = Config()

    if config_path:
        path = Path(config_path).expanduser()
        if path.exists():
            with open(path) as f:
                data = yaml.safe_load(f) or {}

            # Parse storage config
            if "storage" in data:
                storage_data = data["storage"] or {}
                config.storage = StorageConfig(
                    db_path=storage_data.get("db_path", config.storage.db_path),
                    seed_sample_entries=storage_data.get(
                        "seed_sample_entries", config.storage.seed_sample_entries
                    ),
                )

            # Parse remote config
            if "remote" in data:
                remote_data = data["remote"] or {}
                config.remote = RemoteSection(
                    endpoint_url=remote_data.get(
                        "endpoint_url", config.remote.endpoint_url
                    ),
                    timeout_seconds=_parse_timeout(
                        remote_data.get("timeout_seconds", config.remote.timeout_seconds)
                    ),
                    api_key=str(remote_data.get("api_key") or ""),
                    store_id=str(remote_data.get("store_id") or ""),
                )

            # Parse dashboard config
            if "dashboard" in data:
                dash_data = data["dashboard"] or {}
                config.dashboard = DashboardConfig(
                    host=dash_data.get("host", config.dashboard.host),
                    port=dash_data.get("port", config.dashboard.port),
                )

    # Apply environment variable overrides
    return _apply_env_overrides(config)
