"""CLI entry point for OneLine."""

import argparse
import asyncio
import json
import logging
import sys
import traceback
from datetime import datetime
from pathlib import Path

from .config import load_config
from .models import (
    EntryDraft,
    InvalidDraftError,
    Mood,
    RemoteConfig,
    format_entry_date,
    now_iso,
    sort_newest_first,
    validate_text,
)
from .store import LocalStoreError
from .sync import SyncCoordinator


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "component": record.name,
            "message": record.getMessage(),
        }

        # Add exception info if present
        if record.exc_info:
            log_data["exception"] = "".join(traceback.format_exception(*record.exc_info))

        try:
            return json.dumps(log_data)
        except (TypeError, ValueError):
            log_data["message"] = str(log_data["message"])
            if "exception" in log_data:
                log_data["exception"] = str(log_data["exception"])
            return json.dumps(log_data)


def setup_logging(verbose: bool = False, log_level: str | None = None, json_output: bool = False) -> None:
    """Configure logging.

    Args:
        verbose: Enable debug logging (ignored if log_level is set).
        log_level: Explicit log level (warning, info, debug).
        json_output: Output logs as JSON lines for machine parsing.
    """
    if log_level:
        level_map = {
            "warning": logging.WARNING,
            "info": logging.INFO,
            "debug": logging.DEBUG,
        }
        level = level_map.get(log_level, logging.WARNING)
    else:
        level = logging.DEBUG if verbose else logging.WARNING

    handler = logging.StreamHandler()
    if json_output:
        handler.setFormatter(JSONFormatter())
    else:
        formatter = logging.Formatter(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        handler.setFormatter(formatter)

    logging.basicConfig(
        level=level,
        handlers=[handler],
    )


async def cmd_write(args: argparse.Namespace) -> int:
    """Save a new entry dated now."""
    config = load_config(args.config)

    try:
        draft = EntryDraft(
            text=validate_text(args.text),
            mood=Mood.parse(args.mood),
            date=now_iso(),
        )
    except InvalidDraftError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    coordinator = SyncCoordinator.from_config(config)
    try:
        outcome = await coordinator.save_entry(draft)
    except LocalStoreError as e:
        print(f"Failed to save entry. Please try again. ({e})", file=sys.stderr)
        return 1
    finally:
        await coordinator.close()

    print(outcome.message)
    return 0 if outcome.error is None else 3


async def cmd_history(args: argparse.Namespace) -> int:
    """Show entries, newest first."""
    config = load_config(args.config)
    coordinator = SyncCoordinator.from_config(config)

    try:
        entries = sort_newest_first(await coordinator.get_entries())
    finally:
        await coordinator.close()

    if args.limit is not None:
        entries = entries[: args.limit]

    if args.output_json:
        print(json.dumps([e.to_dict() for e in entries], indent=2))
        return 0

    if not entries:
        print("No entries yet. Write your first line!")
        return 0

    for entry in entries:
        print(f"{format_entry_date(entry.date):<20} {entry.mood.value.upper():<10} {entry.text}")

    return 0


async def cmd_config_show(args: argparse.Namespace) -> int:
    """Show remote sync settings."""
    config = load_config(args.config)
    coordinator = SyncCoordinator.from_config(config)

    try:
        remote_config = coordinator.remote_config
    finally:
        await coordinator.close()

    print(f"Endpoint:  {config.remote.endpoint_url}")
    print(f"API key:   {remote_config.masked() or '(not set)'}")
    print(f"Store ID:  {remote_config.store_id or '(not set)'}")
    if remote_config.is_active:
        print("Mode:      sync")
    else:
        print("Mode:      preview (entries are saved locally only)")

    return 0


async def cmd_config_set(args: argparse.Namespace) -> int:
    """Replace remote sync settings."""
    config = load_config(args.config)
    coordinator = SyncCoordinator.from_config(config)

    try:
        current = coordinator.remote_config
        coordinator.update_config(
            RemoteConfig(
                api_key=args.api_key if args.api_key is not None else current.api_key,
                store_id=args.store_id if args.store_id is not None else current.store_id,
            )
        )
        active = coordinator.is_remote_active
    except LocalStoreError as e:
        print(f"Failed to save settings: {e}", file=sys.stderr)
        return 1
    finally:
        await coordinator.close()

    print("Settings saved!" if active else "Settings saved (preview mode: both fields are needed to sync).")
    return 0


async def cmd_config_clear(args: argparse.Namespace) -> int:
    """Remove remote sync settings."""
    config = load_config(args.config)
    coordinator = SyncCoordinator.from_config(config)

    try:
        coordinator.clear_config()
    finally:
        await coordinator.close()

    print("Settings cleared, back to preview mode.")
    return 0


async def cmd_serve(args: argparse.Namespace) -> int:
    """Start the web API."""
    config = load_config(args.config)

    try:
        from .dashboard import create_app

        import uvicorn
    except ImportError as e:
        print(f"Web dependencies not installed: {e}", file=sys.stderr)
        print("Install with: pip install oneline[dashboard]", file=sys.stderr)
        return 1

    host = args.host or config.dashboard.host
    port = args.port or config.dashboard.port

    coordinator = SyncCoordinator.from_config(config)
    app = create_app(config, coordinator)

    print(f"Starting OneLine at http://{host}:{port}")

    try:
        verbose = getattr(args, "verbose", False)
        config_uvicorn = uvicorn.Config(
            app,
            host=host,
            port=port,
            log_level="info" if verbose else "warning",
        )
        server = uvicorn.Server(config_uvicorn)
        await server.serve()
    finally:
        await coordinator.close()

    return 0


def main() -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        prog="oneline",
        description="Capture your day in one line",
    )
    parser.add_argument(
        "-c", "--config",
        type=Path,
        default=None,
        help="Path to config file (YAML)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["warning", "info", "debug"],
        default=None,
        help="Set log level explicitly (overrides -v/--verbose)",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output logs as JSON for machine parsing",
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Write command
    write_parser = subparsers.add_parser("write", help="Save today's line")
    write_parser.add_argument("text", help="What happened today")
    write_parser.add_argument(
        "-m", "--mood",
        type=str,
        default=Mood.NEUTRAL.value,
        choices=[m.value for m in Mood],
        help="Your mood (default: Neutral)",
    )
    write_parser.set_defaults(func=cmd_write)

    # History command
    history_parser = subparsers.add_parser("history", help="Show past entries")
    history_parser.add_argument(
        "-n", "--limit",
        type=int,
        default=None,
        help="Show at most N entries",
    )
    history_parser.add_argument(
        "--json",
        dest="output_json",
        action="store_true",
        help="Output entries as JSON",
    )
    history_parser.set_defaults(func=cmd_history)

    # Config commands
    config_parser = subparsers.add_parser("config", help="Manage remote sync settings")
    config_subparsers = config_parser.add_subparsers(dest="config_command", help="Config commands")

    config_show = config_subparsers.add_parser("show", help="Show current settings")
    config_show.set_defaults(func=cmd_config_show)

    config_set = config_subparsers.add_parser("set", help="Set remote credentials")
    config_set.add_argument("--api-key", default=None, help="Remote store API key")
    config_set.add_argument("--store-id", default=None, help="Remote store (database) ID")
    config_set.set_defaults(func=cmd_config_set)

    config_clear = config_subparsers.add_parser("clear", help="Remove remote credentials")
    config_clear.set_defaults(func=cmd_config_clear)

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Start the web API")
    serve_parser.add_argument(
        "-p", "--port",
        type=int,
        default=None,
        help="Port to listen on (default: from config, 8080)",
    )
    serve_parser.add_argument(
        "--host",
        type=str,
        default=None,
        help="Host to bind to (default: from config, 127.0.0.1)",
    )
    serve_parser.set_defaults(func=cmd_serve)

    args = parser.parse_args()

    setup_logging(args.verbose, args.log_level, args.json)

    if not args.command:
        parser.print_help()
        return 1

    # Handle config subcommand requiring its own subcommand
    if args.command == "config" and not args.config_command:
        config_parser.print_help()
        return 1

    return asyncio.run(args.func(args))


if __name__ == "__main__":
    sys.exit(main())
