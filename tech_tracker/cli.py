"""Command-line interface for tech-tracker."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Callable, Iterable, Optional, Protocol

from . import constants
from .adapters import TechTrackerClient
from .config import TrackerConfig, load_config
from .logging import configure_logging
from .state import ClientState
from .tracker import TechnicianTracker

LOGGER = logging.getLogger(__name__)


class _StatusRecord(Protocol):
    name: str
    status: str
    time: datetime


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=constants.APP_NAME, description="Technician status board client"
    )
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=constants.DEFAULT_CONFIG_PATH,
        help=f"Path to configuration file (default: {constants.DEFAULT_CONFIG_PATH})",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("list", help="Show the current status of every technician")

    update_parser = subparsers.add_parser("update", help="Set a technician's status")
    update_parser.add_argument("name", help="Technician name")
    update_parser.add_argument("status", nargs="?", help="New status text")
    update_parser.add_argument(
        "-p",
        "--preset",
        type=int,
        metavar="N",
        help="Use preset status N (see the 'presets' command)",
    )

    history_parser = subparsers.add_parser("history", help="Show the status change log")
    history_parser.add_argument("--page", type=int, default=1, help="Page to show")

    subparsers.add_parser("presets", help="List the preset statuses")
    subparsers.add_parser(
        "show-config", help="Print the resolved configuration and exit"
    )

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    config = load_config(args.config)
    configure_logging(
        config.logging.level,
        log_path=config.logging.path,
        log_network=config.logging.log_network,
    )

    if args.command == "show-config":
        print(f"Configuration loaded from {config.path!s}\n")
        for section in config.raw.sections():
            print(f"[{section}]")
            for key, value in config.raw[section].items():
                if key == "api_key" and value:
                    value = "********"
                print(f"{key} = {value}")
            print()
        return 0

    if args.command == "presets":
        for index, status in enumerate(constants.PRESET_STATUSES, start=1):
            print(f"{index:>2}. {status}")
        return 0

    if args.command == "update":
        status = _resolve_status(parser, args.status, args.preset)
        return asyncio.run(_run_update(config, args.name, status))

    if args.command == "list":
        return asyncio.run(_run_list(config))

    if args.command == "history":
        if args.page < 1:
            parser.error("--page must be 1 or greater")
        return asyncio.run(_run_history(config, args.page))

    LOGGER.error("Unknown command: %s", args.command)
    return 1


def _resolve_status(
    parser: argparse.ArgumentParser, status: Optional[str], preset: Optional[int]
) -> str:
    if status is not None and preset is not None:
        parser.error("provide either a status or --preset, not both")
    if preset is not None:
        if not 1 <= preset <= len(constants.PRESET_STATUSES):
            parser.error(
                f"--preset must be between 1 and {len(constants.PRESET_STATUSES)}"
            )
        return constants.PRESET_STATUSES[preset - 1]
    if status is None:
        parser.error("provide either a status or --preset")
    if not status.strip():
        parser.error("status cannot be empty")
    return status


def _build_tracker(config: TrackerConfig) -> TechnicianTracker:
    return TechnicianTracker(
        TechTrackerClient(config.api),
        ClientState(),
        discard_stale_responses=config.history.discard_stale_responses,
    )


async def _run_list(config: TrackerConfig) -> int:
    tracker = _build_tracker(config)
    try:
        await tracker.refresh_technicians()
        await tracker.wait_idle()
    finally:
        await tracker.aclose()

    return _report(tracker.state, lambda: _print_records(tracker.state.technicians))


async def _run_update(config: TrackerConfig, name: str, status: str) -> int:
    tracker = _build_tracker(config)
    try:
        updated = await tracker.submit_status(name, status)
        await tracker.wait_idle()
    finally:
        await tracker.aclose()

    if not updated:
        LOGGER.debug("Update for %s was not applied", name)
    return _report(tracker.state, lambda: _print_records(tracker.state.technicians))


async def _run_history(config: TrackerConfig, page: int) -> int:
    tracker = _build_tracker(config)
    try:
        await tracker.load_history_page(page)
        await tracker.wait_idle()
    finally:
        await tracker.aclose()

    def render() -> None:
        _print_records(tracker.state.history)
        print(f"\nPage {tracker.state.current_page} of {tracker.state.total_pages}")

    return _report(tracker.state, render)


def _report(state: ClientState, render: Callable[[], None]) -> int:
    if state.last_error is not None:
        print(f"error: {state.last_error}", file=sys.stderr)
        return 1
    render()
    return 0


def _print_records(records: Iterable[_StatusRecord]) -> None:
    rows = list(records)
    if not rows:
        print("(no records)")
        return
    name_width = max(len(row.name) for row in rows)
    status_width = max(len(row.status) for row in rows)
    for row in rows:
        print(
            f"{row.name:<{name_width}}  {row.status:<{status_width}}  "
            f"{format_local_time(row.time)}"
        )


def format_local_time(value: datetime) -> str:
    """Render a timestamp as ``HH:MM DD Mon`` in the local timezone."""

    local = value.astimezone()
    return f"{local:%H:%M} {local:%d %b}"


if __name__ == "__main__":
    sys.exit(main())
