#!/usr/bin/env python3
"""
Meetwatch Command Line Interface

Main entry point for the `meetwatch` command.

Usage:
    meetwatch list                      # Today's video meetings
    meetwatch list --all --json         # Yesterday, today and tomorrow as JSON
    meetwatch list --ics ~/work.ics     # Read a specific calendar file
    meetwatch watch --interval 30       # Keep refreshing until Ctrl-C
    meetwatch classify URL [URL ...]    # Which platform is this link?
    meetwatch --version                 # Show version
"""

from __future__ import annotations

import argparse
import asyncio
import json
import math
import signal
import sys

from meetwatch.calendar.coordinator import SyncCoordinator
from meetwatch.calendar.errors import AccessDeniedError, CalendarError
from meetwatch.calendar.extractor import find_meeting_url_with_platform
from meetwatch.calendar.lifecycle import HostLifecycle
from meetwatch.calendar.models import MeetingRecord
from meetwatch.calendar.patterns import classify_platform
from meetwatch.calendar.providers import get_source
from meetwatch.config import MeetwatchConfig, RefreshConfig, load_config
from meetwatch.logging_config import get_logger, setup_logging_from_config


logger = get_logger(__name__)


# -----------------------------------------------------------------------------
# Shared helpers
# -----------------------------------------------------------------------------


def _positive_seconds(value: str) -> float:
    """argparse type for intervals: a number of seconds greater than zero."""
    try:
        seconds = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid number of seconds: {value!r}") from None
    if not math.isfinite(seconds) or seconds <= 0:
        raise argparse.ArgumentTypeError(f"must be a positive number of seconds, got {value}")
    return seconds


def _load(args) -> MeetwatchConfig:
    """Load config and apply command-line overrides."""
    config = load_config(args.config)

    ics = getattr(args, "ics", None)
    if ics:
        config.source = config.source.model_copy(update={"ics_path": ics})

    interval = getattr(args, "interval", None)
    if interval is not None:
        # model_copy skips validation; interval_seconds must stay > 0
        config.refresh = RefreshConfig.model_validate(
            {**config.refresh.model_dump(), "interval_seconds": interval}
        )

    setup_logging_from_config(config.logging)
    return config


def _print_error(error: CalendarError) -> None:
    print(f"Error: {error.description}", file=sys.stderr)
    print(f"  {error.recovery_suggestion}", file=sys.stderr)


async def _ensure_access(coordinator: SyncCoordinator) -> bool:
    if coordinator.auth_state.allows_read:
        return True
    if await coordinator.request_access():
        return True

    print(f"Calendar access not granted ({coordinator.auth_state})", file=sys.stderr)
    print(f"  {AccessDeniedError.recovery_suggestion}", file=sys.stderr)
    return False


def _format_meeting(meeting: MeetingRecord) -> str:
    start = meeting.start_time.strftime("%H:%M")
    end = meeting.end_time.strftime("%H:%M")
    people = f"{meeting.attendee_count} attendee{'s' if meeting.attendee_count != 1 else ''}"
    lines = [f"  {start}-{end}  {meeting.platform.short_name:<5} {meeting.title}  ({people})"]
    if meeting.join_url:
        lines.append(f"               {meeting.join_url}")
    return "\n".join(lines)


def _day_groups(coordinator: SyncCoordinator, all_days: bool):
    if all_days:
        return [
            ("Yesterday", coordinator.yesterday_meetings),
            ("Today", coordinator.today_meetings),
            ("Tomorrow", coordinator.tomorrow_meetings),
        ]
    return [("Today", coordinator.today_meetings)]


def _print_groups(coordinator: SyncCoordinator, all_days: bool, hide_completed: bool) -> None:
    now = coordinator.now()
    for label, meetings in _day_groups(coordinator, all_days):
        visible = [m for m in meetings if not m.should_be_hidden(hide_completed, now)]
        print(f"{label}:")
        if not visible:
            print("  No video meetings")
        for meeting in visible:
            print(_format_meeting(meeting))
        print()


# -----------------------------------------------------------------------------
# Commands
# -----------------------------------------------------------------------------


async def _list_meetings(config: MeetwatchConfig, args) -> int:
    coordinator = SyncCoordinator(get_source(config), config=config)
    try:
        if not await _ensure_access(coordinator):
            return 1
        await coordinator.refresh()
    except CalendarError as e:
        _print_error(e)
        return 1
    finally:
        await coordinator.close()

    if args.json:
        payload = {
            label.lower(): [m.to_dict() for m in meetings]
            for label, meetings in _day_groups(coordinator, args.all)
        }
        print(json.dumps(payload, indent=2))
        return 0

    hide_completed = config.display.hide_completed_after_5_min and not args.all
    _print_groups(coordinator, args.all, hide_completed)
    return 0


def cmd_list(args):
    """Refresh once and print the meeting list."""
    config = _load(args)
    return asyncio.run(_list_meetings(config, args))


def _install_signal_handlers(lifecycle: HostLifecycle) -> None:
    """Map SIGUSR1/SIGUSR2 to system sleep/wake so a supervisor can forward power events."""
    loop = asyncio.get_running_loop()
    for name, handler in (("SIGUSR1", lifecycle.on_system_sleep), ("SIGUSR2", lifecycle.on_system_wake)):
        signum = getattr(signal, name, None)
        if signum is None:
            continue
        try:
            loop.add_signal_handler(signum, handler)
        except (NotImplementedError, RuntimeError):
            logger.debug("signal_handler_unavailable", signal=name)


async def _watch(config: MeetwatchConfig) -> int:
    lifecycle = HostLifecycle()
    coordinator = SyncCoordinator(get_source(config), config=config, lifecycle=lifecycle)

    last_seen: list[tuple] = []

    def on_meetings(meetings) -> None:
        # Records get new ids every cycle; compare what a user would see
        seen = [(m.event_identifier, m.start_time, m.title, m.join_url) for m in meetings]
        if seen == last_seen:
            return
        last_seen[:] = seen
        print(f"Updated {coordinator.now().strftime('%H:%M:%S')}")
        _print_groups(coordinator, False, config.display.hide_completed_after_5_min)

    try:
        if not await _ensure_access(coordinator):
            return 1

        coordinator.subscribe("meetings", on_meetings)
        _install_signal_handlers(lifecycle)

        try:
            await coordinator.refresh()
        except CalendarError as e:
            _print_error(e)

        # A first refresh that finds nothing publishes no change
        if not last_seen:
            on_meetings(coordinator.meetings)

        coordinator.start_auto_refresh()
        await asyncio.Event().wait()
    finally:
        await coordinator.close()
    return 0


def cmd_watch(args):
    """Run the coordinator with auto-refresh until interrupted."""
    config = _load(args)
    try:
        return asyncio.run(_watch(config))
    except KeyboardInterrupt:
        print("Stopped.")
        return 0


def cmd_classify(args):
    """Print the platform of each URL and whether it is a joinable meeting link."""
    for url in args.urls:
        platform = classify_platform(url)
        found = find_meeting_url_with_platform(url)
        status = "ok" if found else "no meeting link"
        print(f"{platform.display_name:<12} {status:<16} {url}")
    return 0


def cmd_version(args):
    """Show version information."""
    try:
        from importlib.metadata import PackageNotFoundError, version

        v = version("meetwatch")
    except PackageNotFoundError:
        from meetwatch import __version__

        v = f"{__version__} (development)"

    print(f"meetwatch version {v}")


# -----------------------------------------------------------------------------
# Entry point
# -----------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="meetwatch",
        description="Meetwatch - Zoom and Google Meet links from your calendar",
    )
    parser.add_argument(
        "--version", "-V", action="store_true", help="Show version and exit"
    )
    parser.add_argument(
        "--config", default=None, help="Config file (default: args/meetwatch.yaml)"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # list
    list_parser = subparsers.add_parser(
        "list", help="Refresh once and print video meetings"
    )
    list_parser.add_argument(
        "--ics", default=None, help="Read events from this .ics file"
    )
    list_parser.add_argument(
        "--json", action="store_true", help="Print meetings as JSON"
    )
    list_parser.add_argument(
        "--all", action="store_true", help="Show yesterday, today and tomorrow"
    )
    list_parser.set_defaults(func=cmd_list)

    # watch
    watch_parser = subparsers.add_parser(
        "watch", help="Keep the meeting list fresh until Ctrl-C"
    )
    watch_parser.add_argument(
        "--ics", default=None, help="Read events from this .ics file"
    )
    watch_parser.add_argument(
        "--interval", type=_positive_seconds, default=None, help="Refresh interval in seconds (default: 60)"
    )
    watch_parser.set_defaults(func=cmd_watch)

    # classify
    classify_parser = subparsers.add_parser(
        "classify", help="Print the meeting platform for each URL"
    )
    classify_parser.add_argument("urls", nargs="+", metavar="URL", help="URL to classify")
    classify_parser.set_defaults(func=cmd_classify)

    return parser


def main(argv=None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    # Handle --version at top level
    if args.version:
        cmd_version(args)
        return

    # If no command given, show help
    if not args.command:
        parser.print_help()
        return

    result = args.func(args)

    # Commands may return an exit code
    if isinstance(result, int) and result != 0:
        sys.exit(result)


if __name__ == "__main__":
    main()
