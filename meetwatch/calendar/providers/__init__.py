"""
Calendar Sources - Where the coordinator reads events from

Components:
    base.py: CalendarSource interface and RawAuthStatus
    memory.py: In-process event list (default, tests, host-fed events)
    ics.py: Local .ics file, re-read on every fetch
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from meetwatch.calendar.providers.base import CalendarSource, RawAuthStatus
from meetwatch.calendar.providers.ics import IcsCalendarSource
from meetwatch.calendar.providers.memory import InMemoryCalendarSource


if TYPE_CHECKING:
    from meetwatch.config import MeetwatchConfig


def get_source(config: MeetwatchConfig) -> CalendarSource:
    """
    Build the calendar source described by the `source:` config section.

    Returns:
        IcsCalendarSource when `source.ics_path` is set, otherwise an empty
        InMemoryCalendarSource
    """
    if config.source.ics_path:
        return IcsCalendarSource(
            config.source.ics_path,
            calendar_name=config.source.calendar_name,
            tz=config.display.tzinfo,
        )
    return InMemoryCalendarSource()


__all__ = [
    "CalendarSource",
    "IcsCalendarSource",
    "InMemoryCalendarSource",
    "RawAuthStatus",
    "get_source",
]
