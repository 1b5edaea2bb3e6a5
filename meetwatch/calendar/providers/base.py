"""
Tool: Calendar Source Base
Purpose: Abstract interface for the read-only calendar store the coordinator syncs from

Defines the common interface that all calendar sources must implement.
This allows the coordinator to work with any source interchangeably.

Usage:
    from meetwatch.calendar.providers.base import CalendarSource, RawAuthStatus
    from meetwatch.calendar.providers.ics import IcsCalendarSource

    source = IcsCalendarSource("~/calendar.ics")
    events = source.fetch_events(start, end)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from enum import Enum

from meetwatch.calendar.models import SourceEvent


class RawAuthStatus(Enum):
    """Permission status as reported by the underlying calendar store."""

    NOT_DETERMINED = "notDetermined"
    AUTHORIZED = "authorized"
    FULL_ACCESS = "fullAccess"
    WRITE_ONLY = "writeOnly"
    DENIED = "denied"
    RESTRICTED = "restricted"


class CalendarSource(ABC):
    """
    Abstract base class for calendar sources.

    Sources are local and synchronously queryable. `fetch_events` may block;
    the coordinator runs it off the event loop.
    """

    @property
    @abstractmethod
    def source_name(self) -> str:
        """Return the source name (e.g., 'ics', 'memory')."""
        pass

    @abstractmethod
    def current_authorization_status(self) -> RawAuthStatus:
        """
        Read the current permission status without prompting.

        Returns:
            RawAuthStatus (implementations may return other values; the
            coordinator maps anything unrecognised to an error state)
        """
        pass

    @abstractmethod
    async def request_full_access(self) -> bool:
        """
        Ask for read access to events.

        Returns:
            True if access was granted

        Raises:
            Exception: if the request itself failed
        """
        pass

    @abstractmethod
    def fetch_events(self, start: datetime, end: datetime) -> list[SourceEvent]:
        """
        Fetch every event whose interval intersects [start, end).

        Args:
            start: Window start (inclusive)
            end: Window end (exclusive)

        Returns:
            Events in source order
        """
        pass


def overlaps(event_start: datetime, event_end: datetime, start: datetime, end: datetime) -> bool:
    """
    Whether [event_start, event_end) intersects [start, end).

    Zero-length events are treated as instants, so one starting exactly at
    `start` is included.
    """
    if event_end <= event_start:
        return start <= event_start < end
    return event_start < end and event_end > start


__all__ = ["CalendarSource", "RawAuthStatus", "overlaps"]
