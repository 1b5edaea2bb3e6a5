"""
Tool: In-Memory Calendar Source
Purpose: Calendar store held in process memory

Used when no calendar file is configured, by host shells that push events
in themselves, and throughout the tests.

Usage:
    from meetwatch.calendar.providers.memory import InMemoryCalendarSource

    source = InMemoryCalendarSource(events=[...])
    source.add_event(event)
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

from meetwatch.calendar.models import SourceEvent
from meetwatch.calendar.providers.base import CalendarSource, RawAuthStatus, overlaps


class InMemoryCalendarSource(CalendarSource):
    """
    Calendar source backed by a list.

    Args:
        events: Initial events, kept in the given order
        status: Initial authorization status
        grant: Whether request_full_access grants access
    """

    def __init__(
        self,
        events: Iterable[SourceEvent] = (),
        status: RawAuthStatus = RawAuthStatus.NOT_DETERMINED,
        grant: bool = True,
    ):
        self.events: list[SourceEvent] = list(events)
        self.status = status
        self.grant = grant
        self.fetch_calls: list[tuple[datetime, datetime]] = []
        self.access_requests = 0

    @property
    def source_name(self) -> str:
        return "memory"

    def current_authorization_status(self) -> RawAuthStatus:
        return self.status

    async def request_full_access(self) -> bool:
        self.access_requests += 1
        if self.status is RawAuthStatus.NOT_DETERMINED:
            self.status = RawAuthStatus.FULL_ACCESS if self.grant else RawAuthStatus.DENIED
        return self.status is RawAuthStatus.FULL_ACCESS

    def fetch_events(self, start: datetime, end: datetime) -> list[SourceEvent]:
        self.fetch_calls.append((start, end))
        return [e for e in self.events if overlaps(e.start, e.end, start, end)]

    def add_event(self, event: SourceEvent) -> None:
        self.events.append(event)

    def replace_events(self, events: Iterable[SourceEvent]) -> None:
        self.events = list(events)


__all__ = ["InMemoryCalendarSource"]
