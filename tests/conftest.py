"""Shared test fixtures for meetwatch tests.

This module provides common fixtures used across all test modules:
- A fixed clock (Friday 2024-03-15 10:00 UTC)
- A SourceEvent factory and a standard set of sample events
- An authorized in-memory calendar source
- A temporary .ics file

Usage:
    def test_something(make_event, fixed_clock):
        event = make_event(location="https://zoom.us/j/123")
        ...
"""

from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from meetwatch.calendar.models import Attendee, SourceEvent
from meetwatch.calendar.providers.base import RawAuthStatus
from meetwatch.calendar.providers.memory import InMemoryCalendarSource
from meetwatch.config import MeetwatchConfig


# ─────────────────────────────────────────────────────────────────────────────
# Path Constants
# ─────────────────────────────────────────────────────────────────────────────

PROJECT_ROOT = Path(__file__).parent.parent
ARGS_DIR = PROJECT_ROOT / "args"


# ─────────────────────────────────────────────────────────────────────────────
# Clock Fixtures
# ─────────────────────────────────────────────────────────────────────────────

FIXED_NOW = datetime(2024, 3, 15, 10, 0, tzinfo=timezone.utc)


@pytest.fixture
def now() -> datetime:
    """Friday 2024-03-15 10:00 UTC."""
    return FIXED_NOW


@pytest.fixture
def fixed_clock(now: datetime) -> Callable[[], datetime]:
    """Clock callable that always returns `now`."""
    return lambda: now


# ─────────────────────────────────────────────────────────────────────────────
# Event Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def make_event(now: datetime) -> Callable[..., SourceEvent]:
    """Factory for SourceEvents.

    Defaults to a 30 minute event starting at `now` with no meeting link;
    pass any SourceEvent field as a keyword to override it. `start` may also
    be given as an hour offset from `now` via `offset_hours`.
    """
    counter = iter(range(1, 10_000))

    def _make(offset_hours: float = 0, duration_minutes: int = 30, **fields) -> SourceEvent:
        start = fields.pop("start", now + timedelta(hours=offset_hours))
        end = fields.pop("end", start + timedelta(minutes=duration_minutes))
        defaults = {
            "event_id": f"evt-{next(counter)}",
            "title": "Test Event",
            "calendar_name": "Work",
        }
        defaults.update(fields)
        return SourceEvent(start=start, end=end, **defaults)

    return _make


@pytest.fixture
def sample_events(make_event: Callable[..., SourceEvent]) -> list[SourceEvent]:
    """A mixed day of events around `now`.

    Returns:
        list of SourceEvents; four carry a meeting link, two do not
    """
    return [
        make_event(
            event_id="standup",
            title="Daily Standup",
            offset_hours=1,
            virtual_conference_url="https://company.zoom.us/j/111222333?pwd=abc&utm_source=cal",
            organizer_name="Alex Lee",
            organizer_email="alex@example.com",
            attendees=(Attendee("Alex Lee", "alex@example.com"), Attendee("Sam", "sam@example.com")),
        ),
        make_event(
            event_id="lunch",
            title="Lunch",
            offset_hours=2,
            location="Cafeteria",
        ),
        make_event(
            event_id="design-review",
            title="Design Review",
            offset_hours=24,
            notes="Join: https://meet.google.com/abc-defg-hij",
        ),
        make_event(
            event_id="retro",
            title="Retro",
            offset_hours=-20,
            location="https://zoom.us/j/999888777",
        ),
        make_event(
            event_id="early-sync",
            title=None,
            offset_hours=-1,
            url="https://meet.google.com/xyz-abcd-efg",
        ),
        make_event(
            event_id="focus",
            title="Focus time",
            offset_hours=4,
            notes="No meeting link here, https://example.com/docs",
        ),
    ]


@pytest.fixture
def memory_source(sample_events: list[SourceEvent]) -> InMemoryCalendarSource:
    """In-memory source holding `sample_events`, already granted full access."""
    return InMemoryCalendarSource(sample_events, status=RawAuthStatus.FULL_ACCESS)


# ─────────────────────────────────────────────────────────────────────────────
# Config Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def fast_config() -> MeetwatchConfig:
    """Config with a short timer and no wake delay, for timer-driven tests."""
    return MeetwatchConfig.model_validate(
        {
            "refresh": {
                "interval_seconds": 0.01,
                "auto_refresh_enabled": True,
                "wake_refresh_delay_seconds": 0,
            }
        }
    )


# ─────────────────────────────────────────────────────────────────────────────
# ICS Fixtures
# ─────────────────────────────────────────────────────────────────────────────

SAMPLE_ICS = """\
BEGIN:VCALENDAR
VERSION:2.0
PRODID:-//meetwatch//tests//EN
X-WR-CALNAME:Team Calendar
BEGIN:VEVENT
UID:standup-series
SUMMARY:Standup
DTSTART:20240313T093000Z
DTEND:20240313T094500Z
RRULE:FREQ=DAILY;COUNT=10
EXDATE:20240316T093000Z
LOCATION:https://zoom.us/j/5551234567?pwd=secret&utm_medium=calendar
ORGANIZER;CN=Alex Lee:mailto:alex@example.com
ATTENDEE;CN=Sam Park:mailto:sam@example.com
ATTENDEE;CN=Jo:mailto:jo@example.com
END:VEVENT
BEGIN:VEVENT
UID:standup-series
RECURRENCE-ID:20240315T093000Z
SUMMARY:Standup (moved)
DTSTART:20240315T113000Z
DTEND:20240315T114500Z
LOCATION:https://zoom.us/j/5551234567?pwd=secret
END:VEVENT
BEGIN:VEVENT
UID:design-review
SUMMARY:Design Review
DTSTART:20240316T140000Z
DTEND:20240316T150000Z
X-GOOGLE-CONFERENCE:https://meet.google.com/abc-defg-hij
DESCRIPTION:Agenda in the doc
END:VEVENT
BEGIN:VEVENT
UID:offsite
SUMMARY:Offsite
DTSTART:20240320T090000Z
DTEND:20240320T170000Z
LOCATION:https://zoom.us/j/123123123
END:VEVENT
BEGIN:VEVENT
UID:cancelled-call
SUMMARY:Cancelled Call
STATUS:CANCELLED
DTSTART:20240315T150000Z
DTEND:20240315T153000Z
LOCATION:https://zoom.us/j/777777777
END:VEVENT
BEGIN:VEVENT
UID:planning
SUMMARY:Planning
DTSTART:20240315T160000Z
DTEND:20240315T170000Z
LOCATION:Room 4
END:VEVENT
END:VCALENDAR
"""


@pytest.fixture
def ics_file(tmp_path: Path) -> Path:
    """Write SAMPLE_ICS to a temporary file.

    Returns:
        Path to the .ics file
    """
    path = tmp_path / "team.ics"
    path.write_text(SAMPLE_ICS.replace("\n", "\r\n"), newline="")
    return path
