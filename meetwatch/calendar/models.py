"""
Tool: Calendar Models
Purpose: Value types shared by the extractor, record builder, and sync coordinator

Usage:
    from meetwatch.calendar.models import AuthorizationState, MeetingRecord, Platform, SourceEvent

Everything here is immutable. A MeetingRecord is built once per sync cycle
and thrown away on the next one; the stable key across cycles is
`event_identifier`, never `id`.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import TYPE_CHECKING, Any


if TYPE_CHECKING:
    from meetwatch.calendar.patterns import MeetingURLPattern


UNTITLED_MEETING = "Untitled Meeting"

# A meeting counts as "upcoming" this long before it starts
UPCOMING_WINDOW = timedelta(minutes=5)

# Completed meetings may be hidden this many minutes after they end
HIDE_COMPLETED_AFTER_MINUTES = 5.0


# =============================================================================
# Authorization
# =============================================================================


class AuthorizationKind(str, Enum):
    """Tag of an AuthorizationState."""

    UNDETERMINED = "notDetermined"
    AUTHORIZED = "authorized"
    FULL_ACCESS = "fullAccess"
    WRITE_ONLY = "writeOnly"
    DENIED = "denied"
    RESTRICTED = "restricted"
    ERROR = "error"


@dataclass(frozen=True)
class AuthorizationState:
    """
    Calendar permission as last observed by the coordinator.

    Tag-only states are exposed as class attributes
    (AuthorizationState.FULL_ACCESS, ...). Errors carry a message and compare
    equal only when the messages match:

        AuthorizationState.error("boom") == AuthorizationState.error("boom")  # True
        AuthorizationState.error("boom") == AuthorizationState.error("bang")  # False
    """

    kind: AuthorizationKind
    message: str | None = None

    @classmethod
    def error(cls, message: str) -> AuthorizationState:
        return cls(AuthorizationKind.ERROR, message)

    @property
    def is_error(self) -> bool:
        return self.kind is AuthorizationKind.ERROR

    @property
    def allows_read(self) -> bool:
        """True when events may be fetched (full access or legacy authorized)."""
        return self.kind in (AuthorizationKind.FULL_ACCESS, AuthorizationKind.AUTHORIZED)

    def __str__(self) -> str:
        if self.is_error:
            return f"error({self.message})"
        return self.kind.value


AuthorizationState.UNDETERMINED = AuthorizationState(AuthorizationKind.UNDETERMINED)
AuthorizationState.AUTHORIZED = AuthorizationState(AuthorizationKind.AUTHORIZED)
AuthorizationState.FULL_ACCESS = AuthorizationState(AuthorizationKind.FULL_ACCESS)
AuthorizationState.WRITE_ONLY = AuthorizationState(AuthorizationKind.WRITE_ONLY)
AuthorizationState.DENIED = AuthorizationState(AuthorizationKind.DENIED)
AuthorizationState.RESTRICTED = AuthorizationState(AuthorizationKind.RESTRICTED)


# =============================================================================
# Platform
# =============================================================================


class Platform(Enum):
    """
    Video meeting providers recognised by the extractor.

    Declaration order is significant: classification walks the members in
    this order and the first one with a matching pattern wins.
    """

    ZOOM = "zoom"
    GOOGLE_MEET = "googleMeet"
    UNKNOWN = "unknown"

    @property
    def display_name(self) -> str:
        names = {
            "zoom": "Zoom",
            "googleMeet": "Google Meet",
            "unknown": "Unknown",
        }
        return names[self.value]

    @property
    def short_name(self) -> str:
        names = {
            "zoom": "Zoom",
            "googleMeet": "Meet",
            "unknown": "Unknown",
        }
        return names[self.value]

    @property
    def icon_name(self) -> str:
        icons = {
            "zoom": "video.fill",
            "googleMeet": "person.2.fill",
            "unknown": "questionmark.circle.fill",
        }
        return icons[self.value]

    @property
    def color(self) -> str:
        colors = {
            "zoom": "blue",
            "googleMeet": "green",
            "unknown": "gray",
        }
        return colors[self.value]

    @property
    def patterns(self) -> tuple[MeetingURLPattern, ...]:
        """URL patterns owned by this platform, in declaration order (empty for UNKNOWN)."""
        from meetwatch.calendar.patterns import MeetingURLPattern

        return MeetingURLPattern.for_platform(self)

    @classmethod
    def detect(cls, url: str) -> Platform:
        from meetwatch.calendar.patterns import classify_platform

        return classify_platform(url)

    def matches(self, url: str) -> bool:
        """
        Whether `url` classifies as this platform.

        UNKNOWN has no patterns of its own; it matches exactly when no other
        platform does.
        """
        return Platform.detect(url) is self


# =============================================================================
# Events and meetings
# =============================================================================


@dataclass(frozen=True)
class Attendee:
    """Attendee name/email pair; either side may be missing."""

    name: str | None = None
    email: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "email": self.email}


@dataclass(frozen=True)
class SourceEvent:
    """
    Calendar event as handed over by a CalendarSource.

    The four text fields are what the extractor searches, highest priority
    first: virtual_conference_url, url, location, notes.
    """

    event_id: str
    title: str | None
    start: datetime
    end: datetime
    calendar_name: str = ""
    organizer_name: str | None = None
    organizer_email: str | None = None
    attendees: tuple[Attendee, ...] = ()
    attendee_count: int | None = None

    virtual_conference_url: str | None = None
    url: str | None = None
    location: str | None = None
    notes: str | None = None

    def __post_init__(self):
        if not isinstance(self.attendees, tuple):
            object.__setattr__(self, "attendees", tuple(self.attendees))
        if self.attendee_count is None:
            object.__setattr__(self, "attendee_count", len(self.attendees))


def _now_for(moment: datetime) -> datetime:
    """Current time in the same timezone convention (aware/naive) as `moment`."""
    if moment.tzinfo is None:
        return datetime.now()
    return datetime.now(moment.tzinfo)


@dataclass(frozen=True, eq=False)
class MeetingRecord:
    """
    A video meeting extracted from a calendar event.

    `end_time` is not checked against `start_time`; zero-length and
    negative-length meetings are kept as-is.

    Equality covers every field except the attendee list, of which only the
    length is compared. Hashing uses id, event_identifier, title, start_time
    and attendee_count.
    """

    id: uuid.UUID
    title: str
    start_time: datetime
    end_time: datetime
    platform: Platform
    attendee_count: int
    calendar_name: str
    event_identifier: str
    join_url: str | None = None
    organizer_name: str | None = None
    organizer_email: str | None = None
    attendees: tuple[Attendee, ...] = field(default=())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MeetingRecord):
            return NotImplemented
        return (
            self.id == other.id
            and self.title == other.title
            and self.start_time == other.start_time
            and self.end_time == other.end_time
            and self.join_url == other.join_url
            and self.platform == other.platform
            and self.organizer_name == other.organizer_name
            and self.organizer_email == other.organizer_email
            and self.attendee_count == other.attendee_count
            and len(self.attendees) == len(other.attendees)
            and self.calendar_name == other.calendar_name
            and self.event_identifier == other.event_identifier
        )

    def __hash__(self) -> int:
        return hash(
            (self.id, self.event_identifier, self.title, self.start_time, self.attendee_count)
        )

    # -------------------------------------------------------------------------
    # Time helpers; `now` defaults to the current time
    # -------------------------------------------------------------------------

    @property
    def duration(self) -> timedelta:
        return self.end_time - self.start_time

    def time_until_start(self, now: datetime | None = None) -> timedelta:
        """Time until the meeting starts (negative once it has started)."""
        now = now or _now_for(self.start_time)
        return self.start_time - now

    def is_upcoming(self, now: datetime | None = None) -> bool:
        """Starts within the next five minutes and has not started yet."""
        now = now or _now_for(self.start_time)
        return now < self.start_time <= now + UPCOMING_WINDOW

    def has_started(self, now: datetime | None = None) -> bool:
        now = now or _now_for(self.start_time)
        return now >= self.start_time

    def has_ended(self, now: datetime | None = None) -> bool:
        now = now or _now_for(self.end_time)
        return now >= self.end_time

    def minutes_since_end(self, now: datetime | None = None) -> float:
        now = now or _now_for(self.end_time)
        if not self.has_ended(now):
            return 0.0
        return (now - self.end_time).total_seconds() / 60.0

    def should_be_hidden(self, hide_completed_after_5_min: bool, now: datetime | None = None) -> bool:
        now = now or _now_for(self.end_time)
        return (
            hide_completed_after_5_min
            and self.has_ended(now)
            and self.minutes_since_end(now) >= HIDE_COMPLETED_AFTER_MINUTES
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": str(self.id),
            "title": self.title,
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat(),
            "join_url": self.join_url,
            "platform": self.platform.value,
            "organizer_name": self.organizer_name,
            "organizer_email": self.organizer_email,
            "attendee_count": self.attendee_count,
            "attendees": [a.to_dict() for a in self.attendees],
            "calendar_name": self.calendar_name,
            "event_identifier": self.event_identifier,
        }
