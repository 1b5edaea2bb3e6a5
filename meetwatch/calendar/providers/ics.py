"""
Tool: ICS Calendar Source
Purpose: Read-only calendar source backed by a local .ics file

The file is re-read on every fetch, so edits (or a sync tool rewriting it)
show up on the next refresh. Recurring events with a simple RRULE/EXDATE are
expanded inside the fetch window; RECURRENCE-ID overrides replace the
instance they point at.

Usage:
    from meetwatch.calendar.providers.ics import IcsCalendarSource

    source = IcsCalendarSource("~/Calendars/work.ics")
    events = source.fetch_events(start, end)

Dependencies:
    - icalendar (parsing)
    - python-dateutil (RRULE expansion)
"""

from __future__ import annotations

import os
from datetime import date, datetime, time, timedelta, tzinfo
from pathlib import Path
from typing import Any
from urllib.parse import parse_qsl, urlsplit

from dateutil.rrule import rruleset, rrulestr
from icalendar import Calendar

from meetwatch.calendar.models import Attendee, SourceEvent
from meetwatch.calendar.providers.base import CalendarSource, RawAuthStatus, overlaps
from meetwatch.logging_config import get_logger


logger = get_logger(__name__)


# Vendor properties that carry the conference link, checked in order
CONFERENCE_PROPERTIES = (
    "CONFERENCE",
    "X-GOOGLE-CONFERENCE",
    "X-MICROSOFT-SKYPETEAMSMEETINGURL",
)


# =============================================================================
# Participant helpers
# =============================================================================


def _looks_like_email(value: str) -> bool:
    return "@" in value and "." in value


def participant_email(uri: str | None) -> str | None:
    """
    Recover an email address from a participant URI.

    Tries, in order: a mailto: URI, the last path component, then the first
    query value that looks like an address. Calendar-server principal paths
    are ignored.
    """
    if not uri:
        return None

    if uri.lower().startswith("mailto:"):
        email = uri[len("mailto:"):]
        return email if _looks_like_email(email) else None

    try:
        parts = urlsplit(uri)
    except ValueError:
        return None

    last = parts.path.rstrip("/").split("/")[-1] if parts.path else ""
    if _looks_like_email(last) and "principal" not in last:
        return last

    if "@" in parts.query:
        for _, value in parse_qsl(parts.query):
            if _looks_like_email(value):
                return value

    return None


def _participant(prop: Any) -> Attendee:
    name = prop.params.get("CN") if hasattr(prop, "params") else None
    return Attendee(name=str(name) if name else None, email=participant_email(str(prop)))


def _as_list(value: Any) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def _text(component: Any, name: str) -> str | None:
    value = component.get(name)
    if value is None:
        return None
    text = str(value).strip()
    return text or None


# =============================================================================
# Source
# =============================================================================


class IcsCalendarSource(CalendarSource):
    """
    Calendar source reading a local iCalendar file.

    Args:
        path: Path to the .ics file (~ is expanded)
        calendar_name: Overrides X-WR-CALNAME / the file name
        tz: Zone used for floating times, all-day dates and returned
            datetimes (default: system local zone)
    """

    def __init__(
        self,
        path: str | Path,
        calendar_name: str | None = None,
        tz: tzinfo | None = None,
    ):
        self.path = Path(path).expanduser()
        self.calendar_name = calendar_name
        self.tz = tz

    @property
    def source_name(self) -> str:
        return "ics"

    def current_authorization_status(self) -> RawAuthStatus:
        if not self.path.exists():
            return RawAuthStatus.NOT_DETERMINED
        if not os.access(self.path, os.R_OK):
            return RawAuthStatus.DENIED
        return RawAuthStatus.FULL_ACCESS

    async def request_full_access(self) -> bool:
        # File permissions cannot be granted from here; report what we have
        return self.current_authorization_status() is RawAuthStatus.FULL_ACCESS

    def fetch_events(self, start: datetime, end: datetime) -> list[SourceEvent]:
        start = self._localize(start)
        end = self._localize(end)

        calendar = Calendar.from_ical(self.path.read_bytes())
        calendar_name = (
            self.calendar_name
            or _text(calendar, "X-WR-CALNAME")
            or self.path.stem
        )

        overrides: dict[str, set[datetime]] = {}
        for component in calendar.walk("VEVENT"):
            if component.get("RECURRENCE-ID") is not None:
                uid = str(component.get("UID", ""))
                recurrence_id = self._as_datetime(component.decoded("RECURRENCE-ID"))
                overrides.setdefault(uid, set()).add(recurrence_id)

        events: list[SourceEvent] = []
        for index, component in enumerate(calendar.walk("VEVENT")):
            try:
                events.extend(
                    self._expand(component, index, calendar_name, start, end, overrides)
                )
            except Exception as e:
                logger.warning(
                    "ics_event_skipped",
                    path=str(self.path),
                    uid=str(component.get("UID", "")),
                    error=str(e),
                )

        logger.debug("ics_events_fetched", path=str(self.path), count=len(events))
        return events

    # -------------------------------------------------------------------------
    # Time handling
    # -------------------------------------------------------------------------

    def _localize(self, moment: datetime) -> datetime:
        """Attach the source zone to naive datetimes and convert aware ones into it."""
        if moment.tzinfo is None:
            if self.tz is not None:
                return moment.replace(tzinfo=self.tz)
            return moment.astimezone()
        if self.tz is not None:
            return moment.astimezone(self.tz)
        return moment.astimezone()

    def _as_datetime(self, value: date | datetime) -> datetime:
        if isinstance(value, datetime):
            return self._localize(value)
        return self._localize(datetime.combine(value, time.min))

    def _bounds(self, component: Any) -> tuple[date | datetime, timedelta]:
        raw_start = component.decoded("DTSTART")
        if component.get("DTEND") is not None:
            raw_end = component.decoded("DTEND")
            duration = self._as_datetime(raw_end) - self._as_datetime(raw_start)
        elif component.get("DURATION") is not None:
            duration = component.decoded("DURATION")
        elif isinstance(raw_start, datetime):
            duration = timedelta(0)
        else:
            duration = timedelta(days=1)
        return raw_start, duration

    # -------------------------------------------------------------------------
    # Event mapping
    # -------------------------------------------------------------------------

    def _expand(
        self,
        component: Any,
        index: int,
        calendar_name: str,
        start: datetime,
        end: datetime,
        overrides: dict[str, set[datetime]],
    ) -> list[SourceEvent]:
        if str(component.get("STATUS", "")).upper() == "CANCELLED":
            return []

        uid = str(component.get("UID", "")) or f"{self.path.name}#{index}"
        raw_start, duration = self._bounds(component)

        if component.get("RRULE") is None or component.get("RECURRENCE-ID") is not None:
            event_start = self._as_datetime(raw_start)
            event_end = event_start + duration
            if not overlaps(event_start, event_end, start, end):
                return []
            event_id = uid
            if component.get("RECURRENCE-ID") is not None:
                recurrence_id = self._as_datetime(component.decoded("RECURRENCE-ID"))
                event_id = f"{uid}@{recurrence_id.isoformat()}"
            return [self._to_event(component, event_id, event_start, event_end, calendar_name)]

        occurrences = self._occurrences(component, raw_start, duration, start, end)
        skipped = overrides.get(uid, set())
        events = []
        for occurrence in occurrences:
            if occurrence in skipped:
                continue
            event_end = occurrence + duration
            if not overlaps(occurrence, event_end, start, end):
                continue
            events.append(
                self._to_event(
                    component,
                    f"{uid}@{occurrence.isoformat()}",
                    occurrence,
                    event_end,
                    calendar_name,
                )
            )
        return events

    def _occurrences(
        self,
        component: Any,
        raw_start: date | datetime,
        duration: timedelta,
        start: datetime,
        end: datetime,
    ) -> list[datetime]:
        if isinstance(raw_start, datetime):
            # Expand in the event's own zone so DST keeps the wall-clock time
            dtstart = raw_start if raw_start.tzinfo is not None else self._localize(raw_start)
        else:
            dtstart = self._as_datetime(raw_start)

        rules = rruleset()
        for rule in _as_list(component.get("RRULE")):
            rules.rrule(rrulestr(rule.to_ical().decode(), dtstart=dtstart))
        for exdate_list in _as_list(component.get("EXDATE")):
            for exdate in exdate_list.dts:
                value = exdate.dt
                if isinstance(value, datetime) and value.tzinfo is None:
                    value = value.replace(tzinfo=dtstart.tzinfo)
                elif not isinstance(value, datetime):
                    value = datetime.combine(value, dtstart.timetz())
                rules.exdate(value)

        window_start = start.astimezone(dtstart.tzinfo) - duration
        window_end = end.astimezone(dtstart.tzinfo)
        return [self._localize(o) for o in rules.between(window_start, window_end, inc=True)]

    def _to_event(
        self,
        component: Any,
        event_id: str,
        event_start: datetime,
        event_end: datetime,
        calendar_name: str,
    ) -> SourceEvent:
        organizer = component.get("ORGANIZER")
        organizer_info = _participant(organizer) if organizer is not None else Attendee()
        attendees = tuple(_participant(a) for a in _as_list(component.get("ATTENDEE")))

        conference = None
        for name in CONFERENCE_PROPERTIES:
            conference = _text(component, name)
            if conference:
                break

        return SourceEvent(
            event_id=event_id,
            title=_text(component, "SUMMARY"),
            start=event_start,
            end=event_end,
            calendar_name=calendar_name,
            organizer_name=organizer_info.name,
            organizer_email=organizer_info.email,
            attendees=attendees,
            virtual_conference_url=conference,
            url=_text(component, "URL"),
            location=_text(component, "LOCATION"),
            notes=_text(component, "DESCRIPTION"),
        )


__all__ = ["IcsCalendarSource", "participant_email"]
