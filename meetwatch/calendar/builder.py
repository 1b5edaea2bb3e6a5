"""
Tool: Meeting Record Builder
Purpose: Turn source events into MeetingRecords, dropping events without a meeting link

Usage:
    from meetwatch.calendar.builder import build_meeting, build_meetings

    record = build_meeting(event)       # MeetingRecord or None
    records = build_meetings(events)    # only qualifying events, fetch order kept
"""

from __future__ import annotations

import uuid
from collections.abc import Iterable

from meetwatch.calendar.extractor import extract_with_platform
from meetwatch.calendar.models import UNTITLED_MEETING, MeetingRecord, SourceEvent
from meetwatch.logging_config import get_logger


logger = get_logger(__name__)


def build_meeting(event: SourceEvent) -> MeetingRecord | None:
    """
    Build a MeetingRecord for `event`, or None if it has no valid meeting URL.

    A fresh uuid4 is generated on every call, so the same event gets a
    different `id` each sync cycle. Use `event_identifier` to track an event
    across cycles.
    """
    extracted = extract_with_platform(event)
    if extracted is None:
        return None

    title = event.title or UNTITLED_MEETING

    logger.debug(
        "meeting_built",
        title=title,
        platform=extracted.platform.value,
        attendees=len(event.attendees),
    )

    return MeetingRecord(
        id=uuid.uuid4(),
        title=title,
        start_time=event.start,
        end_time=event.end,
        join_url=extracted.url,
        platform=extracted.platform,
        organizer_name=event.organizer_name,
        organizer_email=event.organizer_email,
        attendee_count=event.attendee_count,
        attendees=event.attendees,
        calendar_name=event.calendar_name,
        event_identifier=event.event_id,
    )


def build_meetings(events: Iterable[SourceEvent]) -> list[MeetingRecord]:
    meetings = []
    for event in events:
        meeting = build_meeting(event)
        if meeting is not None:
            meetings.append(meeting)
    return meetings


__all__ = ["build_meeting", "build_meetings"]
