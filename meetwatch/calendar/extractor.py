"""
Tool: Meeting URL Extractor
Purpose: Find the join link in a calendar event and strip tracking parameters

Fields are searched in fixed priority order:
    1. virtual_conference_url
    2. url
    3. location
    4. notes

Within a field every MeetingURLPattern is tried in declaration order and
only the first match of a pattern is considered. A match that fails the
platform's validity check (a Zoom link without a meeting id, a bare Meet
domain) counts as no match for that pattern; the next pattern is tried, then
the next field.

Usage:
    from meetwatch.calendar.extractor import extract, extract_with_platform, sanitize_url

    extract(event)                 # "https://zoom.us/j/123?pwd=abc"
    extract_with_platform(event)   # ExtractionResult(url=..., platform=Platform.ZOOM)
"""

from __future__ import annotations

from typing import NamedTuple, Protocol
from urllib.parse import unquote_plus, urlsplit

from meetwatch.calendar.models import Platform
from meetwatch.calendar.patterns import MeetingURLPattern


SEARCH_FIELDS = ("virtual_conference_url", "url", "location", "notes")

TRACKING_PARAMETERS = frozenset(
    {
        "utm_source",
        "utm_medium",
        "utm_campaign",
        "utm_term",
        "utm_content",
    }
)

# Zoom paths that are templates waiting for a meeting id
ZOOM_INVALID_ENDINGS = (
    "/j/", "/meeting/", "/webinar/", "/my/",
    "/j", "/meeting", "/webinar", "/my",
)

MEET_INVALID_ENDINGS = ("meet.google.com", "meet.google.com/")


class CalendarEventLike(Protocol):
    """Anything exposing the four searchable text fields."""

    virtual_conference_url: str | None
    url: str | None
    location: str | None
    notes: str | None


class ExtractionResult(NamedTuple):
    url: str
    platform: Platform


# =============================================================================
# Validation
# =============================================================================


def is_valid_meeting_url(url: str, platform: Platform) -> bool:
    """
    Reject syntactically matching URLs that are missing their meeting code.

    Unknown platforms are always accepted; there is nothing to check them
    against.
    """
    lowered = url.lower()
    if platform is Platform.ZOOM:
        return not lowered.endswith(ZOOM_INVALID_ENDINGS)
    if platform is Platform.GOOGLE_MEET:
        return not lowered.endswith(MEET_INVALID_ENDINGS)
    return True


# =============================================================================
# Searching
# =============================================================================


def find_meeting_url_with_platform(text: str | None) -> ExtractionResult | None:
    """First valid meeting URL in `text`, with the platform of the pattern that found it."""
    if not text or not text.strip():
        return None

    for pattern in MeetingURLPattern:
        candidate = pattern.search(text)
        if candidate is None:
            continue
        if is_valid_meeting_url(candidate, pattern.platform):
            return ExtractionResult(candidate, pattern.platform)

    return None


def find_meeting_url(text: str | None) -> str | None:
    result = find_meeting_url_with_platform(text)
    return result.url if result else None


def extract_with_platform(event: CalendarEventLike) -> ExtractionResult | None:
    """
    Extract and sanitize the meeting URL from the highest-priority field that has one.

    Args:
        event: Object exposing virtual_conference_url, url, location and notes.
            Missing attributes are treated as empty.

    Returns:
        ExtractionResult, or None when no field holds a valid meeting URL
    """
    for field_name in SEARCH_FIELDS:
        value = getattr(event, field_name, None)
        if not isinstance(value, str) or not value.strip():
            continue

        found = find_meeting_url_with_platform(value)
        if found:
            return ExtractionResult(sanitize_url(found.url), found.platform)

    return None


def extract(event: CalendarEventLike) -> str | None:
    result = extract_with_platform(event)
    return result.url if result else None


# =============================================================================
# Sanitizing
# =============================================================================


def sanitize_url(url: str) -> str:
    """
    Drop utm_* tracking parameters, keeping every other parameter verbatim and in order.

    The "?" is removed when no parameters remain. Fragments are kept. A URL
    that does not parse is returned unchanged.

        sanitize_url("https://zoom.us/j/1?pwd=a&utm_source=x")  # "https://zoom.us/j/1?pwd=a"
    """
    try:
        urlsplit(url)
    except ValueError:
        return url

    without_fragment, hash_sep, fragment = url.partition("#")
    base, query_sep, query = without_fragment.partition("?")
    if not query_sep:
        return url

    kept = [
        piece
        for piece in query.split("&")
        if piece and unquote_plus(piece.partition("=")[0]) not in TRACKING_PARAMETERS
    ]

    result = base
    if kept:
        result += "?" + "&".join(kept)
    if hash_sep:
        result += "#" + fragment
    return result


__all__ = [
    "CalendarEventLike",
    "ExtractionResult",
    "TRACKING_PARAMETERS",
    "extract",
    "extract_with_platform",
    "find_meeting_url",
    "find_meeting_url_with_platform",
    "is_valid_meeting_url",
    "sanitize_url",
]
