"""
Tool: Meeting URL Patterns
Purpose: Regex patterns for video meeting URLs and platform classification

Usage:
    from meetwatch.calendar.patterns import MeetingURLPattern, classify_platform

    classify_platform("https://company.zoom.us/j/123")  # Platform.ZOOM
    MeetingURLPattern.for_platform(Platform.GOOGLE_MEET)  # (GOOGLE_MEET, GOOGLE_MEET_LOOKUP)

Order matters everywhere in this module. Patterns are tried in declaration
order and the first hit wins; there is no longest-match scoring. A vanity
host such as company.zoom.us matches both ZOOM_STANDARD and ZOOM_VANITY and
is reported as ZOOM_STANDARD.
"""

from __future__ import annotations

import re
from enum import Enum

from meetwatch.calendar.models import Platform


class MeetingURLPattern(Enum):
    """Video meeting URL shapes, each owned by exactly one platform."""

    # Zoom
    ZOOM_STANDARD = r"https?://[\w.-]*zoom\.us/[^\s]+"
    ZOOM_GOVERNMENT = r"https?://[\w.-]*zoomgov\.com/[^\s]+"
    ZOOM_PROTOCOL = r"zoommtg://[^\s]+"
    ZOOM_VANITY = r"https?://[\w.-]*\.zoom\.us/[^\s]+"

    # Google Meet
    GOOGLE_MEET = r"https?://meet\.google\.com/[^\s]+"
    GOOGLE_MEET_LOOKUP = r"https?://meet\.google\.com/lookup/[^\s]+"

    @property
    def regex(self) -> re.Pattern[str]:
        # re keeps its own compiled-pattern cache
        return re.compile(self.value, re.IGNORECASE)

    @property
    def platform(self) -> Platform:
        if self.name.startswith("ZOOM_"):
            return Platform.ZOOM
        return Platform.GOOGLE_MEET

    @property
    def display_name(self) -> str:
        names = {
            "ZOOM_STANDARD": "Zoom Standard",
            "ZOOM_GOVERNMENT": "Zoom Government",
            "ZOOM_PROTOCOL": "Zoom Protocol",
            "ZOOM_VANITY": "Zoom Vanity",
            "GOOGLE_MEET": "Google Meet",
            "GOOGLE_MEET_LOOKUP": "Google Meet Lookup",
        }
        return names[self.name]

    def search(self, text: str) -> str | None:
        """Return the first match of this pattern in `text`, if any."""
        match = self.regex.search(text)
        return match.group(0) if match else None

    @classmethod
    def for_platform(cls, platform: Platform) -> tuple[MeetingURLPattern, ...]:
        return tuple(pattern for pattern in cls if pattern.platform is platform)


def classify_platform(url: str) -> Platform:
    """
    Return the platform whose patterns first match `url`.

    Platforms are checked in Platform declaration order and each platform's
    patterns in MeetingURLPattern declaration order. Matching is
    case-insensitive. Returns Platform.UNKNOWN when nothing matches.
    """
    for platform in Platform:
        if platform is Platform.UNKNOWN:
            continue
        for pattern in MeetingURLPattern.for_platform(platform):
            if pattern.regex.search(url):
                return platform
    return Platform.UNKNOWN


__all__ = ["MeetingURLPattern", "classify_platform"]
