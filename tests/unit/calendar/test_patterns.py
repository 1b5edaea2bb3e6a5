"""
Unit tests for meeting URL patterns and platform classification.

Tests:
- Pattern declaration order and ownership
- Classification of Zoom, Meet and unrelated URLs
- Platform.matches exclusivity
- Platform presentation metadata
"""

import pytest

from meetwatch.calendar.models import Platform
from meetwatch.calendar.patterns import MeetingURLPattern, classify_platform


# ============================================================================
# Pattern Tests
# ============================================================================


class TestMeetingURLPattern:
    """Tests for the MeetingURLPattern enum."""

    def test_declaration_order(self):
        """Patterns are declared Zoom first, then Meet."""
        assert [p.name for p in MeetingURLPattern] == [
            "ZOOM_STANDARD",
            "ZOOM_GOVERNMENT",
            "ZOOM_PROTOCOL",
            "ZOOM_VANITY",
            "GOOGLE_MEET",
            "GOOGLE_MEET_LOOKUP",
        ]

    def test_platform_ownership(self):
        """Each pattern belongs to exactly one platform."""
        assert MeetingURLPattern.for_platform(Platform.ZOOM) == (
            MeetingURLPattern.ZOOM_STANDARD,
            MeetingURLPattern.ZOOM_GOVERNMENT,
            MeetingURLPattern.ZOOM_PROTOCOL,
            MeetingURLPattern.ZOOM_VANITY,
        )
        assert MeetingURLPattern.for_platform(Platform.GOOGLE_MEET) == (
            MeetingURLPattern.GOOGLE_MEET,
            MeetingURLPattern.GOOGLE_MEET_LOOKUP,
        )
        assert MeetingURLPattern.for_platform(Platform.UNKNOWN) == ()

    def test_platform_patterns_property(self):
        """Platform.patterns mirrors for_platform."""
        assert Platform.GOOGLE_MEET.patterns == MeetingURLPattern.for_platform(Platform.GOOGLE_MEET)
        assert Platform.UNKNOWN.patterns == ()

    def test_search_returns_first_match_only(self):
        """search() reports the first occurrence in the text."""
        text = "primary https://zoom.us/j/111 backup https://zoom.us/j/222"

        assert MeetingURLPattern.ZOOM_STANDARD.search(text) == "https://zoom.us/j/111"

    def test_match_stops_at_whitespace(self):
        """A URL ends at the first whitespace character."""
        text = "Join https://meet.google.com/abc-defg-hij\nDial-in below"

        assert MeetingURLPattern.GOOGLE_MEET.search(text) == "https://meet.google.com/abc-defg-hij"

    def test_search_no_match(self):
        """search() returns None when the pattern is absent."""
        assert MeetingURLPattern.ZOOM_PROTOCOL.search("https://zoom.us/j/1") is None

    def test_case_insensitive(self):
        """Matching ignores case."""
        assert MeetingURLPattern.ZOOM_STANDARD.search("HTTPS://ZOOM.US/J/123") == "HTTPS://ZOOM.US/J/123"

    def test_display_names(self):
        """Patterns have readable names."""
        assert MeetingURLPattern.ZOOM_GOVERNMENT.display_name == "Zoom Government"
        assert MeetingURLPattern.GOOGLE_MEET_LOOKUP.display_name == "Google Meet Lookup"


# ============================================================================
# Classification Tests
# ============================================================================


class TestClassifyPlatform:
    """Tests for classify_platform / Platform.detect."""

    @pytest.mark.parametrize(
        "url",
        [
            "https://zoom.us/j/123456789",
            "https://company.zoom.us/j/123456789?pwd=abc",
            "http://us02web.zoom.us/my/room",
            "https://agency.zoomgov.com/j/1617777",
            "zoommtg://zoom.us/join?confno=123",
        ],
    )
    def test_zoom_urls(self, url):
        """Standard, vanity, government and protocol links are Zoom."""
        assert classify_platform(url) is Platform.ZOOM

    @pytest.mark.parametrize(
        "url",
        [
            "https://meet.google.com/abc-defg-hij",
            "https://meet.google.com/lookup/team-sync",
            "http://meet.google.com/xyz?authuser=1",
        ],
    )
    def test_meet_urls(self, url):
        """meet.google.com links are Google Meet."""
        assert classify_platform(url) is Platform.GOOGLE_MEET

    @pytest.mark.parametrize(
        "url",
        [
            "https://teams.microsoft.com/l/meetup-join/abc",
            "https://example.com/zoom",
            "not a url at all",
            "",
        ],
    )
    def test_unknown_urls(self, url):
        """Anything else is UNKNOWN."""
        assert classify_platform(url) is Platform.UNKNOWN

    def test_detect_delegates(self):
        """Platform.detect gives the same answer as classify_platform."""
        assert Platform.detect("https://zoom.us/j/1") is Platform.ZOOM

    def test_zoom_wins_over_meet(self):
        """When text holds both, Zoom is checked first."""
        text = "https://meet.google.com/abc-defg-hij or https://zoom.us/j/1"

        assert classify_platform(text) is Platform.ZOOM


class TestPlatformMatches:
    """Tests for Platform.matches."""

    @pytest.mark.parametrize(
        "url",
        [
            "https://zoom.us/j/1",
            "https://meet.google.com/abc",
            "https://example.com",
            "https://meet.google.com/abc https://zoom.us/j/1",
        ],
    )
    def test_exactly_one_platform_matches(self, url):
        """Every string is claimed by exactly one platform."""
        matching = [p for p in Platform if p.matches(url)]

        assert len(matching) == 1
        assert matching[0] is classify_platform(url)

    def test_unknown_matches_only_unclassified(self):
        """UNKNOWN matches when no real platform does."""
        assert Platform.UNKNOWN.matches("https://example.com")
        assert not Platform.UNKNOWN.matches("https://zoom.us/j/1")


class TestPlatformMetadata:
    """Tests for platform presentation properties."""

    def test_names(self):
        """Display and short names."""
        assert Platform.ZOOM.display_name == "Zoom"
        assert Platform.GOOGLE_MEET.display_name == "Google Meet"
        assert Platform.GOOGLE_MEET.short_name == "Meet"
        assert Platform.UNKNOWN.short_name == "Unknown"

    def test_icons_and_colors(self):
        """Icon names and colours."""
        assert Platform.ZOOM.icon_name == "video.fill"
        assert Platform.GOOGLE_MEET.icon_name == "person.2.fill"
        assert Platform.UNKNOWN.icon_name == "questionmark.circle.fill"
        assert [p.color for p in Platform] == ["blue", "green", "gray"]

    def test_values(self):
        """Serialized values."""
        assert [p.value for p in Platform] == ["zoom", "googleMeet", "unknown"]
