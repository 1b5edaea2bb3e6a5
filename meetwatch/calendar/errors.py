"""
Calendar errors raised by the sync coordinator.

Manual refreshes surface these to the caller. Timer-driven refreshes catch
them and only log. "No meeting URL in this event" is never an error; the
builder returns None for that.
"""

from __future__ import annotations


class CalendarError(Exception):
    """Base class for calendar sync failures."""

    description = "Calendar operation failed"
    recovery_suggestion = "Try again"

    def __str__(self) -> str:
        return self.description


class AccessDeniedError(CalendarError):
    """Authorization does not allow reading events."""

    description = "Calendar access denied or insufficient"
    recovery_suggestion = "Grant calendar access in System Settings > Privacy & Security"


class FetchFailedError(CalendarError):
    """The calendar source raised while events were being fetched or converted."""

    recovery_suggestion = "Check your internet connection and try again"

    def __init__(self, underlying: BaseException):
        super().__init__(underlying)
        self.underlying = underlying

    @property
    def description(self) -> str:
        return f"Failed to fetch calendar events: {self.underlying}"


class InvalidEventError(CalendarError):
    """Malformed source data. Reserved; nothing raises it yet."""

    description = "Invalid calendar event data"
    recovery_suggestion = "Verify the calendar event has valid data"


class RefreshInProgressError(CalendarError):
    """A manual refresh was requested while another one was still running."""

    description = "A calendar refresh is already in progress"
    recovery_suggestion = "Wait for the current refresh to finish"


__all__ = [
    "AccessDeniedError",
    "CalendarError",
    "FetchFailedError",
    "InvalidEventError",
    "RefreshInProgressError",
]
