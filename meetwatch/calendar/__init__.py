"""Calendar - Video meeting extraction and calendar sync

Pipeline:
    CalendarSource.fetch_events → extractor (find + sanitize the join link)
    → builder (MeetingRecord or drop) → SyncCoordinator (sort + publish)

Components:
    models.py: AuthorizationState, Platform, Attendee, SourceEvent, MeetingRecord
    patterns.py: MeetingURLPattern and platform classification
    extractor.py: Field-priority URL extraction and tracking-parameter removal
    builder.py: SourceEvent → MeetingRecord
    errors.py: CalendarError hierarchy
    lifecycle.py: Host foreground/background/sleep/wake signals
    observers.py: Published-state subscriptions and snapshots
    coordinator.py: Refresh cycle and auto-refresh timer
    providers/: Calendar sources (in-memory, .ics file)
"""

from meetwatch.calendar.builder import build_meeting, build_meetings
from meetwatch.calendar.coordinator import AutoRefreshState, SyncCoordinator, fetch_window
from meetwatch.calendar.errors import (
    AccessDeniedError,
    CalendarError,
    FetchFailedError,
    InvalidEventError,
    RefreshInProgressError,
)
from meetwatch.calendar.extractor import (
    ExtractionResult,
    extract,
    extract_with_platform,
    find_meeting_url,
    sanitize_url,
)
from meetwatch.calendar.lifecycle import HostLifecycle, LifecycleSignal
from meetwatch.calendar.models import (
    Attendee,
    AuthorizationState,
    MeetingRecord,
    Platform,
    SourceEvent,
)
from meetwatch.calendar.observers import SyncSnapshot
from meetwatch.calendar.patterns import MeetingURLPattern, classify_platform


__all__ = [
    # Models
    "Attendee",
    "AuthorizationState",
    "MeetingRecord",
    "Platform",
    "SourceEvent",
    # Extraction
    "ExtractionResult",
    "MeetingURLPattern",
    "build_meeting",
    "build_meetings",
    "classify_platform",
    "extract",
    "extract_with_platform",
    "find_meeting_url",
    "sanitize_url",
    # Sync
    "AutoRefreshState",
    "HostLifecycle",
    "LifecycleSignal",
    "SyncCoordinator",
    "SyncSnapshot",
    "fetch_window",
    # Errors
    "AccessDeniedError",
    "CalendarError",
    "FetchFailedError",
    "InvalidEventError",
    "RefreshInProgressError",
]
