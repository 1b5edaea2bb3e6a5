"""
Tool: Sync Coordinator
Purpose: Own calendar permission, the published meeting list, and the auto-refresh timer

Features:
- Maps the source's permission status to an AuthorizationState
- Fetch → build → sort → publish refresh cycle over a fixed 3-day window
- 60-second auto-refresh timer that drops ticks while a refresh is running
- Pauses on system sleep, resumes (with a catch-up refresh) on wake
- Observer subscriptions for every published field

All state lives on one SyncCoordinator and is only touched from the event
loop that owns it. The blocking source query runs in a worker thread and
its result is published back on the loop. Host lifecycle signals must be
delivered on that loop too (use loop.call_soon_threadsafe from other
threads).

Usage:
    from meetwatch.calendar.coordinator import SyncCoordinator
    from meetwatch.calendar.providers import InMemoryCalendarSource

    coordinator = SyncCoordinator(InMemoryCalendarSource(events))
    if await coordinator.request_access():
        await coordinator.refresh()
    coordinator.start_auto_refresh()
    coordinator.today_meetings
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Coroutine
from datetime import datetime, time, timedelta
from enum import Enum
from typing import Any

from meetwatch.calendar.builder import build_meetings
from meetwatch.calendar.errors import (
    AccessDeniedError,
    CalendarError,
    FetchFailedError,
    RefreshInProgressError,
)
from meetwatch.calendar.lifecycle import HostLifecycle, LifecycleSignal
from meetwatch.calendar.models import AuthorizationState, MeetingRecord
from meetwatch.calendar.observers import Observer, ObserverRegistry, SyncSnapshot
from meetwatch.calendar.providers.base import CalendarSource, RawAuthStatus
from meetwatch.config import MeetwatchConfig
from meetwatch.logging_config import get_logger


logger = get_logger(__name__)


AUTH_STATUS_MAP: dict[RawAuthStatus, AuthorizationState] = {
    RawAuthStatus.NOT_DETERMINED: AuthorizationState.UNDETERMINED,
    RawAuthStatus.AUTHORIZED: AuthorizationState.AUTHORIZED,
    RawAuthStatus.FULL_ACCESS: AuthorizationState.FULL_ACCESS,
    RawAuthStatus.WRITE_ONLY: AuthorizationState.WRITE_ONLY,
    RawAuthStatus.DENIED: AuthorizationState.DENIED,
    RawAuthStatus.RESTRICTED: AuthorizationState.RESTRICTED,
}


class AutoRefreshState(str, Enum):
    DISABLED = "disabled"  # preference off
    ARMED = "armed"        # preference on, timer running
    PAUSED = "paused"      # preference on, timer stopped (asleep, or not started yet)


def map_authorization_status(status: Any) -> AuthorizationState:
    try:
        return AUTH_STATUS_MAP[status]
    except (KeyError, TypeError):
        return AuthorizationState.error(f"Unknown authorization status: {status}")


# =============================================================================
# Window helpers
# =============================================================================


def _midnight(moment: datetime, offset_days: int) -> datetime:
    day = moment.date() + timedelta(days=offset_days)
    return datetime.combine(day, time.min, tzinfo=moment.tzinfo)


def fetch_window(now: datetime) -> tuple[datetime, datetime]:
    """
    Return the [start, end) window synced for `now`.

    Yesterday's local midnight through the midnight after tomorrow:

        fetch_window(datetime(2024, 3, 15, 10, 0))
        # (datetime(2024, 3, 14, 0, 0), datetime(2024, 3, 17, 0, 0))
    """
    return _midnight(now, -1), _midnight(now, 2)


def _local_date(moment: datetime, now: datetime):
    if moment.tzinfo is not None and now.tzinfo is not None:
        return moment.astimezone(now.tzinfo).date()
    return moment.date()


# =============================================================================
# Coordinator
# =============================================================================


class SyncCoordinator:
    """
    Keeps the published meeting list in sync with a calendar source.

    Args:
        source: Calendar store to read from
        config: Engine configuration (default: built-in defaults)
        lifecycle: Host lifecycle hub to subscribe to (optional)
        clock: Returns "now"; defaults to the configured timezone, else the
            system local zone
    """

    def __init__(
        self,
        source: CalendarSource,
        *,
        config: MeetwatchConfig | None = None,
        lifecycle: HostLifecycle | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self.source = source
        self.config = config or MeetwatchConfig()
        self.refresh_interval = self.config.refresh.interval_seconds
        self.wake_refresh_delay = self.config.refresh.wake_refresh_delay_seconds
        self._clock = clock or self._default_clock

        self._observers = ObserverRegistry()

        # Published state
        self._auth_state = AuthorizationState.UNDETERMINED
        self._meetings: tuple[MeetingRecord, ...] = ()
        self._last_refresh: datetime | None = None
        self._is_refreshing = False
        self._auto_refresh_enabled = self.config.refresh.auto_refresh_enabled
        self._auto_refresh_active = False

        # Private state
        self._timer_task: asyncio.Task | None = None
        self._timer_refresh: asyncio.Task | None = None
        self._background_tasks: set[asyncio.Task] = set()

        self.lifecycle = lifecycle
        self._lifecycle_handlers: dict[LifecycleSignal, Callable[[], None]] = {
            LifecycleSignal.FOREGROUND: self._handle_foreground,
            LifecycleSignal.BACKGROUND: self._handle_background,
            LifecycleSignal.SYSTEM_SLEEP: self._handle_system_sleep,
            LifecycleSignal.SYSTEM_WAKE: self._handle_system_wake,
        }
        if lifecycle is not None:
            for signal, handler in self._lifecycle_handlers.items():
                lifecycle.add_handler(signal, handler)

        self.update_auth_state()

    def _default_clock(self) -> datetime:
        tz = self.config.display.tzinfo
        if tz is not None:
            return datetime.now(tz)
        return datetime.now().astimezone()

    def now(self) -> datetime:
        """Current time according to the coordinator's clock."""
        return self._clock()

    # -------------------------------------------------------------------------
    # Published state
    # -------------------------------------------------------------------------

    @property
    def auth_state(self) -> AuthorizationState:
        return self._auth_state

    @property
    def meetings(self) -> tuple[MeetingRecord, ...]:
        """Qualifying meetings from the last refresh, ascending by start time."""
        return self._meetings

    @property
    def last_refresh(self) -> datetime | None:
        return self._last_refresh

    @property
    def is_refreshing(self) -> bool:
        return self._is_refreshing

    @property
    def auto_refresh_enabled(self) -> bool:
        return self._auto_refresh_enabled

    @property
    def auto_refresh_active(self) -> bool:
        return self._auto_refresh_active

    @property
    def auto_refresh_state(self) -> AutoRefreshState:
        if not self._auto_refresh_enabled:
            return AutoRefreshState.DISABLED
        if self._auto_refresh_active:
            return AutoRefreshState.ARMED
        return AutoRefreshState.PAUSED

    @property
    def yesterday_meetings(self) -> tuple[MeetingRecord, ...]:
        return self._meetings_on(-1)

    @property
    def today_meetings(self) -> tuple[MeetingRecord, ...]:
        return self._meetings_on(0)

    @property
    def tomorrow_meetings(self) -> tuple[MeetingRecord, ...]:
        return self._meetings_on(1)

    def _meetings_on(self, offset_days: int) -> tuple[MeetingRecord, ...]:
        now = self._clock()
        day = now.date() + timedelta(days=offset_days)
        return tuple(m for m in self._meetings if _local_date(m.start_time, now) == day)

    def snapshot(self) -> SyncSnapshot:
        return SyncSnapshot(
            auth_state=self._auth_state,
            meetings=self._meetings,
            last_refresh=self._last_refresh,
            is_refreshing=self._is_refreshing,
            auto_refresh_enabled=self._auto_refresh_enabled,
            auto_refresh_active=self._auto_refresh_active,
        )

    def subscribe(self, field: str, callback: Observer) -> Callable[[], None]:
        """Subscribe to changes of one published field; returns an unsubscribe callable."""
        return self._observers.subscribe(field, callback)

    def unsubscribe(self, field: str, callback: Observer) -> None:
        self._observers.unsubscribe(field, callback)

    def _publish(self, field: str, value: Any) -> None:
        attr = f"_{field}"
        if getattr(self, attr) == value:
            return
        setattr(self, attr, value)
        self._observers.notify(field, value)

    # -------------------------------------------------------------------------
    # Authorization
    # -------------------------------------------------------------------------

    def update_auth_state(self) -> AuthorizationState:
        """Re-read the source's permission status (e.g. after the host returns to the foreground)."""
        state = map_authorization_status(self.source.current_authorization_status())
        self._publish("auth_state", state)
        return state

    async def request_access(self) -> bool:
        """
        Ask the source for full access to events.

        Returns:
            True if access was granted. On failure the auth state becomes an
            error carrying the reason and False is returned.
        """
        try:
            granted = await self.source.request_full_access()
        except Exception as e:
            message = f"Failed to request calendar access: {e}"
            logger.error("calendar_access_request_failed", error=str(e))
            self._publish("auth_state", AuthorizationState.error(message))
            return False

        state = self.update_auth_state()
        logger.info("calendar_access_requested", granted=granted, auth_state=str(state))
        return granted

    # -------------------------------------------------------------------------
    # Refresh
    # -------------------------------------------------------------------------

    async def refresh(self) -> None:
        """
        Fetch the 3-day window, rebuild the meeting list, and publish it.

        Raises:
            AccessDeniedError: authorization does not allow reading events
            RefreshInProgressError: another refresh has not finished yet
            FetchFailedError: the source (or record building) raised
        """
        if not self._auth_state.allows_read:
            raise AccessDeniedError()
        if self._is_refreshing:
            raise RefreshInProgressError()

        self._publish("is_refreshing", True)
        try:
            start, end = fetch_window(self._clock())
            events = await asyncio.to_thread(self.source.fetch_events, start, end)
            meetings = build_meetings(events)
            # list.sort is stable, so equal start times keep fetch order
            meetings.sort(key=lambda m: m.start_time)
        except Exception as e:
            logger.error("meeting_refresh_failed", error=str(e))
            raise FetchFailedError(e) from e
        else:
            self._publish("meetings", tuple(meetings))
            self._publish("last_refresh", self._clock())
            logger.info(
                "meetings_refreshed",
                fetched=len(events),
                meetings=len(meetings),
                window_start=start.isoformat(),
                window_end=end.isoformat(),
            )
        finally:
            self._publish("is_refreshing", False)

    async def _refresh_quietly(self, reason: str) -> bool:
        """Refresh, logging instead of raising. Returns True on success."""
        try:
            await self.refresh()
        except CalendarError as e:
            logger.warning("refresh_failed", reason=reason, error=str(e))
            return False
        logger.debug("refresh_completed", reason=reason)
        return True

    # -------------------------------------------------------------------------
    # Auto-refresh timer
    # -------------------------------------------------------------------------

    def start_auto_refresh(self) -> None:
        """Arm the timer if the preference is on, replacing any running timer."""
        if not self._auto_refresh_enabled:
            return

        self._cancel_timer()
        self._timer_task = asyncio.get_running_loop().create_task(self._run_timer())
        self._publish("auto_refresh_active", True)
        logger.info("auto_refresh_started", interval=self.refresh_interval)

    def stop_auto_refresh(self) -> None:
        self._cancel_timer()
        self._publish("auto_refresh_active", False)
        logger.info("auto_refresh_stopped")

    def pause_auto_refresh(self) -> None:
        if not self._auto_refresh_active:
            return
        self.stop_auto_refresh()
        logger.info("auto_refresh_paused")

    def resume_auto_refresh(self) -> None:
        if not self._auto_refresh_enabled or self._auto_refresh_active:
            return
        self.start_auto_refresh()
        logger.info("auto_refresh_resumed")

    def toggle_auto_refresh(self) -> bool:
        """
        Flip the auto-refresh preference.

        Turning it on arms the timer (clearing any pause); turning it off
        stops it. Returns the new preference.
        """
        enabled = not self._auto_refresh_enabled
        self._publish("auto_refresh_enabled", enabled)
        if enabled:
            self.start_auto_refresh()
        else:
            self.stop_auto_refresh()
        return enabled

    def _cancel_timer(self) -> None:
        if self._timer_task is not None:
            self._timer_task.cancel()
            self._timer_task = None

    async def _run_timer(self) -> None:
        # Only sleeps and schedules; cancelling it never interrupts a fetch
        while True:
            await asyncio.sleep(self.refresh_interval)
            self._tick()

    def _tick(self) -> asyncio.Task | None:
        """
        One timer firing: schedule a refresh unless busy or unauthorized.

        The refresh runs as its own background task so stopping the timer
        lets it finish. Returns that task, or None when the tick is dropped.
        """
        busy = self._timer_refresh is not None and not self._timer_refresh.done()
        if self._is_refreshing or busy:
            logger.debug("auto_refresh_tick_dropped", reason="refresh_in_progress")
            return None
        if not self._auth_state.allows_read:
            logger.debug("auto_refresh_tick_dropped", reason=str(self._auth_state))
            return None
        self._timer_refresh = self._spawn(self._refresh_quietly("timer"))
        return self._timer_refresh

    # -------------------------------------------------------------------------
    # Host lifecycle
    # -------------------------------------------------------------------------

    def _spawn(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self._background_tasks.add(task)
        task.add_done_callback(self._on_task_done)
        return task

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._background_tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(
                "background_task_failed",
                task=task.get_name(),
                error=str(error),
                error_type=type(error).__name__,
            )

    def _handle_foreground(self) -> None:
        state = self.update_auth_state()
        self.resume_auto_refresh()
        if state.allows_read and not self._is_refreshing:
            self._spawn(self._refresh_quietly("foreground"))

    def _handle_background(self) -> None:
        # Timer keeps running while the host is unfocused
        logger.debug("host_backgrounded", auto_refresh_active=self._auto_refresh_active)

    def _handle_system_sleep(self) -> None:
        if not self._auto_refresh_active:
            return
        self.pause_auto_refresh()
        logger.info("system_sleep_auto_refresh_paused")

    def _handle_system_wake(self) -> None:
        if not self._auto_refresh_enabled:
            return
        self.resume_auto_refresh()
        self._spawn(self._wake_refresh())
        logger.info("system_wake_auto_refresh_resumed")

    async def _wake_refresh(self) -> None:
        await asyncio.sleep(self.wake_refresh_delay)
        await self._refresh_quietly("wake")

    # -------------------------------------------------------------------------
    # Shutdown
    # -------------------------------------------------------------------------

    async def close(self) -> None:
        """Stop the timer, cancel pending lifecycle work, and detach from the lifecycle hub."""
        timer = self._timer_task
        self.stop_auto_refresh()

        pending = [t for t in (timer, *self._background_tasks) if t is not None]
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
        self._background_tasks.clear()
        self._timer_refresh = None

        if self.lifecycle is not None:
            for signal, handler in self._lifecycle_handlers.items():
                self.lifecycle.remove_handler(signal, handler)


__all__ = [
    "AUTH_STATUS_MAP",
    "AutoRefreshState",
    "SyncCoordinator",
    "fetch_window",
    "map_authorization_status",
]
