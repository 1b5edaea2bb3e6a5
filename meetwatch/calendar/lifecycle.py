"""
Tool: Host Lifecycle Signals
Purpose: Fire-and-forget notifications from the host application to the sync engine

The host shell (a menu-bar widget, a daemon wrapper, the CLI) calls one of
the `on_*` methods when the app moves to the foreground or background or
when the machine sleeps or wakes. Subscribers such as SyncCoordinator
register handlers per signal.

Usage:
    from meetwatch.calendar.lifecycle import HostLifecycle, LifecycleSignal

    lifecycle = HostLifecycle()
    lifecycle.add_handler(LifecycleSignal.SYSTEM_SLEEP, on_sleep)
    lifecycle.on_system_sleep()
"""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum

from meetwatch.logging_config import get_logger


logger = get_logger(__name__)


class LifecycleSignal(str, Enum):
    FOREGROUND = "foreground"
    BACKGROUND = "background"
    SYSTEM_SLEEP = "system_sleep"
    SYSTEM_WAKE = "system_wake"


LifecycleHandler = Callable[[], None]


class HostLifecycle:
    """Registry of lifecycle handlers, dispatched synchronously in registration order."""

    def __init__(self):
        self._handlers: dict[LifecycleSignal, list[LifecycleHandler]] = {
            signal: [] for signal in LifecycleSignal
        }

    def add_handler(self, signal: LifecycleSignal, handler: LifecycleHandler) -> None:
        """
        Add handler for a lifecycle signal.

        Handlers take no arguments and must not block; anything slow should
        be scheduled on the event loop.

        Args:
            signal: Signal to listen for
            handler: Callable invoked when the signal fires
        """
        self._handlers[signal].append(handler)

    def remove_handler(self, signal: LifecycleSignal, handler: LifecycleHandler) -> None:
        if handler in self._handlers[signal]:
            self._handlers[signal].remove(handler)

    def handler_count(self, signal: LifecycleSignal) -> int:
        return len(self._handlers[signal])

    def emit(self, signal: LifecycleSignal) -> None:
        """Deliver `signal` to every handler. A failing handler is logged and skipped."""
        logger.debug("lifecycle_signal", signal=signal.value)
        for handler in list(self._handlers[signal]):
            try:
                handler()
            except Exception as e:
                logger.error(
                    "lifecycle_handler_failed",
                    signal=signal.value,
                    handler=getattr(handler, "__name__", repr(handler)),
                    error=str(e),
                )

    # Host-facing entry points

    def on_foreground(self) -> None:
        self.emit(LifecycleSignal.FOREGROUND)

    def on_background(self) -> None:
        self.emit(LifecycleSignal.BACKGROUND)

    def on_system_sleep(self) -> None:
        self.emit(LifecycleSignal.SYSTEM_SLEEP)

    def on_system_wake(self) -> None:
        self.emit(LifecycleSignal.SYSTEM_WAKE)


__all__ = ["HostLifecycle", "LifecycleHandler", "LifecycleSignal"]
