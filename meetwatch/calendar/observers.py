"""
Observable sync state.

SyncCoordinator publishes every state change through an ObserverRegistry.
Consumers subscribe per field and receive the new value; `SyncSnapshot`
is a frozen copy of everything at once for consumers that poll.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from meetwatch.calendar.models import AuthorizationState, MeetingRecord
from meetwatch.logging_config import get_logger


logger = get_logger(__name__)


OBSERVABLE_FIELDS = (
    "auth_state",
    "meetings",
    "last_refresh",
    "is_refreshing",
    "auto_refresh_enabled",
    "auto_refresh_active",
)

Observer = Callable[[Any], None]


@dataclass(frozen=True)
class SyncSnapshot:
    auth_state: AuthorizationState
    meetings: tuple[MeetingRecord, ...]
    last_refresh: datetime | None
    is_refreshing: bool
    auto_refresh_enabled: bool
    auto_refresh_active: bool


class ObserverRegistry:
    def __init__(self):
        self._observers: dict[str, list[Observer]] = {name: [] for name in OBSERVABLE_FIELDS}

    def subscribe(self, field: str, callback: Observer) -> Callable[[], None]:
        """
        Call `callback(new_value)` whenever `field` changes.

        Returns:
            A no-argument callable that removes the subscription

        Raises:
            ValueError: if `field` is not observable
        """
        if field not in self._observers:
            raise ValueError(f"Unknown field: {field}. Observable: {list(OBSERVABLE_FIELDS)}")
        self._observers[field].append(callback)

        def unsubscribe() -> None:
            self.unsubscribe(field, callback)

        return unsubscribe

    def unsubscribe(self, field: str, callback: Observer) -> None:
        observers = self._observers.get(field, [])
        if callback in observers:
            observers.remove(callback)

    def notify(self, field: str, value: Any) -> None:
        for callback in list(self._observers[field]):
            try:
                callback(value)
            except Exception as e:
                logger.error("observer_failed", field=field, error=str(e))


__all__ = ["OBSERVABLE_FIELDS", "ObserverRegistry", "SyncSnapshot"]
