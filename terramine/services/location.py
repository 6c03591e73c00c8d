"""Last-reported device positions.

Clients push GPS fixes; purchases and check-ins read the freshest one when
the request itself carries no coordinates.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta

from terramine.config import get_settings
from terramine.engine.grid import validate_coordinates
from terramine.exceptions import LocationUnavailable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Position:
    """A GPS fix."""

    latitude: float
    longitude: float
    reported_at: datetime


PositionCallback = Callable[[Position], None]


class LocationRegistry:
    """In-memory per-account position cache with change watchers."""

    def __init__(self, max_age: timedelta = timedelta(minutes=2)):
        self._max_age = max_age
        self._positions: dict[str, Position] = {}
        self._watchers: dict[str, list[PositionCallback]] = {}

    def report_position(
        self, account_id: str, latitude: float, longitude: float, now: datetime
    ) -> Position:
        """Record a fix and notify watchers. Invalid fixes are rejected."""
        validate_coordinates(latitude, longitude)
        position = Position(latitude, longitude, now)
        self._positions[account_id] = position

        for callback in list(self._watchers.get(account_id, [])):
            try:
                callback(position)
            except Exception as e:
                logger.error(f"Position watcher for {account_id} failed: {e}")
        return position

    def get_current_position(self, account_id: str, now: datetime) -> Position:
        """Freshest fix for an account, or LocationUnavailable."""
        position = self._positions.get(account_id)
        if position is None:
            raise LocationUnavailable()
        if now - position.reported_at > self._max_age:
            raise LocationUnavailable("Your last known location is too old")
        return position

    def watch_position(self, account_id: str, callback: PositionCallback) -> Callable[[], None]:
        """Call ``callback`` on every new fix. Returns an unsubscribe function."""
        self._watchers.setdefault(account_id, []).append(callback)

        def unsubscribe() -> None:
            callbacks = self._watchers.get(account_id, [])
            if callback in callbacks:
                callbacks.remove(callback)
            if not callbacks:
                self._watchers.pop(account_id, None)

        return unsubscribe

    def forget(self, account_id: str) -> None:
        self._positions.pop(account_id, None)


# Global location registry instance
location_registry = LocationRegistry(
    max_age=timedelta(seconds=get_settings().location_max_age_seconds)
)
