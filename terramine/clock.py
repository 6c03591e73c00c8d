"""Time sources injected into the game engine and services."""

from datetime import datetime
from typing import Protocol

from terramine.database import utc_now


class Clock(Protocol):
    """Anything that can tell the current UTC time."""

    def now(self) -> datetime: ...


class SystemClock:
    """Wall-clock time."""

    def now(self) -> datetime:
        return utc_now()


system_clock = SystemClock()
