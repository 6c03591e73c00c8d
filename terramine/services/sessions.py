"""Live earnings sessions.

A session remembers the accumulator value and rate at the last flush so the
client's money counter can be extrapolated between database writes.
"""

from dataclasses import dataclass
from datetime import datetime

from terramine.engine.accrual import BOOST_MULTIPLIER, projected_display_value


@dataclass
class LiveSession:
    """Display baseline for one account."""

    base_amount: float
    base_rate: float
    started_at: datetime
    boost_expiry: datetime | None = None

    def rate_at(self, now: datetime) -> float:
        if self.boost_expiry is not None and now < self.boost_expiry:
            return self.base_rate * BOOST_MULTIPLIER
        return self.base_rate

    def display_value(self, now: datetime) -> float:
        """Extrapolated total, dropping to the unboosted rate once the boost ends."""
        rate_at_start = self.rate_at(self.started_at)
        if self.boost_expiry is None or now <= self.boost_expiry or rate_at_start == self.base_rate:
            return projected_display_value(self.base_amount, rate_at_start, self.started_at, now)

        at_expiry = projected_display_value(
            self.base_amount, rate_at_start, self.started_at, self.boost_expiry
        )
        return projected_display_value(at_expiry, self.base_rate, self.boost_expiry, now)


class SessionRegistry:
    """Live sessions by account id."""

    def __init__(self):
        self._sessions: dict[str, LiveSession] = {}

    def rebase(
        self,
        account_id: str,
        base_amount: float,
        base_rate: float,
        now: datetime,
        boost_expiry: datetime | None = None,
    ) -> LiveSession:
        """Start a session, or restart it from a freshly flushed total."""
        session = LiveSession(base_amount, base_rate, now, boost_expiry)
        self._sessions[account_id] = session
        return session

    def get(self, account_id: str) -> LiveSession | None:
        return self._sessions.get(account_id)

    def is_live(self, account_id: str) -> bool:
        return account_id in self._sessions

    def end(self, account_id: str) -> LiveSession | None:
        return self._sessions.pop(account_id, None)

    def active_ids(self) -> list[str]:
        return list(self._sessions)

    def __len__(self) -> int:
        return len(self._sessions)


# Global session registry instance
session_registry = SessionRegistry()
