"""Boost state machine.

A boost doubles accrual until ``expiry``. Users add time with free grants
(a small quota, replenished a fixed cooldown after it runs out) or paid/ad
grants (capped per reference day). Every grant extends the shared expiry by
a fixed increment, never beyond ``ceiling`` minutes from now.

All functions are pure: they take a state and an instant and return a new
state. Persisting the result is the caller's job.
"""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass, replace
from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

from terramine.engine.accrual import BOOST_MULTIPLIER, BoostWindow
from terramine.engine.proximity import REFERENCE_TIMEZONE, reference_date
from terramine.exceptions import (
    BoostCeilingReached,
    NoFreeGrantsAvailable,
    PaidGrantQuotaExhausted,
)


class GrantKind(str, enum.Enum):
    """Where a unit of boost time comes from."""

    FREE = "free"
    PAID = "paid"


@dataclass(frozen=True)
class BoostPolicy:
    """Tunable boost constants."""

    increment: timedelta = timedelta(minutes=30)
    ceiling: timedelta = timedelta(minutes=480)
    free_quota: int = 4
    replenish_cooldown: timedelta = timedelta(hours=6)
    max_paid_grants: int = 12
    timezone: ZoneInfo = REFERENCE_TIMEZONE


DEFAULT_POLICY = BoostPolicy()


@dataclass(frozen=True)
class BoostState:
    """Persisted boost fields of one account."""

    free_grants_remaining: int = DEFAULT_POLICY.free_quota
    expiry: datetime | None = None
    next_free_replenish: datetime | None = None
    paid_grants_used: int = 0
    started_at: datetime | None = None
    paid_day: date | None = None

    def is_active(self, now: datetime) -> bool:
        return self.expiry is not None and now < self.expiry

    def multiplier(self, now: datetime) -> int:
        return BOOST_MULTIPLIER if self.is_active(now) else 1

    def remaining(self, now: datetime) -> timedelta:
        """Outstanding boosted time, zero when inactive."""
        if not self.is_active(now):
            return timedelta(0)
        return self.expiry - now

    @property
    def window(self) -> BoostWindow | None:
        """The current or most recent boost interval, for accrual."""
        if self.expiry is None:
            return None
        return BoostWindow(start=self.started_at, end=self.expiry)


@dataclass(frozen=True)
class BoostStatus:
    """Snapshot of a boost for display."""

    is_active: bool
    expiry: datetime | None
    remaining_minutes: int
    free_grants_remaining: int
    free_quota: int
    paid_grants_remaining: int
    minutes_until_replenish: int
    multiplier: int


def _extend(state: BoostState, now: datetime, policy: BoostPolicy) -> BoostState:
    remaining = state.remaining(now)
    if remaining >= policy.ceiling:
        raise BoostCeilingReached(
            f"Maximum boost time reached ({int(policy.ceiling.total_seconds() // 3600)} hours)"
        )

    active = state.is_active(now)
    base = state.expiry if active else now
    expiry = min(now + policy.ceiling, base + policy.increment)
    started_at = state.started_at if active and state.started_at is not None else now
    return replace(state, expiry=expiry, started_at=started_at)


def grant_free(state: BoostState, now: datetime, policy: BoostPolicy = DEFAULT_POLICY) -> BoostState:
    """Spend one free grant to extend the boost."""
    if state.free_grants_remaining <= 0:
        raise NoFreeGrantsAvailable()

    extended = _extend(state, now, policy)
    remaining = state.free_grants_remaining - 1
    next_replenish = state.next_free_replenish
    if remaining == 0 and next_replenish is None:
        next_replenish = now + policy.replenish_cooldown
    return replace(
        extended, free_grants_remaining=remaining, next_free_replenish=next_replenish
    )


def grant_paid(state: BoostState, now: datetime, policy: BoostPolicy = DEFAULT_POLICY) -> BoostState:
    """Spend one paid/ad grant to extend the boost."""
    today = reference_date(now, policy.timezone)
    used = state.paid_grants_used if state.paid_day in (None, today) else 0
    if used >= policy.max_paid_grants:
        raise PaidGrantQuotaExhausted(
            f"No ad boosts remaining today ({used}/{policy.max_paid_grants} used)"
        )

    extended = _extend(state, now, policy)
    return replace(extended, paid_grants_used=used + 1, paid_day=today)


def tick(state: BoostState, now: datetime, policy: BoostPolicy = DEFAULT_POLICY) -> BoostState:
    """Apply every time-driven transition that is due at ``now``."""
    if state.next_free_replenish is not None and now >= state.next_free_replenish:
        state = replace(state, free_grants_remaining=policy.free_quota, next_free_replenish=None)

    if state.expiry is not None and now >= state.expiry:
        state = replace(state, expiry=None, started_at=None)

    if state.paid_day is not None and state.paid_day != reference_date(now, policy.timezone):
        state = replace(state, paid_grants_used=0, paid_day=None)

    return state


def restore(
    state: BoostState, now: datetime, policy: BoostPolicy = DEFAULT_POLICY
) -> tuple[BoostState, bool]:
    """Bring a state loaded at session start up to date.

    Returns the new state and whether it differs from the stored one, in
    which case the caller must persist it right away so an expired boost is
    not resurrected later.
    """
    restored = tick(state, now, policy)
    return restored, restored != state


def status(state: BoostState, now: datetime, policy: BoostPolicy = DEFAULT_POLICY) -> BoostStatus:
    """Describe a (ticked) state for the client."""
    state = tick(state, now, policy)
    remaining_minutes = int(state.remaining(now).total_seconds() // 60)
    if state.next_free_replenish is not None:
        seconds = (state.next_free_replenish - now).total_seconds()
        minutes_until_replenish = max(0, math.ceil(seconds / 60))
    else:
        minutes_until_replenish = 0

    return BoostStatus(
        is_active=state.is_active(now),
        expiry=state.expiry,
        remaining_minutes=remaining_minutes,
        free_grants_remaining=state.free_grants_remaining,
        free_quota=policy.free_quota,
        paid_grants_remaining=max(0, policy.max_paid_grants - state.paid_grants_used),
        minutes_until_replenish=minutes_until_replenish,
        multiplier=state.multiplier(now),
    )
