"""Passive income accrual.

Each owned property earns a fixed real-currency amount per second depending
on its category. While a boost is active the whole portfolio earns double.
Totals are flushed to the database as absolute values paired with the
snapshot time, so replaying a flush never double-counts.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

from terramine.engine.mines import MineType

BOOST_MULTIPLIER = 2

# USD per second
RENT_RATES: dict[MineType, float] = {
    MineType.ROCK: 0.0000000011,
    MineType.COAL: 0.0000000016,
    MineType.GOLD: 0.0000000022,
    MineType.DIAMOND: 0.0000000044,
}

SECONDS_PER_DAY = 86_400


@dataclass(frozen=True)
class BoostWindow:
    """Interval during which accrual is multiplied."""

    start: datetime | None
    end: datetime


def total_rate(mine_types: Iterable[MineType | str]) -> float:
    """Sum of per-second rates of the given properties."""
    return sum(RENT_RATES.get(MineType(m), 0.0) for m in mine_types)


def effective_rate(base_rate: float, boosted: bool) -> float:
    """Rate after applying the boost multiplier."""
    return base_rate * BOOST_MULTIPLIER if boosted else base_rate


@dataclass(frozen=True)
class Accrual:
    """Result of an offline catch-up calculation."""

    amount: float
    elapsed_seconds: float
    boosted_seconds: float

    @property
    def normal_seconds(self) -> float:
        return self.elapsed_seconds - self.boosted_seconds


def boosted_overlap_seconds(
    last_snapshot: datetime, now: datetime, boost_window: BoostWindow | None
) -> float:
    """Seconds of [last_snapshot, now] covered by the boost window."""
    if boost_window is None:
        return 0.0
    start = last_snapshot
    if boost_window.start is not None and boost_window.start > start:
        start = boost_window.start
    end = min(now, boost_window.end)
    return max(0.0, (end - start).total_seconds())


def accrued_since(
    last_snapshot: datetime,
    now: datetime,
    mine_types: Iterable[MineType | str],
    boost_window: BoostWindow | None = None,
) -> Accrual:
    """Income earned between the last snapshot and now.

    ``normal_seconds * rate + boosted_seconds * rate * 2``. A window without
    a start is treated as covering the interval from the snapshot onwards.
    """
    rate = total_rate(mine_types)
    elapsed = max(0.0, (now - last_snapshot).total_seconds())
    if elapsed == 0.0:
        return Accrual(amount=0.0, elapsed_seconds=0.0, boosted_seconds=0.0)

    boosted = min(elapsed, boosted_overlap_seconds(last_snapshot, now, boost_window))
    normal = elapsed - boosted
    amount = normal * rate + boosted * rate * BOOST_MULTIPLIER
    return Accrual(amount=amount, elapsed_seconds=elapsed, boosted_seconds=boosted)


def projected_display_value(
    base_amount: float,
    rate_at_session_start: float,
    session_start: datetime,
    now: datetime,
) -> float:
    """Linear extrapolation of the accumulator for live display."""
    seconds = max(0.0, (now - session_start).total_seconds())
    return base_amount + rate_at_session_start * seconds


def estimated_income(mine_types: Iterable[MineType | str]) -> dict[str, float]:
    """Unboosted daily and 30-day income of a portfolio."""
    daily = total_rate(mine_types) * SECONDS_PER_DAY
    return {"daily": daily, "monthly": daily * 30}


def format_earnings(amount: float) -> str:
    """Dollar string with more decimals the smaller the amount."""
    if amount == 0:
        return "$0.00"
    if amount < 0.000001:
        return f"${amount:.12f}"
    if amount < 0.0001:
        return f"${amount:.10f}"
    if amount < 0.01:
        return f"${amount:.8f}"
    if amount < 1:
        return f"${amount:.6f}"
    return f"${amount:.2f}"
