"""Proximity and cooldown predicates used by purchases and check-ins."""

from datetime import date, datetime
from zoneinfo import ZoneInfo

from terramine.engine.grid import GRID_SIZE, CellId, point_to_cell_id

REFERENCE_TIMEZONE = ZoneInfo("America/New_York")


def is_inside_cell(
    latitude: float, longitude: float, cell_id: CellId, grid_size: float = GRID_SIZE
) -> bool:
    """True when the point maps to exactly this cell."""
    return point_to_cell_id(latitude, longitude, grid_size) == cell_id


def is_adjacent_or_inside(
    latitude: float, longitude: float, cell_id: CellId, grid_size: float = GRID_SIZE
) -> bool:
    """True when the point is in the cell or any of its 8 neighbours."""
    return point_to_cell_id(latitude, longitude, grid_size).chebyshev_distance(cell_id) <= 1


def reference_date(now: datetime, tz: ZoneInfo = REFERENCE_TIMEZONE) -> date:
    """Calendar date of an instant in the reference timezone."""
    if now.tzinfo is None:
        raise ValueError("reference_date() needs a timezone-aware datetime")
    return now.astimezone(tz).date()


def can_check_in_today(
    last_check_in_date: date | None,
    now: datetime,
    tz: ZoneInfo = REFERENCE_TIMEZONE,
) -> bool:
    """True if there is no prior check-in or it happened on another reference day."""
    if last_check_in_date is None:
        return True
    return last_check_in_date != reference_date(now, tz)
