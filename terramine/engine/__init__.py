"""Pure game rules: grid addressing, proximity, accrual and boosts."""

from terramine.engine.accrual import (
    Accrual,
    BoostWindow,
    accrued_since,
    effective_rate,
    format_earnings,
    projected_display_value,
    total_rate,
)
from terramine.engine.boost import BoostPolicy, BoostState, GrantKind, grant_free, grant_paid, tick
from terramine.engine.grid import (
    Cell,
    CellId,
    LatLng,
    cell_for_id,
    cell_for_point,
    cell_id_to_center,
    cell_polygon,
    point_to_cell_id,
    visible_cell_ids,
)
from terramine.engine.mines import MineType, assign_mine_type
from terramine.engine.proximity import can_check_in_today, is_adjacent_or_inside, is_inside_cell

__all__ = [
    "Accrual",
    "BoostPolicy",
    "BoostState",
    "BoostWindow",
    "Cell",
    "CellId",
    "GrantKind",
    "LatLng",
    "MineType",
    "accrued_since",
    "assign_mine_type",
    "can_check_in_today",
    "cell_for_id",
    "cell_for_point",
    "cell_id_to_center",
    "cell_polygon",
    "effective_rate",
    "format_earnings",
    "grant_free",
    "grant_paid",
    "is_adjacent_or_inside",
    "is_inside_cell",
    "point_to_cell_id",
    "projected_display_value",
    "tick",
    "total_rate",
    "visible_cell_ids",
]
