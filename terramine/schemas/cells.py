"""Schemas for grid cells and properties."""

from datetime import datetime

from pydantic import BaseModel, Field

from terramine.engine.grid import Cell
from terramine.engine.mines import MineType
from terramine.models import Property


class Coordinate(BaseModel):
    latitude: float
    longitude: float


class CellResponse(BaseModel):
    """A grid cell, owned or not."""

    id: str
    grid_x: int
    grid_y: int
    center: Coordinate
    corners: list[Coordinate]
    is_owned: bool = False
    owner_id: str | None = None
    mine_type: MineType | None = None
    nickname: str | None = None
    purchased_at: datetime | None = None

    @classmethod
    def from_cell(cls, cell: Cell, prop: Property | None = None) -> "CellResponse":
        response = cls(
            id=cell.key,
            grid_x=cell.id.grid_x,
            grid_y=cell.id.grid_y,
            center=Coordinate(latitude=cell.center.latitude, longitude=cell.center.longitude),
            corners=[Coordinate(latitude=c.latitude, longitude=c.longitude) for c in cell.corners],
        )
        if prop is not None:
            response.is_owned = True
            response.owner_id = prop.owner_id
            response.mine_type = prop.mine_type
            response.nickname = prop.nickname
            response.purchased_at = prop.purchased_at
        return response


class VisibleCellsResponse(BaseModel):
    """Cells around a point."""

    center_cell_id: str
    count: int
    cells: list[CellResponse]


class PurchaseRequest(BaseModel):
    """Buy a cell while standing at (latitude, longitude).

    Without ``cell_id`` the cell under the buyer is bought. Coordinates may be
    omitted to use the last reported position.
    """

    cell_id: str | None = Field(default=None, min_length=3, max_length=50)
    latitude: float | None = Field(default=None, ge=-90, le=90, allow_inf_nan=False)
    longitude: float | None = Field(default=None, ge=-180, le=180, allow_inf_nan=False)


class NicknameUpdate(BaseModel):
    nickname: str | None = Field(default=None, max_length=50)
