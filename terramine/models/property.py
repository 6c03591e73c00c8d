"""Owned grid cell ("property" / "mine")."""

from datetime import datetime

from sqlalchemy import Double, Enum, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from terramine.database import Base, UTCDateTime, utc_now
from terramine.engine.grid import CellId, LatLng, cell_polygon
from terramine.engine.mines import MineType


class Property(Base):
    """A grid cell that has been purchased. Unowned cells have no row."""

    __tablename__ = "properties"

    # "{grid_x}_{grid_y}"; inserting is the ownership compare-and-set
    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    grid_x: Mapped[int] = mapped_column(Integer, nullable=False)
    grid_y: Mapped[int] = mapped_column(Integer, nullable=False)
    owner_id: Mapped[str] = mapped_column(
        String(128),
        ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    mine_type: Mapped[MineType] = mapped_column(
        Enum(MineType, name="mine_type", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    center_lat: Mapped[float] = mapped_column(Double, nullable=False)
    center_lng: Mapped[float] = mapped_column(Double, nullable=False)
    nickname: Mapped[str | None] = mapped_column(String(50))
    purchased_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utc_now)

    @property
    def cell_id(self) -> CellId:
        return CellId(self.grid_x, self.grid_y)

    @property
    def corners(self) -> list[LatLng]:
        return list(cell_polygon(self.grid_x, self.grid_y))
