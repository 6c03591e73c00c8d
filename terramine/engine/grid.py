"""Grid addressing: GPS coordinates to ownable cells and back.

The world is cut into axis-aligned squares of ``GRID_SIZE`` degrees on each
side. A cell's identity is ``(floor(lat / GRID_SIZE), floor(lon / GRID_SIZE))``
so any point inside a cell maps to the same id. Longitude distortion is
ignored: a cell is ~10 m tall everywhere and narrower towards the poles.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import NamedTuple

from terramine.exceptions import InvalidCellId, InvalidCoordinates

logger = logging.getLogger(__name__)

GRID_SIZE = 0.0001
METERS_PER_CELL = 10.0
MAX_VISIBLE_RADIUS_M = 150.0
MAX_VISIBLE_CELLS = 500
EARTH_RADIUS_M = 6_371_000


class LatLng(NamedTuple):
    latitude: float
    longitude: float


class CellId(NamedTuple):
    """Integer grid coordinates of one cell."""

    grid_x: int
    grid_y: int

    @property
    def key(self) -> str:
        """Serialized form used as the property primary key."""
        return f"{self.grid_x}_{self.grid_y}"

    @classmethod
    def parse(cls, key: str) -> CellId:
        """Parse a ``"{grid_x}_{grid_y}"`` key. Negative components are allowed."""
        parts = key.split("_")
        if len(parts) != 2:
            raise InvalidCellId(f"Invalid cell id: {key!r}")
        try:
            return cls(int(parts[0]), int(parts[1]))
        except ValueError as e:
            raise InvalidCellId(f"Invalid cell id: {key!r}") from e

    def chebyshev_distance(self, other: CellId) -> int:
        return max(abs(self.grid_x - other.grid_x), abs(self.grid_y - other.grid_y))


@dataclass(frozen=True)
class Cell:
    """Geometry of one grid cell."""

    id: CellId
    center: LatLng
    corners: tuple[LatLng, LatLng, LatLng, LatLng]

    @property
    def key(self) -> str:
        return self.id.key


def _require_finite(latitude: float, longitude: float) -> None:
    if not (math.isfinite(latitude) and math.isfinite(longitude)):
        raise InvalidCoordinates(f"Non-finite coordinates: ({latitude}, {longitude})")


def validate_coordinates(latitude: float, longitude: float) -> None:
    """Raise InvalidCoordinates unless the point is a real place on Earth."""
    _require_finite(latitude, longitude)
    if abs(latitude) > 90 or abs(longitude) > 180:
        raise InvalidCoordinates(f"Coordinates out of bounds: ({latitude}, {longitude})")


def point_to_cell_id(latitude: float, longitude: float, grid_size: float = GRID_SIZE) -> CellId:
    """Return the id of the cell containing a point."""
    _require_finite(latitude, longitude)
    return CellId(math.floor(latitude / grid_size), math.floor(longitude / grid_size))


def cell_id_to_center(grid_x: int, grid_y: int, grid_size: float = GRID_SIZE) -> LatLng:
    """Return the centroid of a cell."""
    return LatLng((grid_x + 0.5) * grid_size, (grid_y + 0.5) * grid_size)


def cell_polygon(
    grid_x: int, grid_y: int, grid_size: float = GRID_SIZE
) -> tuple[LatLng, LatLng, LatLng, LatLng]:
    """Return the four corners of a cell, clockwise from the south-west corner."""
    south = grid_x * grid_size
    north = (grid_x + 1) * grid_size
    west = grid_y * grid_size
    east = (grid_y + 1) * grid_size
    return (
        LatLng(south, west),
        LatLng(north, west),
        LatLng(north, east),
        LatLng(south, east),
    )


def cell_for_id(cell_id: CellId, grid_size: float = GRID_SIZE) -> Cell:
    """Build the full geometry of a cell from its id."""
    return Cell(
        id=cell_id,
        center=cell_id_to_center(cell_id.grid_x, cell_id.grid_y, grid_size),
        corners=cell_polygon(cell_id.grid_x, cell_id.grid_y, grid_size),
    )


def cell_for_point(latitude: float, longitude: float, grid_size: float = GRID_SIZE) -> Cell:
    """Build the geometry of the cell containing a point."""
    return cell_for_id(point_to_cell_id(latitude, longitude, grid_size), grid_size)


def _capped_range(requested: int, max_cells: int) -> int:
    """Largest neighbourhood range whose (2r+1)^2 square fits under max_cells."""
    if (2 * requested + 1) ** 2 <= max_cells:
        return requested
    return max(0, (math.isqrt(max_cells) - 1) // 2)


def visible_cell_ids(
    center_lat: float,
    center_lon: float,
    radius_m: float,
    *,
    grid_size: float = GRID_SIZE,
    meters_per_cell: float = METERS_PER_CELL,
    max_radius_m: float = MAX_VISIBLE_RADIUS_M,
    max_cells: int = MAX_VISIBLE_CELLS,
) -> frozenset[CellId]:
    """Enumerate the square neighbourhood of cells around a point.

    The radius is clamped to ``max_radius_m`` and converted to a cell range by
    rounding up. When the square would hold more than ``max_cells`` cells the
    range silently shrinks to the largest square under the cap. Invalid input
    yields an empty set.
    """
    try:
        validate_coordinates(center_lat, center_lon)
        if not math.isfinite(radius_m):
            raise InvalidCoordinates(f"Non-finite radius: {radius_m}")
    except InvalidCoordinates as e:
        logger.error(f"Cannot list visible cells: {e}")
        return frozenset()

    effective_radius = max(0.0, min(radius_m, max_radius_m))
    requested_range = math.ceil(effective_radius / meters_per_cell)
    grid_range = _capped_range(requested_range, max_cells)
    if grid_range != requested_range:
        logger.warning(
            f"Visible range {requested_range} exceeds {max_cells} cells, reduced to {grid_range}"
        )

    center = point_to_cell_id(center_lat, center_lon, grid_size)
    return frozenset(
        CellId(x, y)
        for x in range(center.grid_x - grid_range, center.grid_x + grid_range + 1)
        for y in range(center.grid_y - grid_range, center.grid_y + grid_range + 1)
    )


def distance_meters(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two points (haversine)."""
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    delta_lat = math.radians(lat2 - lat1)
    delta_lon = math.radians(lon2 - lon1)

    a = (
        math.sin(delta_lat / 2) ** 2
        + math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(delta_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_M * c
