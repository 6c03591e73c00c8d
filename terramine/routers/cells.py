"""Grid cell and property endpoints."""

from fastapi import APIRouter, Depends, Query, status

from terramine.auth.middleware import get_current_account_id
from terramine.config import get_settings
from terramine.dependencies import get_game_service, get_store
from terramine.engine.grid import CellId, cell_for_id, point_to_cell_id, visible_cell_ids
from terramine.schemas.cells import (
    CellResponse,
    NicknameUpdate,
    PurchaseRequest,
    VisibleCellsResponse,
)
from terramine.services.game import GameService
from terramine.services.store import AccountStore

router = APIRouter(prefix="/api/cells", tags=["cells"])


@router.get("/visible", response_model=VisibleCellsResponse)
async def get_visible_cells(
    lat: float = Query(..., ge=-90, le=90),
    lon: float = Query(..., ge=-180, le=180),
    radius: float | None = Query(default=None, ge=0, description="Radius in meters"),
    _account_id: str = Depends(get_current_account_id),
    store: AccountStore = Depends(get_store),
) -> VisibleCellsResponse:
    """List the cells around a point with their ownership."""
    settings = get_settings()
    cell_ids = visible_cell_ids(
        lat,
        lon,
        radius if radius is not None else settings.max_visible_radius_m,
        grid_size=settings.grid_size_degrees,
        meters_per_cell=settings.meters_per_cell,
        max_radius_m=settings.max_visible_radius_m,
        max_cells=settings.max_visible_cells,
    )
    owned = await store.list_cells(c.key for c in cell_ids)

    cells = [
        CellResponse.from_cell(cell_for_id(c, settings.grid_size_degrees), owned.get(c.key))
        for c in sorted(cell_ids)
    ]
    center = point_to_cell_id(lat, lon, settings.grid_size_degrees)
    return VisibleCellsResponse(center_cell_id=center.key, count=len(cells), cells=cells)


@router.get("/mine", response_model=list[CellResponse])
async def get_my_cells(
    account_id: str = Depends(get_current_account_id),
    store: AccountStore = Depends(get_store),
) -> list[CellResponse]:
    """List the caller's properties."""
    grid_size = get_settings().grid_size_degrees
    return [
        CellResponse.from_cell(cell_for_id(p.cell_id, grid_size), p)
        for p in await store.get_owned_cells(account_id)
    ]


@router.post("/purchase", response_model=CellResponse, status_code=status.HTTP_201_CREATED)
async def purchase_cell(
    data: PurchaseRequest,
    account_id: str = Depends(get_current_account_id),
    game: GameService = Depends(get_game_service),
) -> CellResponse:
    """Buy a cell next to the caller."""
    prop = await game.purchase_cell(
        account_id,
        data.latitude,
        data.longitude,
        cell_id=CellId.parse(data.cell_id) if data.cell_id else None,
    )
    return CellResponse.from_cell(cell_for_id(prop.cell_id, get_settings().grid_size_degrees), prop)


@router.get("/{cell_id}", response_model=CellResponse)
async def get_cell(
    cell_id: str,
    _account_id: str = Depends(get_current_account_id),
    store: AccountStore = Depends(get_store),
) -> CellResponse:
    """Get a cell, owned or not."""
    parsed = CellId.parse(cell_id)
    prop = await store.find_cell(parsed.key)
    return CellResponse.from_cell(cell_for_id(parsed, get_settings().grid_size_degrees), prop)


@router.put("/{cell_id}/nickname", response_model=CellResponse)
async def set_cell_nickname(
    cell_id: str,
    data: NicknameUpdate,
    account_id: str = Depends(get_current_account_id),
    game: GameService = Depends(get_game_service),
) -> CellResponse:
    """Rename one of the caller's properties; an empty nickname clears it."""
    prop = await game.rename_cell(account_id, CellId.parse(cell_id).key, data.nickname)
    return CellResponse.from_cell(cell_for_id(prop.cell_id, get_settings().grid_size_degrees), prop)
