"""Check-in endpoints."""

from fastapi import APIRouter, Depends, status

from terramine.auth.middleware import get_current_account_id
from terramine.dependencies import get_game_service, get_store
from terramine.engine.grid import CellId
from terramine.schemas.check_ins import (
    CheckInReceiptResponse,
    CheckInRequest,
    CheckInResponse,
)
from terramine.services.game import GameService
from terramine.services.store import AccountStore

router = APIRouter(prefix="/api", tags=["check-ins"])


@router.post(
    "/cells/{cell_id}/check-ins",
    response_model=CheckInReceiptResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_check_in(
    cell_id: str,
    data: CheckInRequest,
    account_id: str = Depends(get_current_account_id),
    game: GameService = Depends(get_game_service),
) -> CheckInReceiptResponse:
    """Check in to another player's property."""
    receipt = await game.check_in(
        account_id,
        CellId.parse(cell_id),
        data.latitude,
        data.longitude,
        message=data.message,
        photo=data.photo_bytes(),
    )
    return CheckInReceiptResponse(
        check_in=CheckInResponse.model_validate(receipt.check_in),
        visitor_tb_earned=receipt.visitor_tb_earned,
        owner_tb_earned=receipt.owner_tb_earned,
    )


@router.get("/cells/{cell_id}/check-ins", response_model=list[CheckInResponse])
async def list_property_check_ins(
    cell_id: str,
    _account_id: str = Depends(get_current_account_id),
    store: AccountStore = Depends(get_store),
) -> list[CheckInResponse]:
    """Visitor log of a property, newest first."""
    prop = await store.get_cell(CellId.parse(cell_id).key)
    return [CheckInResponse.model_validate(c) for c in await store.check_ins_for_property(prop.id)]


@router.get("/check-ins/mine", response_model=list[CheckInResponse])
async def list_my_check_ins(
    account_id: str = Depends(get_current_account_id),
    store: AccountStore = Depends(get_store),
) -> list[CheckInResponse]:
    """The caller's own check-ins, newest first."""
    return [CheckInResponse.model_validate(c) for c in await store.check_ins_by_visitor(account_id)]
