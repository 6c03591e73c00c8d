"""Session lifecycle, live earnings and position reports."""

from fastapi import APIRouter, Depends, status

from terramine.auth.middleware import get_current_account_id
from terramine.dependencies import get_game_service
from terramine.schemas.accounts import (
    LiveEarningsResponse,
    OfflineEarningsResponse,
    PositionReport,
)
from terramine.services.game import GameService

router = APIRouter(prefix="/api", tags=["sessions"])


@router.post("/session/start", response_model=OfflineEarningsResponse)
async def start_session(
    account_id: str = Depends(get_current_account_id),
    game: GameService = Depends(get_game_service),
) -> OfflineEarningsResponse:
    """Catch up offline earnings and open a live session."""
    earnings = await game.start_session(account_id)
    return OfflineEarningsResponse.model_validate(earnings)


@router.post("/session/end", response_model=OfflineEarningsResponse)
async def end_session(
    account_id: str = Depends(get_current_account_id),
    game: GameService = Depends(get_game_service),
) -> OfflineEarningsResponse:
    """Flush earnings and close the live session."""
    earnings = await game.end_session(account_id)
    game.locations.forget(account_id)
    return OfflineEarningsResponse.model_validate(earnings)


@router.get("/earnings", response_model=LiveEarningsResponse)
async def get_earnings(
    account_id: str = Depends(get_current_account_id),
    game: GameService = Depends(get_game_service),
) -> LiveEarningsResponse:
    """Current money counter value."""
    earnings = await game.get_live_display_earnings(account_id)
    return LiveEarningsResponse.model_validate(earnings)


@router.post("/location", status_code=status.HTTP_204_NO_CONTENT)
async def report_location(
    position: PositionReport,
    account_id: str = Depends(get_current_account_id),
    game: GameService = Depends(get_game_service),
) -> None:
    """Record the caller's current GPS position."""
    game.locations.report_position(
        account_id, position.latitude, position.longitude, game.clock.now()
    )
