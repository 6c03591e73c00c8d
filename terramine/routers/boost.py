"""Boost endpoints."""

from fastapi import APIRouter, Depends

from terramine.auth.middleware import get_current_account_id
from terramine.dependencies import get_game_service
from terramine.engine.boost import GrantKind
from terramine.schemas.boost import BoostStatusResponse
from terramine.services.game import GameService

router = APIRouter(prefix="/api/boost", tags=["boost"])


@router.get("", response_model=BoostStatusResponse)
async def get_boost_status(
    account_id: str = Depends(get_current_account_id),
    game: GameService = Depends(get_game_service),
) -> BoostStatusResponse:
    """Current boost, remaining grants and replenish countdown."""
    return BoostStatusResponse.model_validate(await game.boost_status(account_id))


@router.post("/free", response_model=BoostStatusResponse)
async def grant_free_boost(
    account_id: str = Depends(get_current_account_id),
    game: GameService = Depends(get_game_service),
) -> BoostStatusResponse:
    """Spend a free grant."""
    return BoostStatusResponse.model_validate(await game.request_boost(account_id, GrantKind.FREE))


@router.post("/paid", response_model=BoostStatusResponse)
async def grant_paid_boost(
    account_id: str = Depends(get_current_account_id),
    game: GameService = Depends(get_game_service),
) -> BoostStatusResponse:
    """Spend a paid grant, awarded after the ad-reward provider confirms a view."""
    return BoostStatusResponse.model_validate(await game.request_boost(account_id, GrantKind.PAID))
