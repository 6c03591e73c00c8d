"""Account and profile endpoints."""

import logging

from fastapi import APIRouter, Depends, status

from terramine.auth.middleware import get_current_account, get_current_account_id
from terramine.clock import system_clock
from terramine.config import get_settings
from terramine.dependencies import get_store
from terramine.engine.accrual import estimated_income
from terramine.models import Account
from terramine.schemas.accounts import (
    AccountCreate,
    AccountResponse,
    IncomeEstimate,
    ProfileUpdate,
)
from terramine.services.store import AccountStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/accounts", tags=["accounts"])


async def _account_response(account: Account, store: AccountStore) -> AccountResponse:
    cells = await store.get_owned_cells(account.id)
    income = estimated_income(c.mine_type for c in cells)
    response = AccountResponse.model_validate(account)
    response.property_count = len(cells)
    response.estimated_income = IncomeEstimate(**income)
    return response


@router.post("", response_model=AccountResponse, status_code=status.HTTP_201_CREATED)
async def create_account(
    data: AccountCreate,
    account_id: str = Depends(get_current_account_id),
    store: AccountStore = Depends(get_store),
) -> AccountResponse:
    """Create the account for the authenticated identity."""
    settings = get_settings()
    account = await store.create_account(
        account_id,
        data.email,
        starting_balance=settings.starting_tb_balance,
        now=system_clock.now(),
        free_boosts=settings.free_boost_quota,
    )
    logger.info(f"Created account {account_id}")
    return await _account_response(account, store)


@router.get("/me", response_model=AccountResponse)
async def get_me(
    account: Account = Depends(get_current_account),
    store: AccountStore = Depends(get_store),
) -> AccountResponse:
    """Get the authenticated account."""
    return await _account_response(account, store)


@router.patch("/me", response_model=AccountResponse)
async def update_me(
    data: ProfileUpdate,
    account: Account = Depends(get_current_account),
    store: AccountStore = Depends(get_store),
) -> AccountResponse:
    """Update profile fields; omitted fields are left unchanged."""
    account = await store.update_profile(account, data.model_dump(exclude_unset=True))
    return await _account_response(account, store)
