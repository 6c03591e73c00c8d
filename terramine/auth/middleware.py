"""Authentication dependencies.

Identity is established upstream by the authenticating gateway, which
forwards the account id in a trusted header.
"""

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from terramine.config import get_settings
from terramine.database import get_db
from terramine.models import Account
from terramine.services.store import AccountStore

MAX_ACCOUNT_ID_LENGTH = 128


async def get_current_account_id_optional(request: Request) -> str | None:
    """Get the authenticated account id from the identity header, or None."""
    account_id = request.headers.get(get_settings().identity_header, "").strip()
    if not account_id:
        return None
    if len(account_id) > MAX_ACCOUNT_ID_LENGTH:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid identity header",
        )
    return account_id


async def get_current_account_id(
    account_id: str | None = Depends(get_current_account_id_optional),
) -> str:
    """Get the authenticated account id, or raise 401 if not authenticated."""
    if not account_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    return account_id


async def get_current_account(
    account_id: str = Depends(get_current_account_id),
    db: AsyncSession = Depends(get_db),
) -> Account:
    """Load the authenticated account; raises AccountNotFound if it was never created."""
    return await AccountStore(db).get_owner_account(account_id)
