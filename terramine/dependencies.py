"""Shared FastAPI dependencies."""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from terramine.database import get_db
from terramine.services.game import GameService
from terramine.services.store import AccountStore


async def get_store(db: AsyncSession = Depends(get_db)) -> AccountStore:
    return AccountStore(db)


async def get_game_service(store: AccountStore = Depends(get_store)) -> GameService:
    """Game service bound to the request's database session."""
    return GameService(store)
