"""Shared fixtures: in-memory database, fixed clock and a wired game service."""

import random
from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from terramine.config import Settings
from terramine.database import Base
from terramine.services.game import GameService
from terramine.services.location import LocationRegistry
from terramine.services.photos import LocalObjectStore
from terramine.services.sessions import SessionRegistry
from terramine.services.store import AccountStore

# Noon in New York on a summer day
T0 = datetime(2025, 6, 15, 16, 0, tzinfo=UTC)

# Centre of cell 420000_-710001
HOME_LAT = 42.00005
HOME_LON = -71.00005


class FixedClock:
    """Clock that only moves when told to."""

    def __init__(self, now: datetime = T0):
        self.current = now

    def now(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> datetime:
        self.current += timedelta(**kwargs)
        return self.current


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def settings(tmp_path):
    return Settings(
        database_url="sqlite+aiosqlite://",
        photo_storage_dir=str(tmp_path / "photos"),
    )


@pytest.fixture
async def db_engine():
    """In-memory SQLite engine with all tables created."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_maker):
    async with session_maker() as session:
        yield session


@pytest.fixture
def store(db_session):
    return AccountStore(db_session)


@pytest.fixture
def sessions():
    return SessionRegistry()


@pytest.fixture
def locations():
    return LocationRegistry(max_age=timedelta(minutes=2))


@pytest.fixture
def photos(settings):
    return LocalObjectStore(
        settings.photo_storage_dir, settings.photo_base_url, settings.max_photo_bytes
    )


@pytest.fixture
def game(store, clock, sessions, locations, photos, settings):
    return GameService(
        store,
        clock=clock,
        sessions=sessions,
        locations=locations,
        photos=photos,
        settings=settings,
        rng=random.Random(7),
    )


@pytest.fixture
def make_account(store, db_session, settings):
    """Create and commit an account with the starting balance."""

    async def _make(account_id: str, email: str | None = None, balance: int | None = None):
        account = await store.create_account(
            account_id,
            email,
            starting_balance=settings.starting_tb_balance if balance is None else balance,
            now=T0,
            free_boosts=settings.free_boost_quota,
        )
        await db_session.commit()
        return account

    return _make
