"""Tests for the background earnings flush."""

import asyncio
from unittest.mock import AsyncMock, patch

import pytest

from terramine.engine.mines import MineType
from terramine.models import Property
from terramine.services.earnings import EarningsService, flush_live_sessions
from terramine.services.store import AccountStore


@pytest.fixture
def patched_sessions(session_maker):
    """Point the background flush at the test database."""
    with patch("terramine.services.earnings.async_session_maker", session_maker):
        yield


async def _seed(session_maker, clock):
    async with session_maker() as db:
        store = AccountStore(db)
        await store.create_account("alice", None, starting_balance=1000, now=clock.now())
        await store.create_cell(
            Property(
                id="1_1",
                grid_x=1,
                grid_y=1,
                owner_id="alice",
                mine_type=MineType.ROCK,
                center_lat=0.00015,
                center_lng=0.00015,
                purchased_at=clock.now(),
            )
        )
        await db.commit()


class TestFlushLiveSessions:
    """Tests for one flush pass."""

    async def test_flushes_live_accounts(self, session_maker, patched_sessions, sessions, clock):
        await _seed(session_maker, clock)
        sessions.rebase("alice", 0.0, 1.1e-9, clock.now())

        clock.advance(seconds=600)
        result = await flush_live_sessions(sessions, clock=clock)

        assert result == {"flushed": 1, "failed": 0}
        async with session_maker() as db:
            account = await AccountStore(db).get_owner_account("alice")
            assert account.earnings_total == pytest.approx(600 * 1.1e-9)
            assert account.last_earnings_update == clock.now()

        # The live session restarts from the flushed total
        assert sessions.get("alice").started_at == clock.now()

    async def test_failure_is_counted_not_raised(self, session_maker, patched_sessions, sessions, clock):
        sessions.rebase("ghost", 0.0, 0.0, clock.now())
        result = await flush_live_sessions(sessions)
        assert result == {"flushed": 0, "failed": 1}

    async def test_nothing_to_flush(self, patched_sessions, sessions):
        assert await flush_live_sessions(sessions) == {"flushed": 0, "failed": 0}


class TestEarningsService:
    """Tests for the start/stop lifecycle."""

    async def test_start_and_stop_flushes_once_more(self):
        service = EarningsService(interval_seconds=3600)
        with patch(
            "terramine.services.earnings.flush_live_sessions", new_callable=AsyncMock
        ) as mock_flush:
            await service.start()
            await asyncio.sleep(0)
            await service.stop()

        mock_flush.assert_awaited_once()

    async def test_start_is_idempotent(self):
        service = EarningsService(interval_seconds=3600)
        with patch("terramine.services.earnings.flush_live_sessions", new_callable=AsyncMock):
            await service.start()
            task = service._task
            await service.start()
            assert service._task is task
            await service.stop()

    async def test_loop_survives_errors(self):
        service = EarningsService(interval_seconds=0.01)
        calls = 0

        async def failing_flush():
            nonlocal calls
            calls += 1
            raise RuntimeError("database down")

        with patch("terramine.services.earnings.flush_live_sessions", failing_flush):
            await service.start()
            await asyncio.wait_for(_until(lambda: calls >= 3), timeout=5)
            await service.stop()

        assert calls >= 3


async def _until(condition) -> None:
    while not condition():
        await asyncio.sleep(0.01)
