"""Background flushing of live earnings sessions and boost expiry."""

import asyncio
import logging

from terramine.clock import Clock, system_clock
from terramine.config import get_settings
from terramine.database import async_session_maker
from terramine.services.game import GameService
from terramine.services.sessions import SessionRegistry, session_registry
from terramine.services.store import AccountStore

logger = logging.getLogger(__name__)


async def flush_live_sessions(
    sessions: SessionRegistry = session_registry, clock: Clock = system_clock
) -> dict[str, int]:
    """Flush every live session and apply due boost transitions.

    Each account gets its own transaction; a failing account is logged and
    skipped, and the next pass catches up since flushes write totals.
    """
    flushed = 0
    failed = 0
    for account_id in sessions.active_ids():
        try:
            async with async_session_maker() as db:
                service = GameService(AccountStore(db), clock=clock, sessions=sessions)
                await service.flush_earnings(account_id)
                await service.tick_boost(account_id)
                await db.commit()
            flushed += 1
        except Exception as e:
            failed += 1
            logger.error(f"Failed to flush earnings for {account_id}: {e}")

    if flushed or failed:
        logger.debug(f"Flushed {flushed} live sessions ({failed} failed)")
    return {"flushed": flushed, "failed": failed}


class EarningsService:
    """Background service that periodically persists live earnings."""

    def __init__(self, interval_seconds: float | None = None):
        self._interval = interval_seconds or get_settings().flush_interval_seconds
        self._running = False
        self._task: asyncio.Task | None = None

    async def start(self) -> None:
        """Start the earnings flush service."""
        if self._running:
            return

        self._running = True
        self._task = asyncio.create_task(self._flush_loop())
        logger.info(f"Started earnings flush service (every {self._interval}s)")

    async def _flush_loop(self) -> None:
        """Periodic flush loop."""
        while self._running:
            await asyncio.sleep(self._interval)
            try:
                await flush_live_sessions()
            except Exception as e:
                logger.error(f"Earnings flush error: {e}")

    async def stop(self) -> None:
        """Stop the service, flushing once more so the last seconds are kept."""
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        try:
            await flush_live_sessions()
        except Exception as e:
            logger.error(f"Final earnings flush failed: {e}")
        logger.info("Stopped earnings flush service")


# Global earnings service instance
earnings_service = EarningsService()
