"""Prometheus metrics endpoint."""

from datetime import UTC, datetime, timedelta

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse
from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, Gauge, generate_latest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from terramine.database import get_db
from terramine.engine.mines import MineType
from terramine.models import Account, CheckIn
from terramine.services.sessions import SessionRegistry, session_registry
from terramine.services.store import AccountStore

router = APIRouter(tags=["metrics"])


async def collect_metrics(
    db: AsyncSession, sessions: SessionRegistry = session_registry
) -> bytes:
    """Collect all metrics and return Prometheus format."""
    registry = CollectorRegistry()

    accounts_total = Gauge(
        "terramine_accounts_total",
        "Registered accounts",
        registry=registry,
    )
    properties_owned = Gauge(
        "terramine_properties_owned",
        "Owned properties per mine type",
        ["mine_type"],
        registry=registry,
    )
    check_ins_last_day = Gauge(
        "terramine_check_ins_last_24h",
        "Check-ins recorded in the last 24 hours",
        registry=registry,
    )
    active_boosts = Gauge(
        "terramine_active_boosts",
        "Accounts with a boost currently active",
        registry=registry,
    )
    live_sessions = Gauge(
        "terramine_live_sessions",
        "Accounts with a live earnings session",
        registry=registry,
    )

    now = datetime.now(UTC)

    count_result = await db.execute(select(func.count()).select_from(Account))
    accounts_total.set(count_result.scalar() or 0)

    by_type = await AccountStore(db).count_owned_by_type()
    for mine_type in MineType:
        properties_owned.labels(mine_type=mine_type.value).set(by_type.get(mine_type.value, 0))

    check_in_result = await db.execute(
        select(func.count())
        .select_from(CheckIn)
        .where(CheckIn.created_at >= now - timedelta(hours=24))
    )
    check_ins_last_day.set(check_in_result.scalar() or 0)

    boost_result = await db.execute(
        select(func.count()).select_from(Account).where(Account.boost_end_time > now)
    )
    active_boosts.set(boost_result.scalar() or 0)

    live_sessions.set(len(sessions))

    return generate_latest(registry)


@router.get("/metrics", response_class=PlainTextResponse)
async def prometheus_metrics(db: AsyncSession = Depends(get_db)) -> PlainTextResponse:
    """Prometheus metrics endpoint."""
    metrics_data = await collect_metrics(db)
    return PlainTextResponse(content=metrics_data, media_type=CONTENT_TYPE_LATEST)
