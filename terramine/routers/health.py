"""Health check endpoint."""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from terramine import __version__
from terramine.clock import system_clock
from terramine.database import get_db
from terramine.services.sessions import session_registry

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(db: AsyncSession = Depends(get_db)) -> JSONResponse:
    """Report service and database health."""
    database = "connected"
    try:
        await db.execute(text("SELECT 1"))
    except Exception as e:
        database = f"error: {e}"

    healthy = database == "connected"
    return JSONResponse(
        status_code=200 if healthy else 503,
        content={
            "status": "healthy" if healthy else "unhealthy",
            "version": __version__,
            "database": database,
            "live_sessions": len(session_registry),
            "time": system_clock.now().isoformat(),
        },
    )
