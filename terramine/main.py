"""Main FastAPI application."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from terramine import __version__
from terramine.config import get_settings
from terramine.database import close_db, init_db
from terramine.exceptions import TerraMineError
from terramine.routers import (
    accounts_router,
    boost_router,
    cells_router,
    check_ins_router,
    health_router,
    metrics_router,
    sessions_router,
)
from terramine.services.earnings import earnings_service

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    logger.info("Starting TerraMine...")

    # Initialize database
    await init_db()
    logger.info("Database initialized")

    # Start earnings flush service
    await earnings_service.start()
    logger.info("Earnings flush service started")

    yield

    # Shutdown
    logger.info("Shutting down TerraMine...")

    await earnings_service.stop()
    await close_db()

    logger.info("Shutdown complete")


# Create FastAPI application
app = FastAPI(
    title="TerraMine",
    description="Location-based virtual property game backend",
    version=__version__,
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(TerraMineError)
async def terramine_error_handler(request: Request, exc: TerraMineError) -> JSONResponse:
    """Turn game rule violations into typed JSON errors."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.detail}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "code": exc.code},
    )


# Include routers
app.include_router(health_router)
app.include_router(metrics_router)
app.include_router(accounts_router)
app.include_router(sessions_router)
app.include_router(cells_router)
app.include_router(check_ins_router)
app.include_router(boost_router)


@app.get("/")
async def root():
    """Root endpoint - shows API info."""
    return {
        "name": "TerraMine",
        "version": __version__,
        "docs": "/docs",
        "health": "/health",
        "metrics": "/metrics",
    }
