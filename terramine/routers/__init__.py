"""API routers."""

from terramine.routers.accounts import router as accounts_router
from terramine.routers.boost import router as boost_router
from terramine.routers.cells import router as cells_router
from terramine.routers.check_ins import router as check_ins_router
from terramine.routers.health import router as health_router
from terramine.routers.metrics import router as metrics_router
from terramine.routers.sessions import router as sessions_router

__all__ = [
    "accounts_router",
    "boost_router",
    "cells_router",
    "check_ins_router",
    "health_router",
    "metrics_router",
    "sessions_router",
]
