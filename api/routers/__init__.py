"""
API routers module.

This module contains all route definitions organized by concern.
"""
from api.routers.health import router as health_router
from api.routers.records import router as records_router
from api.routers.dashboard import router as dashboard_router

__all__ = ["health_router", "records_router", "dashboard_router"]
