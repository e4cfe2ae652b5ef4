"""
FastAPI application entry point for the Eye Pressure Dashboard.

This module configures and creates the FastAPI application with:
- Structured JSON Logging: Request/response logging with request IDs
- Dependency Injection: Services injected via Depends()
- Exception Handling: Consistent JSON error responses via setup_exception_handlers()
- Lifespan Management: Logging and chart configuration loaded at startup

Architecture Overview:
    ┌─────────────────────────────────────────────────────────────┐
    │                     FastAPI Application                      │
    ├─────────────────────────────────────────────────────────────┤
    │  Middleware                                                 │
    │    └── LoggingMiddleware  - Request logging & request IDs   │
    ├─────────────────────────────────────────────────────────────┤
    │  Routers (api/routers/)                                     │
    │    ├── health.py     - /health                              │
    │    ├── records.py    - /api/v1/records, /api/v1/groups      │
    │    └── dashboard.py  - / (HTML tables and charts)           │
    ├─────────────────────────────────────────────────────────────┤
    │  Services (services/)     ← Injected via Depends()          │
    │    ├── DashboardService   - Fetch + group per request       │
    │    ├── grouping           - group_records / to_chart_data   │
    │    └── chart              - Plotly charts, tables, page     │
    ├─────────────────────────────────────────────────────────────┤
    │  Clients (clients/)                                         │
    │    └── NotionRecordSource - Paginated Notion query          │
    └─────────────────────────────────────────────────────────────┘
"""
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
import uvicorn

from core.config import API_HOST, API_PORT, API_RELOAD, settings
from core.chart_registry import get_chart_config
from core.exceptions import setup_exception_handlers
from core.logging_config import setup_logging
from core.middleware import LoggingMiddleware
from api.routers import health_router, records_router, dashboard_router


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Lifespan context manager for FastAPI application.

    Startup:
        - Configures structured JSON logging
        - Loads and validates the chart configuration (fails fast on bad YAML)
        - Logs configuration for debugging
    """
    setup_logging(level="INFO", json_format=True)

    logger = logging.getLogger(__name__)
    logger.info("Starting Eye Pressure Dashboard...")

    get_chart_config()
    logger.info(
        "Configuration loaded",
        extra={
            "display_timezone": settings.iop_display_timezone,
            "notion_configured": bool(settings.notion_database_id and settings.notion_auth_token),
        }
    )

    yield

    logger.info("Eye Pressure Dashboard shutting down...")


app = FastAPI(
    title="Eye Pressure Dashboard",
    description="Tables and interactive charts of intraocular pressure records kept in a Notion database. "
                "Regular measurements are shown as one series; 24-hour measurements are grouped into 30-hour windows.",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan
)

# =============================================================================
# EXCEPTION HANDLERS
# =============================================================================
setup_exception_handlers(app)

# =============================================================================
# MIDDLEWARE
# =============================================================================
app.add_middleware(LoggingMiddleware)

# =============================================================================
# ROUTERS
# =============================================================================
app.include_router(health_router)
app.include_router(records_router)
app.include_router(dashboard_router)


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=API_HOST,
        port=API_PORT,
        reload=API_RELOAD
    )
