"""
FastAPI Dependency Injection configuration for the Eye Pressure Dashboard.

Architecture Flow:
    API Layer (Routers)
         ↓ Depends()
    Service Layer (DashboardService, DashboardPageRenderer)
         ↓ Injected
    Record Source (NotionRecordSource)
         ↓ Injected
    Settings

No state is shared across requests: each request gets a fresh service and
record source, so every render cycle fetches and groups from scratch.

Testing:
    app.dependency_overrides[get_dashboard_service] = lambda: fake_service
"""
import logging

from core.config import settings

logger = logging.getLogger(__name__)


def get_record_source() -> "NotionRecordSource":
    """
    Get a NotionRecordSource configured from settings.

    Returns:
        NotionRecordSource: Client for the Notion records database.
    """
    from clients.notion_source import NotionRecordSource

    return NotionRecordSource(settings=settings)


def get_dashboard_service() -> "DashboardService":
    """
    Get a DashboardService with the record source injected.

    Returns:
        DashboardService: Service that fetches and groups records.
    """
    from services.dashboard_service import DashboardService

    return DashboardService(record_source=get_record_source(), settings=settings)


def get_page_renderer() -> "DashboardPageRenderer":
    """
    Get a DashboardPageRenderer.

    The renderer is stateless and doesn't require injection.
    """
    from services.chart.page_renderer import DashboardPageRenderer

    return DashboardPageRenderer()
