"""
Records router - JSON access to fetched records, groups and chart series.

Architecture:
    HTTP Request → Router (this file) → DashboardService → NotionRecordSource

Errors raised by the service (ConfigurationError, RecordSourceError,
GroupNotFoundError) are converted to JSON responses by the handlers
registered in main.py via setup_exception_handlers().
"""
import logging
from typing import List

from fastapi import APIRouter, Depends

from core.dependencies import get_dashboard_service
from schemas import ChartDataPoint, EyePressureRecord, GroupChartResponse, RecordGroup
from services import DashboardService, to_chart_data

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1",
    tags=["Records"],
)


@router.get(
    "/records",
    response_model=List[EyePressureRecord],
    summary="List eye pressure records",
    description="Fetch all records from the Notion database, in the order Notion returns them (ascending by date). "
                "Pages without a measurement date are omitted."
)
async def list_records(
    dashboard_service: DashboardService = Depends(get_dashboard_service)
):
    """
    Get the flat record list.

    Raises:
    - 500 Internal Server Error: Notion credentials missing (ConfigurationError)
    - 502 Bad Gateway: Notion query failed (RecordSourceError)
    """
    return await dashboard_service.load_records()


@router.get(
    "/groups",
    response_model=List[RecordGroup],
    summary="List record groups",
    description="Regular measurements as one group, followed by 24-hour measurements "
                "split into 30-hour windows."
)
async def list_groups(
    dashboard_service: DashboardService = Depends(get_dashboard_service)
):
    """Get grouped records."""
    return await dashboard_service.load_groups()


@router.get(
    "/groups/{group_id}/chart-data",
    response_model=GroupChartResponse,
    summary="Get chart series for a group",
    description="Chart points for one group: labels, left/right/average values and minutes from the group's first record."
)
async def get_group_chart_data(
    group_id: str,
    dashboard_service: DashboardService = Depends(get_dashboard_service)
):
    """
    Get chart points for one group.

    Raises:
    - 404 Not Found: No group with this id (GroupNotFoundError)
    """
    groups = await dashboard_service.load_groups()
    group = dashboard_service.get_group(groups, group_id)
    points: List[ChartDataPoint] = to_chart_data(group, tz=dashboard_service.settings.display_tz)
    return GroupChartResponse(
        group_id=group.id,
        title=group.title,
        type=group.type,
        points=points,
    )
