"""
Dashboard router - the HTML page with tables and interactive charts.

Load failures never produce an error status here: the page itself shows the
"Load failed" panel with a Retry button.
"""
import logging

from fastapi import APIRouter, Depends, Query
from fastapi.responses import HTMLResponse

from core.dependencies import get_dashboard_service, get_page_renderer
from services import DashboardService
from services.chart import DashboardPageRenderer

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Dashboard"])


@router.get(
    "/",
    response_class=HTMLResponse,
    summary="Eye pressure dashboard",
    description="Render every record group as a chart and/or table."
)
async def dashboard_page(
    view: str = Query("both", pattern="^(both|chart|table)$", description="Which parts of each group to show"),
    x_axis: str = Query("time", pattern="^(time|uniform)$", description="Initial chart x axis mode"),
    dashboard_service: DashboardService = Depends(get_dashboard_service),
    renderer: DashboardPageRenderer = Depends(get_page_renderer),
):
    """
    Render the dashboard.

    Query Parameters:
    - **view**: "both" (default), "chart" or "table"
    - **x_axis**: "time" (time-proportional, default) or "uniform"
    """
    data = await dashboard_service.load_dashboard()
    return HTMLResponse(content=renderer.render(data, view=view, x_axis=x_axis))
