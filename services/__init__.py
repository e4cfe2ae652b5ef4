"""
Service layer: grouping, dashboard orchestration and rendering.
"""
from services.grouping import group_records, to_chart_data
from services.dashboard_service import DashboardService, DashboardData

__all__ = [
    "group_records",
    "to_chart_data",
    "DashboardService",
    "DashboardData",
]
