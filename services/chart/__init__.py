"""
Chart package for eye pressure visualization.

This package contains:
- PressureChartBuilder: Plotly-specific figure construction
- render_table: HTML table for one record group
- DashboardPageRenderer: Full page assembly

Usage:
    from services.chart import DashboardPageRenderer

    html = DashboardPageRenderer().render(dashboard_data, view="both")
"""

from services.chart.plotly_builder import (
    PressureChartBuilder,
    X_AXIS_TIME,
    X_AXIS_UNIFORM,
    X_AXIS_MODES,
)
from services.chart.table_renderer import render_table
from services.chart.page_renderer import (
    DashboardPageRenderer,
    VIEW_BOTH,
    VIEW_CHART,
    VIEW_TABLE,
    VIEW_MODES,
)

__all__ = [
    'PressureChartBuilder',
    'X_AXIS_TIME',
    'X_AXIS_UNIFORM',
    'X_AXIS_MODES',
    'render_table',
    'DashboardPageRenderer',
    'VIEW_BOTH',
    'VIEW_CHART',
    'VIEW_TABLE',
    'VIEW_MODES',
]
