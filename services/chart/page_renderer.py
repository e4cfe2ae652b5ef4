"""
Dashboard page assembly.

Renders the full HTML document: header, one section per record group (chart
and/or table depending on the view mode), and the error / empty states.
"""

import logging
from html import escape
from typing import List, Optional

from services.chart.plotly_builder import PressureChartBuilder, X_AXIS_TIME
from services.chart.table_renderer import render_table
from services.dashboard_service import DashboardData
from services.grouping import to_chart_data
from schemas.pressure_record import RecordGroup

logger = logging.getLogger(__name__)

VIEW_BOTH = "both"
VIEW_CHART = "chart"
VIEW_TABLE = "table"
VIEW_MODES = (VIEW_BOTH, VIEW_CHART, VIEW_TABLE)

PAGE_CSS = """
    * { box-sizing: border-box; }
    body {
        margin: 0;
        min-height: 100vh;
        background: linear-gradient(to bottom right, #f8fafc, #eff6ff, #f1f5f9);
        font-family: -apple-system, system-ui, BlinkMacSystemFont, "Segoe UI", Roboto, sans-serif;
        color: #0f172a;
    }
    header {
        position: sticky; top: 0; z-index: 50;
        background: rgba(255,255,255,0.8);
        border-bottom: 1px solid #e2e8f0;
    }
    .container { max-width: 1280px; margin: 0 auto; padding: 16px; }
    header h1 { font-size: 20px; margin: 0; }
    header p { font-size: 14px; color: #64748b; margin: 2px 0 0; }
    main.container { padding: 32px 16px; }
    .group { margin-bottom: 32px; }
    .group-header { display: flex; flex-wrap: wrap; justify-content: space-between; align-items: center; gap: 16px; }
    .group h2 { font-size: 20px; margin: 0 0 16px; }
    .view-toggle { display: flex; gap: 4px; padding: 4px; background: #f1f5f9; border-radius: 8px; }
    .view-toggle a { padding: 6px 12px; font-size: 14px; border-radius: 6px; color: #64748b; text-decoration: none; }
    .view-toggle a.active { background: white; color: #0f172a; box-shadow: 0 1px 2px rgba(0,0,0,0.05); }
    .group-body { display: grid; gap: 24px; grid-template-columns: 1fr; }
    .group-body.both { grid-template-columns: repeat(auto-fit, minmax(400px, 1fr)); }
    .card { background: white; border: 1px solid #e2e8f0; border-radius: 8px; box-shadow: 0 1px 3px rgba(0,0,0,0.1); }
    .table-wrapper { overflow-x: auto; }
    table.records { min-width: 100%; border-collapse: collapse; }
    table.records th {
        padding: 12px 16px; text-align: left; font-size: 12px; font-weight: 600;
        text-transform: uppercase; letter-spacing: 0.05em; color: #475569; background: #f8fafc;
    }
    table.records td { padding: 12px 16px; font-size: 14px; white-space: nowrap; border-top: 1px solid #f1f5f9; }
    table.records td.value { text-align: center; }
    table.records td.note { color: #64748b; }
    table.records tbody tr:nth-child(even) { background: #fafafa; }
    .state { text-align: center; padding: 48px 0; }
    .state p { color: #64748b; }
    .state button {
        margin-top: 16px; padding: 8px 16px; background: #3b82f6; color: white;
        border: none; border-radius: 8px; cursor: pointer; font-size: 14px;
    }
    footer { border-top: 1px solid #e2e8f0; margin-top: 48px; }
    footer p { text-align: center; font-size: 14px; color: #64748b; }
    @media (max-width: 480px) {
        .group-body.both { grid-template-columns: 1fr; }
    }
"""


class DashboardPageRenderer:
    """Renders DashboardData as a complete HTML page."""

    def __init__(self, chart_builder: Optional[PressureChartBuilder] = None):
        self._builder = chart_builder or PressureChartBuilder()

    def render(
        self,
        data: DashboardData,
        view: str = VIEW_BOTH,
        x_axis: str = X_AXIS_TIME,
    ) -> str:
        """
        Render the dashboard page.

        Args:
            data: Loaded groups or the error message
            view: "both", "chart" or "table"
            x_axis: Initial chart x axis mode, "time" or "uniform"
        """
        if view not in VIEW_MODES:
            raise ValueError(f"Unknown view mode: '{view}'")

        if data.error is not None:
            body = self.render_error(data.error)
        elif data.is_empty:
            body = self.render_empty()
        else:
            sections: List[str] = []
            plotlyjs_included = False
            for index, group in enumerate(data.groups):
                include_js = "cdn" if not plotlyjs_included and view != VIEW_TABLE else False
                sections.append(self.render_group(group, index, view, x_axis, include_js))
                plotlyjs_included = plotlyjs_included or bool(include_js)
            body = '<div class="groups">' + "".join(sections) + '</div>'

        return self._document(body, view, x_axis)

    def render_group(
        self,
        group: RecordGroup,
        index: int,
        view: str,
        x_axis: str,
        include_plotlyjs,
    ) -> str:
        """Render one group section."""
        parts: List[str] = []
        if view in (VIEW_BOTH, VIEW_CHART):
            points = to_chart_data(group, tz=self._builder.tz)
            fig = self._builder.build_figure(group, points, initial_x_axis=x_axis)
            chart_html = self._builder.to_html_fragment(
                fig, div_id=f"chart-{index}", include_plotlyjs=include_plotlyjs
            )
            parts.append(f'<div class="card chart">{chart_html}</div>')
        if view in (VIEW_BOTH, VIEW_TABLE):
            parts.append(f'<div class="card">{render_table(group, tz=self._builder.tz)}</div>')

        return (
            f'<section class="group" id="{escape(group.id)}">'
            '<div class="group-header">'
            f'<h2>{escape(group.title)}</h2>'
            f'{self._view_toggle(view, x_axis)}'
            '</div>'
            f'<div class="group-body {view}">{"".join(parts)}</div>'
            '</section>'
        )

    def render_error(self, message: str) -> str:
        """Error state with a manual retry (full page reload)."""
        return (
            '<div class="state error">'
            '<h2>Load failed</h2>'
            f'<p>{escape(message)}</p>'
            '<button type="button" onclick="window.location.reload()">Retry</button>'
            '</div>'
        )

    def render_empty(self) -> str:
        return (
            '<div class="state empty">'
            '<h2>No data</h2>'
            '<p>Please add eye pressure records in Notion database first</p>'
            '</div>'
        )

    def _view_toggle(self, current: str, x_axis: str) -> str:
        labels = ((VIEW_CHART, "图表"), (VIEW_TABLE, "表格"), (VIEW_BOTH, "全部"))
        links = [
            f'<a class="{"active" if mode == current else ""}" href="?view={mode}&amp;x_axis={escape(x_axis)}">{label}</a>'
            for mode, label in labels
        ]
        return f'<nav class="view-toggle">{"".join(links)}</nav>'

    def _document(self, body: str, view: str, x_axis: str) -> str:
        return (
            '<!DOCTYPE html>'
            '<html lang="zh-CN"><head>'
            '<meta charset="utf-8">'
            '<meta name="viewport" content="width=device-width, initial-scale=1">'
            '<title>眼压记录 | Eye Pressure Records</title>'
            f'<style>{PAGE_CSS}</style>'
            '</head><body>'
            '<header><div class="container">'
            '<h1>眼压记录</h1><p>Eye Pressure Records</p>'
            '</div></header>'
            f'<main class="container" data-view="{escape(view)}" data-x-axis="{escape(x_axis)}">{body}</main>'
            '<footer><div class="container"><p>All rights reserved.</p></div></footer>'
            '</body></html>'
        )
