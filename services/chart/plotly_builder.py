"""
Plotly figure builder for eye pressure charts.

Responsibilities:
- Creating left / right / average traces
- Shading the normal pressure range
- Computing Y axis bounds and ticks
- Computing X axis ticks for both axis modes (time-proportional and uniform)
- Adding the client-side toggle between axis modes

Legend clicks toggle series visibility; the average series starts hidden.
"""

import logging
import math
from datetime import timedelta, tzinfo
from typing import Any, Dict, List, Optional, Sequence, Tuple

import plotly.graph_objects as go
import plotly.io as pio

from core.chart_registry import ChartConfig, get_chart_config
from core.config import settings
from core.datetime_utils import format_month_day, parse_datetime
from schemas.pressure_record import ChartDataPoint, RecordGroup
from services.grouping import continuous_label

logger = logging.getLogger(__name__)

X_AXIS_TIME = "time"
X_AXIS_UNIFORM = "uniform"
X_AXIS_MODES = (X_AXIS_TIME, X_AXIS_UNIFORM)

Ticks = Tuple[List[float], List[str]]


class PressureChartBuilder:
    """
    Builder for one eye pressure chart per record group.

    Usage:
        builder = PressureChartBuilder()
        fig = builder.build_figure(group, to_chart_data(group))
        html = builder.to_html_fragment(fig, div_id="chart-regular")
    """

    def __init__(self, config: Optional[ChartConfig] = None, tz: Optional[tzinfo] = None):
        self.config = config or get_chart_config()
        self.tz = tz or settings.display_tz

    # =========================================================================
    # AXES
    # =========================================================================

    def y_axis_range(self, points: Sequence[ChartDataPoint]) -> Tuple[float, float]:
        """Y axis spans 0 to the next tick above the maximum, never below the floor."""
        if not points:
            return (0, self.config.y_axis_floor)
        step = self.config.y_tick_step
        max_value = max(max(p.left, p.right, p.average) for p in points)
        y_max = max(self.config.y_axis_floor, math.ceil(max_value / step) * step + step)
        return (0, y_max)

    def y_axis_ticks(self, y_max: float) -> List[float]:
        step = self.config.y_tick_step
        count = int(y_max // step)
        return [i * step for i in range(count + 1)]

    def time_axis_ticks(self, group: RecordGroup, points: Sequence[ChartDataPoint]) -> Ticks:
        """
        Ticks for the time-proportional axis (x = minutes from start).

        Continuous groups get a tick every continuous_tick_minutes labelled
        with wall-clock time; regular groups get one MM/DD tick per point.
        Every continuous tick carries a label, including ticks that fall
        between measurements.
        """
        if not points:
            return ([], [])

        if not group.is_continuous:
            return (
                [p.minutes_from_start for p in points],
                [format_month_day(parse_datetime(p.date_str), self.tz) for p in points],
            )

        first = parse_datetime(points[0].date_str)
        last_minute = max(p.minutes_from_start for p in points)
        interval = self.config.continuous_tick_minutes
        values: List[float] = list(range(0, last_minute + interval // 2 + 1, interval))
        labels = [
            continuous_label(first + timedelta(minutes=m), first, self.tz)
            for m in values
        ]
        return (values, labels)

    def uniform_axis_ticks(self, points: Sequence[ChartDataPoint]) -> Ticks:
        """Ticks for the uniform axis (x = point index)."""
        return (list(range(len(points))), [p.label for p in points])

    def x_values(self, points: Sequence[ChartDataPoint], mode: str) -> List[float]:
        if mode == X_AXIS_UNIFORM:
            return list(range(len(points)))
        return [p.minutes_from_start for p in points]

    # =========================================================================
    # FIGURE
    # =========================================================================

    def create_figure(self) -> go.Figure:
        """Create a new empty Plotly figure."""
        return go.Figure()

    def build_figure(
        self,
        group: RecordGroup,
        points: Sequence[ChartDataPoint],
        initial_x_axis: str = X_AXIS_TIME,
    ) -> go.Figure:
        """
        Build the complete chart for a group.

        Args:
            group: Group being plotted (decides tick style)
            points: Chart points from to_chart_data(group)
            initial_x_axis: "time" or "uniform"
        """
        if initial_x_axis not in X_AXIS_MODES:
            raise ValueError(f"Unknown x axis mode: '{initial_x_axis}'")

        fig = self.create_figure()
        if not points:
            self.apply_empty_layout(fig, group.title)
            return fig

        x = self.x_values(points, initial_x_axis)
        for series in self.config.series:
            fig.add_trace(self.create_series_trace(series.key, points, x))

        self.add_reference_band(fig)
        self.apply_layout(fig, group, points, initial_x_axis)
        return fig

    def create_series_trace(
        self, key: str, points: Sequence[ChartDataPoint], x: List[float]
    ) -> go.Scatter:
        """Create a line+marker trace for one series (left, right or average)."""
        series = self.config.get_series(key)
        return go.Scatter(
            x=x,
            y=[getattr(p, key) for p in points],
            name=series.display_name,
            visible=True if series.visible else "legendonly",
            mode='lines+markers',
            line=dict(width=2, color=series.color),
            marker=dict(size=7, color=series.color, line=dict(width=1, color='white')),
            customdata=[p.label for p in points],
            hovertemplate=(
                f"<b>{series.display_name}</b><br>"
                "%{customdata}<br>"
                "<b>%{y:.2f} mmHg</b>"
                "<extra></extra>"
            ),
        )

    def add_reference_band(self, fig: go.Figure) -> None:
        """Shade the normal pressure range and mark its bounds."""
        low, high = self.config.normal_range

        # Paper x coordinates keep the band full-width in both axis modes
        fig.add_shape(
            type="rect",
            xref="paper", x0=0, x1=1,
            y0=low, y1=high,
            fillcolor='rgba(16, 185, 129, 0.08)',
            line=dict(width=0),
            layer="below",
        )
        for bound in (low, high):
            fig.add_shape(
                type="line",
                xref="paper", x0=0, x1=1,
                y0=bound, y1=bound,
                line=dict(color='rgba(16, 185, 129, 0.6)', width=1, dash='dash'),
                layer="below",
            )

    def axis_toggle_menu(self, group: RecordGroup, points: Sequence[ChartDataPoint]) -> Dict[str, Any]:
        """Buttons switching all traces between the two x axis modes."""
        trace_count = len(self.config.series)
        buttons = []
        for mode, label in ((X_AXIS_TIME, "时间比例"), (X_AXIS_UNIFORM, "均匀分布")):
            tickvals, ticktext = self._ticks_for(mode, group, points)
            buttons.append(dict(
                label=label,
                method="update",
                args=[
                    {"x": [self.x_values(points, mode)] * trace_count},
                    {"xaxis.tickvals": tickvals, "xaxis.ticktext": ticktext},
                ],
            ))
        return dict(
            type="buttons",
            direction="right",
            buttons=buttons,
            x=1.0, xanchor="right",
            y=1.15, yanchor="top",
            showactive=True,
            font=dict(size=11),
        )

    def _ticks_for(self, mode: str, group: RecordGroup, points: Sequence[ChartDataPoint]) -> Ticks:
        if mode == X_AXIS_UNIFORM:
            return self.uniform_axis_ticks(points)
        return self.time_axis_ticks(group, points)

    def apply_layout(
        self,
        fig: go.Figure,
        group: RecordGroup,
        points: Sequence[ChartDataPoint],
        initial_x_axis: str,
    ) -> None:
        """Apply axes, legend and the axis mode toggle."""
        y_low, y_high = self.y_axis_range(points)
        tickvals, ticktext = self._ticks_for(initial_x_axis, group, points)
        menu = self.axis_toggle_menu(group, points)
        menu["active"] = X_AXIS_MODES.index(initial_x_axis)

        fig.update_layout(
            title=dict(text="<b>眼压趋势</b>", font=dict(size=16), x=0.02, xanchor="left"),
            xaxis=dict(
                tickmode="array",
                tickvals=tickvals,
                ticktext=ticktext,
                showgrid=True,
                gridcolor='rgba(0,0,0,0.06)',
                tickangle=-45,
                zeroline=False,
            ),
            yaxis=dict(
                title=dict(text="mmHg", font=dict(size=11, color='#9E9E9E')),
                range=[y_low, y_high],
                tickmode="array",
                tickvals=self.y_axis_ticks(y_high),
                showgrid=True,
                gridcolor='rgba(0,0,0,0.06)',
            ),
            updatemenus=[menu],
            hovermode='closest',
            legend=dict(
                orientation="h",
                x=0.5, xanchor="center",
                y=-0.25, yanchor="top",
                font=dict(size=12, color='#424242'),
            ),
            height=360,
            margin=dict(l=50, r=20, t=70, b=90),
            template="plotly_white",
            paper_bgcolor='#FFFFFF',
            plot_bgcolor='#FFFFFF',
        )

    def apply_empty_layout(self, fig: go.Figure, title: str) -> None:
        """Apply layout for a group without records."""
        fig.update_layout(
            title=dict(text=f"<b>{title}</b>", font=dict(size=16), x=0.5, xanchor='center'),
            xaxis=dict(showgrid=False, showticklabels=False, zeroline=False),
            yaxis=dict(showgrid=False, showticklabels=False, zeroline=False),
            height=300,
            template="plotly_white",
            annotations=[
                dict(text='<b>No data</b>', xref='paper', yref='paper', x=0.5, y=0.5,
                     showarrow=False, font=dict(size=16, color='#757575')),
            ]
        )

    # =========================================================================
    # OUTPUT
    # =========================================================================

    def get_plot_config(self) -> Dict[str, Any]:
        """Plotly config shared by all charts."""
        return {
            'displayModeBar': True,
            'displaylogo': False,
            'modeBarButtonsToRemove': ['lasso2d', 'select2d', 'autoScale2d'],
            'responsive': True,
            'toImageButtonOptions': {
                'format': 'png',
                'filename': 'eye_pressure',
                'height': 600,
                'width': 1000,
                'scale': 2
            },
        }

    def to_html_fragment(self, fig: go.Figure, div_id: str, include_plotlyjs: Any = False) -> str:
        """Render a figure as an embeddable <div> (no <html> wrapper)."""
        return pio.to_html(
            fig,
            full_html=False,
            include_plotlyjs=include_plotlyjs,
            config=self.get_plot_config(),
            div_id=div_id,
        )
