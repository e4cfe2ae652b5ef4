"""
Tests for PressureChartBuilder: axes, traces and the axis mode toggle.
"""
from datetime import timedelta, timezone

import pytest

from conftest import hours, make_record
from schemas.pressure_record import GroupType, RecordGroup
from services.chart.plotly_builder import X_AXIS_TIME, X_AXIS_UNIFORM, PressureChartBuilder
from services.grouping import to_chart_data

UTC = timezone.utc


@pytest.fixture
def builder():
    return PressureChartBuilder(tz=UTC)


def continuous_group(*offsets, **kwargs):
    records = tuple(make_record(o, is_24h=True, **kwargs) for o in offsets)
    return RecordGroup(id="24h-test", title="24小时眼压 - 2025/01/01", type=GroupType.CONTINUOUS, records=records)


def regular_group(*offsets):
    records = tuple(make_record(o) for o in offsets)
    return RecordGroup(id="regular", title="常规眼压测量", type=GroupType.REGULAR, records=records)


# =============================================================================
# Y AXIS
# =============================================================================

def test_y_axis_range_empty(builder):
    assert builder.y_axis_range([]) == (0, 40)


@pytest.mark.parametrize("peak, expected", [
    (22.0, 40),
    (35.0, 40),
    (40.0, 45),
    (41.0, 50),
])
def test_y_axis_range(builder, peak, expected):
    group = continuous_group(hours(0), left=peak, right=10.0)
    points = to_chart_data(group, tz=UTC)

    assert builder.y_axis_range(points) == (0, expected)


def test_y_axis_ticks(builder):
    assert builder.y_axis_ticks(40) == [0, 5, 10, 15, 20, 25, 30, 35, 40]
    assert builder.y_axis_ticks(50)[-1] == 50


# =============================================================================
# X AXIS
# =============================================================================

def test_time_axis_ticks_continuous_every_two_hours(builder):
    group = continuous_group(hours(0), hours(10))
    values, labels = builder.time_axis_ticks(group, to_chart_data(group, tz=UTC))

    assert values == [0, 120, 240, 360, 480, 600]
    assert labels == ["08:00", "10:00", "12:00", "14:00", "16:00", "18:00"]


def test_time_axis_ticks_continuous_past_midnight(builder):
    group = continuous_group(hours(0), hours(22))
    values, labels = builder.time_axis_ticks(group, to_chart_data(group, tz=UTC))

    assert values[-1] == 1320
    assert labels[values.index(960)] == "+1 00:00"
    assert labels[-1] == "+1 06:00"


def test_time_axis_ticks_regular_one_per_point(builder):
    group = regular_group(timedelta(0), timedelta(days=10))
    values, labels = builder.time_axis_ticks(group, to_chart_data(group, tz=UTC))

    assert values == [0, 10 * 24 * 60]
    assert labels == ["01/01", "01/11"]


def test_time_axis_ticks_empty(builder):
    assert builder.time_axis_ticks(regular_group(), []) == ([], [])


def test_uniform_axis_ticks(builder):
    group = continuous_group(hours(0), hours(1), hours(23))
    values, labels = builder.uniform_axis_ticks(to_chart_data(group, tz=UTC))

    assert values == [0, 1, 2]
    assert labels == ["08:00", "09:00", "+1 07:00"]


def test_x_values(builder):
    points = to_chart_data(continuous_group(hours(0), hours(1), hours(5)), tz=UTC)

    assert builder.x_values(points, X_AXIS_TIME) == [0, 60, 300]
    assert builder.x_values(points, X_AXIS_UNIFORM) == [0, 1, 2]


# =============================================================================
# FIGURE
# =============================================================================

def test_build_figure_traces(builder):
    group = continuous_group(hours(0), hours(10))
    fig = builder.build_figure(group, to_chart_data(group, tz=UTC))

    assert [t.name for t in fig.data] == ["左眼", "右眼", "均值"]
    assert fig.data[0].visible is True
    assert fig.data[1].visible is True
    assert fig.data[2].visible == "legendonly"
    assert list(fig.data[0].x) == [0, 600]
    assert list(fig.data[2].y) == [15.5, 15.5]


def test_build_figure_uniform_initial_axis(builder):
    group = continuous_group(hours(0), hours(10))
    fig = builder.build_figure(group, to_chart_data(group, tz=UTC), initial_x_axis=X_AXIS_UNIFORM)

    assert list(fig.data[0].x) == [0, 1]
    assert list(fig.layout.xaxis.tickvals) == [0, 1]
    assert fig.layout.updatemenus[0].active == 1


def test_build_figure_axis_toggle_buttons(builder):
    group = continuous_group(hours(0), hours(10))
    fig = builder.build_figure(group, to_chart_data(group, tz=UTC))

    menu = fig.layout.updatemenus[0]
    assert menu.active == 0
    assert [b.label for b in menu.buttons] == ["时间比例", "均匀分布"]
    assert all(b.method == "update" for b in menu.buttons)


def test_build_figure_normal_range_and_y_axis(builder):
    group = continuous_group(hours(0))
    fig = builder.build_figure(group, to_chart_data(group, tz=UTC))

    rects = [s for s in fig.layout.shapes if s.type == "rect"]
    assert len(rects) == 1
    assert (rects[0].y0, rects[0].y1) == (10, 21)
    assert list(fig.layout.yaxis.range) == [0, 40]


def test_build_figure_empty_group(builder):
    fig = builder.build_figure(regular_group(), [])

    assert len(fig.data) == 0
    assert "No data" in fig.layout.annotations[0].text


def test_build_figure_unknown_axis_mode(builder):
    group = continuous_group(hours(0))
    with pytest.raises(ValueError, match="Unknown x axis mode"):
        builder.build_figure(group, to_chart_data(group, tz=UTC), initial_x_axis="log")


def test_to_html_fragment(builder):
    group = continuous_group(hours(0))
    fig = builder.build_figure(group, to_chart_data(group, tz=UTC))

    html = builder.to_html_fragment(fig, div_id="chart-7")

    assert 'id="chart-7"' in html
    assert "<html>" not in html
    assert "cdn.plot.ly" not in html
