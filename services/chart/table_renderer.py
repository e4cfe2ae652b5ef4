"""
HTML table rendering for a record group.

Values are shown with two decimals and coloured by pressure level
(high > warning > normal, see core/chart.yaml). The note column is only
shown for regular measurements.
"""
from datetime import tzinfo
from html import escape
from typing import List, Optional

from core.chart_registry import get_chart_config, is_high, value_color
from core.config import settings
from core.datetime_utils import format_calendar_date, format_month_day_time
from schemas.pressure_record import EyePressureRecord, RecordGroup

EMPTY_NOTE = "-"


def format_record_time(record: EyePressureRecord, continuous: bool, tz: tzinfo) -> str:
    """MM/DD HH:MM for continuous groups, YYYY/MM/DD for regular ones."""
    if continuous:
        return format_month_day_time(record.date, tz)
    return format_calendar_date(record.date, tz)


def _value_cell(value: float) -> str:
    weight = 700 if is_high(value) else 400
    return (
        f'<td class="value" style="color:{value_color(value)};font-weight:{weight}">'
        f'{value:.2f}</td>'
    )


def render_table(group: RecordGroup, tz: Optional[tzinfo] = None) -> str:
    """Render the group's records as an HTML table."""
    tz = tz or settings.display_tz
    config = get_chart_config()
    continuous = group.is_continuous

    headers = [
        "时间" if continuous else "日期",
        config.get_series("left").display_name,
        config.get_series("right").display_name,
        config.get_series("average").display_name,
    ]
    if not continuous:
        headers.append("备注")
    header_html = "".join(f"<th>{escape(h)}</th>" for h in headers)

    rows: List[str] = []
    for record in group.records:
        average = (record.left + record.right) / 2
        cells = [
            f'<td class="time">{escape(format_record_time(record, continuous, tz))}</td>',
            _value_cell(record.left),
            _value_cell(record.right),
            _value_cell(average),
        ]
        if not continuous:
            cells.append(f'<td class="note">{escape(record.note or EMPTY_NOTE)}</td>')
        rows.append(f'<tr data-record-id="{escape(record.id)}">{"".join(cells)}</tr>')

    return (
        '<div class="table-wrapper"><table class="records">'
        f'<thead><tr>{header_html}</tr></thead>'
        f'<tbody>{"".join(rows)}</tbody>'
        '</table></div>'
    )
