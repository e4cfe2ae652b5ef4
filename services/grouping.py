"""
Grouping and chart transform for eye pressure records.

Responsible for:
- Partitioning records into one regular group plus 30-hour continuous groups
- Converting a group into chart points (average, elapsed minutes, labels)

Both functions are pure: they never mutate their input and share no state,
so each render cycle can call them freely on freshly fetched records.
"""

import logging
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Iterable, List, Optional, Sequence

from core.config import settings
from core.datetime_utils import (
    format_calendar_date,
    format_clock_time,
    format_iso,
    local_date,
    minutes_between,
)
from schemas.pressure_record import (
    ChartDataPoint,
    EyePressureRecord,
    GroupType,
    RecordGroup,
)

logger = logging.getLogger(__name__)

# Continuous records within this span of a group's first record share the group
CONTINUOUS_WINDOW = timedelta(hours=30)

REGULAR_GROUP_ID = "regular"
REGULAR_GROUP_TITLE = "常规眼压测量"
CONTINUOUS_GROUP_ID_PREFIX = "24h"
CONTINUOUS_GROUP_TITLE_PREFIX = "24小时眼压"
NEXT_DAY_MARKER = "+1"

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _sorted_by_date(records: Iterable[EyePressureRecord]) -> List[EyePressureRecord]:
    return sorted(records, key=lambda r: r.date)


def _resolve_tz(tz: Optional[tzinfo]) -> tzinfo:
    return tz if tz is not None else settings.display_tz


# =============================================================================
# GROUPING ENGINE
# =============================================================================

def group_records(
    records: Sequence[EyePressureRecord],
    tz: Optional[tzinfo] = None,
) -> List[RecordGroup]:
    """
    Group records by measurement mode and time proximity.

    Regular records form a single group placed first. Continuous records are
    split by a greedy forward scan: a record joins the current group while it
    is within CONTINUOUS_WINDOW (inclusive) of that group's first record,
    otherwise it anchors a new group.

    Args:
        records: Records in any order
        tz: Display timezone for group titles (defaults to settings)

    Returns:
        Regular group (if any) followed by continuous groups in chronological order
    """
    tz = _resolve_tz(tz)
    regular = [r for r in records if not r.is_24h]
    continuous = [r for r in records if r.is_24h]

    groups: List[RecordGroup] = []

    if regular:
        groups.append(RecordGroup(
            id=REGULAR_GROUP_ID,
            title=REGULAR_GROUP_TITLE,
            type=GroupType.REGULAR,
            records=tuple(_sorted_by_date(regular)),
        ))

    if continuous:
        ordered = _sorted_by_date(continuous)
        current: List[EyePressureRecord] = [ordered[0]]

        for record in ordered[1:]:
            # Window is anchored to the group's first record, not the previous one
            if record.date - current[0].date <= CONTINUOUS_WINDOW:
                current.append(record)
            else:
                groups.append(_create_continuous_group(current, tz))
                current = [record]

        groups.append(_create_continuous_group(current, tz))

    logger.debug(
        "Records grouped",
        extra={
            "record_count": len(records),
            "regular_count": len(regular),
            "continuous_count": len(continuous),
            "group_count": len(groups),
        }
    )
    return groups


def _create_continuous_group(records: List[EyePressureRecord], tz: tzinfo) -> RecordGroup:
    """Build a continuous group whose id and title derive from its first record."""
    anchor = records[0].date
    epoch_ms = (anchor - _EPOCH) // timedelta(milliseconds=1)
    return RecordGroup(
        id=f"{CONTINUOUS_GROUP_ID_PREFIX}-{epoch_ms}",
        title=f"{CONTINUOUS_GROUP_TITLE_PREFIX} - {format_calendar_date(anchor, tz)}",
        type=GroupType.CONTINUOUS,
        records=tuple(records),
    )


# =============================================================================
# CHART TRANSFORM
# =============================================================================

def to_chart_data(group: RecordGroup, tz: Optional[tzinfo] = None) -> List[ChartDataPoint]:
    """
    Transform a group's records into chart points, preserving order.

    The group must already be in chronological order (group_records
    guarantees this); it is not re-sorted here.
    """
    if not group.records:
        return []

    tz = _resolve_tz(tz)
    first = group.records[0].date

    return [
        ChartDataPoint(
            label=point_label(record, first, group.type, tz),
            left=record.left,
            right=record.right,
            average=(record.left + record.right) / 2,
            date_str=format_iso(record.date),
            minutes_from_start=minutes_between(first, record.date),
        )
        for record in group.records
    ]


def point_label(
    record: EyePressureRecord,
    first: datetime,
    group_type: GroupType,
    tz: tzinfo,
) -> str:
    """
    Axis label for one record.

    Continuous groups get a clock time, prefixed with "+1" when the record
    falls on a later calendar day than the group's first record. Regular
    groups get the calendar date.
    """
    if group_type != GroupType.CONTINUOUS:
        return format_calendar_date(record.date, tz)
    return continuous_label(record.date, first, tz)


def continuous_label(moment: datetime, first: datetime, tz: tzinfo) -> str:
    """Clock-time label relative to the first record's calendar day."""
    time_str = format_clock_time(moment, tz)
    day_offset = (local_date(moment, tz) - local_date(first, tz)).days
    if day_offset == 0:
        return time_str
    if day_offset > 1:
        # Only a single-day offset marker exists; wider spans keep "+1"
        logger.warning(
            "Continuous label spans more than one midnight",
            extra={"moment": format_iso(moment), "day_offset": day_offset}
        )
    return f"{NEXT_DAY_MARKER} {time_str}"
