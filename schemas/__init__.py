"""
Pydantic schemas for records, groups, chart points and API responses.
"""
from schemas.pressure_record import (
    GroupType,
    EyePressureRecord,
    RecordGroup,
    ChartDataPoint,
)
from schemas.dashboard import (
    GroupChartResponse,
    HealthResponse,
)

__all__ = [
    "GroupType",
    "EyePressureRecord",
    "RecordGroup",
    "ChartDataPoint",
    "GroupChartResponse",
    "HealthResponse",
]
