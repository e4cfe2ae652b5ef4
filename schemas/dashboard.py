"""
Pydantic schemas for dashboard API responses.
"""
from typing import List

from pydantic import BaseModel, Field

from schemas.pressure_record import ChartDataPoint, GroupType


class GroupChartResponse(BaseModel):
    """Chart series for a single record group."""
    group_id: str = Field(..., examples=["24h-1735689600000"])
    title: str
    type: GroupType
    points: List[ChartDataPoint]


class HealthResponse(BaseModel):
    """Response model for /health endpoint."""
    status: str  # "healthy"
    version: str
    timestamp: str  # ISO 8601 UTC
