"""
Pydantic schemas for eye pressure records, record groups and chart points.

All three models are immutable: records are borrowed read-only from the
record source, groups and chart points are derived fresh on every fetch.
"""
from datetime import datetime
from enum import Enum
from typing import Tuple

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from core.datetime_utils import format_iso, to_utc


class GroupType(str, Enum):
    """Measurement mode of a record group."""
    CONTINUOUS = "24h"
    REGULAR = "regular"


class EyePressureRecord(BaseModel):
    """One intraocular pressure observation as fetched from Notion."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Notion page id", examples=["8a6c2f0e-1b3d-4e5f-9a7b-0c1d2e3f4a5b"])
    name: str = Field("", description="Subject name")
    date: datetime = Field(..., description="Measurement instant (UTC)", examples=["2025-01-01T08:00:00.000Z"])
    left: float = Field(0.0, description="Left eye reading (mmHg)", examples=[16.5])
    right: float = Field(0.0, description="Right eye reading (mmHg)", examples=[17.0])
    is_24h: bool = Field(False, description="Part of a continuous 24-hour measurement")
    note: str = Field("", description="Free-text note")

    @field_validator("date")
    @classmethod
    def normalize_date(cls, value: datetime) -> datetime:
        # Naive values are read as UTC so sorting never mixes aware and naive
        return to_utc(value)

    @field_serializer("date")
    def serialize_date(self, value: datetime) -> str:
        return format_iso(value)


class RecordGroup(BaseModel):
    """A set of records displayed together as one table and one chart."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Group id, unique within one grouping", examples=["regular", "24h-1735689600000"])
    title: str = Field(..., description="Display title")
    type: GroupType = Field(..., description="Measurement mode")
    records: Tuple[EyePressureRecord, ...] = Field(
        default=(), description="Records in ascending chronological order"
    )

    @property
    def is_continuous(self) -> bool:
        return self.type == GroupType.CONTINUOUS


class ChartDataPoint(BaseModel):
    """Plot-ready view of one record within its group."""

    model_config = ConfigDict(frozen=True)

    label: str = Field(..., description="Axis label (HH:MM, '+1 HH:MM' or YYYY/MM/DD)", examples=["08:00"])
    left: float
    right: float
    average: float = Field(..., description="(left + right) / 2, unrounded")
    date_str: str = Field(..., description="ISO-8601 UTC timestamp of the record")
    minutes_from_start: int = Field(..., description="Whole minutes since the group's first record")
