"""
Core module for application configuration, logging, and shared utilities.

This module provides:
- Settings: Application configuration via pydantic-settings
- Exceptions: Domain-specific exception classes with HTTP status codes
- Datetime utilities: UTC-first datetime handling with display timezone formatting
- Chart registry: Chart and table styling loaded from chart.yaml
"""
from core.config import settings, Settings

from core.exceptions import (
    IOPServiceError,
    ConfigurationError,
    RecordSourceError,
    GroupNotFoundError,
    setup_exception_handlers,
)

from core.datetime_utils import (
    utc_now,
    to_utc,
    parse_datetime,
    parse_datetime_safe,
    format_iso,
)

from core.chart_registry import (
    ChartConfig,
    SeriesDefinition,
    get_chart_config,
    value_color,
)

__all__ = [
    # Settings
    "settings",
    "Settings",
    # Exceptions
    "IOPServiceError",
    "ConfigurationError",
    "RecordSourceError",
    "GroupNotFoundError",
    "setup_exception_handlers",
    # Datetime utilities
    "utc_now",
    "to_utc",
    "parse_datetime",
    "parse_datetime_safe",
    "format_iso",
    # Chart registry
    "ChartConfig",
    "SeriesDefinition",
    "get_chart_config",
    "value_color",
]
