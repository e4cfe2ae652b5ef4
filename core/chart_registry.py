"""
Chart display registry - single source of truth for chart and table styling.

This module provides:
- YAML-based configuration loading and validation (core/chart.yaml)
- SeriesDefinition / ChartConfig dataclasses
- Value classification against the warning / high thresholds

YAML access is encapsulated here - no other module should read chart.yaml directly.

Usage:
    from core.chart_registry import get_chart_config, value_color

    config = get_chart_config()
    config.normal_range   # (10.0, 21.0)
    value_color(22.5)     # "#dc2626"
"""

import logging
import re
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Tuple

import yaml

logger = logging.getLogger(__name__)

REQUIRED_SERIES = ("left", "right", "average")

_HEX_COLOR = re.compile(r'^#[0-9A-Fa-f]{6}$')


# =============================================================================
# DEFINITIONS
# =============================================================================

@dataclass(frozen=True)
class SeriesDefinition:
    """
    Immutable definition for one plotted series.

    Attributes:
        key: ChartDataPoint field plotted by this series (left, right, average)
        display_name: Legend / column label
        color: Hex color code
        visible: Whether the series is shown initially (otherwise legend-only)
    """
    key: str
    display_name: str
    color: str
    visible: bool


@dataclass(frozen=True)
class ChartConfig:
    """Immutable chart and table display configuration."""
    series: Tuple[SeriesDefinition, ...]
    normal_range: Tuple[float, float]
    warning_threshold: float
    high_threshold: float
    high_color: str
    warning_color: str
    normal_color: str
    y_axis_floor: float
    y_tick_step: float
    continuous_tick_minutes: int

    def get_series(self, key: str) -> SeriesDefinition:
        """Look up a series by key."""
        for definition in self.series:
            if definition.key == key:
                return definition
        raise KeyError(f"Unknown series: '{key}'")


# =============================================================================
# YAML CONFIGURATION LOADING & VALIDATION
# =============================================================================

def _get_config_path() -> Path:
    """Get the path to the chart configuration file."""
    return Path(__file__).parent / 'chart.yaml'


def _load_yaml_config() -> Dict[str, Any]:
    """
    Load and parse the YAML configuration file.

    Raises:
        FileNotFoundError: If chart.yaml is not found
        yaml.YAMLError: If YAML parsing fails
    """
    config_path = _get_config_path()
    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            return yaml.safe_load(f)
    except FileNotFoundError:
        logger.error("Chart config file not found", extra={'path': str(config_path)})
        raise
    except yaml.YAMLError as e:
        logger.error("Failed to parse chart config", extra={'path': str(config_path), 'error': str(e)})
        raise


def _validate_color(name: str, color: Any) -> str:
    if not isinstance(color, str) or not _HEX_COLOR.match(color):
        raise ValueError(f"'{name}' has invalid color format: '{color}'")
    return color


def parse_chart_config(raw: Dict[str, Any]) -> ChartConfig:
    """
    Validate and parse a raw configuration mapping.

    Raises:
        ValueError: If required fields are missing or invalid
    """
    series_raw = raw.get('series') or []
    series = []
    for i, entry in enumerate(series_raw):
        if 'key' not in entry:
            raise ValueError(f"Series at index {i} is missing required field: 'key'")
        series.append(SeriesDefinition(
            key=entry['key'],
            display_name=entry.get('display_name', entry['key'].title()),
            color=_validate_color(entry['key'], entry.get('color')),
            visible=bool(entry.get('visible', True)),
        ))
    missing = set(REQUIRED_SERIES) - {s.key for s in series}
    if missing:
        raise ValueError(f"Chart config is missing series: {sorted(missing)}")

    range_val = raw.get('normal_range')
    if not isinstance(range_val, (list, tuple)) or len(range_val) != 2:
        raise ValueError("normal_range must be [low, high]")
    try:
        normal_range = (float(range_val[0]), float(range_val[1]))
    except (TypeError, ValueError):
        raise ValueError("normal_range has non-numeric values")
    if normal_range[0] > normal_range[1]:
        raise ValueError("normal_range low bound exceeds high bound")

    thresholds = raw.get('thresholds') or {}
    colors = raw.get('value_colors') or {}
    y_axis = raw.get('y_axis') or {}

    tick_step = float(y_axis.get('tick_step', 5))
    tick_minutes = int(raw.get('continuous_tick_minutes', 120))
    if tick_step <= 0 or tick_minutes <= 0:
        raise ValueError("Tick spacing must be positive")

    return ChartConfig(
        series=tuple(series),
        normal_range=normal_range,
        warning_threshold=float(thresholds.get('warning', 18)),
        high_threshold=float(thresholds.get('high', 21)),
        high_color=_validate_color('value_colors.high', colors.get('high')),
        warning_color=_validate_color('value_colors.warning', colors.get('warning')),
        normal_color=_validate_color('value_colors.normal', colors.get('normal')),
        y_axis_floor=float(y_axis.get('floor', 40)),
        y_tick_step=tick_step,
        continuous_tick_minutes=tick_minutes,
    )


@lru_cache(maxsize=1)
def get_chart_config() -> ChartConfig:
    """
    Load and cache the chart configuration from YAML.

    Loaded exactly once during the lifetime of the application.
    """
    config = parse_chart_config(_load_yaml_config())
    logger.info(
        "Chart config loaded",
        extra={'series': [s.key for s in config.series], 'normal_range': config.normal_range}
    )
    return config


# =============================================================================
# VALUE CLASSIFICATION
# =============================================================================

def is_high(value: float) -> bool:
    """Check if a reading is above the high threshold."""
    return value > get_chart_config().high_threshold


def value_color(value: float) -> str:
    """Get the display color for a reading (high > warning > normal)."""
    config = get_chart_config()
    if value > config.high_threshold:
        return config.high_color
    if value > config.warning_threshold:
        return config.warning_color
    return config.normal_color
