"""
Shared pytest fixtures.

Key patterns:
1. Record factories: build EyePressureRecord objects relative to a fixed instant
2. Fake record source: stands in for Notion, returning records or raising
3. DI Override: app.dependency_overrides injects the fake-backed service

Fixture Hierarchy:
    test_settings → fake_source → dashboard_service → test_app → client
"""
import os
from datetime import datetime, timedelta, timezone
from typing import List, Optional

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

# Deterministic display timezone before any config import
os.environ["IOP_DISPLAY_TIMEZONE"] = "UTC"

from core import dependencies as deps
from core.config import Settings
from core.exceptions import setup_exception_handlers
from schemas.pressure_record import EyePressureRecord
from services.chart.page_renderer import DashboardPageRenderer
from services.chart.plotly_builder import PressureChartBuilder
from services.dashboard_service import DashboardService

T0 = datetime(2025, 1, 1, 8, 0, tzinfo=timezone.utc)


def make_record(
    offset: timedelta = timedelta(0),
    is_24h: bool = False,
    left: float = 15.0,
    right: float = 16.0,
    note: str = "",
    record_id: Optional[str] = None,
    base: datetime = T0,
) -> EyePressureRecord:
    """Build a record at base + offset."""
    moment = base + offset
    return EyePressureRecord(
        id=record_id or f"rec-{int(moment.timestamp())}-{'24h' if is_24h else 'reg'}",
        name="Test Subject",
        date=moment,
        left=left,
        right=right,
        is_24h=is_24h,
        note=note,
    )


def hours(n: float) -> timedelta:
    return timedelta(hours=n)


class FakeRecordSource:
    """In-memory replacement for NotionRecordSource."""

    def __init__(self, records: Optional[List[EyePressureRecord]] = None, error: Optional[Exception] = None):
        self.records = records or []
        self.error = error
        self.calls = 0

    async def fetch_all_records(self) -> List[EyePressureRecord]:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return list(self.records)


@pytest.fixture
def test_settings():
    """Settings with Notion configured and a UTC display timezone, ignoring .env."""
    return Settings(
        notion_database_id="test-database",
        notion_auth_token="secret-test-token",
        notion_api_url="https://notion.test/v1",
        iop_display_timezone="UTC",
        _env_file=None,
    )


@pytest.fixture
def sample_records():
    """One regular reading and two 24-hour sessions."""
    return [
        make_record(hours(-72), left=14.0, right=15.5, note="clinic"),
        make_record(hours(0), is_24h=True, left=18.0, right=19.0),
        make_record(hours(4), is_24h=True, left=22.0, right=21.5),
        make_record(hours(22), is_24h=True, left=17.0, right=16.0),
        make_record(hours(48), is_24h=True, left=16.0, right=16.5),
    ]


@pytest.fixture
def fake_source(sample_records):
    return FakeRecordSource(records=sample_records)


@pytest.fixture
def dashboard_service(fake_source, test_settings):
    return DashboardService(record_source=fake_source, settings=test_settings)


@pytest.fixture
def page_renderer():
    return DashboardPageRenderer(PressureChartBuilder(tz=timezone.utc))


@pytest.fixture
def test_app(dashboard_service, page_renderer):
    """
    FastAPI test app using the real routers with dependency overrides.
    """
    from api.routers import health_router, records_router, dashboard_router

    app = FastAPI(title="Eye Pressure Dashboard Test")
    setup_exception_handlers(app)

    app.dependency_overrides[deps.get_dashboard_service] = lambda: dashboard_service
    app.dependency_overrides[deps.get_page_renderer] = lambda: page_renderer

    app.include_router(health_router)
    app.include_router(records_router)
    app.include_router(dashboard_router)

    yield app

    app.dependency_overrides.clear()


@pytest.fixture
def client(test_app):
    """Create a test client for the API."""
    return TestClient(test_app)
