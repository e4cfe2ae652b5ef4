"""
Tests for the Notion record source.

HTTP traffic is served by httpx.MockTransport, so no network access is needed.
"""
import json
from datetime import datetime, timezone

import httpx
import pytest

from clients.notion_source import NotionRecordSource, transform_page
from core.config import Settings, MISSING_NOTION_CONFIG_MESSAGE
from core.exceptions import ConfigurationError, RecordSourceError
from services.dashboard_service import FETCH_FAILED_MESSAGE, DashboardService


def notion_page(
    page_id="page-1",
    date="2025-01-01T08:00:00.000Z",
    left=16.5,
    right=17.25,
    is_24h=False,
    name="Test Subject",
    note="after drops",
):
    """Build a Notion page in the shape returned by the database query endpoint."""
    return {
        "object": "page",
        "id": page_id,
        "properties": {
            "Name": {"title": [{"plain_text": name}]} if name is not None else {"title": []},
            "Date": {"date": {"start": date} if date is not None else None},
            "Left": {"number": left},
            "Right": {"number": right},
            "is24h": {"checkbox": is_24h},
            "Note": {"rich_text": [{"plain_text": note}]} if note is not None else {"rich_text": []},
        },
    }


# =============================================================================
# PAGE TRANSFORMATION
# =============================================================================

def test_transform_page_full():
    record = transform_page(notion_page(is_24h=True))

    assert record.id == "page-1"
    assert record.name == "Test Subject"
    assert record.date == datetime(2025, 1, 1, 8, 0, tzinfo=timezone.utc)
    assert record.left == 16.5
    assert record.right == 17.25
    assert record.is_24h is True
    assert record.note == "after drops"


def test_transform_page_missing_fields_default():
    """Empty title/note arrays and null numbers fall back to defaults."""
    record = transform_page(notion_page(left=None, right=None, name=None, note=None))

    assert record.name == ""
    assert record.note == ""
    assert record.left == 0.0
    assert record.right == 0.0
    assert record.is_24h is False


def test_transform_page_absent_properties_default():
    page = {"id": "page-2", "properties": {"Date": {"date": {"start": "2025-01-01T08:00:00Z"}}}}
    record = transform_page(page)

    assert record.id == "page-2"
    assert record.name == ""
    assert record.left == 0.0
    assert record.is_24h is False


def test_transform_page_offset_converted_to_utc():
    record = transform_page(notion_page(date="2025-01-01T16:00:00.000+08:00"))

    assert record.date == datetime(2025, 1, 1, 8, 0, tzinfo=timezone.utc)


def test_transform_page_date_only_is_midnight_utc():
    record = transform_page(notion_page(date="2025-01-01"))

    assert record.date == datetime(2025, 1, 1, tzinfo=timezone.utc)


def test_transform_page_wall_clock_in_page_time_zone():
    """A start without an offset is read in the page's Notion time_zone."""
    page = {
        "id": "p",
        "properties": {
            "Date": {"date": {"start": "2025-01-01T08:00:00.000", "time_zone": "Asia/Shanghai"}},
        },
    }

    record = transform_page(page)

    assert record.date == datetime(2025, 1, 1, 0, 0, tzinfo=timezone.utc)


def test_transform_page_offset_wins_over_time_zone():
    page = notion_page(date="2025-01-01T08:00:00.000Z")
    page["properties"]["Date"]["date"]["time_zone"] = "Asia/Shanghai"

    assert transform_page(page).date == datetime(2025, 1, 1, 8, 0, tzinfo=timezone.utc)


def test_transform_page_unknown_time_zone_dropped():
    page = notion_page(date="2025-01-01T08:00:00.000")
    page["properties"]["Date"]["date"]["time_zone"] = "Mars/Olympus_Mons"

    assert transform_page(page) is None


@pytest.mark.parametrize("date", [None, "", "not-a-date"])
def test_transform_page_without_usable_date_dropped(date):
    assert transform_page(notion_page(date=date)) is None


def test_transform_page_malformed_property_dropped():
    page = notion_page()
    page["properties"]["Left"] = {"number": "abc"}

    assert transform_page(page) is None


# =============================================================================
# FETCHING
# =============================================================================

def make_source(handler, **overrides):
    values = dict(
        notion_database_id="db-123",
        notion_auth_token="secret-token",
        notion_api_url="https://notion.test/v1",
        notion_page_size=2,
        _env_file=None,
    )
    values.update(overrides)
    return NotionRecordSource(settings=Settings(**values), transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_fetch_all_records_follows_pagination():
    """Requests continue with start_cursor until has_more is false."""
    requests = []
    responses = [
        {
            "results": [notion_page("p1", "2025-01-01T08:00:00Z"), notion_page("p2", "2025-01-02T08:00:00Z")],
            "has_more": True,
            "next_cursor": "cursor-2",
        },
        {
            "results": [notion_page("p3", "2025-01-03T08:00:00Z")],
            "has_more": False,
            "next_cursor": None,
        },
    ]

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json=responses[len(requests) - 1])

    records = await make_source(handler).fetch_all_records()

    assert [r.id for r in records] == ["p1", "p2", "p3"]
    assert len(requests) == 2

    first_body = json.loads(requests[0].content)
    second_body = json.loads(requests[1].content)
    assert "start_cursor" not in first_body
    assert second_body["start_cursor"] == "cursor-2"
    assert first_body["page_size"] == 2
    assert first_body["sorts"] == [{"property": "Date", "direction": "ascending"}]


@pytest.mark.asyncio
async def test_fetch_all_records_request_shape():
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["request"] = request
        return httpx.Response(200, json={"results": [], "has_more": False})

    assert await make_source(handler).fetch_all_records() == []

    request = captured["request"]
    assert request.method == "POST"
    assert str(request.url) == "https://notion.test/v1/databases/db-123/query"
    assert request.headers["Authorization"] == "Bearer secret-token"
    assert request.headers["Notion-Version"] == "2022-06-28"


@pytest.mark.asyncio
async def test_fetch_all_records_skips_and_drops_pages():
    """Entries without properties are skipped; pages without a date are dropped."""
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={
            "results": [
                {"object": "page", "id": "no-props"},
                notion_page("dated"),
                notion_page("undated", date=None),
            ],
            "has_more": False,
        })

    records = await make_source(handler).fetch_all_records()

    assert [r.id for r in records] == ["dated"]


@pytest.mark.asyncio
async def test_fetch_all_records_has_more_without_cursor_stops():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json={"results": [], "has_more": True, "next_cursor": None})

    await make_source(handler).fetch_all_records()

    assert len(calls) == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("missing", ["notion_database_id", "notion_auth_token"])
async def test_fetch_all_records_missing_config_fails_before_network(missing):
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json={"results": []})

    source = make_source(handler, **{missing: ""})

    with pytest.raises(ConfigurationError) as exc_info:
        await source.fetch_all_records()

    assert exc_info.value.detail == MISSING_NOTION_CONFIG_MESSAGE
    assert calls == []


@pytest.mark.asyncio
async def test_fetch_all_records_http_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, json={"message": "API token is invalid."})

    with pytest.raises(RecordSourceError) as exc_info:
        await make_source(handler).fetch_all_records()

    assert "401" in exc_info.value.detail
    assert exc_info.value.context["upstream_status"] == 401
    assert exc_info.value.status_code == 502


@pytest.mark.asyncio
async def test_fetch_all_records_error_on_later_page():
    """A failure on any page fails the whole fetch; no partial results."""
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        if len(calls) == 1:
            return httpx.Response(200, json={
                "results": [notion_page("p1")], "has_more": True, "next_cursor": "c2",
            })
        return httpx.Response(500, text="upstream exploded")

    with pytest.raises(RecordSourceError):
        await make_source(handler).fetch_all_records()


@pytest.mark.asyncio
async def test_fetch_all_records_connection_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(RecordSourceError) as exc_info:
        await make_source(handler).fetch_all_records()

    assert "connection refused" in exc_info.value.detail


@pytest.mark.asyncio
async def test_fetch_all_records_invalid_json():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>maintenance</html>")

    with pytest.raises(RecordSourceError):
        await make_source(handler).fetch_all_records()


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [
    {"results": None, "has_more": False},
    {"has_more": False},
    ["not", "an", "object"],
])
async def test_fetch_all_records_missing_results_list(body):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=body)

    with pytest.raises(RecordSourceError) as exc_info:
        await make_source(handler).fetch_all_records()

    assert "missing results list" in exc_info.value.detail


@pytest.mark.asyncio
async def test_fetch_all_records_missing_results_shows_fetch_failed():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"results": None})

    service = DashboardService(record_source=make_source(handler))
    data = await service.load_dashboard()

    assert data.error == FETCH_FAILED_MESSAGE
    assert data.groups == []


@pytest.mark.asyncio
async def test_fetch_all_records_skips_non_object_results():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={
            "results": [None, "page", 7, notion_page("p1")],
            "has_more": False,
        })

    records = await make_source(handler).fetch_all_records()

    assert [r.id for r in records] == ["p1"]
