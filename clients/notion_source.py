"""
HTTP client for the Notion database holding eye pressure records.

Pages through the database query endpoint and converts each Notion page to
an EyePressureRecord. Missing page properties fall back to defaults and a
page without a measurement date is dropped.
"""
import logging
from typing import Any, Dict, List, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import httpx

from core.config import Settings, settings as default_settings
from core.datetime_utils import parse_datetime_safe
from core.exceptions import RecordSourceError
from schemas.pressure_record import EyePressureRecord

logger = logging.getLogger(__name__)


class NotionRecordSource:
    """Record source backed by the Notion REST API."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the record source.

        Args:
            settings: Application settings. Defaults to the global settings.
            transport: Optional httpx transport (tests inject httpx.MockTransport).
        """
        self.settings = settings or default_settings
        self.base_url = self.settings.notion_api_url.rstrip("/")
        self._transport = transport

    def _headers(self, auth_token: str) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {auth_token}",
            "Notion-Version": self.settings.notion_version,
            "Content-Type": "application/json",
        }

    async def fetch_all_records(self) -> List[EyePressureRecord]:
        """
        Fetch every record in the database, following pagination cursors.

        Returns:
            Records in the order Notion returned them (ascending by Date)

        Raises:
            ConfigurationError: If the database id or auth token is missing.
                Raised before any network call.
            RecordSourceError: For HTTP error responses and connection failures.
        """
        database_id, auth_token = self.settings.require_notion()
        url = f"{self.base_url}/databases/{database_id}/query"

        records: List[EyePressureRecord] = []
        dropped = 0
        pages = 0
        cursor: Optional[str] = None

        try:
            async with httpx.AsyncClient(
                timeout=self.settings.notion_timeout,
                headers=self._headers(auth_token),
                transport=self._transport,
            ) as client:
                while True:
                    payload: Dict[str, Any] = {
                        "sorts": [{"property": "Date", "direction": "ascending"}],
                        "page_size": self.settings.notion_page_size,
                    }
                    if cursor:
                        payload["start_cursor"] = cursor

                    response = await client.post(url, json=payload)
                    response.raise_for_status()
                    body = response.json()
                    pages += 1

                    results = body.get("results") if isinstance(body, dict) else None
                    if not isinstance(results, list):
                        error_msg = "Notion returned an unreadable response: missing results list"
                        logger.error(error_msg, extra={"page": pages})
                        raise RecordSourceError(error_msg)

                    for page in results:
                        if not isinstance(page, dict) or "properties" not in page:
                            continue
                        record = transform_page(page)
                        if record is None:
                            dropped += 1
                        else:
                            records.append(record)

                    cursor = body.get("next_cursor") if body.get("has_more") else None
                    if not cursor:
                        break
        except httpx.HTTPStatusError as e:
            error_msg = f"Notion API error {e.response.status_code}: {e.response.text}"
            logger.error(error_msg)
            raise RecordSourceError(error_msg, upstream_status=e.response.status_code) from e
        except httpx.RequestError as e:
            error_msg = f"Notion request error: {e}"
            logger.error(error_msg)
            raise RecordSourceError(error_msg) from e
        except ValueError as e:
            # Response body was not valid JSON
            error_msg = f"Notion returned an unreadable response: {e}"
            logger.error(error_msg)
            raise RecordSourceError(error_msg) from e

        logger.info(
            "Fetched records from Notion",
            extra={"record_count": len(records), "dropped": dropped, "pages": pages}
        )
        return records


# =============================================================================
# PAGE TRANSFORMATION
# =============================================================================

def _first_plain_text(items: Any) -> str:
    if isinstance(items, list) and items and isinstance(items[0], dict):
        return items[0].get("plain_text") or ""
    return ""


def _number(prop: Any) -> float:
    value = prop.get("number") if isinstance(prop, dict) else None
    return float(value) if value is not None else 0.0


def transform_page(page: Dict[str, Any]) -> Optional[EyePressureRecord]:
    """
    Convert a Notion page to an EyePressureRecord.

    Returns:
        The record, or None when the page has no usable measurement date
        or an unexpected shape.
    """
    page_id = page.get("id")
    try:
        props = page.get("properties") or {}

        date_prop = (props.get("Date") or {}).get("date") or {}
        date_value = date_prop.get("start")
        if not date_value:
            logger.warning("Dropping Notion page without a date", extra={"page_id": page_id})
            return None

        # Notion sends wall-clock "start" without an offset when time_zone is set
        zone_name = date_prop.get("time_zone")
        measured_at = parse_datetime_safe(date_value, ZoneInfo(zone_name) if zone_name else None)
        if measured_at is None:
            logger.warning("Dropping Notion page with an unreadable date", extra={"page_id": page_id})
            return None

        return EyePressureRecord(
            id=str(page_id or ""),
            name=_first_plain_text((props.get("Name") or {}).get("title")),
            date=measured_at,
            left=_number(props.get("Left")),
            right=_number(props.get("Right")),
            is_24h=bool((props.get("is24h") or {}).get("checkbox") or False),
            note=_first_plain_text((props.get("Note") or {}).get("rich_text")),
        )
    except (AttributeError, TypeError, ValueError, ZoneInfoNotFoundError) as e:
        logger.warning(
            "Dropping malformed Notion page",
            extra={"page_id": page_id, "error": str(e)}
        )
        return None
