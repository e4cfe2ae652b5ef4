"""
Dashboard orchestration: fetch records once, then group them.

Each call performs a complete, independent render cycle - nothing is cached
between requests.
"""
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from clients.notion_source import NotionRecordSource
from core.config import Settings, settings as default_settings
from core.exceptions import ConfigurationError, GroupNotFoundError, RecordSourceError
from schemas.pressure_record import EyePressureRecord, RecordGroup
from services.grouping import group_records

logger = logging.getLogger(__name__)

FETCH_FAILED_MESSAGE = "Failed to load records"


@dataclass
class DashboardData:
    """Groups to render, or the user-facing error that prevented loading them."""
    groups: List[RecordGroup] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return self.error is None and not self.groups


class DashboardService:
    """Service that loads and groups eye pressure records for display."""

    def __init__(
        self,
        record_source: Optional[NotionRecordSource] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or default_settings
        self._source = record_source or NotionRecordSource(settings=self.settings)

    async def load_records(self) -> List[EyePressureRecord]:
        """
        Fetch the flat record list.

        Raises:
            ConfigurationError: If Notion credentials are missing.
            RecordSourceError: If the fetch fails.
        """
        return await self._source.fetch_all_records()

    async def load_groups(self) -> List[RecordGroup]:
        """Fetch records and group them."""
        records = await self.load_records()
        return group_records(records, tz=self.settings.display_tz)

    async def load_dashboard(self) -> DashboardData:
        """
        Load groups for the dashboard page, converting failures to messages.

        Configuration errors keep their descriptive message. Fetch errors are
        replaced by a generic message; details go to the log only.
        """
        try:
            groups = await self.load_groups()
        except ConfigurationError as e:
            logger.error("Dashboard not configured", extra={"error": e.detail})
            return DashboardData(error=e.detail)
        except RecordSourceError as e:
            logger.error("Error fetching records", extra={"error": e.detail})
            return DashboardData(error=FETCH_FAILED_MESSAGE)

        return DashboardData(groups=groups)

    def get_group(self, groups: Sequence[RecordGroup], group_id: str) -> RecordGroup:
        """
        Find a group by id.

        Raises:
            GroupNotFoundError: If no group has this id.
        """
        for group in groups:
            if group.id == group_id:
                return group
        raise GroupNotFoundError(group_id=group_id)
