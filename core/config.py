"""
Configuration module for the Eye Pressure Dashboard.
Uses Pydantic BaseSettings for validation - invalid values fail fast at startup.

The Notion credentials are optional at startup; require_notion() checks them
right before a fetch and the dashboard page reports a configuration error.
"""
import logging
from typing import Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

MISSING_NOTION_CONFIG_MESSAGE = "Missing Notion configuration in environment variables"


class Settings(BaseSettings):
    """
    Application settings with validation.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Notion Record Source Configuration
    notion_database_id: str = Field(default="", description="Notion database holding the IOP records")
    notion_auth_token: str = Field(default="", description="Notion integration token")
    notion_api_url: str = Field(default="https://api.notion.com/v1", description="Notion REST API base URL")
    notion_version: str = Field(default="2022-06-28", description="Notion-Version header value")
    notion_timeout: float = Field(default=30.0, gt=0, description="Notion request timeout in seconds")
    notion_page_size: int = Field(default=100, ge=1, le=100, description="Records requested per query page")

    # Display Configuration
    iop_display_timezone: str = Field(
        default="Asia/Shanghai",
        description="Timezone used for calendar dates and clock labels",
    )

    # API Configuration
    iop_host: str = Field(default="0.0.0.0", description="API host")
    iop_port: int = Field(default=8000, description="API port")
    iop_reload: bool = Field(default=False, description="Enable hot reload")
    iop_slow_request_ms: float = Field(
        default=3000.0,
        gt=0,
        description="Requests slower than this are logged as slow (each render waits on Notion)",
    )

    @field_validator("iop_display_timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        """Reject timezone names unknown to the tz database."""
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"Unknown timezone: '{value}'")
        return value

    @model_validator(mode="after")
    def warn_missing_secrets(self) -> "Settings":
        """
        Warn at startup about missing Notion credentials.

        Not fatal here: the page reports the problem to the user instead.
        """
        if not self.notion_database_id or not self.notion_auth_token:
            logger.warning(
                "NOTION_DATABASE_ID or NOTION_AUTH_TOKEN not set - record fetching will fail"
            )
        return self

    @property
    def display_tz(self) -> ZoneInfo:
        """Get the display timezone object."""
        return ZoneInfo(self.iop_display_timezone)

    def require_notion(self) -> Tuple[str, str]:
        """
        Return (database_id, auth_token), failing fast if either is missing.

        Raises:
            ConfigurationError: If a Notion credential is not configured.
        """
        if not self.notion_database_id or not self.notion_auth_token:
            raise ConfigurationError(MISSING_NOTION_CONFIG_MESSAGE)
        return self.notion_database_id, self.notion_auth_token


# Create global settings instance
settings = Settings()

API_HOST = settings.iop_host
API_PORT = settings.iop_port
API_RELOAD = settings.iop_reload
