"""Shared settings loaded from environment / .env file."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Configuration for the Databasin CLI client.

    Values are read from ``DATABASIN_*`` environment variables and from a
    ``.env`` file in the working directory.
    """

    model_config = SettingsConfigDict(
        env_prefix="DATABASIN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Shared
    log_level: str = "WARNING"
    debug: bool = False

    # Platform endpoints
    api_url: str = "http://localhost:9000"
    web_url: str = "http://localhost:3000"
    token: str | None = None
    default_project: str | None = None
    timeout_seconds: float = Field(default=30.0, validation_alias="DATABASIN_TIMEOUT")

    # Bulk fetch / configuration lookups
    bulk_concurrency: int = 5
    config_cache_ttl_seconds: int = Field(
        default=300, validation_alias="DATABASIN_CONFIG_CACHE_TTL"
    )

    @property
    def effective_log_level(self) -> str:
        """Return the log level to configure (``DEBUG`` when debug mode is on)."""
        return "DEBUG" if self.debug else self.log_level.upper()
