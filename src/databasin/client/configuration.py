"""Connector configuration lookup from the web app's static category files."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass

import httpx

from databasin.enrichment.discovery import (
    DiscoveryFlow,
    resolve_discovery_pattern,
    validate_connector_configuration,
)
from databasin.errors import ConfigurationNotFoundError
from databasin.models.connector import ConnectorConfiguration
from databasin.models.errors import ValidationResult
from databasin.settings import Settings

logger = logging.getLogger("databasin.client")

CATEGORIES = (
    "RDBMS",
    "Marketing",
    "FileAPI",
    "Accounting",
    "BigDataNoSQL",
    "CRMERP",
    "ECommerce",
    "Collaboration",
    "AILLM",
)
CATEGORY_FILES = tuple(
    f"config/connectors/v2/types/DatabasinConnector{category}.json" for category in CATEGORIES
)


@dataclass
class _CacheEntry:
    config: ConnectorConfiguration
    stored_at: float  # monotonic clock


class ConfigurationClient:
    """Finds a connector's configuration by name, caching hits for a TTL.

    The category files are public static assets, so no token is sent.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        ttl_seconds: float | None = None,
    ) -> None:
        self.settings = settings or Settings()
        self._ttl = self.settings.config_cache_ttl_seconds if ttl_seconds is None else ttl_seconds
        self._cache: dict[str, _CacheEntry] = {}
        self._http = httpx.AsyncClient(
            base_url=self.settings.web_url,
            timeout=self.settings.timeout_seconds,
            headers={"Accept": "application/json"},
            transport=transport,
        )

    async def __aenter__(self) -> ConfigurationClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    def clear_cache(self) -> None:
        self._cache.clear()

    async def get_connector_configuration(self, connector_name: str) -> ConnectorConfiguration:
        """Search every category file for *connector_name* (case-insensitive).

        Raises :class:`ConfigurationNotFoundError` listing the files that
        failed to load when no category contains the connector.
        """
        key = connector_name.lower()
        cached = self._cached(key)
        if cached is not None:
            return cached

        failures: dict[str, str] = {}
        for path in CATEGORY_FILES:
            try:
                response = await self._http.get(f"/{path}")
                response.raise_for_status()
                category = response.json()
            except (httpx.HTTPError, ValueError) as exc:
                logger.debug("Failed to load %s: %s", path, exc)
                failures[path] = str(exc) or type(exc).__name__
                continue
            if not isinstance(category, dict):
                failures[path] = "unexpected response shape"
                continue

            for entry in category.get("availableConnectors") or []:
                if str(entry.get("connectorName", "")).lower() == key:
                    config = ConnectorConfiguration.model_validate(
                        {**entry, "category": category.get("connectorType")}
                    )
                    self._cache[key] = _CacheEntry(config, time.monotonic())
                    logger.debug("Found configuration for %s in %s", connector_name, path)
                    return config

        raise ConfigurationNotFoundError(connector_name, failures, searched=len(CATEGORY_FILES))

    async def get_discovery_flow(
        self, connector_name: str
    ) -> tuple[DiscoveryFlow, ValidationResult]:
        """Discovery workflow for a connector, with its configuration findings."""
        config = await self.get_connector_configuration(connector_name)
        return resolve_discovery_pattern(config), validate_connector_configuration(config)

    def _cached(self, key: str) -> ConnectorConfiguration | None:
        entry = self._cache.get(key)
        if entry is None:
            return None
        # Lazy expiration check
        if time.monotonic() - entry.stored_at >= self._ttl:
            del self._cache[key]
            logger.debug("Configuration cache expired: %s", key)
            return None
        return entry.config
