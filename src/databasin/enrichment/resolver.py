"""Connector lookup with a cache scoped to one enrichment run."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Protocol

import pydantic

from databasin.errors import ApiError, NotFoundError, ValidationError
from databasin.models.connector import Connector

logger = logging.getLogger("databasin.enrichment")


class ConnectorBackend(Protocol):
    """What the enrichment engine needs from the platform."""

    async def fetch_connector(
        self, connector_id: int | str
    ) -> Connector | Mapping[str, Any] | None: ...

    async def fetch_current_account_email(self) -> str | None: ...


class ConnectorCache:
    """Connector records keyed by id, alive for exactly one run.

    Use as a context manager: entering and leaving both empty the cache, so
    nothing fetched in one run is visible to the next.
    """

    def __init__(self) -> None:
        self._connectors: dict[str, Connector] = {}

    def __enter__(self) -> ConnectorCache:
        self.clear()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.clear()

    def __contains__(self, connector_id: object) -> bool:
        return str(connector_id) in self._connectors

    def __len__(self) -> int:
        return len(self._connectors)

    def get(self, connector_id: int | str) -> Connector | None:
        return self._connectors.get(str(connector_id))

    def put(self, connector_id: int | str, connector: Connector) -> None:
        self._connectors[str(connector_id)] = connector

    def clear(self) -> None:
        self._connectors.clear()


class ConnectorResolver:
    """Resolves connectors through *backend*, fetching each id at most once per cache."""

    def __init__(self, backend: ConnectorBackend, cache: ConnectorCache) -> None:
        self._backend = backend
        self._cache = cache

    async def resolve(self, connector_id: int | str) -> Connector:
        """Return the connector, raising :class:`NotFoundError` if it does not exist."""
        cached = self._cache.get(connector_id)
        if cached is not None:
            logger.debug("Connector cache hit: %s", connector_id)
            return cached

        try:
            raw = await self._backend.fetch_connector(connector_id)
        except ApiError as exc:
            if exc.is_not_found:
                raise NotFoundError(
                    f"Connector not found: {connector_id}", field="connectorId"
                ) from exc
            raise

        if raw is None:
            raise NotFoundError(f"Connector not found: {connector_id}", field="connectorId")
        try:
            connector = raw if isinstance(raw, Connector) else Connector.model_validate(raw)
        except pydantic.ValidationError as exc:
            raise ValidationError.from_pydantic(exc, prefix="connector.") from exc
        self._cache.put(connector_id, connector)
        return connector

    async def validate(self, connector_id: int | str, role: str) -> Connector:
        """Resolve the connector and require it to be active.

        *role* is ``"source"`` or ``"target"`` and names the offending field
        (``sourceConnectorId`` / ``targetConnectorId``) on failure.
        """
        field = f"{role}ConnectorId"
        try:
            connector = await self.resolve(connector_id)
        except NotFoundError as exc:
            raise NotFoundError(
                f"{role} connector not found: {connector_id}",
                field=field,
                suggestions=[
                    f"The specified {role} connector does not exist",
                    "Verify the connector ID and try again",
                ],
            ) from exc

        if not connector.active:
            status = connector.effective_status
            raise ValidationError(
                f"{role} connector is not active "
                f"(status: {status}, isActive: {connector.is_active})",
                field=field,
                suggestions=[
                    f"The {role} connector must be active to use in a pipeline",
                    f"Current status: {status or 'unknown'}",
                    "Please activate the connector before creating a pipeline",
                ],
            )
        return connector
