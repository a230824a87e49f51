"""Connector endpoints."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from databasin.client.base import DatabasinClient
from databasin.client.bulk import BulkResult, fetch_bulk


class ConnectorsClient:
    def __init__(self, client: DatabasinClient) -> None:
        self._client = client

    async def list(
        self,
        project_id: str | None = None,
        *,
        count: bool = True,
        fields: str | None = None,
        limit: int | None = None,
    ) -> Any:
        """List connectors, optionally for one project.

        Defaults to count mode; full listings can be very large.
        """
        params = {"internalID": project_id} if project_id else None
        return await self._client.get(
            "/api/connector", params, count=count, fields=fields, limit=limit
        )

    async def get_by_id(self, connector_id: int | str) -> Any:
        return await self._client.get(f"/api/connector/{connector_id}")

    async def create(self, data: dict[str, Any]) -> Any:
        return await self._client.post("/api/connector", data)

    async def update(self, connector_id: int | str, data: dict[str, Any]) -> Any:
        return await self._client.put(f"/api/connector/{connector_id}", data)

    async def delete(self, connector_id: int | str) -> Any:
        return await self._client.delete(f"/api/connector/{connector_id}")

    async def test(self, connector_id: int | str) -> Any:
        return await self._client.post(f"/api/connector/{connector_id}/test", {})

    async def get_many(self, ids: Sequence[str]) -> list[BulkResult]:
        return await fetch_bulk(
            ids, self.get_by_id, concurrency=self._client.settings.bulk_concurrency
        )
