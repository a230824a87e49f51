"""Shared test fixtures for the Databasin CLI."""

from __future__ import annotations

from collections import Counter
from typing import Any

import pytest

from databasin.errors import ApiError
from databasin.settings import Settings

MYSQL_SOURCE = {
    "connectorID": 101,
    "connectorName": "Orders DB",
    "connectorType": "RDBMS",
    "connectorSubType": "MySQL",
    "status": "active",
    "isActive": 1,
}

SNOWFLAKE_TARGET = {
    "connectorID": 202,
    "connectorName": "Analytics Warehouse",
    "connectorType": "BigDataNoSQL",
    "connectorSubType": "snowflake",
    "connectorHealthStatus": "active",
}

POSTGRES_TARGET = {
    "connectorID": 303,
    "connectorName": "Reporting Postgres",
    "connectorType": "RDBMS",
    "connectorSubType": "postgres",
    "status": "active",
}

CSV_SOURCE = {
    "connectorID": 404,
    "connectorName": "Partner Drop",
    "connectorType": "FileAPI",
    "connectorSubType": "csv",
    "status": "active",
}

INACTIVE_SOURCE = {
    "connectorID": 505,
    "connectorName": "Retired DB",
    "connectorSubType": "oracle",
    "status": "inactive",
    "isActive": 0,
}

CONNECTORS = {
    str(c["connectorID"]): c
    for c in (MYSQL_SOURCE, SNOWFLAKE_TARGET, POSTGRES_TARGET, CSV_SOURCE, INACTIVE_SOURCE)
}

ACCOUNT_EMAIL = "owner@example.com"


class FakeBackend:
    """In-memory stand-in for the platform's connector and account endpoints."""

    def __init__(
        self,
        connectors: dict[str, dict[str, Any]] | None = None,
        email: str | None = ACCOUNT_EMAIL,
        email_error: Exception | None = None,
    ) -> None:
        self.connectors = dict(CONNECTORS if connectors is None else connectors)
        self.email = email
        self.email_error = email_error
        self.fetches: Counter[str] = Counter()

    async def fetch_connector(self, connector_id: int | str) -> dict[str, Any]:
        key = str(connector_id)
        self.fetches[key] += 1
        if key not in self.connectors:
            raise ApiError("Connector not found", 404, f"/api/connector/{key}")
        return self.connectors[key]

    async def fetch_current_account_email(self) -> str | None:
        if self.email_error is not None:
            raise self.email_error
        return self.email


def make_draft(**overrides: Any) -> dict[str, Any]:
    """A valid MySQL -> Snowflake draft with one table."""
    draft: dict[str, Any] = {
        "pipelineName": "orders-nightly",
        "sourceConnectorID": 101,
        "targetConnectorID": 202,
        "institutionID": 7,
        "internalID": "N1r8Do",
        "ownerID": 42,
        "targetSchemaName": "raw_orders",
        "items": [{"sourceTableName": "orders", "ingestionType": "snapshot"}],
    }
    draft.update(overrides)
    return draft


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from the developer's environment and .env file."""
    return Settings(
        _env_file=None,
        api_url="http://api.test",
        web_url="http://web.test",
        token="test-token",
        bulk_concurrency=2,
        config_cache_ttl_seconds=300,
    )
