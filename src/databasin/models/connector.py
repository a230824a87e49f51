"""Connector metadata as returned by the platform API."""

from __future__ import annotations

from enum import IntEnum
from typing import Any

from pydantic import AliasChoices, BaseModel, Field


class ArtifactType(IntEnum):
    """Artifact-type codes the pipeline API expects on every item."""

    RDBMS = 1
    BIG_DATA_NOSQL = 2
    FILE_API = 3
    CRM_ERP = 4
    MARKETING = 5


class Connector(BaseModel):
    """A connector record. Only the fields the engine reads are typed."""

    connector_id: int | str | None = Field(default=None, alias="connectorID")
    name: str | None = Field(default=None, alias="connectorName")
    connector_type: str | None = Field(default=None, alias="connectorType")
    sub_type: str | None = Field(
        default=None,
        validation_alias=AliasChoices("connectorSubType", "subType", "sub_type"),
        serialization_alias="connectorSubType",
    )
    status: str | None = None
    health_status: str | None = Field(default=None, alias="connectorHealthStatus")
    is_active: int | bool | str | None = Field(default=None, alias="isActive")
    required_screens: list[Any] | None = Field(default=None, alias="pipelineRequiredScreens")

    model_config = {"populate_by_name": True, "extra": "allow"}

    @property
    def effective_status(self) -> str | None:
        return self.health_status or self.status

    @property
    def active(self) -> bool:
        """Active when the health status says so OR the active flag is 1.

        The API populates one or the other depending on the endpoint.
        """
        return self.effective_status == "active" or self.is_active in (1, "1")


class ConnectorConfiguration(BaseModel):
    """Static per-technology configuration published by the web app.

    ``required_screens`` is left untyped so that malformed values can be
    reported by the configuration validator instead of failing parsing.
    """

    connector_name: str | None = Field(default=None, alias="connectorName")
    required_screens: Any = Field(default=None, alias="pipelineRequiredScreens")
    category: str | None = None

    model_config = {"populate_by_name": True, "extra": "allow"}
