"""Pipeline draft (user input) and enriched payload (API contract) models."""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field, model_serializer


class IngestionPattern(StrEnum):
    DATALAKE = "datalake"
    DATA_WAREHOUSE = "data warehouse"


class ClusterSize(StrEnum):
    S = "S"
    M = "M"
    L = "L"
    XL = "XL"


class IngestionType(StrEnum):
    CDC = "cdc"
    DELTA = "delta"
    HISTORICAL = "historical"
    SNAPSHOT = "snapshot"
    STORED_PROCEDURE = "stored_procedure"


class PipelineDraft(BaseModel):
    """Minimal pipeline description supplied by the caller.

    Everything is optional at parse time so the validators can report all
    missing fields at once instead of failing on the first.
    """

    pipeline_name: str | None = Field(default=None, alias="pipelineName")
    source_connector_id: int | str | None = Field(default=None, alias="sourceConnectorID")
    target_connector_id: int | str | None = Field(default=None, alias="targetConnectorID")
    institution_id: int | str | None = Field(default=None, alias="institutionID")
    internal_id: int | str | None = Field(default=None, alias="internalID")
    owner_id: int | str | None = Field(default=None, alias="ownerID")
    is_private: int | bool | None = Field(default=None, alias="isPrivate")
    ingestion_pattern: str | None = Field(default=None, alias="ingestionPattern")
    source_naming_convention: bool | None = Field(default=None, alias="sourceNamingConvention")
    create_catalogs: bool | None = Field(default=None, alias="createCatalogs")
    source_catalog: str | None = Field(default=None, alias="sourceCatalog")
    target_catalog_name: str | None = Field(default=None, alias="targetCatalogName")
    target_schema_name: str | None = Field(default=None, alias="targetSchemaName")
    job_details: dict[str, Any] | None = Field(default=None, alias="jobDetails")
    items: list[dict[str, Any]] = []

    # YAML reads an unquoted name such as 2024 as a number.
    model_config = {"populate_by_name": True, "coerce_numbers_to_str": True}


class JobDetails(BaseModel):
    """Scheduling metadata. ``jobTimeout`` is always serialized as a string."""

    tags: list[Any] = []
    job_cluster_size: str | None = Field(default=None, alias="jobClusterSize")
    email_notifications: list[str] = Field(default=[], alias="emailNotifications")
    job_run_schedule: str | None = Field(default=None, alias="jobRunSchedule")
    job_run_time_zone: str | None = Field(default=None, alias="jobRunTimeZone")
    job_timeout: str = Field(default="", alias="jobTimeout")

    # Unknown caller-supplied keys are carried through the shallow merge.
    model_config = {"populate_by_name": True, "extra": "allow", "coerce_numbers_to_str": True}


# Keys the platform omits (rather than nulls) when they were never supplied.
_OMIT_WHEN_NONE = (
    "source_table_name",
    "target_table_name",
    "source_schema_name",
    "ingestion_type",
    "source_file_name",
    "source_file_format",
    "source_file_delimiter",
)


class EnrichedArtifact(BaseModel):
    """One artifact item in the canonical shape the pipeline API accepts."""

    source_table_name: str | None = Field(default=None, alias="sourceTableName")
    target_table_name: str | None = Field(default=None, alias="targetTableName")
    source_schema_name: str | None = Field(default=None, alias="sourceSchemaName")
    source_column_names: Any = Field(default=None, alias="sourceColumnNames")
    merge_columns: Any = Field(default=None, alias="mergeColumns")
    watermark_column_name: list[Any] | None = Field(default=None, alias="watermarkColumnName")
    ingestion_type: str | None = Field(default=None, alias="ingestionType")
    source_connection_id: int = Field(alias="sourceConnectionID")
    target_connection_id: int = Field(alias="targetConnectionID")
    artifact_type: int = Field(alias="artifactType")
    auto_explode: bool = Field(default=False, alias="autoExplode")
    detect_deletes: bool = Field(default=False, alias="detectDeletes")
    priority: bool = False
    replace_table: bool = Field(default=False, alias="replaceTable")
    backload_num_days: int = Field(default=0, alias="backloadNumDays")
    snapshot_retention_period: int = Field(default=3, alias="snapshotRetentionPeriod")
    contains_header: bool = Field(default=False, alias="containsHeader")
    column_header_line_number: int = Field(default=0, alias="columnHeaderLineNumber")
    source_file_name: str | None = Field(default=None, alias="sourceFileName")
    source_file_format: str | None = Field(default=None, alias="sourceFileFormat")
    source_file_delimiter: str | None = Field(default=None, alias="sourceFileDelimiter")
    source_database_name: str = Field(default="", alias="sourceDatabaseName")
    target_database_name: str = Field(default="", alias="targetDatabaseName")
    target_schema_name: str = Field(default="", alias="targetSchemaName")

    model_config = {"populate_by_name": True, "coerce_numbers_to_str": True}

    @model_serializer(mode="wrap")
    def _omit_unset_optionals(self, handler: Any) -> dict[str, Any]:
        data = handler(self)
        for name in _OMIT_WHEN_NONE:
            for key in (name, type(self).model_fields[name].alias):
                if key in data and data[key] is None:
                    del data[key]
        return data


class EnrichedPayload(BaseModel):
    """Complete pipeline-creation payload.

    Connector ids never appear at this level; they live on each item as
    ``sourceConnectionID`` / ``targetConnectionID``.
    """

    institution_id: int | str | None = Field(default=None, alias="institutionID")
    internal_id: int | str | None = Field(default=None, alias="internalID")
    owner_id: int | str | None = Field(default=None, alias="ownerID")
    pipeline_name: str | None = Field(default=None, alias="pipelineName")
    is_private: int | bool = Field(default=0, alias="isPrivate")
    source_naming_convention: bool = Field(alias="sourceNamingConvention")
    ingestion_pattern: str | None = Field(default=None, alias="ingestionPattern")
    create_catalogs: bool = Field(alias="createCatalogs")
    connector_technology: list[str] = Field(alias="connectorTechnology")
    target_catalog_name: str = Field(default="", alias="targetCatalogName")
    target_schema_name: str = Field(default="", alias="targetSchemaName")
    job_details: JobDetails | None = Field(default=None, alias="jobDetails")
    items: list[EnrichedArtifact] = []

    model_config = {"populate_by_name": True}

    def to_wire(self) -> dict[str, Any]:
        """Serialize with the platform's camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)
