"""Structural and pattern-specific validation of drafts and enriched payloads."""

from __future__ import annotations

import logging
from typing import Any

from databasin.enrichment.cron import is_valid_cron_expression
from databasin.models.errors import FieldError, ValidationResult
from databasin.models.pipeline import (
    ClusterSize,
    EnrichedPayload,
    IngestionPattern,
    IngestionType,
    PipelineDraft,
)

logger = logging.getLogger("databasin.enrichment")

_PATTERNS = [p.value for p in IngestionPattern]
_CLUSTER_SIZES = [s.value for s in ClusterSize]
_INGESTION_TYPES = [t.value for t in IngestionType]


def parse_connector_id(value: Any) -> int | None:
    """Return the numeric form of a connector id, or ``None`` if it has none."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


class PayloadValidator:
    """Collects every problem in one pass; callers decide whether to raise."""

    def check_draft(self, draft: PipelineDraft) -> list[FieldError]:
        """Checks that need no network access, run before connectors are fetched."""
        errors: list[FieldError] = []
        errors.extend(
            self._check_identity(
                draft.pipeline_name, draft.institution_id, draft.internal_id, draft.owner_id
            )
        )
        errors.extend(self._check_connector_ids(draft))
        if draft.ingestion_pattern and draft.ingestion_pattern not in _PATTERNS:
            errors.append(_invalid_pattern(draft.ingestion_pattern))
        return errors

    def validate(self, payload: EnrichedPayload) -> ValidationResult:
        errors: list[FieldError] = []
        errors.extend(
            self._check_identity(
                payload.pipeline_name, payload.institution_id, payload.internal_id, payload.owner_id
            )
        )
        errors.extend(self._check_pattern(payload))
        errors.extend(self._check_job_details(payload))
        errors.extend(self._check_items(payload))
        warnings = self._warnings(payload)
        for warning in warnings:
            logger.warning("%s", warning)
        return ValidationResult(valid=not errors, errors=errors, warnings=warnings)

    # -- checks --------------------------------------------------------------

    def _check_identity(
        self, name: str | None, institution_id: Any, internal_id: Any, owner_id: Any
    ) -> list[FieldError]:
        errors: list[FieldError] = []
        if not name or not name.strip():
            errors.append(
                FieldError(
                    field="pipelineName",
                    message="Pipeline name is required",
                    suggestions=["Provide a non-empty pipelineName field"],
                )
            )
        if not institution_id:
            errors.append(
                FieldError(
                    field="institutionID",
                    message="Institution ID is required",
                    suggestions=["Provide institutionID from your organization"],
                )
            )
        if not internal_id:
            errors.append(
                FieldError(
                    field="internalID",
                    message="Project internal ID is required",
                    suggestions=["Provide internalID for the target project"],
                )
            )
        if owner_id is None:
            errors.append(
                FieldError(
                    field="ownerID",
                    message="Owner ID is required",
                    suggestions=["Provide ownerID for pipeline ownership"],
                )
            )
        return errors

    def _check_connector_ids(self, draft: PipelineDraft) -> list[FieldError]:
        errors: list[FieldError] = []
        for role, value in (
            ("source", draft.source_connector_id),
            ("target", draft.target_connector_id),
        ):
            field = f"{role}ConnectorID"
            if value is None or value == "":
                errors.append(
                    FieldError(
                        field=field,
                        message=f"{role.capitalize()} connector ID is required",
                        suggestions=[f"Provide a valid {field}"],
                    )
                )
            elif parse_connector_id(value) is None:
                errors.append(
                    FieldError(
                        field=field,
                        message=f"{role.capitalize()} connector ID must be numeric, got {value!r}",
                    )
                )
        return errors

    def _check_pattern(self, payload: EnrichedPayload) -> list[FieldError]:
        pattern = payload.ingestion_pattern
        if not pattern:
            return [
                FieldError(
                    field="ingestionPattern",
                    message="Ingestion pattern is required",
                    suggestions=[f"Use one of: {', '.join(_PATTERNS)}"],
                )
            ]
        if pattern not in _PATTERNS:
            return [_invalid_pattern(pattern)]
        if pattern == IngestionPattern.DATALAKE and not payload.target_schema_name:
            return [
                FieldError(
                    field="targetSchemaName",
                    message="targetSchemaName is required for datalake ingestion pattern",
                    suggestions=["Provide targetSchemaName when using datalake ingestion mode"],
                )
            ]
        if pattern == IngestionPattern.DATA_WAREHOUSE and not payload.target_catalog_name:
            return [
                FieldError(
                    field="targetCatalogName",
                    message="targetCatalogName is required for data warehouse ingestion pattern",
                    suggestions=[
                        "Provide targetCatalogName when using data warehouse ingestion mode"
                    ],
                )
            ]
        return []

    def _check_job_details(self, payload: EnrichedPayload) -> list[FieldError]:
        job = payload.job_details
        if job is None:
            return [FieldError(field="jobDetails", message="Job details are required")]
        errors: list[FieldError] = []
        if job.job_cluster_size not in _CLUSTER_SIZES:
            errors.append(
                FieldError(
                    field="jobDetails.jobClusterSize",
                    message=f"Invalid cluster size: {job.job_cluster_size!r}",
                    suggestions=[f"Use one of: {', '.join(_CLUSTER_SIZES)}"],
                )
            )
        if not job.job_run_time_zone:
            errors.append(
                FieldError(
                    field="jobDetails.jobRunTimeZone",
                    message="Job timezone is required",
                    suggestions=["Use an IANA timezone name such as UTC or Europe/Berlin"],
                )
            )
        return errors

    def _check_items(self, payload: EnrichedPayload) -> list[FieldError]:
        if not payload.items:
            return [
                FieldError(
                    field="items",
                    message="At least one artifact item is required",
                    suggestions=["Add an item with sourceTableName and ingestionType"],
                )
            ]
        errors: list[FieldError] = []
        for index, item in enumerate(payload.items):
            path = f"items[{index}]"
            if not (item.source_table_name or item.source_file_name):
                errors.append(
                    FieldError(
                        field=f"{path}.sourceTableName",
                        message="Item needs a table, object or file name",
                        suggestions=[
                            "Set sourceTableName (or sourceObjectName), "
                            "or sourceFileName for a file source"
                        ],
                    )
                )
            if item.ingestion_type not in _INGESTION_TYPES:
                errors.append(
                    FieldError(
                        field=f"{path}.ingestionType",
                        message=f"Invalid ingestion type: {item.ingestion_type!r}",
                        suggestions=[f"Use one of: {', '.join(_INGESTION_TYPES)}"],
                    )
                )
        return errors

    def _warnings(self, payload: EnrichedPayload) -> list[FieldError]:
        warnings: list[FieldError] = []
        job = payload.job_details
        if job is not None and job.job_run_schedule is not None:
            if not is_valid_cron_expression(job.job_run_schedule):
                warnings.append(
                    FieldError(
                        field="jobDetails.jobRunSchedule",
                        message=(
                            f"Invalid cron expression: {job.job_run_schedule!r}. Must be 5 or 6 "
                            "fields (minute hour day month weekday [year])"
                        ),
                    )
                )
        if payload.items and (
            payload.items[0].source_connection_id == payload.items[0].target_connection_id
        ):
            warnings.append(
                FieldError(
                    field="targetConnectorID",
                    message="Source and target connectors are the same",
                )
            )
        return warnings


def _invalid_pattern(pattern: str) -> FieldError:
    return FieldError(
        field="ingestionPattern",
        message=f"Invalid ingestion pattern: {pattern!r}",
        suggestions=[f"Use one of: {', '.join(_PATTERNS)}"],
    )
