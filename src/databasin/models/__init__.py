"""Pydantic models for connectors, pipeline drafts and enriched payloads."""

from databasin.models.connector import ArtifactType, Connector, ConnectorConfiguration
from databasin.models.errors import FieldError, ValidationResult
from databasin.models.pipeline import (
    ClusterSize,
    EnrichedArtifact,
    EnrichedPayload,
    IngestionPattern,
    IngestionType,
    JobDetails,
    PipelineDraft,
)

__all__ = [
    "ArtifactType",
    "ClusterSize",
    "Connector",
    "ConnectorConfiguration",
    "EnrichedArtifact",
    "EnrichedPayload",
    "FieldError",
    "IngestionPattern",
    "IngestionType",
    "JobDetails",
    "PipelineDraft",
    "ValidationResult",
]
