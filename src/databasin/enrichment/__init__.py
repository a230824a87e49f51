"""Pipeline configuration enrichment engine."""

from databasin.enrichment.discovery import (
    DiscoveryFlow,
    DiscoveryPattern,
    resolve_discovery_pattern,
    validate_connector_configuration,
)
from databasin.enrichment.pipeline import EnrichmentState, PipelineEnrichmentOrchestrator
from databasin.enrichment.resolver import ConnectorBackend, ConnectorCache, ConnectorResolver
from databasin.enrichment.templates import PipelineTemplate, generate_from_template, list_templates

__all__ = [
    "ConnectorBackend",
    "ConnectorCache",
    "ConnectorResolver",
    "DiscoveryFlow",
    "DiscoveryPattern",
    "EnrichmentState",
    "PipelineEnrichmentOrchestrator",
    "PipelineTemplate",
    "generate_from_template",
    "list_templates",
    "resolve_discovery_pattern",
    "validate_connector_configuration",
]
