"""Orchestrates enrichment: draft, connectors, pattern, job, artifacts, validation."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from enum import StrEnum
from typing import Any

import pydantic

from databasin.enrichment.artifacts import ArtifactContext, ArtifactEnricher
from databasin.enrichment.classifier import classify_artifact_type, classify_technology
from databasin.enrichment.ingestion import resolve_ingestion
from databasin.enrichment.jobs import build_job_details
from databasin.enrichment.resolver import ConnectorBackend, ConnectorCache, ConnectorResolver
from databasin.enrichment.validator import PayloadValidator, parse_connector_id
from databasin.errors import ValidationError
from databasin.models.errors import FieldError
from databasin.models.pipeline import EnrichedPayload, PipelineDraft

logger = logging.getLogger("databasin.enrichment")


class EnrichmentState(StrEnum):
    IDLE = "idle"
    CONNECTORS_RESOLVING = "connectors_resolving"
    PATTERN_DETECTING = "pattern_detecting"
    JOB_DEFAULTING = "job_defaulting"
    ARTIFACTS_ENRICHING = "artifacts_enriching"
    VALIDATING = "validating"
    DONE = "done"
    FAILED = "failed"


class PipelineEnrichmentOrchestrator:
    """Turns a :class:`PipelineDraft` into a validated :class:`EnrichedPayload`.

    Each :meth:`enrich` call owns a fresh :class:`ConnectorCache`, emptied on
    the way in and on every way out.  Overlapping runs on one orchestrator
    keep separate caches but share the ``state`` attribute, which then only
    reflects the latest transition.
    """

    def __init__(
        self,
        backend: ConnectorBackend,
        cache_factory: Callable[[], ConnectorCache] = ConnectorCache,
        validator: PayloadValidator | None = None,
    ) -> None:
        self._backend = backend
        self._cache_factory = cache_factory
        self._validator = validator or PayloadValidator()
        self.state = EnrichmentState.IDLE
        self.transitions: list[EnrichmentState] = []

    async def enrich(self, draft: PipelineDraft | Mapping[str, Any]) -> EnrichedPayload:
        self.transitions = []
        self._enter(EnrichmentState.IDLE)
        try:
            payload = await self._run(_coerce_draft(draft))
        except BaseException:
            self._enter(EnrichmentState.FAILED)
            raise
        self._enter(EnrichmentState.DONE)
        logger.debug("Enriched payload: %s", payload.model_dump_json(by_alias=True))
        return payload

    async def _run(self, draft: PipelineDraft) -> EnrichedPayload:
        problems = self._validator.check_draft(draft)
        if problems:
            raise ValidationError.aggregate(problems)

        source_id = parse_connector_id(draft.source_connector_id)
        target_id = parse_connector_id(draft.target_connector_id)
        assert source_id is not None and target_id is not None  # for type narrowing

        with self._cache_factory() as cache:
            resolver = ConnectorResolver(self._backend, cache)

            # Phase 1: connectors must exist and be active
            self._enter(EnrichmentState.CONNECTORS_RESOLVING)
            source = await resolver.validate(source_id, "source")
            target = await resolver.validate(target_id, "target")
            connector_technology = classify_technology(source)

            # Phase 2: ingestion pattern from the target's technology
            self._enter(EnrichmentState.PATTERN_DETECTING)
            ingestion = resolve_ingestion(
                target.sub_type,
                override=draft.ingestion_pattern,
                source_naming_convention=draft.source_naming_convention,
                create_catalogs=draft.create_catalogs,
            )

            # Phase 3: job defaults (email lookup is best effort)
            self._enter(EnrichmentState.JOB_DEFAULTING)
            email = await self._account_email()
            job_errors: list[FieldError] = []
            try:
                job_details = build_job_details(draft.job_details, email)
            except ValidationError as exc:
                # Reported with the phase 5 findings; defaults stand in until then.
                job_errors = exc.errors
                job_details = build_job_details(None, email)

            # Phase 4: artifacts, typed by the source connector
            self._enter(EnrichmentState.ARTIFACTS_ENRICHING)
            items = []
            if draft.items:
                artifact_type = classify_artifact_type(await resolver.resolve(source_id))
                enricher = ArtifactEnricher(
                    ArtifactContext(
                        source_connection_id=source_id,
                        target_connection_id=target_id,
                        artifact_type=artifact_type,
                        source_catalog=draft.source_catalog,
                        target_catalog_name=draft.target_catalog_name,
                        target_schema_name=draft.target_schema_name,
                    )
                )
                items = enricher.enrich(draft.items)

            payload = EnrichedPayload(
                institution_id=draft.institution_id,
                internal_id=draft.internal_id,
                owner_id=draft.owner_id,
                pipeline_name=draft.pipeline_name,
                is_private=0 if draft.is_private is None else draft.is_private,
                source_naming_convention=ingestion.source_naming_convention,
                ingestion_pattern=ingestion.pattern,
                create_catalogs=ingestion.create_catalogs,
                connector_technology=connector_technology,
                target_catalog_name=draft.target_catalog_name or "",
                target_schema_name=draft.target_schema_name or "",
                job_details=job_details,
                items=items,
            )

            # Phase 5: everything the platform would reject, reported at once
            self._enter(EnrichmentState.VALIDATING)
            result = self._validator.validate(payload)
            errors = [*result.errors, *job_errors]
            if errors:
                raise ValidationError.aggregate(errors)

        return payload

    async def _account_email(self) -> str | None:
        try:
            return await self._backend.fetch_current_account_email()
        except Exception:
            logger.debug("Account email lookup failed, continuing without it", exc_info=True)
            return None

    def _enter(self, state: EnrichmentState) -> None:
        logger.debug("Enrichment state: %s -> %s", self.state, state)
        self.state = state
        self.transitions.append(state)


def _coerce_draft(draft: PipelineDraft | Mapping[str, Any]) -> PipelineDraft:
    if isinstance(draft, PipelineDraft):
        return draft
    try:
        return PipelineDraft.model_validate(dict(draft))
    except pydantic.ValidationError as exc:
        raise ValidationError.from_pydantic(exc) from exc
