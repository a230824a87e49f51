"""Pipeline endpoints, including enrichment-backed creation."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from databasin.client.base import DatabasinClient
from databasin.client.bulk import BulkResult, fetch_bulk
from databasin.enrichment.pipeline import PipelineEnrichmentOrchestrator
from databasin.errors import NotFoundError, ValidationError
from databasin.models.pipeline import EnrichedPayload, PipelineDraft

logger = logging.getLogger("databasin.client")


class PipelinesClient:
    """Pipeline CRUD plus the platform calls the enrichment engine needs.

    Implements :class:`~databasin.enrichment.resolver.ConnectorBackend`.
    """

    def __init__(self, client: DatabasinClient) -> None:
        self._client = client

    # -- enrichment backend --------------------------------------------------

    async def fetch_connector(self, connector_id: int | str) -> Any:
        return await self._client.get(f"/api/connector/{connector_id}")

    async def fetch_current_account_email(self) -> str | None:
        account = await self._client.get("/api/my/account")
        if isinstance(account, dict):
            return account.get("email") or None
        return None

    # -- creation ------------------------------------------------------------

    async def enrich(self, draft: PipelineDraft | Mapping[str, Any]) -> EnrichedPayload:
        """Build the full creation payload without submitting it."""
        return await PipelineEnrichmentOrchestrator(self).enrich(draft)

    async def create(self, draft: PipelineDraft | Mapping[str, Any]) -> Any:
        payload = await self.enrich(draft)
        return await self._client.post("/api/pipeline", payload.to_wire())

    # -- reads ---------------------------------------------------------------

    async def list(
        self,
        project_id: str,
        *,
        status: str | None = None,
        enabled: bool | None = None,
        source_connector_id: str | None = None,
        target_connector_id: str | None = None,
        include_artifacts: bool | None = None,
        count: bool = False,
        fields: str | None = None,
        limit: int | None = None,
    ) -> Any:
        """List a project's pipelines.

        The endpoint needs the project's internal id, its institution and the
        caller's user id, so the project and account are looked up first.
        """
        if not project_id or not project_id.strip():
            raise ValidationError(
                "projectId is required for listing pipelines",
                field="projectId",
                suggestions=["Provide a valid project internal ID (e.g. \"N1r8Do\")"],
            )
        project_id = project_id.strip()

        projects = await self._client.get("/api/my/projects") or []
        project = next(
            (
                p
                for p in projects
                if str(p.get("id")) == project_id or p.get("internalId") == project_id
            ),
            None,
        )
        if project is None:
            raise NotFoundError(
                f"Project not found: {project_id}",
                field="projectId",
                suggestions=[
                    "The specified project does not exist or you do not have access to it"
                ],
            )
        if not project.get("institutionId"):
            raise ValidationError(
                "Project is missing institutionID",
                field="institutionId",
                suggestions=["The project does not have a valid institution ID"],
            )

        user = await self._client.get("/api/my/account") or {}
        if not user.get("id"):
            raise ValidationError(
                "User account is missing ID",
                field="userId",
                suggestions=["Cannot determine current user ID"],
            )

        params = {
            "internalID": project.get("internalId"),
            "institutionID": project["institutionId"],
            "ownerID": user["id"],
            "status": status,
            "enabled": enabled,
            "sourceConnectorId": source_connector_id,
            "targetConnectorId": target_connector_id,
            "includeArtifacts": include_artifacts,
        }
        return await self._client.get(
            "/api/pipeline", params, count=count, fields=fields, limit=limit
        )

    async def get_by_id(self, pipeline_id: int | str) -> Any:
        # /api/pipeline/{id} does not exist; v2 is the single-pipeline read
        return await self._client.get(f"/api/pipeline/v2/{pipeline_id}")

    async def get_many(self, ids: Sequence[str]) -> list[BulkResult]:
        return await fetch_bulk(
            ids, self.get_by_id, concurrency=self._client.settings.bulk_concurrency
        )

    # -- writes --------------------------------------------------------------

    async def update(self, pipeline_id: int | str, data: dict[str, Any]) -> Any:
        return await self._client.put(f"/api/pipeline/{pipeline_id}", data)

    async def delete(self, pipeline_id: int | str) -> Any:
        return await self._client.delete(f"/api/pipeline/{pipeline_id}")

    async def run(self, pipeline_id: int | str) -> Any:
        """Trigger a manual run using the ids stored on the pipeline."""
        pipeline = await self.get_by_id(pipeline_id) or {}
        for key, what in (
            ("institutionID", "institution ID"),
            ("internalID", "project ID"),
            ("ownerID", "owner ID"),
        ):
            if not pipeline.get(key):
                raise ValidationError(
                    f"Pipeline is missing {key}",
                    field=key,
                    suggestions=[f"The pipeline does not have a valid {what}"],
                )

        body = {
            "pipelineID": int(pipeline_id),
            "institutionID": pipeline["institutionID"],
            "internalID": pipeline["internalID"],
            "ownerID": pipeline["ownerID"],
            "jobName": pipeline.get("pipelineName") or f"Pipeline_{pipeline_id}",
            "runType": "manual",
        }
        logger.debug("Running pipeline %s", pipeline_id)
        return await self._client.post("/api/pipeline/run", body)

    async def add_artifact(self, pipeline_id: int | str, artifact: dict[str, Any]) -> Any:
        return await self._client.post(f"/api/pipeline/{pipeline_id}/artifacts", artifact)

    async def remove_artifact(self, pipeline_id: int | str, artifact_id: int | str) -> Any:
        return await self._client.delete(f"/api/pipeline/{pipeline_id}/artifacts/{artifact_id}")
