"""Tests for draft and payload validation."""

from __future__ import annotations

from typing import Any

import pytest

from databasin.enrichment.jobs import build_job_details
from databasin.enrichment.validator import PayloadValidator, parse_connector_id
from databasin.models.pipeline import EnrichedArtifact, EnrichedPayload, PipelineDraft
from tests.conftest import make_draft


def _item(**overrides: Any) -> EnrichedArtifact:
    fields: dict[str, Any] = {
        "sourceTableName": "orders",
        "ingestionType": "snapshot",
        "sourceConnectionID": 101,
        "targetConnectionID": 202,
        "artifactType": 1,
    }
    fields.update(overrides)
    return EnrichedArtifact.model_validate(fields)


def _payload(**overrides: Any) -> EnrichedPayload:
    fields: dict[str, Any] = {
        "institutionID": 7,
        "internalID": "N1r8Do",
        "ownerID": 42,
        "pipelineName": "orders-nightly",
        "sourceNamingConvention": False,
        "ingestionPattern": "datalake",
        "createCatalogs": True,
        "connectorTechnology": ["mysql"],
        "targetSchemaName": "raw",
        "jobDetails": build_job_details(None),
        "items": [_item()],
    }
    fields.update(overrides)
    return EnrichedPayload.model_validate(fields)


@pytest.fixture
def validator() -> PayloadValidator:
    return PayloadValidator()


class TestParseConnectorId:
    @pytest.mark.parametrize(("value", "expected"), [(5, 5), ("12", 12), (" 3 ", 3)])
    def test_numeric(self, value: object, expected: int) -> None:
        assert parse_connector_id(value) == expected

    @pytest.mark.parametrize("value", [None, "", "abc", "1.5", True, 2.0])
    def test_not_numeric(self, value: object) -> None:
        assert parse_connector_id(value) is None


class TestCheckDraft:
    def test_valid_draft(self, validator: PayloadValidator) -> None:
        assert validator.check_draft(PipelineDraft.model_validate(make_draft())) == []

    def test_collects_every_missing_field(self, validator: PayloadValidator) -> None:
        errors = validator.check_draft(PipelineDraft())
        assert [e.field for e in errors] == [
            "pipelineName",
            "institutionID",
            "internalID",
            "ownerID",
            "sourceConnectorID",
            "targetConnectorID",
        ]

    def test_blank_name(self, validator: PayloadValidator) -> None:
        errors = validator.check_draft(PipelineDraft.model_validate(make_draft(pipelineName="  ")))
        assert [e.field for e in errors] == ["pipelineName"]

    def test_owner_zero_is_allowed(self, validator: PayloadValidator) -> None:
        assert validator.check_draft(PipelineDraft.model_validate(make_draft(ownerID=0))) == []

    def test_non_numeric_connector_id(self, validator: PayloadValidator) -> None:
        draft = PipelineDraft.model_validate(make_draft(sourceConnectorID="abc"))
        errors = validator.check_draft(draft)
        assert errors[0].field == "sourceConnectorID"
        assert "numeric" in errors[0].message

    def test_invalid_explicit_pattern(self, validator: PayloadValidator) -> None:
        draft = PipelineDraft.model_validate(make_draft(ingestionPattern="lakehouse"))
        assert [e.field for e in validator.check_draft(draft)] == ["ingestionPattern"]


class TestValidatePayload:
    def test_valid(self, validator: PayloadValidator) -> None:
        result = validator.validate(_payload())
        assert result.valid
        assert result.warnings == []

    def test_datalake_needs_schema(self, validator: PayloadValidator) -> None:
        result = validator.validate(_payload(targetSchemaName=""))
        assert not result.valid
        assert result.errors[0].field == "targetSchemaName"
        assert result.errors[0].message == (
            "targetSchemaName is required for datalake ingestion pattern"
        )

    def test_data_warehouse_needs_catalog(self, validator: PayloadValidator) -> None:
        result = validator.validate(_payload(ingestionPattern="data warehouse"))
        assert [e.field for e in result.errors] == ["targetCatalogName"]

    def test_data_warehouse_with_catalog(self, validator: PayloadValidator) -> None:
        payload = _payload(ingestionPattern="data warehouse", targetCatalogName="dw")
        assert validator.validate(payload).valid

    def test_bad_cluster_size(self, validator: PayloadValidator) -> None:
        payload = _payload(jobDetails=build_job_details({"jobClusterSize": "XXL"}))
        assert [e.field for e in validator.validate(payload).errors] == [
            "jobDetails.jobClusterSize"
        ]

    def test_items_required(self, validator: PayloadValidator) -> None:
        result = validator.validate(_payload(items=[]))
        assert [e.field for e in result.errors] == ["items"]

    def test_item_checks(self, validator: PayloadValidator) -> None:
        bad = _item(sourceTableName=None, ingestionType="full")
        result = validator.validate(_payload(items=[_item(), bad]))
        assert [e.field for e in result.errors] == [
            "items[1].sourceTableName",
            "items[1].ingestionType",
        ]

    def test_file_item_needs_no_table(self, validator: PayloadValidator) -> None:
        item = _item(sourceTableName=None, sourceFileName="x.csv", artifactType=3)
        assert validator.validate(_payload(items=[item])).valid

    def test_all_errors_reported_together(self, validator: PayloadValidator) -> None:
        result = validator.validate(_payload(pipelineName="", targetSchemaName="", items=[]))
        assert len(result.errors) == 3

    def test_bad_cron_is_a_warning(self, validator: PayloadValidator) -> None:
        payload = _payload(jobDetails=build_job_details({"jobRunSchedule": "every day"}))
        result = validator.validate(payload)
        assert result.valid
        assert result.warnings[0].field == "jobDetails.jobRunSchedule"

    def test_same_connectors_is_a_warning(self, validator: PayloadValidator) -> None:
        item = _item(targetConnectionID=101)
        result = validator.validate(_payload(items=[item]))
        assert result.valid
        assert "same" in result.warnings[0].message
