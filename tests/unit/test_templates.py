"""Tests for the built-in pipeline draft templates."""

from __future__ import annotations

import pytest

from databasin.enrichment.pipeline import PipelineEnrichmentOrchestrator
from databasin.enrichment.templates import (
    PIPELINE_TEMPLATES,
    VARIABLE_HINTS,
    PipelineTemplate,
    find_template,
    find_template_variables,
    generate_from_template,
    get_template,
    list_templates,
    substitute_variables,
    validate_template,
)
from databasin.errors import NotFoundError, ValidationError
from databasin.models.pipeline import PipelineDraft
from tests.conftest import FakeBackend


def _values(names: list[str]) -> dict[str, str]:
    return {name: name.lower() for name in names}


class TestLookup:
    def test_names_are_unique(self) -> None:
        names = [t.name for t in PIPELINE_TEMPLATES]
        assert len(names) == len(set(names))

    def test_find_ignores_case_and_whitespace(self) -> None:
        template = find_template("  Postgres-To-Snowflake ")
        assert template is not None
        assert template.target_type == "Snowflake"

    def test_find_unknown(self) -> None:
        assert find_template("nope") is None

    def test_get_unknown_lists_available(self) -> None:
        with pytest.raises(NotFoundError) as exc_info:
            get_template("nope")
        err = exc_info.value
        assert err.field == "template"
        assert 'Template "nope" not found' in err.message
        assert "postgres-to-snowflake" in err.suggestions[0]

    def test_list_all(self) -> None:
        assert len(list_templates()) == len(PIPELINE_TEMPLATES)

    def test_list_filters_source_or_target(self) -> None:
        names = {t.name for t in list_templates("postgres")}
        assert "postgres-to-snowflake" in names
        assert "salesforce-to-postgres" in names
        assert "api-to-snowflake" not in names

    def test_list_filter_without_matches(self) -> None:
        assert list_templates("kafka") == []

    def test_every_variable_has_a_hint(self) -> None:
        for template in PIPELINE_TEMPLATES:
            assert set(template.variables) <= set(VARIABLE_HINTS), template.name


class TestVariables:
    def test_nested_sorted_unique(self) -> None:
        config = {
            "name": "{SOURCE_NAME} to {TARGET_NAME}",
            "items": [{"table": "{SOURCE_NAME}"}, {"keys": ["{ID}"]}],
            "enabled": True,
        }
        assert find_template_variables(config) == ["ID", "SOURCE_NAME", "TARGET_NAME"]

    def test_no_variables(self) -> None:
        assert find_template_variables({"schedule": "0 2 * * *", "n": 3}) == []

    def test_substitution_is_recursive(self) -> None:
        config = {"name": "{A} to {B}", "items": [{"keys": ["{A}"]}], "flag": True}
        assert substitute_variables(config, {"A": "pg", "B": "sf"}) == {
            "name": "pg to sf",
            "items": [{"keys": ["pg"]}],
            "flag": True,
        }

    def test_unknown_placeholders_kept(self) -> None:
        assert substitute_variables("{A}-{B}", {"A": "x"}) == "x-{B}"

    def test_values_with_quotes_and_braces(self) -> None:
        assert substitute_variables({"v": "{A}"}, {"A": 'say "hi" {B}'}) == {"v": 'say "hi" {B}'}

    def test_template_left_untouched(self) -> None:
        template = get_template("weekly-batch")
        before = template.to_dict()
        substitute_variables(template.config, _values(template.variables))
        assert template.to_dict() == before


class TestValidateTemplate:
    def test_complete(self) -> None:
        template = get_template("mysql-to-s3")
        assert validate_template(template, _values(template.variables)).valid

    def test_missing_variables(self) -> None:
        result = validate_template(get_template("mysql-to-s3"), {"SOURCE_ID": "1"})
        assert not result.valid
        (error,) = result.errors
        assert error.field == "variables"
        assert error.message.startswith("Missing required variables: SOURCE_NAME")
        assert "SOURCE_ID" not in error.message

    def test_blank_values(self) -> None:
        template = get_template("mysql-to-s3")
        values = {**_values(template.variables), "TARGET_NAME": "  "}
        result = validate_template(template, values)
        assert [e.message for e in result.errors] == ["Empty values for variables: TARGET_NAME"]


class TestGenerate:
    def test_generate(self) -> None:
        template = get_template("postgres-to-snowflake")
        values = {
            **_values(template.variables),
            "SOURCE_NAME": "Production DB",
            "TARGET_NAME": "Warehouse",
            "SOURCE_ID": "101",
            "TARGET_ID": "202",
        }
        draft = generate_from_template("postgres-to-snowflake", values)
        assert draft["pipelineName"] == "Production DB to Warehouse"
        assert draft["sourceConnectorID"] == "101"
        assert draft["jobDetails"] == {"jobRunSchedule": "0 2 * * *"}
        assert draft["items"][0]["sourceTableName"] == "source_table"
        assert find_template_variables(draft) == []

    def test_generate_unknown(self) -> None:
        with pytest.raises(NotFoundError):
            generate_from_template("nope", {})

    def test_generate_missing_variables(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            generate_from_template("realtime-cdc", {"SOURCE_ID": "101"})
        err = exc_info.value
        assert not isinstance(err, NotFoundError)
        assert err.field == "variables"
        assert err.message.startswith("Template validation failed:")
        assert "Pass --var CDC_COLUMN=<value>" in err.suggestions

    @pytest.mark.parametrize("template", PIPELINE_TEMPLATES, ids=lambda t: t.name)
    def test_every_template_yields_a_draft(self, template: PipelineTemplate) -> None:
        variables = {
            **_values(template.variables),
            "SOURCE_ID": "101",
            "TARGET_ID": "202",
        }
        draft = generate_from_template(template.name, variables)
        parsed = PipelineDraft.model_validate(draft)
        assert parsed.items
        assert parsed.job_details is not None

    async def test_generated_draft_enriches(self) -> None:
        template = get_template("multi-table-sync")
        draft = generate_from_template(
            template.name,
            {**_values(template.variables), "SOURCE_ID": "101", "TARGET_ID": "202"},
        )
        draft.update(institutionID=7, internalID="N1r8Do", ownerID=42)
        wire = (await PipelineEnrichmentOrchestrator(FakeBackend()).enrich(draft)).to_wire()
        assert [i["sourceTableName"] for i in wire["items"]] == ["table_1", "table_2", "table_3"]
        assert wire["jobDetails"]["jobRunSchedule"] == "0 1 * * *"
        assert wire["items"][0]["mergeColumns"] == ["id"]
