"""Built-in pipeline draft templates with ``{VARIABLE}`` placeholders.

Each template is a pipeline draft in the same shape ``pipelines enrich``
reads, so a generated draft can be enriched or submitted as is.  Values are
filled in by plain text substitution; placeholders without a value are left
untouched.
"""

from __future__ import annotations

import copy
import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from databasin.errors import NotFoundError, ValidationError
from databasin.models.errors import FieldError, ValidationResult

_VARIABLE = re.compile(r"\{([^{}]+)\}")


@dataclass(frozen=True)
class PipelineTemplate:
    name: str
    description: str
    source_type: str
    target_type: str
    config: dict[str, Any]

    @property
    def variables(self) -> list[str]:
        return find_template_variables(self.config)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "sourceType": self.source_type,
            "targetType": self.target_type,
            "variables": self.variables,
            "config": copy.deepcopy(self.config),
        }


def _table_item(ingestion_type: str, **extra: Any) -> dict[str, Any]:
    return {
        "sourceSchemaName": "{SOURCE_SCHEMA}",
        "sourceTableName": "{SOURCE_TABLE}",
        "targetTableName": "{TARGET_TABLE}",
        "ingestionType": ingestion_type,
        **extra,
    }


def _draft(name: str, schedule: str, items: list[dict[str, Any]], **extra: Any) -> dict[str, Any]:
    return {
        "pipelineName": name,
        "sourceConnectorID": "{SOURCE_ID}",
        "targetConnectorID": "{TARGET_ID}",
        **extra,
        "jobDetails": {"jobRunSchedule": schedule},
        "items": items,
    }


PIPELINE_TEMPLATES: list[PipelineTemplate] = [
    PipelineTemplate(
        name="postgres-to-snowflake",
        description="PostgreSQL to Snowflake data warehouse sync with incremental updates",
        source_type="PostgreSQL",
        target_type="Snowflake",
        config=_draft(
            "{SOURCE_NAME} to {TARGET_NAME}",
            "0 2 * * *",
            [_table_item("delta", mergeColumns=["id"], watermarkColumnName=["updated_at"])],
            sourceCatalog="{SOURCE_CATALOG}",
            targetSchemaName="{TARGET_SCHEMA}",
        ),
    ),
    PipelineTemplate(
        name="mysql-to-s3",
        description="MySQL to S3 data lake export with full refreshes",
        source_type="MySQL",
        target_type="S3",
        config=_draft(
            "{SOURCE_NAME} to {TARGET_NAME} Data Lake",
            "0 6 * * *",
            [_table_item("snapshot", replaceTable=True)],
            ingestionPattern="datalake",
            targetSchemaName="{TARGET_SCHEMA}",
        ),
    ),
    PipelineTemplate(
        name="salesforce-to-postgres",
        description="Salesforce to PostgreSQL CRM data sync",
        source_type="Salesforce",
        target_type="PostgreSQL",
        config=_draft(
            "Salesforce {SALESFORCE_OBJECT} to {TARGET_NAME}",
            "0 */6 * * *",
            [
                {
                    "sourceTableName": "{SALESFORCE_OBJECT}",
                    "targetTableName": "{TARGET_TABLE}",
                    "ingestionType": "delta",
                    "mergeColumns": ["Id"],
                }
            ],
            targetCatalogName="{TARGET_CATALOG}",
            targetSchemaName="{TARGET_SCHEMA}",
        ),
    ),
    PipelineTemplate(
        name="api-to-snowflake",
        description="REST API resource to Snowflake, loaded hourly",
        source_type="REST API",
        target_type="Snowflake",
        config=_draft(
            "{API_NAME} to {TARGET_NAME}",
            "0 * * * *",
            [
                {
                    "sourceObjectName": "{API_RESOURCE}",
                    "targetTableName": "{TARGET_TABLE}",
                    "ingestionType": "snapshot",
                }
            ],
            targetSchemaName="{TARGET_SCHEMA}",
        ),
    ),
    PipelineTemplate(
        name="postgres-to-redshift",
        description="PostgreSQL to Amazon Redshift data warehouse",
        source_type="PostgreSQL",
        target_type="Redshift",
        config=_draft(
            "{SOURCE_NAME} to Redshift",
            "0 3 * * *",
            [_table_item("snapshot", replaceTable=True)],
            sourceCatalog="{SOURCE_CATALOG}",
            targetCatalogName="{TARGET_CATALOG}",
            targetSchemaName="{TARGET_SCHEMA}",
        ),
    ),
    PipelineTemplate(
        name="mongodb-to-postgres",
        description="MongoDB to PostgreSQL with document flattening",
        source_type="MongoDB",
        target_type="PostgreSQL",
        config=_draft(
            "{COLLECTION} to {TARGET_NAME}",
            "0 4 * * *",
            [
                {
                    "sourceSchemaName": "{SOURCE_DATABASE}",
                    "sourceTableName": "{COLLECTION}",
                    "targetTableName": "{TARGET_TABLE}",
                    "ingestionType": "delta",
                    "mergeColumns": ["_id"],
                    "autoExplode": True,
                }
            ],
            targetCatalogName="{TARGET_CATALOG}",
            targetSchemaName="{TARGET_SCHEMA}",
        ),
    ),
    PipelineTemplate(
        name="csv-to-databricks",
        description="CSV file drop to a Databricks delta table",
        source_type="S3",
        target_type="Databricks",
        config=_draft(
            "CSV Import to {TARGET_NAME}",
            "0 8 * * *",
            [
                {
                    "sourceFileName": "{FILE_PATH}",
                    "sourceFileFormat": "csv",
                    "sourceFileDelimiter": ",",
                    "containsHeader": True,
                    "targetTableName": "{TARGET_TABLE}",
                    "ingestionType": "snapshot",
                    "replaceTable": True,
                }
            ],
            targetCatalogName="{TARGET_CATALOG}",
            targetSchemaName="{TARGET_SCHEMA}",
        ),
    ),
    PipelineTemplate(
        name="realtime-cdc",
        description="Change data capture from PostgreSQL every 15 minutes",
        source_type="PostgreSQL",
        target_type="Snowflake",
        config=_draft(
            "{SOURCE_TABLE} CDC Stream",
            "*/15 * * * *",
            [
                _table_item(
                    "cdc",
                    mergeColumns=["{PRIMARY_KEY}"],
                    watermarkColumnName=["{CDC_COLUMN}"],
                )
            ],
            sourceCatalog="{SOURCE_CATALOG}",
            targetSchemaName="{TARGET_SCHEMA}",
        ),
    ),
    PipelineTemplate(
        name="weekly-batch",
        description="Weekly batch reload, Sundays at 02:00",
        source_type="PostgreSQL",
        target_type="Snowflake",
        config=_draft(
            "Weekly {SOURCE_TABLE} Batch",
            "0 2 * * 0",
            [_table_item("snapshot", replaceTable=True)],
            sourceCatalog="{SOURCE_CATALOG}",
            targetSchemaName="{TARGET_SCHEMA}",
        ),
    ),
    PipelineTemplate(
        name="multi-table-sync",
        description="Sync multiple tables from source to target",
        source_type="PostgreSQL",
        target_type="Snowflake",
        config=_draft(
            "{SOURCE_NAME} Multi-Table Sync",
            "0 1 * * *",
            [
                {
                    "sourceSchemaName": "{SOURCE_SCHEMA}",
                    "sourceTableName": f"{{TABLE_{n}}}",
                    "targetTableName": f"{{TABLE_{n}}}",
                    "ingestionType": "delta",
                    "mergeColumns": ["id"],
                    "watermarkColumnName": ["updated_at"],
                }
                for n in (1, 2, 3)
            ],
            sourceCatalog="{SOURCE_CATALOG}",
            targetSchemaName="{TARGET_SCHEMA}",
        ),
    ),
]

VARIABLE_HINTS: dict[str, str] = {
    "SOURCE_ID": "source connector ID",
    "TARGET_ID": "target connector ID",
    "SOURCE_NAME": "source connector name",
    "TARGET_NAME": "target connector name",
    "SOURCE_CATALOG": "source catalog/database name",
    "TARGET_CATALOG": "target catalog/database name",
    "SOURCE_SCHEMA": "source schema name",
    "TARGET_SCHEMA": "target schema name",
    "SOURCE_TABLE": "source table name",
    "TARGET_TABLE": "target table name",
    "TABLE_1": "first table name",
    "TABLE_2": "second table name",
    "TABLE_3": "third table name",
    "FILE_PATH": "file path or pattern",
    "API_NAME": "API name or service",
    "API_RESOURCE": "API resource or endpoint name",
    "PRIMARY_KEY": "primary key column",
    "CDC_COLUMN": "CDC/timestamp column",
    "SALESFORCE_OBJECT": "Salesforce object name",
    "COLLECTION": "MongoDB collection name",
    "SOURCE_DATABASE": "source database name",
}


def find_template(name: str) -> PipelineTemplate | None:
    """Look a template up by name, ignoring case and surrounding whitespace."""
    wanted = name.strip().lower()
    return next((t for t in PIPELINE_TEMPLATES if t.name == wanted), None)


def list_templates(connector_type: str | None = None) -> list[PipelineTemplate]:
    """All templates, or those whose source or target type contains *connector_type*."""
    if not connector_type:
        return list(PIPELINE_TEMPLATES)
    wanted = connector_type.lower()
    return [
        t
        for t in PIPELINE_TEMPLATES
        if wanted in t.source_type.lower() or wanted in t.target_type.lower()
    ]


def find_template_variables(config: Any) -> list[str]:
    """Sorted, de-duplicated placeholder names found anywhere in *config*."""
    found: set[str] = set()

    def visit(value: Any) -> None:
        if isinstance(value, str):
            found.update(_VARIABLE.findall(value))
        elif isinstance(value, Mapping):
            for inner in value.values():
                visit(inner)
        elif isinstance(value, list):
            for inner in value:
                visit(inner)

    visit(config)
    return sorted(found)


def substitute_variables(config: Any, variables: Mapping[str, str]) -> Any:
    """Return a copy of *config* with every known ``{NAME}`` replaced by its value."""
    if isinstance(config, str):
        return _VARIABLE.sub(lambda m: variables.get(m.group(1), m.group(0)), config)
    if isinstance(config, Mapping):
        return {key: substitute_variables(value, variables) for key, value in config.items()}
    if isinstance(config, list):
        return [substitute_variables(value, variables) for value in config]
    return config


def validate_template(
    template: PipelineTemplate, variables: Mapping[str, str]
) -> ValidationResult:
    errors: list[FieldError] = []
    missing = [name for name in template.variables if not variables.get(name)]
    if missing:
        errors.append(
            FieldError(
                field="variables",
                message=f"Missing required variables: {', '.join(missing)}",
                suggestions=[f"Pass --var {name}=<value>" for name in missing],
            )
        )
    empty = [name for name, value in variables.items() if not value or not value.strip()]
    if empty:
        errors.append(
            FieldError(
                field="variables",
                message=f"Empty values for variables: {', '.join(empty)}",
            )
        )
    return ValidationResult(valid=not errors, errors=errors)


def get_template(name: str) -> PipelineTemplate:
    """Like :func:`find_template` but raises :class:`NotFoundError` for unknown names."""
    template = find_template(name)
    if template is None:
        raise NotFoundError(
            f'Template "{name}" not found',
            field="template",
            suggestions=[
                f"Available templates: {', '.join(t.name for t in PIPELINE_TEMPLATES)}",
                "Run 'databasin pipelines template list'",
            ],
        )
    return template


def generate_from_template(name: str, variables: Mapping[str, str]) -> dict[str, Any]:
    """Fill in template *name* and return the resulting pipeline draft."""
    template = get_template(name)
    result = validate_template(template, variables)
    if not result.valid:
        details = "\n".join(f"  - {e.message}" for e in result.errors)
        raise ValidationError(
            f"Template validation failed:\n{details}",
            field="variables",
            suggestions=[s for e in result.errors for s in e.suggestions],
            errors=result.errors,
        )
    return substitute_variables(template.config, variables)
