"""Artifact item enrichment: alias normalization, coercion and per-item defaults.

Raw items arrive with whatever field names the author used (several
historical spellings exist for the same value).  :func:`normalize_item`
folds them into one canonical record first; :class:`ArtifactEnricher` then
applies coercion and defaults to that record only.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

import pydantic

from databasin.enrichment.coercion import first_present, parse_bool, parse_int_safe
from databasin.errors import ValidationError
from databasin.models.connector import ArtifactType
from databasin.models.pipeline import EnrichedArtifact

# canonical name -> accepted raw names, first present wins
FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "sourceTableName": ("sourceTableName", "sourceObjectName"),
    "targetTableName": ("targetTableName", "targetObjectName"),
    "sourceSchemaName": ("sourceSchemaName", "sourceSchema"),
    "mergeColumns": ("mergeColumns", "primaryKeys"),
    "watermarkColumnName": ("watermarkColumnName", "timestampColumn", "incrementalColumn"),
}

_ALIAS_ONLY = frozenset(
    {name for names in FIELD_ALIASES.values() for name in names[1:]} | {"columns"}
)

ALL_COLUMNS = "*"
HEADER_FORMATS = ("csv", "txt")
DEFAULT_DELIMITER = ","


def normalize_item(raw: dict[str, Any]) -> dict[str, Any]:
    """Return *raw* with every alias resolved to its canonical name.

    Column lists come back as lists (or ``None`` meaning all columns) and
    the watermark column is always wrapped in a list.
    """
    item = {key: value for key, value in raw.items() if key not in _ALIAS_ONLY}
    for canonical, names in FIELD_ALIASES.items():
        item[canonical] = first_present(raw, *names)
    item["sourceColumnNames"] = _normalize_columns(raw)
    item["watermarkColumnName"] = _normalize_watermark(item["watermarkColumnName"])
    return item


def _normalize_columns(raw: dict[str, Any]) -> Any:
    explicit = first_present(raw, "sourceColumnNames")
    if explicit is not None:
        return explicit if isinstance(explicit, list) else [explicit]

    columns = first_present(raw, "columns")
    if columns is None or columns == ALL_COLUMNS:
        # null tells the platform to take every column
        return None
    if isinstance(columns, str):
        return [c.strip() for c in columns.split(",")]
    return columns


def _normalize_watermark(value: Any) -> list[Any] | None:
    if isinstance(value, list):
        return value
    if isinstance(value, str):
        return [value]
    return None


@dataclass
class ArtifactContext:
    """Pipeline-level values stamped onto every item."""

    source_connection_id: int
    target_connection_id: int
    artifact_type: ArtifactType
    source_catalog: str | None = None
    target_catalog_name: str | None = None
    target_schema_name: str | None = None


class ArtifactEnricher:
    """Turns raw artifact items into :class:`EnrichedArtifact` records."""

    def __init__(self, context: ArtifactContext) -> None:
        self._ctx = context

    def enrich(self, items: Iterable[dict[str, Any]]) -> list[EnrichedArtifact]:
        return [self.enrich_item(raw, index) for index, raw in enumerate(items)]

    def enrich_item(self, raw: dict[str, Any], index: int = 0) -> EnrichedArtifact:
        item = normalize_item(raw)
        ctx = self._ctx

        fields: dict[str, Any] = {
            "source_table_name": item["sourceTableName"],
            "target_table_name": item["targetTableName"],
            "source_schema_name": item["sourceSchemaName"],
            "source_column_names": item["sourceColumnNames"],
            "merge_columns": item["mergeColumns"],
            "watermark_column_name": item["watermarkColumnName"],
            "ingestion_type": item.get("ingestionType"),
            "source_connection_id": ctx.source_connection_id,
            "target_connection_id": ctx.target_connection_id,
            "artifact_type": int(ctx.artifact_type),
            "auto_explode": parse_bool(item.get("autoExplode")),
            "detect_deletes": parse_bool(item.get("detectDeletes")),
            "priority": parse_bool(item.get("priority")),
            "replace_table": parse_bool(item.get("replaceTable")),
            "backload_num_days": parse_int_safe(item.get("backloadNumDays"), 0),
            "snapshot_retention_period": parse_int_safe(item.get("snapshotRetentionPeriod"), 3),
        }

        if ctx.artifact_type == ArtifactType.FILE_API or item.get("sourceFileFormat"):
            fields.update(self._file_fields(item))
        else:
            # Non-file sources have no header row.
            fields["column_header_line_number"] = parse_int_safe(
                item.get("columnHeaderLineNumber"), 0
            )
            fields["contains_header"] = parse_bool(item.get("containsHeader"))

        # Set on every item, even when the pipeline-level values are empty.
        fields["source_database_name"] = item.get("sourceDatabaseName") or ctx.source_catalog or ""
        fields["target_database_name"] = (
            item.get("targetDatabaseName") or ctx.target_catalog_name or ""
        )
        fields["target_schema_name"] = item.get("targetSchemaName") or ctx.target_schema_name or ""

        try:
            return EnrichedArtifact.model_validate(fields)
        except pydantic.ValidationError as exc:
            raise ValidationError.from_pydantic(exc, prefix=f"items[{index}].") from exc

    @staticmethod
    def _file_fields(item: dict[str, Any]) -> dict[str, Any]:
        raw_header = item.get("containsHeader")
        raw_line = item.get("columnHeaderLineNumber")
        file_format = item.get("sourceFileFormat")
        delimiter = item.get("sourceFileDelimiter") or None

        contains_header = parse_bool(True if raw_header is None else raw_header)
        if raw_line is not None:
            line_number = parse_int_safe(raw_line, 1)
        else:
            line_number = 1 if contains_header else 0

        if file_format in HEADER_FORMATS:
            # Delimited text always gets its defaults, whatever ran before.
            if not delimiter:
                delimiter = DEFAULT_DELIMITER
            if raw_header is None:
                contains_header = True
            if raw_line is None:
                line_number = 1 if contains_header else 0

        return {
            "contains_header": contains_header,
            "column_header_line_number": line_number,
            "source_file_name": item.get("sourceFileName") or None,
            "source_file_format": file_format or None,
            "source_file_delimiter": delimiter,
        }
