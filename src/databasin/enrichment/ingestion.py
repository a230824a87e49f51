"""Ingestion-pattern detection and the naming/catalog defaults that follow from it."""

from __future__ import annotations

from dataclasses import dataclass

from databasin.models.pipeline import IngestionPattern

# Targets that favor schema-qualified datalake layouts.
DATALAKE_TECHNOLOGIES = frozenset({"databricks", "snowflake", "lakehouse"})


@dataclass
class IngestionSettings:
    pattern: str
    source_naming_convention: bool
    create_catalogs: bool


def detect_ingestion_pattern(target_technology: str | None, override: str | None = None) -> str:
    """Pick ``datalake`` or ``data warehouse`` from the target technology.

    An explicit *override* wins unconditionally; it is returned as given and
    checked later by the payload validator.
    """
    if override:
        return override
    if target_technology and target_technology.lower() in DATALAKE_TECHNOLOGIES:
        return IngestionPattern.DATALAKE.value
    return IngestionPattern.DATA_WAREHOUSE.value


def resolve_ingestion(
    target_technology: str | None,
    override: str | None = None,
    source_naming_convention: bool | None = None,
    create_catalogs: bool | None = None,
) -> IngestionSettings:
    """Detect the pattern, then default the two dependent flags.

    Datalake targets keep source names off and create catalogs; every other
    pattern inverts both.  Explicit flags always win.
    """
    pattern = detect_ingestion_pattern(target_technology, override)
    is_datalake = pattern == IngestionPattern.DATALAKE
    return IngestionSettings(
        pattern=pattern,
        source_naming_convention=(
            (not is_datalake) if source_naming_convention is None else source_naming_convention
        ),
        create_catalogs=is_datalake if create_catalogs is None else create_catalogs,
    )
