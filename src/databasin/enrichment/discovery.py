"""Schema-discovery workflow detection from a connector's required screens.

Connectors publish the ordered list of wizard screens the web app shows for
them.  Two shapes of schema browsing follow from that list:

* ``lakehouse``: pick a database/catalog first, then a schema inside it
  (screens 6 and 7).
* ``rdbms``: a single call lists schemas directly (legacy catalogs screen 1,
  or a schema-only screen 7 for technologies without a catalog concept).
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import IntEnum, StrEnum
from typing import Any

from databasin.errors import ValidationError
from databasin.models.connector import ConnectorConfiguration
from databasin.models.errors import FieldError, ValidationResult


class Screen(IntEnum):
    CATALOGS = 1
    ARTIFACTS = 2
    COLUMNS = 3
    INGESTION_OPTIONS = 4
    FINAL_CONFIGURATION = 5
    DATABASE = 6
    SCHEMA = 7
    API_CONFIGURATION = 8
    API_AUTHENTICATION = 9
    GENERIC_API = 10


DISCOVERY_SCREENS: tuple[Screen, ...] = (Screen.CATALOGS, Screen.DATABASE, Screen.SCHEMA)


class DiscoveryPattern(StrEnum):
    LAKEHOUSE = "lakehouse"
    RDBMS = "rdbms"
    NONE = "none"


@dataclass
class DiscoveryFlow:
    """How schema browsing works for one connector."""

    pattern: DiscoveryPattern
    requires_database: bool
    requires_schema: bool
    screens: list[int] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "pattern": self.pattern.value,
            "requiresDatabase": self.requires_database,
            "requiresSchema": self.requires_schema,
            "screens": list(self.screens),
        }


ConfigLike = ConnectorConfiguration | Mapping[str, Any] | None


def _required_screens(config: ConfigLike) -> Any:
    if config is None:
        return None
    if isinstance(config, ConnectorConfiguration):
        return config.required_screens
    return config.get("pipelineRequiredScreens")


def _screen_list(config: ConfigLike) -> list[Any]:
    screens = _required_screens(config)
    return screens if isinstance(screens, list) else []


# -- pattern detection -------------------------------------------------------


def detect_discovery_pattern(config: ConfigLike) -> DiscoveryPattern:
    """Classify the discovery workflow; first matching rule wins."""
    screens = _screen_list(config)
    if not screens:
        return DiscoveryPattern.NONE

    has_catalogs = Screen.CATALOGS in screens
    has_database = Screen.DATABASE in screens
    has_schema = Screen.SCHEMA in screens

    if has_database and has_schema:
        return DiscoveryPattern.LAKEHOUSE
    if has_catalogs and not has_database and not has_schema:
        return DiscoveryPattern.RDBMS
    # Schema-only connectors (no catalog concept) discover in a single phase
    if has_schema and not has_database:
        return DiscoveryPattern.RDBMS
    return DiscoveryPattern.NONE


def requires_database_selection(config: ConfigLike) -> bool:
    return Screen.DATABASE in _screen_list(config)


def requires_schema_selection(config: ConfigLike) -> bool:
    screens = _screen_list(config)
    return Screen.CATALOGS in screens or Screen.SCHEMA in screens


def discovery_screens(config: ConfigLike) -> list[int]:
    """The discovery-related screens, in the connector's declared order."""
    return [s for s in _screen_list(config) if s in DISCOVERY_SCREENS]


def uses_legacy_discovery(config: ConfigLike) -> bool:
    return detect_discovery_pattern(config) is DiscoveryPattern.RDBMS


def uses_lakehouse_discovery(config: ConfigLike) -> bool:
    return detect_discovery_pattern(config) is DiscoveryPattern.LAKEHOUSE


def resolve_discovery_pattern(config: ConfigLike) -> DiscoveryFlow:
    """Pure, synchronous summary of a connector's discovery workflow."""
    return DiscoveryFlow(
        pattern=detect_discovery_pattern(config),
        requires_database=requires_database_selection(config),
        requires_schema=requires_schema_selection(config),
        screens=discovery_screens(config),
    )


# -- configuration validation -----------------------------------------------

_SCREENS_FIELD = "pipelineRequiredScreens"


def validate_connector_configuration(config: ConfigLike) -> ValidationResult:
    """Check a configuration for hard errors and self-contradictions.

    Structural problems (missing config, missing or malformed screen list,
    non-positive-integer ids) are errors.  Combinations that discover
    poorly but still work are warnings.
    """
    errors: list[FieldError] = []
    warnings: list[FieldError] = []

    if config is None:
        errors.append(FieldError(field="configuration", message="Configuration is missing"))
        return ValidationResult(valid=False, errors=errors)

    name = (
        config.connector_name
        if isinstance(config, ConnectorConfiguration)
        else config.get("connectorName")
    )
    if not name:
        errors.append(
            FieldError(field="connectorName", message="Missing connectorName in configuration")
        )

    screens = _required_screens(config)
    if screens is None:
        errors.append(FieldError(field=_SCREENS_FIELD, message=f"Missing {_SCREENS_FIELD} array"))
        return ValidationResult(valid=False, errors=errors)
    if not isinstance(screens, list):
        errors.append(FieldError(field=_SCREENS_FIELD, message=f"{_SCREENS_FIELD} is not an array"))
        return ValidationResult(valid=False, errors=errors)

    def warn(message: str) -> None:
        warnings.append(FieldError(field=_SCREENS_FIELD, message=message))

    has_catalogs = Screen.CATALOGS in screens
    has_database = Screen.DATABASE in screens
    has_schema = Screen.SCHEMA in screens

    if not screens:
        warn(f"{_SCREENS_FIELD} is empty - connector will have no discovery workflow")
    if has_catalogs and has_database:
        warn(
            "Configuration includes both Screen 1 (RDBMS catalogs) and Screen 6 "
            "(lakehouse database) - lakehouse pattern will take precedence"
        )
    if has_database and not has_schema:
        warn(
            "Screen 6 (database) present without Screen 7 (schema) - "
            "incomplete lakehouse pattern may cause discovery to fail"
        )
    if has_schema and not has_database and not has_catalogs:
        warn(
            "Screen 7 (schema) present without Screen 6 (database) or Screen 1 (catalogs) - "
            "schema selection has no parent screen"
        )
    if Screen.ARTIFACTS in screens and not (has_catalogs or has_schema):
        warn(
            "Screen 2 (artifacts) present without schema selection - "
            "artifact discovery needs schema context"
        )

    invalid = [s for s in screens if not _is_screen_id(s)]
    if invalid:
        errors.append(
            FieldError(
                field=_SCREENS_FIELD,
                message=(
                    f"Invalid screen IDs in {_SCREENS_FIELD}: "
                    f"{', '.join(str(s) for s in invalid)} (screen IDs must be positive integers)"
                ),
            )
        )

    if any(s in screens[:i] for i, s in enumerate(screens)):
        warn(f"{_SCREENS_FIELD} contains duplicate screen IDs - duplicates will be ignored")

    return ValidationResult(valid=not errors, errors=errors, warnings=warnings)


def assert_valid_configuration(config: ConfigLike) -> None:
    """Raise :class:`ValidationError` listing every hard error in *config*."""
    result = validate_connector_configuration(config)
    if not result.valid:
        details = "\n".join(f"  - {e.message}" for e in result.errors)
        raise ValidationError(
            f"Invalid connector configuration:\n{details}",
            field=result.errors[0].field,
            errors=result.errors,
        )


def _is_screen_id(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 1
