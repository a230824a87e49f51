"""Exception taxonomy for the Databasin client and enrichment engine."""

from __future__ import annotations

import re
from collections.abc import Iterable
from typing import Any

import pydantic

from databasin.models.errors import FieldError


class DatabasinError(Exception):
    """Base class for all errors surfaced to CLI users."""

    exit_code: int = 1

    def __init__(self, message: str, suggestion: str | None = None) -> None:
        self.message = message
        self.suggestion = suggestion
        super().__init__(message)


class ValidationError(DatabasinError):
    """Caller-fixable input problem, tagged with the offending field.

    ``errors`` holds every finding when several problems were aggregated into
    one error; a single-field error carries a one-element list.
    """

    def __init__(
        self,
        message: str,
        field: str | None = None,
        suggestions: list[str] | None = None,
        errors: list[FieldError] | None = None,
    ) -> None:
        self.field = field
        self.suggestions = suggestions or []
        if errors is None:
            errors = [FieldError(field=field or "", message=message, suggestions=self.suggestions)]
        self.errors = errors
        super().__init__(message, suggestion=_build_suggestion(self.suggestions))

    @property
    def fields(self) -> list[str]:
        """Names of every offending field, in report order."""
        return [e.field for e in self.errors if e.field]

    @classmethod
    def aggregate(cls, errors: list[FieldError]) -> ValidationError:
        """Fold several findings into one multi-line error."""
        if len(errors) == 1:
            only = errors[0]
            return cls(only.message, field=only.field, suggestions=only.suggestions)
        lines = [f"Pipeline configuration has {len(errors)} validation errors:"]
        lines.extend(f"  - {e}" for e in errors)
        suggestions = [s for e in errors for s in e.suggestions]
        return cls(
            "\n".join(lines),
            field=errors[0].field,
            suggestions=suggestions,
            errors=errors,
        )

    @classmethod
    def from_pydantic(cls, exc: pydantic.ValidationError, prefix: str = "") -> ValidationError:
        """Convert a pydantic parse failure into field-tagged findings."""
        findings = []
        for err in exc.errors():
            path = ".".join(str(part) for part in err["loc"])
            field = f"{prefix}{path}" if path else prefix.rstrip(".")
            findings.append(FieldError(field=field, message=err["msg"]))
        return cls.aggregate(findings)


class NotFoundError(ValidationError):
    """The referenced entity does not exist on the platform."""


class UnsupportedConnectorError(ValidationError):
    """Raised when a connector subtype is not in the technology table."""

    def __init__(self, subtype: str, available: list[str]) -> None:
        self.subtype = subtype
        self.available = available
        super().__init__(
            f"Unknown connector subtype: {subtype}",
            field="connectorSubType",
            suggestions=[
                "This connector type may not be supported yet",
                f"Supported types include: {', '.join(available[:10])}, ...",
            ],
        )


class ConfigurationNotFoundError(DatabasinError):
    """No connector configuration matched in any category file."""

    def __init__(self, connector_name: str, failures: dict[str, str], searched: int) -> None:
        self.connector_name = connector_name
        self.failures = failures
        self.searched = searched
        lines = [f"Connector configuration not found: {connector_name}"]
        if failures:
            lines.append(f"{len(failures)} of {searched} category files failed to load:")
            lines.extend(f"  - {path}: {reason}" for path, reason in failures.items())
        super().__init__(
            "\n".join(lines),
            suggestion="Check the connector name and that DATABASIN_WEB_URL points at the web app",
        )


class AuthError(DatabasinError):
    """Missing or rejected credentials."""

    def __init__(self, message: str, suggestion: str | None = None) -> None:
        super().__init__(message, suggestion=suggestion or "Set DATABASIN_TOKEN or add it to .env")


class NetworkError(DatabasinError):
    """The platform could not be reached (connect failure or timeout)."""

    def __init__(self, message: str, url: str) -> None:
        self.url = url
        super().__init__(
            message,
            suggestion="Check your network connection and that DATABASIN_API_URL is correct",
        )


_SERVER_TROUBLE = "The Databasin API is experiencing issues. Please try again later."

# First matching (status, endpoint pattern) wins; ``None`` matches any endpoint.
_SUGGESTION_RULES: list[tuple[int, re.Pattern[str] | None, str]] = [
    (
        404,
        re.compile(r"/api/connectors?/"),
        "Connector not found. Run 'databasin connectors get <id>' to check the id.",
    ),
    (
        404,
        re.compile(r"/api/pipelines?/"),
        "Pipeline not found. Run 'databasin pipelines get <id>' to check the id.",
    ),
    (404, re.compile(r"/api/projects?/"), "Project not found. Check the project id."),
    (
        403,
        re.compile(r"/api/connectors?/"),
        "Access denied to this connector. "
        "Verify you have permission for this project's connectors.",
    ),
    (
        403,
        re.compile(r"/api/pipelines?/"),
        "Access denied to this pipeline. Verify you have permission for this project's pipelines.",
    ),
    (
        400,
        re.compile(r"/api/pipelines?(?!/)"),
        "Invalid pipeline configuration. Check that all required fields are present "
        "and properly formatted.",
    ),
    (
        400,
        re.compile(r"/api/connectors?(?!/)"),
        "Invalid connector configuration. Check that all required fields are present "
        "and properly formatted.",
    ),
    (400, None, "Check your request parameters and payload syntax."),
    (401, None, "Your authentication token may be invalid or expired."),
    (403, None, "You do not have permission to access this resource."),
    (404, None, "The requested resource was not found. Verify the ID and try again."),
    (409, None, "Conflict with existing resource. This name may already be in use."),
    (422, None, "Validation failed. Check that all fields meet the required format."),
    (429, None, "Rate limit exceeded. Please wait a moment before retrying."),
    (500, None, _SERVER_TROUBLE),
    (502, None, _SERVER_TROUBLE),
    (503, None, _SERVER_TROUBLE),
    (504, None, _SERVER_TROUBLE),
]


class ApiError(DatabasinError):
    """HTTP error response from the platform API."""

    def __init__(
        self, message: str, status_code: int, endpoint: str, body: Any = None
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        self.body = body
        super().__init__(message, suggestion=api_suggestion(status_code, endpoint))

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404


def api_suggestion(status_code: int, endpoint: str | None = None) -> str:
    """Pick the hint for an HTTP failure, preferring endpoint-specific rules."""
    for status, pattern, suggestion in _SUGGESTION_RULES:
        if status != status_code:
            continue
        if pattern is None:
            return suggestion
        if endpoint and pattern.search(endpoint):
            return suggestion
    return "Check the error message above for details."


def format_error(exc: BaseException) -> str:
    """Render an error for terminal output."""
    if isinstance(exc, ApiError):
        out = f"API Error ({exc.status_code}): {exc.message}\nEndpoint: {exc.endpoint}"
    elif isinstance(exc, ValidationError):
        out = f"Validation Error: {exc.message}"
        if exc.field and len(exc.errors) <= 1:
            out += f" (field: {exc.field})"
    elif isinstance(exc, DatabasinError):
        out = f"Error: {exc.message}"
    else:
        return f"Error: {exc}"
    if exc.suggestion:
        out += f"\n\n{exc.suggestion}"
    return out


def _build_suggestion(suggestions: Iterable[str]) -> str | None:
    items = list(suggestions)
    if not items:
        return None
    if len(items) == 1:
        return items[0]
    return "Fix the following:\n  - " + "\n  - ".join(items)
