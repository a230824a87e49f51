"""Structured validation findings shared by the enrichment validators."""

from __future__ import annotations

from pydantic import BaseModel


class FieldError(BaseModel):
    """A single problem tied to the offending field, with corrective hints."""

    field: str
    message: str
    suggestions: list[str] = []

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"


class ValidationResult(BaseModel):
    """Aggregated outcome of a validation pass: hard errors and warnings."""

    valid: bool
    errors: list[FieldError] = []
    warnings: list[FieldError] = []
