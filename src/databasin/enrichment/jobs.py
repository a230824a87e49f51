"""Job scheduling defaults."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import pydantic

from databasin.enrichment.coercion import ensure_string
from databasin.errors import ValidationError
from databasin.models.pipeline import ClusterSize, JobDetails

DEFAULT_SCHEDULE = "0 10 * * *"
DEFAULT_TIMEZONE = "UTC"
DEFAULT_TIMEOUT = "43200"  # 12 hours, in seconds


def default_job_details(email: str | None = None) -> dict[str, Any]:
    return {
        "tags": [],
        "jobClusterSize": ClusterSize.S.value,
        "emailNotifications": [email] if email else [],
        "jobRunSchedule": DEFAULT_SCHEDULE,
        "jobRunTimeZone": DEFAULT_TIMEZONE,
        "jobTimeout": DEFAULT_TIMEOUT,
    }


def build_job_details(
    supplied: Mapping[str, Any] | None, email: str | None = None
) -> JobDetails:
    """Shallow-merge *supplied* over the defaults.

    ``jobTimeout`` is re-serialized as a string afterwards whatever the caller
    passed; the platform rejects numeric timeouts.
    """
    supplied = dict(supplied or {})
    merged = {**default_job_details(email), **supplied}
    merged["jobTimeout"] = ensure_string(supplied.get("jobTimeout") or DEFAULT_TIMEOUT)
    try:
        return JobDetails.model_validate(merged)
    except pydantic.ValidationError as exc:
        raise ValidationError.from_pydantic(exc, prefix="jobDetails.") from exc
