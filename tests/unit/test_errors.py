"""Tests for the error taxonomy and terminal rendering."""

from __future__ import annotations

import pydantic
import pytest

from databasin.errors import (
    ApiError,
    AuthError,
    ConfigurationNotFoundError,
    DatabasinError,
    NetworkError,
    ValidationError,
    api_suggestion,
    format_error,
)
from databasin.models.errors import FieldError
from databasin.models.pipeline import PipelineDraft


class TestValidationError:
    def test_single_field(self) -> None:
        err = ValidationError("Pipeline name is required", field="pipelineName")
        assert err.fields == ["pipelineName"]
        assert err.suggestion is None
        assert isinstance(err, DatabasinError)

    def test_aggregate_one(self) -> None:
        err = ValidationError.aggregate([FieldError(field="a", message="bad a")])
        assert err.message == "bad a"
        assert err.field == "a"

    def test_aggregate_many(self) -> None:
        err = ValidationError.aggregate(
            [
                FieldError(field="a", message="bad a", suggestions=["fix a"]),
                FieldError(field="b", message="bad b", suggestions=["fix b"]),
            ]
        )
        assert err.message.splitlines() == [
            "Pipeline configuration has 2 validation errors:",
            "  - a: bad a",
            "  - b: bad b",
        ]
        assert err.fields == ["a", "b"]
        assert err.suggestion == "Fix the following:\n  - fix a\n  - fix b"

    def test_from_pydantic(self) -> None:
        with pytest.raises(pydantic.ValidationError) as exc_info:
            PipelineDraft.model_validate({"items": [1]})
        err = ValidationError.from_pydantic(exc_info.value, prefix="draft.")
        assert err.fields == ["draft.items.0"]


class TestApiSuggestions:
    def test_endpoint_specific(self) -> None:
        assert "Connector not found" in api_suggestion(404, "/api/connector/5")
        assert "Pipeline not found" in api_suggestion(404, "/api/pipeline/v2/5")

    def test_status_fallback(self) -> None:
        assert "Rate limit" in api_suggestion(429, "/api/anything")
        assert "try again later" in api_suggestion(503)

    def test_unknown_status(self) -> None:
        assert api_suggestion(418) == "Check the error message above for details."

    def test_not_found_flag(self) -> None:
        assert ApiError("gone", 404, "/api/connector/1").is_not_found
        assert not ApiError("boom", 500, "/api/connector/1").is_not_found


class TestFormatError:
    def test_api_error(self) -> None:
        out = format_error(ApiError("Pipeline not found", 404, "/api/pipeline/v2/9"))
        assert out.startswith("API Error (404): Pipeline not found\nEndpoint: /api/pipeline/v2/9")
        assert "databasin pipelines get" in out

    def test_validation_error(self) -> None:
        out = format_error(
            ValidationError("Name required", field="pipelineName", suggestions=["Add one"])
        )
        assert out == "Validation Error: Name required (field: pipelineName)\n\nAdd one"

    def test_auth_error(self) -> None:
        out = format_error(AuthError("No authentication token found"))
        assert out.startswith("Error: No authentication token found")
        assert "DATABASIN_TOKEN" in out

    def test_network_error(self) -> None:
        err = NetworkError("Request timeout after 30.0s", "/api/connector")
        assert err.url == "/api/connector"
        assert "network connection" in format_error(err)

    def test_configuration_not_found(self) -> None:
        err = ConfigurationNotFoundError("Foo", {"a.json": "HTTP 500"}, searched=9)
        assert "1 of 9 category files failed to load" in err.message
        assert "  - a.json: HTTP 500" in err.message

    def test_plain_exception(self) -> None:
        assert format_error(RuntimeError("boom")) == "Error: boom"
