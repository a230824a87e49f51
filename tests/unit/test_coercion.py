"""Tests for permissive input coercion."""

from __future__ import annotations

import pytest

from databasin.enrichment.coercion import (
    ensure_string,
    first_present,
    parse_bool,
    parse_int_safe,
)


class TestParseBool:
    @pytest.mark.parametrize("value", [True, 1, 1.0, "true", "TRUE", "t", "on", "1"])
    def test_truthy(self, value: object) -> None:
        assert parse_bool(value) is True

    @pytest.mark.parametrize("value", [None, False, 0, 2, -1, "false", "yes", "", [], {}])
    def test_falsy(self, value: object) -> None:
        assert parse_bool(value) is False


class TestParseIntSafe:
    def test_int_passes_through(self) -> None:
        assert parse_int_safe(7, 0) == 7

    def test_float_is_floored(self) -> None:
        assert parse_int_safe(3.9, 0) == 3
        assert parse_int_safe(-1.5, 0) == -2

    def test_leading_digits_of_string(self) -> None:
        assert parse_int_safe(" 42abc", 0) == 42
        assert parse_int_safe("-5", 0) == -5

    @pytest.mark.parametrize("value", [None, "abc", "", True, float("nan"), [1]])
    def test_fallback_to_default(self, value: object) -> None:
        assert parse_int_safe(value, 3) == 3


class TestEnsureString:
    def test_string_unchanged(self) -> None:
        assert ensure_string("43200") == "43200"

    def test_numbers_stringified(self) -> None:
        assert ensure_string(3600) == "3600"
        assert ensure_string(3600.0) == "3600"
        assert ensure_string(1.5) == "1.5"

    def test_other_types_give_default(self) -> None:
        assert ensure_string(None) == ""
        assert ensure_string({"a": 1}, "x") == "x"
        assert ensure_string(True) == ""


class TestFirstPresent:
    def test_skips_missing_none_and_empty(self) -> None:
        item = {"a": None, "b": "", "c": "orders", "d": "other"}
        assert first_present(item, "missing", "a", "b", "c", "d") == "orders"

    def test_falsy_non_empty_values_count(self) -> None:
        assert first_present({"a": 0, "b": 5}, "a", "b") == 0
        assert first_present({"a": False}, "a") is False

    def test_nothing_present(self) -> None:
        assert first_present({}, "a", "b") is None
