"""Tests for the path-based JSON field getters."""

from __future__ import annotations

import pytest

from meterdesk_sdk.fields import (
    as_list,
    first_present,
    get_bool,
    get_int,
    get_number,
    get_string,
    get_value,
    numeric_map,
    parse_json_lenient,
    positive_numbers,
)


class TestGetValue:
    def test_walks_nested_objects(self) -> None:
        assert get_value({"a": {"b": {"c": 1}}}, ["a", "b", "c"]) == 1

    def test_string_path_is_single_key(self) -> None:
        assert get_value({"name": "x"}, "name") == "x"

    def test_non_object_midway_returns_none(self) -> None:
        """Walking stops at the first non-object."""
        assert get_value({"a": [1, 2]}, ["a", "b"]) is None
        assert get_value({"a": "text"}, ["a", "b"]) is None
        assert get_value(None, ["a"]) is None
        assert get_value([{"a": 1}], ["a"]) is None

    def test_missing_key_returns_none(self) -> None:
        assert get_value({}, ["a"]) is None


class TestGetNumber:
    def test_numeric_string_is_coerced(self) -> None:
        assert get_number({"id": "42"}, ["id"]) == 42

    def test_partial_parse_is_rejected(self) -> None:
        assert get_number({"id": "42abc"}, ["id"]) is None

    @pytest.mark.parametrize("raw", ["١٢", "４２", "1.٥"])
    def test_non_ascii_digits_rejected(self, raw) -> None:
        assert get_number({"id": raw}, ["id"]) is None
        assert get_int({"id": raw}, ["id"]) is None

    def test_native_number_passes_through(self) -> None:
        assert get_number({"id": 42}, ["id"]) == 42
        assert get_number({"rate": 1.5}, ["rate"]) == 1.5

    @pytest.mark.parametrize("raw", ["", "   ", "nan", "inf", "-Infinity", "1_000", True, None, [], {}])
    def test_never_defaults_to_zero(self, raw) -> None:
        assert get_number({"v": raw}, ["v"]) is None

    def test_float_nan_rejected(self) -> None:
        assert get_number({"v": float("nan")}, ["v"]) is None

    def test_decimal_and_exponent_strings(self) -> None:
        assert get_number({"v": " 2.5 "}, ["v"]) == 2.5
        assert get_number({"v": "1e3"}, ["v"]) == 1000.0

    def test_get_int_rejects_fractions(self) -> None:
        assert get_int({"v": "7"}, "v") == 7
        assert get_int({"v": 7.0}, "v") == 7
        assert get_int({"v": "7.5"}, "v") is None


class TestGetString:
    def test_string_and_number(self) -> None:
        assert get_string({"s": "abc"}, "s") == "abc"
        assert get_string({"s": 12}, "s") == "12"
        assert get_string({"s": 12.0}, "s") == "12"

    def test_other_types_rejected(self) -> None:
        assert get_string({"s": True}, "s") is None
        assert get_string({"s": {"x": 1}}, "s") is None
        assert get_string({"s": None}, "s") is None


class TestGetBool:
    @pytest.mark.parametrize("raw,expected", [
        (True, True), (False, False), (1, True), (0, False),
        ("true", True), ("YES", True), ("1", True),
        ("false", False), ("no", False), ("0", False),
    ])
    def test_accepted_forms(self, raw, expected) -> None:
        assert get_bool({"b": raw}, "b") is expected

    def test_unknown_forms(self) -> None:
        assert get_bool({"b": "maybe"}, "b") is None
        assert get_bool({"b": ""}, "b") is None
        assert get_bool({}, "b") is None


class TestHelpers:
    def test_first_present_uses_fallback_key(self) -> None:
        row = {"product_id": "p1"}
        assert first_present(row, "productId", "product_id", getter=get_string) == "p1"

    def test_parse_json_lenient(self) -> None:
        assert parse_json_lenient('[1, 2]') == [1, 2]
        assert parse_json_lenient("{broken") is None
        assert parse_json_lenient("  ") is None
        assert parse_json_lenient([3]) == [3]

    def test_as_list(self) -> None:
        assert as_list('["a"]') == ["a"]
        assert as_list({"a": 1}) == []
        assert as_list(None) == []

    def test_numeric_map_keeps_numeric_entries(self) -> None:
        data = {"quota": 10, "rpm": "3.5", "name": "x", "flag": True, "bad": "1x"}
        assert numeric_map(data) == {"quota": 10, "rpm": 3.5}
        assert numeric_map([1, 2]) == {}

    def test_positive_numbers(self) -> None:
        assert positive_numbers([10, "20", 0, -5, "x", None]) == [10, 20]
