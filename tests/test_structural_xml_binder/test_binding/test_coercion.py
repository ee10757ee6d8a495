"""Tests for primitive leaf coercion."""

import math
from datetime import date
from typing import Any, List

import pytest

from structural_xml_binder.binding.coercion import (
    INT32_MAX,
    INT32_MIN,
    INT64_MAX,
    INT64_MIN,
    coerce_leaf,
    is_primitive,
    parse_bool,
    parse_float,
    parse_int32,
    parse_int64,
)
from structural_xml_binder.binding.policy import BindingPolicy, MappingPolicy
from structural_xml_binder.binding.shapes import Int32, Int64
from structural_xml_binder.markup import Element
from structural_xml_binder.shared import LeafValueError, UnsupportedLeafTypeError


class TestIntegers:
    """Test fixed-width integer parsing."""

    def test_int32_bounds(self) -> None:
        assert parse_int32(str(INT32_MAX)) == 2147483647
        assert parse_int32(str(INT32_MIN)) == -2147483648

    @pytest.mark.parametrize("text", [str(INT32_MAX + 1), str(INT32_MIN - 1)])
    def test_int32_out_of_range(self, text: str) -> None:
        with pytest.raises(LeafValueError, match="out of range"):
            parse_int32(text)

    def test_int64_bounds(self) -> None:
        assert parse_int64(str(INT64_MAX)) == 9223372036854775807
        assert parse_int64(str(INT64_MIN)) == -9223372036854775808

    def test_int64_out_of_range(self) -> None:
        with pytest.raises(LeafValueError, match="out of range"):
            parse_int64(str(INT64_MAX + 1))

    @pytest.mark.parametrize("text", ["", " 1", "1 ", "1_000", "1e3", "0x1F", "١٢", "--1"])
    def test_malformed(self, text: str) -> None:
        """Test only ASCII digits with an optional sign are accepted."""
        with pytest.raises(LeafValueError, match="Invalid"):
            parse_int64(text)

    def test_leading_zeros_and_sign(self) -> None:
        assert parse_int32("007") == 7
        assert parse_int32("+12") == 12
        assert parse_int32("-0") == 0


class TestBooleans:
    """Test the exact boolean spellings."""

    def test_literals(self) -> None:
        assert parse_bool("true") is True
        assert parse_bool("false") is False

    @pytest.mark.parametrize("text", ["True", "FALSE", "1", "0", "yes", ""])
    def test_other_spellings_rejected(self, text: str) -> None:
        with pytest.raises(LeafValueError, match="expected 'true' or 'false'"):
            parse_bool(text)


class TestFloats:
    """Test floating point parsing."""

    @pytest.mark.parametrize("text, expected", [
        ("1.5", 1.5),
        ("-2", -2.0),
        (".25", 0.25),
        ("3.", 3.0),
        ("6.02e23", 6.02e23),
        ("1E-3", 0.001),
        ("INF", math.inf),
        ("-INF", -math.inf),
    ])
    def test_valid(self, text: str, expected: float) -> None:
        assert parse_float(text) == expected

    def test_nan(self) -> None:
        assert math.isnan(parse_float("NaN"))

    @pytest.mark.parametrize("text", ["", "inf", "nan", "1,5", "e3", "1.2.3"])
    def test_invalid(self, text: str) -> None:
        with pytest.raises(LeafValueError):
            parse_float(text)


class TestIsPrimitive:
    """Test built-in coercion lookup."""

    @pytest.mark.parametrize("value_type", [str, int, bool, float, Int32, Int64])
    def test_builtins(self, value_type: Any) -> None:
        assert is_primitive(value_type)

    @pytest.mark.parametrize("value_type", [date, List[int], bytes, object])
    def test_others(self, value_type: Any) -> None:
        assert not is_primitive(value_type)

    def test_unhashable(self) -> None:
        assert not is_primitive([])


class TestCoerceLeaf:
    """Test leaf coercion with the policy fallback."""

    def test_string_identity(self) -> None:
        assert coerce_leaf(str, Element(tag="a", text="x y"), BindingPolicy()) == "x y"

    def test_missing_text_is_empty_string(self) -> None:
        assert coerce_leaf(str, Element(tag="a"), BindingPolicy()) == ""

    def test_missing_text_for_integer(self) -> None:
        with pytest.raises(LeafValueError):
            coerce_leaf(int, Element(tag="a"), BindingPolicy())

    def test_plain_int_is_64_bit(self) -> None:
        element = Element(tag="a", text=str(INT32_MAX + 1))

        assert coerce_leaf(int, element, BindingPolicy()) == INT32_MAX + 1
        with pytest.raises(LeafValueError):
            coerce_leaf(Int32, element, BindingPolicy())

    def test_policy_fallback(self) -> None:
        policy = MappingPolicy(leaf_parsers={date: date.fromisoformat})

        value = coerce_leaf(date, Element(tag="d", text="2020-05-17"), policy)

        assert value == date(2020, 5, 17)

    def test_policy_may_return_none(self) -> None:
        """Test None is a value, only DECLINED means declined."""
        class NoneParser(BindingPolicy):
            def leaf_value(self, value_type: Any, text: str, element: Element) -> Any:
                return None

        assert coerce_leaf(date, Element(tag="d", text="x"), NoneParser()) is None

    def test_builtins_do_not_consult_policy(self) -> None:
        class Loud(BindingPolicy):
            def leaf_value(self, value_type: Any, text: str, element: Element) -> Any:
                raise AssertionError("policy must not be called")

        assert coerce_leaf(bool, Element(tag="b", text="true"), Loud()) is True

    def test_declined(self) -> None:
        with pytest.raises(UnsupportedLeafTypeError) as exc_info:
            coerce_leaf(date, Element(tag="d", text="2020-05-17"), BindingPolicy())

        assert exc_info.value.target_type == "date"

    @pytest.mark.parametrize("value_type, expected", [
        (int, "int"),
        (Int32, "Int32"),
        (bool, "bool"),
        (float, "float"),
    ])
    def test_malformed_text_names_destination_type(self, value_type: Any, expected: str) -> None:
        with pytest.raises(LeafValueError) as exc_info:
            coerce_leaf(value_type, Element(tag="a", text="x"), BindingPolicy())

        assert exc_info.value.target_type == expected
