"""Tests for binding policies."""

import json
from datetime import date
from pathlib import Path

import pytest

from structural_xml_binder.binding.policy import DECLINED, BindingPolicy, MappingPolicy
from structural_xml_binder.markup import Element
from structural_xml_binder.shared import ConfigValidationError


class TestDeclined:
    """Test the DECLINED sentinel."""

    def test_singleton(self) -> None:
        assert type(DECLINED)() is DECLINED

    def test_falsy_and_repr(self) -> None:
        assert not DECLINED
        assert repr(DECLINED) == "DECLINED"

    def test_distinct_from_none(self) -> None:
        assert DECLINED is not None


class TestBindingPolicy:
    """Test that every default hook declines."""

    def test_defaults(self) -> None:
        policy = BindingPolicy()
        element = Element(tag="tzid", text="UTC")

        assert policy.skip_element(element) is False
        assert policy.field_name(element) is None
        assert policy.element_type(element) is None
        assert policy.leaf_value(date, "2020-01-01", element) is DECLINED
        assert policy.save(element, object(), "UTC") is False


class TestMappingPolicy:
    """Test the table-driven policy."""

    def test_skip_by_local_or_qualified_name(self) -> None:
        policy = MappingPolicy(skip=["comment", "x:note"])

        assert policy.skip_element(Element(tag="comment"))
        assert policy.skip_element(Element(tag="ns:comment", namespace="urn:ns"))
        assert policy.skip_element(Element(tag="x:note", namespace="urn:x"))
        assert not policy.skip_element(Element(tag="y:note", namespace="urn:y"))
        assert not policy.skip_element(Element(tag="tzid"))

    def test_field_names_prefer_qualified_tag(self) -> None:
        policy = MappingPolicy(field_names={"id": "tzid", "alt:id": "aliasId"})

        assert policy.field_name(Element(tag="id")) == "tzid"
        assert policy.field_name(Element(tag="alt:id", namespace="urn:alt")) == "aliasId"
        assert policy.field_name(Element(tag="other:id", namespace="urn:o")) == "tzid"
        assert policy.field_name(Element(tag="name")) is None

    def test_element_types(self) -> None:
        policy = MappingPolicy(element_types={"day": date})

        assert policy.element_type(Element(tag="day")) is date
        assert policy.element_type(Element(tag="night")) is None

    def test_leaf_parsers(self) -> None:
        policy = MappingPolicy(leaf_parsers={date: date.fromisoformat})
        element = Element(tag="day", text="2021-03-04")

        assert policy.leaf_value(date, "2021-03-04", element) == date(2021, 3, 4)
        assert policy.leaf_value(bytes, "x", element) is DECLINED

    def test_never_claims_saves(self) -> None:
        assert MappingPolicy(skip=["a"]).save(Element(tag="a"), object(), 1) is False

    def test_from_dict(self) -> None:
        policy = MappingPolicy.from_dict({"skip": ["b"], "field_names": {"id": "tzid"}})

        assert policy.skip == frozenset({"b"})
        assert policy.field_names == {"id": "tzid"}

    def test_from_dict_rejects_unknown_keys(self) -> None:
        with pytest.raises(ConfigValidationError, match="Unknown policy keys") as exc_info:
            MappingPolicy.from_dict({"skip": [], "element_types": {}})

        assert exc_info.value.suggestions == ["skip", "field_names"]

    @pytest.mark.parametrize("data, field", [
        ({"skip": "b"}, "skip"),
        ({"skip": [1]}, "skip"),
        ({"field_names": ["id"]}, "field_names"),
    ])
    def test_from_dict_validates_shapes(self, data: dict, field: str) -> None:
        with pytest.raises(ConfigValidationError) as exc_info:
            MappingPolicy.from_dict(data)

        assert exc_info.value.field_name == field

    def test_from_json_string(self) -> None:
        policy = MappingPolicy.from_json('{"skip": ["b"]}')

        assert policy.skip_element(Element(tag="b"))

    def test_from_json_path(self, tmp_path: Path) -> None:
        path = tmp_path / "policy.json"
        path.write_text(json.dumps({"field_names": {"id": "tzid"}}), encoding="utf-8")

        policy = MappingPolicy.from_json(path)

        assert policy.field_name(Element(tag="id")) == "tzid"
