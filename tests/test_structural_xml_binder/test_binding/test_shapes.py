"""Tests for destination shape classification."""

from collections.abc import MutableSet, Sequence
from typing import Collection, Dict, FrozenSet, Iterable, List, Optional, Set, Tuple, Union

import pytest

from structural_xml_binder.binding.containers import SortedUniqueSet
from structural_xml_binder.binding.shapes import (
    FieldKind,
    Int32,
    describe_shape,
    new_container,
    unwrap_optional,
)
from structural_xml_binder.shared import (
    UnsupportedContainerTypeError,
    UnsupportedGenericShapeError,
)


class Item:
    pass


class TestUnwrapOptional:
    """Test Optional unwrapping."""

    def test_optional(self) -> None:
        assert unwrap_optional(Optional[int]) is int

    def test_pipe_union(self) -> None:
        assert unwrap_optional(int | None) is int

    def test_real_union_is_kept(self) -> None:
        assert unwrap_optional(Union[int, str]) == Union[int, str]

    def test_plain_type(self) -> None:
        assert unwrap_optional(str) is str


class TestScalarShapes:
    """Test scalar destinations."""

    @pytest.mark.parametrize("annotation", [str, int, bool, float, Int32, Item, bytes])
    def test_scalar(self, annotation: object) -> None:
        shape = describe_shape(annotation)

        assert shape.kind is FieldKind.SCALAR
        assert not shape.is_collection
        assert shape.declared is annotation
        shape.check()

    def test_optional_scalar(self) -> None:
        assert describe_shape(Optional[Item]).declared is Item


class TestContainerShapes:
    """Test the supported container families."""

    @pytest.mark.parametrize("annotation, kind", [
        (List[int], FieldKind.ORDERED_SEQUENCE),
        (list[int], FieldKind.ORDERED_SEQUENCE),
        (Sequence[str], FieldKind.ORDERED_SEQUENCE),
        (Collection[str], FieldKind.ORDERED_SEQUENCE),
        (Iterable[str], FieldKind.ORDERED_SEQUENCE),
        (Set[str], FieldKind.UNIQUE_SET),
        (set[str], FieldKind.UNIQUE_SET),
        (MutableSet[str], FieldKind.UNIQUE_SET),
    ])
    def test_families(self, annotation: object, kind: FieldKind) -> None:
        shape = describe_shape(annotation)

        assert shape.kind is kind
        assert shape.is_container
        assert shape.error is None

    def test_element_type(self) -> None:
        assert describe_shape(List[Item]).element_type is Item

    def test_optional_container_and_member(self) -> None:
        shape = describe_shape(Optional[List[Optional[int]]])

        assert shape.kind is FieldKind.ORDERED_SEQUENCE
        assert shape.element_type is int


class TestRejectedShapes:
    """Test collections that cannot be bound."""

    @pytest.mark.parametrize("annotation", [
        Dict[str, int], dict, Tuple[int, ...], tuple, FrozenSet[str], frozenset,
    ])
    def test_unsupported_container(self, annotation: object) -> None:
        shape = describe_shape(annotation)

        assert shape.is_collection
        assert not shape.is_container
        with pytest.raises(UnsupportedContainerTypeError):
            shape.check()

    @pytest.mark.parametrize("annotation", [list, List, set, Set])
    def test_missing_element_type(self, annotation: object) -> None:
        shape = describe_shape(annotation)

        with pytest.raises(UnsupportedGenericShapeError, match="exactly one element type"):
            shape.check()

    @pytest.mark.parametrize("annotation", [List[List[int]], Set[Tuple[int, int]], List[Dict[str, str]]])
    def test_nested_containers(self, annotation: object) -> None:
        with pytest.raises(UnsupportedGenericShapeError, match="Nested container"):
            describe_shape(annotation).check()

    def test_error_carries_type_name(self) -> None:
        with pytest.raises(UnsupportedContainerTypeError) as exc_info:
            describe_shape(Dict[str, int]).check()

        assert exc_info.value.target_type == "Dict[str, int]"


class TestNewContainer:
    """Test container instantiation."""

    def test_ordered_sequence(self) -> None:
        assert new_container(FieldKind.ORDERED_SEQUENCE) == []

    def test_unique_set(self) -> None:
        assert isinstance(new_container(FieldKind.UNIQUE_SET), SortedUniqueSet)

    def test_fresh_instances(self) -> None:
        assert new_container(FieldKind.ORDERED_SEQUENCE) is not new_container(
            FieldKind.ORDERED_SEQUENCE
        )

    def test_scalar_is_not_a_container(self) -> None:
        with pytest.raises(ValueError, match="SCALAR is not a container family"):
            new_container(FieldKind.SCALAR)
