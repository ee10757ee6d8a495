"""Destination shapes: scalar values and the closed set of container families.

A ``Shape`` is derived once from a declared annotation. Annotations naming
a collection that cannot be bound keep their error on the shape and raise it
only when an element actually needs the collection, so a type with one odd
mutator stays usable for the fields a document does contain. Mutator
annotations that cannot be evaluated are deferred the same way.
"""

import collections.abc
import types
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, NewType, Optional, Type, Union, get_args, get_origin

from structural_xml_binder.binding.containers import SortedUniqueSet
from structural_xml_binder.shared import (
    BindingError,
    UnsupportedContainerTypeError,
    UnsupportedGenericShapeError,
    UnresolvedAnnotationError,
)
from structural_xml_binder.shared.errors import type_name

# Fixed-width integer destinations. Plain ``int`` binds as Int64.
Int32 = NewType("Int32", int)
Int64 = NewType("Int64", int)


class FieldKind(Enum):
    """How values reach a destination."""

    SCALAR = auto()             # One value, assigned through the mutator
    ORDERED_SEQUENCE = auto()   # list, appended in document order
    UNIQUE_SET = auto()         # SortedUniqueSet, duplicates coalesced

    @property
    def is_container(self) -> bool:
        return self is not FieldKind.SCALAR


_FAMILIES = {
    list: FieldKind.ORDERED_SEQUENCE,
    collections.abc.Sequence: FieldKind.ORDERED_SEQUENCE,
    collections.abc.MutableSequence: FieldKind.ORDERED_SEQUENCE,
    collections.abc.Collection: FieldKind.ORDERED_SEQUENCE,
    collections.abc.Iterable: FieldKind.ORDERED_SEQUENCE,
    set: FieldKind.UNIQUE_SET,
    collections.abc.Set: FieldKind.UNIQUE_SET,
    collections.abc.MutableSet: FieldKind.UNIQUE_SET,
}

_TEXT_TYPES = (str, bytes, bytearray)


@dataclass(frozen=True)
class Shape:
    """Resolved destination shape for one annotation.

    Attributes:
        declared: The annotation with any ``Optional`` wrapper removed
        kind: Scalar or container family
        element_type: Member type for containers, None for scalars
        error: Error class raised by ``check`` for unbindable collections
        reason: Message for ``error``
    """

    declared: Any
    kind: FieldKind = FieldKind.SCALAR
    element_type: Any = None
    error: Optional[Type[BindingError]] = None
    reason: Optional[str] = None

    @property
    def is_container(self) -> bool:
        return self.kind.is_container

    @property
    def is_collection(self) -> bool:
        """True for bindable containers and for rejected collections alike."""
        if self.error is UnresolvedAnnotationError:
            return False
        return self.is_container or self.error is not None

    @property
    def type_name(self) -> str:
        return type_name(self.declared)

    def check(self) -> None:
        """Raise the stored error if this shape cannot hold child elements."""
        if self.error is not None:
            raise self.error(self.reason or "Unsupported destination",
                             target_type=self.type_name)


def unwrap_optional(annotation: Any) -> Any:
    """Strip ``Optional[...]`` / ``X | None`` down to the wrapped type."""
    origin = get_origin(annotation)
    if origin is Union or origin is types.UnionType:
        members = [arg for arg in get_args(annotation) if arg is not type(None)]
        if len(members) == 1:
            return members[0]
    return annotation


def _family(annotation: Any) -> Optional[FieldKind]:
    origin = get_origin(annotation) or annotation
    try:
        return _FAMILIES.get(origin)
    except TypeError:
        return None


def _is_collection(annotation: Any) -> bool:
    origin = get_origin(annotation) or annotation
    return (
        isinstance(origin, type)
        and issubclass(origin, collections.abc.Collection)
        and not issubclass(origin, _TEXT_TYPES)
    )


def describe_shape(annotation: Any) -> Shape:
    """Classify an annotation as a scalar or a supported container.

    Never raises; unbindable collections are recorded on the returned shape.
    """
    declared = unwrap_optional(annotation)
    kind = _family(declared)

    if kind is None:
        if _is_collection(declared):
            return Shape(
                declared,
                error=UnsupportedContainerTypeError,
                reason=(
                    f"Unsupported container type {type_name(declared)}; "
                    "use a list or set annotation"
                ),
            )
        return Shape(declared)

    args = get_args(declared)
    if len(args) != 1:
        return Shape(
            declared,
            error=UnsupportedGenericShapeError,
            reason=(
                f"Container type {type_name(declared)} must declare exactly "
                f"one element type, found {len(args)}"
            ),
        )

    element_type = unwrap_optional(args[0])
    if _family(element_type) is not None or _is_collection(element_type):
        return Shape(
            declared,
            error=UnsupportedGenericShapeError,
            reason=f"Nested container type {type_name(declared)} is not supported",
        )

    return Shape(declared, kind=kind, element_type=element_type)


def new_container(kind: FieldKind) -> Any:
    """Instantiate the concrete container for a container family."""
    if kind is FieldKind.ORDERED_SEQUENCE:
        return []
    if kind is FieldKind.UNIQUE_SET:
        return SortedUniqueSet()
    raise ValueError(f"{kind.name} is not a container family")
