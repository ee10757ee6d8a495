"""Structural binding of element trees onto Python objects.

Key Components:
    StructuralBinder: Traverses an element tree and populates a target object
    BindingPolicy / MappingPolicy: Hooks consulted during traversal
    DescriptorRegistry: Per-type mutator tables, built once per type
    SortedUniqueSet: Container bound to set-typed fields
"""

from .binder import StructuralBinder
from .coercion import (
    BUILTIN_COERCIONS,
    coerce_leaf,
    is_primitive,
    parse_bool,
    parse_float,
    parse_int32,
    parse_int64,
)
from .containers import SortedUniqueSet
from .descriptors import (
    DescriptorRegistry,
    FieldDescriptor,
    MutatorSource,
    TypeDescriptor,
    conventional_mutator_name,
    field_key,
)
from .policy import DECLINED, BindingPolicy, MappingPolicy
from .shapes import FieldKind, Int32, Int64, Shape, describe_shape, new_container

__all__ = [
    "StructuralBinder",
    "BUILTIN_COERCIONS",
    "coerce_leaf",
    "is_primitive",
    "parse_bool",
    "parse_float",
    "parse_int32",
    "parse_int64",
    "SortedUniqueSet",
    "DescriptorRegistry",
    "FieldDescriptor",
    "MutatorSource",
    "TypeDescriptor",
    "conventional_mutator_name",
    "field_key",
    "DECLINED",
    "BindingPolicy",
    "MappingPolicy",
    "FieldKind",
    "Int32",
    "Int64",
    "Shape",
    "describe_shape",
    "new_container",
]
