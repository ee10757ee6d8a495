"""Primitive coercion of leaf element text.

Built-in destinations are ``str``, ``Int32``, ``int``/``Int64``, ``bool`` and
``float``. Parsing is locale independent and strict: numbers accept ASCII
digits with an optional sign only, booleans accept exactly ``true`` and
``false``, and out-of-range integers are rejected rather than truncated.
Every other destination is offered to the binding policy.
"""

import re
from typing import Any, Callable, Dict

from structural_xml_binder.binding.policy import DECLINED, BindingPolicy
from structural_xml_binder.binding.shapes import Int32, Int64
from structural_xml_binder.markup.element import Element
from structural_xml_binder.shared import LeafValueError, UnsupportedLeafTypeError
from structural_xml_binder.shared.errors import type_name

INT32_MIN = -(2 ** 31)
INT32_MAX = 2 ** 31 - 1
INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1

_INTEGER = re.compile(r"[+-]?[0-9]+")
_FLOAT = re.compile(
    r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|NaN|[+-]?INF"
)

TRUE_LITERAL = "true"
FALSE_LITERAL = "false"


def _integer(text: str, minimum: int, maximum: int, label: str) -> int:
    if not _INTEGER.fullmatch(text):
        raise LeafValueError(f"Invalid {label} literal {text!r}")
    value = int(text)
    if not minimum <= value <= maximum:
        raise LeafValueError(f"{label} value {text} out of range [{minimum}, {maximum}]")
    return value


def parse_int32(text: str) -> int:
    return _integer(text, INT32_MIN, INT32_MAX, "32-bit integer")


def parse_int64(text: str) -> int:
    return _integer(text, INT64_MIN, INT64_MAX, "64-bit integer")


def parse_bool(text: str) -> bool:
    if text == TRUE_LITERAL:
        return True
    if text == FALSE_LITERAL:
        return False
    raise LeafValueError(
        f"Invalid boolean literal {text!r}; expected "
        f"{TRUE_LITERAL!r} or {FALSE_LITERAL!r}"
    )


def parse_float(text: str) -> float:
    if not _FLOAT.fullmatch(text):
        raise LeafValueError(f"Invalid floating point literal {text!r}")
    return float(text)


BUILTIN_COERCIONS: Dict[Any, Callable[[str], Any]] = {
    str: str,
    Int32: parse_int32,
    Int64: parse_int64,
    int: parse_int64,
    bool: parse_bool,
    float: parse_float,
}


def is_primitive(value_type: Any) -> bool:
    """Check if a type has a built-in coercion."""
    try:
        return value_type in BUILTIN_COERCIONS
    except TypeError:
        return False


def coerce_leaf(value_type: Any, element: Element, policy: BindingPolicy) -> Any:
    """Compute the value of a leaf element for a destination type.

    Raises:
        LeafValueError: If the text is malformed or out of range
        UnsupportedLeafTypeError: If neither a built-in nor the policy applies
    """
    text = element.content
    if is_primitive(value_type):
        try:
            return BUILTIN_COERCIONS[value_type](text)
        except LeafValueError as e:
            raise e.with_context(target_type=type_name(value_type))

    value = policy.leaf_value(value_type, text, element)
    if value is DECLINED:
        raise UnsupportedLeafTypeError(
            f"No coercion for leaf value of type {type_name(value_type)}",
            target_type=type_name(value_type),
        )
    return value
