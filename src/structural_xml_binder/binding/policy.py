"""Binding policies consulted by the structural binder.

A policy customizes five decisions made during traversal: whether to skip an
element, which field name it maps to, which type it should be bound as, how
to parse a leaf the built-in coercions do not cover, and whether to take over
the assignment of a computed value. Every hook declines by default, so a
policy only overrides what it needs.

One policy instance is shared by the whole traversal of a single bind call
and is never retained by the binder afterwards.
"""

import json
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Union

from structural_xml_binder.markup.element import Element
from structural_xml_binder.shared import ConfigValidationError


class _Declined:
    """Sentinel type returned by ``leaf_value`` when a policy declines."""

    _instance: Optional["_Declined"] = None

    def __new__(cls) -> "_Declined":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "DECLINED"

    def __bool__(self) -> bool:
        return False


DECLINED = _Declined()


class BindingPolicy:
    """Default policy: binds every element by its local name.

    Subclass and override any of the five hooks.
    """

    def skip_element(self, element: Element) -> bool:
        """Return True to discard ``element`` and its whole subtree."""
        return False

    def field_name(self, element: Element) -> Optional[str]:
        """Return the field name for ``element``, or None for its local name."""
        return None

    def element_type(self, element: Element) -> Optional[Any]:
        """Return a type to bind ``element`` as, overriding the declared one."""
        return None

    def leaf_value(self, value_type: Any, text: str, element: Element) -> Any:
        """Parse leaf text for a type without a built-in coercion.

        Returns:
            The parsed value, or ``DECLINED``
        """
        return DECLINED

    def save(self, element: Element, target: Any, value: Any) -> bool:
        """Store ``value`` on ``target`` some other way.

        Returns:
            True if the value was stored and the mutator must not be called
        """
        return False


LeafParser = Callable[[str], Any]


class MappingPolicy(BindingPolicy):
    """Policy driven by lookup tables instead of code.

    Element keys match either the qualified tag or the local name.

    Args:
        skip: Element names whose subtrees are discarded
        field_names: Element name to field name aliases
        element_types: Element name to type overrides
        leaf_parsers: Destination type to ``text -> value`` parser
    """

    def __init__(
        self,
        skip: Iterable[str] = (),
        field_names: Optional[Mapping[str, str]] = None,
        element_types: Optional[Mapping[str, Any]] = None,
        leaf_parsers: Optional[Mapping[Any, LeafParser]] = None,
    ) -> None:
        self.skip = frozenset(skip)
        self.field_names: Dict[str, str] = dict(field_names or {})
        self.element_types: Dict[str, Any] = dict(element_types or {})
        self.leaf_parsers: Dict[Any, LeafParser] = dict(leaf_parsers or {})

    @staticmethod
    def _lookup(table: Mapping[str, Any], element: Element) -> Any:
        if element.tag in table:
            return table[element.tag]
        return table.get(element.local_name)

    def skip_element(self, element: Element) -> bool:
        return element.tag in self.skip or element.local_name in self.skip

    def field_name(self, element: Element) -> Optional[str]:
        return self._lookup(self.field_names, element)

    def element_type(self, element: Element) -> Optional[Any]:
        return self._lookup(self.element_types, element)

    def leaf_value(self, value_type: Any, text: str, element: Element) -> Any:
        parser = self.leaf_parsers.get(value_type)
        if parser is None:
            return DECLINED
        return parser(text)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "MappingPolicy":
        """Create a policy from plain data.

        Only ``skip`` and ``field_names`` are representable; types and parsers
        need code.
        """
        unknown = set(data) - {"skip", "field_names"}
        if unknown:
            raise ConfigValidationError(
                f"Unknown policy keys: {sorted(unknown)}",
                suggestions=["skip", "field_names"],
            )
        skip = data.get("skip", [])
        field_names = data.get("field_names", {})
        if not isinstance(skip, list) or not all(isinstance(s, str) for s in skip):
            raise ConfigValidationError("skip must be a list of element names",
                                        field_name="skip")
        if not isinstance(field_names, dict):
            raise ConfigValidationError("field_names must be an object",
                                        field_name="field_names")
        return cls(skip=skip, field_names=field_names)

    @classmethod
    def from_json(cls, source: Union[str, Path]) -> "MappingPolicy":
        """Create a policy from a JSON string or a path to a JSON file."""
        if isinstance(source, Path):
            source = source.read_text(encoding="utf-8")
        return cls.from_dict(json.loads(source))
