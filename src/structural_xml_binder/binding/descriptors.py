"""Per-type mutator tables.

A ``TypeDescriptor`` maps every bindable field of a target type to exactly one
mutator. Tables are built once per type, on first use, from:

- camel-case setter methods, ``setDtstamp(self, value)``;
- snake-case setter methods, ``set_dtstamp(self, value)``;
- annotated public attributes and property setters (opt-in);
- setters registered explicitly with ``DescriptorRegistry.register_field``.

Only public callables taking exactly one required argument are mutators. Two
mutators resolving to the same field key make the whole table invalid and
raise ``AmbiguousMutatorError``; the ambiguity is never resolved by picking one.
"""

import inspect
import re
import threading
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Callable, ClassVar, Dict, List, Optional, get_origin, get_type_hints

from structural_xml_binder.binding.shapes import FieldKind, Shape, describe_shape
from structural_xml_binder.shared import (
    AmbiguousMutatorError,
    BindingConfig,
    BindingError,
    NoSuchFieldError,
    UnresolvedAnnotationError,
    get_logger,
)
from structural_xml_binder.shared.errors import type_name

Setter = Callable[[Any, Any], None]

_SEPARATORS = re.compile(r"[-.]")


class MutatorSource(Enum):
    """Where a mutator was discovered."""

    CAMEL_CASE = auto()
    SNAKE_CASE = auto()
    ATTRIBUTE = auto()
    REGISTERED = auto()


def field_key(field_name: str) -> str:
    """Normalize a field name for mutator lookup.

    Upper-cases the first letter as the ``set`` + name convention does and
    maps hyphens and dots, which cannot appear in Python names, to ``_``.
    """
    return _SEPARATORS.sub("_", field_name[:1].upper() + field_name[1:])


def conventional_mutator_name(field_name: str) -> str:
    """``dtstamp`` -> ``setDtstamp``."""
    return "set" + field_name[:1].upper() + field_name[1:]


@dataclass(frozen=True)
class FieldDescriptor:
    """One field of a target type and the single mutator that sets it."""

    key: str
    mutator_name: str
    source: MutatorSource
    shape: Shape
    setter: Setter = field(compare=False, repr=False)

    @property
    def kind(self) -> FieldKind:
        return self.shape.kind

    @property
    def value_type(self) -> Any:
        return self.shape.declared

    def assign(self, target: Any, value: Any) -> None:
        """Invoke the mutator on ``target`` with ``value``."""
        self.setter(target, value)


@dataclass
class TypeDescriptor:
    """Mutator table for one target type."""

    target_type: type
    fields: Dict[str, FieldDescriptor] = field(default_factory=dict)

    def resolve(self, field_name: str) -> FieldDescriptor:
        """Find the mutator for ``field_name``.

        Raises:
            NoSuchFieldError: If the type has no mutator for the field
        """
        descriptor = self.fields.get(field_key(field_name))
        if descriptor is None:
            raise NoSuchFieldError(
                f"No mutator {conventional_mutator_name(field_name)} for field "
                f"'{field_name}' on {type_name(self.target_type)}",
                target_type=type_name(self.target_type),
            )
        return descriptor

    def __contains__(self, field_name: str) -> bool:
        return field_key(field_name) in self.fields

    def describe(self) -> List[Dict[str, str]]:
        """Rows describing each field, sorted by key."""
        rows = []
        for key in sorted(self.fields):
            descriptor = self.fields[key]
            rows.append({
                "field": key,
                "mutator": descriptor.mutator_name,
                "source": descriptor.source.name,
                "kind": descriptor.kind.name,
                "type": descriptor.shape.type_name,
            })
        return rows


def _single_parameter(function: Any) -> Optional[inspect.Parameter]:
    """Return the value parameter of a one-argument method, else None."""
    try:
        signature = inspect.signature(function)
    except NameError:
        # Lazily evaluated annotations naming an undefined type
        import annotationlib
        signature = inspect.signature(
            function, annotation_format=annotationlib.Format.FORWARDREF)
    except (TypeError, ValueError):
        return None

    params = list(signature.parameters.values())[1:]
    positional = [
        p for p in params
        if p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD)
    ]
    if len(positional) != 1 or positional[0].default is not positional[0].empty:
        return None
    for p in params:
        if p.kind is p.VAR_POSITIONAL:
            return None
        if p.kind is p.KEYWORD_ONLY and p.default is p.empty:
            return None
    return positional[0]


def _resolve_hints(obj: Any, owner: type) -> Dict[str, Any]:
    try:
        return get_type_hints(obj)
    except Exception as e:
        raise BindingError(
            f"Cannot resolve type annotations of {getattr(obj, '__qualname__', obj)}: {e}",
            target_type=type_name(owner),
        ) from e


def _parameter_shape(function: Any, parameter: inspect.Parameter) -> Shape:
    """Shape of a mutator's value parameter.

    An annotation that cannot be evaluated does not invalidate the whole
    table: the failure is kept on the shape and raised only if an element
    reaches this field.
    """
    try:
        hints = get_type_hints(function)
    except Exception as e:
        return Shape(
            parameter.annotation,
            error=UnresolvedAnnotationError,
            reason=(
                "Cannot resolve type annotations of "
                f"{getattr(function, '__qualname__', function)}: {e}"
            ),
        )
    return describe_shape(hints.get(parameter.name, str))


def _method_setter(name: str) -> Setter:
    def setter(target: Any, value: Any) -> None:
        getattr(target, name)(value)
    return setter


def _attribute_setter(name: str) -> Setter:
    def setter(target: Any, value: Any) -> None:
        setattr(target, name, value)
    return setter


class DescriptorRegistry:
    """Builds and caches ``TypeDescriptor`` tables.

    Safe to share between threads; each table is built once.

    Args:
        config: Which mutator conventions to discover
        correlation_id: Optional correlation ID for log records
    """

    def __init__(
        self,
        config: Optional[BindingConfig] = None,
        correlation_id: Optional[str] = None,
    ) -> None:
        self.config = config or BindingConfig()
        self.logger = get_logger(__name__, correlation_id, "descriptor_registry")
        self._descriptors: Dict[type, TypeDescriptor] = {}
        self._registered: Dict[type, Dict[str, FieldDescriptor]] = {}
        self._lock = threading.RLock()

    def register_field(
        self,
        target_type: type,
        field_name: str,
        setter: Setter,
        value_type: Any = None,
    ) -> FieldDescriptor:
        """Register an explicit mutator for one field of ``target_type``.

        Args:
            target_type: Class the field belongs to
            field_name: Element or field name the mutator handles
            setter: ``setter(target, value)``
            value_type: Declared value type; read from the setter's second
                parameter annotation when omitted, ``str`` if unannotated

        Raises:
            AmbiguousMutatorError: If the field is already registered
        """
        if value_type is None:
            value_type = self._setter_value_type(setter, target_type)

        key = field_key(field_name)
        descriptor = FieldDescriptor(
            key=key,
            mutator_name=getattr(setter, "__name__", repr(setter)),
            source=MutatorSource.REGISTERED,
            shape=describe_shape(value_type),
            setter=setter,
        )
        with self._lock:
            fields = self._registered.setdefault(target_type, {})
            if key in fields:
                raise AmbiguousMutatorError(
                    f"Field '{field_name}' of {type_name(target_type)} "
                    "already has a registered mutator",
                    target_type=type_name(target_type),
                )
            fields[key] = descriptor
            self._descriptors.pop(target_type, None)
        return descriptor

    def describe(self, target_type: type) -> TypeDescriptor:
        """Get the mutator table for ``target_type``, building it on first use.

        Raises:
            AmbiguousMutatorError: If any field has more than one mutator
        """
        with self._lock:
            descriptor = self._descriptors.get(target_type)
            if descriptor is None:
                descriptor = self._build(target_type)
                self._descriptors[target_type] = descriptor
            return descriptor

    def clear(self) -> None:
        """Drop cached tables; explicit registrations are kept."""
        with self._lock:
            self._descriptors.clear()

    def _setter_value_type(self, setter: Setter, owner: type) -> Any:
        try:
            params = list(inspect.signature(setter).parameters.values())
        except (TypeError, ValueError):
            return str
        if len(params) < 2:
            return str
        return _resolve_hints(setter, owner).get(params[1].name, str)

    def _build(self, target_type: type) -> TypeDescriptor:
        candidates: Dict[str, List[FieldDescriptor]] = {}

        def add(descriptor: FieldDescriptor) -> None:
            candidates.setdefault(descriptor.key, []).append(descriptor)

        for name in dir(target_type):
            found = self._method_mutator(target_type, name)
            if found is not None:
                add(found)

        if self.config.attribute_mutators:
            for found in self._attribute_mutators(target_type):
                add(found)

        for found in self._registered.get(target_type, {}).values():
            add(found)

        ambiguous = {key: found for key, found in candidates.items() if len(found) > 1}
        if ambiguous:
            key, found = sorted(ambiguous.items())[0]
            names = ", ".join(d.mutator_name for d in found)
            raise AmbiguousMutatorError(
                f"Multiple mutators for field '{key}' of "
                f"{type_name(target_type)}: {names}",
                target_type=type_name(target_type),
            )

        descriptor = TypeDescriptor(
            target_type=target_type,
            fields={key: found[0] for key, found in candidates.items()},
        )
        self.logger.debug(
            "Built type descriptor",
            extra={
                "target_type": type_name(target_type),
                "field_count": len(descriptor.fields),
            }
        )
        return descriptor

    def _method_mutator(self, target_type: type, name: str) -> Optional[FieldDescriptor]:
        if name.startswith("_"):
            return None
        if self.config.snake_case_mutators and name.startswith("set_") and len(name) > 4:
            source, key = MutatorSource.SNAKE_CASE, field_key(name[4:])
        elif (
            self.config.camel_case_mutators
            and name.startswith("set")
            and name[3:4].isupper()
        ):
            source, key = MutatorSource.CAMEL_CASE, field_key(name[3:])
        else:
            return None

        member = inspect.getattr_static(target_type, name)
        if not inspect.isfunction(member):
            return None
        parameter = _single_parameter(member)
        if parameter is None:
            return None

        return FieldDescriptor(
            key=key,
            mutator_name=name,
            source=source,
            shape=_parameter_shape(member, parameter),
            setter=_method_setter(name),
        )

    def _attribute_mutators(self, target_type: type) -> List[FieldDescriptor]:
        found = []
        for name, annotation in _resolve_hints(target_type, target_type).items():
            if name.startswith("_") or get_origin(annotation) is ClassVar:
                continue
            found.append(FieldDescriptor(
                key=field_key(name),
                mutator_name=name,
                source=MutatorSource.ATTRIBUTE,
                shape=describe_shape(annotation),
                setter=_attribute_setter(name),
            ))

        for name in dir(target_type):
            if name.startswith("_"):
                continue
            member = inspect.getattr_static(target_type, name)
            if not isinstance(member, property) or member.fset is None:
                continue
            parameter = _single_parameter(member.fset)
            if parameter is None:
                continue
            found.append(FieldDescriptor(
                key=field_key(name),
                mutator_name=name,
                source=MutatorSource.ATTRIBUTE,
                shape=_parameter_shape(member.fset, parameter),
                setter=_attribute_setter(name),
            ))
        return found
