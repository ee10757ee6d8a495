"""Exception taxonomy for structural XML binding.

Every failure raised by the binder carries enough context to diagnose the
mismatch between the input document and the target type: the offending
element's qualified name, its path in the document and, where known, the
destination type.
"""

from typing import Any, Optional


def type_name(value_type: Any) -> str:
    """Return a readable name for a type or typing annotation."""
    if isinstance(value_type, type):
        return value_type.__qualname__
    name = getattr(value_type, "__name__", None)
    if name and not hasattr(value_type, "__origin__"):
        return str(name)
    return str(value_type).replace("typing.", "")


class XMLBinderError(Exception):
    """Base exception for all structural-xml-binder failures."""


class MarkupParseError(XMLBinderError):
    """Raised when the markup parser cannot produce an element tree."""

    def __init__(
        self,
        message: str,
        line: Optional[int] = None,
        column: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.line = line
        self.column = column

    def __str__(self) -> str:
        message = super().__str__()
        if self.line is not None:
            return f"{message} (line {self.line}, column {self.column})"
        return message


class BindingError(XMLBinderError):
    """Raised when a document cannot be bound onto the target type.

    Attributes:
        element_name: Qualified name of the offending element
        path: Path of the offending element within the document
        target_type: Name of the destination type, if known
    """

    def __init__(
        self,
        message: str,
        element_name: Optional[str] = None,
        path: Optional[str] = None,
        target_type: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.element_name = element_name
        self.path = path
        self.target_type = target_type

    def __str__(self) -> str:
        context = []
        if self.path:
            context.append(f"at {self.path}")
        elif self.element_name:
            context.append(f"element <{self.element_name}>")
        if self.target_type:
            context.append(f"type {self.target_type}")
        if context:
            return f"{self.message} [{', '.join(context)}]"
        return self.message

    def with_context(
        self,
        element_name: Optional[str] = None,
        path: Optional[str] = None,
        target_type: Optional[str] = None,
    ) -> "BindingError":
        """Fill in any context fields not already set and return self."""
        if self.element_name is None:
            self.element_name = element_name
        if self.path is None:
            self.path = path
        if self.target_type is None:
            self.target_type = target_type
        return self


class ConstructionError(BindingError):
    """A destination type could not be default-constructed."""


class NoSuchFieldError(BindingError):
    """No mutator exists for the field named by an element."""


class AmbiguousMutatorError(BindingError):
    """More than one mutator was found for a single field."""


class UnsupportedLeafTypeError(BindingError):
    """No coercion rule or policy hook produces a value for a leaf."""


class LeafValueError(BindingError):
    """Leaf text is malformed or out of range for its destination type."""


class UnsupportedContainerTypeError(BindingError):
    """The destination is a collection outside the supported families."""


class UnsupportedGenericShapeError(BindingError):
    """A container destination does not declare exactly one element type."""


class TypeConflictError(BindingError):
    """A policy type override conflicts with the current container context."""


class DepthExceededError(BindingError):
    """The traversal exceeded the configured maximum depth."""


class UnresolvedAnnotationError(BindingError):
    """A mutator's parameter annotation cannot be evaluated."""
