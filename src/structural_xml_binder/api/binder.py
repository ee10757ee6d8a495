"""Module-level binding functions.

Simple entry points for one-off binds. Each call builds a ``StructuralBinder``
from the given configuration; reuse a ``StructuralBinder`` instance directly
to share its descriptor cache across many documents.
"""

from pathlib import Path
from typing import Any, BinaryIO, Optional, TextIO, Type, TypeVar, Union

from structural_xml_binder.binding import BindingPolicy, StructuralBinder
from structural_xml_binder.markup import Element
from structural_xml_binder.shared import BinderConfig, BindResult

T = TypeVar("T")

# Type definitions for input data
DocumentType = Union[str, bytes, BinaryIO, TextIO, Path, Element, Any]


def bind(
    document: DocumentType,
    target_type: Type[T],
    policy: Optional[BindingPolicy] = None,
    config: Optional[BinderConfig] = None,
    correlation_id: Optional[str] = None,
) -> Optional[T]:
    """Bind a document onto a new instance of ``target_type``.

    Args:
        document: Raw markup, a parsed ``Element`` or a foreign element
        target_type: Class constructed with no arguments
        policy: Optional binding policy
        config: Optional binder configuration
        correlation_id: Optional correlation ID for log records

    Returns:
        The populated instance, or None if ``target_type`` cannot be constructed

    Raises:
        MarkupParseError: If raw markup cannot be parsed
        BindingError: If the document does not fit ``target_type``

    Examples:
        >>> class Zones:
        ...     def setName(self, value: str) -> None:
        ...         self.name = value
        >>> bind('<zones><name>UTC</name></zones>', Zones).name
        'UTC'
    """
    return StructuralBinder(config, correlation_id=correlation_id).bind(
        document, target_type, policy
    )


def bind_string(
    markup: Union[str, bytes],
    target_type: Type[T],
    policy: Optional[BindingPolicy] = None,
    config: Optional[BinderConfig] = None,
    correlation_id: Optional[str] = None,
) -> Optional[T]:
    """Bind markup held in memory."""
    if not isinstance(markup, (str, bytes)):
        raise TypeError(f"markup must be str or bytes, not {type(markup).__name__}")
    return bind(markup, target_type, policy, config, correlation_id)


def bind_file(
    file_path: Union[str, Path],
    target_type: Type[T],
    policy: Optional[BindingPolicy] = None,
    config: Optional[BinderConfig] = None,
    correlation_id: Optional[str] = None,
) -> Optional[T]:
    """Bind the document stored at ``file_path``."""
    return bind(Path(file_path), target_type, policy, config, correlation_id)


def bind_detailed(
    document: DocumentType,
    target_type: Type[T],
    policy: Optional[BindingPolicy] = None,
    config: Optional[BinderConfig] = None,
    correlation_id: Optional[str] = None,
) -> BindResult[T]:
    """Bind a document and return the value with metrics and diagnostics."""
    return StructuralBinder(config, correlation_id=correlation_id).bind_detailed(
        document, target_type, policy
    )


def bind_element(
    element: Element,
    target: Any,
    policy: Optional[BindingPolicy] = None,
    config: Optional[BinderConfig] = None,
) -> None:
    """Bind a single element as a field of ``target``."""
    StructuralBinder(config).bind_element(element, target, policy)


def populate(
    document: DocumentType,
    target: T,
    policy: Optional[BindingPolicy] = None,
    config: Optional[BinderConfig] = None,
) -> T:
    """Bind the children of a document's root into an existing ``target``."""
    return StructuralBinder(config).populate(document, target, policy)
