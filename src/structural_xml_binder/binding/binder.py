"""Structural binder.

Walks an ``Element`` tree and a live object graph in lock-step. For each
child element the binder resolves the destination field on the current
target object, computes a value (coerced leaf, new container or new composite
object), stores it through the policy's save hook or the field's mutator, and
recurses into the element's children.
"""

import time
import uuid
from pathlib import Path
from typing import Any, Callable, Optional, Type, TypeVar

from structural_xml_binder.binding.coercion import coerce_leaf, is_primitive
from structural_xml_binder.binding.descriptors import (
    DescriptorRegistry,
    FieldDescriptor,
    TypeDescriptor,
)
from structural_xml_binder.binding.policy import BindingPolicy
from structural_xml_binder.binding.shapes import Shape, describe_shape, new_container
from structural_xml_binder.markup.adapters import adapt_element, find_adapter
from structural_xml_binder.markup.element import Element
from structural_xml_binder.markup.parser import parse
from structural_xml_binder.shared import (
    BinderConfig,
    BindingError,
    BindingMetrics,
    BindResult,
    ConstructionError,
    CorrelationLogger,
    DepthExceededError,
    DiagnosticSeverity,
    TypeConflictError,
    UnsupportedContainerTypeError,
    XMLBinderError,
    get_logger,
)
from structural_xml_binder.shared.errors import type_name

T = TypeVar("T")

MS_PER_SECOND = 1000.0


class _Traversal:
    """State of one top-level bind call."""

    def __init__(
        self,
        binder: "StructuralBinder",
        policy: BindingPolicy,
        result: BindResult,
        logger: CorrelationLogger,
    ) -> None:
        self.registry = binder.registry
        self.config = binder.config.binding
        self.policy = policy
        self.result = result
        self.metrics: BindingMetrics = result.metrics
        self.logger = logger

    def bind_children(self, parent: Element, target: Any, depth: int) -> None:
        try:
            descriptor = self.registry.describe(type(target))
        except BindingError as e:
            raise e.with_context(
                parent.tag, parent.get_path(), type_name(type(target))
            )
        for child in parent.children:
            self.visit(child, target, descriptor, None, depth)

    def visit(
        self,
        element: Element,
        owner: Any,
        descriptor: Optional[TypeDescriptor],
        container_shape: Optional[Shape],
        depth: int,
    ) -> None:
        """Bind ``element`` into ``owner``.

        ``owner`` is a target object with its ``descriptor`` table, or, when
        ``container_shape`` is given, a container being populated.
        """
        self.metrics.elements_visited += 1
        self.metrics.observe_depth(depth)
        try:
            if depth > self.config.max_depth:
                raise DepthExceededError(
                    f"Maximum binding depth {self.config.max_depth} exceeded"
                )
            self._bind(element, owner, descriptor, container_shape, depth)
        except BindingError as e:
            raise e.with_context(
                element.tag, element.get_path(), type_name(type(owner))
            )
        except RecursionError:
            raise
        except Exception as e:
            raise BindingError(
                f"{type(e).__name__} while binding element: {e}",
                element_name=element.tag,
                path=element.get_path(),
                target_type=type_name(type(owner)),
            ) from e

    def _bind(
        self,
        element: Element,
        owner: Any,
        descriptor: Optional[TypeDescriptor],
        container_shape: Optional[Shape],
        depth: int,
    ) -> None:
        if self.policy.skip_element(element):
            self._skip(element)
            return

        field: Optional[FieldDescriptor] = None
        override = self.policy.element_type(element)
        if container_shape is not None:
            shape = self._member_shape(container_shape, override)
        else:
            name = self.policy.field_name(element) or element.local_name
            field = descriptor.resolve(name)
            shape = field.shape if override is None else describe_shape(override)

        if element.is_leaf:
            self._deliver(element, owner, field, self._leaf_value(element, shape))
            return

        shape.check()
        if shape.is_container:
            container = new_container(shape.kind)
            self.metrics.containers_created += 1
            self._deliver(element, owner, field, container)
            for child in element.children:
                self.visit(child, container, None, shape, depth + 1)
            return

        value = self._construct(shape.declared)
        child_descriptor = self.registry.describe(type(value))
        if field is not None:
            self._deliver(element, owner, field, value)
        for child in element.children:
            self.visit(child, value, child_descriptor, None, depth + 1)
        if field is None:
            # Set members are ordered by value, so add them once populated.
            self._deliver(element, owner, None, value)

    def _member_shape(self, container_shape: Shape, override: Any) -> Shape:
        if override is None:
            return describe_shape(container_shape.element_type)
        shape = describe_shape(override)
        if shape.is_collection:
            raise TypeConflictError(
                f"Type override {shape.type_name} is a collection but the "
                f"element is a member of {container_shape.type_name}",
                target_type=shape.type_name,
            )
        return shape

    def _leaf_value(self, element: Element, shape: Shape) -> Any:
        if (
            shape.is_collection
            and not element.content
            and self.config.empty_leaf_as_empty_container
        ):
            shape.check()
            self.metrics.containers_created += 1
            return new_container(shape.kind)
        if not shape.is_collection:
            shape.check()
        return coerce_leaf(shape.declared, element, self.policy)

    def _construct(self, value_type: Any) -> Any:
        if is_primitive(value_type) or not isinstance(value_type, type):
            raise ConstructionError(
                f"Cannot bind an element with children as {type_name(value_type)}",
                target_type=type_name(value_type),
            )
        try:
            value = value_type()
        except RecursionError:
            raise
        except Exception as e:
            raise ConstructionError(
                f"Cannot construct {type_name(value_type)}: {e}",
                target_type=type_name(value_type),
            ) from e
        self.metrics.objects_constructed += 1
        return value

    def _deliver(
        self,
        element: Element,
        owner: Any,
        field: Optional[FieldDescriptor],
        value: Any,
    ) -> None:
        if field is None:
            self._append(owner, value)
            return
        if self.policy.save(element, owner, value):
            self.metrics.custom_saves += 1
            return
        field.assign(owner, value)
        self.metrics.values_assigned += 1

    def _append(self, container: Any, value: Any) -> None:
        try:
            if isinstance(container, list):
                container.append(value)
            else:
                container.add(value)
        except TypeError as e:
            raise UnsupportedContainerTypeError(
                f"Cannot add {type_name(type(value))} to a sorted set: {e}",
                target_type=type_name(type(value)),
            ) from e
        self.metrics.values_appended += 1

    def _skip(self, element: Element) -> None:
        self.metrics.elements_skipped += 1
        path = element.get_path()
        self.logger.debug("Skipping element", extra={"path": path})
        self.result.add_diagnostic(
            DiagnosticSeverity.DEBUG,
            f"Skipped element <{element.tag}> and its subtree",
            "skip",
            path=path,
        )


class StructuralBinder:
    """Binds markup documents onto instances of plain Python classes.

    Args:
        config: Binder configuration, defaults to ``BinderConfig()``
        registry: Descriptor registry to share between binders
        correlation_id: Fixed correlation ID; generated per call when omitted
            and correlation tracking is enabled

    Examples:
        >>> class Item:
        ...     def setName(self, value: str) -> None:
        ...         self.name = value
        >>> item = StructuralBinder().bind('<item><name>a</name></item>', Item)
        >>> item.name
        'a'
    """

    def __init__(
        self,
        config: Optional[BinderConfig] = None,
        registry: Optional[DescriptorRegistry] = None,
        correlation_id: Optional[str] = None,
    ) -> None:
        self.config = config or BinderConfig()
        self.correlation_id = correlation_id
        self.registry = registry or DescriptorRegistry(self.config.binding, correlation_id)
        self.logger = get_logger(__name__, correlation_id, "structural_binder")

    def bind(
        self,
        document: Any,
        target_type: Type[T],
        policy: Optional[BindingPolicy] = None,
    ) -> Optional[T]:
        """Bind a document onto a new instance of ``target_type``.

        Args:
            document: ``Element``, lxml/ElementTree/BeautifulSoup element, or
                raw markup as str, bytes, ``Path`` or file object
            target_type: Class constructed with no arguments
            policy: Binding policy, defaults to ``BindingPolicy()``

        Returns:
            The populated instance, or None if ``target_type`` cannot be
            constructed

        Raises:
            MarkupParseError: If raw markup cannot be parsed
            BindingError: If the document does not fit the target type
        """
        return self.bind_detailed(document, target_type, policy).value

    def bind_detailed(
        self,
        document: Any,
        target_type: Type[T],
        policy: Optional[BindingPolicy] = None,
    ) -> BindResult[T]:
        """Bind like ``bind`` and return the value with metrics and diagnostics."""
        correlation_id = self._next_correlation_id()
        logger = self.logger.bind(correlation_id)
        result: BindResult[T] = BindResult(
            correlation_id=correlation_id,
            target_type=type_name(target_type),
        )
        start_time = time.time()

        logger.info(
            "Starting bind",
            extra={
                "target_type": result.target_type,
                "input_type": type(document).__name__,
            }
        )

        try:
            root = self._to_element(document, correlation_id)
            traversal = _Traversal(self, policy or BindingPolicy(), result, logger)
            try:
                target = target_type()
            except Exception as e:
                self._root_not_constructed(root, e, result, logger)
            else:
                result.metrics.objects_constructed += 1
                self._run(traversal, lambda: traversal.bind_children(root, target, 1))
                result.value = target
        except XMLBinderError:
            result.metrics.processing_time_ms = (time.time() - start_time) * MS_PER_SECOND
            logger.exception(
                "Bind failed",
                extra={
                    "target_type": result.target_type,
                    "processing_time_ms": result.metrics.processing_time_ms,
                }
            )
            raise

        result.metrics.processing_time_ms = (time.time() - start_time) * MS_PER_SECOND
        logger.info(
            "Bind completed",
            extra={
                "success": result.success,
                **result.metrics.to_dict(),
            }
        )
        return result

    def bind_element(
        self,
        element: Element,
        target: Any,
        policy: Optional[BindingPolicy] = None,
    ) -> None:
        """Bind one element as a field of an existing ``target``.

        Raises:
            BindingError: If the element does not fit ``target``
        """
        traversal = self._traversal(policy)
        descriptor = self.registry.describe(type(target))
        self._run(traversal, lambda: traversal.visit(element, target, descriptor, None, 1))

    def populate(
        self,
        root: Any,
        target: Any,
        policy: Optional[BindingPolicy] = None,
    ) -> Any:
        """Bind every child of ``root`` into an existing ``target``.

        ``root`` accepts the same inputs as ``bind``. Returns ``target``.
        """
        traversal = self._traversal(policy)
        element = self._to_element(root, traversal.result.correlation_id)
        self._run(traversal, lambda: traversal.bind_children(element, target, 1))
        return target

    def _traversal(self, policy: Optional[BindingPolicy]) -> _Traversal:
        correlation_id = self._next_correlation_id()
        result: BindResult[Any] = BindResult(correlation_id=correlation_id)
        return _Traversal(
            self, policy or BindingPolicy(), result, self.logger.bind(correlation_id)
        )

    def _run(self, traversal: _Traversal, step: Callable[[], None]) -> None:
        try:
            step()
        except RecursionError as e:
            raise DepthExceededError(
                "Document nesting exceeds the interpreter recursion limit; "
                f"deepest level reached {traversal.metrics.max_depth_reached}"
            ) from e

    def _next_correlation_id(self) -> Optional[str]:
        if self.correlation_id is not None:
            return self.correlation_id
        if self.config.global_.enable_correlation_tracking:
            return uuid.uuid4().hex
        return None

    def _to_element(self, document: Any, correlation_id: Optional[str]) -> Element:
        if isinstance(document, Element):
            return document
        if isinstance(document, (str, bytes, Path)):
            return parse(document, self.config.markup, correlation_id)
        if find_adapter(document, correlation_id) is None and hasattr(document, "read"):
            return parse(document, self.config.markup, correlation_id)
        return adapt_element(document, self.config.markup.strip_text, correlation_id)

    def _root_not_constructed(
        self,
        root: Element,
        error: Exception,
        result: BindResult[Any],
        logger: CorrelationLogger,
    ) -> None:
        message = f"Cannot construct root type {result.target_type}: {error}"
        logger.warning(
            message,
            extra={"exception_type": type(error).__name__}
        )
        result.success = False
        result.add_diagnostic(
            DiagnosticSeverity.WARNING,
            message,
            "construction",
            path=root.get_path(),
            details={"exception_type": type(error).__name__},
        )
