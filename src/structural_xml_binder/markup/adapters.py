"""Element adapters for trees produced by other XML libraries.

The binder consumes ``Element`` trees. Adapters convert already-parsed trees
from lxml, ``xml.etree.ElementTree`` and BeautifulSoup so callers can bind a
document they parsed themselves without serializing it again.
"""

import threading
import xml.etree.ElementTree as ET
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Type

from lxml import etree

from structural_xml_binder.markup.element import Element, NodeDescription, build_tree
from structural_xml_binder.markup.parser import convert_lxml
from structural_xml_binder.shared import MarkupParseError, get_logger


@dataclass
class AdapterMetadata:
    """Metadata about an element adapter."""

    name: str
    target_library: str
    description: str
    optional: bool = False


class ElementAdapter(ABC):
    """Abstract base class for all element adapters.

    An adapter recognises foreign tree objects and converts them, with their
    descendants, into ``Element`` trees.
    """

    def __init__(self, correlation_id: Optional[str] = None) -> None:
        self.correlation_id = correlation_id
        self._logger = get_logger(__name__, correlation_id, self.__class__.__name__)

    @property
    @abstractmethod
    def metadata(self) -> AdapterMetadata:
        """Get adapter metadata."""

    @abstractmethod
    def is_available(self) -> bool:
        """Check if the target library can be imported."""

    @abstractmethod
    def accepts(self, node: Any) -> bool:
        """Check if ``node`` is an element or document of the target library."""

    @abstractmethod
    def to_element(self, node: Any, strip_text: bool = True) -> Element:
        """Convert ``node`` and its descendants into an ``Element`` tree."""


class LxmlAdapter(ElementAdapter):
    """Adapter for ``lxml.etree`` elements and element trees."""

    @property
    def metadata(self) -> AdapterMetadata:
        return AdapterMetadata(
            name="lxml",
            target_library="lxml",
            description="Converts lxml.etree elements, keeping prefixes and lines",
        )

    def is_available(self) -> bool:
        return True

    def accepts(self, node: Any) -> bool:
        return etree.iselement(node) or isinstance(node, etree._ElementTree)

    def to_element(self, node: Any, strip_text: bool = True) -> Element:
        if isinstance(node, etree._ElementTree):
            node = node.getroot()
        if not isinstance(node.tag, str):
            raise MarkupParseError("Cannot bind a comment or processing instruction")
        return convert_lxml(node, strip_text)


def _describe_etree(node: Any) -> NodeDescription:
    tag = node.tag
    namespace = None
    if tag.startswith("{"):
        namespace, tag = tag[1:].split("}", 1)

    parts = [node.text] if node.text else []
    parts.extend(child.tail for child in node if child.tail)

    return NodeDescription(
        tag=tag,
        namespace=namespace,
        attributes=dict(node.attrib),
        text="".join(parts) if parts else None,
        children=[child for child in node if isinstance(child.tag, str)],
    )


class ElementTreeAdapter(ElementAdapter):
    """Adapter for ``xml.etree.ElementTree`` elements.

    ElementTree discards namespace prefixes, so qualified names are local
    names with the namespace URI kept separately.
    """

    @property
    def metadata(self) -> AdapterMetadata:
        return AdapterMetadata(
            name="elementtree",
            target_library="xml.etree.ElementTree",
            description="Converts standard-library ElementTree elements",
        )

    def is_available(self) -> bool:
        return True

    def accepts(self, node: Any) -> bool:
        return isinstance(node, (ET.Element, ET.ElementTree))

    def to_element(self, node: Any, strip_text: bool = True) -> Element:
        if isinstance(node, ET.ElementTree):
            node = node.getroot()
        return build_tree(node, _describe_etree, strip_text)


def _describe_soup(node: Any) -> NodeDescription:
    from bs4 import Tag

    name = node.name
    if node.prefix and ":" not in name:
        name = f"{node.prefix}:{name}"

    children = [child for child in node.children if isinstance(child, Tag)]
    attributes = {
        key: " ".join(value) if isinstance(value, list) else value
        for key, value in node.attrs.items()
    }

    return NodeDescription(
        tag=name,
        namespace=node.namespace,
        attributes=attributes,
        text=None if children else (node.get_text() or None),
        children=children,
        line=getattr(node, "sourceline", None),
    )


class BeautifulSoupAdapter(ElementAdapter):
    """Adapter for BeautifulSoup documents and tags (optional ``soup`` extra)."""

    @property
    def metadata(self) -> AdapterMetadata:
        return AdapterMetadata(
            name="beautifulsoup",
            target_library="beautifulsoup4",
            description="Converts BeautifulSoup tags, best with the 'xml' feature",
            optional=True,
        )

    def is_available(self) -> bool:
        try:
            import bs4  # noqa: F401
            return True
        except ImportError:
            return False

    def accepts(self, node: Any) -> bool:
        if not self.is_available():
            return False
        from bs4 import Tag
        return isinstance(node, Tag)

    def to_element(self, node: Any, strip_text: bool = True) -> Element:
        from bs4 import BeautifulSoup, Tag

        if isinstance(node, BeautifulSoup):
            root = next(
                (child for child in node.children if isinstance(child, Tag)), None
            )
            if root is None:
                raise MarkupParseError("BeautifulSoup document has no root element")
            node = root
        return build_tree(node, _describe_soup, strip_text)


class AdapterRegistry:
    """Registry for element adapters, consulted in registration order."""

    def __init__(self) -> None:
        self._adapters: Dict[str, Type[ElementAdapter]] = {}
        self._lock = threading.RLock()

    def register(self, adapter_class: Type[ElementAdapter]) -> None:
        """Register an adapter class under its metadata name."""
        with self._lock:
            metadata = adapter_class().metadata
            self._adapters[metadata.name] = adapter_class

    def get_adapter(
        self,
        adapter_name: str,
        correlation_id: Optional[str] = None
    ) -> Optional[ElementAdapter]:
        """Get an available adapter instance by name, or None."""
        with self._lock:
            adapter_class = self._adapters.get(adapter_name)
        if adapter_class is None:
            return None
        instance = adapter_class(correlation_id)
        return instance if instance.is_available() else None

    def find_adapter(
        self,
        node: Any,
        correlation_id: Optional[str] = None
    ) -> Optional[ElementAdapter]:
        """Find the first available adapter that accepts ``node``."""
        with self._lock:
            adapter_classes = list(self._adapters.values())
        for adapter_class in adapter_classes:
            instance = adapter_class(correlation_id)
            if instance.is_available() and instance.accepts(node):
                return instance
        return None

    def list_available_adapters(self) -> List[AdapterMetadata]:
        """List metadata of every adapter whose library is importable."""
        with self._lock:
            adapter_classes = list(self._adapters.values())
        return [
            instance.metadata
            for instance in (adapter_class() for adapter_class in adapter_classes)
            if instance.is_available()
        ]


# Global adapter registry instance
_adapter_registry = AdapterRegistry()
_adapter_registry.register(LxmlAdapter)
_adapter_registry.register(ElementTreeAdapter)
_adapter_registry.register(BeautifulSoupAdapter)


def register_adapter(adapter_class: Type[ElementAdapter]) -> None:
    """Register an element adapter globally."""
    _adapter_registry.register(adapter_class)


def get_adapter(
    adapter_name: str,
    correlation_id: Optional[str] = None
) -> Optional[ElementAdapter]:
    """Get a registered adapter instance by name."""
    return _adapter_registry.get_adapter(adapter_name, correlation_id)


def find_adapter(
    node: Any,
    correlation_id: Optional[str] = None
) -> Optional[ElementAdapter]:
    """Find a registered adapter that accepts ``node``."""
    return _adapter_registry.find_adapter(node, correlation_id)


def list_available_adapters() -> List[AdapterMetadata]:
    """List all available element adapters."""
    return _adapter_registry.list_available_adapters()


def adapt_element(
    node: Any,
    strip_text: bool = True,
    correlation_id: Optional[str] = None
) -> Element:
    """Convert a foreign element into an ``Element`` tree.

    ``Element`` instances are returned unchanged.

    Raises:
        MarkupParseError: If no registered adapter accepts ``node``
    """
    if isinstance(node, Element):
        return node
    adapter = _adapter_registry.find_adapter(node, correlation_id)
    if adapter is None:
        raise MarkupParseError(
            f"No element adapter accepts objects of type {type(node).__name__}"
        )
    return adapter.to_element(node, strip_text)
