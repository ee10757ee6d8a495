"""Markup tree layer for structural XML binding.

Key Components:
    Element: Read-only element node consumed by the binder
    parse / parse_string / parse_file: lxml-backed, namespace-aware parsing
    adapt_element: Conversion of lxml, ElementTree and BeautifulSoup trees
"""

from .adapters import (
    AdapterMetadata,
    AdapterRegistry,
    BeautifulSoupAdapter,
    ElementAdapter,
    ElementTreeAdapter,
    LxmlAdapter,
    adapt_element,
    find_adapter,
    get_adapter,
    list_available_adapters,
    register_adapter,
)
from .element import Element, NodeDescription, build_tree
from .parser import convert_lxml, parse, parse_file, parse_string

__all__ = [
    "AdapterMetadata",
    "AdapterRegistry",
    "BeautifulSoupAdapter",
    "ElementAdapter",
    "ElementTreeAdapter",
    "LxmlAdapter",
    "adapt_element",
    "find_adapter",
    "get_adapter",
    "list_available_adapters",
    "register_adapter",
    "Element",
    "NodeDescription",
    "build_tree",
    "convert_lxml",
    "parse",
    "parse_file",
    "parse_string",
]
