"""Namespace-aware markup parsing backed by lxml.

The parser turns a string, byte string, path or file-like object into an
``Element`` tree. It is performed once, synchronously, before any binding
starts. External entities and network access are disabled unless the
configuration explicitly enables entity resolution.
"""

import time
from pathlib import Path
from typing import Any, BinaryIO, Optional, TextIO, Union

from lxml import etree

from structural_xml_binder.markup.element import Element, NodeDescription, build_tree
from structural_xml_binder.shared import (
    MarkupConfig,
    MarkupParseError,
    get_logger,
)

# Type definitions for input data
InputType = Union[str, bytes, BinaryIO, TextIO, Path]

PREVIEW_LENGTH = 100  # Max length for content preview in logs
MS_PER_SECOND = 1000


def _make_parser(config: MarkupConfig, encoding: Optional[str]) -> etree.XMLParser:
    return etree.XMLParser(
        encoding=encoding,
        remove_blank_text=config.remove_blank_text,
        remove_comments=config.remove_comments,
        remove_pis=True,
        resolve_entities=config.resolve_entities,
        huge_tree=config.huge_tree,
        no_network=True,
        ns_clean=True,
    )


def _syntax_error(error: etree.XMLSyntaxError) -> MarkupParseError:
    line, column = getattr(error, "position", (None, None))
    return MarkupParseError(f"Malformed markup: {error.msg}", line, column)


def _leaf_text(node: Any) -> Optional[str]:
    # Comments and processing instructions split the text into tails.
    parts = [node.text] if node.text else []
    parts.extend(child.tail for child in node if child.tail)
    if not parts:
        return None
    return "".join(parts)


def describe_lxml(node: Any) -> NodeDescription:
    """Describe one lxml element for ``build_tree``."""
    qname = etree.QName(node)
    tag = f"{node.prefix}:{qname.localname}" if node.prefix else qname.localname
    return NodeDescription(
        tag=tag,
        namespace=qname.namespace,
        attributes=dict(node.attrib),
        text=_leaf_text(node),
        children=[child for child in node if isinstance(child.tag, str)],
        line=node.sourceline,
    )


def convert_lxml(root: Any, strip_text: bool = True) -> Element:
    """Convert an lxml element and its descendants into an ``Element`` tree.

    Comments and processing instructions are dropped.

    Args:
        root: lxml ``_Element`` to convert
        strip_text: Strip surrounding whitespace from leaf text

    Returns:
        Root of the converted tree
    """
    return build_tree(root, describe_lxml, strip_text)


def parse(
    source: InputType,
    config: Optional[MarkupConfig] = None,
    correlation_id: Optional[str] = None,
) -> Element:
    """Parse markup from any supported source into an ``Element`` tree.

    Args:
        source: Markup as string, bytes, ``Path`` or file-like object
        config: Parser configuration, defaults to ``MarkupConfig()``
        correlation_id: Optional correlation ID for log records

    Returns:
        Root element of the document

    Raises:
        MarkupParseError: If the input is malformed or cannot be read

    Examples:
        >>> root = parse('<list><item>1</item></list>')
        >>> root.find_child('item').text
        '1'
    """
    config = config or MarkupConfig()
    logger = get_logger(__name__, correlation_id, "markup_parser")

    if isinstance(source, Path):
        return parse_file(source, config, correlation_id)
    if hasattr(source, "read"):
        source = source.read()
    if not isinstance(source, (str, bytes)):
        raise MarkupParseError(
            f"Unsupported markup source type: {type(source).__name__}"
        )

    start_time = time.time()
    if isinstance(source, str):
        # lxml refuses str input that carries an encoding declaration.
        data = source.encode("utf-8")
        parser = _make_parser(config, "utf-8")
    else:
        data = source
        parser = _make_parser(config, config.encoding)

    logger.debug(
        "Parsing markup",
        extra={
            "content_length": len(data),
            "preview": data[:PREVIEW_LENGTH].decode("utf-8", "replace"),
        }
    )

    try:
        lxml_root = etree.fromstring(data, parser)
    except etree.XMLSyntaxError as e:
        raise _syntax_error(e) from e

    root = convert_lxml(lxml_root, strip_text=config.strip_text)
    logger.debug(
        "Markup parsed",
        extra={
            "root": root.tag,
            "processing_time_ms": (time.time() - start_time) * MS_PER_SECOND,
        }
    )
    return root


def parse_string(
    markup: Union[str, bytes],
    config: Optional[MarkupConfig] = None,
    correlation_id: Optional[str] = None,
) -> Element:
    """Parse markup held in memory."""
    return parse(markup, config, correlation_id)


def parse_file(
    file_path: Union[str, Path],
    config: Optional[MarkupConfig] = None,
    correlation_id: Optional[str] = None,
) -> Element:
    """Parse markup from a file, letting lxml detect the encoding.

    Raises:
        MarkupParseError: If the file is missing, unreadable or malformed
    """
    path_obj = Path(file_path)
    try:
        with path_obj.open("rb") as file:
            data = file.read()
    except FileNotFoundError as e:
        raise MarkupParseError(f"File not found: {path_obj}") from e
    except OSError as e:
        raise MarkupParseError(f"Cannot read {path_obj}: {e}") from e

    return parse(data, config, correlation_id)
