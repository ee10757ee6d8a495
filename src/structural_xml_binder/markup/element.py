"""Read-only markup tree consumed by the structural binder.

An ``Element`` is a named node with ordered children and optional text. The
parser and the element adapters produce these trees; the binder only reads
them.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple


@dataclass(eq=False)
class Element:
    """A single element of a parsed markup document.

    ``tag`` is the qualified name as written in the source (``prefix:local``
    or ``local``), ``namespace`` the resolved namespace URI if any.
    """

    tag: str
    namespace: Optional[str] = None
    attributes: Dict[str, str] = field(default_factory=dict)
    text: Optional[str] = None
    children: List["Element"] = field(default_factory=list)
    parent: Optional["Element"] = None
    line: Optional[int] = None

    def __post_init__(self) -> None:
        """Validate the tag and establish parent-child relationships."""
        if not self.tag:
            raise ValueError("Element tag cannot be empty")

        for child in self.children:
            child.parent = self

    def __repr__(self) -> str:
        return f"<Element {self.tag} children={len(self.children)}>"

    @property
    def local_name(self) -> str:
        """Get tag name without namespace prefix or Clark-notation URI."""
        if self.tag.startswith("{"):
            return self.tag.split("}", 1)[1]
        if ":" in self.tag:
            return self.tag.split(":", 1)[1]
        return self.tag

    @property
    def prefix(self) -> Optional[str]:
        """Get namespace prefix if the qualified name has one."""
        if ":" in self.tag and not self.tag.startswith("{"):
            return self.tag.split(":", 1)[0]
        return None

    @property
    def clark_name(self) -> str:
        """Get the ``{namespace}local`` form of the name."""
        if self.namespace:
            return f"{{{self.namespace}}}{self.local_name}"
        return self.local_name

    @property
    def is_leaf(self) -> bool:
        """Check if this element has no child elements."""
        return not self.children

    @property
    def content(self) -> str:
        """Text of a leaf element, empty string when there is none."""
        return self.text or ""

    def add_child(self, child: "Element") -> None:
        """Add a child element and establish parent relationship."""
        if not isinstance(child, Element):
            raise TypeError("Child must be an Element instance")

        child.parent = self
        self.children.append(child)

    def find_child(self, name: str) -> Optional["Element"]:
        """Find first direct child whose tag or local name matches."""
        for child in self.children:
            if name in (child.tag, child.local_name):
                return child
        return None

    def find_children(self, name: str) -> List["Element"]:
        """Find all direct children whose tag or local name matches."""
        return [
            child for child in self.children
            if name in (child.tag, child.local_name)
        ]

    def iter(self) -> Iterator["Element"]:
        """Iterate over this element and all descendants in document order."""
        yield self
        for child in self.children:
            yield from child.iter()

    def get_attribute(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Get attribute value with optional default."""
        return self.attributes.get(name, default)

    def has_attribute(self, name: str) -> bool:
        """Check if element has specific attribute."""
        return name in self.attributes

    def get_path(self) -> str:
        """Get XPath-like path to this element."""
        steps = []
        node: Optional[Element] = self
        while node is not None:
            step = node.tag
            if node.parent is not None:
                siblings = [
                    child for child in node.parent.children if child.tag == node.tag
                ]
                if len(siblings) > 1:
                    position = next(
                        index for index, sibling in enumerate(siblings, 1)
                        if sibling is node
                    )
                    step = f"{node.tag}[{position}]"
            steps.append(step)
            node = node.parent
        return "/" + "/".join(reversed(steps))

    def get_depth(self) -> int:
        """Get depth of this element in the tree (root = 0)."""
        depth = 0
        node = self.parent
        while node is not None:
            depth += 1
            node = node.parent
        return depth

    def to_dict(self) -> Dict[str, Any]:
        """Convert element to dictionary representation."""
        result: Dict[str, Any] = {"tag": self.tag}

        if self.namespace:
            result["namespace"] = self.namespace
        if self.attributes:
            result["attributes"] = dict(self.attributes)
        if self.children:
            result["children"] = [child.to_dict() for child in self.children]
        elif self.text is not None:
            result["text"] = self.text

        return result


@dataclass
class NodeDescription:
    """Foreign node data needed to build one ``Element``."""

    tag: str
    namespace: Optional[str] = None
    attributes: Dict[str, str] = field(default_factory=dict)
    text: Optional[str] = None
    children: List[Any] = field(default_factory=list)
    line: Optional[int] = None


def build_tree(
    root: Any,
    describe: Callable[[Any], NodeDescription],
    strip_text: bool = True,
) -> Element:
    """Build an ``Element`` tree from any foreign tree.

    ``describe`` maps one foreign node to its name, attributes, leaf text and
    foreign child elements. Construction is iterative so deep documents are
    not bounded by the interpreter recursion limit.
    """
    def make(node: Any) -> Tuple[Element, List[Any]]:
        description = describe(node)
        text = None
        if not description.children and description.text is not None:
            text = description.text.strip() if strip_text else description.text
        element = Element(
            tag=description.tag,
            namespace=description.namespace,
            attributes=description.attributes,
            text=text,
            line=description.line,
        )
        return element, description.children

    converted, pending = make(root)
    stack = [(converted, pending)]
    while stack:
        parent, remaining = stack.pop()
        for node in remaining:
            child, grandchildren = make(node)
            parent.add_child(child)
            if grandchildren:
                stack.append((child, grandchildren))
    return converted
