"""
Minimal document-tree capability used by the selectors and extractors.

Everything downstream of the renderer works against ``Node`` only, so the
heuristics never touch BeautifulSoup's API directly.
"""

from typing import Callable, Iterator, Optional

from bs4 import BeautifulSoup
from bs4.element import Tag

from .utils.text import normalize_whitespace

Predicate = Callable[["Node"], bool]


class Node:
    """Read-only handle on one element of a parsed page."""

    __slots__ = ("_tag",)

    def __init__(self, tag: Tag):
        self._tag = tag

    def __eq__(self, other: object) -> bool:
        # Identity; bs4 Tags compare structurally.
        return isinstance(other, Node) and other._tag is self._tag

    def __hash__(self) -> int:
        return id(self._tag)

    def __repr__(self) -> str:
        return f"<Node {self.name} class={self.class_string!r}>"

    @property
    def name(self) -> str:
        return (self._tag.name or "").lower()

    def is_tag(self, *names: str) -> bool:
        return self.name in names

    def attribute(self, name: str) -> Optional[str]:
        """Attribute value, or None when the attribute is missing."""
        value = self._tag.get(name)
        if value is None:
            return None
        if isinstance(value, (list, tuple)):
            return " ".join(value)
        return str(value)

    def has_attribute(self, name: str) -> bool:
        return self._tag.has_attr(name)

    @property
    def class_string(self) -> str:
        return self.attribute("class") or ""

    def text(self) -> str:
        """Raw text content of the element and its descendants."""
        return self._tag.get_text()

    def normalized_text(self) -> str:
        return normalize_whitespace(self.text())

    def iter_descendants(self) -> Iterator["Node"]:
        """All descendant elements in document order."""
        for tag in self._tag.find_all(True):
            yield Node(tag)

    def find_descendants(self, predicate: Predicate) -> list["Node"]:
        return [node for node in self.iter_descendants() if predicate(node)]

    def find_first(self, predicate: Predicate) -> Optional["Node"]:
        for node in self.iter_descendants():
            if predicate(node):
                return node
        return None


def parse(markup: str) -> Node:
    """Parse rendered markup into a tree rooted at the document node."""
    return Node(BeautifulSoup(markup or "", "html.parser"))


def class_contains(*tokens: str) -> Predicate:
    """Predicate: the element's class attribute contains any token (case-insensitive)."""
    lowered = tuple(token.lower() for token in tokens)

    def predicate(node: Node) -> bool:
        classes = node.class_string.lower()
        return bool(classes) and any(token in classes for token in lowered)

    return predicate
