from __future__ import annotations

from typing import Any

from .selector import matches, query


class SimpleDomNode:
    """A container or leaf node: #document, #document-fragment, #comment or !doctype.

    Element nodes use ElementNode and text uses TextNode.
    """

    __slots__ = ("attrs", "children", "data", "name", "parent")

    name: str
    parent: SimpleDomNode | ElementNode | None
    attrs: dict[str, str | None] | list[tuple[str, str | None]] | None
    children: list[Any] | None
    data: str | None

    def __init__(
        self,
        name: str,
        attrs: dict[str, str | None] | list[tuple[str, str | None]] | None = None,
        data: str | None = None,
    ) -> None:
        self.name = name
        self.parent = None
        self.data = data

        if name == "#comment" or name == "!doctype":
            self.children = None
            self.attrs = None
        else:
            self.children = []
            self.attrs = attrs if attrs is not None else {}

    def append_child(self, node: Any) -> None:
        if self.children is not None:
            self.children.append(node)
            node.parent = self

    def query(self, selector: str) -> list[Any]:
        """
        Query this subtree using a CSS selector.

        This node itself is tested first, then its descendants in document
        order.

        Args:
            selector: A CSS selector string

        Returns:
            A list of matching nodes

        Raises:
            SelectorError: If the selector is invalid
        """
        result: list[Any] = query(self, selector)
        return result

    def matches(self, selector: str) -> bool:
        """Return True if this node matches the CSS selector."""
        return matches(self, selector)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"


class ElementNode(SimpleDomNode):
    __slots__ = ()

    children: list[Any]
    attrs: dict[str, str | None] | list[tuple[str, str | None]]

    def __init__(
        self,
        name: str,
        attrs: dict[str, str | None] | list[tuple[str, str | None]] | None = None,
    ) -> None:
        self.name = name
        self.parent = None
        self.data = None
        self.children = []
        self.attrs = attrs if attrs is not None else {}


class TextNode:
    __slots__ = ("data", "name", "parent")

    data: str | None
    name: str
    parent: SimpleDomNode | ElementNode | None

    def __init__(self, data: str | None) -> None:
        self.data = data
        self.parent = None
        self.name = "#text"

    @property
    def children(self) -> list[Any]:
        """Return empty list for TextNode (leaf node)."""
        return []

    def __repr__(self) -> str:
        return f"<TextNode {self.data!r}>"
