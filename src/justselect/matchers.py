# Matcher algebra for compiled selectors
# Each matcher is an immutable predicate over a single document node

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Mapping, Sequence
from functools import partial
from typing import Any

_ASCII_UPPER: str = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
_ASCII_LOWER_TABLE: dict[int, int] = str.maketrans(_ASCII_UPPER, _ASCII_UPPER.lower())
_WHITESPACE_TABLE: dict[int, int] = str.maketrans("\t\r\n\f", "    ")

# Non-element nodes whose children are top-level elements
_DOCUMENT_NAMES: frozenset[str] = frozenset({"#document", "#document-fragment"})


def to_lower_ascii(s: str) -> str:
    """Return s with ASCII capital letters lowercased.

    Non-ASCII characters are left untouched. When there is nothing to fold
    s itself is returned.
    """
    for ch in s:
        if "A" <= ch <= "Z":
            return s.translate(_ASCII_LOWER_TABLE)
    return s


# Node helpers. Nodes are duck-typed: see justselect.node for the shape.


def _is_element(node: Any) -> bool:
    name = getattr(node, "name", None)
    return isinstance(name, str) and bool(name) and name[0] not in "#!"


def _children(node: Any) -> Sequence[Any]:
    return getattr(node, "children", None) or ()


def _attribute_items(node: Any) -> Iterable[tuple[str, str | None]]:
    attrs = getattr(node, "attrs", None)
    if not attrs:
        return ()
    if isinstance(attrs, Mapping):
        return attrs.items()
    return attrs


# Attribute value tests. Valueless attributes are compared as "".


def _always(value: str) -> bool:  # noqa: ARG001
    return True


def _equals(expected: str, value: str) -> bool:
    return value == expected


def _includes(expected: str, value: str) -> bool:
    words = value.translate(_WHITESPACE_TABLE).split(" ")
    if not words[-1]:
        # A trailing separator does not start another item
        words.pop()
    return expected in words


def _dashmatch(expected: str, value: str) -> bool:
    if value == expected:
        return True
    if len(value) <= len(expected):
        return False
    return value.startswith(expected) and value[len(expected)] == "-"


def _prefix(expected: str, value: str) -> bool:
    return value.startswith(expected)


def _suffix(expected: str, value: str) -> bool:
    return value.endswith(expected)


def _substring(expected: str, value: str) -> bool:
    return expected in value


class Selector:
    """Base class for compiled selectors.

    A selector is called with a node and returns whether it matches. Calling
    never raises, whatever the node's position in its tree.
    """

    __slots__ = ()

    def match(self, node: Any) -> bool:
        raise NotImplementedError

    def __call__(self, node: Any) -> bool:
        return self.match(node)

    def match_all(self, root: Any) -> list[Any]:
        """Return root and its descendants that match, in document order."""
        return [node for node in _iter_preorder(root) if self.match(node)]

    def match_first(self, root: Any) -> Any | None:
        """Return the first match in document order, or None."""
        for node in _iter_preorder(root):
            if self.match(node):
                return node
        return None

    def filter(self, nodes: Iterable[Any]) -> list[Any]:
        """Return the nodes that match, keeping their order."""
        return [node for node in nodes if self.match(node)]


def _iter_preorder(root: Any) -> Iterator[Any]:
    # Iterative pre-order walk; deep trees do not hit the recursion limit
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        children = _children(node)
        if children:
            stack.extend(reversed(children))


class UniversalSelector(Selector):
    __slots__ = ()

    def match(self, node: Any) -> bool:
        return _is_element(node)

    def __repr__(self) -> str:
        return "UniversalSelector()"


class TypeSelector(Selector):
    """Matches elements by tag name, ASCII case-insensitively."""

    __slots__ = ("tag",)

    tag: str

    def __init__(self, tag: str) -> None:
        self.tag = to_lower_ascii(tag)

    def match(self, node: Any) -> bool:
        return _is_element(node) and to_lower_ascii(node.name) == self.tag

    def __repr__(self) -> str:
        return f"TypeSelector({self.tag!r})"


class AttributeSelector(Selector):
    """Matches elements with an attribute named key whose value passes predicate.

    If the key occurs more than once on a node, any one passing occurrence is
    enough.
    """

    __slots__ = ("key", "operator", "predicate", "value")

    key: str
    predicate: Callable[[str], bool]
    operator: str | None
    value: str | None

    def __init__(
        self,
        key: str,
        predicate: Callable[[str], bool],
        operator: str | None = None,
        value: str | None = None,
    ) -> None:
        self.key = to_lower_ascii(key)
        self.predicate = predicate
        self.operator = operator
        self.value = value

    def match(self, node: Any) -> bool:
        if not _is_element(node):
            return False
        key = self.key
        for name, value in _attribute_items(node):
            if to_lower_ascii(name) == key and self.predicate(value or ""):
                return True
        return False

    def __repr__(self) -> str:
        parts = [f"AttributeSelector({self.key!r}"]
        if self.operator:
            parts.append(f", op={self.operator!r}")
        if self.value is not None:
            parts.append(f", value={self.value!r}")
        parts.append(")")
        return "".join(parts)


class IntersectionSelector(Selector):
    __slots__ = ("a", "b")

    a: Selector
    b: Selector

    def __init__(self, a: Selector, b: Selector) -> None:
        self.a = a
        self.b = b

    def match(self, node: Any) -> bool:
        return self.a.match(node) and self.b.match(node)

    def __repr__(self) -> str:
        return f"IntersectionSelector({self.a!r}, {self.b!r})"


class NegatedSelector(Selector):
    __slots__ = ("a",)

    a: Selector

    def __init__(self, a: Selector) -> None:
        self.a = a

    def match(self, node: Any) -> bool:
        return not self.a.match(node)

    def __repr__(self) -> str:
        return f"NegatedSelector({self.a!r})"


class NthChildSelector(Selector):
    """Implements :nth-child(an+b).

    With last=True positions are counted from the end (:nth-last-child).
    With of_type=True only siblings with the same tag name are counted
    (:nth-of-type, :nth-last-of-type).
    """

    __slots__ = ("a", "b", "last", "of_type")

    a: int
    b: int
    last: bool
    of_type: bool

    def __init__(self, a: int, b: int, last: bool = False, of_type: bool = False) -> None:
        self.a = a
        self.b = b
        self.last = last
        self.of_type = of_type

    def match(self, node: Any) -> bool:
        if not _is_element(node):
            return False
        parent = getattr(node, "parent", None)
        if parent is None:
            return False

        node_name = to_lower_ascii(node.name) if self.of_type else None
        index = -1
        count = 0
        for child in _children(parent):
            if not _is_element(child):
                continue
            if node_name is not None and to_lower_ascii(child.name) != node_name:
                continue
            count += 1
            if child is node:
                index = count
                if not self.last:
                    break

        if index == -1:
            # Detached: node is not listed among its parent's children
            return False

        if self.last:
            index = count - index + 1

        diff = index - self.b
        if self.a == 0:
            return diff == 0
        return diff % self.a == 0 and diff // self.a >= 0

    def __repr__(self) -> str:
        return f"NthChildSelector({self.a}, {self.b}, last={self.last}, of_type={self.of_type})"


class OnlyChildSelector(Selector):
    """Implements :only-child, or :only-of-type when of_type is True."""

    __slots__ = ("of_type",)

    of_type: bool

    def __init__(self, of_type: bool = False) -> None:
        self.of_type = of_type

    def match(self, node: Any) -> bool:
        if not _is_element(node):
            return False
        parent = getattr(node, "parent", None)
        if parent is None:
            return False

        node_name = to_lower_ascii(node.name) if self.of_type else None
        count = 0
        for child in _children(parent):
            if not _is_element(child):
                continue
            if node_name is not None and to_lower_ascii(child.name) != node_name:
                continue
            count += 1
            if count > 1:
                return False
        return count == 1

    def __repr__(self) -> str:
        return f"OnlyChildSelector(of_type={self.of_type})"


class RootSelector(Selector):
    """Implements :root, an element whose parent is the document itself."""

    __slots__ = ()

    def match(self, node: Any) -> bool:
        if not _is_element(node):
            return False
        parent = getattr(node, "parent", None)
        return parent is not None and getattr(parent, "name", None) in _DOCUMENT_NAMES

    def __repr__(self) -> str:
        return "RootSelector()"


class EmptySelector(Selector):
    """Implements :empty. Comments do not count as content."""

    __slots__ = ()

    def match(self, node: Any) -> bool:
        if not _is_element(node):
            return False
        for child in _children(node):
            if _is_element(child):
                return False
            if getattr(child, "name", None) == "#text" and getattr(child, "data", None):
                return False
        return True

    def __repr__(self) -> str:
        return "EmptySelector()"


# Constructors


def universal_selector() -> Selector:
    return UniversalSelector()


def type_selector(tag: str) -> Selector:
    return TypeSelector(tag)


def attribute_selector(key: str, predicate: Callable[[str], bool]) -> Selector:
    return AttributeSelector(key, predicate)


def attribute_exists_selector(key: str) -> Selector:
    return AttributeSelector(key, _always)


def attribute_equals_selector(key: str, val: str) -> Selector:
    return AttributeSelector(key, partial(_equals, val), "=", val)


def attribute_includes_selector(key: str, val: str) -> Selector:
    """Match a whitespace-separated attribute value containing val as one item."""
    return AttributeSelector(key, partial(_includes, val), "~=", val)


def attribute_dashmatch_selector(key: str, val: str) -> Selector:
    """Match an attribute equal to val or starting with val followed by a hyphen."""
    return AttributeSelector(key, partial(_dashmatch, val), "|=", val)


def attribute_prefix_selector(key: str, val: str) -> Selector:
    return AttributeSelector(key, partial(_prefix, val), "^=", val)


def attribute_suffix_selector(key: str, val: str) -> Selector:
    return AttributeSelector(key, partial(_suffix, val), "$=", val)


def attribute_substring_selector(key: str, val: str) -> Selector:
    return AttributeSelector(key, partial(_substring, val), "*=", val)


def intersection_selector(a: Selector, b: Selector) -> Selector:
    return IntersectionSelector(a, b)


def negated_selector(a: Selector) -> Selector:
    return NegatedSelector(a)


def nth_child_selector(a: int, b: int, last: bool = False, of_type: bool = False) -> Selector:
    return NthChildSelector(a, b, last, of_type)


def only_child_selector(of_type: bool = False) -> Selector:
    return OnlyChildSelector(of_type)


def root_selector() -> Selector:
    return RootSelector()


def empty_selector() -> Selector:
    return EmptySelector()
