# CSS selector compiler for justselect
# Parses a simple selector sequence (type, #id, .class, [attr], structural
# pseudo-classes and :not()) into a matcher

from __future__ import annotations

from typing import Any

from .errors import SelectorError
from .matchers import (
    Selector,
    attribute_dashmatch_selector,
    attribute_equals_selector,
    attribute_exists_selector,
    attribute_includes_selector,
    attribute_prefix_selector,
    attribute_substring_selector,
    attribute_suffix_selector,
    empty_selector,
    intersection_selector,
    negated_selector,
    nth_child_selector,
    only_child_selector,
    root_selector,
    to_lower_ascii,
    type_selector,
    universal_selector,
)

_WHITESPACE: str = " \t\r\n\f"
_HEX_DIGITS: str = "0123456789abcdefABCDEF"

_ATTRIBUTE_CONSTRUCTORS = {
    "=": attribute_equals_selector,
    "~=": attribute_includes_selector,
    "|=": attribute_dashmatch_selector,
    "^=": attribute_prefix_selector,
    "$=": attribute_suffix_selector,
    "*=": attribute_substring_selector,
}

# name -> (last, of_type)
_NTH_PSEUDO_CLASSES: dict[str, tuple[bool, bool]] = {
    "nth-child": (False, False),
    "nth-last-child": (True, False),
    "nth-of-type": (False, True),
    "nth-last-of-type": (True, True),
}


def _is_digit(ch: str) -> bool:
    return "0" <= ch <= "9"


def _is_name_start(ch: str) -> bool:
    # CSS identifier start: ASCII letter, underscore, or non-ASCII
    return "a" <= ch <= "z" or "A" <= ch <= "Z" or ch == "_" or ord(ch) > 127


def _is_name_char(ch: str) -> bool:
    return _is_name_start(ch) or _is_digit(ch) or ch == "-"


class SelectorParser:
    """Recursive-descent parser over a selector string.

    A parser is single-use: it holds a cursor into the source and is thrown
    away once compilation finishes. Each production either advances the
    cursor past what it recognised or raises SelectorError.
    """

    __slots__ = ("length", "pos", "selector")

    selector: str
    pos: int
    length: int

    def __init__(self, selector: str) -> None:
        self.selector = selector
        self.pos = 0
        self.length = len(selector)

    def _peek(self, offset: int = 0) -> str:
        pos = self.pos + offset
        if pos < self.length:
            return self.selector[pos]
        return ""

    def _error(self, code: str, **context: Any) -> SelectorError:
        return SelectorError(code, self.selector, self.pos, **context)

    def _skip_whitespace(self) -> bool:
        """Skip whitespace and /* comments */. Return True if anything was skipped."""
        start = self.pos
        while self.pos < self.length:
            ch = self.selector[self.pos]
            if ch in _WHITESPACE:
                self.pos += 1
                continue
            if ch == "/" and self.selector.startswith("/*", self.pos):
                end = self.selector.find("*/", self.pos + 2)
                if end != -1:
                    self.pos = end + 2
                    continue
            break
        return self.pos > start

    # Lexical productions

    def _parse_escape(self) -> str:
        # Cursor is on the backslash
        start = self.pos + 1
        if start >= self.length:
            raise self._error("eof-in-escape")

        end = start
        while end < self.length and end - start < 6 and self.selector[end] in _HEX_DIGITS:
            end += 1

        if end == start:
            self.pos = start + 1
            return self.selector[start]

        code_point = int(self.selector[start:end], 16)
        if code_point == 0 or 0xD800 <= code_point <= 0xDFFF or code_point > 0x10FFFF:
            result = "\ufffd"
        else:
            result = chr(code_point)

        # A single whitespace character terminates a hex escape
        if self.selector.startswith("\r\n", end):
            end += 2
        elif end < self.length and self.selector[end] in _WHITESPACE:
            end += 1
        self.pos = end
        return result

    def _parse_name(self) -> str:
        parts: list[str] = []
        while self.pos < self.length:
            ch = self.selector[self.pos]
            if _is_name_char(ch):
                start = self.pos
                while self.pos < self.length and _is_name_char(self.selector[self.pos]):
                    self.pos += 1
                parts.append(self.selector[start : self.pos])
            elif ch == "\\":
                parts.append(self._parse_escape())
            else:
                break

        if not parts:
            raise self._error("expected-name", found=self._peek())
        return "".join(parts)

    def _parse_identifier(self) -> str:
        prefix = ""
        if self._peek() == "-":
            prefix = "-"
            self.pos += 1

        ch = self._peek()
        if not ch or not (_is_name_start(ch) or ch == "\\"):
            raise self._error("expected-identifier", found=ch)
        return prefix + self._parse_name()

    def _parse_string(self) -> str:
        quote = self.selector[self.pos]
        self.pos += 1
        parts: list[str] = []

        while self.pos < self.length:
            ch = self.selector[self.pos]
            if ch == quote:
                self.pos += 1
                return "".join(parts)
            if ch == "\\":
                # Backslash-newline is a line continuation
                following = self._peek(1)
                if following in ("\n", "\f"):
                    self.pos += 2
                elif following == "\r":
                    self.pos += 3 if self._peek(2) == "\n" else 2
                else:
                    parts.append(self._parse_escape())
                continue
            if ch in "\r\n\f":
                raise self._error("newline-in-string")
            parts.append(ch)
            self.pos += 1

        raise self._error("eof-in-string")

    def _parse_integer(self) -> int:
        start = self.pos
        while self.pos < self.length and _is_digit(self.selector[self.pos]):
            self.pos += 1
        if self.pos == start:
            raise self._error("expected-integer", found=self._peek())
        return int(self.selector[start : self.pos])

    # Selector productions

    def parse_simple_selector_sequence(self) -> Selector:
        """Parse a maximal run of simple selectors, joined by intersection.

        Stops at the first character that does not start a simple selector.
        Whether anything left over is an error is up to the caller.
        """
        ch = self._peek()
        if not ch or ch in _WHITESPACE:
            raise self._error("expected-selector", found=ch)

        result: Selector | None = None
        if ch == "*":
            self.pos += 1
        elif ch not in "#.[:":
            result = self._parse_type_selector()

        while self.pos < self.length:
            ch = self.selector[self.pos]
            if ch == "#":
                selector = self._parse_id_selector()
            elif ch == ".":
                selector = self._parse_class_selector()
            elif ch == "[":
                selector = self._parse_attribute_selector()
            elif ch == ":":
                selector = self._parse_pseudoclass_selector()
            else:
                break

            result = selector if result is None else intersection_selector(result, selector)

        if result is None:
            return universal_selector()
        return result

    def _parse_type_selector(self) -> Selector:
        return type_selector(self._parse_identifier())

    def _parse_id_selector(self) -> Selector:
        self.pos += 1  # skip '#'
        # IDs are names, so they may start with a digit
        return attribute_equals_selector("id", self._parse_name())

    def _parse_class_selector(self) -> Selector:
        self.pos += 1  # skip '.'
        return attribute_includes_selector("class", self._parse_identifier())

    def _parse_attribute_selector(self) -> Selector:
        """Parse [attr], [attr=value], [attr~=value] and friends."""
        self.pos += 1  # skip '['
        self._skip_whitespace()
        key = self._parse_identifier()
        self._skip_whitespace()

        if self.pos >= self.length:
            raise self._error("eof-in-attribute-selector")
        if self.selector[self.pos] == "]":
            self.pos += 1
            return attribute_exists_selector(key)

        if self.selector[self.pos] == "=":
            operator = "="
        else:
            operator = self.selector[self.pos : self.pos + 2]
            if len(operator) < 2:
                raise self._error("eof-in-attribute-selector")
            if operator not in _ATTRIBUTE_CONSTRUCTORS:
                raise self._error("expected-attribute-operator", found=operator)
        self.pos += len(operator)
        self._skip_whitespace()

        if self.pos >= self.length:
            raise self._error("eof-in-attribute-selector")
        if self.selector[self.pos] in "\"'":
            value = self._parse_string()
        else:
            value = self._parse_identifier()
        self._skip_whitespace()

        if self.pos >= self.length:
            raise self._error("eof-in-attribute-selector")
        if self.selector[self.pos] != "]":
            raise self._error("expected-closing-bracket", found=self.selector[self.pos])
        self.pos += 1

        return _ATTRIBUTE_CONSTRUCTORS[operator](key, value)

    def _parse_pseudoclass_selector(self) -> Selector:
        self.pos += 1  # skip ':'
        name_start = self.pos
        name = to_lower_ascii(self._parse_identifier())

        if name == "not":
            self._consume_opening_parenthesis(name)
            inner = self.parse_simple_selector_sequence()
            self._consume_closing_parenthesis(name)
            return negated_selector(inner)

        if name in _NTH_PSEUDO_CLASSES:
            last, of_type = _NTH_PSEUDO_CLASSES[name]
            self._consume_opening_parenthesis(name)
            a, b = self._parse_nth()
            self._consume_closing_parenthesis(name)
            return nth_child_selector(a, b, last, of_type)

        if name == "first-child":
            return nth_child_selector(0, 1, False, False)
        if name == "last-child":
            return nth_child_selector(0, 1, True, False)
        if name == "first-of-type":
            return nth_child_selector(0, 1, False, True)
        if name == "last-of-type":
            return nth_child_selector(0, 1, True, True)
        if name == "only-child":
            return only_child_selector(False)
        if name == "only-of-type":
            return only_child_selector(True)
        if name == "root":
            return root_selector()
        if name == "empty":
            return empty_selector()

        raise SelectorError("unsupported-pseudo-class", self.selector, name_start, name=name)

    def _consume_opening_parenthesis(self, name: str) -> None:
        if self._peek() != "(":
            raise self._error("expected-opening-parenthesis", name=name, found=self._peek())
        self.pos += 1
        self._skip_whitespace()

    def _consume_closing_parenthesis(self, name: str) -> None:
        self._skip_whitespace()
        if self._peek() != ")":
            raise self._error("expected-closing-parenthesis", name=name, found=self._peek())
        self.pos += 1

    # an+b

    def _parse_nth(self) -> tuple[int, int]:
        """Parse the argument of :nth-child() and friends into (a, b).

        Accepts odd, even, a bare integer, or [+-]N?n with an optional
        [+-]N offset.
        """
        ch = self._peek()
        if not ch:
            raise self._error("eof-in-nth-expression")

        if ch == "-":
            self.pos += 1
            return self._parse_nth_coefficient(-1)
        if ch == "+":
            self.pos += 1
            return self._parse_nth_coefficient(1)
        if _is_digit(ch):
            return self._parse_nth_coefficient(1)
        if ch in "nN":
            self.pos += 1
            return 1, self._parse_nth_offset()
        if ch in "oOeE":
            start = self.pos
            keyword = to_lower_ascii(self._parse_name())
            if keyword == "odd":
                return 2, 1
            if keyword == "even":
                return 2, 0
            raise SelectorError("expected-odd-or-even", self.selector, start, name=keyword)

        raise self._error("invalid-nth-expression", found=ch)

    def _parse_nth_coefficient(self, sign: int) -> tuple[int, int]:
        ch = self._peek()
        if not ch:
            raise self._error("eof-in-nth-expression")

        if ch in "nN":
            self.pos += 1
            return sign, self._parse_nth_offset()
        if not _is_digit(ch):
            raise self._error("invalid-nth-expression", found=ch)

        value = sign * self._parse_integer()
        if self._peek() in ("n", "N"):
            self.pos += 1
            return value, self._parse_nth_offset()
        # A bare integer is the offset
        return 0, value

    def _parse_nth_offset(self) -> int:
        self._skip_whitespace()
        ch = self._peek()
        if not ch:
            raise self._error("eof-in-nth-expression")
        if ch == "+":
            self.pos += 1
            self._skip_whitespace()
            return self._parse_integer()
        if ch == "-":
            self.pos += 1
            self._skip_whitespace()
            return -self._parse_integer()
        return 0


def compile_selector(selector: str) -> Selector:
    """Compile a selector string into a Selector.

    Args:
        selector: A simple selector sequence such as ``div.note[lang|=en]``

    Returns:
        A Selector; call it with a node to test that node

    Raises:
        SelectorError: If the selector is invalid or has unparsed trailing text
    """
    parser = SelectorParser(selector)
    compiled = parser.parse_simple_selector_sequence()

    if parser.pos < parser.length:
        raise SelectorError("trailing-input", selector, parser.pos, count=parser.length - parser.pos)

    return compiled


def match_all(selector: Selector, root: Any) -> list[Any]:
    """Return root and every descendant matching selector, in pre-order."""
    return selector.match_all(root)


def query(root: Any, selector_string: str) -> list[Any]:
    """
    Query the tree starting from root, returning all matching nodes.

    Unlike querySelectorAll, root itself is tested and comes first in the
    results when it matches.

    Args:
        root: The root node to search from
        selector_string: A CSS selector string

    Returns:
        A list of matching nodes in document order
    """
    return compile_selector(selector_string).match_all(root)


def matches(node: Any, selector_string: str) -> bool:
    """
    Check if a node matches a CSS selector.

    Args:
        node: The node to check
        selector_string: A CSS selector string

    Returns:
        True if the node matches, False otherwise
    """
    return compile_selector(selector_string).match(node)
