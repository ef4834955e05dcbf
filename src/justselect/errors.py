"""Centralized error message definitions for selector parse errors.

Every failure raised while compiling a selector carries a kebab-case code.
This module maps those codes to human-readable messages.
"""

from __future__ import annotations

from typing import Any


class SelectorError(ValueError):
    """Raised when a CSS selector is invalid."""

    code: str
    selector: str
    position: int

    def __init__(self, code: str, selector: str, position: int, **context: Any) -> None:
        self.code = code
        self.selector = selector
        self.position = position
        if code == "trailing-input":
            message = f"parsing {selector!r}: {generate_error_message(code, **context)}"
        else:
            message = f"{generate_error_message(code, **context)} at position {position} in {selector!r}"
        super().__init__(message)


def _describe(found: str | None) -> str:
    if not found:
        return "end of input"
    return repr(found)


def generate_error_message(code: str, **context: Any) -> str:
    """Generate human-readable error message from error code.

    Args:
        code: The error code string (kebab-case format)
        **context: Values referenced by the message, such as ``found``
            (the offending character), ``name`` (a pseudo-class name) or
            ``count`` (number of unparsed characters)

    Returns:
        Human-readable error message string
    """
    found = _describe(context.get("found"))
    name = context.get("name")
    count = context.get("count")

    messages = {
        # Sequence level
        "expected-selector": f"Expected selector, found {found} instead",
        "trailing-input": f"{count} characters left over",
        # Identifiers, names and strings
        "expected-identifier": f"Expected identifier, found {found} instead",
        "expected-name": f"Expected name, found {found} instead",
        "eof-in-escape": "Unexpected end of input after backslash",
        "eof-in-string": "Unexpected end of input in quoted string",
        "newline-in-string": "Unexpected end of line in quoted string",
        # Attribute selectors
        "eof-in-attribute-selector": "Unexpected end of input in attribute selector",
        "expected-attribute-operator": f"Expected equality operator, found {found} instead",
        "expected-closing-bracket": f"Expected ] to close attribute selector, found {found} instead",
        # Pseudo-classes
        "unsupported-pseudo-class": f"Unsupported pseudo-class: :{name}",
        "expected-opening-parenthesis": f"Expected ( after :{name}, found {found} instead",
        "expected-closing-parenthesis": f"Expected ) to close :{name}(), found {found} instead",
        # an+b expressions
        "eof-in-nth-expression": "Unexpected end of input in an+b expression",
        "invalid-nth-expression": f"Unexpected {found} in an+b expression",
        "expected-odd-or-even": f"Expected 'odd' or 'even', found {name!r} instead",
        "expected-integer": f"Expected integer, found {found} instead",
    }

    # Return message or fall back to the code itself if not found
    return messages.get(code, code)
