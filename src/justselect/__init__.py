from .errors import SelectorError
from .matchers import (
    AttributeSelector,
    EmptySelector,
    IntersectionSelector,
    NegatedSelector,
    NthChildSelector,
    OnlyChildSelector,
    RootSelector,
    Selector,
    TypeSelector,
    UniversalSelector,
    to_lower_ascii,
)
from .node import ElementNode, SimpleDomNode, TextNode
from .selector import compile_selector, match_all, matches, query

__all__ = [
    "AttributeSelector",
    "ElementNode",
    "EmptySelector",
    "IntersectionSelector",
    "NegatedSelector",
    "NthChildSelector",
    "OnlyChildSelector",
    "RootSelector",
    "Selector",
    "SelectorError",
    "SimpleDomNode",
    "TextNode",
    "TypeSelector",
    "UniversalSelector",
    "compile_selector",
    "match_all",
    "matches",
    "query",
    "to_lower_ascii",
]
