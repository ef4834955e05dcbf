import pytest

from justselect.matchers import (
    attribute_dashmatch_selector,
    attribute_equals_selector,
    attribute_exists_selector,
    attribute_includes_selector,
    attribute_prefix_selector,
    attribute_selector,
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
from justselect.node import ElementNode, SimpleDomNode, TextNode


def el(name, attrs=None, *children):
    node = ElementNode(name, attrs)
    for child in children:
        node.append_child(child)
    return node


def ids(nodes):
    return [node.attrs["id"] for node in nodes]


def walk(node):
    yield node
    for child in node.children or []:
        yield from walk(child)


@pytest.fixture
def five_children():
    # Text nodes between the elements must not affect positions
    parent = el("ol")
    for i in range(1, 6):
        parent.append_child(TextNode("\n  "))
        parent.append_child(el("li", {"id": str(i)}))
    parent.append_child(TextNode("\n"))
    return parent


@pytest.fixture
def mixed_children():
    parent = el("div")
    for i, tag in enumerate(["p", "span", "p", "span", "p", "em"], start=1):
        parent.append_child(el(tag, {"id": str(i)}))
    return parent


@pytest.mark.parametrize(
    "value,expected",
    [
        ("div", "div"),
        ("DIV", "div"),
        ("Data-Foo", "data-foo"),
        ("", ""),
        ("\u00c0B", "\u00c0b"),
        ("\u212a", "\u212a"),  # Kelvin sign is not folded
        ("\u0130", "\u0130"),
    ],
)
def test_to_lower_ascii(value, expected):
    assert to_lower_ascii(value) == expected


def test_to_lower_ascii_returns_input_when_unchanged():
    s = "already-lower-123"
    assert to_lower_ascii(s) is s


def test_type_selector_is_case_insensitive():
    div = el("div")
    for sel in (type_selector("div"), type_selector("DIV"), type_selector("Div")):
        assert sel(div)
        assert sel(el("DIV"))
        assert not sel(el("span"))


def test_type_selector_ignores_non_elements():
    sel = type_selector("div")
    assert not sel(TextNode("div"))
    assert not sel(SimpleDomNode("#comment", data="div"))
    assert not sel(SimpleDomNode("#document"))
    assert not sel(SimpleDomNode("!doctype"))


def test_universal_selector():
    sel = universal_selector()
    assert sel(el("anything"))
    assert not sel(TextNode("x"))
    assert not sel(SimpleDomNode("#document"))


@pytest.mark.parametrize(
    "selector,attrs,expected",
    [
        (attribute_exists_selector("title"), {"title": "x"}, True),
        (attribute_exists_selector("title"), {"title": None}, True),
        (attribute_exists_selector("title"), {"alt": "x"}, False),
        (attribute_exists_selector("TITLE"), {"title": ""}, True),
        (attribute_equals_selector("id", "main"), {"id": "main"}, True),
        (attribute_equals_selector("id", "main"), {"id": "Main"}, False),
        (attribute_equals_selector("id", ""), {"id": None}, True),
        (attribute_includes_selector("class", "b"), {"class": "a b c"}, True),
        (attribute_includes_selector("class", "ab"), {"class": "a b c"}, False),
        (attribute_includes_selector("class", "c"), {"class": "a\tb\nc"}, True),
        (attribute_includes_selector("class", "b"), {"class": "a\fb\r"}, True),
        (attribute_includes_selector("class", "a"), {"class": ""}, False),
        (attribute_includes_selector("class", ""), {"class": "a  b"}, True),
        (attribute_includes_selector("class", ""), {"class": " a"}, True),
        (attribute_includes_selector("class", ""), {"class": "a b "}, False),
        (attribute_includes_selector("class", ""), {"class": ""}, False),
        (attribute_dashmatch_selector("lang", "en"), {"lang": "en-US"}, True),
        (attribute_dashmatch_selector("lang", "en"), {"lang": "en"}, True),
        (attribute_dashmatch_selector("lang", "en"), {"lang": "english"}, False),
        (attribute_dashmatch_selector("lang", "en"), {"lang": "e"}, False),
        (attribute_dashmatch_selector("lang", "en-"), {"lang": "en-US"}, False),
        (attribute_prefix_selector("href", "http"), {"href": "https://x"}, True),
        (attribute_prefix_selector("href", "HTTP"), {"href": "https://x"}, False),
        (attribute_prefix_selector("href", ""), {"href": "https://x"}, True),
        (attribute_suffix_selector("href", ""), {"href": "https://x"}, True),
        (attribute_substring_selector("href", ""), {"href": "https://x"}, True),
        (attribute_substring_selector("href", ""), {"href": None}, True),
        (attribute_suffix_selector("href", ".png"), {"href": "a.png"}, True),
        (attribute_suffix_selector("href", ".png"), {"href": "a.png?x"}, False),
        (attribute_substring_selector("href", "example"), {"href": "//example.com"}, True),
        (attribute_substring_selector("href", "example"), {"href": "//exampl.com"}, False),
    ],
)
def test_attribute_selectors(selector, attrs, expected):
    assert selector(el("a", attrs)) is expected


def test_attribute_keys_are_case_insensitive_on_the_node():
    assert attribute_equals_selector("data-x", "1")(el("a", {"DATA-X": "1"}))


def test_attribute_selector_with_repeated_keys():
    node = el("a", [("rel", "nofollow"), ("rel", "external")])
    assert attribute_equals_selector("rel", "nofollow")(node)
    assert attribute_equals_selector("rel", "external")(node)
    assert not attribute_equals_selector("rel", "author")(node)


def test_attribute_selector_with_custom_predicate():
    sel = attribute_selector("width", lambda value: value.isdigit() and int(value) > 100)
    assert sel(el("img", {"width": "128"}))
    assert not sel(el("img", {"width": "64"}))
    assert not sel(el("img"))


def test_attribute_selector_ignores_non_elements():
    assert not attribute_exists_selector("id")(SimpleDomNode("#document", {"id": "x"}))
    assert not attribute_exists_selector("id")(TextNode("x"))


def test_intersection_and_negation_are_set_operations(five_children):
    nodes = list(walk(five_children))
    odd = nth_child_selector(2, 1)
    small = attribute_selector("id", lambda value: int(value) <= 3)
    both = intersection_selector(odd, small)
    not_odd = negated_selector(odd)

    for node in nodes:
        assert both(node) == (odd(node) and small(node))
        assert not_odd(node) != odd(node)

    assert ids(both.match_all(five_children)) == ["1", "3"]


def test_negation_matches_non_elements():
    sel = negated_selector(type_selector("div"))
    assert sel(TextNode("x"))
    assert sel(SimpleDomNode("#document"))
    assert not sel(el("div"))


@pytest.mark.parametrize(
    "a,b,last,expected",
    [
        (2, 1, False, ["1", "3", "5"]),
        (0, 3, False, ["3"]),
        (2, 1, True, ["1", "3", "5"]),
        (2, 0, False, ["2", "4"]),
        (2, 0, True, ["2", "4"]),
        (1, 0, False, ["1", "2", "3", "4", "5"]),
        (0, 0, False, []),
        (0, 6, False, []),
        (-1, 3, False, ["1", "2", "3"]),
        (-1, 3, True, ["3", "4", "5"]),
        (-2, 5, False, ["1", "3", "5"]),
        (3, -1, False, ["2", "5"]),
        (1, 4, False, ["4", "5"]),
        (0, 1, True, ["5"]),
    ],
)
def test_nth_child(five_children, a, b, last, expected):
    sel = nth_child_selector(a, b, last, False)
    assert ids(sel.match_all(five_children)) == expected


def test_nth_last_child_counts_from_the_end():
    parent = el("ul", None, *[el("li", {"id": str(i)}) for i in range(1, 7)])
    sel = nth_child_selector(2, 1, True, False)
    assert ids(sel.match_all(parent)) == ["2", "4", "6"]


@pytest.mark.parametrize(
    "a,b,last,expected",
    [
        (0, 1, False, ["1", "2", "6"]),
        (0, 1, True, ["4", "5", "6"]),
        (0, 2, False, ["3", "4"]),
        (2, 1, False, ["1", "2", "5", "6"]),
        (0, 3, True, ["1"]),
    ],
)
def test_nth_of_type(mixed_children, a, b, last, expected):
    sel = nth_child_selector(a, b, last, True)
    assert ids(sel.match_all(mixed_children)) == expected


def test_nth_child_needs_a_parent():
    sel = nth_child_selector(0, 1)
    assert not sel(el("li"))
    assert not sel(TextNode("x"))


def test_nth_child_detached_node():
    parent = el("ul", None, el("li"))
    stray = el("li")
    stray.parent = parent
    assert not nth_child_selector(0, 2)(stray)
    assert not nth_child_selector(1, 0, True, True)(stray)


def test_only_child_ignores_non_element_siblings():
    child = el("p")
    parent = el("div", None, TextNode("a"), child, SimpleDomNode("#comment", data="b"), TextNode("c"))
    assert only_child_selector(False)(child)
    assert not only_child_selector(False)(parent)

    parent.append_child(el("span"))
    assert not only_child_selector(False)(child)
    assert only_child_selector(True)(child)


def test_only_child_of_type(mixed_children):
    assert ids(only_child_selector(True).match_all(mixed_children)) == ["6"]
    assert only_child_selector(False).match_all(mixed_children) == []


def test_root_selector():
    doc = SimpleDomNode("#document")
    html = el("html", None, el("body"))
    doc.append_child(SimpleDomNode("!doctype"))
    doc.append_child(html)
    assert [node.name for node in root_selector().match_all(doc)] == ["html"]
    assert not root_selector()(el("html"))


def test_empty_selector():
    sel = empty_selector()
    assert sel(el("p"))
    assert sel(el("p", None, SimpleDomNode("#comment", data="x")))
    assert sel(el("p", None, TextNode("")))
    assert not sel(el("p", None, TextNode(" ")))
    assert not sel(el("p", None, el("br")))
    assert not sel(TextNode(""))


def test_match_all_is_pre_order():
    root = el("div", {"id": "root"})
    first = el("span", {"id": "first"})
    second = el("div", {"id": "second"})
    first.append_child(el("div", {"id": "nested"}))
    root.append_child(first)
    root.append_child(second)

    sel = type_selector("div")
    assert ids(sel.match_all(root)) == ["root", "nested", "second"]
    assert sel.match_first(root) is root
    assert ids([sel.match_first(first)]) == ["nested"]
    assert type_selector("table").match_first(root) is None
    assert ids(sel.filter([second, first, root])) == ["second", "root"]


def test_match_all_on_leaves():
    assert type_selector("div").match_all(TextNode("div")) == []
    assert type_selector("div").match_all(SimpleDomNode("#comment")) == []


def test_match_all_on_deep_tree():
    root = el("div", {"id": "0"})
    node = root
    for i in range(1, 5000):
        child = el("div", {"id": str(i)})
        node.append_child(child)
        node.append_child(el("span", {"id": f"s{i}"}))
        node = child

    found = type_selector("div").match_all(root)
    assert len(found) == 5000
    assert ids(found[:3]) == ["0", "1", "2"]
    assert found[-1] is node
    assert ids(type_selector("span").match_all(root)[:2]) == ["s4999", "s4998"]
    assert type_selector("p").match_first(root) is None
    assert attribute_equals_selector("id", "s1")(type_selector("span").match_first(root)) is False


@pytest.mark.parametrize(
    "selector,expected",
    [
        (type_selector("DIV"), "TypeSelector('div')"),
        (universal_selector(), "UniversalSelector()"),
        (attribute_exists_selector("Href"), "AttributeSelector('href')"),
        (attribute_dashmatch_selector("lang", "en"), "AttributeSelector('lang', op='|=', value='en')"),
        (negated_selector(only_child_selector(True)), "NegatedSelector(OnlyChildSelector(of_type=True))"),
        (nth_child_selector(2, 1, True, False), "NthChildSelector(2, 1, last=True, of_type=False)"),
        (
            intersection_selector(type_selector("p"), root_selector()),
            "IntersectionSelector(TypeSelector('p'), RootSelector())",
        ),
    ],
)
def test_repr(selector, expected):
    assert repr(selector) == expected
