from __future__ import annotations

import unittest

from markupguard.engine import classify, sanitize_node, sanitize_nodes
from markupguard.node import Element, Text
from markupguard.policy import DEFAULT_POLICY, REMOVE, SanitizationPolicy, TagAction, allow
from markupguard.serialize import to_html, to_test_format


class TestClassify(unittest.TestCase):
    def test_three_way_classification_is_case_insensitive(self) -> None:
        assert classify("DIV") is TagAction.ALLOW
        assert classify("ScRiPt") is TagAction.REMOVE
        assert classify("IFRAME") is TagAction.REMOVE
        assert classify("font") is TagAction.UNWRAP

    def test_matching_is_exact(self) -> None:
        assert classify("scripts") is TagAction.UNWRAP
        assert classify("x-script") is TagAction.UNWRAP


class TestSanitizeNode(unittest.TestCase):
    def test_text_is_returned_unchanged(self) -> None:
        out = sanitize_node(Text("<b>&"))
        assert out == [Text("<b>&")]

    def test_remove_drops_subtree_without_visiting_children(self) -> None:
        visited: list[str] = []

        def report(msg: str, *, node: object | None = None) -> None:
            visited.append(msg)

        script = Element("script", {}, [Element("b", {"onclick": "x"}, [Text("alert(1)")])])
        assert sanitize_node(script, report=report) == []
        assert visited == ["Unsafe tag 'script' (dropped content)"]

    def test_unwrap_splices_sanitized_children(self) -> None:
        node = Element(
            "font",
            {"color": "red"},
            [Text("a"), Element("b", {"onclick": "x"}, [Text("b")]), Element("script", {}, [Text("c")]), Text("d")],
        )
        out = sanitize_node(node)
        assert to_html(out) == "a<b>b</b>d"
        assert out == [Text("a"), Element("b", {}, [Text("b")]), Text("d")]

    def test_unwrap_can_expand_to_nothing(self) -> None:
        assert sanitize_node(Element("section", {}, [])) == []

    def test_allowed_element_is_rebuilt_with_filtered_attributes(self) -> None:
        node = Element("DIV", {"Style": "color: red; position: fixed", "onclick": "x()"}, [Text("hi")])
        out = sanitize_node(node)
        assert out == [Element("div", {"style": "color: red"}, [Text("hi")])]

    def test_input_tree_is_not_mutated(self) -> None:
        child = Element("img", {"src": "javascript:x", "alt": "a"})
        root = Element("p", {"onclick": "x"}, [child])
        sanitize_node(root)
        assert root.attrs == {"onclick": "x"}
        assert child.attrs == {"src": "javascript:x", "alt": "a"}

    def test_nested_unwrap_and_remove(self) -> None:
        tree = Element(
            "article",
            {},
            [
                Element("header", {}, [Element("h1", {}, [Text("Title")])]),
                Element("object", {}, [Element("p", {}, [Text("fallback")])]),
                Element("p", {}, [Element("custom", {}, [Text("x")]), Element("em", {}, [Text("y")])]),
            ],
        )
        out = sanitize_node(tree)
        assert to_test_format(out) == "\n".join(
            [
                "| <h1>",
                '|   "Title"',
                "| <p>",
                '|   "x"',
                "|   <em>",
                '|     "y"',
            ]
        )

    def test_custom_policy(self) -> None:
        policy = SanitizationPolicy(tags={"span": allow("title"), "b": REMOVE})
        nodes = [Element("span", {"title": "t", "id": "i"}, [Element("b", {}, [Text("gone")]), Text("kept")])]
        assert to_html(sanitize_nodes(nodes, policy)) == '<span title="t">kept</span>'

    def test_deep_trees_do_not_hit_the_recursion_limit(self) -> None:
        depth = 20000
        root = Element("div")
        current = root
        for i in range(depth):
            child = Element("font" if i % 2 else "div", {"onclick": "x"})
            current.append_child(child)
            current = child
        current.append_child(Text("leaf"))

        html = to_html(sanitize_node(root))
        divs = depth // 2 + 1
        assert html == "<div>" * divs + "leaf" + "</div>" * divs

    def test_rejects_foreign_objects(self) -> None:
        with self.assertRaises(TypeError):
            sanitize_node("<p>")  # type: ignore[arg-type]

    def test_sanitize_nodes_concatenates_roots(self) -> None:
        nodes = [Text("a"), Element("script", {}, [Text("x")]), Element("u", {}, [Text("b")])]
        assert sanitize_nodes(nodes, DEFAULT_POLICY) == [Text("a"), Element("u", {}, [Text("b")])]


if __name__ == "__main__":
    unittest.main()
