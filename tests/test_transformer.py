from __future__ import annotations

import io
import unittest
from contextlib import redirect_stderr, redirect_stdout

from builders import em, heading, paragraph, sample_document, text

from treelint.transformer import TreeTransformer


def _visits(tree):
    order = []
    TreeTransformer(tree).traverse(lambda node, state, content: order.append((node["type"], content)))
    return order


class TestTraversalOrder(unittest.TestCase):
    def test_post_order_left_to_right(self) -> None:
        tree = [paragraph(em("G"), "H"), heading(2, "A")]
        assert _visits(tree) == [
            ("text", "G"),
            ("em", "G"),
            ("text", "H"),
            ("paragraph", "GH"),
            ("text", "A"),
            ("heading", "A"),
        ]

    def test_content_aggregates_descendant_text(self) -> None:
        tree = sample_document()
        contents = {node_type: content for node_type, content in _visits(tree) if node_type == "list"}
        assert contents == {"list": "DEF"}

    def test_scalars_and_non_text_strings_add_no_text(self) -> None:
        tree = {"type": "math", "content": "x^2", "display": True, "size": 3}
        assert _visits(tree) == [("math", "")]

    def test_root_node_is_visited_last(self) -> None:
        tree = {"type": "document", "body": [paragraph("a")]}
        order = _visits(tree)
        assert order[-1] == ("document", "a")

    def test_plain_records_are_walked_but_not_visited(self) -> None:
        tree = {"type": "table", "meta": {"caption": [text("cap")]}}
        assert _visits(tree) == [("text", "cap"), ("table", "cap")]

    def test_state_current_node_is_visited_node(self) -> None:
        tree = sample_document()
        mismatches = []

        def visit(node, state, content):
            if state.current_node() is not node:
                mismatches.append(node)

        TreeTransformer(tree).traverse(visit)
        assert mismatches == []


class TestMutationDuringTraversal(unittest.TestCase):
    def test_deletion_does_not_skip_next_sibling(self) -> None:
        tree = [paragraph("a"), paragraph("b"), paragraph("c")]
        visited = []

        def visit(node, state, content):
            if node["type"] != "paragraph":
                return
            visited.append(content)
            if content == "a":
                state.replace(None)

        TreeTransformer(tree).traverse(visit)
        assert visited == ["a", "b", "c"]
        assert [p["content"][0]["content"] for p in tree] == ["b", "c"]

    def test_deleting_every_node(self) -> None:
        tree = [text("a"), text("b"), text("c")]
        visited = []

        def visit(node, state, content):
            visited.append(content)
            state.replace(None)

        TreeTransformer(tree).traverse(visit)
        assert visited == ["a", "b", "c"]
        assert tree == []

    def test_inserted_nodes_are_not_visited(self) -> None:
        tree = [text("a"), text("b")]
        visited = []

        def visit(node, state, content):
            visited.append(content)
            if content == "a":
                state.replace([text("x"), {"type": "lint", "content": [node]}, text("y")])

        TreeTransformer(tree).traverse(visit)
        assert visited == ["a", "b"]
        assert [n["type"] for n in tree] == ["text", "lint", "text", "text"]
        assert tree[3] == text("b")

    def test_single_replacement_is_not_visited(self) -> None:
        tree = [text("a"), text("b")]
        visited = []

        def visit(node, state, content):
            visited.append(content)
            if content == "a":
                state.replace({"type": "lint", "content": [node]})

        TreeTransformer(tree).traverse(visit)
        assert visited == ["a", "b"]
        assert tree[0]["type"] == "lint"

    def test_removed_next_sibling_is_not_visited(self) -> None:
        tree = [text("a"), text("b"), text("c")]
        visited = []

        def visit(node, state, content):
            visited.append(content)
            if content == "a":
                state.remove_next_sibling()

        TreeTransformer(tree).traverse(visit)
        assert visited == ["a", "c"]


class TestDebugTrace(unittest.TestCase):
    def test_debug_prints_each_visit_to_stderr(self) -> None:
        out, err = io.StringIO(), io.StringIO()
        with redirect_stdout(out), redirect_stderr(err):
            TreeTransformer([paragraph("hi")], debug=True).traverse(lambda n, s, c: None)
        assert out.getvalue() == ""
        lines = err.getvalue().splitlines()
        assert len(lines) == 2
        assert lines[0].strip() == "visit text (2 chars)"
        assert lines[1] == "visit paragraph (2 chars)"

    def test_no_output_without_debug(self) -> None:
        out, err = io.StringIO(), io.StringIO()
        with redirect_stdout(out), redirect_stderr(err):
            TreeTransformer([paragraph("hi")]).traverse(lambda n, s, c: None)
        assert out.getvalue() == ""
        assert err.getvalue() == ""
