"""Tests for prose tree helpers."""

from __future__ import annotations

import pytest

from apidoc2json.exceptions import ContractError
from apidoc2json.schemas.nodes import Html, InlineCode, Link, List, ListItem, Paragraph, Root, Text
from apidoc2json.unist import assert_node, node_to_string, remove_nodes, replace_node, select_all, walk


class TestAssertNode:
    """Tests for assert_node function."""

    def test_accepts_matching_type(self) -> None:
        node = Text(value="x")
        assert assert_node(node, "text") is node
        assert assert_node(node, ("link", "text")) is node

    def test_rejects_wrong_type(self) -> None:
        with pytest.raises(ContractError, match="expected node to have type heading"):
            assert_node(Text(value="x"), "heading")

    def test_contract_error_is_a_type_error(self) -> None:
        """Contract violations are TypeErrors too."""
        with pytest.raises(TypeError):
            assert_node({"type": "text"})


class TestTraversal:
    """Tests for walk, select_all, replace_node and remove_nodes."""

    def test_walk_order(self) -> None:
        tree = Root(children=[Paragraph(children=[Text(value="a"), InlineCode(value="b")])])

        assert [node.type for node, _, _ in walk(tree)] == ["root", "paragraph", "text", "inlineCode"]

    def test_select_all(self) -> None:
        tree = Root(children=[Paragraph(children=[Text(value="a")]), Paragraph(children=[Text(value="b")])])

        assert [node.value for node in select_all(tree, "text")] == ["a", "b"]

    def test_replace_node(self) -> None:
        old = Text(value="old")
        paragraph = Paragraph(children=[old])

        replace_node(paragraph, old, [Text(value="a"), Text(value="b")])

        assert [node.value for node in paragraph.children] == ["a", "b"]

    def test_replace_missing_node(self) -> None:
        with pytest.raises(ContractError):
            replace_node(Paragraph(), Text(value="x"), [])

    def test_remove_nodes(self) -> None:
        tree = Root(children=[Html(value="<!-- x -->"), Paragraph(children=[Html(value="<br>")])])

        remove_nodes(tree, lambda node: node.type == "html")

        assert tree == Root(children=[Paragraph()])


class TestNodeToString:
    """Tests for node_to_string function."""

    def test_phrasing(self) -> None:
        """Inline nodes render back to markdown."""
        paragraph = Paragraph(
            children=[
                Text(value="See "),
                Link(url="fs.html", children=[InlineCode(value="fs")]),
                Text(value="."),
            ]
        )

        assert node_to_string(paragraph) == "See [`fs`](fs.html)."

    def test_list(self) -> None:
        """Lists render one marker per item."""
        node = List(
            children=[
                ListItem(children=[Paragraph(children=[Text(value="one")])]),
                ListItem(children=[Paragraph(children=[Text(value="two")])]),
            ]
        )

        assert node_to_string(node) == "- one\n- two"
