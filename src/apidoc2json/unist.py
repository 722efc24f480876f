"""Helpers for walking, checking and stringifying prose trees."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Sequence
from typing import TYPE_CHECKING

from apidoc2json.exceptions import ContractError
from apidoc2json.schemas.nodes import Node, Parent

if TYPE_CHECKING:
    from apidoc2json.schemas.entries import ApiDocEntry


def assert_node(
    node: object,
    node_type: str | Sequence[str] | None = None,
    *,
    entry: ApiDocEntry | None = None,
) -> Node:
    """Check that ``node`` is a prose node, optionally of a given type.

    Raises:
        ContractError: If ``node`` is not a prose node or has the wrong type.
    """
    if not isinstance(node, Node):
        raise ContractError(
            f"expected a prose node, got {type(node).__name__}", entry=entry
        )
    if node_type is None:
        return node
    expected = (node_type,) if isinstance(node_type, str) else tuple(node_type)
    actual = getattr(node, "type", None)
    if actual not in expected:
        raise ContractError(
            f"expected node to have type {' or '.join(expected)}, got {actual}",
            entry=entry,
        )
    return node


def children_of(node: Node) -> list[Node]:
    return node.children if isinstance(node, Parent) else []


def walk(tree: Node) -> Iterator[tuple[Node, int | None, Parent | None]]:
    """Yield ``(node, index, parent)`` for every node, in document order.

    The walk snapshots each child list before descending, so callers may
    replace the node they were handed without disturbing the iteration.
    """
    yield tree, None, None
    yield from _walk_children(tree)


def _walk_children(node: Node) -> Iterator[tuple[Node, int | None, Parent | None]]:
    if not isinstance(node, Parent):
        return
    for index, child in enumerate(list(node.children)):
        yield child, index, node
        yield from _walk_children(child)


def select_all(tree: Node, node_type: str) -> list[Node]:
    """Return every node of ``node_type`` below (and including) ``tree``."""
    return [node for node, _, _ in walk(tree) if getattr(node, "type", None) == node_type]


def replace_node(parent: Parent, node: Node, replacements: Iterable[Node]) -> None:
    """Swap ``node`` for ``replacements`` in its parent's child list."""
    for index, child in enumerate(parent.children):
        if child is node:
            parent.children[index : index + 1] = list(replacements)
            return
    raise ContractError(f"{node.type} node is not a child of {parent.type}")


def remove_nodes(tree: Node, predicate: Callable[[Node], bool]) -> None:
    """Drop every descendant of ``tree`` matching ``predicate``."""
    if not isinstance(tree, Parent):
        return
    tree.children = [child for child in tree.children if not predicate(child)]
    for child in tree.children:
        remove_nodes(child, predicate)


def node_to_string(node: Node) -> str:
    """Render a node back to (approximately) the markdown it came from."""
    node_type = getattr(node, "type", None)

    if node_type == "text" or node_type == "html":
        return node.value
    if node_type == "inlineCode":
        return f"`{node.value}`"
    if node_type == "code":
        fence = f"```{node.lang or ''}"
        return f"{fence}\n{node.value}\n```"
    if node_type == "break":
        return "\n"
    if node_type == "thematicBreak":
        return "***"
    if node_type == "emphasis":
        return f"*{nodes_to_string(node.children)}*"
    if node_type == "strong":
        return f"**{nodes_to_string(node.children)}**"
    if node_type == "delete":
        return f"~~{nodes_to_string(node.children)}~~"
    if node_type == "link":
        return f"[{nodes_to_string(node.children)}]({node.url})"
    if node_type == "linkReference":
        return f"[{nodes_to_string(node.children)}][{node.identifier}]"
    if node_type == "definition":
        return f"[{node.label or node.identifier}]: {node.url}"
    if node_type == "heading":
        return f"{'#' * node.depth} {nodes_to_string(node.children)}"
    if node_type == "blockquote":
        inner = _join_blocks(node.children)
        return "\n".join(f"> {line}" if line else ">" for line in inner.split("\n"))
    if node_type == "list":
        return "\n".join(_list_item_to_string(item, node.ordered, i) for i, item in enumerate(node.children))
    if node_type == "listItem":
        return _join_blocks(node.children, separator="\n")
    if node_type == "root":
        return _join_blocks(node.children)

    # paragraph and any other phrasing container
    return nodes_to_string(children_of(node))


def nodes_to_string(nodes: Iterable[Node]) -> str:
    return "".join(node_to_string(node) for node in nodes)


def _join_blocks(nodes: Iterable[Node], separator: str = "\n\n") -> str:
    return separator.join(block for block in (node_to_string(node) for node in nodes) if block)


def _list_item_to_string(item: Node, ordered: bool, index: int) -> str:
    marker = f"{index + 1}. " if ordered else "- "
    lines = node_to_string(item).split("\n")
    indent = " " * len(marker)
    return "\n".join(
        [marker + lines[0]] + [indent + line if line else line for line in lines[1:]]
    )
