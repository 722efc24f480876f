"""Split a parsed document into one flat entry per heading."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import PurePosixPath

from apidoc2json.parameters import parse_parameter_list
from apidoc2json.queries import (
    add_stability_metadata,
    add_yaml_metadata,
    find_typed_list,
    is_markdown_url,
    is_stability_node,
    is_yaml_node,
    set_heading_metadata,
    update_link_reference,
    update_markdown_link,
    update_stability_prefix_to_link,
    update_type_reference,
    update_unix_manual_reference,
)
from apidoc2json.schemas import ApiDocEntry
from apidoc2json.schemas.nodes import CALLABLE_HEADING_TYPES, Heading, Node, Parent, Root, Text
from apidoc2json.signature import parse_signature
from apidoc2json.slugger import Slugger
from apidoc2json.unist import assert_node, remove_nodes, select_all, walk

logger = logging.getLogger(__name__)

# Text below these is not scanned for type or manual page references.
_NO_REFERENCE_PARENTS = {"link", "linkReference", "heading"}


def parse_api_doc(
    tree: Node,
    source: str,
    type_map: Mapping[str, str] | None = None,
    *,
    ignore_stability: bool = False,
) -> list[ApiDocEntry]:
    """Run the metadata pass over one document.

    Reference links are resolved and ``.md`` links rewritten document-wide;
    then every top-level heading becomes an :class:`ApiDocEntry` owning the
    nodes up to the next heading, with its stability, YAML metadata, type
    links and (for callables) signature filled in.

    The tree is modified in place. Headings of a document without any get a
    synthetic depth-1 heading named after the source file.

    Args:
        tree: Root of the parsed document.
        source: Path of the markdown source; its stem is the entry ``api``.
        type_map: Project type names to documentation URLs.
        ignore_stability: Leave stability blockquotes alone.

    Returns:
        The entries in document order.

    Raises:
        ContractError: If ``tree`` is not a ``root`` node.
    """
    root = assert_node(tree, "root")
    assert isinstance(root, Root)
    api = PurePosixPath(source.replace("\\", "/")).stem

    _resolve_links(root)

    if not any(isinstance(child, Heading) for child in root.children):
        logger.debug("No headings in %s, adding one for %r", source, api)
        root.children.insert(0, Heading(depth=1, children=[Text(value=api)]))

    heading_indexes = [
        index for index, child in enumerate(root.children) if isinstance(child, Heading)
    ]
    slugger = Slugger()
    entries: list[ApiDocEntry] = []

    for position, index in enumerate(heading_indexes):
        end = heading_indexes[position + 1] if position + 1 < len(heading_indexes) else len(root.children)
        heading = set_heading_metadata(root.children[index], slugger)
        entry = ApiDocEntry(
            api=api,
            api_doc_source=source,
            slug=heading.data.slug or "",
            heading=heading,
            content=Root(children=root.children[index + 1 : end]),
        )
        _apply_entry_metadata(entry, type_map, ignore_stability=ignore_stability)
        entries.append(entry)

    return entries


def _resolve_links(root: Root) -> None:
    definitions = select_all(root, "definition")
    for node, _, parent in walk(root):
        if node.type == "linkReference" and parent is not None:
            update_link_reference(node, definitions, parent)
    remove_nodes(root, lambda node: node.type == "definition")

    for node, _, _ in walk(root):
        if node.type == "link" and is_markdown_url(node.url):
            update_markdown_link(node)


def _apply_entry_metadata(
    entry: ApiDocEntry,
    type_map: Mapping[str, str] | None,
    *,
    ignore_stability: bool,
) -> None:
    content = entry.content

    for node in content.children:
        if is_stability_node(node):
            if not ignore_stability and entry.stability is None:
                add_stability_metadata(node, entry)
            update_stability_prefix_to_link(node)

    for node, _, _ in walk(content):
        if is_yaml_node(node):
            add_yaml_metadata(node, entry)
    remove_nodes(content, is_yaml_node)

    _link_references(content, type_map)

    heading_data = entry.heading.data
    if heading_data is not None and heading_data.type in CALLABLE_HEADING_TYPES:
        typed_list = find_typed_list(content, min_confidence=1)
        parameter_docs = parse_parameter_list(typed_list) if typed_list is not None else []
        entry.signature = parse_signature(heading_data, parameter_docs)


def _link_references(content: Root, type_map: Mapping[str, str] | None) -> None:
    for node, _, parent in walk(content):
        if node.type != "text" or not isinstance(parent, Parent):
            continue
        if parent.type in _NO_REFERENCE_PARENTS:
            continue
        for piece in update_type_reference(node, parent, type_map):
            if piece.type == "text":
                update_unix_manual_reference(piece, parent)
