"""Predicates and mutators over prose trees.

Each mutator works on the node it is given (and its parent where it has to
splice children) and leaves everything else alone. Content that does not
match a pattern is left as it is: these never fail on document content, only
on being handed something that is not a prose node.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping
from typing import Any

import yaml

from apidoc2json.config import DOC_API_STABILITY_SECTION_REF_URL, DOC_MAN_BASE_URL
from apidoc2json.headings import parse_heading_into_metadata
from apidoc2json.schemas import ApiDocEntry, StabilityData
from apidoc2json.schemas.nodes import (
    Blockquote,
    Definition,
    Heading,
    Html,
    InlineCode,
    Link,
    LinkReference,
    List,
    Node,
    Parent,
    Text,
)
from apidoc2json.slugger import Slugger
from apidoc2json.type_map import resolve_type_pieces
from apidoc2json.unist import assert_node, nodes_to_string, replace_node

logger = logging.getLogger(__name__)


# `foo.md` or `foo.md#bar`, but not `https://host/foo.md`.
MARKDOWN_URL_RE = re.compile(r"^(?![+a-zA-Z]+:)([^#?]+)\.md(#.+)?$")
# {Type} and {Type|Other}.
TYPE_REFERENCE_RE = re.compile(r"\{(?! )([^<({})>]+?)(?<! )\}")
STABILITY_INDEX_RE = re.compile(r"^Stability: ([0-5](?:\.[0-3])?)(?:\s*-\s*)?(.*)$", re.DOTALL)
STABILITY_INDEX_PREFIX_RE = re.compile(r"^Stability: ([0-5](?:\.[0-3])?)")
YAML_INNER_CONTENT_RE = re.compile(r"^<!--[ ]?(?:YAML([\s\S]*?))?[ ]?-->")
# <!-- introduced_in=v0.10.0 -->
METADATA_COMMENT_RE = re.compile(r"^<!--\s*([a-z_]+)=(.*?)\s*-->$", re.DOTALL)
# open(2), readv(2), fcntl(3p)
UNIX_MANUAL_PAGE_RE = re.compile(r"\b([a-z.]+)\((\d)([a-z]?)\)")
TYPED_LIST_STARTERS_RE = re.compile(r"^(Returns|Extends|Type):?\s*")

VALID_JAVASCRIPT_PROPERTY = re.compile(r"^[.a-z0-9$_'-]+$", re.IGNORECASE)

# YAML keys renamed onto ApiDocEntry fields.
_YAML_FIELD_NAMES = {
    "added": "added_in",
    "deprecated": "deprecated_in",
    "removed": "removed_in",
    "napiVersion": "n_api_version",
}
_YAML_VERSION_FIELDS = ("added_in", "deprecated_in", "removed_in", "n_api_version", "introduced_in")


# Predicates


def is_typed_list(node: object) -> int:
    """Return how confident we are that ``node`` is a typed (parameter) list.

    2: the first item opens with "Returns:", "Extends:", "Type:" or a type
       link such as ``<string>``.
    1: the first item opens with an identifier-like inline code token.
    0: anything else, including non-list nodes.
    """
    if not isinstance(node, List) or not node.children:
        return 0

    first_item = node.children[0]
    if not isinstance(first_item, Parent) or not first_item.children:
        return 0
    first_block = first_item.children[0]
    if not isinstance(first_block, Parent) or not first_block.children:
        return 0
    first = first_block.children[0]

    value = getattr(first, "value", None)
    value = value.lstrip() if isinstance(value, str) else None

    if value and TYPED_LIST_STARTERS_RE.match(value):
        return 2

    if isinstance(first, Link) and first.children:
        label = getattr(first.children[0], "value", "")
        if isinstance(label, str) and label.startswith("<"):
            return 2

    if isinstance(first, InlineCode) and value and VALID_JAVASCRIPT_PROPERTY.match(value):
        return 1

    return 0


def is_stability_node(node: object) -> bool:
    """True for a blockquote whose text opens with ``Stability: <index>``."""
    if not isinstance(node, Blockquote):
        return False
    paragraph = node.children[0] if node.children else None
    if paragraph is None:
        return False
    return bool(STABILITY_INDEX_PREFIX_RE.match(_plain_text(paragraph).lstrip()))


def is_yaml_node(node: object) -> bool:
    if not isinstance(node, Html):
        return False
    return bool(YAML_INNER_CONTENT_RE.match(node.value) or METADATA_COMMENT_RE.match(node.value))


def is_markdown_url(url: str) -> bool:
    return bool(MARKDOWN_URL_RE.match(url))


def find_typed_list(content: Node, min_confidence: int = 1) -> List | None:
    """Return the first top-level list of ``content`` if it is typed enough.

    Only the first list counts: a typed list documents the entry when it
    leads its content, not when it shows up further down in the prose.
    """
    for child in getattr(content, "children", []):
        if isinstance(child, List):
            return child if is_typed_list(child) >= min_confidence else None
    return None


# Mutators


def set_heading_metadata(heading: Node, slugger: Slugger | None = None) -> Heading:
    """Attach ``{text, name, depth, type, slug}`` as the heading's ``data``."""
    node = assert_node(heading, "heading")
    assert isinstance(node, Heading)
    text = nodes_to_string(node.children)
    data = parse_heading_into_metadata(text, node.depth)
    if slugger is not None:
        data.slug = slugger.slug(text)
    node.data = data
    return node


def update_markdown_link(node: Node) -> Node:
    """Rewrite ``foo.md#bar`` to ``foo.html#bar``; other URLs are kept."""
    link = assert_node(node, ("link", "definition"))
    link.url = MARKDOWN_URL_RE.sub(lambda m: f"{m.group(1)}.html{m.group(2) or ''}", link.url)
    return link


def update_link_reference(
    node: Node, definitions: Iterable[Definition], parent: Parent | None = None
) -> Node:
    """Resolve a reference-style link against the document's definitions.

    The resolved link is a new ``link`` node; when ``parent`` is given it takes
    the reference's slot among the parent's children. An unknown identifier
    leaves the reference untouched.
    """
    reference = assert_node(node, "linkReference")
    assert isinstance(reference, LinkReference)
    identifier = reference.identifier.lower()
    definition = next(
        (item for item in definitions if item.identifier.lower() == identifier), None
    )
    if definition is None:
        logger.debug("Unresolved link reference %r", reference.identifier)
        return reference

    link = Link(
        url=definition.url,
        title=definition.title,
        children=list(reference.children),
        position=reference.position,
    )
    if parent is not None:
        replace_node(parent, reference, [link])
    return link


def update_type_reference(
    node: Node, parent: Parent, type_map: Mapping[str, str] | None = None
) -> list[Node]:
    """Turn ``{Type}`` tokens of a text node into links.

    The text node is split into text before the token, the type link(s) and
    the text after it. Union pieces become separate links joined by ``|``.
    A token whose pieces are all unknown stays plain text.

    Returns:
        The nodes now occupying the text node's slot.
    """
    text = assert_node(node, "text")
    value = text.value
    replacements: list[Node] = []
    cursor = 0

    for match in TYPE_REFERENCE_RE.finditer(value):
        pieces = resolve_type_pieces(match.group(1), type_map)
        if not any(url for _, url in pieces):
            logger.debug("Unknown type reference %r", match.group(0))
            continue

        if match.start() > cursor:
            replacements.append(Text(value=value[cursor : match.start()]))
        for index, (label, url) in enumerate(pieces):
            if index:
                replacements.append(Text(value=" | "))
            if url:
                replacements.append(Link(url=url, children=[InlineCode(value=f"<{label}>")]))
            else:
                replacements.append(Text(value=f"{{{label}}}"))
        cursor = match.end()

    if not replacements:
        return [text]
    if cursor < len(value):
        replacements.append(Text(value=value[cursor:]))

    replace_node(parent, text, replacements)
    return replacements


def update_unix_manual_reference(node: Node, parent: Parent) -> list[Node]:
    """Link ``open(2)`` style manual page mentions to man7.org."""
    text = assert_node(node, "text")
    value = text.value
    replacements: list[Node] = []
    cursor = 0

    for match in UNIX_MANUAL_PAGE_RE.finditer(value):
        name, section, suffix = match.groups()
        if match.start() > cursor:
            replacements.append(Text(value=value[cursor : match.start()]))
        replacements.append(
            Link(
                url=f"{DOC_MAN_BASE_URL}{section}/{name}.{section}{suffix}.html",
                children=[InlineCode(value=match.group(0))],
            )
        )
        cursor = match.end()

    if not replacements:
        return [text]
    if cursor < len(value):
        replacements.append(Text(value=value[cursor:]))

    replace_node(parent, text, replacements)
    return replacements


def update_stability_prefix_to_link(node: Node) -> Node:
    """Make the ``Stability: N`` lead-in of a blockquote link to the index page."""
    quote = assert_node(node, "blockquote")
    paragraph = quote.children[0] if quote.children else None
    if not isinstance(paragraph, Parent) or not paragraph.children:
        return quote
    first = paragraph.children[0]
    if not isinstance(first, Text):
        return quote
    match = STABILITY_INDEX_PREFIX_RE.match(first.value)
    if match is None:
        return quote

    replacements: list[Node] = [
        Link(url=DOC_API_STABILITY_SECTION_REF_URL, children=[Text(value=match.group(0))])
    ]
    rest = first.value[match.end() :]
    if rest:
        replacements.append(Text(value=rest))
    replace_node(paragraph, first, replacements)
    return quote


def add_stability_metadata(node: Node, entry: ApiDocEntry | None = None) -> StabilityData | None:
    """Extract ``Stability: <index> - <description>`` from a blockquote.

    On a match the annotation is attached to ``entry`` (when given) and
    returned; otherwise the entry is left unannotated and None is returned.
    """
    quote = assert_node(node, "blockquote", entry=entry)
    paragraph = quote.children[0] if quote.children else None
    if paragraph is None:
        return None

    match = STABILITY_INDEX_RE.match(_plain_text(paragraph).strip())
    if match is None:
        return None

    description = re.sub(r"\s+", " ", match.group(2)).strip()
    stability = StabilityData(index=match.group(1), description=description)
    if entry is not None:
        entry.stability = stability
    return stability


def parse_yaml_into_metadata(value: str) -> dict[str, Any]:
    """Parse the body of a ``<!-- YAML ... -->`` comment into entry fields.

    Version keys are renamed onto entry fields and always come back as
    lists; ``changes`` always comes back as a list of mappings. Anything
    else is passed through.
    """
    value = value.strip()
    single = METADATA_COMMENT_RE.match(value)
    if single:
        loaded: Any = {single.group(1): single.group(2)}
    else:
        match = YAML_INNER_CONTENT_RE.match(value)
        body = match.group(1) if match and match.group(1) is not None else value
        try:
            loaded = yaml.safe_load(body) or {}
        except yaml.YAMLError as exc:
            logger.debug("Ignoring unparsable YAML metadata: %s", exc)
            return {}
    if not isinstance(loaded, dict):
        logger.debug("Ignoring YAML metadata that is not a mapping: %r", loaded)
        return {}

    properties: dict[str, Any] = {}
    for key, item in loaded.items():
        properties[_YAML_FIELD_NAMES.get(str(key), str(key))] = item

    for key in _YAML_VERSION_FIELDS:
        if key in properties:
            properties[key] = _as_string_list(properties[key])

    if "changes" in properties:
        changes = properties["changes"]
        if isinstance(changes, dict):
            changes = [changes]
        properties["changes"] = [
            _stringify_versions(change) for change in changes or [] if isinstance(change, dict)
        ]

    return properties


def add_yaml_metadata(node: Node, entry: ApiDocEntry) -> dict[str, Any]:
    """Apply a YAML metadata comment onto ``entry``."""
    html = assert_node(node, "html", entry=entry)
    properties = parse_yaml_into_metadata(html.value)
    skipped = entry.update_properties(properties)
    if skipped:
        logger.debug("Ignoring YAML keys %s on %s#%s", skipped, entry.api_doc_source, entry.slug)
    if html.position is not None:
        entry.yaml_position = html.position
    return properties


def _plain_text(node: Node) -> str:
    if isinstance(node, Parent):
        return "".join(_plain_text(child) for child in node.children)
    return getattr(node, "value", "")


def _as_string_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(item) for item in value]
    return [str(value)]


def _stringify_versions(change: dict[str, Any]) -> dict[str, Any]:
    change = {str(key): item for key, item in change.items()}
    if "version" in change:
        change["version"] = _as_string_list(change["version"])
    return change