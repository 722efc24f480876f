"""Parse documented parameter lists.

A callable's first list documents its parameters, one item each::

    * `path` {string|Buffer} Where to read from.
    * `options` {Object} Optional.
      * `encoding` {string} **Default:** `'utf8'`.
    * Returns: {Promise}

Items are flattened to text first (type links turned back into ``{Type}``
tokens) and then peeled apart with regular expressions, left to right.
"""

from __future__ import annotations

import re

from apidoc2json.schemas import ParameterDoc
from apidoc2json.schemas.nodes import List, ListItem, Node
from apidoc2json.unist import assert_node, node_to_string

RETURN_EXPRESSION = re.compile(r"^returns?\s*:?\s*", re.IGNORECASE)
TYPE_STARTER_EXPRESSION = re.compile(r"^type\s*:\s*", re.IGNORECASE)
EXTENDS_EXPRESSION = re.compile(r"^extends\s*:\s*", re.IGNORECASE)
NAME_EXPRESSION = re.compile(r"""^['`"]?([^'`": {]+)['`"]?\s*:?\s*""")
TYPE_EXPRESSION = re.compile(r"^\{([^}]+)\}\s*")
LEADING_HYPHEN = re.compile(r"^-\s*")
DEFAULT_EXPRESSION = re.compile(r"\s*\*\*Default:\*\*\s*(.+)$", re.IGNORECASE | re.DOTALL)
OPTIONAL_EXPRESSION = re.compile(r"^optional\b|\(optional\)", re.IGNORECASE)

_HTML_COMMENT_RE = re.compile(r"<!--.*?-->", re.DOTALL)
_TYPE_UNION_GAP_RE = re.compile(r"\}\s*\|\s*\{")


def parse_parameter_list(list_node: Node) -> list[ParameterDoc]:
    """Parse every item of a parameter list, skipping items that say nothing."""
    node = assert_node(list_node, "list")
    assert isinstance(node, List)
    parameters = []
    for item in node.children:
        parameter = parse_list_item(item)
        if parameter.name or parameter.type or parameter.is_return or parameter.is_extends:
            parameters.append(parameter)
    return parameters


def parse_list_item(item: Node) -> ParameterDoc:
    """Parse a single parameter list item, including nested option lists."""
    node = assert_node(item, "listItem")
    assert isinstance(node, ListItem)

    text = list_item_text(node)
    parameter = ParameterDoc()

    if RETURN_EXPRESSION.match(text):
        parameter.is_return = True
        text = RETURN_EXPRESSION.sub("", text, count=1)
    elif EXTENDS_EXPRESSION.match(text):
        parameter.is_extends = True
        text = EXTENDS_EXPRESSION.sub("", text, count=1)
    elif TYPE_STARTER_EXPRESSION.match(text):
        text = TYPE_STARTER_EXPRESSION.sub("", text, count=1)
    elif not text.startswith("{"):
        match = NAME_EXPRESSION.match(text)
        if match:
            parameter.name = match.group(1)
            text = text[match.end() :]

    match = TYPE_EXPRESSION.match(text)
    if match:
        parameter.type = match.group(1).strip()
        text = text[match.end() :]

    text = LEADING_HYPHEN.sub("", text, count=1)

    match = DEFAULT_EXPRESSION.search(text)
    if match:
        parameter.default = match.group(1).strip().removesuffix(".")
        text = text[: match.start()]

    text = text.strip()
    if text:
        parameter.description = text
        parameter.optional = bool(OPTIONAL_EXPRESSION.search(text))

    for child in node.children:
        if child.type == "list":
            parameter.options = [parse_list_item(option) for option in child.children]

    return parameter


def list_item_text(item: ListItem) -> str:
    """Flatten a list item (minus nested lists) into a single line of text."""
    parts = [_phrasing_to_string(child) for child in item.children if child.type != "list"]
    text = _HTML_COMMENT_RE.sub("", " ".join(parts))
    text = _TYPE_UNION_GAP_RE.sub("|", text)
    return re.sub(r"\s+", " ", text).strip()


def _phrasing_to_string(node: Node) -> str:
    type_name = type_link_name(node)
    if type_name is not None:
        return "{" + type_name + "}"
    if node.type == "paragraph":
        return "".join(_phrasing_to_string(child) for child in node.children)
    return node_to_string(node)


def type_link_name(node: Node) -> str | None:
    """Return ``X`` for a link whose only child reads ``<X>``, else None."""
    if node.type != "link" or len(node.children) != 1:
        return None
    child = node.children[0]
    if child.type not in {"text", "inlineCode"}:
        return None
    value = child.value.strip()
    if value.startswith("<") and value.endswith(">"):
        return value[1:-1]
    return None
