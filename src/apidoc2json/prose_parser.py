"""Turn markdown text into a prose tree.

The source is first cut into top-level runs: ATX headings, HTML comments
(``<!-- YAML ... -->`` metadata blocks), link reference definitions, and
blank-line separated stretches of other markdown. Comments and definitions
map straight onto ``html`` and ``definition`` nodes. Every other run is
rendered to HTML with Python-Markdown, then walked with BeautifulSoup and
mapped back onto prose nodes.

Top-level nodes carry the line span of the run they came from; nodes
rendered from the same run share it.

Definitions never reach Python-Markdown, so reference-style links come back
as literal brackets. Those are turned into ``linkReference`` nodes, including
labels holding inline code (``[`fs.open()`][]``), and resolved later against
the ``definition`` nodes.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

import markdown

try:
    from bs4 import BeautifulSoup
    from bs4.element import Comment, NavigableString, Tag
except ImportError as exc:  # pragma: no cover - runtime dependency check
    raise RuntimeError(
        "BeautifulSoup4 is required for prose parsing (pip install beautifulsoup4)."
    ) from exc

from apidoc2json.config import APIDOC2JSON_MARKDOWN_TAB_LENGTH
from apidoc2json.schemas.nodes import (
    Blockquote,
    Break,
    Code,
    Definition,
    Delete,
    Emphasis,
    Heading,
    Html,
    InlineCode,
    Link,
    LinkReference,
    List,
    ListItem,
    Node,
    Paragraph,
    Point,
    Position,
    Root,
    Strong,
    Text,
    ThematicBreak,
)
from apidoc2json.unist import nodes_to_string

_MARKDOWN_EXTENSIONS = ["fenced_code", "tables"]
_HEADING_TAGS = {"h1", "h2", "h3", "h4", "h5", "h6"}
_CONTAINER_TAGS = {"div", "section", "article"}
_LANGUAGE_CLASS_PREFIX = "language-"

# Indented code blocks need four spaces outside of lists.
_CODE_BLOCK_INDENT = 4

_ATX_HEADING_RE = re.compile(r"^#{1,6}(?:[ \t]|$)")
_FENCE_RE = re.compile(r"^ {0,3}(`{3,}|~{3,})")
_LIST_ITEM_RE = re.compile(r"^[ \t]*(?:[*+-]|\d+[.)])[ \t]")
_DEFINITION_RE = re.compile(
    r"""^ {0,3}\[([^\[\]]+)\]:[ \t]*<?([^\s>]+)>?"""
    r"""(?:[ \t]+(?:"([^"]*)"|'([^']*)'|\(([^)]*)\)))?[ \t]*$"""
)
_BRACKETS_RE = re.compile(r"([\[\]])")


@dataclass
class _Run:
    """Consecutive source lines parsed as one unit."""

    kind: str
    lines: list[str]
    start: int

    @property
    def position(self) -> Position:
        end = self.start + len(self.lines) - 1
        return Position(
            start=Point(line=self.start, column=1),
            end=Point(line=end, column=len(self.lines[-1]) + 1),
        )


def parse_markdown(text: str, *, tab_length: int | None = None) -> Root:
    """Parse markdown into a prose tree rooted at a ``root`` node.

    Args:
        text: Markdown source.
        tab_length: Indent of a nested list item. Defaults to
            ``APIDOC2JSON_MARKDOWN_TAB_LENGTH``; blocks outside of lists keep
            the four-space code indent.

    Returns:
        The root node. Top-level children carry ``position`` line spans.
    """
    lines = text.splitlines()
    runs = _split_runs(lines)
    identifiers = {
        _definition(run.lines[0]).identifier for run in runs if run.kind == "definition"
    }
    converter = _Converter(identifiers, tab_length or APIDOC2JSON_MARKDOWN_TAB_LENGTH)

    children: list[Node] = []
    for run in runs:
        if run.kind == "comment":
            nodes: list[Node] = [Html(value="\n".join(run.lines))]
        elif run.kind == "definition":
            nodes = [_definition(run.lines[0])]
        else:
            nodes = converter.convert(run.lines)
        for node in nodes:
            node.position = run.position
        children.extend(nodes)

    root = Root(children=children)
    if lines:
        root.position = _Run("root", lines, 1).position
    return root


def _split_runs(lines: list[str]) -> list[_Run]:
    """Cut the source into heading, comment, definition and markdown runs."""
    runs: list[_Run] = []
    pending: list[str] = []
    pending_start = 1
    fence: str | None = None

    def flush() -> None:
        filled = [index for index, line in enumerate(pending) if line.strip()]
        if filled:
            runs.append(
                _Run("markdown", pending[filled[0] : filled[-1] + 1], pending_start + filled[0])
            )
        pending.clear()

    index = 0
    while index < len(lines):
        line = lines[index]
        number = index + 1

        if fence is not None:
            pending.append(line)
            marker = line.strip()
            if marker and set(marker) == {fence[0]} and len(marker) >= len(fence):
                fence = None
            index += 1
            continue

        after_blank = not pending or not pending[-1].strip()

        if _ATX_HEADING_RE.match(line):
            flush()
            runs.append(_Run("markdown", [line], number))
            index += 1
            continue

        if line.startswith("<!--"):
            end = _comment_end(lines, index)
            if end is not None:
                flush()
                runs.append(_Run("comment", lines[index : end + 1], number))
                index = end + 1
                continue

        if after_blank and _DEFINITION_RE.match(line):
            flush()
            runs.append(_Run("definition", [line], number))
            index += 1
            continue

        if after_blank and line[:1].strip() and not _continues(pending, line):
            flush()

        fence_match = _FENCE_RE.match(line)
        if fence_match:
            fence = fence_match.group(1)
        if not pending:
            pending_start = number
        pending.append(line)
        index += 1

    flush()
    return runs


def _comment_end(lines: list[str], start: int) -> int | None:
    """Index of the line closing the comment opened at ``start``."""
    for index in range(start, len(lines)):
        if "-->" in lines[index]:
            # Text after the comment on the same line keeps it inline.
            return index if lines[index].rstrip().endswith("-->") else None
    return None


def _continues(pending: list[str], line: str) -> bool:
    """Whether ``line`` carries on the list or blockquote ``pending`` opened."""
    first = next((item for item in pending if item.strip()), None)
    if first is None:
        return False
    if _LIST_ITEM_RE.match(first) and _LIST_ITEM_RE.match(line):
        return True
    return first.lstrip().startswith(">") and line.startswith(">")


def _definition(line: str) -> Definition:
    match = _DEFINITION_RE.match(line)
    label, url = match.group(1), match.group(2)
    title = next((group for group in match.groups()[2:] if group is not None), None)
    return Definition(identifier=_normalize_label(label), label=label, url=url, title=title)


def _normalize_label(label: str) -> str:
    return " ".join(label.split()).lower()


class _Converter:
    """Renders markdown runs and maps the HTML back onto prose nodes."""

    def __init__(self, identifiers: set[str], list_indent: int) -> None:
        self.identifiers = identifiers
        self.list_indent = list_indent
        self._renderers: dict[int, markdown.Markdown] = {}

    def convert(self, lines: list[str]) -> list[Node]:
        tab_length = self.list_indent if _LIST_ITEM_RE.match(lines[0]) else _CODE_BLOCK_INDENT
        renderer = self._renderers.get(tab_length)
        if renderer is None:
            renderer = markdown.Markdown(extensions=_MARKDOWN_EXTENSIONS, tab_length=tab_length)
            self._renderers[tab_length] = renderer
        html = renderer.reset().convert("\n".join(lines))
        # Wrapped so that leading comments stay inside the parsed body.
        soup = BeautifulSoup(f"<div>{html}</div>", "lxml")
        return self._convert_blocks(soup.div)

    def _convert_blocks(self, container: Tag) -> list[Node]:
        blocks: list[Node] = []
        inline_run: list[Node] = []

        def flush() -> None:
            if any(not _is_blank(node) for node in inline_run):
                blocks.append(Paragraph(children=_trim_inline(self._link_references(inline_run))))
            inline_run.clear()

        for child in container.children:
            if isinstance(child, Comment):
                flush()
                blocks.append(Html(value=f"<!--{child}-->"))
                continue
            if isinstance(child, NavigableString):
                inline_run.append(Text(value=str(child)))
                continue
            if not isinstance(child, Tag):
                continue

            block = self._convert_block(child)
            if block is None:
                inline_run.extend(self._convert_inline(child))
                continue
            flush()
            blocks.extend(block)

        flush()
        return blocks

    def _convert_block(self, tag: Tag) -> list[Node] | None:
        """Map a block-level tag, or return None for phrasing content."""
        if tag.name in _CONTAINER_TAGS:
            return self._convert_blocks(tag)

        if tag.name in _HEADING_TAGS:
            children = _trim_inline(self._convert_children_inline(tag))
            return [Heading(depth=int(tag.name[1]), children=children)]

        if tag.name == "p":
            children = _trim_inline(self._convert_children_inline(tag))
            return [Paragraph(children=children)] if children else []

        if tag.name in {"ul", "ol"}:
            items = [
                ListItem(children=self._convert_blocks(item))
                for item in tag.find_all("li", recursive=False)
            ]
            return [List(ordered=tag.name == "ol", children=items)]

        if tag.name == "blockquote":
            return [Blockquote(children=self._convert_blocks(tag))]

        if tag.name == "pre":
            return [_convert_code_block(tag)]

        if tag.name == "hr":
            return [ThematicBreak()]

        if tag.name == "table":
            return [Html(value=str(tag))]

        return None

    def _convert_children_inline(self, tag: Tag) -> list[Node]:
        nodes: list[Node] = []
        for child in tag.children:
            nodes.extend(self._convert_inline(child))
        return self._link_references(nodes)

    def _convert_inline(self, node: Tag | NavigableString) -> list[Node]:
        if isinstance(node, Comment):
            return [Html(value=f"<!--{node}-->")]
        if isinstance(node, NavigableString):
            return [Text(value=str(node))]

        if node.name == "code":
            return [InlineCode(value=node.get_text())]
        if node.name == "br":
            return [Break()]
        if node.name in {"em", "i"}:
            return [Emphasis(children=self._convert_children_inline(node))]
        if node.name in {"strong", "b"}:
            return [Strong(children=self._convert_children_inline(node))]
        if node.name in {"del", "s"}:
            return [Delete(children=self._convert_children_inline(node))]
        if node.name == "a":
            href = node.get("href")
            if not href:
                return self._convert_children_inline(node)
            return [Link(url=href, title=node.get("title"), children=self._convert_children_inline(node))]
        if node.name == "img":
            return [Html(value=str(node))]

        return self._convert_children_inline(node)

    def _link_references(self, nodes: list[Node]) -> list[Node]:
        """Turn literal ``[label][id]``, ``[label][]`` and ``[label]`` runs into references.

        Only labels with a matching definition are taken, as in CommonMark;
        anything else stays literal text.
        """
        if not self.identifiers or not any(
            node.type == "text" and "[" in node.value for node in nodes
        ):
            return nodes

        pieces = _split_brackets(nodes)
        result: list[Node] = []
        index = 0
        while index < len(pieces):
            match = self._match_reference(pieces, index)
            if match is None:
                result.append(pieces[index])
                index += 1
                continue
            reference, index = match
            result.append(reference)
        return _merge_text(result)

    def _match_reference(self, pieces: list[Node], start: int) -> tuple[LinkReference, int] | None:
        if not _is_bracket(pieces[start], "["):
            return None
        close = _closing_bracket(pieces, start)
        if close is None:
            return None

        children = pieces[start + 1 : close]
        label = nodes_to_string(children)
        identifier = label
        end = close + 1
        if end < len(pieces) and _is_bracket(pieces[end], "["):
            inner_close = _closing_bracket(pieces, end)
            inner = pieces[end + 1 : inner_close] if inner_close is not None else None
            if inner is not None and all(piece.type == "text" for piece in inner):
                identifier = "".join(piece.value for piece in inner) or label
                end = inner_close + 1

        key = _normalize_label(identifier)
        if not key or key not in self.identifiers:
            return None
        return LinkReference(identifier=key, label=identifier, children=_merge_text(children)), end


def _split_brackets(nodes: list[Node]) -> list[Node]:
    """Give every ``[`` and ``]`` in text nodes a text node of its own."""
    pieces: list[Node] = []
    for node in nodes:
        if node.type == "text" and ("[" in node.value or "]" in node.value):
            pieces.extend(Text(value=part) for part in _BRACKETS_RE.split(node.value) if part)
        else:
            pieces.append(node)
    return pieces


def _is_bracket(node: Node, bracket: str) -> bool:
    return node.type == "text" and node.value == bracket


def _closing_bracket(pieces: list[Node], start: int) -> int | None:
    depth = 0
    for index in range(start, len(pieces)):
        if _is_bracket(pieces[index], "["):
            depth += 1
        elif _is_bracket(pieces[index], "]"):
            depth -= 1
            if depth == 0:
                return index
    return None


def _merge_text(nodes: list[Node]) -> list[Node]:
    merged: list[Node] = []
    for node in nodes:
        if node.type == "text" and merged and merged[-1].type == "text":
            merged[-1] = Text(value=merged[-1].value + node.value)
        else:
            merged.append(node)
    return merged


def _convert_code_block(tag: Tag) -> Code:
    code = tag.find("code")
    lang = None
    if isinstance(code, Tag):
        for class_name in code.get("class") or []:
            if class_name.startswith(_LANGUAGE_CLASS_PREFIX):
                lang = class_name[len(_LANGUAGE_CLASS_PREFIX) :]
                break
    source = code if isinstance(code, Tag) else tag
    return Code(lang=lang, value=source.get_text().rstrip("\n"))


def _is_blank(node: Node) -> bool:
    return node.type == "text" and not node.value.strip()


def _trim_inline(nodes: list[Node]) -> list[Node]:
    """Drop surrounding whitespace of an inline run."""
    nodes = list(nodes)
    while nodes and _is_blank(nodes[0]):
        nodes.pop(0)
    while nodes and _is_blank(nodes[-1]):
        nodes.pop()
    if nodes and nodes[0].type == "text":
        nodes[0] = Text(value=nodes[0].value.lstrip())
    if nodes and nodes[-1].type == "text":
        nodes[-1] = Text(value=nodes[-1].value.rstrip())
    return nodes
