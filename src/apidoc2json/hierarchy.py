"""Nest a flat, document-ordered list of entries by heading depth."""

from __future__ import annotations

from collections.abc import Iterable

from apidoc2json.schemas import ApiDocEntry


def build_hierarchy(entries: Iterable[ApiDocEntry]) -> list[ApiDocEntry]:
    """Group entries into a forest following their heading depths.

    Each entry becomes a child of the closest preceding entry with a strictly
    smaller depth; entries with no such predecessor are roots. Depth jumps
    (e.g. 1 directly followed by 4) nest under the nearest shallower heading.

    The input entries are left untouched: the forest is built from shallow
    copies whose ``hierarchy_children`` start out empty.
    """
    roots: list[ApiDocEntry] = []
    stack: list[ApiDocEntry] = []

    for entry in entries:
        node = entry.model_copy(update={"hierarchy_children": []})

        while stack and stack[-1].depth >= node.depth:
            stack.pop()

        if stack:
            stack[-1].hierarchy_children.append(node)
        else:
            roots.append(node)

        stack.append(node)

    return roots
