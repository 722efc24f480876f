"""Heading anchor generation."""

from __future__ import annotations

import re

_STRIP_RE = re.compile(r"[^\w\- ]")

# Applied, in order, on top of GitHub-style slugs.
DOC_API_SLUGS_REPLACEMENTS: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"node.js", re.IGNORECASE), "nodejs"),
    (re.compile(r"&"), "-and-"),
    (re.compile(r"[/_,:;\\ ]"), "-"),
    (re.compile(r"--+"), "-"),
    (re.compile(r"^-"), ""),
    (re.compile(r"-$"), ""),
)


def github_slug(value: str) -> str:
    """Slug a string the way GitHub anchors headings."""
    return _STRIP_RE.sub("", value.lower()).replace(" ", "-")


class Slugger:
    """Produce anchors that are unique within one document.

    Repeated titles get a numeric suffix: ``foo``, ``foo-1``, ``foo-2``.
    """

    def __init__(self) -> None:
        self._occurrences: dict[str, int] = {}

    def slug(self, text: str) -> str:
        base = github_slug(text)
        for pattern, replacement in DOC_API_SLUGS_REPLACEMENTS:
            base = pattern.sub(replacement, base)

        result = base
        while result in self._occurrences:
            self._occurrences[base] += 1
            result = f"{base}-{self._occurrences[base]}"
        self._occurrences[result] = 0
        return result
