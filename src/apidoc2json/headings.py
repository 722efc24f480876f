"""Classify API doc headings by their rendered text."""

from __future__ import annotations

import re

from apidoc2json.schemas import HeadingData, HeadingType

# Building blocks for the heading patterns below.
_CAMEL_CASE = r"\w+(?:\.\w+)*"
_FUNCTION_CALL = r"\([^)]*\)"
_RETURN_SUFFIX = r"(?: *: *[^`]+)?"

# Matches "bar" in foo[bar] (group 1) or foo.bar (group 2).
_PROPERTY = rf"{_CAMEL_CASE}(?:(\[{_CAMEL_CASE}\])|\.(\w+))"

# Order matters: the first pattern that matches decides the type, and the
# last non-empty capture group is the entry name.
DOC_API_HEADING_TYPES: tuple[tuple[HeadingType, re.Pattern[str]], ...] = (
    (
        HeadingType.METHOD,
        re.compile(rf"^`(?:{_PROPERTY}|(\w+)){_FUNCTION_CALL}{_RETURN_SUFFIX}`$", re.IGNORECASE),
    ),
    (HeadingType.EVENT, re.compile(r"^Event: +`'?([^'`]+)'?`$", re.IGNORECASE)),
    (
        HeadingType.CLASS,
        re.compile(rf"^Class: +`({_CAMEL_CASE}(?: extends +{_CAMEL_CASE})?)`$", re.IGNORECASE),
    ),
    (
        HeadingType.CLASS,
        re.compile(rf"^`?class +({_CAMEL_CASE}(?: extends +{_CAMEL_CASE})?)`?$"),
    ),
    (
        HeadingType.CTOR,
        re.compile(rf"^`new +({_CAMEL_CASE}){_FUNCTION_CALL}`$", re.IGNORECASE),
    ),
    (
        HeadingType.CLASS_METHOD,
        re.compile(
            rf"^Static method: +`{_PROPERTY}{_FUNCTION_CALL}{_RETURN_SUFFIX}`$",
            re.IGNORECASE,
        ),
    ),
    (HeadingType.PROPERTY, re.compile(rf"^`{_PROPERTY}`$", re.IGNORECASE)),
)

_EXTENDS_RE = re.compile(r"\s+extends\s+.*$")


def classify_heading(text: str, depth: int) -> tuple[HeadingType, str]:
    """Return the heading's type and the API name it declares.

    Text that matches no known pattern is a module at depth 1 and a misc
    section anywhere else; its name is the text itself.
    """
    for heading_type, regex in DOC_API_HEADING_TYPES:
        match = regex.match(text)
        if not match:
            continue
        groups = [group for group in match.groups() if group]
        if not groups:
            continue
        name = groups[-1]
        if heading_type is HeadingType.CLASS:
            name = _EXTENDS_RE.sub("", name)
        return heading_type, name

    fallback = HeadingType.MODULE if depth == 1 else HeadingType.MISC
    return fallback, text


def parse_heading_into_metadata(text: str, depth: int) -> HeadingData:
    """Build heading metadata (without slug) from rendered heading text."""
    heading_type, name = classify_heading(text, depth)
    return HeadingData(text=text, name=name, depth=depth, type=heading_type)
