"""Prose tree models.

A parsed markdown document is a tree of nodes, each variant tagged by its
``type`` literal. Parent variants own their ``children`` exclusively; literal
variants carry a ``value``.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field


class HeadingType(str, Enum):
    """Semantic kind of an API doc heading."""

    MODULE = "module"
    CLASS = "class"
    CTOR = "ctor"
    METHOD = "method"
    CLASS_METHOD = "classMethod"
    EVENT = "event"
    PROPERTY = "property"
    MISC = "misc"


CALLABLE_HEADING_TYPES = frozenset(
    {HeadingType.CLASS, HeadingType.CTOR, HeadingType.METHOD, HeadingType.CLASS_METHOD}
)


class Point(BaseModel):
    """A place in the source document."""

    line: int
    column: int | None = None


class Position(BaseModel):
    """Span of a node in the source document."""

    start: Point
    end: Point


class HeadingData(BaseModel):
    """Metadata extracted from a heading's rendered text.

    Attributes:
        text: The heading rendered back to markdown (e.g. "`fs.open(path)`").
        name: The API name pulled out of the text (e.g. "open").
        depth: Heading depth, 1 being the top level.
        slug: Anchor of the heading, unique within its document.
        type: Classified kind of the heading.
    """

    text: str
    name: str
    depth: int
    slug: str | None = None
    type: HeadingType = HeadingType.MISC


class Node(BaseModel):
    """Fields shared by every prose node."""

    position: Position | None = None


class LiteralNode(Node):
    """A leaf node carrying a text payload."""

    value: str = ""


class Parent(Node):
    """A node owning an ordered sequence of children."""

    children: list[ProseNode] = Field(default_factory=list)


class Root(Parent):
    type: Literal["root"] = "root"


class Heading(Parent):
    type: Literal["heading"] = "heading"
    depth: int = Field(..., ge=1, le=6)
    data: HeadingData | None = None


class Paragraph(Parent):
    type: Literal["paragraph"] = "paragraph"


class List(Parent):
    type: Literal["list"] = "list"
    ordered: bool = False


class ListItem(Parent):
    type: Literal["listItem"] = "listItem"


class Blockquote(Parent):
    type: Literal["blockquote"] = "blockquote"


class Emphasis(Parent):
    type: Literal["emphasis"] = "emphasis"


class Strong(Parent):
    type: Literal["strong"] = "strong"


class Delete(Parent):
    type: Literal["delete"] = "delete"


class Link(Parent):
    type: Literal["link"] = "link"
    url: str
    title: str | None = None


class LinkReference(Parent):
    type: Literal["linkReference"] = "linkReference"
    identifier: str
    label: str | None = None


class Definition(Node):
    type: Literal["definition"] = "definition"
    identifier: str
    url: str
    label: str | None = None
    title: str | None = None


class Text(LiteralNode):
    type: Literal["text"] = "text"


class InlineCode(LiteralNode):
    type: Literal["inlineCode"] = "inlineCode"


class Code(LiteralNode):
    type: Literal["code"] = "code"
    lang: str | None = None


class Html(LiteralNode):
    type: Literal["html"] = "html"


class Break(Node):
    type: Literal["break"] = "break"


class ThematicBreak(Node):
    type: Literal["thematicBreak"] = "thematicBreak"


ProseNode = Annotated[
    Union[
        Root,
        Heading,
        Paragraph,
        List,
        ListItem,
        Blockquote,
        Emphasis,
        Strong,
        Delete,
        Link,
        LinkReference,
        Definition,
        Text,
        InlineCode,
        Code,
        Html,
        Break,
        ThematicBreak,
    ],
    Field(discriminator="type"),
]

for _model in (
    Parent,
    Root,
    Heading,
    Paragraph,
    List,
    ListItem,
    Blockquote,
    Emphasis,
    Strong,
    Delete,
    Link,
    LinkReference,
):
    _model.model_rebuild()
