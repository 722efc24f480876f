"""API doc entry models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from apidoc2json.schemas.nodes import Heading, HeadingType, Position, Root
from apidoc2json.schemas.signature import Signature

# Owned by the metadata pass, not by YAML comments.
_STRUCTURAL_FIELDS = frozenset(
    {
        "api",
        "api_doc_source",
        "slug",
        "heading",
        "content",
        "stability",
        "signature",
        "hierarchy_children",
        "yaml_position",
    }
)


class StabilityData(BaseModel):
    """Stability annotation of an entry (e.g. "Stability: 1.0 - Frozen")."""

    index: str
    description: str


class ApiDocEntry(BaseModel):
    """One outline unit: a heading plus the content that follows it.

    Entries are created flat, one per heading, by the metadata pass. The
    hierarchizer hands out copies with ``hierarchy_children`` populated.
    YAML metadata may add keys that are not declared here; they are kept as
    extra attributes and carried through unchanged.

    Attributes:
        api: Logical page identifier (the source file stem, e.g. "fs").
        api_doc_source: Path of the markdown source.
        slug: Anchor of the heading within its page.
        heading: The heading node, with ``data`` filled in.
        content: Nodes between this heading and the next one.
        stability: Extracted stability annotation, if any.
        signature: Parsed call shape for callable headings.
        hierarchy_children: Entries nested directly below this one.
    """

    model_config = ConfigDict(extra="allow")

    api: str
    api_doc_source: str
    slug: str
    heading: Heading
    content: Root = Field(default_factory=Root)
    stability: StabilityData | None = None
    signature: Signature | None = None
    hierarchy_children: list[ApiDocEntry] = Field(default_factory=list)
    changes: list[dict[str, Any]] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    yaml_position: Position | None = None
    added_in: list[str] | None = None
    deprecated_in: list[str] | None = None
    removed_in: list[str] | None = None
    n_api_version: list[str] | None = None
    introduced_in: list[str] | None = None

    @property
    def depth(self) -> int:
        if self.heading.data is not None:
            return self.heading.data.depth
        return self.heading.depth

    @property
    def heading_type(self) -> HeadingType:
        if self.heading.data is not None:
            return self.heading.data.type
        return HeadingType.MODULE if self.heading.depth == 1 else HeadingType.MISC

    def update_properties(self, properties: dict[str, Any]) -> list[str]:
        """Apply parsed YAML metadata onto this entry.

        Structural fields and computed properties are never overwritten.

        Returns:
            The keys that were skipped.
        """
        skipped: list[str] = []
        for key, value in properties.items():
            if key in _STRUCTURAL_FIELDS or (
                key not in type(self).model_fields and hasattr(type(self), key)
            ):
                skipped.append(key)
                continue
            setattr(self, key, value)
        return skipped


ApiDocEntry.model_rebuild()
