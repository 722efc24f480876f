"""Build JSON-ready section records from hierarchized entries.

One record is built per API page. Its shape follows the kind of each heading:

- ``module`` records carry ``@module``, ``@see`` and five pre-seeded buckets
  (``classes``, ``events``, ``globals``, ``methods``, ``properties``).
- ``class``, ``method``, ``event`` and ``property`` records are filed into
  the bucket of their nearest class or module ancestor.
- ``misc`` records (headings of no particular kind) wrap their prose into a
  ``text`` entry and are promoted into their nearest non-misc ancestor.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from apidoc2json.config import (
    APIDOC2JSON_BASE_URL,
    APIDOC2JSON_DOC_VERSION,
    APIDOC2JSON_MODULE_PREFIX,
)
from apidoc2json.exceptions import ParseError
from apidoc2json.hierarchy import build_hierarchy
from apidoc2json.parameter_tree import create_parameter_groupings
from apidoc2json.parameters import parse_parameter_list
from apidoc2json.queries import find_typed_list, is_stability_node
from apidoc2json.schemas import ApiDocEntry, HeadingType, ParameterDoc, Signature
from apidoc2json.signature import render_signature
from apidoc2json.unist import node_to_string

logger = logging.getLogger(__name__)

Section = dict[str, Any]

MODULE_BUCKETS = ("classes", "events", "globals", "methods", "properties")

# Keys of a misc section that never move into its parent.
UNPROMOTED_KEYS = ("type", "@name", "@see", "parent")

_SECTION_TYPES = {
    HeadingType.MODULE: "module",
    HeadingType.CLASS: "class",
    HeadingType.CTOR: "method",
    HeadingType.METHOD: "method",
    HeadingType.CLASS_METHOD: "method",
    HeadingType.EVENT: "event",
    HeadingType.PROPERTY: "property",
    HeadingType.MISC: "misc",
}

# Minimum typed-list confidence before a leading list is read as type info.
# A property's type is only trusted on a strong signal.
_PARAMETER_LIST_CONFIDENCE = 1
_PROPERTY_TYPE_CONFIDENCE = 2


@dataclass(frozen=True)
class _Context:
    """Per-page settings threaded through section creation."""

    version: str
    base_url: str
    prefix: str

    def page_url(self, api: str) -> str:
        return f"{self.base_url}docs/{self.version}/api/{api}.html"


def build_section(
    entry: ApiDocEntry,
    *,
    version: str | None = None,
    base_url: str | None = None,
    prefix: str | None = None,
) -> Section:
    """Build the record of one hierarchized root entry and its descendants.

    A root that is not a module is built as one. Only a misc root without
    descendants yields the minimal ``{"@name", "source", "type": "text"}``
    record.
    """
    context = _Context(
        version=version or APIDOC2JSON_DOC_VERSION,
        base_url=base_url or APIDOC2JSON_BASE_URL,
        prefix=prefix or APIDOC2JSON_MODULE_PREFIX,
    )

    section_type = _SECTION_TYPES[entry.heading_type]
    if section_type == "misc" and not entry.hierarchy_children:
        return {"@name": _name_of(entry), "source": entry.api_doc_source, "type": "text"}
    if section_type != "module":
        logger.warning(
            "%s: root heading %r is a %s, building it as a module",
            entry.api_doc_source,
            _name_of(entry),
            section_type,
        )

    section = _create_section(entry, "module", context)
    section["source"] = entry.api_doc_source
    _build_children(entry, [section], context)
    return section


def build_api_section(
    entries: Sequence[ApiDocEntry],
    *,
    version: str | None = None,
    base_url: str | None = None,
    prefix: str | None = None,
) -> Section:
    """Build the record of one API page from its flat entries.

    Extra root headings are nested under the first one.
    """
    roots = build_hierarchy(entries)
    if not roots:
        raise ValueError("cannot build a section without entries")

    head = roots[0]
    if len(roots) > 1:
        logger.warning(
            "%s has %d root headings, nesting the extra ones under %r",
            head.api_doc_source,
            len(roots),
            _name_of(head),
        )
        head.hierarchy_children.extend(roots[1:])

    return build_section(head, version=version, base_url=base_url, prefix=prefix)


def group_entries_by_module(entries: Iterable[ApiDocEntry]) -> dict[str, list[ApiDocEntry]]:
    """Group entries by ``api``, keeping document order within each group."""
    grouped: dict[str, list[ApiDocEntry]] = defaultdict(list)
    for entry in entries:
        grouped[entry.api].append(entry)
    return dict(grouped)


def build_sections(
    entries: Iterable[ApiDocEntry],
    *,
    version: str | None = None,
    base_url: str | None = None,
    prefix: str | None = None,
) -> dict[str, Section]:
    """Build one record per API page from a multi-page entry list."""
    return {
        api: build_api_section(group, version=version, base_url=base_url, prefix=prefix)
        for api, group in group_entries_by_module(entries).items()
    }


def promote_misc_children(section: Section, parent: Section) -> None:
    """Fold the properties of a misc section into its parent.

    Nothing happens unless ``section`` is misc and ``parent`` is not. For
    every key outside :data:`UNPROMOTED_KEYS`: a parent list is extended with
    (or appended to) the child's value, any other existing parent value is
    kept, and a missing key is copied over.
    """
    if section.get("type") != "misc" or parent.get("type") == "misc":
        return

    for key, value in section.items():
        if key in UNPROMOTED_KEYS:
            continue
        if key not in parent:
            parent[key] = value
            continue
        existing = parent[key]
        if isinstance(existing, list):
            if isinstance(value, list):
                existing.extend(value)
            else:
                existing.append(value)


def find_parent_section(ancestors: Sequence[Section], types: Iterable[str]) -> Section | None:
    """Return the nearest ancestor whose type is one of ``types``."""
    wanted = set(types)
    for section in reversed(ancestors):
        if section.get("type") in wanted:
            return section
    return None


def create_section_base(entry: ApiDocEntry, section_type: str) -> Section:
    """Return the keys every section has: type, name, prose, stability, versions."""
    section: Section = {"type": section_type, "@name": _name_of(entry)}
    _add_description_and_examples(section, entry)
    _add_stability(section, entry)
    _add_version_properties(section, entry)
    return section


def _create_section(entry: ApiDocEntry, section_type: str, context: _Context) -> Section:
    section = create_section_base(entry, section_type)

    if section_type == "module":
        section["@module"] = f"{context.prefix}:{entry.api}"
        section["@see"] = context.page_url(entry.api)
        if entry.introduced_in:
            section["introduced_in"] = entry.introduced_in
        for bucket in MODULE_BUCKETS:
            section.setdefault(bucket, [])
        return section

    if section_type == "misc":
        text: Section = {"@name": section["@name"]}
        for key in ("description", "@example"):
            if key in section:
                text[key] = section.pop(key)
        section["text"] = [text]
        return section

    section["@see"] = f"{context.page_url(entry.api)}#{entry.slug}"

    if section_type == "class":
        _add_class_properties(section, entry)
    elif section_type == "method":
        _add_method_properties(section, entry)
    elif section_type == "event":
        _add_event_properties(section, entry)
    elif section_type == "property":
        _add_property_properties(section, entry)

    return section


def _build_children(entry: ApiDocEntry, ancestors: list[Section], context: _Context) -> None:
    for child in entry.hierarchy_children:
        section_type = _SECTION_TYPES[child.heading_type]
        section = _create_section(child, section_type, context)

        if section_type == "misc":
            # Misc sections are never pushed, so the last ancestor is formal.
            promote_misc_children(section, ancestors[-1])
            # Children of a misc heading belong to its formal ancestor.
            _build_children(child, ancestors, context)
            continue

        _attach(section, child, ancestors)
        _build_children(child, [*ancestors, section], context)


def _attach(section: Section, entry: ApiDocEntry, ancestors: Sequence[Section]) -> None:
    heading_type = entry.heading_type

    if heading_type is HeadingType.CLASS:
        parent = find_parent_section(ancestors, ("module",))
        key = "classes"
    elif heading_type is HeadingType.MODULE:
        parent = find_parent_section(ancestors, ("module",))
        key = "modules"
    else:
        parent = find_parent_section(ancestors, ("class", "module"))
        if parent is None:
            return
        if heading_type is HeadingType.CTOR:
            key = "@constructor" if parent["type"] == "class" else "methods"
        elif heading_type is HeadingType.CLASS_METHOD:
            key = "staticMethods" if parent["type"] == "class" else "methods"
        elif heading_type is HeadingType.EVENT:
            key = "events"
        elif heading_type is HeadingType.PROPERTY:
            key = "properties"
        else:
            key = "methods"

    if parent is not None:
        parent.setdefault(key, []).append(section)


def _add_class_properties(section: Section, entry: ApiDocEntry) -> None:
    if entry.heading.data is None:
        return
    signature = entry.signature or Signature()
    section["@signature"] = render_signature(entry.heading.data, signature)
    if signature.extends is not None:
        section["extends"] = signature.extends.type


def _add_method_properties(section: Section, entry: ApiDocEntry) -> None:
    section["signatures"] = []
    signature = entry.signature
    if signature is None or entry.heading.data is None:
        return

    section["@signature"] = render_signature(entry.heading.data, signature)

    docs = _parameter_docs(entry, _PARAMETER_LIST_CONFIDENCE)
    options = {doc.name: doc.options for doc in docs if doc.name and doc.options}
    by_name = {param.name: param for param in signature.params}
    returns = None
    if signature.return_ is not None:
        returns = _compact({"@type": signature.return_.type, "description": signature.return_.description})

    for grouping in _groupings(signature):
        parameters = []
        for name in grouping:
            param = by_name.get(name)
            if param is None:
                parameters.append({"@name": name})
                continue
            parameter = _compact(
                {
                    "@name": param.name,
                    "@type": param.type,
                    "description": param.description,
                    "@default": param.default,
                }
            )
            if param.optional:
                parameter["optional"] = True
            if name in options:
                parameter["options"] = [_parameter_record(option) for option in options[name]]
            parameters.append(parameter)

        overload: Section = {"parameters": parameters}
        if returns is not None:
            overload["@returns"] = returns
        section["signatures"].append(overload)


def _groupings(signature: Signature) -> list[list[str]]:
    try:
        return create_parameter_groupings(signature.raw_params)
    except ParseError as exc:
        logger.debug("Falling back to a single overload: %s", exc)
        return [[param.name for param in signature.params]]


def _add_event_properties(section: Section, entry: ApiDocEntry) -> None:
    docs = _parameter_docs(entry, _PARAMETER_LIST_CONFIDENCE)
    section["parameters"] = [_parameter_record(doc) for doc in docs if not doc.is_return]


def _add_property_properties(section: Section, entry: ApiDocEntry) -> None:
    docs = _parameter_docs(entry, _PROPERTY_TYPE_CONFIDENCE)
    for doc in docs:
        if doc.type:
            section["@type"] = doc.type
            break


def _parameter_docs(entry: ApiDocEntry, min_confidence: int) -> list[ParameterDoc]:
    typed_list = find_typed_list(entry.content, min_confidence)
    return parse_parameter_list(typed_list) if typed_list is not None else []


def _parameter_record(doc: ParameterDoc) -> Section:
    record = _compact(
        {
            "@name": doc.name or "value",
            "@type": doc.type,
            "description": doc.description,
            "@default": doc.default,
        }
    )
    if doc.optional:
        record["optional"] = True
    if doc.options:
        record["options"] = [_parameter_record(option) for option in doc.options]
    return record


def _add_description_and_examples(section: Section, entry: ApiDocEntry) -> None:
    """Stringify the entry's prose into ``description`` and code into ``@example``.

    Stability blockquotes and a leading typed list are left out: they are
    reported through their own keys.
    """
    typed_list = None
    if entry.heading_type not in {HeadingType.MODULE, HeadingType.MISC}:
        typed_list = find_typed_list(entry.content, _PARAMETER_LIST_CONFIDENCE)
    examples: list[str] = []
    description: list[str] = []

    for node in entry.content.children:
        if node is typed_list or is_stability_node(node):
            continue
        if node.type == "code":
            examples.append(node.value)
            continue
        rendered = node_to_string(node).strip()
        if rendered:
            description.append(rendered)

    if description:
        section["description"] = "\n\n".join(description)
    if examples:
        section["@example"] = examples[0] if len(examples) == 1 else examples


def _add_stability(section: Section, entry: ApiDocEntry) -> None:
    if entry.stability is None:
        return
    index = float(entry.stability.index)
    section["stability"] = {
        "index": int(index) if index.is_integer() else index,
        "description": entry.stability.description,
    }


def _add_version_properties(section: Section, entry: ApiDocEntry) -> None:
    if entry.changes:
        section["changes"] = [
            _compact(
                {
                    "description": change.get("description"),
                    "prUrl": change.get("pr-url"),
                    "version": change.get("version"),
                }
            )
            for change in entry.changes
        ]
    if entry.added_in:
        section["@since"] = entry.added_in
    if entry.n_api_version:
        section["napiVersion"] = entry.n_api_version
    if entry.removed_in:
        section["removedIn"] = entry.removed_in
    if entry.deprecated_in:
        section["@deprecated"] = entry.deprecated_in


def _name_of(entry: ApiDocEntry) -> str:
    if entry.heading.data is not None:
        return entry.heading.data.name
    return node_to_string(entry.heading).lstrip("# ")


def _compact(record: Section) -> Section:
    return {key: value for key, value in record.items() if value is not None}
