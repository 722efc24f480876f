"""Markdown API doc in, entries and section record out."""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from apidoc2json.metadata import parse_api_doc
from apidoc2json.prose_parser import parse_markdown
from apidoc2json.schemas import ApiDocEntry, ExtractionResult
from apidoc2json.section_builder import build_api_section
from apidoc2json.type_map import load_type_map


@dataclass
class ExtractionOptions:
    """Options for API doc extraction.

    Attributes:
        type_map: Project type names to documentation URLs, used on top of the
            built-in JavaScript mappings.
        version: Docs version used in ``@see`` permalinks.
        base_url: Root URL of the published docs.
        module_prefix: Prefix of ``@module`` values (``node`` gives ``node:fs``).
        ignore_stability: If True, do not extract stability annotations.
        tab_length: Indent width of nested lists in the markdown source.
    """

    type_map: Mapping[str, str] | None = None
    version: str | None = None
    base_url: str | None = None
    module_prefix: str | None = None
    ignore_stability: bool = False
    tab_length: int | None = None


def extract_entries(
    text: str, *, source: str, options: ExtractionOptions | None = None
) -> list[ApiDocEntry]:
    """Parse a markdown document into flat entries, one per heading."""
    opts = options or ExtractionOptions()
    tree = parse_markdown(text, tab_length=opts.tab_length)
    return parse_api_doc(tree, source, opts.type_map, ignore_stability=opts.ignore_stability)


def extract_api_doc(
    text: str, *, source: str, options: ExtractionOptions | None = None
) -> ExtractionResult:
    """Parse a markdown document and build its section record.

    Document content never makes this fail: unusual structure is coerced
    and logged, unknown types and unrecognised signatures are left as text.

    Args:
        text: Markdown source of one API page.
        source: Path of the page (its stem names the API, e.g. ``fs``).
        options: Extraction options. Uses defaults if None.

    Returns:
        The flat entries and the page's section record.
    """
    opts = options or ExtractionOptions()
    entries = extract_entries(text, source=source, options=opts)
    section = build_api_section(
        entries,
        version=opts.version,
        base_url=opts.base_url,
        prefix=opts.module_prefix,
    )
    return ExtractionResult(entries=entries, section=section)


async def extract_api_doc_file(
    path: str | Path,
    *,
    type_map_source: str | Path | None = None,
    options: ExtractionOptions | None = None,
) -> ExtractionResult:
    """Read a markdown file (and optionally a type map) and extract it.

    Raises:
        FetchError: If a remote type map cannot be fetched.
        TypeMapError: If the type map is malformed.
    """
    opts = options or ExtractionOptions()
    if type_map_source is not None:
        loaded = await load_type_map(type_map_source)
        merged = {**(opts.type_map or {}), **loaded}
        opts = ExtractionOptions(
            type_map=merged,
            version=opts.version,
            base_url=opts.base_url,
            module_prefix=opts.module_prefix,
            ignore_stability=opts.ignore_stability,
            tab_length=opts.tab_length,
        )

    text = await asyncio.to_thread(Path(path).read_text, encoding="utf-8")
    return extract_api_doc(text, source=str(path), options=opts)
