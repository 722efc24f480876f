"""Map documented type names to the URLs that describe them.

Types written as ``{string|Buffer[]}`` in prose are looked up piece by piece:
JavaScript primitives and globals resolve to MDN, a few well-known web and
ECMAScript types to fixed URLs, and everything else through a project type map
(``{"fs.Stats": "fs.html#class-fsstats", ...}``).
"""

from __future__ import annotations

import asyncio
import json
import logging
import re
from collections.abc import Mapping
from pathlib import Path

from apidoc2json.exceptions import TypeMapError
from apidoc2json.http_utils import fetch_text

logger = logging.getLogger(__name__)

DOC_MDN_BASE_URL = "https://developer.mozilla.org/en-US/docs/Web/"
DOC_MDN_BASE_URL_JS = f"{DOC_MDN_BASE_URL}JavaScript/"
DOC_MDN_BASE_URL_JS_PRIMITIVES = f"{DOC_MDN_BASE_URL_JS}Data_structures"
DOC_MDN_BASE_URL_JS_GLOBALS = f"{DOC_MDN_BASE_URL_JS}Reference/Global_Objects/"

# Type name -> MDN primitive anchor.
DOC_TYPES_MAPPING_PRIMITIVES: dict[str, str] = {
    **{name: name for name in ("null", "undefined", "boolean", "number", "bigint", "string", "symbol")},
    "integer": "number",
}

_JS_GLOBALS = (
    "AggregateError", "Array", "ArrayBuffer", "AsyncFunction", "AsyncGenerator",
    "AsyncGeneratorFunction", "AsyncIterator", "Atomics", "BigInt", "BigInt64Array",
    "BigUint64Array", "Boolean", "DataView", "Date", "Error", "ErrorEvent", "EvalError",
    "FinalizationRegistry", "Float32Array", "Float64Array", "Function", "Generator",
    "GeneratorFunction", "Infinity", "Int16Array", "Int32Array", "Int8Array", "Intl",
    "Iterator", "JSON", "Map", "Math", "NaN", "Number", "Object", "Promise", "Proxy",
    "RangeError", "ReferenceError", "Reflect", "RegExp", "Set", "SharedArrayBuffer",
    "String", "Symbol", "SyntaxError", "TypeError", "TypedArray", "URIError",
    "Uint16Array", "Uint32Array", "Uint8Array", "Uint8ClampedArray", "WeakMap",
    "WeakRef", "WeakSet",
)

# Type name -> path below the MDN global objects reference.
DOC_TYPES_MAPPING_GLOBALS: dict[str, str] = {
    **{name: name for name in _JS_GLOBALS},
    "WebAssembly.Instance": "WebAssembly/Instance",
}

DOC_TYPES_MAPPING_OTHER: dict[str, str] = {
    "any": f"{DOC_MDN_BASE_URL_JS_PRIMITIVES}#Data_types",
    "this": f"{DOC_MDN_BASE_URL_JS}Reference/Operators/this",
    "ArrayBufferView": f"{DOC_MDN_BASE_URL}API/ArrayBufferView",
    "AsyncIterable": "https://tc39.github.io/ecma262/#sec-asynciterable-interface",
    "Module Namespace Object": "https://tc39.github.io/ecma262/#sec-module-namespace-exotic-objects",
    "Iterable": f"{DOC_MDN_BASE_URL_JS}Reference/Iteration_protocols#The_iterable_protocol",
    "CloseEvent": f"{DOC_MDN_BASE_URL}API/CloseEvent",
    "EventSource": f"{DOC_MDN_BASE_URL}API/EventSource",
    "MessageEvent": f"{DOC_MDN_BASE_URL}API/MessageEvent",
    "DOMException": f"{DOC_MDN_BASE_URL}API/DOMException",
    "Storage": f"{DOC_MDN_BASE_URL}API/Storage",
    "WebSocket": f"{DOC_MDN_BASE_URL}API/WebSocket",
    "FormData": f"{DOC_MDN_BASE_URL}API/FormData",
    "Headers": f"{DOC_MDN_BASE_URL}API/Headers",
    "Response": f"{DOC_MDN_BASE_URL}API/Response",
    "Request": f"{DOC_MDN_BASE_URL}API/Request",
}

_GENERIC_RE = re.compile(r"^([^<>]+)<(.+)>$")


def lookup_type(name: str, type_map: Mapping[str, str] | None = None) -> str | None:
    """Return the documentation URL of a single type name, or None."""
    name = name.strip()
    if name in DOC_TYPES_MAPPING_PRIMITIVES:
        return f"{DOC_MDN_BASE_URL_JS_PRIMITIVES}#{DOC_TYPES_MAPPING_PRIMITIVES[name]}_type"
    if name in DOC_TYPES_MAPPING_GLOBALS:
        return f"{DOC_MDN_BASE_URL_JS_GLOBALS}{DOC_TYPES_MAPPING_GLOBALS[name]}"
    if name in DOC_TYPES_MAPPING_OTHER:
        return DOC_TYPES_MAPPING_OTHER[name]
    if type_map and name in type_map:
        return type_map[name]
    return None


def resolve_type_pieces(
    type_expression: str, type_map: Mapping[str, str] | None = None
) -> list[tuple[str, str | None]]:
    """Split a type expression on ``|`` and resolve each piece.

    ``Buffer[]`` resolves like ``Buffer`` and ``Promise<string>`` like
    ``Promise``; the label keeps the piece as written.

    Returns:
        ``(label, url)`` pairs, ``url`` being None for unknown pieces.
    """
    pieces: list[tuple[str, str | None]] = []
    for piece in type_expression.strip().strip("{}").split("|"):
        label = piece.strip()
        if not label:
            continue
        lookup = label
        while lookup.endswith("[]"):
            lookup = lookup[:-2]
        generic = _GENERIC_RE.match(lookup)
        if generic:
            lookup = generic.group(1)
        pieces.append((label, lookup_type(lookup, type_map)))
    return pieces


def validate_type_map(data: object, source: str) -> dict[str, str]:
    """Check that ``data`` is a flat string-to-string mapping.

    Raises:
        TypeMapError: If it is anything else.
    """
    if not isinstance(data, dict):
        raise TypeMapError(f"type map {source} must be a JSON object, got {type(data).__name__}")
    for key, value in data.items():
        if not isinstance(key, str) or not isinstance(value, str):
            raise TypeMapError(f"type map {source} has a non-string entry for {key!r}")
    return dict(data)


async def load_type_map(source: str | Path) -> dict[str, str]:
    """Load a type map from a JSON file or an HTTP(S) URL.

    Raises:
        FetchError: If a remote type map cannot be fetched.
        TypeMapError: If the document is not a flat JSON object of strings.
    """
    location = str(source)
    if location.startswith(("http://", "https://")):
        text = await fetch_text(location)
    else:
        text = await asyncio.to_thread(Path(location).read_text, encoding="utf-8")

    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise TypeMapError(f"type map {location} is not valid JSON: {exc}") from exc

    type_map = validate_type_map(data, location)
    logger.debug("Loaded %d type mappings from %s", len(type_map), location)
    return type_map
