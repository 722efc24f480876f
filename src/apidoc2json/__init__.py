"""apidoc2json: extract structured API records from markdown API docs."""

from apidoc2json.exceptions import (
    Apidoc2jsonError,
    ContractError,
    FetchError,
    ParseError,
    TypeMapError,
)
from apidoc2json.extraction import (
    ExtractionOptions,
    extract_api_doc,
    extract_api_doc_file,
    extract_entries,
)
from apidoc2json.hierarchy import build_hierarchy
from apidoc2json.parameter_tree import ParameterTree, create_parameter_groupings
from apidoc2json.schemas import ApiDocEntry, ExtractionResult, Signature
from apidoc2json.section_builder import (
    build_api_section,
    build_section,
    build_sections,
    group_entries_by_module,
    promote_misc_children,
)
from apidoc2json.signature import generate_signature, parse_signature
from apidoc2json.type_map import load_type_map

__all__ = [
    "ApiDocEntry",
    "Apidoc2jsonError",
    "ContractError",
    "ExtractionOptions",
    "ExtractionResult",
    "FetchError",
    "ParameterTree",
    "ParseError",
    "Signature",
    "TypeMapError",
    "build_api_section",
    "build_hierarchy",
    "build_section",
    "build_sections",
    "create_parameter_groupings",
    "extract_api_doc",
    "extract_api_doc_file",
    "extract_entries",
    "generate_signature",
    "group_entries_by_module",
    "load_type_map",
    "parse_signature",
    "promote_misc_children",
]
