"""Shared schemas for apidoc2json."""

from apidoc2json.schemas.entries import ApiDocEntry, StabilityData
from apidoc2json.schemas.extraction import ExtractionResult
from apidoc2json.schemas.nodes import HeadingData, HeadingType, ProseNode, Root
from apidoc2json.schemas.signature import (
    Extends,
    ParameterDoc,
    ReturnType,
    Signature,
    SignatureParameter,
)

__all__ = [
    "ApiDocEntry",
    "Extends",
    "ExtractionResult",
    "HeadingData",
    "HeadingType",
    "ParameterDoc",
    "ProseNode",
    "ReturnType",
    "Root",
    "Signature",
    "SignatureParameter",
    "StabilityData",
]
