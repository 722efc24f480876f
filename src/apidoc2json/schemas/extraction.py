"""Extraction output model."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel

from apidoc2json.schemas.entries import ApiDocEntry


class ExtractionResult(BaseModel):
    """Final extraction output for one document."""

    entries: list[ApiDocEntry]
    section: dict[str, Any]
