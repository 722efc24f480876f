"""Custom exceptions for apidoc2json."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from apidoc2json.schemas.entries import ApiDocEntry


class Apidoc2jsonError(Exception):
    """Base exception for apidoc2json operations."""


class ContractError(Apidoc2jsonError, TypeError):
    """A caller handed the engine something that is not the expected tree node.

    When the entry being processed is known, its source and slug are appended
    to the message to make the offending document easy to find.
    """

    def __init__(self, message: str, *, entry: ApiDocEntry | None = None) -> None:
        if entry is not None:
            message += f" ({entry.api_doc_source}#{entry.slug})"
        super().__init__(message)
        self.entry = entry


class ParseError(Apidoc2jsonError):
    """Error while parsing signature notation."""


class FetchError(Apidoc2jsonError):
    """Error during content fetching."""


class TypeMapError(Apidoc2jsonError):
    """A type map is not a flat mapping of type names to URLs."""
