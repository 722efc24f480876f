"""Tests for type name resolution and type map loading."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from apidoc2json.exceptions import FetchError, TypeMapError
from apidoc2json.type_map import (
    DOC_MDN_BASE_URL_JS_GLOBALS,
    DOC_MDN_BASE_URL_JS_PRIMITIVES,
    load_type_map,
    lookup_type,
    resolve_type_pieces,
    validate_type_map,
)


class TestLookupType:
    """Tests for lookup_type function."""

    def test_primitive(self) -> None:
        """Primitives link to their MDN data structure anchor."""
        assert lookup_type("string") == f"{DOC_MDN_BASE_URL_JS_PRIMITIVES}#string_type"

    def test_integer_is_a_number(self) -> None:
        """`integer` is documented as a number."""
        assert lookup_type("integer") == f"{DOC_MDN_BASE_URL_JS_PRIMITIVES}#number_type"

    def test_global(self) -> None:
        """Global objects link to the MDN reference."""
        assert lookup_type("Promise") == f"{DOC_MDN_BASE_URL_JS_GLOBALS}Promise"

    def test_other(self) -> None:
        """Well-known web types have fixed URLs."""
        assert lookup_type("Headers") == "https://developer.mozilla.org/en-US/docs/Web/API/Headers"

    def test_type_map(self) -> None:
        """Project types come from the type map."""
        assert lookup_type("fs.Stats", {"fs.Stats": "fs.html#class-fsstats"}) == "fs.html#class-fsstats"

    def test_unknown(self) -> None:
        """Unknown names resolve to nothing."""
        assert lookup_type("Nope") is None
        assert lookup_type("Nope", {}) is None


class TestResolveTypePieces:
    """Tests for resolve_type_pieces function."""

    def test_union(self) -> None:
        """Union members resolve one by one."""
        pieces = resolve_type_pieces("string|Foo")

        assert pieces[0] == ("string", f"{DOC_MDN_BASE_URL_JS_PRIMITIVES}#string_type")
        assert pieces[1] == ("Foo", None)

    def test_arrays_and_generics(self) -> None:
        """`T[]` and `T<U>` resolve like `T` but keep their label."""
        pieces = resolve_type_pieces("Buffer[] | Promise<string>", {"Buffer": "buffer.html#class-buffer"})

        assert pieces == [
            ("Buffer[]", "buffer.html#class-buffer"),
            ("Promise<string>", f"{DOC_MDN_BASE_URL_JS_GLOBALS}Promise"),
        ]

    def test_braces_and_blanks(self) -> None:
        """Surrounding braces and empty pieces are ignored."""
        assert resolve_type_pieces("{null|}") == [("null", f"{DOC_MDN_BASE_URL_JS_PRIMITIVES}#null_type")]


class TestValidateTypeMap:
    """Tests for validate_type_map function."""

    def test_accepts_flat_mapping(self) -> None:
        """A string to string mapping is returned as a dict."""
        assert validate_type_map({"a": "b"}, "test") == {"a": "b"}

    @pytest.mark.parametrize("data", [["a"], "a", {"a": 1}, {"a": {"b": "c"}}])
    def test_rejects_other_shapes(self, data: object) -> None:
        """Anything but a flat string mapping is rejected."""
        with pytest.raises(TypeMapError):
            validate_type_map(data, "test")


class TestLoadTypeMap:
    """Tests for load_type_map function."""

    @pytest.mark.asyncio
    async def test_loads_file(self, tmp_path: Path) -> None:
        """Type maps load from JSON files."""
        path = tmp_path / "types.json"
        path.write_text(json.dumps({"fs.Stats": "fs.html#class-fsstats"}), encoding="utf-8")

        assert await load_type_map(path) == {"fs.Stats": "fs.html#class-fsstats"}

    @pytest.mark.asyncio
    async def test_invalid_json(self, tmp_path: Path) -> None:
        """Unparsable files raise TypeMapError."""
        path = tmp_path / "types.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(TypeMapError, match="not valid JSON"):
            await load_type_map(str(path))

    @pytest.mark.asyncio
    async def test_loads_url(self) -> None:
        """Type maps load over HTTP(S)."""
        response = MagicMock()
        response.status_code = 200
        response.text = '{"url.URL": "url.html#class-url"}'
        client = AsyncMock()
        client.get = AsyncMock(return_value=response)
        client.__aenter__ = AsyncMock(return_value=client)
        client.__aexit__ = AsyncMock(return_value=None)

        with patch("apidoc2json.http_utils.httpx.AsyncClient", return_value=client):
            type_map = await load_type_map("https://example.com/type-map.json")

        assert type_map == {"url.URL": "url.html#class-url"}
        client.get.assert_awaited_once_with("https://example.com/type-map.json")

    @pytest.mark.asyncio
    async def test_missing_url(self) -> None:
        """A missing remote type map raises FetchError."""
        response = MagicMock()
        response.status_code = 404
        client = AsyncMock()
        client.get = AsyncMock(return_value=response)
        client.__aenter__ = AsyncMock(return_value=client)
        client.__aexit__ = AsyncMock(return_value=None)

        with patch("apidoc2json.http_utils.httpx.AsyncClient", return_value=client):
            with pytest.raises(FetchError):
                await load_type_map("https://example.com/missing.json")
