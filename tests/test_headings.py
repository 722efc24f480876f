"""Tests for heading classification and slugging."""

from __future__ import annotations

import pytest

from apidoc2json.headings import classify_heading, parse_heading_into_metadata
from apidoc2json.schemas import HeadingType
from apidoc2json.slugger import Slugger, github_slug


class TestClassifyHeading:
    """Tests for classify_heading function."""

    @pytest.mark.parametrize(
        ("text", "expected_type", "expected_name"),
        [
            ("`fs.readFile(path[, options], callback)`", HeadingType.METHOD, "readFile"),
            ("`setTimeout(callback, delay)`", HeadingType.METHOD, "setTimeout"),
            ("`buf[index]`", HeadingType.PROPERTY, "[index]"),
            ("`dir.path`", HeadingType.PROPERTY, "path"),
            ("Event: `'close'`", HeadingType.EVENT, "close"),
            ("Class: `fs.Dir`", HeadingType.CLASS, "fs.Dir"),
            ("Class: `Foo extends Bar`", HeadingType.CLASS, "Foo"),
            ("class Foo extends Bar", HeadingType.CLASS, "Foo"),
            ("`new Foo(options)`", HeadingType.CTOR, "Foo"),
            ("Static method: `Buffer.from(array)`", HeadingType.CLASS_METHOD, "from"),
        ],
    )
    def test_known_patterns(self, text: str, expected_type: HeadingType, expected_name: str) -> None:
        """Known heading shapes map to their kind and API name."""
        assert classify_heading(text, 2) == (expected_type, expected_name)

    def test_unknown_depth_one_is_module(self) -> None:
        """Unrecognised depth-1 text is a module named by its text."""
        assert classify_heading("File system", 1) == (HeadingType.MODULE, "File system")

    def test_unknown_deeper_is_misc(self) -> None:
        """Unrecognised deeper text is misc."""
        assert classify_heading("Performance notes", 3) == (HeadingType.MISC, "Performance notes")

    def test_is_deterministic(self) -> None:
        """Same input always gives the same classification."""
        text = "`fs.open(path[, flags])`"
        assert classify_heading(text, 2) == classify_heading(text, 2)

    def test_metadata_has_no_slug(self) -> None:
        """Heading metadata is built without a slug."""
        data = parse_heading_into_metadata("Event: `'exit'`", 3)

        assert data.type is HeadingType.EVENT
        assert data.name == "exit"
        assert data.depth == 3
        assert data.slug is None


class TestSlugger:
    """Tests for Slugger class."""

    def test_github_slug(self) -> None:
        """Punctuation is dropped and spaces become hyphens."""
        assert github_slug("Hello, World!") == "hello-world"

    def test_replaces_node_js(self) -> None:
        """Node.js is spelled nodejs."""
        assert Slugger().slug("About Node.js") == "about-nodejs"

    def test_collapses_hyphens(self) -> None:
        """Runs of hyphens and edge hyphens are removed."""
        assert Slugger().slug("`fs.readFile(path)`") == "fsreadfilepath"
        assert Slugger().slug("a -- b") == "a-b"

    def test_deduplicates(self) -> None:
        """Repeated titles get numeric suffixes."""
        slugger = Slugger()

        assert [slugger.slug("Example") for _ in range(3)] == ["example", "example-1", "example-2"]
