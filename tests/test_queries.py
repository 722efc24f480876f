"""Tests for prose tree predicates and mutators."""

from __future__ import annotations

import pytest

from apidoc2json.exceptions import ContractError
from apidoc2json.queries import (
    add_stability_metadata,
    add_yaml_metadata,
    find_typed_list,
    is_markdown_url,
    is_stability_node,
    is_typed_list,
    is_yaml_node,
    parse_yaml_into_metadata,
    set_heading_metadata,
    update_link_reference,
    update_markdown_link,
    update_stability_prefix_to_link,
    update_type_reference,
    update_unix_manual_reference,
)
from apidoc2json.schemas import ApiDocEntry, HeadingType
from apidoc2json.schemas.nodes import (
    Blockquote,
    Definition,
    Heading,
    Html,
    InlineCode,
    Link,
    LinkReference,
    List,
    ListItem,
    Paragraph,
    Root,
    Text,
)
from apidoc2json.slugger import Slugger
from apidoc2json.type_map import DOC_MDN_BASE_URL_JS_PRIMITIVES


def _list(*first_children: object) -> List:
    return List(children=[ListItem(children=[Paragraph(children=list(first_children))])])


def _entry() -> ApiDocEntry:
    return ApiDocEntry(
        api="test",
        api_doc_source="doc/api/test.md",
        slug="test",
        heading=Heading(depth=1, children=[Text(value="Test")]),
    )


class TestIsTypedList:
    """Tests for is_typed_list function."""

    def test_returns_starter(self) -> None:
        """Lists opening with "Returns" are certainly typed."""
        assert is_typed_list(_list(Text(value="Returns: {string}"))) == 2

    def test_type_link(self) -> None:
        """Lists opening with a `<Type>` link are certainly typed."""
        link = Link(url="https://example.com", children=[InlineCode(value="<Type>")])
        assert is_typed_list(_list(link)) == 2

    def test_property_code(self) -> None:
        """Lists opening with an identifier in inline code are probably typed."""
        assert is_typed_list(_list(InlineCode(value="foo"))) == 1

    def test_invalid_property(self) -> None:
        """Inline code that is not an identifier does not count."""
        assert is_typed_list(_list(InlineCode(value="not a valid prop"))) == 0

    def test_plain_prose(self) -> None:
        """Ordinary list text is not typed."""
        assert is_typed_list(_list(Text(value="Just a bullet"))) == 0

    def test_non_list(self) -> None:
        """Anything but a list scores zero."""
        assert is_typed_list(Paragraph(children=[Text(value="Returns: x")])) == 0
        assert is_typed_list(List()) == 0


class TestFindTypedList:
    """Tests for find_typed_list function."""

    def test_first_list_only(self) -> None:
        """Only the first top-level list is considered."""
        content = Root(
            children=[
                _list(Text(value="plain")),
                _list(InlineCode(value="foo")),
            ]
        )

        assert find_typed_list(content) is None

    def test_confidence_threshold(self) -> None:
        """A list below the requested confidence is ignored."""
        typed = _list(InlineCode(value="foo"))
        content = Root(children=[Paragraph(children=[Text(value="Intro")]), typed])

        assert find_typed_list(content, 1) is typed
        assert find_typed_list(content, 2) is None


class TestStability:
    """Tests for stability detection and extraction."""

    def test_extracts_index_and_description(self) -> None:
        """`Stability: 1.0 - Frozen` yields its index and description."""
        entry = _entry()
        quote = Blockquote(children=[Paragraph(children=[Text(value="Stability: 1.0 - Frozen")])])

        stability = add_stability_metadata(quote, entry)

        assert stability is not None
        assert (stability.index, stability.description) == ("1.0", "Frozen")
        assert entry.stability == stability

    def test_description_spans_nodes(self) -> None:
        """Description text is gathered across inline nodes."""
        quote = Blockquote(
            children=[
                Paragraph(
                    children=[
                        Text(value="Stability: 2 - Stable. Use "),
                        InlineCode(value="fs"),
                        Text(value="\ninstead."),
                    ]
                )
            ]
        )

        stability = add_stability_metadata(quote)

        assert stability is not None
        assert stability.description == "Stable. Use fs instead."

    def test_non_stability_blockquote(self) -> None:
        """Other blockquotes leave the entry unannotated."""
        entry = _entry()
        quote = Blockquote(children=[Paragraph(children=[Text(value="A note.")])])

        assert is_stability_node(quote) is False
        assert add_stability_metadata(quote, entry) is None
        assert entry.stability is None

    def test_rejects_non_blockquote(self) -> None:
        """Anything but a blockquote is a contract violation."""
        with pytest.raises(ContractError):
            add_stability_metadata(Paragraph())

    def test_prefix_becomes_link(self) -> None:
        """The `Stability: N` lead-in links to the stability index."""
        quote = Blockquote(children=[Paragraph(children=[Text(value="Stability: 0 - Deprecated")])])

        update_stability_prefix_to_link(quote)

        first, rest = quote.children[0].children
        assert isinstance(first, Link)
        assert first.url.endswith("#stability-index")
        assert first.children[0].value == "Stability: 0"
        assert rest.value == " - Deprecated"


class TestLinks:
    """Tests for link rewriting."""

    def test_markdown_url(self) -> None:
        """Relative `.md` links point at the rendered `.html` page."""
        link = Link(url="test.md#heading", children=[Text(value="test")])

        update_markdown_link(link)

        assert link.url == "test.html#heading"

    def test_absolute_url_untouched(self) -> None:
        """Absolute URLs are never rewritten."""
        link = Link(url="https://github.com/nodejs/node/blob/main/README.md")

        update_markdown_link(link)

        assert link.url == "https://github.com/nodejs/node/blob/main/README.md"
        assert is_markdown_url("fs.md") is True
        assert is_markdown_url("https://example.com/fs.md") is False

    def test_link_reference_replaced_in_parent(self) -> None:
        """A resolved reference is swapped for a link in its parent."""
        reference = LinkReference(identifier="Node.js", children=[Text(value="Node.js")])
        paragraph = Paragraph(children=[Text(value="See "), reference])
        definitions = [Definition(identifier="node.js", url="https://nodejs.org/")]

        link = update_link_reference(reference, definitions, paragraph)

        assert isinstance(link, Link)
        assert link.url == "https://nodejs.org/"
        assert paragraph.children[1] is link

    def test_unknown_reference_untouched(self) -> None:
        """An unresolvable reference stays as it is."""
        reference = LinkReference(identifier="missing")
        paragraph = Paragraph(children=[reference])

        assert update_link_reference(reference, [], paragraph) is reference
        assert paragraph.children == [reference]


class TestTypeReferences:
    """Tests for update_type_reference function."""

    def test_splits_text_around_type(self) -> None:
        """`{string}` becomes a link between the surrounding text."""
        text = Text(value="this is a {string} type")
        paragraph = Paragraph(children=[text])

        update_type_reference(text, paragraph)

        before, link, after = paragraph.children
        assert before.value == "this is a "
        assert isinstance(link, Link)
        assert link.url == f"{DOC_MDN_BASE_URL_JS_PRIMITIVES}#string_type"
        assert link.children[0].value == "<string>"
        assert after.value == " type"

    def test_unknown_type_untouched(self) -> None:
        """An unknown type leaves the text node as it is."""
        text = Text(value="{test}")
        paragraph = Paragraph(children=[text])

        assert update_type_reference(text, paragraph) == [text]
        assert paragraph.children == [text]

    def test_union_with_type_map(self) -> None:
        """Union pieces become separate links joined by `|`."""
        text = Text(value="{fs.Stats|null}")
        paragraph = Paragraph(children=[text])

        update_type_reference(text, paragraph, {"fs.Stats": "fs.html#class-fsstats"})

        stats, separator, null = paragraph.children
        assert stats.url == "fs.html#class-fsstats"
        assert separator.value == " | "
        assert null.children[0].value == "<null>"

    def test_partially_unknown_union(self) -> None:
        """Unknown union pieces stay as plain `{Type}` text."""
        text = Text(value="{Foo|string}")
        paragraph = Paragraph(children=[text])

        update_type_reference(text, paragraph)

        unknown, _, known = paragraph.children
        assert unknown.value == "{Foo}"
        assert isinstance(known, Link)


class TestUnixManualReferences:
    """Tests for update_unix_manual_reference function."""

    def test_links_man_page(self) -> None:
        """`open(2)` links to its man7.org page."""
        text = Text(value="See open(2) for details.")
        paragraph = Paragraph(children=[text])

        update_unix_manual_reference(text, paragraph)

        _, link, after = paragraph.children
        assert link.url == "http://man7.org/linux/man-pages/man2/open.2.html"
        assert link.children[0].value == "open(2)"
        assert after.value == " for details."

    def test_section_suffix(self) -> None:
        """Section suffixes are kept in the page name."""
        text = Text(value="fcntl(3p)")
        paragraph = Paragraph(children=[text])

        update_unix_manual_reference(text, paragraph)

        assert paragraph.children[0].url.endswith("man3/fcntl.3p.html")


class TestYamlMetadata:
    """Tests for YAML metadata parsing."""

    def test_plain_mapping(self) -> None:
        """Unknown keys pass through unchanged."""
        assert parse_yaml_into_metadata("type: test\nname: test\n") == {"type": "test", "name": "test"}

    def test_versions_become_lists(self) -> None:
        """`added` is renamed and always a list."""
        properties = parse_yaml_into_metadata("<!-- YAML\nadded: v1.0.0\n-->")

        assert properties == {"added_in": ["v1.0.0"]}

    def test_changes_versions(self) -> None:
        """Change records always carry a version list."""
        properties = parse_yaml_into_metadata(
            "<!-- YAML\nchanges:\n  - version: v10.0.0\n    pr-url: https://example.com/1\n"
            "    description: Made it faster.\n-->"
        )

        assert properties["changes"] == [
            {"version": ["v10.0.0"], "pr-url": "https://example.com/1", "description": "Made it faster."}
        ]

    def test_introduced_in_comment(self) -> None:
        """Single `key=value` comments are metadata too."""
        node = Html(value="<!-- introduced_in=v0.10.0 -->")

        assert is_yaml_node(node) is True
        assert parse_yaml_into_metadata(node.value) == {"introduced_in": ["v0.10.0"]}

    def test_applies_onto_entry(self) -> None:
        """Metadata lands on the entry, unknown keys included."""
        entry = _entry()

        add_yaml_metadata(Html(value="<!-- YAML\nadded: v12.12.0\nnapiVersion: 3\n-->"), entry)

        assert entry.added_in == ["v12.12.0"]
        assert entry.n_api_version == ["3"]

    def test_structural_keys_are_kept(self) -> None:
        """YAML keys cannot replace the heading, content, anchor or depth."""
        entry = _entry()
        heading = entry.heading

        add_yaml_metadata(
            Html(value="<!-- YAML\nheading: Renamed\ncontent: none\ndepth: 3\nslug: other\nowner: fs\n-->"),
            entry,
        )

        assert entry.heading is heading
        assert isinstance(entry.content, Root)
        assert entry.depth == 1
        assert entry.slug == "test"
        assert entry.owner == "fs"

    def test_skipped_keys_are_reported(self) -> None:
        """update_properties returns the keys it refused."""
        entry = _entry()

        assert entry.update_properties({"heading_type": "class", "api": "x", "tags": ["a"]}) == [
            "heading_type",
            "api",
        ]
        assert entry.tags == ["a"]
        assert entry.api == "test"

    def test_ordinary_comment_is_not_yaml(self) -> None:
        """Comments without metadata are left alone."""
        assert is_yaml_node(Html(value="<!-- eslint-skip -->")) is False

    def test_invalid_yaml_is_ignored(self) -> None:
        """Unparsable YAML yields no metadata."""
        assert parse_yaml_into_metadata("<!-- YAML\nadded: [v1\n-->") == {}


class TestSetHeadingMetadata:
    """Tests for set_heading_metadata function."""

    def test_attaches_data(self) -> None:
        """Heading data carries text, name, depth, type and slug."""
        heading = Heading(depth=2, children=[Text(value="Class: "), InlineCode(value="fs.Dir")])

        set_heading_metadata(heading, Slugger())

        assert heading.data is not None
        assert heading.data.text == "Class: `fs.Dir`"
        assert heading.data.name == "fs.Dir"
        assert heading.data.type is HeadingType.CLASS
        assert heading.data.slug == "class-fsdir"

    def test_rejects_non_node(self) -> None:
        """Plain values are a contract violation."""
        with pytest.raises(ContractError):
            set_heading_metadata("## heading")  # type: ignore[arg-type]
