"""Tests for slug derivation and the slug index."""

from __future__ import annotations

from pathlib import Path

import pytest

from docbind.exceptions import DuplicateSlugError, MalformedDocumentError
from docbind.indexer import SlugIndex, build_index
from docbind.parser import parse_document
from docbind.schemas import Document, Section
from docbind.slugs import section_slug, slugify

from conftest import SECURITY_CHAPTER


def _parse(text: str, name: str = "chapter.md"):
    return parse_document(Document(path=Path(name), text=text))


class TestSlugify:
    """Tests for slugify function."""

    @pytest.mark.parametrize(
        ("title", "expected"),
        [
            ("Security", "security"),
            ("Password Hashing", "password-hashing"),
            ("  Multiple   Spaces  ", "multiple-spaces"),
            ("What's New?", "whats-new"),
            ("Using `PDO`", "using-pdo"),
            ("[PHP](https://php.net) Resources", "php-resources"),
            ("Cross-Site Scripting", "cross-site-scripting"),
        ],
    )
    def test_derivation(self, title: str, expected: str) -> None:
        """Titles lower-case and collapse whitespace to one separator."""
        assert slugify(title) == expected

    def test_custom_separator(self) -> None:
        """The separator is configurable."""
        assert slugify("Password Hashing", separator="_") == "password_hashing"

    def test_explicit_identifier_is_verbatim(self) -> None:
        """An explicit identifier is used as-is."""
        section = Section(title="Install", level=2, identifier="Setup_Guide")

        assert section_slug(section) == "Setup_Guide"


class TestBuildIndex:
    """Tests for build_index function."""

    def test_security_example_slugs(self) -> None:
        """The worked example yields security and password-hashing."""
        index = build_index([_parse(SECURITY_CHAPTER)])

        assert list(index) == ["security", "password-hashing"]
        assert len(index) == 2
        assert index["password-hashing"].section.title == "Password Hashing"

    def test_refs_point_at_document_and_section(self) -> None:
        """Entries reference their document and section."""
        parsed = _parse(SECURITY_CHAPTER, name="01-security.md")
        index = build_index([parsed])

        ref = index["security"]
        assert ref.document is parsed.document
        assert ref.section is parsed.sections[0]
        assert index.slug_for(parsed, parsed.sections[0].children[0]) == "password-hashing"

    def test_duplicate_slug_across_documents(self) -> None:
        """Two sections with the same derived slug fail the build."""
        first = _parse("# Overview\n", name="a.md")
        second = _parse("text\n\n## Overview\n", name="b.md")

        with pytest.raises(DuplicateSlugError) as exc_info:
            build_index([first, second])

        assert exc_info.value.slug == "overview"
        assert exc_info.value.first == "a.md:1"
        assert exc_info.value.second == "b.md:3"

    def test_duplicate_within_document(self) -> None:
        """Titles that differ only in case collide."""
        with pytest.raises(DuplicateSlugError):
            build_index([_parse("## Usage\n## usage\n")])

    def test_explicit_identifier_collides_with_derived(self) -> None:
        """Explicit ids share the slug namespace."""
        with pytest.raises(DuplicateSlugError):
            build_index([_parse("## Setup\n## Install {#setup}\n")])

    def test_explicit_identifier_avoids_collision(self) -> None:
        """An explicit id disambiguates repeated titles."""
        index = build_index([_parse("## Examples\n## Examples {#more-examples}\n")])

        assert list(index) == ["examples", "more-examples"]

    def test_empty_slug_is_malformed(self) -> None:
        """A title with no slug characters is rejected."""
        with pytest.raises(MalformedDocumentError, match="empty slug"):
            build_index([_parse("## ???\n")])


class TestSlugIndex:
    """Tests for SlugIndex lookups."""

    @pytest.fixture
    def index(self) -> SlugIndex:
        """Index over the security chapter."""
        return build_index([_parse(SECURITY_CHAPTER, name="01-security.md")])

    @pytest.mark.parametrize(
        ("target", "expected"),
        [
            ("#password-hashing", "#password-hashing"),
            ("01-security.md#security", "#security"),
            ("../chapters/01-security.md#password-hashing", "#password-hashing"),
            ("security", "#security"),
            ("#unknown", None),
            ("https://example.com/#security", None),
            ("mailto:security", None),
            ("", None),
        ],
    )
    def test_resolve_link(self, index: SlugIndex, target: str, expected: str | None) -> None:
        """Internal targets resolve to anchors; external ones do not."""
        assert index.resolve_link(target) == expected

    def test_anchor_prefix(self) -> None:
        """Anchors carry the configured prefix."""
        index = build_index([_parse(SECURITY_CHAPTER)], anchor_prefix="book-")

        assert index.anchor("security") == "#book-security"
        assert index.resolve_link("#security") == "#book-security"

    def test_mapping_protocol(self, index: SlugIndex) -> None:
        """Membership and get behave like a mapping."""
        assert "security" in index
        assert "missing" not in index
        assert index.get("missing") is None
        with pytest.raises(KeyError):
            index["missing"]
