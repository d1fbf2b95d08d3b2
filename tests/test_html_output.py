"""Tests for HTML output."""

from __future__ import annotations

from pathlib import Path

import pytest
from bs4 import BeautifulSoup

from docbind.indexer import build_index
from docbind.parser import parse_document
from docbind.renderer import render_book
from docbind.schemas import Document

from conftest import SECURITY_CHAPTER


def _render_soup(*texts: str, anchor_prefix: str = "", **kwargs) -> BeautifulSoup:
    parsed = [
        parse_document(Document(path=Path(f"{number:02d}-chapter.md"), text=text))
        for number, text in enumerate(texts, start=1)
    ]
    index = build_index(parsed, anchor_prefix=anchor_prefix)
    kwargs.setdefault("include_toc", False)
    result = render_book(parsed, index, output_format="html", **kwargs)
    assert result.output_format == "html"
    assert result.content.startswith("<!DOCTYPE html>")
    return BeautifulSoup(result.content, "html.parser")


class TestDocumentStructure:
    """Tests for page, article and section structure."""

    def test_security_example(self) -> None:
        """Headings get ids; code keeps its language and text."""
        soup = _render_soup(SECURITY_CHAPTER)

        assert soup.find("h1")["id"] == "security"
        assert soup.find("h2")["id"] == "password-hashing"
        link = soup.find("a", string="password hashing")
        assert link["href"] == "#password-hashing"

        code = soup.find("pre").find("code")
        assert code["class"] == ["language-php"]
        assert code.get_text() == "<?php\n$hash = password_hash($password, PASSWORD_DEFAULT);"

    def test_sections_nest(self) -> None:
        """Subsections sit inside their parent section element."""
        soup = _render_soup(SECURITY_CHAPTER)

        outer = soup.find("section", class_="level1")
        inner = outer.find("section", class_="level2")
        assert inner.find("h2").get_text() == "Password Hashing"

    def test_one_article_per_document(self) -> None:
        """Each document becomes an article tagged with its source."""
        soup = _render_soup("# One\n", "# Two\n")

        articles = soup.find_all("article", class_="document")
        assert [article["data-source"] for article in articles] == [
            "01-chapter.md",
            "02-chapter.md",
        ]

    def test_page_title(self) -> None:
        """The page title comes from the book title, else the first document."""
        assert _render_soup(SECURITY_CHAPTER).title.get_text() == "Security"
        assert _render_soup("text only\n").title.get_text() == "docbind"

        soup = _render_soup(SECURITY_CHAPTER, title="Book")
        assert soup.title.get_text() == "Book"
        assert soup.find("header", class_="book-title").h1.get_text() == "Book"

    def test_table_of_contents(self) -> None:
        """The nav lists nested links to every section."""
        soup = _render_soup(SECURITY_CHAPTER, include_toc=True, anchor_prefix="book-")

        nav = soup.find("nav", class_="toc")
        hrefs = [a["href"] for a in nav.find_all("a")]
        assert hrefs == ["#book-security", "#book-password-hashing"]
        assert nav.ul.li.ul.li.a.get_text() == "Password Hashing"
        assert soup.find("h1")["id"] == "book-security"


class TestBlocks:
    """Tests for block-level HTML rendering."""

    def test_text_is_escaped(self) -> None:
        """Paragraph text is escaped, not interpreted."""
        soup = _render_soup("# A\n\nUse 5 < 6 & `<script>`.\n")

        paragraph = soup.find("p")
        assert paragraph.get_text() == "Use 5 < 6 & <script>."
        assert soup.find("script") is None

    def test_inline_formatting(self) -> None:
        """Emphasis, strong text and autolinks become elements."""
        soup = _render_soup("Some *stress*, **bold** and <https://php.net>.\n")

        paragraph = soup.find("p")
        assert paragraph.em.get_text() == "stress"
        assert paragraph.strong.get_text() == "bold"
        assert paragraph.a["href"] == "https://php.net"

    def test_reference_links(self) -> None:
        """Reference-style links resolve through the definitions."""
        soup = _render_soup('# A\n\nRead [the manual][php].\n\n[php]: https://php.net "PHP"\n')

        link = soup.find("a", string="the manual")
        assert link["href"] == "https://php.net"
        assert link["title"] == "PHP"

    def test_cross_document_link(self) -> None:
        """Links into other documents point at in-page anchors."""
        soup = _render_soup(
            "# Intro\n\nSee [hashing](02-chapter.md#password-hashing).\n", SECURITY_CHAPTER
        )

        assert soup.find("a", string="hashing")["href"] == "#password-hashing"

    def test_link_target_with_parentheses(self) -> None:
        """Balanced parentheses stay inside the href."""
        soup = _render_soup("See [PHP](https://en.wikipedia.org/wiki/PHP_(language)).\n")

        link = soup.find("a", string="PHP")
        assert link["href"] == "https://en.wikipedia.org/wiki/PHP_(language)"
        assert soup.find("p").get_text() == "See PHP."

    def test_lists(self) -> None:
        """Nested lists and ordered start numbers are preserved."""
        soup = _render_soup("- one\n- two\n  - nested\n\n3. three\n4. four\n")

        outer = soup.find("ul")
        items = outer.find_all("li", recursive=False)
        assert len(items) == 2
        assert items[1].ul.li.get_text() == "nested"
        assert soup.find("ol")["start"] == "3"

    def test_blockquote(self) -> None:
        """Quotes render their inner blocks."""
        soup = _render_soup("> first\n>\n> second\n")

        paragraphs = soup.find("blockquote").find_all("p")
        assert [p.get_text() for p in paragraphs] == ["first", "second"]

    def test_raw_html_block(self) -> None:
        """Raw HTML is embedded as markup."""
        soup = _render_soup('<div class="alert">\nCareful\n</div>\n')

        assert soup.find("div", class_="alert").get_text().strip() == "Careful"

    @pytest.mark.parametrize("marker", ["***", "---", "___"])
    def test_thematic_break(self, marker: str) -> None:
        """Breaks become hr elements."""
        soup = _render_soup(f"before\n\n{marker}\n\nafter\n")

        assert soup.find("hr") is not None
