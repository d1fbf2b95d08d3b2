"""Tests for the end-to-end build pipeline."""

from __future__ import annotations

import io
from pathlib import Path

import pytest

from docbind.exceptions import (
    DuplicateSlugError,
    MalformedDocumentError,
    NotFoundError,
)
from docbind.pipeline import BuildOptions, build_book, run_build, write_output


class TestBuildBook:
    """Tests for build_book function."""

    def test_security_chapter(self, security_chapter: Path) -> None:
        """One chapter yields two sections and one code block."""
        result = build_book([security_chapter], BuildOptions(include_toc=False))

        assert "Sections: 2" in result.summary
        assert "Code blocks: 1" in result.summary
        assert result.content.startswith("# Security {#security}")

    def test_documents_keep_input_order(self, write_chapter) -> None:
        """Chapters are emitted in the order given."""
        second = write_chapter("b.md", "# Beta\n")
        first = write_chapter("a.md", "# Alpha\n")

        result = build_book([second, first], BuildOptions(include_toc=False))

        assert result.content.index("# Beta") < result.content.index("# Alpha")

    def test_duplicate_slug_across_files(self, write_chapter) -> None:
        """A slug used in two chapters fails the build."""
        first = write_chapter("a.md", "# Setup\n")
        second = write_chapter("b.md", "## Setup\n")

        with pytest.raises(DuplicateSlugError):
            build_book([first, second])

    def test_duplicate_detected_even_when_filtered(self, write_chapter) -> None:
        """Filtering does not hide slug collisions."""
        first = write_chapter("a.md", "# Setup\n")
        second = write_chapter("b.md", "## Setup\n")

        with pytest.raises(DuplicateSlugError):
            build_book([first, second], BuildOptions(sections=["setup"]))

    def test_missing_file(self, tmp_path: Path) -> None:
        """Unknown paths raise NotFoundError."""
        with pytest.raises(NotFoundError):
            build_book([tmp_path / "missing.md"])

    def test_include_filter(self, security_chapter: Path) -> None:
        """Only the selected sections and their parents are rendered."""
        options = BuildOptions(
            include_toc=False,
            section_filter_mode="include",
            sections=["Password Hashing"],
        )

        result = build_book([security_chapter], options)

        assert "## Password Hashing {#password-hashing}" in result.content
        assert "# Security {#security}" in result.content
        assert "Sections: 2" in result.summary

    def test_exclude_filter(self, security_chapter: Path) -> None:
        """Excluded sections disappear with their content."""
        options = BuildOptions(include_toc=False, sections=["password hashing"])

        result = build_book([security_chapter], options)

        assert "Password Hashing {#" not in result.content
        assert "password_hash(" not in result.content

    def test_html_format(self, security_chapter: Path) -> None:
        """HTML output is selected through the options."""
        result = build_book([security_chapter], BuildOptions(output_format="html"))

        assert result.output_format == "html"
        assert 'id="password-hashing"' in result.content

    def test_idempotent_on_own_output(self, security_chapter: Path, write_chapter) -> None:
        """Feeding the output back in reproduces it exactly."""
        options = BuildOptions(include_toc=False)
        first = build_book([security_chapter], options)
        rebuilt = write_chapter("book.md", first.content)

        second = build_book([rebuilt], options)

        assert second.content == first.content


class TestRunBuild:
    """Tests for run_build and write_output."""

    def test_writes_file(self, security_chapter: Path, tmp_path: Path) -> None:
        """Output lands at the target path."""
        target = tmp_path / "out" / "book.md"

        result = run_build([security_chapter], target, BuildOptions(include_toc=False))

        assert target.read_text(encoding="utf-8") == result.content
        assert [p.name for p in target.parent.iterdir()] == ["book.md"]

    def test_writes_stream(self, security_chapter: Path) -> None:
        """Streams receive the content directly."""
        stream = io.StringIO()

        result = run_build([security_chapter], stream)

        assert stream.getvalue() == result.content

    def test_unterminated_fence_writes_nothing(self, write_chapter, tmp_path: Path) -> None:
        """A malformed chapter aborts the build without output."""
        good = write_chapter("a.md", "# Fine\n")
        bad = write_chapter("b.md", "# Broken\n\n```php\n<?php\n")
        target = tmp_path / "book.md"

        with pytest.raises(MalformedDocumentError) as exc_info:
            run_build([good, bad], target)

        assert exc_info.value.line == 3
        assert not target.exists()

    @pytest.mark.parametrize("output_format", ["markdown", "html"])
    def test_unterminated_fence_in_quote_fails_every_format(
        self, write_chapter, output_format: str
    ) -> None:
        """Both formats reject a quoted fence that never closes, naming the chapter."""
        bad = write_chapter("quote.md", "# A\n\n> ```php\n> echo 1;\n")

        with pytest.raises(MalformedDocumentError) as exc_info:
            build_book([bad], BuildOptions(output_format=output_format))

        assert exc_info.value.path == bad
        assert exc_info.value.line == 3

    def test_failed_build_keeps_previous_output(self, write_chapter, tmp_path: Path) -> None:
        """An existing output file is untouched by a failed build."""
        bad = write_chapter("b.md", "```\nnever closed\n")
        target = tmp_path / "book.md"
        target.write_text("previous", encoding="utf-8")

        with pytest.raises(MalformedDocumentError):
            run_build([bad], target)

        assert target.read_text(encoding="utf-8") == "previous"

    def test_write_output_replaces_file(self, tmp_path: Path) -> None:
        """Existing files are replaced and no temp files remain."""
        target = tmp_path / "book.md"
        target.write_text("old", encoding="utf-8")

        write_output("new\n", target)

        assert target.read_text(encoding="utf-8") == "new\n"
        assert [p.name for p in tmp_path.iterdir()] == ["book.md"]
