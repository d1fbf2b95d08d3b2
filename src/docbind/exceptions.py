"""Custom exceptions for docbind."""

from __future__ import annotations

from pathlib import Path


class DocbindError(Exception):
    """Base exception for docbind operations."""


class LoadError(DocbindError):
    """Error while reading input documents."""


class NotFoundError(LoadError):
    """Input document does not exist."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        super().__init__(f"Input document not found: {self.path}")


class EncodingError(LoadError):
    """Input document cannot be decoded as text."""

    def __init__(self, path: Path | str, encoding: str, reason: str = "") -> None:
        self.path = Path(path)
        self.encoding = encoding
        message = f"Cannot decode {self.path} as {encoding}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class ParseError(DocbindError):
    """Error during document parsing."""


class MalformedDocumentError(ParseError):
    """Document structure is broken (e.g. an unterminated fenced block)."""

    def __init__(self, path: Path | str, line: int | None, reason: str) -> None:
        self.path = Path(path)
        self.line = line
        self.reason = reason
        location = f"{self.path}:{line}" if line is not None else str(self.path)
        super().__init__(f"{location}: {reason}")


class IndexingError(DocbindError):
    """Error while building the slug index."""


class DuplicateSlugError(IndexingError):
    """Two sections resolve to the same slug."""

    def __init__(self, slug: str, first: str, second: str) -> None:
        self.slug = slug
        self.first = first
        self.second = second
        super().__init__(f"Duplicate slug '{slug}': {first} and {second}")


class RenderError(DocbindError):
    """Error during output rendering."""
