"""Document models."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from docbind.schemas.sections import ContentBlock, Link, Section

_NEWLINE_RE = re.compile(r"\r\n|\r|\n")


class Document(BaseModel):
    """Raw chapter text as read from storage.

    Attributes:
        path: Path the document was loaded from.
        text: Decoded document text.
    """

    model_config = ConfigDict(frozen=True)

    path: Path
    text: str

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def lines(self) -> tuple[str, ...]:
        """Text split on CR/LF line breaks only; form feeds stay inside their line."""
        lines = _NEWLINE_RE.split(self.text)
        if lines[-1] == "":
            lines.pop()
        return tuple(lines)


class ParsedDocument(BaseModel):
    """Structured content extracted from a Document.

    Attributes:
        document: The source document.
        title: Document title, from its title heading or front matter.
        front_matter: Parsed YAML front matter (empty when absent).
        preamble: Content blocks that precede the first heading.
        sections: Root sections in document order.
        references: Reference-style link definitions keyed by normalized label.
    """

    document: Document
    title: str | None = None
    front_matter: dict[str, Any] = Field(default_factory=dict)
    preamble: list[ContentBlock] = Field(default_factory=list)
    sections: list[Section] = Field(default_factory=list)
    references: dict[str, Link] = Field(default_factory=dict)

    @property
    def path(self) -> Path:
        return self.document.path
