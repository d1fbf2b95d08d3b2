"""Shared schemas for docbind."""

from docbind.schemas.build import BuildResult
from docbind.schemas.document import Document, ParsedDocument
from docbind.schemas.sections import (
    CodeBlock,
    ContentBlock,
    HtmlBlock,
    Link,
    ListBlock,
    ListItem,
    Paragraph,
    Quote,
    Section,
    ThematicBreak,
)

__all__ = [
    "BuildResult",
    "CodeBlock",
    "ContentBlock",
    "Document",
    "HtmlBlock",
    "Link",
    "ListBlock",
    "ListItem",
    "Paragraph",
    "ParsedDocument",
    "Quote",
    "Section",
    "ThematicBreak",
]
