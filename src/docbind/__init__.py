"""docbind: bind Markdown chapter files into one reference document."""

from docbind.exceptions import (
    DocbindError,
    DuplicateSlugError,
    EncodingError,
    IndexingError,
    LoadError,
    MalformedDocumentError,
    NotFoundError,
    ParseError,
    RenderError,
)
from docbind.indexer import SlugIndex, build_index
from docbind.loader import load_document, load_documents
from docbind.parser import parse_document
from docbind.pipeline import BuildOptions, build_book, run_build, write_output
from docbind.renderer import render_book
from docbind.schemas import BuildResult, Document, ParsedDocument, Section
from docbind.slugs import slugify

__all__ = [
    "BuildOptions",
    "BuildResult",
    "DocbindError",
    "Document",
    "DuplicateSlugError",
    "EncodingError",
    "IndexingError",
    "LoadError",
    "MalformedDocumentError",
    "NotFoundError",
    "ParseError",
    "ParsedDocument",
    "RenderError",
    "Section",
    "SlugIndex",
    "build_book",
    "build_index",
    "load_document",
    "load_documents",
    "parse_document",
    "render_book",
    "run_build",
    "slugify",
    "write_output",
]
