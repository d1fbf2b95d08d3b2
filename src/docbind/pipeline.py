"""Build pipeline: load -> parse -> index -> filter -> render."""

from __future__ import annotations

import logging
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Literal, TextIO, Union

from docbind.config import (
    DOCBIND_ENCODING,
    DOCBIND_ESTIMATE_TOKENS,
    DOCBIND_INCLUDE_TOC,
    DOCBIND_OUTPUT_FORMAT,
)
from docbind.indexer import build_index
from docbind.loader import load_documents
from docbind.parser import parse_document
from docbind.renderer import render_book
from docbind.schemas import BuildResult
from docbind.sections import filter_sections

logger = logging.getLogger(__name__)

Sink = Union[Path, str, TextIO]


@dataclass
class BuildOptions:
    """Options for a book build.

    Attributes:
        output_format: "markdown" or "html".
        include_toc: If True, emit a table of contents before the documents.
        title: Optional book title placed above everything else.
        section_filter_mode: Mode for section filtering ("include" or "exclude").
        sections: Section titles (or explicit ids) to include or exclude.
        encoding: Text encoding of the input files.
        estimate_tokens: If True, add a token estimate to the summary.
    """

    output_format: str = DOCBIND_OUTPUT_FORMAT
    include_toc: bool = DOCBIND_INCLUDE_TOC
    title: str | None = None
    section_filter_mode: Literal["include", "exclude"] = "exclude"
    sections: list[str] = field(default_factory=list)
    encoding: str = DOCBIND_ENCODING
    estimate_tokens: bool = DOCBIND_ESTIMATE_TOKENS


def build_book(
    paths: Iterable[Path | str], options: BuildOptions | None = None
) -> BuildResult:
    """Load, parse, index, and render a collection of chapter files.

    The slug index always covers every section, so duplicate slugs fail the
    build even when the colliding section is filtered out afterwards.

    Raises:
        NotFoundError, EncodingError: If an input cannot be read.
        MalformedDocumentError: If a document is structurally broken.
        DuplicateSlugError: If two sections share a slug.
        RenderError: If the output format is unknown.
    """
    opts = options or BuildOptions()

    documents = load_documents(paths, encoding=opts.encoding)
    parsed = [parse_document(document) for document in documents]
    index = build_index(parsed)

    if opts.sections:
        parsed = [
            doc.model_copy(
                update={
                    "sections": filter_sections(
                        doc.sections, mode=opts.section_filter_mode, selected=opts.sections
                    )
                }
            )
            for doc in parsed
        ]

    result = render_book(
        parsed,
        index,
        output_format=opts.output_format,
        include_toc=opts.include_toc,
        title=opts.title,
        estimate_tokens=opts.estimate_tokens,
    )
    logger.info("Built %d documents, %d sections indexed", len(parsed), len(index))
    return result


def write_output(content: str, sink: Sink, *, encoding: str = "utf-8") -> None:
    """Write rendered content to a path or an open text stream.

    Paths are written through a temporary file in the target directory and
    moved into place, so an interrupted write never leaves a partial file.
    """
    if not isinstance(sink, (str, Path)):
        sink.write(content)
        sink.flush()
        return

    target = Path(sink)
    target.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=str(target.parent), prefix=f".{target.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding=encoding, newline="") as handle:
            handle.write(content)
        os.replace(tmp_name, target)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
    logger.info("Wrote %s", target)


def run_build(
    paths: Iterable[Path | str], sink: Sink, options: BuildOptions | None = None
) -> BuildResult:
    """Build the book, then write it to ``sink``.

    Nothing is written unless the whole build succeeds.
    """
    result = build_book(paths, options)
    write_output(result.content, sink)
    return result
