"""Read chapter documents from storage."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

from docbind.config import DOCBIND_ENCODING, MARKDOWN_SUFFIXES
from docbind.exceptions import EncodingError, NotFoundError
from docbind.schemas import Document

logger = logging.getLogger(__name__)

_BOM = "\ufeff"


def expand_paths(paths: Iterable[Path | str]) -> list[Path]:
    """Expand directory arguments into their Markdown files.

    Files are returned in the order given. A directory contributes its
    ``.md``/``.markdown`` files sorted by name, since chapter files are
    usually named with an ordering prefix.
    """
    expanded: list[Path] = []
    for raw_path in paths:
        path = Path(raw_path)
        if path.is_dir():
            chapters = sorted(
                child
                for child in path.iterdir()
                if child.is_file() and child.suffix.lower() in MARKDOWN_SUFFIXES
            )
            if not chapters:
                logger.warning("No Markdown files found in %s", path)
            expanded.extend(chapters)
        else:
            expanded.append(path)
    return expanded


def load_document(path: Path | str, *, encoding: str = DOCBIND_ENCODING) -> Document:
    """Read and decode a single document.

    Raises:
        NotFoundError: If the path does not exist or is not a regular file.
        EncodingError: If the content cannot be decoded with ``encoding``.
    """
    path = Path(path)
    if not path.is_file():
        raise NotFoundError(path)

    raw = path.read_bytes()
    try:
        text = raw.decode(encoding)
    except UnicodeDecodeError as exc:
        raise EncodingError(path, encoding, str(exc)) from exc
    except LookupError as exc:
        raise EncodingError(path, encoding, "unknown encoding") from exc

    if text.startswith(_BOM):
        text = text[len(_BOM):]

    logger.debug("Loaded %s (%d bytes)", path, len(raw))
    return Document(path=path, text=text)


def load_documents(
    paths: Iterable[Path | str], *, encoding: str = DOCBIND_ENCODING
) -> list[Document]:
    """Load one Document per path, preserving input order."""
    return [load_document(path, encoding=encoding) for path in paths]
