"""The collection-wide slug index."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator

from docbind.config import DOCBIND_ANCHOR_PREFIX, DOCBIND_SLUG_SEPARATOR
from docbind.exceptions import DuplicateSlugError, MalformedDocumentError
from docbind.links import is_external
from docbind.schemas import Document, ParsedDocument, Section
from docbind.sections import iter_sections
from docbind.slugs import section_slug

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SectionRef:
    """Location of an indexed section."""

    document: Document
    section: Section

    def describe(self) -> str:
        return f"{self.document.path}:{self.section.line}"


class SlugIndex:
    """Mapping from slug to the section that owns it.

    Iteration follows insertion order, which is document order when built by
    :func:`build_index`.
    """

    def __init__(self, anchor_prefix: str = DOCBIND_ANCHOR_PREFIX) -> None:
        self.anchor_prefix = anchor_prefix
        self._entries: dict[str, SectionRef] = {}
        self._slugs: dict[tuple[Path, int], str] = {}

    def add(self, slug: str, ref: SectionRef) -> None:
        existing = self._entries.get(slug)
        if existing is not None:
            raise DuplicateSlugError(slug, existing.describe(), ref.describe())
        self._entries[slug] = ref
        self._slugs[(ref.document.path, ref.section.line)] = slug

    def __contains__(self, slug: object) -> bool:
        return slug in self._entries

    def __getitem__(self, slug: str) -> SectionRef:
        return self._entries[slug]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, slug: str) -> SectionRef | None:
        return self._entries.get(slug)

    def slug_for(self, document: Document | ParsedDocument, section: Section) -> str:
        """Return the slug assigned to ``section`` of ``document``."""
        return self._slugs[(document.path, section.line)]

    def anchor(self, slug: str) -> str:
        return f"#{self.anchor_prefix}{slug}"

    def resolve_slug(self, target: str) -> str | None:
        """Return the slug a link target refers to, or None if it is external.

        ``#slug``, ``chapter.md#slug`` and a bare ``slug`` are internal when
        the slug is known. Targets with a URL scheme are always external.
        """
        target = target.strip()
        if not target or is_external(target):
            return None
        _, hash_mark, fragment = target.partition("#")
        candidate = fragment if hash_mark else target
        if candidate in self._entries:
            return candidate
        return None

    def resolve_link(self, target: str) -> str | None:
        """Return the rendered anchor for an internal target, else None."""
        slug = self.resolve_slug(target)
        if slug is None:
            return None
        return self.anchor(slug)


def build_index(
    documents: Iterable[ParsedDocument],
    *,
    separator: str = DOCBIND_SLUG_SEPARATOR,
    anchor_prefix: str = DOCBIND_ANCHOR_PREFIX,
) -> SlugIndex:
    """Index every section of every document by slug.

    Raises:
        DuplicateSlugError: If two sections resolve to the same slug.
        MalformedDocumentError: If a title yields an empty slug.
    """
    index = SlugIndex(anchor_prefix=anchor_prefix)
    for parsed in documents:
        for section in iter_sections(parsed.sections):
            slug = section_slug(section, separator)
            if not slug:
                raise MalformedDocumentError(
                    parsed.path, section.line, f"heading '{section.title}' yields an empty slug"
                )
            index.add(slug, SectionRef(document=parsed.document, section=section))
    logger.debug("Indexed %d sections", len(index))
    return index
