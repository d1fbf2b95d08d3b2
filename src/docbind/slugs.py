"""Slug derivation for section headings."""

from __future__ import annotations

import re

from docbind.config import DOCBIND_SLUG_SEPARATOR
from docbind.links import strip_inline_markup
from docbind.schemas import Section

_UNSAFE_CHARS_RE = re.compile(r"[^\w\s-]")


def slugify(title: str, separator: str = DOCBIND_SLUG_SEPARATOR) -> str:
    """Derive a URL-safe slug from a heading title.

    >>> slugify("Password Hashing")
    'password-hashing'
    """
    text = strip_inline_markup(title).strip().lower()
    text = _UNSAFE_CHARS_RE.sub("", text)
    return re.sub(r"\s+", separator, text.strip())


def section_slug(section: Section, separator: str = DOCBIND_SLUG_SEPARATOR) -> str:
    """Return the explicit identifier of a section, or its derived slug."""
    if section.identifier:
        return section.identifier
    return slugify(section.title, separator)
