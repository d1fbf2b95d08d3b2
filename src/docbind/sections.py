"""Section traversal and filtering utilities."""

from __future__ import annotations

import re
from typing import Iterable, Iterator

from docbind.schemas import CodeBlock, Section
from docbind.slugs import section_slug


def normalize_section_title(title: str) -> str:
    """Normalize section titles for comparison."""
    title = title.strip().lower()
    return re.sub(r"\s+", " ", title)


def iter_sections(sections: Iterable[Section]) -> Iterator[Section]:
    """Yield sections depth-first, in document order."""
    for section in sections:
        yield section
        yield from iter_sections(section.children)


def count_sections(sections: Iterable[Section]) -> int:
    """Count total sections in the tree."""
    total = 0
    for section in sections:
        total += 1
        total += count_sections(section.children)
    return total


def count_code_blocks(sections: Iterable[Section]) -> int:
    return sum(
        1
        for section in iter_sections(sections)
        for block in section.blocks
        if isinstance(block, CodeBlock)
    )


def filter_sections(
    sections: list[Section],
    *,
    mode: str = "exclude",
    selected: Iterable[str] | None = None,
) -> list[Section]:
    """Filter sections by title or slug (explicit identifier or derived).

    In include mode a matching section is kept with all of its children, and
    a non-matching section is kept only as the parent of matching ones. The
    input tree is left untouched; kept sections are copies.
    """
    selected_titles = {normalize_section_title(title) for title in (selected or []) if title.strip()}
    if not selected_titles:
        return sections

    def _matches(node: Section) -> bool:
        if normalize_section_title(node.title) in selected_titles:
            return True
        return section_slug(node).lower() in selected_titles

    def _filter(nodes: list[Section]) -> list[Section]:
        result: list[Section] = []
        for node in nodes:
            in_selected = _matches(node)
            if mode == "include":
                if in_selected:
                    result.append(node)
                else:
                    children = _filter(node.children)
                    if children:
                        result.append(node.model_copy(update={"children": children}))
            else:
                if in_selected:
                    continue
                result.append(node.model_copy(update={"children": _filter(node.children)}))
        return result

    return _filter(list(sections))
