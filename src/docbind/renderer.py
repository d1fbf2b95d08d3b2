"""Format parsed documents into summary, tree, and content outputs."""

from __future__ import annotations

import logging
from typing import Mapping, Sequence

try:
    import tiktoken
except ImportError:  # pragma: no cover - optional dependency
    tiktoken = None

from docbind.config import (
    DOCBIND_ESTIMATE_TOKENS,
    DOCBIND_INCLUDE_TOC,
    DOCBIND_OUTPUT_FORMAT,
    DOCBIND_TOKEN_ENCODING,
    OUTPUT_FORMATS,
)
from docbind.exceptions import RenderError
from docbind.html_output import render_html
from docbind.indexer import SlugIndex
from docbind.links import Resolver, normalize_label, rename_references, rewrite_links
from docbind.schemas import (
    BuildResult,
    CodeBlock,
    ContentBlock,
    HtmlBlock,
    ListBlock,
    Paragraph,
    ParsedDocument,
    Quote,
    Section,
    ThematicBreak,
)
from docbind.sections import count_code_blocks, count_sections, iter_sections

logger = logging.getLogger(__name__)


def render_book(
    documents: Sequence[ParsedDocument],
    index: SlugIndex,
    *,
    output_format: str = DOCBIND_OUTPUT_FORMAT,
    include_toc: bool = DOCBIND_INCLUDE_TOC,
    title: str | None = None,
    estimate_tokens: bool = DOCBIND_ESTIMATE_TOKENS,
) -> BuildResult:
    """Create summary, section tree, and content for the whole collection.

    Sections are emitted in document order. Links that point at a rendered
    section are rewritten to its anchor; all other links pass through.
    """
    if output_format not in OUTPUT_FORMATS:
        raise RenderError(
            f"Unknown output format '{output_format}' (expected one of: {', '.join(OUTPUT_FORMATS)})"
        )

    resolve = make_resolver(index, documents)
    if output_format == "html":
        content = render_html(
            documents, index, resolve=resolve, include_toc=include_toc, title=title
        )
    else:
        content = render_markdown(
            documents, index, resolve=resolve, include_toc=include_toc, title=title
        )

    tree = "Sections:\n" + create_sections_tree(documents)

    summary_lines = []
    if title:
        summary_lines.append(f"Title: {title}")
    summary_lines.append(f"Documents: {len(documents)}")
    summary_lines.append(f"Sections: {sum(count_sections(doc.sections) for doc in documents)}")
    summary_lines.append(
        f"Code blocks: {sum(count_code_blocks(doc.sections) for doc in documents)}"
    )
    summary_lines.append(f"Format: {output_format}")

    if estimate_tokens:
        token_estimate = _format_token_count(content)
        if token_estimate:
            summary_lines.append(f"Estimated tokens: {token_estimate}")

    return BuildResult(
        summary="\n".join(summary_lines),
        sections_tree=tree,
        content=content,
        output_format=output_format,
    )


def make_resolver(index: SlugIndex, documents: Sequence[ParsedDocument]) -> Resolver:
    """Build a link resolver limited to the sections actually rendered."""
    rendered = {
        index.slug_for(parsed.document, section)
        for parsed in documents
        for section in iter_sections(parsed.sections)
    }

    def resolve(target: str) -> str | None:
        slug = index.resolve_slug(target)
        if slug is None or slug not in rendered:
            return None
        return index.anchor(slug)

    return resolve


def render_markdown(
    documents: Sequence[ParsedDocument],
    index: SlugIndex,
    *,
    resolve: Resolver,
    include_toc: bool,
    title: str | None = None,
) -> str:
    blocks: list[str] = []
    if title:
        blocks.append(f"# {title}")
    if include_toc:
        toc = _render_toc(documents, index)
        if toc:
            blocks.append("**Contents**\n\n" + toc)

    # Reference labels share one namespace across the bound file.
    defined: set[str] = set()
    for position, parsed in enumerate(documents, start=1):
        renames = _reference_renames(parsed, defined, position)
        blocks.extend(render_block(block, resolve, renames) for block in parsed.preamble)
        for section in parsed.sections:
            blocks.extend(_render_section(section, parsed, index, resolve, renames))
        if parsed.references:
            blocks.append(_render_references(parsed, resolve, renames))

    return "\n\n".join(block for block in blocks if block) + "\n"


def render_block(
    block: ContentBlock, resolve: Resolver, renames: Mapping[str, str] | None = None
) -> str:
    """Serialize one content block back to Markdown.

    ``renames`` maps normalized reference labels to the labels they are
    emitted under.
    """

    def _inline(text: str) -> str:
        return rename_references(rewrite_links(text, resolve), renames or {})

    if isinstance(block, Paragraph):
        return _inline(block.text)
    if isinstance(block, ListBlock):
        return "\n".join(
            f"{item.marker} {_inline(item.text)}".rstrip(" ")
            for item in block.items
        )
    if isinstance(block, Quote):
        return "\n".join(
            f"> {line}" if line else ">"
            for line in _inline(block.text).split("\n")
        )
    if isinstance(block, CodeBlock):
        fence = safe_fence(block)
        return f"{fence}{block.language}\n{block.text}\n{fence}"
    if isinstance(block, HtmlBlock):
        return block.html
    if isinstance(block, ThematicBreak):
        return "* * *"
    raise RenderError(f"Unsupported block type: {type(block).__name__}")


def safe_fence(block: CodeBlock) -> str:
    """Return a fence that no line of the code body can close early."""
    fence = block.fence or "```"
    lines = block.text.split("\n")
    while any(_closes_fence(line, fence) for line in lines):
        fence += fence[0]
    return fence


def _closes_fence(line: str, fence: str) -> bool:
    stripped = line.strip()
    return bool(stripped) and set(stripped) == {fence[0]} and len(stripped) >= len(fence)


def _render_section(
    section: Section,
    parsed: ParsedDocument,
    index: SlugIndex,
    resolve: Resolver,
    renames: Mapping[str, str],
) -> list[str]:
    anchor = index.anchor(index.slug_for(parsed.document, section))
    blocks = [f"{'#' * section.level} {section.title} {{{anchor}}}"]
    blocks.extend(render_block(block, resolve, renames) for block in section.blocks)
    for child in section.children:
        blocks.extend(_render_section(child, parsed, index, resolve, renames))
    return blocks


def _reference_renames(
    parsed: ParsedDocument, defined: set[str], position: int
) -> dict[str, str]:
    """Pick new labels for definitions an earlier document already made.

    ``defined`` is updated with every label this document emits.
    """
    renames: dict[str, str] = {}
    for key, link in parsed.references.items():
        if key not in defined:
            continue
        candidate = f"{link.label}-{position}"
        attempt = 2
        taken = defined | set(parsed.references)
        while normalize_label(candidate) in taken:
            candidate = f"{link.label}-{position}-{attempt}"
            attempt += 1
        renames[key] = candidate
        defined.add(normalize_label(candidate))
    defined.update(key for key in parsed.references if key not in renames)
    return renames


def _render_references(
    parsed: ParsedDocument, resolve: Resolver, renames: Mapping[str, str]
) -> str:
    lines = []
    for key, link in parsed.references.items():
        target = resolve(link.target) or link.target
        line = f"[{renames.get(key, link.label)}]: {target}"
        if link.title is not None:
            line += f' "{link.title}"'
        lines.append(line)
    return "\n".join(lines)


def _render_toc(documents: Sequence[ParsedDocument], index: SlugIndex) -> str:
    lines: list[str] = []

    def _walk(parsed: ParsedDocument, sections: list[Section], depth: int) -> None:
        for section in sections:
            anchor = index.anchor(index.slug_for(parsed.document, section))
            lines.append(f"{'  ' * depth}- [{section.title}]({anchor})")
            _walk(parsed, section.children, depth + 1)

    for parsed in documents:
        _walk(parsed, parsed.sections, 0)
    return "\n".join(lines)


def create_sections_tree(documents: Sequence[ParsedDocument]) -> str:
    """Indented outline of every document and its sections."""
    lines: list[str] = []

    def _walk(sections: list[Section], indent: int) -> None:
        for section in sections:
            lines.append(" " * (indent * 4) + section.title)
            _walk(section.children, indent + 1)

    for parsed in documents:
        lines.append(parsed.document.name)
        _walk(parsed.sections, 1)
    return "\n".join(lines)


def _format_token_count(text: str) -> str | None:
    if not tiktoken:
        return None
    try:
        encoding = tiktoken.get_encoding(DOCBIND_TOKEN_ENCODING)
        total_tokens = len(encoding.encode(text, disallowed_special=()))
    except Exception:
        logger.debug("Token estimate unavailable", exc_info=True)
        return None

    if total_tokens >= 1_000_000:
        return f"{total_tokens / 1_000_000:.1f}M"
    if total_tokens >= 1_000:
        return f"{total_tokens / 1_000:.1f}k"
    return str(total_tokens)
