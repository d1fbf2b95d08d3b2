"""Parse Markdown chapter text into a section tree."""

from __future__ import annotations

import logging
import re
import textwrap
from pathlib import Path
from typing import Any

import yaml

from docbind.exceptions import MalformedDocumentError
from docbind.links import normalize_label
from docbind.schemas import (
    CodeBlock,
    ContentBlock,
    Document,
    HtmlBlock,
    Link,
    ListBlock,
    ListItem,
    Paragraph,
    ParsedDocument,
    Quote,
    Section,
    ThematicBreak,
)

logger = logging.getLogger(__name__)

_FRONT_MATTER_CLOSE = {"---", "..."}

_HEADING_RE = re.compile(r"^ {0,3}(?P<marks>#{1,6})(?:[ \t]+(?P<title>.*?))?[ \t]*$")
# Kramdown/Pandoc style: "## Title {#anchor}" or "## Title {: #anchor .class}"
_HEADING_ATTR_RE = re.compile(
    r"[ \t]*\{:?[ \t]*#(?P<id>\w[\w\-.:]*)(?:[ \t][^}]*)?\}[ \t]*$"
)
_CLOSING_HASHES_RE = re.compile(r"(?:^|[ \t]+)#+[ \t]*$")

_FENCE_OPEN_RE = re.compile(r"^ {0,3}(?P<fence>`{3,}|~{3,})(?P<info>.*)$")
_FENCE_CLOSE_RE = re.compile(r"^ {0,3}(?P<fence>`{3,}|~{3,})[ \t]*$")
_LIQUID_OPEN_RE = re.compile(
    r"^\s*\{%-?\s*highlight\s+(?P<language>[^\s%]+)[^%]*-?%\}\s*$"
)
_LIQUID_CLOSE_RE = re.compile(r"^\s*\{%-?\s*endhighlight\s*-?%\}\s*$")

_THEMATIC_BREAK_RE = re.compile(
    r"^ {0,3}(?:(?:-[ \t]*){3,}|(?:\*[ \t]*){3,}|(?:_[ \t]*){3,})$"
)
_LIST_ITEM_RE = re.compile(
    r"^(?P<indent> {0,3})(?P<marker>[-*+]|\d{1,9}[.)])(?:[ \t]+(?P<text>.*))?$"
)
_QUOTE_RE = re.compile(r"^ {0,3}> ?(?P<text>.*)$")
_HTML_BLOCK_RE = re.compile(r"^ {0,3}<(?:!--|/?[A-Za-z][\w-]*(?:[\s/>]|$))")
_REFERENCE_DEF_RE = re.compile(
    r"^ {0,3}\[(?P<label>[^\]^][^\]]*)\]:[ \t]*(?P<target><[^>]*>|\S+)"
    r"(?:[ \t]+(?P<title>\"[^\"]*\"|'[^']*'|\([^)]*\)))?[ \t]*$"
)


def parse_document(document: Document) -> ParsedDocument:
    """Split a document into front matter, preamble, and a section tree.

    Raises:
        MalformedDocumentError: On an unterminated fenced block or front
            matter, invalid front matter, or an empty heading.
    """
    return _DocumentParser(document).parse()


def parse_fragment(
    text: str, path: Path | str = "<fragment>", line_offset: int = 0
) -> list[ContentBlock]:
    """Parse nested block content, such as a list item or quote body.

    Heading markers inside a fragment are plain paragraphs; only top-level
    headings open sections. Errors are reported against ``path`` with line
    numbers shifted by ``line_offset``.
    """
    document = Document(path=Path(path), text=text)
    return _DocumentParser(document, fragment=True, line_offset=line_offset).parse().preamble


def list_item_body(item: ListItem) -> str:
    """Item text with its continuation lines dedented, ready for parse_fragment."""
    first, _, rest = item.text.partition("\n")
    if not rest.strip():
        return first
    return f"{first}\n{textwrap.dedent(rest)}"


class _DocumentParser:
    """Single-pass, line-based parser for one document."""

    def __init__(
        self, document: Document, *, fragment: bool = False, line_offset: int = 0
    ) -> None:
        self.document = document
        self.fragment = fragment
        self.line_offset = line_offset
        self.lines = list(document.lines)
        self.preamble: list[ContentBlock] = []
        self.roots: list[Section] = []
        self.stack: list[Section] = []
        self.references: dict[str, Link] = {}
        self.first_section: Section | None = None

    def parse(self) -> ParsedDocument:
        front_matter, index = ({}, 0) if self.fragment else self._parse_front_matter()
        while index < len(self.lines):
            index = self._parse_block(index)

        title = self._resolve_title(front_matter)
        anchor = front_matter.get("anchor")
        if anchor and self.first_section is not None and self.first_section.identifier is None:
            self.first_section.identifier = str(anchor)

        logger.debug(
            "Parsed %s: %d root sections, %d references",
            self.document.path,
            len(self.roots),
            len(self.references),
        )
        return ParsedDocument(
            document=self.document,
            title=title,
            front_matter=front_matter,
            preamble=self.preamble,
            sections=self.roots,
            references=self.references,
        )

    def _error(self, line: int | None, reason: str) -> MalformedDocumentError:
        if line is not None:
            line += self.line_offset
        return MalformedDocumentError(self.document.path, line, reason)

    def _parse_front_matter(self) -> tuple[dict[str, Any], int]:
        if not self.lines or self.lines[0].rstrip() != "---":
            return {}, 0
        for index in range(1, len(self.lines)):
            if self.lines[index].rstrip() not in _FRONT_MATTER_CLOSE:
                continue
            raw = "\n".join(self.lines[1:index])
            try:
                data = yaml.safe_load(raw)
            except yaml.YAMLError as exc:
                raise self._error(1, f"invalid front matter: {exc}") from exc
            if data is None:
                data = {}
            if not isinstance(data, dict):
                raise self._error(1, "front matter must be a mapping")
            return {str(key): value for key, value in data.items()}, index + 1
        raise self._error(1, "unterminated front matter")

    def _resolve_title(self, front_matter: dict[str, Any]) -> str | None:
        first = self.first_section
        if first is not None and first.level == 1 and first is self.roots[0] and not self.preamble:
            first.is_title = True
            return first.title
        if front_matter.get("title"):
            return str(front_matter["title"])
        return None

    def _emit(self, block: ContentBlock) -> None:
        if self.stack:
            self.stack[-1].blocks.append(block)
        else:
            self.preamble.append(block)

    def _parse_block(self, index: int) -> int:
        line = self.lines[index]
        if not line.strip():
            return index + 1

        heading = _HEADING_RE.match(line)
        if heading and not self.fragment:
            self._open_section(heading, index)
            return index + 1

        fence = _match_fence_open(line)
        if fence:
            return self._parse_fence(index, fence)

        liquid = _LIQUID_OPEN_RE.match(line)
        if liquid:
            return self._parse_liquid(index, liquid)

        if _THEMATIC_BREAK_RE.match(line):
            self._emit(ThematicBreak())
            return index + 1

        reference = _REFERENCE_DEF_RE.match(line)
        if reference:
            self._add_reference(reference)
            return index + 1

        if _QUOTE_RE.match(line):
            return self._parse_quote(index)
        if _LIST_ITEM_RE.match(line):
            return self._parse_list(index)
        if _HTML_BLOCK_RE.match(line):
            return self._parse_html(index)
        return self._parse_paragraph(index)

    def _open_section(self, match: re.Match[str], index: int) -> None:
        level = len(match.group("marks"))
        raw_title = match.group("title") or ""

        identifier = None
        attribute = _HEADING_ATTR_RE.search(raw_title)
        if attribute:
            identifier = attribute.group("id")
            raw_title = raw_title[: attribute.start()]
        title = _CLOSING_HASHES_RE.sub("", raw_title).strip()
        if not title:
            raise self._error(index + 1, "empty heading")

        section = Section(title=title, level=level, identifier=identifier, line=index + 1)

        while self.stack and self.stack[-1].level >= level:
            self.stack.pop()
        if self.stack:
            self.stack[-1].children.append(section)
        else:
            self.roots.append(section)
        self.stack.append(section)

        if self.first_section is None:
            self.first_section = section

    def _parse_fence(self, index: int, match: re.Match[str]) -> int:
        info = match.group("info").strip()
        language = info.split()[0] if info else ""
        end = self._find_fence_end(index, match)
        body = self.lines[index + 1 : end]
        self._emit(CodeBlock(language=language, text="\n".join(body), fence=match.group("fence")))
        return end + 1

    def _find_fence_end(self, index: int, match: re.Match[str]) -> int:
        fence = match.group("fence")
        for offset in range(index + 1, len(self.lines)):
            close = _FENCE_CLOSE_RE.match(self.lines[offset])
            if close and close.group("fence")[0] == fence[0] and len(close.group("fence")) >= len(fence):
                return offset
        raise self._error(index + 1, "unterminated fenced code block")

    def _parse_liquid(self, index: int, match: re.Match[str]) -> int:
        body: list[str] = []
        for offset in range(index + 1, len(self.lines)):
            if _LIQUID_CLOSE_RE.match(self.lines[offset]):
                self._emit(CodeBlock(language=match.group("language"), text="\n".join(body)))
                return offset + 1
            body.append(self.lines[offset])
        raise self._error(index + 1, "unterminated highlight block")

    def _add_reference(self, match: re.Match[str]) -> None:
        key = normalize_label(match.group("label"))
        if key in self.references:
            return
        target = match.group("target")
        if target.startswith("<") and target.endswith(">"):
            target = target[1:-1]
        title = match.group("title")
        self.references[key] = Link(
            label=match.group("label"),
            target=target,
            title=title[1:-1] if title else None,
        )

    def _parse_quote(self, index: int) -> int:
        start = index
        parts: list[str] = []
        while index < len(self.lines):
            match = _QUOTE_RE.match(self.lines[index])
            if not match:
                break
            parts.append(match.group("text"))
            index += 1
        quote = Quote(text="\n".join(parts))
        self._check_nested(quote.text, start)
        self._emit(quote)
        return index

    def _parse_list(self, index: int) -> int:
        first = _LIST_ITEM_RE.match(self.lines[index])
        base_indent = len(first.group("indent"))
        ordered = _is_ordered(first.group("marker"))

        items: list[ListItem] = []
        starts: list[int] = []
        marker = first.group("marker")
        item_lines = [first.group("text") or ""]
        item_start = index
        index += 1

        while index < len(self.lines):
            line = self.lines[index]
            if not line.strip():
                next_index = self._next_nonblank(index)
                if next_index is None or not self._continues_list(
                    self.lines[next_index], base_indent, ordered
                ):
                    break
                item_lines.extend([""] * (next_index - index))
                index = next_index
                continue

            item = _LIST_ITEM_RE.match(line)
            if (
                item
                and len(item.group("indent")) <= base_indent
                and not _THEMATIC_BREAK_RE.match(line)
            ):
                if _is_ordered(item.group("marker")) != ordered:
                    break
                items.append(ListItem(marker=marker, text="\n".join(item_lines)))
                starts.append(item_start)
                marker = item.group("marker")
                item_lines = [item.group("text") or ""]
                item_start = index
                index += 1
                continue

            if not _is_indented(line, base_indent) and _interrupts_paragraph(line):
                break
            fence = _match_fence_open(line)
            if fence:
                end = self._find_fence_end(index, fence)
                item_lines.extend(self.lines[index : end + 1])
                index = end + 1
                continue
            item_lines.append(line)
            index += 1

        items.append(ListItem(marker=marker, text="\n".join(item_lines)))
        starts.append(item_start)
        for item, start in zip(items, starts):
            self._check_nested(list_item_body(item), start)
        self._emit(ListBlock(ordered=ordered, items=items))
        return index

    def _check_nested(self, text: str, start: int) -> None:
        """Parse a quote or list item body so its errors point at this document."""
        parse_fragment(text, self.document.path, self.line_offset + start)

    def _continues_list(self, line: str, base_indent: int, ordered: bool) -> bool:
        if _is_indented(line, base_indent):
            return True
        item = _LIST_ITEM_RE.match(line)
        return bool(
            item
            and len(item.group("indent")) <= base_indent
            and not _THEMATIC_BREAK_RE.match(line)
            and _is_ordered(item.group("marker")) == ordered
        )

    def _parse_html(self, index: int) -> int:
        parts: list[str] = []
        while index < len(self.lines) and self.lines[index].strip():
            parts.append(self.lines[index])
            index += 1
        self._emit(HtmlBlock(html="\n".join(parts)))
        return index

    def _parse_paragraph(self, index: int) -> int:
        parts = [self.lines[index]]
        index += 1
        while index < len(self.lines):
            line = self.lines[index]
            if not line.strip() or _interrupts_paragraph(line):
                break
            parts.append(line)
            index += 1
        self._emit(Paragraph(text="\n".join(parts)))
        return index

    def _next_nonblank(self, index: int) -> int | None:
        for offset in range(index, len(self.lines)):
            if self.lines[offset].strip():
                return offset
        return None


def _match_fence_open(line: str) -> re.Match[str] | None:
    match = _FENCE_OPEN_RE.match(line)
    if match and match.group("fence")[0] == "`" and "`" in match.group("info"):
        return None
    return match


def _interrupts_paragraph(line: str) -> bool:
    return bool(
        _HEADING_RE.match(line)
        or _match_fence_open(line)
        or _LIQUID_OPEN_RE.match(line)
        or _THEMATIC_BREAK_RE.match(line)
        or _QUOTE_RE.match(line)
        or _LIST_ITEM_RE.match(line)
    )


def _is_indented(line: str, base_indent: int) -> bool:
    if line.startswith("\t"):
        return True
    stripped = len(line) - len(line.lstrip(" "))
    return stripped >= base_indent + 2


def _is_ordered(marker: str) -> bool:
    return marker[0].isdigit()
