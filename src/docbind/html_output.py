"""Render parsed documents as a standalone HTML page."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Mapping, Sequence

try:
    from bs4 import BeautifulSoup
    from bs4.element import Tag
except ImportError as exc:  # pragma: no cover - runtime dependency check
    raise RuntimeError(
        "BeautifulSoup4 is required for HTML output (pip install beautifulsoup4)."
    ) from exc

from docbind.indexer import SlugIndex
from docbind.links import Resolver, lookup_reference
from docbind.parser import list_item_body, parse_fragment
from docbind.schemas import (
    CodeBlock,
    ContentBlock,
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

_PAGE_SKELETON = '<!DOCTYPE html>\n<html lang="en"><head></head><body></body></html>'
_DEFAULT_PAGE_TITLE = "docbind"

_INLINE_RE = re.compile(
    r"(?P<code>(?P<ticks>`+)(?P<code_text>.+?)(?P=ticks))"
    r"|!\[(?P<alt>[^\]]*)\]\((?P<src><[^>]*>|(?:[^()\s]|\([^()\s]*\))*)(?:\s+(?:\"[^\"]*\"|'[^']*'))?\)"
    r"|\[(?P<label>[^\]]+)\]\((?P<target><[^>]*>|(?:[^()\s]|\([^()\s]*\))*)(?:\s+(?P<title>\"[^\"]*\"|'[^']*'))?\)"
    r"|\[(?P<ref_label>[^\]]+)\]\[(?P<ref>[^\]]*)\]"
    r"|<(?P<autolink>(?:https?|mailto):[^>\s]+)>"
    r"|\*\*(?P<strong>.+?)\*\*"
    r"|__(?P<strong_alt>.+?)__"
    r"|\*(?P<em>[^*\s](?:[^*]*[^*\s])?)\*"
    r"|(?<!\w)_(?P<em_alt>[^_\s](?:[^_]*[^_\s])?)_(?!\w)",
    re.DOTALL,
)


def render_html(
    documents: Sequence[ParsedDocument],
    index: SlugIndex,
    *,
    resolve: Resolver,
    include_toc: bool,
    title: str | None = None,
) -> str:
    """Build one HTML page holding every document in order."""
    return _HtmlBuilder(index, resolve).build(documents, include_toc=include_toc, title=title)


class _HtmlBuilder:
    def __init__(self, index: SlugIndex, resolve: Resolver) -> None:
        self.index = index
        self.resolve = resolve
        self.soup = BeautifulSoup(_PAGE_SKELETON, "html.parser")
        self.source: Path | str = "<fragment>"

    def build(
        self,
        documents: Sequence[ParsedDocument],
        *,
        include_toc: bool,
        title: str | None,
    ) -> str:
        soup = self.soup
        soup.head.append(soup.new_tag("meta", attrs={"charset": "utf-8"}))
        page_title = title or next(
            (parsed.title for parsed in documents if parsed.title), _DEFAULT_PAGE_TITLE
        )
        soup.head.append(soup.new_tag("title", string=page_title))

        body = soup.body
        if title:
            header = soup.new_tag("header", attrs={"class": "book-title"})
            header.append(soup.new_tag("h1", string=title))
            body.append(header)
        if include_toc:
            nav = self._toc(documents)
            if nav is not None:
                body.append(nav)

        for parsed in documents:
            self.source = parsed.path
            article = soup.new_tag(
                "article", attrs={"class": "document", "data-source": parsed.path.as_posix()}
            )
            for block in parsed.preamble:
                self._append_block(article, block, parsed.references)
            for section in parsed.sections:
                self._append_section(article, section, parsed)
            body.append(article)

        return str(soup)

    def _anchor_id(self, parsed: ParsedDocument, section: Section) -> str:
        return self.index.anchor(self.index.slug_for(parsed.document, section))[1:]

    def _toc(self, documents: Sequence[ParsedDocument]) -> Tag | None:
        items = self._toc_list([(parsed, parsed.sections) for parsed in documents])
        if items is None:
            return None
        nav = self.soup.new_tag("nav", attrs={"class": "toc"})
        nav.append(items)
        return nav

    def _toc_list(self, groups: list[tuple[ParsedDocument, list[Section]]]) -> Tag | None:
        entries = [(parsed, section) for parsed, sections in groups for section in sections]
        if not entries:
            return None
        ul = self.soup.new_tag("ul")
        for parsed, section in entries:
            li = self.soup.new_tag("li")
            link = self.soup.new_tag("a", attrs={"href": f"#{self._anchor_id(parsed, section)}"})
            self._append_inline(link, section.title, parsed.references)
            li.append(link)
            nested = self._toc_list([(parsed, section.children)])
            if nested is not None:
                li.append(nested)
            ul.append(li)
        return ul

    def _append_section(self, parent: Tag, section: Section, parsed: ParsedDocument) -> None:
        container = self.soup.new_tag("section", attrs={"class": f"level{section.level}"})
        heading = self.soup.new_tag(
            f"h{section.level}", attrs={"id": self._anchor_id(parsed, section)}
        )
        self._append_inline(heading, section.title, parsed.references)
        container.append(heading)
        for block in section.blocks:
            self._append_block(container, block, parsed.references)
        for child in section.children:
            self._append_section(container, child, parsed)
        parent.append(container)

    def _append_block(
        self, parent: Tag, block: ContentBlock, references: Mapping[str, Link]
    ) -> None:
        soup = self.soup
        if isinstance(block, Paragraph):
            paragraph = soup.new_tag("p")
            self._append_inline(paragraph, block.text.strip(), references)
            parent.append(paragraph)
        elif isinstance(block, ListBlock):
            list_tag = soup.new_tag("ol" if block.ordered else "ul")
            if block.ordered:
                start = int(block.items[0].marker[:-1])
                if start != 1:
                    list_tag["start"] = str(start)
            for item in block.items:
                list_tag.append(self._list_item(item, references))
            parent.append(list_tag)
        elif isinstance(block, Quote):
            quote = soup.new_tag("blockquote")
            for inner in parse_fragment(block.text, self.source):
                self._append_block(quote, inner, references)
            parent.append(quote)
        elif isinstance(block, CodeBlock):
            pre = soup.new_tag("pre")
            attrs = {"class": f"language-{block.language}"} if block.language else {}
            code = soup.new_tag("code", attrs=attrs)
            code.string = block.text
            pre.append(code)
            parent.append(pre)
        elif isinstance(block, HtmlBlock):
            fragment = BeautifulSoup(block.html, "html.parser")
            for node in list(fragment.contents):
                parent.append(node.extract())
        elif isinstance(block, ThematicBreak):
            parent.append(soup.new_tag("hr"))

    def _list_item(self, item: ListItem, references: Mapping[str, Link]) -> Tag:
        li = self.soup.new_tag("li")
        blocks = parse_fragment(list_item_body(item), self.source)
        if len(blocks) == 1 and isinstance(blocks[0], Paragraph):
            self._append_inline(li, blocks[0].text.strip(), references)
        else:
            for block in blocks:
                self._append_block(li, block, references)
        return li

    def _append_inline(self, parent: Tag, text: str, references: Mapping[str, Link]) -> None:
        position = 0
        for match in _INLINE_RE.finditer(text):
            if match.start() > position:
                parent.append(text[position : match.start()])
            self._append_inline_match(parent, match, references)
            position = match.end()
        if position < len(text):
            parent.append(text[position:])

    def _append_inline_match(
        self, parent: Tag, match: re.Match[str], references: Mapping[str, Link]
    ) -> None:
        soup = self.soup
        if match.group("code") is not None:
            parent.append(soup.new_tag("code", string=_strip_code_span(match.group("code_text"))))
        elif match.group("src") is not None:
            parent.append(
                soup.new_tag(
                    "img", attrs={"src": _unbracket(match.group("src")), "alt": match.group("alt")}
                )
            )
        elif match.group("label") is not None:
            title = match.group("title")
            parent.append(
                self._link(
                    match.group("label"),
                    _unbracket(match.group("target")),
                    title[1:-1] if title else None,
                    references,
                )
            )
        elif match.group("ref_label") is not None:
            definition = lookup_reference(match.group("ref_label"), match.group("ref"), references)
            if definition is None:
                parent.append(match.group(0))
            else:
                parent.append(
                    self._link(
                        match.group("ref_label"), definition.target, definition.title, references
                    )
                )
        elif match.group("autolink") is not None:
            url = match.group("autolink")
            parent.append(soup.new_tag("a", attrs={"href": url}, string=url))
        elif match.group("strong") is not None or match.group("strong_alt") is not None:
            strong = soup.new_tag("strong")
            self._append_inline(strong, match.group("strong") or match.group("strong_alt"), references)
            parent.append(strong)
        else:
            em = soup.new_tag("em")
            self._append_inline(em, match.group("em") or match.group("em_alt"), references)
            parent.append(em)

    def _link(
        self, label: str, target: str, title: str | None, references: Mapping[str, Link]
    ) -> Tag:
        attrs = {"href": self.resolve(target) or target}
        if title:
            attrs["title"] = title
        anchor = self.soup.new_tag("a", attrs=attrs)
        self._append_inline(anchor, label, references)
        return anchor


def _strip_code_span(text: str) -> str:
    if len(text) > 2 and text.startswith(" ") and text.endswith(" "):
        return text[1:-1]
    return text


def _unbracket(target: str) -> str:
    if target.startswith("<") and target.endswith(">"):
        return target[1:-1]
    return target
