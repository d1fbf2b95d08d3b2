"""Inline link extraction and cross-reference rewriting."""

from __future__ import annotations

import re
from typing import Callable, Mapping, Optional

from docbind.schemas import Link

Resolver = Callable[[str], Optional[str]]

# Code spans and images are matched so that they are skipped, never rewritten.
_LINK_RE = re.compile(
    r"(?P<code>(?P<ticks>`+).+?(?P=ticks))"
    r"|(?P<image>!\[[^\]]*\]\((?:[^()]|\([^()]*\))*\))"
    r"|\[(?P<label>[^\]]+)\]\((?P<target><[^>]*>|(?:[^()\s]|\([^()\s]*\))*)(?P<title>\s+(?:\"[^\"]*\"|'[^']*'))?\)"
    r"|\[(?P<ref_label>[^\]]+)\]\[(?P<ref>[^\]]*)\]",
    re.DOTALL,
)
_REFERENCE_USE_RE = re.compile(
    _LINK_RE.pattern + r"|\[(?P<short>[^\]]+)\](?![(\[:])",
    re.DOTALL,
)
_SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*:")


def normalize_label(label: str) -> str:
    """Normalize a reference label for lookup."""
    return re.sub(r"\s+", " ", label).strip().lower()


def is_external(target: str) -> bool:
    """Return True for targets carrying a URL scheme (http:, mailto:, ...)."""
    return bool(_SCHEME_RE.match(target))


def extract_links(text: str, references: Mapping[str, Link] | None = None) -> list[Link]:
    """Return the links of ``text`` in order.

    Reference-style links are resolved through ``references``; unknown
    references are skipped. Links inside code spans are ignored.
    """
    links: list[Link] = []
    for match in _LINK_RE.finditer(text):
        if match.group("label") is not None:
            links.append(
                Link(
                    label=match.group("label"),
                    target=_strip_brackets(match.group("target")),
                    title=_strip_quotes(match.group("title")),
                )
            )
        elif match.group("ref_label") is not None:
            definition = lookup_reference(
                match.group("ref_label"), match.group("ref"), references or {}
            )
            if definition is not None:
                links.append(
                    Link(
                        label=match.group("ref_label"),
                        target=definition.target,
                        title=definition.title,
                    )
                )
    return links


def lookup_reference(label: str, ref: str, references: Mapping[str, Link]) -> Link | None:
    """Find the definition for ``[label][ref]`` (``[label][]`` uses the label)."""
    key = normalize_label(ref or label)
    return references.get(key)


def rewrite_links(text: str, resolve: Resolver) -> str:
    """Rewrite inline link targets for which ``resolve`` returns a new target.

    Everything else, including code spans, images, reference-style links and
    link titles, is left byte-for-byte unchanged.
    """

    def _replace(match: re.Match[str]) -> str:
        if match.group("label") is None:
            return match.group(0)
        target = _strip_brackets(match.group("target"))
        rewritten = resolve(target)
        if rewritten is None:
            return match.group(0)
        title = match.group("title") or ""
        return f"[{match.group('label')}]({rewritten}{title})"

    return _LINK_RE.sub(_replace, text)


def rename_references(text: str, renames: Mapping[str, str]) -> str:
    """Point reference-style links at renamed definitions.

    ``renames`` maps normalized labels to their new labels. Full
    (``[x][ref]``), collapsed (``[x][]``) and shortcut (``[ref]``) forms
    are rewritten to the full form; code spans and inline links are not.
    """
    if not renames:
        return text

    def _replace(match: re.Match[str]) -> str:
        if match.group("ref_label") is not None:
            label = match.group("ref_label")
            key = normalize_label(match.group("ref") or label)
        elif match.group("short") is not None:
            label = match.group("short")
            key = normalize_label(label)
        else:
            return match.group(0)
        new_label = renames.get(key)
        if new_label is None:
            return match.group(0)
        return f"[{label}][{new_label}]"

    return _REFERENCE_USE_RE.sub(_replace, text)


def strip_inline_markup(text: str) -> str:
    """Reduce inline Markdown to plain text (links keep their label)."""
    text = re.sub(r"!\[([^\]]*)\]\((?:[^()]|\([^()]*\))*\)", r"\1", text)
    text = re.sub(r"\[([^\]]+)\]\((?:[^()]|\([^()]*\))*\)", r"\1", text)
    text = re.sub(r"\[([^\]]+)\]\[[^\]]*\]", r"\1", text)
    return text.replace("`", "")


def _strip_brackets(target: str) -> str:
    if target.startswith("<") and target.endswith(">"):
        return target[1:-1]
    return target


def _strip_quotes(title: str | None) -> str | None:
    if not title:
        return None
    return title.strip()[1:-1]
