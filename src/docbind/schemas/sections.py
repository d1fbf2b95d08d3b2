"""Section tree and content block models."""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class Link(BaseModel):
    """A (label, target) pair. Targets are free-form and never validated."""

    model_config = ConfigDict(frozen=True)

    label: str
    target: str
    title: str | None = None


class Paragraph(BaseModel):
    kind: Literal["paragraph"] = "paragraph"
    text: str


class ListItem(BaseModel):
    marker: str
    text: str


class ListBlock(BaseModel):
    kind: Literal["list"] = "list"
    ordered: bool = False
    items: list[ListItem] = Field(default_factory=list)


class Quote(BaseModel):
    kind: Literal["quote"] = "quote"
    text: str


class CodeBlock(BaseModel):
    """Literal code sample; never executed.

    Attributes:
        language: Language tag from the fence info string (may be empty).
        text: Interior lines of the fenced region, unchanged.
        fence: Opening fence string (e.g. "```" or "~~~~").
    """

    kind: Literal["code"] = "code"
    language: str = ""
    text: str
    fence: str = "```"


class HtmlBlock(BaseModel):
    kind: Literal["html"] = "html"
    html: str


class ThematicBreak(BaseModel):
    kind: Literal["break"] = "break"


ContentBlock = Annotated[
    Union[Paragraph, ListBlock, Quote, CodeBlock, HtmlBlock, ThematicBreak],
    Field(discriminator="kind"),
]


class Section(BaseModel):
    """A heading and the content it owns.

    Attributes:
        title: Heading text with markers and attributes removed.
        level: Heading level (1-6).
        identifier: Explicit id from a heading attribute, used verbatim as slug.
        line: 1-based line of the heading in its document.
        is_title: True for a level-1 heading that opens its document.
        blocks: Content up to the next heading of any level.
        children: Nested sections (higher heading levels).
    """

    title: str
    level: int = Field(..., ge=1, le=6)
    identifier: str | None = None
    line: int = Field(default=1, ge=1)
    is_title: bool = False
    blocks: list[ContentBlock] = Field(default_factory=list)
    children: list["Section"] = Field(default_factory=list)
