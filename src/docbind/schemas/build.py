"""Build output model."""

from __future__ import annotations

from pydantic import BaseModel


class BuildResult(BaseModel):
    """Final build output."""

    summary: str
    sections_tree: str
    content: str
    output_format: str = "markdown"
