"""Local configuration for docbind."""

from __future__ import annotations

import os


DEFAULT_ENCODING = "utf-8"
DEFAULT_OUTPUT_FORMAT = "markdown"
DEFAULT_SLUG_SEPARATOR = "-"
DEFAULT_ANCHOR_PREFIX = ""
DEFAULT_INCLUDE_TOC = "true"
DEFAULT_ESTIMATE_TOKENS = "false"
DEFAULT_TOKEN_ENCODING = "o200k_base"
DEFAULT_LOG_LEVEL = "WARNING"

OUTPUT_FORMATS = ("markdown", "html")
MARKDOWN_SUFFIXES = (".md", ".markdown")

DOCBIND_ENCODING = os.getenv("DOCBIND_ENCODING", DEFAULT_ENCODING)
DOCBIND_OUTPUT_FORMAT = os.getenv("DOCBIND_OUTPUT_FORMAT", DEFAULT_OUTPUT_FORMAT)
DOCBIND_SLUG_SEPARATOR = os.getenv("DOCBIND_SLUG_SEPARATOR", DEFAULT_SLUG_SEPARATOR)
# Prepended to every rendered anchor, for embedding the output in a larger page.
DOCBIND_ANCHOR_PREFIX = os.getenv("DOCBIND_ANCHOR_PREFIX", DEFAULT_ANCHOR_PREFIX)
DOCBIND_INCLUDE_TOC = os.getenv("DOCBIND_INCLUDE_TOC", DEFAULT_INCLUDE_TOC).lower() == "true"
DOCBIND_ESTIMATE_TOKENS = os.getenv("DOCBIND_ESTIMATE_TOKENS", DEFAULT_ESTIMATE_TOKENS).lower() == "true"
DOCBIND_TOKEN_ENCODING = os.getenv("DOCBIND_TOKEN_ENCODING", DEFAULT_TOKEN_ENCODING)
DOCBIND_LOG_LEVEL = os.getenv("DOCBIND_LOG_LEVEL", DEFAULT_LOG_LEVEL)
