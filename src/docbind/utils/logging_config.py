"""Logging configuration for docbind."""

from __future__ import annotations

import logging
import sys
from typing import TextIO

from docbind.config import DOCBIND_LOG_LEVEL

_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(level: str | None = None, *, stream: TextIO | None = None) -> None:
    """Configure the ``docbind`` logger hierarchy.

    Output goes to stderr by default so rendered documents written to stdout
    stay clean. Calling this again replaces the previous handler.
    """
    numeric_level = getattr(logging, (level or DOCBIND_LOG_LEVEL).upper(), logging.WARNING)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setLevel(numeric_level)
    handler.setFormatter(logging.Formatter(_LOG_FORMAT, datefmt=_DATE_FORMAT))

    logger = logging.getLogger("docbind")
    logger.setLevel(numeric_level)
    logger.handlers = [handler]
    logger.propagate = False


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance for the given name."""
    return logging.getLogger(name)
