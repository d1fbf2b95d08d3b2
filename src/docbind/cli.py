"""Command-line entry point for docbind."""

from __future__ import annotations

import argparse
import sys
from typing import Sequence

from docbind.config import DOCBIND_LOG_LEVEL, OUTPUT_FORMATS
from docbind.exceptions import DocbindError
from docbind.loader import expand_paths
from docbind.pipeline import BuildOptions, run_build
from docbind.utils.logging_config import configure_logging, get_logger

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_BUILD_ERROR = 1


def build_parser() -> argparse.ArgumentParser:
    defaults = BuildOptions()
    parser = argparse.ArgumentParser(
        prog="docbind",
        description="Bind Markdown chapter files into one navigable document.",
    )
    parser.add_argument(
        "paths",
        nargs="+",
        help="Chapter files in reading order (directories expand to their sorted .md files)",
    )
    parser.add_argument("-o", "--output", help="Output file (default: stdout)")
    parser.add_argument(
        "-f",
        "--format",
        choices=OUTPUT_FORMATS,
        default=defaults.output_format,
        help="Output format",
    )
    parser.add_argument("--title", help="Book title placed above the contents")
    parser.add_argument(
        "--no-toc",
        dest="include_toc",
        action="store_false",
        default=defaults.include_toc,
        help="Do not emit a table of contents",
    )
    filters = parser.add_mutually_exclusive_group()
    filters.add_argument(
        "--include",
        action="append",
        default=[],
        metavar="SECTION",
        help="Only render these sections (repeatable)",
    )
    filters.add_argument(
        "--exclude",
        action="append",
        default=[],
        metavar="SECTION",
        help="Skip these sections (repeatable)",
    )
    parser.add_argument("--encoding", default=defaults.encoding, help="Input text encoding")
    parser.add_argument(
        "--estimate-tokens",
        action="store_true",
        default=defaults.estimate_tokens,
        help="Add a token estimate to the summary (requires tiktoken)",
    )
    parser.add_argument(
        "--summary",
        action="store_true",
        help="Print the build summary and section tree to stderr",
    )
    parser.add_argument("--log-level", default=DOCBIND_LOG_LEVEL, help="Logging level")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    options = BuildOptions(
        output_format=args.format,
        include_toc=args.include_toc,
        title=args.title,
        section_filter_mode="include" if args.include else "exclude",
        sections=args.include or args.exclude,
        encoding=args.encoding,
        estimate_tokens=args.estimate_tokens,
    )
    sink = args.output or sys.stdout

    try:
        result = run_build(expand_paths(args.paths), sink, options)
    except DocbindError as exc:
        logger.error("Build failed: %s", exc)
        return EXIT_BUILD_ERROR

    if args.summary:
        print(result.summary, file=sys.stderr)
        print(result.sections_tree, file=sys.stderr)
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
