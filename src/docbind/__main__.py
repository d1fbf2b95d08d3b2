"""Module entry point for running with python -m docbind."""

import sys

from docbind.cli import main

if __name__ == "__main__":
    sys.exit(main())
