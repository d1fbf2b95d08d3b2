"""Test setup for docbind."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Callable

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


SECURITY_CHAPTER = """\
# Security

Security is a moving target. See [password hashing](#password-hashing).

## Password Hashing

Use the built-in API.

```php
<?php
$hash = password_hash($password, PASSWORD_DEFAULT);
```
"""


@pytest.fixture
def write_chapter(tmp_path: Path) -> Callable[[str, str], Path]:
    """Factory writing a chapter file into ``tmp_path``."""

    def _write(name: str, text: str) -> Path:
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def security_chapter(write_chapter: Callable[[str, str], Path]) -> Path:
    """A chapter with a title section, one subsection and one code block."""
    return write_chapter("01-security.md", SECURITY_CHAPTER)
