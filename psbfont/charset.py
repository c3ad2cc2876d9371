"""
Character set loading.

The glyph order of every tier is the deduplicated, code-point-sorted set of
characters from the configured text file, with the space character moved to
the front. Space is always present, even when the source text lacks it.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List

from .errors import ConfigInvalidError

__all__ = ["DEFAULT_CHARSET", "normalize_charset", "load_characters"]

log = logging.getLogger(__name__)

# Printable ASCII, 0x20..0x7E.
DEFAULT_CHARSET = "".join(chr(cp) for cp in range(0x20, 0x7F))


def normalize_charset(text: Iterable[str]) -> List[str]:
    """Deduplicate, sort by code point, and force a single leading space."""
    unique = sorted(set(text))
    if " " in unique:
        unique.remove(" ")
    unique.insert(0, " ")
    return unique


def load_characters(chars_file: str) -> List[str]:
    """
    Read the character source at `chars_file` (UTF-8).

    A missing file is not fatal: a warning is logged and `DEFAULT_CHARSET`
    is used instead.
    """
    path = Path(chars_file)
    if path.is_file():
        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigInvalidError(f"Unable to read character set {path}: {e}") from e
    else:
        log.warning(
            "Character set file not found: %s; using default printable ASCII set",
            path,
        )
        content = DEFAULT_CHARSET
    return normalize_charset(content)
