"""Derive the variable name a compiled module is bound to."""

import re
from pathlib import Path
from typing import Final

MODULE_PREFIX: Final[str] = "__commoner_module__"
SEPARATOR_FILLER: Final[str] = "$"
ESCAPE_FILLER: Final[str] = "_"

_ALPHANUMERIC = re.compile(r"[A-Za-z0-9]")


def _escape(char: str) -> str:
    if char == "/":
        return SEPARATOR_FILLER
    if _ALPHANUMERIC.fullmatch(char):
        return char
    code = ord(char)
    # Fixed-width codes keep the mapping prefix-free and therefore reversible
    if code <= 0xFF:
        return f"{ESCAPE_FILLER}{code:02x}"
    return f"{ESCAPE_FILLER}u{code:06x}"


def relative_to_root(path: str | Path, source_root: str | Path) -> str:
    """Strip `<source_root>/` from the start of `path` if present."""
    text = Path(path).as_posix()
    prefix = Path(source_root).as_posix().rstrip("/") + "/"
    if text.startswith(prefix):
        return text[len(prefix) :]
    return text


def derive_identifier(relative_path: str) -> str:
    """Map a root-relative path to a unique, valid JavaScript identifier.

    >>> derive_identifier("a/c.js")
    '__commoner_module__a$c_2ejs'
    """
    return MODULE_PREFIX + "".join(_escape(char) for char in relative_path)


def identifier_for_path(path: str | Path, source_root: str | Path) -> str:
    return derive_identifier(relative_to_root(path, source_root))
