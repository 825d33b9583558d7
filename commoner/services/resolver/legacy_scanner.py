"""Compatibility shim for requiring legacy CoffeeScript files.

CoffeeScript sources are not parsed. Instead the file is expected to assign
exactly one global such as `window.Foo = ...` or `class Shopify.Foo`, and that
dotted path is used wherever the file is required. Remove once every legacy
source is gone.
"""

import logging
import re
from pathlib import Path
from typing import Final

from commoner.errors import AmbiguousDeclarationError, MissingDeclarationError

logger = logging.getLogger(__name__)

LEGACY_EXTENSIONS: Final[tuple[str, ...]] = (".coffee",)
GLOBAL_OBJECTS: Final[tuple[str, ...]] = ("window", "Shopify", "Sello")

_VALID_IDENTIFIER = r"[a-zA-Z][_a-zA-Z0-9]*"
_VALID_ASSIGNMENT = (
    rf"((?:{'|'.join(GLOBAL_OBJECTS)})(?:\.{_VALID_IDENTIFIER})+)"
)
DECLARATION_PATTERN: Final[re.Pattern[str]] = re.compile(
    rf"^(?:(?:{_VALID_ASSIGNMENT}\s*=)|(?:class {_VALID_ASSIGNMENT}))",
    re.MULTILINE,
)


def is_legacy_file(path: str | Path) -> bool:
    return str(path).endswith(LEGACY_EXTENSIONS)


def find_declarations(contents: str) -> list[str]:
    return [
        match.group(1) or match.group(2)
        for match in DECLARATION_PATTERN.finditer(contents)
    ]


def find_legacy_declaration(path: str | Path) -> str:
    """Return the single global a legacy file assigns.

    Raises:
        MissingDeclarationError: If the file assigns no recognised global.
        AmbiguousDeclarationError: If it assigns more than one.
        OSError: If the file cannot be read.
    """
    # Only ASCII declarations are matched
    contents = Path(path).read_text(encoding="utf-8", errors="replace")
    identifiers = find_declarations(contents)

    if not identifiers:
        raise MissingDeclarationError(path)
    if len(identifiers) > 1:
        raise AmbiguousDeclarationError(path, identifiers)

    logger.debug("Legacy file %s declares %s", path, identifiers[0])
    return identifiers[0]
