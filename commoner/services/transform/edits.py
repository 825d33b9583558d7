from collections.abc import Iterable
from typing import Final

from tree_sitter import Node as TSNode

from commoner.models.edit import SourceEdit

STATEMENT_LIST_TYPES: Final[set[str]] = {
    "program",
    "statement_block",
    "switch_case",
    "switch_default",
    "class_static_block",
}
EMPTY_STATEMENT: Final[str] = "{}"


def _line_bounds(source: bytes, start: int, end: int) -> tuple[int, int] | None:
    """Widen [start, end) to whole lines when nothing else shares them."""
    line_start = start
    while line_start > 0 and source[line_start - 1 : line_start] in (b" ", b"\t"):
        line_start -= 1
    if line_start > 0 and source[line_start - 1 : line_start] != b"\n":
        return None

    line_end = end
    while line_end < len(source) and source[line_end : line_end + 1] in (b" ", b"\t"):
        line_end += 1
    if line_end < len(source):
        if source[line_end : line_end + 2] == b"\r\n":
            return line_start, line_end + 2
        if source[line_end : line_end + 1] != b"\n":
            return None
        line_end += 1
    return line_start, line_end


def remove_statement(source: bytes, statement: TSNode) -> SourceEdit:
    """Delete a statement, or empty it when it is the body of a control statement."""
    parent = statement.parent
    if parent is None or parent.type not in STATEMENT_LIST_TYPES:
        return SourceEdit(
            start_byte=statement.start_byte,
            end_byte=statement.end_byte,
            replacement=EMPTY_STATEMENT,
        )
    bounds = _line_bounds(source, statement.start_byte, statement.end_byte)
    start, end = bounds or (statement.start_byte, statement.end_byte)
    return SourceEdit(start_byte=start, end_byte=end)


def apply_edits(source: bytes, edits: Iterable[SourceEdit]) -> str:
    """Apply non-overlapping edits to `source` and decode the result.

    Edits that fall completely inside an earlier edit are superseded by it.

    Raises:
        ValueError: If two edits partially overlap.
    """
    ordered = sorted(edits, key=lambda e: (e.start_byte, -e.end_byte))
    kept: list[SourceEdit] = []
    for edit in ordered:
        if kept and edit.start_byte < kept[-1].end_byte:
            if kept[-1].contains(edit):
                continue
            raise ValueError(f"Overlapping edits: {kept[-1]!r} and {edit!r}")
        if kept and kept[-1] == edit:
            continue
        kept.append(edit)

    chunks: list[bytes] = []
    cursor = 0
    for edit in kept:
        chunks.append(source[cursor : edit.start_byte])
        chunks.append(edit.replacement.encode("utf-8"))
        cursor = edit.end_byte
    chunks.append(source[cursor:])
    return b"".join(chunks).decode("utf-8")
