from collections.abc import Iterator
from pathlib import Path

from tree_sitter import Node as TSNode

from commoner.models.source_file import SourceFile


def write_tree(root: Path, files: dict[str, str]) -> None:
    """Create `files` (relative path -> contents) under `root`."""
    for relative, contents in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(contents, encoding="utf-8")


def parse(text: str, path: Path = Path("/app/test.js")) -> SourceFile:
    return SourceFile.from_text(path, text)


def iter_nodes(node: TSNode) -> Iterator[TSNode]:
    yield node
    for child in node.children:
        yield from iter_nodes(child)


def find_nodes(
    source_file: SourceFile, node_type: str, text: str | None = None
) -> list[TSNode]:
    return [
        node
        for node in iter_nodes(source_file.root_node)
        if node.type == node_type
        and (text is None or source_file.node_text(node) == text)
    ]


def first_node(
    source_file: SourceFile, node_type: str, text: str | None = None
) -> TSNode:
    return find_nodes(source_file, node_type, text)[0]
