from pathlib import Path
from typing import Any, Iterator

from pydantic import BaseModel, ConfigDict, PrivateAttr
from tree_sitter import Node as TSNode, Tree

from commoner.errors import JavaScriptSyntaxError
from commoner.utils.treesitter_helpers import javascript_parser


class SourceFile(BaseModel):
    """Represents a parsed JavaScript source file.

    Build instances with `read` or `from_text`, which reject sources that do
    not parse. Syntax is checked after validation so that JavaScriptSyntaxError
    reaches callers as is.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    path: Path
    source: bytes
    __tree: Tree = PrivateAttr()

    def model_post_init(self, context: Any) -> None:
        self.__tree = javascript_parser().parse(self.source)
        return super().model_post_init(context)

    @classmethod
    def parse(cls, path: Path, source: bytes) -> "SourceFile":
        """Parse `source` and fail on the first syntax error.

        Raises:
            JavaScriptSyntaxError: If the tree has an error or missing node.
        """
        source_file = cls(path=path, source=source)
        source_file.check_syntax()
        return source_file

    @classmethod
    def read(cls, path: Path) -> "SourceFile":
        return cls.parse(path, path.read_bytes())

    @classmethod
    def from_text(cls, path: Path, text: str) -> "SourceFile":
        return cls.parse(path, text.encode("utf-8"))

    @property
    def tree(self) -> Tree:
        return self.__tree

    @property
    def root_node(self) -> TSNode:
        return self.__tree.root_node

    def check_syntax(self) -> None:
        error_node = next(self.__iter_errors(self.__tree.root_node), None)
        if error_node is not None:
            line, column = error_node.start_point
            raise JavaScriptSyntaxError(self.path, line + 1, column + 1)

    def node_text(self, node: TSNode) -> str:
        """Extract the source code snippet for a given Tree-sitter node."""
        return self.source[node.start_byte : node.end_byte].decode("utf-8")

    def __iter_errors(self, node: TSNode) -> Iterator[TSNode]:
        if not node.has_error:
            return
        if node.is_error or node.is_missing:
            yield node
            return
        for child in node.children:
            yield from self.__iter_errors(child)
