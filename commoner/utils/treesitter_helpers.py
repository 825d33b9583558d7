from functools import lru_cache

import tree_sitter_javascript as tsjavascript
from tree_sitter import Language, Parser, Node as TSNode


@lru_cache(maxsize=1)
def javascript_language() -> Language:
    return Language(tsjavascript.language())


def javascript_parser() -> Parser:
    # Parsers hold mutable state, only the language is shared
    return Parser(javascript_language())


def same_node(a: TSNode | None, b: TSNode | None) -> bool:
    if a is None or b is None:
        return False
    return a.id == b.id


def is_field(parent: TSNode, field: str, child: TSNode) -> bool:
    """Check whether `child` is the node stored under `field` of `parent`."""
    return same_node(parent.child_by_field_name(field), child)


def unwrap_parentheses(node: TSNode | None) -> TSNode | None:
    while node is not None and node.type == "parenthesized_expression":
        inner = [c for c in node.named_children if c.type != "comment"]
        node = inner[0] if inner else None
    return node


def parent_skipping_parentheses(node: TSNode) -> tuple[TSNode | None, TSNode]:
    """Walk up through parenthesized expressions.

    Returns:
        The first non-parenthesis ancestor and its direct child on the path.
    """
    child = node
    parent = node.parent
    while parent is not None and parent.type == "parenthesized_expression":
        child = parent
        parent = parent.parent
    return parent, child
