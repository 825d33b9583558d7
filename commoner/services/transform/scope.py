"""Lexical scope analysis over a tree-sitter JavaScript tree.

Only what the require rewriter needs is modelled: which identifier nodes
declare a binding, which ones reference it, and which ones write to it.
"""

import logging
import re
from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import StrEnum

from tree_sitter import Node as TSNode

from commoner.models.edit import SourceEdit
from commoner.models.source_file import SourceFile
from commoner.utils.treesitter_helpers import is_field

logger = logging.getLogger(__name__)

FUNCTION_SCOPE_TYPES: set[str] = {
    "program",
    "function_declaration",
    "function_expression",
    "function",
    "generator_function",
    "generator_function_declaration",
    "arrow_function",
    "method_definition",
}
BLOCK_SCOPE_TYPES: set[str] = {
    "statement_block",
    "for_statement",
    "for_in_statement",
    "catch_clause",
    "switch_body",
    "class",
}
PATTERN_TYPES: set[str] = {
    "object_pattern",
    "array_pattern",
    "pair_pattern",
    "assignment_pattern",
    "object_assignment_pattern",
    "rest_pattern",
    "parenthesized_expression",
}
IDENTIFIER_TYPES: set[str] = {
    "identifier",
    "shorthand_property_identifier",
    "shorthand_property_identifier_pattern",
}
SHORTHAND_TYPES: set[str] = {
    "shorthand_property_identifier",
    "shorthand_property_identifier_pattern",
}

_PLAIN_IDENTIFIER = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")


class BindingKind(StrEnum):
    VAR = "var"
    LET = "let"
    CONST = "const"
    PARAM = "param"
    FUNCTION = "function"
    CLASS = "class"
    CATCH = "catch"
    IMPORT = "import"


@dataclass(eq=False)
class Scope:
    node: TSNode
    parent: "Scope | None"
    is_function: bool
    bindings: dict[str, "Binding"] = field(default_factory=dict)

    def function_scope(self) -> "Scope":
        scope: Scope = self
        while not scope.is_function and scope.parent is not None:
            scope = scope.parent
        return scope

    def lookup(self, name: str) -> "Binding | None":
        scope: Scope | None = self
        while scope is not None:
            binding = scope.bindings.get(name)
            if binding is not None:
                return binding
            scope = scope.parent
        return None


@dataclass(eq=False)
class Binding:
    name: str
    kind: BindingKind
    scope: Scope
    declarations: list[TSNode] = field(default_factory=list)
    references: list[TSNode] = field(default_factory=list)
    violations: list[TSNode] = field(default_factory=list)

    @property
    def constant(self) -> bool:
        """True when declared exactly once and never written afterwards."""
        return len(self.declarations) == 1 and not self.violations


def is_plain_identifier(name: str) -> bool:
    return _PLAIN_IDENTIFIER.match(name) is not None


def pattern_identifiers(node: TSNode | None) -> Iterator[TSNode]:
    """Yield the identifier nodes bound by a declaration pattern."""
    if node is None:
        return
    if node.type in {"identifier", "shorthand_property_identifier_pattern"}:
        yield node
    elif node.type == "pair_pattern":
        yield from pattern_identifiers(node.child_by_field_name("value"))
    elif node.type in {"assignment_pattern", "object_assignment_pattern"}:
        yield from pattern_identifiers(node.child_by_field_name("left"))
    elif node.type in {"object_pattern", "array_pattern", "rest_pattern"}:
        for child in node.named_children:
            yield from pattern_identifiers(child)


def _is_write(node: TSNode) -> bool:
    child = node
    parent = node.parent
    while parent is not None and parent.type in PATTERN_TYPES:
        if parent.type == "pair_pattern" and not is_field(parent, "value", child):
            return False
        if parent.type in {
            "assignment_pattern",
            "object_assignment_pattern",
        } and not is_field(parent, "left", child):
            return False
        child, parent = parent, parent.parent

    if parent is None:
        return False
    if parent.type in {"assignment_expression", "augmented_assignment_expression"}:
        return is_field(parent, "left", child)
    if parent.type == "update_expression":
        return True
    if parent.type == "for_in_statement":
        return is_field(parent, "left", child)
    return False


def _is_reference(node: TSNode) -> bool:
    parent = node.parent
    if parent is None:
        return True
    if parent.type == "import_specifier":
        return False
    if parent.type == "export_specifier" and is_field(parent, "alias", node):
        return False
    return True


class ScopeTree:
    """Scopes, bindings and references of one parsed file."""

    def __init__(self, source_file: SourceFile) -> None:
        self.source_file = source_file
        self.names: set[str] = set()
        self._scopes: dict[int, Scope] = {}
        self._declarations: dict[int, Binding] = {}
        self._references: dict[int, Binding] = {}

        root = source_file.root_node
        self.program = Scope(node=root, parent=None, is_function=True)
        self._scopes[root.id] = self.program
        self.__declare(root, self.program)
        self.__resolve(root, self.program)

    def _name(self, node: TSNode) -> str:
        return self.source_file.node_text(node)

    def binding_for_declaration(self, node: TSNode) -> Binding | None:
        return self._declarations.get(node.id)

    def binding_for_reference(self, node: TSNode) -> Binding | None:
        return self._references.get(node.id)

    def generate_uid(self, name: str) -> str:
        """Return `_name`, `_name2`, ... whichever is unused in the file."""
        base = "_" + name.lstrip("_")
        candidate = base
        counter = 1
        while candidate in self.names:
            counter += 1
            candidate = f"{base}{counter}"
        self.names.add(candidate)
        return candidate

    def rename_edits(
        self, binding: Binding, new_name: str, include_declarations: bool = True
    ) -> list[SourceEdit]:
        """Edits replacing every reference (and declaration) of `binding`."""
        edits: list[SourceEdit] = []
        nodes = list(binding.references)
        if include_declarations:
            nodes = [*binding.declarations, *nodes]
        for node in nodes:
            edits.append(
                SourceEdit(
                    start_byte=node.start_byte,
                    end_byte=node.end_byte,
                    replacement=self.__renamed_text(node, binding.name, new_name),
                )
            )
        self.names.add(new_name)
        logger.debug(
            "Renamed %s to %s (%d sites)", binding.name, new_name, len(edits)
        )
        return edits

    def __renamed_text(self, node: TSNode, old_name: str, new_name: str) -> str:
        if node.type in SHORTHAND_TYPES:
            return f"{old_name}: {new_name}"
        parent = node.parent
        if (
            parent is not None
            and parent.type == "export_specifier"
            and parent.child_by_field_name("alias") is None
        ):
            return f"{new_name} as {old_name}"
        return new_name

    def __new_scope(self, node: TSNode, parent: Scope) -> Scope | None:
        if node.type in FUNCTION_SCOPE_TYPES:
            scope = Scope(node=node, parent=parent, is_function=True)
        elif node.type in BLOCK_SCOPE_TYPES and not (
            node.type == "statement_block"
            and node.parent is not None
            and node.parent.type in FUNCTION_SCOPE_TYPES - {"program"}
        ):
            scope = Scope(node=node, parent=parent, is_function=False)
        else:
            return None
        self._scopes[node.id] = scope
        return scope

    def __bind(self, scope: Scope, node: TSNode | None, kind: BindingKind) -> None:
        if node is None:
            return
        name = self._name(node)
        binding = scope.bindings.get(name)
        if binding is None:
            binding = Binding(name=name, kind=kind, scope=scope)
            scope.bindings[name] = binding
        binding.declarations.append(node)
        self._declarations[node.id] = binding

    def __declare(self, node: TSNode, scope: Scope) -> None:
        outer = scope
        inner = (
            self.__new_scope(node, scope) if node.id != scope.node.id else None
        )
        if inner is not None:
            scope = inner

        kind = node.type
        if kind in {"function_declaration", "generator_function_declaration"}:
            self.__bind(outer, node.child_by_field_name("name"), BindingKind.FUNCTION)
        elif kind in {"function_expression", "function", "generator_function"}:
            name = node.child_by_field_name("name")
            if name is not None:
                self.__bind(scope, name, BindingKind.FUNCTION)
        elif kind == "class_declaration":
            self.__bind(outer, node.child_by_field_name("name"), BindingKind.CLASS)
        elif kind == "class":
            name = node.child_by_field_name("name")
            if name is not None:
                self.__bind(scope, name, BindingKind.CLASS)

        if kind in FUNCTION_SCOPE_TYPES and kind != "program":
            parameters = node.child_by_field_name(
                "parameters"
            ) or node.child_by_field_name("parameter")
            if parameters is not None:
                targets = (
                    parameters.named_children
                    if parameters.type == "formal_parameters"
                    else [parameters]
                )
                for target in targets:
                    for identifier in pattern_identifiers(target):
                        self.__bind(scope, identifier, BindingKind.PARAM)
        elif kind == "variable_declaration":
            for declarator in node.named_children:
                if declarator.type != "variable_declarator":
                    continue
                for identifier in pattern_identifiers(
                    declarator.child_by_field_name("name")
                ):
                    self.__bind(scope.function_scope(), identifier, BindingKind.VAR)
        elif kind == "lexical_declaration":
            lexical_kind = node.child_by_field_name("kind")
            binding_kind = (
                BindingKind.CONST
                if lexical_kind is not None and lexical_kind.type == "const"
                else BindingKind.LET
            )
            for declarator in node.named_children:
                if declarator.type != "variable_declarator":
                    continue
                for identifier in pattern_identifiers(
                    declarator.child_by_field_name("name")
                ):
                    self.__bind(scope, identifier, binding_kind)
        elif kind == "for_in_statement":
            loop_kind = node.child_by_field_name("kind")
            if loop_kind is not None:
                target_scope = (
                    scope.function_scope() if loop_kind.type == "var" else scope
                )
                binding_kind = BindingKind(loop_kind.type)
                for identifier in pattern_identifiers(
                    node.child_by_field_name("left")
                ):
                    self.__bind(target_scope, identifier, binding_kind)
        elif kind == "catch_clause":
            for identifier in pattern_identifiers(
                node.child_by_field_name("parameter")
            ):
                self.__bind(scope, identifier, BindingKind.CATCH)
        elif kind == "import_statement":
            for identifier in self.__import_identifiers(node):
                self.__bind(self.program, identifier, BindingKind.IMPORT)
            return

        for child in node.children:
            self.__declare(child, scope)

    def __import_identifiers(self, node: TSNode) -> Iterator[TSNode]:
        for child in node.named_children:
            if child.type == "import_clause":
                yield from self.__import_identifiers(child)
            elif child.type == "identifier":
                yield child
            elif child.type == "namespace_import":
                yield from (c for c in child.named_children if c.type == "identifier")
            elif child.type == "named_imports":
                for specifier in child.named_children:
                    if specifier.type != "import_specifier":
                        continue
                    local = specifier.child_by_field_name(
                        "alias"
                    ) or specifier.child_by_field_name("name")
                    if local is not None and local.type == "identifier":
                        yield local

    def __resolve(self, node: TSNode, scope: Scope) -> None:
        scope = self._scopes.get(node.id, scope)

        if node.type in IDENTIFIER_TYPES:
            name = self._name(node)
            self.names.add(name)
            if node.id not in self._declarations and _is_reference(node):
                binding = scope.lookup(name)
                if binding is not None:
                    binding.references.append(node)
                    self._references[node.id] = binding
                    if _is_write(node):
                        binding.violations.append(node)
            return

        for child in node.children:
            self.__resolve(child, scope)
