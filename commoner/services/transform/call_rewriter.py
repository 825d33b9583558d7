import logging
from collections.abc import Iterator

from tree_sitter import Node as TSNode

from commoner.errors import InvalidRequireArgument
from commoner.models.call_site import CallSiteRole, RequireCallSite
from commoner.models.edit import SourceEdit
from commoner.models.source_file import SourceFile
from commoner.services.resolver.target import resolve_target
from commoner.services.transform.context import FileContext
from commoner.services.transform.edits import STATEMENT_LIST_TYPES, remove_statement
from commoner.services.transform.evaluator import evaluate
from commoner.services.transform.scope import ScopeTree, is_plain_identifier
from commoner.utils.treesitter_helpers import (
    parent_skipping_parentheses,
    unwrap_parentheses,
)

logger = logging.getLogger(__name__)

REQUIRE: str = "require"
DECLARATION_TYPES: set[str] = {"variable_declaration", "lexical_declaration"}


class CallRewriter:
    """Rewrite require() calls into references to module identifiers.

    Two shapes are handled:

    - ``var x = require("./x")`` where ``x`` is never reassigned: the declaration
      is dropped and every reference to ``x`` is renamed.
    - any other ``require("./x")``: dropped when it is a statement on its own,
      otherwise replaced in place.

    Calls whose argument is not a compile-time string are left untouched.
    Visiting a site only produces edits, the tree itself is never modified.
    """

    def __init__(
        self, source_file: SourceFile, context: FileContext, scopes: ScopeTree
    ) -> None:
        self.source_file = source_file
        self.context = context
        self.scopes = scopes
        self.call_sites: list[RequireCallSite] = []
        self.__targets: dict[int, str | None] = {}

    def rewrite(self) -> list[SourceEdit]:
        return list(self.__visit(self.source_file.root_node))

    def __visit(self, node: TSNode) -> Iterator[SourceEdit]:
        edits: list[SourceEdit] | None = None
        if node.type in DECLARATION_TYPES:
            edits = self.visit_declaration(node)
        elif self.is_require(node):
            edits = self.visit_call(node)

        if edits is not None:
            yield from edits
            return
        for child in node.children:
            yield from self.__visit(child)

    def is_require(self, node: TSNode | None) -> bool:
        if node is None or node.type != "call_expression":
            return False
        callee = node.child_by_field_name("function")
        return (
            callee is not None
            and callee.type == "identifier"
            and self.source_file.node_text(callee) == REQUIRE
        )

    def require_target(self, call: TSNode) -> str | None:
        """Return the string a require() call asks for.

        Returns:
            None when the call does not have exactly one argument that can be
            evaluated at compile time.

        Raises:
            InvalidRequireArgument: If the argument evaluates to a non-string.
        """
        if call.id not in self.__targets:
            self.__targets[call.id] = self.__evaluate_target(call)
        return self.__targets[call.id]

    def __evaluate_target(self, call: TSNode) -> str | None:
        arguments = call.child_by_field_name("arguments")
        if arguments is None or arguments.type != "arguments":
            return None
        values = [c for c in arguments.named_children if c.type != "comment"]
        if len(values) != 1:
            return None

        evaluation = evaluate(values[0], self.source_file.source)
        if not evaluation.confident:
            logger.warning(
                "Skipping dynamic require '%s' at %s:%d",
                self.source_file.node_text(call),
                self.source_file.path,
                call.start_point[0] + 1,
            )
            return None
        if not isinstance(evaluation.value, str):
            raise InvalidRequireArgument(
                self.source_file.path, call.start_point[0] + 1, evaluation.value
            )
        return evaluation.value

    def visit_declaration(self, node: TSNode) -> list[SourceEdit]:
        """Rewrite the declarators of one declaration, removing bound requires.

        Removals are planned for the whole declaration at once.
        """
        declarators = [
            c for c in node.named_children if c.type == "variable_declarator"
        ]
        edits: list[SourceEdit] = []
        removed: list[TSNode] = []
        for declarator in declarators:
            bound = self.visit_declarator(declarator)
            if bound is None:
                edits.extend(self.__visit(declarator))
            else:
                edits.extend(bound)
                removed.append(declarator)

        if removed:
            edits.extend(self.__remove_declarators(node, declarators, removed))
        return edits

    def visit_declarator(self, node: TSNode) -> list[SourceEdit] | None:
        """Rename references of a constant `x = require(...)` binding.

        Returns:
            The rename edits, or None when the declarator is not in bound form.
            Removing the declarator itself is left to `visit_declaration`.
        """
        call = unwrap_parentheses(node.child_by_field_name("value"))
        if not self.is_require(call):
            return None
        name = node.child_by_field_name("name")
        if name is None or name.type != "identifier":
            return None
        declaration = node.parent
        if (
            declaration is None
            or declaration.parent is None
            or declaration.parent.type not in STATEMENT_LIST_TYPES
        ):
            return None

        binding = self.scopes.binding_for_declaration(name)
        if binding is None or not binding.constant:
            return None

        target = self.require_target(call)
        if target is None:
            return None
        resolved = resolve_target(self.context, target)

        edits: list[SourceEdit] = []
        if resolved != binding.name:
            if is_plain_identifier(resolved):
                conflict = binding.scope.lookup(resolved)
                if conflict is not None and conflict is not binding:
                    edits.extend(
                        self.scopes.rename_edits(
                            conflict, self.scopes.generate_uid(resolved)
                        )
                    )
            edits.extend(
                self.scopes.rename_edits(binding, resolved, include_declarations=False)
            )

        self.__record(call, target, resolved, CallSiteRole.BOUND, binding.name)
        return edits

    def visit_call(self, node: TSNode) -> list[SourceEdit] | None:
        target = self.require_target(node)
        if target is None:
            return None
        resolved = resolve_target(self.context, target)

        parent, _ = parent_skipping_parentheses(node)
        if parent is not None and parent.type == "expression_statement":
            self.__record(node, target, resolved, CallSiteRole.STATEMENT)
            return [remove_statement(self.source_file.source, parent)]

        self.__record(node, target, resolved, CallSiteRole.INLINE)
        return [
            SourceEdit(
                start_byte=node.start_byte,
                end_byte=node.end_byte,
                replacement=resolved,
            )
        ]

    def __remove_declarators(
        self,
        declaration: TSNode,
        declarators: list[TSNode],
        removed: list[TSNode],
    ) -> list[SourceEdit]:
        if len(removed) == len(declarators):
            return [remove_statement(self.source_file.source, declaration)]

        removed_ids = {d.id for d in removed}
        last_kept = max(
            i for i, d in enumerate(declarators) if d.id not in removed_ids
        )
        edits: list[SourceEdit] = []
        for index, declarator in enumerate(declarators):
            if declarator.id not in removed_ids:
                continue
            # Leading declarators take the following comma, trailing ones the preceding
            if index < last_kept:
                edits.append(
                    SourceEdit(
                        start_byte=declarator.start_byte,
                        end_byte=declarators[index + 1].start_byte,
                    )
                )
            else:
                edits.append(
                    SourceEdit(
                        start_byte=declarators[index - 1].end_byte,
                        end_byte=declarator.end_byte,
                    )
                )
        return edits

    def __record(
        self,
        call: TSNode,
        target: str,
        resolved: str,
        role: CallSiteRole,
        binding: str | None = None,
    ) -> None:
        logger.debug(
            "Rewrote %s require(%r) in %s to %s",
            role,
            target,
            self.source_file.path,
            resolved,
        )
        self.call_sites.append(
            RequireCallSite(
                target=target,
                role=role,
                resolved=resolved,
                line=call.start_point[0] + 1,
                binding=binding,
            )
        )
