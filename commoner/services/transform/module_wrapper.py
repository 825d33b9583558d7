import logging
import re
from dataclasses import dataclass, field
from typing import Final

from tree_sitter import Node as TSNode

from commoner.errors import MultipleExposeError
from commoner.models.edit import SourceEdit
from commoner.models.source_file import SourceFile
from commoner.services.transform.context import FileContext
from commoner.services.transform.edits import remove_statement

logger = logging.getLogger(__name__)

INITIALIZER: Final[str] = "__commoner_initialize_module__"
MODULE_PARAMETERS: Final[tuple[str, str]] = ("module", "exports")
EXPOSE_PATTERN: Final[re.Pattern[str]] = re.compile(r"^expose ([A-Za-z\.]+)$")
EXPOSE_TEMPLATE: Final[str] = (
    "{target} = exports['default'] != null ? exports['default'] : exports;"
)


@dataclass(frozen=True)
class Directive:
    statement: TSNode
    value: str


@dataclass
class WrapPlan:
    """What the wrapper decided for a file before the body is rewritten."""

    identifier: str
    expose: str | None = None
    hash_bang: str | None = None
    edits: list[SourceEdit] = field(default_factory=list)


def find_directives(source_file: SourceFile) -> list[Directive]:
    """Collect the directive prologue, e.g. ``"use strict";``."""
    directives: list[Directive] = []
    for child in source_file.root_node.named_children:
        if child.type in {"comment", "hash_bang_line"}:
            continue
        if child.type != "expression_statement":
            break
        expressions = [c for c in child.named_children if c.type != "comment"]
        if len(expressions) != 1 or expressions[0].type != "string":
            break
        raw = source_file.node_text(expressions[0])
        directives.append(Directive(statement=child, value=raw[1:-1]))
    return directives


class ModuleWrapper:
    """Wrap a file body in a module initializer bound to the file's identifier.

    The compiled file becomes::

        var <identifier> = __commoner_initialize_module__(function (module, exports) {
        <original body>
        <optional expose assignment>
        });
    """

    def __init__(self, source_file: SourceFile, context: FileContext) -> None:
        self.source_file = source_file
        self.context = context

    def prepare(self) -> WrapPlan:
        """Compute the identifier, pull out the expose directive and flag the file.

        Raises:
            MultipleExposeError: If more than one expose directive is present.
        """
        plan = WrapPlan(identifier=self.context.identifier)

        exposes = [
            (directive, match.group(1))
            for directive in find_directives(self.source_file)
            if (match := EXPOSE_PATTERN.match(directive.value)) is not None
        ]
        if len(exposes) > 1:
            raise MultipleExposeError(
                self.source_file.path, [target for _, target in exposes]
            )
        if exposes:
            directive, plan.expose = exposes[0]
            plan.edits.append(
                remove_statement(self.source_file.source, directive.statement)
            )
            logger.debug("Exposing %s as %s", self.source_file.path, plan.expose)

        first = self.source_file.root_node.child(0)
        if first is not None and first.type == "hash_bang_line":
            plan.hash_bang = self.source_file.node_text(first)
            plan.edits.append(
                SourceEdit(start_byte=first.start_byte, end_byte=first.end_byte)
            )

        self.context.metadata.commoner_enabled = True
        return plan

    def render(self, plan: WrapPlan, body: str) -> str:
        lines: list[str] = []
        if plan.hash_bang is not None:
            lines.append(plan.hash_bang)
        lines.append(
            f"var {plan.identifier} = {INITIALIZER}"
            f"(function ({', '.join(MODULE_PARAMETERS)}) {{"
        )
        body = body.strip("\r\n")
        if body:
            lines.append(body)
        if plan.expose is not None:
            lines.append(EXPOSE_TEMPLATE.format(target=plan.expose))
        lines.append("});")
        return "\n".join(lines) + "\n"
