import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from commoner.models.module_file import CompiledModule, ModuleFile
from commoner.models.options import CommonerOptions
from commoner.models.source_file import SourceFile
from commoner.services.transform.call_rewriter import CallRewriter
from commoner.services.transform.context import FileContext
from commoner.services.transform.edits import apply_edits
from commoner.services.transform.module_wrapper import ModuleWrapper
from commoner.services.transform.scope import ScopeTree

logger = logging.getLogger(__name__)


class ModuleCompiler(BaseModel):
    """Compile JavaScript files one at a time into linked module initializers."""

    source_root: Path
    options: CommonerOptions = Field(default_factory=CommonerOptions)

    def compile_file(
        self,
        path: Path,
        file_options: CommonerOptions | dict[str, Any] | None = None,
    ) -> CompiledModule:
        """Compile the file at `path`.

        Raises:
            CommonerError: If the file cannot be parsed or a require() call
                cannot be resolved.
            OSError: If the file or a required legacy file cannot be read.
        """
        absolute_path = Path(path).absolute()
        return self.compile_source(
            SourceFile.read(absolute_path), file_options=file_options
        )

    def compile_text(
        self,
        path: Path,
        text: str,
        file_options: CommonerOptions | dict[str, Any] | None = None,
    ) -> CompiledModule:
        return self.compile_source(
            SourceFile.from_text(Path(path).absolute(), text),
            file_options=file_options,
        )

    def compile_source(
        self,
        source_file: SourceFile,
        file_options: CommonerOptions | dict[str, Any] | None = None,
    ) -> CompiledModule:
        context = FileContext.create(
            filename=source_file.path,
            source_root=self.source_root.absolute(),
            project_options=self.options,
            file_options=file_options,
        )

        # Options and the root boundary must exist before any require is resolved
        wrapper = ModuleWrapper(source_file, context)
        plan = wrapper.prepare()

        rewriter = CallRewriter(source_file, context, ScopeTree(source_file))
        edits = [*plan.edits, *rewriter.rewrite()]
        body = apply_edits(source_file.source, edits)

        logger.debug(
            "Compiled %s as %s (%d requires)",
            source_file.path,
            plan.identifier,
            len(rewriter.call_sites),
        )
        return CompiledModule(
            module=ModuleFile(
                path=source_file.path,
                relative_path=context.relative_path,
                identifier=plan.identifier,
                expose=plan.expose,
            ),
            code=wrapper.render(plan, body),
            metadata=context.metadata,
            call_sites=rewriter.call_sites,
        )
