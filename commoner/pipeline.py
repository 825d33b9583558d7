from pathlib import Path

from pydantic import BaseModel, Field

from commoner.models.metadata import FileMetadata
from commoner.models.module_file import CompiledModule
from commoner.models.options import CommonerOptions
from commoner.services.bundle import BundleWrapper
from commoner.services.compiler import ModuleCompiler


class BundleResult(BaseModel):
    code: str
    metadata: FileMetadata
    modules: list[CompiledModule]


class CommonerPipeline(BaseModel):
    """Compile files in the given order and wrap them into one bundle.

    Ordering is the caller's job, files are never reordered here.
    """

    root: Path
    files: list[Path]
    options: CommonerOptions = Field(default_factory=CommonerOptions)
    helper_sources: dict[str, str] = Field(default_factory=dict)

    def run(self) -> BundleResult:
        compiler = ModuleCompiler(source_root=self.root, options=self.options)
        modules = [compiler.compile_file(path) for path in self.files]

        metadata = FileMetadata()
        for compiled in modules:
            metadata = metadata.merge(compiled.metadata)

        data = "".join(compiled.code for compiled in modules)
        code = BundleWrapper(self.helper_sources).wrap(data, metadata)
        return BundleResult(code=code, metadata=metadata, modules=modules)
