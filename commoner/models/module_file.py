from pathlib import Path

from pydantic import BaseModel, Field

from commoner.models.call_site import RequireCallSite
from commoner.models.metadata import FileMetadata


class ModuleFile(BaseModel):
    """One source unit compiled independently of every other file."""

    path: Path = Field(..., description="Absolute path of the file")
    relative_path: str = Field(..., description="Path with the source root stripped")
    identifier: str = Field(..., description="Variable name the file defines")
    expose: str | None = Field(
        default=None, description="Dotted global path the exports are assigned to"
    )


class CompiledModule(BaseModel):
    module: ModuleFile
    code: str
    metadata: FileMetadata
    call_sites: list[RequireCallSite] = Field(default_factory=list)
