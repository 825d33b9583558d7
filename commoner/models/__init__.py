from .call_site import CallSiteRole, RequireCallSite
from .edit import SourceEdit
from .metadata import FileMetadata
from .module_file import CompiledModule, ModuleFile
from .options import CommonerOptions, CommonerSettings
from .source_file import SourceFile

__all__ = [
    "CallSiteRole",
    "RequireCallSite",
    "SourceEdit",
    "FileMetadata",
    "CompiledModule",
    "ModuleFile",
    "CommonerOptions",
    "CommonerSettings",
    "SourceFile",
]
