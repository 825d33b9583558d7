from commoner.models.options import CommonerOptions
from commoner.services.compiler import ModuleCompiler
from commoner.services.identifier import derive_identifier

__version__ = "0.1.0"

__all__ = ["CommonerOptions", "ModuleCompiler", "derive_identifier", "__version__"]
