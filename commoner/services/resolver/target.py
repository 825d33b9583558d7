import logging

from commoner.errors import OutOfRootError
from commoner.services.resolver.legacy_scanner import (
    find_legacy_declaration,
    is_legacy_file,
)
from commoner.services.resolver.path_resolver import ModuleResolver
from commoner.services.transform.context import FileContext

logger = logging.getLogger(__name__)


def resolve_target(context: FileContext, target: str) -> str:
    """Turn a require() target into the name the call site should reference.

    Global overrides short-circuit file resolution. Every resolved path is
    recorded in the file metadata, even when it later fails the root check.

    Raises:
        ResolutionError: If no file matches the target.
        OutOfRootError: If the file lies outside the source root.
        LegacyDeclarationError: If a legacy file does not declare one global.
    """
    override = context.options.globals.get(target)
    if override is not None:
        logger.debug("Require %r mapped to global %s", target, override)
        return override

    resolved_path = ModuleResolver.from_options(context.options).resolve(target)
    context.metadata.required.append(str(resolved_path))

    if not context.is_under_root(resolved_path):
        raise OutOfRootError(target, context.filename.parent, context.source_root)

    if is_legacy_file(resolved_path):
        return find_legacy_declaration(resolved_path)
    return context.identifier_for(resolved_path)
