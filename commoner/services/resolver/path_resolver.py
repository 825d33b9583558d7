import json
import logging
import os
from pathlib import Path

from pydantic import BaseModel, Field

from commoner.errors import ResolutionError
from commoner.models.options import CommonerOptions

logger = logging.getLogger(__name__)

_RELATIVE_PREFIXES: tuple[str, ...] = ("./", "../", "/")


class ModuleResolver(BaseModel):
    """Node-style synchronous module resolution.

    Relative and absolute targets are looked up from `basedir`; bare targets are
    searched in every module directory (`node_modules` by default) from `basedir`
    up to the filesystem root.
    """

    basedir: Path
    extensions: tuple[str, ...] = Field(default_factory=tuple)
    module_directories: tuple[str, ...] = ("node_modules",)

    @classmethod
    def from_options(cls, options: CommonerOptions) -> "ModuleResolver":
        if options.basedir is None:
            raise ValueError("Resolution options have no basedir")
        return cls(
            basedir=options.basedir,
            extensions=options.extensions,
            module_directories=options.module_directories,
        )

    def resolve(self, target: str) -> Path:
        """Resolve a require() target to an absolute file path.

        Raises:
            ResolutionError: If no file matches the target.
        """
        if target in {".", ".."} or target.startswith(_RELATIVE_PREFIXES):
            candidate = os.path.normpath(os.path.join(self.basedir, target))
            found: Path | None = None
            if not (target.endswith("/") or target == ".."):
                found = self._load_as_file(candidate)
            if found is None:
                found = self._load_as_directory(candidate)
            if found is not None:
                logger.debug("Resolved %r from %s to %s", target, self.basedir, found)
                return found
        else:
            for directory in self._module_paths():
                candidate = os.path.normpath(os.path.join(directory, target))
                found = self._load_as_file(candidate) or self._load_as_directory(
                    candidate
                )
                if found is not None:
                    logger.debug("Resolved %r from %s to %s", target, directory, found)
                    return found

        raise ResolutionError(target, self.basedir)

    def _load_as_file(self, candidate: str) -> Path | None:
        if os.path.isfile(candidate):
            return Path(os.path.normpath(candidate))
        for extension in self.extensions:
            if os.path.isfile(candidate + extension):
                return Path(os.path.normpath(candidate + extension))
        return None

    def _load_as_directory(self, candidate: str) -> Path | None:
        package_file = os.path.join(candidate, "package.json")
        if os.path.isfile(package_file):
            main = self._package_main(package_file)
            if main:
                main_path = os.path.normpath(os.path.join(candidate, main))
                found = self._load_as_file(main_path) or self._load_as_directory(
                    main_path
                )
                if found is not None:
                    return found
        return self._load_as_file(os.path.join(candidate, "index"))

    def _package_main(self, package_file: str) -> str | None:
        try:
            with open(package_file, encoding="utf-8") as f:
                package = json.load(f)
        except (OSError, json.JSONDecodeError):
            logger.exception("Failed to read %s", package_file)
            raise
        main = package.get("main") if isinstance(package, dict) else None
        return main if isinstance(main, str) else None

    def _module_paths(self) -> list[str]:
        paths: list[str] = []
        current = Path(os.path.abspath(self.basedir))
        for directory in (current, *current.parents):
            if directory.name in self.module_directories:
                continue
            for module_directory in self.module_directories:
                paths.append(os.path.join(directory, module_directory))
        return paths
