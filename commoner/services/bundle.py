"""Wrap concatenated module output with the shared runtime prelude."""

from collections.abc import Iterable, Mapping
from typing import Final

from commoner.errors import UnknownHelperError
from commoner.models.metadata import FileMetadata

HELPER_PREFIX: Final[str] = "__commoner_helper__"

PRELUDE: Final[str] = """!function() {
var __commoner_initialize_module__ = function(f) {
  var module = {exports: {}};
  f.call(module.exports, module, module.exports);
  return module.exports;
};
var global = window;
"""

OUTRO: Final[str] = """
}();
"""


class BundleWrapper:
    """Post-processing step for files the module wrapper has run on.

    Helper implementations are not generated here, callers pass the source of
    every helper that may be referenced.
    """

    def __init__(self, helper_sources: Mapping[str, str] | None = None) -> None:
        self.helper_sources: dict[str, str] = dict(helper_sources or {})

    def generate_helpers(self, helpers: Iterable[str]) -> str:
        names = sorted(set(helpers))
        if not names:
            return ""
        declarators: list[str] = []
        for name in names:
            source = self.helper_sources.get(name)
            if source is None:
                raise UnknownHelperError(name)
            declarators.append(f"{HELPER_PREFIX}{name} = {source}")
        return "var " + ",\n    ".join(declarators) + ";"

    def wrap(self, data: str, metadata: FileMetadata) -> str:
        if not metadata.commoner_enabled:
            return data
        helpers = self.generate_helpers(metadata.used_helpers)
        return f"{PRELUDE}{helpers}\n{data}{OUTRO}"
