import os
from pathlib import Path
from typing import Any, Final, Self

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_EXTENSIONS: Final[tuple[str, ...]] = (
    ".js",
    ".json",
    ".coffee",
    ".js.erb",
    ".coffee.erb",
)


class CommonerOptions(BaseModel):
    """Resolution options for a single compiled file.

    `basedir` is only ever set by `for_file`, since it depends on the path of the
    file being compiled.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    extensions: tuple[str, ...] = Field(
        default=DEFAULT_EXTENSIONS,
        description="Ordered suffixes tried when resolving a require target",
    )
    globals: dict[str, str] = Field(
        default_factory=dict,
        description="Require targets mapped straight to a global identifier",
    )
    module_directories: tuple[str, ...] = Field(
        default=("node_modules",),
        description="Directory names searched for bare require targets",
    )
    basedir: Path | None = Field(
        default=None, description="Directory of the requiring file"
    )

    def merged(self, overrides: "CommonerOptions | dict[str, Any] | None") -> Self:
        """Return a copy with every explicitly set override applied on top."""
        if overrides is None:
            return self
        if isinstance(overrides, CommonerOptions):
            values = overrides.model_dump(exclude_unset=True)
        else:
            values = CommonerOptions.model_validate(overrides).model_dump(
                exclude_unset=True
            )
        return self.model_copy(update=values)

    def for_file(self, filename: Path) -> Self:
        return self.model_copy(update={"basedir": filename.parent})


class CommonerSettings(BaseModel):
    source_root: Path | None = (
        Path(os.environ["COMMONER_SOURCE_ROOT"])
        if os.getenv("COMMONER_SOURCE_ROOT")
        else None
    )
    config_path: Path | None = (
        Path(os.environ["COMMONER_CONFIG"]) if os.getenv("COMMONER_CONFIG") else None
    )
