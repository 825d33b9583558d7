import re
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

from commoner.models.metadata import FileMetadata
from commoner.models.options import CommonerOptions
from commoner.services.identifier import identifier_for_path, relative_to_root


class FileContext(BaseModel):
    """State for compiling a single file.

    Built once per file before traversal and passed explicitly to the resolver,
    the legacy scanner and the rewriters. Never shared between files.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    filename: Path
    source_root: Path
    options: CommonerOptions
    metadata: FileMetadata = Field(default_factory=FileMetadata)
    __root_pattern: re.Pattern[str] = PrivateAttr()

    def model_post_init(self, context: Any) -> None:
        root = self.source_root.as_posix().rstrip("/")
        self.__root_pattern = re.compile("^" + re.escape(root) + "/")
        return super().model_post_init(context)

    @classmethod
    def create(
        cls,
        filename: Path,
        source_root: Path,
        project_options: CommonerOptions | None = None,
        file_options: CommonerOptions | dict[str, Any] | None = None,
    ) -> "FileContext":
        """Merge defaults, project options, per-file overrides and basedir."""
        options = (project_options or CommonerOptions()).merged(file_options)
        return cls(
            filename=filename,
            source_root=source_root,
            options=options.for_file(filename),
        )

    def is_under_root(self, path: str | Path) -> bool:
        return self.__root_pattern.match(Path(path).as_posix()) is not None

    @property
    def relative_path(self) -> str:
        return relative_to_root(self.filename, self.source_root)

    @property
    def identifier(self) -> str:
        return identifier_for_path(self.filename, self.source_root)

    def identifier_for(self, path: str | Path) -> str:
        return identifier_for_path(path, self.source_root)
