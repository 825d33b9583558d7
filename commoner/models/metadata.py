from pydantic import BaseModel, Field


class FileMetadata(BaseModel):
    """Per-file metadata handed back to the asset pipeline."""

    required: list[str] = Field(
        default_factory=list,
        description="Absolute paths resolved from require() calls, in traversal order",
    )
    commoner_enabled: bool = Field(
        default=False, description="Set once the module wrapper has run"
    )
    used_helpers: set[str] = Field(
        default_factory=set,
        description="Helper names referenced by generated code, supplied externally",
    )

    def merge(self, other: "FileMetadata") -> "FileMetadata":
        return FileMetadata(
            required=[*self.required, *other.required],
            commoner_enabled=self.commoner_enabled or other.commoner_enabled,
            used_helpers=self.used_helpers | other.used_helpers,
        )
