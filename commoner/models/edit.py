from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing import Self


class SourceEdit(BaseModel):
    """Replace the byte range [start_byte, end_byte) of a source file.

    An empty replacement deletes the range.
    """

    model_config = ConfigDict(frozen=True)

    start_byte: int = Field(..., ge=0)
    end_byte: int = Field(..., ge=0)
    replacement: str = ""

    @model_validator(mode="after")
    def validate_range(self) -> Self:
        if self.end_byte < self.start_byte:
            raise ValueError("end_byte must be greater than or equal to start_byte")
        return self

    @property
    def is_deletion(self) -> bool:
        return self.replacement == ""

    def contains(self, other: "SourceEdit") -> bool:
        return self.start_byte <= other.start_byte and other.end_byte <= self.end_byte
