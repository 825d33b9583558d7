from enum import StrEnum

from pydantic import BaseModel, Field


class CallSiteRole(StrEnum):
    """How the value of a require() call is used."""

    STATEMENT = "statement"
    BOUND = "bound"
    INLINE = "inline"


class RequireCallSite(BaseModel):
    """A require() call whose argument evaluated to a single string."""

    target: str = Field(..., description="Evaluated require() argument")
    role: CallSiteRole
    resolved: str = Field(
        ..., description="Identifier or dotted global the call was rewritten to"
    )
    line: int = Field(..., ge=1, description="Line number of the call")
    binding: str | None = Field(
        default=None, description="Local name bound to the call in the bound form"
    )
