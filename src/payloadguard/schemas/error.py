"""Error schemas.

Every validation or serialization failure is reported as a list of Error
values. Clients receive them in one envelope: {"errors": [{"message": ..., "code": ...}]}.
JSON schema violations also carry a context pointing into the payload.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ErrorContext(BaseModel):
    """Where a JSON schema violation happened and which constraint it broke."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    json_pointer: str = Field(alias="jsonPointer")
    value: Any | None = None
    constraints: dict[str, Any] = Field(default_factory=dict)


class Error(BaseModel):
    """A single failure with a human-readable message and a machine-readable code."""

    model_config = ConfigDict(frozen=True)

    message: str = Field(min_length=1)
    code: str = Field(min_length=1)
    context: ErrorContext | None = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned when a payload is rejected."""

    errors: list[Error]
