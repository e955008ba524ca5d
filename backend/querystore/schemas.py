"""
Pydantic schemas for the query template API.

SQL text travels base64-encoded (UTF-8) in request bodies and is decoded
here; everything past the API layer sees plain text.
"""

import base64
import binascii
import uuid
from datetime import datetime
from typing import Any

from pydantic import Field, field_validator, model_validator
from sqlmodel import SQLModel

from querystore.models import (
    ProvidedParameters,
    QueryTemplate,
    ValueParameterSpec,
)


def decode_base64_text(v: Any) -> Any:
    """Decode a base64 string to UTF-8 text; non-strings pass through."""
    if not isinstance(v, str):
        return v
    try:
        decoded = base64.b64decode(v, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as e:
        raise ValueError("text must be base64-encoded UTF-8") from e
    if not decoded.strip():
        raise ValueError("text must not be empty")
    return decoded


def split_database_names(v: Any) -> Any:
    """``"a, b"`` -> ``["a", "b"]``; lists are trimmed; blanks dropped."""
    if isinstance(v, str):
        v = v.split(",")
    if isinstance(v, list):
        return [str(i).strip() for i in v if str(i).strip()]
    return v


# ---------------------------------------------------------------------------
# Save
# ---------------------------------------------------------------------------


class SaveParametersIn(SQLModel):
    values: list[ValueParameterSpec] = Field(default_factory=list)


class SaveQueryIn(SQLModel):
    """Body for POST /queries/save."""

    text: str = Field(..., min_length=1, description="Base64-encoded SQL template")
    target_databases: list[str] = Field(
        ..., description="Database name, comma-separated names or a list"
    )
    label: str | None = Field(default=None, max_length=255)
    description: str | None = None
    parameters: SaveParametersIn = Field(default_factory=SaveParametersIn)

    @field_validator("text", mode="before")
    @classmethod
    def decode_text(cls, v: Any) -> Any:
        return decode_base64_text(v)

    @field_validator("target_databases", mode="before")
    @classmethod
    def split_targets(cls, v: Any) -> Any:
        return split_database_names(v)


class SaveQueryOut(SQLModel):
    id: uuid.UUID
    message: str
    warnings: list[dict[str, Any]] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Execute
# ---------------------------------------------------------------------------


class ExecuteParametersIn(ProvidedParameters):
    """Values bound by name and identifiers spliced into ``:name:``."""


class ExecuteQueryIn(SQLModel):
    """Body for POST /queries/execute."""

    id: uuid.UUID
    database: str | None = Field(default=None, max_length=255)
    parameters: ExecuteParametersIn = Field(default_factory=ExecuteParametersIn)


class ExecuteQueryOut(SQLModel):
    data: list[dict[str, Any]]
    database: str


# ---------------------------------------------------------------------------
# Update
# ---------------------------------------------------------------------------


class UpdateQueryIn(SQLModel):
    """Body for PATCH /queries/{id}; omitted fields keep their value.

    An explicit ``null`` clears ``label`` or ``description``.
    """

    text: str | None = Field(default=None, description="Base64-encoded SQL template")
    target_databases: list[str] | None = None
    label: str | None = Field(default=None, max_length=255)
    description: str | None = None
    parameters: SaveParametersIn | None = None

    @field_validator("text", mode="before")
    @classmethod
    def decode_text(cls, v: Any) -> Any:
        return decode_base64_text(v)

    @field_validator("target_databases", mode="before")
    @classmethod
    def split_targets(cls, v: Any) -> Any:
        return split_database_names(v)

    @model_validator(mode="after")
    def reject_null_required(self) -> "UpdateQueryIn":
        for name in ("text", "target_databases", "parameters"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self


class UpdateQueryOut(SQLModel):
    id: uuid.UUID
    message: str


# ---------------------------------------------------------------------------
# Read / list
# ---------------------------------------------------------------------------


class QueryTemplatePublic(SQLModel):
    id: uuid.UUID
    text: str
    target_databases: list[str]
    label: str | None = None
    description: str | None = None
    parameter_spec: dict[str, Any]
    created_at: datetime
    updated_at: datetime
    version_history: list[dict[str, Any]] | None = None

    @classmethod
    def from_template(
        cls, template: QueryTemplate, *, include_history: bool = False
    ) -> "QueryTemplatePublic":
        public = cls.model_validate(template)
        if not include_history:
            public.version_history = None
        return public


class QueryTemplateListIn(SQLModel):
    """Body for POST /queries/list."""

    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=20, ge=1, le=100)
    label: str | None = Field(default=None, description="Filter by label (ilike)")


class QueryTemplateListOut(SQLModel):
    data: list[QueryTemplatePublic]
    total: int
