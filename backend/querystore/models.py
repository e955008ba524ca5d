"""
Query template models.

QueryTemplate is the only table. The non-table models describe the typed
parameter structures the core works with: the stored parameter spec, the
values/identifiers a caller provides at execution time, and version
history snapshots.
"""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from sqlalchemy import JSON, Column, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlmodel import Field, SQLModel


def _utc_now() -> datetime:
    """Timezone-aware UTC now (replaces deprecated datetime.utcnow())."""
    return datetime.now(timezone.utc)


# JSONB on Postgres, plain JSON elsewhere (SQLite in tests).
JSONVariant = JSON().with_variant(JSONB(), "postgresql")


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class ProductTypeEnum(str, Enum):
    """Supported tenant database product types (postgres, mysql, trino)."""

    POSTGRES = "postgres"
    MYSQL = "mysql"
    TRINO = "trino"


class ParamTypeEnum(str, Enum):
    """Declared type of a value placeholder."""

    STRING = "string"
    NUMBER = "number"
    DATE = "date"
    STRING_ARRAY = "string[]"
    NUMBER_ARRAY = "number[]"
    DATE_ARRAY = "date[]"

    @property
    def is_array(self) -> bool:
        return self.value.endswith("[]")

    @property
    def element_type(self) -> "ParamTypeEnum":
        """Scalar type of the elements (self for scalar types)."""
        return ParamTypeEnum(self.value[:-2]) if self.is_array else self


# ---------------------------------------------------------------------------
# Parameter structures
# ---------------------------------------------------------------------------


class ValueParameterSpec(SQLModel):
    """Declared value placeholder: ``:name`` bound by the driver."""

    name: str = Field(min_length=1, max_length=128)
    type: ParamTypeEnum


class ParameterSpec(SQLModel):
    """Stored declaration of a template's placeholders."""

    values: list[ValueParameterSpec] = Field(default_factory=list)
    identifiers: list[str] = Field(default_factory=list)


class ProvidedValue(SQLModel):
    """Caller-supplied value; ``value`` is type-checked against the declared parameter type."""

    name: str
    value: Any = None


class ProvidedIdentifier(SQLModel):
    """Caller-supplied identifier; spliced verbatim into ``:name:``."""

    name: str
    value: str


class ProvidedParameters(SQLModel):
    values: list[ProvidedValue] = Field(default_factory=list)
    identifiers: list[ProvidedIdentifier] = Field(default_factory=list)


class VersionSnapshot(SQLModel):
    """State of a template immediately before a versioned update."""

    text: str
    target_databases: list[str]
    label: str | None = None
    description: str | None = None
    parameter_spec: ParameterSpec = Field(default_factory=ParameterSpec)
    updated_at: datetime | None = None


# ---------------------------------------------------------------------------
# QueryTemplate - stored parameterized SQL
# ---------------------------------------------------------------------------


class QueryTemplate(SQLModel, table=True):
    __tablename__ = "query_template"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    text: str = Field(sa_column=Column(Text, nullable=False))
    target_databases: list[str] = Field(
        default_factory=list,
        sa_column=Column(JSONVariant, nullable=False),
        description="Tenant databases this template may run against",
    )
    parameter_spec: dict[str, Any] = Field(
        default_factory=lambda: {"values": [], "identifiers": []},
        sa_column=Column(JSONVariant, nullable=False),
        description="{values: [{name, type}], identifiers: [name]}",
    )
    label: str | None = Field(default=None, max_length=255, index=True)
    description: str | None = Field(default=None, sa_column=Column(Text, nullable=True))
    version_history: list[dict[str, Any]] = Field(
        default_factory=list,
        sa_column=Column(JSONVariant, nullable=False),
        description="Append-only list of prior snapshots, oldest first",
    )
    created_at: datetime = Field(default_factory=_utc_now)
    updated_at: datetime = Field(default_factory=_utc_now)

    @property
    def spec(self) -> ParameterSpec:
        return ParameterSpec.model_validate(self.parameter_spec or {})

    def snapshot(self) -> dict[str, Any]:
        """JSON-ready snapshot of the current state for version history."""
        return VersionSnapshot(
            text=self.text,
            target_databases=list(self.target_databases or []),
            label=self.label,
            description=self.description,
            parameter_spec=self.spec,
            updated_at=self.updated_at,
        ).model_dump(mode="json")
