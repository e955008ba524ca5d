"""
Error taxonomy for saving, validating, routing and executing query templates.

Every error carries the HTTP status the API layer answers with and a
``context()`` dict with the actionable details (parameter name, counts,
allowed databases, statement and binds).
"""

from __future__ import annotations

from typing import Any


class QueryStoreError(Exception):
    """Base class; ``status_code`` is used by the API exception handler."""

    status_code: int = 400
    kind: str = "error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def context(self) -> dict[str, Any]:
        return {}


# ---------------------------------------------------------------------------
# Parameter errors
# ---------------------------------------------------------------------------


class ParameterError(QueryStoreError, ValueError):
    """Declared and provided parameters do not line up."""

    kind = "parameter_error"

    def __init__(self, message: str, *, name: str | None = None) -> None:
        super().__init__(message)
        self.name = name

    def context(self) -> dict[str, Any]:
        return {"name": self.name} if self.name is not None else {}


class MissingParameter(ParameterError):
    kind = "missing_parameter"


class MissingIdentifier(ParameterError):
    kind = "missing_identifier"


class ArityError(ParameterError):
    kind = "arity_error"

    def __init__(self, message: str, *, expected: int, provided: int) -> None:
        super().__init__(message)
        self.expected = expected
        self.provided = provided

    def context(self) -> dict[str, Any]:
        return {"expected": self.expected, "provided": self.provided}


class TypeMismatch(ParameterError):
    kind = "type_mismatch"


class ParameterConflict(ParameterError):
    kind = "parameter_conflict"


class UnsafeIdentifier(ParameterError):
    kind = "unsafe_identifier"


class InvalidPlaceholder(ParameterError):
    kind = "invalid_placeholder"


# ---------------------------------------------------------------------------
# Database resolution
# ---------------------------------------------------------------------------


class DatabaseResolutionError(QueryStoreError):
    kind = "database_error"

    def __init__(self, message: str, *, allowed: list[str]) -> None:
        super().__init__(message)
        self.allowed = list(allowed)

    def context(self) -> dict[str, Any]:
        return {"allowed": self.allowed}


class UnavailableDatabase(DatabaseResolutionError):
    kind = "unavailable_database"


class AmbiguousDatabase(DatabaseResolutionError):
    kind = "ambiguous_database"


# ---------------------------------------------------------------------------
# Store / execution
# ---------------------------------------------------------------------------


class TemplateNotFound(QueryStoreError):
    status_code = 404
    kind = "not_found"

    def __init__(self, template_id: Any) -> None:
        super().__init__(f"Query not found: {template_id}")
        self.template_id = template_id


class ExecutionError(QueryStoreError):
    """The tenant database rejected or failed the materialized statement."""

    status_code = 500
    kind = "execution_error"

    def __init__(
        self,
        message: str,
        *,
        database: str,
        statement: str,
        binds: dict[str, Any],
    ) -> None:
        super().__init__(message)
        self.database = database
        self.statement = statement
        self.binds = dict(binds)

    def context(self) -> dict[str, Any]:
        return {
            "database": self.database,
            "statement": self.statement,
            "binds": self.binds,
        }
