"""Tests for the error response rendering in querystore.main."""

from unittest.mock import patch

from querystore.core.errors import (
    AmbiguousDatabase,
    ExecutionError,
    MissingParameter,
    TemplateNotFound,
)
from querystore.main import error_content


def test_parameter_error_content() -> None:
    body = error_content(MissingParameter("Missing value for parameter 'x'", name="x"))
    assert body == {
        "detail": "Missing value for parameter 'x'",
        "error": "missing_parameter",
        "name": "x",
    }


def test_database_error_content() -> None:
    body = error_content(AmbiguousDatabase("pick one", allowed=["a", "b"]))
    assert body["error"] == "ambiguous_database"
    assert body["allowed"] == ["a", "b"]


def test_not_found_status() -> None:
    exc = TemplateNotFound("abc")
    assert exc.status_code == 404
    assert error_content(exc)["error"] == "not_found"


def test_execution_error_binds_redacted() -> None:
    exc = ExecutionError("boom", database="d1", statement="SELECT :a", binds={"a": 1})
    with patch("querystore.main.settings.EXECUTION_ERROR_INCLUDE_BINDS", False):
        body = error_content(exc)
    assert body["binds"] == {"a": "***"}
    assert body["statement"] == "SELECT :a"
    assert exc.binds == {"a": 1}
