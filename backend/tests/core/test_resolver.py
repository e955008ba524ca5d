"""Unit tests for core.resolver."""

import pytest

from querystore.core.errors import AmbiguousDatabase, UnavailableDatabase
from querystore.core.resolver import resolve_database


def test_single_target_no_request() -> None:
    assert resolve_database(["a"]) == "a"


def test_single_target_matching_request() -> None:
    assert resolve_database(["a"], "a") == "a"


def test_single_target_other_request() -> None:
    with pytest.raises(UnavailableDatabase) as exc:
        resolve_database(["a"], "b")
    assert exc.value.allowed == ["a"]


def test_multiple_targets_requested() -> None:
    assert resolve_database(["a", "b"], "b") == "b"


def test_multiple_targets_ambiguous() -> None:
    with pytest.raises(AmbiguousDatabase) as exc:
        resolve_database(["a", "b"])
    assert exc.value.allowed == ["a", "b"]


def test_multiple_targets_unknown_request() -> None:
    with pytest.raises(UnavailableDatabase) as exc:
        resolve_database(["a", "b"], "c")
    assert exc.value.allowed == ["a", "b"]


def test_request_is_trimmed() -> None:
    assert resolve_database(["a", "b"], "  a ") == "a"


def test_blank_request_treated_as_none() -> None:
    with pytest.raises(AmbiguousDatabase):
        resolve_database(["a", "b"], "  ")


def test_no_targets() -> None:
    with pytest.raises(UnavailableDatabase):
        resolve_database([])
