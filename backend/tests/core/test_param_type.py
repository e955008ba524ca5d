"""Unit tests for core.param_type."""

import pytest

from querystore.core.param_type import is_date, is_number, matches_type
from querystore.models import ParamTypeEnum


class TestScalars:
    @pytest.mark.parametrize("value", [0, 1, -3, 2.5, 1e10, 10**400])
    def test_numbers(self, value):
        assert is_number(value)

    @pytest.mark.parametrize(
        "value",
        ["1", True, False, None, float("nan"), float("inf"), float("-inf"), [1]],
    )
    def test_not_numbers(self, value):
        assert not is_number(value)

    @pytest.mark.parametrize(
        "value",
        [
            "2024-01-31",
            "2024-01-31T10:00:00",
            "2024-01-31 10:00:00+00:00",
            "2024-01-31T10:00:00Z",
            "20240131",
        ],
    )
    def test_dates(self, value):
        assert is_date(value)

    @pytest.mark.parametrize("value", ["2024-13-01", "yesterday", "", 20240131, None])
    def test_not_dates(self, value):
        assert not is_date(value)

    def test_string(self):
        assert matches_type("abc", ParamTypeEnum.STRING)
        assert matches_type("", ParamTypeEnum.STRING)
        assert not matches_type(1, ParamTypeEnum.STRING)


class TestArrays:
    def test_number_array(self):
        assert matches_type([1, 2, 3], ParamTypeEnum.NUMBER_ARRAY)
        assert not matches_type([1, "2"], ParamTypeEnum.NUMBER_ARRAY)

    def test_empty_array_matches(self):
        assert matches_type([], ParamTypeEnum.STRING_ARRAY)

    def test_scalar_is_not_array(self):
        assert not matches_type("a", ParamTypeEnum.STRING_ARRAY)

    def test_array_is_not_scalar(self):
        assert not matches_type(["a"], ParamTypeEnum.STRING)

    def test_date_array(self):
        assert matches_type(["2024-01-01", "2024-02-01"], ParamTypeEnum.DATE_ARRAY)
        assert not matches_type(["2024-01-01", "nope"], ParamTypeEnum.DATE_ARRAY)
