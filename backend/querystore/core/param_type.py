"""
Parameter type checks.

Checks provided execute-time values against the declared ``ParamTypeEnum``.
Values are not coerced: ``"1"`` is not a number and ``True`` is neither a
number nor a string. Array types check every element with the scalar rule.
"""

from __future__ import annotations

import math
from collections.abc import Callable
from datetime import date, datetime
from typing import Any

from querystore.models import ParamTypeEnum


def is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return isinstance(value, int) or math.isfinite(value)


def is_string(value: Any) -> bool:
    return isinstance(value, str)


def is_date(value: Any) -> bool:
    """ISO-8601 calendar date or date-time string (``2024-01-31``, ``2024-01-31T10:00:00Z``)."""
    if not isinstance(value, str):
        return False
    s = value.strip()
    if not s:
        return False
    # fromisoformat only takes a Z suffix from 3.11 on
    if s[-1] in "zZ":
        s = s[:-1] + "+00:00"
    try:
        datetime.fromisoformat(s)
        return True
    except ValueError:
        pass
    try:
        date.fromisoformat(s)
        return True
    except ValueError:
        pass
    # basic format (20240131) for interpreters whose fromisoformat rejects it
    try:
        datetime.strptime(s, "%Y%m%d")
        return len(s) == 8
    except ValueError:
        return False


_CHECKERS: dict[ParamTypeEnum, Callable[[Any], bool]] = {
    ParamTypeEnum.STRING: is_string,
    ParamTypeEnum.NUMBER: is_number,
    ParamTypeEnum.DATE: is_date,
}


def matches_type(value: Any, param_type: ParamTypeEnum) -> bool:
    """True if *value* conforms to *param_type*."""
    check = _CHECKERS[param_type.element_type]
    if not param_type.is_array:
        return check(value)
    if not isinstance(value, list):
        return False
    return all(check(v) for v in value)
