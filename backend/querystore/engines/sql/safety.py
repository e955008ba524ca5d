"""
Identifier safety checks.

Identifier placeholders (``:name:``) are spliced into SQL verbatim, which
is an injection surface. Two helpers:

- ``check_template_safety(text)``: static warnings for a template, returned
  to the caller on save (one per identifier placeholder, with line).
- ``check_identifier_value(name, value)``: run at execute time. Values that
  are not plain (optionally dotted / double-quoted) SQL identifiers are
  logged; with ``strict=True`` they are rejected with ``UnsafeIdentifier``.

Usage::

    warnings = check_template_safety("SELECT * FROM :tbl:")
    # [{"identifier": "tbl", "line": 1, "message": "..."}]
"""

import logging
import re
from typing import Any

from querystore.core.errors import UnsafeIdentifier
from querystore.engines.sql.parser import IDENTIFIER, tokenize

_log = logging.getLogger(__name__)

# schema.table, "Quoted Name", catalog.schema."Mixed Case"
_PART = r'(?:[A-Za-z_][A-Za-z0-9_$]*|"(?:[^"]|"")+")'
_SAFE_IDENTIFIER = re.compile(rf"^{_PART}(?:\.{_PART})*$")


def check_template_safety(text: str) -> list[dict[str, Any]]:
    """Return one warning per identifier placeholder occurrence in *text*.

    An empty list means the template has no raw substitutions.
    """
    warnings: list[dict[str, Any]] = []
    line_no = 1
    for tok in tokenize(text):
        if tok.kind == IDENTIFIER:
            warnings.append(
                {
                    "identifier": tok.name,
                    "line": line_no,
                    "message": (
                        f"':{tok.name}:' is substituted into the SQL text without "
                        f"quoting. Only pass trusted table/column names."
                    ),
                }
            )
        line_no += tok.text.count("\n")
    return warnings


def is_safe_identifier(value: str) -> bool:
    return bool(_SAFE_IDENTIFIER.match(value))


def check_identifier_value(name: str, value: str, *, strict: bool = False) -> None:
    """Warn (or raise when *strict*) if *value* is not a plain SQL identifier."""
    if is_safe_identifier(value):
        return
    if strict:
        raise UnsafeIdentifier(
            f"Identifier '{name}' is not a plain SQL identifier", name=name
        )
    _log.warning("Identifier %r has a value that is not a plain SQL identifier", name)
