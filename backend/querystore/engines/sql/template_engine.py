"""
Query materializer: template text + provided parameters -> statement + binds.

Walks the token list from ``parser.tokenize``:

- ``:name:`` identifier tokens are replaced by the raw provided string.
  No quoting or escaping is applied; see ``safety`` for the checks.
- ``:name`` value tokens bound to a scalar are kept and ``binds[name]`` is
  set; the driver binds them by name.
- ``:name`` bound to a list of N items becomes
  ``:name_arr_0, ..., :name_arr_{N-1}`` with one bind per item, so
  ``col IN (:name)`` expands to ``col IN (:name_arr_0, :name_arr_1)``.
  An empty list renders as ``NULL`` (``IN (NULL)`` matches nothing).

Pure: never touches a database.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, NamedTuple

from querystore.core.errors import ParameterConflict
from querystore.engines.sql.parser import IDENTIFIER, VALUE, tokenize
from querystore.models import ProvidedIdentifier, ProvidedValue

ARRAY_SUFFIX = "_arr_"


class MaterializedQuery(NamedTuple):
    statement: str
    binds: dict[str, Any]


class QueryMaterializer:
    """Rewrites a template into an executable statement and a bind map."""

    def materialize(
        self,
        text: str,
        values: Sequence[ProvidedValue] = (),
        identifiers: Sequence[ProvidedIdentifier] = (),
    ) -> MaterializedQuery:
        identifier_values = {i.name: i.value for i in identifiers}
        provided = {v.name: v.value for v in values}

        binds: dict[str, Any] = {}
        expansions: dict[str, str] = {}
        for name, value in provided.items():
            if isinstance(value, list):
                expansions[name] = self._expand(name, value, binds, provided)
            else:
                binds[name] = value

        parts: list[str] = []
        for tok in tokenize(text):
            if tok.kind == IDENTIFIER and tok.name in identifier_values:
                parts.append(identifier_values[tok.name])
            elif tok.kind == VALUE and tok.name in expansions:
                parts.append(expansions[tok.name])
            else:
                parts.append(tok.text)
        return MaterializedQuery("".join(parts), binds)

    @staticmethod
    def _expand(
        name: str,
        items: list[Any],
        binds: dict[str, Any],
        provided: dict[str, Any],
    ) -> str:
        if not items:
            return "NULL"
        refs: list[str] = []
        for i, item in enumerate(items):
            bind_name = f"{name}{ARRAY_SUFFIX}{i}"
            if bind_name in provided or bind_name in binds:
                raise ParameterConflict(
                    f"Array parameter '{name}' expands to '{bind_name}', "
                    f"which is already a parameter name",
                    name=name,
                )
            binds[bind_name] = item
            refs.append(f":{bind_name}")
        return ", ".join(refs)


def materialize(
    text: str,
    values: Sequence[ProvidedValue] = (),
    identifiers: Sequence[ProvidedIdentifier] = (),
) -> MaterializedQuery:
    """Shortcut for ``QueryMaterializer().materialize(...)``."""
    return QueryMaterializer().materialize(text, values, identifiers)
