"""
Execute a materialized statement against a tenant database.

The statement goes through SQLAlchemy ``text()`` so ``:name`` placeholders
are bound by name from the bind map, whatever the driver's paramstyle.

Returns a lazy, single-pass iterator of row dicts. The connection stays
checked out until the iterator is exhausted or closed. Statements without
a result set (INSERT/UPDATE/DELETE) are committed and yield nothing.
"""

import logging
from collections.abc import Callable, Iterator
from functools import partial
from typing import Any

from sqlalchemy import Connection, CursorResult, text
from sqlalchemy.exc import SQLAlchemyError

from querystore.core.config import settings
from querystore.core.errors import ExecutionError
from querystore.core.pool import DatabaseRegistry, set_statement_timeout
from querystore.core.pool.connect import reset_statement_timeout

_log = logging.getLogger(__name__)


class RowIterator:
    """
    Single-pass iterator of row dicts over an open connection.

    The connection goes back to its pool on exhaustion, on a fetch error or
    on ``close()``, including a ``close()`` before the first row.
    """

    def __init__(
        self,
        conn: Connection,
        result: CursorResult[Any],
        reset: Callable[[], None] | None,
        error: Callable[[str], ExecutionError],
    ) -> None:
        self._conn = conn
        self._rows = iter(result.mappings())
        self._reset = reset
        self._error = error
        self._closed = False

    def __iter__(self) -> "RowIterator":
        return self

    def __next__(self) -> dict[str, Any]:
        if self._closed:
            raise StopIteration
        try:
            row = next(self._rows, None)
            if row is None:
                self._conn.commit()
        except SQLAlchemyError as e:
            _log.error("Fetching rows failed: %s", e, exc_info=True)
            self.close()
            raise self._error(
                f"SQL execution failed: {getattr(e, 'orig', None) or e}"
            ) from e
        if row is None:
            self.close()
            raise StopIteration
        return dict(row)

    def close(self) -> None:
        if not self._closed:
            self._closed = True
            _release(self._conn, self._reset)

    def __del__(self) -> None:
        if not getattr(self, "_closed", True):
            self.close()


def _release(conn: Connection, reset: Any) -> None:
    """Reset session settings (if any) and return the connection to its pool."""
    try:
        if reset is not None:
            reset()
            conn.commit()
    except SQLAlchemyError:
        _log.warning("Failed to reset statement timeout", exc_info=True)
    finally:
        conn.close()


def execute_statement(
    registry: DatabaseRegistry,
    database: str,
    statement: str,
    binds: dict[str, Any] | None = None,
) -> Iterator[dict[str, Any]]:
    """
    Run *statement* with *binds* on tenant *database*.

    Raises ``UnavailableDatabase`` for an unknown name and ``ExecutionError``
    (with statement and binds attached) when the driver fails.
    """
    _binds = dict(binds or {})
    engine = registry.get_engine(database)
    product_type = registry.product_type(database)
    _log.debug("Executing on %s: %s", database, statement)

    conn: Connection | None = None
    reset = None
    try:
        conn = engine.connect()
        if set_statement_timeout(
            conn, product_type, settings.EXTERNAL_DB_STATEMENT_TIMEOUT
        ):
            reset = partial(reset_statement_timeout, conn, product_type)
        result = conn.execute(text(statement), _binds)
    except SQLAlchemyError as e:
        _log.error(
            "SQL execution failed on %s: %s. SQL: %s", database, e, statement, exc_info=True
        )
        if conn is not None:
            try:
                conn.rollback()
            except SQLAlchemyError:
                pass
            _release(conn, reset)
        raise ExecutionError(
            f"SQL execution failed: {getattr(e, 'orig', None) or e}",
            database=database,
            statement=statement,
            binds=_binds,
        ) from e

    if not result.returns_rows:
        _log.debug("Statement on %s affected %s row(s)", database, result.rowcount)
        conn.commit()
        _release(conn, reset)
        return iter(())
    error = partial(ExecutionError, database=database, statement=statement, binds=_binds)
    return RowIterator(conn, result, reset, error)
