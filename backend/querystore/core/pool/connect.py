"""
Connection helpers for tenant databases.

Uses psycopg (PostgreSQL), pymysql (MySQL) or trino (Trino) through their
SQLAlchemy dialects; the product type is read from the URL scheme.
"""

from typing import Any

from sqlalchemy import Connection, make_url

from querystore.core.config import settings
from querystore.models import ProductTypeEnum

_BACKENDS: dict[str, ProductTypeEnum] = {
    "postgresql": ProductTypeEnum.POSTGRES,
    "mysql": ProductTypeEnum.MYSQL,
    "mariadb": ProductTypeEnum.MYSQL,
    "trino": ProductTypeEnum.TRINO,
}


def product_type_for_url(url: str) -> ProductTypeEnum | None:
    """Product type for a SQLAlchemy URL; None for other backends (e.g. sqlite)."""
    return _BACKENDS.get(make_url(url).get_backend_name())


def connect_args(product_type: ProductTypeEnum | None, timeout: int) -> dict[str, Any]:
    """Driver-level connect timeout for *product_type*."""
    if product_type in (ProductTypeEnum.POSTGRES, ProductTypeEnum.MYSQL):
        return {"connect_timeout": timeout}
    if product_type == ProductTypeEnum.TRINO:
        return {"request_timeout": timeout, "source": settings.PROJECT_NAME}
    return {}


def set_statement_timeout(
    conn: Connection,
    product_type: ProductTypeEnum | None,
    timeout_sec: float | None,
) -> bool:
    """
    Apply a per-statement timeout on *conn*. Returns True if one was set.

    Postgres: statement_timeout, MySQL: max_execution_time (both in ms),
    Trino: query_max_execution_time.
    """
    if timeout_sec is None or timeout_sec <= 0 or product_type is None:
        return False
    timeout_ms = int(timeout_sec * 1000)
    if product_type == ProductTypeEnum.POSTGRES:
        conn.exec_driver_sql(f"SET statement_timeout = {timeout_ms}")
    elif product_type == ProductTypeEnum.MYSQL:
        conn.exec_driver_sql(f"SET SESSION max_execution_time = {timeout_ms}")
    elif product_type == ProductTypeEnum.TRINO:
        conn.exec_driver_sql(
            f"SET SESSION query_max_execution_time = '{int(timeout_sec)}s'"
        )
    return True


def reset_statement_timeout(conn: Connection, product_type: ProductTypeEnum | None) -> None:
    """Undo ``set_statement_timeout`` before the connection goes back to the pool."""
    if product_type == ProductTypeEnum.POSTGRES:
        conn.exec_driver_sql("SET statement_timeout = 0")
    elif product_type == ProductTypeEnum.MYSQL:
        conn.exec_driver_sql("SET SESSION max_execution_time = 0")
    elif product_type == ProductTypeEnum.TRINO:
        conn.exec_driver_sql("SET SESSION query_max_execution_time = '0s'")
