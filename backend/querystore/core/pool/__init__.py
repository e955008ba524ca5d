"""
Database registry and connection helpers for the store and tenant databases.

No driver layer: psycopg, pymysql and trino are used through SQLAlchemy URLs.
"""

from .connect import connect_args, product_type_for_url, set_statement_timeout
from .health import health_check
from .manager import DatabaseRegistry, build_registry

__all__ = [
    "connect_args",
    "product_type_for_url",
    "set_statement_timeout",
    "health_check",
    "DatabaseRegistry",
    "build_registry",
]
