"""
SQL template engine: placeholder extraction, materialization, execution.

Exports: QueryMaterializer, materialize, extract_parameters, tokenize,
execute_statement.
"""

from querystore.engines.sql.executor import execute_statement
from querystore.engines.sql.parser import extract_parameters, tokenize
from querystore.engines.sql.template_engine import (
    MaterializedQuery,
    QueryMaterializer,
    materialize,
)

__all__ = [
    "MaterializedQuery",
    "QueryMaterializer",
    "materialize",
    "extract_parameters",
    "tokenize",
    "execute_statement",
]
