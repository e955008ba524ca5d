"""
Engines: SQL placeholder parsing, materialization and execution.
"""

from querystore.engines.sql import (
    MaterializedQuery,
    QueryMaterializer,
    execute_statement,
    extract_parameters,
    materialize,
    tokenize,
)

__all__ = [
    "MaterializedQuery",
    "QueryMaterializer",
    "execute_statement",
    "extract_parameters",
    "materialize",
    "tokenize",
]
