"""
MiniQuery - A miniature SQL query engine for in-memory tables

Runs a SELECT dialect (filters, joins, grouping, sorting, pagination) over
lists of row dicts and translates plain-English questions into queries.
"""

__version__ = "1.0.0"

from .core.engine import QueryEngine, execute_query
from .core.errors import (
    QueryError, UnsupportedQueryKind, MissingTable, UnknownTable,
    UnsupportedJoinCondition, UnparseablePredicate,
)
from .core.executor import QueryResult
from .core.repl import REPL
from .nl.translator import translate_natural_language
from .storage.store import TableStore

__all__ = [
    "QueryEngine", "execute_query", "QueryResult", "REPL", "TableStore",
    "translate_natural_language",
    "QueryError", "UnsupportedQueryKind", "MissingTable", "UnknownTable",
    "UnsupportedJoinCondition", "UnparseablePredicate",
]
