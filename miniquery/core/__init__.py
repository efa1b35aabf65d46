"""Core module - Engine, Executor, Predicates, Aggregation, Schema, Types, REPL"""

from .engine import QueryEngine, execute_query
from .errors import (
    QueryError, UnsupportedQueryKind, MissingTable, UnknownTable,
    UnsupportedJoinCondition, UnparseablePredicate,
)
from .executor import QueryExecutor, QueryResult
from .repl import REPL
from .schema import TableSchema, Column
from .types import DataType, ColumnType, TypeValidator

__all__ = [
    'QueryEngine', 'execute_query', 'REPL',
    'QueryError', 'UnsupportedQueryKind', 'MissingTable', 'UnknownTable',
    'UnsupportedJoinCondition', 'UnparseablePredicate',
    'QueryExecutor', 'QueryResult',
    'TableSchema', 'Column',
    'DataType', 'ColumnType', 'TypeValidator',
]
