"""
Query errors raised to callers of the engine.

All of them are ValueErrors so callers that already guard query execution
with ``except ValueError`` keep working.
"""

from typing import Optional


class QueryError(ValueError):
    """Base class for every error the engine raises"""


class UnsupportedQueryKind(QueryError):
    """The statement is not a SELECT"""

    def __init__(self, message: str = "Only SELECT queries are supported"):
        super().__init__(message)


class MissingTable(QueryError):
    """The query has no resolvable FROM <table> clause"""

    def __init__(self, message: str = "Invalid query: missing FROM clause or table name"):
        super().__init__(message)


class UnknownTable(QueryError):
    """A table named by the query is absent from the table store"""

    def __init__(self, table: str, message: Optional[str] = None):
        self.table = table
        super().__init__(message or f"Table '{table}' not found")


class UnsupportedJoinCondition(QueryError):
    """A JOIN is present but is not a single two-table equi-join"""


class UnparseablePredicate(QueryError):
    """A WHERE/HAVING clause could not be parsed (strict mode only)"""

    def __init__(self, clause: str):
        self.clause = clause
        super().__init__(f"Could not parse {clause} clause")
