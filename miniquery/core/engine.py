"""
Query Engine - Main entry point for MiniQuery

This is the primary interface for running queries. It coordinates the
table store, parser, query executor and natural-language translator.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple, Union

from ..config import ENGINE_CONFIG
from ..data.sample import sample_store
from ..nl.translator import translate_natural_language
from ..parser.lexer import split_statements
from ..parser.parser import parse_query
from ..storage.store import TableStore
from .executor import QueryExecutor, QueryResult

logger = logging.getLogger(__name__)

Tables = Dict[str, List[Dict[str, Any]]]


class QueryEngine:
    """
    MiniQuery engine instance.

    Usage:
        engine = QueryEngine({"customers": [{"id": 1, "name": "John Doe"}]})
        result = engine.execute("SELECT * FROM customers WHERE name LIKE '%john%'")
        for row in result.rows:
            print(row)
    """

    def __init__(self, tables: Union[Tables, TableStore, None] = None,
                 strict: Optional[bool] = None):
        """
        Initialize the engine.

        Args:
            tables: Table name -> list of row dicts, or a ready TableStore
            strict: Raise on unparseable WHERE/HAVING clauses instead of
                ignoring them (defaults to MINIQUERY_STRICT_PREDICATES)
        """
        self.store = tables if isinstance(tables, TableStore) else TableStore(tables)
        self.strict = ENGINE_CONFIG['strict_predicates'] if strict is None else strict
        self.executor = QueryExecutor(self.store, strict=self.strict)

    @classmethod
    def from_config(cls, data_dir: Optional[str] = None,
                    strict: Optional[bool] = None) -> 'QueryEngine':
        """
        Build an engine over ``data_dir`` (or MINIQUERY_DATA_DIR), falling
        back to the bundled sample tables when neither is set.
        """
        data_dir = data_dir or ENGINE_CONFIG['data_dir']
        if data_dir:
            store = TableStore.from_directory(data_dir)
        else:
            store = sample_store()
        return cls(store, strict=strict)

    def execute(self, query: str) -> QueryResult:
        """
        Execute a query.

        Args:
            query: SELECT statement to execute

        Returns:
            QueryResult containing columns, rows and the pre-LIMIT row count

        Raises:
            QueryError: If the query is not a supported SELECT or names an
                unknown table
        """
        logger.debug("Executing query: %s", query)
        return self.executor.execute(parse_query(query))

    def execute_query(self, query: str) -> Dict[str, Any]:
        """Execute a query and return ``{"data": rows, "count": total}``"""
        return self.execute(query).to_dict()

    def execute_many(self, script: str) -> List[QueryResult]:
        """Run every ;-separated statement of ``script`` in order; the first error stops the run"""
        return [self.execute(statement) for statement in split_statements(script)]

    def translate(self, question: str, table_hint: Optional[str] = None) -> str:
        """Translate a free-text question into a query"""
        return translate_natural_language(question, table_hint)

    def ask(self, question: str, table_hint: Optional[str] = None) -> Tuple[str, QueryResult]:
        """
        Translate a question and run the resulting query.

        Returns:
            The generated query and its result
        """
        query = self.translate(question, table_hint)
        logger.info("Translated %r to %s", question, query)
        return query, self.execute(query)

    def tables(self) -> List[str]:
        """Table names in load order"""
        return self.store.list_tables()

    def describe(self, table_name: str) -> Dict[str, Any]:
        """Schema of ``table_name`` as a dict (name, columns, primary_key); raises UnknownTable"""
        return self.store.get_table_schema(table_name).to_dict()

    def count(self, table_name: str) -> int:
        """Number of rows in ``table_name``"""
        return self.store.count(table_name)


def execute_query(tables: Tables, query: str) -> Dict[str, Any]:
    """
    Run ``query`` against ``tables`` and return ``{"data": rows, "count": total}``.

    ``count`` is the number of matching rows before OFFSET/LIMIT.
    """
    return QueryEngine(tables).execute_query(query)
