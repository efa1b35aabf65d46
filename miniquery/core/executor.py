"""
Query Executor - Executes parsed SELECT statements

Takes a SelectStatement from the parser and runs it against the table
store:

    scan / join -> WHERE -> GROUP BY + aggregates -> HAVING -> ORDER BY
    -> projection -> DISTINCT -> OFFSET / LIMIT

Joined rows are flat dicts whose keys carry the source table as a prefix
(``customers_id``, ``orders_total``). Every output row is a new dict, so the
caller's tables are never modified.
"""

import csv
import io
import logging
from functools import cmp_to_key
from typing import Any, Dict, List, Tuple
from dataclasses import dataclass

from ..parser.parser import (
    SelectStatement, SelectItem, ColumnRef, Literal, FunctionCall, TableRef,
    JoinClause, JoinType, OrderDirection, AGGREGATE_FUNCTIONS
)
from ..storage.store import TableStore
from .aggregate import GroupAggregator, aggregate_output_names, has_aggregates
from .errors import UnparseablePredicate, UnsupportedJoinCondition
from .predicate import PredicateEvaluator
from .types import MISSING, FieldResolver, compare_values, find_field, stringify

logger = logging.getLogger(__name__)

Row = Dict[str, Any]


@dataclass
class QueryResult:
    """Result of a query execution"""
    columns: List[str]
    rows: List[Row]
    total_count: int = 0

    def to_dict(self) -> dict:
        """Render as the ``{"data": [...], "count": n}`` payload"""
        return {'data': self.rows, 'count': self.total_count}

    def to_csv(self) -> str:
        """Render the rows as CSV text with a header line"""
        output = io.StringIO()
        writer = csv.writer(output)
        writer.writerow(self.columns)
        for row in self.rows:
            writer.writerow([stringify(row.get(col)) for col in self.columns])
        return output.getvalue()


class QueryExecutor:
    """
    Executes SELECT queries against a table store.
    """

    def __init__(self, store: TableStore, strict: bool = False):
        self.store = store
        self.strict = strict

    def execute(self, stmt: SelectStatement) -> QueryResult:
        """Execute a parsed statement"""
        if self.strict:
            for clause in ('WHERE', 'HAVING'):
                if clause in stmt.ignored_clauses:
                    raise UnparseablePredicate(clause)

        rows, resolver = self._scan(stmt)
        evaluator = PredicateEvaluator(resolver)

        # Apply WHERE filter
        if stmt.where is not None:
            rows = [row for row in rows if evaluator.matches(stmt.where, row)]

        grouped = bool(stmt.group_by) or has_aggregates(stmt.columns)
        hidden: Dict[str, FunctionCall] = {}

        # Handle GROUP BY and aggregates
        if grouped:
            names = aggregate_output_names(stmt.columns, resolver)
            for func in self._referenced_aggregates(stmt):
                if func.signature not in names:
                    key = f"__{func.signature}"
                    names[func.signature] = key
                    hidden[key] = func
            rows = GroupAggregator(resolver).aggregate(rows, stmt, hidden)
            evaluator = PredicateEvaluator(resolver, names)

        # Apply HAVING filter
        if stmt.having is not None:
            rows = [row for row in rows if evaluator.matches(stmt.having, row)]

        # Apply ORDER BY
        if stmt.order_by:
            rows = self._apply_order_by(rows, stmt, evaluator, grouped)

        if grouped:
            rows = [{k: v for k, v in row.items() if k not in hidden} for row in rows]
        else:
            rows = self._project_columns(rows, stmt.columns, resolver)

        # Handle DISTINCT
        if stmt.distinct:
            rows = self._distinct(rows)

        total_count = len(rows)

        # Apply OFFSET and LIMIT
        if stmt.offset:
            rows = rows[stmt.offset:]
        if stmt.limit is not None:
            rows = rows[:stmt.limit]

        logger.debug("Query on %s matched %d row(s), returning %d",
                     stmt.from_table.name, total_count, len(rows))

        return QueryResult(columns=self._column_names(rows), rows=rows, total_count=total_count)

    def _scan(self, stmt: SelectStatement) -> Tuple[List[Row], FieldResolver]:
        """Rows the pipeline starts from, plus how to resolve column refs in them"""
        table = stmt.from_table

        if not stmt.joins:
            rows = list(self.store.get_rows(table.name))
            return rows, FieldResolver({table.name: None, table.reference: None})

        return self._process_join(table, stmt.joins[0])

    def _process_join(self, left: TableRef, join: JoinClause) -> Tuple[List[Row], FieldResolver]:
        """Nested-loop equi-join of the FROM table with the joined table"""
        left_name = self.store.resolve(left.name)
        right_name = self.store.resolve(join.table.name)
        left_rows = self.store.get_rows(left_name)
        right_rows = self.store.get_rows(right_name)

        left_prefix, right_prefix = left_name, right_name
        if left_name == right_name:
            # Self-join: namespace by alias
            left_prefix, right_prefix = left.reference, join.table.reference
            if left_prefix.lower() == right_prefix.lower():
                raise UnsupportedJoinCondition("A self-join needs a distinct alias for each side")

        right_columns = self.store.get_table_schema(right_name).column_names
        result = []

        for left_row in left_rows:
            key = find_field(left_row, join.left.column)
            matched = False

            if key is not None and key is not MISSING:
                for right_row in right_rows:
                    if self._same_key(key, find_field(right_row, join.right.column)):
                        result.append(self._combine(left_prefix, left_row, right_prefix, right_row))
                        matched = True

            # Handle LEFT JOIN - include unmatched left rows
            if not matched and join.join_type == JoinType.LEFT:
                empty = {col: None for col in right_columns}
                result.append(self._combine(left_prefix, left_row, right_prefix, empty))

        logger.debug("%s JOIN %s produced %d row(s)", left_name, right_name, len(result))

        qualifiers = {}
        if left_name != right_name:
            qualifiers[left_name] = left_prefix
            qualifiers[right_name] = right_prefix
        qualifiers[left.reference] = left_prefix
        qualifiers[join.table.reference] = right_prefix

        return result, FieldResolver(qualifiers)

    @staticmethod
    def _same_key(left: Any, right: Any) -> bool:
        """Uncoerced equality; booleans never match numbers"""
        return left == right and isinstance(left, bool) == isinstance(right, bool)

    @staticmethod
    def _combine(left_prefix: str, left_row: Row, right_prefix: str, right_row: Row) -> Row:
        combined = {f"{left_prefix}_{col}": value for col, value in left_row.items()}
        for col, value in right_row.items():
            combined[f"{right_prefix}_{col}"] = value
        return combined

    @staticmethod
    def _referenced_aggregates(stmt: SelectStatement) -> List[FunctionCall]:
        """Aggregate calls used by HAVING and ORDER BY"""
        found = []

        def walk(expr):
            if isinstance(expr, FunctionCall):
                if expr.name in AGGREGATE_FUNCTIONS:
                    found.append(expr)
            elif isinstance(expr, list):
                for item in expr:
                    walk(item)
            elif hasattr(expr, 'left'):
                walk(expr.left)
                walk(expr.right)
            elif hasattr(expr, 'operand'):
                walk(expr.operand)

        walk(stmt.having)
        for item in stmt.order_by:
            walk(item.expr)
        return found

    def _apply_order_by(self, rows: List[Row], stmt: SelectStatement,
                        evaluator: PredicateEvaluator, grouped: bool) -> List[Row]:
        """Apply ORDER BY sorting (stable, keys compared left to right)"""
        aliases: Dict[str, ColumnRef] = {}
        for item in stmt.columns:
            if not isinstance(item.expr, ColumnRef):
                continue
            if grouped:
                # Group rows hold selected group columns under their output name
                output = ColumnRef(item.alias or evaluator.resolver.output_key(item.expr))
                aliases.setdefault(str(item.expr).lower(), output)
                aliases.setdefault(item.expr.column.lower(), output)
            elif item.alias:
                # Before projection, a select alias stands for its expression
                aliases[item.alias.lower()] = item.expr

        def sort_value(row: Row, expr: Any) -> Any:
            value = evaluator.value_of(expr, row)
            if value is MISSING and isinstance(expr, ColumnRef):
                target = aliases.get(str(expr).lower())
                if target is not None:
                    value = evaluator.value_of(target, row)
            return None if value is MISSING else value

        def compare(a: Row, b: Row) -> int:
            for item in stmt.order_by:
                result = compare_values(sort_value(a, item.expr), sort_value(b, item.expr))
                if result:
                    return -result if item.direction == OrderDirection.DESC else result
            return 0

        return sorted(rows, key=cmp_to_key(compare))

    @staticmethod
    def _project_columns(rows: List[Row], columns: List[SelectItem],
                         resolver: FieldResolver) -> List[Row]:
        """Project specified columns from result rows"""
        items = columns or [SelectItem('*')]
        result_rows = []

        for row in rows:
            result_row = {}

            for item in items:
                expr = item.expr
                if expr == '*':
                    # Select all columns
                    result_row.update(row)
                elif isinstance(expr, ColumnRef):
                    value = resolver.lookup(row, expr)
                    result_row[item.alias or resolver.output_key(expr)] = None if value is MISSING else value
                elif isinstance(expr, Literal):
                    result_row[item.alias or stringify(expr.value)] = expr.value

            result_rows.append(result_row)

        return result_rows

    @staticmethod
    def _distinct(rows: List[Row]) -> List[Row]:
        seen = set()
        unique_rows = []
        for row in rows:
            key = tuple((col, stringify(value), type(value).__name__) for col, value in row.items())
            if key not in seen:
                seen.add(key)
                unique_rows.append(row)
        return unique_rows

    @staticmethod
    def _column_names(rows: List[Row]) -> List[str]:
        names = []
        for row in rows:
            for key in row:
                if key not in names:
                    names.append(key)
        return names
