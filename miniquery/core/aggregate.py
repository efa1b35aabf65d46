"""
Grouping & Aggregation - GROUP BY partitioning and COUNT/SUM/AVG/MIN/MAX

Rows are partitioned by the text of their GROUP BY values, so 1, 1.0 and
'1' land in the same group. Each group produces one output row holding the
select list's group columns and aggregate values.
"""

import logging
from typing import Any, Dict, List, Optional

from .types import MISSING, FieldResolver, stringify, to_number
from ..parser.parser import AGGREGATE_FUNCTIONS, ColumnRef, FunctionCall, SelectItem, SelectStatement

logger = logging.getLogger(__name__)

Row = Dict[str, Any]


def has_aggregates(columns: List[SelectItem]) -> bool:
    """True if the select list contains an aggregate call"""
    return any(isinstance(item.expr, FunctionCall) and item.expr.name in AGGREGATE_FUNCTIONS
               for item in columns)


def group_key(values: List[Any]) -> str:
    return '|'.join(stringify(value) for value in values)


def default_aggregate_name(func: FunctionCall, resolver: FieldResolver) -> str:
    """Output column of an unaliased aggregate: count_*, sum_total, ..."""
    arg = func.args[0] if func.args else '*'
    field_name = '*' if arg == '*' else resolver.output_key(arg)
    return f"{func.name.lower()}_{field_name}"


def aggregate_output_names(columns: List[SelectItem], resolver: FieldResolver) -> Dict[str, str]:
    """Map each aggregate in the select list (by signature) to its output column.

    Aggregates that only appear in HAVING or ORDER BY are not computed, so
    they have no entry.
    """
    names = {}
    for item in columns:
        if isinstance(item.expr, FunctionCall) and item.expr.name in AGGREGATE_FUNCTIONS:
            names.setdefault(item.expr.signature,
                             item.alias or default_aggregate_name(item.expr, resolver))
    return names


class GroupAggregator:
    """Collapses filtered rows into one row per group"""

    def __init__(self, resolver: Optional[FieldResolver] = None):
        self.resolver = resolver or FieldResolver()

    def aggregate(self, rows: List[Row], stmt: SelectStatement,
                  extra: Optional[Dict[str, FunctionCall]] = None) -> List[Row]:
        """Group ``rows`` by ``stmt.group_by`` and evaluate the select list per group.

        ``extra`` maps column names to aggregates that HAVING or ORDER BY need
        but the select list does not compute; the caller removes them later.
        """
        groups = self._partition(rows, stmt.group_by)
        logger.debug("Aggregating %d row(s) into %d group(s)", len(rows), len(groups))

        result = []
        for group in groups:
            row = self._summarize(group, stmt)
            for name, func in (extra or {}).items():
                row[name] = self.compute(func, group)
            result.append(row)
        return result

    def _partition(self, rows: List[Row], group_by: List[ColumnRef]) -> List[List[Row]]:
        if not group_by:
            # Single group for all rows
            return [rows]

        groups: Dict[str, List[Row]] = {}
        for row in rows:
            key = group_key([self.resolver.lookup(row, ref) for ref in group_by])
            groups.setdefault(key, []).append(row)
        return list(groups.values())

    def _summarize(self, group: List[Row], stmt: SelectStatement) -> Row:
        result: Row = {}
        representative = group[0] if group else None

        for item in stmt.columns or [SelectItem('*')]:
            expr = item.expr

            if expr == '*':
                if representative is not None:
                    result.update(representative)

            elif isinstance(expr, FunctionCall):
                if expr.name not in AGGREGATE_FUNCTIONS:
                    logger.debug("Skipping unknown function %s", expr.name)
                    continue
                name = item.alias or default_aggregate_name(expr, self.resolver)
                result[name] = self.compute(expr, group)

            elif isinstance(expr, ColumnRef):
                # Only grouped columns have a single value per group
                if representative is None or not self._is_grouped(expr, stmt.group_by):
                    continue
                value = self.resolver.lookup(representative, expr)
                name = item.alias or self.resolver.output_key(expr)
                result[name] = None if value is MISSING else value

        return result

    def _is_grouped(self, ref: ColumnRef, group_by: List[ColumnRef]) -> bool:
        column = ref.column.lower()
        qualifier = (ref.table or '').lower()
        for grouped in group_by:
            if grouped.column.lower() != column:
                continue
            if not ref.table or not grouped.table or grouped.table.lower() == qualifier:
                return True
        return False

    def compute(self, func: FunctionCall, rows: List[Row]) -> Any:
        """Compute aggregate function value"""
        arg = func.args[0] if func.args else '*'

        if func.name == 'COUNT':
            if arg == '*':
                return len(rows)
            values = [self.resolver.lookup(row, arg) for row in rows]
            values = [value for value in values if value is not None and value is not MISSING]
            if func.distinct:
                return len({stringify(value) for value in values})
            return len(values)

        numbers = []
        for row in rows:
            number = to_number(self.resolver.lookup(row, arg)) if arg != '*' else None
            if number is not None:
                numbers.append(number)

        if func.distinct:
            numbers = list(dict.fromkeys(numbers))

        if func.name == 'SUM':
            return sum(numbers)
        elif func.name == 'AVG':
            return sum(numbers) / len(numbers) if numbers else 0
        elif func.name == 'MIN':
            return min(numbers) if numbers else None
        elif func.name == 'MAX':
            return max(numbers) if numbers else None

        return None
