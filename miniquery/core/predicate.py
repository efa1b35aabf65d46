"""
Predicate Evaluator - Decides whether a row satisfies a WHERE/HAVING predicate

Comparison rules:
- LIKE is case-insensitive; '%x%' is a substring test, '%x' a suffix test,
  'x%' a prefix test and anything else an exact match. '_' is literal.
- <, >, <=, >= compare numerically when both sides look like numbers. If a
  number is involved but the other side is not numeric the row fails;
  two non-numeric values compare as text.
- =, != compare numerically when either side is a number, otherwise as
  case-insensitive text.
- An absent or null field never satisfies a comparison (only IS NULL).
"""

from typing import Any, Dict, Optional

from .types import MISSING, FieldResolver, is_number, stringify, to_number
from ..parser.parser import BinaryOp, ColumnRef, FunctionCall, Literal, UnaryOp


def like_match(value: Any, pattern: str) -> bool:
    """SQL LIKE with '%' only at the ends of the pattern"""
    text = stringify(value).lower()
    pattern = pattern.lower()

    if len(pattern) >= 2 and pattern.startswith('%') and pattern.endswith('%'):
        return pattern[1:-1] in text
    if pattern.startswith('%'):
        return text.endswith(pattern[1:])
    if pattern.endswith('%'):
        return text.startswith(pattern[:-1])
    return text == pattern


def _is_null(value: Any) -> bool:
    return value is None or value is MISSING


class PredicateEvaluator:
    """Evaluates predicates against row data.

    ``aggregate_names`` maps an aggregate call's signature (``COUNT(*)``) to
    the column holding its value in grouped rows, so HAVING can refer to
    aggregates directly.
    """

    def __init__(self, resolver: Optional[FieldResolver] = None,
                 aggregate_names: Optional[Dict[str, str]] = None):
        self.resolver = resolver or FieldResolver()
        self.aggregate_names = aggregate_names or {}

    def matches(self, expr: Any, row: Dict[str, Any]) -> bool:
        """True if ``row`` satisfies the predicate ``expr``"""
        if isinstance(expr, UnaryOp) and expr.operator == 'NOT':
            return not self.matches(expr.operand, row)

        if not isinstance(expr, BinaryOp):
            return False

        op = expr.operator

        # Logical operators
        if op == 'AND':
            return self.matches(expr.left, row) and self.matches(expr.right, row)
        if op == 'OR':
            return self.matches(expr.left, row) or self.matches(expr.right, row)

        left = self.value_of(expr.left, row)

        if op == 'IS NULL':
            return _is_null(left)
        if op == 'IS NOT NULL':
            return not _is_null(left)

        if _is_null(left):
            return False

        if op == 'LIKE':
            return like_match(left, self.value_of(expr.right, row))

        if op == 'IN':
            return any(self._equals(left, self.value_of(item, row))
                       for item in expr.right)

        right = self.value_of(expr.right, row)
        if _is_null(right):
            return False

        if op == '=':
            return self._equals(left, right)
        if op == '!=':
            return not self._equals(left, right)

        return self._order(op, left, right)

    def value_of(self, expr: Any, row: Dict[str, Any]) -> Any:
        """Value of an operand in ``row``; MISSING when the row lacks it"""
        if isinstance(expr, Literal):
            return expr.value

        if isinstance(expr, ColumnRef):
            return self.resolver.lookup(row, expr)

        if isinstance(expr, FunctionCall):
            key = self.aggregate_names.get(expr.signature)
            if key is None or key not in row:
                return MISSING
            return row[key]

        return MISSING

    @staticmethod
    def _equals(left: Any, right: Any) -> bool:
        if is_number(left) or is_number(right):
            left_num, right_num = to_number(left), to_number(right)
            if left_num is not None and right_num is not None:
                return left_num == right_num
        return stringify(left).lower() == stringify(right).lower()

    @staticmethod
    def _order(op: str, left: Any, right: Any) -> bool:
        left_num, right_num = to_number(left), to_number(right)

        if left_num is not None and right_num is not None:
            left, right = left_num, right_num
        elif is_number(left) or is_number(right):
            # Number against something non-numeric
            return False
        else:
            left, right = stringify(left), stringify(right)

        if op == '<':
            return left < right
        if op == '>':
            return left > right
        if op == '<=':
            return left <= right
        if op == '>=':
            return left >= right
        return False
