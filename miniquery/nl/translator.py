"""
Natural language to query translation.

Questions are matched against an ordered catalogue of regular expressions;
the first rule that matches renders the query. When no rule matches, a few
keyword checks cover common questions about the sample tables, and the last
resort is a plain ``SELECT * ... LIMIT 100``.

Translation never fails: every input produces a SELECT query with a table.
Captured column words are mapped to real columns where the vocabulary knows
them and reduced to identifier characters otherwise (backtick-quoted when
the word is a keyword); quotes are removed from captured values.
"""

import logging
import re
from dataclasses import dataclass
from re import Match, Pattern
from typing import Callable, Optional

from ..parser.lexer import KEYWORDS
from .vocabulary import detect_column, detect_table

logger = logging.getLogger(__name__)

DEFAULT_TABLE = 'customers'
DEFAULT_LIMIT = 100

IDENTIFIER = re.compile(r'^[A-Za-z_][A-Za-z0-9_]*$')


@dataclass(frozen=True)
class TranslationRule:
    """A question pattern and the query it renders"""
    name: str
    pattern: Pattern
    render: Callable[[Match, Optional[str]], str]

    def apply(self, text: str, table_hint: Optional[str]) -> Optional[str]:
        match = self.pattern.search(text)
        if match is None:
            return None
        return self.render(match, table_hint)


def _rule(name: str, pattern: str, render: Callable[[Match, Optional[str]], str]) -> TranslationRule:
    return TranslationRule(name, re.compile(pattern, re.IGNORECASE), render)


def _table(text: str, table_hint: Optional[str], default: str = DEFAULT_TABLE) -> str:
    return table_hint or detect_table(text) or default


def _column(table: str, text: str) -> str:
    column = detect_column(table, text)
    if column:
        return column
    column = re.sub(r'\W+', '_', text.strip()).strip('_').lower()
    if not IDENTIFIER.match(column):
        return 'id'
    # Words like "order" or "limit" would end the clause unquoted
    return f"`{column}`" if column.upper() in KEYWORDS else column


def _value(text: str) -> str:
    return re.sub(r"['\"\\]", '', text).strip()


# ============================================================================
# Renderers
# ============================================================================

def _names_by_order_count(match: Match, table_hint: Optional[str]) -> str:
    return f"SELECT name FROM customers WHERE orders >= {match.group(1)}"


def _show_all(match: Match, table_hint: Optional[str]) -> str:
    return f"SELECT * FROM {_table(match.group(1), table_hint)} LIMIT {DEFAULT_LIMIT}"


def _filter_equals(match: Match, table_hint: Optional[str]) -> str:
    table = _table(match.group(1), table_hint)
    column = _column(table, match.group(2))
    return f"SELECT * FROM {table} WHERE {column} = '{_value(match.group(3))}' LIMIT {DEFAULT_LIMIT}"


def _filter_contains(match: Match, table_hint: Optional[str]) -> str:
    table = _table(match.group(1), table_hint)
    column = _column(table, match.group(2))
    return f"SELECT * FROM {table} WHERE {column} LIKE '%{_value(match.group(3))}%' LIMIT {DEFAULT_LIMIT}"


def _filter_starts_with(match: Match, table_hint: Optional[str]) -> str:
    table = _table(match.group(1), table_hint)
    column = _column(table, match.group(2))
    return f"SELECT * FROM {table} WHERE {column} LIKE '{_value(match.group(3))}%' LIMIT {DEFAULT_LIMIT}"


def _filter_greater_than(match: Match, table_hint: Optional[str]) -> str:
    table = _table(match.group(1), table_hint)
    column = _column(table, match.group(2))
    return (f"SELECT * FROM {table} WHERE {column} > {match.group(3)} "
            f"ORDER BY {column} DESC LIMIT {DEFAULT_LIMIT}")


def _filter_less_than(match: Match, table_hint: Optional[str]) -> str:
    table = _table(match.group(1), table_hint)
    column = _column(table, match.group(2))
    return (f"SELECT * FROM {table} WHERE {column} < {match.group(3)} "
            f"ORDER BY {column} ASC LIMIT {DEFAULT_LIMIT}")


def _sort(direction: str) -> Callable[[Match, Optional[str]], str]:
    def render(match: Match, table_hint: Optional[str]) -> str:
        table = _table(match.group(1), table_hint)
        column = _column(table, match.group(2))
        return f"SELECT * FROM {table} ORDER BY {column} {direction} LIMIT {DEFAULT_LIMIT}"
    return render


def _orders_at_least(match: Match, table_hint: Optional[str]) -> str:
    table = _table(match.group(1), table_hint)
    return f"SELECT * FROM {table} WHERE orders >= {match.group(2)} ORDER BY orders DESC LIMIT {DEFAULT_LIMIT}"


def _name_search(match: Match, table_hint: Optional[str]) -> str:
    table = _table(match.group(1), table_hint)
    value = _value(match.group(2))
    phrase = match.group(0).lower()
    if 'starts with' in phrase or 'begins with' in phrase:
        return f"SELECT * FROM {table} WHERE name LIKE '{value}%' LIMIT {DEFAULT_LIMIT}"
    return f"SELECT * FROM {table} WHERE name LIKE '%{value}%' LIMIT {DEFAULT_LIMIT}"


def _name_starts_with(match: Match, table_hint: Optional[str]) -> str:
    table = _table(match.group(1), table_hint)
    return f"SELECT * FROM {table} WHERE name LIKE '{_value(match.group(2))}%' LIMIT {DEFAULT_LIMIT}"


def _status_equals(match: Match, table_hint: Optional[str]) -> str:
    table = _table(match.group(1), table_hint, default='orders')
    return (f"SELECT * FROM {table} WHERE status = '{_value(match.group(2))}' "
            f"ORDER BY date DESC LIMIT {DEFAULT_LIMIT}")


def _count(match: Match, table_hint: Optional[str]) -> str:
    return f"SELECT COUNT(*) as count FROM {_table(match.group(1), table_hint)}"


def _big_spenders(match: Match, table_hint: Optional[str]) -> str:
    amount = re.search(r'(\d+(?:\.\d+)?)', match.string)
    return (f"SELECT * FROM customers WHERE total_spent > {amount.group(1) if amount else 100} "
            f"ORDER BY total_spent DESC LIMIT 10")


def _fixed(query: str) -> Callable[[Match, Optional[str]], str]:
    return lambda match, table_hint: query


# ============================================================================
# Rule catalogue (order matters: first match wins)
# ============================================================================

_VERB = r'(?:find|show|get|list)'
_FILTER_HEAD = _VERB + r' (?:me |all |)(.+?) (?:where|with) (.+?) '
_END = r'(?:\s|$|\.)'

RULES = (
    _rule('names_by_order_count',
          r"(?:select|show|get|list|find) (?:the |)(?:customer |)(?:name|names)(?:s|) "
          r"(?:from |of |in |)(?:all |)(?:the |)(?:customer|customers|client|clients)(?:s|) "
          r"(?:where |with |that |who |)(?:have |has |)(?:the |)(?:number of |)order(?:s|) "
          r"(?:is |are |)(?:greater than|more than|over|above|>=|>|equal to|=) (\d+)" + _END,
          _names_by_order_count),
    _rule('show_all',
          r"show (?:me |all |)(?:the |)(.+?)(?:\s|$)",
          _show_all),
    _rule('filter_equals',
          _FILTER_HEAD + r"(?:is|=|equals|equal to) ['\"]?(.+?)['\"]?" + _END,
          _filter_equals),
    _rule('filter_contains',
          _FILTER_HEAD + r"(?:contains|includes|has) ['\"]?(.+?)['\"]?" + _END,
          _filter_contains),
    _rule('filter_starts_with',
          _FILTER_HEAD + r"(?:starts with|begins with) ['\"]?(.+?)['\"]?" + _END,
          _filter_starts_with),
    _rule('filter_greater_than',
          _FILTER_HEAD + r"(?:is |)(?:greater than|more than|over|above|>|higher than) (\d+(?:\.\d+)?)" + _END,
          _filter_greater_than),
    _rule('filter_less_than',
          _FILTER_HEAD + r"(?:is |)(?:less than|under|below|<|lower than) (\d+(?:\.\d+)?)" + _END,
          _filter_less_than),
    _rule('sort_ascending',
          r"(?:find|show|get|list|sort|order) (?:me |all |)(.+?) (?:by|ordered by|sorted by) (.+?) "
          r"(?:in |)(?:ascending|asc|increasing)" + _END,
          _sort('ASC')),
    _rule('sort_descending',
          r"(?:find|show|get|list|sort|order) (?:me |all |)(.+?) (?:by|ordered by|sorted by) (.+?) "
          r"(?:in |)(?:descending|desc|decreasing)" + _END,
          _sort('DESC')),
    _rule('orders_at_least',
          _VERB + r" (?:me |all |)(?:the |)(.+?) (?:where|with) (?:number of |)orders(?: is| are|) "
          r"(?:greater than|more than|over|above|>|at least) (\d+)" + _END,
          _orders_at_least),
    _rule('name_search',
          _VERB + r" (?:me |all |)(.+?) (?:with|where) (?:the |)name "
          r"(?:is|=|equals|contains|includes|has|starts with|begins with) ['\"]?(.+?)['\"]?" + _END,
          _name_search),
    _rule('status_equals',
          _VERB + r" (?:me |all |)(.+?) (?:with|where) (?:the |)status (?:is|=|equals) ['\"]?(.+?)['\"]?" + _END,
          _status_equals),
    _rule('count',
          r"(?:count|how many) (.+?) (?:are there|do we have|exist)" + _END,
          _count),
)

FALLBACK_RULES = (
    _rule('name_starts_with',
          _VERB + r" (?:me |all |)(.+?) (?:with|where) (?:the |)name (?:starts with|beginning with) "
          r"['\"]?(.+?)['\"]?" + _END,
          _name_starts_with),
    _rule('customer_spending', r"^(?=[\s\S]*customer)(?=[\s\S]*spent)", _big_spenders),
    _rule('low_stock_products', r"^(?=[\s\S]*product)(?=[\s\S]*stock)",
          _fixed("SELECT * FROM products WHERE stock < 50 ORDER BY stock ASC LIMIT 100")),
    _rule('completed_orders', r"^(?=[\s\S]*completed)(?=[\s\S]*order)",
          _fixed("SELECT * FROM orders WHERE status = 'completed' ORDER BY date DESC LIMIT 100")),
    _rule('electronics', r"electronics",
          _fixed("SELECT * FROM products WHERE category = 'Electronics' ORDER BY price DESC LIMIT 100")),
)


def translate_natural_language(text: str, table_hint: Optional[str] = None) -> str:
    """Translate a free-text question into a SELECT query.

    ``table_hint`` (the table currently selected in the explorer) takes
    precedence over tables detected in the question. A hint that is not a
    plain identifier is ignored.
    """
    question = (text or '').strip()
    hint = table_hint.strip() if table_hint else None
    if hint and not IDENTIFIER.match(hint):
        logger.warning("Ignoring invalid table hint %r", table_hint)
        hint = None

    for rule in RULES + FALLBACK_RULES:
        query = rule.apply(question, hint)
        if query:
            logger.debug("Rule %s matched %r: %s", rule.name, question, query)
            return query

    if hint:
        return f"SELECT * FROM {hint} LIMIT {DEFAULT_LIMIT}"

    logger.debug("No rule matched %r, using default query", question)
    return f"SELECT * FROM {DEFAULT_TABLE} LIMIT {DEFAULT_LIMIT}"
