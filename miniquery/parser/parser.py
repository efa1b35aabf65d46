"""
Query Parser - Converts tokens into a SelectStatement AST

Uses recursive descent parsing. Clauses are read in a fixed order
(SELECT, FROM, JOIN, WHERE, GROUP BY, HAVING, ORDER BY, LIMIT/OFFSET),
so each clause ends where the next one starts.

A statement that is not a SELECT or has no FROM table is rejected, as is
any JOIN other than a single two-table equi-join. Anything else that fails
to parse is dropped clause by clause and recorded in
``SelectStatement.ignored_clauses``.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional
from enum import Enum, auto

from .lexer import Lexer, Token, TokenType
from ..core.errors import MissingTable, UnsupportedJoinCondition, UnsupportedQueryKind

logger = logging.getLogger(__name__)


# ============================================================================
# AST Node Types
# ============================================================================

AGGREGATE_FUNCTIONS = ('COUNT', 'SUM', 'AVG', 'MIN', 'MAX')


class JoinType(Enum):
    INNER = auto()
    LEFT = auto()


class OrderDirection(Enum):
    ASC = auto()
    DESC = auto()


@dataclass
class ColumnRef:
    """Reference to a column, optionally qualified with a table name or alias"""
    column: str
    table: Optional[str] = None

    def __str__(self) -> str:
        if self.table:
            return f"{self.table}.{self.column}"
        return self.column

    def belongs_to(self, table: "TableRef") -> bool:
        """True if the qualifier names ``table`` by name or alias"""
        if not self.table:
            return False
        return self.table.lower() in (table.name.lower(), (table.alias or "").lower())


@dataclass
class Literal:
    """A literal value"""
    value: Any


@dataclass
class BinaryOp:
    """Comparison, LIKE, IN or AND/OR; ``right`` is a list for IN and None for IS [NOT] NULL"""
    left: Any
    operator: str
    right: Any


@dataclass
class UnaryOp:
    """Unary operation (NOT x)"""
    operator: str
    operand: Any


@dataclass
class FunctionCall:
    """Aggregate function call"""
    name: str
    args: List[Any]
    distinct: bool = False

    @property
    def signature(self) -> str:
        """Canonical text used to match the same call in SELECT, HAVING and ORDER BY"""
        args = ', '.join(str(arg).lower() for arg in self.args)
        if self.distinct:
            args = f"distinct {args}"
        return f"{self.name.upper()}({args})"


@dataclass
class SelectItem:
    """One entry of the SELECT list: '*', a column, a literal or an aggregate"""
    expr: Any
    alias: Optional[str] = None


@dataclass
class TableRef:
    """FROM or JOIN table with its optional alias"""
    name: str
    alias: Optional[str] = None

    @property
    def reference(self) -> str:
        return self.alias or self.name


@dataclass
class JoinClause:
    """JOIN clause reduced to its equi-join columns.

    ``left`` always belongs to the FROM table and ``right`` to the joined one,
    whatever order the ON condition names them in.
    """
    table: TableRef
    join_type: JoinType
    left: ColumnRef
    right: ColumnRef


@dataclass
class OrderByItem:
    """ORDER BY item"""
    expr: Any
    direction: OrderDirection = OrderDirection.ASC


@dataclass
class SelectStatement:
    """SELECT statement"""
    columns: List[SelectItem]
    from_table: Optional[TableRef] = None
    joins: List[JoinClause] = field(default_factory=list)
    where: Optional[Any] = None
    group_by: List[ColumnRef] = field(default_factory=list)
    having: Optional[Any] = None
    order_by: List[OrderByItem] = field(default_factory=list)
    limit: Optional[int] = None
    offset: Optional[int] = None
    distinct: bool = False
    ignored_clauses: List[str] = field(default_factory=list)


# ============================================================================
# Parser
# ============================================================================

class ParseError(Exception):
    """A token the grammar did not expect; carries the token for its position"""
    def __init__(self, message: str, token: Token):
        self.token = token
        super().__init__(f"{message} at line {token.line}, column {token.column}")


CLAUSE_BOUNDARY = (
    TokenType.GROUP, TokenType.HAVING, TokenType.ORDER, TokenType.LIMIT,
    TokenType.OFFSET, TokenType.SEMICOLON, TokenType.EOF,
)

JOIN_START = (
    TokenType.JOIN, TokenType.INNER, TokenType.LEFT, TokenType.RIGHT,
    TokenType.FULL, TokenType.CROSS,
)

COMPARISON_OPERATORS = {
    TokenType.EQUALS: '=',
    TokenType.NOT_EQUALS: '!=',
    TokenType.LESS_THAN: '<',
    TokenType.GREATER_THAN: '>',
    TokenType.LESS_EQUALS: '<=',
    TokenType.GREATER_EQUALS: '>=',
}

NEGATABLE = (TokenType.LIKE, TokenType.IN, TokenType.BETWEEN)

CLAUSE_NAMES = {
    TokenType.WHERE: 'WHERE',
    TokenType.GROUP: 'GROUP BY',
    TokenType.HAVING: 'HAVING',
    TokenType.ORDER: 'ORDER BY',
    TokenType.LIMIT: 'LIMIT',
    TokenType.OFFSET: 'OFFSET',
}


class Parser:
    """
    Recursive descent parser for SELECT queries.

    Grammar (lowest to highest precedence inside predicates):

        predicate  := conjunction (OR conjunction)*
        conjunction:= negation (AND negation)*
        negation   := NOT negation | comparison
        comparison := '(' predicate ')'
                    | operand IS [NOT] NULL
                    | operand (= | != | < | > | <= | >=) operand
                    | operand [NOT] (LIKE 'pattern' | IN (operands) | BETWEEN operand AND operand)
        operand    := [-]number | 'string' | NULL | column | table.column | AGG([DISTINCT] col | *)
    """

    def __init__(self, tokens: List[Token]):
        self.tokens = tokens
        self.pos = 0
        self.ignored_clauses: List[str] = []

    # -- token cursor -------------------------------------------------------

    @property
    def current(self) -> Token:
        return self.tokens[min(self.pos, len(self.tokens) - 1)]

    def _lookahead_type(self, offset: int = 1) -> TokenType:
        return self.tokens[min(self.pos + offset, len(self.tokens) - 1)].type

    def _at(self, *types: TokenType) -> bool:
        return self.current.type in types

    def _next(self) -> Token:
        token = self.current
        if token.type != TokenType.EOF:
            self.pos += 1
        return token

    def _accept(self, token_type: TokenType) -> bool:
        if self._at(token_type):
            self._next()
            return True
        return False

    def _require(self, token_type: TokenType, message: Optional[str] = None) -> Token:
        if not self._at(token_type):
            raise ParseError(message or f"Expected {token_type.name}", self.current)
        return self._next()

    def _skip_to(self, *types: TokenType) -> None:
        """Skip tokens until one of ``types`` is found outside parentheses"""
        depth = 0
        while not self._at(TokenType.EOF) and not (depth == 0 and self._at(*types)):
            if self._at(TokenType.LPAREN):
                depth += 1
            elif self._at(TokenType.RPAREN):
                depth = max(depth - 1, 0)
            self._next()

    def _comma_separated(self, parse_item: Callable[[], Any]) -> List[Any]:
        items = [parse_item()]
        while self._accept(TokenType.COMMA):
            items.append(parse_item())
        return items

    def _ignore(self, clause: str, reason: Any) -> None:
        logger.warning("Ignoring %s clause: %s", clause, reason)
        self.ignored_clauses.append(clause)

    # -- statement ----------------------------------------------------------

    def parse(self) -> SelectStatement:
        """Parse a single SELECT statement"""
        if not self._at(TokenType.SELECT):
            raise UnsupportedQueryKind()

        join_count = sum(1 for token in self.tokens if token.type == TokenType.JOIN)
        if join_count > 1:
            raise UnsupportedJoinCondition("Only a single two-table JOIN is supported")

        stmt = self._parse_select()
        if len(stmt.joins) != join_count:
            raise UnsupportedJoinCondition("JOIN must directly follow the FROM table")

        stmt.ignored_clauses = self.ignored_clauses
        return stmt

    def _parse_select(self) -> SelectStatement:
        self._require(TokenType.SELECT)
        stmt = SelectStatement(columns=[], distinct=self._accept(TokenType.DISTINCT))
        stmt.columns = self._parse_select_columns()

        if not self._accept(TokenType.FROM) or not self._at(TokenType.IDENTIFIER):
            raise MissingTable()
        stmt.from_table = self._parse_table_ref()

        if self._at(*JOIN_START):
            stmt.joins.append(self._parse_join(stmt.from_table))

        if not self._at(TokenType.WHERE, *CLAUSE_BOUNDARY):
            self._ignore('FROM', f"unexpected {self.current.value!r} after table name")
            self._skip_to(TokenType.WHERE, *CLAUSE_BOUNDARY)

        clauses = (
            (TokenType.WHERE, 'WHERE', 'where', self._parse_predicate, None),
            (TokenType.GROUP, 'GROUP BY', 'group_by', self._parse_group_by, []),
            (TokenType.HAVING, 'HAVING', 'having', self._parse_predicate, None),
            (TokenType.ORDER, 'ORDER BY', 'order_by', self._parse_order_by, []),
        )
        for keyword, name, attr, parse_fn, default in clauses:
            if self._accept(keyword):
                setattr(stmt, attr, self._parse_clause(name, parse_fn, default))

        # LIMIT and OFFSET in either order, each at most once
        row_counts = {TokenType.LIMIT: 'limit', TokenType.OFFSET: 'offset'}
        while self._at(*row_counts):
            keyword = self._next().type
            setattr(stmt, row_counts.pop(keyword), self._parse_row_count(keyword.name))

        self._accept(TokenType.SEMICOLON)
        if not self._at(TokenType.EOF):
            clause = CLAUSE_NAMES.get(self.current.type, 'trailing input')
            self._ignore(clause, f"out of place at {self.current.value!r}")

        return stmt

    def _parse_clause(self, name: str, parse_fn: Callable[[], Any], default: Any = None) -> Any:
        """Run ``parse_fn``; drop the clause instead of failing when it cannot be parsed"""
        try:
            result = parse_fn()
        except ParseError as e:
            self._ignore(name, e)
            self._skip_to(*CLAUSE_BOUNDARY)
            return default

        if not self._at(*CLAUSE_BOUNDARY):
            logger.warning("Ignoring trailing tokens in %s clause near %r", name, self.current.value)
            self._skip_to(*CLAUSE_BOUNDARY)

        return result

    def _parse_row_count(self, clause: str) -> Optional[int]:
        """The number after LIMIT/OFFSET; anything else means no limit"""
        if self._at(TokenType.INTEGER):
            return self._next().value
        self._ignore(clause, f"expected a row count, got {self.current.value!r}")
        self._skip_to(TokenType.LIMIT, TokenType.OFFSET, TokenType.SEMICOLON)
        return None

    # -- select list and tables ---------------------------------------------

    def _parse_select_columns(self) -> List[SelectItem]:
        """SELECT list; items that do not parse are left out"""
        if self._at(TokenType.FROM):
            return []

        items = [item for item in self._comma_separated(self._parse_select_item) if item is not None]
        self._skip_to(TokenType.FROM)
        return items

    def _parse_select_item(self) -> Optional[SelectItem]:
        if self._accept(TokenType.STAR):
            return SelectItem('*')

        try:
            expr = self._parse_operand()
            alias = None
            if self._accept(TokenType.AS):
                if not self._at(TokenType.IDENTIFIER, TokenType.STRING):
                    raise ParseError("Expected alias after AS", self.current)
                alias = self._next().value
            elif self._at(TokenType.IDENTIFIER):
                alias = self._next().value

            if not self._at(TokenType.COMMA, TokenType.FROM, TokenType.EOF):
                raise ParseError("Unexpected token in select list", self.current)
        except ParseError as e:
            logger.warning("Skipping select item: %s", e)
            self._skip_to(TokenType.COMMA, TokenType.FROM)
            return None

        return SelectItem(expr, alias)

    def _parse_table_ref(self) -> TableRef:
        """Table name with an optional [AS] alias"""
        name = self._require(TokenType.IDENTIFIER).value
        self._accept(TokenType.AS)
        alias = self._next().value if self._at(TokenType.IDENTIFIER) else None
        return TableRef(name, alias)

    def _parse_join(self, from_table: TableRef) -> JoinClause:
        """A single equi-join: [INNER | LEFT [OUTER]] JOIN t ON a.x = b.y"""
        if self._at(TokenType.RIGHT, TokenType.FULL, TokenType.CROSS):
            raise UnsupportedJoinCondition(
                f"{self.current.value} JOIN is not supported; use JOIN or LEFT JOIN")

        join_type = JoinType.INNER
        if self._accept(TokenType.LEFT):
            self._accept(TokenType.OUTER)
            join_type = JoinType.LEFT
        else:
            self._accept(TokenType.INNER)

        if not self._accept(TokenType.JOIN) or not self._at(TokenType.IDENTIFIER):
            raise UnsupportedJoinCondition("JOIN must name a table")
        table = self._parse_table_ref()

        if not self._accept(TokenType.ON):
            raise UnsupportedJoinCondition("JOIN requires an ON a.column = b.column condition")

        try:
            first = self._parse_qualified_column()
            if not self._accept(TokenType.EQUALS):
                raise UnsupportedJoinCondition("Only equality join conditions are supported")
            second = self._parse_qualified_column()
        except ParseError as e:
            raise UnsupportedJoinCondition(f"Invalid JOIN condition: {e}") from e

        if not self._at(TokenType.WHERE, *CLAUSE_BOUNDARY):
            raise UnsupportedJoinCondition("JOIN condition must be a single column equality")

        if first.belongs_to(from_table) and second.belongs_to(table):
            return JoinClause(table, join_type, left=first, right=second)
        if second.belongs_to(from_table) and first.belongs_to(table):
            return JoinClause(table, join_type, left=second, right=first)
        raise UnsupportedJoinCondition(
            f"JOIN condition must compare {from_table.reference} with {table.reference}")

    def _parse_qualified_column(self) -> ColumnRef:
        table = self._require(TokenType.IDENTIFIER, "Expected table.column").value
        self._require(TokenType.DOT, "Expected table.column")
        return ColumnRef(self._require(TokenType.IDENTIFIER, "Expected table.column").value, table)

    # -- GROUP BY / ORDER BY ------------------------------------------------

    def _parse_group_by(self) -> List[ColumnRef]:
        self._require(TokenType.BY)
        return self._comma_separated(self._parse_group_column)

    def _parse_group_column(self) -> ColumnRef:
        expr = self._parse_operand()
        if not isinstance(expr, ColumnRef):
            raise ParseError("GROUP BY expects column names", self.current)
        return expr

    def _parse_order_by(self) -> List[OrderByItem]:
        self._require(TokenType.BY)
        return self._comma_separated(self._parse_order_item)

    def _parse_order_item(self) -> OrderByItem:
        expr = self._parse_operand()
        if not isinstance(expr, (ColumnRef, FunctionCall)):
            raise ParseError("ORDER BY expects a column or aggregate", self.current)
        direction = OrderDirection.ASC
        if self._at(TokenType.ASC, TokenType.DESC):
            direction = OrderDirection[self._next().type.name]
        return OrderByItem(expr, direction)

    # -- predicates ---------------------------------------------------------

    def _parse_predicate(self) -> Any:
        """WHERE/HAVING body; it must be a boolean test, not a bare value"""
        start = self.current
        expr = self._parse_logical(TokenType.OR, self._parse_conjunction)
        if not self._is_predicate(expr):
            raise ParseError("Unsupported predicate", start)
        return expr

    @classmethod
    def _is_predicate(cls, expr: Any) -> bool:
        if isinstance(expr, BinaryOp):
            if expr.operator in ('AND', 'OR'):
                return cls._is_predicate(expr.left) and cls._is_predicate(expr.right)
            return True
        if isinstance(expr, UnaryOp):
            return cls._is_predicate(expr.operand)
        return False

    def _parse_logical(self, operator: TokenType, parse_operand: Callable[[], Any]) -> Any:
        expr = parse_operand()
        while self._accept(operator):
            expr = BinaryOp(expr, operator.name, parse_operand())
        return expr

    def _parse_conjunction(self) -> Any:
        return self._parse_logical(TokenType.AND, self._parse_negation)

    def _parse_negation(self) -> Any:
        if self._accept(TokenType.NOT):
            return UnaryOp('NOT', self._parse_negation())
        return self._parse_comparison()

    def _parse_comparison(self) -> Any:
        if self._accept(TokenType.LPAREN):
            expr = self._parse_logical(TokenType.OR, self._parse_conjunction)
            self._require(TokenType.RPAREN)
            return expr

        left = self._parse_operand()

        if self._accept(TokenType.IS):
            operator = 'IS NOT NULL' if self._accept(TokenType.NOT) else 'IS NULL'
            self._require(TokenType.NULL)
            return BinaryOp(left, operator, None)

        if self.current.type in COMPARISON_OPERATORS:
            operator = COMPARISON_OPERATORS[self._next().type]
            return BinaryOp(left, operator, self._parse_operand())

        negated = self._at(TokenType.NOT) and self._lookahead_type() in NEGATABLE
        if negated:
            self._next()

        if self._accept(TokenType.BETWEEN):
            low = self._parse_operand()
            self._require(TokenType.AND)
            high = self._parse_operand()
            expr = BinaryOp(BinaryOp(left, '>=', low), 'AND', BinaryOp(left, '<=', high))
        elif self._accept(TokenType.LIKE):
            pattern = self._require(TokenType.STRING, "LIKE expects a quoted pattern").value
            expr = BinaryOp(left, 'LIKE', Literal(pattern))
        elif self._accept(TokenType.IN):
            self._require(TokenType.LPAREN)
            values = self._comma_separated(self._parse_operand)
            self._require(TokenType.RPAREN)
            expr = BinaryOp(left, 'IN', values)
        else:
            return left

        return UnaryOp('NOT', expr) if negated else expr

    def _parse_operand(self) -> Any:
        """A column reference, literal or aggregate call"""
        if self._accept(TokenType.MINUS):
            if not self._at(TokenType.INTEGER, TokenType.FLOAT):
                raise ParseError("Expected number after '-'", self.current)
            return Literal(-self._next().value)

        if self._at(TokenType.INTEGER, TokenType.FLOAT, TokenType.STRING):
            return Literal(self._next().value)
        if self._accept(TokenType.NULL):
            return Literal(None)

        if not self._at(TokenType.IDENTIFIER):
            raise ParseError(f"Unexpected token {self.current.value!r}", self.current)

        if self._lookahead_type() == TokenType.LPAREN:
            return self._parse_function_call()

        name = self._next().value
        if self._accept(TokenType.DOT):
            return ColumnRef(self._require(TokenType.IDENTIFIER, "Expected column after '.'").value, name)
        return ColumnRef(name)

    def _parse_function_call(self) -> FunctionCall:
        name = self._next().value.upper()
        self._require(TokenType.LPAREN)
        distinct = self._accept(TokenType.DISTINCT)

        if self._accept(TokenType.STAR):
            args = ['*']
        else:
            arg = self._parse_operand()
            if not isinstance(arg, ColumnRef):
                raise ParseError(f"{name} expects a column name", self.current)
            args = [arg]

        self._require(TokenType.RPAREN)
        return FunctionCall(name, args, distinct)


def parse_query(query: str) -> SelectStatement:
    """Tokenize and parse a query string"""
    return Parser(Lexer(query or '').tokenize()).parse()
