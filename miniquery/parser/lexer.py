"""
SQL Lexer - Tokenizes SELECT queries

Turns query text into a flat token list for the parser. Keywords that appear
inside string literals stay string tokens, so they never end a clause.
Characters the dialect does not know become UNKNOWN tokens; the parser
decides what to do with them.
"""

from enum import Enum, auto
from dataclasses import dataclass
from typing import Any, List, Optional


class TokenType(Enum):
    """Types of tokens in the query dialect"""
    # Keywords (SELECT .. OFFSET)
    SELECT = auto()
    DISTINCT = auto()
    FROM = auto()
    AS = auto()
    JOIN = auto()
    INNER = auto()
    LEFT = auto()
    RIGHT = auto()
    FULL = auto()
    OUTER = auto()
    CROSS = auto()
    ON = auto()
    WHERE = auto()
    AND = auto()
    OR = auto()
    NOT = auto()
    LIKE = auto()
    IN = auto()
    BETWEEN = auto()
    IS = auto()
    NULL = auto()
    GROUP = auto()
    HAVING = auto()
    ORDER = auto()
    BY = auto()
    ASC = auto()
    DESC = auto()
    LIMIT = auto()
    OFFSET = auto()

    # Operators
    EQUALS = auto()
    NOT_EQUALS = auto()
    LESS_THAN = auto()
    GREATER_THAN = auto()
    LESS_EQUALS = auto()
    GREATER_EQUALS = auto()
    MINUS = auto()

    # Punctuation
    LPAREN = auto()
    RPAREN = auto()
    COMMA = auto()
    SEMICOLON = auto()
    DOT = auto()
    STAR = auto()

    # Literals
    INTEGER = auto()
    FLOAT = auto()
    STRING = auto()
    IDENTIFIER = auto()

    UNKNOWN = auto()
    EOF = auto()


KEYWORDS = {
    token_type.name: token_type
    for token_type in TokenType
    if token_type.value <= TokenType.OFFSET.value
}

OPERATORS = {
    '!=': TokenType.NOT_EQUALS,
    '<>': TokenType.NOT_EQUALS,
    '<=': TokenType.LESS_EQUALS,
    '>=': TokenType.GREATER_EQUALS,
    '==': TokenType.EQUALS,
    '=': TokenType.EQUALS,
    '<': TokenType.LESS_THAN,
    '>': TokenType.GREATER_THAN,
    '-': TokenType.MINUS,
    '*': TokenType.STAR,
    '(': TokenType.LPAREN,
    ')': TokenType.RPAREN,
    ',': TokenType.COMMA,
    ';': TokenType.SEMICOLON,
    '.': TokenType.DOT,
}

QUOTED_IDENTIFIERS = {'`': '`', '[': ']'}


@dataclass
class Token:
    """A single token"""
    type: TokenType
    value: Any
    line: int
    column: int

    def __repr__(self):
        return f"Token({self.type.name}, {self.value!r})"


class Lexer:
    """Converts query text to tokens"""

    def __init__(self, text: str):
        self.text = text
        self.pos = 0
        self.line = 1
        self.column = 1

    @property
    def _char(self) -> Optional[str]:
        return self.text[self.pos] if self.pos < len(self.text) else None

    def _lookahead(self, length: int) -> str:
        return self.text[self.pos:self.pos + length]

    def _advance(self, count: int = 1) -> str:
        """Consume ``count`` characters and return them"""
        consumed = self.text[self.pos:self.pos + count]
        for char in consumed:
            if char == '\n':
                self.line += 1
                self.column = 1
            else:
                self.column += 1
        self.pos += len(consumed)
        return consumed

    def _skip_ignored(self) -> None:
        """Skip whitespace, -- line comments and /* block */ comments"""
        while self._char is not None:
            if self._char.isspace():
                self._advance()
            elif self._lookahead(2) == '--':
                end = self.text.find('\n', self.pos)
                self._advance((len(self.text) if end < 0 else end) - self.pos)
            elif self._lookahead(2) == '/*':
                end = self.text.find('*/', self.pos + 2)
                self._advance((len(self.text) if end < 0 else end + 2) - self.pos)
            else:
                return

    def _read_string(self) -> str:
        """String body; '' or a backslash escape the quote character"""
        quote = self._advance()
        chars = []
        while self._char is not None:
            if self._lookahead(2) in (quote * 2, '\\' + quote):
                self._advance()
                chars.append(self._advance())
            elif self._char == quote:
                self._advance()
                break
            else:
                chars.append(self._advance())
        return ''.join(chars)

    def _read_number(self) -> Any:
        start = self.pos
        while self._char is not None and self._char.isdecimal():
            self._advance()
        if self._char == '.' and self._lookahead(2)[1:].isdecimal():
            self._advance()
            while self._char is not None and self._char.isdecimal():
                self._advance()
            return float(self.text[start:self.pos])
        return int(self.text[start:self.pos])

    def _read_word(self) -> str:
        start = self.pos
        while self._char is not None and (self._char.isalnum() or self._char == '_'):
            self._advance()
        return self.text[start:self.pos]

    def _read_quoted_identifier(self) -> str:
        close = QUOTED_IDENTIFIERS[self._advance()]
        end = self.text.find(close, self.pos)
        name = self._advance((len(self.text) if end < 0 else end) - self.pos)
        self._advance(len(close) if end >= 0 else 0)
        return name

    def next_token(self) -> Token:
        """Scan the next token (EOF at the end of input)"""
        self._skip_ignored()
        line, column = self.line, self.column
        char = self._char

        if char is None:
            return Token(TokenType.EOF, None, line, column)

        if char in '\'"':
            return Token(TokenType.STRING, self._read_string(), line, column)

        if char in QUOTED_IDENTIFIERS:
            return Token(TokenType.IDENTIFIER, self._read_quoted_identifier(), line, column)

        if char.isdecimal() or (char == '.' and self._lookahead(2)[1:].isdecimal()):
            number = self._read_number()
            token_type = TokenType.FLOAT if isinstance(number, float) else TokenType.INTEGER
            return Token(token_type, number, line, column)

        if char.isalpha() or char == '_':
            word = self._read_word()
            keyword = KEYWORDS.get(word.upper())
            if keyword is not None:
                return Token(keyword, word.upper(), line, column)
            return Token(TokenType.IDENTIFIER, word, line, column)

        for length in (2, 1):
            symbol = self._lookahead(length)
            if len(symbol) == length and symbol in OPERATORS:
                self._advance(length)
                return Token(OPERATORS[symbol], symbol, line, column)

        return Token(TokenType.UNKNOWN, self._advance(), line, column)

    def tokenize(self) -> List[Token]:
        """Tokenize the entire input; the list always ends with EOF"""
        tokens = [self.next_token()]
        while tokens[-1].type != TokenType.EOF:
            tokens.append(self.next_token())
        return tokens


def split_statements(text: str) -> List[str]:
    """Split a script on ';' tokens, so semicolons inside strings or comments stay put"""
    lexer = Lexer(text)
    statements = []
    start, has_tokens = 0, False

    while True:
        token = lexer.next_token()
        if token.type in (TokenType.SEMICOLON, TokenType.EOF):
            end = lexer.pos - 1 if token.type == TokenType.SEMICOLON else lexer.pos
            if has_tokens:
                statements.append(text[start:end].strip())
            if token.type == TokenType.EOF:
                return statements
            start, has_tokens = lexer.pos, False
        else:
            has_tokens = True
