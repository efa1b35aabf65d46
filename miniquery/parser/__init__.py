"""Parser module - Lexer and Parser"""

from .lexer import Lexer, Token, TokenType, split_statements
from .parser import Parser, ParseError, SelectStatement, parse_query

__all__ = ['Lexer', 'Token', 'TokenType', 'split_statements', 'Parser', 'ParseError', 'SelectStatement', 'parse_query']
