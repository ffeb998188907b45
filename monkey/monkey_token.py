"""
Token taxonomy shared by the lexer and the parser.
"""
from dataclasses import dataclass
from enum import Enum


class TokenType(Enum):
    ILLEGAL = "ILLEGAL"
    EOF = "EOF"

    # Identifiers and literals
    IDENT = "IDENT"
    INT = "INT"
    STRING = "STRING"

    # Operators
    ASSIGN = "="
    PLUS = "+"
    MINUS = "-"
    BANG = "!"
    ASTERISK = "*"
    SLASH = "/"
    LT = "<"
    GT = ">"
    EQ = "=="
    NOT_EQ = "!="

    # Delimiters
    COMMA = ","
    SEMICOLON = ";"
    COLON = ":"
    LPAREN = "("
    RPAREN = ")"
    LBRACE = "{"
    RBRACE = "}"
    LBRACKET = "["
    RBRACKET = "]"

    # Keywords
    FUNCTION = "FUNCTION"
    LET = "LET"
    TRUE = "TRUE"
    FALSE = "FALSE"
    IF = "IF"
    ELSE = "ELSE"
    RETURN = "RETURN"


KEYWORDS = {
    "fn": TokenType.FUNCTION,
    "let": TokenType.LET,
    "true": TokenType.TRUE,
    "false": TokenType.FALSE,
    "if": TokenType.IF,
    "else": TokenType.ELSE,
    "return": TokenType.RETURN,
}


@dataclass(frozen=True)
class Token:
    """A single lexeme. `line` and `col` are 1-based and only used for diagnostics."""
    type: TokenType
    literal: str
    line: int = 0
    col: int = 0

    def loc(self) -> dict:
        return {'line': self.line, 'col': self.col, 'tag': self.type.value, 'text': self.literal}


def lookup_ident(word: str) -> TokenType:
    """Returns the keyword type for `word`, or IDENT."""
    return KEYWORDS.get(word, TokenType.IDENT)
