"""
Turns Monkey source text into a pull-based stream of tokens.
"""
from typing import Iterator, List, Optional

from monkey.monkey_token import Token, TokenType, lookup_ident

_SINGLE_CHAR_TOKENS = {
    '=': TokenType.ASSIGN,
    '+': TokenType.PLUS,
    '-': TokenType.MINUS,
    '!': TokenType.BANG,
    '*': TokenType.ASTERISK,
    '/': TokenType.SLASH,
    '<': TokenType.LT,
    '>': TokenType.GT,
    ',': TokenType.COMMA,
    ';': TokenType.SEMICOLON,
    ':': TokenType.COLON,
    '(': TokenType.LPAREN,
    ')': TokenType.RPAREN,
    '{': TokenType.LBRACE,
    '}': TokenType.RBRACE,
    '[': TokenType.LBRACKET,
    ']': TokenType.RBRACKET,
}

_TWO_CHAR_TOKENS = {
    '==': TokenType.EQ,
    '!=': TokenType.NOT_EQ,
}

_ESCAPES = {'"': '"', '\\': '\\', 'n': '\n', 't': '\t'}


def _is_letter(ch: Optional[str]) -> bool:
    return ch is not None and (ch.isalpha() or ch == '_')


def _is_digit(ch: Optional[str]) -> bool:
    return ch is not None and '0' <= ch <= '9'


class Lexer:
    """Reads one token at a time. Iterating yields every token up to and including EOF."""

    def __init__(self, source: str):
        self.source = source
        self.position = 0
        self.line = 1
        self.col = 1

    @property
    def current_char(self) -> Optional[str]:
        if self.position >= len(self.source):
            return None
        return self.source[self.position]

    def peek_char(self) -> Optional[str]:
        nxt = self.position + 1
        if nxt >= len(self.source):
            return None
        return self.source[nxt]

    def advance(self):
        if self.current_char == '\n':
            self.line += 1
            self.col = 1
        else:
            self.col += 1
        self.position += 1

    def skip_whitespace(self):
        while self.current_char is not None and self.current_char in ' \t\r\n':
            self.advance()

    def next_token(self) -> Token:
        self.skip_whitespace()
        line, col = self.line, self.col
        ch = self.current_char

        if ch is None:
            return Token(TokenType.EOF, "", line, col)

        pair = ch + (self.peek_char() or '')
        if pair in _TWO_CHAR_TOKENS:
            self.advance()
            self.advance()
            return Token(_TWO_CHAR_TOKENS[pair], pair, line, col)

        if ch in _SINGLE_CHAR_TOKENS:
            self.advance()
            return Token(_SINGLE_CHAR_TOKENS[ch], ch, line, col)

        if ch == '"':
            return Token(TokenType.STRING, self.read_string(), line, col)

        if _is_letter(ch):
            word = self.read_while(_is_letter)
            return Token(lookup_ident(word), word, line, col)

        if _is_digit(ch):
            return Token(TokenType.INT, self.read_while(_is_digit), line, col)

        self.advance()
        return Token(TokenType.ILLEGAL, ch, line, col)

    def read_while(self, predicate) -> str:
        start = self.position
        while predicate(self.current_char):
            self.advance()
        return self.source[start:self.position]

    def read_string(self) -> str:
        # Opening quote
        self.advance()
        chars = []
        while self.current_char is not None and self.current_char != '"':
            ch = self.current_char
            if ch == '\\' and self.peek_char() in _ESCAPES:
                self.advance()
                ch = _ESCAPES[self.current_char]
            chars.append(ch)
            self.advance()
        # Closing quote; an unterminated string simply ends at EOF
        if self.current_char == '"':
            self.advance()
        return "".join(chars)

    def __iter__(self) -> Iterator[Token]:
        while True:
            tok = self.next_token()
            yield tok
            if tok.type is TokenType.EOF:
                return


def tokenize(source: str) -> List[Token]:
    """Lexes all of `source`, including the trailing EOF token."""
    return list(Lexer(source))
