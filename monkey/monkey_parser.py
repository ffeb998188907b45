"""
A Pratt (precedence-climbing) parser that turns a token stream into a
`Program`.

The parser never raises on malformed input. Each problem is recorded in
`Parser.errors` (with the offending token in `Parser.error_tokens`) and the
construct being parsed yields `None`, so parsing carries on with the next
statement.
"""
from enum import IntEnum
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Tuple

from monkey.monkey_token import Token, TokenType
from monkey.monkey_datatypes import INT64_MAX
from monkey.monkey_ast import (
    Program, Statement, Expression, LetStatement, ReturnStatement,
    ExpressionStatement, BlockStatement, Identifier, IntegerLiteral, Boolean,
    StringLiteral, PrefixExpression, InfixExpression, IfExpression,
    FunctionLiteral, CallExpression, ArrayLiteral, IndexExpression, HashLiteral,
)


class Precedence(IntEnum):
    LOWEST = 1
    EQUALS = 2       # ==
    LESSGREATER = 3  # > or <
    SUM = 4          # +
    PRODUCT = 5      # *
    PREFIX = 6       # -X or !X
    CALL = 7         # myFunction(X)
    INDEX = 8        # array[index]


PRECEDENCES: Dict[TokenType, Precedence] = {
    TokenType.EQ: Precedence.EQUALS,
    TokenType.NOT_EQ: Precedence.EQUALS,
    TokenType.LT: Precedence.LESSGREATER,
    TokenType.GT: Precedence.LESSGREATER,
    TokenType.PLUS: Precedence.SUM,
    TokenType.MINUS: Precedence.SUM,
    TokenType.SLASH: Precedence.PRODUCT,
    TokenType.ASTERISK: Precedence.PRODUCT,
    TokenType.LPAREN: Precedence.CALL,
    TokenType.LBRACKET: Precedence.INDEX,
}

PrefixParseFn = Callable[[], Optional[Expression]]
InfixParseFn = Callable[[Expression], Optional[Expression]]


class Parser:
    """Consumes a token stream once, left to right, with one token of lookahead."""

    def __init__(self, tokens: Iterable[Token]):
        self._tokens: Iterator[Token] = iter(tokens)
        self._eof: Optional[Token] = None
        self.errors: List[str] = []
        self.error_tokens: List[Token] = []

        self.prefix_parse_fns: Dict[TokenType, PrefixParseFn] = {
            TokenType.IDENT: self.parse_identifier,
            TokenType.INT: self.parse_integer_literal,
            TokenType.STRING: self.parse_string_literal,
            TokenType.TRUE: self.parse_boolean,
            TokenType.FALSE: self.parse_boolean,
            TokenType.BANG: self.parse_prefix_expression,
            TokenType.MINUS: self.parse_prefix_expression,
            TokenType.LPAREN: self.parse_grouped_expression,
            TokenType.IF: self.parse_if_expression,
            TokenType.FUNCTION: self.parse_function_literal,
            TokenType.LBRACKET: self.parse_array_literal,
            TokenType.LBRACE: self.parse_hash_literal,
        }
        self.infix_parse_fns: Dict[TokenType, InfixParseFn] = {
            TokenType.PLUS: self.parse_infix_expression,
            TokenType.MINUS: self.parse_infix_expression,
            TokenType.SLASH: self.parse_infix_expression,
            TokenType.ASTERISK: self.parse_infix_expression,
            TokenType.EQ: self.parse_infix_expression,
            TokenType.NOT_EQ: self.parse_infix_expression,
            TokenType.LT: self.parse_infix_expression,
            TokenType.GT: self.parse_infix_expression,
            TokenType.LPAREN: self.parse_call_expression,
            TokenType.LBRACKET: self.parse_index_expression,
        }

        # Fill cur_token and peek_token
        self.cur_token: Token = self._pull()
        self.peek_token: Token = self._pull()

    # --- Token handling ---

    def _pull(self) -> Token:
        if self._eof is not None:
            return self._eof
        tok = next(self._tokens, None)
        if tok is None:
            # A stream that ends without EOF is treated as if it had one.
            tok = Token(TokenType.EOF, "")
        if tok.type is TokenType.EOF:
            self._eof = tok
        return tok

    def next_token(self):
        self.cur_token = self.peek_token
        self.peek_token = self._pull()

    def cur_token_is(self, t: TokenType) -> bool:
        return self.cur_token.type is t

    def peek_token_is(self, t: TokenType) -> bool:
        return self.peek_token.type is t

    def expect_peek(self, t: TokenType) -> bool:
        """Advances only when the next token has type `t`; records an error otherwise."""
        if self.peek_token_is(t):
            self.next_token()
            return True
        self.peek_error(t)
        return False

    def peek_precedence(self) -> Precedence:
        return PRECEDENCES.get(self.peek_token.type, Precedence.LOWEST)

    def cur_precedence(self) -> Precedence:
        return PRECEDENCES.get(self.cur_token.type, Precedence.LOWEST)

    # --- Errors ---

    def _error(self, message: str, token: Token):
        self.errors.append(message)
        self.error_tokens.append(token)

    def peek_error(self, t: TokenType):
        self._error(
            f"expected next token to be {t.value}, got {self.peek_token.type.value} instead",
            self.peek_token,
        )

    def no_prefix_parse_fn_error(self, t: TokenType):
        self._error(f"no prefix parse function for {t.value} found", self.cur_token)

    # --- Statements ---

    def parse_program(self) -> Program:
        program = Program()
        while not self.cur_token_is(TokenType.EOF):
            stmt = self.parse_statement()
            if stmt is not None:
                program.statements.append(stmt)
            self.next_token()
        return program

    def parse_statement(self) -> Optional[Statement]:
        match self.cur_token.type:
            case TokenType.LET:
                return self.parse_let_statement()
            case TokenType.RETURN:
                return self.parse_return_statement()
            case _:
                return self.parse_expression_statement()

    def parse_let_statement(self) -> Optional[LetStatement]:
        token = self.cur_token
        if not self.expect_peek(TokenType.IDENT):
            return None
        name = Identifier(self.cur_token, self.cur_token.literal)
        if not self.expect_peek(TokenType.ASSIGN):
            return None
        self.next_token()
        value = self.parse_expression(Precedence.LOWEST)
        if value is None:
            return None
        if self.peek_token_is(TokenType.SEMICOLON):
            self.next_token()
        return LetStatement(token, name, value)

    def parse_return_statement(self) -> Optional[ReturnStatement]:
        token = self.cur_token
        # A bare `return` returns null.
        if self.peek_token.type in (TokenType.SEMICOLON, TokenType.RBRACE, TokenType.EOF):
            if self.peek_token_is(TokenType.SEMICOLON):
                self.next_token()
            return ReturnStatement(token, None)
        self.next_token()
        value = self.parse_expression(Precedence.LOWEST)
        if value is None:
            return None
        if self.peek_token_is(TokenType.SEMICOLON):
            self.next_token()
        return ReturnStatement(token, value)

    def parse_expression_statement(self) -> Optional[ExpressionStatement]:
        token = self.cur_token
        expression = self.parse_expression(Precedence.LOWEST)
        if expression is None:
            return None
        if self.peek_token_is(TokenType.SEMICOLON):
            self.next_token()
        return ExpressionStatement(token, expression)

    def parse_block_statement(self) -> Optional[BlockStatement]:
        block = BlockStatement(self.cur_token, [])
        self.next_token()
        while not self.cur_token_is(TokenType.RBRACE):
            if self.cur_token_is(TokenType.EOF):
                self._error(
                    f"expected next token to be {TokenType.RBRACE.value}, got {TokenType.EOF.value} instead",
                    self.cur_token,
                )
                return None
            stmt = self.parse_statement()
            if stmt is not None:
                block.statements.append(stmt)
            self.next_token()
        return block

    # --- Expressions ---

    def parse_expression(self, precedence: Precedence) -> Optional[Expression]:
        """The Pratt loop: a prefix parse, then infix parses while the next operator binds tighter."""
        prefix = self.prefix_parse_fns.get(self.cur_token.type)
        if prefix is None:
            self.no_prefix_parse_fn_error(self.cur_token.type)
            return None
        left = prefix()

        while left is not None and not self.peek_token_is(TokenType.SEMICOLON) \
                and precedence < self.peek_precedence():
            infix = self.infix_parse_fns.get(self.peek_token.type)
            if infix is None:
                return left
            self.next_token()
            left = infix(left)

        return left

    def parse_identifier(self) -> Expression:
        return Identifier(self.cur_token, self.cur_token.literal)

    def parse_integer_literal(self) -> Optional[Expression]:
        literal = self.cur_token.literal
        try:
            value = int(literal)
        except ValueError:
            value = None
        if value is None or value > INT64_MAX:
            self._error(f'could not parse "{literal}" as integer', self.cur_token)
            return None
        return IntegerLiteral(self.cur_token, value)

    def parse_string_literal(self) -> Expression:
        return StringLiteral(self.cur_token, self.cur_token.literal)

    def parse_boolean(self) -> Expression:
        return Boolean(self.cur_token, self.cur_token_is(TokenType.TRUE))

    def parse_prefix_expression(self) -> Optional[Expression]:
        token = self.cur_token
        self.next_token()
        right = self.parse_expression(Precedence.PREFIX)
        if right is None:
            return None
        return PrefixExpression(token, token.literal, right)

    def parse_infix_expression(self, left: Expression) -> Optional[Expression]:
        token = self.cur_token
        precedence = self.cur_precedence()
        self.next_token()
        right = self.parse_expression(precedence)
        if right is None:
            return None
        return InfixExpression(token, left, token.literal, right)

    def parse_grouped_expression(self) -> Optional[Expression]:
        self.next_token()
        exp = self.parse_expression(Precedence.LOWEST)
        if exp is None or not self.expect_peek(TokenType.RPAREN):
            return None
        return exp

    def parse_if_expression(self) -> Optional[Expression]:
        token = self.cur_token
        if not self.expect_peek(TokenType.LPAREN):
            return None
        self.next_token()
        condition = self.parse_expression(Precedence.LOWEST)
        if condition is None or not self.expect_peek(TokenType.RPAREN):
            return None
        if not self.expect_peek(TokenType.LBRACE):
            return None
        consequence = self.parse_block_statement()
        if consequence is None:
            return None

        alternative = None
        if self.peek_token_is(TokenType.ELSE):
            self.next_token()
            if not self.expect_peek(TokenType.LBRACE):
                return None
            alternative = self.parse_block_statement()
            if alternative is None:
                return None

        return IfExpression(token, condition, consequence, alternative)

    def parse_function_literal(self) -> Optional[Expression]:
        token = self.cur_token
        if not self.expect_peek(TokenType.LPAREN):
            return None
        parameters = self.parse_function_parameters()
        if parameters is None:
            return None
        if not self.expect_peek(TokenType.LBRACE):
            return None
        body = self.parse_block_statement()
        if body is None:
            return None
        return FunctionLiteral(token, parameters, body)

    def parse_function_parameters(self) -> Optional[List[Identifier]]:
        identifiers: List[Identifier] = []
        if self.peek_token_is(TokenType.RPAREN):
            self.next_token()
            return identifiers

        if not self.expect_peek(TokenType.IDENT):
            return None
        identifiers.append(Identifier(self.cur_token, self.cur_token.literal))

        while self.peek_token_is(TokenType.COMMA):
            self.next_token()
            if not self.expect_peek(TokenType.IDENT):
                return None
            identifiers.append(Identifier(self.cur_token, self.cur_token.literal))

        if not self.expect_peek(TokenType.RPAREN):
            return None
        return identifiers

    def parse_call_expression(self, function: Expression) -> Optional[Expression]:
        token = self.cur_token
        arguments = self.parse_expression_list(TokenType.RPAREN)
        if arguments is None:
            return None
        return CallExpression(token, function, arguments)

    def parse_expression_list(self, end: TokenType) -> Optional[List[Expression]]:
        items: List[Expression] = []
        if self.peek_token_is(end):
            self.next_token()
            return items

        self.next_token()
        item = self.parse_expression(Precedence.LOWEST)
        if item is None:
            return None
        items.append(item)

        while self.peek_token_is(TokenType.COMMA):
            self.next_token()
            self.next_token()
            item = self.parse_expression(Precedence.LOWEST)
            if item is None:
                return None
            items.append(item)

        if not self.expect_peek(end):
            return None
        return items

    def parse_array_literal(self) -> Optional[Expression]:
        token = self.cur_token
        elements = self.parse_expression_list(TokenType.RBRACKET)
        if elements is None:
            return None
        return ArrayLiteral(token, elements)

    def parse_index_expression(self, left: Expression) -> Optional[Expression]:
        token = self.cur_token
        self.next_token()
        index = self.parse_expression(Precedence.LOWEST)
        if index is None or not self.expect_peek(TokenType.RBRACKET):
            return None
        return IndexExpression(token, left, index)

    def parse_hash_literal(self) -> Optional[Expression]:
        hash_lit = HashLiteral(self.cur_token, [])
        while not self.peek_token_is(TokenType.RBRACE):
            self.next_token()
            key = self.parse_expression(Precedence.LOWEST)
            if key is None or not self.expect_peek(TokenType.COLON):
                return None
            self.next_token()
            value = self.parse_expression(Precedence.LOWEST)
            if value is None:
                return None
            hash_lit.pairs.append((key, value))
            if not self.peek_token_is(TokenType.RBRACE) and not self.expect_peek(TokenType.COMMA):
                return None

        if not self.expect_peek(TokenType.RBRACE):
            return None
        return hash_lit


def parse(tokens: Iterable[Token]) -> Tuple[Program, List[str]]:
    """Parses a whole token stream, returning the program and its error messages in encounter order."""
    parser = Parser(tokens)
    program = parser.parse_program()
    return program, parser.errors
