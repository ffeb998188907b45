"""
Defines the abstract syntax tree produced by the parser.

Nodes are plain data. Every node keeps the token it was built from for
diagnostics; that token is ignored by equality so that a reparsed tree
compares equal to the original. `str(node)` gives the canonical,
fully-parenthesised source form (see monkey_printer).
"""
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from monkey.monkey_token import Token


class Node:
    """Base class for all AST nodes."""
    token: Token

    def token_literal(self) -> str:
        return self.token.literal

    def __str__(self) -> str:
        from monkey.monkey_printer import Printer
        return Printer().pformat(self)


class Statement(Node):
    pass


class Expression(Node):
    pass


# =================================================================
# Root and statements
# =================================================================

@dataclass(eq=True)
class Program(Node):
    statements: List[Statement] = field(default_factory=list)

    def token_literal(self) -> str:
        if self.statements:
            return self.statements[0].token_literal()
        return ""


@dataclass
class Identifier(Expression):
    token: Token = field(compare=False, repr=False)
    value: str


@dataclass
class LetStatement(Statement):
    token: Token = field(compare=False, repr=False)
    name: Identifier
    value: Expression


@dataclass
class ReturnStatement(Statement):
    token: Token = field(compare=False, repr=False)
    return_value: Optional[Expression] = None


@dataclass
class ExpressionStatement(Statement):
    token: Token = field(compare=False, repr=False)
    expression: Expression


@dataclass
class BlockStatement(Statement):
    token: Token = field(compare=False, repr=False)
    statements: List[Statement] = field(default_factory=list)


# =================================================================
# Expressions
# =================================================================

@dataclass
class IntegerLiteral(Expression):
    token: Token = field(compare=False, repr=False)
    value: int


@dataclass
class Boolean(Expression):
    token: Token = field(compare=False, repr=False)
    value: bool


@dataclass
class StringLiteral(Expression):
    token: Token = field(compare=False, repr=False)
    value: str


@dataclass
class PrefixExpression(Expression):
    token: Token = field(compare=False, repr=False)
    operator: str
    right: Expression


@dataclass
class InfixExpression(Expression):
    token: Token = field(compare=False, repr=False)
    left: Expression
    operator: str
    right: Expression


@dataclass
class IfExpression(Expression):
    token: Token = field(compare=False, repr=False)
    condition: Expression
    consequence: BlockStatement
    alternative: Optional[BlockStatement] = None


@dataclass
class FunctionLiteral(Expression):
    token: Token = field(compare=False, repr=False)
    parameters: List[Identifier]
    body: BlockStatement


@dataclass
class CallExpression(Expression):
    token: Token = field(compare=False, repr=False)
    function: Expression
    arguments: List[Expression]


@dataclass
class ArrayLiteral(Expression):
    token: Token = field(compare=False, repr=False)
    elements: List[Expression]


@dataclass
class IndexExpression(Expression):
    token: Token = field(compare=False, repr=False)
    left: Expression
    index: Expression


@dataclass
class HashLiteral(Expression):
    """Key expressions are arbitrary; pairs keep their source order."""
    token: Token = field(compare=False, repr=False)
    pairs: List[Tuple[Expression, Expression]] = field(default_factory=list)
