import pytest
from monkey.monkey_printer import Printer
from monkey.monkey_token import Token, TokenType
from monkey.monkey_ast import Program, LetStatement, Identifier, ReturnStatement
from monkey.monkey_lexer import Lexer
from monkey.monkey_parser import parse
from monkey.monkey_datatypes import (
    Integer, String, Array, Hash, Error, Builtin, ReturnValue, Environment,
    TRUE, FALSE, NULL,
)
from monkey.monkey_interpreter import Evaluator


@pytest.fixture
def printer():
    return Printer()


def eval_source(src):
    program, errors = parse(Lexer(src))
    assert errors == []
    return Evaluator().eval(program, Environment())


def test_program_string_from_hand_built_tree():
    program = Program([
        LetStatement(
            Token(TokenType.LET, "let"),
            Identifier(Token(TokenType.IDENT, "myVar"), "myVar"),
            Identifier(Token(TokenType.IDENT, "anotherVar"), "anotherVar"),
        ),
    ])
    assert str(program) == "let myVar = anotherVar;"


def test_return_statement_strings(printer):
    tok = Token(TokenType.RETURN, "return")
    assert printer.pformat(ReturnStatement(tok, None)) == "return;"
    value = Identifier(Token(TokenType.IDENT, "x"), "x")
    assert printer.pformat(ReturnStatement(tok, value)) == "return x;"


# Test cases: (id, object, expected_string)
INSPECT_TEST_CASES = [
    ("int", Integer(123), "123"),
    ("negative_int", Integer(-5), "-5"),
    ("true", TRUE, "true"),
    ("false", FALSE, "false"),
    ("null", NULL, "null"),
    ("string", String("hello"), "hello"),
    ("error", Error("boom"), "ERROR: boom"),
    ("return_value", ReturnValue(Integer(3)), "3"),
    ("array", Array([Integer(1), String("a"), TRUE]), "[1, a, true]"),
    ("empty_array", Array([]), "[]"),
    ("empty_hash", Hash(), "{}"),
    ("builtin", Builtin(lambda *a: NULL, "noop"), "builtin function"),
]


@pytest.mark.parametrize("case_id,obj,expected", INSPECT_TEST_CASES, ids=[c[0] for c in INSPECT_TEST_CASES])
def test_inspect(printer, case_id, obj, expected):
    assert printer.pformat(obj) == expected
    assert obj.inspect() == expected


def test_hash_inspect_contains_each_pair():
    h = Hash()
    h.set(String("a"), Integer(1))
    h.set(Integer(2), TRUE)
    text = h.inspect()
    assert text.startswith("{") and text.endswith("}")
    assert "a: 1" in text
    assert "2: true" in text


def test_function_inspect():
    fn = eval_source("fn(x, y) { x + y; }")
    assert fn.inspect() == "fn(x, y) {\n(x + y)\n}"


def test_function_body_string():
    fn = eval_source("fn(x) { x + 2; };")
    assert [str(p) for p in fn.parameters] == ["x"]
    assert str(fn.body) == "(x + 2)"


def test_object_repr_uses_type_and_inspect():
    assert repr(Integer(7)) == "<INTEGER 7>"


def test_unknown_values_fall_back_to_repr(printer):
    assert printer.pformat(3.5) == "3.5"


def test_nested_function_inspect_is_not_indented():
    fn = eval_source("fn(x) { fn(y) { x + y } }")
    assert fn.inspect() == "fn(x) {\nfn(y) { (x + y) }\n}"
    inner = eval_source("fn(x) { fn(y) { x + y } }(1)")
    assert inner.inspect() == "fn(y) {\n(x + y)\n}"
