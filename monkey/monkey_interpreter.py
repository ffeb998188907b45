"""
The core Monkey interpreter: a tree-walking Evaluator.
"""
import os
import sys
from typing import Any, Dict, List, Optional

from monkey.monkey_ast import (
    Node, Program, LetStatement, ReturnStatement, ExpressionStatement,
    BlockStatement, Identifier, IntegerLiteral, Boolean as BooleanLiteral,
    StringLiteral, PrefixExpression, InfixExpression, IfExpression,
    FunctionLiteral, CallExpression, ArrayLiteral, IndexExpression, HashLiteral,
)
from monkey.monkey_datatypes import (
    MonkeyObject, ObjectType, Integer, String, ReturnValue, Error, Function,
    Builtin, Array, Hash, Hashable, Environment,
    TRUE, FALSE, NULL, native_bool_to_boolean, is_error,
)
from monkey.monkey_builtins import StdLib


def is_return(x) -> bool:
    return isinstance(x, ReturnValue)


def unwrap_return(x):
    return x.value if is_return(x) else x


def is_truthy(obj: MonkeyObject) -> bool:
    return not (obj is FALSE or obj is NULL)


class Evaluator:
    """The Monkey execution engine.

    `eval(node, env)` always returns a `MonkeyObject`. Language-level
    failures come back as `Error` objects and are never raised.
    """
    def __init__(self, load_builtins: bool = True):
        self.side_effects: List[Dict[str, Any]] = []
        self.current_node: Optional[Node] = None
        # Node being evaluated when the most recent Error was created
        self.error_node: Optional[Node] = None
        self.builtins: Dict[str, Builtin] = StdLib(self).builtins() if load_builtins else {}

    def _dbg(self, *parts):
        if os.environ.get("MONKEY_DEBUG"):
            print("[DBG]", *parts, file=sys.stderr)

    def emit(self, message: str, topic: str = 'stdout'):
        """Records program output; the host decides where it goes."""
        self.side_effects.append({'topics': [topic], 'message': message})

    def _new_error(self, message: str) -> Error:
        self.error_node = self.current_node
        self._dbg("Error", message, "at", type(self.current_node).__name__)
        return Error(message)

    def eval(self, node: Node, env: Environment) -> MonkeyObject:
        """Public entry point for evaluation. Unwraps a `return` that reaches the top."""
        return unwrap_return(self._eval(node, env))

    def _eval(self, node: Node, env: Environment) -> MonkeyObject:
        """Recursive dispatcher for evaluating any AST node."""
        self.current_node = node
        match node:
            # Statements
            case Program():
                return self._eval_program(node, env)

            case BlockStatement():
                return self._eval_block_statement(node, env)

            case ExpressionStatement():
                return self._eval(node.expression, env)

            case ReturnStatement():
                if node.return_value is None:
                    return ReturnValue(NULL)
                val = self._eval(node.return_value, env)
                if is_error(val):
                    return val
                return ReturnValue(val)

            case LetStatement():
                val = self._eval(node.value, env)
                if is_error(val):
                    return val
                env.set(node.name.value, val)
                return NULL

            # Literals
            case IntegerLiteral():
                return Integer(node.value)

            case StringLiteral():
                return String(node.value)

            case BooleanLiteral():
                return native_bool_to_boolean(node.value)

            # Operators
            case PrefixExpression():
                right = self._eval(node.right, env)
                if is_error(right):
                    return right
                self.current_node = node
                return self._eval_prefix_expression(node.operator, right)

            case InfixExpression():
                left = self._eval(node.left, env)
                if is_error(left):
                    return left
                right = self._eval(node.right, env)
                if is_error(right):
                    return right
                self.current_node = node
                return self._eval_infix_expression(node.operator, left, right)

            case IfExpression():
                return self._eval_if_expression(node, env)

            case Identifier():
                return self._eval_identifier(node, env)

            # Functions
            case FunctionLiteral():
                return Function(node.parameters, node.body, env)

            case CallExpression():
                function = self._eval(node.function, env)
                if is_error(function):
                    return function
                args = self._eval_expressions(node.arguments, env)
                if len(args) == 1 and is_error(args[0]):
                    return args[0]
                self.current_node = node
                return self.apply_function(function, args)

            # Collections
            case ArrayLiteral():
                elements = self._eval_expressions(node.elements, env)
                if len(elements) == 1 and is_error(elements[0]):
                    return elements[0]
                return Array(elements)

            case IndexExpression():
                left = self._eval(node.left, env)
                if is_error(left):
                    return left
                index = self._eval(node.index, env)
                if is_error(index):
                    return index
                self.current_node = node
                return self._eval_index_expression(left, index)

            case HashLiteral():
                return self._eval_hash_literal(node, env)

            case _:
                return self._new_error(f"cannot evaluate node: {type(node).__name__}")

    # --- Statements ---

    def _eval_program(self, program: Program, env: Environment) -> MonkeyObject:
        result: MonkeyObject = NULL
        for stmt in program.statements:
            result = self._eval(stmt, env)
            match result:
                case ReturnValue():
                    return result.value
                case Error():
                    return result
        return result

    def _eval_block_statement(self, block: BlockStatement, env: Environment) -> MonkeyObject:
        result: MonkeyObject = NULL
        for stmt in block.statements:
            result = self._eval(stmt, env)
            # Leave ReturnValue wrapped so that enclosing blocks stop too.
            if result.type in (ObjectType.RETURN_VALUE, ObjectType.ERROR):
                return result
        return result

    def _eval_expressions(self, exprs, env: Environment) -> List[MonkeyObject]:
        """Evaluates left to right. On the first error, returns a list holding only that error."""
        results = []
        for expr in exprs:
            evaluated = self._eval(expr, env)
            if is_error(evaluated):
                return [evaluated]
            results.append(evaluated)
        return results

    # --- Operators ---

    def _eval_prefix_expression(self, operator: str, right: MonkeyObject) -> MonkeyObject:
        match operator:
            case "!":
                return self._eval_bang_operator_expression(right)
            case "-":
                if right.type is not ObjectType.INTEGER:
                    return self._new_error(f"unknown operator: -{right.type.value}")
                return Integer(-right.value)
            case _:
                return self._new_error(f"unknown operator: {operator}{right.type.value}")

    def _eval_bang_operator_expression(self, right: MonkeyObject) -> MonkeyObject:
        if right is TRUE:
            return FALSE
        if right is FALSE or right is NULL:
            return TRUE
        return FALSE

    def _eval_infix_expression(self, operator: str, left: MonkeyObject, right: MonkeyObject) -> MonkeyObject:
        match (left, right):
            case (Integer(), Integer()):
                return self._eval_integer_infix_expression(operator, left, right)
            case (String(), String()):
                return self._eval_string_infix_expression(operator, left, right)

        if left.type is ObjectType.BOOLEAN and right.type is ObjectType.BOOLEAN:
            # Booleans are singletons, so identity is equality.
            if operator == "==":
                return native_bool_to_boolean(left is right)
            if operator == "!=":
                return native_bool_to_boolean(left is not right)

        if left.type is not right.type:
            return self._new_error(f"type mismatch: {left.type.value} {operator} {right.type.value}")
        return self._new_error(f"unknown operator: {left.type.value} {operator} {right.type.value}")

    def _eval_integer_infix_expression(self, operator: str, left: Integer, right: Integer) -> MonkeyObject:
        lv, rv = left.value, right.value
        match operator:
            case "+":
                return Integer(lv + rv)
            case "-":
                return Integer(lv - rv)
            case "*":
                return Integer(lv * rv)
            case "/":
                if rv == 0:
                    return self._new_error("division by zero")
                # Truncate toward zero.
                quotient = abs(lv) // abs(rv)
                return Integer(quotient if (lv < 0) == (rv < 0) else -quotient)
            case "<":
                return native_bool_to_boolean(lv < rv)
            case ">":
                return native_bool_to_boolean(lv > rv)
            case "==":
                return native_bool_to_boolean(lv == rv)
            case "!=":
                return native_bool_to_boolean(lv != rv)
            case _:
                return self._new_error(f"unknown operator: {left.type.value} {operator} {right.type.value}")

    def _eval_string_infix_expression(self, operator: str, left: String, right: String) -> MonkeyObject:
        if operator != "+":
            return self._new_error(f"unknown operator: {left.type.value} {operator} {right.type.value}")
        return String(left.value + right.value)

    # --- Control flow and names ---

    def _eval_if_expression(self, node: IfExpression, env: Environment) -> MonkeyObject:
        condition = self._eval(node.condition, env)
        if is_error(condition):
            return condition
        # Each branch runs in its own child scope.
        if is_truthy(condition):
            return self._eval(node.consequence, Environment.enclosed(env))
        if node.alternative is not None:
            return self._eval(node.alternative, Environment.enclosed(env))
        return NULL

    def _eval_identifier(self, node: Identifier, env: Environment) -> MonkeyObject:
        val = env.get(node.value)
        if val is not None:
            return val
        builtin = self.builtins.get(node.value)
        if builtin is not None:
            return builtin
        return self._new_error(f"identifier not found: {node.value}")

    def apply_function(self, fn: MonkeyObject, args: List[MonkeyObject]) -> MonkeyObject:
        match fn:
            case Function():
                self._dbg("Function call", "argc", len(args), "params", [p.value for p in fn.parameters])
                if len(args) != len(fn.parameters):
                    return self._new_error(
                        f"wrong number of arguments. got={len(args)}, want={len(fn.parameters)}"
                    )
                call_env = Environment.enclosed(fn.env)
                for param, arg in zip(fn.parameters, args):
                    call_env.set(param.value, arg)
                return unwrap_return(self._eval(fn.body, call_env))
            case Builtin():
                self._dbg("Builtin call", fn.name, "argc", len(args))
                result = fn.fn(*args)
                if result is None:
                    return NULL
                if is_error(result):
                    # Builtins build their own errors; locate them at the call.
                    self.error_node = self.current_node
                return result
            case _:
                return self._new_error(f"not a function: {fn.type.value}")

    # --- Collections ---

    def _eval_index_expression(self, left: MonkeyObject, index: MonkeyObject) -> MonkeyObject:
        match (left, index):
            case (Array(), Integer()):
                idx = index.value
                if idx < 0 or idx >= len(left.elements):
                    return NULL
                return left.elements[idx]
            case (Hash(), _):
                if not isinstance(index, Hashable):
                    return self._new_error(f"unusable as hash key: {index.type.value}")
                return left.get(index, NULL)
            case _:
                return self._new_error(f"index operator not supported: {left.type.value}")

    def _eval_hash_literal(self, node: HashLiteral, env: Environment) -> MonkeyObject:
        hash_obj = Hash()
        for key_node, value_node in node.pairs:
            key = self._eval(key_node, env)
            if is_error(key):
                return key
            if not isinstance(key, Hashable):
                self.current_node = key_node
                return self._new_error(f"unusable as hash key: {key.type.value}")
            value = self._eval(value_node, env)
            if is_error(value):
                return value
            hash_obj.set(key, value)
        return hash_obj
