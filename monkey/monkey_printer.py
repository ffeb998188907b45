"""
A printer for Monkey syntax trees and runtime values.
"""
from monkey.monkey_ast import (
    Program, LetStatement, ReturnStatement, ExpressionStatement, BlockStatement,
    Identifier, IntegerLiteral, Boolean as BooleanLiteral, StringLiteral,
    PrefixExpression, InfixExpression, IfExpression, FunctionLiteral,
    CallExpression, ArrayLiteral, IndexExpression, HashLiteral,
)
from monkey.monkey_datatypes import (
    Integer, Boolean, Null, String, ReturnValue, Error, Function, Builtin,
    Array, Hash,
)

_STRING_ESCAPES = {'\\': '\\\\', '"': '\\"', '\n': '\\n', '\t': '\\t'}


class Printer:
    """Formats AST nodes into canonical source and objects into their inspect text."""

    def __init__(self):
        self._handlers = self._create_handlers()

    def pformat(self, obj):
        """Public entry point to format a node or object."""
        handler = self._get_handler(obj)
        return handler(obj)

    def _get_handler(self, obj):
        obj_type = type(obj)
        if obj_type in self._handlers:
            return self._handlers[obj_type]
        # Default to Python's repr for unknown types
        return repr

    def _create_handlers(self):
        return {
            # Syntax tree
            Program: self._pformat_program,
            LetStatement: self._pformat_let,
            ReturnStatement: self._pformat_return,
            ExpressionStatement: self._pformat_expression_statement,
            BlockStatement: self._pformat_block,
            Identifier: self._pformat_identifier,
            IntegerLiteral: self._pformat_token_literal,
            BooleanLiteral: self._pformat_token_literal,
            StringLiteral: self._pformat_string_literal,
            PrefixExpression: self._pformat_prefix,
            InfixExpression: self._pformat_infix,
            IfExpression: self._pformat_if,
            FunctionLiteral: self._pformat_function_literal,
            CallExpression: self._pformat_call,
            ArrayLiteral: self._pformat_array_literal,
            IndexExpression: self._pformat_index,
            HashLiteral: self._pformat_hash_literal,
            # Runtime values
            Integer: self._pformat_primitive,
            Boolean: self._pformat_bool,
            Null: self._pformat_null,
            String: self._pformat_string,
            ReturnValue: self._pformat_return_value,
            Error: self._pformat_error,
            Function: self._pformat_function,
            Builtin: self._pformat_builtin,
            Array: self._pformat_array,
            Hash: self._pformat_hash,
        }

    # --- Syntax tree ---

    def _pformat_program(self, obj):
        return "".join(self.pformat(stmt) for stmt in obj.statements)

    def _pformat_let(self, obj):
        return f"{obj.token_literal()} {self.pformat(obj.name)} = {self.pformat(obj.value)};"

    def _pformat_return(self, obj):
        if obj.return_value is None:
            return f"{obj.token_literal()};"
        return f"{obj.token_literal()} {self.pformat(obj.return_value)};"

    def _pformat_expression_statement(self, obj):
        return self.pformat(obj.expression)

    def _pformat_block(self, obj):
        # Separate statements that would otherwise run together on reparse.
        parts = []
        for stmt in obj.statements:
            text = self.pformat(stmt)
            if parts and not parts[-1].endswith(";"):
                parts.append("; ")
            parts.append(text)
        return "".join(parts)

    def _pformat_identifier(self, obj):
        return obj.value

    def _pformat_token_literal(self, obj):
        return obj.token_literal()

    def _pformat_string_literal(self, obj):
        escaped = "".join(_STRING_ESCAPES.get(ch, ch) for ch in obj.value)
        return f'"{escaped}"'

    def _pformat_prefix(self, obj):
        return f"({obj.operator}{self.pformat(obj.right)})"

    def _pformat_infix(self, obj):
        return f"({self.pformat(obj.left)} {obj.operator} {self.pformat(obj.right)})"

    def _pformat_if(self, obj):
        out = f"if ({self.pformat(obj.condition)}) {{ {self.pformat(obj.consequence)} }}"
        if obj.alternative is not None:
            out += f" else {{ {self.pformat(obj.alternative)} }}"
        return out

    def _pformat_function_literal(self, obj):
        params = ", ".join(self.pformat(p) for p in obj.parameters)
        return f"{obj.token_literal()}({params}) {{ {self.pformat(obj.body)} }}"

    def _pformat_call(self, obj):
        args = ", ".join(self.pformat(a) for a in obj.arguments)
        return f"{self.pformat(obj.function)}({args})"

    def _pformat_array_literal(self, obj):
        return "[" + ", ".join(self.pformat(e) for e in obj.elements) + "]"

    def _pformat_index(self, obj):
        return f"({self.pformat(obj.left)}[{self.pformat(obj.index)}])"

    def _pformat_hash_literal(self, obj):
        pairs = [f"{self.pformat(k)}: {self.pformat(v)}" for k, v in obj.pairs]
        return "{" + ", ".join(pairs) + "}"

    # --- Runtime values ---

    def _pformat_primitive(self, obj):
        return str(obj.value)

    def _pformat_bool(self, obj):
        return 'true' if obj.value else 'false'

    def _pformat_null(self, obj):
        return 'null'

    def _pformat_string(self, obj):
        return obj.value

    def _pformat_return_value(self, obj):
        return self.pformat(obj.value)

    def _pformat_error(self, obj):
        return f"ERROR: {obj.message}"

    def _pformat_function(self, obj):
        params = ", ".join(self.pformat(p) for p in obj.parameters)
        return f"fn({params}) {{\n{self.pformat(obj.body)}\n}}"

    def _pformat_builtin(self, obj):
        return "builtin function"

    def _pformat_array(self, obj):
        return "[" + ", ".join(self.pformat(e) for e in obj.elements) + "]"

    def _pformat_hash(self, obj):
        pairs = [f"{self.pformat(p.key)}: {self.pformat(p.value)}" for p in obj.pairs.values()]
        return "{" + ", ".join(pairs) + "}"
