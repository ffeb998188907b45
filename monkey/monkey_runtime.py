from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional

from monkey.monkey_lexer import Lexer
from monkey.monkey_parser import Parser
from monkey.monkey_interpreter import Evaluator
from monkey.monkey_datatypes import Environment, Error, MonkeyObject
from monkey.monkey_serialize import from_python, to_python

# ===================================================================
# Script Execution
# ===================================================================

Token = Dict[str, Any]


@dataclass
class ExecutionResult:
    """The structured result of a script execution."""
    status: Literal['success', 'error']
    value: Optional[MonkeyObject] = None
    error_message: Optional[str] = None
    error_token: Optional[Token] = None
    parse_errors: List[str] = field(default_factory=list)
    side_effects: List[Dict] = field(default_factory=list)

    def format_error(self) -> str:
        """Formats an error message with line and column if available."""
        if self.status != 'error':
            return ""
        msg = str(self.error_message or "Unknown error")

        if self.error_token and self.error_token.get('line'):
            line = self.error_token.get('line')
            col = self.error_token.get('col')
            if not msg.startswith("Error on line "):
                col_info = f", col {col}" if col else ""
                return f"Error on line {line}{col_info}: {msg}"
        return msg

    def to_python(self) -> Any:
        """Returns the value as plain Python data."""
        if self.value is None:
            return None
        return to_python(self.value)


class ScriptRunner:
    """Lexes, parses, and evaluates Monkey code.

    The root environment outlives individual scripts, so successive calls
    to `handle_script` share bindings the way a REPL session does.
    """

    def __init__(self, host_globals: Optional[Dict[str, Any]] = None, load_builtins: bool = True):
        self.evaluator = Evaluator(load_builtins=load_builtins)
        self.root_env = Environment()
        for name, value in (host_globals or {}).items():
            self.root_env.set(name, from_python(value))

    def _format_runtime_error(self, e: Exception) -> str:
        match e:
            case RecursionError():
                return "RecursionError: maximum recursion depth exceeded"
            case TypeError() | ValueError():
                return f"{type(e).__name__}: {e}"
            case _:
                return f"InternalError: {e}"

    def _node_token(self, node) -> Optional[Token]:
        tok = getattr(node, 'token', None) if node is not None else None
        return tok.loc() if tok is not None else None

    def handle_script(self, source_code: str) -> ExecutionResult:
        """The main entry point to execute a script."""
        self.evaluator.side_effects.clear()
        self.evaluator.error_node = None

        # 1. Parse
        parser = Parser(Lexer(source_code))
        program = parser.parse_program()
        if parser.errors:
            msg = "\n".join(f"ParseError: {m}" for m in parser.errors)
            self.evaluator.emit(msg, 'stderr')
            return ExecutionResult(
                status='error',
                error_message=msg,
                error_token=parser.error_tokens[0].loc(),
                parse_errors=list(parser.errors),
                side_effects=list(self.evaluator.side_effects),
            )

        # 2. Evaluate
        try:
            result = self.evaluator.eval(program, self.root_env)
        except Exception as e:
            msg = self._format_runtime_error(e)
            self.evaluator.emit(msg, 'stderr')
            return ExecutionResult(
                status='error',
                error_message=msg,
                error_token=self._node_token(self.evaluator.current_node),
                side_effects=list(self.evaluator.side_effects),
            )

        if isinstance(result, Error):
            self.evaluator.emit(result.inspect(), 'stderr')
            return ExecutionResult(
                status='error',
                value=result,
                error_message=result.inspect(),
                error_token=self._node_token(self.evaluator.error_node),
                side_effects=list(self.evaluator.side_effects),
            )

        return ExecutionResult(
            status='success',
            value=result,
            side_effects=list(self.evaluator.side_effects),
        )
