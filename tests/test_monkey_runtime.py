import pytest
from monkey.monkey_runtime import ScriptRunner, ExecutionResult
from monkey.monkey_datatypes import Integer, Error, NULL


def test_successful_script():
    runner = ScriptRunner()
    result = runner.handle_script("let x = 2; x * 21")
    assert result.status == 'success'
    assert result.value == Integer(42)
    assert result.format_error() == ""
    assert result.to_python() == 42


def test_session_bindings_persist_between_calls():
    runner = ScriptRunner()
    assert runner.handle_script("let add = fn(a, b) { a + b };").value is NULL
    result = runner.handle_script("add(2, 3)")
    assert result.value == Integer(5)


def test_parse_error_reports_location():
    result = ScriptRunner().handle_script("let x 5;")
    assert result.status == 'error'
    assert result.value is None
    assert result.parse_errors == ["expected next token to be =, got INT instead"]
    assert result.error_token['line'] == 1
    assert result.error_token['col'] == 7
    assert result.format_error() == (
        "Error on line 1, col 7: ParseError: expected next token to be =, got INT instead"
    )


def test_multiple_parse_errors_are_joined():
    result = ScriptRunner().handle_script("let = 1; let y = ;")
    assert result.status == 'error'
    assert len(result.parse_errors) >= 2
    assert result.error_message.count("ParseError: ") == len(result.parse_errors)


def test_runtime_error_reports_location():
    result = ScriptRunner().handle_script("5 + true")
    assert result.status == 'error'
    assert isinstance(result.value, Error)
    assert result.error_message == "ERROR: type mismatch: INTEGER + BOOLEAN"
    assert result.format_error() == "Error on line 1, col 3: ERROR: type mismatch: INTEGER + BOOLEAN"


def test_runtime_error_on_later_line():
    result = ScriptRunner().handle_script("let a = 1;\nlet b = a(2);")
    assert result.status == 'error'
    assert result.format_error().startswith("Error on line 2")
    assert result.error_message == "ERROR: not a function: INTEGER"


def test_errors_are_recorded_as_stderr_side_effects():
    result = ScriptRunner().handle_script('puts("before"); missing')
    assert result.side_effects[0] == {'topics': ['stdout'], 'message': 'before'}
    assert result.side_effects[-1]['topics'] == ['stderr']
    assert "identifier not found: missing" in result.side_effects[-1]['message']


def test_side_effects_are_reset_per_script():
    runner = ScriptRunner()
    runner.handle_script('puts("one")')
    result = runner.handle_script('puts("two")')
    assert [e['message'] for e in result.side_effects] == ["two"]


def test_unbounded_recursion_is_reported():
    result = ScriptRunner().handle_script("let f = fn(n) { f(n + 1) }; f(0)")
    assert result.status == 'error'
    assert result.error_message == "RecursionError: maximum recursion depth exceeded"


def test_host_globals_are_converted():
    runner = ScriptRunner(host_globals={"limit": 3, "names": ["a", "b"], "cfg": {"debug": True}})
    assert runner.handle_script("limit + 1").value == Integer(4)
    assert runner.handle_script("len(names)").value == Integer(2)
    assert runner.handle_script('cfg["debug"]').to_python() is True


def test_host_functions_are_callable():
    def greet(name):
        return f"hi {name}"

    def explode():
        raise ValueError("kaboom")

    runner = ScriptRunner(host_globals={"greet": greet, "explode": explode})
    assert runner.handle_script('greet("bob")').to_python() == "hi bob"
    result = runner.handle_script("explode()")
    assert result.status == 'error'
    assert result.error_message == "ERROR: explode: kaboom"


def test_runner_without_builtins():
    result = ScriptRunner(load_builtins=False).handle_script("len([])")
    assert result.error_message == "ERROR: identifier not found: len"


def test_to_python_on_collections():
    result = ScriptRunner().handle_script('{"xs": [1, 2], "ok": true, "none": if (false) { 1 }}')
    assert result.to_python() == {"xs": [1, 2], "ok": True, "none": None}


def test_format_error_without_location():
    res = ExecutionResult(status='error', error_message="boom")
    assert res.format_error() == "boom"
    assert ExecutionResult(status='success').to_python() is None


def test_builtin_error_reports_call_location():
    result = ScriptRunner().handle_script("let a = 1;\nlen(a)")
    assert result.status == 'error'
    assert result.error_token['line'] == 2
    assert result.format_error() == (
        "Error on line 2, col 4: ERROR: argument to `len` not supported, got INTEGER"
    )


def test_host_function_error_reports_call_location():
    def explode():
        raise ValueError("kaboom")

    result = ScriptRunner(host_globals={"explode": explode}).handle_script("\n\nexplode()")
    assert result.format_error() == "Error on line 3, col 8: ERROR: explode: kaboom"


def test_out_of_range_host_values_are_rejected():
    with pytest.raises(ValueError):
        ScriptRunner(host_globals={"big": 2 ** 63})

    runner = ScriptRunner(host_globals={"huge": lambda: 2 ** 64})
    result = runner.handle_script("huge()")
    assert result.status == 'error'
    assert result.error_message == f"ERROR: <lambda>: integer out of range: {2 ** 64}"
