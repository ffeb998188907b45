"""
Python implementations of the Monkey built-in functions.
"""
import inspect
from typing import Dict

from monkey.monkey_datatypes import (
    MonkeyObject, ObjectType, Integer, Array, Error, Builtin, NULL,
)


def wrong_number_of_arguments(got: int, want: int) -> Error:
    return Error(f"wrong number of arguments. got={got}, want={want}")


def _single_array(name: str, args) -> MonkeyObject:
    if len(args) != 1:
        return wrong_number_of_arguments(len(args), 1)
    arg = args[0]
    if arg.type is not ObjectType.ARRAY:
        return Error(f"argument to `{name}` must be ARRAY, got {arg.type.value}")
    return arg


class StdLib:
    """Contains Python implementations for all Monkey built-ins.

    Every method named `_<name>` is exposed to scripts as `<name>`.
    """
    def __init__(self, evaluator):
        self.evaluator = evaluator

    def builtins(self) -> Dict[str, Builtin]:
        """Collects the `_<name>` methods as `Builtin` objects keyed by script name."""
        table: Dict[str, Builtin] = {}
        for name, member in inspect.getmembers(self):
            if name.startswith('_') and not name.startswith('__') and callable(member):
                monkey_name = name[1:]
                table[monkey_name] = Builtin(member, monkey_name)
        return table

    def _len(self, *args: MonkeyObject) -> MonkeyObject:
        if len(args) != 1:
            return wrong_number_of_arguments(len(args), 1)
        arg = args[0]
        match arg.type:
            case ObjectType.STRING:
                # Counted in UTF-8 bytes, not code points.
                return Integer(len(arg.value.encode("utf-8")))
            case ObjectType.ARRAY:
                return Integer(len(arg.elements))
            case _:
                return Error(f"argument to `len` not supported, got {arg.type.value}")

    def _first(self, *args: MonkeyObject) -> MonkeyObject:
        arr = _single_array("first", args)
        if isinstance(arr, Error):
            return arr
        return arr.elements[0] if arr.elements else NULL

    def _last(self, *args: MonkeyObject) -> MonkeyObject:
        arr = _single_array("last", args)
        if isinstance(arr, Error):
            return arr
        return arr.elements[-1] if arr.elements else NULL

    def _rest(self, *args: MonkeyObject) -> MonkeyObject:
        arr = _single_array("rest", args)
        if isinstance(arr, Error):
            return arr
        if not arr.elements:
            return NULL
        return Array(arr.elements[1:])

    def _push(self, *args: MonkeyObject) -> MonkeyObject:
        if len(args) != 2:
            return wrong_number_of_arguments(len(args), 2)
        arr, value = args
        if arr.type is not ObjectType.ARRAY:
            return Error(f"argument to `push` must be ARRAY, got {arr.type.value}")
        # The original array is left untouched.
        return Array(arr.elements + [value])

    def _puts(self, *args: MonkeyObject) -> MonkeyObject:
        for arg in args:
            self.evaluator.emit(arg.inspect())
        return NULL
