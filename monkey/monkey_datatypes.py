"""
Defines the runtime object model of the Monkey interpreter.

This module provides the closed set of values the evaluator produces,
the structural hash keys used by `Hash`, and `Environment`, the chained
variable scope that backs lexical scoping and closures.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Callable, Dict, List, NamedTuple, Optional

from monkey.monkey_ast import Identifier, BlockStatement

INT64_MASK = 0xFFFFFFFFFFFFFFFF
INT64_MIN = -(1 << 63)
INT64_MAX = (1 << 63) - 1
_FNV64_OFFSET = 0xCBF29CE484222325
_FNV64_PRIME = 0x100000001B3


def to_int64(value: int) -> int:
    """Wraps an arbitrary Python int to signed 64-bit two's complement."""
    value &= INT64_MASK
    if value >= 1 << 63:
        value -= 1 << 64
    return value


def fnv1a_64(data: bytes) -> int:
    h = _FNV64_OFFSET
    for byte in data:
        h ^= byte
        h = (h * _FNV64_PRIME) & INT64_MASK
    return h


class ObjectType(Enum):
    INTEGER = "INTEGER"
    BOOLEAN = "BOOLEAN"
    NULL = "NULL"
    RETURN_VALUE = "RETURN_VALUE"
    ERROR = "ERROR"
    FUNCTION = "FUNCTION"
    STRING = "STRING"
    BUILTIN = "BUILTIN"
    ARRAY = "ARRAY"
    HASH = "HASH"


class HashKey(NamedTuple):
    type: ObjectType
    value: int


# =================================================================
# Abstract Base Classes
# =================================================================

class MonkeyObject(ABC):
    """Abstract base class for every runtime value."""
    type: ObjectType

    def inspect(self) -> str:
        from monkey.monkey_printer import Printer
        return Printer().pformat(self)

    def __repr__(self) -> str:
        return f"<{self.type.value} {self.inspect()}>"


class Hashable(ABC):
    """Values usable as `Hash` keys. Equal content must give equal keys."""

    @abstractmethod
    def hash_key(self) -> HashKey:
        raise NotImplementedError


# =================================================================
# Value types
# =================================================================

class Integer(MonkeyObject, Hashable):
    type = ObjectType.INTEGER

    def __init__(self, value: int):
        self.value = to_int64(value)

    def hash_key(self) -> HashKey:
        return HashKey(self.type, self.value & INT64_MASK)

    def __eq__(self, other):
        if not isinstance(other, Integer):
            return NotImplemented
        return self.value == other.value

    def __hash__(self):
        return hash(self.hash_key())


class Boolean(MonkeyObject, Hashable):
    """Only the TRUE and FALSE singletons below should ever exist."""
    type = ObjectType.BOOLEAN

    def __init__(self, value: bool):
        self.value = value

    def hash_key(self) -> HashKey:
        return HashKey(self.type, 1 if self.value else 0)


class Null(MonkeyObject):
    type = ObjectType.NULL


class String(MonkeyObject, Hashable):
    type = ObjectType.STRING

    def __init__(self, value: str):
        self.value = value

    def hash_key(self) -> HashKey:
        return HashKey(self.type, fnv1a_64(self.value.encode("utf-8")))

    def __eq__(self, other):
        if not isinstance(other, String):
            return NotImplemented
        return self.value == other.value

    def __hash__(self):
        return hash(self.hash_key())


TRUE = Boolean(True)
FALSE = Boolean(False)
NULL = Null()


def native_bool_to_boolean(value: bool) -> Boolean:
    return TRUE if value else FALSE


# =================================================================
# Control flow carriers
# =================================================================

class ReturnValue(MonkeyObject):
    """Wraps the operand of `return` while it unwinds to the nearest call."""
    type = ObjectType.RETURN_VALUE

    def __init__(self, value: MonkeyObject):
        self.value = value


class Error(MonkeyObject):
    type = ObjectType.ERROR

    def __init__(self, message: str):
        self.message = message

    def __eq__(self, other):
        if not isinstance(other, Error):
            return NotImplemented
        return self.message == other.message

    def __hash__(self):
        return hash(self.message)


def is_error(obj: Optional[MonkeyObject]) -> bool:
    return obj is not None and obj.type is ObjectType.ERROR


# =================================================================
# Callables
# =================================================================

class Function(MonkeyObject):
    """A closure: parameters, body and the environment it was defined in.

    The environment is shared by reference, never copied, so later
    bindings in the defining scope are visible to the function.
    """
    type = ObjectType.FUNCTION

    def __init__(self, parameters: List[Identifier], body: BlockStatement, env: 'Environment'):
        self.parameters = parameters
        self.body = body
        self.env = env


BuiltinFunction = Callable[..., MonkeyObject]


class Builtin(MonkeyObject):
    type = ObjectType.BUILTIN

    def __init__(self, fn: BuiltinFunction, name: Optional[str] = None):
        self.fn = fn
        self.name = name


# =================================================================
# Collections
# =================================================================

class Array(MonkeyObject):
    type = ObjectType.ARRAY

    def __init__(self, elements: List[MonkeyObject]):
        self.elements = list(elements)

    def __eq__(self, other):
        if not isinstance(other, Array):
            return NotImplemented
        return self.elements == other.elements

    __hash__ = None


class HashPair(NamedTuple):
    key: MonkeyObject
    value: MonkeyObject


class Hash(MonkeyObject):
    type = ObjectType.HASH

    def __init__(self, pairs: Optional[Dict[HashKey, HashPair]] = None):
        self.pairs: Dict[HashKey, HashPair] = dict(pairs or {})

    def get(self, key: Hashable, default: Optional[MonkeyObject] = None) -> Optional[MonkeyObject]:
        pair = self.pairs.get(key.hash_key())
        if pair is None:
            return default
        return pair.value

    def set(self, key: Hashable, value: MonkeyObject):
        self.pairs[key.hash_key()] = HashPair(key, value)


# =================================================================
# Environment
# =================================================================

class Environment:
    """A mapping of names to objects with an optional enclosing scope.

    Lookup walks outward through `outer`; writes always land in this
    environment, so an inner binding shadows an outer one without
    changing it.
    """
    def __init__(self, outer: Optional['Environment'] = None):
        self.store: Dict[str, MonkeyObject] = {}
        self.outer = outer

    @classmethod
    def enclosed(cls, outer: 'Environment') -> 'Environment':
        return cls(outer=outer)

    def find_owner(self, name: str) -> Optional['Environment']:
        """Finds the environment in the chain that binds `name`."""
        env = self
        while env is not None:
            if name in env.store:
                return env
            env = env.outer
        return None

    def get(self, name: str, default: Any = None) -> Any:
        owner = self.find_owner(name)
        if owner is None:
            return default
        return owner.store[name]

    def set(self, name: str, value: MonkeyObject) -> MonkeyObject:
        self.store[name] = value
        return value

    def __repr__(self) -> str:
        depth = 0
        env = self.outer
        while env is not None:
            depth += 1
            env = env.outer
        return f"<Environment keys={list(self.store)} depth={depth}>"
