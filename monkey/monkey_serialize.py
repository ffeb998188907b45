from __future__ import annotations

import json
from typing import Any, Callable

import yaml

from monkey.monkey_datatypes import (
    MonkeyObject, Integer, Boolean, Null, String, Array, Hash, Builtin, Error,
    Hashable, native_bool_to_boolean, NULL, INT64_MIN, INT64_MAX,
)


# --------------------------
# Host <-> Monkey values
# --------------------------

def to_python(obj: MonkeyObject) -> Any:
    """Converts a Monkey value into plain Python data."""
    match obj:
        case Boolean():
            return obj.value
        case Integer():
            return obj.value
        case Null():
            return None
        case String():
            return obj.value
        case Array():
            return [to_python(e) for e in obj.elements]
        case Hash():
            return {to_python(p.key): to_python(p.value) for p in obj.pairs.values()}
        case _:
            raise TypeError(f"cannot convert {obj.type.value} to a host value")


def from_python(value: Any) -> MonkeyObject:
    """Converts plain Python data (and callables) into Monkey values."""
    if isinstance(value, MonkeyObject):
        return value
    if value is None:
        return NULL
    # bool must be checked before int
    if isinstance(value, bool):
        return native_bool_to_boolean(value)
    if isinstance(value, int):
        if not INT64_MIN <= value <= INT64_MAX:
            raise ValueError(f"integer out of range: {value}")
        return Integer(value)
    if isinstance(value, str):
        return String(value)
    if isinstance(value, (list, tuple)):
        return Array([from_python(v) for v in value])
    if isinstance(value, dict):
        hash_obj = Hash()
        for k, v in value.items():
            key = from_python(k)
            if not isinstance(key, Hashable):
                raise TypeError(f"unusable as hash key: {key.type.value}")
            hash_obj.set(key, from_python(v))
        return hash_obj
    if callable(value):
        return host_builtin(value)
    raise TypeError(f"cannot convert {type(value).__name__} to a Monkey value")


def host_builtin(func: Callable, name: str | None = None) -> Builtin:
    """Wraps a Python callable so scripts can call it with Monkey arguments."""
    name = name or getattr(func, "__name__", "host")

    def call(*args: MonkeyObject) -> MonkeyObject:
        try:
            return from_python(func(*(to_python(a) for a in args)))
        except Exception as e:
            return Error(f"{name}: {e}")

    return Builtin(call, name)


# --------------------------
# Text formats
# --------------------------

def serialize(obj: MonkeyObject, fmt: str = 'json') -> str:
    """Serializes a Monkey value. Supported fmt: 'json', 'yaml'."""
    data = to_python(obj)
    match fmt.lower():
        case 'json':
            return json.dumps(data)
        case 'yaml' | 'yml':
            return yaml.safe_dump(data, sort_keys=False)
        case _:
            raise ValueError(f"unsupported format: {fmt}")


def deserialize(text: str, fmt: str = 'json') -> MonkeyObject:
    """Parses JSON or YAML text into a Monkey value."""
    match fmt.lower():
        case 'json':
            data = json.loads(text)
        case 'yaml' | 'yml':
            data = yaml.safe_load(text)
        case _:
            raise ValueError(f"unsupported format: {fmt}")
    return from_python(data)
