import json

import pytest
import yaml

from monkey.monkey_serialize import (
    serialize, deserialize, to_python, from_python, host_builtin,
)
from monkey.monkey_datatypes import (
    Integer, String, Array, Hash, Error, Builtin, Function, Environment,
    TRUE, FALSE, NULL,
)


def sample_hash():
    h = Hash()
    h.set(String("name"), String("monkey"))
    h.set(String("tags"), Array([Integer(1), TRUE, NULL]))
    return h


def test_to_python_scalars():
    assert to_python(Integer(5)) == 5
    assert to_python(TRUE) is True
    assert to_python(FALSE) is False
    assert to_python(NULL) is None
    assert to_python(String("s")) == "s"


def test_to_python_rejects_functions_and_errors():
    with pytest.raises(TypeError):
        to_python(Error("nope"))
    with pytest.raises(TypeError):
        to_python(Function([], None, Environment()))


def test_from_python_values():
    assert from_python(True) is TRUE
    assert from_python(None) is NULL
    assert from_python(7) == Integer(7)
    assert from_python("x") == String("x")
    assert from_python((1, 2)) == Array([Integer(1), Integer(2)])
    h = from_python({"a": 1, 2: "b"})
    assert h.get(String("a")) == Integer(1)
    assert h.get(Integer(2)) == String("b")
    assert from_python(Integer(3)) == Integer(3)


def test_from_python_rejects_unsupported_values():
    with pytest.raises(TypeError):
        from_python(1.5)
    with pytest.raises(TypeError):
        from_python({(1, 2): "tuple key"})


def test_host_builtin_wraps_callables():
    double = host_builtin(lambda x: x * 2, "double")
    assert isinstance(double, Builtin)
    assert double.fn(Integer(4)) == Integer(8)
    failing = host_builtin(lambda: 1 / 0, "boom")
    result = failing.fn()
    assert isinstance(result, Error)
    assert result.message.startswith("boom: ")


def test_serialize_json():
    text = serialize(sample_hash(), 'json')
    assert json.loads(text) == {"name": "monkey", "tags": [1, True, None]}


def test_serialize_yaml_keeps_insertion_order():
    text = serialize(sample_hash(), 'yaml')
    assert yaml.safe_load(text) == {"name": "monkey", "tags": [1, True, None]}
    assert text.index("name") < text.index("tags")


def test_serialize_unknown_format():
    with pytest.raises(ValueError):
        serialize(Integer(1), 'xml')


def test_deserialize_json_and_yaml():
    assert deserialize('[1, "two", false]') == Array([Integer(1), String("two"), FALSE])
    h = deserialize("count: 3\nitems:\n  - a\n", 'yml')
    assert h.get(String("count")) == Integer(3)
    assert h.get(String("items")) == Array([String("a")])
    with pytest.raises(ValueError):
        deserialize("x", 'toml')


def test_from_python_keeps_int64_bounds():
    assert from_python(2 ** 63 - 1) == Integer(2 ** 63 - 1)
    assert from_python(-(2 ** 63)) == Integer(-(2 ** 63))
    with pytest.raises(ValueError):
        from_python(2 ** 63)
    with pytest.raises(ValueError):
        from_python(-(2 ** 63) - 1)


def test_deserialize_rejects_integers_beyond_64_bits():
    with pytest.raises(ValueError):
        deserialize("12345678901234567890")
    with pytest.raises(ValueError):
        deserialize("big: -99999999999999999999\n", 'yaml')
