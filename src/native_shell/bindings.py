"""Binding flattening.

Converts caller bindings of arbitrary shape into the flat ``str -> str``
environment a child process sees. Composite values are spread over
generated keys, the same way array elements live in a flat variable store:

    name = "x"              -> name=x
    name = None             -> name=
    name = ["a", None]      -> name_0=a  name_1=
    name = []               -> name_empty=
    name = {"k": "v"}       -> name_k=v
    name = {}               -> name_empty=
    name = [["a"], {"k": 1}] -> name_0_0=a  name_1_k=1

Collisions between a literal name and a generated key are not detected;
the later entry wins.

Floats are rendered with ``repr``: ``42.0`` keeps its trailing ``.0``, while
large, tiny and special values use Python's spelling (``1e+20``, ``1e-05``,
``nan``, ``inf``).
"""

from __future__ import annotations

import numbers
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Union

from .errors import BindingError

EMPTY_SUFFIX = "empty"
"""Suffix of the probe key emitted for an empty sequence or mapping."""


@dataclass(frozen=True)
class NullValue:
    pass


@dataclass(frozen=True)
class ScalarValue:
    text: str


@dataclass(frozen=True)
class SequenceValue:
    items: tuple["BindingValue", ...]


@dataclass(frozen=True)
class MappingValue:
    entries: tuple[tuple[str, "BindingValue"], ...]


BindingValue = Union[NullValue, ScalarValue, SequenceValue, MappingValue]

NULL = NullValue()


def str_of(value: Any) -> str:
    """Render a scalar the way the child process should see it."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return repr(value)
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


def _is_scalar(value: Any) -> bool:
    return isinstance(value, (str, bytes, bool, numbers.Number))


def to_binding_value(value: Any) -> BindingValue:
    """Classify a raw Python value into a BindingValue.

    Raises:
        TypeError: if the value is not None, a scalar, a sequence or a mapping.
    """
    if value is None:
        return NULL
    if _is_scalar(value):
        return ScalarValue(str_of(value))
    if isinstance(value, Mapping):
        return MappingValue(
            tuple((str_of(key), to_binding_value(item)) for key, item in value.items())
        )
    if isinstance(value, Sequence):
        return SequenceValue(tuple(to_binding_value(item) for item in value))
    raise TypeError(f"unsupported value of type {type(value).__name__}")


def _flatten_into(out: dict[str, str], name: str, value: BindingValue) -> None:
    if isinstance(value, NullValue):
        out[name] = ""
    elif isinstance(value, ScalarValue):
        out[name] = value.text
    elif isinstance(value, SequenceValue):
        if not value.items:
            out[f"{name}_{EMPTY_SUFFIX}"] = ""
        for index, item in enumerate(value.items):
            _flatten_into(out, f"{name}_{index}", item)
    elif isinstance(value, MappingValue):
        if not value.entries:
            out[f"{name}_{EMPTY_SUFFIX}"] = ""
        for key, item in value.entries:
            _flatten_into(out, f"{name}_{key}", item)
    else:
        raise TypeError(f"unknown binding value {value!r}")


def flatten_value(name: str, value: Any) -> dict[str, str]:
    """Flatten a single binding into environment entries."""
    out: dict[str, str] = {}
    _flatten_into(out, name, to_binding_value(value))
    return out


def flatten_bindings(bindings: Mapping[str, Any]) -> dict[str, str]:
    """Flatten every binding into one environment mapping.

    Raises:
        BindingError: naming the first binding whose value cannot be flattened.
    """
    env: dict[str, str] = {}
    for name, value in bindings.items():
        try:
            env.update(flatten_value(str(name), value))
        except TypeError as e:
            raise BindingError(str(name), str(e)) from e
        except RecursionError as e:
            raise BindingError(str(name), "value contains itself") from e
    return env
