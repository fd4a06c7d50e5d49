"""Template values.

The renderer evaluates templates against a uniform value tree built from
``None``, ``bool``, ``int``, ``float``, ``str``, ``list`` and ``dict`` with
string keys. ``to_value()`` converts arbitrary host data into that tree once
per render; everything downstream can then rely on exact ``isinstance``
checks.

Truthiness:
    None → false, bool → itself, str/list → non-empty, number → nonzero,
    dict → error (objects have no truthiness).

Printing:
    None → "", bool → "true"/"false", int → decimal, float → shortest
    round-trip form with an unpadded exponent (1e21, 1e-7), str → raw (no
    escaping), list/dict → error.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping, Sequence, Set
from enum import Enum
from typing import Any

from tinytemplate.environment.exceptions import (
    TruthinessError,
    UnprintableError,
    UnsupportedValueError,
)

_SCALARS = (str, bool, int, float, type(None))


def to_value(obj: Any) -> Any:
    """Convert host data into a template value tree.

    Raises:
        UnsupportedValueError: For data with no value representation.
    """
    if isinstance(obj, _SCALARS):
        return obj
    if isinstance(obj, Enum):
        return to_value(obj.value)
    if isinstance(obj, Mapping):
        return {_key(k): to_value(v) for k, v in obj.items()}
    if isinstance(obj, (Sequence, Set)) and not isinstance(obj, (bytes, bytearray)):
        return [to_value(item) for item in obj]
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {f.name: to_value(getattr(obj, f.name)) for f in dataclasses.fields(obj)}
    model_dump = getattr(obj, "model_dump", None)
    if callable(model_dump):
        return to_value(model_dump())
    raise UnsupportedValueError(obj)


def _key(key: Any) -> str:
    if isinstance(key, str):
        return key
    if isinstance(key, Enum):
        key = key.value
    if isinstance(key, bool):
        return "true" if key else "false"
    if isinstance(key, (int, float)):
        return str(key)
    raise UnsupportedValueError(key)


def type_name(value: Any) -> str:
    """Name of a value's kind as used in error messages."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    return "object"


def is_truthy(value: Any, path: str) -> bool:
    """Evaluate a value for ``{% if %}``.

    Raises:
        TruthinessError: If the value is a dict.
    """
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, (str, list)):
        return len(value) > 0
    raise TruthinessError(path)


def format_value(value: Any) -> str:
    """Printable form of a primitive value.

    This is the default formatter used for ``{{ path }}``.

    Raises:
        UnprintableError: For lists and dicts.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return value
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        text = repr(value)
        mantissa, sep, exponent = text.partition("e")
        if sep:
            # 1e-07 -> 1e-7, 1e+21 -> 1e21
            return f"{mantissa}e{int(exponent)}"
        return text
    raise UnprintableError(type_name(value))
