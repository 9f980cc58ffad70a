"""Typed, path-based getters over untyped JSON.

The remote service does not hold to a strict schema: ids arrive as strings,
flags as 0/1, nested objects go missing. Every getter here returns ``None``
instead of raising when the value is absent or of an incompatible type.

A path is a sequence of keys; a bare string is treated as a one-key path::

    get_number({"data": {"id": "42"}}, ["data", "id"])  # -> 42
    get_number({"id": "42abc"}, "id")                    # -> None
"""

from __future__ import annotations

import json
import math
from typing import Any, Callable, Dict, Iterable, Optional, Sequence, Union

Path = Union[str, Sequence[str]]
Number = Union[int, float]

_TRUE_STRINGS = frozenset({"true", "1", "yes"})
_FALSE_STRINGS = frozenset({"false", "0", "no"})


def is_record(value: Any) -> bool:
    """True for JSON objects (dicts), False for arrays and scalars."""
    return isinstance(value, dict)


def _keys(path: Path) -> Sequence[str]:
    if isinstance(path, str):
        return (path,)
    return path


def get_value(obj: Any, path: Path) -> Any:
    """Walk ``path`` through nested objects; ``None`` if any hop is not an object."""
    cur = obj
    for key in _keys(path):
        if not is_record(cur):
            return None
        cur = cur.get(key)
    return cur


def _is_finite_number(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, float) and math.isfinite(value)


def _format_number(value: Number) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def coerce_number(value: Any) -> Optional[Number]:
    """Accept finite numbers and strings that fully parse to one."""
    if _is_finite_number(value):
        return value
    if not isinstance(value, str):
        return None
    text = value.strip()
    # int() and float() accept digit separators and non-ASCII digits; JSON numbers do not.
    if not text or "_" in text or not text.isascii():
        return None
    try:
        return int(text)
    except ValueError:
        pass
    try:
        parsed = float(text)
    except ValueError:
        return None
    if not math.isfinite(parsed):
        return None
    return parsed


def coerce_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if _is_finite_number(value):
        return value != 0
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE_STRINGS:
            return True
        if text in _FALSE_STRINGS:
            return False
    return None


def get_string(obj: Any, path: Path) -> Optional[str]:
    """String at ``path``; finite numbers are rendered as text."""
    value = get_value(obj, path)
    if isinstance(value, str):
        return value
    if _is_finite_number(value):
        return _format_number(value)
    return None


def get_number(obj: Any, path: Path) -> Optional[Number]:
    """Finite number at ``path``, coercing numeric strings. Never defaults to 0."""
    return coerce_number(get_value(obj, path))


def get_int(obj: Any, path: Path) -> Optional[int]:
    """Like ``get_number`` but only integral values (``"7"``, ``7``, ``7.0``)."""
    value = get_number(obj, path)
    if value is None:
        return None
    if isinstance(value, float):
        if not value.is_integer():
            return None
        return int(value)
    return value


def get_bool(obj: Any, path: Path) -> Optional[bool]:
    """Boolean at ``path``; accepts 0/1 and ``"true"``/``"yes"``/``"no"``-style strings."""
    return coerce_bool(get_value(obj, path))


def first_present(
    obj: Any,
    *paths: Path,
    getter: Callable[[Any, Path], Any] = get_value,
) -> Any:
    """Try each path in turn; first non-``None`` result wins."""
    for path in paths:
        value = getter(obj, path)
        if value is not None:
            return value
    return None


def parse_json_lenient(value: Any) -> Any:
    """Decode JSON-in-a-string fields. Non-strings pass through unchanged.

    Blank strings and undecodable text yield ``None``.
    """
    if not isinstance(value, str):
        return value
    if not value.strip():
        return None
    try:
        return json.loads(value)
    except ValueError:
        return None


def as_list(value: Any) -> list:
    """The value if it is a list (or a JSON string holding one), else ``[]``."""
    decoded = parse_json_lenient(value)
    if isinstance(decoded, list):
        return decoded
    return []


def numeric_map(obj: Any) -> Dict[str, Number]:
    """All top-level entries of an object that coerce to a finite number."""
    if not is_record(obj):
        return {}
    out: Dict[str, Number] = {}
    for key, value in obj.items():
        number = coerce_number(value)
        if number is not None:
            out[key] = number
    return out


def positive_numbers(values: Iterable[Any]) -> list:
    """Finite, strictly positive numbers from ``values``, order kept."""
    out = []
    for value in values:
        number = coerce_number(value)
        if number is not None and number > 0:
            out.append(number)
    return out
