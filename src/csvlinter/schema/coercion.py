"""Best-effort conversion of CSV text into schema-declared primitive types.

CSV fields are always strings. Before a row is checked against the schema,
each field whose property declares a primitive ``type`` is converted so that
``{"type": "integer"}`` compares numerically rather than lexically. Trial order
is fixed: integer, then number; anything else (including properties that only
declare non-numeric types) is validated as the original string.
"""

from __future__ import annotations

import math
import re
from typing import AbstractSet, Any, Callable

INTEGER = "integer"
NUMBER = "number"
BOOLEAN = "boolean"
NULL = "null"
STRING = "string"

PRIMITIVE_TYPES = frozenset({INTEGER, NUMBER, BOOLEAN, NULL, STRING, "object", "array"})

_INTEGER_RE = re.compile(r"[+-]?[0-9]+")
_FAILED = object()


def _to_integer(raw: str) -> Any:
    if _INTEGER_RE.fullmatch(raw) is None:
        return _FAILED
    return int(raw)


def _to_number(raw: str) -> Any:
    # float() tolerates padding and digit separators; CSV cells with either stay text.
    if not raw or raw != raw.strip() or "_" in raw:
        return _FAILED
    try:
        return float(raw)
    except ValueError:
        return _FAILED


TRIAL_ORDER: tuple[tuple[str, Callable[[str], Any]], ...] = (
    (INTEGER, _to_integer),
    (NUMBER, _to_number),
)


def coerce_value(declared: AbstractSet[str], raw: str) -> Any:
    """Convert ``raw`` to the first declared type that accepts it.

    >>> coerce_value({"integer"}, "30")
    30
    >>> coerce_value({"integer", "null"}, "")
    ''
    >>> coerce_value({"number"}, "abc")
    'abc'
    """

    for type_name, convert in TRIAL_ORDER:
        if type_name not in declared:
            continue
        value = convert(raw)
        if value is not _FAILED:
            return value
    return raw


def declared_types(property_schema: Any) -> frozenset[str]:
    """Primitive type names a property schema declares via ``type``."""

    if not isinstance(property_schema, dict):
        return frozenset()
    value = property_schema.get("type")
    if isinstance(value, str):
        return frozenset({value}) & PRIMITIVE_TYPES
    if isinstance(value, list):
        return frozenset(v for v in value if isinstance(v, str)) & PRIMITIVE_TYPES
    return frozenset()


def stringify(value: Any) -> str:
    """Render a coerced value for reports (``30.0`` prints as ``30``)."""

    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isfinite(value) and value.is_integer() and abs(value) < 1e21:
            return str(int(value))
        return repr(value)
    return str(value)


__all__ = [
    "BOOLEAN",
    "INTEGER",
    "NULL",
    "NUMBER",
    "STRING",
    "TRIAL_ORDER",
    "coerce_value",
    "declared_types",
    "stringify",
]
