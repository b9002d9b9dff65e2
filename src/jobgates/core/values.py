"""Tagged answer values with JavaScript comparison semantics.

Questionnaire answers and gate rule values arrive as untyped JSON-like data.
They are converted into a small closed set of value types so that every gate
operator can dispatch on the tag instead of guessing at Python types. The
comparison helpers reproduce the semantics the stored rules were authored
against: strict equality (``===``), ``SameValueZero`` membership
(``Array.prototype.includes``) and ``Number()`` coercion.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from numbers import Real
from typing import Any, Union


class _MissingType:
    """Sentinel for an answer that was never supplied."""

    _instance: "_MissingType | None" = None

    def __new__(cls) -> "_MissingType":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING = _MissingType()


@dataclass(frozen=True, slots=True)
class MissingValue:
    pass


@dataclass(frozen=True, slots=True)
class NullValue:
    pass


@dataclass(frozen=True, slots=True)
class BoolValue:
    value: bool


@dataclass(frozen=True, slots=True)
class NumberValue:
    value: float


@dataclass(frozen=True, slots=True)
class StringValue:
    value: str


@dataclass(frozen=True, slots=True)
class ArrayValue:
    items: tuple["Value", ...]


@dataclass(frozen=True, slots=True, eq=False)
class OpaqueValue:
    """Objects and unsupported types; only ever equal by identity."""

    raw: Any


Value = Union[
    MissingValue,
    NullValue,
    BoolValue,
    NumberValue,
    StringValue,
    ArrayValue,
    OpaqueValue,
]

_VALUE_TYPES = (
    MissingValue,
    NullValue,
    BoolValue,
    NumberValue,
    StringValue,
    ArrayValue,
    OpaqueValue,
)

_DECIMAL_LITERAL = re.compile(
    r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?"
)
_RADIX_LITERALS = (
    (re.compile(r"0[xX][0-9a-fA-F]+"), 16),
    (re.compile(r"0[oO][0-7]+"), 8),
    (re.compile(r"0[bB][01]+"), 2),
)
_INFINITIES = {"Infinity": math.inf, "+Infinity": math.inf, "-Infinity": -math.inf}
# StrWhiteSpaceChar: WhiteSpace and LineTerminator, not str.isspace()
_JS_WHITESPACE = (
    "\t\n\v\f\r \u00a0\u1680\u2000\u2001\u2002\u2003\u2004\u2005"
    "\u2006\u2007\u2008\u2009\u200a\u2028\u2029\u202f\u205f\u3000\ufeff"
)


def to_value(raw: Any) -> Value:
    """Convert a JSON-like Python object into a tagged value."""
    if isinstance(raw, _VALUE_TYPES):
        return raw
    if raw is MISSING:
        return MissingValue()
    if raw is None:
        return NullValue()
    # bool is a subclass of int and must never become a number
    if isinstance(raw, bool):
        return BoolValue(raw)
    if isinstance(raw, Real):
        return NumberValue(_as_float(raw))
    if isinstance(raw, str):
        return StringValue(raw)
    if isinstance(raw, (list, tuple)):
        return ArrayValue(tuple(to_value(item) for item in raw))
    return OpaqueValue(raw)


def is_array(value: Value) -> bool:
    return isinstance(value, ArrayValue)


def strict_equals(left: Value, right: Value) -> bool:
    """Strict equality: same tag and payload, no coercion."""
    if isinstance(left, NumberValue) and isinstance(right, NumberValue):
        return left.value == right.value
    if isinstance(left, (MissingValue, NullValue)):
        return type(left) is type(right)
    if isinstance(left, (BoolValue, StringValue)):
        return type(left) is type(right) and left.value == right.value
    # arrays and objects compare by reference; parsed values never share one
    return False


def same_value_zero(left: Value, right: Value) -> bool:
    """Membership equality used by includes(): NaN matches NaN."""
    if isinstance(left, NumberValue) and isinstance(right, NumberValue):
        if math.isnan(left.value) and math.isnan(right.value):
            return True
    return strict_equals(left, right)


def contains(array: ArrayValue, needle: Value) -> bool:
    return any(same_value_zero(item, needle) for item in array.items)


def to_number(value: Value) -> float:
    """Numeric coercion; anything non-numeric becomes NaN."""
    if isinstance(value, NumberValue):
        return value.value
    if isinstance(value, NullValue):
        return 0.0
    if isinstance(value, BoolValue):
        return 1.0 if value.value else 0.0
    if isinstance(value, StringValue):
        return string_to_number(value.value)
    if isinstance(value, ArrayValue):
        return _array_to_number(value)
    return math.nan


def string_to_number(text: str) -> float:
    stripped = text.strip(_JS_WHITESPACE)
    if not stripped:
        return 0.0
    if stripped in _INFINITIES:
        return _INFINITIES[stripped]
    for pattern, base in _RADIX_LITERALS:
        if pattern.fullmatch(stripped):
            return _as_float(int(stripped[2:], base))
    if _DECIMAL_LITERAL.fullmatch(stripped):
        return float(stripped)
    return math.nan


def _array_to_number(value: ArrayValue) -> float:
    # Arrays coerce through their comma-joined string form; two or more
    # elements always leave a comma behind, which is never numeric.
    if not value.items:
        return 0.0
    if len(value.items) > 1:
        return math.nan
    item = value.items[0]
    if isinstance(item, (MissingValue, NullValue)):
        return 0.0
    if isinstance(item, (NumberValue, StringValue, ArrayValue)):
        return to_number(item)
    return math.nan


def to_python(value: Value) -> Any:
    """Render a tagged value back to plain JSON-like data."""
    if isinstance(value, (MissingValue, NullValue)):
        return None
    if isinstance(value, (BoolValue, StringValue)):
        return value.value
    if isinstance(value, NumberValue):
        number = value.value
        if number.is_integer():
            return int(number)
        return number
    if isinstance(value, ArrayValue):
        return [to_python(item) for item in value.items]
    return value.raw


def _as_float(number: Real) -> float:
    try:
        return float(number)
    except OverflowError:
        return math.inf if number > 0 else -math.inf


__all__ = [
    "MISSING",
    "ArrayValue",
    "BoolValue",
    "MissingValue",
    "NullValue",
    "NumberValue",
    "OpaqueValue",
    "StringValue",
    "Value",
    "contains",
    "is_array",
    "same_value_zero",
    "strict_equals",
    "string_to_number",
    "to_number",
    "to_python",
    "to_value",
]
