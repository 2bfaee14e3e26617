"""Conversions of number literals, kept as their source text, into Python numbers."""

from __future__ import annotations

import math
import struct
from decimal import Decimal, InvalidOperation
from enum import Enum

from .errors import NumberFormatError, NumberOverflowError


class NumberBase(Enum):
    BINARY = 2
    OCTAL = 8
    DECIMAL = 10
    HEX = 16


SPECIAL_FLOATS: dict[str, float] = {
    "#inf": math.inf,
    "#-inf": -math.inf,
    "#nan": math.nan,
}

_SPECIAL_DECIMALS: dict[str, Decimal] = {
    "#inf": Decimal("Infinity"),
    "#-inf": Decimal("-Infinity"),
    "#nan": Decimal("NaN"),
}

_PREFIXES = {"x": NumberBase.HEX, "o": NumberBase.OCTAL, "b": NumberBase.BINARY}


def number_base(raw: str) -> NumberBase:
    """Infer the radix from the literal's prefix, ignoring any sign."""
    text = raw[1:] if raw[:1] in ("+", "-") else raw
    if len(text) >= 2 and text[0] == "0":
        return _PREFIXES.get(text[1].lower(), NumberBase.DECIMAL)
    return NumberBase.DECIMAL


def is_special(raw: str) -> bool:
    return raw in SPECIAL_FLOATS


def sanitise(raw: str) -> tuple[str, int, bool]:
    """Split a literal into (digits without prefix/separators, radix, is_negative)."""
    text = raw.replace("_", "")
    if not text:
        return "0", 10, False
    negative = text[0] == "-"
    if text[0] in ("+", "-"):
        text = text[1:]
    base = number_base(raw)
    if base is not NumberBase.DECIMAL:
        text = text[2:]
    return text, base.value, negative


def is_integral(raw: str) -> bool:
    if is_special(raw):
        return False
    if number_base(raw) is not NumberBase.DECIMAL:
        return True
    return not any(c in raw for c in ".eE")


def to_int(raw: str) -> int:
    """Arbitrary-precision integer value of an integral literal."""
    if not is_integral(raw):
        raise NumberFormatError(f"Value '{raw}' is not a valid integer.")
    digits, radix, negative = sanitise(raw)
    try:
        # base 10 goes through Decimal, which has no digit limit
        magnitude = int(Decimal(digits)) if radix == 10 else int(digits, radix)
    except (ValueError, OverflowError, InvalidOperation) as exc:
        raise NumberFormatError(f"Value '{raw}' is not a valid {NumberBase(radix).name.lower()} integer.") from exc
    return -magnitude if negative else magnitude


def to_sized_int(raw: str, bits: int, signed: bool) -> int:
    value = to_int(raw)
    if signed:
        low, high = -(1 << (bits - 1)), (1 << (bits - 1)) - 1
    else:
        low, high = 0, (1 << bits) - 1
    if not low <= value <= high:
        kind = "i" if signed else "u"
        raise NumberOverflowError(f"Value '{raw}' is out of range for {kind}{bits}.")
    return value


def to_float(raw: str) -> float:
    if is_special(raw):
        return SPECIAL_FLOATS[raw]
    digits, radix, negative = sanitise(raw)
    if radix != 10:
        return float(to_int(raw))
    try:
        value = float(digits)
    except ValueError as exc:
        raise NumberFormatError(f"Value '{raw}' is not a valid float.") from exc
    return -value if negative else value


def to_float32(raw: str) -> float:
    """Nearest single-precision value; magnitudes beyond its range become infinities."""
    value = to_float(raw)
    if not math.isfinite(value):
        return value
    try:
        return struct.unpack("f", struct.pack("f", value))[0]
    except OverflowError:
        return math.copysign(math.inf, value)


def to_decimal(raw: str) -> Decimal:
    if is_special(raw):
        return _SPECIAL_DECIMALS[raw]
    digits, radix, negative = sanitise(raw)
    if radix != 10:
        return Decimal(to_int(raw))
    try:
        value = Decimal(digits)
    except InvalidOperation as exc:
        raise NumberFormatError(f"Value '{raw}' is not a valid decimal.") from exc
    return -value if negative else value


def canonical(raw: str) -> str:
    """Decimal spelling without separators or a '+' sign; radix literals become base 10."""
    if is_special(raw):
        return raw
    digits, radix, negative = sanitise(raw)
    if radix == 10:
        return f"-{digits}" if negative else digits
    # Decimal formatting has no digit limit, unlike int.__str__
    return format(Decimal(to_int(raw)), "f")


def equality_key(raw: str) -> str | Decimal:
    if is_special(raw):
        return raw
    try:
        return to_decimal(raw)
    except NumberFormatError:
        return raw


__all__ = [
    "NumberBase",
    "SPECIAL_FLOATS",
    "number_base",
    "is_special",
    "is_integral",
    "sanitise",
    "to_int",
    "to_sized_int",
    "to_float",
    "to_float32",
    "to_decimal",
    "canonical",
    "equality_key",
]
