"""Tests for number literal conversions."""

import math
from decimal import Decimal

import pytest

from kdlkit.errors import NumberFormatError, NumberOverflowError
from kdlkit.nodes import KdlNumber
from kdlkit.numbers import NumberBase, canonical, is_integral, number_base, to_decimal, to_float, to_int


# ---------------------------------------------------------------------------
# radix and integer conversions
# ---------------------------------------------------------------------------

@pytest.mark.parametrize(
    "raw, base",
    [("10", NumberBase.DECIMAL), ("0x1F", NumberBase.HEX), ("-0o17", NumberBase.OCTAL), ("+0b10", NumberBase.BINARY)],
)
def test_number_base(raw, base):
    assert number_base(raw) is base

@pytest.mark.parametrize(
    "raw, value",
    [("42", 42), ("-1_000", -1000), ("+7", 7), ("0xFF", 255), ("-0x10", -16), ("0o17", 15), ("0b1010", 10)],
)
def test_to_int(raw, value):
    assert to_int(raw) == value

def test_to_int_is_arbitrary_precision():
    assert to_int("123456789012345678901234567890") == 123456789012345678901234567890

def test_to_int_has_no_digit_limit():
    assert to_int("9" * 5000) == 10**5000 - 1

def test_to_int_rejects_fractions():
    with pytest.raises(NumberFormatError):
        to_int("1.5")

def test_is_integral():
    assert is_integral("0xFF")
    assert is_integral("12")
    assert not is_integral("1.0")
    assert not is_integral("1e3")
    assert not is_integral("#inf")


# ---------------------------------------------------------------------------
# sized integers
# ---------------------------------------------------------------------------

def test_u8_boundaries():
    assert KdlNumber(raw="255").to_u8() == 255
    assert KdlNumber(raw="0").to_u8() == 0
    with pytest.raises(NumberOverflowError):
        KdlNumber(raw="256").to_u8()
    with pytest.raises(NumberOverflowError):
        KdlNumber(raw="-1").to_u8()

def test_i8_boundaries():
    assert KdlNumber(raw="-128").to_i8() == -128
    assert KdlNumber(raw="127").to_i8() == 127
    with pytest.raises(NumberOverflowError):
        KdlNumber(raw="128").to_i8()

def test_u32_boundaries():
    assert KdlNumber(raw="4294967295").to_u32() == 4294967295
    with pytest.raises(NumberOverflowError):
        KdlNumber(raw="4294967296").to_u32()

def test_i64_and_u64_boundaries():
    assert KdlNumber(raw="-9223372036854775808").to_i64() == -(2**63)
    assert KdlNumber(raw="0xFFFF_FFFF_FFFF_FFFF").to_u64() == 2**64 - 1
    with pytest.raises(NumberOverflowError):
        KdlNumber(raw="9223372036854775808").to_i64()

def test_overflow_is_also_an_overflow_error():
    with pytest.raises(OverflowError):
        KdlNumber(raw="70000").to_i16()


# ---------------------------------------------------------------------------
# floats and decimals
# ---------------------------------------------------------------------------

def test_to_float():
    assert to_float("1.5e3") == 1500.0
    assert to_float("-0.25") == -0.25
    assert to_float("0x10") == 16.0

def test_special_floats():
    assert to_float("#inf") == math.inf
    assert to_float("#-inf") == -math.inf
    assert math.isnan(to_float("#nan"))

def test_float32_rounds_and_overflows():
    assert KdlNumber(raw="0.1").to_float32() != 0.1
    assert KdlNumber(raw="1e39").to_float32() == math.inf
    assert KdlNumber(raw="-1e39").to_float32() == -math.inf

def test_to_decimal_is_exact():
    assert to_decimal("0.1") == Decimal("0.1")
    assert to_decimal("1_000.000_1") == Decimal("1000.0001")

def test_to_python():
    assert KdlNumber(raw="10").to_python() == 10
    assert KdlNumber(raw="2.5").to_python() == 2.5


# ---------------------------------------------------------------------------
# canonical form and equality
# ---------------------------------------------------------------------------

@pytest.mark.parametrize(
    "raw, text",
    [("+1_000", "1000"), ("0xFF", "255"), ("-0b11", "-3"), ("1.5e10", "1.5e10"), ("#nan", "#nan")],
)
def test_canonical(raw, text):
    assert canonical(raw) == text

def test_numbers_compare_by_value():
    assert KdlNumber(raw="0xFF") == KdlNumber(raw="255")
    assert KdlNumber(raw="1.0") == KdlNumber(raw="1")
    assert KdlNumber(raw="1") != KdlNumber(raw="2")

def test_special_numbers_compare_by_spelling():
    assert KdlNumber(raw="#nan") == KdlNumber(raw="#nan")
    assert KdlNumber(raw="#inf") != KdlNumber(raw="#-inf")

def test_canonical_huge_radix_literal():
    raw = "0x" + "f" * 4000
    text = canonical(raw)
    assert text.isdigit()
    assert to_decimal(text) == to_decimal(raw)
    assert canonical("-" + raw).startswith("-")
