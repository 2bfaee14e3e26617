"""Tests for reserved type annotation checks."""

import pytest

from kdlkit.errors import KdlValidationError
from kdlkit.nodes import KdlNumber, KdlString
from kdlkit.parser import parse
from kdlkit.validator import RESERVED_TYPES, ReservedTypeValidator, validate


def issues(text):
    return ReservedTypeValidator().collect_issues(parse(text))


def test_catalog_has_all_reserved_names():
    assert len(RESERVED_TYPES) == 26
    assert {"u8", "f32", "date-time", "uuid", "base64", "country-3"} <= RESERVED_TYPES


# ---------------------------------------------------------------------------
# integers
# ---------------------------------------------------------------------------

@pytest.mark.parametrize(
    "text",
    [
        "node (u8)255",
        "node (u8)0",
        "node (i8)-128",
        "node (i8)127",
        "node (u32)4294967295",
        "node (i64)-9223372036854775808",
        "node (u16)0xFFFF",
    ],
)
def test_integers_in_range(text):
    assert issues(text) == []

@pytest.mark.parametrize(
    "text, raw, name",
    [
        ("node (u8)256", "256", "u8"),
        ("node (u8)-1", "-1", "u8"),
        ("node (i8)128", "128", "i8"),
        ("node (u32)4294967296", "4294967296", "u32"),
        ("node (i16)1.5", "1.5", "i16"),
    ],
)
def test_integers_out_of_range(text, raw, name):
    found = issues(text)
    assert len(found) == 1
    assert found[0].message == f"Value '{raw}' is not a valid '{name}'."

def test_integer_type_mismatch():
    found = issues('node (u8)"12"')
    assert found[0].message == "Expected a Number for type 'u8', got String"
    assert found[0].value == KdlString(value="12", type_annotation="u8")

def test_keyword_type_mismatch():
    assert issues("node (i32)#null")[0].message == "Expected a Number for type 'i32', got Null"


# ---------------------------------------------------------------------------
# floats and unchecked names
# ---------------------------------------------------------------------------

def test_floats_accept_any_number():
    assert issues("node (f32)1e39 (f64)#nan (f32)0x10") == []

def test_float_type_mismatch():
    assert issues("node (f64)#true")[0].message == "Expected a Number for type 'f64', got Bool"

@pytest.mark.parametrize("name", ["decimal64", "decimal128", "decimal", "currency", "country-2", "country-3", "duration"])
def test_unchecked_names_always_pass(name):
    assert issues(f'node ({name})"anything" ({name})12 ({name})#null') == []

def test_unknown_annotations_are_ignored():
    assert issues('node (whatever)"x" (color)12') == []


# ---------------------------------------------------------------------------
# strings
# ---------------------------------------------------------------------------

@pytest.mark.parametrize(
    "text",
    [
        'node (date-time)"2024-01-15T10:30:00Z"',
        'node (date)"2024-01-15"',
        'node (time)"10:30:00"',
        'node (uuid)"123e4567-e89b-12d3-a456-426614174000"',
        'node (url)"https://kdl.dev/docs"',
        'node (ipv4)"192.168.0.1"',
        'node (ipv6)"::1"',
        'node (base64)"aGVsbG8="',
        'node (regex)"^a+b*$"',
    ],
)
def test_valid_strings(text):
    assert issues(text) == []

@pytest.mark.parametrize(
    "text, name",
    [
        ('node (date)"2024-13-45"', "date"),
        ('node (date-time)"yesterday"', "date-time"),
        ('node (date-time)"12345"', "date-time"),
        ('node (date-time)"1700000000.5"', "date-time"),
        ('node (date)"1700000000"', "date"),
        ('node (time)"3600"', "time"),
        ('node (time)"25:99"', "time"),
        ('node (uuid)"not-a-uuid"', "uuid"),
        ('node (url)"no scheme here"', "url"),
        ('node (ipv4)"::1"', "ipv4"),
        ('node (ipv6)"10.0.0.1"', "ipv6"),
        ('node (base64)"a"', "base64"),
        ('node (regex)"(unclosed"', "regex"),
    ],
)
def test_invalid_strings(text, name):
    found = issues(text)
    assert len(found) == 1
    assert found[0].message.endswith(f"is not a valid '{name}'.")

def test_string_type_mismatch():
    assert issues("node (uuid)12")[0].message == "Expected a String for type 'uuid', got Number"


# ---------------------------------------------------------------------------
# collection
# ---------------------------------------------------------------------------

def test_all_issues_are_collected():
    text = "a (u8)300 key=(i8)200 {\n    b (ipv4)\"x\"\n}\nc (u8)1"
    found = issues(text)
    assert [issue.value for issue in found] == [
        KdlNumber(raw="300", type_annotation="u8"),
        KdlNumber(raw="200", type_annotation="i8"),
        KdlString(value="x", type_annotation="ipv4"),
    ]

def test_validate_raises_with_issues():
    with pytest.raises(KdlValidationError) as exc:
        validate(parse("a (u8)300 (u8)400"))
    assert len(exc.value.issues) == 2
    assert str(exc.value) == "Found 2 validation errors in the KDL document."

def test_validate_returns_document():
    doc = parse("a (u8)3")
    assert validate(doc) is doc
