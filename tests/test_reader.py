"""Tests for the reader entry points."""

import logging

import pytest

from kdlkit import KdlReader, dumps, parse, validate
from kdlkit.errors import KdlSyntaxError, KdlValidationError
from kdlkit.formatter import KdlFormatter, StringStyle
from kdlkit.nodes import KdlNumber, KdlSkippedEntry


def test_read_returns_document():
    doc = KdlReader.read("server host=localhost port=(u16)8080")
    assert doc.node("server").property("port") == KdlNumber(raw="8080", type_annotation="u16")

def test_read_validates_by_default():
    with pytest.raises(KdlValidationError) as exc:
        KdlReader.read("node (u8)256")
    assert exc.value.issues[0].message == "Value '256' is not a valid 'u8'."

def test_read_without_validation():
    doc = KdlReader.read("node (u8)256", config={"validate_reserved_types": False})
    assert doc.nodes[0].argument(0).raw == "256"

def test_read_keeps_skipped_entries_when_asked():
    doc = KdlReader.read("node /-1 2", config={"keep_skipped_entries": True})
    assert isinstance(doc.nodes[0].entries[0], KdlSkippedEntry)

def test_read_raises_parse_errors():
    with pytest.raises(KdlSyntaxError):
        KdlReader.read("node {")


# ---------------------------------------------------------------------------
# try_read
# ---------------------------------------------------------------------------

def test_try_read_success():
    result = KdlReader.try_read("node 1")
    assert result.ok
    assert result.document.nodes[0].name.value == "node"
    assert result.parse_error is None
    assert result.validation_issues == []

def test_try_read_parse_error():
    result = KdlReader.try_read("node {\n")
    assert not result.ok
    assert result.document is None
    assert result.parse_error.line == 2

def test_try_read_validation_issues_keep_document():
    result = KdlReader.try_read("node (u8)256 (i8)-129")
    assert not result.ok
    assert result.document is not None
    assert len(result.validation_issues) == 2


# ---------------------------------------------------------------------------
# files and helpers
# ---------------------------------------------------------------------------

def test_read_file(tmp_path):
    path = tmp_path / "config.kdl"
    path.write_text("title \"héllo\"\n", encoding="utf-8")
    doc = KdlReader.read_file(path)
    assert doc.node("title").argument(0).value == "héllo"

def test_read_file_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        KdlReader.read_file(tmp_path / "missing.kdl")

def test_parse_and_dumps():
    assert dumps(parse("node   0x10   key=\"v\"")) == "node 16 key=v\n"

def test_dumps_with_formatter():
    formatter = KdlFormatter(string_style=StringStyle.ALLOW_BARE | StringStyle.PRESERVE)
    assert dumps(parse("node 0x10;"), formatter) == "node 0x10;\n"

def test_validate_helper_returns_issues():
    doc = parse("node (u8)256", config={"validate_reserved_types": False})
    assert len(validate(doc)) == 1
    assert validate(parse("node (u8)1")) == []

def test_logging_can_be_enabled(caplog):
    with caplog.at_level(logging.INFO, logger="kdlkit.reader"):
        KdlReader.read("node 1", config={"enable_logger": True})
    assert any("Read document" in record.message for record in caplog.records)

def test_disabled_component_leaves_shared_logger_alone(caplog):
    logging.getLogger("kdlkit.parser").disabled = False
    KdlReader.read("node 1")
    assert not logging.getLogger("kdlkit.parser").disabled
    with caplog.at_level(logging.INFO, logger="kdlkit.parser"):
        parse("node 1")
    assert not any(record.name == "kdlkit.parser" for record in caplog.records)
