"""Entry points tying the parser, validator and writer together."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import NotRequired, Optional, TypedDict

from kdlkit.logger import Logger
from kdlkit.utils import resolve_config

from .document import KdlDocument
from .errors import KdlParseError, ValidationIssue
from .formatter import KdlFormatter
from .parser import KdlParser
from .validator import ReservedTypeValidator


class ReaderConfig(TypedDict):
    validate_reserved_types: NotRequired[bool]
    keep_skipped_entries: NotRequired[bool]
    max_depth: NotRequired[int]
    enable_logger: NotRequired[bool]


class ReaderConfigRequired(TypedDict):
    validate_reserved_types: bool
    keep_skipped_entries: bool
    max_depth: int
    enable_logger: bool


DEFAULT_CONFIG: ReaderConfigRequired = {
    "validate_reserved_types": True,
    "keep_skipped_entries": False,
    "max_depth": 128,
    "enable_logger": False,
}


@dataclass
class ReadResult:
    document: KdlDocument | None = None
    parse_error: KdlParseError | None = None
    validation_issues: list[ValidationIssue] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.parse_error is None and not self.validation_issues


class KdlReader:
    @staticmethod
    def read(text: str, config: Optional[ReaderConfig] = None) -> KdlDocument:
        resolved = resolve_config(config or {}, DEFAULT_CONFIG)
        document = KdlReader._parse(text, resolved)
        if resolved["validate_reserved_types"]:
            ReservedTypeValidator(config={"enable_logger": resolved["enable_logger"]}).validate(document)
        return document

    @staticmethod
    def try_read(text: str, config: Optional[ReaderConfig] = None) -> ReadResult:
        """Like :meth:`read`, but bad input is reported in the result instead of raised."""
        resolved = resolve_config(config or {}, DEFAULT_CONFIG)
        try:
            document = KdlReader._parse(text, resolved)
        except KdlParseError as exc:
            return ReadResult(parse_error=exc)
        issues: list[ValidationIssue] = []
        if resolved["validate_reserved_types"]:
            issues = ReservedTypeValidator(config={"enable_logger": resolved["enable_logger"]}).collect_issues(document)
        return ReadResult(document=document, validation_issues=issues)

    @staticmethod
    def _parse(text: str, config: ReaderConfigRequired) -> KdlDocument:
        logger = Logger(config={"name": "kdlkit.reader", "is_enabled": config["enable_logger"]}).logger
        parser = KdlParser(
            text,
            config={
                "keep_skipped_entries": config["keep_skipped_entries"],
                "max_depth": config["max_depth"],
                "enable_logger": config["enable_logger"],
            },
        )
        document = parser.parse_document()
        logger.info(f"Read document with {len(document.nodes)} top-level nodes")
        return document

    @staticmethod
    def read_file(path: str | Path, config: Optional[ReaderConfig] = None) -> KdlDocument:
        return KdlReader.read(Path(path).read_text(encoding="utf-8"), config)


def parse(text: str, config: Optional[ReaderConfig] = None) -> KdlDocument:
    return KdlReader.read(text, config)


def dumps(document: KdlDocument, formatter: Optional[KdlFormatter] = None) -> str:
    return (formatter or KdlFormatter()).format_document(document)


def validate(document: KdlDocument) -> list[ValidationIssue]:
    """Issues found in ``document``; an empty list means every reserved annotation holds."""
    return ReservedTypeValidator().collect_issues(document)


__all__ = ["ReaderConfig", "ReadResult", "KdlReader", "parse", "dumps", "validate"]
