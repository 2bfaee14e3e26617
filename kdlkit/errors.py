"""Exception hierarchy shared by the lexer, parser, number conversions and validator."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .nodes import KdlValue


class KdlError(Exception):
    """Base class for every error raised by kdlkit."""


class KdlParseError(KdlError):
    def __init__(self, message: str, line: int, column: int, offset: int):
        super().__init__(f"{message} at line {line}, column {column}")
        self.message = message
        self.line = line
        self.column = column
        self.offset = offset


class KdlLexicalError(KdlParseError):
    """Malformed literal: bad escape, unbalanced raw string, bad dedent, unterminated comment or string."""


class KdlSyntaxError(KdlParseError):
    """Unexpected token, unexpected end of input or missing terminator."""


class ReservedKeywordError(KdlParseError):
    """A bare ``true``/``false``/``null`` (or ``inf``/``-inf``/``nan``) used where an identifier is required."""


class NumberFormatError(KdlError, ValueError):
    pass


class NumberOverflowError(KdlError, OverflowError):
    pass


@dataclass(frozen=True, slots=True)
class ValidationIssue:
    message: str
    value: "KdlValue"


class KdlValidationError(KdlError):
    def __init__(self, issues: list[ValidationIssue]):
        super().__init__(f"Found {len(issues)} validation errors in the KDL document.")
        self.issues = issues


__all__ = [
    "KdlError",
    "KdlParseError",
    "KdlLexicalError",
    "KdlSyntaxError",
    "ReservedKeywordError",
    "NumberFormatError",
    "NumberOverflowError",
    "ValidationIssue",
    "KdlValidationError",
]
