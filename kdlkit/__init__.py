"""KDL v2 document parsing, writing and validation."""

from .errors import (
    KdlError,
    KdlParseError,
    KdlLexicalError,
    KdlSyntaxError,
    ReservedKeywordError,
    NumberFormatError,
    NumberOverflowError,
    ValidationIssue,
    KdlValidationError,
)
from .nodes import (
    StringKind,
    KdlValue,
    KdlNull,
    KdlBool,
    KdlNumber,
    KdlString,
    KdlEntry,
    KdlArgument,
    KdlProperty,
    KdlSkippedEntry,
    KdlNode,
    KdlBlock,
)
from .document import KdlDocument
from .lexer import KdlLexer, Token, TokenType
from .parser import KdlParser
from .formatter import KdlFormatter, StringStyle
from .validator import RESERVED_TYPES, ReservedTypeValidator
from .reader import KdlReader, ReaderConfig, ReadResult, parse, dumps, validate
from .builder import KdlBuilder, KdlNodeBuilder, value_from
from .flatten import flatten

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
    "StringKind",
    "KdlValue",
    "KdlNull",
    "KdlBool",
    "KdlNumber",
    "KdlString",
    "KdlEntry",
    "KdlArgument",
    "KdlProperty",
    "KdlSkippedEntry",
    "KdlNode",
    "KdlBlock",
    "KdlDocument",
    "KdlLexer",
    "Token",
    "TokenType",
    "KdlParser",
    "KdlFormatter",
    "StringStyle",
    "RESERVED_TYPES",
    "ReservedTypeValidator",
    "KdlReader",
    "ReaderConfig",
    "ReadResult",
    "parse",
    "dumps",
    "validate",
    "KdlBuilder",
    "KdlNodeBuilder",
    "value_from",
    "flatten",
]
