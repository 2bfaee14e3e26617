"""Tokenizer for KDL documents.

The lexer owns every literal, comment and whitespace recognizer of the
grammar. Tokens carry their 1-based line/column and their start/end offsets
so the parser can report positions and slice the source of elided entries.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Iterator, NotRequired, Optional, TypedDict

from kdlkit.logger import Logger
from kdlkit.utils import resolve_config

from .charsets import (
    BOM,
    DECIMAL_DIGITS,
    RESERVED_KEYWORDS,
    is_disallowed,
    is_identifier_char,
    is_newline,
    is_whitespace,
)
from .errors import KdlLexicalError, KdlParseError, ReservedKeywordError
from .nodes import KdlString, StringKind
from .strings import (
    StringLiteralError,
    dedent,
    normalize_newlines,
    read_escape,
    resolve_whitespace_escapes,
    unescape,
)


class TokenType(Enum):
    STRING = auto()
    NUMBER = auto()
    KEYWORD = auto()
    OPEN_PAREN = auto()
    CLOSE_PAREN = auto()
    OPEN_BRACE = auto()
    CLOSE_BRACE = auto()
    EQUALS = auto()
    SEMICOLON = auto()
    SLASHDASH = auto()
    WHITESPACE = auto()  # spaces, block comments and line continuations
    NEWLINE = auto()
    COMMENT = auto()  # single-line comment, always followed by NEWLINE or EOF
    EOF = auto()


@dataclass(slots=True)
class Token:
    type: TokenType
    value: Any
    line: int
    column: int
    offset: int
    end: int


PUNCTUATION = {
    "(": TokenType.OPEN_PAREN,
    ")": TokenType.CLOSE_PAREN,
    "{": TokenType.OPEN_BRACE,
    "}": TokenType.CLOSE_BRACE,
    "=": TokenType.EQUALS,
    ";": TokenType.SEMICOLON,
}

KEYWORDS = {"#true": True, "#false": False, "#null": None}
NUMBER_KEYWORDS = frozenset({"#inf", "#-inf", "#nan"})

NUMBER_RE = re.compile(
    r"[+-]?(?:"
    r"0x[0-9a-fA-F][0-9a-fA-F_]*"
    r"|0o[0-7][0-7_]*"
    r"|0b[01][01_]*"
    r"|[0-9][0-9_]*(?:\.[0-9][0-9_]*)?(?:[eE][+-]?[0-9][0-9_]*)?"
    r")"
)


class LexerConfig(TypedDict):
    tokenize: NotRequired[bool]
    enable_logger: NotRequired[bool]


class LexerConfigRequired(TypedDict):
    tokenize: bool
    enable_logger: bool


DEFAULT_CONFIG: LexerConfigRequired = {
    "tokenize": True,
    "enable_logger": False,
}


class KdlLexer:
    def __init__(self, text: str, config: Optional[LexerConfig] = None):
        self.text = text
        self.config = resolve_config(config or {}, DEFAULT_CONFIG)
        self.logger = Logger(config={"name": "kdlkit.lexer", "is_enabled": self.config["enable_logger"]}).logger
        self.tokens: list[Token] = []
        self.position = 0
        self.line = 1
        self.column = 1
        self._start = (0, 1, 1)
        if self.text.startswith(BOM):
            self.position = 1
        if self.config["tokenize"]:
            self.tokenize()

    @property
    def has_more_chars(self) -> bool:
        return self.position < len(self.text)

    @property
    def char(self) -> str:
        return self.text[self.position] if self.has_more_chars else "\0"

    @property
    def current_value(self) -> str:
        return self.text[self._start[0] : self.position]

    def _peek(self, steps: int = 1) -> str:
        if self.position + steps < len(self.text):
            return self.text[self.position + steps]
        return "\0"

    def _advance(self, steps: int = 1) -> None:
        for _ in range(steps):
            if not self.has_more_chars:
                raise self._error_here("Attempt to advance beyond end of input")
            char = self.char
            if is_newline(char) and not (char == "\r" and self._peek() == "\n"):
                self.line += 1
                self.column = 1
            else:
                self.column += 1
            self.position += 1

    def _consume_while(self, condition) -> None:
        while self.has_more_chars and condition(self.char):
            self._advance()

    def _scan_identifier_run(self) -> str:
        end = self.position
        while end < len(self.text) and is_identifier_char(self.text[end]):
            end += 1
        return self.text[self.position : end]

    def _mark(self) -> None:
        self._start = (self.position, self.line, self.column)

    def _emit(self, token_type: TokenType, value: Any) -> Token:
        offset, line, column = self._start
        token = Token(token_type, value, line, column, offset, self.position)
        self.logger.debug("Adding token %s with value %r at line %d, column %d", token_type, value, line, column)
        self.tokens.append(token)
        return token

    # Errors ------------------------------------------------------------------
    def location(self, offset: int) -> tuple[int, int]:
        """1-based (line, column) of ``offset``, counting CRLF as a single line break."""
        line, column = 1, 1
        for index in range(min(offset, len(self.text))):
            char = self.text[index]
            if is_newline(char) and not (char == "\r" and self.text[index + 1 : index + 2] == "\n"):
                line += 1
                column = 1
            else:
                column += 1
        return line, column

    def _error(self, message: str, error_type: type[KdlParseError] = KdlLexicalError) -> KdlParseError:
        offset, line, column = self._start
        return error_type(message, line, column, offset)

    def _error_here(self, message: str) -> KdlParseError:
        return KdlLexicalError(message, self.line, self.column, self.position)

    def _error_at(self, message: str, offset: int) -> KdlParseError:
        line, column = self.location(offset)
        return KdlLexicalError(message, line, column, offset)

    def _check_allowed(self, start: int, end: int) -> None:
        for index in range(start, end):
            if is_disallowed(self.text[index]):
                raise self._error_at(f"Disallowed code point U+{ord(self.text[index]):04X}", index)

    def _handle_unexpected_char(self):
        char = self.char
        if is_disallowed(char):
            raise self._error_here(f"Disallowed code point U+{ord(char):04X}")
        raise self._error_here(f"Unexpected character '{char}'")

    # Driver ------------------------------------------------------------------
    def iter_tokens(self) -> Iterator[Token]:
        self.logger.info("Starting tokenization")
        while self.has_more_chars:
            yield self._next_token()
        self._mark()
        yield self._emit(TokenType.EOF, None)
        self.logger.info("Tokenization complete")

    def tokenize(self) -> list[Token]:
        for _ in self.iter_tokens():
            pass
        return self.tokens

    def _next_token(self) -> Token:
        char = self.char
        self._mark()
        if is_whitespace(char) or char == "\\" or (char == "/" and self._peek() == "*"):
            return self._handle_node_space()
        if is_newline(char):
            self._advance(2 if char == "\r" and self._peek() == "\n" else 1)
            return self._emit(TokenType.NEWLINE, "\n")
        if char == "/":
            if self._peek() == "/":
                return self._handle_line_comment()
            if self._peek() == "-":
                self._advance(2)
                return self._emit(TokenType.SLASHDASH, "/-")
            self._handle_unexpected_char()
        if char in PUNCTUATION:
            self._advance()
            return self._emit(PUNCTUATION[char], char)
        if char == '"':
            return self._handle_quoted_string()
        if char == "#":
            return self._handle_hash()
        if char == "r" and self._is_raw_string_start(self.position + 1):
            return self._handle_raw_string()
        if char in DECIMAL_DIGITS or (char in "+-" and self._peek() in DECIMAL_DIGITS):
            return self._handle_number()
        if is_identifier_char(char):
            return self._handle_identifier()
        self._handle_unexpected_char()

    # Whitespace and comments -------------------------------------------------
    def _handle_node_space(self) -> Token:
        while self.has_more_chars:
            char = self.char
            if is_whitespace(char):
                self._advance()
            elif char == "/" and self._peek() == "*":
                self._consume_block_comment()
            elif char == "\\":
                self._consume_line_continuation()
            else:
                break
        return self._emit(TokenType.WHITESPACE, self.current_value)

    def _consume_block_comment(self) -> None:
        start = (self.position, self.line, self.column)
        depth = 0
        while True:
            if not self.has_more_chars:
                offset, line, column = start
                raise KdlLexicalError("Unterminated block comment", line, column, offset)
            if self.char == "/" and self._peek() == "*":
                depth += 1
                self._advance(2)
            elif self.char == "*" and self._peek() == "/":
                depth -= 1
                self._advance(2)
                if depth == 0:
                    return
            else:
                if is_disallowed(self.char):
                    self._handle_unexpected_char()
                self._advance()

    def _consume_line_continuation(self) -> None:
        start = (self.position, self.line, self.column)
        self._advance()
        while self.has_more_chars:
            if is_whitespace(self.char):
                self._advance()
            elif self.char == "/" and self._peek() == "*":
                self._consume_block_comment()
            else:
                break
        if self.char == "/" and self._peek() == "/":
            comment_start = self.position
            self._consume_while(lambda c: not is_newline(c))
            self._check_allowed(comment_start, self.position)
        if not self.has_more_chars:
            return
        if is_newline(self.char):
            self._advance(2 if self.char == "\r" and self._peek() == "\n" else 1)
            return
        offset, line, column = start
        raise KdlLexicalError("A line continuation '\\' must be followed by a newline", line, column, offset)

    def _handle_line_comment(self) -> Token:
        self._consume_while(lambda c: not is_newline(c))
        self._check_allowed(self._start[0], self.position)
        return self._emit(TokenType.COMMENT, self.current_value)

    # Strings -----------------------------------------------------------------
    def _handle_quoted_string(self) -> Token:
        if self.text.startswith('"""', self.position):
            return self._handle_multiline_string(raw=False, hashes="")
        self._advance()
        parts: list[str] = []
        while True:
            if not self.has_more_chars:
                raise self._error("Unterminated string, expected a closing '\"'")
            char = self.char
            if char == '"':
                self._advance()
                break
            if char == "\\":
                try:
                    decoded, end = read_escape(self.text, self.position)
                except StringLiteralError as exc:
                    raise self._error_at(exc.message, exc.index) from exc
                parts.append(decoded)
                self._advance(end - self.position)
                continue
            if is_newline(char):
                raise self._error_here("Single-line strings cannot contain newlines, use a multi-line string")
            if is_disallowed(char):
                self._handle_unexpected_char()
            parts.append(char)
            self._advance()
        return self._emit(TokenType.STRING, KdlString(value="".join(parts), kind=StringKind.QUOTED))

    def _is_raw_string_start(self, index: int) -> bool:
        while index < len(self.text) and self.text[index] == "#":
            index += 1
        return index < len(self.text) and self.text[index] == '"'

    def _handle_raw_string(self) -> Token:
        if self.char == "r":
            self._advance()
        hashes = ""
        while self.char == "#":
            hashes += "#"
            self._advance()
        if self.text.startswith('"""', self.position):
            return self._handle_multiline_string(raw=True, hashes=hashes)
        self._advance()
        closing = '"' + hashes
        end = self.text.find(closing, self.position)
        if end < 0:
            raise self._error(f"Unterminated raw string, expected a closing '{closing}'")
        content = self.text[self.position : end]
        for index, char in enumerate(content):
            if is_newline(char):
                raise self._error_at("Single-line raw strings cannot contain newlines", self.position + index)
        self._check_allowed(self.position, end)
        self._advance(end + len(closing) - self.position)
        if self.char == "#":
            raise self._error("Raw string closed with more '#' characters than it was opened with")
        return self._emit(TokenType.STRING, KdlString(value=content, kind=StringKind.RAW_QUOTED))

    def _handle_multiline_string(self, raw: bool, hashes: str) -> Token:
        self._advance(3)
        if self.char == "\r" and self._peek() == "\n":
            self._advance(2)
        elif is_newline(self.char):
            self._advance()
        else:
            raise self._error_here('Multi-line strings must start with a newline immediately after the opening """')
        content_start = self.position
        closing = '"""' + hashes
        end = self._find_multiline_end(closing, escapes=not raw)
        if end < 0:
            raise self._error(f"Unterminated multi-line string, expected a closing '{closing}'")
        content = self.text[content_start:end]
        self._check_allowed(content_start, end)
        self._advance(end + len(closing) - self.position)
        if raw and self.char == "#":
            raise self._error("Raw string closed with more '#' characters than it was opened with")
        try:
            body = normalize_newlines(content)
            if raw:
                value = dedent(body)
            else:
                value = unescape(dedent(resolve_whitespace_escapes(body)))
        except StringLiteralError as exc:
            raise self._error_at(exc.message, content_start + min(exc.index, len(content))) from exc
        kind = StringKind.RAW_MULTILINE if raw else StringKind.MULTILINE
        return self._emit(TokenType.STRING, KdlString(value=value, kind=kind))

    def _find_multiline_end(self, closing: str, escapes: bool) -> int:
        if not escapes:
            return self.text.find(closing, self.position)
        index = self.position
        while index < len(self.text):
            if self.text[index] == "\\":
                index += 2
                continue
            if self.text.startswith(closing, index):
                return index
            index += 1
        return -1

    # Numbers, keywords and identifiers ---------------------------------------
    def _handle_hash(self) -> Token:
        if self._is_raw_string_start(self.position):
            return self._handle_raw_string()
        word = "#" + self._scan_after_hash()
        if word in KEYWORDS:
            self._advance(len(word))
            return self._emit(TokenType.KEYWORD, KEYWORDS[word])
        if word in NUMBER_KEYWORDS:
            self._advance(len(word))
            return self._emit(TokenType.NUMBER, word)
        if word == "#":
            self._handle_unexpected_char()
        raise self._error(f"Unknown keyword '{word}', expected #true, #false, #null, #inf, #-inf or #nan")

    def _scan_after_hash(self) -> str:
        end = self.position + 1
        while end < len(self.text) and is_identifier_char(self.text[end]):
            end += 1
        return self.text[self.position + 1 : end]

    def _handle_number(self) -> Token:
        word = self._scan_identifier_run()
        if not NUMBER_RE.fullmatch(word):
            raise self._error(f"Invalid number literal '{word}'")
        self._advance(len(word))
        return self._emit(TokenType.NUMBER, word)

    def _handle_identifier(self) -> Token:
        word = self._scan_identifier_run()
        body = word[1:] if word[0] in "+-" else word
        if len(body) > 1 and body[0] == "." and body[1] in DECIMAL_DIGITS:
            raise self._error(f"Invalid number literal '{word}', a leading digit is required before '.'")
        if word in RESERVED_KEYWORDS:
            raise self._error(
                f"The keyword '{word}' cannot be used as an unquoted identifier. Wrap it in quotes: \"{word}\".",
                ReservedKeywordError,
            )
        self._advance(len(word))
        return self._emit(TokenType.STRING, KdlString(value=word, kind=StringKind.BARE))


__all__ = ["KdlLexer", "LexerConfig", "Token", "TokenType", "NUMBER_RE"]
