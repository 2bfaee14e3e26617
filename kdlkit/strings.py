"""Escape decoding and multiline dedenting for string literals."""

from __future__ import annotations

from .charsets import HEX_DIGITS, is_newline, is_whitespace

SIMPLE_ESCAPES = {
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "\\": "\\",
    '"': '"',
    "b": "\b",
    "f": "\f",
    "s": " ",
    "/": "/",
}


class StringLiteralError(ValueError):
    """Raised with the index, relative to the text being decoded, of the offending character."""

    def __init__(self, message: str, index: int):
        super().__init__(message)
        self.message = message
        self.index = index


def read_escape(text: str, index: int) -> tuple[str, int]:
    """Decode the escape starting at ``text[index] == '\\'``; returns the decoded text and the next index."""
    nxt = text[index + 1] if index + 1 < len(text) else ""
    if nxt in SIMPLE_ESCAPES:
        return SIMPLE_ESCAPES[nxt], index + 2
    if nxt == "u":
        return _read_unicode_escape(text, index)
    if nxt and (is_whitespace(nxt) or is_newline(nxt)):
        end = index + 1
        while end < len(text) and (is_whitespace(text[end]) or is_newline(text[end])):
            end += 1
        return "", end
    if not nxt:
        raise StringLiteralError("Unterminated escape sequence", index)
    raise StringLiteralError(f"Unrecognized escape sequence '\\{nxt}'", index)


def _read_unicode_escape(text: str, index: int) -> tuple[str, int]:
    if index + 2 >= len(text) or text[index + 2] != "{":
        raise StringLiteralError("Expected '{' after '\\u'", index)
    end = text.find("}", index + 3)
    digits = text[index + 3 : end] if end >= 0 else ""
    if end < 0 or not 1 <= len(digits) <= 6 or not all(c in HEX_DIGITS for c in digits):
        raise StringLiteralError("Unicode escapes must be written as \\u{...} with 1 to 6 hex digits", index)
    code = int(digits, 16)
    if 0xD800 <= code <= 0xDFFF or code > 0x10FFFF:
        raise StringLiteralError(f"Invalid unicode scalar value U+{code:04X}", index)
    return chr(code), end + 1


def unescape(text: str) -> str:
    parts: list[str] = []
    index = 0
    while index < len(text):
        char = text[index]
        if char == "\\":
            decoded, index = read_escape(text, index)
            parts.append(decoded)
        else:
            parts.append(char)
            index += 1
    return "".join(parts)


def resolve_whitespace_escapes(text: str) -> str:
    """Drop ``\\`` + whitespace escapes, leaving every other escape for :func:`unescape`."""
    parts: list[str] = []
    index = 0
    while index < len(text):
        char = text[index]
        if char == "\\" and index + 1 < len(text):
            nxt = text[index + 1]
            if is_whitespace(nxt) or is_newline(nxt):
                _, index = read_escape(text, index)
                continue
            parts.append(text[index : index + 2])
            index += 2
            continue
        parts.append(char)
        index += 1
    return "".join(parts)


def normalize_newlines(text: str) -> str:
    text = text.replace("\r\n", "\n")
    return "".join("\n" if is_newline(c) else c for c in text)


def dedent(body: str) -> str:
    """Dedent the lines between a multiline string's delimiters.

    ``body`` starts right after the newline that follows the opening delimiter
    and ends at the closing delimiter. Its last line holds the indentation of
    the closing delimiter, which is removed from every other line.
    """
    lines = body.split("\n")
    prefix = lines.pop()
    if any(not is_whitespace(c) for c in prefix):
        raise StringLiteralError(
            "Multi-line string closing delimiter must be on its own line, preceded only by whitespace",
            len(body) - len(prefix),
        )
    result: list[str] = []
    position = 0
    for line in lines:
        if all(is_whitespace(c) for c in line):
            result.append("")
        elif line.startswith(prefix):
            result.append(line[len(prefix) :])
        else:
            raise StringLiteralError(
                "Multi-line string indentation mismatch: every line must start with the closing line's indentation",
                position,
            )
        position += len(line) + 1
    return "\n".join(result)


__all__ = [
    "SIMPLE_ESCAPES",
    "StringLiteralError",
    "read_escape",
    "unescape",
    "resolve_whitespace_escapes",
    "normalize_newlines",
    "dedent",
]
