"""Character classes of the KDL grammar."""

from __future__ import annotations

WHITESPACE = frozenset(
    "\u0009\u0020\u00a0\u1680"
    "\u2000\u2001\u2002\u2003\u2004\u2005\u2006\u2007\u2008\u2009\u200a"
    "\u202f\u205f\u3000"
)

# CRLF is handled by the lexer as a single newline
NEWLINES = frozenset("\u000d\u000a\u0085\u000b\u000c\u2028\u2029")

NON_IDENTIFIER_CHARS = frozenset('\\/(){};[]"#=')

BOM = "\ufeff"

RESERVED_KEYWORDS = frozenset({"true", "false", "null", "inf", "-inf", "nan"})

HEX_DIGITS = frozenset("0123456789abcdefABCDEF")
OCTAL_DIGITS = frozenset("01234567")
BINARY_DIGITS = frozenset("01")
DECIMAL_DIGITS = frozenset("0123456789")


def is_whitespace(char: str) -> bool:
    return char in WHITESPACE


def is_newline(char: str) -> bool:
    return char in NEWLINES


def is_disallowed(char: str) -> bool:
    """Code points that may not appear anywhere in a document, except a leading BOM."""
    code = ord(char)
    return (
        code <= 0x08
        or 0x0E <= code <= 0x1F
        or code == 0x7F
        or 0xD800 <= code <= 0xDFFF
        or 0x200E <= code <= 0x200F
        or 0x202A <= code <= 0x202E
        or 0x2066 <= code <= 0x2069
        or code == 0xFEFF
    )


def is_identifier_char(char: str) -> bool:
    return not (
        char == "\0"
        or char in WHITESPACE
        or char in NEWLINES
        or char in NON_IDENTIFIER_CHARS
        or is_disallowed(char)
    )


def is_valid_bare_identifier(text: str) -> bool:
    """True when ``text`` can be written unquoted and read back as the same string."""
    if not text or text in RESERVED_KEYWORDS:
        return False
    if not all(is_identifier_char(c) for c in text):
        return False
    body = text[1:] if text[0] in "+-" else text
    if not body:
        return True
    if body[0] in DECIMAL_DIGITS:
        return False
    if body[0] == "." and len(body) > 1 and body[1] in DECIMAL_DIGITS:
        return False
    return True
