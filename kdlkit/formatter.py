"""Writer turning a KdlDocument back into KDL text."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Flag

from .charsets import NEWLINES, is_disallowed, is_valid_bare_identifier, is_whitespace
from .document import KdlDocument
from .nodes import (
    KdlArgument,
    KdlBool,
    KdlEntry,
    KdlNode,
    KdlNull,
    KdlNumber,
    KdlProperty,
    KdlSkippedEntry,
    KdlString,
    KdlValue,
    StringKind,
)

QUOTED_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\b": "\\b",
    "\f": "\\f",
}


class StringStyle(Flag):
    ALLOW_BARE = 1
    PRESERVE = 2
    RAW_PATHS = 4
    PREFER_RAW = 8
    ALLOW_MULTILINE = 16


@dataclass
class KdlFormatter:
    indent: str = "    "
    newline: str = "\n"
    string_style: StringStyle = StringStyle.ALLOW_BARE
    escape_unicode: bool = False

    @property
    def preserve(self) -> bool:
        return StringStyle.PRESERVE in self.string_style

    def format_document(self, document: KdlDocument) -> str:
        lines: list[str] = []
        for node in document.nodes:
            lines.extend(self.format_node(node, 0))
        if not lines:
            return ""
        return self.newline.join(lines) + self.newline

    def format_node(self, node: KdlNode, level: int = 0) -> list[str]:
        parts = [self._annotation(node.type_annotation) + self.format_string(node.name, level)]
        for entry in node.entries:
            text = self.format_entry(entry, level)
            if text is not None:
                parts.append(text)
        header = self._indent(level) + " ".join(parts)
        terminator = ";" if self.preserve and node.terminated_by_semicolon else ""
        if not node.has_children:
            return [header + terminator]

        lines = [header + " {"]
        for child in node.nodes:
            lines.extend(self.format_node(child, level + 1))
        lines.append(self._indent(level) + "}" + terminator)
        return lines

    def format_entry(self, entry: KdlEntry, level: int = 0) -> str | None:
        if isinstance(entry, KdlArgument):
            return self.format_value(entry.value, level)
        if isinstance(entry, KdlProperty):
            return f"{self.format_string(entry.key, level)}={self.format_value(entry.value, level)}"
        if isinstance(entry, KdlSkippedEntry):
            return f"/-{entry.raw}" if self.preserve else None
        raise TypeError(f"Unknown entry type: {type(entry).__name__}")

    def format_value(self, value: KdlValue, level: int = 0) -> str:
        prefix = self._annotation(value.type_annotation)
        if isinstance(value, KdlString):
            return prefix + self.format_string(value, level)
        if isinstance(value, KdlNumber):
            return prefix + (value.raw if self.preserve else value.canonical())
        if isinstance(value, KdlBool):
            return prefix + ("#true" if value.value else "#false")
        if isinstance(value, KdlNull):
            return prefix + "#null"
        raise TypeError(f"Unknown value type: {type(value).__name__}")

    def format_string(self, string: KdlString, level: int = 0) -> str:
        text = string.value
        if self.preserve:
            return self._preserved_string(string, level)
        if StringStyle.ALLOW_MULTILINE in self.string_style and "\n" in text and self._can_multiline(text):
            return self._multiline(text, level)
        if StringStyle.ALLOW_BARE in self.string_style and self._can_bare(text):
            return text
        wants_raw = (StringStyle.PREFER_RAW in self.string_style and any(c in text for c in '"\\')) or (
            StringStyle.RAW_PATHS in self.string_style and any(c in text for c in "/\\")
        )
        if wants_raw and self._can_raw(text):
            return self._raw(text)
        return self._quoted(text)

    # Helpers -----------------------------------------------------------------
    def _preserved_string(self, string: KdlString, level: int) -> str:
        text = string.value
        kind = string.kind
        if kind == StringKind.BARE and self._can_bare(text):
            return text
        if kind == StringKind.RAW_QUOTED and self._can_raw(text):
            return self._raw(text)
        if StringKind.MULTILINE in kind and self._can_multiline(text):
            if StringKind.RAW in kind and self._can_raw(text, multiline=True):
                return self._raw_multiline(text, level)
            return self._multiline(text, level)
        return self._quoted(text)

    def _can_bare(self, text: str) -> bool:
        return is_valid_bare_identifier(text) and not (self.escape_unicode and any(ord(c) > 0x7E for c in text))

    def _quoted(self, text: str) -> str:
        out = ['"']
        for char in text:
            if char in QUOTED_ESCAPES:
                out.append(QUOTED_ESCAPES[char])
            elif char in NEWLINES or is_disallowed(char) or (self.escape_unicode and ord(char) > 0x7E):
                out.append(f"\\u{{{ord(char):x}}}")
            else:
                out.append(char)
        out.append('"')
        return "".join(out)

    def _can_raw(self, text: str, multiline: bool = False) -> bool:
        for char in text:
            if is_disallowed(char):
                return False
            if char in NEWLINES and not (multiline and char == "\n"):
                return False
        return not self.escape_unicode or all(ord(c) <= 0x7E for c in text)

    def _hashes(self, text: str, quotes: str) -> str:
        hashes = "#"
        while quotes + hashes in text:
            hashes += "#"
        return hashes

    def _raw(self, text: str) -> str:
        hashes = self._hashes(text, '"')
        return f'{hashes}"{text}"{hashes}'

    def _can_multiline(self, text: str) -> bool:
        # whitespace-only lines are emptied by dedenting, so they cannot be represented
        for line in text.split("\n"):
            if line and all(is_whitespace(c) for c in line):
                return False
        return all(c == "\n" or c not in NEWLINES for c in text)

    def _multiline(self, text: str, level: int) -> str:
        escaped = []
        for char in text:
            if char == "\n":
                escaped.append(char)
            elif char in QUOTED_ESCAPES:
                escaped.append(QUOTED_ESCAPES[char])
            elif is_disallowed(char) or (self.escape_unicode and ord(char) > 0x7E):
                escaped.append(f"\\u{{{ord(char):x}}}")
            else:
                escaped.append(char)
        return self._multiline_body("".join(escaped), level, '"""', '"""')

    def _raw_multiline(self, text: str, level: int) -> str:
        hashes = self._hashes(text, '"""')
        return self._multiline_body(text, level, f'{hashes}"""', f'"""{hashes}')

    def _multiline_body(self, body: str, level: int, opener: str, closer: str) -> str:
        prefix = self._indent(level + 1)
        lines = [prefix + line if line else "" for line in body.split("\n")]
        return self.newline.join([opener, *lines, prefix + closer])

    def _annotation(self, annotation: str | None) -> str:
        if annotation is None:
            return ""
        if self._can_bare(annotation):
            return f"({annotation})"
        return f"({self._quoted(annotation)})"

    def _indent(self, level: int) -> str:
        return "" if level <= 0 else self.indent * level


__all__ = ["StringStyle", "KdlFormatter"]
