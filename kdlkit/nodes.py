"""Node definitions for the KDL document tree.

Every tree type is a frozen pydantic model. Sequences are stored as tuples so a
parsed tree cannot be changed after construction, and equality is structural:
string kinds, number spellings and slashdash trivia are presentation details
that never take part in it.
"""

from __future__ import annotations

from enum import Flag
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

from . import numbers
from .charsets import is_valid_bare_identifier
from .numbers import NumberBase


class StringKind(Flag):
    BARE = 1
    QUOTED = 2
    RAW = 4
    MULTILINE = 8

    RAW_QUOTED = QUOTED | RAW
    RAW_MULTILINE = MULTILINE | RAW


class KdlTree(BaseModel):
    model_config = ConfigDict(frozen=True)

    def _key(self) -> tuple[Any, ...]:
        raise NotImplementedError

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, KdlTree):
            return NotImplemented
        return type(self) is type(other) and self._key() == other._key()

    def __hash__(self) -> int:
        return hash((type(self).__name__, self._key()))


# Values ----------------------------------------------------------------------
class KdlValue(KdlTree):
    type_annotation: str | None = None

    def to_python(self) -> Any:
        raise NotImplementedError

    def with_annotation(self, annotation: str | None) -> "KdlValue":
        return self.model_copy(update={"type_annotation": annotation})


class KdlNull(KdlValue):
    def _key(self) -> tuple[Any, ...]:
        return (self.type_annotation,)

    def to_python(self) -> None:
        return None


class KdlBool(KdlValue):
    value: bool

    def _key(self) -> tuple[Any, ...]:
        return (self.type_annotation, self.value)

    def to_python(self) -> bool:
        return self.value


class KdlNumber(KdlValue):
    raw: str

    def _key(self) -> tuple[Any, ...]:
        return (self.type_annotation, numbers.equality_key(self.raw))

    @property
    def radix(self) -> NumberBase:
        return numbers.number_base(self.raw)

    @property
    def is_integral(self) -> bool:
        return numbers.is_integral(self.raw)

    def to_int(self) -> int:
        return numbers.to_int(self.raw)

    def to_sized_int(self, bits: int, signed: bool) -> int:
        return numbers.to_sized_int(self.raw, bits, signed)

    def to_i8(self) -> int:
        return self.to_sized_int(8, True)

    def to_i16(self) -> int:
        return self.to_sized_int(16, True)

    def to_i32(self) -> int:
        return self.to_sized_int(32, True)

    def to_i64(self) -> int:
        return self.to_sized_int(64, True)

    def to_u8(self) -> int:
        return self.to_sized_int(8, False)

    def to_u16(self) -> int:
        return self.to_sized_int(16, False)

    def to_u32(self) -> int:
        return self.to_sized_int(32, False)

    def to_u64(self) -> int:
        return self.to_sized_int(64, False)

    def to_float(self) -> float:
        return numbers.to_float(self.raw)

    def to_float32(self) -> float:
        return numbers.to_float32(self.raw)

    def to_decimal(self):
        return numbers.to_decimal(self.raw)

    def canonical(self) -> str:
        return numbers.canonical(self.raw)

    def to_python(self) -> int | float:
        return self.to_int() if self.is_integral else self.to_float()


class KdlString(KdlValue):
    value: str
    kind: StringKind = StringKind.QUOTED

    def _key(self) -> tuple[Any, ...]:
        return (self.type_annotation, self.value)

    def to_python(self) -> str:
        return self.value

    @classmethod
    def of(cls, value: str, annotation: str | None = None) -> "KdlString":
        """A string that will be written bare when the text allows it."""
        kind = StringKind.BARE if is_valid_bare_identifier(value) else StringKind.QUOTED
        return cls(value=value, kind=kind, type_annotation=annotation)


# Entries ---------------------------------------------------------------------
class KdlEntry(KdlTree):
    pass


class KdlArgument(KdlEntry):
    value: KdlValue

    def _key(self) -> tuple[Any, ...]:
        return (self.value,)


class KdlProperty(KdlEntry):
    key: KdlString
    value: KdlValue

    @field_validator("key", mode="before")
    @classmethod
    def _coerce_key(cls, key: Any) -> Any:
        return KdlString.of(key) if isinstance(key, str) else key

    def _key(self) -> tuple[Any, ...]:
        return (self.key, self.value)


class KdlSkippedEntry(KdlEntry):
    """Source text of a slashdash-elided entry, kept only for verbatim output."""

    raw: str

    def _key(self) -> tuple[Any, ...]:
        return (self.raw,)


# Nodes -----------------------------------------------------------------------
class KdlNode(KdlTree):
    name: KdlString
    type_annotation: str | None = None
    entries: tuple[KdlEntry, ...] = ()
    children: "KdlBlock | None" = None
    terminated_by_semicolon: bool = False

    @field_validator("name", mode="before")
    @classmethod
    def _coerce_name(cls, name: Any) -> Any:
        return KdlString.of(name) if isinstance(name, str) else name

    def _key(self) -> tuple[Any, ...]:
        semantic_entries = tuple(e for e in self.entries if not isinstance(e, KdlSkippedEntry))
        children = self.children if self.has_children else None
        return (self.name, self.type_annotation, semantic_entries, children)

    @property
    def arguments(self) -> tuple[KdlValue, ...]:
        return tuple(e.value for e in self.entries if isinstance(e, KdlArgument))

    @property
    def properties(self) -> tuple[KdlProperty, ...]:
        return tuple(e for e in self.entries if isinstance(e, KdlProperty))

    @property
    def has_children(self) -> bool:
        return self.children is not None and len(self.children.nodes) > 0

    @property
    def nodes(self) -> tuple["KdlNode", ...]:
        return self.children.nodes if self.children is not None else ()

    def argument(self, index: int) -> KdlValue | None:
        args = self.arguments
        return args[index] if 0 <= index < len(args) else None

    def property(self, key: str) -> KdlValue | None:
        """Value of the last property named ``key``; later properties override earlier ones."""
        for entry in reversed(self.entries):
            if isinstance(entry, KdlProperty) and entry.key.value == key:
                return entry.value
        return None

    def child_group(self, name: str) -> tuple["KdlNode", ...]:
        return tuple(node for node in self.nodes if node.name.value == name)


class KdlBlock(KdlTree):
    nodes: tuple[KdlNode, ...] = ()

    def _key(self) -> tuple[Any, ...]:
        return (self.nodes,)


KdlNode.model_rebuild()


__all__ = [
    "StringKind",
    "KdlTree",
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
]
