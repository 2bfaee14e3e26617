"""Builders that turn plain Python values and mappings into KDL trees."""

from __future__ import annotations

import base64
import math
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from enum import Enum
from typing import Any, Mapping
from uuid import UUID

from .document import KdlDocument
from .nodes import (
    KdlArgument,
    KdlBlock,
    KdlBool,
    KdlEntry,
    KdlNode,
    KdlNull,
    KdlNumber,
    KdlProperty,
    KdlString,
    KdlValue,
)


def value_from(obj: Any, annotation: str | None = None) -> KdlValue:
    """Convert a Python scalar to a KdlValue.

    Typed values pick up the matching reserved annotation (``uuid``,
    ``date-time``, ``date``, ``time``, ``duration``, ``base64``) unless
    ``annotation`` is given explicitly.
    """
    if isinstance(obj, KdlValue):
        return obj if annotation is None else obj.with_annotation(annotation)
    if obj is None:
        return KdlNull(type_annotation=annotation)
    if isinstance(obj, bool):
        return KdlBool(value=obj, type_annotation=annotation)
    if isinstance(obj, Enum):
        return KdlString.of(obj.name, annotation)
    if isinstance(obj, int):
        return KdlNumber(raw=str(obj), type_annotation=annotation)
    if isinstance(obj, float):
        return KdlNumber(raw=_float_literal(obj), type_annotation=annotation)
    if isinstance(obj, Decimal):
        return KdlNumber(raw=_decimal_literal(obj), type_annotation=annotation)
    if isinstance(obj, str):
        return KdlString.of(obj, annotation)
    if isinstance(obj, UUID):
        return KdlString(value=str(obj), type_annotation=annotation or "uuid")
    # datetime is a subclass of date, so it must be checked first
    if isinstance(obj, datetime):
        return KdlString(value=obj.isoformat(), type_annotation=annotation or "date-time")
    if isinstance(obj, date):
        return KdlString(value=obj.isoformat(), type_annotation=annotation or "date")
    if isinstance(obj, time):
        return KdlString(value=obj.isoformat(), type_annotation=annotation or "time")
    if isinstance(obj, timedelta):
        return KdlString(value=_iso_duration(obj), type_annotation=annotation or "duration")
    if isinstance(obj, (bytes, bytearray)):
        encoded = base64.b64encode(bytes(obj)).decode("ascii")
        return KdlString(value=encoded, type_annotation=annotation or "base64")
    raise TypeError(f"Cannot convert value of type {type(obj).__name__} to a KDL value")


class KdlNodeBuilder:
    def __init__(self, name: str):
        self.name = name
        self.type_annotation: str | None = None
        self.entries: list[KdlEntry] = []
        self.children: list[KdlNode] = []

    def annotate(self, annotation: str | None) -> "KdlNodeBuilder":
        self.type_annotation = annotation
        return self

    def arg(self, value: Any, annotation: str | None = None) -> "KdlNodeBuilder":
        self.entries.append(KdlArgument(value=value_from(value, annotation)))
        return self

    def prop(self, key: str, value: Any, annotation: str | None = None) -> "KdlNodeBuilder":
        self.entries.append(KdlProperty(key=key, value=value_from(value, annotation)))
        return self

    def child(self, node: "KdlNode | KdlNodeBuilder") -> "KdlNodeBuilder":
        self.children.append(node.build() if isinstance(node, KdlNodeBuilder) else node)
        return self

    def build(self) -> KdlNode:
        return KdlNode(
            name=self.name,
            type_annotation=self.type_annotation,
            entries=tuple(self.entries),
            children=KdlBlock(nodes=tuple(self.children)) if self.children else None,
        )


class KdlBuilder:
    """Maps nested dicts and lists onto nodes.

    Keys become node names. A scalar becomes the node's single argument, a
    list of scalars its argument list, a list of mappings repeated sibling
    nodes and a mapping the node's children.
    """

    def build(self, mapping: Mapping[str, Any]) -> KdlDocument:
        if not isinstance(mapping, Mapping):
            raise TypeError("Root value must be a mapping")
        return KdlDocument(nodes=tuple(self._convert_mapping(mapping)))

    def _convert_mapping(self, mapping: Mapping[str, Any]) -> list[KdlNode]:
        nodes: list[KdlNode] = []
        for key, value in mapping.items():
            nodes.extend(self._convert_entry(str(key), value))
        return nodes

    def _convert_entry(self, name: str, value: Any) -> list[KdlNode]:
        if isinstance(value, Mapping):
            return [self._node_from_mapping(name, value)]
        if isinstance(value, (list, tuple)):
            if value and all(isinstance(item, Mapping) for item in value):
                return [self._node_from_mapping(name, item) for item in value]
            if any(isinstance(item, (Mapping, list, tuple)) for item in value):
                raise TypeError(f"List for '{name}' must hold only scalars or only mappings")
            builder = KdlNodeBuilder(name)
            for item in value:
                builder.arg(item)
            return [builder.build()]
        return [KdlNodeBuilder(name).arg(value).build()]

    def _node_from_mapping(self, name: str, mapping: Mapping[str, Any]) -> KdlNode:
        builder = KdlNodeBuilder(name)
        for child in self._convert_mapping(mapping):
            builder.child(child)
        return builder.build()


# Helpers ---------------------------------------------------------------------
def _float_literal(value: float) -> str:
    if math.isnan(value):
        return "#nan"
    if math.isinf(value):
        return "#inf" if value > 0 else "#-inf"
    text = repr(value)
    return text if any(c in text for c in ".eE") else f"{text}.0"


def _decimal_literal(value: Decimal) -> str:
    if value.is_nan():
        return "#nan"
    if value.is_infinite():
        return "#inf" if value > 0 else "#-inf"
    return str(value).replace("E", "e")


def _iso_duration(delta: timedelta) -> str:
    total = delta.total_seconds()
    sign = "-" if total < 0 else ""
    days, seconds = divmod(abs(delta), timedelta(days=1))
    hours, remainder = divmod(seconds.seconds, 3600)
    minutes, secs = divmod(remainder, 60)
    fraction = f".{seconds.microseconds:06d}".rstrip("0") if seconds.microseconds else ""
    time_part = "".join(
        f"{amount}{unit}" for amount, unit in ((hours, "H"), (minutes, "M")) if amount
    ) + (f"{secs}{fraction}S" if secs or fraction else "")
    if not days and not time_part:
        return "PT0S"
    return f"{sign}P{f'{days}D' if days else ''}{f'T{time_part}' if time_part else ''}"


__all__ = ["value_from", "KdlNodeBuilder", "KdlBuilder"]
