"""Checks values annotated with one of the reserved type names.

Values whose annotation is not reserved pass untouched. Every issue in the
document is collected before a single KdlValidationError is raised.
"""

from __future__ import annotations

import base64
import binascii
import ipaddress
import re
from datetime import date, datetime, time
from typing import Callable, Iterator, NotRequired, Optional, TypedDict
from uuid import UUID

from pydantic import AnyUrl, TypeAdapter, ValidationError

from kdlkit.logger import Logger
from kdlkit.utils import resolve_config

from .document import KdlDocument
from .errors import KdlValidationError, NumberFormatError, NumberOverflowError, ValidationIssue
from .nodes import KdlArgument, KdlNode, KdlNumber, KdlProperty, KdlString, KdlValue

INTEGER_TYPES: dict[str, tuple[int, bool]] = {
    "i8": (8, True),
    "i16": (16, True),
    "i32": (32, True),
    "i64": (64, True),
    "u8": (8, False),
    "u16": (16, False),
    "u32": (32, False),
    "u64": (64, False),
}

FLOAT_TYPES = frozenset({"f32", "f64"})

# reserved names without a checker accept any value
UNCHECKED_TYPES = frozenset({"decimal64", "decimal128", "decimal", "currency", "country-2", "country-3", "duration"})

_ADAPTERS: dict[str, TypeAdapter] = {
    "date-time": TypeAdapter(datetime),
    "date": TypeAdapter(date),
    "time": TypeAdapter(time),
    "uuid": TypeAdapter(UUID),
    "url": TypeAdapter(AnyUrl),
}

# pydantic also reads numeric strings as timestamps, so the ISO shape is checked first
_ISO_SHAPES: dict[str, re.Pattern[str]] = {
    "date-time": re.compile(r"\d{4}-\d{2}-\d{2}[Tt ]\d{2}:\d{2}"),
    "date": re.compile(r"\d{4}-\d{2}-\d{2}\Z"),
    "time": re.compile(r"\d{2}:\d{2}"),
}


class ValidatorConfig(TypedDict):
    enable_logger: NotRequired[bool]


class ValidatorConfigRequired(TypedDict):
    enable_logger: bool


DEFAULT_CONFIG: ValidatorConfigRequired = {"enable_logger": False}


# String checkers -------------------------------------------------------------
def _check_adapter(name: str) -> Callable[[str], bool]:
    adapter = _ADAPTERS[name]
    shape = _ISO_SHAPES.get(name)

    def check(text: str) -> bool:
        if shape is not None and not shape.match(text):
            return False
        try:
            adapter.validate_python(text)
        except ValidationError:
            return False
        return True

    return check


def _check_ip(version: int) -> Callable[[str], bool]:
    def check(text: str) -> bool:
        try:
            return ipaddress.ip_address(text).version == version
        except ValueError:
            return False

    return check


def _check_base64(text: str) -> bool:
    try:
        base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError):
        return False
    return True


def _check_regex(text: str) -> bool:
    try:
        re.compile(text)
    except re.error:
        return False
    return True


STRING_TYPES: dict[str, Callable[[str], bool]] = {
    "date-time": _check_adapter("date-time"),
    "date": _check_adapter("date"),
    "time": _check_adapter("time"),
    "uuid": _check_adapter("uuid"),
    "url": _check_adapter("url"),
    "ipv4": _check_ip(4),
    "ipv6": _check_ip(6),
    "base64": _check_base64,
    "regex": _check_regex,
}

RESERVED_TYPES = frozenset(INTEGER_TYPES) | FLOAT_TYPES | UNCHECKED_TYPES | frozenset(STRING_TYPES)


class ReservedTypeValidator:
    def __init__(self, config: Optional[ValidatorConfig] = None):
        self.config = resolve_config(config or {}, DEFAULT_CONFIG)
        self.logger = Logger(config={"name": "kdlkit.validator", "is_enabled": self.config["enable_logger"]}).logger

    def collect_issues(self, document: KdlDocument) -> list[ValidationIssue]:
        self.logger.info("Validating reserved type annotations")
        issues = [issue for value in _iter_values(document.nodes) if (issue := self.check_value(value))]
        self.logger.info(f"Validation found {len(issues)} issues")
        return issues

    def validate(self, document: KdlDocument) -> KdlDocument:
        issues = self.collect_issues(document)
        if issues:
            raise KdlValidationError(issues)
        return document

    def check_value(self, value: KdlValue) -> ValidationIssue | None:
        annotation = value.type_annotation
        if annotation not in RESERVED_TYPES or annotation in UNCHECKED_TYPES:
            return None
        if annotation in INTEGER_TYPES or annotation in FLOAT_TYPES:
            return self._check_number(annotation, value)
        return self._check_string(annotation, value)

    def _check_number(self, annotation: str, value: KdlValue) -> ValidationIssue | None:
        if not isinstance(value, KdlNumber):
            return _mismatch("Number", annotation, value)
        try:
            if annotation in INTEGER_TYPES:
                bits, signed = INTEGER_TYPES[annotation]
                value.to_sized_int(bits, signed)
            elif annotation == "f32":
                value.to_float32()
            else:
                value.to_float()
        except (NumberFormatError, NumberOverflowError):
            return _invalid(annotation, value.raw, value)
        return None

    def _check_string(self, annotation: str, value: KdlValue) -> ValidationIssue | None:
        if not isinstance(value, KdlString):
            return _mismatch("String", annotation, value)
        if not STRING_TYPES[annotation](value.value):
            return _invalid(annotation, value.value, value)
        return None


# Helpers ---------------------------------------------------------------------
def _iter_values(nodes: tuple[KdlNode, ...]) -> Iterator[KdlValue]:
    for node in nodes:
        for entry in node.entries:
            if isinstance(entry, (KdlArgument, KdlProperty)):
                yield entry.value
        yield from _iter_values(node.nodes)


def _kind_name(value: KdlValue) -> str:
    return type(value).__name__.removeprefix("Kdl")


def _mismatch(expected: str, annotation: str, value: KdlValue) -> ValidationIssue:
    return ValidationIssue(f"Expected a {expected} for type '{annotation}', got {_kind_name(value)}", value)


def _invalid(annotation: str, text: str, value: KdlValue) -> ValidationIssue:
    return ValidationIssue(f"Value '{text}' is not a valid '{annotation}'.", value)


def validate(document: KdlDocument, config: Optional[ValidatorConfig] = None) -> KdlDocument:
    return ReservedTypeValidator(config=config).validate(document)


__all__ = ["RESERVED_TYPES", "ReservedTypeValidator", "ValidatorConfig", "validate"]
