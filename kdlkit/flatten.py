"""Flattening of a document into ``section:key`` configuration pairs."""

from __future__ import annotations

from .document import KdlDocument
from .nodes import KdlBool, KdlNode, KdlNull, KdlNumber, KdlString, KdlValue

ANONYMOUS_ELEMENT = "-"


class ConfigurationFlattener:
    def __init__(self, delimiter: str = ":"):
        self.delimiter = delimiter
        self.data: dict[str, str | None] = {}
        self._folded_keys: dict[str, str] = {}
        self._path: list[str] = []

    def flatten(self, document: KdlDocument) -> dict[str, str | None]:
        self.data = {}
        self._folded_keys = {}
        self._path = []
        self._visit_nodes(document.nodes)
        return self.data

    def _visit_nodes(self, nodes: tuple[KdlNode, ...]) -> None:
        groups: dict[str, list[KdlNode]] = {}
        names: dict[str, str] = {}
        for node in nodes:
            folded = node.name.value.casefold()
            names.setdefault(folded, node.name.value)
            groups.setdefault(folded, []).append(node)

        for folded, group in groups.items():
            name = names[folded]
            is_array = len(group) > 1 or name == ANONYMOUS_ELEMENT
            for index, node in enumerate(group):
                pushed = 0
                if name != ANONYMOUS_ELEMENT:
                    self._path.append(name)
                    pushed += 1
                if is_array:
                    self._path.append(str(index))
                    pushed += 1
                self._process_node(node)
                del self._path[len(self._path) - pushed :]

    def _process_node(self, node: KdlNode) -> None:
        arguments = node.arguments
        properties = node.properties
        if len(arguments) == 1 and not properties and not node.has_children:
            self._store(self._path, arguments[0])
            return
        for index, argument in enumerate(arguments):
            self._store([*self._path, str(index)], argument)
        for prop in properties:
            self._store([*self._path, prop.key.value], prop.value)
        if node.has_children:
            self._visit_nodes(node.nodes)

    def _store(self, path: list[str], value: KdlValue) -> None:
        key = self.delimiter.join(path)
        # keys compare case-insensitively; the first spelling seen is kept
        key = self._folded_keys.setdefault(key.casefold(), key)
        self.data[key] = value_to_string(value)


def value_to_string(value: KdlValue) -> str | None:
    if isinstance(value, KdlNull):
        return None
    if isinstance(value, KdlBool):
        return "true" if value.value else "false"
    if isinstance(value, KdlNumber):
        return value.canonical()
    if isinstance(value, KdlString):
        return value.value
    raise TypeError(f"Unknown value type: {type(value).__name__}")


def flatten(document: KdlDocument, delimiter: str = ":") -> dict[str, str | None]:
    return ConfigurationFlattener(delimiter=delimiter).flatten(document)


__all__ = ["ConfigurationFlattener", "flatten", "value_to_string"]
