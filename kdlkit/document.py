"""KDL document container."""

from __future__ import annotations

from typing import Any

from .nodes import KdlNode, KdlTree


class KdlDocument(KdlTree):
    nodes: tuple[KdlNode, ...] = ()

    def _key(self) -> tuple[Any, ...]:
        return (self.nodes,)

    def with_node(self, node: KdlNode) -> "KdlDocument":
        return KdlDocument(nodes=(*self.nodes, node))

    def child_group(self, name: str) -> tuple[KdlNode, ...]:
        return tuple(node for node in self.nodes if node.name.value == name)

    def node(self, name: str) -> KdlNode | None:
        """Last top-level node called ``name``."""
        group = self.child_group(name)
        return group[-1] if group else None

    def to_kdl(self, formatter=None) -> str:
        from .formatter import KdlFormatter

        return (formatter or KdlFormatter()).format_document(self)

    def __str__(self) -> str:
        return self.to_kdl()


__all__ = ["KdlDocument"]
