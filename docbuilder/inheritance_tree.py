"""Data model for type hierarchies stored as an arena of nodes."""

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class InheritanceNode:
    """One type in the hierarchy; children are indices into the arena."""

    uri: str
    title: str = ""
    children: tuple[int, ...] = ()
    is_ancestor: bool = False
    is_current: bool = False


@dataclass(frozen=True)
class InheritanceTree:
    """The type hierarchy rooted at one entity.

    Nodes live in a flat list and refer to each other by index, so walking a
    deep hierarchy never recurses.
    """

    nodes: tuple[InheritanceNode, ...] = field(default_factory=tuple)

    @property
    def root(self) -> InheritanceNode | None:
        return self.nodes[0] if self.nodes else None

    def preorder(self) -> Iterator[InheritanceNode]:
        """Yield nodes in pre-order, starting at the root."""
        if not self.nodes:
            return
        stack = [0]
        while stack:
            node = self.nodes[stack.pop()]
            yield node
            stack.extend(reversed(node.children))

    def flatten(self) -> list[str]:
        """Return node URIs in pre-order, root first."""
        return [node.uri for node in self.preorder()]

    @classmethod
    def from_json(cls, root: dict[str, Any] | None) -> "InheritanceTree":
        """Build the arena from the nested `{uri, title, children}` JSON form."""
        if not root:
            return cls()

        # Assign indices in pre-order so the root is always node 0
        raw_nodes: list[dict[str, Any]] = []
        child_indices: list[list[int]] = []
        stack: list[tuple[dict[str, Any], int | None]] = [(root, None)]
        while stack:
            raw, parent = stack.pop()
            index = len(raw_nodes)
            raw_nodes.append(raw)
            child_indices.append([])
            if parent is not None:
                child_indices[parent].append(index)
            children = raw.get("children") or []
            stack.extend((child, index) for child in reversed(children))

        nodes = tuple(
            InheritanceNode(
                uri=str(raw.get("uri") or ""),
                title=str(raw.get("title") or ""),
                children=tuple(child_indices[i]),
                is_ancestor=bool(raw.get("isAncestor")),
                is_current=bool(raw.get("isCurrent")),
            )
            for i, raw in enumerate(raw_nodes)
        )
        return cls(nodes)
