"""
Directed graph stored as an arena of integer handles.

Nodes are appended to a flat list and addressed by their position (their
*handle*). Edges are ``(source, target)`` handle pairs, and adjacency is kept
in per-handle successor / predecessor lists, so traversal never performs a
linear scan over nodes. A dictionary maps each node's key to its handle for
lookups coming from outside the graph (e.g. "which node holds tensor 42?").
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Generic, Hashable, Iterator, List, Optional, TypeVar

from ...domain._errors import GraphIntegrityError


class Node:
    """
    Base graph node.

    Parameters
    ----------
    key : Hashable
        Identifier unique within the owning graph.

    Attributes
    ----------
    key : Hashable
        Node identifier.
    handle : Optional[int]
        Arena position assigned by `Graph.add_node`; ``None`` until added.
    """

    def __init__(self, key: Hashable) -> None:
        self.key = key
        self.handle: Optional[int] = None

    def __repr__(self) -> str:
        return f"{type(self).__name__}(key={self.key!r}, handle={self.handle})"


@dataclass(frozen=True)
class Edge:
    """Directed edge between two node handles (``source -> target``)."""

    source: int
    target: int


N = TypeVar("N", bound=Node)


class Graph(Generic[N]):
    """
    Handle-indexed directed graph.

    Notes
    -----
    - Duplicate edges are ignored, so an operation that consumes the same
      tensor twice has a single input edge from it.
    - Handles are only valid until `clear()` is called.
    """

    def __init__(self) -> None:
        self._nodes: List[N] = []
        self._index: Dict[Hashable, int] = {}
        self._successors: List[List[int]] = []
        self._predecessors: List[List[int]] = []
        self._edges: List[Edge] = []

    def add_node(self, node: N) -> int:
        """
        Append `node` to the arena and return its handle.

        Raises
        ------
        GraphIntegrityError
            If a node with the same key is already present.
        """
        if node.key in self._index:
            raise GraphIntegrityError(f"Node {node.key!r} is already in the graph.")
        handle = len(self._nodes)
        node.handle = handle
        self._nodes.append(node)
        self._index[node.key] = handle
        self._successors.append([])
        self._predecessors.append([])
        return handle

    def add_edge(self, source: int, target: int) -> Edge:
        """
        Connect ``source -> target`` (both handles).

        Returns
        -------
        Edge
            The new edge, or the existing one if already connected.
        """
        for h in (source, target):
            if h < 0 or h >= len(self._nodes):
                raise GraphIntegrityError(f"Unknown node handle {h}.")
        edge = Edge(source, target)
        if target not in self._successors[source]:
            self._successors[source].append(target)
            self._predecessors[target].append(source)
            self._edges.append(edge)
        return edge

    def contains(self, key: Hashable) -> bool:
        return key in self._index

    def handle_of(self, key: Hashable) -> Optional[int]:
        return self._index.get(key)

    def get(self, key: Hashable) -> Optional[N]:
        handle = self._index.get(key)
        return None if handle is None else self._nodes[handle]

    def node_at(self, handle: int) -> N:
        return self._nodes[handle]

    def successors(self, handle: int) -> List[int]:
        return self._successors[handle]

    def predecessors(self, handle: int) -> List[int]:
        return self._predecessors[handle]

    @property
    def nodes(self) -> List[N]:
        return self._nodes

    @property
    def edges(self) -> List[Edge]:
        return self._edges

    def clear(self) -> None:
        """Drop every node and edge. Existing handles become invalid."""
        for node in self._nodes:
            node.handle = None
        self._nodes.clear()
        self._index.clear()
        self._successors.clear()
        self._predecessors.clear()
        self._edges.clear()

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[N]:
        return iter(self._nodes)
