"""
Computation graph built by a `GradientTape`.

The graph is bipartite: `ValueNode`s hold tensors and their accumulated
gradients, `OperationNode`s hold recorded `TensorOperation`s. Edges run from
an operation's inputs to the operation, and from the operation to its
outputs. A tensor consumed by several operations keeps one shared
`ValueNode`, so diamonds are expected.

Tensor ids and operation ids come from independent counters, so nodes are
keyed by ``("value", tensor.id)`` and ``("operation", operation.id)``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Hashable, List, Optional

from ...domain._errors import GraphIntegrityError
from ..tensor._matrix import Matrix
from ..tensor._tensor import Tensor
from ._graph import Graph, Node

if TYPE_CHECKING:
    from .._tensor_operation import TensorOperation


class ComputationGraphNode(Node):
    """Common base of value and operation nodes."""


class ValueNode(ComputationGraphNode):
    """
    Graph node holding a tensor value and its accumulated gradient.

    Attributes
    ----------
    value : Tensor
        The recorded tensor.
    gradient : Matrix
        Gradient of the current dependent with respect to `value`; same shape
        as the value and zero-filled until backpropagation writes into it.
    """

    def __init__(self, value: Tensor) -> None:
        super().__init__(self.key_for(value))
        self.value = value
        self.gradient = Matrix.zeros(value.shape)

    @staticmethod
    def key_for(tensor: Tensor) -> Hashable:
        return ("value", tensor.id)

    def reset_gradient(self) -> None:
        self.gradient = Matrix.zeros(self.value.shape)


class OperationNode(ComputationGraphNode):
    """Graph node holding a recorded `TensorOperation`."""

    def __init__(self, operation: "TensorOperation") -> None:
        super().__init__(self.key_for(operation))
        self.operation = operation

    @staticmethod
    def key_for(operation: "TensorOperation") -> Hashable:
        return ("operation", operation.id)


class ComputationGraph(Graph[ComputationGraphNode]):
    """
    Bipartite value/operation graph with lookup helpers.

    Invariants
    ----------
    - Every operation appears as exactly one `OperationNode`.
    - Every tensor appears as at most one `ValueNode`.
    """

    def add_value(self, tensor: Tensor) -> ValueNode:
        """Return the value node for `tensor`, creating it if absent."""
        node = self.get(ValueNode.key_for(tensor))
        if node is None:
            node = ValueNode(tensor)
            self.add_node(node)
        return node  # type: ignore[return-value]

    def add_operation(self, operation: "TensorOperation") -> OperationNode:
        """
        Insert an operation node.

        Raises
        ------
        GraphIntegrityError
            If the operation was already recorded.
        """
        if self.contains(OperationNode.key_for(operation)):
            raise GraphIntegrityError(
                f"Operation {operation.id} ({operation.type.value}) "
                f"has already been recorded."
            )
        node = OperationNode(operation)
        self.add_node(node)
        return node

    def value_node(self, tensor: Tensor) -> Optional[ValueNode]:
        return self.get(ValueNode.key_for(tensor))  # type: ignore[return-value]

    def operation_node(
        self, operation: "TensorOperation"
    ) -> Optional[OperationNode]:
        key = OperationNode.key_for(operation)
        return self.get(key)  # type: ignore[return-value]

    def producers(self, node: ValueNode) -> List[OperationNode]:
        """Operation nodes that output `node`'s tensor."""
        handles = self.predecessors(node.handle)  # type: ignore[arg-type]
        return [self.node_at(h) for h in handles]  # type: ignore[misc]

    def consumers(self, node: ValueNode) -> List[OperationNode]:
        """Operation nodes that take `node`'s tensor as an input."""
        handles = self.successors(node.handle)  # type: ignore[arg-type]
        return [self.node_at(h) for h in handles]  # type: ignore[misc]

    def value_nodes(self) -> List[ValueNode]:
        return [n for n in self.nodes if isinstance(n, ValueNode)]

    def to_dot(self) -> str:
        """
        Render the graph in Graphviz DOT format.

        Operations are drawn as hexagons labelled with their type; tensors
        are drawn as rectangles labelled with their shape.
        """
        lines = ["digraph G {"]
        for node in self.nodes:
            if isinstance(node, OperationNode):
                label = node.operation.type.value
                shape = "hexagon"
            else:
                label = f"Tensor {node.value.shape}"
                shape = "rectangle"
            lines.append(f'  n{node.handle} [label="{label}" shape={shape}];')
        for edge in self.edges:
            lines.append(f"  n{edge.source} -> n{edge.target};")
        lines.append("}")
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.to_dot()
