"""
Graph primitives and the computation graph recorded by a gradient tape.
"""

from ._graph import Edge, Graph, Node
from ._computation_graph import (
    ComputationGraph,
    ComputationGraphNode,
    OperationNode,
    ValueNode,
)

__all__ = [
    Edge.__name__,
    Graph.__name__,
    Node.__name__,
    ComputationGraph.__name__,
    ComputationGraphNode.__name__,
    OperationNode.__name__,
    ValueNode.__name__,
]
