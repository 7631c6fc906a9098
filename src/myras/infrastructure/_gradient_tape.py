"""
Reverse-mode automatic differentiation via a recorded tape.

A `GradientTape` records tensors and called `TensorOperation`s into a
`ComputationGraph`, then answers "what is the gradient of this dependent
tensor with respect to those independent tensors?" by walking the graph
backwards.

Lifecycle
---------
``RECORDING`` (default) -> ``BACKPROPAGATING`` (inside `get_gradients`, then
back to ``RECORDING``) -> ``DISPOSED``. A disposed tape rejects every further
`record` and `get_gradients` call with `TapeStateError`. The tape is a
context manager and is disposed on exit, including when the block raises:

    with GradientTape() as tape:
        y = math_t.relu(math_t.dot_product(x, w, tape), tape)
        loss = math_t.mse(y, target, tape)
        (dw,) = tape.get_gradients(loss, w)

Backpropagation
---------------
Gradients from all consumers of a tensor are summed. Operations reachable
backwards from the dependent are processed in reverse topological order, so
an operation runs its backward function only after every downstream
consumer of its outputs has contributed. Each ``(operation, output value)``
pair is differentiated at most once.
"""

from __future__ import annotations

from enum import Enum
from typing import List, Optional, Set, Tuple, Union

from ..domain._errors import GraphIntegrityError, TapeStateError
from ._tensor_operation import TensorOperation
from .graph._computation_graph import ComputationGraph, OperationNode, ValueNode
from .tensor._matrix import Matrix
from .tensor._tensor import Tensor


class TapeState(Enum):
    RECORDING = "recording"
    BACKPROPAGATING = "backpropagating"
    DISPOSED = "disposed"


class GradientTape:
    """
    Records a computation graph and computes gradients over it.

    Attributes
    ----------
    state : TapeState
        Current lifecycle phase.
    graph : ComputationGraph
        Recorded graph (empty after disposal).
    """

    def __init__(self) -> None:
        self._graph = ComputationGraph()
        self.state = TapeState.RECORDING

    @property
    def graph(self) -> ComputationGraph:
        return self._graph

    @property
    def disposed(self) -> bool:
        return self.state is TapeState.DISPOSED

    def _ensure_live(self, action: str) -> None:
        if self.state is TapeState.DISPOSED:
            raise TapeStateError(action)

    # ------------------------------------------------------------------
    # Recording
    # ------------------------------------------------------------------
    def record(self, item: Union[Tensor, TensorOperation]) -> None:
        """Record a leaf tensor or a called operation."""
        if isinstance(item, TensorOperation):
            self.record_operation(item)
        elif isinstance(item, Tensor):
            self.record_tensor(item)
        else:
            raise TypeError(
                f"Cannot record object of type {type(item).__name__}; "
                "expected Tensor or TensorOperation."
            )

    def record_tensor(self, tensor: Tensor) -> ValueNode:
        """Insert a value node for `tensor` if absent (idempotent)."""
        self._ensure_live("record")
        return self._graph.add_value(tensor)

    def record_operation(self, operation: TensorOperation) -> OperationNode:
        """
        Insert `operation` together with edges to its inputs and outputs.

        Raises
        ------
        GraphIntegrityError
            If the operation was already recorded or has not been called.
        """
        self._ensure_live("record")
        if not operation.outputs:
            raise GraphIntegrityError(
                f"Operation {operation.id} ({operation.type.value}) has no "
                "outputs; call it before recording."
            )
        op_node = self._graph.add_operation(operation)
        for x in operation.inputs:
            value_node = self._graph.add_value(x)
            self._graph.add_edge(value_node.handle, op_node.handle)
        for y in operation.outputs:
            value_node = self._graph.add_value(y)
            self._graph.add_edge(op_node.handle, value_node.handle)
        return op_node

    # ------------------------------------------------------------------
    # Backpropagation
    # ------------------------------------------------------------------
    def _require_value_node(self, tensor: Tensor, role: str) -> ValueNode:
        node = self._graph.value_node(tensor)
        if node is None:
            raise GraphIntegrityError(
                f"{role} tensor {tensor.id} with shape {tensor.shape} "
                "was not recorded on this tape."
            )
        return node

    def _backward_order(self, dependent: ValueNode) -> List[int]:
        """
        Return handles of operations reachable backwards from `dependent`,
        consumers before producers.
        """
        graph = self._graph
        visited = bytearray(len(graph))
        post_order: List[int] = []
        stack: List[Tuple[int, bool]] = [(dependent.handle, False)]
        while stack:
            handle, expanded = stack.pop()
            if expanded:
                if isinstance(graph.node_at(handle), OperationNode):
                    post_order.append(handle)
                continue
            if visited[handle]:
                continue
            visited[handle] = 1
            stack.append((handle, True))
            for pred in graph.predecessors(handle):
                if not visited[pred]:
                    stack.append((pred, False))
        post_order.reverse()
        return post_order

    def get_gradients(
        self, dependent: Tensor, *independents: Tensor
    ) -> Tuple[Tensor, ...]:
        """
        Compute d(dependent)/d(independent) for each independent tensor.

        The dependent is seeded with ones, so for a non-scalar dependent the
        result is the gradient of the sum of its elements.

        Parameters
        ----------
        dependent : Tensor
            Recorded output of some recorded operation (typically a loss).
        *independents : Tensor
            Recorded tensors to differentiate with respect to.

        Returns
        -------
        tuple[Tensor, ...]
            One gradient per independent, in argument order, each shaped
            like its independent. Independents that do not influence the
            dependent get zero gradients.

        Raises
        ------
        TapeStateError
            If the tape has been disposed.
        GraphIntegrityError
            If the dependent or an independent was not recorded, if no
            recorded operation produced the dependent, or if an operation
            input has no value node.
        """
        self._ensure_live("get gradients")
        dependent_node = self._require_value_node(dependent, "Dependent")
        independent_nodes = [
            self._require_value_node(x, "Independent") for x in independents
        ]
        if not self._graph.producers(dependent_node):
            raise GraphIntegrityError(
                f"Dependent tensor {dependent.id} was not produced by a "
                "recorded operation."
            )

        self.state = TapeState.BACKPROPAGATING
        try:
            for node in self._graph.value_nodes():
                node.reset_gradient()
            dependent_node.gradient = Matrix.ones(dependent.shape)
            self._backpropagate(dependent_node)
        finally:
            self.state = TapeState.RECORDING

        return tuple(
            Tensor(node.gradient.copy(), trainable=False)
            for node in independent_nodes
        )

    def get_gradient(self, dependent: Tensor, independent: Tensor) -> Tensor:
        """Single-independent form of `get_gradients`."""
        return self.get_gradients(dependent, independent)[0]

    def _backpropagate(self, dependent: ValueNode) -> None:
        graph = self._graph
        differentiated: Set[Tuple[int, int]] = set()
        for op_handle in self._backward_order(dependent):
            op_node: OperationNode = graph.node_at(op_handle)  # type: ignore
            operation = op_node.operation
            input_nodes: List[Optional[ValueNode]] = [
                graph.value_node(x) for x in operation.inputs
            ]
            for x, node in zip(operation.inputs, input_nodes):
                if node is None:
                    raise GraphIntegrityError(
                        f"Input tensor {x.id} of operation {operation.id} "
                        "has no value node."
                    )
            for out_handle in graph.successors(op_handle):
                if (op_handle, out_handle) in differentiated:
                    continue
                differentiated.add((op_handle, out_handle))
                out_node: ValueNode = graph.node_at(out_handle)  # type: ignore
                gradients = operation.call_derivative(out_node)
                for node, g in zip(input_nodes, gradients):
                    node.gradient = node.gradient + g.values  # type: ignore

    # ------------------------------------------------------------------
    # Disposal
    # ------------------------------------------------------------------
    def dispose(self) -> None:
        """Clear the recorded graph. Further calls are no-ops."""
        if self.state is TapeState.DISPOSED:
            return
        self._graph.clear()
        self.state = TapeState.DISPOSED

    def __enter__(self) -> "GradientTape":
        self._ensure_live("enter")
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.dispose()
