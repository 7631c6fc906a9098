"""
Domain-level contract for recordable tensor operations.

A tensor operation is a node of the computation graph: it owns its inputs,
produces outputs on demand, and computes per-input gradients given the
accumulated gradient of one of its outputs.
"""

from __future__ import annotations

from typing import Any, Protocol, Sequence, runtime_checkable

from ._enums import TensorOperationType
from ._tensor import ITensor


@runtime_checkable
class ITensorOperation(Protocol):
    """
    Tensor operation interface.

    Required members
    ----------------
    - `id` unique identifier used as the graph key.
    - `type` the operation's `TensorOperationType`.
    - `inputs` / `outputs` / `gradients` ordered tensor sequences.
    - `call()` run forward and cache outputs.
    - `call_derivative(node)` run backward for the value node of an output.
    """

    @property
    def id(self) -> int: ...

    @property
    def type(self) -> TensorOperationType: ...

    @property
    def inputs(self) -> Sequence[ITensor]: ...

    @property
    def outputs(self) -> Sequence[ITensor]:
        """
        Return the cached outputs.

        Notes
        -----
        Outputs are empty until `call()` has run.
        """
        ...

    @property
    def gradients(self) -> Sequence[ITensor]: ...

    def call(self) -> Sequence[ITensor]: ...

    def call_derivative(self, value_node: Any) -> Sequence[ITensor]: ...
