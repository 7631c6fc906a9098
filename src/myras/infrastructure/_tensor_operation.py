"""
Recordable tensor operations.

A `TensorOperation` bundles a type tag, its input tensors, a forward function
and a backward function. It is the unit recorded on a `GradientTape`:

- `call()` runs the forward function and caches the produced outputs.
- `call_derivative(value_node)` runs the backward function for one of the
  outputs, using that output's accumulated gradient (held by the value node),
  and caches one gradient per input.

Both calls overwrite their caches on every invocation. The math library
(`math_t`) builds all of its operations through this class.
"""

from __future__ import annotations

import itertools
from typing import TYPE_CHECKING, Callable, Sequence, Tuple

from ..domain._enums import TensorOperationType
from ..domain._errors import GraphIntegrityError, ShapeError
from .tensor._tensor import Tensor

if TYPE_CHECKING:
    from .graph._computation_graph import ValueNode

ForwardFn = Callable[["TensorOperation"], Sequence[Tensor]]
BackwardFn = Callable[["TensorOperation", "ValueNode"], Sequence[Tensor]]

_ids = itertools.count(1)


class TensorOperation:
    """
    Forward/backward pair over a fixed tuple of input tensors.

    Parameters
    ----------
    type : TensorOperationType
        Operation tag (used for display and diagnostics).
    inputs : Sequence[Tensor]
        Ordered input tensors. Arity is fixed at construction.
    operation : Callable[[TensorOperation], Sequence[Tensor]]
        Forward function. Receives the operation and returns its outputs.
    derivative : Callable[[TensorOperation, ValueNode], Sequence[Tensor]]
        Backward function. Receives the operation and the value node of the
        output being differentiated, and returns one gradient per input,
        shaped like that input.

    Notes
    -----
    Gradients are initialized to zero-filled tensors shaped like the inputs,
    so `gradients` is always index aligned with `inputs`.
    """

    def __init__(
        self,
        type: TensorOperationType,
        inputs: Sequence[Tensor],
        operation: ForwardFn,
        derivative: BackwardFn,
    ) -> None:
        self._id = next(_ids)
        self._type = type
        self._inputs: Tuple[Tensor, ...] = tuple(inputs)
        self._operation = operation
        self._derivative = derivative
        self._outputs: Tuple[Tensor, ...] = ()
        self._gradients: Tuple[Tensor, ...] = tuple(
            Tensor.zeros(t.shape, trainable=False) for t in self._inputs
        )

    @property
    def id(self) -> int:
        return self._id

    @property
    def type(self) -> TensorOperationType:
        return self._type

    @property
    def inputs(self) -> Tuple[Tensor, ...]:
        return self._inputs

    @property
    def outputs(self) -> Tuple[Tensor, ...]:
        return self._outputs

    @property
    def gradients(self) -> Tuple[Tensor, ...]:
        return self._gradients

    def call(self) -> Tuple[Tensor, ...]:
        """Run the forward function and cache (overwrite) the outputs."""
        self._outputs = tuple(self._operation(self))
        return self._outputs

    def call_single_result(self) -> Tensor:
        """
        Run forward and return the only output.

        Raises
        ------
        GraphIntegrityError
            If the forward function produced more or fewer than one output.
        """
        outputs = self.call()
        if len(outputs) != 1:
            raise GraphIntegrityError(
                f"{self._type.value} produced {len(outputs)} outputs, expected 1."
            )
        return outputs[0]

    def call_derivative(self, value_node: "ValueNode") -> Tuple[Tensor, ...]:
        """
        Run the backward function for the output held by `value_node`.

        Parameters
        ----------
        value_node : ValueNode
            Node of one of this operation's outputs; its accumulated
            `gradient` seeds the backward function.

        Returns
        -------
        tuple[Tensor, ...]
            One gradient per input, in input order.

        Raises
        ------
        GraphIntegrityError
            If the operation has not been called, or the backward function
            returns the wrong number of gradients.
        ShapeError
            If a returned gradient's shape differs from its input's shape.
        """
        if not self._outputs:
            raise GraphIntegrityError(
                f"{self._type.value} must be called before differentiating."
            )
        gradients = tuple(self._derivative(self, value_node))
        if len(gradients) != len(self._inputs):
            raise GraphIntegrityError(
                f"{self._type.value} returned {len(gradients)} gradients "
                f"for {len(self._inputs)} inputs."
            )
        for x, g in zip(self._inputs, gradients):
            if g.shape != x.shape:
                raise ShapeError(
                    f"{self._type.value} gradient does not match its input",
                    g.shape,
                    x.shape,
                )
        self._gradients = gradients
        return gradients

    def call_derivative_single_result(self, value_node: "ValueNode") -> Tensor:
        """Run backward for a unary operation and return its only gradient."""
        gradients = self.call_derivative(value_node)
        if len(gradients) != 1:
            raise GraphIntegrityError(
                f"{self._type.value} has {len(gradients)} inputs, expected 1."
            )
        return gradients[0]

    def __repr__(self) -> str:
        return (
            f"TensorOperation(id={self._id}, type={self._type.value}, "
            f"inputs={[t.id for t in self._inputs]})"
        )
