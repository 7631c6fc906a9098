"""
Tensor-level differentiable operations (`math_t`).

Every operation comes in two forms:

- ``<name>_op(...)`` builds an uncalled `TensorOperation` pairing a forward
  function with its backward rule.
- ``<name>(..., tape=None)`` calls the operation, records it on `tape` when
  one is given, and returns the single output tensor.

Backward rules
--------------
With ``g`` the accumulated gradient of the output and ``R(m, s)`` meaning
"reduce-sum ``m`` to shape ``s``":

- add:       dA = R(g, A),            dB = R(g, B)
- subtract:  dA = R(g, A),            dB = -R(g, B)
- multiply:  dA = fit(B, A) * R(g, A), dB = fit(A, B) * R(g, B)
- divide:    dA = 1 / fit(B, A) * R(g, A),
             dB = -(fit(A, B) / (B * B)) * R(g, B)
- sqrt:      dx = g / (2 * sqrt(x))
- transpose: dx = transpose(g, inverse permutation)
- dot:       dA = g . B^T,            dB = A^T . g
- mse:       dP = 2 (P - T) / N * g,  dT = -dP
- relu:      dx = g * [1 if x > 0, 0 if x < 0, nan if x == 0]
- linear:    dx = g

``fit(M, s)`` broadcasts ``M`` to the operation's output shape and then
reduce-sums it to ``s``: a smaller operand is replicated, a larger one is
summed. For equally shaped operands this is the exact product-rule gradient.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Sequence, Tuple, Union

import numpy as np

from ...domain._enums import TensorOperationType
from ...domain._errors import ShapeError
from .._tensor_operation import TensorOperation
from ..tensor._matrix import Matrix, Number
from ..tensor._shape import Shape
from ..tensor._tensor import Tensor
from . import _matrix_math as math_m

if TYPE_CHECKING:
    from .._gradient_tape import GradientTape
    from ..graph._computation_graph import ValueNode

TensorLike = Union[Tensor, Number]


def _as_tensor(x: TensorLike) -> Tensor:
    if isinstance(x, Tensor):
        return x
    return Tensor.scalar(float(x), trainable=False)


def _result(m: Matrix) -> Tuple[Tensor, ...]:
    return (Tensor(m, trainable=False),)


def _gradients(*ms: Matrix) -> Tuple[Tensor, ...]:
    return tuple(Tensor(m, trainable=False) for m in ms)


def _fit(m: Matrix, shape: Shape, output_shape: Shape) -> Matrix:
    if m.shape == shape:
        return m
    return m.broadcast(output_shape).reduce_sum(shape)


def _run(operation: TensorOperation, tape: Optional["GradientTape"]) -> Tensor:
    result = operation.call_single_result()
    if tape is not None:
        tape.record(operation)
    return result


# ----------------------------------------------------------------------
# Addition / subtraction
# ----------------------------------------------------------------------
def _addition(op: TensorOperation) -> Tuple[Tensor, ...]:
    a, b = op.inputs
    return _result(math_m.addition(a.values, b.values))


def _addition_derivative(
    op: TensorOperation, node: "ValueNode"
) -> Tuple[Tensor, ...]:
    a, b = op.inputs
    g = node.gradient
    return _gradients(g.reduce_sum(a.shape), g.reduce_sum(b.shape))


def addition_op(a: TensorLike, b: TensorLike) -> TensorOperation:
    return TensorOperation(
        TensorOperationType.ADDITION,
        (_as_tensor(a), _as_tensor(b)),
        _addition,
        _addition_derivative,
    )


def addition(
    a: TensorLike, b: TensorLike, tape: Optional["GradientTape"] = None
) -> Tensor:
    """Element-wise ``a + b`` with broadcasting."""
    return _run(addition_op(a, b), tape)


def _subtraction(op: TensorOperation) -> Tuple[Tensor, ...]:
    a, b = op.inputs
    return _result(math_m.subtraction(a.values, b.values))


def _subtraction_derivative(
    op: TensorOperation, node: "ValueNode"
) -> Tuple[Tensor, ...]:
    a, b = op.inputs
    g = node.gradient
    return _gradients(g.reduce_sum(a.shape), -g.reduce_sum(b.shape))


def subtraction_op(a: TensorLike, b: TensorLike) -> TensorOperation:
    return TensorOperation(
        TensorOperationType.SUBTRACTION,
        (_as_tensor(a), _as_tensor(b)),
        _subtraction,
        _subtraction_derivative,
    )


def subtraction(
    a: TensorLike, b: TensorLike, tape: Optional["GradientTape"] = None
) -> Tensor:
    """Element-wise ``a - b`` with broadcasting."""
    return _run(subtraction_op(a, b), tape)


# ----------------------------------------------------------------------
# Multiplication / division
# ----------------------------------------------------------------------
def _multiplication(op: TensorOperation) -> Tuple[Tensor, ...]:
    a, b = op.inputs
    return _result(math_m.multiplication(a.values, b.values))


def _multiplication_derivative(
    op: TensorOperation, node: "ValueNode"
) -> Tuple[Tensor, ...]:
    a, b = op.inputs
    g = node.gradient
    out = g.shape
    da = _fit(b.values, a.shape, out) * g.reduce_sum(a.shape)
    db = _fit(a.values, b.shape, out) * g.reduce_sum(b.shape)
    return _gradients(da, db)


def multiplication_op(a: TensorLike, b: TensorLike) -> TensorOperation:
    return TensorOperation(
        TensorOperationType.MULTIPLICATION,
        (_as_tensor(a), _as_tensor(b)),
        _multiplication,
        _multiplication_derivative,
    )


def multiplication(
    a: TensorLike, b: TensorLike, tape: Optional["GradientTape"] = None
) -> Tensor:
    """Element-wise ``a * b`` with broadcasting."""
    return _run(multiplication_op(a, b), tape)


def _division(op: TensorOperation) -> Tuple[Tensor, ...]:
    a, b = op.inputs
    return _result(math_m.division(a.values, b.values))


def _division_derivative(
    op: TensorOperation, node: "ValueNode"
) -> Tuple[Tensor, ...]:
    a, b = op.inputs
    g = node.gradient
    out = g.shape
    da = (1.0 / _fit(b.values, a.shape, out)) * g.reduce_sum(a.shape)
    b_squared = math_m.multiplication(b.values, b.values)
    quotient = math_m.division(_fit(a.values, b.shape, out), b_squared)
    db = -quotient * g.reduce_sum(b.shape)
    return _gradients(da, db)


def division_op(a: TensorLike, b: TensorLike) -> TensorOperation:
    return TensorOperation(
        TensorOperationType.DIVISION,
        (_as_tensor(a), _as_tensor(b)),
        _division,
        _division_derivative,
    )


def division(
    a: TensorLike, b: TensorLike, tape: Optional["GradientTape"] = None
) -> Tensor:
    """Element-wise ``a / b`` with broadcasting."""
    return _run(division_op(a, b), tape)


# ----------------------------------------------------------------------
# Unary ops
# ----------------------------------------------------------------------
def _sqrt(op: TensorOperation) -> Tuple[Tensor, ...]:
    (x,) = op.inputs
    return _result(math_m.sqrt(x.values))


def _sqrt_derivative(
    op: TensorOperation, node: "ValueNode"
) -> Tuple[Tensor, ...]:
    (x,) = op.inputs
    local = 1.0 / (math_m.sqrt(x.values) * 2.0)
    return _gradients(local * node.gradient)


def sqrt_op(x: TensorLike) -> TensorOperation:
    return TensorOperation(
        TensorOperationType.SQRT, (_as_tensor(x),), _sqrt, _sqrt_derivative
    )


def sqrt(x: TensorLike, tape: Optional["GradientTape"] = None) -> Tensor:
    """Element-wise square root."""
    return _run(sqrt_op(x), tape)


def _relu(op: TensorOperation) -> Tuple[Tensor, ...]:
    (x,) = op.inputs
    return _result(math_m.relu(x.values))


def _relu_derivative(
    op: TensorOperation, node: "ValueNode"
) -> Tuple[Tensor, ...]:
    (x,) = op.inputs
    return _gradients(math_m.relu_derivative(x.values) * node.gradient)


def relu_op(x: Tensor) -> TensorOperation:
    return TensorOperation(TensorOperationType.RE_LU, (x,), _relu, _relu_derivative)


def relu(x: Tensor, tape: Optional["GradientTape"] = None) -> Tensor:
    """
    Rectified linear unit, ``max(0, x)``.

    Notes
    -----
    The backward rule reports ``nan`` for elements that are exactly zero.
    """
    return _run(relu_op(x), tape)


def _linear(op: TensorOperation) -> Tuple[Tensor, ...]:
    (x,) = op.inputs
    return _result(x.values.copy())


def _linear_derivative(
    op: TensorOperation, node: "ValueNode"
) -> Tuple[Tensor, ...]:
    return _gradients(node.gradient.copy())


def linear_op(x: Tensor) -> TensorOperation:
    return TensorOperation(
        TensorOperationType.LINEAR, (x,), _linear, _linear_derivative
    )


def linear(x: Tensor, tape: Optional["GradientTape"] = None) -> Tensor:
    """Identity activation, recorded so the graph mirrors the layer stack."""
    return _run(linear_op(x), tape)


# ----------------------------------------------------------------------
# Transpose / dot product
# ----------------------------------------------------------------------
def transpose_op(
    x: Tensor, permutation: Optional[Sequence[int]] = None
) -> TensorOperation:
    """
    Build a transpose operation.

    The permutation is resolved eagerly so the backward rule can apply its
    inverse.
    """
    rank = x.shape.rank
    perm = (
        tuple(reversed(range(rank)))
        if permutation is None
        else tuple(int(p) for p in permutation)
    )
    def forward(op: TensorOperation) -> Tuple[Tensor, ...]:
        return _result(math_m.transpose(op.inputs[0].values, perm))

    def backward(op: TensorOperation, node: "ValueNode") -> Tuple[Tensor, ...]:
        inverse = math_m.inverse_permutation(perm)
        return _gradients(math_m.transpose(node.gradient, inverse))

    return TensorOperation(TensorOperationType.TRANSPOSE, (x,), forward, backward)


def transpose(
    x: Tensor,
    permutation: Optional[Sequence[int]] = None,
    tape: Optional["GradientTape"] = None,
) -> Tensor:
    """Permute the axes of `x` (reverse order by default)."""
    return _run(transpose_op(x, permutation), tape)


def _dot_product(op: TensorOperation) -> Tuple[Tensor, ...]:
    a, b = op.inputs
    return _result(math_m.dot_product(a.values, b.values))


def _dot_product_derivative(
    op: TensorOperation, node: "ValueNode"
) -> Tuple[Tensor, ...]:
    a, b = op.inputs
    g = node.gradient
    if a.shape.rank == 1:
        # Scalar output: each vector's gradient is the other scaled by g.
        return _gradients(b.values * g, a.values * g)
    da = math_m.dot_product(g, math_m.transpose(b.values))
    db = math_m.dot_product(math_m.transpose(a.values), g)
    return _gradients(da, db)


def dot_product_op(a: Tensor, b: Tensor) -> TensorOperation:
    return TensorOperation(
        TensorOperationType.DOT_PRODUCT,
        (a, b),
        _dot_product,
        _dot_product_derivative,
    )


def dot_product(
    a: Tensor, b: Tensor, tape: Optional["GradientTape"] = None
) -> Tensor:
    """Vector dot product or matrix product (see `math_m.dot_product`)."""
    return _run(dot_product_op(a, b), tape)


# ----------------------------------------------------------------------
# Loss
# ----------------------------------------------------------------------
def _check_same_size(predicted: Tensor, target: Tensor) -> None:
    if predicted.values.total_size != target.values.total_size:
        raise ShapeError(
            "MSE operands must have the same number of elements",
            predicted.shape,
            target.shape,
        )


def _mse(op: TensorOperation) -> Tuple[Tensor, ...]:
    predicted, target = op.inputs
    diff = predicted.values.values - target.values.values
    return _result(Matrix.scalar(float(np.mean(np.square(diff)))))


def _mse_derivative(
    op: TensorOperation, node: "ValueNode"
) -> Tuple[Tensor, ...]:
    predicted, target = op.inputs
    n = predicted.values.total_size
    diff = predicted.values.values - target.values.values
    scale = node.gradient.values[0]
    d_predicted = (2.0 / n) * diff * scale
    return _gradients(
        Matrix(predicted.shape, d_predicted),
        Matrix(target.shape, -d_predicted),
    )


def mse_op(predicted: Tensor, target: Tensor) -> TensorOperation:
    """
    Build a mean-squared-error operation.

    Raises
    ------
    ShapeError
        If the operands hold different numbers of elements.
    """
    _check_same_size(predicted, target)
    return TensorOperation(
        TensorOperationType.MSE, (predicted, target), _mse, _mse_derivative
    )


def mse(
    predicted: Tensor, target: Tensor, tape: Optional["GradientTape"] = None
) -> Tensor:
    """Mean of squared element-wise errors, as a shape ``(1,)`` tensor."""
    return _run(mse_op(predicted, target), tape)
