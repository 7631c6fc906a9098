"""
Matrix-level math kernels (`math_m`).

These functions operate on `Matrix` values and always return new matrices.
They carry no autodiff logic; `math_t` wraps them into recordable tensor
operations.

Element-wise kernels broadcast their operands (NumPy rules) and delegate the
per-position work to vectorized NumPy ufuncs. `transpose` and `dot_product`
validate ranks and raise `ShapeError` for unsupported inputs.
"""

from __future__ import annotations

from typing import Optional, Sequence, Tuple, Union

import numpy as np

from ...domain._errors import ShapeError
from ..tensor._matrix import Matrix, Number
from ..tensor._shape import Shape

Operand = Union[Matrix, Number]


def addition(a: Matrix, b: Operand) -> Matrix:
    return a.element_wise_operation(b, np.add)


def subtraction(a: Matrix, b: Operand) -> Matrix:
    return a.element_wise_operation(b, np.subtract)


def multiplication(a: Matrix, b: Operand) -> Matrix:
    return a.element_wise_operation(b, np.multiply)


def division(a: Matrix, b: Operand) -> Matrix:
    """Element-wise ``a / b``. Division by zero yields ``inf``/``nan``."""
    return a.element_wise_operation(b, np.divide)


def sqrt(a: Matrix) -> Matrix:
    """Element-wise square root. Negative inputs yield ``nan``."""
    return a.element_wise(np.sqrt)


def square(a: Matrix) -> Matrix:
    return a.element_wise(np.square)


def relu(a: Matrix) -> Matrix:
    return a.element_wise(lambda v: np.maximum(v, np.float32(0.0)))


def relu_derivative(a: Matrix) -> Matrix:
    """
    Per-element derivative of ReLU.

    Returns 1 where ``a > 0``, 0 where ``a < 0`` and ``nan`` where ``a == 0``
    (the derivative is undefined at the kink and is reported as such).
    """
    return a.element_wise(
        lambda v: np.where(v > 0, 1.0, np.where(v < 0, 0.0, np.nan)).astype(
            np.float32
        )
    )


def _resolve_permutation(
    rank: int, permutation: Optional[Sequence[int]]
) -> Tuple[int, ...]:
    if permutation is None:
        return tuple(reversed(range(rank)))
    perm = tuple(int(p) for p in permutation)
    if len(perm) != rank or sorted(perm) != list(range(rank)):
        raise ShapeError(f"Permutation {perm} is not a permutation of {rank} axes")
    return perm


def inverse_permutation(permutation: Sequence[int]) -> Tuple[int, ...]:
    """Return the permutation that undoes `permutation`."""
    inverse = [0] * len(permutation)
    for i, p in enumerate(permutation):
        inverse[int(p)] = i
    return tuple(inverse)


def transpose(a: Matrix, permutation: Optional[Sequence[int]] = None) -> Matrix:
    """
    Permute the axes of `a`.

    Parameters
    ----------
    a : Matrix
        Input of rank >= 2.
    permutation : Sequence[int], optional
        Output axis ``i`` is input axis ``permutation[i]``. Defaults to
        reversing all axes.

    Returns
    -------
    Matrix
        Matrix of shape ``[a.shape[p] for p in permutation]``.

    Raises
    ------
    ShapeError
        If `a` has rank 1 or `permutation` is not a full permutation of the
        axes of `a`.
    """
    if a.shape.rank < 2:
        raise ShapeError("Cannot transpose a rank-1 matrix", a.shape)
    perm = _resolve_permutation(a.shape.rank, permutation)
    dims = a.shape.dimensions
    out = np.transpose(a.values.reshape(dims), perm)
    return Matrix(Shape(*(dims[p] for p in perm)), out)


def dot_product(a: Matrix, b: Matrix) -> Matrix:
    """
    Dot product of two vectors or two matrices.

    Supported forms
    ---------------
    - ``(n,) . (n,)`` gives shape ``(1,)``.
    - ``(m, k) . (k, n)`` gives shape ``(m, n)``.

    Raises
    ------
    ShapeError
        For mixed or unsupported ranks, or mismatched inner dimensions.
    """
    ra, rb = a.shape.rank, b.shape.rank
    if ra == 1 and rb == 1:
        if a.total_size != b.total_size:
            raise ShapeError("Vector lengths differ", a.shape, b.shape)
        return Matrix.scalar(float(np.dot(a.values, b.values)))
    if ra == 2 and rb == 2:
        (m, k), (k2, n) = a.shape.dimensions, b.shape.dimensions
        if k != k2:
            raise ShapeError("Inner dimensions differ", a.shape, b.shape)
        out = a.values.reshape(m, k) @ b.values.reshape(k2, n)
        return Matrix((m, n), out)
    raise ShapeError(
        "Dot product supports 1-D.1-D or 2-D.2-D operands", a.shape, b.shape
    )
