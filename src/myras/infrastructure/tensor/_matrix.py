"""
Flat row-major value buffers with broadcasting and reduction.

`Matrix` is the storage type behind every `Tensor`. It keeps a contiguous
one-dimensional `numpy.float32` buffer together with a `Shape`; the flat
position of a multi-dimensional index ``idx`` is

    sum(idx[d] * prod(dimensions[d + 1:]) for d in range(rank))

All arithmetic returns a fresh matrix. The buffer is only ever modified in
place through `copy_from`, `copy_from_numpy` and `set_value`, which are used by
weight initializers and optimizers.

Broadcasting and reduction
--------------------------
- `broadcast(shape)` replicates size-1 dimensions (after left-padding the
  source with 1s) up to the target sizes.
- `reduce_sum(shape)` is its adjoint: dimensions where the target is 1 and
  the source is larger are collapsed by summation. This is what turns a
  batch-shaped gradient back into a bias-shaped one.
- `reduce(shape)` collapses the same dimensions but requires every collapsed
  block to be identical, i.e. it undoes a broadcast exactly.
"""

from __future__ import annotations

from typing import Any, Callable, Sequence, Tuple, Union

import numpy as np

from ...domain._errors import IndexOutOfRangeError, ReductionError, ShapeError
from ._shape import Shape, ShapeLike

Number = Union[int, float]
BinaryKernel = Callable[[np.ndarray, np.ndarray], np.ndarray]
UnaryKernel = Callable[[np.ndarray], np.ndarray]

DTYPE = np.float32


class Matrix:
    """
    Shape-aware flat value buffer.

    Parameters
    ----------
    shape : Shape | Iterable[int]
        Logical shape of the buffer.
    values : array-like, optional
        Values in row-major order. Any array-like with exactly
        ``shape.total_size`` elements is accepted (nested inputs are
        flattened). If omitted, the buffer is zero-filled.

    Raises
    ------
    ShapeError
        If the number of values does not match the shape's total size.

    Attributes
    ----------
    shape : Shape
        Immutable logical shape.
    values : np.ndarray
        One-dimensional float32 buffer of length ``shape.total_size``.
    """

    __slots__ = ("_shape", "values")
    __hash__ = None  # mutable

    def __init__(self, shape: ShapeLike, values: Any = None) -> None:
        self._shape = Shape.of(shape)
        if values is None:
            buf = np.zeros(self._shape.total_size, dtype=DTYPE)
        else:
            buf = np.array(values, dtype=DTYPE).reshape(-1)
        if buf.size != self._shape.total_size:
            raise ShapeError(
                f"Expected {self._shape.total_size} values for shape "
                f"{self._shape}, got {buf.size}"
            )
        self.values: np.ndarray = buf

    # ------------------------------------------------------------------
    # Construction helpers
    # ------------------------------------------------------------------
    @classmethod
    def full(cls, shape: ShapeLike, value: Number) -> "Matrix":
        """Return a matrix of `shape` with every element set to `value`."""
        shape = Shape.of(shape)
        return cls(shape, np.full(shape.total_size, value, dtype=DTYPE))

    @classmethod
    def zeros(cls, shape: ShapeLike) -> "Matrix":
        return cls(shape)

    @classmethod
    def ones(cls, shape: ShapeLike) -> "Matrix":
        return cls.full(shape, 1.0)

    @classmethod
    def from_array(cls, array: Any) -> "Matrix":
        """
        Build a matrix from a (possibly nested) array-like.

        The shape is inferred from the array. Zero-dimensional inputs
        (plain numbers) become shape ``(1,)``.
        """
        arr = np.asarray(array, dtype=DTYPE)
        shape = arr.shape if arr.ndim > 0 else (1,)
        return cls(shape, arr)

    @classmethod
    def scalar(cls, value: Number) -> "Matrix":
        return cls((1,), [value])

    @staticmethod
    def coerce(value: Union["Matrix", Number]) -> "Matrix":
        """Wrap plain numbers as shape-``(1,)`` matrices."""
        if isinstance(value, Matrix):
            return value
        return Matrix.scalar(float(value))

    # ------------------------------------------------------------------
    # Shape & indexing
    # ------------------------------------------------------------------
    @property
    def shape(self) -> Shape:
        return self._shape

    @property
    def total_size(self) -> int:
        return self._shape.total_size

    def get_flat_index(self, *index: int) -> int:
        """
        Convert a multi-dimensional index to a flat buffer position.

        Parameters
        ----------
        *index : int
            One index per dimension. A single sequence argument is also
            accepted.

        Returns
        -------
        int

        Raises
        ------
        IndexOutOfRangeError
            If the index has the wrong length or any component is outside
            ``[0, dimensions[d])``.
        """
        if len(index) == 1 and isinstance(index[0], (tuple, list)):
            index = tuple(index[0])
        dims = self._shape.dimensions
        if len(index) != len(dims):
            raise IndexOutOfRangeError(index, self._shape)
        flat = 0
        for i, d in zip(index, dims):
            i = int(i)
            if i < 0 or i >= d:
                raise IndexOutOfRangeError(index, self._shape)
            flat = flat * d + i
        return flat

    def get_multi_dimensional_index(self, flat_index: int) -> Tuple[int, ...]:
        """
        Convert a flat buffer position back to a multi-dimensional index.

        Raises
        ------
        IndexOutOfRangeError
            If `flat_index` is outside ``[0, total_size)``.
        """
        flat_index = int(flat_index)
        if flat_index < 0 or flat_index >= self.total_size:
            raise IndexOutOfRangeError(flat_index, self._shape)
        out = []
        for d in reversed(self._shape.dimensions):
            flat_index, r = divmod(flat_index, d)
            out.append(r)
        return tuple(reversed(out))

    def get_value(self, *index: int) -> float:
        return float(self.values[self.get_flat_index(*index)])

    def set_value(self, value: Number, *index: int) -> None:
        self.values[self.get_flat_index(*index)] = value

    # ------------------------------------------------------------------
    # Broadcasting & reduction
    # ------------------------------------------------------------------
    def broadcast(self, shape: ShapeLike) -> "Matrix":
        """
        Replicate size-1 dimensions up to `shape`.

        The source shape is left-padded with 1s to the target rank. Every
        aligned dimension must either match the target or be 1.

        Parameters
        ----------
        shape : Shape | Iterable[int]
            Target shape.

        Returns
        -------
        Matrix
            New matrix of the target shape.

        Raises
        ------
        ShapeError
            If the target has lower rank than the source or a dimension is
            neither equal nor 1.
        """
        target = Shape.of(shape)
        if target == self._shape:
            return self.copy()
        if target.rank < self._shape.rank:
            raise ShapeError("Cannot broadcast to a lower rank", self._shape, target)
        src = self._shape.padded(target.rank)
        for s, t in zip(src, target.dimensions):
            if s != t and s != 1:
                raise ShapeError("Cannot broadcast", self._shape, target)
        out = np.broadcast_to(self.values.reshape(src), target.dimensions)
        return Matrix(target, out)

    def _collapsed_axes(
        self, target: Shape
    ) -> Tuple[Tuple[int, ...], Tuple[int, ...]]:
        # Returns (padded source dims, axes to collapse).
        rank = max(target.rank, self._shape.rank)
        src = self._shape.padded(rank)
        tgt = target.padded(rank)
        axes = []
        for axis, (s, t) in enumerate(zip(src, tgt)):
            if s == t:
                continue
            if t != 1:
                raise ShapeError("Cannot reduce", self._shape, target)
            axes.append(axis)
        return src, tuple(axes)

    def reduce_sum(self, shape: ShapeLike) -> "Matrix":
        """
        Sum over dimensions that were broadcast from `shape`.

        Parameters
        ----------
        shape : Shape | Iterable[int]
            Target shape. After left-padding to the source rank, each
            dimension must equal the source dimension or be 1.

        Returns
        -------
        Matrix
            New matrix of the target shape.

        Raises
        ------
        ShapeError
            If the target is not a reduction of the source shape.

        Examples
        --------
        Reducing a ``(4, 3)`` matrix to ``(3,)`` sums the four rows.
        """
        target = Shape.of(shape)
        src, axes = self._collapsed_axes(target)
        arr = self.values.reshape(src)
        if axes:
            arr = arr.sum(axis=axes, keepdims=True, dtype=DTYPE)
        return Matrix(target, arr)

    def reduce(self, shape: ShapeLike) -> "Matrix":
        """
        Undo a broadcast, requiring collapsed blocks to be identical.

        Raises
        ------
        ShapeError
            If the target is not a reduction of the source shape.
        ReductionError
            If the collapsed blocks differ.
        """
        target = Shape.of(shape)
        src, axes = self._collapsed_axes(target)
        arr = self.values.reshape(src)
        if not axes:
            return Matrix(target, arr)
        keep = tuple(
            slice(0, 1) if a in axes else slice(None) for a in range(len(src))
        )
        first = arr[keep]
        if not np.array_equal(np.broadcast_to(first, src), arr, equal_nan=True):
            raise ReductionError(
                "Collapsed blocks are not identical", self._shape, target
            )
        return Matrix(target, first)

    # ------------------------------------------------------------------
    # Element-wise kernels
    # ------------------------------------------------------------------
    def element_wise_operation(
        self, other: Union["Matrix", Number], kernel: BinaryKernel
    ) -> "Matrix":
        """
        Apply a binary kernel after broadcasting both operands.

        Parameters
        ----------
        other : Matrix | float
            Right-hand operand. Numbers are treated as shape ``(1,)``.
        kernel : Callable[[np.ndarray, np.ndarray], np.ndarray]
            Vectorized function applied to the two flat broadcast buffers.

        Returns
        -------
        Matrix
            Result with the broadcast shape of both operands.

        Notes
        -----
        Floating point exceptions are silenced: division by zero yields
        ``inf``/``nan`` as IEEE arithmetic dictates.
        """
        other = Matrix.coerce(other)
        shape = Shape.broadcast_shape(self._shape, other._shape)
        a = self.values if self._shape == shape else self.broadcast(shape).values
        b = other.values if other._shape == shape else other.broadcast(shape).values
        with np.errstate(all="ignore"):
            out = kernel(a, b)
        return Matrix(shape, out)

    def element_wise(self, kernel: UnaryKernel) -> "Matrix":
        """Apply a unary vectorized kernel to every element."""
        with np.errstate(all="ignore"):
            out = kernel(self.values)
        return Matrix(self._shape, out)

    def __add__(self, other: Union["Matrix", Number]) -> "Matrix":
        return self.element_wise_operation(other, np.add)

    def __radd__(self, other: Number) -> "Matrix":
        return Matrix.coerce(other).element_wise_operation(self, np.add)

    def __sub__(self, other: Union["Matrix", Number]) -> "Matrix":
        return self.element_wise_operation(other, np.subtract)

    def __rsub__(self, other: Number) -> "Matrix":
        return Matrix.coerce(other).element_wise_operation(self, np.subtract)

    def __mul__(self, other: Union["Matrix", Number]) -> "Matrix":
        return self.element_wise_operation(other, np.multiply)

    def __rmul__(self, other: Number) -> "Matrix":
        return Matrix.coerce(other).element_wise_operation(self, np.multiply)

    def __truediv__(self, other: Union["Matrix", Number]) -> "Matrix":
        return self.element_wise_operation(other, np.divide)

    def __rtruediv__(self, other: Number) -> "Matrix":
        return Matrix.coerce(other).element_wise_operation(self, np.divide)

    def __neg__(self) -> "Matrix":
        return self.element_wise(np.negative)

    # ------------------------------------------------------------------
    # Copy / conversion
    # ------------------------------------------------------------------
    def copy(self) -> "Matrix":
        return Matrix(self._shape, self.values.copy())

    def copy_from(self, other: "Matrix") -> None:
        """
        Overwrite this buffer in place with the values of `other`.

        Raises
        ------
        ShapeError
            If `other` has a different shape.
        """
        if other.shape != self._shape:
            raise ShapeError("copy_from shape mismatch", self._shape, other.shape)
        self.values[...] = other.values

    def copy_from_numpy(self, array: Any) -> None:
        """Overwrite this buffer in place from an array with the same size."""
        arr = np.asarray(array, dtype=DTYPE).reshape(-1)
        if arr.size != self.total_size:
            raise ShapeError(
                f"copy_from_numpy expected {self.total_size} values, got {arr.size}"
            )
        self.values[...] = arr

    def to_numpy(self) -> np.ndarray:
        """Return a reshaped copy of the buffer."""
        return self.values.reshape(self._shape.dimensions).copy()

    def tolist(self) -> Sequence[Any]:
        return self.to_numpy().tolist()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Matrix):
            return NotImplemented
        return self._shape == other._shape and np.array_equal(
            self.values, other.values
        )

    def __repr__(self) -> str:
        return f"Matrix(shape={self._shape}, values={self.tolist()})"

    def __str__(self) -> str:
        return np.array2string(self.to_numpy(), separator=", ")
