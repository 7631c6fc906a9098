"""
Immutable tensor shapes and broadcast-shape resolution.

A `Shape` is an ordered tuple of positive dimension sizes with rank >= 1.
Scalars are represented with shape ``(1,)``. Broadcasting follows NumPy's
rules: shapes are right-aligned, the shorter one is left-padded with 1s, and
each aligned pair must be equal or contain a 1.
"""

from __future__ import annotations

from typing import Iterable, Iterator, Tuple, Union

from ...domain._errors import ShapeError

ShapeLike = Union["Shape", Iterable[int]]


class Shape:
    """
    Ordered, immutable sequence of dimension sizes.

    Parameters
    ----------
    *dimensions : int
        Dimension sizes, outermost first. Each must be a positive integer and
        at least one must be given.

    Raises
    ------
    ShapeError
        If no dimension is given or any dimension is not positive.

    Notes
    -----
    Equality and hashing use the dimension tuple only, so shapes can be used
    as dictionary keys and compared across tensors.
    """

    __slots__ = ("_dimensions", "_total_size")

    def __init__(self, *dimensions: int) -> None:
        dims = tuple(int(d) for d in dimensions)
        if len(dims) == 0:
            raise ShapeError("Shape must have at least one dimension")
        if any(d <= 0 for d in dims):
            raise ShapeError("Shape dimensions must be positive", dims)
        total = 1
        for d in dims:
            total *= d
        self._dimensions: Tuple[int, ...] = dims
        self._total_size = total

    @classmethod
    def of(cls, shape: ShapeLike) -> "Shape":
        """
        Coerce a shape-like value into a `Shape`.

        Parameters
        ----------
        shape : Shape | Iterable[int]
            An existing shape (returned as-is) or a sequence of sizes.

        Returns
        -------
        Shape
        """
        if isinstance(shape, Shape):
            return shape
        return cls(*shape)

    @property
    def dimensions(self) -> Tuple[int, ...]:
        return self._dimensions

    @property
    def rank(self) -> int:
        return len(self._dimensions)

    @property
    def total_size(self) -> int:
        """Product of all dimensions."""
        return self._total_size

    def padded(self, rank: int) -> Tuple[int, ...]:
        """
        Return the dimensions left-padded with 1s up to `rank`.

        Parameters
        ----------
        rank : int
            Target rank. Must be >= the current rank.

        Returns
        -------
        tuple[int, ...]
        """
        if rank < self.rank:
            raise ShapeError(f"Cannot pad shape to lower rank {rank}", self)
        return (1,) * (rank - self.rank) + self._dimensions

    @staticmethod
    def broadcast_shape(a: ShapeLike, b: ShapeLike) -> "Shape":
        """
        Compute the shape two operands broadcast to.

        Parameters
        ----------
        a, b : Shape | Iterable[int]
            Operand shapes.

        Returns
        -------
        Shape
            Result shape of rank ``max(rank(a), rank(b))`` whose aligned
            entries are ``max(a_i, b_i)``.

        Raises
        ------
        ShapeError
            If an aligned pair differs and neither entry is 1.

        Examples
        --------
        ``(2, 3)`` and ``(3,)`` broadcast to ``(2, 3)``; ``(2, 3)`` and
        ``(3, 2)`` are incompatible.
        """
        a = Shape.of(a)
        b = Shape.of(b)
        rank = max(a.rank, b.rank)
        dims = []
        for x, y in zip(a.padded(rank), b.padded(rank)):
            if x == y or y == 1:
                dims.append(x)
            elif x == 1:
                dims.append(y)
            else:
                raise ShapeError("Shapes are not broadcast compatible", a, b)
        return Shape(*dims)

    def __iter__(self) -> Iterator[int]:
        return iter(self._dimensions)

    def __len__(self) -> int:
        return len(self._dimensions)

    def __getitem__(self, item: int) -> int:
        return self._dimensions[item]

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Shape):
            return self._dimensions == other._dimensions
        if isinstance(other, tuple):
            return self._dimensions == other
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._dimensions)

    def __repr__(self) -> str:
        return "(" + ", ".join(str(d) for d in self._dimensions) + ")"

    __str__ = __repr__
