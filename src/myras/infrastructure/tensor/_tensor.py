"""
Tensor: a uniquely identified wrapper around one `Matrix`.

Tensors are the values that flow through layers and are recorded on a
`GradientTape`. Each tensor receives a process-unique integer id at
construction time; the computation graph uses that id as its key, so two
tensors holding equal values are still distinct graph nodes.

Tensors are immutable from the point of view of the math library (every op
returns a new tensor). Weights are the exception: optimizers and weight
initializers overwrite their buffers in place via `copy_from` /
`copy_from_numpy`, which keeps the tensor id (and therefore any reference held
by a layer) stable across training steps.
"""

from __future__ import annotations

import itertools
from typing import Any, Union

import numpy as np

from ._matrix import Matrix, Number
from ._shape import Shape, ShapeLike

_ids = itertools.count(1)


class Tensor:
    """
    Uniquely identified tensor value.

    Parameters
    ----------
    values : Matrix
        The wrapped matrix. The tensor takes ownership; it is not copied.
    trainable : bool, optional
        Whether optimizers may update this tensor. Defaults to True.

    Attributes
    ----------
    id : int
        Process-unique identifier, stable for the tensor's lifetime.
    values : Matrix
        Wrapped value buffer.
    trainable : bool
        Trainability flag.
    """

    __slots__ = ("_id", "values", "trainable")

    def __init__(self, values: Matrix, trainable: bool = True) -> None:
        if not isinstance(values, Matrix):
            raise TypeError(
                f"Tensor expects a Matrix, got {type(values).__name__}"
            )
        self._id = next(_ids)
        self.values = values
        self.trainable = bool(trainable)

    @classmethod
    def from_values(
        cls, shape: ShapeLike, values: Any, trainable: bool = True
    ) -> "Tensor":
        """Build a tensor of `shape` from a flat (or nested) value sequence."""
        return cls(Matrix(shape, values), trainable=trainable)

    @classmethod
    def full(
        cls, shape: ShapeLike, value: Number, trainable: bool = True
    ) -> "Tensor":
        """Build a tensor of `shape` with every element set to `value`."""
        return cls(Matrix.full(shape, value), trainable=trainable)

    @classmethod
    def zeros(cls, shape: ShapeLike, trainable: bool = True) -> "Tensor":
        return cls(Matrix.zeros(shape), trainable=trainable)

    @classmethod
    def from_array(cls, array: Any, trainable: bool = True) -> "Tensor":
        """Build a tensor from a nested array-like, inferring its shape."""
        return cls(Matrix.from_array(array), trainable=trainable)

    @classmethod
    def scalar(cls, value: Number, trainable: bool = True) -> "Tensor":
        return cls(Matrix.scalar(value), trainable=trainable)

    @property
    def id(self) -> int:
        return self._id

    @property
    def shape(self) -> Shape:
        return self.values.shape

    def item(self) -> float:
        """
        Return the single element of a one-element tensor.

        Raises
        ------
        ValueError
            If the tensor holds more than one element.
        """
        if self.values.total_size != 1:
            raise ValueError(
                f"item() requires a single-element tensor, got shape {self.shape}"
            )
        return float(self.values.values[0])

    def copy_from(self, other: Union["Tensor", Matrix]) -> None:
        """Overwrite this tensor's values in place, keeping its id."""
        src = other.values if isinstance(other, Tensor) else other
        self.values.copy_from(src)

    def copy_from_numpy(self, array: Any) -> None:
        self.values.copy_from_numpy(array)

    def to_numpy(self) -> np.ndarray:
        return self.values.to_numpy()

    def __repr__(self) -> str:
        return (
            f"Tensor(id={self._id}, shape={self.shape}, "
            f"trainable={self.trainable})"
        )

    def __str__(self) -> str:
        return str(self.values)
