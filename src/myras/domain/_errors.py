"""
Engine-level exceptions for Myras.

This module defines the custom errors raised by the tensor, graph, layer and
optimizer machinery. Each error subclasses the closest built-in exception so
callers may catch either the specific Myras error or the generic Python one
(e.g. `ShapeError` is also a `ValueError`).

Errors are raised eagerly and never caught inside the engine: a failing
operation aborts the surrounding call (including `Model.fit`) and the message
carries the offending shapes, identifiers or lengths to aid debugging.
"""

from __future__ import annotations

from typing import Any, Optional, Sequence


def _fmt_shape(shape: Any) -> str:
    """Render a shape-like object as ``(a, b, ...)``."""
    dims = getattr(shape, "dimensions", shape)
    try:
        return "(" + ", ".join(str(int(d)) for d in dims) + ")"
    except TypeError:
        return repr(shape)


class ShapeError(ValueError):
    """
    Raised when two shapes cannot be combined or converted.

    Typical causes are broadcasting incompatible shapes, reducing a matrix to
    a shape it was not broadcast from, or multiplying matrices whose inner
    dimensions disagree.

    Attributes
    ----------
    shapes : tuple
        The shapes involved in the failed operation, in argument order.
    """

    def __init__(self, message: str, *shapes: Any) -> None:
        """
        Initialize the ShapeError.

        Parameters
        ----------
        message : str
            Human-readable description of the failure.
        *shapes : Any
            Shapes (``Shape`` instances or integer sequences) to append to the
            message.
        """
        if shapes:
            message = f"{message}: " + " vs ".join(_fmt_shape(s) for s in shapes)
        super().__init__(message)
        self.shapes = tuple(shapes)


class ReductionError(ShapeError):
    """
    Raised when `Matrix.reduce` finds collapsed blocks that are not identical.

    `reduce` asserts that a broadcast dimension carries replicated data; any
    disagreement means the matrix was not produced by a broadcast.
    """


class IndexOutOfRangeError(IndexError):
    """
    Raised when a multi-dimensional or flat index falls outside a shape.

    Attributes
    ----------
    index : Any
        The offending index (tuple or int).
    shape : Any
        The shape the index was resolved against.
    """

    def __init__(self, index: Any, shape: Any) -> None:
        super().__init__(
            f"Index {index!r} is out of range for shape {_fmt_shape(shape)}."
        )
        self.index = index
        self.shape = shape


class GraphIntegrityError(RuntimeError):
    """
    Raised when the recorded computation graph is inconsistent.

    Examples include recording the same operation twice, asking for the
    gradient of a tensor that was never recorded, or a backward function that
    returns the wrong number of gradients.
    """


class TapeStateError(RuntimeError):
    """
    Raised when a `GradientTape` is used after it has been disposed.

    Attributes
    ----------
    action : str
        The method that was attempted (e.g. ``"record"``).
    """

    def __init__(self, action: str) -> None:
        super().__init__(f"Cannot {action} on a disposed GradientTape.")
        self.action = action


class ConfigurationError(ValueError):
    """
    Raised when a model or optimizer is configured inconsistently.

    This covers invalid hyperparameters, misaligned momentum vectors and
    training a model that has not been compiled.
    """


class UnsupportedTypeError(NotImplementedError):
    """
    Raised when an enumerated type has no implementation.

    Attributes
    ----------
    kind : str
        Category of the type (e.g. ``"loss function"``).
    value : Any
        The unsupported enum member or value.
    """

    def __init__(
        self, kind: str, value: Any, supported: Optional[Sequence[Any]] = None
    ) -> None:
        """
        Initialize the UnsupportedTypeError.

        Parameters
        ----------
        kind : str
            Category of the type.
        value : Any
            The offending value.
        supported : Optional[Sequence[Any]], optional
            Values that are implemented, listed in the message when given.
        """
        message = f"Unsupported {kind}: {value!r}."
        if supported:
            message += " Supported: " + ", ".join(repr(s) for s in supported)
        super().__init__(message)
        self.kind = kind
        self.value = value
