"""
Tensor interface definitions.

This module defines the domain-level interface for tensor-like objects using
structural typing. The interface captures the minimal properties required for
a tensor to participate in a recorded computation graph: a stable identity,
a shape, and a flat value buffer.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class ITensor(Protocol):
    """
    Tensor interface.

    An `ITensor` wraps exactly one value matrix and exposes a process-unique
    integer identifier. The identifier is the key under which the tensor is
    stored in a `ComputationGraph`, so it must remain stable for the tensor's
    lifetime.
    """

    @property
    def id(self) -> int:
        """
        Return the unique identifier of the tensor.

        Returns
        -------
        int
            Identifier drawn from a process-wide counter.
        """
        ...

    @property
    def shape(self) -> Any:
        """
        Return the shape of the tensor.

        Returns
        -------
        Shape
            Immutable shape of the wrapped matrix.
        """
        ...

    @property
    def values(self) -> Any:
        """
        Return the wrapped matrix.

        Returns
        -------
        Matrix
            The tensor's value buffer and shape.
        """
        ...

    @property
    def trainable(self) -> bool:
        """Whether optimizers may update this tensor."""
        ...
