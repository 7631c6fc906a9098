"""
Layer base class.

A layer owns its weights, its (unbatched and batched) input/output shapes and
its adjacency in the model DAG (`layers_previous` / `layers_next`). The
`input` and `output` attributes are plain slots overwritten on every forward
pass; nothing is buffered across batches.

Lifecycle
---------
constructed -> `initialize(...)` (binds shapes, weights, batch size and a
default unique name) -> `forward_pass(tape)` any number of times.
"""

from __future__ import annotations

import itertools
from abc import ABC, abstractmethod
from collections import defaultdict
from typing import TYPE_CHECKING, ClassVar, DefaultDict, Iterator, List, Optional

from ...domain._enums import LayerType
from ...domain._errors import ConfigurationError
from ..tensor._shape import Shape
from ..tensor._tensor import Tensor

if TYPE_CHECKING:
    from .._gradient_tape import GradientTape


class Layer(ABC):
    """
    Abstract base layer.

    Attributes
    ----------
    name : Optional[str]
        Unique name, assigned during `initialize` if not provided
        (e.g. ``"dense_3"``).
    batch_size : Optional[int]
        Declared batch size, or None when any batch size is accepted.
    input_shape, output_shape : Optional[Shape]
        Unbatched shapes (the trailing dimensions of the tensors).
    trainable : bool
        Whether `Model.compile` hands this layer's weights to the optimizer.
    trainable_weights, non_trainable_weights : List[Tensor]
        Weight tensors, concatenated (in that order) by `weights`.
    layers_previous, layers_next : List[Layer]
        DAG adjacency. Maintained symmetrically by `connect`.
    input, output : Optional[Tensor]
        Tensors of the most recent forward pass.
    """

    layer_type: ClassVar[LayerType]
    _name_counters: ClassVar[DefaultDict[str, Iterator[int]]] = defaultdict(
        lambda: itertools.count(1)
    )

    def __init__(self) -> None:
        self.name: Optional[str] = None
        self.batch_size: Optional[int] = None
        self.input_shape: Optional[Shape] = None
        self.output_shape: Optional[Shape] = None
        self.trainable = True
        self.trainable_weights: List[Tensor] = []
        self.non_trainable_weights: List[Tensor] = []
        self.layers_previous: List["Layer"] = []
        self.layers_next: List["Layer"] = []
        self.input: Optional[Tensor] = None
        self.output: Optional[Tensor] = None
        self._initialized = False

    @property
    def weights(self) -> List[Tensor]:
        return self.trainable_weights + self.non_trainable_weights

    @property
    def initialized(self) -> bool:
        return self._initialized

    @staticmethod
    def _batched(batch_size: Optional[int], shape: Optional[Shape]) -> Optional[Shape]:
        if shape is None or batch_size is None:
            return shape
        return Shape(batch_size, *shape)

    @property
    def batch_input_shape(self) -> Optional[Shape]:
        """Input shape prefixed with the batch size, when both are known."""
        return self._batched(self.batch_size, self.input_shape)

    @property
    def batch_output_shape(self) -> Optional[Shape]:
        return self._batched(self.batch_size, self.output_shape)

    def _assign_name(self, name: Optional[str]) -> None:
        if name is None:
            prefix = self.layer_type.value
            name = f"{prefix}_{next(Layer._name_counters[prefix])}"
        self.name = name

    def _check_batch_size(self, batch_size: Optional[int]) -> Optional[int]:
        if batch_size is None:
            return None
        batch_size = int(batch_size)
        if batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {batch_size}")
        return batch_size

    def connect(self, next_layer: "Layer") -> "Layer":
        """
        Wire ``self -> next_layer`` in both adjacency lists.

        Returns
        -------
        Layer
            `next_layer`, for chaining.
        """
        if next_layer not in self.layers_next:
            self.layers_next.append(next_layer)
        if self not in next_layer.layers_previous:
            next_layer.layers_previous.append(self)
        return next_layer

    def _require_input(self) -> Tensor:
        if not self._initialized:
            raise ConfigurationError(f"Layer {self.name!r} has not been initialized.")
        if self.input is None:
            raise ConfigurationError(f"Layer {self.name!r} has no input assigned.")
        return self.input

    @abstractmethod
    def forward_pass(self, tape: Optional["GradientTape"] = None) -> Tensor:
        """
        Compute `output` from `input`, recording operations on `tape`.

        Returns
        -------
        Tensor
            The new `output`.
        """
        raise NotImplementedError

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(name={self.name!r}, "
            f"input_shape={self.input_shape}, output_shape={self.output_shape})"
        )
