"""
Input layer: the entry point of a model's layer DAG.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, Optional, Union

from ...domain._enums import LayerType
from ...domain._errors import ShapeError
from ..ops import math_t
from ..tensor._shape import Shape
from ..tensor._tensor import Tensor
from ._layer import Layer

if TYPE_CHECKING:
    from .._gradient_tape import GradientTape


class Input(Layer):
    """
    Identity layer that receives the model's input tensor.

    The forward pass records a `linear` operation so the tape sees the same
    layer-by-layer structure as the model.
    """

    layer_type = LayerType.INPUT

    def initialize(
        self,
        name: Optional[str] = None,
        shape: Optional[Union[Shape, Iterable[int]]] = None,
        batch_size: Optional[int] = None,
    ) -> "Input":
        """
        Bind the input shape and batch size.

        Parameters
        ----------
        name : Optional[str], optional
            Layer name; a unique default (``"input_1"``, ...) is assigned
            when omitted.
        shape : Shape | Iterable[int], optional
            Unbatched shape of one sample, e.g. ``(1,)`` for scalar features.
        batch_size : Optional[int], optional
            Declared batch size.
        """
        self._assign_name(name)
        self.input_shape = None if shape is None else Shape.of(shape)
        self.output_shape = self.input_shape
        self.batch_size = self._check_batch_size(batch_size)
        self._initialized = True
        return self

    def forward_pass(self, tape: Optional["GradientTape"] = None) -> Tensor:
        x = self._require_input()
        if self.input_shape is not None:
            rank = self.input_shape.rank
            if x.shape.dimensions[-rank:] != self.input_shape.dimensions:
                raise ShapeError(
                    f"Input layer {self.name!r} received an incompatible tensor",
                    x.shape,
                    self.input_shape,
                )
        self.output = math_t.linear(x, tape)
        return self.output
