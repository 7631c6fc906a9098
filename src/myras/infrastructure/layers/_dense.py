"""
Fully connected (Dense) layer.

Forward computation::

    output = activation(input . kernel^T + biases)

with ``kernel`` of shape ``(units, units_previous_layer)`` and ``biases`` of
shape ``(units,)``. The kernel starts as a ``U(-0.1, 0.1)`` placeholder and is
re-drawn by `Model.compile` with a Glorot range computed from the connected
layers; biases start at ``0.01``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Dict, Optional, Union

from ...domain._enums import ActivationFunctionType, LayerType
from ...domain._errors import UnsupportedTypeError
from ..ops import math_t
from ..tensor._shape import Shape
from ..tensor._tensor import Tensor
from ..utils.weight_initializer import WeightInitializer
from ._layer import Layer

if TYPE_CHECKING:
    from .._gradient_tape import GradientTape

ActivationLike = Union[ActivationFunctionType, str]

_ACTIVATIONS: Dict[
    ActivationFunctionType, Callable[[Tensor, Optional["GradientTape"]], Tensor]
] = {
    ActivationFunctionType.RE_LU: math_t.relu,
    ActivationFunctionType.LINEAR: math_t.linear,
}


def _resolve_activation(activation: Optional[ActivationLike]) -> ActivationFunctionType:
    if activation is None:
        return ActivationFunctionType.LINEAR
    if isinstance(activation, ActivationFunctionType):
        return activation
    try:
        return ActivationFunctionType(str(activation).lower())
    except ValueError as e:
        raise UnsupportedTypeError(
            "activation function",
            activation,
            [a.value for a in ActivationFunctionType],
        ) from e


class Dense(Layer):
    """
    Dense layer.

    Attributes
    ----------
    units : int
        Number of output units.
    kernel : Tensor
        Weight matrix of shape ``(units, units_previous_layer)``.
    biases : Optional[Tensor]
        Bias vector of shape ``(units,)``, or None when biases are disabled.
    use_biases : bool
        Whether the bias addition is performed.
    activation : ActivationFunctionType
        Activation applied to the affine result.
    """

    layer_type = LayerType.DENSE

    def __init__(self) -> None:
        super().__init__()
        self.units = 0
        self.kernel: Optional[Tensor] = None
        self.biases: Optional[Tensor] = None
        self.use_biases = True
        self.activation = ActivationFunctionType.LINEAR

    def initialize(
        self,
        units: int,
        units_previous_layer: int,
        batch_size: Optional[int] = None,
        name: Optional[str] = None,
        use_biases: Optional[bool] = None,
        activation: Optional[ActivationLike] = None,
    ) -> "Dense":
        """
        Allocate weights and bind shapes.

        Parameters
        ----------
        units : int
            Number of output units. Must be >= 1.
        units_previous_layer : int
            Trailing output dimension of the previous layer. Must be >= 1.
        batch_size : Optional[int], optional
            Declared batch size (inherited from the previous layer by the
            `Layers` factory).
        name : Optional[str], optional
            Layer name; defaults to ``"dense_<n>"``.
        use_biases : Optional[bool], optional
            Whether to add biases. Defaults to True.
        activation : ActivationFunctionType | str, optional
            Activation. Defaults to LINEAR.

        Raises
        ------
        ValueError
            If `units` or `units_previous_layer` is not positive.
        UnsupportedTypeError
            If `activation` is not a known activation.
        """
        units = int(units)
        units_previous_layer = int(units_previous_layer)
        if units < 1:
            raise ValueError(f"units must be >= 1, got {units}")
        if units_previous_layer < 1:
            raise ValueError(
                f"units_previous_layer must be >= 1, got {units_previous_layer}"
            )

        self._assign_name(name)
        self.units = units
        self.batch_size = self._check_batch_size(batch_size)
        self.use_biases = True if use_biases is None else bool(use_biases)
        self.activation = _resolve_activation(activation)
        self.input_shape = Shape(units_previous_layer)
        self.output_shape = Shape(units)

        self.kernel = Tensor.zeros((units, units_previous_layer))
        WeightInitializer("uniform")(self.kernel, -0.1, 0.1)
        self.trainable_weights = [self.kernel]
        if self.use_biases:
            self.biases = Tensor.zeros((units,))
            WeightInitializer("constant")(self.biases, 0.01)
            self.trainable_weights.append(self.biases)
        else:
            self.biases = None
        self._initialized = True
        return self

    def forward_pass(self, tape: Optional["GradientTape"] = None) -> Tensor:
        x = self._require_input()
        z = math_t.dot_product(x, math_t.transpose(self.kernel, tape=tape), tape)
        if self.use_biases:
            z = math_t.addition(z, self.biases, tape)
        try:
            activation = _ACTIVATIONS[self.activation]
        except KeyError as e:
            raise UnsupportedTypeError("activation function", self.activation) from e
        self.output = activation(z, tape)
        return self.output
