"""
Factory functions for declaring a model's layer DAG.

Example
-------
    inputs = Layers.input(shape=(1,), batch_size=32)
    hidden = Layers.dense(50, activation=ActivationFunctionType.RE_LU)(inputs)
    outputs = Layers.dense(1)(hidden)
    model = Model(inputs, outputs)
"""

from __future__ import annotations

from typing import Callable, Iterable, Optional, Union

from ...domain._errors import ConfigurationError
from ..tensor._shape import Shape
from ._dense import ActivationLike, Dense
from ._input import Input
from ._layer import Layer


class Layers:
    """Namespace of layer factories."""

    @staticmethod
    def input(
        shape: Optional[Union[Shape, Iterable[int]]] = None,
        batch_size: Optional[int] = None,
        name: Optional[str] = None,
    ) -> Input:
        """Build and initialize an `Input` layer."""
        return Input().initialize(name=name, shape=shape, batch_size=batch_size)

    @staticmethod
    def dense(
        units: int,
        use_biases: Optional[bool] = None,
        activation: Optional[ActivationLike] = None,
        name: Optional[str] = None,
    ) -> Callable[[Layer], Dense]:
        """
        Return a binder that attaches a new `Dense` layer to a previous layer.

        The Dense layer is sized from the previous layer's trailing output
        dimension, inherits its batch size, and is wired into both adjacency
        lists.

        Raises
        ------
        ConfigurationError
            (from the binder) if the previous layer has no output shape.
        """

        def bind(previous: Layer) -> Dense:
            if previous.output_shape is None:
                raise ConfigurationError(
                    f"Cannot attach a Dense layer to {previous.name!r}: "
                    "its output shape is unknown."
                )
            layer = Dense().initialize(
                units,
                previous.output_shape[-1],
                batch_size=previous.batch_size,
                name=name,
                use_biases=use_biases,
                activation=activation,
            )
            previous.connect(layer)
            return layer

        return bind
