"""
Closed enumerations shared across the engine.

These enums tag layers, activations, losses, optimizers and graph operations.
Dispatch over them is exhaustive: any member without an implementation raises
`UnsupportedTypeError` at the point of use.
"""

from enum import Enum


class ActivationFunctionType(Enum):
    """Activation applied at the end of a Dense layer."""

    RE_LU = "relu"
    LINEAR = "linear"


class LayerType(Enum):
    """Kind of a layer in the model DAG."""

    INPUT = "input"
    DENSE = "dense"


class LossFunctionType(Enum):
    """Loss used by `Model.fit`. Only MSE is implemented."""

    MSE = "mse"
    MAE = "mae"


class OptimizerType(Enum):
    """Optimizer used by `Model.fit`."""

    ADAM = "adam"


class TensorOperationType(Enum):
    """Type tag carried by every recorded `TensorOperation`."""

    ADDITION = "addition"
    SUBTRACTION = "subtraction"
    MULTIPLICATION = "multiplication"
    DIVISION = "division"
    SQRT = "sqrt"
    TRANSPOSE = "transpose"
    DOT_PRODUCT = "dot_product"
    MSE = "mse"
    RE_LU = "relu"
    LINEAR = "linear"
