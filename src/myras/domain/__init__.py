"""
Domain layer of Myras: enums, error taxonomy and structural interfaces.
"""

from ._enums import (
    ActivationFunctionType,
    LayerType,
    LossFunctionType,
    OptimizerType,
    TensorOperationType,
)
from ._errors import (
    ConfigurationError,
    GraphIntegrityError,
    IndexOutOfRangeError,
    ReductionError,
    ShapeError,
    TapeStateError,
    UnsupportedTypeError,
)
from ._operation import ITensorOperation
from ._optimizers import IOptimizer
from ._tensor import ITensor

__all__ = [
    ActivationFunctionType.__name__,
    LayerType.__name__,
    LossFunctionType.__name__,
    OptimizerType.__name__,
    TensorOperationType.__name__,
    ConfigurationError.__name__,
    GraphIntegrityError.__name__,
    IndexOutOfRangeError.__name__,
    ReductionError.__name__,
    ShapeError.__name__,
    TapeStateError.__name__,
    UnsupportedTypeError.__name__,
    ITensorOperation.__name__,
    IOptimizer.__name__,
    ITensor.__name__,
]
