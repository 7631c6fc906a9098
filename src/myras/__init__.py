"""
Myras: a minimal deep-learning engine.

Tensors with broadcasting arithmetic, a gradient tape for reverse-mode
automatic differentiation, Input/Dense layers and an Adam training loop.
"""

from .domain import (
    ActivationFunctionType,
    LayerType,
    LossFunctionType,
    OptimizerType,
    TensorOperationType,
)
from .infrastructure import *
from .infrastructure import __all__ as _infrastructure_all

__all__ = [
    ActivationFunctionType.__name__,
    LayerType.__name__,
    LossFunctionType.__name__,
    OptimizerType.__name__,
    TensorOperationType.__name__,
    *_infrastructure_all,
]
