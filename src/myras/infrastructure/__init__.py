"""
Infrastructure layer of Myras: concrete tensors, autodiff, layers,
optimizers, models and dataset helpers.
"""

from .tensor import Matrix, Shape, Tensor
from .graph import ComputationGraph, OperationNode, ValueNode
from ._tensor_operation import TensorOperation
from ._gradient_tape import GradientTape, TapeState
from .ops import math_m, math_t
from .layers import Dense, Input, Layer, Layers
from .optimizers import AdamConfig, AdamOptimizerService, OptimizerService
from .models import History, Model
from .data import ScalerService, XYData, XYDataRow

__all__ = [
    Matrix.__name__,
    Shape.__name__,
    Tensor.__name__,
    ComputationGraph.__name__,
    OperationNode.__name__,
    ValueNode.__name__,
    TensorOperation.__name__,
    GradientTape.__name__,
    TapeState.__name__,
    "math_m",
    "math_t",
    Dense.__name__,
    Input.__name__,
    Layer.__name__,
    Layers.__name__,
    AdamConfig.__name__,
    AdamOptimizerService.__name__,
    OptimizerService.__name__,
    History.__name__,
    Model.__name__,
    ScalerService.__name__,
    XYData.__name__,
    XYDataRow.__name__,
]
