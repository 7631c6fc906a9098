"""
Tensor storage primitives: `Shape`, `Matrix` and `Tensor`.
"""

from ._shape import Shape
from ._matrix import Matrix
from ._tensor import Tensor

__all__ = [
    Shape.__name__,
    Matrix.__name__,
    Tensor.__name__,
]
