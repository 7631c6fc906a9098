"""
Math operation libraries.

- `math_m`: matrix kernels (no autodiff).
- `math_t`: differentiable tensor operations recorded on a `GradientTape`.
"""

from . import _matrix_math as math_m
from . import _tensor_math as math_t

__all__ = [
    "math_m",
    "math_t",
]
