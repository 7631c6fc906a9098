"""
Constant weight initializers.

Provided initializers
---------------------
- ``zeros``: every element set to 0 (momentum vectors).
- ``constant``: every element set to a given value; Dense biases start at
  ``0.01`` so ReLU units begin in their active region.
"""

import numpy as np

from ._base import WeightInitializer
from ...tensor._tensor import Tensor


@WeightInitializer.register_initializer("constant")
def constant(tensor: Tensor, value: float = 0.01) -> Tensor:
    """
    Fill `tensor` in-place with `value`.

    Returns
    -------
    Tensor
        The initialized tensor (same object).
    """
    tensor.copy_from_numpy(np.full(tensor.shape.total_size, value))
    return tensor


@WeightInitializer.register_initializer("zeros")
def zeros(tensor: Tensor) -> Tensor:
    return constant(tensor, 0.0)
