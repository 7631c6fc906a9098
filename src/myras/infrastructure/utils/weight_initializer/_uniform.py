"""
Uniform weight initializers.

Provided initializers
---------------------
- ``uniform``:
    ``U(low, high)``; Dense layers use ``U(-0.1, 0.1)`` as a placeholder
    until the model is compiled.
- ``xavier_uniform``:
    Glorot uniform ``U(-sqrt(6/(fan_in+fan_out)), +sqrt(6/(fan_in+fan_out)))``
    with fans supplied by the caller. `Model.compile` takes them from the
    layers adjacent to each Dense layer, so a missing neighbour contributes
    a fan of 0.

Draws come from NumPy's global RNG; seed it with ``numpy.random.seed`` for
reproducible runs.
"""

import math

import numpy as np

from ._base import WeightInitializer
from ...tensor._tensor import Tensor


@WeightInitializer.register_initializer("uniform")
def uniform(tensor: Tensor, low: float = -0.1, high: float = 0.1) -> Tensor:
    """
    Fill `tensor` in-place with draws from ``U(low, high)``.

    Parameters
    ----------
    tensor:
        The tensor to initialize in-place.
    low, high:
        Distribution bounds. Defaults to ``[-0.1, 0.1]``.

    Returns
    -------
    Tensor
        The initialized tensor (same object).
    """
    if high < low:
        raise ValueError(f"uniform requires low <= high, got [{low}, {high}]")
    w = np.random.uniform(low, high, size=tensor.shape.dimensions)
    tensor.copy_from_numpy(w)
    return tensor


@WeightInitializer.register_initializer("xavier_uniform")
def xavier_uniform(tensor: Tensor, fan_in: int, fan_out: int) -> Tensor:
    """
    Apply Xavier (Glorot) uniform initialization.

        U(-bound, +bound), where bound = sqrt(6 / (fan_in + fan_out))

    Parameters
    ----------
    tensor:
        The tensor to initialize in-place.
    fan_in:
        Number of inputs feeding each unit.
    fan_out:
        Number of units fed by each output (0 for an output layer).

    Returns
    -------
    Tensor
        The initialized tensor (same object).

    Raises
    ------
    ValueError
        If either fan is negative or both are zero.
    """
    fan_in, fan_out = int(fan_in), int(fan_out)
    if fan_in < 0 or fan_out < 0 or fan_in + fan_out == 0:
        raise ValueError(
            f"xavier_uniform requires non-negative fans with a positive sum, "
            f"got fan_in={fan_in}, fan_out={fan_out}"
        )
    bound = math.sqrt(6.0 / float(fan_in + fan_out))
    return uniform(tensor, -bound, bound)
