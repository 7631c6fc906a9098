"""
Optimizer service base class.

Optimizer services are configured once (`initialize`) and then called with
the model's trainable weights and their gradients on every training step
(`optimize`). Weights are updated in place.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Sequence

from ..tensor._tensor import Tensor


class OptimizerService(ABC):
    """
    Abstract optimizer service.

    Subclasses conform to the `IOptimizer` protocol.
    """

    @abstractmethod
    def initialize(self, config: Any) -> None:
        """Store hyperparameters and per-weight state."""
        raise NotImplementedError

    @abstractmethod
    def optimize(self, weights: Sequence[Tensor], gradients: Sequence[Tensor]) -> None:
        """Apply one update step to `weights` in place."""
        raise NotImplementedError
