"""
Domain-level optimizer contracts for Myras.

This module defines the `IOptimizer` protocol, which specifies the minimal
interface required for optimizer implementations (e.g., Adam).

Notes
-----
- Unlike parameter-owning optimizers, Myras optimizers are stateless with
  respect to *which* weights they update: the model hands them the trainable
  weights and the matching gradients on every step.
- Optimizer state (momentum vectors, iteration counters) is established once
  through `initialize(config)`, and must be index aligned with the weights
  passed to `optimize`.
"""

from __future__ import annotations

from typing import Any, Protocol, Sequence, runtime_checkable

from ._tensor import ITensor


@runtime_checkable
class IOptimizer(Protocol):
    """
    Optimizer interface contract.

    Required methods
    ----------------
    - `initialize(config)` stores hyperparameters and per-weight state.
    - `optimize(weights, gradients)` applies one in-place update step.
    """

    def initialize(self, config: Any) -> None:
        """
        Configure the optimizer.

        Parameters
        ----------
        config : Any
            Optimizer-specific configuration object.
        """
        ...

    def optimize(
        self, weights: Sequence[ITensor], gradients: Sequence[ITensor]
    ) -> None:
        """
        Update `weights` in place using `gradients`.

        Parameters
        ----------
        weights : Sequence[ITensor]
            Trainable weights, in the order used at initialization.
        gradients : Sequence[ITensor]
            Gradients of the loss with respect to `weights`, same order.
        """
        ...
