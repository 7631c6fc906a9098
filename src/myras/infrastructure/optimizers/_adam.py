"""
Adam optimizer service.

Adam maintains exponentially decaying averages of past gradients (first
moment) and past squared gradients (second moment), and applies bias
correction to both estimates.

Design notes
------------
- Configuration is an explicit `AdamConfig` dataclass validated eagerly at
  construction; `Model.compile` builds it with one zero-filled pair of
  momentum tensors per trainable weight.
- Momentum vectors are index aligned with the weights passed to `optimize`.
- Optimizer math is expressed with `math_t` operations (no tape), and the
  results are written into the existing weight and momentum tensors so their
  ids stay stable across steps.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, List, Mapping, Optional, Sequence

from ...domain._errors import ConfigurationError
from ..ops import math_t
from ..tensor._tensor import Tensor
from ._base import OptimizerService


@dataclass
class AdamConfig:
    """
    Adam hyperparameters and state.

    Parameters
    ----------
    first_momentum_vector : List[Tensor]
        First-moment tensors, one per trainable weight. Required, non-empty.
    second_momentum_vector : List[Tensor]
        Second-moment tensors, index aligned with `first_momentum_vector`.
    learning_rate : float, optional
        Step size. Must be > 0. Defaults to 1e-3.
    decay_rate_1 : float, optional
        First-moment decay (beta1), in (0, 1). Defaults to 0.9.
    decay_rate_2 : float, optional
        Second-moment decay (beta2), in (0, 1). Defaults to 0.999.
    epsilon : float, optional
        Denominator stabilizer. Must be > 0. Defaults to 1e-7.

    Raises
    ------
    ConfigurationError
        If momentum vectors are missing, empty, of different lengths or
        shapes, or if a hyperparameter is outside its valid range.
    """

    first_momentum_vector: List[Tensor]
    second_momentum_vector: List[Tensor]
    learning_rate: float = 1e-3
    decay_rate_1: float = 0.9
    decay_rate_2: float = 0.999
    epsilon: float = 1e-7

    def __post_init__(self) -> None:
        self.first_momentum_vector = list(self.first_momentum_vector or [])
        self.second_momentum_vector = list(self.second_momentum_vector or [])
        self.learning_rate = float(self.learning_rate)
        self.decay_rate_1 = float(self.decay_rate_1)
        self.decay_rate_2 = float(self.decay_rate_2)
        self.epsilon = float(self.epsilon)

        m, v = self.first_momentum_vector, self.second_momentum_vector
        if not m or not v:
            raise ConfigurationError(
                "Adam requires non-empty first and second momentum vectors."
            )
        if len(m) != len(v):
            raise ConfigurationError(
                f"Momentum vectors differ in length: {len(m)} vs {len(v)}."
            )
        for i, (a, b) in enumerate(zip(m, v)):
            if a.shape != b.shape:
                raise ConfigurationError(
                    f"Momentum tensors at index {i} differ in shape: "
                    f"{a.shape} vs {b.shape}."
                )
        if self.learning_rate <= 0.0:
            raise ConfigurationError(
                f"learning_rate must be > 0, got {self.learning_rate}"
            )
        for key in ("decay_rate_1", "decay_rate_2"):
            value = getattr(self, key)
            if not (0.0 < value < 1.0):
                raise ConfigurationError(f"{key} must be in (0, 1), got {value}")
        if self.epsilon <= 0.0:
            raise ConfigurationError(f"epsilon must be > 0, got {self.epsilon}")

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "AdamConfig":
        """
        Build a config from a keyword mapping.

        Raises
        ------
        ConfigurationError
            If the mapping contains keys that are not `AdamConfig` fields.
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(mapping) - known)
        if unknown:
            raise ConfigurationError(
                f"Unknown Adam option(s): {', '.join(unknown)}. "
                f"Known: {', '.join(sorted(known))}"
            )
        return cls(**dict(mapping))


class AdamOptimizerService(OptimizerService):
    """
    Adam optimizer.

    Update rule
    -----------
    With ``t`` the iteration counter (incremented before each step) and
    ``g`` the gradient of weight ``w``:

        m = beta1 * m + (1 - beta1) * g
        v = beta2 * v + (1 - beta2) * g^2
        m_hat = m / (1 - beta1^t)
        v_hat = v / (1 - beta2^t)
        w <- w - lr * m_hat / (sqrt(v_hat) + eps)

    Attributes
    ----------
    config : Optional[AdamConfig]
        Active configuration; None until `initialize` is called.
    iteration : int
        Number of completed `optimize` calls.
    """

    def __init__(self, config: Optional[AdamConfig] = None) -> None:
        self.config: Optional[AdamConfig] = None
        self.iteration = 0
        if config is not None:
            self.initialize(config)

    def initialize(self, config: Any) -> None:
        """
        Install a configuration and reset the iteration counter.

        Parameters
        ----------
        config : AdamConfig | Mapping[str, Any]
            Configuration object, or a mapping passed to
            `AdamConfig.from_mapping`.
        """
        if isinstance(config, Mapping):
            config = AdamConfig.from_mapping(config)
        if not isinstance(config, AdamConfig):
            raise TypeError(
                f"Adam expects an AdamConfig, got {type(config).__name__}"
            )
        self.config = config
        self.iteration = 0

    def optimize(self, weights: Sequence[Tensor], gradients: Sequence[Tensor]) -> None:
        """
        Apply one Adam step in place.

        Raises
        ------
        ConfigurationError
            If the optimizer is not initialized, or if the weights, gradients
            and momentum vectors differ in length.
        """
        cfg = self.config
        if cfg is None:
            raise ConfigurationError("Adam optimizer has not been initialized.")
        n = len(cfg.first_momentum_vector)
        if len(weights) != len(gradients) or len(weights) != n:
            raise ConfigurationError(
                f"Length mismatch: {len(weights)} weights, {len(gradients)} "
                f"gradients, {n} momentum tensors."
            )

        self.iteration += 1
        t = self.iteration
        b1, b2 = cfg.decay_rate_1, cfg.decay_rate_2
        correction_1 = 1.0 - b1**t
        correction_2 = 1.0 - b2**t

        for i, (w, g) in enumerate(zip(weights, gradients)):
            m_prev = cfg.first_momentum_vector[i]
            v_prev = cfg.second_momentum_vector[i]

            m = math_t.addition(
                math_t.multiplication(b1, m_prev),
                math_t.multiplication(1.0 - b1, g),
            )
            v = math_t.addition(
                math_t.multiplication(b2, v_prev),
                math_t.multiplication(1.0 - b2, math_t.multiplication(g, g)),
            )
            m_prev.copy_from(m)
            v_prev.copy_from(v)

            m_hat = math_t.division(m, correction_1)
            v_hat = math_t.division(v, correction_2)
            step = math_t.division(
                math_t.multiplication(cfg.learning_rate, m_hat),
                math_t.addition(math_t.sqrt(v_hat), cfg.epsilon),
            )
            w.copy_from(math_t.subtraction(w, step))
