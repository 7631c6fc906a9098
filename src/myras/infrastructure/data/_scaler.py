"""
Min-max range scaling.

`ScalerService` maps values linearly from an original range onto a new range
and back:

    scale(v)      = (v - original_min) * (new_max - new_min)
                    / (original_max - original_min) + new_min
    scale_back(v) = (v - new_min) * (original_max - original_min)
                    / (new_max - new_min) + original_min

Both directions accept a single number, a sequence of numbers, or a sequence
of sequences, and return the same structure.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Sequence, Union

import numpy as np

Number = Union[int, float]
Scalable = Union[Number, Sequence[Number], Sequence[Sequence[Number]]]


@dataclass
class ScalerService:
    """
    Linear range scaler.

    Attributes
    ----------
    original_min, original_max : float
        Bounds of the data's original range.
    new_min, new_max : float
        Bounds of the target range.
    """

    original_min: float = 0.0
    original_max: float = 1.0
    new_min: float = 0.0
    new_max: float = 1.0

    def __post_init__(self) -> None:
        if self.original_max == self.original_min:
            raise ValueError("original_max must differ from original_min")
        if self.new_max == self.new_min:
            raise ValueError("new_max must differ from new_min")

    @classmethod
    def fit(
        cls,
        values: Iterable[Number],
        new_min: float = 0.0,
        new_max: float = 1.0,
    ) -> "ScalerService":
        """Build a scaler whose original range is the min/max of `values`."""
        arr = np.asarray(list(values), dtype=np.float64)
        if arr.size == 0:
            raise ValueError("Cannot fit a scaler on an empty sequence")
        return cls(float(arr.min()), float(arr.max()), new_min, new_max)

    def _scale_one(self, value: Number) -> float:
        return (float(value) - self.original_min) * (self.new_max - self.new_min) / (
            self.original_max - self.original_min
        ) + self.new_min

    def _scale_back_one(self, value: Number) -> float:
        return (float(value) - self.new_min) * (
            self.original_max - self.original_min
        ) / (self.new_max - self.new_min) + self.original_min

    def scale(self, value: Scalable) -> Union[float, List]:
        """Map `value` from the original range to the new range."""
        if isinstance(value, (int, float, np.floating, np.integer)):
            return self._scale_one(value)
        return [self.scale(v) for v in value]

    def scale_back(self, value: Scalable) -> Union[float, List]:
        """Map `value` from the new range back to the original range."""
        if isinstance(value, (int, float, np.floating, np.integer)):
            return self._scale_back_one(value)
        return [self.scale_back(v) for v in value]
