"""
Per-epoch training record returned by `Model.fit`.

`History` collects one aggregated value per metric per epoch (``loss`` and,
when a test set is given, ``test_loss``), in the spirit of Keras' object of
the same name. It performs no aggregation itself: the training loop appends
already-averaged epoch values.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Union


Number = Union[int, float]


@dataclass
class History:
    """
    Container for per-epoch metrics.

    Attributes
    ----------
    history : Dict[str, List[float]]
        Metric name -> values, one per recorded epoch, in epoch order.
    epoch : List[int]
        Zero-based indices of the recorded epochs.
    """

    history: Dict[str, List[float]] = field(default_factory=dict)
    epoch: List[int] = field(default_factory=list)

    def append_epoch(self, epoch_idx: int, logs: Mapping[str, Number]) -> None:
        """
        Record the metrics of a finished epoch.

        Values are stored as Python floats; metrics seen for the first time
        get a new list.
        """
        self.epoch.append(int(epoch_idx))
        for k, v in logs.items():
            self.history.setdefault(k, []).append(float(v))

    def last(self) -> Dict[str, float]:
        """Return the most recent value of every metric that has one."""
        return {k: float(vs[-1]) for k, vs in self.history.items() if vs}

    def __getitem__(self, key: str) -> List[float]:
        return self.history[key]

    def __len__(self) -> int:
        return len(self.epoch)
