"""
Tabular feature/target datasets.

An `XYData` is a list of `XYDataRow`s, each holding parallel lists of
features (``x``) and targets (``y``). `Model.fit` consumes datasets through
`iter_batches`, which stacks rows into ``(batch, features)`` and
``(batch, targets)`` tensors and drops a trailing short batch.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, List, Sequence, Tuple, overload

import numpy as np

from ..tensor._tensor import Tensor


@dataclass
class XYDataRow:
    """One sample: feature values `x` and target values `y`."""

    x: List[float] = field(default_factory=list)
    y: List[float] = field(default_factory=list)


class XYData:
    """
    Ordered collection of `XYDataRow`s.

    Parameters
    ----------
    rows : Sequence[XYDataRow], optional
        Initial rows (copied into a new list).
    """

    def __init__(self, rows: Sequence[XYDataRow] = ()) -> None:
        self.rows: List[XYDataRow] = list(rows)

    @classmethod
    def convert(cls, data: Sequence[Sequence[float]], y_start_index: int) -> "XYData":
        """
        Split raw rows into features and targets.

        Values before `y_start_index` become ``x``; the rest become ``y``.

        Parameters
        ----------
        data : Sequence[Sequence[float]]
            Raw numeric rows.
        y_start_index : int
            Position of the first target value in each row.
        """
        if y_start_index < 0:
            raise ValueError(f"y_start_index must be >= 0, got {y_start_index}")
        return cls(
            XYDataRow(
                x=[float(v) for v in row[:y_start_index]],
                y=[float(v) for v in row[y_start_index:]],
            )
            for row in data
        )

    @staticmethod
    def split(data: "XYData", split_factor: float = 0.8) -> Tuple["XYData", "XYData"]:
        """
        Split into training and test sets, picking test rows evenly.

        ``n - int(split_factor * n)`` rows are taken for testing, spaced
        ``n / test_size`` apart starting with the first row; the remaining
        rows form the training set. Row order is preserved in both sets.

        Parameters
        ----------
        data : XYData
            Dataset to split.
        split_factor : float, optional
            Fraction of rows used for training, in ``[0, 1]``. Defaults to 0.8.

        Returns
        -------
        tuple[XYData, XYData]
            ``(train, test)``.

        Raises
        ------
        ValueError
            If `split_factor` is outside ``[0, 1]``.
        """
        if split_factor < 0.0 or split_factor > 1.0:
            raise ValueError(f"split_factor must be in [0, 1], got {split_factor}")
        n = len(data.rows)
        test_size = n - int(split_factor * n)
        train, test = XYData(), XYData()
        if test_size == 0:
            train.rows.extend(data.rows)
            return train, test

        step = n / test_size
        next_test = 0.0
        for i, row in enumerate(data.rows):
            if i >= int(next_test):
                test.rows.append(row)
                next_test += step
            else:
                train.rows.append(row)
        return train, test

    def shuffle(self) -> None:
        """Shuffle rows in place using NumPy's global RNG."""
        order = np.random.permutation(len(self.rows))
        self.rows = [self.rows[i] for i in order]

    def iter_batches(self, batch_size: int) -> Iterator[Tuple[Tensor, Tensor]]:
        """
        Yield ``(x, y)`` tensors of `batch_size` consecutive rows.

        A trailing batch with fewer than `batch_size` rows is dropped.

        Raises
        ------
        ValueError
            If `batch_size` < 1.
        """
        if batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {batch_size}")
        for start in range(0, len(self.rows) - batch_size + 1, batch_size):
            batch = self.rows[start : start + batch_size]
            x = np.asarray([row.x for row in batch], dtype=np.float32)
            y = np.asarray([row.y for row in batch], dtype=np.float32)
            yield (
                Tensor.from_array(x, trainable=False),
                Tensor.from_array(y, trainable=False),
            )

    def num_batches(self, batch_size: int) -> int:
        return len(self.rows) // batch_size

    def __len__(self) -> int:
        return len(self.rows)

    def __iter__(self) -> Iterator[XYDataRow]:
        return iter(self.rows)

    @overload
    def __getitem__(self, index: int) -> XYDataRow: ...

    @overload
    def __getitem__(self, index: slice) -> "XYData": ...

    def __getitem__(self, index):
        if isinstance(index, slice):
            return XYData(self.rows[index])
        return self.rows[index]

    def __repr__(self) -> str:
        return f"XYData(rows={len(self.rows)})"
