"""
Model and training history.
"""

from ._history import History
from ._model import Model

__all__ = [
    History.__name__,
    Model.__name__,
]
