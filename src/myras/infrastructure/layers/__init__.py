"""
Layer abstractions and the `Layers` factory.
"""

from ._layer import Layer
from ._input import Input
from ._dense import Dense
from ._layers import Layers

__all__ = [
    Layer.__name__,
    Input.__name__,
    Dense.__name__,
    Layers.__name__,
]
