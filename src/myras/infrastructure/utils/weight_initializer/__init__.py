"""
Weight initialization public API.

Importing this package registers the built-in initializers (``uniform``,
``xavier_uniform``, ``constant``, ``zeros``) into the `WeightInitializer`
registry via import side effects.
"""

from ._uniform import *
from ._constants import *
from ._base import WeightInitializer

__all__ = [
    WeightInitializer.__name__,
]
