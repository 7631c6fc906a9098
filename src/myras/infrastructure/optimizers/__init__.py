"""
Optimizer services.
"""

from ._base import OptimizerService
from ._adam import AdamConfig, AdamOptimizerService

__all__ = [
    OptimizerService.__name__,
    AdamConfig.__name__,
    AdamOptimizerService.__name__,
]
