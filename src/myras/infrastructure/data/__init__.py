"""
Dataset helpers consumed by `Model.fit`.
"""

from ._xy_data import XYData, XYDataRow
from ._scaler import ScalerService

__all__ = [
    XYData.__name__,
    XYDataRow.__name__,
    ScalerService.__name__,
]
