"""
Type aliases for DDMRP Engine.

Precise numpy array aliases used across the simulation engine and the
genetic search.
"""

from typing import TypeAlias

import numpy as np
from numpy.typing import NDArray

Float1D: TypeAlias = NDArray[np.float64]
Int1D: TypeAlias = NDArray[np.int64]
Genes: TypeAlias = NDArray[np.int8]

Float2D: TypeAlias = NDArray[np.float64]
Int2D: TypeAlias = NDArray[np.int64]

__all__ = [
    "Float1D",
    "Int1D",
    "Genes",
    "Float2D",
    "Int2D",
]
