"""
Curve Alignment Package

A Python package for aligning two freehand 2D curves with the Iterative
Closest Point (ICP) algorithm. Curves are resampled at even arc-length
spacing, matched by brute-force nearest neighbours and aligned with a
closed-form rigid transform. Every iteration is recorded as an immutable
state so that a run can be stepped through or animated afterwards.
"""

__version__ = "0.1.0"

from .preprocessing import *
from .alignment import *
from .utils import *
from .visualization import *

__all__ = [
    "preprocessing",
    "alignment",
    "utils",
    "visualization",
]
