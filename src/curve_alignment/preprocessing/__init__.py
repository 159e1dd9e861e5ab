"""
Curve Preprocessing Module

Turns raw pointer-input polylines into evenly spaced sample sets.
"""

from .sampling import sample_points, ENDPOINT_TOLERANCE

__all__ = [
    "sample_points",
    "ENDPOINT_TOLERANCE",
]
