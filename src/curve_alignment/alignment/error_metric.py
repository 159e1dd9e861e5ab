"""Alignment error between paired point sets."""

from __future__ import annotations

import numpy as np

from ..utils.geometry import PointsLike, as_points_array
from ..utils.logging import setup_logger

logger = setup_logger(__name__)


def mean_squared_error(points_a: PointsLike, points_b: PointsLike) -> float:
    """
    Mean squared Euclidean distance between row-wise paired points.

    Args:
        points_a: First point set (N x 2).
        points_b: Second point set (N x 2), paired with ``points_a`` by row.

    Returns:
        The mean of the squared distances, 0.0 for two empty sets, or
        infinity if the sets differ in length.
    """
    a = as_points_array(points_a)
    b = as_points_array(points_b)
    if len(a) != len(b):
        logger.warning(
            "mean_squared_error called with mismatched point sets (%d vs %d); "
            "returning infinite error.",
            len(a),
            len(b),
        )
        return float("inf")
    if len(a) == 0:
        return 0.0

    diff = a - b
    return float(np.mean(np.sum(diff * diff, axis=1)))
