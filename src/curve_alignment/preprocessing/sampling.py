"""
Arc-length resampling of freehand curves.

Pointer input produces points at irregular spacing (slow strokes are dense,
fast strokes sparse). Before alignment each curve is resampled so that
consecutive samples lie ``spacing`` apart measured along the polyline.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

import numpy as np

from ..utils.geometry import PointsLike, as_points_array
from ..utils.logging import setup_logger

if TYPE_CHECKING:
    from numpy.typing import NDArray

logger = setup_logger(__name__)

# Per-axis distance under which the final raw point counts as already emitted
ENDPOINT_TOLERANCE = 0.001


def sample_points(curve: PointsLike, spacing: float) -> "NDArray[np.float64]":
    """
    Resample a polyline at even arc-length intervals.

    The first raw point is always kept. Walking along the segments, a new
    point is linearly interpolated every time the travelled distance reaches
    another multiple of ``spacing``; leftover distance carries over into the
    next segment. The last raw point is appended unless the final sample
    already lies within ``ENDPOINT_TOLERANCE`` of it, so both endpoints
    survive regardless of spacing.

    Args:
        curve: Raw curve points in drawing order.
        spacing: Distance between consecutive samples (> 0).

    Returns:
        (N x 2) array of sampled points. Curves with at most one point are
        returned unchanged.

    Raises:
        ValueError: If spacing is not positive.
    """
    if not spacing > 0:
        raise ValueError(f"spacing must be positive, got {spacing}")

    points = as_points_array(curve)
    if len(points) <= 1:
        return points

    samples: list[tuple[float, float]] = [(float(points[0, 0]), float(points[0, 1]))]
    distance_to_next = float(spacing)

    for i in range(1, len(points)):
        start_x, start_y = float(points[i - 1, 0]), float(points[i - 1, 1])
        end_x, end_y = float(points[i, 0]), float(points[i, 1])

        remaining = math.hypot(end_x - start_x, end_y - start_y)
        cur_x, cur_y = start_x, start_y

        while remaining >= distance_to_next:
            ratio = distance_to_next / remaining
            cur_x = cur_x + ratio * (end_x - cur_x)
            cur_y = cur_y + ratio * (end_y - cur_y)
            samples.append((cur_x, cur_y))

            remaining -= distance_to_next
            distance_to_next = float(spacing)

        distance_to_next -= remaining

    last_x, last_y = float(points[-1, 0]), float(points[-1, 1])
    tail_x, tail_y = samples[-1]
    if abs(tail_x - last_x) > ENDPOINT_TOLERANCE or abs(tail_y - last_y) > ENDPOINT_TOLERANCE:
        samples.append((last_x, last_y))

    logger.debug(
        "Sampled %d raw points into %d samples (spacing=%.3f).",
        len(points),
        len(samples),
        spacing,
    )
    return np.array(samples, dtype=np.float64)
