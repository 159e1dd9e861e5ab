"""
Planar point helpers shared by the sampler, the ICP core and the drawing tools.

All functions take point sets as anything convertible to an ``(N, 2)`` float
array and return new arrays; inputs are never modified.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Iterable, NamedTuple, Sequence, Tuple, Union, TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from numpy.typing import NDArray


class Point(NamedTuple):
    """A 2D point in drawing coordinates."""

    x: float
    y: float


PointLike = Union[Point, Tuple[float, float], Sequence[float], Mapping]
PointsLike = Union["NDArray[np.floating]", Iterable[PointLike]]


def as_points_array(points: PointsLike) -> "NDArray[np.float64]":
    """Convert a point sequence into a fresh ``(N, 2)`` float64 array.

    Accepts arrays, sequences of ``(x, y)`` pairs or ``Point`` tuples, and
    mappings with ``x``/``y`` keys.

    Raises:
        ValueError: If the input cannot be read as 2D points.
    """
    if isinstance(points, np.ndarray):
        arr = np.array(points, dtype=np.float64)
    else:
        rows = [
            (p["x"], p["y"]) if isinstance(p, Mapping) else p
            for p in points
        ]
        if not rows:
            return np.empty((0, 2), dtype=np.float64)
        arr = np.array(rows, dtype=np.float64)

    if arr.size == 0:
        return np.empty((0, 2), dtype=np.float64)
    if arr.ndim != 2 or arr.shape[1] != 2:
        raise ValueError(f"Expected Nx2 point array, got shape {arr.shape}")
    return arr


def to_point_list(points: PointsLike) -> list[Point]:
    """Return the points as a list of ``Point`` tuples."""
    return [Point(float(x), float(y)) for x, y in as_points_array(points)]


def centroid(points: PointsLike) -> "NDArray[np.float64]":
    """Arithmetic mean position; the origin for an empty set."""
    arr = as_points_array(points)
    if len(arr) == 0:
        return np.zeros(2, dtype=np.float64)
    return arr.mean(axis=0)


def rotation_matrix(angle: float) -> "NDArray[np.float64]":
    """Counter-clockwise 2x2 rotation matrix for ``angle`` radians."""
    c = math.cos(angle)
    s = math.sin(angle)
    return np.array([[c, -s], [s, c]], dtype=np.float64)


def rotate_points(
    points: PointsLike,
    angle: float,
    pivot: PointLike | None = None,
) -> "NDArray[np.float64]":
    """Rotate points by ``angle`` radians about ``pivot`` (default: their centroid)."""
    arr = as_points_array(points)
    if len(arr) == 0:
        return arr
    center = centroid(arr) if pivot is None else as_points_array([pivot])[0]
    R = rotation_matrix(angle)
    return (arr - center) @ R.T + center


def translate_points(points: PointsLike, offset: PointLike) -> "NDArray[np.float64]":
    """Shift every point by ``offset``."""
    arr = as_points_array(points)
    return arr + as_points_array([offset])[0]


def wrap_angle(angle: float) -> float:
    """Wrap an angle to the half-open interval [-pi, pi)."""
    return (angle + math.pi) % (2.0 * math.pi) - math.pi


def freeze(array: "NDArray") -> "NDArray":
    """Return a read-only copy of ``array``."""
    out = np.array(array, copy=True)
    out.setflags(write=False)
    return out
