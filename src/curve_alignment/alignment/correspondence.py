"""
Nearest-neighbour correspondence search.

Curves carry tens to a few hundred samples, so the search is a brute-force
scan over all candidates. Exact distances are computed directly (no
dot-product expansion) so that equidistant candidates compare equal and
the lowest index wins.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from ..utils.geometry import PointLike, PointsLike, as_points_array

if TYPE_CHECKING:
    from numpy.typing import NDArray


def _squared_distances(source: "NDArray", target: "NDArray") -> "NDArray":
    diff = source[:, None, :] - target[None, :, :]
    return np.einsum("ijk,ijk->ij", diff, diff)


def find_closest_point(point: PointLike, candidates: PointsLike) -> int:
    """
    Index of the candidate closest to ``point`` (Euclidean distance).

    Ties are broken by the lowest index.

    Raises:
        ValueError: If there are no candidates.
    """
    targets = as_points_array(candidates)
    if len(targets) == 0:
        raise ValueError("Cannot search for a closest point among zero candidates.")
    query = as_points_array([point])
    return int(np.argmin(_squared_distances(query, targets)[0]))


def find_correspondences(source: PointsLike, target: PointsLike) -> "NDArray[np.intp]":
    """
    Match every source point to its closest target point.

    Args:
        source: Source points (N x 2).
        target: Target points (M x 2), M >= 1.

    Returns:
        (N x 2) integer array; row i is (i, index of the closest target point).
        Several source points may share a target.

    Raises:
        ValueError: If the target set is empty.
    """
    src = as_points_array(source)
    tgt = as_points_array(target)
    if len(tgt) == 0:
        raise ValueError("Cannot find correspondences against an empty target set.")

    if len(src) == 0:
        return np.empty((0, 2), dtype=np.intp)

    # argmin returns the first occurrence of the minimum
    closest = np.argmin(_squared_distances(src, tgt), axis=1)
    return np.column_stack([np.arange(len(src), dtype=np.intp), closest.astype(np.intp)])
