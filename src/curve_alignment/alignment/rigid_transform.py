"""
Closed-form 2D rigid transform estimation.

For a fixed set of correspondences the rotation minimising the summed
squared distance is obtained directly from the centred cross-correlation
terms (2D orthogonal Procrustes): with source offsets ``s`` and target
offsets ``t`` from their centroids,

    theta = atan2(sum(s_x * t_y - s_y * t_x), sum(s_x * t_x + s_y * t_y))

The source is rotated about its own centroid and then translated so that
its centroid lands on the centroid of the matched target points.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Tuple, TYPE_CHECKING

import numpy as np

from ..utils.geometry import (
    PointLike,
    PointsLike,
    as_points_array,
    centroid,
    rotate_points,
    rotation_matrix,
)

if TYPE_CHECKING:
    from numpy.typing import NDArray


@dataclass(frozen=True)
class Transformation:
    """
    Accumulated rigid transform of a run.

    ``rotation`` is applied about the centroid of the iteration-0 sampled
    source points, then ``translation`` is added. Instances are immutable;
    each ICP step produces a new one via ``compose_step``.

    Attributes:
        rotation: Accumulated rotation in radians (counter-clockwise, unwrapped)
        translation: Accumulated (x, y) translation
    """

    rotation: float = 0.0
    translation: Tuple[float, float] = (0.0, 0.0)

    @classmethod
    def identity(cls) -> "Transformation":
        return cls()

    @property
    def rotation_deg(self) -> float:
        return math.degrees(self.rotation)

    def compose_step(self, delta_rotation: float, delta_translation: PointLike) -> "Transformation":
        """Fold one ICP step into the accumulated transform."""
        dx, dy = as_points_array([delta_translation])[0]
        return Transformation(
            rotation=self.rotation + float(delta_rotation),
            translation=(self.translation[0] + float(dx), self.translation[1] + float(dy)),
        )

    def apply(self, points: PointsLike, pivot: PointLike | None = None) -> "NDArray[np.float64]":
        """
        Apply the transform to points.

        Args:
            points: Points to transform (N x 2).
            pivot: Rotation centre. Defaults to the centroid of ``points``,
                which matches the convention for the iteration-0 source set.

        Returns:
            Transformed (N x 2) array.
        """
        rotated = rotate_points(points, self.rotation, pivot)
        if len(rotated) == 0:
            return rotated
        return rotated + np.asarray(self.translation, dtype=np.float64)

    def as_matrix(self, pivot: PointLike = (0.0, 0.0)) -> "NDArray[np.float64]":
        """
        Homogeneous 3x3 matrix equivalent to ``apply(points, pivot)``.

        p' = R (p - c) + c + t  ==  R p + (c - R c + t)
        """
        c = as_points_array([pivot])[0]
        R = rotation_matrix(self.rotation)
        T = np.eye(3)
        T[:2, :2] = R
        T[:2, 2] = c - R @ c + np.asarray(self.translation, dtype=np.float64)
        return T


@dataclass(frozen=True, eq=False)
class RigidStep:
    """Result of one estimation step."""

    delta_rotation: float
    delta_translation: Tuple[float, float]
    source_centroid: Tuple[float, float]
    target_centroid: Tuple[float, float]
    points: "NDArray[np.float64]" = field(repr=False)


def estimate_rotation(source_points: PointsLike, target_points: PointsLike) -> float:
    """
    Optimal rotation (radians) taking centred source onto centred target.

    Args:
        source_points: Source points (N x 2).
        target_points: Corresponding target points (N x 2), paired by row.
    """
    src = as_points_array(source_points)
    tgt = as_points_array(target_points)
    if len(src) != len(tgt):
        raise ValueError(
            f"Source and target must be paired row by row, got {len(src)} and {len(tgt)} points"
        )

    src_c = src - centroid(src)
    tgt_c = tgt - centroid(tgt)

    numerator = float(np.sum(src_c[:, 0] * tgt_c[:, 1] - src_c[:, 1] * tgt_c[:, 0]))
    denominator = float(np.sum(src_c[:, 0] * tgt_c[:, 0] + src_c[:, 1] * tgt_c[:, 1]))
    return math.atan2(numerator, denominator)


def estimate_rigid_step(current_points: PointsLike, matched_target: PointsLike) -> RigidStep:
    """
    Estimate and apply one rigid update.

    Args:
        current_points: Current (already transformed) source points (N x 2).
        matched_target: Target point matched to each source point (N x 2).

    Returns:
        RigidStep with the rotation/translation deltas and the moved points.
    """
    src = as_points_array(current_points)
    tgt = as_points_array(matched_target)

    source_centroid = centroid(src)
    target_centroid = centroid(tgt)

    delta_rotation = estimate_rotation(src, tgt)
    rotated = rotate_points(src, delta_rotation, source_centroid)

    delta_translation = target_centroid - centroid(rotated)
    moved = rotated + delta_translation

    return RigidStep(
        delta_rotation=delta_rotation,
        delta_translation=(float(delta_translation[0]), float(delta_translation[1])),
        source_centroid=(float(source_centroid[0]), float(source_centroid[1])),
        target_centroid=(float(target_centroid[0]), float(target_centroid[1])),
        points=moved,
    )
