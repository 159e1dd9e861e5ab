"""
ICP Alignment of 2D Curves

This module implements the Iterative Closest Point (ICP) algorithm for
aligning a freehand source curve onto a target curve, recording one
immutable snapshot per iteration so that a caller can replay the run.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, List, Optional, TYPE_CHECKING
import math
import time

import numpy as np

from ..preprocessing.sampling import sample_points
from ..utils.geometry import PointsLike, as_points_array, centroid, freeze
from ..utils.logging import setup_logger
from .correspondence import find_correspondences
from .error_metric import mean_squared_error
from .exceptions import DegenerateError, InsufficientInputError
from .rigid_transform import Transformation, estimate_rigid_step

if TYPE_CHECKING:
    from numpy.typing import NDArray
    from ..utils.config import AppConfig

logger = setup_logger(__name__)

MIN_CURVE_POINTS = 2


@dataclass(frozen=True, eq=False)
class IterationState:
    """
    Snapshot of one ICP iteration.

    All arrays are read-only copies; the sampled source/target sets are the
    same for every state of a run.

    Attributes:
        iteration: Index of the state (0 = before any update)
        source_points: Sampled source points at iteration 0 (N x 2)
        target_points: Sampled target points (M x 2)
        transformed_points: Source points after this iteration (N x 2)
        correspondences: (N x 2) rows of (source_index, target_index) used for this iteration
        transformation: Accumulated transform from source_points to transformed_points
        error: Mean squared distance between transformed points and their matched targets
        prev_error: Error of the previous state (None for iteration 0)
    """

    iteration: int
    source_points: "NDArray[np.float64]" = field(repr=False)
    target_points: "NDArray[np.float64]" = field(repr=False)
    transformed_points: "NDArray[np.float64]" = field(repr=False)
    correspondences: "NDArray[np.intp]" = field(repr=False)
    transformation: Transformation
    error: float
    prev_error: Optional[float] = None

    @property
    def matched_target_points(self) -> "NDArray[np.float64]":
        """Target point paired with each source point, in source order."""
        return self.target_points[self.correspondences[:, 1]]

    @property
    def error_decrease(self) -> Optional[float]:
        if self.prev_error is None:
            return None
        return self.prev_error - self.error

    def reconstruct_transformed(self) -> "NDArray[np.float64]":
        """Re-derive the transformed points from the iteration-0 samples and the accumulated transform."""
        return self.transformation.apply(self.source_points, pivot=centroid(self.source_points))

    def to_dict(self) -> dict:
        """Plain-Python view of the state (lists and floats) for rendering layers."""
        return {
            "iteration": self.iteration,
            "source_points": self.source_points.tolist(),
            "target_points": self.target_points.tolist(),
            "transformed_points": self.transformed_points.tolist(),
            "correspondences": self.correspondences.tolist(),
            "transformation": {
                "rotation": self.transformation.rotation,
                "translation": list(self.transformation.translation),
            },
            "error": self.error,
            "prev_error": self.prev_error,
        }


class CurveICP:
    """
    ICP for planar curves.

    Each run:
    1. Resamples both curves at even arc-length spacing
    2. Matches every source sample to its nearest target sample
    3. Estimates the rotation/translation that best fits those matches
    4. Moves the source samples and repeats for a fixed number of iterations

    There is no convergence test: every run performs exactly
    ``max_iterations`` updates and returns ``max_iterations + 1`` states.
    """

    def __init__(
        self,
        source_spacing: float = 10.0,
        target_spacing: float = 10.0,
        max_iterations: int = 20,
    ):
        """
        Initialize ICP parameters.

        Args:
            source_spacing: Arc-length distance between source samples.
            target_spacing: Arc-length distance between target samples.
            max_iterations: Number of ICP updates per run.
        """
        if not source_spacing > 0:
            raise ValueError(f"source_spacing must be positive, got {source_spacing}")
        if not target_spacing > 0:
            raise ValueError(f"target_spacing must be positive, got {target_spacing}")
        if max_iterations < 0:
            raise ValueError(f"max_iterations must be non-negative, got {max_iterations}")

        self.source_spacing = float(source_spacing)
        self.target_spacing = float(target_spacing)
        self.max_iterations = int(max_iterations)

    @classmethod
    def from_config(cls, cfg: "AppConfig") -> "CurveICP":
        return cls(
            source_spacing=cfg.sampling.source_spacing,
            target_spacing=cfg.sampling.target_spacing,
            max_iterations=cfg.alignment.max_iterations,
        )

    def align_curves(self, source_curve: PointsLike, target_curve: PointsLike) -> List[IterationState]:
        """
        Align the source curve onto the target curve.

        Args:
            source_curve: Raw source curve points (at least 2).
            target_curve: Raw target curve points (at least 2).

        Returns:
            List of ``max_iterations + 1`` IterationState objects; index 0 is
            the identity transform, the last entry the final alignment.

        Raises:
            InsufficientInputError: If either curve has fewer than 2 points.
            DegenerateError: If the error metric becomes non-finite.
        """
        source = as_points_array(source_curve)
        target = as_points_array(target_curve)

        if len(source) < MIN_CURVE_POINTS:
            raise InsufficientInputError("source", len(source), MIN_CURVE_POINTS)
        if len(target) < MIN_CURVE_POINTS:
            raise InsufficientInputError("target", len(target), MIN_CURVE_POINTS)

        source_samples = freeze(sample_points(source, self.source_spacing))
        target_samples = freeze(sample_points(target, self.target_spacing))

        logger.info(
            "Starting ICP alignment with %d source samples and %d target samples "
            "(%d iterations).",
            len(source_samples),
            len(target_samples),
            self.max_iterations,
        )

        icp_start = time.time()
        states = list(self._iterate(source_samples, target_samples))
        total_time = time.time() - icp_start

        final = states[-1]
        logger.info(
            "ICP finished in %.4f s (%d iterations). Final MSE: %.6f, rotation: %.4f deg, "
            "translation: (%.4f, %.4f)",
            total_time,
            self.max_iterations,
            final.error,
            final.transformation.rotation_deg,
            final.transformation.translation[0],
            final.transformation.translation[1],
        )
        return states

    def _iterate(
        self,
        source_samples: "NDArray[np.float64]",
        target_samples: "NDArray[np.float64]",
    ) -> Iterator[IterationState]:
        """Fold ICP steps over the sampled sets, yielding one state per iteration."""
        correspondences = find_correspondences(source_samples, target_samples)
        error = self._checked_error(
            source_samples, target_samples[correspondences[:, 1]], iteration=0
        )
        transformation = Transformation.identity()
        current = source_samples

        state = IterationState(
            iteration=0,
            source_points=source_samples,
            target_points=target_samples,
            transformed_points=freeze(current),
            correspondences=freeze(correspondences),
            transformation=transformation,
            error=error,
            prev_error=None,
        )
        yield state

        for iteration in range(1, self.max_iterations + 1):
            # Matches are recomputed from the current points, not the iteration-0 set
            correspondences = find_correspondences(current, target_samples)
            matched = target_samples[correspondences[:, 1]]

            step = estimate_rigid_step(current, matched)
            current = step.points
            transformation = transformation.compose_step(step.delta_rotation, step.delta_translation)

            error = self._checked_error(current, matched, iteration=iteration)

            logger.debug(
                "Iteration %d: MSE=%.6f, Δθ=%.6e rad, |Δt|=%.6e",
                iteration,
                error,
                step.delta_rotation,
                math.hypot(*step.delta_translation),
            )

            state = IterationState(
                iteration=iteration,
                source_points=source_samples,
                target_points=target_samples,
                transformed_points=freeze(current),
                correspondences=freeze(correspondences),
                transformation=transformation,
                error=error,
                prev_error=state.error,
            )
            yield state

    @staticmethod
    def _checked_error(points: "NDArray", matched: "NDArray", *, iteration: int) -> float:
        error = mean_squared_error(points, matched)
        if not math.isfinite(error):
            logger.error("Non-finite alignment error at iteration %d.", iteration)
            raise DegenerateError(
                f"Alignment error became non-finite at iteration {iteration} "
                f"({len(points)} points vs {len(matched)} matches)"
            )
        return error


def run_icp(
    source_curve: PointsLike,
    target_curve: PointsLike,
    source_spacing: float,
    target_spacing: float,
    max_iterations: int,
) -> List[IterationState]:
    """
    Run ICP on two raw curves and return the full state history.

    Convenience wrapper around ``CurveICP(...).align_curves``.
    """
    icp = CurveICP(
        source_spacing=source_spacing,
        target_spacing=target_spacing,
        max_iterations=max_iterations,
    )
    return icp.align_curves(source_curve, target_curve)
