"""
Curve Alignment Module

This module aligns a source curve onto a target curve using the ICP
(Iterative Closest Point) algorithm and records the full iteration history.
"""

from .icp import CurveICP, IterationState, run_icp
from .correspondence import find_closest_point, find_correspondences
from .rigid_transform import Transformation, RigidStep, estimate_rotation, estimate_rigid_step
from .error_metric import mean_squared_error
from .exceptions import InsufficientInputError, DegenerateError

__all__ = [
    "CurveICP",
    "IterationState",
    "run_icp",
    "find_closest_point",
    "find_correspondences",
    "Transformation",
    "RigidStep",
    "estimate_rotation",
    "estimate_rigid_step",
    "mean_squared_error",
    "InsufficientInputError",
    "DegenerateError",
]
