"""
Utility Functions Module

This module provides common utility functions used across the curve alignment project.
- Planar point helpers (centroid, rotation, translation)
- Logging setup
- Configuration loading
- Plain-text point list import/export
"""

from .logging import setup_logger, configure_package_logging
from .geometry import (
    Point,
    as_points_array,
    to_point_list,
    centroid,
    rotation_matrix,
    rotate_points,
    translate_points,
    wrap_angle,
)
from .point_io import format_points, parse_points, read_points_file, write_points_file
from .config import AppConfig, load_config

__all__ = [
    "setup_logger",
    "configure_package_logging",
    "Point",
    "as_points_array",
    "to_point_list",
    "centroid",
    "rotation_matrix",
    "rotate_points",
    "translate_points",
    "wrap_angle",
    "format_points",
    "parse_points",
    "read_points_file",
    "write_points_file",
    "AppConfig",
    "load_config",
]
