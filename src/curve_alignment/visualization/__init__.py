"""
Visualization Module

This module provides playback helpers and Plotly rendering for recorded ICP runs.
"""

from .playback import StatePlayer, adaptive_delay
from .alignment_plot import AlignmentVisualizer

__all__ = [
    "StatePlayer",
    "adaptive_delay",
    "AlignmentVisualizer",
]
