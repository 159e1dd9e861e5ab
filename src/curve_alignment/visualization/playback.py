"""
Stepping through a recorded ICP run.

``StatePlayer`` keeps a clamped cursor over the state list, and
``adaptive_delay`` turns the error change between two consecutive states into
a frame delay so that playback moves quickly through large improvements and
slows down once the alignment settles.
"""

from __future__ import annotations

import math
from typing import Optional, Sequence, TYPE_CHECKING

if TYPE_CHECKING:
    from ..alignment.icp import IterationState
    from ..utils.config import PlaybackConfig


def adaptive_delay(
    states: Sequence["IterationState"],
    step: int,
    *,
    base_delay_ms: float = 800.0,
    min_delay_ms: float = 100.0,
    default_delay_ms: float = 300.0,
) -> float:
    """
    Delay (ms) before advancing from ``step`` to ``step + 1``.

    The scale factor is ``log10(1 + 100 * decrease)`` clamped to [0.1, 1],
    where the error decrease is floored at 1e-4. The delay is
    ``base_delay_ms * (1 - scale)`` but never below ``min_delay_ms``.
    On the last state there is no next frame and ``default_delay_ms`` is
    returned.
    """
    if step < 0 or step >= len(states) - 1:
        return float(default_delay_ms)

    decrease = max(0.0001, states[step].error - states[step + 1].error)
    scale = min(1.0, max(0.1, math.log10(1.0 + decrease * 100.0)))
    return max(float(min_delay_ms), float(base_delay_ms) * (1.0 - scale))


class StatePlayer:
    """Clamped cursor over an ICP state history."""

    def __init__(self, states: Sequence["IterationState"], config: Optional["PlaybackConfig"] = None):
        self.states = list(states)
        self.step = 0
        self.config = config

    def __len__(self) -> int:
        return len(self.states)

    @property
    def current(self) -> Optional["IterationState"]:
        if not self.states:
            return None
        return self.states[self.step]

    @property
    def at_end(self) -> bool:
        return self.step >= len(self.states) - 1

    def seek(self, step: int) -> int:
        if not self.states:
            self.step = 0
        else:
            self.step = min(max(int(step), 0), len(self.states) - 1)
        return self.step

    def step_forward(self) -> int:
        return self.seek(self.step + 1)

    def step_back(self) -> int:
        return self.seek(self.step - 1)

    def reset(self) -> int:
        return self.seek(0)

    def delay_at(self, step: int) -> float:
        """Error-adaptive delay (ms) before advancing from ``step``."""
        if self.config is None:
            return adaptive_delay(self.states, step)
        return adaptive_delay(
            self.states,
            step,
            base_delay_ms=self.config.base_delay_ms,
            min_delay_ms=self.config.min_delay_ms,
            default_delay_ms=self.config.default_delay_ms,
        )

    def next_delay(self) -> float:
        return self.delay_at(self.step)

    def frame_delays(self) -> list[float]:
        """Delays for every transition of the run, in order."""
        return [self.delay_at(i) for i in range(len(self.states) - 1)]
