"""
ICP Run Visualization

Renders a recorded run with Plotly: an animated figure with one frame per
iteration (target samples, moving source samples and optionally the
correspondence segments) and a chart of the error per iteration.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Sequence, Union, TYPE_CHECKING

import plotly.graph_objects as go

from ..utils.logging import setup_logger
from .playback import StatePlayer

if TYPE_CHECKING:
    from ..alignment.icp import IterationState
    from ..utils.config import AppConfig, PlaybackConfig

logger = setup_logger(__name__)


class AlignmentVisualizer:
    """Builds Plotly figures from a list of IterationState objects."""

    def __init__(
        self,
        show_correspondences: bool = False,
        source_color: str = "#3b82f6",
        target_color: str = "#ef4444",
        correspondence_color: str = "#9ca3af",
        frame_duration_ms: Optional[int] = None,
        playback: Optional["PlaybackConfig"] = None,
    ):
        """
        Args:
            show_correspondences: Draw a segment from each source point to its match.
            source_color: Color of the (transformed) source curve.
            target_color: Color of the target curve.
            correspondence_color: Color of correspondence segments.
            frame_duration_ms: Fixed frame duration for the play button. If None,
                each frame uses the error-adaptive delay.
            playback: Delay bounds for the error-adaptive delay. Defaults of
                ``adaptive_delay`` are used if None.
        """
        self.show_correspondences = show_correspondences
        self.source_color = source_color
        self.target_color = target_color
        self.correspondence_color = correspondence_color
        self.frame_duration_ms = frame_duration_ms
        self.playback = playback

    @classmethod
    def from_config(cls, cfg: "AppConfig") -> "AlignmentVisualizer":
        return cls(
            show_correspondences=cfg.visualization.show_correspondences,
            source_color=cfg.visualization.source_color,
            target_color=cfg.visualization.target_color,
            frame_duration_ms=cfg.playback.frame_delay_ms,
            playback=cfg.playback,
        )

    # ----------------- Public API -----------------
    def build_animation(self, states: Sequence["IterationState"], title: str = "ICP alignment") -> go.Figure:
        """Animated figure with one frame per state and a step slider."""
        if not states:
            raise ValueError("Cannot visualize an empty state list.")

        first = states[0]
        fig = go.Figure(data=self._state_traces(first))

        # Frame i is held for the delay before advancing from state i. Play
        # always starts at iteration 0 so list positions match frame indices.
        durations = self._frame_durations(states)
        play_frames = [dict(duration=d, redraw=True) for d in durations]
        play_frames.append(dict(duration=0, redraw=True))
        frames = [
            go.Frame(data=self._state_traces(state), name=str(state.iteration))
            for state in states
        ]
        fig.frames = frames

        slider_steps = [
            dict(
                method="animate",
                label=str(state.iteration),
                args=[
                    [str(state.iteration)],
                    dict(mode="immediate", frame=dict(duration=0, redraw=True), transition=dict(duration=0)),
                ],
            )
            for state in states
        ]

        fig.update_layout(
            title=title,
            xaxis_title="x",
            yaxis_title="y",
            updatemenus=[
                dict(
                    type="buttons",
                    showactive=False,
                    buttons=[
                        dict(
                            label="Play",
                            method="animate",
                            args=[
                                None,
                                dict(
                                    frame=play_frames,
                                    fromcurrent=False,
                                    transition=dict(duration=0),
                                ),
                            ],
                        ),
                        dict(
                            label="Pause",
                            method="animate",
                            args=[[None], dict(mode="immediate", frame=dict(duration=0, redraw=False))],
                        ),
                    ],
                )
            ],
            sliders=[dict(active=0, currentvalue=dict(prefix="Iteration: "), steps=slider_steps)],
        )
        # Canvas coordinates grow downwards; keep distances to scale
        fig.update_yaxes(scaleanchor="x", scaleratio=1, autorange="reversed")
        return fig

    def build_error_chart(self, states: Sequence["IterationState"], title: str = "Mean squared error") -> go.Figure:
        iterations = [state.iteration for state in states]
        errors = [state.error for state in states]
        fig = go.Figure(data=go.Scatter(x=iterations, y=errors, mode="lines+markers", name="MSE"))
        fig.update_layout(title=title, xaxis_title="Iteration", yaxis_title="MSE")
        return fig

    def show(self, states: Sequence["IterationState"], title: str = "ICP alignment"):
        self.build_animation(states, title=title).show(renderer="browser")

    def save_html(self, states: Sequence["IterationState"], path: Union[str, Path], title: str = "ICP alignment") -> Path:
        out = Path(path)
        out.parent.mkdir(parents=True, exist_ok=True)
        self.build_animation(states, title=title).write_html(str(out), auto_play=False)
        logger.info("Wrote alignment animation with %d frames to %s", len(states), out)
        return out

    # ----------------- Internal helpers -----------------
    def _frame_durations(self, states: Sequence["IterationState"]) -> List[float]:
        if self.frame_duration_ms is not None:
            return [float(self.frame_duration_ms)] * max(len(states) - 1, 0)
        return StatePlayer(states, config=self.playback).frame_delays()

    def _state_traces(self, state: "IterationState") -> List[go.Scatter]:
        target = state.target_points
        moved = state.transformed_points
        traces = [
            go.Scatter(
                x=target[:, 0], y=target[:, 1],
                mode="lines+markers",
                marker=dict(size=5, color=self.target_color),
                line=dict(color=self.target_color),
                name="Target",
            ),
            go.Scatter(
                x=moved[:, 0], y=moved[:, 1],
                mode="lines+markers",
                marker=dict(size=5, color=self.source_color),
                line=dict(color=self.source_color),
                name=f"Source (error {state.error:.3f})",
            ),
        ]
        if self.show_correspondences:
            traces.append(self._correspondence_trace(state))
        return traces

    def _correspondence_trace(self, state: "IterationState") -> go.Scatter:
        # One segment per pair, separated by None so Plotly breaks the line
        xs: list = []
        ys: list = []
        matched = state.matched_target_points
        for (sx, sy), (tx, ty) in zip(state.transformed_points.tolist(), matched.tolist()):
            xs.extend([sx, tx, None])
            ys.extend([sy, ty, None])
        return go.Scatter(
            x=xs, y=ys,
            mode="lines",
            line=dict(color=self.correspondence_color, width=1, dash="dot"),
            name="Correspondences",
        )
