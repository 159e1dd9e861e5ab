"""
Tests for the ICP iteration driver.

These cover the shape of the recorded history (one state per iteration,
identity first), the recovery of known rigid offsets on synthetic curves,
and the guarded failure modes.
"""

from dataclasses import FrozenInstanceError
from pathlib import Path
import math
import sys

import numpy as np
import pytest

# Ensure src is importable
sys.path.append(str(Path(__file__).parent.parent / "src"))

from curve_alignment.alignment import icp as icp_module
from curve_alignment.alignment.icp import CurveICP, run_icp
from curve_alignment.alignment.correspondence import find_correspondences
from curve_alignment.alignment.exceptions import DegenerateError, InsufficientInputError
from curve_alignment.preprocessing.sampling import sample_points
from curve_alignment.utils.config import AppConfig
from curve_alignment.utils.geometry import rotate_points, wrap_angle


# Asymmetric zig-zag with sharp corners so the alignment is well constrained
ZIGZAG = np.array(
    [
        [0.0, 0.0],
        [30.0, 0.0],
        [30.0, 20.0],
        [60.0, 35.0],
        [50.0, 60.0],
        [80.0, 70.0],
    ]
)


def _wavy_curve(n: int = 60) -> np.ndarray:
    s = np.linspace(0.0, 120.0, n)
    return np.column_stack([s, 15.0 * np.sin(s / 18.0) + 0.01 * s ** 2])


def test_pure_translation_scenario():
    source = [(0.0, 0.0), (10.0, 0.0), (20.0, 0.0)]
    target = [(0.0, 10.0), (10.0, 10.0), (20.0, 10.0)]

    states = run_icp(source, target, 5.0, 5.0, 5)

    assert len(states) == 6
    assert states[0].error == pytest.approx(100.0)

    final = states[-1]
    assert final.transformation.translation[0] == pytest.approx(0.0, abs=1e-9)
    assert final.transformation.translation[1] == pytest.approx(10.0, abs=1e-9)
    assert final.transformation.rotation == pytest.approx(0.0, abs=1e-12)
    distances = np.linalg.norm(final.transformed_points - final.target_points, axis=1)
    assert np.all(distances < 0.5)
    assert final.error == pytest.approx(0.0, abs=1e-12)


@pytest.mark.parametrize("max_iterations", [0, 1, 7, 25])
def test_run_returns_one_state_per_iteration_plus_initial(max_iterations):
    states = run_icp(ZIGZAG, ZIGZAG + np.array([3.0, 1.0]), 4.0, 4.0, max_iterations)

    assert len(states) == max_iterations + 1
    assert [s.iteration for s in states] == list(range(max_iterations + 1))


def test_zero_iterations_returns_identity_state():
    source = _wavy_curve()
    target = source + np.array([5.0, -2.0])

    states = run_icp(source, target, 3.0, 3.0, 0)

    (state,) = states
    assert state.transformation.rotation == 0.0
    assert state.transformation.translation == (0.0, 0.0)
    assert state.prev_error is None
    np.testing.assert_array_equal(state.transformed_points, state.source_points)
    expected_pairs = find_correspondences(sample_points(source, 3.0), sample_points(target, 3.0))
    np.testing.assert_array_equal(state.correspondences, expected_pairs)


def test_identical_curves_stay_aligned():
    curve = _wavy_curve()

    states = run_icp(curve, curve, 4.0, 4.0, 10)

    for state in states:
        assert state.error == pytest.approx(0.0, abs=1e-9)
        assert state.transformation.rotation == pytest.approx(0.0, abs=1e-12)
        assert state.transformation.translation[0] == pytest.approx(0.0, abs=1e-9)
        assert state.transformation.translation[1] == pytest.approx(0.0, abs=1e-9)


def test_known_rotation_and_translation_are_recovered():
    """Target = source rotated by theta and shifted; the accumulated rotation converges to theta."""
    theta = math.radians(4.0)
    source = ZIGZAG
    target = rotate_points(source, theta) + np.array([2.0, 1.0])

    states = run_icp(source, target, 2.0, 2.0, 30)
    final = states[-1]

    assert wrap_angle(final.transformation.rotation - theta) == pytest.approx(0.0, abs=1e-2)
    assert final.error < 1.0
    assert final.error < states[0].error * 0.01
    distances = np.linalg.norm(final.transformed_points - final.matched_target_points, axis=1)
    assert float(np.mean(distances)) < 0.5


def test_reconstruction_matches_stored_transformed_points():
    theta = math.radians(-7.0)
    source = _wavy_curve()
    target = rotate_points(source, theta, pivot=(10.0, 5.0)) + np.array([-4.0, 6.0])

    states = run_icp(source, target, 3.0, 5.0, 20)

    for state in states:
        np.testing.assert_allclose(
            state.reconstruct_transformed(), state.transformed_points, atol=1e-8
        )


def test_state_invariants_hold_for_every_iteration():
    source = _wavy_curve()
    target = rotate_points(source, 0.2) + np.array([8.0, -3.0])

    states = run_icp(source, target, 2.5, 4.0, 15)

    n_source = len(states[0].source_points)
    for i, state in enumerate(states):
        assert len(state.transformed_points) == n_source
        assert state.correspondences.shape == (n_source, 2)
        np.testing.assert_array_equal(state.correspondences[:, 0], np.arange(n_source))
        assert state.correspondences[:, 1].max() < len(state.target_points)
        assert state.error >= 0.0
        if i == 0:
            assert state.prev_error is None
            assert state.error_decrease is None
        else:
            assert state.prev_error == states[i - 1].error
            assert state.error_decrease == pytest.approx(states[i - 1].error - state.error)
        # Every state refers to the same iteration-0 samples
        np.testing.assert_array_equal(state.source_points, states[0].source_points)
        np.testing.assert_array_equal(state.target_points, states[0].target_points)


def test_error_of_a_step_uses_that_steps_correspondences():
    source = _wavy_curve()
    target = rotate_points(source, 0.15) + np.array([4.0, 4.0])

    states = run_icp(source, target, 3.0, 3.0, 5)

    for state in states[1:]:
        diff = state.transformed_points - state.matched_target_points
        assert state.error == pytest.approx(float(np.mean(np.sum(diff ** 2, axis=1))))


def test_states_are_read_only():
    states = run_icp(ZIGZAG, ZIGZAG + 1.0, 5.0, 5.0, 2)
    state = states[-1]

    assert not state.transformed_points.flags.writeable
    assert not state.source_points.flags.writeable
    assert not state.correspondences.flags.writeable
    with pytest.raises(ValueError):
        state.transformed_points[0, 0] = 123.0
    with pytest.raises(FrozenInstanceError):
        state.error = 0.0  # type: ignore[misc]


def test_state_to_dict_is_plain_python():
    states = run_icp(ZIGZAG, ZIGZAG + np.array([2.0, -1.0]), 5.0, 5.0, 2)
    first, last = states[0].to_dict(), states[-1].to_dict()

    assert first["iteration"] == 0
    assert first["prev_error"] is None
    assert first["transformation"] == {"rotation": 0.0, "translation": [0.0, 0.0]}
    assert last["prev_error"] == pytest.approx(states[-2].error)
    assert last["error"] == pytest.approx(states[-1].error)
    assert last["transformed_points"] == states[-1].transformed_points.tolist()
    assert last["correspondences"] == states[-1].correspondences.tolist()
    assert isinstance(last["source_points"], list)
    assert isinstance(last["source_points"][0][0], float)
    assert isinstance(last["correspondences"][0][0], int)
    assert last["transformation"]["translation"] == list(states[-1].transformation.translation)


def test_inputs_are_not_modified():
    source = _wavy_curve()
    target = source + np.array([1.0, 2.0])
    source_before, target_before = source.copy(), target.copy()

    run_icp(source, target, 3.0, 3.0, 5)

    np.testing.assert_array_equal(source, source_before)
    np.testing.assert_array_equal(target, target_before)


def test_runs_are_deterministic():
    source = _wavy_curve()
    target = rotate_points(source, 0.1) + np.array([3.0, 0.0])

    first = run_icp(source, target, 3.0, 4.0, 10)
    second = run_icp(source, target, 3.0, 4.0, 10)

    for a, b in zip(first, second):
        np.testing.assert_array_equal(a.transformed_points, b.transformed_points)
        np.testing.assert_array_equal(a.correspondences, b.correspondences)
        assert a.transformation == b.transformation
        assert a.error == b.error


def test_point_mappings_are_accepted():
    source = [{"x": 0.0, "y": 0.0}, {"x": 10.0, "y": 0.0}, {"x": 20.0, "y": 0.0}]
    target = [{"x": 0.0, "y": 10.0}, {"x": 10.0, "y": 10.0}, {"x": 20.0, "y": 10.0}]

    states = run_icp(source, target, 5.0, 5.0, 3)

    assert states[-1].transformation.translation[1] == pytest.approx(10.0, abs=1e-9)


def test_curve_icp_matches_run_icp_and_config():
    cfg = AppConfig()
    cfg.sampling.source_spacing = 4.0
    cfg.sampling.target_spacing = 6.0
    cfg.alignment.max_iterations = 8

    icp = CurveICP.from_config(cfg)
    assert icp.source_spacing == 4.0
    assert icp.target_spacing == 6.0
    assert icp.max_iterations == 8

    target = ZIGZAG + np.array([2.0, 2.0])
    via_class = icp.align_curves(ZIGZAG, target)
    via_function = run_icp(ZIGZAG, target, 4.0, 6.0, 8)

    assert len(via_class) == 9
    assert via_class[-1].transformation == via_function[-1].transformation


class TestRejectedRuns:
    """Guarded preconditions."""

    @pytest.mark.parametrize(
        "source,target,role",
        [
            ([(0.0, 0.0)], [(0.0, 0.0), (1.0, 1.0)], "source"),
            ([], [(0.0, 0.0), (1.0, 1.0)], "source"),
            ([(0.0, 0.0), (1.0, 1.0)], [(5.0, 5.0)], "target"),
        ],
    )
    def test_short_curves_are_rejected(self, source, target, role):
        with pytest.raises(InsufficientInputError) as excinfo:
            run_icp(source, target, 1.0, 1.0, 5)

        assert excinfo.value.role == role
        assert isinstance(excinfo.value, ValueError)

    @pytest.mark.parametrize("spacing", [0.0, -2.0])
    def test_non_positive_spacing_is_rejected(self, spacing):
        with pytest.raises(ValueError):
            CurveICP(source_spacing=spacing)
        with pytest.raises(ValueError):
            CurveICP(target_spacing=spacing)

    def test_negative_iterations_are_rejected(self):
        with pytest.raises(ValueError):
            run_icp(ZIGZAG, ZIGZAG, 1.0, 1.0, -1)

    def test_mismatched_matches_raise_degenerate_error(self, monkeypatch):
        real = find_correspondences

        def _drop_last(source, target):
            return real(source, target)[:-1]

        monkeypatch.setattr(icp_module, "find_correspondences", _drop_last)

        with pytest.raises(DegenerateError):
            run_icp(ZIGZAG, ZIGZAG + 1.0, 5.0, 5.0, 3)
