import math

import numpy as np
import pytest

from trackball import project_to_sphere, trackball
from transforms import quat_from_axis_angle, quat_identity

R = 0.8


def test_sphere_branch_at_center():
    assert project_to_sphere(R, 0.0, 0.0) == pytest.approx(R)


def test_sphere_branch_inside():
    # d = 0.5 < r / sqrt(2)
    assert project_to_sphere(R, 0.3, 0.4) == pytest.approx(math.sqrt(R * R - 0.25))


def test_hyperbolic_branch_outside():
    t = R / math.sqrt(2.0)
    assert project_to_sphere(R, 0.0, 1.0) == pytest.approx(t * t / 1.0)


def test_branches_meet_at_boundary():
    d = R / math.sqrt(2.0)
    inside = project_to_sphere(R, d - 1e-9, 0.0)
    outside = project_to_sphere(R, d + 1e-9, 0.0)
    assert inside == pytest.approx(outside, abs=1e-6)
    assert inside == pytest.approx(d, abs=1e-6)


def test_out_of_range_points_stay_finite():
    z = project_to_sphere(R, 5.0, -7.0)
    assert math.isfinite(z) and z > 0.0
    axis, angle = trackball(-3.0, 4.0, 6.0, -2.0, quat_identity())
    assert np.all(np.isfinite(axis))
    assert 0.0 <= angle <= math.pi / 2.0


def test_same_point_is_no_rotation():
    axis, angle = trackball(0.2, -0.1, 0.2, -0.1, quat_identity())
    assert angle == pytest.approx(0.0)
    np.testing.assert_allclose(axis, 0.0)


def test_horizontal_drag_from_center():
    axis, angle = trackball(0.0, 0.0, 0.5, 0.0, quat_identity())
    np.testing.assert_allclose(axis, [0.0, -1.0, 0.0], atol=1e-12)
    assert angle == pytest.approx(0.3375, abs=1e-3)


def test_axis_follows_current_rotation():
    q = quat_from_axis_angle([0.0, 0.0, 1.0], math.pi / 2.0)
    axis, angle = trackball(0.0, 0.0, 0.5, 0.0, q)
    np.testing.assert_allclose(axis, [1.0, 0.0, 0.0], atol=1e-9)
    assert angle == pytest.approx(0.3375, abs=1e-3)


def test_angle_grows_with_drag_length():
    angles = [trackball(0.0, 0.0, d, 0.0, quat_identity())[1]
              for d in np.linspace(0.05, 1.0, 20)]
    assert all(b >= a for a, b in zip(angles, angles[1:]))
    assert max(angles) <= math.pi / 2.0


def test_axis_is_unit_length():
    axis, _ = trackball(-0.3, 0.2, 0.4, 0.6, quat_identity())
    assert np.linalg.norm(axis) == pytest.approx(1.0)


def test_larger_ball_turns_less():
    _, small = trackball(0.0, 0.0, 0.3, 0.0, quat_identity(), size=0.5)
    _, large = trackball(0.0, 0.0, 0.3, 0.0, quat_identity(), size=1.5)
    assert large < small
