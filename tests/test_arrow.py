import numpy as np
import pytest

from hapticsim.arrow import force_arrow


def test_zero_force_gives_no_arrow():
    assert force_arrow([0.0, 0.0, 0.0]) is None


def test_tiny_force_gives_no_arrow():
    assert force_arrow([1e-8, 0.0, 0.0]) is None


def test_end_is_scaled_force():
    arrow = force_arrow([2.0, -4.0, 6.0], scale=0.1)
    np.testing.assert_allclose(arrow.end, [0.2, -0.4, 0.6])
    np.testing.assert_array_equal(arrow.start, [0.0, 0.0, 0.0])


def test_default_scale_divides_by_hundred():
    arrow = force_arrow([3.0, 0.0, 0.0])
    np.testing.assert_allclose(arrow.end, [0.03, 0.0, 0.0])


def test_direction_is_unit_and_parallel():
    force = np.array([1.0, 2.0, -2.0])
    arrow = force_arrow(force)
    assert np.linalg.norm(arrow.direction) == pytest.approx(1.0)
    np.testing.assert_allclose(np.cross(arrow.direction, force), 0.0, atol=1e-12)


def test_force_along_z_needs_no_rotation():
    arrow = force_arrow([0.0, 0.0, 5.0])
    assert arrow.angle == pytest.approx(0.0)
    assert arrow.rotation_axis is None


def test_force_against_z_is_half_turn():
    arrow = force_arrow([0.0, 0.0, -5.0])
    assert arrow.angle == pytest.approx(180.0)
    assert arrow.rotation_axis is None


def test_force_along_x_rotates_about_y():
    arrow = force_arrow([5.0, 0.0, 0.0])
    assert arrow.angle == pytest.approx(90.0)
    np.testing.assert_allclose(arrow.rotation_axis, [0.0, 1.0, 0.0])


def test_rotation_axis_is_unit_and_perpendicular():
    arrow = force_arrow([1.0, 1.0, 1.0])
    assert np.linalg.norm(arrow.rotation_axis) == pytest.approx(1.0)
    assert arrow.rotation_axis @ arrow.direction == pytest.approx(0.0)


def test_wrong_shape_rejected():
    with pytest.raises(ValueError):
        force_arrow([1.0, 2.0])