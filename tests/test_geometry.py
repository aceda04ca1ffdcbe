import math

import numpy as np
import pytest

from avoidkit.geometry import (
    PolarPoint,
    angle_difference,
    cartesian_to_polar_fcu,
    cartesian_to_polar_histogram,
    distance_2d_polar,
    get_angular_velocity,
    histogram_index_to_polar,
    index_angle_difference,
    next_yaw,
    polar_fcu_to_cartesian,
    polar_histogram_to_cartesian,
    polar_to_histogram_index,
    wrap_angle_to_plus_minus_180,
    wrap_angle_to_plus_minus_pi,
    wrap_polar,
)
from avoidkit.histogram import ALPHA_RES, GRID_LENGTH_E, GRID_LENGTH_Z

ANGLES = [-725.0, -360.0, -181.0, -180.0, -45.5, 0.0, 33.0, 179.9, 180.0, 540.0, 1000.0]
POINTS = [(1.0, 2.0, 3.0), (-4.0, 0.5, -2.0), (0.3, -7.0, 1.0), (5.0, 5.0, 0.0)]
ORIGINS = [(0.0, 0.0, 0.0), (1.0, -2.0, 0.5)]


@pytest.mark.parametrize("angle", ANGLES)
def test_wrap_180_range_and_equivalence(angle):
    w = wrap_angle_to_plus_minus_180(angle)
    assert -180.0 <= w < 180.0
    k = (angle - w) / 360.0
    assert k == pytest.approx(round(k))


@pytest.mark.parametrize("angle", [a * DEG for a in ANGLES] if (DEG := math.pi / 180) else [])
def test_wrap_pi_range_and_equivalence(angle):
    w = wrap_angle_to_plus_minus_pi(angle)
    assert -math.pi <= w < math.pi
    k = (angle - w) / (2 * math.pi)
    assert k == pytest.approx(round(k))


@pytest.mark.parametrize("a", ANGLES)
@pytest.mark.parametrize("b", [-170.0, 0.0, 95.0])
def test_angle_difference_matches_wrapped_difference(a, b):
    d = angle_difference(a, b)
    assert -180.0 <= d < 180.0
    assert math.cos(math.radians(d)) == pytest.approx(math.cos(math.radians(a - b)))
    assert math.sin(math.radians(d)) == pytest.approx(math.sin(math.radians(a - b)), abs=1e-9)


@pytest.mark.parametrize("a", [-180.0, -90.0, 0.0, 45.0, 179.0])
@pytest.mark.parametrize("b", [-175.0, 10.0, 170.0])
def test_index_angle_difference_is_symmetric_smallest(a, b):
    d = index_angle_difference(a, b)
    assert d == pytest.approx(index_angle_difference(b, a))
    assert 0.0 <= d <= 180.0
    assert d == pytest.approx(abs(angle_difference(a, b)))


def test_distance_2d_polar():
    p1 = PolarPoint(e=0.0, z=0.0, r=1.0)
    p2 = PolarPoint(e=3.0, z=4.0, r=9.0)
    assert distance_2d_polar(p1, p2) == pytest.approx(5.0)
    assert distance_2d_polar(p2, p1) == pytest.approx(distance_2d_polar(p1, p2))
    assert distance_2d_polar(p2, p2) == 0.0


def test_histogram_convention_zero_azimuth_is_positive_y():
    p = cartesian_to_polar_histogram((0.0, 2.0, 0.0), (0.0, 0.0, 0.0))
    assert p.z == pytest.approx(0.0)
    assert p.e == pytest.approx(0.0)
    assert p.r == pytest.approx(2.0)


@pytest.mark.parametrize("point", POINTS)
@pytest.mark.parametrize("origin", ORIGINS)
def test_histogram_polar_round_trip(point, origin):
    p = cartesian_to_polar_histogram(point, origin)
    np.testing.assert_allclose(polar_histogram_to_cartesian(p, origin), point, atol=1e-9)


@pytest.mark.parametrize("point", POINTS)
@pytest.mark.parametrize("origin", ORIGINS)
def test_fcu_polar_round_trip_flips_vertical(point, origin):
    p = cartesian_to_polar_fcu(point, origin)
    back = polar_fcu_to_cartesian(p, origin)
    assert back[0] == pytest.approx(point[0])
    assert back[1] == pytest.approx(point[1])
    assert back[2] - origin[2] == pytest.approx(-(point[2] - origin[2]))
    assert -180.0 <= p.z < 180.0


def test_fcu_default_origin_is_zero():
    point = (2.0, -1.0, 0.5)
    assert cartesian_to_polar_fcu(point) == cartesian_to_polar_fcu(point, (0.0, 0.0, 0.0))


@pytest.mark.parametrize(
    "p",
    [PolarPoint(100.0, 10.0, 2.0), PolarPoint(-120.0, -30.0, 1.0), PolarPoint(250.0, 400.0, 3.0)],
)
def test_wrap_polar_preserves_direction(p):
    w = wrap_polar(p)
    assert -90.0 <= w.e <= 90.0
    assert -180.0 <= w.z <= 180.0
    assert w.r == p.r
    origin = (0.0, 0.0, 0.0)
    np.testing.assert_allclose(
        polar_histogram_to_cartesian(w, origin), polar_histogram_to_cartesian(p, origin), atol=1e-9
    )


def test_histogram_index_polar_round_trip():
    for e in range(GRID_LENGTH_E):
        for z in range(GRID_LENGTH_Z):
            p = histogram_index_to_polar(e, z, ALPHA_RES, 1.0)
            assert polar_to_histogram_index(p, ALPHA_RES) == (z, e)


@pytest.mark.parametrize("e", [-90.0, 90.0, 89.999, -200.0, 360.0])
@pytest.mark.parametrize("z", [-180.0, 180.0, 179.999, 725.0])
def test_polar_to_histogram_index_in_range(e, z):
    az, el = polar_to_histogram_index(PolarPoint(e, z, 1.0), ALPHA_RES)
    assert 0 <= az < GRID_LENGTH_Z
    assert 0 <= el < GRID_LENGTH_E


def test_next_yaw():
    assert next_yaw((0.0, 0.0, 0.0), (1.0, 1.0, 5.0)) == pytest.approx(math.pi / 4)
    assert next_yaw((1.0, 1.0, 0.0), (0.0, 0.0, 0.0)) == pytest.approx(
        wrap_angle_to_plus_minus_pi(next_yaw((0.0, 0.0, 0.0), (1.0, 1.0, 0.0)) + math.pi)
    )


def test_angular_velocity_zero_when_aligned():
    assert get_angular_velocity(0.7, 0.7) == pytest.approx(0.0)


@pytest.mark.parametrize("desired", [-3.0, -1.0, 0.0, 2.0, 3.1])
@pytest.mark.parametrize("current", [-3.1, 0.5, 3.0])
def test_angular_velocity_takes_shorter_way(desired, current):
    vel = get_angular_velocity(desired, current)
    assert abs(vel) <= math.pi / 2 + 1e-9
    reached = wrap_angle_to_plus_minus_pi(current + 2.0 * vel)
    assert math.cos(reached - desired) == pytest.approx(1.0)


def test_angular_velocity_across_wrap_is_negative():
    vel = get_angular_velocity(math.pi - 0.1, -math.pi + 0.1)
    assert vel == pytest.approx(-0.1)