import math

import pytest

from avoidkit.fov import (
    FOV,
    histogram_index_yaw_inside_fov,
    is_in_which_fov,
    is_on_edge_of_fov,
    point_inside_fov,
    point_inside_yaw_fov,
    remove_nan_and_get_maxima,
    scale_to_fov,
    update_fov_from_maxima,
)
from avoidkit.geometry import PolarPoint

FRONT = FOV(yaw_deg=0.0, pitch_deg=0.0, h_fov_deg=90.0, v_fov_deg=60.0)


def test_point_inside_fov_single():
    assert point_inside_fov(FRONT, PolarPoint(e=10.0, z=20.0, r=1.0)) is True
    assert point_inside_fov(FRONT, PolarPoint(e=10.0, z=50.0, r=1.0)) is False
    assert point_inside_fov(FRONT, PolarPoint(e=40.0, z=0.0, r=1.0)) is False


def test_point_inside_fov_list():
    back = FOV(yaw_deg=120.0, pitch_deg=0.0, h_fov_deg=40.0, v_fov_deg=60.0)
    assert point_inside_fov([FRONT, back], PolarPoint(e=0.0, z=120.0)) is True
    assert point_inside_fov([FRONT, back], PolarPoint(e=0.0, z=-120.0)) is False
    assert point_inside_fov([], PolarPoint()) is False


def test_point_inside_yaw_fov_ignores_elevation():
    p = PolarPoint(e=80.0, z=0.0, r=1.0)
    assert point_inside_yaw_fov(FRONT, p) is True
    assert point_inside_fov(FRONT, p) is False
    assert point_inside_yaw_fov([FRONT], PolarPoint(z=60.0)) is False


def test_is_in_which_fov():
    fovs = [FOV(0.0, 0.0, 60.0, 60.0), FOV(90.0, 0.0, 60.0, 60.0)]
    assert is_in_which_fov(fovs, PolarPoint(z=90.0)) == 1
    assert is_in_which_fov(fovs, PolarPoint(z=10.0)) == 0
    assert is_in_which_fov(fovs, PolarPoint(z=45.0)) is None


def test_is_in_which_fov_overlap_is_none():
    fovs = [FOV(0.0, 0.0, 90.0, 60.0), FOV(30.0, 0.0, 90.0, 60.0)]
    assert is_in_which_fov(fovs, PolarPoint(z=20.0)) is None


def test_is_on_edge_single_camera():
    fovs = [FOV(0.0, 0.0, 60.0, 60.0)]
    assert is_on_edge_of_fov(fovs, PolarPoint(z=20.0)) == 0
    assert is_on_edge_of_fov(fovs, PolarPoint(z=-20.0)) == 0
    assert is_on_edge_of_fov(fovs, PolarPoint(z=100.0)) is None


def test_is_on_edge_between_adjacent_cameras():
    fovs = [FOV(0.0, 0.0, 60.0, 60.0), FOV(60.0, 0.0, 60.0, 60.0)]
    assert is_on_edge_of_fov(fovs, PolarPoint(z=20.0)) is None
    assert is_on_edge_of_fov(fovs, PolarPoint(z=-20.0)) == 0


def test_scale_to_fov():
    fovs = [FOV(0.0, 0.0, 60.0, 60.0)]
    assert scale_to_fov(fovs, PolarPoint(z=0.0)) == pytest.approx(1.0)
    assert scale_to_fov(fovs, PolarPoint(z=15.0)) == pytest.approx(0.5)
    assert scale_to_fov(fovs, PolarPoint(z=30.0)) == pytest.approx(0.0)
    assert scale_to_fov(fovs, PolarPoint(z=50.0)) == 0.0


def test_scale_to_fov_inside_not_on_edge():
    fovs = [FOV(0.0, 0.0, 60.0, 60.0), FOV(60.0, 0.0, 60.0, 60.0)]
    assert scale_to_fov(fovs, PolarPoint(z=20.0)) == 1.0


def test_scale_to_fov_is_bounded():
    fovs = [FOV(10.0, 0.0, 80.0, 60.0)]
    for z in range(-180, 180, 7):
        s = scale_to_fov(fovs, PolarPoint(z=float(z)))
        assert 0.0 <= s <= 1.0


def test_histogram_index_yaw_inside_fov():
    pos = (1.0, 2.0, 3.0)
    assert histogram_index_yaw_inside_fov(FRONT, 44, pos, 0.0) is True
    assert histogram_index_yaw_inside_fov(FRONT, 14, pos, 0.0) is False
    assert histogram_index_yaw_inside_fov([FRONT], 44, pos, 0.0) is True


def test_histogram_index_yaw_inside_fov_follows_vehicle_yaw():
    pos = (0.0, 0.0, 0.0)
    assert histogram_index_yaw_inside_fov(FRONT, 14, pos, 180.0) is True
    assert histogram_index_yaw_inside_fov(FRONT, 44, pos, 180.0) is False


def test_remove_nan_and_get_maxima():
    cloud = [
        [1.0, 2.0, 3.0],
        [math.nan, 0.0, 0.0],
        [-1.0, 5.0, -2.0],
        [0.0, 0.0, math.inf],
    ]
    clean, maxima = remove_nan_and_get_maxima(cloud)
    assert clean.tolist() == [[1.0, 2.0, 3.0], [-1.0, 5.0, -2.0]]
    a, b = [1.0, 2.0, 3.0], [-1.0, 5.0, -2.0]
    assert maxima.tolist() == [a, b, a, b, a, b]


def test_remove_nan_and_get_maxima_all_invalid():
    clean, maxima = remove_nan_and_get_maxima([[math.nan, 1.0, 1.0]])
    assert clean.shape == (0, 3)
    assert maxima.shape == (0, 3)


def test_update_fov_from_maxima_widens():
    fov = update_fov_from_maxima(FOV(), [(1.0, 1.0, 0.0), (1.0, -1.0, 0.0)])
    assert fov.h_fov_deg == pytest.approx(90.0)
    assert fov.yaw_deg == pytest.approx(0.0, abs=1e-9)
    assert fov.v_fov_deg == 0.0


def test_update_fov_from_maxima_keeps_wider_fov():
    wide = FOV(10.0, 5.0, 120.0, 80.0)
    assert update_fov_from_maxima(wide, [(1.0, 1.0, 0.0), (1.0, -1.0, 0.0)]) == wide
    assert update_fov_from_maxima(wide, []) == wide