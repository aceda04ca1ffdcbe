"""Polar/cartesian conversions and angle helpers."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

import numpy as np

DEG_TO_RAD = math.pi / 180.0
RAD_TO_DEG = 180.0 / math.pi


@dataclass(frozen=True)
class PolarPoint:
    """Elevation e and azimuth z in degrees, radius r."""

    e: float = 0.0
    z: float = 0.0
    r: float = 0.0


def _vec3(v: Sequence[float]) -> np.ndarray:
    arr = np.asarray(v, dtype=float)
    if arr.shape != (3,):
        raise ValueError("expected a 3-element vector")
    return arr


def wrap_angle_to_plus_minus_pi(angle: float) -> float:
    """Wrap an angle in radians into [-pi, pi)."""
    return angle - 2.0 * math.pi * math.floor(angle / (2.0 * math.pi) + 0.5)


def wrap_angle_to_plus_minus_180(angle: float) -> float:
    """Wrap an angle in degrees into [-180, 180)."""
    return angle - 360.0 * math.floor(angle / 360.0 + 0.5)


def angle_difference(a: float, b: float) -> float:
    """Signed, wrapped difference a - b in degrees, in [-180, 180)."""
    angle = math.fmod(a - b, 360.0)
    if angle >= 0.0:
        return angle if angle < 180.0 else angle - 360.0
    return angle if angle >= -180.0 else angle + 360.0


def index_angle_difference(a: float, b: float) -> float:
    """Smallest absolute difference between two angles in degrees."""
    d = a - b
    return min(abs(d), abs(d - 360.0), abs(d + 360.0))


def distance_2d_polar(p1: PolarPoint, p2: PolarPoint) -> float:
    """Euclidean distance between two points in the (e, z) plane."""
    return math.hypot(p1.e - p2.e, p1.z - p2.z)


def polar_histogram_to_cartesian(p_pol: PolarPoint, pos: Sequence[float]) -> np.ndarray:
    """Cartesian point of a histogram-convention polar vector added to pos."""
    origin = _vec3(pos)
    e = p_pol.e * DEG_TO_RAD
    z = p_pol.z * DEG_TO_RAD
    return origin + p_pol.r * np.array(
        [math.cos(e) * math.sin(z), math.cos(e) * math.cos(z), math.sin(e)]
    )


def polar_fcu_to_cartesian(p_pol: PolarPoint, pos: Sequence[float]) -> np.ndarray:
    """Cartesian point of an FCU-convention polar vector added to pos."""
    origin = _vec3(pos)
    polar = (90.0 - p_pol.e) * DEG_TO_RAD
    z = p_pol.z * DEG_TO_RAD
    return origin + p_pol.r * np.array(
        [math.sin(polar) * math.cos(z), math.sin(polar) * math.sin(z), math.cos(polar)]
    )


def histogram_index_to_polar(e: int, z: int, res: int, radius: float) -> PolarPoint:
    """Polar point at the centre of histogram cell (e, z)."""
    return PolarPoint(
        e=float(e * res + res // 2 - 90),
        z=float(z * res + res // 2 - 180),
        r=radius,
    )


def cartesian_to_polar_histogram(pos: Sequence[float], origin: Sequence[float]) -> PolarPoint:
    """Polar vector (histogram convention) pointing from origin to pos."""
    dx, dy, dz = _vec3(pos) - _vec3(origin)
    den = math.hypot(dx, dy)
    return PolarPoint(
        e=math.atan2(dz, den) * RAD_TO_DEG,
        z=math.atan2(dx, dy) * RAD_TO_DEG,
        r=math.sqrt(dx * dx + dy * dy + dz * dz),
    )


def cartesian_to_polar_fcu(
    pos: Sequence[float], origin: Sequence[float] = (0.0, 0.0, 0.0)
) -> PolarPoint:
    """Polar vector (FCU convention) pointing from origin to pos."""
    p = cartesian_to_polar_histogram(pos, origin)
    return wrap_polar(PolarPoint(e=-p.e, z=-p.z + 90.0, r=p.r))


def polar_to_histogram_index(p_pol: PolarPoint, res: int) -> tuple[int, int]:
    """Histogram cell of a polar point as (azimuth index, elevation index)."""
    p = wrap_polar(p_pol)
    elevation = int(math.floor(p.e / res + 90.0 / res))
    azimuth = int(math.floor(p.z / res + 180.0 / res))
    # clamp against floating point errors
    azimuth = max(0, min(azimuth, 360 // res - 1))
    elevation = max(0, min(elevation, 180 // res - 1))
    return azimuth, elevation


def wrap_polar(p_pol: PolarPoint) -> PolarPoint:
    """Wrap a polar point to azimuth [-180, 180) and elevation [-90, 90]."""
    e = wrap_angle_to_plus_minus_180(p_pol.e)
    z = wrap_angle_to_plus_minus_180(p_pol.z)
    wrapped = False
    if e > 90.0:
        e = 180.0 - e
        wrapped = True
    elif e < -90.0:
        e = -(180.0 + e)
        wrapped = True
    if wrapped:
        z = z + 180.0 if z < 0.0 else z - 180.0
    return PolarPoint(e=e, z=z, r=p_pol.r)


def next_yaw(u: Sequence[float], v: Sequence[float]) -> float:
    """Yaw in radians of the direction from u to v."""
    a = _vec3(u)
    b = _vec3(v)
    return math.atan2(b[1] - a[1], b[0] - a[0])


def get_angular_velocity(desired_yaw: float, curr_yaw: float) -> float:
    """Scaled yaw rate [rad/s] turning the shorter way to desired_yaw."""
    desired_yaw = wrap_angle_to_plus_minus_pi(desired_yaw)
    yaw_vel1 = desired_yaw - curr_yaw
    if yaw_vel1 > 0.0:
        yaw_vel2 = -(2.0 * math.pi - yaw_vel1)
    else:
        yaw_vel2 = 2.0 * math.pi + yaw_vel1
    vel = yaw_vel1 if abs(yaw_vel1) <= abs(yaw_vel2) else yaw_vel2
    return 0.5 * vel