"""Quaternions, ENU/NED frame conversions and trajectory setpoint messages."""

from __future__ import annotations

import math
import time
from dataclasses import dataclass, field
from typing import Sequence

import numpy as np

from avoidkit.geometry import DEG_TO_RAD, RAD_TO_DEG

NED_ENU_RPY = (math.pi, 0.0, math.pi / 2.0)
AIRCRAFT_BASELINK_RPY = (math.pi, 0.0, 0.0)

Vec3 = tuple[float, float, float]
_NAN3: Vec3 = (math.nan, math.nan, math.nan)
_ZERO3: Vec3 = (0.0, 0.0, 0.0)


@dataclass(frozen=True)
class Quaternion:
    """Quaternion w + xi + yj + zk."""

    w: float = 1.0
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def __mul__(self, other: Quaternion) -> Quaternion:
        if not isinstance(other, Quaternion):
            return NotImplemented
        w1, x1, y1, z1 = self.w, self.x, self.y, self.z
        w2, x2, y2, z2 = other.w, other.x, other.y, other.z
        return Quaternion(
            w1 * w2 - x1 * x2 - y1 * y2 - z1 * z2,
            w1 * x2 + x1 * w2 + y1 * z2 - z1 * y2,
            w1 * y2 - x1 * z2 + y1 * w2 + z1 * x2,
            w1 * z2 + x1 * y2 - y1 * x2 + z1 * w2,
        )

    def __neg__(self) -> Quaternion:
        return Quaternion(-self.w, -self.x, -self.y, -self.z)

    def dot(self, other: Quaternion) -> float:
        return self.w * other.w + self.x * other.x + self.y * other.y + self.z * other.z

    def norm(self) -> float:
        return math.sqrt(self.dot(self))

    def normalized(self) -> Quaternion:
        n = self.norm()
        if n == 0.0:
            raise ValueError("cannot normalize a zero quaternion")
        return Quaternion(self.w / n, self.x / n, self.y / n, self.z / n)

    def conjugate(self) -> Quaternion:
        return Quaternion(self.w, -self.x, -self.y, -self.z)

    def rotate(self, v: Sequence[float]) -> np.ndarray:
        """Rotate a 3-vector by this (unit) quaternion."""
        vx, vy, vz = (float(c) for c in v)
        r = self * Quaternion(0.0, vx, vy, vz) * self.conjugate()
        return np.array([r.x, r.y, r.z])

    def slerp(self, other: Quaternion, t: float) -> Quaternion:
        """Spherical linear interpolation along the shorter arc."""
        d = self.dot(other)
        target = other
        if d < 0.0:
            target = -other
            d = -d
        if d > 0.9995:
            return Quaternion(
                self.w + t * (target.w - self.w),
                self.x + t * (target.x - self.x),
                self.y + t * (target.y - self.y),
                self.z + t * (target.z - self.z),
            ).normalized()
        theta = math.acos(min(d, 1.0))
        s = math.sin(theta)
        a = math.sin((1.0 - t) * theta) / s
        b = math.sin(t * theta) / s
        return Quaternion(
            a * self.w + b * target.w,
            a * self.x + b * target.x,
            a * self.y + b * target.y,
            a * self.z + b * target.z,
        )

    @staticmethod
    def from_axis_angle(axis: Sequence[float], angle: float) -> Quaternion:
        """Rotation of angle radians about axis."""
        a = np.asarray(axis, dtype=float)
        n = float(np.linalg.norm(a))
        if a.shape != (3,) or n == 0.0:
            raise ValueError("axis must be a non-zero 3-vector")
        a = a / n
        s = math.sin(angle / 2.0)
        return Quaternion(math.cos(angle / 2.0), a[0] * s, a[1] * s, a[2] * s)


_UNIT_X = (1.0, 0.0, 0.0)
_UNIT_Y = (0.0, 1.0, 0.0)
_UNIT_Z = (0.0, 0.0, 1.0)


def quaternion_from_rpy(rpy: Sequence[float]) -> Quaternion:
    """Quaternion of roll, pitch, yaw in radians (applied Z * Y * X)."""
    roll, pitch, yaw = rpy
    return (
        Quaternion.from_axis_angle(_UNIT_Z, yaw)
        * Quaternion.from_axis_angle(_UNIT_Y, pitch)
        * Quaternion.from_axis_angle(_UNIT_X, roll)
    )


def orientation_to_ned(q: Quaternion) -> Quaternion:
    """Convert an ENU/baselink orientation into NED/aircraft."""
    ned_enu = quaternion_from_rpy(NED_ENU_RPY)
    aircraft_baselink = quaternion_from_rpy(AIRCRAFT_BASELINK_RPY)
    return ned_enu * (q * aircraft_baselink)


def orientation_to_enu(q: Quaternion) -> Quaternion:
    """Convert a NED/aircraft orientation into ENU/baselink."""
    ned_enu = quaternion_from_rpy(NED_ENU_RPY)
    aircraft_baselink = quaternion_from_rpy(AIRCRAFT_BASELINK_RPY)
    return (ned_enu * q) * aircraft_baselink


def yaw_from_quaternion(q: Quaternion) -> float:
    """Yaw angle of q in degrees."""
    siny_cosp = 2.0 * (q.w * q.z + q.x * q.y)
    cosy_cosp = 1.0 - 2.0 * (q.y * q.y + q.z * q.z)
    return math.atan2(siny_cosp, cosy_cosp) * RAD_TO_DEG


def pitch_from_quaternion(q: Quaternion) -> float:
    """Pitch angle of q in degrees, clamped at +-90."""
    sinp = 2.0 * (q.w * q.y - q.z * q.x)
    if abs(sinp) >= 1.0:
        pitch = math.copysign(math.pi / 2.0, sinp)
    else:
        pitch = math.asin(sinp)
    return pitch * RAD_TO_DEG


def pose_orientation(yaw: float) -> Quaternion:
    """Level orientation with the given yaw in radians."""
    return (
        Quaternion.from_axis_angle(_UNIT_X, 0.0)
        * Quaternion.from_axis_angle(_UNIT_Y, 0.0)
        * Quaternion.from_axis_angle(_UNIT_Z, yaw)
    )


def to_ned(xyz_enu: Sequence[float]) -> np.ndarray:
    x, y, z = (float(c) for c in xyz_enu)
    return np.array([y, x, -z])


def to_enu(xyz_ned: Sequence[float]) -> np.ndarray:
    x, y, z = (float(c) for c in xyz_ned)
    return np.array([y, x, -z])


def yaw_to_ned_deg(yaw_enu: float) -> float:
    return 90.0 - yaw_enu


def yaw_to_ned_rad(yaw_enu: float) -> float:
    return math.pi / 2.0 - yaw_enu


def pitch_to_ned(pitch_enu: float) -> float:
    return -pitch_enu


def yaw_to_enu_deg(yaw_ned: float) -> float:
    return 90.0 - yaw_ned


def yaw_to_enu_rad(yaw_ned: float) -> float:
    return math.pi / 2.0 - yaw_ned


def pitch_to_enu(pitch_ned: float) -> float:
    return -pitch_ned


@dataclass(frozen=True)
class TrajectoryPoint:
    """One setpoint of a trajectory message."""

    position: Vec3 = _ZERO3
    velocity: Vec3 = _ZERO3
    acceleration_or_force: Vec3 = _ZERO3
    yaw: float = 0.0
    yaw_rate: float = 0.0


@dataclass(frozen=True)
class Trajectory:
    """Trajectory message: 0 for waypoints, 1 for Bezier control points."""

    type: int
    points: tuple[TrajectoryPoint, ...]
    time_horizon: tuple[float, ...]
    point_valid: tuple[bool, ...]
    stamp: float = field(default_factory=time.time)


def _vec3(v: Sequence[float]) -> Vec3:
    x, y, z = (float(c) for c in v)
    return (x, y, z)


def unused_trajectory_point() -> TrajectoryPoint:
    """A setpoint with every field set to NaN."""
    return TrajectoryPoint(
        position=_NAN3,
        velocity=_NAN3,
        acceleration_or_force=_NAN3,
        yaw=math.nan,
        yaw_rate=math.nan,
    )


def fill_control_point(point_in: Sequence[float]) -> TrajectoryPoint:
    """Setpoint from a NED control point (x, y, z, yaw) expressed in ENU."""
    if len(point_in) != 4:
        raise ValueError("a control point has four components")
    return TrajectoryPoint(
        position=_vec3(to_enu(point_in[:3])),
        yaw=yaw_to_enu_rad(float(point_in[3])),
    )


def transform_to_trajectory(
    position: Sequence[float],
    orientation: Quaternion,
    linear_velocity: Sequence[float],
    angular_velocity: Sequence[float],
) -> Trajectory:
    """Waypoint trajectory whose only valid point is the given pose and velocity."""
    first = TrajectoryPoint(
        position=_vec3(position),
        velocity=_vec3(linear_velocity),
        acceleration_or_force=_NAN3,
        yaw=yaw_from_quaternion(orientation) * DEG_TO_RAD,
        yaw_rate=-float(angular_velocity[2]),
    )
    unused = unused_trajectory_point()
    return Trajectory(
        type=0,
        points=(first, unused, unused, unused, unused),
        time_horizon=(math.nan,) * 5,
        point_valid=(True, False, False, False, False),
    )


def transform_to_bezier(control_points: Sequence[Sequence[float]], duration: float) -> Trajectory:
    """Bezier trajectory from five NED control points executed over duration seconds."""
    if len(control_points) != 5:
        raise ValueError("a Bezier trajectory needs exactly five control points")
    return Trajectory(
        type=1,
        points=tuple(fill_control_point(p) for p in control_points),
        time_horizon=(math.nan, math.nan, math.nan, math.nan, float(duration)),
        point_valid=(True,) * 5,
    )