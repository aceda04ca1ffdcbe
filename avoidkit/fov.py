"""Sensor field-of-view geometry and point-cloud extent estimation."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterable, Optional, Sequence, Union

import numpy as np

from avoidkit.geometry import (
    PolarPoint,
    cartesian_to_polar_fcu,
    histogram_index_to_polar,
    polar_histogram_to_cartesian,
    wrap_angle_to_plus_minus_180,
    wrap_polar,
)
from avoidkit.histogram import ALPHA_RES, GRID_LENGTH_E


@dataclass(frozen=True)
class FOV:
    """Field of view of one sensor: centre yaw/pitch and angular extents, in degrees."""

    yaw_deg: float = 0.0
    pitch_deg: float = 0.0
    h_fov_deg: float = 0.0
    v_fov_deg: float = 0.0


FOVLike = Union[FOV, Iterable[FOV]]


def _inside_yaw(fov: FOV, p_pol: PolarPoint) -> bool:
    return (
        wrap_angle_to_plus_minus_180(fov.yaw_deg - fov.h_fov_deg / 2.0)
        <= p_pol.z
        <= wrap_angle_to_plus_minus_180(fov.yaw_deg + fov.h_fov_deg / 2.0)
    )


def _inside(fov: FOV, p_pol: PolarPoint) -> bool:
    return (
        _inside_yaw(fov, p_pol)
        and fov.pitch_deg - fov.v_fov_deg / 2.0
        <= p_pol.e
        <= fov.pitch_deg + fov.v_fov_deg / 2.0
    )


def point_inside_fov(fov: FOVLike, p_pol: PolarPoint) -> bool:
    """True if the FCU-frame polar point lies inside the FOV (or any of several)."""
    if isinstance(fov, FOV):
        return _inside(fov, p_pol)
    return any(_inside(f, p_pol) for f in fov)


def point_inside_yaw_fov(fov: FOVLike, p_pol: PolarPoint) -> bool:
    """True if the point's azimuth lies inside the horizontal FOV (or any of several)."""
    if isinstance(fov, FOV):
        return _inside_yaw(fov, p_pol)
    return any(_inside_yaw(f, p_pol) for f in fov)


def histogram_index_yaw_inside_fov(
    fov: FOVLike, idx: int, position: Sequence[float], yaw_fcu_frame: float
) -> bool:
    """True if at least one azimuth edge of histogram column idx lies inside the FOV."""
    pol_hist = histogram_index_to_polar(GRID_LENGTH_E // 2, idx, ALPHA_RES, 1.0)
    cart = polar_histogram_to_cartesian(pol_hist, position)
    pol_fcu = cartesian_to_polar_fcu(cart, position)
    z_body = pol_fcu.z - yaw_fcu_frame
    plus = wrap_polar(replace(pol_fcu, z=z_body + ALPHA_RES / 2.0))
    minus = wrap_polar(replace(pol_fcu, z=z_body - ALPHA_RES / 2.0))
    return point_inside_fov(fov, plus) or point_inside_fov(fov, minus)


def is_in_which_fov(fov_vec: Sequence[FOV], p_pol: PolarPoint) -> Optional[int]:
    """Index of the single FOV containing the point's azimuth; None if none or several."""
    found: Optional[int] = None
    for i, fov in enumerate(fov_vec):
        if _inside_yaw(fov, p_pol):
            if found is not None:
                return None
            found = i
    return found


def is_on_edge_of_fov(fov_vec: Sequence[FOV], p_pol: PolarPoint) -> Optional[int]:
    """Index of the FOV whose outer edge the point is next to, or None."""
    idx = is_in_which_fov(fov_vec, p_pol)
    if idx is None:
        return None
    fov = fov_vec[idx]
    if wrap_angle_to_plus_minus_180(p_pol.z - fov.yaw_deg) > 0.0:
        outside_z = fov.yaw_deg + fov.h_fov_deg / 2.0 + ALPHA_RES / 2.0
    else:
        outside_z = fov.yaw_deg - fov.h_fov_deg / 2.0 - ALPHA_RES / 2.0
    just_outside = replace(p_pol, z=wrap_angle_to_plus_minus_180(outside_z))
    if point_inside_yaw_fov(fov_vec, just_outside):
        return None
    return idx


def scale_to_fov(fov_vec: Sequence[FOV], p_pol: PolarPoint) -> float:
    """Scale in [0, 1]: 1 well inside the FOV, falling to 0 towards an outer edge."""
    idx = is_on_edge_of_fov(fov_vec, p_pol)
    if idx is not None:
        fov = fov_vec[idx]
        diff = abs(fov.yaw_deg - p_pol.z)
        diff = min(diff, abs(360.0 - diff))
        diff = min(fov.h_fov_deg / 2.0, diff)
        return 1.0 - 2.0 * diff / fov.h_fov_deg
    return 1.0 if point_inside_yaw_fov(fov_vec, p_pol) else 0.0


def remove_nan_and_get_maxima(cloud) -> tuple[np.ndarray, np.ndarray]:
    """Drop non-finite points; return (clean cloud, extreme points).

    The extreme points are, in order and when present, those with the largest
    x, y, z followed by those with the smallest x, y, z.
    """
    points = np.asarray(cloud, dtype=float).reshape(-1, 3)
    clean = points[np.all(np.isfinite(points), axis=1)]
    if len(clean) == 0:
        return clean, np.empty((0, 3), dtype=float)
    indices = []
    for axis in range(3):
        i = int(np.argmax(clean[:, axis]))
        if clean[i, axis] > -9999.0:
            indices.append(i)
    for axis in range(3):
        i = int(np.argmin(clean[:, axis]))
        if clean[i, axis] < 9999.0:
            indices.append(i)
    return clean, clean[indices]


def update_fov_from_maxima(fov: FOV, maxima) -> FOV:
    """Widen the FOV if the extreme points span more than it currently covers."""
    h_min, h_max, v_min, v_max = 9999.0, -9999.0, 9999.0, -9999.0
    for point in np.asarray(maxima, dtype=float).reshape(-1, 3):
        p = cartesian_to_polar_fcu(point)
        z = p.z + 180.0
        e = p.e + 90.0
        h_min, h_max = min(z, h_min), max(z, h_max)
        v_min, v_max = min(e, v_min), max(e, v_max)

    h_diff = min(h_max - h_min, 360.0 - h_max + h_min)
    v_diff = min(v_max - v_min, 360.0 - v_max + v_min)

    if h_diff > fov.h_fov_deg:
        # assumes a single camera sees less than 180 degrees
        if h_diff >= h_max - h_min:
            yaw = wrap_angle_to_plus_minus_180((h_max + h_min) / 2.0 - 180.0)
        else:
            yaw = wrap_angle_to_plus_minus_180((h_max + h_min) / 2.0)
        fov = replace(fov, h_fov_deg=h_diff, yaw_deg=yaw)

    if v_diff > fov.v_fov_deg:
        fov = replace(fov, v_fov_deg=v_diff, pitch_deg=(v_max + v_min) / 2.0 - 90.0)
    return fov