"""Polar histogram of obstacle distances around the vehicle."""

from __future__ import annotations

import numpy as np

# Valid resolutions must satisfy 180 % (2 * ALPHA_RES) == 0,
# e.g. 1, 3, 5, 6, 10, 15, 18, 30, 45, 60.
ALPHA_RES = 6
GRID_LENGTH_Z = 360 // ALPHA_RES
GRID_LENGTH_E = 180 // ALPHA_RES

_FLT_MIN = float(np.finfo(np.float32).tiny)


class Histogram:
    """Distance grid indexed by elevation (rows) and azimuth (columns)."""

    def __init__(self, resolution: int) -> None:
        if resolution <= 0:
            raise ValueError("histogram resolution must be positive")
        self._resolution = resolution
        self._z_dim = 360 // resolution
        self._e_dim = 180 // resolution
        self._dist = np.zeros((self._e_dim, self._z_dim), dtype=np.float32)

    @property
    def resolution(self) -> int:
        return self._resolution

    @property
    def e_dim(self) -> int:
        return self._e_dim

    @property
    def z_dim(self) -> int:
        return self._z_dim

    @property
    def dist(self) -> np.ndarray:
        """A copy of the distance grid."""
        return self._dist.copy()

    def get_dist(self, e: int, z: int) -> float:
        """Distance of cell (e, z); indices wrap around the histogram."""
        return float(self._dist[e % self._e_dim, z % self._z_dim])

    def set_dist(self, e: int, z: int, value: float) -> None:
        """Set the distance of cell (e, z)."""
        if not (0 <= e < self._e_dim and 0 <= z < self._z_dim):
            raise IndexError(f"histogram cell ({e}, {z}) out of range")
        self._dist[e, z] = value

    def upsample(self) -> None:
        """Turn a double-bin-size histogram into one of regular bin size."""
        if self._resolution != ALPHA_RES * 2:
            raise ValueError(
                "upsample() can only be used on a half resolution histogram"
            )
        self._resolution //= 2
        self._z_dim *= 2
        self._e_dim *= 2
        self._dist = np.repeat(np.repeat(self._dist, 2, axis=0), 2, axis=1)

    def downsample(self) -> None:
        """Turn a regular-bin-size histogram into one of double bin size."""
        if self._resolution != ALPHA_RES:
            raise ValueError(
                "downsample() can only be used on a full resolution histogram"
            )
        self._resolution *= 2
        self._z_dim //= 2
        self._e_dim //= 2
        blocks = self._dist[: 2 * self._e_dim, : 2 * self._z_dim].reshape(
            self._e_dim, 2, self._z_dim, 2
        )
        self._dist = blocks.mean(axis=(1, 3)).astype(np.float32)

    def set_zero(self) -> None:
        """Reset every cell to zero."""
        self._dist.fill(0.0)

    def is_empty(self) -> bool:
        """True if no cell holds a distance above zero."""
        return not bool(np.any(self._dist > _FLT_MIN))