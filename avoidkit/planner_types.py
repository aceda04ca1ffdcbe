"""Plain data types shared by the local planner."""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass, field
from typing import Sequence

import numpy as np

from avoidkit.geometry import PolarPoint


class WaypointChoice(enum.Enum):
    HOVER = 0
    TRY_PATH = 1
    DIRECT = 2
    REACH_HEIGHT = 3


class NavigationState(enum.Enum):
    MISSION = 0
    AUTO_TAKEOFF = 1
    AUTO_LAND = 2
    AUTO_RTL = 3
    AUTO_RTGS = 4
    OFFBOARD = 5
    AUTO_LOITER = 6
    NONE = 7


@dataclass
class AvoidanceOutput:
    """Result of one planner iteration."""

    cruise_velocity: float = 0.0
    last_path_time: float = 0.0
    path_node_positions: list[np.ndarray] = field(default_factory=list)


@dataclass(frozen=True)
class CandidateDirection:
    """A direction with its cost; ordered by cost alone."""

    cost: float
    elevation_angle: float
    azimuth_angle: float

    def __lt__(self, other: CandidateDirection) -> bool:
        if not isinstance(other, CandidateDirection):
            return NotImplemented
        return self.cost < other.cost

    def __gt__(self, other: CandidateDirection) -> bool:
        if not isinstance(other, CandidateDirection):
            return NotImplemented
        return self.cost > other.cost

    def to_polar(self, r: float) -> PolarPoint:
        return PolarPoint(e=self.elevation_angle, z=self.azimuth_angle, r=r)


@dataclass
class CostParameters:
    """Weights of the direction cost function."""

    yaw_cost_param: float = 0.5
    pitch_cost_param: float = 3.0
    velocity_cost_param: float = 1.5
    obstacle_cost_param: float = 5.0


def _nan3() -> np.ndarray:
    return np.full(3, math.nan)


@dataclass
class SimulationState:
    time: float = math.nan
    position: np.ndarray = field(default_factory=_nan3)
    velocity: np.ndarray = field(default_factory=_nan3)
    acceleration: np.ndarray = field(default_factory=_nan3)


@dataclass
class SimulationLimits:
    max_z_velocity: float = math.nan
    min_z_velocity: float = math.nan
    max_xy_velocity_norm: float = math.nan
    max_acceleration_norm: float = math.nan
    max_jerk_norm: float = math.nan


def norm_clamp(val: Sequence[float], max_norm: float) -> np.ndarray:
    """Scale val down so its norm does not exceed max_norm."""
    v = np.asarray(val, dtype=float)
    norm_sq = float(v @ v)
    if norm_sq > max_norm * max_norm:
        return v * (max_norm / math.sqrt(norm_sq))
    return v.copy()