"""Companion-process health reporting and flight-controller parameter tracking."""

from __future__ import annotations

import enum
import logging
import math
import threading
import time
from dataclasses import dataclass, field, fields, replace
from typing import Callable, Iterable, Optional

import numpy as np

_log = logging.getLogger(__name__)

_FLT_MIN = float(np.finfo(np.float32).tiny)

# MAV_COMPONENT_ID_AVOIDANCE
AVOIDANCE_COMPONENT_ID = 196

_POLL_RETRY_S = 5.0
_POLL_REFRESH_S = 30.0


class MavState(enum.IntEnum):
    UNINIT = 0
    BOOT = 1
    CALIBRATING = 2
    STANDBY = 3
    ACTIVE = 4
    CRITICAL = 5
    EMERGENCY = 6
    POWEROFF = 7
    FLIGHT_TERMINATION = 8


class MavCommand(enum.IntEnum):
    NAV_LAND = 21
    NAV_TAKEOFF = 22
    DO_CHANGE_SPEED = 178


@dataclass
class ModelParameters:
    """Flight-controller parameters used for model based trajectory planning."""

    param_mpc_auto_mode: int = -1
    param_mpc_jerk_min: float = math.nan
    param_mpc_jerk_max: float = math.nan
    param_mpc_acc_up_max: float = math.nan
    param_mpc_z_vel_max_up: float = math.nan
    param_mpc_acc_down_max: float = math.nan
    param_mpc_z_vel_max_dn: float = math.nan
    param_mpc_acc_hor: float = math.nan
    param_mpc_xy_cruise: float = math.nan
    param_mpc_tko_speed: float = math.nan
    param_mpc_land_speed: float = math.nan
    param_mpc_yawrauto_max: float = math.nan
    param_nav_acc_rad: float = math.nan
    param_cp_dist: float = math.nan

    def is_initialized(self) -> bool:
        """True once every polled parameter holds a finite value."""
        return all(math.isfinite(getattr(self, name)) for name in _POLLED.values())


# parameter id -> attribute, in the order messages are matched
_FLOAT_PARAMS = {
    "MPC_ACC_DOWN_MAX": "param_mpc_acc_down_max",
    "MPC_ACC_HOR": "param_mpc_acc_hor",
    "MPC_ACC_UP_MAX": "param_mpc_acc_up_max",
    "MPC_JERK_MIN": "param_mpc_jerk_min",
    "MPC_JERK_MAX": "param_mpc_jerk_max",
    "MPC_LAND_SPEED": "param_mpc_land_speed",
    "MPC_TKO_SPEED": "param_mpc_tko_speed",
    "MPC_XY_CRUISE": "param_mpc_xy_cruise",
    "MPC_Z_VEL_MAX_DN": "param_mpc_z_vel_max_dn",
    "MPC_Z_VEL_MAX_UP": "param_mpc_z_vel_max_up",
    "CP_DIST": "param_cp_dist",
    "NAV_ACC_RAD": "param_nav_acc_rad",
    "MPC_YAWRAUTO_MAX": "param_mpc_yawrauto_max",
}
_INT_PARAMS = {"MPC_AUTO_MODE": "param_mpc_auto_mode"}

# parameters actively requested from the flight controller
_POLLED = {
    "MPC_ACC_HOR": "param_mpc_acc_hor",
    "MPC_ACC_DOWN_MAX": "param_mpc_acc_down_max",
    "MPC_ACC_UP_MAX": "param_mpc_acc_up_max",
    "MPC_XY_CRUISE": "param_mpc_xy_cruise",
    "MPC_Z_VEL_MAX_DN": "param_mpc_z_vel_max_dn",
    "MPC_Z_VEL_MAX_UP": "param_mpc_z_vel_max_up",
    "CP_DIST": "param_cp_dist",
    "MPC_LAND_SPEED": "param_mpc_land_speed",
    "MPC_JERK_MAX": "param_mpc_jerk_max",
    "NAV_ACC_RAD": "param_nav_acc_rad",
    "MPC_YAWRAUTO_MAX": "param_mpc_yawrauto_max",
}


@dataclass(frozen=True)
class MissionItem:
    """One flight-controller mission item."""

    command: int
    param1: float = 0.0
    param2: float = 0.0
    is_current: bool = False


@dataclass(frozen=True)
class CompanionStatus:
    """Heartbeat sent to the flight controller."""

    component: int
    state: int
    stamp: float = field(default_factory=time.time)


class AvoidanceNode:
    """Health state machine, status heartbeat and parameter cache of the planner."""

    def __init__(
        self,
        publish_status: Callable[[CompanionStatus], None],
        get_param: Callable[[str], Optional[float]],
    ) -> None:
        self._publish_status = publish_status
        self._get_param = get_param
        self.cmdloop_dt = 0.1
        self.statusloop_dt = 0.2
        self.timeout_termination = 15.0
        self.timeout_critical = 0.5
        self.timeout_startup = 5.0
        self.position_received = True
        self._mission_item_speed = math.nan
        self._state = MavState.STANDBY
        self._px4 = ModelParameters()
        self._param_lock = threading.Lock()
        self._stop = threading.Event()
        self._threads: list[threading.Thread] = []

    @property
    def system_status(self) -> MavState:
        return self._state

    @property
    def mission_item_speed(self) -> float:
        return self._mission_item_speed

    def set_system_status(self, state: MavState) -> None:
        self._state = MavState(state)

    def publish_system_status(self) -> CompanionStatus:
        """Send the current state as a companion-process heartbeat."""
        status = CompanionStatus(component=AVOIDANCE_COMPONENT_ID, state=int(self._state))
        self._publish_status(status)
        return status

    def check_failsafe(self, since_last_cloud: float, since_start: float, hover: bool) -> bool:
        """Update the health state from elapsed times in seconds; return the hover flag."""
        if since_last_cloud > self.timeout_termination and since_start > self.timeout_termination:
            self.set_system_status(MavState.FLIGHT_TERMINATION)
            _log.warning("Planner abort: missing required data")
        elif since_last_cloud > self.timeout_critical and since_start > self.timeout_startup:
            if self.position_received:
                hover = True
                self.set_system_status(MavState.CRITICAL)
            else:
                _log.warning("Pointcloud timeout: No position received, no WP to output....")
        elif not hover:
            self.set_system_status(MavState.ACTIVE)
        return hover

    def on_param(self, param_id: str, value: float) -> bool:
        """Store a parameter value announced by the flight controller; False if unused."""
        with self._param_lock:
            if param_id in _FLOAT_PARAMS:
                attr, converted = _FLOAT_PARAMS[param_id], float(value)
            elif param_id in _INT_PARAMS:
                attr, converted = _INT_PARAMS[param_id], int(value)
            else:
                return False
            _log.info(
                "parameter %s is set from %s to %s", param_id, getattr(self._px4, attr), converted
            )
            setattr(self._px4, attr, converted)
            return True

    def mission_callback(self, waypoints: Iterable[MissionItem]) -> None:
        """Take the ground speed of the last speed change at or before the current item."""
        items = list(waypoints)
        current = next((i for i, item in enumerate(items) if item.is_current), None)
        if current is None:
            return
        for item in reversed(items[: current + 1]):
            if (
                item.command == MavCommand.DO_CHANGE_SPEED
                and (item.param1 - 1.0) < _FLT_MIN
                and item.param2 > 0.0
            ):
                self._mission_item_speed = float(item.param2)
                break

    def px4_parameters(self) -> ModelParameters:
        """A snapshot of the cached parameters."""
        with self._param_lock:
            return replace(self._px4)

    def poll_px4_parameters(self) -> bool:
        """Request every polled parameter once; True if all are now known."""
        with self._param_lock:
            for name, attr in _POLLED.items():
                value = self._get_param(name)
                if value is not None:
                    setattr(self._px4, attr, float(value))
            return self._px4.is_initialized()

    def _param_loop(self) -> None:
        while not self._stop.is_set():
            initialized = self.poll_px4_parameters()
            self._stop.wait(_POLL_REFRESH_S if initialized else _POLL_RETRY_S)

    def _status_loop(self) -> None:
        while not self._stop.wait(self.statusloop_dt):
            self.publish_system_status()

    def start(self) -> None:
        """Enter BOOT and start the heartbeat and parameter polling threads."""
        if self._threads:
            raise RuntimeError("node already started")
        self._stop.clear()
        self.set_system_status(MavState.BOOT)
        self._threads = [
            threading.Thread(target=self._status_loop, daemon=True),
            threading.Thread(target=self._param_loop, daemon=True),
        ]
        for thread in self._threads:
            thread.start()

    def stop(self) -> None:
        """Stop the background threads and wait for them."""
        self._stop.set()
        for thread in self._threads:
            thread.join()
        self._threads = []


__all__ = [
    "AVOIDANCE_COMPONENT_ID",
    "AvoidanceNode",
    "CompanionStatus",
    "MavCommand",
    "MavState",
    "MissionItem",
    "ModelParameters",
]

_ = fields  # dataclass helpers kept importable for callers inspecting parameters