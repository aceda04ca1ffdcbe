"""Time-stamped buffer of frame transforms with interpolated lookup."""

from __future__ import annotations

import logging
import threading
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Sequence

from avoidkit.frames import Quaternion

_log = logging.getLogger(__name__)

# Lookup failures are only reported once the buffer has had time to fill.
_QUIET_STARTUP_S = 3.0


class TransformLookupError(LookupError):
    """Raised when a transform cannot be retrieved from the buffer."""


def _as_vec3(v: Sequence[float]) -> tuple[float, float, float]:
    x, y, z = (float(c) for c in v)
    return (x, y, z)


@dataclass(frozen=True)
class StampedTransform:
    """A translation and rotation valid at time ``stamp`` (seconds)."""

    stamp: float
    origin: tuple[float, float, float] = (0.0, 0.0, 0.0)
    rotation: Quaternion = field(default_factory=Quaternion)

    def __post_init__(self) -> None:
        object.__setattr__(self, "stamp", float(self.stamp))
        object.__setattr__(self, "origin", _as_vec3(self.origin))


def _interpolate(
    earlier: StampedTransform, later: StampedTransform, stamp: float
) -> StampedTransform:
    if stamp > later.stamp or stamp < earlier.stamp:
        raise TransformLookupError("TF Buffer: could not interpolate transform")
    tau = (stamp - earlier.stamp) / (later.stamp - earlier.stamp)
    origin = tuple(
        a * (1.0 - tau) + b * tau for a, b in zip(earlier.origin, later.origin)
    )
    rotation = earlier.rotation.slerp(later.rotation, tau)
    return StampedTransform(stamp=stamp, origin=origin, rotation=rotation)


class TransformBuffer:
    """Keeps the last ``buffer_size_s`` seconds of transforms per frame pair."""

    def __init__(self, buffer_size_s: float = 10.0) -> None:
        self._buffer_size = float(buffer_size_s)
        self._buffer: dict[tuple[str, str], deque[StampedTransform]] = {}
        self._lock = threading.Lock()
        self._startup = time.monotonic()

    def _report(self, level: int, msg: str) -> None:
        if time.monotonic() - self._startup > _QUIET_STARTUP_S:
            _log.log(level, msg)

    def _fail(self, level: int, msg: str) -> TransformLookupError:
        self._report(level, msg)
        return TransformLookupError(msg)

    def insert_transform(
        self, source_frame: str, target_frame: str, transform: StampedTransform
    ) -> bool:
        """Buffer a transform; False if it is not newer than the last one buffered."""
        with self._lock:
            entries = self._buffer.setdefault((source_frame, target_frame), deque())
            if entries and entries[-1].stamp >= transform.stamp:
                return False
            entries.append(transform)
            while transform.stamp - entries[0].stamp > self._buffer_size:
                entries.popleft()
            return True

    def get_transform(
        self, source_frame: str, target_frame: str, time: float
    ) -> StampedTransform:
        """Transform at ``time``, interpolated between the buffered neighbours."""
        with self._lock:
            entries = self._buffer.get((source_frame, target_frame))
            if entries is None:
                raise self._fail(
                    logging.ERROR,
                    "TF Buffer: could not retrieve requested transform from buffer, unregistered",
                )
            if not entries:
                raise self._fail(
                    logging.WARNING,
                    "TF Buffer: could not retrieve requested transform from buffer, buffer is empty",
                )
            if entries[-1].stamp < time:
                raise self._fail(
                    logging.DEBUG,
                    "TF Buffer: could not retrieve requested transform from buffer, "
                    "tf has not yet arrived",
                )
            if entries[0].stamp > time:
                raise self._fail(
                    logging.WARNING,
                    "TF Buffer: could not retrieve requested transform from buffer, "
                    "tf has already been dropped from buffer",
                )
            items = list(entries)

        later = items[-1]
        for earlier in reversed(items[:-1]):
            if earlier.stamp <= time:
                try:
                    return _interpolate(earlier, later, time)
                except TransformLookupError as exc:
                    self._report(logging.WARNING, str(exc))
                    raise
            later = earlier
        raise TransformLookupError(
            "TF Buffer: could not retrieve requested transform from buffer"
        )