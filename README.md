# avoidkit

Building blocks for obstacle-avoidance planners on multicopters: polar
geometry, a polar obstacle histogram, field-of-view tests, ENU/NED frame
conversions, a time-stamped transform buffer, a small state machine, the
companion-process health logic and a YAML world loader.

## Installation

```
pip install .
```

To run the tests, install the test extra and run pytest:

```
pip install .[test]
pytest
```

## Modules

- `avoidkit.geometry` — `PolarPoint` (elevation `e`, azimuth `z` in degrees,
  radius `r`) and angle helpers: `wrap_angle_to_plus_minus_180`,
  `wrap_angle_to_plus_minus_pi`, `angle_difference`, `index_angle_difference`,
  `distance_2d_polar`, `next_yaw`, `get_angular_velocity`. Conversions between
  cartesian points, polar points and histogram cells:
  `cartesian_to_polar_histogram`, `cartesian_to_polar_fcu`,
  `polar_histogram_to_cartesian`, `polar_fcu_to_cartesian`,
  `histogram_index_to_polar`, `polar_to_histogram_index` (returns
  `(azimuth_index, elevation_index)`) and `wrap_polar`.
- `avoidkit.histogram` — `Histogram`, a grid of obstacle distances indexed by
  elevation and azimuth. `get_dist` wraps indices around the grid, `set_dist`
  raises `IndexError` outside it. `upsample` and `downsample` switch between
  bin sizes `2 * ALPHA_RES` and `ALPHA_RES` and raise `ValueError` when called
  at the wrong resolution. `set_zero` and `is_empty` do what they say.
- `avoidkit.fov` — `FOV` (yaw, pitch and horizontal/vertical extent in
  degrees). `point_inside_fov`, `point_inside_yaw_fov` and
  `histogram_index_yaw_inside_fov` accept one `FOV` or several.
  `is_in_which_fov` and `is_on_edge_of_fov` return an index or `None`;
  `scale_to_fov` returns a value in `[0, 1]`. `remove_nan_and_get_maxima`
  drops non-finite points of an `N x 3` cloud and returns the clean cloud with
  its extreme points; `update_fov_from_maxima` returns a widened `FOV`.
- `avoidkit.frames` — `Quaternion` (multiplication, `slerp`, `rotate`,
  `from_axis_angle`), `quaternion_from_rpy`, `orientation_to_ned`,
  `orientation_to_enu`, `yaw_from_quaternion`, `pitch_from_quaternion`,
  `pose_orientation`, `to_ned`, `to_enu` and the yaw/pitch frame helpers.
  Trajectory setpoints: `TrajectoryPoint`, `Trajectory`,
  `unused_trajectory_point`, `fill_control_point`, `transform_to_trajectory`
  (type 0, one valid waypoint) and `transform_to_bezier` (type 1, five control
  points and a duration).
- `avoidkit.transform_buffer` — `TransformBuffer`, a thread-safe buffer of
  `StampedTransform` values per `(source_frame, target_frame)` pair that keeps
  the last `buffer_size_s` seconds. `insert_transform` returns `False` for a
  transform not newer than the last one; `get_transform` interpolates
  (translation linearly, rotation by slerp) and raises `TransformLookupError`
  when the pair is unknown, empty, or the time is outside the buffered range.
- `avoidkit.usm` — `StateMachine`, an abstract base whose `iterate_once` runs
  `run_current_state` and, unless it returns `Transition.REPEAT`, moves to the
  state chosen by `choose_next_state`. The current state is in `state`.
- `avoidkit.planner_types` — `WaypointChoice`, `NavigationState`,
  `AvoidanceOutput`, `CandidateDirection` (ordered by cost, `to_polar`),
  `CostParameters`, `SimulationState`, `SimulationLimits` and `norm_clamp`.
- `avoidkit.avoidance_node` — `AvoidanceNode`, built from two callables: one
  that publishes a `CompanionStatus`, one that returns a parameter value (or
  `None`) for a parameter id. It keeps the `MavState`, updates it in
  `check_failsafe`, caches `ModelParameters` from `on_param` and
  `poll_px4_parameters`, reads the mission speed from `MissionItem` lists in
  `mission_callback`, and with `start`/`stop` runs a heartbeat thread and a
  parameter polling thread.
- `avoidkit.world_loader` — `load_world` reads a YAML list of objects into
  `WorldObject` values; `resolve_uri` maps `model://` URIs to `file://` paths
  using `GAZEBO_MODEL_PATH` and `~/.gazebo/models`. `WorldVisualizer` turns the
  world and the vehicle pose into `Marker` values and hands them to the
  callables it was given. Failures raise `WorldLoaderError`.

## Example

```python
import numpy as np
from avoidkit.geometry import cartesian_to_polar_histogram, polar_to_histogram_index
from avoidkit.histogram import Histogram

origin = np.zeros(3)
p = cartesian_to_polar_histogram(np.array([1.0, 1.0, 0.0]), origin)
e, z = polar_to_histogram_index(p, 6)[::-1]

hist = Histogram(6)
hist.set_dist(e, z, p.r)
assert not hist.is_empty()
```

## What it does not do

avoidkit is a library. It has no command-line tool, and it does not talk to a
flight controller, a message bus or a visualiser by itself: status messages,
parameter requests and markers go through the callables you pass in. It does
not contain the planner that builds the search tree and chooses waypoints, nor
a trajectory simulator; only the types they share are provided.