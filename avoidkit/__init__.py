"""Obstacle-avoidance building blocks: polar geometry, histograms, FOV tests, frames, transform buffering, a state machine, node health logic and world loading."""

__version__ = "0.1.0"

__all__ = [
    "avoidance_node",
    "fov",
    "frames",
    "geometry",
    "histogram",
    "planner_types",
    "transform_buffer",
    "usm",
    "world_loader",
]