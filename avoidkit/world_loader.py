"""Load world descriptions from YAML and turn them into display markers."""

from __future__ import annotations

import enum
import logging
import os
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Mapping, Optional, Sequence, Union

import yaml

from avoidkit.frames import Quaternion

_log = logging.getLogger(__name__)

DRONE_MESH = "model://matrice_100/meshes/Matrice_100.dae"
_MODEL_PREFIX = "model://"
_PRIMITIVE_COLOR = (0.5, 0.5, 0.5, 0.9)


class WorldLoaderError(Exception):
    """Raised when a world file or model cannot be loaded."""


class MarkerType(enum.IntEnum):
    CUBE = 1
    SPHERE = 2
    CYLINDER = 3
    MESH_RESOURCE = 10


@dataclass(frozen=True)
class Marker:
    """A displayable object."""

    id: int
    type: MarkerType
    frame_id: str
    position: tuple[float, float, float]
    orientation: tuple[float, float, float, float]
    scale: tuple[float, float, float]
    color: Optional[tuple[float, float, float, float]] = None
    mesh_resource: str = ""
    mesh_use_embedded_materials: bool = False
    stamp: float = field(default_factory=time.time)


def _floats(value: Any, n: int, key: str) -> tuple[float, ...]:
    try:
        items = tuple(float(v) for v in value)
    except (TypeError, ValueError) as exc:
        raise WorldLoaderError(f"invalid '{key}' entry: {value!r}") from exc
    if len(items) < n:
        raise WorldLoaderError(f"'{key}' needs {n} values, got {len(items)}")
    return items[:n]


@dataclass(frozen=True)
class WorldObject:
    """One object of a world description."""

    type: str
    name: str
    frame_id: str
    mesh_resource: str
    position: tuple[float, float, float]
    orientation: tuple[float, float, float, float]
    scale: tuple[float, float, float]

    @staticmethod
    def from_mapping(data: Mapping[str, Any]) -> WorldObject:
        """Build an object from one parsed YAML entry."""
        if not isinstance(data, Mapping):
            raise WorldLoaderError("a world object must be a mapping")
        try:
            return WorldObject(
                type=str(data["type"]),
                name=str(data["name"]),
                frame_id=str(data["frame_id"]),
                mesh_resource=str(data["mesh_resource"]),
                position=_floats(data["position"], 3, "position"),
                orientation=_floats(data["orientation"], 4, "orientation"),
                scale=_floats(data["scale"], 3, "scale"),
            )
        except KeyError as exc:
            raise WorldLoaderError(f"world object is missing {exc.args[0]!r}") from exc


def resolve_uri(
    uri: str, model_path: Optional[str] = None, home: Optional[str] = None
) -> str:
    """Turn a model:// URI into a file:// URI by searching the model path."""
    if model_path is None:
        model_path = os.environ.get("GAZEBO_MODEL_PATH", "")
    if home is None:
        home = os.environ.get("HOME", "")
    relative = uri[7:]
    locations = f"{model_path}:{home}/.gazebo/models".split(":")
    for location in locations:
        if os.path.isfile(location + relative):
            return "file://" + location + relative
    raise WorldLoaderError(f"could not find model {uri}")


def load_world(path: Union[str, Path]) -> list[WorldObject]:
    """Read the objects of a YAML world file."""
    try:
        with open(path, encoding="utf-8") as fin:
            doc = yaml.safe_load(fin)
    except OSError as exc:
        raise WorldLoaderError(f"cannot read world file {path}") from exc
    except yaml.YAMLError as exc:
        raise WorldLoaderError(f"invalid YAML in world file {path}") from exc
    if doc is None:
        return []
    if not isinstance(doc, list):
        raise WorldLoaderError("a world file must hold a list of objects")
    return [WorldObject.from_mapping(entry) for entry in doc]


def _object_marker(marker_id: int, item: WorldObject) -> Marker:
    common = dict(
        id=marker_id,
        frame_id=item.frame_id,
        position=item.position,
        orientation=item.orientation,
        scale=item.scale,
    )
    if item.type == "mesh":
        mesh = item.mesh_resource
        if _MODEL_PREFIX in mesh:
            mesh = resolve_uri(mesh)
        return Marker(
            type=MarkerType.MESH_RESOURCE,
            mesh_resource=mesh,
            mesh_use_embedded_materials=True,
            **common,
        )
    primitives = {
        "cube": MarkerType.CUBE,
        "sphere": MarkerType.SPHERE,
        "cylinder": MarkerType.CYLINDER,
    }
    if item.type not in primitives:
        raise WorldLoaderError(f"invalid object type {item.type!r} in world file")
    return Marker(type=primitives[item.type], color=_PRIMITIVE_COLOR, **common)


class WorldVisualizer:
    """Publishes the world objects and the vehicle as markers."""

    def __init__(
        self,
        world_path: str,
        publish_world: Callable[[list[Marker]], None],
        publish_drone: Callable[[Marker], None],
    ) -> None:
        self.world_path = world_path
        self._publish_world = publish_world
        self._publish_drone = publish_drone
        self._world_loaded = False

    def visualize_world(self, world_path: Union[str, Path]) -> list[Marker]:
        """Load a world file, publish its markers and return them."""
        markers = [
            _object_marker(i, item) for i, item in enumerate(load_world(world_path), start=1)
        ]
        self._publish_world(markers)
        if not self._world_loaded:
            _log.info("Successfully loaded world")
            self._world_loaded = True
        return markers

    def visualize_drone(self, position: Sequence[float], orientation: Quaternion) -> Marker:
        """Publish the vehicle mesh at the given pose and return its marker."""
        mesh = DRONE_MESH
        if _MODEL_PREFIX in mesh:
            mesh = resolve_uri(mesh)
        x, y, z = (float(c) for c in position)
        marker = Marker(
            id=0,
            type=MarkerType.MESH_RESOURCE,
            frame_id="local_origin",
            position=(x, y, z),
            orientation=(orientation.x, orientation.y, orientation.z, orientation.w),
            scale=(1.5, 1.5, 1.5),
            mesh_resource=mesh,
            mesh_use_embedded_materials=True,
        )
        self._publish_drone(marker)
        return marker

    def on_position(self, position: Sequence[float], orientation: Quaternion) -> None:
        """Vehicle pose update: redraw the vehicle if a world is configured."""
        if not self.world_path:
            return
        try:
            self.visualize_drone(position, orientation)
        except WorldLoaderError as exc:
            _log.warning("Failed to visualize drone: %s", exc)

    def on_timer(self) -> None:
        """Periodic redraw of the configured world."""
        if not self.world_path:
            return
        try:
            self.visualize_world(self.world_path)
        except WorldLoaderError as exc:
            _log.warning("Failed to visualize world: %s", exc)