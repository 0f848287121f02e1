"""Box-soup room shells (floor, ceiling, four walls) and window panes."""

import logging
from typing import List

import trimesh

from core.geometry import GeometryModel, Room, WallSide, Window

from .types import (
    CEILING_COLOR,
    FLOOR_COLOR,
    WALL_COLOR,
    WINDOW_COLOR,
    Mesh3D,
    Scene3D,
)

logger = logging.getLogger(__name__)

WALL_THICKNESS = 0.25
FLOOR_THICKNESS = 0.15
CEILING_THICKNESS = 0.1
WINDOW_THICKNESS = 0.02
WINDOW_SILL_HEIGHT = 1.2
MIN_EXTENT = 0.01


def _box(extents, center) -> trimesh.Trimesh:
    """Axis-aligned box with the given extents, centered at ``center``."""
    transform = trimesh.transformations.translation_matrix(center)
    return trimesh.creation.box(extents=extents, transform=transform)


class ShellBuilder:
    """Builds the axis-aligned boxes of one room."""

    def __init__(self, room: Room, wall_thickness: float = WALL_THICKNESS):
        self.room = room
        self.wall_thickness = wall_thickness
        self.x, self.y, self.z = room.position.as_tuple()

    def _mesh(self, suffix: str, box: trimesh.Trimesh, color, element_type: str) -> Mesh3D:
        return Mesh3D.from_trimesh(
            box,
            name=f"{self.room.name}_{suffix}",
            color=color,
            element_type=element_type,
            source_id=self.room.name,
        )

    def build_floor(self) -> Mesh3D:
        """Floor slab centered on the room base."""
        box = _box((self.room.width, FLOOR_THICKNESS, self.room.length), (self.x, self.y, self.z))
        return self._mesh("floor", box, FLOOR_COLOR, "floor")

    def build_ceiling(self) -> Mesh3D:
        """Ceiling slab inset by the wall thickness on every side."""
        inset = self.wall_thickness * 2
        extents = (
            max(self.room.width - inset, MIN_EXTENT),
            CEILING_THICKNESS,
            max(self.room.length - inset, MIN_EXTENT),
        )
        center = (self.x, self.y + self.room.height - CEILING_THICKNESS / 2, self.z)
        return self._mesh("ceiling", _box(extents, center), CEILING_COLOR, "ceiling")

    def build_walls(self) -> List[Mesh3D]:
        """Four walls centered on the room's half-extent boundary."""
        w, l, h, t = self.room.width, self.room.length, self.room.height, self.wall_thickness
        mid_y = self.y + h / 2
        specs = [
            (WallSide.FRONT, (w, h, t), (self.x, mid_y, self.z - l / 2)),
            (WallSide.BACK, (w, h, t), (self.x, mid_y, self.z + l / 2)),
            (WallSide.LEFT, (t, h, l), (self.x - w / 2, mid_y, self.z)),
            (WallSide.RIGHT, (t, h, l), (self.x + w / 2, mid_y, self.z)),
        ]
        return [
            self._mesh(f"wall_{side.value}", _box(extents, center), WALL_COLOR, "wall")
            for side, extents, center in specs
        ]

    def build_window(self, window: Window) -> Mesh3D:
        """Thin translucent pane on the window's wall, ``position`` along its length."""
        w, l = self.room.width, self.room.length
        center_y = self.y + WINDOW_SILL_HEIGHT + window.height / 2
        min_x, min_z = self.x - w / 2, self.z - l / 2

        if window.wall in (WallSide.FRONT, WallSide.BACK):
            along = min_x + window.position * w
            wall_z = self.z - l / 2 if window.wall == WallSide.FRONT else self.z + l / 2
            extents = (window.width, window.height, WINDOW_THICKNESS)
            center = (along, center_y, wall_z)
        else:
            along = min_z + window.position * l
            wall_x = self.x - w / 2 if window.wall == WallSide.LEFT else self.x + w / 2
            extents = (WINDOW_THICKNESS, window.height, window.width)
            center = (wall_x, center_y, along)

        return self._mesh(f"window_{window.wall.value}", _box(extents, center), WINDOW_COLOR, "window")

    def build_all(self) -> List[Mesh3D]:
        """Floor, ceiling and walls of the room."""
        return [self.build_floor(), self.build_ceiling(), *self.build_walls()]


def build_scene(model: GeometryModel, wall_thickness: float = WALL_THICKNESS) -> Scene3D:
    """
    Build the box soup for every room and window of a model.

    Args:
        model: Validated geometry model
        wall_thickness: Wall box thickness in meters

    Returns:
        Scene3D with floor, ceiling, wall and window groups
    """
    scene = Scene3D(metadata={"rooms": len(model.rooms), "windows": len(model.windows)})
    builders = {room.name: ShellBuilder(room, wall_thickness) for room in model.rooms}

    for builder in builders.values():
        for mesh in builder.build_all():
            scene.add_mesh(mesh)

    for window in model.windows:
        scene.add_mesh(builders[window.room].build_window(window))

    logger.debug(
        f"Built box soup: {len(model.rooms)} rooms, {len(model.windows)} windows, "
        f"{scene.triangle_count} triangles"
    )
    return scene

