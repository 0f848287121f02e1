"""2D orthographic projections (floor plan and elevations) of a geometry model."""

from .projector import (
    ROOM_COLORS,
    Line,
    Projection,
    RoomRect,
    ViewAxis,
    project,
    room_color,
    room_extents,
)
from .render import render_png, render_svg

__all__ = [
    "ViewAxis",
    "Projection",
    "RoomRect",
    "Line",
    "project",
    "room_extents",
    "room_color",
    "ROOM_COLORS",
    "render_svg",
    "render_png",
]
