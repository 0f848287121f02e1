"""Orthographic 2D projection of a geometry model onto a drawing canvas."""

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from core.errors import ExportError
from core.geometry import GeometryModel, Room

logger = logging.getLogger(__name__)

CANVAS_WIDTH = 800
CANVAS_HEIGHT = 600
PADDING = 60
GRID_SIZE = 1.0  # meters
MAX_GRID_LINES = 500  # per axis; larger extents are drawn without a grid

ROOM_COLORS = {
    "bedroom": "#e3f2fd",
    "bathroom": "#f3e5f5",
    "kitchen": "#fff3e0",
    "living room": "#e8f5e9",
    "dining room": "#fce4ec",
}
DEFAULT_ROOM_COLOR = "#f5f5f5"


def room_color(room_type: Optional[str]) -> str:
    """Fill color for a room type."""
    return ROOM_COLORS.get((room_type or "").lower(), DEFAULT_ROOM_COLOR)


class ViewAxis(str, Enum):
    """Direction the model is viewed from."""

    TOP = "top"
    FRONT = "front"
    BACK = "back"
    LEFT = "left"
    RIGHT = "right"

    @property
    def is_elevation(self) -> bool:
        return self != ViewAxis.TOP


@dataclass
class Line:
    """Canvas line segment."""

    x1: float
    y1: float
    x2: float
    y2: float


@dataclass
class RoomRect:
    """One projected room."""

    name: str
    room_type: Optional[str]
    x: float  # canvas top-left
    y: float
    width: float  # canvas size
    height: float
    fill: str
    center: Tuple[float, float]
    dimension_a: float  # meters along the horizontal canvas axis
    dimension_b: float  # meters along the vertical canvas axis

    @property
    def area(self) -> float:
        return self.dimension_a * self.dimension_b


@dataclass
class Projection:
    """Everything needed to draw one view of a model."""

    view: ViewAxis
    width: int
    height: int
    scale: float  # pixels per meter
    center_a: float  # view coordinates drawn at the canvas center
    center_b: float
    bounds: Tuple[float, float, float, float]  # (min_a, min_b, max_a, max_b) in meters
    rooms: List[RoomRect] = field(default_factory=list)
    grid: List[Line] = field(default_factory=list)
    connectors: List[Line] = field(default_factory=list)  # door links, top view only
    compass: Optional[Tuple[float, float]] = None  # north arrow anchor, top view only

    def to_canvas(self, a: float, b: float) -> Tuple[float, float]:
        """Map view coordinates (meters) to canvas pixels."""
        # Relative to the center so far-from-origin models keep their precision
        x = self.width / 2 + (a - self.center_a) * self.scale
        dy = (b - self.center_b) * self.scale
        if self.view.is_elevation:
            # Ground at the bottom of the canvas
            return (x, self.height / 2 - dy)
        return (x, self.height / 2 + dy)


def room_extents(room: Room, view: ViewAxis) -> Tuple[float, float, float, float]:
    """
    Project a room box onto a view plane.

    top maps a=x/width and b=z/length; front/back map a=x/width and
    b=y/height; left/right map a=z/length and b=y/height. Back and right
    views look from the opposite side, so their a axis is mirrored.

    Returns:
        (a1, b1, a2, b2) with a1 < a2 and b1 < b2, in meters
    """
    x, y, z = room.position.as_tuple()
    if view == ViewAxis.TOP:
        a1, a2 = x - room.width / 2, x + room.width / 2
        b1, b2 = z - room.length / 2, z + room.length / 2
    elif view in (ViewAxis.FRONT, ViewAxis.BACK):
        a1, a2 = x - room.width / 2, x + room.width / 2
        b1, b2 = y, y + room.height
    else:
        a1, a2 = z - room.length / 2, z + room.length / 2
        b1, b2 = y, y + room.height

    if view in (ViewAxis.BACK, ViewAxis.RIGHT):
        a1, a2 = -a2, -a1
    return a1, b1, a2, b2


def grid_steps(low: float, high: float, step: float = GRID_SIZE) -> Optional[List[float]]:
    """
    Grid positions that fall inside [low, high].

    Returns None when the range would need more than MAX_GRID_LINES lines.
    """
    first = math.ceil(low / step)
    last = math.floor(high / step)
    count = last - first + 1
    if count > MAX_GRID_LINES:
        return None
    return [(first + i) * step for i in range(max(count, 0))]


def project(
    model: GeometryModel,
    view: ViewAxis = ViewAxis.TOP,
    width: int = CANVAS_WIDTH,
    height: int = CANVAS_HEIGHT,
    padding: int = PADDING,
    show_grid: bool = True,
) -> Projection:
    """
    Project a model for drawing.

    Args:
        model: Validated geometry model
        view: View axis
        width: Canvas width in pixels
        height: Canvas height in pixels
        padding: Margin kept free around the drawing
        show_grid: Include 1 m grid lines

    Returns:
        Projection with canvas-space rooms, grid, connectors and compass

    Raises:
        ExportError: If the model has no rooms or its extent is degenerate
    """
    if model.is_empty:
        raise ExportError("empty model: nothing to project")
    view = ViewAxis(view)

    extents = [room_extents(room, view) for room in model.rooms]
    min_a = min(e[0] for e in extents)
    min_b = min(e[1] for e in extents)
    max_a = max(e[2] for e in extents)
    max_b = max(e[3] for e in extents)
    span_a, span_b = max_a - min_a, max_b - min_b

    # Room sizes vanish in float precision at very large coordinates
    if not all(math.isfinite(span) and span > 0 for span in (span_a, span_b)):
        raise ExportError(
            f"degenerate {view.value} extent ({span_a:g} x {span_b:g} m): cannot scale to canvas"
        )

    scale = min((width - padding * 2) / span_a, (height - padding * 2) / span_b)
    if not (math.isfinite(scale) and scale > 0):
        raise ExportError(f"cannot fit {view.value} view onto a {width}x{height} canvas")

    projection = Projection(
        view=view,
        width=width,
        height=height,
        scale=scale,
        center_a=min_a + span_a / 2,
        center_b=min_b + span_b / 2,
        bounds=(min_a, min_b, max_a, max_b),
    )

    if show_grid:
        a_steps = grid_steps(min_a, max_a)
        b_steps = grid_steps(min_b, max_b)
        if a_steps is None or b_steps is None:
            logger.debug(f"Skipping grid for {view.value} view: {span_a:g} x {span_b:g} m extent")
        else:
            for a in a_steps:
                projection.grid.append(Line(*projection.to_canvas(a, min_b), *projection.to_canvas(a, max_b)))
            for b in b_steps:
                projection.grid.append(Line(*projection.to_canvas(min_a, b), *projection.to_canvas(max_a, b)))

    for room, (a1, b1, a2, b2) in zip(model.rooms, extents):
        corner_x, corner_y = projection.to_canvas(a1, b2 if view.is_elevation else b1)
        projection.rooms.append(RoomRect(
            name=room.name,
            room_type=room.room_type,
            x=corner_x,
            y=corner_y,
            width=(a2 - a1) * scale,
            height=(b2 - b1) * scale,
            fill=room_color(room.room_type),
            center=projection.to_canvas((a1 + a2) / 2, (b1 + b2) / 2),
            dimension_a=a2 - a1,
            dimension_b=b2 - b1,
        ))

    if view == ViewAxis.TOP:
        for door in model.doors:
            start = model.get_room(door.from_room).position
            end = model.get_room(door.to_room).position
            projection.connectors.append(Line(
                *projection.to_canvas(start.x, start.z),
                *projection.to_canvas(end.x, end.z),
            ))
        projection.compass = (width - 40, 40)

    logger.debug(f"Projected {len(model.rooms)} rooms for {view.value} view at {scale:.1f}px/m")
    return projection
