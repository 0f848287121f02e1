"""Draw projections as SVG text or PNG images."""

import io
import logging
import math
from typing import List, Optional
from xml.sax.saxutils import escape

from PIL import Image, ImageDraw, ImageFont

from .projector import Projection, RoomRect

logger = logging.getLogger(__name__)

SVG_STYLE = """<defs>
  <style>
    .room { stroke: #333; stroke-width: 2; }
    .room-label { font-family: Arial, sans-serif; font-size: 12px; text-anchor: middle; dominant-baseline: middle; }
    .dimension { font-family: Arial, sans-serif; font-size: 10px; fill: #666; text-anchor: middle; }
    .area { font-family: Arial, sans-serif; font-size: 9px; fill: #999; text-anchor: middle; }
    .door { stroke: #ff6b6b; stroke-width: 3; stroke-dasharray: 5,5; }
  </style>
</defs>
"""

GRID_COLOR = "#e0e0e0"
OUTLINE_COLOR = "#333333"
DOOR_COLOR = "#ff6b6b"


def _fmt(value: float) -> str:
    return f"{value:.2f}"


def _meters(value: float) -> str:
    return f"{value:.1f}m"


def _area(room: RoomRect) -> str:
    return f"{room.area:.1f}m²"


def render_svg(
    projection: Projection,
    show_dimensions: bool = True,
    title: Optional[str] = None,
) -> str:
    """
    Render a projection as a standalone SVG document.

    Each room becomes one ``<rect class="room">`` with a centered label and,
    when ``show_dimensions`` is set, the two dimension texts and the area.
    """
    w, h = projection.width, projection.height
    parts: List[str] = [
        '<?xml version="1.0" encoding="UTF-8"?>\n',
        f'<svg xmlns="http://www.w3.org/2000/svg" width="{w}" height="{h}" viewBox="0 0 {w} {h}">\n',
        SVG_STYLE,
        f'<rect width="{w}" height="{h}" fill="#ffffff"/>\n',
    ]
    if title:
        parts.append(f'<title>{escape(title)}</title>\n')

    if projection.grid:
        parts.append('<g id="grid">\n')
        for line in projection.grid:
            parts.append(
                f'<line x1="{_fmt(line.x1)}" y1="{_fmt(line.y1)}" x2="{_fmt(line.x2)}" y2="{_fmt(line.y2)}" '
                f'stroke="{GRID_COLOR}" stroke-width="0.5"/>\n'
            )
        parts.append('</g>\n')

    parts.append('<g id="rooms">\n')
    for room in projection.rooms:
        cx, cy = room.center
        parts.append(
            f'<rect x="{_fmt(room.x)}" y="{_fmt(room.y)}" width="{_fmt(room.width)}" '
            f'height="{_fmt(room.height)}" fill="{room.fill}" class="room"/>\n'
        )
        parts.append(f'<text x="{_fmt(cx)}" y="{_fmt(cy)}" class="room-label">{escape(room.name)}</text>\n')
        if show_dimensions:
            parts.append(
                f'<text x="{_fmt(cx)}" y="{_fmt(room.y - 10)}" class="dimension">{_meters(room.dimension_a)}</text>\n'
            )
            side_x = room.x + room.width + 10
            parts.append(
                f'<text x="{_fmt(side_x)}" y="{_fmt(cy)}" class="dimension" '
                f'transform="rotate(-90 {_fmt(side_x)} {_fmt(cy)})">{_meters(room.dimension_b)}</text>\n'
            )
            parts.append(f'<text x="{_fmt(cx)}" y="{_fmt(cy + 15)}" class="area">{_area(room)}</text>\n')
    parts.append('</g>\n')

    if projection.connectors:
        parts.append('<g id="doors">\n')
        for line in projection.connectors:
            parts.append(
                f'<line x1="{_fmt(line.x1)}" y1="{_fmt(line.y1)}" x2="{_fmt(line.x2)}" y2="{_fmt(line.y2)}" class="door"/>\n'
            )
        parts.append('</g>\n')

    if projection.compass is not None:
        x, y = projection.compass
        parts.append(
            '<g id="compass">\n'
            f'<line x1="{x}" y1="{y + 20}" x2="{x}" y2="{y - 10}" stroke="#000" stroke-width="2"/>\n'
            f'<polygon points="{x},{y - 10} {x - 5},{y} {x + 5},{y}" fill="#000"/>\n'
            f'<text x="{x}" y="{y + 35}" font-family="Arial, sans-serif" font-size="14" '
            'font-weight="bold" text-anchor="middle">N</text>\n'
            '</g>\n'
        )

    parts.append('</svg>\n')
    return "".join(parts)


def _dashed_line(draw: ImageDraw.ImageDraw, line, fill: str, width: int, dash: float = 5.0) -> None:
    """Draw a dashed line as alternating solid segments."""
    length = math.hypot(line.x2 - line.x1, line.y2 - line.y1)
    if length == 0:
        return
    dx, dy = (line.x2 - line.x1) / length, (line.y2 - line.y1) / length
    position = 0.0
    while position < length:
        end = min(position + dash, length)
        draw.line(
            [(line.x1 + dx * position, line.y1 + dy * position), (line.x1 + dx * end, line.y1 + dy * end)],
            fill=fill,
            width=width,
        )
        position += dash * 2


def _centered_text(draw: ImageDraw.ImageDraw, center, text: str, fill: str, font) -> None:
    left, top, right, bottom = draw.textbbox((0, 0), text, font=font)
    draw.text((center[0] - (right - left) / 2, center[1] - (bottom - top) / 2), text, fill=fill, font=font)


def render_png(projection: Projection, show_dimensions: bool = True) -> bytes:
    """Render a projection as PNG bytes with Pillow."""
    image = Image.new("RGB", (projection.width, projection.height), color=(255, 255, 255))
    draw = ImageDraw.Draw(image)
    font = ImageFont.load_default()

    for line in projection.grid:
        draw.line([(line.x1, line.y1), (line.x2, line.y2)], fill=GRID_COLOR, width=1)

    for room in projection.rooms:
        draw.rectangle(
            [room.x, room.y, room.x + room.width, room.y + room.height],
            fill=room.fill,
            outline=OUTLINE_COLOR,
            width=2,
        )
        _centered_text(draw, room.center, room.name, "#000000", font)
        if show_dimensions:
            cx, cy = room.center
            _centered_text(draw, (cx, room.y - 10), _meters(room.dimension_a), "#666666", font)
            _centered_text(draw, (room.x + room.width + 18, cy), _meters(room.dimension_b), "#666666", font)
            # Bitmap fonts may lack the superscript
            _centered_text(draw, (cx, cy + 15), f"{room.area:.1f}m2", "#999999", font)

    for line in projection.connectors:
        _dashed_line(draw, line, DOOR_COLOR, 3)

    if projection.compass is not None:
        x, y = projection.compass
        draw.line([(x, y + 20), (x, y - 10)], fill="#000000", width=2)
        draw.polygon([(x, y - 10), (x - 5, y), (x + 5, y)], fill="#000000")
        _centered_text(draw, (x, y + 35), "N", "#000000", font)

    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    logger.debug(f"Rendered {projection.view.value} view PNG ({projection.width}x{projection.height})")
    return buffer.getvalue()
