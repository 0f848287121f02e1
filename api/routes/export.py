"""Geometry export and 2D projection routes."""

import logging
import re
import unicodedata
from pathlib import Path
from typing import Optional
from urllib.parse import quote

from fastapi import APIRouter, HTTPException, Query
from fastapi.responses import Response
from pydantic import BaseModel, ConfigDict, Field

from core.errors import ExportError
from core.model_gen import EXPORT_FORMATS, ModelExporter, coerce_model
from core.projection import ViewAxis, project, render_png, render_svg

logger = logging.getLogger(__name__)

router = APIRouter()

exporter = ModelExporter()


def sanitize_filename(filename: str) -> str:
    """Sanitize a download file stem.

    - Removes path separators and parent directory references
    - Removes null bytes, control characters and quotes
    - Limits length
    """
    filename = filename.replace("\x00", "")

    # Get only the basename (removes any path components)
    filename = Path(filename).name
    filename = filename.replace("..", "").replace("/", "").replace("\\", "").replace('"', "")

    filename = re.sub(r'[\x00-\x1f\x7f-\x9f]', '', filename).strip()

    if len(filename) > 200:
        filename = filename[:200]

    if not filename or filename == ".":
        filename = "model"

    return filename


class ExportRequest(BaseModel):
    """Model to export."""

    model_config = ConfigDict(populate_by_name=True)

    model_data: dict = Field(alias="modelData")
    project_name: Optional[str] = Field(default=None, alias="projectName")


def content_disposition(filename: str) -> str:
    """Attachment header with an ASCII fallback and an RFC 5987 UTF-8 name."""
    fallback = unicodedata.normalize("NFKD", filename).encode("ascii", "ignore").decode("ascii")
    stem, dot, extension = fallback.rpartition(".")
    if dot and not stem.strip(" ._"):
        fallback = f"model.{extension}"
    elif not fallback.strip(" ._"):
        fallback = "model"

    value = f'attachment; filename="{fallback}"'
    if fallback != filename:
        value += f"; filename*=UTF-8''{quote(filename, safe='')}"
    return value


def _download(content: bytes, media_type: str, filename: str) -> Response:
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": content_disposition(filename)},
    )


@router.get("/formats")
async def list_formats():
    """List supported export formats."""
    return {
        "formats": [
            {"name": fmt.name, "content_type": fmt.content_type, "extension": fmt.extension}
            for fmt in EXPORT_FORMATS.values()
        ]
    }


@router.post("/projection/{view}")
def export_projection(
    view: ViewAxis,
    request: ExportRequest,
    format: str = Query(default="svg", pattern="^(svg|png)$"),
    grid: bool = True,
    dimensions: bool = True,
):
    """Render a top-down floor plan or an elevation as SVG or PNG."""
    try:
        model = coerce_model(request.model_data)
        projection = project(model, view, show_grid=grid)
    except ExportError as e:
        raise HTTPException(status_code=422, detail=str(e))

    stem = sanitize_filename(request.project_name or "model")
    if format == "png":
        return _download(render_png(projection, show_dimensions=dimensions), "image/png", f"{stem}_{view.value}.png")
    return _download(
        render_svg(projection, show_dimensions=dimensions).encode("utf-8"),
        "image/svg+xml",
        f"{stem}_{view.value}.svg",
    )


@router.post("/{format_name}")
def export_model(format_name: str, request: ExportRequest):
    """Export a model as gltf, glb, obj, stl, svg or json."""
    if format_name.lower() not in EXPORT_FORMATS:
        raise HTTPException(
            status_code=400,
            detail=f"Unsupported export format '{format_name}'. Must be one of {sorted(EXPORT_FORMATS)}",
        )

    try:
        result = exporter.export(
            request.model_data,
            format_name,
            project_name=sanitize_filename(request.project_name or "model"),
        )
    except ExportError as e:
        logger.warning(f"Export to {format_name} rejected: {e}")
        raise HTTPException(status_code=422, detail=str(e))

    return _download(result.content, result.content_type, result.filename)
