"""Export geometry models as GLTF, GLB, OBJ, STL, SVG floor plans and JSON."""

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Union

from pydantic import ValidationError
from trimesh.exchange.gltf import export_gltf

from core.errors import ExportError
from core.geometry import GeometryModel, describe_validation_error
from core.projection import ViewAxis, project, render_svg

from .shell_builder import WALL_THICKNESS, build_scene
from .stl import scene_to_ascii_stl
from .types import Scene3D

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExportFormat:
    """Downloadable artifact type."""

    name: str
    content_type: str
    extension: str
    suffix: str = ""  # appended to the file stem


EXPORT_FORMATS: Dict[str, ExportFormat] = {
    "gltf": ExportFormat("gltf", "model/gltf+json", "gltf"),
    "glb": ExportFormat("glb", "model/gltf-binary", "glb"),
    "obj": ExportFormat("obj", "text/plain", "obj"),
    "stl": ExportFormat("stl", "model/stl", "stl"),
    "svg": ExportFormat("svg", "image/svg+xml", "svg", suffix="_floorplan"),
    "json": ExportFormat("json", "application/json", "json"),
}


@dataclass
class ExportResult:
    """Serialized artifact ready to be downloaded."""

    content: bytes
    format: ExportFormat
    filename: str

    @property
    def content_type(self) -> str:
        return self.format.content_type


def coerce_model(model: Union[GeometryModel, Dict[str, Any]]) -> GeometryModel:
    """
    Validate an export input.

    Raises:
        ExportError: If the model is malformed or has no rooms
    """
    if not isinstance(model, GeometryModel):
        if not isinstance(model, dict):
            raise ExportError("Model data must be a JSON object")
        try:
            model = GeometryModel.model_validate(model)
        except ValidationError as e:
            raise ExportError(f"Invalid model: {describe_validation_error(e)}") from e
    if model.is_empty:
        raise ExportError("empty model: at least one room is required to export")
    return model


class ModelExporter:
    """Serializes a geometry model into each supported format."""

    def __init__(self, wall_thickness: float = WALL_THICKNESS):
        self.wall_thickness = wall_thickness

    def build_scene(self, model: GeometryModel) -> Scene3D:
        return build_scene(model, self.wall_thickness)

    def to_gltf(self, model: GeometryModel) -> bytes:
        """Single-file glTF JSON with embedded buffers."""
        files = export_gltf(self.build_scene(model).to_trimesh_scene(), embed_buffers=True)
        for name, data in files.items():
            if name.endswith(".gltf"):
                return data
        raise ExportError("glTF encoder produced no .gltf document")

    def to_glb(self, model: GeometryModel) -> bytes:
        return self.build_scene(model).to_trimesh_scene().export(file_type="glb")

    def to_obj(self, model: GeometryModel) -> bytes:
        exported = self.build_scene(model).to_trimesh().export(file_type="obj")
        return exported.encode("utf-8") if isinstance(exported, str) else exported

    def to_stl(self, model: GeometryModel) -> bytes:
        return scene_to_ascii_stl(self.build_scene(model)).encode("utf-8")

    def to_svg(self, model: GeometryModel) -> bytes:
        """Top-view floor plan without door connectors or compass."""
        projection = project(model, ViewAxis.TOP)
        projection.connectors = []
        projection.compass = None
        return render_svg(projection).encode("utf-8")

    def to_json(self, model: GeometryModel) -> bytes:
        return json.dumps(model.to_dict(), indent=2).encode("utf-8")

    def export(
        self,
        model: Union[GeometryModel, Dict[str, Any]],
        format_name: str,
        project_name: str = "model",
    ) -> ExportResult:
        """
        Export a model.

        Args:
            model: GeometryModel or its wire dictionary
            format_name: One of EXPORT_FORMATS
            project_name: File stem for the download

        Returns:
            ExportResult with content and file name

        Raises:
            ExportError: For unknown formats and empty or invalid models
        """
        fmt = EXPORT_FORMATS.get(format_name.lower())
        if fmt is None:
            raise ExportError(
                f"Unsupported export format '{format_name}'. Must be one of {sorted(EXPORT_FORMATS)}"
            )
        model = coerce_model(model)

        writer = getattr(self, f"to_{fmt.name}")
        content = writer(model)
        filename = f"{project_name}{fmt.suffix}.{fmt.extension}"
        logger.info(f"Exported {len(model.rooms)} room(s) as {fmt.name} ({len(content)} bytes)")
        return ExportResult(content=content, format=fmt, filename=filename)


def export_model(
    model: Union[GeometryModel, Dict[str, Any]],
    format_name: str,
    project_name: str = "model",
) -> ExportResult:
    """Export with default settings."""
    return ModelExporter().export(model, format_name, project_name)
