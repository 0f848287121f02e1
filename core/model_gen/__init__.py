"""3D export module for Sketch2CAD.

This module turns a GeometryModel into axis-aligned box geometry (floor,
ceiling and four walls per room, plus window panes) and serializes it as
glTF, GLB, OBJ and ASCII STL. SVG floor plans and JSON are exported from
the same entry point.

Usage:
    from core.model_gen import ModelExporter

    result = ModelExporter().export(model, "glb", project_name="house")
    open(result.filename, "wb").write(result.content)
"""

from .exporter import EXPORT_FORMATS, ExportFormat, ExportResult, ModelExporter, coerce_model, export_model
from .shell_builder import WALL_THICKNESS, ShellBuilder, build_scene
from .stl import scene_to_ascii_stl, triangle_normal
from .types import Mesh3D, Scene3D

__all__ = [
    # Main API
    "ModelExporter",
    "export_model",
    "coerce_model",
    "EXPORT_FORMATS",
    "ExportFormat",
    "ExportResult",
    # Box soup
    "ShellBuilder",
    "build_scene",
    "WALL_THICKNESS",
    "Scene3D",
    "Mesh3D",
    # STL
    "scene_to_ascii_stl",
    "triangle_normal",
]
