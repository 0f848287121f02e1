"""Data types for 3D box-soup generation."""

from dataclasses import dataclass, field
from typing import Dict, List, Tuple

import numpy as np
import trimesh

Point3D = Tuple[float, float, float]
RGBA = Tuple[int, int, int, int]

# Element colors
FLOOR_COLOR: RGBA = (139, 111, 71, 255)
WALL_COLOR: RGBA = (178, 84, 58, 255)
CEILING_COLOR: RGBA = (248, 248, 248, 255)
WINDOW_COLOR: RGBA = (173, 216, 230, 102)  # translucent glass


@dataclass
class Mesh3D:
    """Individual mesh with vertices, faces, and metadata."""

    name: str
    vertices: np.ndarray = field(default_factory=lambda: np.zeros((0, 3)))
    faces: np.ndarray = field(default_factory=lambda: np.zeros((0, 3), dtype=np.int64))
    color: RGBA = (200, 200, 200, 255)
    element_type: str = "generic"  # floor, ceiling, wall, window
    source_id: str = ""  # Room name the mesh belongs to

    @property
    def triangle_count(self) -> int:
        return len(self.faces)

    def triangles(self) -> np.ndarray:
        """Triangle corners as an (n, 3, 3) array, in face winding order."""
        return self.vertices[self.faces]

    def to_trimesh(self) -> trimesh.Trimesh:
        """Convert to trimesh object."""
        if self.vertices.size == 0 or self.faces.size == 0:
            return trimesh.Trimesh()
        mesh = trimesh.Trimesh(vertices=self.vertices, faces=self.faces, process=False)
        mesh.visual.face_colors = self.color
        mesh.metadata["name"] = self.name
        mesh.metadata["element_type"] = self.element_type
        mesh.metadata["source_id"] = self.source_id
        return mesh

    @classmethod
    def from_trimesh(
        cls,
        mesh: trimesh.Trimesh,
        name: str,
        color: RGBA = (200, 200, 200, 255),
        element_type: str = "generic",
        source_id: str = "",
    ) -> "Mesh3D":
        """Create Mesh3D from trimesh object."""
        return cls(
            name=name,
            vertices=np.array(mesh.vertices, dtype=np.float64),
            faces=np.array(mesh.faces, dtype=np.int64),
            color=color,
            element_type=element_type,
            source_id=source_id,
        )


@dataclass
class Scene3D:
    """Box soup for a whole model, grouped by element type."""

    meshes: Dict[str, List[Mesh3D]] = field(default_factory=dict)
    bounds: Tuple[Point3D, Point3D] = ((0.0, 0.0, 0.0), (0.0, 0.0, 0.0))
    metadata: dict = field(default_factory=dict)

    def add_mesh(self, mesh: Mesh3D) -> None:
        """Add a mesh to the scene, grouped by element_type."""
        if mesh.element_type not in self.meshes:
            self.meshes[mesh.element_type] = []
        self.meshes[mesh.element_type].append(mesh)
        self._update_bounds()

    def _update_bounds(self) -> None:
        """Recalculate scene bounding box."""
        all_vertices = [m.vertices for m in self.get_all_meshes() if m.vertices.size > 0]
        if not all_vertices:
            self.bounds = ((0.0, 0.0, 0.0), (0.0, 0.0, 0.0))
            return

        combined = np.vstack(all_vertices)
        min_pt = tuple(float(v) for v in combined.min(axis=0))
        max_pt = tuple(float(v) for v in combined.max(axis=0))
        self.bounds = (min_pt, max_pt)

    def get_by_type(self, element_type: str) -> List[Mesh3D]:
        """Get all meshes of a specific element type."""
        return self.meshes.get(element_type, [])

    def get_by_source(self, source_id: str) -> List[Mesh3D]:
        """Get all meshes belonging to one room."""
        return [mesh for mesh in self.get_all_meshes() if mesh.source_id == source_id]

    def get_all_meshes(self) -> List[Mesh3D]:
        """Get flat list of all meshes."""
        result = []
        for mesh_list in self.meshes.values():
            result.extend(mesh_list)
        return result

    @property
    def triangle_count(self) -> int:
        return sum(mesh.triangle_count for mesh in self.get_all_meshes())

    def to_trimesh_scene(self) -> trimesh.Scene:
        """Convert to trimesh Scene for export."""
        scene = trimesh.Scene()
        for element_type, mesh_list in self.meshes.items():
            # Combine all meshes of same type
            trimeshes = [m.to_trimesh() for m in mesh_list if m.vertices.size > 0]
            if trimeshes:
                combined = trimesh.util.concatenate(trimeshes)
                scene.add_geometry(combined, node_name=element_type, geom_name=element_type)
        return scene

    def to_trimesh(self) -> trimesh.Trimesh:
        """Concatenate every mesh into one trimesh object."""
        trimeshes = [m.to_trimesh() for m in self.get_all_meshes() if m.vertices.size > 0]
        return trimesh.util.concatenate(trimeshes)
