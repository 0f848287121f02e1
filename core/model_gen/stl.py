"""ASCII STL writer for box-soup scenes."""

from typing import List

import numpy as np

from .types import Scene3D

STL_HEADER = "solid model\n"
STL_FOOTER = "endsolid model\n"


def triangle_normal(v1: np.ndarray, v2: np.ndarray, v3: np.ndarray) -> np.ndarray:
    """Unit normal from the triangle winding; zero for degenerate triangles."""
    normal = np.cross(v2 - v1, v3 - v1)
    length = np.linalg.norm(normal)
    if length < 1e-12:
        return np.zeros(3)
    return normal / length


def _vec(values) -> str:
    return " ".join(f"{float(v):.9g}" for v in values)


def scene_to_ascii_stl(scene: Scene3D) -> str:
    """
    Serialize every triangle of a scene as ASCII STL.

    One ``facet`` block is written per triangle, in mesh order, with the
    normal of ``(v2 - v1) x (v3 - v1)``.
    """
    lines: List[str] = [STL_HEADER]
    for mesh in scene.get_all_meshes():
        for v1, v2, v3 in mesh.triangles():
            lines.append(
                f"facet normal {_vec(triangle_normal(v1, v2, v3))}\n"
                "outer loop\n"
                f"vertex {_vec(v1)}\n"
                f"vertex {_vec(v2)}\n"
                f"vertex {_vec(v3)}\n"
                "endloop\n"
                "endfacet\n"
            )
    lines.append(STL_FOOTER)
    return "".join(lines)
