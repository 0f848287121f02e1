"""Deterministic Three.js scene script for a geometry model."""

import json
import re

from core.geometry import GeometryModel

SCENE_HEADER = """// Generated Three.js code for: {title}
import * as THREE from 'three';
import {{ OrbitControls }} from 'three/examples/jsm/controls/OrbitControls';

const scene = new THREE.Scene();
scene.background = new THREE.Color(0xf0f0f0);

const camera = new THREE.PerspectiveCamera(75, window.innerWidth / window.innerHeight, 0.1, 1000);
camera.position.set({camera_x:.2f}, {camera_y:.2f}, {camera_z:.2f});

const renderer = new THREE.WebGLRenderer({{ antialias: true }});
renderer.setSize(window.innerWidth, window.innerHeight);
renderer.shadowMap.enabled = true;
document.body.appendChild(renderer.domElement);

const controls = new OrbitControls(camera, renderer.domElement);
controls.target.set({center_x:.2f}, 0, {center_z:.2f});
controls.update();

scene.add(new THREE.AmbientLight(0x404040));

const directionalLight = new THREE.DirectionalLight(0xffffff, 0.5);
directionalLight.position.set(10, 10, 10);
directionalLight.castShadow = true;
scene.add(directionalLight);

// x/z is the footprint center, y the floor elevation
function createRoom(name, width, length, height, x, y, z) {{
  const geometry = new THREE.BoxGeometry(width, height, length);
  const edges = new THREE.EdgesGeometry(geometry);
  const wireframe = new THREE.LineSegments(edges, new THREE.LineBasicMaterial({{ color: 0x000000 }}));
  wireframe.position.set(x, y + height / 2, z);
  wireframe.name = name;
  scene.add(wireframe);

  const floor = new THREE.Mesh(
    new THREE.PlaneGeometry(width, length),
    new THREE.MeshStandardMaterial({{ color: 0xcccccc, side: THREE.DoubleSide, transparent: true, opacity: 0.7 }})
  );
  floor.rotation.x = Math.PI / 2;
  floor.position.set(x, y + 0.01, z);
  floor.receiveShadow = true;
  scene.add(floor);

  return {{ wireframe, floor }};
}}
"""

SCENE_FOOTER = """
function animate() {
  requestAnimationFrame(animate);
  controls.update();
  renderer.render(scene, camera);
}

animate();

window.addEventListener('resize', () => {
  camera.aspect = window.innerWidth / window.innerHeight;
  camera.updateProjectionMatrix();
  renderer.setSize(window.innerWidth, window.innerHeight);
});
"""


def _identifier(name: str, index: int) -> str:
    cleaned = re.sub(r"\W+", "_", name).strip("_")
    if not cleaned or cleaned[0].isdigit():
        cleaned = f"room_{cleaned}"
    return f"{cleaned}_{index}"


def build_scene_code(model: GeometryModel, title: str = "Floor plan") -> str:
    """
    Build a self-contained Three.js script that draws every room of a model.

    Args:
        model: Geometry model to visualize
        title: Free-form description placed in the header comment

    Returns:
        JavaScript source
    """
    if model.rooms:
        min_x = min(room.footprint[0] for room in model.rooms)
        min_z = min(room.footprint[1] for room in model.rooms)
        max_x = max(room.footprint[2] for room in model.rooms)
        max_z = max(room.footprint[3] for room in model.rooms)
    else:
        min_x = min_z = max_x = max_z = 0.0

    center_x = (min_x + max_x) / 2
    center_z = (min_z + max_z) / 2
    span = max(max_x - min_x, max_z - min_z, 10.0)

    lines = [SCENE_HEADER.format(
        title=json.dumps(title),
        camera_x=center_x + span,
        camera_y=span,
        camera_z=center_z + span,
        center_x=center_x,
        center_z=center_z,
    )]
    for index, room in enumerate(model.rooms):
        x, y, z = room.position.as_tuple()
        lines.append(
            f"const {_identifier(room.name, index)} = createRoom({json.dumps(room.name)}, "
            f"{room.width:g}, {room.length:g}, {room.height:g}, {x:g}, {y:g}, {z:g});"
        )
    lines.append(SCENE_FOOTER)
    return "\n".join(lines)
