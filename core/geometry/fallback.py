"""Deterministic placeholder model for the degraded (offline) mode."""

from .types import GeometryModel

PLACEHOLDER_MODEL_DATA = {
    "rooms": [
        {"name": "living", "width": 5, "length": 7, "height": 3, "x": 0, "y": 0, "z": 0,
         "connected_to": ["kitchen", "hallway"], "type": "living room"},
        {"name": "kitchen", "width": 4, "length": 4, "height": 3, "x": 5, "y": 0, "z": 0,
         "connected_to": ["living", "dining"], "type": "kitchen"},
        {"name": "dining", "width": 4, "length": 5, "height": 3, "x": 5, "y": 0, "z": 4,
         "connected_to": ["kitchen"], "type": "dining room"},
        {"name": "hallway", "width": 2, "length": 5, "height": 3, "x": 0, "y": 0, "z": 7,
         "connected_to": ["living", "bedroom1", "bedroom2", "bathroom"], "type": "hallway"},
        {"name": "bedroom1", "width": 4, "length": 4, "height": 3, "x": -4, "y": 0, "z": 7,
         "connected_to": ["hallway"], "type": "bedroom"},
        {"name": "bedroom2", "width": 4, "length": 4, "height": 3, "x": 2, "y": 0, "z": 7,
         "connected_to": ["hallway"], "type": "bedroom"},
        {"name": "bathroom", "width": 3, "length": 2, "height": 3, "x": 0, "y": 0, "z": 12,
         "connected_to": ["hallway"], "type": "bathroom"},
    ],
    "windows": [
        {"room": "living", "wall": "south", "width": 2, "height": 1.5, "position": 0.5},
        {"room": "kitchen", "wall": "east", "width": 1.5, "height": 1.2, "position": 0.7},
        {"room": "bedroom1", "wall": "west", "width": 1.5, "height": 1.2, "position": 0.5},
        {"room": "bedroom2", "wall": "east", "width": 1.5, "height": 1.2, "position": 0.5},
    ],
    "doors": [
        {"from": "living", "to": "kitchen", "width": 1.2, "height": 2.1},
        {"from": "living", "to": "hallway", "width": 1.2, "height": 2.1},
        {"from": "kitchen", "to": "dining", "width": 1.2, "height": 2.1},
        {"from": "hallway", "to": "bedroom1", "width": 0.9, "height": 2.1},
        {"from": "hallway", "to": "bedroom2", "width": 0.9, "height": 2.1},
        {"from": "hallway", "to": "bathroom", "width": 0.8, "height": 2.1},
    ],
}


def placeholder_model() -> GeometryModel:
    """Build the fixed seven-room house used when generation is unreachable."""
    return GeometryModel.from_dict(PLACEHOLDER_MODEL_DATA)
