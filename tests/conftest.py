"""Shared fixtures: sample designs and a scripted model provider."""

import copy
import json

import pytest

from core.geometry import GeometryModel

TWO_ROOM_DESIGN = {
    "rooms": [
        {"name": "living", "type": "living room", "width": 5, "length": 4, "height": 3,
         "x": 0, "y": 0, "z": 0, "connected_to": ["kitchen"]},
        {"name": "kitchen", "type": "kitchen", "width": 3, "length": 4, "height": 3,
         "x": 4, "y": 0, "z": 0, "connected_to": ["living"]},
    ],
    "windows": [
        {"room": "living", "wall": "front", "width": 1.5, "height": 1.2, "position": 0.5},
    ],
    "doors": [
        {"from": "living", "to": "kitchen", "width": 0.9, "height": 2.1},
    ],
}

REQUIREMENTS = {
    "summary": "Small flat with a living room and a kitchen",
    "building_type": "residential",
    "rooms": [
        {"name": "living", "type": "living room", "count": 1},
        {"name": "kitchen", "type": "kitchen", "count": 1},
    ],
    "constraints": ["kitchen next to living room"],
}

SCENE_CODE = "```javascript\nimport * as THREE from 'three';\nconst scene = new THREE.Scene();\n```"


class FakeProvider:
    """Model provider that replays scripted responses in order.

    A response may be a string, an exception instance (raised) or an async
    callable taking the messages (awaited, useful for delays).
    """

    def __init__(self, responses=None, image_description="Two rooms side by side, about 5m x 4m each."):
        self.responses = list(responses or [])
        self.image_description = image_description
        self.calls = []
        self.image_calls = []

    async def complete(self, messages, temperature=0.7, max_tokens=2000, json_mode=False):
        self.calls.append({
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
            "json_mode": json_mode,
        })
        if not self.responses:
            raise AssertionError("FakeProvider ran out of scripted responses")
        response = self.responses.pop(0)
        if isinstance(response, BaseException):
            raise response
        if callable(response):
            response = await response(messages)
        return response

    async def describe_image(self, image_data_url, instruction, max_tokens=1500):
        self.image_calls.append({"image": image_data_url, "instruction": instruction})
        if isinstance(self.image_description, BaseException):
            raise self.image_description
        return self.image_description


@pytest.fixture
def design_data():
    """Wire-format two-room design."""
    return copy.deepcopy(TWO_ROOM_DESIGN)


@pytest.fixture
def model(design_data):
    """Validated two-room model."""
    return GeometryModel.from_dict(design_data)


@pytest.fixture
def one_room_model():
    """Single-room studio."""
    return GeometryModel.from_dict({
        "rooms": [{"name": "studio", "type": "bedroom", "width": 6, "length": 5, "height": 2.7,
                   "x": 0, "y": 0, "z": 0}],
    })


@pytest.fixture
def make_provider():
    """Factory for scripted providers."""
    return FakeProvider


@pytest.fixture
def requirements_json():
    """Interpreter response for the two-room flat."""
    return json.dumps({"requirements": REQUIREMENTS, "is_modification": False})


@pytest.fixture
def design_json(design_data):
    """Designer response for the two-room flat."""
    return json.dumps({"design": design_data})


@pytest.fixture
def scene_code():
    """Renderer response wrapped in a markdown fence."""
    return SCENE_CODE


@pytest.fixture
def happy_provider(requirements_json, design_json, scene_code):
    """Provider scripted for one successful generation."""
    return FakeProvider([requirements_json, design_json, scene_code])
