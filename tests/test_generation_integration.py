"""Live generation tests against a configured Azure OpenAI deployment."""

import json

import pytest
from fastapi.testclient import TestClient

from api.main import app
from core.geometry import GeometryModel


@pytest.fixture
def client():
    """Create test client."""
    return TestClient(app)


def provider_configured(client) -> bool:
    """Check if a model provider is configured."""
    return client.get("/api/cad/status").json().get("provider_configured", False)


def stream(client, path, payload):
    with client.stream("POST", path, json=payload) as response:
        assert response.status_code == 200
        return [
            json.loads(line[len("data: "):])
            for line in response.iter_lines()
            if line.startswith("data: ")
        ]


@pytest.mark.integration
class TestLiveGeneration:
    """Full pipeline runs with a real model provider."""

    def test_two_bedroom_flat(self, client):
        """Test generating a small flat from text."""
        if not provider_configured(client):
            pytest.skip("Azure OpenAI not configured")

        events = stream(client, "/api/cad/generate-stream", {
            "prompt": "A two bedroom flat with an open kitchen and one bathroom",
        })

        assert events[-1]["type"] == "complete", events[-1]
        model = GeometryModel.from_dict(events[-1]["data"]["modelData"])
        assert len(model.rooms) >= 3

    def test_refine_keeps_locked_room(self, client):
        """Test refinement with an enforced lock."""
        if not provider_configured(client):
            pytest.skip("Azure OpenAI not configured")

        current = {
            "rooms": [
                {"name": "living", "width": 5, "length": 4, "height": 3, "x": 0, "y": 0, "z": 0},
                {"name": "kitchen", "width": 3, "length": 4, "height": 3, "x": 4, "y": 0, "z": 0},
            ],
            "windows": [],
            "doors": [{"from": "living", "to": "kitchen"}],
        }
        events = stream(client, "/api/cad/refine", {
            "currentModel": current,
            "refinementPrompt": "Make the living room two meters wider",
            "lockedElements": ["kitchen"],
            "enforceLocks": True,
        })

        assert events[-1]["type"] == "complete", events[-1]
        refined = GeometryModel.from_dict(events[-1]["data"]["modelData"])
        assert refined.get_room("kitchen") == GeometryModel.from_dict(current).get_room("kitchen")
