"""Tests for the export and projection routes."""

import json

import pytest
from fastapi.testclient import TestClient

from api.main import app
from api.routes.export import content_disposition, sanitize_filename


@pytest.fixture
def client():
    return TestClient(app)


class TestSanitizeFilename:
    """Tests for download file names."""

    def test_strips_path_components(self):
        assert sanitize_filename("../../etc/passwd") == "passwd"

    def test_strips_control_characters_and_quotes(self):
        assert sanitize_filename('my"house\x00\n') == "myhouse"

    def test_empty_becomes_model(self):
        assert sanitize_filename("") == "model"

    def test_length_limited(self):
        assert len(sanitize_filename("a" * 500)) == 200


class TestExportRoutes:
    """Tests for POST /api/export/{format}."""

    def test_glb_download(self, client, design_data):
        response = client.post("/api/export/glb", json={"modelData": design_data, "projectName": "flat"})

        assert response.status_code == 200
        assert response.headers["content-type"] == "model/gltf-binary"
        assert response.headers["content-disposition"] == 'attachment; filename="flat.glb"'
        assert response.content[:4] == b"glTF"

    def test_stl_download(self, client, design_data):
        response = client.post("/api/export/stl", json={"modelData": design_data})

        assert response.status_code == 200
        assert 'filename="model.stl"' in response.headers["content-disposition"]
        assert response.text.startswith("solid model")

    def test_svg_floorplan_name(self, client, design_data):
        response = client.post("/api/export/svg", json={"modelData": design_data, "projectName": "flat"})

        assert response.status_code == 200
        assert 'filename="flat_floorplan.svg"' in response.headers["content-disposition"]
        assert response.text.count('class="room"') == 2

    def test_json_round_trip(self, client, design_data, model):
        response = client.post("/api/export/json", json={"modelData": design_data})
        assert json.loads(response.content) == model.to_dict()

    def test_unknown_format(self, client, design_data):
        response = client.post("/api/export/dwg", json={"modelData": design_data})
        assert response.status_code == 400

    def test_empty_model(self, client):
        response = client.post("/api/export/obj", json={"modelData": {"rooms": []}})
        assert response.status_code == 422
        assert "empty model" in response.json()["detail"]

    def test_invalid_model(self, client, design_data):
        design_data["rooms"][0]["width"] = -1
        response = client.post("/api/export/gltf", json={"modelData": design_data})
        assert response.status_code == 422

    def test_project_name_is_sanitized(self, client, design_data):
        response = client.post("/api/export/json", json={"modelData": design_data, "projectName": "../secret"})
        assert 'filename="secret.json"' in response.headers["content-disposition"]


class TestProjectionRoutes:
    """Tests for POST /api/export/projection/{view}."""

    def test_top_view_svg(self, client, design_data):
        response = client.post("/api/export/projection/top", json={"modelData": design_data, "projectName": "flat"})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("image/svg+xml")
        assert 'filename="flat_top.svg"' in response.headers["content-disposition"]
        assert 'id="compass"' in response.text

    def test_front_view_png(self, client, design_data):
        response = client.post("/api/export/projection/front?format=png", json={"modelData": design_data})

        assert response.status_code == 200
        assert response.headers["content-type"] == "image/png"
        assert response.content[:4] == b"\x89PNG"
        assert 'filename="model_front.png"' in response.headers["content-disposition"]

    def test_grid_and_dimensions_toggles(self, client, design_data):
        response = client.post(
            "/api/export/projection/left?grid=false&dimensions=false",
            json={"modelData": design_data},
        )

        assert 'id="grid"' not in response.text
        assert 'class="dimension"' not in response.text

    def test_unknown_view(self, client, design_data):
        response = client.post("/api/export/projection/isometric", json={"modelData": design_data})
        assert response.status_code == 422

    def test_unknown_image_format(self, client, design_data):
        response = client.post("/api/export/projection/top?format=pdf", json={"modelData": design_data})
        assert response.status_code == 422

    def test_empty_model(self, client):
        response = client.post("/api/export/projection/top", json={"modelData": {"rooms": []}})
        assert response.status_code == 422

    def test_degenerate_extent(self, client):
        far = {"rooms": [{"name": "far", "width": 1, "length": 4, "height": 3, "position": {"x": 1e16}}]}
        response = client.post("/api/export/projection/top", json={"modelData": far})

        assert response.status_code == 422
        assert "degenerate" in response.json()["detail"]

    def test_far_from_origin_floorplan(self, client):
        far = {"rooms": [{"name": "far", "width": 1e8, "length": 4, "height": 3, "position": {"x": 1e9}}]}
        response = client.post("/api/export/svg", json={"modelData": far})

        assert response.status_code == 200
        assert 'id="grid"' not in response.text


class TestContentDisposition:
    """Tests for download headers with non-ASCII project names."""

    def test_ascii_name_unchanged(self):
        assert content_disposition("flat.glb") == 'attachment; filename="flat.glb"'

    def test_accents_fold_to_ascii(self):
        assert content_disposition("Café.json") == (
            "attachment; filename=\"Cafe.json\"; filename*=UTF-8''Caf%C3%A9.json"
        )

    def test_non_latin_name(self, client, design_data):
        response = client.post("/api/export/json", json={"modelData": design_data, "projectName": "住宅"})

        assert response.status_code == 200
        assert response.headers["content-disposition"] == (
            "attachment; filename=\"model.json\"; filename*=UTF-8''%E4%BD%8F%E5%AE%85.json"
        )

    def test_non_latin_projection_name(self, client, design_data):
        response = client.post("/api/export/projection/top", json={"modelData": design_data, "projectName": "住宅"})

        assert response.status_code == 200
        assert "filename*=UTF-8''%E4%BD%8F%E5%AE%85_top.svg" in response.headers["content-disposition"]
