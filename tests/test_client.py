"""Tests for the streaming HTTP client and its placeholder fallback."""

import json
from unittest.mock import patch

import httpx
import pytest

from api.main import app
from core.agents import build_scene_code
from core.geometry import placeholder_model
from core.pipeline import DesignStreamClient, StreamingOrchestrator, placeholder_result


def sse_body(*frames):
    return "".join(f"data: {json.dumps(frame)}\n\n" for frame in frames)


def mock_client(handler):
    return DesignStreamClient(base_url="http://testserver", transport=httpx.MockTransport(handler))


def asgi_client():
    return DesignStreamClient(base_url="http://testserver", transport=httpx.ASGITransport(app=app))


class TestPlaceholderResult:
    """Tests for placeholder_result."""

    def test_deterministic_placeholder(self):
        result = placeholder_result("a house")

        assert len(result.model_data["rooms"]) == 7
        assert result.original_prompt == "a house"
        assert result.code == build_scene_code(placeholder_model(), "a house")
        assert result.to_dict() == placeholder_result("a house").to_dict()


class TestAgainstApp:
    """End-to-end through the FastAPI app."""

    @pytest.mark.asyncio
    async def test_successful_generation(self, happy_provider):
        seen = []
        orchestrator = StreamingOrchestrator.from_provider(happy_provider)
        with patch("api.routes.design.get_orchestrator", return_value=orchestrator):
            outcome = await asgi_client().generate_with_fallback("two rooms", on_event=seen.append)

        assert outcome.succeeded
        assert outcome.fallback is False
        assert [r["name"] for r in outcome.result["modelData"]["rooms"]] == ["living", "kitchen"]
        assert [e.percentage for e in seen] == [0, 33, 33, 66, 66, 90, 100]

    @pytest.mark.asyncio
    async def test_service_unavailable_falls_back(self):
        with patch("api.routes.design.get_orchestrator", return_value=None):
            outcome = await asgi_client().generate_with_fallback("two rooms")

        assert outcome.fallback is True
        assert not outcome.succeeded
        assert "503" in outcome.error
        assert len(outcome.result["modelData"]["rooms"]) == 7

    @pytest.mark.asyncio
    async def test_error_event_is_not_replaced(self, make_provider, requirements_json):
        provider = make_provider([requirements_json, RuntimeError("designer down")])
        orchestrator = StreamingOrchestrator.from_provider(provider)
        with patch("api.routes.design.get_orchestrator", return_value=orchestrator):
            outcome = await asgi_client().generate_with_fallback("two rooms")

        assert outcome.fallback is False
        assert outcome.result is None
        assert "designer down" in outcome.error
        assert outcome.events[-1].data["stage"] == "designing"


class TestStreamFailures:
    """Tests for transport-level failures."""

    @pytest.mark.asyncio
    async def test_stream_without_terminal_event(self):
        progress = {"type": "progress", "data": {"stage": "interpreting", "percentage": 0}}
        client = mock_client(lambda request: httpx.Response(200, text=sse_body(progress)))

        outcome = await client.generate_with_fallback("two rooms")

        assert outcome.fallback is True
        assert outcome.error == "stream ended without a terminal event"
        assert [e.type for e in outcome.events] == ["progress"]

    @pytest.mark.asyncio
    async def test_connection_refused(self):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        outcome = await mock_client(refuse).generate_with_fallback("two rooms")

        assert outcome.fallback is True
        assert "connection refused" in outcome.error

    @pytest.mark.asyncio
    async def test_malformed_frames_skipped(self):
        body = "data: {not json\n\n" + sse_body({"type": "complete", "data": {"code": "x"}})
        outcome = await mock_client(lambda request: httpx.Response(200, text=body)).generate_with_fallback()

        assert outcome.succeeded
        assert outcome.result == {"code": "x"}

    @pytest.mark.asyncio
    async def test_payload_uses_wire_names(self):
        captured = {}

        def handler(request):
            captured.update(json.loads(request.content))
            return httpx.Response(200, text=sse_body({"type": "complete", "data": {}}))

        await mock_client(handler).generate_with_fallback(
            sketch_data="data:image/png;base64,AAAA",
            conversation_history=[{"role": "user", "content": "hi"}],
        )

        assert captured["prompt"] == "Generate a CAD model based on the provided inputs"
        assert captured["sketchData"] == "data:image/png;base64,AAAA"
        assert captured["conversationHistory"] == [{"role": "user", "content": "hi"}]
        assert "photoData" not in captured
