"""Tests for the streaming orchestrator state machine."""

import asyncio
import json

import pytest

from core.errors import DesignError
from core.pipeline import PipelineConfig, StreamingOrchestrator, collect_events


def percentages(events):
    return [event.percentage for event in events if event.type == "progress"]


class TestSuccessfulRun:
    """Tests for a run where every stage succeeds."""

    @pytest.mark.asyncio
    async def test_checkpoints_then_complete(self, happy_provider):
        orchestrator = StreamingOrchestrator.from_provider(happy_provider)
        events = await collect_events(orchestrator.process_design_request_stream("two rooms"))

        assert [e.type for e in events] == ["progress"] * 6 + ["complete"]
        assert percentages(events) == [0, 33, 33, 66, 66, 90]
        assert events[-1].percentage == 100

    @pytest.mark.asyncio
    async def test_progress_is_monotonic(self, happy_provider):
        orchestrator = StreamingOrchestrator.from_provider(happy_provider)
        events = await collect_events(orchestrator.process_design_request_stream("two rooms"))

        values = [e.percentage for e in events]
        assert values == sorted(values)
        assert values.count(100) == 1

    @pytest.mark.asyncio
    async def test_stages_and_agents(self, happy_provider):
        orchestrator = StreamingOrchestrator.from_provider(happy_provider)
        events = await collect_events(orchestrator.process_design_request_stream("two rooms"))

        stages = [e.data["stage"] for e in events if e.type == "progress"]
        assert stages == ["interpreting", "interpreting", "designing", "designing", "rendering", "rendering"]
        assert events[0].data["currentAgent"] == "Interpreter Agent"
        assert events[2].data["currentAgent"] == "Designer Agent"
        assert events[4].data["currentAgent"] == "Renderer Agent"

    @pytest.mark.asyncio
    async def test_room_counts_reported(self, happy_provider):
        orchestrator = StreamingOrchestrator.from_provider(happy_provider)
        events = await collect_events(orchestrator.process_design_request_stream("two rooms"))

        designed = events[3].data
        assert designed["message"] == "Generated 2 rooms"
        assert designed["roomsGenerated"] == 2
        assert designed["totalRooms"] == 2
        assert "roomsGenerated" not in events[0].data

    @pytest.mark.asyncio
    async def test_complete_payload(self, happy_provider, design_data):
        orchestrator = StreamingOrchestrator.from_provider(happy_provider)
        events = await collect_events(orchestrator.process_design_request_stream("two rooms"))

        result = events[-1].data
        assert result["originalPrompt"] == "two rooms"
        assert result["sketchAnalysisPerformed"] is False
        assert result["code"].startswith("import * as THREE")
        assert [r["name"] for r in result["modelData"]["rooms"]] == ["living", "kitchen"]
        assert result["requirements"]["summary"].startswith("Small flat")
        assert isinstance(result["processingTimeMs"], int)
        assert result["percentage"] == 100
        assert events[-1].percentage == 100

    @pytest.mark.asyncio
    async def test_complete_payload_is_json_serializable(self, happy_provider):
        orchestrator = StreamingOrchestrator.from_provider(happy_provider)
        events = await collect_events(orchestrator.process_design_request_stream("two rooms"))
        json.dumps(events[-1].to_dict())

    @pytest.mark.asyncio
    async def test_sketch_analysis_flag(self, happy_provider):
        orchestrator = StreamingOrchestrator.from_provider(happy_provider)
        events = await collect_events(orchestrator.process_design_request_stream(
            "from my sketch", sketch_data="data:image/png;base64,AAAA"
        ))
        assert events[-1].data["sketchAnalysisPerformed"] is True


class TestFailures:
    """Tests for stage failures."""

    @pytest.mark.asyncio
    async def test_interpreter_failure(self, make_provider):
        orchestrator = StreamingOrchestrator.from_provider(make_provider(["not json"]))
        events = await collect_events(orchestrator.process_design_request_stream("two rooms"))

        assert [e.type for e in events] == ["progress", "error"]
        assert events[-1].data["stage"] == "interpreting"

    @pytest.mark.asyncio
    async def test_door_to_unknown_room_is_design_error(self, make_provider, requirements_json, design_data):
        design_data["doors"].append({"from": "living", "to": "garage"})
        provider = make_provider([requirements_json, json.dumps({"design": design_data})])
        events = await collect_events(
            StreamingOrchestrator.from_provider(provider).process_design_request_stream("two rooms")
        )

        assert events[-1].type == "error"
        assert events[-1].data["stage"] == "designing"
        assert "garage" in events[-1].data["error"]
        assert not any(e.type == "complete" for e in events)
        assert max(percentages(events)) == 33

    @pytest.mark.asyncio
    async def test_renderer_failure(self, make_provider, requirements_json, design_json):
        provider = make_provider([requirements_json, design_json, ""])
        events = await collect_events(
            StreamingOrchestrator.from_provider(provider).process_design_request_stream("two rooms")
        )

        assert percentages(events) == [0, 33, 33, 66, 66]
        assert events[-1].type == "error"
        assert events[-1].data["stage"] == "rendering"

    @pytest.mark.asyncio
    async def test_exactly_one_terminal_event(self, make_provider):
        provider = make_provider([RuntimeError("provider down")])
        events = await collect_events(
            StreamingOrchestrator.from_provider(provider).process_design_request_stream("two rooms")
        )
        assert sum(1 for e in events if e.is_terminal) == 1

    @pytest.mark.asyncio
    async def test_unexpected_exception_becomes_error_event(self, happy_provider):
        orchestrator = StreamingOrchestrator.from_provider(happy_provider)

        def broken_hook(design):
            raise KeyError("boom")

        events = await collect_events(
            orchestrator.process_design_request_stream("two rooms", post_design=broken_hook)
        )
        assert events[-1].type == "error"
        assert events[-1].data["stage"] == "designing"

    @pytest.mark.asyncio
    async def test_post_design_hook_can_reject(self, happy_provider):
        orchestrator = StreamingOrchestrator.from_provider(happy_provider)

        def rejecting_hook(design):
            raise DesignError("locked room conflict")

        events = await collect_events(
            orchestrator.process_design_request_stream("two rooms", post_design=rejecting_hook)
        )
        assert events[-1].data == {"error": "locked room conflict", "stage": "designing"}


class TestTimeoutsAndCancellation:
    """Tests for stage timeouts and consumer cancellation."""

    @pytest.mark.asyncio
    async def test_stage_timeout(self, make_provider):
        async def never_answers(messages):
            await asyncio.sleep(10)
            return "{}"

        orchestrator = StreamingOrchestrator.from_provider(
            make_provider([never_answers]),
            config=PipelineConfig(stage_timeout_seconds=0.05),
        )
        events = await collect_events(orchestrator.process_design_request_stream("two rooms"))

        assert events[-1].type == "error"
        assert events[-1].data["stage"] == "interpreting"
        assert "timed out" in events[-1].data["error"]

    @pytest.mark.asyncio
    async def test_cancellation_is_not_an_error_event(self, make_provider):
        started = asyncio.Event()
        cancelled = asyncio.Event()

        async def slow(messages):
            started.set()
            try:
                await asyncio.sleep(10)
            except asyncio.CancelledError:
                cancelled.set()
                raise
            return "{}"

        orchestrator = StreamingOrchestrator.from_provider(make_provider([slow]))
        seen = []

        async def consume():
            async for event in orchestrator.process_design_request_stream("two rooms"):
                seen.append(event)

        task = asyncio.create_task(consume())
        await started.wait()
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert cancelled.is_set()
        assert [e.type for e in seen] == ["progress"]
