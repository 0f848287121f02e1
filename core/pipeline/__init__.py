"""Generation pipeline for Sketch2CAD.

Runs the interpreter, designer and renderer agents in sequence and relays
their progress as Server-Sent Events.

Usage:
    from core.pipeline import StreamingOrchestrator, sse_frames

    orchestrator = StreamingOrchestrator.from_provider(provider)
    frames = sse_frames(orchestrator.process_design_request_stream("two bedroom flat"))
"""

from .client import DesignStreamClient, GenerationOutcome, placeholder_result
from .config import PipelineConfig
from .orchestrator import StreamingOrchestrator, collect_events
from .refinement import (
    RefinementRequest,
    build_refinement_prompt,
    enforce_locked_rooms,
    refine_stream,
)
from .stream import SSE_HEADERS, encode_frame, sse_frames, stream_events
from .types import CADResult, GenerationProgress, GenerationStage, StreamEvent

__all__ = [
    "PipelineConfig",
    "StreamingOrchestrator",
    "collect_events",
    "RefinementRequest",
    "build_refinement_prompt",
    "enforce_locked_rooms",
    "refine_stream",
    "stream_events",
    "sse_frames",
    "encode_frame",
    "SSE_HEADERS",
    "DesignStreamClient",
    "GenerationOutcome",
    "placeholder_result",
    "CADResult",
    "GenerationProgress",
    "GenerationStage",
    "StreamEvent",
]
