"""HTTP client for the generation stream, with a placeholder fallback."""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Callable, Dict, List, Optional

import httpx

from core.agents import build_scene_code
from core.errors import TransportError
from core.geometry import placeholder_model

from .types import CADResult, StreamEvent

logger = logging.getLogger(__name__)

DEFAULT_PROMPT = "Generate a CAD model based on the provided inputs"


@dataclass
class GenerationOutcome:
    """What a caller ends up with after one streamed generation."""

    result: Optional[Dict[str, Any]] = None  # CADResult wire dict
    fallback: bool = False  # result is the offline placeholder
    error: Optional[str] = None
    events: List[StreamEvent] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.result is not None and not self.fallback


def placeholder_result(prompt: str) -> CADResult:
    """Deterministic CAD result used when the service cannot be reached."""
    model = placeholder_model()
    return CADResult(
        requirements={"summary": "Placeholder floor plan", "building_type": "residential"},
        model_data=model.to_dict(),
        code=build_scene_code(model, prompt or "Floor plan from input"),
        original_prompt=prompt,
    )


class DesignStreamClient:
    """Consumes ``/api/cad/generate-stream`` over HTTP."""

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        timeout: float = 300.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        path: str = "/api/cad/generate-stream",
    ):
        self.base_url = base_url
        self.timeout = timeout
        self.transport = transport
        self.path = path

    async def stream(self, payload: dict) -> AsyncIterator[StreamEvent]:
        """
        Post a generation request and yield events as frames arrive.

        Raises:
            TransportError: On connection, timeout or non-2xx HTTP failures
        """
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self.transport,
            ) as client:
                async with client.stream("POST", self.path, json=payload) as response:
                    if response.status_code >= 400:
                        body = (await response.aread()).decode("utf-8", errors="replace")
                        raise TransportError(f"HTTP {response.status_code}: {body[:200]}")
                    async for line in response.aiter_lines():
                        if not line.startswith("data:"):
                            continue
                        try:
                            frame = json.loads(line[len("data:"):].strip())
                        except json.JSONDecodeError:
                            logger.warning(f"Skipping malformed frame: {line[:100]}")
                            continue
                        yield StreamEvent.from_dict(frame)
        except httpx.HTTPError as e:
            raise TransportError(f"Stream request failed: {e}") from e

    async def generate_with_fallback(
        self,
        prompt: Optional[str] = None,
        sketch_data: Optional[str] = None,
        photo_data: Optional[str] = None,
        conversation_history: Optional[List[dict]] = None,
        current_model: Optional[dict] = None,
        on_event: Optional[Callable[[StreamEvent], None]] = None,
    ) -> GenerationOutcome:
        """
        Run one generation, degrading to the placeholder model on hard failure.

        The placeholder is used when the stream fails or ends without a
        terminal frame. An ``error`` frame is a real answer from the service
        and is returned as-is, without a fallback.
        """
        payload = {"prompt": prompt or DEFAULT_PROMPT}
        if sketch_data:
            payload["sketchData"] = sketch_data
        if photo_data:
            payload["photoData"] = photo_data
        if conversation_history:
            payload["conversationHistory"] = conversation_history
        if current_model:
            payload["currentModel"] = current_model

        outcome = GenerationOutcome()
        failure = None
        events = self.stream(payload)
        try:
            async for event in events:
                outcome.events.append(event)
                if on_event is not None:
                    on_event(event)
                if event.type == "complete":
                    outcome.result = event.data
                    return outcome
                if event.type == "error":
                    outcome.error = event.data.get("error", "Unknown error")
                    return outcome
            failure = "stream ended without a terminal event"
        except TransportError as e:
            failure = str(e)
        finally:
            await events.aclose()

        logger.warning(f"Generation stream failed ({failure}); using placeholder model")
        outcome.result = placeholder_result(payload["prompt"]).to_dict()
        outcome.fallback = True
        outcome.error = failure
        return outcome
