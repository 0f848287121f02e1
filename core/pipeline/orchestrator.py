"""Streaming orchestrator: interpret, design and render with progress events."""

import asyncio
import logging
import time
from typing import Any, AsyncIterator, Awaitable, Callable, List, Optional, Type, TypeVar

from core.agents import (
    DesignerAgent,
    DesignInput,
    InterpretationInput,
    InterpreterAgent,
    ModelProvider,
    RenderInput,
    RendererAgent,
)
from core.errors import DesignError, InterpretationError, RenderError, StageError
from core.geometry import GeometryModel

from .config import PipelineConfig
from .types import CADResult, GenerationProgress, GenerationStage, StreamEvent

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Hook run on the designed model before the designing checkpoint is reported
PostDesignHook = Callable[[GeometryModel], GeometryModel]


class StreamingOrchestrator:
    """
    Runs the three stage agents in sequence and yields stream events.

    A run emits progress checkpoints at 0, 33, 33, 66, 66 and 90 percent and
    then exactly one terminal event: ``complete`` with the CAD result, or
    ``error`` with the failing stage. Each agent call is bounded by the
    configured stage timeout. Cancelling the consumer cancels the in-flight
    agent call; cancellation is never reported as an error event.
    """

    def __init__(
        self,
        interpreter: InterpreterAgent,
        designer: DesignerAgent,
        renderer: RendererAgent,
        config: Optional[PipelineConfig] = None,
    ):
        self.interpreter = interpreter
        self.designer = designer
        self.renderer = renderer
        self.config = config or PipelineConfig()

    @classmethod
    def from_provider(
        cls,
        provider: ModelProvider,
        config: Optional[PipelineConfig] = None,
    ) -> "StreamingOrchestrator":
        """Build an orchestrator whose three agents share one model provider."""
        return cls(
            InterpreterAgent(provider),
            DesignerAgent(provider),
            RendererAgent(provider),
            config=config,
        )

    async def _run_stage(
        self,
        agent_name: str,
        call: Awaitable[T],
        error_cls: Type[StageError],
    ) -> T:
        """Await one agent call under the stage timeout."""
        started = time.monotonic()
        try:
            result = await asyncio.wait_for(call, timeout=self.config.stage_timeout_seconds)
        except asyncio.TimeoutError as e:
            logger.error(f"{agent_name} timed out after {self.config.stage_timeout_seconds}s")
            raise error_cls(
                f"{agent_name} timed out after {self.config.stage_timeout_seconds:g}s",
                retryable=True,
            ) from e
        logger.info(f"{agent_name} completed in {(time.monotonic() - started) * 1000:.0f}ms")
        return result

    async def process_design_request_stream(
        self,
        prompt: str,
        sketch_data: Optional[str] = None,
        photo_data: Optional[str] = None,
        conversation_history: Optional[List[dict]] = None,
        current_model: Optional[Any] = None,
        is_refinement: bool = False,
        post_design: Optional[PostDesignHook] = None,
    ) -> AsyncIterator[StreamEvent]:
        """
        Run one generation and yield its events.

        Args:
            prompt: User's text request
            sketch_data: Optional sketch image as a data URL
            photo_data: Optional photo as a data URL
            conversation_history: Prior user/assistant turns
            current_model: Model currently on screen (GeometryModel or wire dict)
            is_refinement: Always treat a usable current_model as the base design
            post_design: Hook applied to the designed model; may raise DesignError

        Yields:
            StreamEvent progress events followed by one terminal event
        """
        started = time.monotonic()
        stage = GenerationStage.INTERPRETING

        try:
            yield self._progress(stage, self.interpreter.name, "Analyzing your design requirements...", 0)
            interpretation = await self._run_stage(
                self.interpreter.name,
                self.interpreter.execute(InterpretationInput(
                    prompt=prompt,
                    sketch_data=sketch_data,
                    photo_data=photo_data,
                    conversation_history=list(conversation_history or []),
                    current_model=current_model,
                    is_refinement=is_refinement,
                )),
                InterpretationError,
            )
            yield self._progress(stage, self.interpreter.name, "Requirements understood", 33)

            stage = GenerationStage.DESIGNING
            yield self._progress(stage, self.designer.name, "Creating architectural layout...", 33)
            design_result = await self._run_stage(
                self.designer.name,
                self.designer.execute(DesignInput(
                    requirements=interpretation.requirements,
                    current_model=interpretation.current_model,
                    is_modification=interpretation.is_modification,
                )),
                DesignError,
            )
            design = design_result.design
            if post_design is not None:
                design = post_design(design)
            room_count = len(design.rooms)
            yield self._progress(
                stage,
                self.designer.name,
                f"Generated {room_count} room{'s' if room_count != 1 else ''}",
                66,
                rooms_generated=room_count,
                total_rooms=room_count,
            )

            stage = GenerationStage.RENDERING
            yield self._progress(stage, self.renderer.name, "Generating 3D visualization code...", 66)
            render_output = await self._run_stage(
                self.renderer.name,
                self.renderer.execute(RenderInput(design=design, requirements=interpretation.requirements)),
                RenderError,
            )
            yield self._progress(stage, self.renderer.name, "Finalizing visualization...", 90)

            processing_ms = int((time.monotonic() - started) * 1000)
            logger.info(f"Generation complete in {processing_ms}ms ({room_count} rooms)")
            yield StreamEvent.complete(CADResult(
                requirements=interpretation.requirements.to_dict(),
                model_data=design.to_dict(),
                code=render_output.code,
                original_prompt=prompt,
                sketch_analysis_performed=interpretation.sketch_analysis_performed,
                processing_time_ms=processing_ms,
            ))

        except StageError as e:
            logger.error(f"Generation failed at {e.stage or stage.value}: {e}")
            yield StreamEvent.error(str(e), e.stage or stage.value)
        except Exception as e:
            logger.exception(f"Unexpected error during {stage.value}")
            yield StreamEvent.error(str(e) or type(e).__name__, stage.value)

    def _progress(
        self,
        stage: GenerationStage,
        agent: str,
        message: str,
        percentage: int,
        rooms_generated: Optional[int] = None,
        total_rooms: Optional[int] = None,
    ) -> StreamEvent:
        return StreamEvent.progress(GenerationProgress(
            stage=stage,
            current_agent=agent,
            message=message,
            percentage=percentage,
            rooms_generated=rooms_generated,
            total_rooms=total_rooms,
        ))


async def collect_events(events: AsyncIterator[StreamEvent]) -> List[StreamEvent]:
    """Drain an event iterator into a list."""
    return [event async for event in events]
