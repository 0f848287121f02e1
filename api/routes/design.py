"""Design generation and refinement routes (Server-Sent Events)."""

import logging
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from core.geometry import GeometryModel, check_compliance, describe_validation_error, estimate_cost
from core.geometry.compliance import DEFAULT_BASE_RATE
from core.pipeline import (
    SSE_HEADERS,
    PipelineConfig,
    RefinementRequest,
    StreamingOrchestrator,
    refine_stream,
    sse_frames,
)
from core.pipeline.client import DEFAULT_PROMPT

logger = logging.getLogger(__name__)

router = APIRouter()

_orchestrator: Optional[StreamingOrchestrator] = None
_pipeline_config: Optional[PipelineConfig] = None


def get_pipeline_config() -> PipelineConfig:
    """Get or load the pipeline configuration."""
    global _pipeline_config
    if _pipeline_config is None:
        _pipeline_config = PipelineConfig.from_env()
    return _pipeline_config


def get_orchestrator() -> Optional[StreamingOrchestrator]:
    """Get or create the orchestrator; None when no model provider is configured."""
    global _orchestrator
    if _orchestrator is None:
        try:
            from core.azure import AzureConfig, AzureOpenAIService
            config = AzureConfig.from_env()
            if config.is_openai_configured():
                _orchestrator = StreamingOrchestrator.from_provider(
                    AzureOpenAIService(config),
                    config=get_pipeline_config(),
                )
        except Exception as e:
            logger.warning(f"Azure OpenAI not available for generation: {e}")
    return _orchestrator


def _require_orchestrator() -> StreamingOrchestrator:
    orchestrator = get_orchestrator()
    if not orchestrator:
        raise HTTPException(
            status_code=503,
            detail="Azure OpenAI not configured. Set AZURE_OPENAI_ENDPOINT and AZURE_OPENAI_API_KEY.",
        )
    return orchestrator


class ConversationMessage(BaseModel):
    """One conversation turn."""

    role: str  # "user" or "assistant"
    content: str


class GenerateRequest(BaseModel):
    """Generation request. Any one of the inputs is enough."""

    model_config = ConfigDict(populate_by_name=True)

    prompt: Optional[str] = None
    sketch_data: Optional[str] = Field(default=None, alias="sketchData")
    photo_data: Optional[str] = Field(default=None, alias="photoData")
    speech_data: Optional[str] = Field(default=None, alias="speechData")  # transcript text
    conversation_history: List[ConversationMessage] = Field(default_factory=list, alias="conversationHistory")
    current_model: Optional[dict] = Field(default=None, alias="currentModel")


class RefineRequest(BaseModel):
    """Refinement request for a design that is already on screen."""

    model_config = ConfigDict(populate_by_name=True)

    project_id: Optional[str] = Field(default=None, alias="projectId")
    current_model: Optional[dict] = Field(default=None, alias="currentModel")
    conversation_history: List[ConversationMessage] = Field(default_factory=list, alias="conversationHistory")
    refinement_prompt: Optional[str] = Field(default=None, alias="refinementPrompt")
    locked_elements: List[str] = Field(default_factory=list, alias="lockedElements")
    enforce_locks: Optional[bool] = Field(default=None, alias="enforceLocks")


def _build_prompt(request: GenerateRequest) -> str:
    prompt = (request.prompt or "").strip()
    speech = (request.speech_data or "").strip()
    if speech.startswith("data:"):
        logger.warning("Ignoring raw audio speechData; send the transcript text instead")
        speech = ""
    if speech:
        prompt = f"{prompt}\n\nSpoken request: {speech}" if prompt else speech
    return prompt or DEFAULT_PROMPT


def _event_stream(http_request: Request, events) -> StreamingResponse:
    config = get_pipeline_config()
    frames = sse_frames(
        events,
        queue_size=config.queue_size,
        is_disconnected=http_request.is_disconnected,
        poll_interval=config.disconnect_poll_seconds,
    )
    return StreamingResponse(frames, media_type="text/event-stream", headers=SSE_HEADERS)


@router.post("/generate-stream")
async def generate_stream(request: GenerateRequest, http_request: Request):
    """Generate a design from text, sketch, photo or speech and stream progress."""
    if not (request.prompt or request.sketch_data or request.speech_data or request.photo_data):
        raise HTTPException(status_code=400, detail="At least one input is required")

    orchestrator = _require_orchestrator()
    prompt = _build_prompt(request)
    logger.info(
        f"Starting generation: sketch={bool(request.sketch_data)}, photo={bool(request.photo_data)}, "
        f"history={len(request.conversation_history)}"
    )

    events = orchestrator.process_design_request_stream(
        prompt,
        sketch_data=request.sketch_data,
        photo_data=request.photo_data,
        conversation_history=[m.model_dump() for m in request.conversation_history],
        current_model=request.current_model,
    )
    return _event_stream(http_request, events)


@router.post("/refine")
async def refine(request: RefineRequest, http_request: Request):
    """Refine the current design and stream progress."""
    if not request.refinement_prompt:
        raise HTTPException(status_code=400, detail="Refinement prompt is required")
    if not request.current_model:
        raise HTTPException(status_code=400, detail="Current model data is required")

    try:
        current_model = GeometryModel.from_dict(request.current_model)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=f"Invalid current model: {describe_validation_error(e)}")

    orchestrator = _require_orchestrator()
    refinement = RefinementRequest(
        current_model=current_model,
        refinement_prompt=request.refinement_prompt,
        project_id=request.project_id,
        conversation_history=[m.model_dump() for m in request.conversation_history],
        locked_elements=request.locked_elements,
        enforce_locks=request.enforce_locks,
    )
    logger.info(
        f"Starting refinement for project {request.project_id}: "
        f"{len(request.locked_elements)} locked element(s)"
    )
    return _event_stream(http_request, refine_stream(orchestrator, refinement))


@router.get("/status")
async def generation_status():
    """Report model provider availability and pipeline policies."""
    config = get_pipeline_config()
    return {
        "provider_configured": get_orchestrator() is not None,
        "lock_enforcement": config.lock_enforcement,
        "stage_timeout_seconds": config.stage_timeout_seconds,
    }


class AnalysisRequest(BaseModel):
    """Model to check or price."""

    model_config = ConfigDict(populate_by_name=True)

    model_data: dict = Field(alias="modelData")
    base_rate: float = Field(default=DEFAULT_BASE_RATE, gt=0, allow_inf_nan=False, alias="baseRate")  # per m²
    currency: str = Field(default="USD", min_length=1, max_length=8)


def _analysis_model(request: AnalysisRequest) -> GeometryModel:
    try:
        model = GeometryModel.from_dict(request.model_data)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=f"Invalid model: {describe_validation_error(e)}")
    if model.is_empty:
        raise HTTPException(status_code=422, detail="empty model: nothing to analyze")
    return model


@router.post("/compliance")
def compliance(request: AnalysisRequest):
    """Check a model against residential building-code minimums."""
    return check_compliance(_analysis_model(request)).to_dict()


@router.post("/estimate")
def cost_estimate(request: AnalysisRequest):
    """Estimate construction cost from floor area and room types."""
    model = _analysis_model(request)
    return estimate_cost(model, base_rate=request.base_rate, currency=request.currency).to_dict()
