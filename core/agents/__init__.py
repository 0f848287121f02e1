"""Stage agents for the Sketch2CAD pipeline."""

from .base import ModelProvider, parse_json_response, strip_code_fence
from .designer import DesignerAgent
from .interpreter import InterpreterAgent
from .renderer import RendererAgent
from .scene_code import build_scene_code
from .types import (
    DesignInput,
    DesignRequirements,
    DesignResult,
    InterpretationInput,
    InterpretationResult,
    RenderInput,
    RenderOutput,
    RoomRequirement,
)

__all__ = [
    "ModelProvider",
    "InterpreterAgent",
    "DesignerAgent",
    "RendererAgent",
    "build_scene_code",
    "parse_json_response",
    "strip_code_fence",
    "DesignRequirements",
    "RoomRequirement",
    "InterpretationInput",
    "InterpretationResult",
    "DesignInput",
    "DesignResult",
    "RenderInput",
    "RenderOutput",
]
