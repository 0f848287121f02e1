"""Typed inputs and outputs of the three stage agents."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from core.geometry import GeometryModel


class RoomRequirement(BaseModel):
    """One requested room, as understood from the user's input."""

    model_config = ConfigDict(extra="allow")

    name: str
    type: Optional[str] = None
    count: int = Field(default=1, ge=1)
    width: Optional[float] = Field(default=None, gt=0)
    length: Optional[float] = Field(default=None, gt=0)
    height: Optional[float] = Field(default=None, gt=0)
    notes: Optional[str] = None


class DesignRequirements(BaseModel):
    """Structured requirements handed from the interpreter to the designer."""

    model_config = ConfigDict(extra="allow")

    summary: str = ""
    building_type: str = "residential"
    style: Optional[str] = None
    rooms: List[RoomRequirement] = Field(default_factory=list)
    constraints: List[str] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.summary.strip() and not self.rooms

    def to_dict(self) -> dict:
        return self.model_dump(mode="json", exclude_none=True)


@dataclass
class InterpretationInput:
    """Raw, multi-modal input to the interpreter."""

    prompt: str
    sketch_data: Optional[str] = None  # data URL
    photo_data: Optional[str] = None  # data URL
    conversation_history: List[Dict[str, Any]] = field(default_factory=list)
    current_model: Optional[Any] = None  # GeometryModel or raw dict
    is_refinement: bool = False  # always extend current_model when it is usable


@dataclass
class InterpretationResult:
    """Interpreter output."""

    requirements: DesignRequirements
    is_modification: bool = False
    sketch_analysis_performed: bool = False
    current_model: Optional[GeometryModel] = None  # validated copy of the input model


@dataclass
class DesignInput:
    """Designer input."""

    requirements: DesignRequirements
    current_model: Optional[GeometryModel] = None
    is_modification: bool = False


@dataclass
class DesignResult:
    """Designer output: a validated, non-empty model."""

    design: GeometryModel


@dataclass
class RenderInput:
    """Renderer input."""

    design: GeometryModel
    requirements: DesignRequirements


@dataclass
class RenderOutput:
    """Renderer output: scene script for a 3D viewer."""

    code: str
