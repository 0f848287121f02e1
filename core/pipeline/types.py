"""Progress and result types emitted by the streaming orchestrator."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class GenerationStage(str, Enum):
    """Pipeline state. ``COMPLETE`` and ``ERROR`` are terminal."""

    INTERPRETING = "interpreting"
    DESIGNING = "designing"
    RENDERING = "rendering"
    COMPLETE = "complete"
    ERROR = "error"


@dataclass
class GenerationProgress:
    """One progress checkpoint."""

    stage: GenerationStage
    current_agent: str
    message: str
    percentage: int
    rooms_generated: Optional[int] = None
    total_rooms: Optional[int] = None

    def to_dict(self) -> dict:
        """Convert to the wire format (camelCase, optional counts omitted)."""
        data = {
            "stage": self.stage.value,
            "currentAgent": self.current_agent,
            "message": self.message,
            "percentage": self.percentage,
        }
        if self.rooms_generated is not None:
            data["roomsGenerated"] = self.rooms_generated
        if self.total_rooms is not None:
            data["totalRooms"] = self.total_rooms
        return data


@dataclass
class CADResult:
    """Payload of the ``complete`` event."""

    requirements: Dict[str, Any]
    model_data: Dict[str, Any]
    code: str
    original_prompt: str
    sketch_analysis_performed: bool = False
    processing_time_ms: int = 0

    def to_dict(self) -> dict:
        return {
            "requirements": self.requirements,
            "modelData": self.model_data,
            "code": self.code,
            "originalPrompt": self.original_prompt,
            "sketchAnalysisPerformed": self.sketch_analysis_performed,
            "processingTimeMs": self.processing_time_ms,
        }


@dataclass
class StreamEvent:
    """Message on the event stream: ``progress``, ``complete`` or ``error``."""

    type: str
    data: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def progress(cls, progress: GenerationProgress) -> "StreamEvent":
        return cls(type="progress", data=progress.to_dict())

    @classmethod
    def complete(cls, result: CADResult) -> "StreamEvent":
        # Completion carries the final percentage like every progress frame
        return cls(type="complete", data={**result.to_dict(), "percentage": 100})

    @classmethod
    def error(cls, message: str, stage: Optional[str] = None) -> "StreamEvent":
        data = {"error": message}
        if stage:
            data["stage"] = stage
        return cls(type="error", data=data)

    @property
    def is_terminal(self) -> bool:
        return self.type in ("complete", "error")

    @property
    def percentage(self) -> Optional[int]:
        """Progress percentage carried by this event; 100 for completion."""
        if self.type == "complete":
            return 100
        if self.type == "progress":
            return self.data.get("percentage")
        return None

    def to_dict(self) -> dict:
        return {"type": self.type, "data": self.data}

    @classmethod
    def from_dict(cls, data: dict) -> "StreamEvent":
        return cls(type=data.get("type", ""), data=data.get("data") or {})
