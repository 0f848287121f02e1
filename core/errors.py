"""Error taxonomy for the generation pipeline and geometry exports."""

from typing import Optional


class PipelineError(Exception):
    """Base exception for pipeline, transport and export failures."""

    def __init__(
        self,
        message: str,
        error_type: str = "unknown",
        stage: Optional[str] = None,
        retryable: bool = False,
    ):
        super().__init__(message)
        self.error_type = error_type
        self.stage = stage
        self.retryable = retryable

    def to_dict(self) -> dict:
        """Convert to the payload of an ``error`` stream event."""
        data = {"error": str(self)}
        if self.stage:
            data["stage"] = self.stage
        return data


class StageError(PipelineError):
    """Failure inside one of the three pipeline stages."""


class InterpretationError(StageError):
    """Input could not be normalized into structured requirements."""

    def __init__(self, message: str, retryable: bool = False):
        super().__init__(message, error_type="interpretation", stage="interpreting", retryable=retryable)


class DesignError(StageError):
    """Produced geometry violates referential integrity or dimension rules."""

    def __init__(self, message: str, retryable: bool = False):
        super().__init__(message, error_type="design", stage="designing", retryable=retryable)


class RenderError(StageError):
    """Visualization code could not be derived from a valid model."""

    def __init__(self, message: str, retryable: bool = False):
        super().__init__(message, error_type="render", stage="rendering", retryable=retryable)


class TransportError(PipelineError):
    """Stream write or read failure."""

    def __init__(self, message: str):
        super().__init__(message, error_type="transport", retryable=True)


class ExportError(PipelineError):
    """Empty or malformed model at export or projection time."""

    def __init__(self, message: str):
        super().__init__(message, error_type="export")
