"""Azure services integration for Sketch2CAD."""

from .config import AzureConfig
from .openai_service import AzureOpenAIService

__all__ = ["AzureConfig", "AzureOpenAIService"]
