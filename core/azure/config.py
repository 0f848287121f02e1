"""Azure configuration management."""

import os
from dataclasses import dataclass


@dataclass
class AzureConfig:
    """Azure OpenAI configuration for the model provider."""

    openai_endpoint: str
    openai_api_key: str
    openai_api_version: str = "2024-02-15-preview"

    # Model deployments
    chat_deployment: str = "gpt-4o"
    vision_deployment: str = "gpt-4o"

    # Per-request limits enforced by the HTTP client
    request_timeout_seconds: float = 90.0
    max_retries: int = 2

    @classmethod
    def from_env(cls) -> "AzureConfig":
        """Load configuration from environment variables."""
        return cls(
            openai_endpoint=os.getenv("AZURE_OPENAI_ENDPOINT", ""),
            openai_api_key=os.getenv("AZURE_OPENAI_API_KEY", ""),
            openai_api_version=os.getenv("AZURE_OPENAI_API_VERSION", "2024-02-15-preview"),
            chat_deployment=os.getenv("AZURE_OPENAI_CHAT_DEPLOYMENT", "gpt-4o"),
            vision_deployment=os.getenv("AZURE_OPENAI_VISION_DEPLOYMENT", "gpt-4o"),
            request_timeout_seconds=float(os.getenv("AZURE_OPENAI_TIMEOUT", "90")),
            max_retries=int(os.getenv("AZURE_OPENAI_MAX_RETRIES", "2")),
        )

    def is_openai_configured(self) -> bool:
        """Check if Azure OpenAI is properly configured."""
        return bool(self.openai_endpoint and self.openai_api_key)
