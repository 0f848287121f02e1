"""Azure OpenAI service backing the pipeline's stage agents."""

import logging
from typing import Optional

from openai import AsyncAzureOpenAI

from .config import AzureConfig

logger = logging.getLogger(__name__)


class AzureOpenAIService:
    """Azure OpenAI model provider for text and vision completions."""

    def __init__(self, config: AzureConfig):
        self.config = config
        self._client: Optional[AsyncAzureOpenAI] = None

    @property
    def client(self) -> AsyncAzureOpenAI:
        """Get or create Azure OpenAI client."""
        if self._client is None:
            if not self.config.is_openai_configured():
                raise ValueError("Azure OpenAI is not configured. Set AZURE_OPENAI_ENDPOINT and AZURE_OPENAI_API_KEY.")

            self._client = AsyncAzureOpenAI(
                azure_endpoint=self.config.openai_endpoint,
                api_key=self.config.openai_api_key,
                api_version=self.config.openai_api_version,
                timeout=self.config.request_timeout_seconds,
                max_retries=self.config.max_retries,
            )
        return self._client

    async def chat_completion(
        self,
        messages: list[dict],
        temperature: float = 0.7,
        max_tokens: int = 2000,
        json_mode: bool = False,
    ) -> str:
        """Get chat completion from the chat deployment."""
        kwargs = {}
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        try:
            response = await self.client.chat.completions.create(
                model=self.config.chat_deployment,
                messages=messages,
                temperature=temperature,
                max_tokens=max_tokens,
                **kwargs,
            )
            return response.choices[0].message.content or ""
        except Exception as e:
            logger.error(f"Chat completion failed: {e}")
            raise

    async def complete(
        self,
        messages: list[dict],
        temperature: float = 0.7,
        max_tokens: int = 2000,
        json_mode: bool = False,
    ) -> str:
        """Model provider entry point used by the stage agents."""
        return await self.chat_completion(
            messages,
            temperature=temperature,
            max_tokens=max_tokens,
            json_mode=json_mode,
        )

    async def describe_image(
        self,
        image_data_url: str,
        instruction: str,
        max_tokens: int = 1500,
    ) -> str:
        """Describe a sketch or photo (given as a data URL) with the vision deployment."""
        messages = [
            {
                "role": "system",
                "content": "You are an expert architect reading hand-drawn sketches and photos of floor plans.",
            },
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": instruction},
                    {"type": "image_url", "image_url": {"url": image_data_url}},
                ],
            },
        ]

        try:
            response = await self.client.chat.completions.create(
                model=self.config.vision_deployment,
                messages=messages,
                max_tokens=max_tokens,
            )
            return response.choices[0].message.content or ""
        except Exception as e:
            logger.error(f"Image analysis failed: {e}")
            raise
