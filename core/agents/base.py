"""Model provider contract and shared helpers for the stage agents."""

import json
import logging
from typing import Any, List, Optional, Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@runtime_checkable
class ModelProvider(Protocol):
    """External natural-language capability the agents call into.

    ``AzureOpenAIService`` is the production implementation. Tests inject
    scripted fakes.
    """

    async def complete(
        self,
        messages: List[dict],
        temperature: float = 0.7,
        max_tokens: int = 2000,
        json_mode: bool = False,
    ) -> str:
        ...

    async def describe_image(
        self,
        image_data_url: str,
        instruction: str,
        max_tokens: int = 1500,
    ) -> str:
        ...


def strip_code_fence(response: str) -> str:
    """Remove a surrounding markdown code block (with optional language tag)."""
    cleaned = response.strip()
    if cleaned.startswith("```"):
        parts = cleaned.split("```")
        if len(parts) >= 2:
            content = parts[1]
            # Drop the language identifier line (e.g. "json", "javascript")
            first_line, _, rest = content.partition("\n")
            if first_line.strip() and " " not in first_line.strip() and rest:
                content = rest
            cleaned = content.strip()
    return cleaned


def parse_json_response(response: str) -> Any:
    """
    Parse a provider response into JSON.

    Args:
        response: Raw string response from the provider

    Returns:
        Parsed JSON value

    Raises:
        json.JSONDecodeError: If the response cannot be parsed as JSON
    """
    cleaned = strip_code_fence(response)
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError:
        # Providers sometimes wrap the object in prose
        start, end = cleaned.find("{"), cleaned.rfind("}")
        if start == -1 or end <= start:
            raise
        return json.loads(cleaned[start:end + 1])


def history_messages(conversation_history: Optional[List[dict]]) -> List[dict]:
    """Keep only well-formed user/assistant turns from a conversation history."""
    messages = []
    for message in conversation_history or []:
        role = message.get("role")
        content = message.get("content")
        if role in ("user", "assistant") and isinstance(content, str) and content:
            messages.append({"role": role, "content": content})
    return messages


class BaseAgent:
    """Stage agent backed by a model provider."""

    name = "Agent"
    temperature = 0.7
    max_tokens = 2000

    def __init__(self, provider: ModelProvider):
        self.provider = provider

    async def _complete(self, messages: List[dict], json_mode: bool = False) -> str:
        logger.debug(f"{self.name} request: {str(messages[-1].get('content'))[:200]}...")
        return await self.provider.complete(
            messages,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            json_mode=json_mode,
        )
