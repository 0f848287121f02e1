"""Interpreter agent: normalizes text, sketch and photo input into requirements."""

import json
import logging
from typing import Any, List, Optional

from pydantic import ValidationError

from core.errors import InterpretationError
from core.geometry import GeometryModel, describe_validation_error

from .base import BaseAgent, history_messages, parse_json_response
from .types import DesignRequirements, InterpretationInput, InterpretationResult

logger = logging.getLogger(__name__)


INTERPRETER_PROMPT = """You are an architectural requirements analyst. Turn the user's
request (and any sketch or photo analysis) into structured design requirements.

Return a JSON object with this structure:
{
    "requirements": {
        "summary": "one-sentence description of the building",
        "building_type": "residential | office | retail | ...",
        "style": "optional style",
        "rooms": [
            {"name": "kitchen", "type": "kitchen", "count": 1,
             "width": 4.0, "length": 4.0, "height": 3.0, "notes": "optional"}
        ],
        "constraints": ["adjacency or sizing constraints as short sentences"]
    },
    "is_modification": true or false
}

Set "is_modification" to true only when the user is changing an existing design
rather than asking for a new one. Dimensions are in meters; omit them when unknown.

Return ONLY valid JSON, no explanation."""

IMAGE_INSTRUCTIONS = {
    "sketch": (
        "This is a hand-drawn floor plan sketch. List every room you can identify with "
        "approximate dimensions in meters, how rooms connect, and any doors or windows."
    ),
    "photo": (
        "This is a photo of a floor plan or building. Describe the rooms, their approximate "
        "sizes in meters, their arrangement, and visible doors and windows."
    ),
}


class InterpreterAgent(BaseAgent):
    """Builds DesignRequirements from heterogeneous user input."""

    name = "Interpreter Agent"
    temperature = 0.3

    async def execute(self, request: InterpretationInput) -> InterpretationResult:
        """
        Interpret a design request.

        Args:
            request: Prompt plus optional sketch/photo data URLs, conversation
                history and the model currently on screen

        Returns:
            InterpretationResult with requirements and the modification flag

        Raises:
            InterpretationError: If the input cannot be normalized
        """
        if not request.prompt.strip() and not (request.sketch_data or request.photo_data):
            raise InterpretationError("Nothing to interpret: prompt and images are empty")

        current_model = self._coerce_model(request.current_model)
        image_notes = await self._analyze_images(request)

        messages = [{"role": "system", "content": INTERPRETER_PROMPT}]
        messages.extend(history_messages(request.conversation_history))
        messages.append({
            "role": "user",
            "content": self._build_user_message(request.prompt, image_notes, current_model),
        })

        try:
            response = await self._complete(messages, json_mode=True)
        except Exception as e:
            raise InterpretationError(f"Model provider failed: {e}", retryable=True) from e

        try:
            payload = parse_json_response(response)
        except json.JSONDecodeError as e:
            raise InterpretationError(f"Provider returned invalid JSON: {e}") from e

        requirements = self._parse_requirements(payload)
        is_modification = self._is_modification(
            payload.get("is_modification") if isinstance(payload, dict) else None,
            current_model,
            request.conversation_history,
            request.is_refinement,
        )

        logger.info(
            f"Interpreted request: {len(requirements.rooms)} room requirement(s), "
            f"modification={is_modification}"
        )
        return InterpretationResult(
            requirements=requirements,
            is_modification=is_modification,
            sketch_analysis_performed=bool(image_notes),
            current_model=current_model if is_modification else None,
        )

    async def _analyze_images(self, request: InterpretationInput) -> List[str]:
        """Describe each attached image through the provider's vision call."""
        notes = []
        for label, data in (("sketch", request.sketch_data), ("photo", request.photo_data)):
            if not data:
                continue
            try:
                description = await self.provider.describe_image(data, IMAGE_INSTRUCTIONS[label])
            except Exception as e:
                raise InterpretationError(f"Could not analyze {label}: {e}", retryable=True) from e
            if description.strip():
                notes.append(f"{label.upper()} ANALYSIS:\n{description.strip()}")
        return notes

    def _build_user_message(
        self,
        prompt: str,
        image_notes: List[str],
        current_model: Optional[GeometryModel],
    ) -> str:
        parts = [f"REQUEST:\n{prompt.strip()}"] if prompt.strip() else []
        parts.extend(image_notes)
        if current_model is not None:
            parts.append(f"CURRENT DESIGN:\n{json.dumps(current_model.to_dict(), indent=2)}")
        return "\n\n".join(parts)

    def _parse_requirements(self, payload: Any) -> DesignRequirements:
        if not isinstance(payload, dict):
            raise InterpretationError("Provider response is not a JSON object")

        raw = payload.get("requirements")
        if not isinstance(raw, dict):
            raise InterpretationError("Provider response has no 'requirements' object")

        try:
            requirements = DesignRequirements.model_validate(raw)
        except ValidationError as e:
            raise InterpretationError(f"Malformed requirements: {describe_validation_error(e)}") from e

        if requirements.is_empty:
            raise InterpretationError("Requirements are empty: no summary and no rooms")
        return requirements

    def _coerce_model(self, current_model: Any) -> Optional[GeometryModel]:
        """Validate the on-screen model; malformed or empty models are ignored."""
        if current_model is None:
            return None
        if isinstance(current_model, GeometryModel):
            model = current_model
        else:
            try:
                model = GeometryModel.model_validate(current_model)
            except ValidationError as e:
                logger.warning(f"Ignoring malformed current model: {describe_validation_error(e)}")
                return None
        return None if model.is_empty else model

    def _is_modification(
        self,
        provider_flag: Any,
        current_model: Optional[GeometryModel],
        conversation_history: List[dict],
        is_refinement: bool = False,
    ) -> bool:
        """A modification needs a usable current model plus a signal to extend it."""
        if current_model is None:
            return False
        if is_refinement:
            return True
        if isinstance(provider_flag, bool):
            return provider_flag
        return bool(history_messages(conversation_history))
