"""Designer agent: turns requirements into a validated geometry model."""

import json
import logging
from typing import Any

from pydantic import ValidationError

from core.errors import DesignError
from core.geometry import GeometryModel, describe_validation_error

from .base import BaseAgent, parse_json_response
from .types import DesignInput, DesignResult

logger = logging.getLogger(__name__)


DESIGNER_PROMPT = """You are an architect laying out a floor plan from structured requirements.

Return a JSON object with this structure:
{
    "design": {
        "rooms": [
            {"name": "kitchen", "type": "kitchen", "width": 4.0, "length": 4.0, "height": 3.0,
             "x": 0.0, "y": 0.0, "z": 0.0, "connected_to": ["living"]}
        ],
        "windows": [
            {"room": "kitchen", "wall": "front|back|left|right", "width": 1.2, "height": 1.5, "position": 0.5}
        ],
        "doors": [
            {"from": "kitchen", "to": "living", "width": 0.9, "height": 2.1}
        ]
    }
}

Rules:
- Dimensions are in meters and must be positive.
- x/z is the center of the room footprint; y is the floor elevation.
- Room names are unique. Every connected_to, door and window must name an existing room.
- Window position is the fraction (0-1) along the wall.
- Rooms should not overlap.

Return ONLY valid JSON, no explanation."""


class DesignerAgent(BaseAgent):
    """Lays out rooms, doors and windows for a set of requirements."""

    name = "Designer Agent"
    temperature = 0.4
    max_tokens = 4000

    async def execute(self, request: DesignInput) -> DesignResult:
        """
        Produce a geometry model.

        Args:
            request: Requirements plus the current model when modifying a design

        Returns:
            DesignResult holding a validated model with at least one room

        Raises:
            DesignError: If the provider fails or its geometry is invalid
        """
        messages = [
            {"role": "system", "content": DESIGNER_PROMPT},
            {"role": "user", "content": self._build_user_message(request)},
        ]

        try:
            response = await self._complete(messages, json_mode=True)
        except Exception as e:
            raise DesignError(f"Model provider failed: {e}", retryable=True) from e

        try:
            payload = parse_json_response(response)
        except json.JSONDecodeError as e:
            raise DesignError(f"Provider returned invalid JSON: {e}") from e

        design = self._parse_design(payload)
        logger.info(
            f"Designed {len(design.rooms)} room(s), {len(design.doors)} door(s), "
            f"{len(design.windows)} window(s)"
        )
        return DesignResult(design=design)

    def _build_user_message(self, request: DesignInput) -> str:
        parts = [f"REQUIREMENTS:\n{json.dumps(request.requirements.to_dict(), indent=2)}"]
        if request.is_modification and request.current_model is not None:
            parts.append(
                "Modify this existing design. Keep every room that the requirements "
                "do not ask to change exactly as it is.\n"
                f"CURRENT DESIGN:\n{json.dumps(request.current_model.to_dict(), indent=2)}"
            )
        return "\n\n".join(parts)

    def _parse_design(self, payload: Any) -> GeometryModel:
        if not isinstance(payload, dict):
            raise DesignError("Provider response is not a JSON object")

        # Accept {"design": {...}} or the bare model
        raw = payload.get("design", payload)
        if not isinstance(raw, dict):
            raise DesignError("Provider design is not a JSON object")

        try:
            design = GeometryModel.model_validate(raw)
        except ValidationError as e:
            raise DesignError(f"Invalid geometry: {describe_validation_error(e)}") from e

        if design.is_empty:
            raise DesignError("Design contains no rooms")
        return design
