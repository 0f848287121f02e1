"""Renderer agent: writes the Three.js scene that displays a design."""

import json
import logging

from core.errors import RenderError

from .base import BaseAgent, strip_code_fence
from .types import RenderInput, RenderOutput

logger = logging.getLogger(__name__)


RENDERER_PROMPT = """You are a Three.js developer. Write a complete, self-contained ES module
script that renders the given floor plan as a 3D scene.

Requirements:
- Import THREE from 'three' and OrbitControls from 'three/examples/jsm/controls/OrbitControls'.
- Each room's x/z is the center of its footprint and y its floor elevation (meters).
- Draw each room as a wireframe box with a translucent floor; draw doors and windows
  as thin boxes on the walls.
- Add ambient and directional lights, orbit controls, an animation loop and a resize handler.

Return ONLY the JavaScript code."""


class RendererAgent(BaseAgent):
    """Produces viewer code for a validated design."""

    name = "Renderer Agent"
    temperature = 0.2
    max_tokens = 4000

    async def execute(self, request: RenderInput) -> RenderOutput:
        """
        Generate the visualization script.

        Raises:
            RenderError: If the provider fails or returns no code
        """
        messages = [
            {"role": "system", "content": RENDERER_PROMPT},
            {
                "role": "user",
                "content": (
                    f"DESCRIPTION: {request.requirements.summary or 'floor plan'}\n\n"
                    f"FLOOR PLAN:\n{json.dumps(request.design.to_dict(), indent=2)}"
                ),
            },
        ]

        try:
            response = await self._complete(messages)
        except Exception as e:
            raise RenderError(f"Model provider failed: {e}", retryable=True) from e

        code = strip_code_fence(response or "")
        if not code:
            raise RenderError("Provider returned no visualization code")

        logger.info(f"Rendered scene code ({len(code)} chars)")
        return RenderOutput(code=code)
