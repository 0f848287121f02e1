"""Refinement of an existing design, with optional locked-room enforcement."""

import json
import logging
from dataclasses import dataclass, field
from typing import AsyncIterator, List, Optional

from pydantic import ValidationError

from core.errors import DesignError
from core.geometry import GeometryModel, describe_validation_error

from .orchestrator import StreamingOrchestrator
from .types import StreamEvent

logger = logging.getLogger(__name__)


REFINEMENT_INSTRUCTIONS = """INSTRUCTIONS:
1. Analyze the current design and the user's refinement request
2. Make ONLY the changes requested while preserving everything else
3. Maintain spatial relationships and realistic proportions
4. Ensure doors and windows still make sense with any modifications
5. Update connected_to relationships if room positions change
6. Return a complete updated floor plan with the modifications applied

RESPOND WITH ONLY THE MODIFIED FLOOR PLAN DATA IN THE SAME FORMAT AS THE CURRENT DESIGN."""


@dataclass
class RefinementRequest:
    """A follow-up change to a design that is already on screen."""

    current_model: GeometryModel
    refinement_prompt: str
    project_id: Optional[str] = None
    conversation_history: List[dict] = field(default_factory=list)
    locked_elements: List[str] = field(default_factory=list)
    enforce_locks: Optional[bool] = None  # None defers to PipelineConfig


def build_refinement_prompt(request: RefinementRequest) -> str:
    """Embed the current design, the conversation and any locks into one prompt."""
    context = "\n".join(
        f"{message.get('role')}: {message.get('content')}"
        for message in request.conversation_history
    )
    locked = ""
    if request.locked_elements:
        locked = f"\n\nIMPORTANT: Do not modify these elements: {', '.join(request.locked_elements)}"

    return (
        "You are refining an existing CAD floor plan design.\n\n"
        f"CURRENT DESIGN:\n{json.dumps(request.current_model.to_dict(), indent=2)}\n\n"
        f"CONVERSATION HISTORY:\n{context}\n\n"
        f"USER'S REFINEMENT REQUEST:\n{request.refinement_prompt}\n{locked}\n\n"
        f"{REFINEMENT_INSTRUCTIONS}"
    )


def enforce_locked_rooms(
    previous: GeometryModel,
    refined: GeometryModel,
    locked: List[str],
) -> GeometryModel:
    """
    Restore locked rooms of ``previous`` into ``refined``.

    A locked room that the refinement edited or deleted is put back exactly,
    along with its windows and any of its doors whose other end still exists.
    Lock names that are not rooms of ``previous`` are ignored.

    Args:
        previous: Model before refinement
        refined: Model produced by the designer
        locked: Names of rooms that must not change

    Returns:
        A model in which every locked room matches ``previous``

    Raises:
        DesignError: If the restored model is no longer valid, for example when
            a locked room's connection points at a room the refinement removed
    """
    locked_rooms = {name: previous.get_room(name) for name in locked}
    unknown = [name for name, room in locked_rooms.items() if room is None]
    if unknown:
        logger.warning(f"Ignoring locks on unknown rooms: {', '.join(unknown)}")
    locked_rooms = {name: room for name, room in locked_rooms.items() if room is not None}
    if not locked_rooms:
        return refined

    changed = [name for name, room in locked_rooms.items() if refined.get_room(name) != room]
    if not changed:
        return refined
    logger.warning(f"Refinement changed locked room(s) {', '.join(changed)}; restoring them")

    rooms = [locked_rooms.get(room.name, room) for room in refined.rooms]
    present = {room.name for room in rooms}
    rooms.extend(room for name, room in locked_rooms.items() if name not in present)
    names = {room.name for room in rooms}

    windows = [w for w in refined.windows if w.room not in locked_rooms]
    windows.extend(w for w in previous.windows if w.room in locked_rooms)

    doors = list(refined.doors)
    for door in previous.doors:
        touches_locked = door.from_room in locked_rooms or door.to_room in locked_rooms
        if touches_locked and door.from_room in names and door.to_room in names and door not in doors:
            doors.append(door)

    try:
        return GeometryModel(rooms=tuple(rooms), windows=tuple(windows), doors=tuple(doors))
    except ValidationError as e:
        raise DesignError(
            f"Refinement conflicts with locked rooms: {describe_validation_error(e)}"
        ) from e


def refine_stream(
    orchestrator: StreamingOrchestrator,
    request: RefinementRequest,
) -> AsyncIterator[StreamEvent]:
    """
    Run the generation state machine on a refinement request.

    Args:
        orchestrator: Orchestrator to run
        request: Refinement request. Its ``enforce_locks`` overrides the
            orchestrator config's lock policy when set

    Returns:
        Async iterator of stream events
    """
    enforce_locks = request.enforce_locks
    if enforce_locks is None:
        enforce_locks = orchestrator.config.enforces_locks

    post_design = None
    if enforce_locks and request.locked_elements:
        def post_design(design: GeometryModel) -> GeometryModel:
            return enforce_locked_rooms(request.current_model, design, request.locked_elements)

    return orchestrator.process_design_request_stream(
        build_refinement_prompt(request),
        sketch_data=None,
        current_model=request.current_model,
        is_refinement=True,
        post_design=post_design,
    )
