"""Referential-integrity checks for the room/door/window graph."""

from typing import List

from pydantic import ValidationError


def find_integrity_issues(model) -> List[str]:
    """
    Collect every integrity violation in a geometry model.

    Checks that room names are unique and that every ``connectedTo`` entry,
    door endpoint and window room resolves to a room in the same model.

    Args:
        model: GeometryModel (or any object with rooms/windows/doors)

    Returns:
        Human-readable issue descriptions, empty when the model is valid
    """
    issues = []
    names = set()

    for room in model.rooms:
        if room.name in names:
            issues.append(f"Duplicate room name '{room.name}'")
        names.add(room.name)

    for room in model.rooms:
        for target in room.connected_to:
            if target not in names:
                issues.append(f"Room '{room.name}' is connected to unknown room '{target}'")

    for index, door in enumerate(model.doors):
        for end in (door.from_room, door.to_room):
            if end not in names:
                issues.append(f"Door {index} references unknown room '{end}'")

    for index, window in enumerate(model.windows):
        if window.room not in names:
            issues.append(f"Window {index} references unknown room '{window.room}'")

    return issues


def describe_validation_error(exc: ValidationError, limit: int = 5) -> str:
    """Flatten a pydantic ValidationError into a short single-line message."""
    parts = []
    for error in exc.errors()[:limit]:
        location = ".".join(str(p) for p in error.get("loc", ()))
        message = error.get("msg", "invalid value")
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        parts.append(f"{location}: {message}" if location else message)

    remaining = exc.error_count() - limit
    if remaining > 0:
        parts.append(f"... and {remaining} more")
    return "; ".join(parts)
