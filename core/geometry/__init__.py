"""Geometry model for Sketch2CAD.

The room/door/window graph produced by the designer stage and consumed by
the exporters and the 2D projector. Models are immutable pydantic values
whose referential integrity is checked on construction.

Usage:
    from core.geometry import GeometryModel

    model = GeometryModel.from_dict(provider_json)
    model.get_room("kitchen")
"""

from .compliance import (
    ComplianceIssue,
    ComplianceReport,
    CostEstimate,
    Severity,
    check_compliance,
    estimate_cost,
)
from .fallback import PLACEHOLDER_MODEL_DATA, placeholder_model
from .types import (
    Door,
    GeometryModel,
    Position,
    Room,
    WallSide,
    Window,
    infer_room_type,
)
from .validation import describe_validation_error, find_integrity_issues

__all__ = [
    "GeometryModel",
    "Room",
    "Window",
    "Door",
    "Position",
    "WallSide",
    "infer_room_type",
    "find_integrity_issues",
    "describe_validation_error",
    "placeholder_model",
    "PLACEHOLDER_MODEL_DATA",
    "check_compliance",
    "estimate_cost",
    "ComplianceReport",
    "ComplianceIssue",
    "CostEstimate",
    "Severity",
]
