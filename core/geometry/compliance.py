"""Residential building-code checks and a rough construction cost estimate.

Rules follow the International Residential Code (IRC) sections cited on
each issue, with the imperial limits converted to meters.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from .types import GeometryModel, Room

logger = logging.getLogger(__name__)

# room type -> (fail below, warn below) floor area in m²
MIN_ROOM_AREA = {
    "bedroom": (6.5, 7.4),  # 70 / 80 sq ft
    "kitchen": (4.6, 6.5),  # 50 / 70 sq ft
    "bathroom": (1.95, None),  # 21 sq ft
}
AREA_CODES = {"bedroom": "IRC R304.1", "bathroom": "IRC R307.1"}

MIN_BEDROOM_DIMENSION = 2.13  # 7 ft
MIN_CEILING_HEIGHT = 2.13  # 7 ft
STANDARD_CEILING_HEIGHT = 2.44  # 8 ft
MIN_HALLWAY_WIDTH = 0.91  # 36 in
MIN_EGRESS_OPENING = 0.53  # 5.7 sq ft
NATURAL_LIGHT_RATIO = 0.08  # glazing as a share of floor area
MULTIPLE_EXIT_ROOMS = 5

LIGHT_ROOM_TYPES = ("bedroom", "living room", "dining room")

# room type -> cost multiplier on the base rate
ROOM_COST_MULTIPLIERS = {
    "bedroom": 0.9,
    "bathroom": 1.3,
    "kitchen": 1.6,
    "living room": 1.1,
    "dining room": 1.0,
    "hallway": 0.7,
}
DEFAULT_BASE_RATE = 1000.0  # per m²
LABOR_SHARE = 0.25
MATERIAL_SHARE = 0.25
CONTINGENCY_SHARE = 0.10


class Severity(str, Enum):
    """Outcome of one check."""

    PASS = "pass"
    WARNING = "warning"
    FAIL = "fail"


SEVERITY_POINTS = {Severity.PASS: 10, Severity.WARNING: 5, Severity.FAIL: 0}


@dataclass
class ComplianceIssue:
    """Result of one rule applied to the model or one of its rooms."""

    severity: Severity
    category: str
    message: str
    room: Optional[str] = None
    recommendation: Optional[str] = None
    code: Optional[str] = None

    def to_dict(self) -> dict:
        data = {
            "severity": self.severity.value,
            "category": self.category,
            "issue": self.message,
        }
        if self.room is not None:
            data["room"] = self.room
        if self.recommendation:
            data["recommendation"] = self.recommendation
        if self.code:
            data["code"] = self.code
        return data


@dataclass
class ComplianceReport:
    """All check results with an overall score."""

    issues: List[ComplianceIssue] = field(default_factory=list)

    def count(self, severity: Severity) -> int:
        return sum(1 for issue in self.issues if issue.severity == severity)

    @property
    def score(self) -> int:
        """0-100; a pass earns full points and a warning half."""
        if not self.issues:
            return 100
        points = sum(SEVERITY_POINTS[issue.severity] for issue in self.issues)
        return round(points * 100 / (len(self.issues) * 10))

    @property
    def grade(self) -> str:
        for threshold, grade in ((90, "A"), (80, "B"), (70, "C"), (60, "D")):
            if self.score >= threshold:
                return grade
        return "F"

    @property
    def compliant(self) -> bool:
        return self.count(Severity.FAIL) == 0

    def to_dict(self) -> dict:
        return {
            "score": self.score,
            "grade": self.grade,
            "compliant": self.compliant,
            "passes": self.count(Severity.PASS),
            "warnings": self.count(Severity.WARNING),
            "fails": self.count(Severity.FAIL),
            "issues": [issue.to_dict() for issue in self.issues],
        }


def _check_room_area(room: Room) -> Optional[ComplianceIssue]:
    limits = MIN_ROOM_AREA.get(room.room_type)
    if limits is None:
        return None
    fail_below, warn_below = limits
    area = f"{room.area:.1f} m²"

    if room.area < fail_below:
        return ComplianceIssue(
            Severity.FAIL, "Room Size",
            f"{room.name}: {area} is below the {fail_below:g} m² minimum for a {room.room_type}",
            room=room.name,
            recommendation="Increase room dimensions to meet the minimum",
            code=AREA_CODES.get(room.room_type),
        )
    if warn_below is not None and room.area < warn_below:
        return ComplianceIssue(
            Severity.WARNING, "Room Size",
            f"{room.name}: {area} meets the minimum but is small",
            room=room.name,
            recommendation="Consider increasing the size for better livability",
        )
    return ComplianceIssue(Severity.PASS, "Room Size", f"{room.name}: {area} meets requirements", room=room.name)


def _check_ceiling(room: Room) -> ComplianceIssue:
    height = f"{room.height:.2f} m"
    if room.height < MIN_CEILING_HEIGHT:
        return ComplianceIssue(
            Severity.FAIL, "Ceiling Height",
            f"{room.name}: {height} ceiling is below the {MIN_CEILING_HEIGHT:g} m minimum",
            room=room.name,
            recommendation="Increase ceiling height to meet code",
            code="IRC R305.1",
        )
    if room.height < STANDARD_CEILING_HEIGHT:
        return ComplianceIssue(
            Severity.WARNING, "Ceiling Height",
            f"{room.name}: {height} ceiling meets the minimum but is low",
            room=room.name,
            recommendation=f"{STANDARD_CEILING_HEIGHT:g} m or higher is standard for new homes",
        )
    return ComplianceIssue(Severity.PASS, "Ceiling Height", f"{room.name}: {height} ceiling height is good", room=room.name)


def _check_dimensions(room: Room) -> Optional[ComplianceIssue]:
    narrow = min(room.width, room.length)
    if room.room_type == "bedroom" and narrow < MIN_BEDROOM_DIMENSION:
        return ComplianceIssue(
            Severity.FAIL, "Room Dimensions",
            f"{room.name}: {narrow:.2f} m is below the {MIN_BEDROOM_DIMENSION:g} m minimum dimension",
            room=room.name,
            recommendation=f"Make every side at least {MIN_BEDROOM_DIMENSION:g} m",
            code="IRC R304.2",
        )
    if room.room_type == "hallway" and narrow < MIN_HALLWAY_WIDTH:
        return ComplianceIssue(
            Severity.FAIL, "Circulation",
            f"{room.name}: {narrow:.2f} m is narrower than the {MIN_HALLWAY_WIDTH:g} m minimum hallway width",
            room=room.name,
            recommendation=f"Widen the hallway to at least {MIN_HALLWAY_WIDTH:g} m",
            code="IRC R311.6",
        )
    return None


def _check_egress(room: Room, window_areas: List[float]) -> ComplianceIssue:
    if not window_areas:
        return ComplianceIssue(
            Severity.FAIL, "Emergency Egress",
            f"{room.name}: bedroom has no emergency egress window",
            room=room.name,
            recommendation=f"Add a window with at least {MIN_EGRESS_OPENING:g} m² of opening",
            code="IRC R310.1",
        )
    if max(window_areas) < MIN_EGRESS_OPENING:
        return ComplianceIssue(
            Severity.WARNING, "Emergency Egress",
            f"{room.name}: largest window is {max(window_areas):.2f} m², below the "
            f"{MIN_EGRESS_OPENING:g} m² egress opening",
            room=room.name,
            recommendation="Enlarge one bedroom window for emergency escape",
            code="IRC R310.1",
        )
    return ComplianceIssue(Severity.PASS, "Emergency Egress", f"{room.name}: egress window present", room=room.name)


def _check_natural_light(room: Room, window_areas: List[float]) -> ComplianceIssue:
    required = room.area * NATURAL_LIGHT_RATIO
    glazing = sum(window_areas)
    if glazing < required:
        return ComplianceIssue(
            Severity.WARNING, "Natural Light",
            f"{room.name}: {glazing:.2f} m² of glazing, needs {required:.2f} m² "
            f"({NATURAL_LIGHT_RATIO:.0%} of floor area)",
            room=room.name,
            recommendation="Add or enlarge windows",
            code="IRC R303.1",
        )
    return ComplianceIssue(Severity.PASS, "Natural Light", f"{room.name}: glazing meets natural light needs", room=room.name)


def _check_exits(model: GeometryModel) -> Optional[ComplianceIssue]:
    if len(model.rooms) >= MULTIPLE_EXIT_ROOMS and len(model.doors) < 2:
        return ComplianceIssue(
            Severity.WARNING, "Safety",
            f"{len(model.rooms)} rooms but only {len(model.doors)} door(s)",
            recommendation="Add a secondary exit for fire safety",
            code="IRC R311.4",
        )
    if len(model.doors) >= 2:
        return ComplianceIssue(Severity.PASS, "Safety", "Multiple exits present")
    return None


def check_compliance(model: GeometryModel) -> ComplianceReport:
    """
    Apply the residential code rules to every room of a model.

    Args:
        model: Validated geometry model

    Returns:
        ComplianceReport in room order, followed by whole-model checks
    """
    windows_by_room: Dict[str, List[float]] = {}
    for window in model.windows:
        windows_by_room.setdefault(window.room, []).append(window.width * window.height)

    report = ComplianceReport()
    for room in model.rooms:
        window_areas = windows_by_room.get(room.name, [])
        checks = [_check_room_area(room), _check_ceiling(room), _check_dimensions(room)]
        if room.room_type == "bedroom":
            checks.append(_check_egress(room, window_areas))
        if room.room_type in LIGHT_ROOM_TYPES:
            checks.append(_check_natural_light(room, window_areas))
        report.issues.extend(issue for issue in checks if issue is not None)

    exits = _check_exits(model)
    if exits:
        report.issues.append(exits)

    logger.info(
        f"Compliance check of {len(model.rooms)} rooms: score {report.score}, "
        f"{report.count(Severity.FAIL)} failing"
    )
    return report


@dataclass
class RoomCost:
    """Cost of one room at its type multiplier."""

    name: str
    area: float
    multiplier: float
    cost: float

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "area": round(self.area, 2),
            "multiplier": self.multiplier,
            "cost": round(self.cost, 2),
        }


@dataclass
class CostEstimate:
    """Construction cost breakdown in one currency."""

    currency: str
    base_rate: float
    rooms: List[RoomCost] = field(default_factory=list)

    @property
    def total_area(self) -> float:
        return sum(room.area for room in self.rooms)

    @property
    def base_construction(self) -> float:
        return self.total_area * self.base_rate

    @property
    def room_upcharge(self) -> float:
        """Extra cost from rooms priced above or below the base rate."""
        return sum(room.cost for room in self.rooms) - self.base_construction

    @property
    def labor(self) -> float:
        return self.base_construction * LABOR_SHARE

    @property
    def materials(self) -> float:
        return self.base_construction * MATERIAL_SHARE

    @property
    def contingency(self) -> float:
        return (self.base_construction + self.room_upcharge + self.labor + self.materials) * CONTINGENCY_SHARE

    @property
    def total(self) -> float:
        return self.base_construction + self.room_upcharge + self.labor + self.materials + self.contingency

    def to_dict(self) -> dict:
        return {
            "currency": self.currency,
            "baseRate": self.base_rate,
            "totalArea": round(self.total_area, 2),
            "rooms": [room.to_dict() for room in self.rooms],
            "baseConstruction": round(self.base_construction, 2),
            "roomUpcharge": round(self.room_upcharge, 2),
            "labor": round(self.labor, 2),
            "materials": round(self.materials, 2),
            "contingency": round(self.contingency, 2),
            "total": round(self.total, 2),
        }


def estimate_cost(
    model: GeometryModel,
    base_rate: float = DEFAULT_BASE_RATE,
    currency: str = "USD",
) -> CostEstimate:
    """Price every room by floor area times the base rate and its type multiplier."""
    estimate = CostEstimate(currency=currency, base_rate=base_rate)
    for room in model.rooms:
        multiplier = ROOM_COST_MULTIPLIERS.get(room.room_type, 1.0)
        estimate.rooms.append(RoomCost(
            name=room.name,
            area=room.area,
            multiplier=multiplier,
            cost=room.area * base_rate * multiplier,
        ))
    return estimate
