"""Room/door/window graph that every pipeline stage and exporter shares."""

from enum import Enum
from typing import Any, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .validation import find_integrity_issues

Point3D = Tuple[float, float, float]

_MODEL_CONFIG = ConfigDict(frozen=True, populate_by_name=True, allow_inf_nan=False)

# Keyword -> canonical room type, checked in order
ROOM_TYPE_KEYWORDS = [
    ("bed", "bedroom"),
    ("bath", "bathroom"),
    ("toilet", "bathroom"),
    ("wc", "bathroom"),
    ("kitchen", "kitchen"),
    ("living", "living room"),
    ("lounge", "living room"),
    ("dining", "dining room"),
    ("hall", "hallway"),
    ("corridor", "hallway"),
    ("office", "office"),
    ("study", "office"),
    ("garage", "garage"),
]


def infer_room_type(name: str) -> Optional[str]:
    """Guess a room type from a free-form room name."""
    lowered = name.lower()
    for keyword, room_type in ROOM_TYPE_KEYWORDS:
        if keyword in lowered:
            return room_type
    return None


class WallSide(str, Enum):
    """Wall of a room, named by the axis it faces."""

    FRONT = "front"  # -z
    BACK = "back"  # +z
    LEFT = "left"  # -x
    RIGHT = "right"  # +x


WALL_ALIASES = {
    "north": WallSide.FRONT,
    "south": WallSide.BACK,
    "west": WallSide.LEFT,
    "east": WallSide.RIGHT,
}


class Position(BaseModel):
    """Room anchor: footprint center on x/z, base elevation on y."""

    model_config = _MODEL_CONFIG

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def as_tuple(self) -> Point3D:
        return (self.x, self.y, self.z)


class Room(BaseModel):
    """Axis-aligned room box."""

    model_config = _MODEL_CONFIG

    name: str = Field(min_length=1)
    width: float = Field(gt=0)  # along x
    length: float = Field(gt=0)  # along z
    height: float = Field(gt=0)  # along y
    position: Position = Field(default_factory=Position)
    connected_to: Tuple[str, ...] = Field(default=(), alias="connectedTo")
    type: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _accept_flat_coordinates(cls, data: Any) -> Any:
        """Accept ``x``/``y``/``z`` at the top level as emitted by model providers."""
        if not isinstance(data, dict):
            return data
        if "position" not in data and any(k in data for k in ("x", "y", "z")):
            data = dict(data)
            data["position"] = {k: data.pop(k, 0.0) for k in ("x", "y", "z")}
        return data

    @field_validator("name")
    @classmethod
    def _strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Room name cannot be empty")
        return v

    @field_validator("connected_to", mode="before")
    @classmethod
    def _normalize_connections(cls, v: Any) -> Any:
        if v is None:
            return ()
        if isinstance(v, str):
            v = [v]
        return tuple(sorted({str(name).strip() for name in v if str(name).strip()}))

    @property
    def room_type(self) -> Optional[str]:
        """Declared room type, falling back to one inferred from the name."""
        return self.type or infer_room_type(self.name)

    @property
    def area(self) -> float:
        return self.width * self.length

    @property
    def footprint(self) -> Tuple[float, float, float, float]:
        """(min_x, min_z, max_x, max_z) in the horizontal plane."""
        x, z = self.position.x, self.position.z
        return (
            x - self.width / 2,
            z - self.length / 2,
            x + self.width / 2,
            z + self.length / 2,
        )


class Window(BaseModel):
    """Window placed on one wall of a room."""

    model_config = _MODEL_CONFIG

    room: str
    wall: WallSide = WallSide.FRONT
    width: float = Field(default=1.2, gt=0)
    height: float = Field(default=1.5, gt=0)
    position: float = Field(default=0.5, ge=0.0, le=1.0)  # fraction along the wall

    @field_validator("wall", mode="before")
    @classmethod
    def _normalize_wall(cls, v: Any) -> Any:
        if isinstance(v, str):
            key = v.strip().lower()
            return WALL_ALIASES.get(key, key)
        return v


class Door(BaseModel):
    """Traversable opening between two rooms."""

    model_config = _MODEL_CONFIG

    from_room: str = Field(alias="from")
    to_room: str = Field(alias="to")
    width: float = Field(default=0.9, gt=0)
    height: float = Field(default=2.1, gt=0)


class GeometryModel(BaseModel):
    """Complete room/door/window graph.

    Instances are immutable. Referential integrity is checked on
    construction, so a model that exists is a valid model. An empty room
    list is allowed here and rejected by the consumers that need rooms.
    """

    model_config = _MODEL_CONFIG

    rooms: Tuple[Room, ...] = ()
    windows: Tuple[Window, ...] = ()
    doors: Tuple[Door, ...] = ()

    @model_validator(mode="after")
    def _check_integrity(self) -> "GeometryModel":
        issues = find_integrity_issues(self)
        if issues:
            raise ValueError("; ".join(issues))
        return self

    @property
    def room_names(self) -> list:
        return [room.name for room in self.rooms]

    @property
    def is_empty(self) -> bool:
        return not self.rooms

    @property
    def total_area(self) -> float:
        return sum(room.area for room in self.rooms)

    def get_room(self, name: str) -> Optional[Room]:
        """Look up a room by name."""
        for room in self.rooms:
            if room.name == name:
                return room
        return None

    def to_dict(self) -> dict:
        """Serialize with wire field names (``connectedTo``, ``from``, ``to``)."""
        return self.model_dump(mode="json", by_alias=True)

    @classmethod
    def from_dict(cls, data: dict) -> "GeometryModel":
        """Validate a wire-format dictionary into a model."""
        return cls.model_validate(data)
