"""Context records — derived geometric facts about one door or one space.

Computed wholesale per model load and never patched afterwards.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from aecview.geometry.vector import Vec2, Vec3
from aecview.models.element import Element


class OpeningDirection(str, Enum):
    LEFT_HAND_IN = "left-hand-in"
    LEFT_HAND_OUT = "left-hand-out"
    RIGHT_HAND_IN = "right-hand-in"
    RIGHT_HAND_OUT = "right-hand-out"
    UNKNOWN = "unknown"

    @property
    def hand(self) -> str | None:
        if self is OpeningDirection.UNKNOWN:
            return None
        return self.value.split("-")[0]


class SpaceFunction(str, Enum):
    """Room function vocabulary used for filtering and export."""

    OFFICE = "OFFICE"
    MEETING = "MEETING"
    CONFERENCE = "CONFERENCE"
    BATHROOM = "BATHROOM"
    KITCHEN = "KITCHEN"
    STORAGE = "STORAGE"
    CORRIDOR = "CORRIDOR"
    LOBBY = "LOBBY"
    STAIRWELL = "STAIRWELL"
    ELEVATOR = "ELEVATOR"
    MECHANICAL = "MECHANICAL"
    ELECTRICAL = "ELECTRICAL"
    SERVER = "SERVER"
    RECEPTION = "RECEPTION"
    CAFETERIA = "CAFETERIA"
    LOUNGE = "LOUNGE"
    BEDROOM = "BEDROOM"
    LIVING = "LIVING"
    DINING = "DINING"
    GARAGE = "GARAGE"
    BALCONY = "BALCONY"
    TERRACE = "TERRACE"
    OTHER = "OTHER"


class NearbyDevice(BaseModel):
    """A device close to a door, with its distance from the door centre."""

    model_config = ConfigDict(frozen=True)

    element: Element
    distance: float


class DoorContext(BaseModel):
    """Everything the drawing pipeline needs to know about one door."""

    model_config = ConfigDict(frozen=True)

    door_id: str
    door: Element
    host_wall: Element | None = None
    center: Vec3 = (0.0, 0.0, 0.0)
    normal: Vec3 | None = None
    """Unit outward opening direction, or ``None`` when it cannot be derived."""

    opening_direction: OpeningDirection = OpeningDirection.UNKNOWN
    operation_type: str | None = None
    nearby_devices: list[NearbyDevice] = Field(default_factory=list)
    door_type_name: str | None = None
    storey_name: str | None = None

    @property
    def element_id(self) -> int:
        return self.door.id

    def to_record(self) -> dict[str, Any]:
        """Flat export record (one row per door)."""
        return {
            "doorId": self.door_id,
            "globalId": self.door.global_id,
            "doorTypeName": self.door_type_name,
            "storeyName": self.storey_name,
            "openingDirection": self.opening_direction.value,
            "operationType": self.operation_type,
            "hostWallId": self.host_wall.id if self.host_wall else None,
            "nearbyDeviceIds": [d.element.id for d in self.nearby_devices],
            "deviceCount": len(self.nearby_devices),
        }


class Footprint(BaseModel):
    """Horizontal outline of a space."""

    model_config = ConfigDict(frozen=True)

    outline: list[Vec2] = Field(default_factory=list)
    source: str = "geometry"
    """'profile', 'geometry' or 'bounding_box'."""

    area: float = 0.0
    width: float = 0.0
    depth: float = 0.0
    is_simple: bool = True


class SpaceContext(BaseModel):
    """Everything the floor-plan pipeline needs to know about one room."""

    model_config = ConfigDict(frozen=True)

    space_id: str
    space: Element
    space_name: str
    space_type: str | None = None
    space_function: SpaceFunction | None = None
    storey_name: str | None = None

    footprint: Footprint = Field(default_factory=Footprint)
    gross_floor_area: float = 0.0
    ceiling_height: float = 0.0
    floor_level: float = 0.0
    center: Vec3 = (0.0, 0.0, 0.0)

    boundary_doors: list[Element] = Field(default_factory=list)
    boundary_windows: list[Element] = Field(default_factory=list)

    flags: list[str] = Field(default_factory=list)
    """Data-quality markers such as 'zero_area' or 'self_intersecting'."""

    @property
    def element_id(self) -> int:
        return self.space.id

    @property
    def bounding_box_2d(self) -> dict[str, float]:
        return {"width": self.footprint.width, "depth": self.footprint.depth}

    def to_record(self) -> dict[str, Any]:
        """Flat export record (one row per space)."""
        return {
            "spaceId": self.space_id,
            "spaceName": self.space_name,
            "spaceType": self.space_type,
            "spaceFunction": self.space_function.value if self.space_function else None,
            "storeyName": self.storey_name,
            "grossFloorArea": round(self.gross_floor_area, 3),
            "height": round(self.ceiling_height, 3),
            "width": round(self.footprint.width, 3),
            "depth": round(self.footprint.depth, 3),
            "doorCount": len(self.boundary_doors),
            "windowCount": len(self.boundary_windows),
            "flags": list(self.flags),
        }
