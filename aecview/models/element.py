"""Element — one typed, placed, triangulated unit of a building model.

Elements arrive from the model loader already triangulated and in world
coordinates (metres, Z up).  The core only ever reads them, so every model
here is frozen.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Iterator

from pydantic import BaseModel, ConfigDict, Field

from aecview.geometry import vector as vec

logger = logging.getLogger(__name__)


class ElementType(str, Enum):
    """Closed set of element kinds the resolvers pattern-match on."""

    DOOR = "door"
    WALL = "wall"
    WINDOW = "window"
    SPACE = "space"
    DEVICE = "device"


# Substrings of loader class names that mark an electrical/device element
_DEVICE_KEYWORDS = (
    "electrical",
    "electric",
    "switch",
    "outlet",
    "socket",
    "light",
    "fixture",
    "panel",
    "distribution",
    "sensor",
    "alarm",
)


def classify_ifc_class(class_name: str | None) -> ElementType | None:
    """Map a loader class name (``IfcDoor``, ``IFCWALLSTANDARDCASE``...) to a type.

    Returns ``None`` for classes the core does not reason about.
    """
    if not class_name:
        return None
    lower = class_name.lower()
    if "door" in lower:
        return ElementType.DOOR
    if "window" in lower:
        return ElementType.WINDOW
    if "wall" in lower:
        return ElementType.WALL
    if "space" in lower:
        return ElementType.SPACE
    if any(k in lower for k in _DEVICE_KEYWORDS):
        return ElementType.DEVICE
    return None


class BoundingBox(BaseModel):
    """Axis-aligned bounding box."""

    model_config = ConfigDict(frozen=True)

    min_x: float = 0.0
    min_y: float = 0.0
    min_z: float = 0.0
    max_x: float = 0.0
    max_y: float = 0.0
    max_z: float = 0.0

    @classmethod
    def from_points(cls, points: list[vec.Vec3]) -> BoundingBox:
        xs = [p[0] for p in points]
        ys = [p[1] for p in points]
        zs = [p[2] for p in points]
        return cls(
            min_x=min(xs), min_y=min(ys), min_z=min(zs),
            max_x=max(xs), max_y=max(ys), max_z=max(zs),
        )

    @property
    def center(self) -> vec.Vec3:
        return (
            (self.min_x + self.max_x) / 2,
            (self.min_y + self.max_y) / 2,
            (self.min_z + self.max_z) / 2,
        )

    @property
    def size(self) -> vec.Vec3:
        return (
            self.max_x - self.min_x,
            self.max_y - self.min_y,
            self.max_z - self.min_z,
        )

    @property
    def volume(self) -> float:
        dx, dy, dz = self.size
        if dx < 0 or dy < 0 or dz < 0:
            return 0.0
        return dx * dy * dz

    def is_degenerate(self, eps: float = 1e-9) -> bool:
        """True when min > max on any axis or the box encloses no volume."""
        dx, dy, dz = self.size
        return dx <= eps or dy <= eps or dz <= eps

    def expanded(self, tolerance: float) -> BoundingBox:
        return BoundingBox(
            min_x=self.min_x - tolerance,
            min_y=self.min_y - tolerance,
            min_z=self.min_z - tolerance,
            max_x=self.max_x + tolerance,
            max_y=self.max_y + tolerance,
            max_z=self.max_z + tolerance,
        )

    def intersects(self, other: BoundingBox) -> bool:
        """Overlap test; touching faces count as intersecting."""
        return (
            self.min_x <= other.max_x and other.min_x <= self.max_x
            and self.min_y <= other.max_y and other.min_y <= self.max_y
            and self.min_z <= other.max_z and other.min_z <= self.max_z
        )

    def intersection(self, other: BoundingBox) -> BoundingBox | None:
        """Overlap box, or ``None`` when the boxes are apart."""
        if not self.intersects(other):
            return None
        return BoundingBox(
            min_x=max(self.min_x, other.min_x),
            min_y=max(self.min_y, other.min_y),
            min_z=max(self.min_z, other.min_z),
            max_x=min(self.max_x, other.max_x),
            max_y=min(self.max_y, other.max_y),
            max_z=min(self.max_z, other.max_z),
        )

    def intersection_volume(self, other: BoundingBox) -> float:
        overlap = self.intersection(other)
        return overlap.volume if overlap is not None else 0.0

    def distance_to_point(self, point: vec.Vec3) -> float:
        """Euclidean distance from *point* to the box (0 inside)."""
        dx = max(self.min_x - point[0], 0.0, point[0] - self.max_x)
        dy = max(self.min_y - point[1], 0.0, point[1] - self.max_y)
        dz = max(self.min_z - point[2], 0.0, point[2] - self.max_z)
        return vec.length((dx, dy, dz))

    def distance_to_box(self, other: BoundingBox) -> float:
        """Gap between two boxes' surfaces (0 when they overlap)."""
        dx = max(other.min_x - self.max_x, 0.0, self.min_x - other.max_x)
        dy = max(other.min_y - self.max_y, 0.0, self.min_y - other.max_y)
        dz = max(other.min_z - self.max_z, 0.0, self.min_z - other.max_z)
        return vec.length((dx, dy, dz))

    def corners(self) -> list[vec.Vec3]:
        return [
            (x, y, z)
            for z in (self.min_z, self.max_z)
            for y in (self.min_y, self.max_y)
            for x in (self.min_x, self.max_x)
        ]


class Placement(BaseModel):
    """Local coordinate frame: origin plus local Z (axis) and local X (ref_direction)."""

    model_config = ConfigDict(frozen=True)

    location: vec.Vec3 = (0.0, 0.0, 0.0)
    axis: vec.Vec3 = (0.0, 0.0, 1.0)
    ref_direction: vec.Vec3 = (1.0, 0.0, 0.0)

    @property
    def forward(self) -> vec.Vec3 | None:
        """Local Y axis: the side a door panel opens towards.

        ``None`` when the frame is degenerate (parallel or zero axes).
        """
        return vec.normalize(vec.cross(self.axis, self.ref_direction))


class Surface(BaseModel):
    """A batch of triangles: shared vertices plus index triples."""

    model_config = ConfigDict(frozen=True)

    vertices: list[vec.Vec3] = Field(default_factory=list)
    faces: list[tuple[int, int, int]] = Field(default_factory=list)

    def triangles(self) -> Iterator[tuple[vec.Vec3, vec.Vec3, vec.Vec3]]:
        for a, b, c in self.faces:
            yield self.vertices[a], self.vertices[b], self.vertices[c]


class Element(BaseModel):
    """The atomic unit of the element graph."""

    model_config = ConfigDict(frozen=True)

    id: int
    type: ElementType
    ifc_class: str | None = None
    global_id: str | None = None
    name: str | None = None
    product_type_name: str | None = None
    storey_name: str | None = None

    bounding_box: BoundingBox = Field(default_factory=BoundingBox)
    placement: Placement | None = None
    surfaces: list[Surface] = Field(default_factory=list)

    # Authored plan outline (world XY), e.g. a space FootPrint profile
    profile: list[vec.Vec2] = Field(default_factory=list)

    # Authored attributes the resolvers may read (OperationType, LongName...)
    properties: dict[str, Any] = Field(default_factory=dict)

    def vertices(self) -> list[vec.Vec3]:
        """All surface vertices, in authored order."""
        return [v for s in self.surfaces for v in s.vertices]

    def sample_points(self) -> list[vec.Vec3]:
        """Surface vertices, or the bounding-box corners when none are authored."""
        points = self.vertices()
        return points if points else self.bounding_box.corners()

    @property
    def label(self) -> str:
        return self.name or self.product_type_name or f"{self.type.value.title()} {self.id}"


class ElementGraph(BaseModel):
    """All elements of one loaded model."""

    model_config = ConfigDict(frozen=True)

    name: str = ""
    kind: str = "architectural"
    """'architectural' or 'devices'."""

    elements: list[Element] = Field(default_factory=list)

    def of_type(self, *types: ElementType) -> list[Element]:
        return [e for e in self.elements if e.type in types]

    def get(self, element_id: int) -> Element | None:
        for e in self.elements:
            if e.id == element_id:
                return e
        return None

    @classmethod
    def from_records(
        cls,
        records: list[dict[str, Any]],
        *,
        name: str = "",
        kind: str = "architectural",
    ) -> ElementGraph:
        """Build a graph from loader dicts.

        Records without an explicit ``type`` are classified from
        ``ifc_class``; unclassifiable records are skipped.
        """
        elements: list[Element] = []
        skipped = 0
        for record in records:
            data = dict(record)
            if not data.get("type"):
                element_type = classify_ifc_class(data.get("ifc_class"))
                if element_type is None:
                    skipped += 1
                    logger.debug(
                        "Skipping record %s (%s): unsupported class",
                        data.get("id"), data.get("ifc_class"),
                    )
                    continue
                data["type"] = element_type
            elements.append(Element.model_validate(data))

        logger.info(
            "Built %s graph '%s': %d elements (%d skipped)",
            kind, name, len(elements), skipped,
        )
        return cls(name=name, kind=kind, elements=elements)
