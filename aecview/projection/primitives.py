"""2D drawing primitives in view-basis coordinates (metres)."""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from aecview.geometry import polygon as poly
from aecview.geometry.vector import Vec2
from aecview.models.options import ViewKind
from aecview.projection.basis import ViewBasis


class Category(str, Enum):
    """Styling bucket of a primitive; the order here is the draw order."""

    ROOM_FLOOR = "room_floor"
    WALL = "wall"
    WINDOW = "window"
    DOOR = "door"
    DEVICE = "device"
    DIMENSION = "dimension"

    @property
    def label(self) -> str:
        return {
            Category.ROOM_FLOOR: "Room floor",
            Category.WALL: "Wall",
            Category.WINDOW: "Window",
            Category.DOOR: "Door",
            Category.DEVICE: "Device",
            Category.DIMENSION: "Dimension",
        }[self]


class Polygon2D(BaseModel):
    """Closed, filled outline."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["polygon"] = "polygon"
    category: Category
    points: list[Vec2]
    element_id: int | None = None

    def extent_points(self) -> list[Vec2]:
        return list(self.points)


class Polyline2D(BaseModel):
    """Stroked edge chain (swing arcs, dimension lines)."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["polyline"] = "polyline"
    category: Category
    points: list[Vec2]
    closed: bool = False
    dashed: bool = False
    element_id: int | None = None

    def extent_points(self) -> list[Vec2]:
        return list(self.points)


class Marker2D(BaseModel):
    """Point symbol with a radius, used for devices."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["marker"] = "marker"
    category: Category
    center: Vec2
    radius: float
    element_id: int | None = None

    def extent_points(self) -> list[Vec2]:
        x, y = self.center
        r = self.radius
        return [(x - r, y - r), (x + r, y + r)]


class TextAnchor2D(BaseModel):
    """Label text pinned to a model-space point.

    Text does not contribute to the drawing extent.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["text"] = "text"
    category: Category
    position: Vec2
    text: str
    element_id: int | None = None

    def extent_points(self) -> list[Vec2]:
        return []


Primitive = Annotated[
    Union[Polygon2D, Polyline2D, Marker2D, TextAnchor2D],
    Field(discriminator="kind"),
]


class Projection(BaseModel):
    """Everything the emitter needs to draw one view of one element."""

    model_config = ConfigDict(frozen=True)

    view_kind: ViewKind
    basis: ViewBasis
    subject_id: int
    title: str = ""
    caption: list[str] = Field(default_factory=list)
    primitives: list[Primitive] = Field(default_factory=list)

    # Extent the view is framed on; context geometry outside it is clipped
    frame: tuple[float, float, float, float] | None = None

    # Plan-space dimensions, drawn only on space plans
    dimension_box: tuple[float, float, float, float] | None = None
    area: float | None = None

    def bounds(self) -> tuple[float, float, float, float] | None:
        """``(min_x, min_y, max_x, max_y)`` to fit on the canvas.

        The frame when one is set, otherwise all geometry; ``None`` when empty.
        """
        if self.frame is not None:
            return self.frame
        points: list[Vec2] = []
        for p in self.primitives:
            points.extend(p.extent_points())
        return poly.bounds(points)

    def categories(self) -> list[Category]:
        """Categories that actually appear in this view, in draw order."""
        present = {p.category for p in self.primitives if not isinstance(p, TextAnchor2D)}
        return [c for c in Category if c in present]
