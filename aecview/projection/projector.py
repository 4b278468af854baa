"""ViewProjector — turns a context record into 2D primitives for one view.

Door views:
  * elevations show the door, a slice of its host wall, and the nearby
    devices that sit inside the depth window;
  * the plan shows the door footprint, the host wall segment, and a swing
    arc when the normal is known.

Space views (plan only) show the room floor, boundary doors with swing
arcs into the room, and boundary windows.
"""

from __future__ import annotations

import logging
import math
from typing import Union

from aecview.config import EngineSettings
from aecview.context.door import format_operation_type
from aecview.errors import DegenerateGeometry, InvalidConfiguration
from aecview.geometry import polygon as poly
from aecview.geometry.vector import Vec2
from aecview.models.context import DoorContext, SpaceContext
from aecview.models.element import Element
from aecview.models.options import ViewKind
from aecview.projection.basis import ViewBasis, elevation_basis, plan_basis
from aecview.projection.primitives import (
    Category,
    Marker2D,
    Polygon2D,
    Polyline2D,
    Primitive,
    Projection,
    TextAnchor2D,
)

logger = logging.getLogger(__name__)

Context = Union[DoorContext, SpaceContext]

# Segments per quarter-circle swing arc
_ARC_SEGMENTS = 16

# Smallest device marker radius (metres)
_MIN_MARKER_RADIUS_M = 0.03


def _outline(element: Element, basis: ViewBasis) -> list[Vec2]:
    """Convex hull of an element's projected sample points."""
    return poly.convex_hull(basis.project(p) for p in element.sample_points())


def _arc(center: Vec2, radius: float, start: float, sweep: float) -> list[Vec2]:
    cx, cy = center
    return [
        (
            cx + radius * math.cos(start + sweep * i / _ARC_SEGMENTS),
            cy + radius * math.sin(start + sweep * i / _ARC_SEGMENTS),
        )
        for i in range(_ARC_SEGMENTS + 1)
    ]


def swing_primitives(
    hinge: Vec2,
    closed_dir: Vec2,
    open_dir: Vec2,
    width: float,
    element_id: int | None,
) -> list[Primitive]:
    """Open leaf line plus a dashed quarter arc from the closed position.

    *closed_dir* and *open_dir* are unit vectors from the hinge.
    """
    start = math.atan2(closed_dir[1], closed_dir[0])
    end = math.atan2(open_dir[1], open_dir[0])
    sweep = (end - start + math.pi) % (2 * math.pi) - math.pi
    leaf_end = (hinge[0] + open_dir[0] * width, hinge[1] + open_dir[1] * width)
    return [
        Polyline2D(category=Category.DOOR, points=[hinge, leaf_end], element_id=element_id),
        Polyline2D(
            category=Category.DOOR,
            points=_arc(hinge, width, start, sweep),
            dashed=True,
            element_id=element_id,
        ),
    ]


class ViewProjector:
    """Project door and space contexts into view-basis primitives.

    Parameters
    ----------
    settings:
        Supplies the depth window and wall slice margins.
    """

    def __init__(self, settings: EngineSettings | None = None) -> None:
        self.settings = settings or EngineSettings()

    def project(
        self,
        context: Context,
        view_kind: ViewKind,
        frame_margin: float | None = None,
    ) -> Projection:
        """Dispatch on the context kind.

        Door views are framed on the door; *frame_margin* is the padding the
        drawing adds around that frame, and the wall slice and devices are
        clipped to it.  It defaults to the configured wall slice.

        Raises
        ------
        DegenerateGeometry
            If no usable basis or outline can be built for the element.
        InvalidConfiguration
            If the view kind does not apply to the context (space elevations).
        """
        view_kind = ViewKind(view_kind)
        if isinstance(context, DoorContext):
            if view_kind.is_elevation:
                return self.project_door_elevation(context, view_kind, frame_margin)
            return self.project_door_plan(context, frame_margin)
        if isinstance(context, SpaceContext):
            if view_kind.is_elevation:
                raise InvalidConfiguration(
                    f"view '{view_kind.value}' is not available for spaces"
                )
            return self.project_space_plan(context)
        raise TypeError(f"Unsupported context type: {type(context).__name__}")

    # ------------------------------------------------------------------
    # Doors
    # ------------------------------------------------------------------

    def _frame_margin(self, frame_margin: float | None) -> float:
        return self.settings.wall_slice_m if frame_margin is None else frame_margin

    def project_door_elevation(
        self,
        ctx: DoorContext,
        view_kind: ViewKind,
        frame_margin: float | None = None,
    ) -> Projection:
        door = ctx.door
        basis = elevation_basis(
            ctx.center,
            ctx.normal,
            back=view_kind is ViewKind.ELEVATION_BACK,
            element_id=door.id,
            vertical_tolerance=self.settings.vertical_tolerance,
        )

        door_outline = _outline(door, basis)
        door_box = poly.bounds(door_outline)
        if len(door_outline) < 3 or door_box is None:
            raise DegenerateGeometry(door.id, "door projects to a line in elevation")
        window = _padded(door_box, self._frame_margin(frame_margin))

        primitives: list[Primitive] = []
        wall = self._wall_slice(ctx.host_wall, basis, window)
        if wall is not None:
            primitives.append(wall)
        primitives.append(Polygon2D(category=Category.DOOR, points=door_outline, element_id=door.id))

        for nearby in ctx.nearby_devices:
            device = nearby.element
            if abs(basis.depth(device.bounding_box.center)) > self.settings.depth_window_m:
                logger.debug(
                    "Door %d: device %d outside depth window", door.id, device.id
                )
                continue
            extent = poly.bounds(basis.project(p) for p in device.sample_points())
            if extent is None:
                continue
            center = ((extent[0] + extent[2]) / 2, (extent[1] + extent[3]) / 2)
            if not _inside(center, window):
                logger.debug("Door %d: device %d outside the frame", door.id, device.id)
                continue
            radius = max(
                (extent[2] - extent[0]) / 2,
                (extent[3] - extent[1]) / 2,
                _MIN_MARKER_RADIUS_M,
            )
            primitives.append(
                Marker2D(category=Category.DEVICE, center=center, radius=radius, element_id=device.id)
            )
            primitives.append(
                TextAnchor2D(
                    category=Category.DEVICE,
                    position=(center[0], center[1] + radius),
                    text=device.label,
                    element_id=device.id,
                )
            )

        primitives.append(self._door_label(ctx, door_box))

        return Projection(
            view_kind=view_kind,
            basis=basis,
            subject_id=door.id,
            title=f"{ctx.door_type_name or door.label} ({view_kind.title})",
            caption=[
                f"Opening: {ctx.opening_direction.value}",
                f"Operation: {format_operation_type(ctx.operation_type)}",
            ],
            primitives=primitives,
            frame=door_box,
        )

    def project_door_plan(self, ctx: DoorContext, frame_margin: float | None = None) -> Projection:
        door = ctx.door
        basis = plan_basis(ctx.center)

        door_outline = _outline(door, basis)
        door_box = poly.bounds(door_outline)
        if len(door_outline) < 3 or door_box is None:
            raise DegenerateGeometry(door.id, "door has no plan footprint")

        swing: list[Primitive] = []
        if ctx.normal is not None:
            n = (ctx.normal[0], ctx.normal[1])
            # Left of a viewer standing on the normal side, facing the door
            left = (n[1], -n[0])
            if ctx.opening_direction.hand == "right":
                hinge_side = (-left[0], -left[1])
            else:
                hinge_side = left
            along = [p[0] * hinge_side[0] + p[1] * hinge_side[1] for p in door_outline]
            across = [p[0] * n[0] + p[1] * n[1] for p in door_outline]
            width = max(along) - min(along)
            hinge_reach = max(along)
            face = max(across)
            hinge = (
                hinge_side[0] * hinge_reach + n[0] * face,
                hinge_side[1] * hinge_reach + n[1] * face,
            )
            closed_dir = (-hinge_side[0], -hinge_side[1])
            if width > 0:
                swing = swing_primitives(hinge, closed_dir, n, width, door.id)

        # Door plus swing: the arc must stay on the canvas
        frame = poly.bounds(door_outline + [q for p in swing for q in p.extent_points()]) or door_box

        primitives: list[Primitive] = []
        wall = self._wall_slice(ctx.host_wall, basis, _padded(frame, self._frame_margin(frame_margin)))
        if wall is not None:
            primitives.append(wall)
        primitives.append(Polygon2D(category=Category.DOOR, points=door_outline, element_id=door.id))
        primitives.extend(swing)
        primitives.append(self._door_label(ctx, door_box))

        return Projection(
            view_kind=ViewKind.PLAN,
            basis=basis,
            subject_id=door.id,
            title=f"{ctx.door_type_name or door.label} ({ViewKind.PLAN.title})",
            caption=[f"Opening: {ctx.opening_direction.value}"],
            primitives=primitives,
            frame=frame,
        )

    def _wall_slice(
        self,
        wall: Element | None,
        basis: ViewBasis,
        window: tuple[float, float, float, float],
    ) -> Polygon2D | None:
        """Host wall outline clipped to *window* around the door."""
        if wall is None:
            return None
        depth = self.settings.depth_window_m
        points = [p for p in wall.sample_points() if abs(basis.depth(p)) <= depth]
        if not points:
            points = wall.sample_points()
        hull = poly.convex_hull(basis.project(p) for p in points)
        clipped = poly.clip_to_rect(hull, *window)
        if len(clipped) < 3:
            return None
        return Polygon2D(category=Category.WALL, points=clipped, element_id=wall.id)

    @staticmethod
    def _door_label(ctx: DoorContext, door_box: tuple[float, float, float, float]) -> TextAnchor2D:
        return TextAnchor2D(
            category=Category.DOOR,
            position=((door_box[0] + door_box[2]) / 2, door_box[3]),
            text=ctx.door_type_name or ctx.door.label,
            element_id=ctx.door.id,
        )

    # ------------------------------------------------------------------
    # Spaces
    # ------------------------------------------------------------------

    def project_space_plan(self, ctx: SpaceContext) -> Projection:
        basis = plan_basis()
        outline = list(ctx.footprint.outline)
        primitives: list[Primitive] = []

        if len(outline) >= 3:
            primitives.append(
                Polygon2D(category=Category.ROOM_FLOOR, points=outline, element_id=ctx.space.id)
            )
            room_center = poly.centroid(outline)
        else:
            room_center = (ctx.center[0], ctx.center[1])

        for window in ctx.boundary_windows:
            primitives.append(
                Polygon2D(category=Category.WINDOW, points=_plan_rect(window), element_id=window.id)
            )

        for door in ctx.boundary_doors:
            rect = _plan_rect(door)
            primitives.append(Polygon2D(category=Category.DOOR, points=rect, element_id=door.id))
            primitives.extend(_opening_swing(door, room_center))

        if outline:
            primitives.append(
                TextAnchor2D(
                    category=Category.ROOM_FLOOR,
                    position=room_center,
                    text=ctx.space_name,
                    element_id=ctx.space.id,
                )
            )

        caption = [f"Area: {ctx.gross_floor_area:.2f} m²"]
        if ctx.storey_name:
            caption.append(f"Storey: {ctx.storey_name}")
        if ctx.flags:
            caption.append("Flags: " + ", ".join(ctx.flags))

        return Projection(
            view_kind=ViewKind.PLAN,
            basis=basis,
            subject_id=ctx.space.id,
            title=ctx.space_name,
            caption=caption,
            primitives=primitives,
            dimension_box=poly.bounds(outline) if len(outline) >= 3 else None,
            area=ctx.gross_floor_area,
        )

    def project_many(self, context: Context, views: list[ViewKind]) -> dict[ViewKind, Projection]:
        return {ViewKind(v): self.project(context, v) for v in views}


def _plan_rect(element: Element) -> list[Vec2]:
    box = element.bounding_box
    return poly.rectangle(box.min_x, box.min_y, box.max_x, box.max_y)


def _opening_swing(door: Element, room_center: Vec2) -> list[Primitive]:
    """Swing arc for a boundary door, opening into the room."""
    box = door.bounding_box
    dx = box.max_x - box.min_x
    dy = box.max_y - box.min_y
    cx, cy = (box.min_x + box.max_x) / 2, (box.min_y + box.max_y) / 2

    if dx >= dy:
        width = dx
        into = (0.0, 1.0) if room_center[1] >= cy else (0.0, -1.0)
        hinge = (box.min_x, cy)
        closed_dir = (1.0, 0.0)
    else:
        width = dy
        into = (1.0, 0.0) if room_center[0] >= cx else (-1.0, 0.0)
        hinge = (cx, box.min_y)
        closed_dir = (0.0, 1.0)

    if width <= 0:
        return []
    return swing_primitives(hinge, closed_dir, into, width, door.id)


def _padded(box: tuple[float, float, float, float], margin: float) -> tuple[float, float, float, float]:
    return (box[0] - margin, box[1] - margin, box[2] + margin, box[3] + margin)


def _inside(point: Vec2, box: tuple[float, float, float, float]) -> bool:
    return box[0] <= point[0] <= box[2] and box[1] <= point[1] <= box[3]
