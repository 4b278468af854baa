"""Tests for view bases and the view projector."""

from __future__ import annotations

import math

import pytest

from aecview.errors import DegenerateGeometry, InvalidConfiguration
from aecview.geometry import polygon as poly
from aecview.geometry import vector as vec
from aecview.models.context import DoorContext, Footprint, NearbyDevice, OpeningDirection, SpaceContext
from aecview.models.element import BoundingBox, Element, ElementType
from aecview.models.options import ViewKind
from aecview.projection import (
    Category,
    Marker2D,
    Polygon2D,
    Polyline2D,
    TextAnchor2D,
    ViewProjector,
    elevation_basis,
    plan_basis,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _box(x0, y0, z0, x1, y1, z1) -> BoundingBox:
    return BoundingBox(min_x=x0, min_y=y0, min_z=z0, max_x=x1, max_y=y1, max_z=z1)


def _make_door_context(
    normal=(0.0, -1.0, 0.0),
    wall_box: BoundingBox | None = None,
    devices: list[NearbyDevice] | None = None,
    opening: OpeningDirection = OpeningDirection.LEFT_HAND_IN,
) -> DoorContext:
    door_box = _box(0, 0, 0, 1, 0.05, 2.1)
    door = Element(id=1, type=ElementType.DOOR, product_type_name="D1", bounding_box=door_box)
    wall = None
    if wall_box is not None:
        wall = Element(id=10, type=ElementType.WALL, bounding_box=wall_box)
    return DoorContext(
        door_id="door_1",
        door=door,
        host_wall=wall,
        center=door_box.center,
        normal=normal,
        opening_direction=opening,
        operation_type="SINGLE_SWING_LEFT",
        nearby_devices=devices or [],
        door_type_name="D1",
    )


def _make_device(element_id: int, cx: float, cy: float, cz: float) -> NearbyDevice:
    element = Element(
        id=element_id,
        type=ElementType.DEVICE,
        name=f"Switch {element_id}",
        bounding_box=_box(cx - 0.05, cy - 0.02, cz - 0.05, cx + 0.05, cy + 0.02, cz + 0.05),
    )
    return NearbyDevice(element=element, distance=0.5)


def _make_space_context(doors=(), windows=()) -> SpaceContext:
    space = Element(id=100, type=ElementType.SPACE, bounding_box=_box(0, 0, 0, 4, 3, 2.7))
    outline = poly.rectangle(0, 0, 4, 3)
    return SpaceContext(
        space_id="space_100",
        space=space,
        space_name="Office 1",
        footprint=Footprint(outline=outline, source="bounding_box", area=12.0, width=4.0, depth=3.0),
        gross_floor_area=12.0,
        ceiling_height=2.7,
        center=space.bounding_box.center,
        boundary_doors=list(doors),
        boundary_windows=list(windows),
    )


def _of(projection, kind, category):
    return [p for p in projection.primitives if isinstance(p, kind) and p.category is category]


# ---------------------------------------------------------------------------
# Bases
# ---------------------------------------------------------------------------

class TestViewBasis:
    """Orthonormal frames."""

    def test_front_elevation_basis(self):
        basis = elevation_basis((0.0, 0.0, 0.0), (0.0, -1.0, 0.0))
        assert basis.right == (1.0, 0.0, 0.0)
        assert basis.up == (0.0, 0.0, 1.0)
        assert basis.view_normal == (0.0, -1.0, 0.0)

    def test_back_elevation_mirrors_right(self):
        basis = elevation_basis((0.0, 0.0, 0.0), (0.0, -1.0, 0.0), back=True)
        assert basis.view_normal == (0.0, 1.0, 0.0)
        assert basis.right == (-1.0, 0.0, 0.0)
        assert basis.up == (0.0, 0.0, 1.0)

    def test_vertical_normal_uses_alternate_up(self):
        basis = elevation_basis((0.0, 0.0, 0.0), (0.0, 0.0, 1.0))
        for a, b in ((basis.right, basis.up), (basis.right, basis.view_normal), (basis.up, basis.view_normal)):
            assert vec.dot(a, b) == pytest.approx(0.0)
        assert vec.length(basis.right) == pytest.approx(1.0)
        assert vec.length(basis.up) == pytest.approx(1.0)

    def test_missing_normal_is_degenerate(self):
        with pytest.raises(DegenerateGeometry):
            elevation_basis((0.0, 0.0, 0.0), None, element_id=5)

    def test_zero_normal_is_degenerate(self):
        with pytest.raises(DegenerateGeometry):
            elevation_basis((0.0, 0.0, 0.0), (0.0, 0.0, 0.0))

    def test_projection_drops_view_component(self):
        basis = elevation_basis((1.0, 1.0, 1.0), (0.0, -1.0, 0.0))
        assert basis.project((2.0, 7.0, 3.0)) == pytest.approx((1.0, 2.0))
        assert basis.depth((2.0, 7.0, 3.0)) == pytest.approx(-6.0)

    def test_plan_basis(self):
        basis = plan_basis()
        assert basis.project((3.0, 4.0, 9.0)) == (3.0, 4.0)


# ---------------------------------------------------------------------------
# Door views
# ---------------------------------------------------------------------------

class TestDoorElevation:
    """Door, wall slice, devices in elevation."""

    def test_door_outline_extent(self):
        projection = ViewProjector().project(_make_door_context(), ViewKind.ELEVATION_FRONT)
        door = _of(projection, Polygon2D, Category.DOOR)[0]
        assert poly.bounds(door.points) == pytest.approx((-0.5, -1.05, 0.5, 1.05))
        assert projection.subject_id == 1
        assert projection.view_kind is ViewKind.ELEVATION_FRONT

    def test_wall_clipped_to_slice(self):
        ctx = _make_door_context(wall_box=_box(-5, -0.05, 0, 6, 0.2, 2.1))
        projection = ViewProjector().project(ctx, ViewKind.ELEVATION_FRONT)
        wall = _of(projection, Polygon2D, Category.WALL)[0]
        assert poly.bounds(wall.points) == pytest.approx((-1.0, -1.05, 1.0, 1.05))
        assert poly.is_simple_polygon(wall.points)

    def test_devices_inside_depth_window(self):
        near = _make_device(20, 0.9, -0.1, 1.1)
        far = _make_device(21, 0.9, -3.0, 1.1)
        ctx = _make_door_context(devices=[near, far])
        projection = ViewProjector().project(ctx, ViewKind.ELEVATION_FRONT)
        markers = _of(projection, Marker2D, Category.DEVICE)
        assert [m.element_id for m in markers] == [20]
        assert markers[0].center == pytest.approx((0.4, 0.05))
        assert markers[0].radius == pytest.approx(0.05)

    def test_framed_on_door(self):
        ctx = _make_door_context(wall_box=_box(-5, -0.05, 0, 6, 0.2, 3))
        projection = ViewProjector().project(ctx, ViewKind.ELEVATION_FRONT, frame_margin=0.2)
        assert projection.bounds() == pytest.approx((-0.5, -1.05, 0.5, 1.05))
        wall = _of(projection, Polygon2D, Category.WALL)[0]
        assert poly.bounds(wall.points) == pytest.approx((-0.7, -1.05, 0.7, 1.25))

    def test_devices_outside_frame_dropped(self):
        inside = _make_device(20, 0.9, -0.1, 1.1)
        beside = _make_device(21, 2.0, -0.1, 1.1)
        ctx = _make_door_context(devices=[inside, beside])
        projection = ViewProjector().project(ctx, ViewKind.ELEVATION_FRONT, frame_margin=0.5)
        assert [m.element_id for m in _of(projection, Marker2D, Category.DEVICE)] == [20]

    def test_missing_normal_fails(self):
        ctx = _make_door_context(normal=None)
        with pytest.raises(DegenerateGeometry):
            ViewProjector().project(ctx, ViewKind.ELEVATION_BACK)

    def test_caption_has_opening_direction(self):
        projection = ViewProjector().project(_make_door_context(), ViewKind.ELEVATION_BACK)
        assert "Opening: left-hand-in" in projection.caption
        assert "Operation: Left Swing" in projection.caption
        assert projection.title == "D1 (Back)"

    def test_categories_in_draw_order(self):
        ctx = _make_door_context(
            wall_box=_box(-0.1, -0.05, 0, 1.1, 0.2, 2.1),
            devices=[_make_device(20, 0.9, -0.1, 1.1)],
        )
        projection = ViewProjector().project(ctx, ViewKind.ELEVATION_FRONT)
        assert projection.categories() == [Category.WALL, Category.DOOR, Category.DEVICE]


class TestDoorPlan:
    """Door footprint and swing in plan."""

    def test_swing_arc_radius_and_hinge(self):
        projection = ViewProjector().project(_make_door_context(), ViewKind.PLAN)
        leaf, arc = _of(projection, Polyline2D, Category.DOOR)
        assert leaf.points[0] == pytest.approx((-0.5, -0.025))
        assert leaf.points[1] == pytest.approx((-0.5, -1.025))
        assert arc.dashed
        hinge = leaf.points[0]
        for x, y in arc.points:
            assert math.hypot(x - hinge[0], y - hinge[1]) == pytest.approx(1.0)

    def test_right_hand_hinge_on_other_side(self):
        ctx = _make_door_context(opening=OpeningDirection.RIGHT_HAND_IN)
        projection = ViewProjector().project(ctx, ViewKind.PLAN)
        leaf = _of(projection, Polyline2D, Category.DOOR)[0]
        assert leaf.points[0] == pytest.approx((0.5, -0.025))

    def test_no_swing_without_normal(self):
        projection = ViewProjector().project(_make_door_context(normal=None), ViewKind.PLAN)
        assert _of(projection, Polyline2D, Category.DOOR) == []
        assert len(_of(projection, Polygon2D, Category.DOOR)) == 1


# ---------------------------------------------------------------------------
# Space views
# ---------------------------------------------------------------------------

class TestSpacePlan:
    """Room floor, openings, dimensions."""

    def test_floor_openings_and_dimensions(self):
        door = Element(id=1, type=ElementType.DOOR, bounding_box=_box(1, -0.1, 0, 2, 0.1, 2.1))
        window = Element(id=2, type=ElementType.WINDOW, bounding_box=_box(3.9, 1, 1, 4.1, 2, 2))
        projection = ViewProjector().project(_make_space_context([door], [window]), ViewKind.PLAN)

        assert len(_of(projection, Polygon2D, Category.ROOM_FLOOR)) == 1
        assert [p.element_id for p in _of(projection, Polygon2D, Category.DOOR)] == [1]
        assert [p.element_id for p in _of(projection, Polygon2D, Category.WINDOW)] == [2]
        assert projection.dimension_box == pytest.approx((0.0, 0.0, 4.0, 3.0))
        assert projection.area == pytest.approx(12.0)
        assert projection.title == "Office 1"

    def test_door_swings_into_room(self):
        door = Element(id=1, type=ElementType.DOOR, bounding_box=_box(1, -0.1, 0, 2, 0.1, 2.1))
        projection = ViewProjector().project(_make_space_context([door]), ViewKind.PLAN)
        leaf, arc = _of(projection, Polyline2D, Category.DOOR)
        assert leaf.points == [(1.0, 0.0), (1.0, 1.0)]
        assert all(y >= -1e-9 for _, y in arc.points)

    def test_room_label(self):
        projection = ViewProjector().project(_make_space_context(), ViewKind.PLAN)
        labels = [p for p in projection.primitives if isinstance(p, TextAnchor2D)]
        assert labels[0].text == "Office 1"
        assert labels[0].position == pytest.approx((2.0, 1.5))

    def test_space_elevation_rejected(self):
        with pytest.raises(InvalidConfiguration):
            ViewProjector().project(_make_space_context(), ViewKind.ELEVATION_FRONT)
