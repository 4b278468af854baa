"""Tests for the element graph, context records, and render options."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from aecview.errors import InvalidConfiguration
from aecview.models import (
    BoundingBox,
    DoorContext,
    Element,
    ElementGraph,
    ElementType,
    NearbyDevice,
    OpeningDirection,
    Placement,
    RenderOptions,
    Surface,
    ViewKind,
    classify_ifc_class,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _make_box(x0, y0, z0, x1, y1, z1) -> BoundingBox:
    return BoundingBox(min_x=x0, min_y=y0, min_z=z0, max_x=x1, max_y=y1, max_z=z1)


def _make_element(element_id: int = 1, element_type: ElementType = ElementType.DOOR, **kw) -> Element:
    kw.setdefault("bounding_box", _make_box(0, 0, 0, 1, 0.05, 2.1))
    return Element(id=element_id, type=element_type, **kw)


# ---------------------------------------------------------------------------
# BoundingBox
# ---------------------------------------------------------------------------

class TestBoundingBox:
    """AABB math."""

    def test_center_size_volume(self):
        box = _make_box(0, 0, 0, 2, 4, 6)
        assert box.center == (1.0, 2.0, 3.0)
        assert box.size == (2.0, 4.0, 6.0)
        assert box.volume == pytest.approx(48.0)

    def test_degenerate_zero_thickness(self):
        assert _make_box(0, 0, 0, 1, 0, 2).is_degenerate()
        assert not _make_box(0, 0, 0, 1, 0.05, 2).is_degenerate()

    def test_inverted_box_is_degenerate(self):
        box = _make_box(1, 0, 0, 0, 1, 1)
        assert box.is_degenerate()
        assert box.volume == 0.0

    def test_touching_boxes_intersect(self):
        a = _make_box(0, 0, 0, 1, 1, 1)
        b = _make_box(1, 0, 0, 2, 1, 1)
        assert a.intersects(b)
        assert a.intersection_volume(b) == 0.0

    def test_intersection_volume(self):
        a = _make_box(0, 0, 0, 2, 2, 2)
        b = _make_box(1, 1, 1, 3, 3, 3)
        assert a.intersection_volume(b) == pytest.approx(1.0)
        assert a.intersection(b) == _make_box(1, 1, 1, 2, 2, 2)
        assert a.intersection(_make_box(5, 5, 5, 6, 6, 6)) is None

    def test_distance_to_box_and_point(self):
        a = _make_box(0, 0, 0, 1, 1, 1)
        b = _make_box(4, 0, 0, 5, 1, 1)
        assert a.distance_to_box(b) == pytest.approx(3.0)
        assert a.distance_to_point((0.5, 0.5, 0.5)) == 0.0
        assert a.distance_to_point((1.0, 4.0, 1.0)) == pytest.approx(3.0)

    def test_expanded(self):
        box = _make_box(0, 0, 0, 1, 1, 1).expanded(0.5)
        assert box.min_x == -0.5
        assert box.max_z == 1.5

    def test_corners(self):
        corners = _make_box(0, 0, 0, 1, 2, 3).corners()
        assert len(corners) == 8
        assert (1.0, 2.0, 3.0) in corners

    def test_from_points(self):
        box = BoundingBox.from_points([(1, 2, 3), (-1, 5, 0)])
        assert (box.min_x, box.max_y, box.min_z) == (-1.0, 5.0, 0.0)

    def test_frozen(self):
        box = _make_box(0, 0, 0, 1, 1, 1)
        with pytest.raises(ValidationError):
            box.min_x = 5.0


# ---------------------------------------------------------------------------
# Element & graph
# ---------------------------------------------------------------------------

class TestElement:
    """Element records and classification."""

    def test_default_placement_forward_is_local_y(self):
        assert Placement().forward == (0.0, 1.0, 0.0)

    def test_placement_not_invented(self):
        assert _make_element().placement is None

    def test_degenerate_placement_has_no_forward(self):
        p = Placement(axis=(1.0, 0.0, 0.0), ref_direction=(1.0, 0.0, 0.0))
        assert p.forward is None

    def test_sample_points_fall_back_to_corners(self):
        door = _make_element()
        assert len(door.sample_points()) == 8

    def test_sample_points_use_surfaces(self):
        surface = Surface(vertices=[(0, 0, 0), (1, 0, 0), (0, 1, 0)], faces=[(0, 1, 2)])
        el = _make_element(surfaces=[surface])
        assert el.sample_points() == [(0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (0.0, 1.0, 0.0)]
        assert len(list(surface.triangles())) == 1

    def test_label_fallbacks(self):
        assert _make_element(name="D-01").label == "D-01"
        assert _make_element(product_type_name="Single Flush").label == "Single Flush"
        assert _make_element(element_id=9).label == "Door 9"

    @pytest.mark.parametrize("name,expected", [
        ("IfcDoor", ElementType.DOOR),
        ("IFCDOORSTANDARDCASE", ElementType.DOOR),
        ("IfcWallStandardCase", ElementType.WALL),
        ("IfcWindow", ElementType.WINDOW),
        ("IfcSpace", ElementType.SPACE),
        ("IfcLightFixture", ElementType.DEVICE),
        ("IfcElectricAppliance", ElementType.DEVICE),
        ("IfcSwitchingDevice", ElementType.DEVICE),
        ("IfcSlab", None),
        (None, None),
    ])
    def test_classify_ifc_class(self, name, expected):
        assert classify_ifc_class(name) is expected

    def test_graph_from_records(self):
        records = [
            {"id": 1, "ifc_class": "IfcDoor", "bounding_box": {"max_x": 1, "max_y": 0.05, "max_z": 2.1}},
            {"id": 2, "ifc_class": "IfcWall"},
            {"id": 3, "ifc_class": "IfcSlab"},
            {"id": 4, "type": "space"},
        ]
        graph = ElementGraph.from_records(records, name="arch")
        assert [e.id for e in graph.elements] == [1, 2, 4]
        assert graph.get(1).type is ElementType.DOOR
        assert graph.get(1).bounding_box.max_z == 2.1
        assert [e.id for e in graph.of_type(ElementType.WALL)] == [2]
        assert graph.get(99) is None


# ---------------------------------------------------------------------------
# Context records
# ---------------------------------------------------------------------------

class TestDoorContextRecord:
    """DoorContext export."""

    def test_to_record(self):
        door = _make_element(1, global_id="2O2Fr$t4X7Zf8NOew3FLOH", product_type_name="D1")
        wall = _make_element(2, ElementType.WALL)
        device = _make_element(3, ElementType.DEVICE)
        ctx = DoorContext(
            door_id="door_1",
            door=door,
            host_wall=wall,
            normal=(0.0, -1.0, 0.0),
            opening_direction=OpeningDirection.LEFT_HAND_IN,
            nearby_devices=[NearbyDevice(element=device, distance=0.3)],
            door_type_name="D1",
            storey_name="Level 1",
        )
        record = ctx.to_record()
        assert record["doorId"] == "door_1"
        assert record["globalId"] == "2O2Fr$t4X7Zf8NOew3FLOH"
        assert record["hostWallId"] == 2
        assert record["openingDirection"] == "left-hand-in"
        assert record["nearbyDeviceIds"] == [3]
        assert record["deviceCount"] == 1
        assert ctx.element_id == 1

    def test_opening_direction_hand(self):
        assert OpeningDirection.RIGHT_HAND_OUT.hand == "right"
        assert OpeningDirection.LEFT_HAND_IN.hand == "left"
        assert OpeningDirection.UNKNOWN.hand is None


# ---------------------------------------------------------------------------
# RenderOptions & ViewKind
# ---------------------------------------------------------------------------

class TestRenderOptions:
    """Validation of per-call drawing options."""

    def test_defaults_are_valid(self):
        opts = RenderOptions()
        opts.check()
        assert (opts.width, opts.height, opts.margin) == (1000, 1000, 0.5)

    @pytest.mark.parametrize("update", [
        {"width": 0},
        {"height": -10},
        {"margin": -0.1},
        {"line_width": 0},
        {"font_size": 0},
        {"font_family": "   "},
        {"door_color": "url(javascript:x)"},
    ])
    def test_invalid_options_rejected(self, update):
        with pytest.raises(InvalidConfiguration):
            RenderOptions(**update).check()

    def test_colour_overrides_accepted(self):
        RenderOptions(door_color="#123", wall_color="#A0B0C0", device_color="red").check()

    def test_options_are_immutable(self):
        opts = RenderOptions()
        bigger = opts.model_copy(update={"width": 2000})
        assert opts.width == 1000
        assert bigger.width == 2000
        with pytest.raises(ValidationError):
            opts.width = 5


class TestViewKind:
    """View kind enum."""

    def test_values(self):
        assert ViewKind("elevation-front") is ViewKind.ELEVATION_FRONT
        assert ViewKind.ELEVATION_BACK.is_elevation
        assert not ViewKind.PLAN.is_elevation
        assert ViewKind.PLAN.title == "Plan"
