"""Tests for single-element rendering and error capture."""

from __future__ import annotations

import xml.etree.ElementTree as ET

import pytest

from aecview.context.door import DoorContextResolver
from aecview.errors import DegenerateGeometry, InvalidConfiguration
from aecview.geometry import polygon as poly
from aecview.models.context import DoorContext, Footprint, OpeningDirection, SpaceContext
from aecview.models.element import BoundingBox, Element, ElementType
from aecview.models.options import RenderOptions, ViewKind
from aecview.render import DOOR_VIEWS, RenderResult, render_view, render_views, views_for
from aecview.spatial.index import SpatialIndex

NS = {"svg": "http://www.w3.org/2000/svg"}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _box(x0, y0, z0, x1, y1, z1) -> BoundingBox:
    return BoundingBox(min_x=x0, min_y=y0, min_z=z0, max_x=x1, max_y=y1, max_z=z1)


def _make_door_context(normal=(0.0, -1.0, 0.0)) -> DoorContext:
    door = Element(id=1, type=ElementType.DOOR, bounding_box=_box(0, 0, 0, 1, 0.05, 2.1))
    wall = Element(id=10, type=ElementType.WALL, bounding_box=_box(-0.1, -0.05, 0, 1.1, 0.2, 2.1))
    return DoorContext(
        door_id="door_1",
        door=door,
        host_wall=wall,
        center=door.bounding_box.center,
        normal=normal,
        opening_direction=OpeningDirection.RIGHT_HAND_OUT if normal else OpeningDirection.UNKNOWN,
    )


def _make_space_context() -> SpaceContext:
    space = Element(id=100, type=ElementType.SPACE, bounding_box=_box(0, 0, 0, 4, 3, 2.7))
    return SpaceContext(
        space_id="space_100",
        space=space,
        space_name="Office 1",
        footprint=Footprint(outline=poly.rectangle(0, 0, 4, 3), area=12.0, width=4.0, depth=3.0),
        gross_floor_area=12.0,
    )


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------

class TestRenderView:
    """One view, one result."""

    def test_door_elevation_succeeds(self):
        result = render_view(_make_door_context(), ViewKind.ELEVATION_FRONT)
        assert result.success
        assert result.error is None
        assert result.element_id == 1
        assert result.document.startswith("<?xml")
        assert "</svg>" in result.document

    def test_view_accepted_as_string(self):
        result = render_view(_make_door_context(), "elevation-back")
        assert result.success
        assert result.view_kind is ViewKind.ELEVATION_BACK

    def test_invalid_canvas_is_captured(self):
        result = render_view(_make_door_context(), ViewKind.PLAN, RenderOptions(width=0))
        assert not result.success
        assert isinstance(result.error, InvalidConfiguration)
        assert result.error_type == "InvalidConfiguration"
        assert result.document is None

    def test_missing_normal_fails_elevation_only(self):
        ctx = _make_door_context(normal=None)
        elevation = render_view(ctx, ViewKind.ELEVATION_FRONT)
        plan = render_view(ctx, ViewKind.PLAN)
        assert isinstance(elevation.error, DegenerateGeometry)
        assert elevation.error.element_id == 1
        assert plan.success

    def test_unknown_view_kind(self):
        result = render_view(_make_door_context(), "section")
        assert not result.success
        assert result.error_type == "InvalidConfiguration"
        assert "section" in result.message

    def test_space_elevation_rejected(self):
        result = render_view(_make_space_context(), ViewKind.ELEVATION_FRONT)
        assert result.error_type == "InvalidConfiguration"

    def test_output_is_deterministic(self):
        ctx = _make_door_context()
        first = render_view(ctx, ViewKind.PLAN).document
        second = render_view(ctx, ViewKind.PLAN).document
        assert first == second

    def test_to_dict(self):
        result = render_view(_make_door_context(), ViewKind.PLAN)
        data = result.to_dict()
        assert data["view_kind"] == "plan"
        assert data["success"] is True
        assert data["error_type"] is None
        assert data["document_length"] == len(result.document)

    def test_failed_result_to_dict(self):
        error = DegenerateGeometry(4, "flat")
        result = RenderResult(element_id=4, view_kind=ViewKind.PLAN, error=error, success=False, message=str(error))
        assert result.to_dict()["error_type"] == "DegenerateGeometry"
        assert result.to_dict()["document_length"] == 0


class TestRenderViews:
    """Every applicable view of one element."""

    def test_door_gets_three_views(self):
        results = render_views(_make_door_context())
        assert list(results) == list(DOOR_VIEWS)
        assert all(r.success for r in results.values())

    def test_space_gets_plan_only(self):
        results = render_views(_make_space_context())
        assert list(results) == [ViewKind.PLAN]
        assert results[ViewKind.PLAN].success

    def test_explicit_views(self):
        results = render_views(_make_door_context(), views=["plan"])
        assert list(results) == [ViewKind.PLAN]

    def test_views_for(self):
        assert views_for(_make_door_context()) == DOOR_VIEWS
        assert views_for(_make_space_context()) == (ViewKind.PLAN,)


class TestDoorFraming:
    """Door views are framed on the door, not on its surroundings."""

    def _render(self, view: ViewKind, margin: float) -> ET.Element:
        door = Element(id=1, type=ElementType.DOOR, bounding_box=_box(0, 0, 0, 1, 0.05, 2.1))
        wall = Element(id=10, type=ElementType.WALL, bounding_box=_box(-3, -0.05, 0, 4, 0.2, 3))
        ctx = DoorContextResolver(SpatialIndex([door, wall])).resolve(door)
        assert ctx.host_wall is not None
        result = render_view(ctx, view, RenderOptions(width=1000, height=1000, margin=margin))
        assert result.success
        return ET.fromstring(result.document.encode("utf-8"))

    @staticmethod
    def _polygon_points(root: ET.Element, group: str) -> list[tuple[float, float]]:
        polygon = root.find(f".//svg:g[@id='{group}']/svg:polygon", NS)
        return [tuple(float(v) for v in pair.split(",")) for pair in polygon.get("points").split()]

    @pytest.mark.parametrize("margin,expected", [(0.5, 677.42), (0.2, 840.0)])
    def test_door_height_with_host_wall(self, margin, expected):
        ys = [y for _, y in self._polygon_points(self._render(ViewKind.ELEVATION_FRONT, margin), "door")]
        assert max(ys) - min(ys) == pytest.approx(expected, abs=0.02)

    @pytest.mark.parametrize("view", list(DOOR_VIEWS))
    def test_wall_stays_on_canvas(self, view):
        points = self._polygon_points(self._render(view, 0.5), "wall")
        assert points
        for x, y in points:
            assert 0 <= x <= 1000
            assert 0 <= y <= 1000
