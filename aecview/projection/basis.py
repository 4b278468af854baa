"""ViewBasis — orthonormal frame that 3D geometry is projected into."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from aecview.config import VERTICAL_TOLERANCE, WORLD_UP
from aecview.errors import DegenerateGeometry
from aecview.geometry import vector as vec
from aecview.geometry.vector import Vec2, Vec3

# Used as the drawing up direction when the view looks straight up or down
_ALTERNATE_UP: Vec3 = (0.0, 1.0, 0.0)


class ViewBasis(BaseModel):
    """``right`` and ``up`` span the drawing; ``view_normal`` points at the viewer."""

    model_config = ConfigDict(frozen=True)

    origin: Vec3
    right: Vec3
    up: Vec3
    view_normal: Vec3

    def project(self, point: Vec3) -> Vec2:
        """Drop the component along ``view_normal``."""
        d = vec.sub(point, self.origin)
        return (vec.dot(d, self.right), vec.dot(d, self.up))

    def depth(self, point: Vec3) -> float:
        """Signed distance towards the viewer."""
        return vec.dot(vec.sub(point, self.origin), self.view_normal)


def elevation_basis(
    origin: Vec3,
    normal: Vec3 | None,
    back: bool = False,
    element_id: int | str | None = None,
    vertical_tolerance: float = VERTICAL_TOLERANCE,
) -> ViewBasis:
    """Frame for looking at a door face-on.

    The viewer stands on the *normal* side (the opposite side for *back*).

    Raises
    ------
    DegenerateGeometry
        If the normal is missing or has zero length.
    """
    if normal is None:
        raise DegenerateGeometry(element_id, "door normal is unknown")
    view_normal = vec.normalize(normal)
    if view_normal is None:
        raise DegenerateGeometry(element_id, "door normal has zero length")
    if back:
        view_normal = vec.negate(view_normal)

    up = WORLD_UP
    if abs(vec.dot(view_normal, up)) > 1.0 - vertical_tolerance:
        up = _ALTERNATE_UP

    right = vec.normalize(vec.cross(up, view_normal))
    if right is None:
        raise DegenerateGeometry(element_id, "view basis collapsed")
    up = vec.cross(view_normal, right)

    return ViewBasis(
        origin=origin,
        right=vec.clean(right),
        up=vec.clean(up),
        view_normal=vec.clean(view_normal),
    )


def plan_basis(origin: Vec3 = (0.0, 0.0, 0.0)) -> ViewBasis:
    """Top-down frame: world X to the right, world Y up the page."""
    return ViewBasis(
        origin=origin,
        right=(1.0, 0.0, 0.0),
        up=(0.0, 1.0, 0.0),
        view_normal=WORLD_UP,
    )
