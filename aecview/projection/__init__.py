"""View projection: 3D context records to 2D primitives."""

from aecview.projection.basis import ViewBasis, elevation_basis, plan_basis
from aecview.projection.primitives import (
    Category,
    Marker2D,
    Polygon2D,
    Polyline2D,
    Projection,
    TextAnchor2D,
)
from aecview.projection.projector import ViewProjector

__all__ = [
    "Category",
    "Marker2D",
    "Polygon2D",
    "Polyline2D",
    "Projection",
    "TextAnchor2D",
    "ViewBasis",
    "ViewProjector",
    "elevation_basis",
    "plan_basis",
]
