"""Spatial index over element bounding boxes."""

from aecview.spatial.index import SpatialIndex

__all__ = ["SpatialIndex"]
