"""Pydantic data models for the element graph, context records, and options."""

from aecview.models.context import (
    DoorContext,
    Footprint,
    NearbyDevice,
    OpeningDirection,
    SpaceContext,
    SpaceFunction,
)
from aecview.models.element import (
    BoundingBox,
    Element,
    ElementGraph,
    ElementType,
    Placement,
    Surface,
    classify_ifc_class,
)
from aecview.models.options import RenderOptions, ViewKind

__all__ = [
    "BoundingBox",
    "DoorContext",
    "Element",
    "ElementGraph",
    "ElementType",
    "Footprint",
    "NearbyDevice",
    "OpeningDirection",
    "Placement",
    "RenderOptions",
    "SpaceContext",
    "SpaceFunction",
    "Surface",
    "ViewKind",
    "classify_ifc_class",
]
