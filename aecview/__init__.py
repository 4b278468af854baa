"""aecview — door and room context resolution with deterministic SVG drawings."""

__version__ = "1.0.0"

from aecview.api.facade import ContextEngine
from aecview.batch import BatchRenderer, BatchReport, ItemOutcome
from aecview.config import EngineSettings, load_settings
from aecview.context.door import DoorContextResolver, format_operation_type, resolve_door_contexts
from aecview.context.filters import filter_door_contexts, filter_space_contexts, value_counts
from aecview.context.space import SpaceContextResolver, resolve_space_contexts, storey_names
from aecview.drawing.emitter import SVGEmitter, emit_document
from aecview.errors import AecviewError, DegenerateGeometry, InvalidConfiguration
from aecview.models.context import DoorContext, Footprint, OpeningDirection, SpaceContext, SpaceFunction
from aecview.models.element import (
    BoundingBox,
    Element,
    ElementGraph,
    ElementType,
    Placement,
    Surface,
)
from aecview.models.options import RenderOptions, ViewKind
from aecview.projection.projector import ViewProjector
from aecview.render import RenderResult, render_view, render_views
from aecview.spatial.index import SpatialIndex

__all__ = [
    "AecviewError",
    "BatchRenderer",
    "BatchReport",
    "BoundingBox",
    "ContextEngine",
    "DegenerateGeometry",
    "DoorContext",
    "DoorContextResolver",
    "Element",
    "ElementGraph",
    "ElementType",
    "EngineSettings",
    "Footprint",
    "InvalidConfiguration",
    "ItemOutcome",
    "OpeningDirection",
    "Placement",
    "RenderOptions",
    "RenderResult",
    "SVGEmitter",
    "SpaceContext",
    "SpaceContextResolver",
    "SpaceFunction",
    "SpatialIndex",
    "Surface",
    "ViewKind",
    "ViewProjector",
    "emit_document",
    "filter_door_contexts",
    "filter_space_contexts",
    "format_operation_type",
    "load_settings",
    "render_view",
    "render_views",
    "resolve_door_contexts",
    "resolve_space_contexts",
    "storey_names",
    "value_counts",
]
