"""Per-element rendering: context + view kind + options -> SVG or an error.

``render_view`` never raises for problems local to one element; it returns
a :class:`RenderResult` carrying either the document or the error.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Union

from aecview.config import EngineSettings
from aecview.drawing.emitter import SVGEmitter
from aecview.errors import AecviewError, DegenerateGeometry, InvalidConfiguration
from aecview.models.context import DoorContext, SpaceContext
from aecview.models.options import RenderOptions, ViewKind
from aecview.projection.projector import ViewProjector

logger = logging.getLogger(__name__)

Context = Union[DoorContext, SpaceContext]

DOOR_VIEWS = (ViewKind.ELEVATION_FRONT, ViewKind.ELEVATION_BACK, ViewKind.PLAN)
SPACE_VIEWS = (ViewKind.PLAN,)


@dataclass
class RenderResult:
    """Outcome of rendering one view of one element."""

    element_id: int | None
    view_kind: ViewKind
    document: str | None = None
    error: AecviewError | None = None
    success: bool = True
    message: str = ""

    @property
    def error_type(self) -> str | None:
        return type(self.error).__name__ if self.error is not None else None

    def to_dict(self) -> dict[str, Any]:
        return {
            "element_id": self.element_id,
            "view_kind": self.view_kind.value,
            "success": self.success,
            "error_type": self.error_type,
            "message": self.message,
            "document_length": len(self.document) if self.document else 0,
        }


def views_for(context: Context) -> tuple[ViewKind, ...]:
    """Every view kind that applies to *context*."""
    return DOOR_VIEWS if isinstance(context, DoorContext) else SPACE_VIEWS


def _element_id(context: Any) -> int | None:
    return getattr(context, "element_id", None)


def render_view(
    context: Context,
    view_kind: ViewKind | str,
    options: RenderOptions | None = None,
    settings: EngineSettings | None = None,
) -> RenderResult:
    """Render one view of one context.

    Options are validated first, then the context is projected, then the
    SVG is emitted.  ``InvalidConfiguration`` and ``DegenerateGeometry``
    come back inside the result.
    """
    element_id = _element_id(context)
    try:
        kind = ViewKind(view_kind)
    except ValueError:
        error = InvalidConfiguration(f"unknown view kind {view_kind!r}")
        return RenderResult(
            element_id=element_id,
            view_kind=ViewKind.PLAN,
            error=error,
            success=False,
            message=str(error),
        )

    try:
        emitter = SVGEmitter(options)
        projection = ViewProjector(settings).project(context, kind, frame_margin=emitter.options.margin)
        document = emitter.emit(projection)
    except (DegenerateGeometry, InvalidConfiguration) as exc:
        logger.debug("Render of element %s (%s) failed: %s", element_id, kind.value, exc)
        return RenderResult(
            element_id=element_id,
            view_kind=kind,
            error=exc,
            success=False,
            message=str(exc),
        )

    return RenderResult(
        element_id=element_id,
        view_kind=kind,
        document=document,
        message=f"Rendered {kind.value} view ({len(document)} bytes)",
    )


def render_views(
    context: Context,
    options: RenderOptions | None = None,
    settings: EngineSettings | None = None,
    views: Iterable[ViewKind | str] | None = None,
) -> dict[ViewKind, RenderResult]:
    """Render *views* (default: every view valid for the context kind)."""
    kinds = [ViewKind(v) for v in views] if views is not None else list(views_for(context))
    return {kind: render_view(context, kind, options, settings) for kind in kinds}
