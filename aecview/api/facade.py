"""ContextEngine — the single entry point for context resolution and drawing.

Usage::

    from aecview import ContextEngine, ElementGraph

    engine = ContextEngine(ElementGraph.from_records(arch_records),
                           devices=ElementGraph.from_records(dev_records, kind="devices"))
    doors = engine.door_contexts()
    result = engine.render(doors[0], "elevation-front")
    report = engine.render_batch(views=["plan"])
    print(report.summary())
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Sequence, Union

from aecview.batch import BatchReport, BatchRenderer
from aecview.config import EngineSettings, load_settings
from aecview.context.door import resolve_door_contexts
from aecview.context.filters import (
    FilterValues,
    filter_door_contexts,
    filter_space_contexts,
    parse_values,
)
from aecview.context.space import resolve_space_contexts, storey_matches, storey_names
from aecview.models.context import DoorContext, SpaceContext
from aecview.models.element import ElementGraph, ElementType
from aecview.models.options import RenderOptions, ViewKind
from aecview.render import RenderResult, render_view, render_views
from aecview.spatial.index import SpatialIndex

logger = logging.getLogger(__name__)

Context = Union[DoorContext, SpaceContext]


class ContextEngine:
    """Resolve, filter, and draw contexts for one loaded model pair.

    Spatial indices are built once per model.  Context records are
    resolved lazily, cached, and only ever replaced wholesale by
    :meth:`reload`.

    Parameters
    ----------
    architectural:
        The architectural element graph (doors, walls, windows, spaces).
    devices:
        Optional co-located devices graph.
    settings:
        Tolerances and concurrency; defaults to :func:`load_settings`.
    """

    def __init__(
        self,
        architectural: ElementGraph,
        devices: ElementGraph | None = None,
        settings: EngineSettings | None = None,
    ) -> None:
        self.settings = settings or load_settings()
        if self.settings.log_level:
            logging.getLogger("aecview").setLevel(self.settings.log_level.upper())

        self.architectural = architectural
        self.devices = devices
        self._build_indices()

    def _build_indices(self) -> None:
        cell = self.settings.index_cell_size_m
        self.architectural_index = SpatialIndex.from_graph(self.architectural, cell_size=cell)
        self.devices_index = (
            SpatialIndex.from_graph(self.devices, cell_size=cell) if self.devices is not None else None
        )
        self._doors: list[DoorContext] | None = None
        self._spaces: list[SpaceContext] | None = None
        logger.info(
            "Engine ready: %d architectural elements, %d device elements",
            len(self.architectural_index),
            len(self.devices_index) if self.devices_index is not None else 0,
        )

    def reload(
        self,
        architectural: ElementGraph | None = None,
        devices: ElementGraph | None = None,
    ) -> None:
        """Swap in new model(s), rebuild the indices, and drop every cached context."""
        if architectural is not None:
            self.architectural = architectural
        if devices is not None:
            self.devices = devices
        self._build_indices()

    # ------------------------------------------------------------------
    # Contexts
    # ------------------------------------------------------------------

    def door_contexts(self) -> list[DoorContext]:
        if self._doors is None:
            self._doors = resolve_door_contexts(
                self.architectural_index, self.devices_index, self.settings
            )
        return list(self._doors)

    def space_contexts(self, storeys: FilterValues = None) -> list[SpaceContext]:
        """All space contexts, or those on storeys matching *storeys*."""
        if self._spaces is None:
            self._spaces = resolve_space_contexts(self.architectural_index, settings=self.settings)
        wanted = parse_values(storeys)
        if not wanted:
            return list(self._spaces)
        return [c for c in self._spaces if storey_matches(c.storey_name, wanted)]

    def storeys(self) -> list[str]:
        return storey_names(self.space_contexts())

    def door_records(self) -> list[dict[str, Any]]:
        return [c.to_record() for c in self.door_contexts()]

    def space_records(self) -> list[dict[str, Any]]:
        return [c.to_record() for c in self.space_contexts()]

    def find_context(self, key: int | str) -> Context | None:
        """Look a context up by element id, door/space id, or global id."""
        for ctx in [*self.door_contexts(), *self.space_contexts()]:
            if isinstance(key, int):
                if ctx.element_id == key:
                    return ctx
                continue
            own_id = ctx.door_id if isinstance(ctx, DoorContext) else ctx.space_id
            element = ctx.door if isinstance(ctx, DoorContext) else ctx.space
            if key in (own_id, element.global_id):
                return ctx
        return None

    # ------------------------------------------------------------------
    # Filtering
    # ------------------------------------------------------------------

    def filter_doors(
        self,
        *,
        storeys: FilterValues = None,
        door_types: FilterValues = None,
        search: str | None = None,
        ids: FilterValues = None,
    ) -> list[DoorContext]:
        return filter_door_contexts(
            self.door_contexts(), storeys=storeys, door_types=door_types, search=search, ids=ids
        )

    def filter_spaces(
        self,
        *,
        storeys: FilterValues = None,
        space_types: FilterValues = None,
        functions: FilterValues = None,
        search: str | None = None,
        ids: FilterValues = None,
    ) -> list[SpaceContext]:
        return filter_space_contexts(
            self.space_contexts(),
            storeys=storeys,
            space_types=space_types,
            functions=functions,
            search=search,
            ids=ids,
        )

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def render(
        self,
        context: Context | int | str,
        view_kind: ViewKind | str = ViewKind.PLAN,
        options: RenderOptions | None = None,
    ) -> RenderResult:
        """Render one view.  *context* may be a record or a lookup key.

        Raises
        ------
        KeyError
            If a lookup key matches no resolved context.
        """
        if isinstance(context, (int, str)):
            found = self.find_context(context)
            if found is None:
                raise KeyError(f"No door or space context for {context!r}")
            context = found
        return render_view(context, view_kind, options, self.settings)

    def render_all_views(
        self,
        context: Context,
        options: RenderOptions | None = None,
    ) -> dict[ViewKind, RenderResult]:
        return render_views(context, options, self.settings)

    def render_batch(
        self,
        contexts: Sequence[Context] | None = None,
        views: Iterable[ViewKind | str] | None = None,
        options: RenderOptions | None = None,
    ) -> BatchReport:
        """Render many contexts (default: every door and space) on the worker pool."""
        if contexts is None:
            contexts = [*self.door_contexts(), *self.space_contexts()]
        renderer = BatchRenderer(self.settings.max_workers, self.settings)
        return renderer.render_contexts(contexts, views, options)

    def process_doors(
        self,
        views: Iterable[ViewKind | str] | None = None,
        options: RenderOptions | None = None,
    ) -> BatchReport:
        """Resolve and render every door of the model, one isolated job per door."""
        doors = self.architectural_index.of_type(ElementType.DOOR)
        renderer = BatchRenderer(self.settings.max_workers, self.settings)
        return renderer.process_doors(
            doors, self.architectural_index, self.devices_index, views, options
        )
