"""SpatialIndex — uniform grid hash over element bounding boxes.

Built once per loaded model and read-only afterwards, so concurrent
queries need no locking.  Uses pure Python AABB math, like the clash
detector it grew out of.
"""

from __future__ import annotations

import logging
import math
from collections import defaultdict
from typing import Iterable

from aecview.config import INDEX_CELL_SIZE_M
from aecview.geometry.vector import Vec3
from aecview.models.element import BoundingBox, Element, ElementGraph, ElementType

logger = logging.getLogger(__name__)

# Elements (or queries) spanning more cells than this skip the grid
_MAX_CELLS = 4096

Cell = tuple[int, int, int]


class SpatialIndex:
    """Bounding-volume index answering box-overlap and radius queries.

    Parameters
    ----------
    elements:
        Elements to index.
    cell_size:
        Grid cell edge length in metres.
    name:
        Optional label used in log messages.
    """

    def __init__(
        self,
        elements: Iterable[Element],
        cell_size: float = INDEX_CELL_SIZE_M,
        name: str = "",
    ) -> None:
        if cell_size <= 0:
            raise ValueError(f"cell_size must be positive, got {cell_size}")
        self.cell_size = cell_size
        self.name = name
        self._elements: dict[int, Element] = {}
        self._cells: dict[Cell, list[int]] = defaultdict(list)
        self._oversized: list[int] = []

        for element in elements:
            self._insert(element)

        logger.debug(
            "Indexed %d elements for '%s' (%d cells, %d oversized)",
            len(self._elements), name, len(self._cells), len(self._oversized),
        )

    @classmethod
    def from_graph(cls, graph: ElementGraph, cell_size: float = INDEX_CELL_SIZE_M) -> SpatialIndex:
        return cls(graph.elements, cell_size=cell_size, name=graph.name or graph.kind)

    def __len__(self) -> int:
        return len(self._elements)

    def _cell_range(self, box: BoundingBox) -> tuple[Cell, Cell]:
        s = self.cell_size
        lo = (math.floor(box.min_x / s), math.floor(box.min_y / s), math.floor(box.min_z / s))
        hi = (math.floor(box.max_x / s), math.floor(box.max_y / s), math.floor(box.max_z / s))
        return lo, hi

    @staticmethod
    def _cell_count(lo: Cell, hi: Cell) -> int:
        return (hi[0] - lo[0] + 1) * (hi[1] - lo[1] + 1) * (hi[2] - lo[2] + 1)

    def _insert(self, element: Element) -> None:
        if element.id in self._elements:
            logger.debug("Duplicate element id %d in '%s', keeping first", element.id, self.name)
            return
        self._elements[element.id] = element

        box = element.bounding_box
        if box.min_x > box.max_x or box.min_y > box.max_y or box.min_z > box.max_z:
            self._oversized.append(element.id)
            return

        lo, hi = self._cell_range(box)
        if self._cell_count(lo, hi) > _MAX_CELLS:
            self._oversized.append(element.id)
            return
        for i in range(lo[0], hi[0] + 1):
            for j in range(lo[1], hi[1] + 1):
                for k in range(lo[2], hi[2] + 1):
                    self._cells[(i, j, k)].append(element.id)

    def _candidates(self, box: BoundingBox) -> set[int]:
        lo, hi = self._cell_range(box)
        if self._cell_count(lo, hi) > _MAX_CELLS:
            return set(self._elements)
        found: set[int] = set(self._oversized)
        for i in range(lo[0], hi[0] + 1):
            for j in range(lo[1], hi[1] + 1):
                for k in range(lo[2], hi[2] + 1):
                    found.update(self._cells.get((i, j, k), ()))
        return found

    def get(self, element_id: int) -> Element | None:
        return self._elements.get(element_id)

    def of_type(self, *types: ElementType) -> list[Element]:
        """All indexed elements of the given types, ordered by id."""
        return sorted(
            (e for e in self._elements.values() if not types or e.type in types),
            key=lambda e: e.id,
        )

    def query_box(
        self,
        box: BoundingBox,
        types: Iterable[ElementType] | None = None,
    ) -> list[Element]:
        """Elements whose bounding box intersects *box*, ordered by id."""
        wanted = set(types) if types is not None else None
        hits = []
        for element_id in self._candidates(box):
            element = self._elements[element_id]
            if wanted is not None and element.type not in wanted:
                continue
            if element.bounding_box.intersects(box):
                hits.append(element)
        return sorted(hits, key=lambda e: e.id)

    def query_radius(
        self,
        point: Vec3,
        radius: float,
        types: Iterable[ElementType] | None = None,
    ) -> list[tuple[Element, float]]:
        """Elements whose bounding box lies within *radius* of *point*.

        Returns ``(element, box_distance)`` pairs sorted by distance, then id.
        """
        search = BoundingBox(
            min_x=point[0] - radius, min_y=point[1] - radius, min_z=point[2] - radius,
            max_x=point[0] + radius, max_y=point[1] + radius, max_z=point[2] + radius,
        )
        hits: list[tuple[Element, float]] = []
        for element in self.query_box(search, types):
            d = element.bounding_box.distance_to_point(point)
            if d <= radius:
                hits.append((element, d))
        hits.sort(key=lambda pair: (pair[1], pair[0].id))
        return hits
