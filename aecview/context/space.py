"""Space context resolution: footprint, metrics, and bounding openings."""

from __future__ import annotations

import logging
import re
from typing import Iterable

from aecview.config import EngineSettings
from aecview.context.filters import FilterValues, parse_values
from aecview.geometry import polygon as poly
from aecview.models.context import Footprint, SpaceContext, SpaceFunction
from aecview.models.element import Element, ElementType
from aecview.spatial.index import SpatialIndex

logger = logging.getLogger(__name__)

# Checked in order; the first function with a matching keyword wins
_FUNCTION_KEYWORDS: list[tuple[SpaceFunction, tuple[str, ...]]] = [
    (SpaceFunction.CONFERENCE, ("conference", "boardroom")),
    (SpaceFunction.MEETING, ("meeting", "huddle")),
    (SpaceFunction.BATHROOM, ("bathroom", "toilet", "restroom", "washroom", "lavatory", "shower", "wc")),
    (SpaceFunction.KITCHEN, ("kitchen", "pantry", "kitchenette")),
    (SpaceFunction.STORAGE, ("storage", "store", "closet", "archive", "janitor")),
    (SpaceFunction.CORRIDOR, ("corridor", "hallway", "hall", "passage")),
    (SpaceFunction.LOBBY, ("lobby", "foyer", "entrance", "vestibule")),
    (SpaceFunction.STAIRWELL, ("stair", "stairs", "stairwell", "staircase")),
    (SpaceFunction.ELEVATOR, ("elevator", "lift")),
    (SpaceFunction.MECHANICAL, ("mechanical", "plant", "hvac", "boiler")),
    (SpaceFunction.ELECTRICAL, ("electrical", "electric", "switchroom")),
    (SpaceFunction.SERVER, ("server", "data", "comms")),
    (SpaceFunction.RECEPTION, ("reception",)),
    (SpaceFunction.CAFETERIA, ("cafeteria", "canteen", "cafe")),
    (SpaceFunction.LOUNGE, ("lounge", "break")),
    (SpaceFunction.BEDROOM, ("bedroom", "bed")),
    (SpaceFunction.LIVING, ("living",)),
    (SpaceFunction.DINING, ("dining",)),
    (SpaceFunction.GARAGE, ("garage", "parking")),
    (SpaceFunction.BALCONY, ("balcony",)),
    (SpaceFunction.TERRACE, ("terrace", "patio", "deck")),
    (SpaceFunction.OFFICE, ("office", "workspace", "study")),
]

_WORD = re.compile(r"[a-z0-9]+")


def infer_space_function(*texts: str | None) -> SpaceFunction:
    """Guess a room function from its name and type strings.

    Matching is whole-word so 'wc' does not fire inside other words.
    Nothing recognisable gives ``SpaceFunction.OTHER``.
    """
    words: set[str] = set()
    for text in texts:
        if text:
            words.update(_WORD.findall(text.lower()))
    if not words:
        return SpaceFunction.OTHER
    for function, keywords in _FUNCTION_KEYWORDS:
        if any(k in words for k in keywords):
            return function
    return SpaceFunction.OTHER


def space_display_name(space: Element) -> str:
    long_name = space.properties.get("LongName")
    if long_name:
        return str(long_name)
    return space.name or space.product_type_name or f"Space {space.id}"


def space_id_for(space: Element) -> str:
    return space.global_id or f"space_{space.id}"


def storey_names(contexts: Iterable[SpaceContext]) -> list[str]:
    """Distinct storey names, sorted."""
    return sorted({c.storey_name for c in contexts if c.storey_name})


class SpaceContextResolver:
    """Resolve :class:`SpaceContext` records for rooms of one model."""

    def __init__(self, architectural: SpatialIndex, settings: EngineSettings | None = None) -> None:
        self.architectural = architectural
        self.settings = settings or EngineSettings()

    def resolve(self, space: Element) -> SpaceContext:
        """Build the context for a single space.

        Never fails on bad geometry: zero-area or self-intersecting
        footprints are flagged and the context is still returned.
        """
        if space.type is not ElementType.SPACE:
            raise ValueError(f"Element {space.id} is a {space.type.value}, not a space")

        footprint, floor_level = self.footprint(space)
        flags: list[str] = []
        area = footprint.area
        if area <= 1e-9:
            flags.append("zero_area")
            area = 0.0
        elif not footprint.is_simple:
            flags.append("self_intersecting")
            area = 0.0

        doors, windows = self.boundary_openings(space, footprint)

        name = space_display_name(space)
        space_type = space.properties.get("ObjectType") or space.product_type_name
        function = infer_space_function(name, space_type, space.name)
        box = space.bounding_box

        if flags:
            logger.warning("Space %d (%s) flagged: %s", space.id, name, ", ".join(flags))
        logger.debug(
            "Space %d: area=%.2f doors=%d windows=%d function=%s",
            space.id, area, len(doors), len(windows), function.value,
        )

        return SpaceContext(
            space_id=space_id_for(space),
            space=space,
            space_name=name,
            space_type=str(space_type) if space_type else None,
            space_function=function,
            storey_name=space.storey_name,
            footprint=footprint,
            gross_floor_area=area,
            ceiling_height=max(0.0, box.max_z - box.min_z),
            floor_level=floor_level,
            center=box.center,
            boundary_doors=doors,
            boundary_windows=windows,
            flags=flags,
        )

    def footprint(self, space: Element) -> tuple[Footprint, float]:
        """Plan outline of *space* and the level of its floor.

        An authored profile is taken as drawn.  Otherwise the hull of the
        vertices lying on the floor (within tolerance of the lowest one);
        with no authored surfaces the bounding box stands in.
        """
        vertices = space.vertices()
        box = space.bounding_box

        if len(space.profile) >= 3:
            floor_z = min(v[2] for v in vertices) if vertices else box.min_z
            outline = [(float(x), float(y)) for x, y in space.profile]
            source = "profile"
        elif vertices:
            floor_z = min(v[2] for v in vertices)
            floor = [v for v in vertices if v[2] - floor_z <= self.settings.floor_tolerance_m]
            if len(floor) < 3:
                floor = vertices
            outline = poly.convex_hull((v[0], v[1]) for v in floor)
            source = "geometry"
        else:
            floor_z = box.min_z
            outline = poly.rectangle(box.min_x, box.min_y, box.max_x, box.max_y)
            source = "bounding_box"

        extent = poly.bounds(outline)
        width = depth = 0.0
        if extent is not None:
            width = extent[2] - extent[0]
            depth = extent[3] - extent[1]

        area = poly.polygon_area(outline)
        return (
            Footprint(
                outline=outline,
                source=source,
                area=area,
                width=width,
                depth=depth,
                is_simple=area <= 1e-9 or poly.is_simple_polygon(outline),
            ),
            floor_z,
        )

    def boundary_openings(
        self,
        space: Element,
        footprint: Footprint,
    ) -> tuple[list[Element], list[Element]]:
        """Doors and windows whose plan rectangle touches the boundary band."""
        band = self.settings.boundary_band_m
        if len(footprint.outline) < 2:
            return [], []

        box = space.bounding_box
        candidates = self.architectural.query_box(
            box.expanded(band), [ElementType.DOOR, ElementType.WINDOW]
        )

        doors: list[Element] = []
        windows: list[Element] = []
        for opening in candidates:
            ob = opening.bounding_box
            # Openings on other storeys share the plan position but not the height
            if ob.max_z <= box.min_z or ob.min_z >= box.max_z:
                continue
            rect = poly.rectangle(ob.min_x, ob.min_y, ob.max_x, ob.max_y)
            if poly.distance_to_boundary(rect, footprint.outline) > band:
                continue
            if opening.type is ElementType.DOOR:
                doors.append(opening)
            else:
                windows.append(opening)
        return doors, windows


def storey_matches(storey: str | None, wanted: list[str]) -> bool:
    """Case-insensitive substring match of *storey* against lowercase *wanted*."""
    if not storey:
        return False
    lower = storey.lower()
    return any(w in lower for w in wanted)


def resolve_space_contexts(
    architectural: SpatialIndex,
    storeys: FilterValues = None,
    settings: EngineSettings | None = None,
) -> list[SpaceContext]:
    """Resolve every space in *architectural*, optionally limited to storeys.

    Storey names match case-insensitively on substrings ("Level 1" picks up
    "Level 1 - Ground").
    """
    resolver = SpaceContextResolver(architectural, settings)
    spaces = architectural.of_type(ElementType.SPACE)

    wanted = parse_values(storeys)
    if wanted:
        spaces = [s for s in spaces if storey_matches(s.storey_name, wanted)]

    contexts = [resolver.resolve(space) for space in spaces]
    logger.info(
        "Resolved %d space contexts (%d flagged, %d with openings)",
        len(contexts),
        sum(1 for c in contexts if c.flags),
        sum(1 for c in contexts if c.boundary_doors or c.boundary_windows),
    )
    return contexts
