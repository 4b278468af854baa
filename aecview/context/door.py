"""Door context resolution — host wall, swing normal, handing, nearby devices.

Entry points: :class:`DoorContextResolver` for one door at a time, and
:func:`resolve_door_contexts` for a whole model with per-door isolation.
"""

from __future__ import annotations

import logging

from aecview.config import EngineSettings, WORLD_UP
from aecview.errors import DegenerateGeometry
from aecview.geometry import vector as vec
from aecview.models.context import DoorContext, NearbyDevice, OpeningDirection
from aecview.models.element import Element, ElementType
from aecview.spatial.index import SpatialIndex

logger = logging.getLogger(__name__)

# Readable labels for IFC door operation enumerations
_OPERATION_LABELS: dict[str, str] = {
    "SINGLE_SWING_LEFT": "Left Swing",
    "SINGLE_SWING_RIGHT": "Right Swing",
    "DOUBLE_DOOR_SINGLE_SWING": "Double Door",
    "DOUBLE_DOOR_DOUBLE_SWING": "Double Swing",
    "SLIDING_TO_LEFT": "Sliding Left",
    "SLIDING_TO_RIGHT": "Sliding Right",
    "FOLDING_TO_LEFT": "Folding Left",
    "FOLDING_TO_RIGHT": "Folding Right",
    "SWING_FIXED_LEFT": "Fixed Left",
    "SWING_FIXED_RIGHT": "Fixed Right",
}

_OPERATION_KEYS = ("OperationType", "operation_type", "SwingDirection")


def format_operation_type(operation_type: str | None) -> str:
    """Render an IFC operation enum as a short label ('Left Swing', ...)."""
    if not operation_type:
        return "Unknown"
    key = operation_type.strip().upper().strip(".")
    return _OPERATION_LABELS.get(key, key.replace("_", " ").title())


def door_id_for(door: Element) -> str:
    return f"door_{door.id}"


class DoorContextResolver:
    """Resolve :class:`DoorContext` records against a model's spatial index.

    Parameters
    ----------
    architectural:
        Index over the architectural model (doors and walls).
    devices:
        Optional index over a co-located devices model.  Without it every
        door gets an empty ``nearby_devices`` list.
    settings:
        Tolerances; defaults to :class:`EngineSettings`.
    """

    def __init__(
        self,
        architectural: SpatialIndex,
        devices: SpatialIndex | None = None,
        settings: EngineSettings | None = None,
    ) -> None:
        self.architectural = architectural
        self.devices = devices
        self.settings = settings or EngineSettings()

    def resolve(self, door: Element) -> DoorContext:
        """Build the context for a single door.

        Raises
        ------
        DegenerateGeometry
            If the door's bounding box encloses no volume.
        """
        if door.type is not ElementType.DOOR:
            raise ValueError(f"Element {door.id} is a {door.type.value}, not a door")

        box = door.bounding_box
        if box.is_degenerate():
            raise DegenerateGeometry(door.id, f"zero-volume bounding box {box.size}")

        host_wall = self.find_host_wall(door)
        normal = self.door_normal(door, host_wall)
        operation_type = _operation_type(door)
        opening = classify_opening_direction(door, normal, operation_type)
        nearby = self.find_nearby_devices(door)

        logger.debug(
            "Door %d: wall=%s normal=%s opening=%s devices=%d",
            door.id,
            host_wall.id if host_wall else None,
            normal,
            opening.value,
            len(nearby),
        )

        return DoorContext(
            door_id=door_id_for(door),
            door=door,
            host_wall=host_wall,
            center=box.center,
            normal=normal,
            opening_direction=opening,
            operation_type=operation_type,
            nearby_devices=nearby,
            door_type_name=door.product_type_name,
            storey_name=door.storey_name,
        )

    # ------------------------------------------------------------------
    # Host wall
    # ------------------------------------------------------------------

    def _reasonable_walls(self, door: Element, walls: list[Element]) -> list[Element]:
        min_volume = door.bounding_box.volume * self.settings.min_wall_volume_ratio
        return [w for w in walls if w.bounding_box.volume > min_volume]

    def find_host_wall(self, door: Element) -> Element | None:
        """Pick the wall that most plausibly contains the door opening.

        First the wall with the largest overlap against the slightly
        expanded door box; failing that, the nearest wall found by growing
        a search radius from the door centre.  ``None`` when nothing is in
        reach.
        """
        expanded = door.bounding_box.expanded(self.settings.host_wall_tolerance_m)
        overlapping = self._reasonable_walls(
            door, self.architectural.query_box(expanded, [ElementType.WALL])
        )

        best: Element | None = None
        best_volume = 0.0
        for wall in overlapping:
            volume = expanded.intersection_volume(wall.bounding_box)
            if volume > best_volume:
                best, best_volume = wall, volume
        if best is not None:
            return best

        center = door.bounding_box.center
        radius = self.settings.host_wall_search_start_m
        while radius <= self.settings.host_wall_search_max_m + 1e-9:
            hits = self.architectural.query_radius(center, radius, [ElementType.WALL])
            walls = self._reasonable_walls(door, [w for w, _ in hits])
            if walls:
                nearest = min(
                    walls,
                    key=lambda w: (door.bounding_box.distance_to_box(w.bounding_box), w.id),
                )
                logger.debug(
                    "Door %d: host wall %d found at search radius %.2fm",
                    door.id, nearest.id, radius,
                )
                return nearest
            radius *= self.settings.host_wall_search_growth

        logger.debug("Door %d: no host wall within %.2fm", door.id, self.settings.host_wall_search_max_m)
        return None

    # ------------------------------------------------------------------
    # Normal
    # ------------------------------------------------------------------

    def door_normal(self, door: Element, host_wall: Element | None) -> vec.Vec3 | None:
        """Unit horizontal outward normal of the door, or ``None`` if unknown."""
        initial = _placement_normal(door)
        if initial is None:
            initial = _thin_axis_normal(door)

        if host_wall is None:
            return vec.clean(initial) if initial is not None else None

        axis = _wall_axis(host_wall)
        if axis is None:
            return vec.clean(initial) if initial is not None else None

        normal = vec.normalize(vec.cross(axis, WORLD_UP))
        if normal is None:
            return vec.clean(initial) if initial is not None else None

        side = _solid_side(door, host_wall, normal)
        if side > 0:
            # More wall material lies along +normal: face the other way
            normal = vec.negate(normal)
        elif side == 0 and initial is not None and vec.dot(normal, initial) < 0:
            normal = vec.negate(normal)
        return vec.clean(normal)

    # ------------------------------------------------------------------
    # Devices
    # ------------------------------------------------------------------

    def find_nearby_devices(self, door: Element) -> list[NearbyDevice]:
        """Devices within the proximity radius, inside the door's height band."""
        if self.devices is None:
            return []

        box = door.bounding_box
        center = box.center
        radius = self.settings.device_radius_m

        found: dict[int, NearbyDevice] = {}
        for device, _ in self.devices.query_radius(center, radius, [ElementType.DEVICE]):
            device_center = device.bounding_box.center
            if not (box.min_z <= device_center[2] <= box.max_z):
                continue
            distance = vec.distance(center, device_center)
            if distance > radius:
                continue
            if device.id not in found:
                found[device.id] = NearbyDevice(element=device, distance=round(distance, 9))

        return sorted(found.values(), key=lambda d: (d.distance, d.element.id))


def _operation_type(door: Element) -> str | None:
    for key in _OPERATION_KEYS:
        value = door.properties.get(key)
        if value:
            return str(value).strip().upper().strip(".")
    return None


def _placement_normal(door: Element) -> vec.Vec3 | None:
    if door.placement is None:
        return None
    forward = door.placement.forward
    if forward is None:
        return None
    return vec.normalize(vec.horizontal(forward))


def _thin_axis_normal(door: Element) -> vec.Vec3 | None:
    """Door leaves are thinnest across their face: look along that axis."""
    dx, dy, _ = door.bounding_box.size
    if abs(dx - dy) < 1e-9:
        return None
    return (1.0, 0.0, 0.0) if dx < dy else (0.0, 1.0, 0.0)


def _wall_axis(wall: Element) -> vec.Vec3 | None:
    """Long horizontal axis of a wall from its bounding box."""
    dx, dy, _ = wall.bounding_box.size
    if abs(dx - dy) < 1e-9:
        return None
    return (1.0, 0.0, 0.0) if dx > dy else (0.0, 1.0, 0.0)


def _solid_side(door: Element, wall: Element, normal: vec.Vec3) -> int:
    """Which side of the door the wall's mass sits on, along *normal*.

    Counts wall surface vertices on each side of the door centre; walls
    without surfaces compare how far the box extends each way.  Returns
    +1, -1, or 0 for a tie.
    """
    center = door.bounding_box.center
    vertices = wall.vertices()

    if vertices:
        ahead = behind = 0
        for v in vertices:
            d = vec.dot(vec.sub(v, center), normal)
            if d > 1e-9:
                ahead += 1
            elif d < -1e-9:
                behind += 1
        if ahead != behind:
            return 1 if ahead > behind else -1
        # Symmetric meshes: fall through to the box extents

    extents = [vec.dot(vec.sub(c, center), normal) for c in wall.bounding_box.corners()]
    forward_reach = max(extents)
    backward_reach = -min(extents)
    if abs(forward_reach - backward_reach) < 1e-9:
        return 0
    return 1 if forward_reach > backward_reach else -1


def classify_opening_direction(
    door: Element,
    normal: vec.Vec3 | None,
    operation_type: str | None,
) -> OpeningDirection:
    """Combine the authored hinge side with the swing sense.

    The hinge side comes from the operation type; in/out from whether the
    panel's authored opening side (placement forward) agrees with the
    resolved outward normal.  Anything missing, including an unauthored
    placement, gives ``UNKNOWN``.
    """
    if normal is None or not operation_type:
        return OpeningDirection.UNKNOWN
    if "LEFT" in operation_type:
        hand = "left"
    elif "RIGHT" in operation_type:
        hand = "right"
    else:
        return OpeningDirection.UNKNOWN

    forward = _placement_normal(door)
    if forward is None:
        return OpeningDirection.UNKNOWN
    sense = "out" if vec.dot(forward, normal) >= 0 else "in"
    return OpeningDirection(f"{hand}-hand-{sense}")


def resolve_door_contexts(
    architectural: SpatialIndex,
    devices: SpatialIndex | None = None,
    settings: EngineSettings | None = None,
) -> list[DoorContext]:
    """Resolve every door in *architectural*.

    Doors with degenerate geometry are logged and skipped; the rest of the
    model is still processed.
    """
    resolver = DoorContextResolver(architectural, devices, settings)
    doors = architectural.of_type(ElementType.DOOR)

    contexts: list[DoorContext] = []
    skipped = 0
    for door in doors:
        try:
            contexts.append(resolver.resolve(door))
        except DegenerateGeometry as exc:
            skipped += 1
            logger.warning("Skipping door %d: %s", door.id, exc.reason)

    logger.info(
        "Resolved %d door contexts (%d skipped, %d with host wall, %d with devices)",
        len(contexts),
        skipped,
        sum(1 for c in contexts if c.host_wall is not None),
        sum(1 for c in contexts if c.nearby_devices),
    )
    return contexts
