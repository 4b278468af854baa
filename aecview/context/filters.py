"""Predicate filtering of context records by storey, type, function, text, id."""

from __future__ import annotations

import logging
from collections import Counter
from typing import Any, Iterable, Sequence

from aecview.models.context import DoorContext, SpaceContext

logger = logging.getLogger(__name__)

FilterValues = str | Iterable[str] | None


def parse_values(values: FilterValues) -> list[str]:
    """Normalise a filter argument to lowercase tokens.

    Accepts ``None``, a comma-separated string (``"Level 1, Level 2"``) or
    any iterable of strings.
    """
    if values is None:
        return []
    if isinstance(values, str):
        items = values.split(",")
    else:
        items = [str(v) for v in values]
    return [item.strip().lower() for item in items if item and item.strip()]


def _matches(value: Any, wanted: list[str]) -> bool:
    if not wanted:
        return True
    if value is None:
        return False
    return str(value).lower() in wanted


def _contains(search: str, *fields: Any) -> bool:
    needle = search.strip().lower()
    if not needle:
        return True
    return any(needle in str(f).lower() for f in fields if f is not None)


def filter_door_contexts(
    contexts: Sequence[DoorContext],
    *,
    storeys: FilterValues = None,
    door_types: FilterValues = None,
    search: str | None = None,
    ids: FilterValues = None,
) -> list[DoorContext]:
    """Doors matching every given criterion (missing criteria match all).

    ``ids`` matches the door id (``door_12``), the global id, or the bare
    element id.
    """
    wanted_storeys = parse_values(storeys)
    wanted_types = parse_values(door_types)
    wanted_ids = parse_values(ids)

    result = []
    for ctx in contexts:
        if not _matches(ctx.storey_name, wanted_storeys):
            continue
        if not _matches(ctx.door_type_name, wanted_types):
            continue
        if wanted_ids and not any(
            _matches(v, wanted_ids)
            for v in (ctx.door_id, ctx.door.global_id, ctx.door.id)
        ):
            continue
        if search and not _contains(
            search, ctx.door_id, ctx.door.global_id, ctx.door.name,
            ctx.door_type_name, ctx.storey_name,
        ):
            continue
        result.append(ctx)

    logger.debug("Door filter kept %d of %d contexts", len(result), len(contexts))
    return result


def filter_space_contexts(
    contexts: Sequence[SpaceContext],
    *,
    storeys: FilterValues = None,
    space_types: FilterValues = None,
    functions: FilterValues = None,
    search: str | None = None,
    ids: FilterValues = None,
) -> list[SpaceContext]:
    """Spaces matching every given criterion (missing criteria match all)."""
    wanted_storeys = parse_values(storeys)
    wanted_types = parse_values(space_types)
    wanted_functions = parse_values(functions)
    wanted_ids = parse_values(ids)

    result = []
    for ctx in contexts:
        if not _matches(ctx.storey_name, wanted_storeys):
            continue
        if not _matches(ctx.space_type, wanted_types):
            continue
        function = ctx.space_function.value if ctx.space_function else None
        if not _matches(function, wanted_functions):
            continue
        if wanted_ids and not any(
            _matches(v, wanted_ids)
            for v in (ctx.space_id, ctx.space.global_id, ctx.space.id)
        ):
            continue
        if search and not _contains(
            search, ctx.space_id, ctx.space_name, ctx.space_type, ctx.storey_name,
        ):
            continue
        result.append(ctx)

    logger.debug("Space filter kept %d of %d contexts", len(result), len(contexts))
    return result


def value_counts(contexts: Iterable[Any], attribute: str) -> list[tuple[str, int]]:
    """Count distinct non-empty values of *attribute*, most common first.

    Ties are ordered by value so the result is stable.
    """
    counter: Counter[str] = Counter()
    for ctx in contexts:
        value = getattr(ctx, attribute, None)
        if value is None or value == "":
            continue
        if hasattr(value, "value"):
            value = value.value
        counter[str(value)] += 1
    return sorted(counter.items(), key=lambda kv: (-kv[1], kv[0]))
