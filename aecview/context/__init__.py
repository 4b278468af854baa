"""Context resolvers: infer door and space relationships from the element graph."""

from aecview.context.door import (
    DoorContextResolver,
    classify_opening_direction,
    format_operation_type,
    resolve_door_contexts,
)
from aecview.context.filters import filter_door_contexts, filter_space_contexts, value_counts
from aecview.context.space import (
    SpaceContextResolver,
    infer_space_function,
    resolve_space_contexts,
    storey_names,
)

__all__ = [
    "DoorContextResolver",
    "SpaceContextResolver",
    "classify_opening_direction",
    "filter_door_contexts",
    "filter_space_contexts",
    "format_operation_type",
    "infer_space_function",
    "resolve_door_contexts",
    "resolve_space_contexts",
    "storey_names",
    "value_counts",
]
