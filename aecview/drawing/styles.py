"""Default drawing colours and per-category style lookup."""

from __future__ import annotations

from aecview.models.options import RenderOptions
from aecview.projection.primitives import Category

# Category fills (architectural drafting palette)
DEFAULT_COLORS: dict[Category, str] = {
    Category.DOOR: "#333333",       # charcoal
    Category.WALL: "#888888",       # mid gray
    Category.DEVICE: "#CC0000",     # red
    Category.WINDOW: "#66CCFF",     # light blue
    Category.ROOM_FLOOR: "#FFFFFF", # white
    Category.DIMENSION: "#666666",  # dim gray
}

DEFAULT_BACKGROUND = "#F5F5F5"
DEFAULT_LINE_COLOR = "#000000"

# Option field holding the override for each category
_OVERRIDE_FIELDS: dict[Category, str] = {
    Category.DOOR: "door_color",
    Category.WALL: "wall_color",
    Category.DEVICE: "device_color",
    Category.WINDOW: "window_color",
    Category.ROOM_FLOOR: "floor_color",
    Category.DIMENSION: "dimension_color",
}

# Fill opacity per category
FILL_OPACITY: dict[Category, float] = {
    Category.ROOM_FLOOR: 1.0,
    Category.WALL: 0.6,
    Category.WINDOW: 0.8,
    Category.DOOR: 0.35,
    Category.DEVICE: 0.9,
    Category.DIMENSION: 1.0,
}


def color_for(category: Category, options: RenderOptions) -> str:
    """Override from *options* or the documented default."""
    override = getattr(options, _OVERRIDE_FIELDS[category])
    return override or DEFAULT_COLORS[category]


def background_color(options: RenderOptions) -> str:
    return options.background_color or DEFAULT_BACKGROUND


def line_color(options: RenderOptions) -> str:
    return options.line_color or DEFAULT_LINE_COLOR
