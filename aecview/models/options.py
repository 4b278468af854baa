"""RenderOptions — immutable per-call drawing configuration."""

from __future__ import annotations

import re
from enum import Enum

from pydantic import BaseModel, ConfigDict

from aecview.errors import InvalidConfiguration


class ViewKind(str, Enum):
    ELEVATION_FRONT = "elevation-front"
    ELEVATION_BACK = "elevation-back"
    PLAN = "plan"

    @property
    def is_elevation(self) -> bool:
        return self is not ViewKind.PLAN

    @property
    def title(self) -> str:
        return {
            ViewKind.ELEVATION_FRONT: "Front",
            ViewKind.ELEVATION_BACK: "Back",
            ViewKind.PLAN: "Plan",
        }[self]


_HEX_COLOR = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$")
_NAMED_COLOR = re.compile(r"^[a-zA-Z]{3,20}$")


class RenderOptions(BaseModel):
    """Canvas size, margins, colours, and annotation switches.

    Colour fields left as ``None`` fall back to the defaults in
    :mod:`aecview.drawing.styles`.  Instances are frozen; derive variants
    with ``model_copy(update=...)``.
    """

    model_config = ConfigDict(frozen=True)

    width: int = 1000
    height: int = 1000
    margin: float = 0.5
    """Padding around the drawn content, in metres."""

    door_color: str | None = None
    wall_color: str | None = None
    device_color: str | None = None
    window_color: str | None = None
    floor_color: str | None = None
    dimension_color: str | None = None
    background_color: str | None = None
    line_color: str | None = None

    line_width: float = 1.5
    show_fills: bool = True
    show_legend: bool = True
    show_labels: bool = True
    show_dimensions: bool = True
    """Space plans only."""

    show_area: bool = True
    """Space plans only."""

    font_size: float = 14.0
    font_family: str = "Arial, sans-serif"

    def check(self) -> None:
        """Raise :class:`InvalidConfiguration` if the options cannot be rendered."""
        if self.width <= 0 or self.height <= 0:
            raise InvalidConfiguration(
                f"canvas must be positive, got {self.width}x{self.height}"
            )
        if self.margin < 0:
            raise InvalidConfiguration(f"margin must be >= 0, got {self.margin}")
        if self.line_width <= 0:
            raise InvalidConfiguration(f"line_width must be positive, got {self.line_width}")
        if self.font_size <= 0:
            raise InvalidConfiguration(f"font_size must be positive, got {self.font_size}")
        if not self.font_family.strip() or any(c in self.font_family for c in "<>\"&"):
            raise InvalidConfiguration(f"font_family is not usable: {self.font_family!r}")

        for field_name in (
            "door_color", "wall_color", "device_color", "window_color",
            "floor_color", "dimension_color", "background_color", "line_color",
        ):
            value = getattr(self, field_name)
            if value is None:
                continue
            if not (_HEX_COLOR.match(value) or _NAMED_COLOR.match(value)):
                raise InvalidConfiguration(f"{field_name} is not a colour: {value!r}")
