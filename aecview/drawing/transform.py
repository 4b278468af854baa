"""Metres to pixels: uniform scale, centred, Y flipped."""

from __future__ import annotations

from dataclasses import dataclass

from aecview.geometry.vector import Vec2


@dataclass(frozen=True)
class PixelTransform:
    """Affine map from view coordinates (metres, Y up) to SVG pixels (Y down)."""

    scale: float
    offset_x: float
    offset_y: float
    min_x: float
    max_y: float

    @classmethod
    def fit(
        cls,
        bounds: tuple[float, float, float, float] | None,
        width: int,
        height: int,
        margin: float,
    ) -> PixelTransform:
        """Fit *bounds* padded by *margin* into a ``width`` x ``height`` canvas.

        The padded box touches the canvas on its constraining axis and is
        centred on the other.  Empty or zero-size content maps the origin
        to the canvas centre at one pixel per metre.
        """
        if bounds is None:
            bounds = (0.0, 0.0, 0.0, 0.0)
        min_x, min_y, max_x, max_y = bounds
        min_x -= margin
        min_y -= margin
        max_x += margin
        max_y += margin
        span_x = max_x - min_x
        span_y = max_y - min_y

        if span_x > 0 and span_y > 0:
            scale = min(width / span_x, height / span_y)
        elif span_x > 0:
            scale = width / span_x
        elif span_y > 0:
            scale = height / span_y
        else:
            scale = 1.0

        offset_x = (width - span_x * scale) / 2
        offset_y = (height - span_y * scale) / 2
        return cls(scale=scale, offset_x=offset_x, offset_y=offset_y, min_x=min_x, max_y=max_y)

    def point(self, p: Vec2) -> Vec2:
        return (
            self.offset_x + (p[0] - self.min_x) * self.scale,
            self.offset_y + (self.max_y - p[1]) * self.scale,
        )

    def length(self, metres: float) -> float:
        return metres * self.scale
