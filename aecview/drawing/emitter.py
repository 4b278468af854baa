"""SVGEmitter — self-contained SVG documents from projected primitives."""

from __future__ import annotations

import logging
from html import escape

from aecview.drawing import styles
from aecview.drawing.transform import PixelTransform
from aecview.geometry.vector import Vec2
from aecview.models.options import RenderOptions, ViewKind
from aecview.projection.primitives import (
    Category,
    Marker2D,
    Polygon2D,
    Polyline2D,
    Projection,
    TextAnchor2D,
)

logger = logging.getLogger(__name__)

_SVG_NS = "http://www.w3.org/2000/svg"

# Dash pattern for swing arcs and other hidden lines (pixels)
_DASH = "6,4"


def _num(value: float) -> str:
    """Two-decimal formatting without a negative zero."""
    text = f"{value:.2f}"
    return "0.00" if text == "-0.00" else text


def _points(points: list[Vec2], transform: PixelTransform) -> str:
    out = []
    for p in points:
        x, y = transform.point(p)
        out.append(f"{_num(x)},{_num(y)}")
    return " ".join(out)


def _attr(value: str) -> str:
    return escape(value, quote=True)


class SVGEmitter:
    """Render :class:`Projection` objects with one set of options.

    Parameters
    ----------
    options:
        Canvas, colours and annotation switches.  Validated on construction.

    Raises
    ------
    InvalidConfiguration
        If the options cannot produce a drawing.
    """

    def __init__(self, options: RenderOptions | None = None) -> None:
        self.options = options or RenderOptions()
        self.options.check()

    def emit(self, projection: Projection) -> str:
        opts = self.options
        transform = PixelTransform.fit(projection.bounds(), opts.width, opts.height, opts.margin)
        has_content = bool(projection.primitives)

        lines: list[str] = [
            '<?xml version="1.0" encoding="UTF-8"?>',
            (
                f'<svg xmlns="{_SVG_NS}" version="1.1" '
                f'width="{opts.width}" height="{opts.height}" '
                f'viewBox="0 0 {opts.width} {opts.height}" '
                f'data-view="{projection.view_kind.value}" '
                f'data-element-id="{projection.subject_id}">'
            ),
            f'  <rect x="0" y="0" width="{opts.width}" height="{opts.height}" '
            f'fill="{_attr(styles.background_color(opts))}"/>',
        ]

        for category in projection.categories():
            lines.extend(self._category_group(projection, category, transform))

        if has_content and opts.show_labels:
            lines.extend(self._labels(projection, transform))

        box = projection.dimension_box
        if has_content and projection.view_kind is ViewKind.PLAN and box is not None:
            lines.extend(self._dimensions(box, projection.area, transform))

        if has_content and opts.show_legend:
            lines.extend(self._legend(projection))

        lines.append("</svg>")
        document = "\n".join(lines) + "\n"

        logger.debug(
            "Emitted %s view of element %d: %d primitives, scale %.3f px/m",
            projection.view_kind.value,
            projection.subject_id,
            len(projection.primitives),
            transform.scale,
        )
        return document

    # ------------------------------------------------------------------
    # Geometry
    # ------------------------------------------------------------------

    def _category_group(
        self,
        projection: Projection,
        category: Category,
        transform: PixelTransform,
    ) -> list[str]:
        opts = self.options
        color = _attr(styles.color_for(category, opts))
        stroke = _attr(styles.line_color(opts))
        width = _num(opts.line_width)
        fill_opacity = styles.FILL_OPACITY[category]

        out = [f'  <g id="{category.value}" class="category-{category.value}">']
        for prim in projection.primitives:
            if prim.category is not category:
                continue
            ident = f' data-element-id="{prim.element_id}"' if prim.element_id is not None else ""

            if isinstance(prim, Polygon2D):
                fill = (
                    f'fill="{color}" fill-opacity="{fill_opacity}"' if opts.show_fills else 'fill="none"'
                )
                out.append(
                    f'    <polygon points="{_points(prim.points, transform)}" {fill} '
                    f'stroke="{stroke}" stroke-width="{width}"{ident}/>'
                )
            elif isinstance(prim, Polyline2D):
                tag = "polygon" if prim.closed else "polyline"
                dash = f' stroke-dasharray="{_DASH}"' if prim.dashed else ""
                out.append(
                    f'    <{tag} points="{_points(prim.points, transform)}" fill="none" '
                    f'stroke="{color}" stroke-width="{width}"{dash}{ident}/>'
                )
            elif isinstance(prim, Marker2D):
                cx, cy = transform.point(prim.center)
                fill = f'fill="{color}"' if opts.show_fills else 'fill="none"'
                out.append(
                    f'    <circle cx="{_num(cx)}" cy="{_num(cy)}" '
                    f'r="{_num(transform.length(prim.radius))}" {fill} '
                    f'stroke="{stroke}" stroke-width="{width}"{ident}/>'
                )
        out.append("  </g>")
        return out

    # ------------------------------------------------------------------
    # Annotations
    # ------------------------------------------------------------------

    def _labels(self, projection: Projection, transform: PixelTransform) -> list[str]:
        opts = self.options
        font = _attr(opts.font_family)
        size = _num(opts.font_size)
        ink = _attr(styles.line_color(opts))
        pad = opts.font_size

        out = [f'  <g id="labels" font-family="{font}" font-size="{size}" fill="{ink}">']
        for prim in projection.primitives:
            if not isinstance(prim, TextAnchor2D):
                continue
            x, y = transform.point(prim.position)
            out.append(
                f'    <text x="{_num(x)}" y="{_num(y - opts.font_size * 0.4)}" '
                f'text-anchor="middle">{escape(prim.text)}</text>'
            )

        if projection.title:
            out.append(
                f'    <text x="{_num(pad)}" y="{_num(pad * 1.5)}" font-weight="bold">'
                f'{escape(projection.title)}</text>'
            )
        for i, line in enumerate(projection.caption):
            out.append(
                f'    <text x="{_num(opts.width - pad)}" y="{_num(pad * 1.5 * (i + 1))}" '
                f'text-anchor="end">{escape(line)}</text>'
            )
        out.append("  </g>")
        return out

    def _dimensions(
        self,
        box: tuple[float, float, float, float],
        area: float | None,
        transform: PixelTransform,
    ) -> list[str]:
        opts = self.options
        min_x, min_y, max_x, max_y = box
        color = _attr(styles.color_for(Category.DIMENSION, opts))
        size = opts.font_size - 2 if opts.font_size > 4 else opts.font_size
        out: list[str] = []

        if opts.show_dimensions:
            x1, y1 = transform.point((min_x, min_y))
            x2, y2 = transform.point((max_x, max_y))
            # Dimension lines sit halfway into the margin, kept on the canvas
            gap = transform.length(opts.margin) / 2
            tick = max(3.0, opts.font_size / 3)
            wy = min(y1 + gap, opts.height - tick)
            hx = min(x2 + gap, opts.width - tick - 2 - size)

            out.append(
                f'  <g id="dimensions" font-family="{_attr(opts.font_family)}" '
                f'font-size="{_num(size)}" fill="{color}">'
            )
            out.append(
                f'    <line x1="{_num(x1)}" y1="{_num(wy)}" x2="{_num(x2)}" y2="{_num(wy)}" '
                f'stroke="{color}" stroke-width="1"/>'
            )
            for x in (x1, x2):
                out.append(
                    f'    <line x1="{_num(x)}" y1="{_num(wy - tick)}" x2="{_num(x)}" '
                    f'y2="{_num(wy + tick)}" stroke="{color}" stroke-width="1"/>'
                )
            out.append(
                f'    <text x="{_num((x1 + x2) / 2)}" y="{_num(wy - tick - 2)}" '
                f'text-anchor="middle">{max_x - min_x:.2f} m</text>'
            )

            out.append(
                f'    <line x1="{_num(hx)}" y1="{_num(y1)}" x2="{_num(hx)}" y2="{_num(y2)}" '
                f'stroke="{color}" stroke-width="1"/>'
            )
            for y in (y1, y2):
                out.append(
                    f'    <line x1="{_num(hx - tick)}" y1="{_num(y)}" x2="{_num(hx + tick)}" '
                    f'y2="{_num(y)}" stroke="{color}" stroke-width="1"/>'
                )
            mid_y = (y1 + y2) / 2
            out.append(
                f'    <text x="{_num(hx + tick + 2)}" y="{_num(mid_y)}" '
                f'transform="rotate(90 {_num(hx + tick + 2)} {_num(mid_y)})" '
                f'text-anchor="middle">{max_y - min_y:.2f} m</text>'
            )
            out.append("  </g>")

        if opts.show_area and area is not None:
            cx, cy = transform.point(((min_x + max_x) / 2, (min_y + max_y) / 2))
            out.append(
                f'  <text id="area" x="{_num(cx)}" y="{_num(cy + opts.font_size * 1.2)}" '
                f'text-anchor="middle" font-family="{_attr(opts.font_family)}" '
                f'font-size="{_num(size)}" fill="{color}">{area:.2f} m²</text>'
            )
        return out

    def _legend(self, projection: Projection) -> list[str]:
        """Swatches for the categories drawn in this view only."""
        categories = projection.categories()
        if not categories:
            return []
        opts = self.options
        size = opts.font_size
        x = size
        y = opts.height - size
        stroke = _attr(styles.line_color(opts))

        out = [
            f'  <g id="legend" font-family="{_attr(opts.font_family)}" '
            f'font-size="{_num(size)}" fill="{stroke}">'
        ]
        for category in categories:
            color = _attr(styles.color_for(category, opts))
            out.append(
                f'    <rect x="{_num(x)}" y="{_num(y - size)}" width="{_num(size)}" '
                f'height="{_num(size)}" fill="{color}" stroke="{stroke}" stroke-width="0.5"/>'
            )
            out.append(f'    <text x="{_num(x + size * 1.5)}" y="{_num(y)}">{category.label}</text>')
            x += size * (2.5 + 0.6 * len(category.label))
        out.append("  </g>")
        return out


def emit_document(projection: Projection, options: RenderOptions | None = None) -> str:
    """Convenience wrapper: one projection, one document."""
    return SVGEmitter(options).emit(projection)
