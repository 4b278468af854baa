"""Vector drawing output (SVG)."""

from aecview.drawing.emitter import SVGEmitter, emit_document
from aecview.drawing.styles import DEFAULT_COLORS, color_for
from aecview.drawing.transform import PixelTransform

__all__ = ["DEFAULT_COLORS", "PixelTransform", "SVGEmitter", "color_for", "emit_document"]
