"""Geometry helpers — vectors and 2D polygons in pure Python."""
