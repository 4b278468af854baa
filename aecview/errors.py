"""Error taxonomy shared by the resolvers, the projector, and the emitter.

A missing host wall or a room with no openings is not an error: those come
back as ``None`` or an empty list on the context record.
"""

from __future__ import annotations


class AecviewError(Exception):
    """Base class for all aecview failures."""


class DegenerateGeometry(AecviewError):
    """Raised when one element's geometry cannot support the operation.

    Always local to a single element; batch callers record it and move on.
    """

    def __init__(self, element_id: int | str | None, reason: str) -> None:
        self.element_id = element_id
        self.reason = reason
        super().__init__(f"Degenerate geometry for element {element_id}: {reason}")


class InvalidConfiguration(AecviewError):
    """Raised when render options are malformed (e.g. non-positive canvas)."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Invalid configuration: {reason}")
