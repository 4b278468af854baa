"""Public API surface."""

from aecview.api.facade import ContextEngine

__all__ = ["ContextEngine"]
