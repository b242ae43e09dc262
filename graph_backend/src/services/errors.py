"""Exceptions raised by the layout pipeline."""

from __future__ import annotations

from typing import Optional, Sequence


class LayoutError(Exception):
    """Base exception for layout pipeline errors."""


class MalformedInputError(LayoutError):
    """Raised when a whole-graph payload lacks its required top-level fields."""

    def __init__(self, message: str, missing: Sequence[str] = ()):
        self.missing = tuple(missing)
        super().__init__(message)


class GraphSourceError(LayoutError):
    """Raised when the upstream graph source cannot be read."""

    def __init__(self, message: str, url: Optional[str] = None):
        self.url = url
        super().__init__(message)


__all__ = ["LayoutError", "MalformedInputError", "GraphSourceError"]
