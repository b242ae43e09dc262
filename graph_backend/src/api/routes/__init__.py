"""HTTP API route handlers."""

from . import graph

__all__ = ["graph"]
