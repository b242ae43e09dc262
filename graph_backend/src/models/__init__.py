"""Pydantic models for data validation and serialization."""

from .graph import EdgeRecord, Graph, GraphFragment, NodeRecord
from .layout import (
    EdgeMarker,
    EdgeStrokeStyle,
    LayoutResult,
    NodeData,
    Position,
    PositionedNode,
    ProjectedEdge,
)

__all__ = [
    "NodeRecord",
    "EdgeRecord",
    "GraphFragment",
    "Graph",
    "Position",
    "NodeData",
    "PositionedNode",
    "EdgeStrokeStyle",
    "EdgeMarker",
    "ProjectedEdge",
    "LayoutResult",
]
