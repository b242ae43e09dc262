"""Render-ready layout models returned to the graph viewer."""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Position(BaseModel):
    """Screen-space coordinates in pixels."""

    model_config = ConfigDict(frozen=True)

    x: float
    y: float


class NodeData(BaseModel):
    """Payload the renderer displays inside a node."""

    model_config = ConfigDict(frozen=True)

    label: str
    description: Optional[str] = None
    tags: List[str] = Field(default_factory=list)


class PositionedNode(BaseModel):
    """A node with its final screen-space position."""

    model_config = ConfigDict(frozen=True)

    id: str
    position: Position
    data: NodeData
    type: str = "default"
    connectable: bool = True


class EdgeStrokeStyle(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    stroke: str = "#b1b1b7"
    stroke_width: float = Field(default=2, alias="strokeWidth")


class EdgeMarker(BaseModel):
    """Arrow marker drawn at the target end of an edge."""

    model_config = ConfigDict(frozen=True)

    type: str = "arrowclosed"
    width: int = 20
    height: int = 20


class ProjectedEdge(BaseModel):
    """A directed edge with presentation metadata attached."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    source: str
    target: str
    type: str = "smoothstep"
    animated: bool = False
    style: EdgeStrokeStyle = Field(default_factory=EdgeStrokeStyle)
    marker_end: EdgeMarker = Field(default_factory=EdgeMarker, alias="markerEnd")


class LayoutResult(BaseModel):
    """The top-level payload handed to the renderer."""

    model_config = ConfigDict(frozen=True)

    nodes: List[PositionedNode] = Field(default_factory=list)
    edges: List[ProjectedEdge] = Field(default_factory=list)
    ready: bool = Field(default=False, description="True once the layout may be read")
    dropped_edges: int = Field(default=0, description="Edges excluded for unknown endpoints")
