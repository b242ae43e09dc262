"""Convert simulation output into render-ready node and edge descriptors."""

from __future__ import annotations

import logging
import math
from typing import Any, List, Mapping, Optional, Sequence, Tuple

from ..models.graph import Graph
from ..models.layout import (
    EdgeMarker,
    EdgeStrokeStyle,
    LayoutResult,
    NodeData,
    Position,
    PositionedNode,
    ProjectedEdge,
)

logger = logging.getLogger(__name__)

DEFAULT_SCALE = 3.0


def _coordinate(value: Any) -> float:
    """Missing or non-finite coordinates collapse to 0."""
    if value is None:
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


class LayoutProjector:
    """
    Scale simulated positions into screen space and attach edge styling.

    Edge styling is fixed configuration, shared by every projected edge.
    """

    def __init__(
        self,
        scale: float = DEFAULT_SCALE,
        edge_style: Optional[EdgeStrokeStyle] = None,
        edge_marker: Optional[EdgeMarker] = None,
        edge_type: str = "smoothstep",
    ) -> None:
        self.scale = scale
        self.edge_style = edge_style or EdgeStrokeStyle()
        self.edge_marker = edge_marker or EdgeMarker()
        self.edge_type = edge_type

    def project_node_position(self, position: Optional[Sequence[Any]]) -> Position:
        if position is None or len(position) < 2:
            return Position(x=0.0, y=0.0)
        return Position(
            x=_coordinate(position[0]) * self.scale,
            y=_coordinate(position[1]) * self.scale,
        )

    def project(
        self,
        graph: Graph,
        positions: Mapping[str, Tuple[float, float]],
    ) -> LayoutResult:
        """
        Build the renderer payload.

        Args:
            graph: Aggregated graph
            positions: Simulated (x, y) per node id; nodes absent from the
                mapping are placed at the origin

        Returns:
            LayoutResult with ``ready=True``
        """
        nodes: List[PositionedNode] = []
        for node_id, record in graph.nodes.items():
            nodes.append(
                PositionedNode(
                    id=node_id,
                    position=self.project_node_position(positions.get(node_id)),
                    data=NodeData(
                        label=record.label,
                        description=record.description,
                        tags=list(record.tags),
                    ),
                )
            )

        edges: List[ProjectedEdge] = []
        dropped = 0
        for edge in graph.edges:
            source = str(edge.source)
            target = str(edge.target)
            if source not in graph.nodes or target not in graph.nodes:
                dropped += 1
                continue
            edges.append(
                ProjectedEdge(
                    id=str(edge.id),
                    source=source,
                    target=target,
                    type=self.edge_type,
                    style=self.edge_style,
                    marker_end=self.edge_marker,
                )
            )

        if dropped:
            logger.warning("Dropped %d edges with unknown endpoints from projection", dropped)

        return LayoutResult(nodes=nodes, edges=edges, ready=True, dropped_edges=dropped)
