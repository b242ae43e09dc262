"""Layout pipeline: aggregate, simulate, project."""

from __future__ import annotations

import logging
import time
from typing import Any, Iterable, Mapping, Optional

from ..models.graph import Graph, GraphFragment
from ..models.layout import LayoutResult
from .aggregator import GraphAggregator
from .config import LayoutConfig, get_config
from .errors import MalformedInputError
from .projector import LayoutProjector
from .simulation import ForceSimulationEngine

logger = logging.getLogger(__name__)

REQUIRED_GRAPH_FIELDS = ("nodes", "edges")


def parse_whole_graph(payload: Any) -> GraphFragment:
    """
    Validate a whole-graph payload and convert it to a single fragment.

    Raises:
        MalformedInputError: If the payload is not an object or either the
            ``nodes`` or ``edges`` array is absent.
    """
    if not isinstance(payload, Mapping):
        raise MalformedInputError(
            "Graph payload must be a JSON object with nodes and edges",
            missing=REQUIRED_GRAPH_FIELDS,
        )
    missing = [key for key in REQUIRED_GRAPH_FIELDS if not isinstance(payload.get(key), (list, tuple))]
    if missing:
        raise MalformedInputError(
            f"Graph payload is missing required field(s): {', '.join(missing)}",
            missing=missing,
        )
    logger.info(
        "Received graph payload with %d nodes and %d edges",
        len(payload["nodes"]),
        len(payload["edges"]),
    )
    return GraphFragment.from_payload({"neighbors": payload["nodes"], "edges": payload["edges"]})


class GraphLayoutService:
    """Run the synchronous aggregation, simulation and projection stages."""

    def __init__(
        self,
        config: Optional[LayoutConfig] = None,
        aggregator: Optional[GraphAggregator] = None,
        engine: Optional[ForceSimulationEngine] = None,
        projector: Optional[LayoutProjector] = None,
    ) -> None:
        self.config = config or get_config()
        self.aggregator = aggregator or GraphAggregator()
        self.engine = engine or ForceSimulationEngine(self.config)
        self.projector = projector or LayoutProjector(scale=self.config.scale)

    def layout_graph(self, graph: Graph) -> LayoutResult:
        """Simulate and project an already-aggregated graph."""
        start_time = time.time()
        positions = self.engine.run(graph)
        result = self.projector.project(graph, positions)
        logger.info(
            "Layout ready: %d nodes, %d edges in %.1fms",
            len(result.nodes),
            len(result.edges),
            (time.time() - start_time) * 1000,
        )
        return result

    def layout_fragments(self, fragments: Iterable[Any]) -> LayoutResult:
        """Lay out the graph formed by merging per-node fragments."""
        return self.layout_graph(self.aggregator.aggregate(fragments))

    def layout_payload(self, payload: Any) -> LayoutResult:
        """Lay out a whole-graph ``{nodes, edges}`` payload."""
        return self.layout_fragments([parse_whole_graph(payload)])


__all__ = ["GraphLayoutService", "parse_whole_graph", "REQUIRED_GRAPH_FIELDS"]
