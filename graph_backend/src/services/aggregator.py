"""Merge per-source graph fragments into one deduplicated graph."""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Tuple

from ..models.graph import EdgeRecord, Graph, GraphFragment, NodeRecord

logger = logging.getLogger(__name__)


class GraphAggregator:
    """
    Combine fragments into a single Graph.

    Nodes are keyed by id and edges by their (source, target) pair. The first
    record observed for a key is kept and later ones are discarded whole, so
    fragments are never merged field by field.
    """

    def aggregate(self, fragments: Iterable[Any]) -> Graph:
        """
        Aggregate fragments in arrival order.

        Args:
            fragments: GraphFragment instances or decoded JSON mappings with
                optional ``this``, ``neighbors`` and ``edges`` members.

        Returns:
            Graph with first-seen insertion order for nodes and edges.
        """
        nodes: Dict[str, NodeRecord] = {}
        edges: Dict[Tuple[str, str], EdgeRecord] = {}
        fragment_count = 0
        discarded_nodes = 0
        discarded_edges = 0

        for raw in fragments:
            fragment = GraphFragment.from_payload(raw)
            fragment_count += 1

            for node in fragment.iter_nodes():
                if node.id in nodes:
                    discarded_nodes += 1
                    continue
                nodes[node.id] = node

            for edge in fragment.edges:
                if edge.key in edges:
                    discarded_edges += 1
                    continue
                edges[edge.key] = edge

        logger.info(
            "Aggregated %d fragments into %d nodes and %d edges",
            fragment_count,
            len(nodes),
            len(edges),
        )
        if discarded_nodes or discarded_edges:
            logger.debug(
                "Discarded %d duplicate nodes and %d duplicate edges",
                discarded_nodes,
                discarded_edges,
            )
        return Graph(nodes=nodes, edges=tuple(edges.values()))


def aggregate_fragments(fragments: Iterable[Any]) -> Graph:
    """Convenience wrapper around GraphAggregator().aggregate()."""
    return GraphAggregator().aggregate(fragments)
