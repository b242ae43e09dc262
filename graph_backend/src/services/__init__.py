"""Service layer for graph aggregation, layout and acquisition."""

from .aggregator import GraphAggregator, aggregate_fragments
from .config import LayoutConfig, get_config, reload_config
from .errors import GraphSourceError, LayoutError, MalformedInputError
from .forces import CollideForce, LinkForce, ManyBodyForce, PositionForce, build_forces
from .graph_source import GraphSourceClient
from .layout_service import GraphLayoutService, parse_whole_graph
from .projector import LayoutProjector
from .quadtree import QuadTree, SpatialGrid
from .simulation import ForceSimulationEngine
from .simulation_state import SimulationParticle, SimulationState

__all__ = [
    "LayoutConfig",
    "get_config",
    "reload_config",
    "LayoutError",
    "MalformedInputError",
    "GraphSourceError",
    "GraphAggregator",
    "aggregate_fragments",
    "QuadTree",
    "SpatialGrid",
    "LinkForce",
    "ManyBodyForce",
    "PositionForce",
    "CollideForce",
    "build_forces",
    "SimulationParticle",
    "SimulationState",
    "ForceSimulationEngine",
    "LayoutProjector",
    "GraphLayoutService",
    "parse_whole_graph",
    "GraphSourceClient",
]
