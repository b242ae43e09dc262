"""Force-directed layout simulation.

Runs a fixed number of ticks of a spring embedder over an aggregated Graph.
Every tick:

1. alpha moves toward alpha_target by alpha_decay
2. each force in the pipeline adds to particle velocities
3. velocities are damped by velocity_decay and added to positions

The tick count is fixed; the loop never stops early on convergence.
"""

from __future__ import annotations

import logging
import math
import time
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from ..models.graph import Graph
from .config import LayoutConfig, get_config
from .forces import Force, build_forces
from .simulation_state import SimulationParticle, SimulationState

logger = logging.getLogger(__name__)

INITIAL_ANGLE = math.pi * (3.0 - math.sqrt(5.0))


def phyllotaxis(count: int, initial_radius: float = 10.0) -> np.ndarray:
    """Deterministic seed placement: a sunflower spiral around the origin."""
    idx = np.arange(count, dtype=float)
    radius = initial_radius * np.sqrt(0.5 + idx)
    angle = idx * INITIAL_ANGLE
    return np.column_stack((radius * np.cos(angle), radius * np.sin(angle)))


class ForceSimulationEngine:
    """Compute 2-D node positions for a Graph."""

    def __init__(self, config: Optional[LayoutConfig] = None) -> None:
        self.config = config or get_config()

    def initialize(self, graph: Graph) -> SimulationState:
        """Seed particles and resolve edges to particle rows."""
        node_ids = graph.node_ids()
        index = {node_id: i for i, node_id in enumerate(node_ids)}

        pairs: List[Tuple[int, int]] = []
        skipped = 0
        for edge in graph.edges:
            source = index.get(edge.source)
            target = index.get(edge.target)
            if source is None or target is None:
                skipped += 1
                continue
            if source == target:
                # A self-loop pulls a particle toward itself: no net force.
                continue
            pairs.append((source, target))
        if skipped:
            logger.debug("Skipping %d edges with unknown endpoints", skipped)

        n = len(node_ids)
        return SimulationState(
            node_ids=node_ids,
            index=index,
            positions=phyllotaxis(n, self.config.initial_radius),
            velocities=np.zeros((n, 2)),
            links=np.array(pairs, dtype=np.intp).reshape(-1, 2),
            rng=np.random.default_rng(self.config.seed),
            alpha=self.config.alpha,
        )

    def step(self, state: SimulationState, forces: Sequence[Force]) -> None:
        """Advance the simulation by one tick."""
        cfg = self.config
        state.alpha += (cfg.alpha_target - state.alpha) * cfg.alpha_decay
        for force in forces:
            force.apply(state, state.alpha)
        state.velocities *= 1.0 - cfg.velocity_decay
        state.positions += state.velocities
        state.tick_count += 1

    def simulate(self, graph: Graph) -> SimulationState:
        """Run every configured tick and return the final state."""
        state = self.initialize(graph)
        if state.size == 0:
            return state

        start_time = time.time()
        forces = build_forces(self.config)
        for force in forces:
            force.initialize(state)
        for _ in range(self.config.ticks):
            self.step(state, forces)

        logger.info(
            "Simulated %d nodes / %d links for %d ticks in %.1fms (alpha=%.4f)",
            state.size,
            len(state.links),
            state.tick_count,
            (time.time() - start_time) * 1000,
            state.alpha,
        )
        return state

    def run(self, graph: Graph) -> Dict[str, Tuple[float, float]]:
        """Return the final (x, y) for every node id."""
        return self.simulate(graph).positions_by_id()

    def particles(self, graph: Graph) -> List[SimulationParticle]:
        return self.simulate(graph).particles()


__all__ = ["ForceSimulationEngine", "phyllotaxis", "INITIAL_ANGLE"]
