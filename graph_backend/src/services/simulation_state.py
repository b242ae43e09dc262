"""Mutable per-pass state owned by the force simulation."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import numpy as np


@dataclass
class SimulationParticle:
    """Snapshot of one particle (dict form, not the packed arrays)."""
    node_id: str
    x: float
    y: float
    vx: float = 0.0
    vy: float = 0.0


@dataclass
class SimulationState:
    """Packed particle arrays for a single layout pass.

    Attributes:
        node_ids: Node ids in graph insertion order; row i of every array
            belongs to node_ids[i]
        positions: (n, 2) float array of x, y
        velocities: (n, 2) float array of vx, vy
        links: (m, 2) int array of (source row, target row), dangling and
            self-loop edges already removed
        rng: Seeded generator used only to break exact coincidences
        alpha: Current simulation heat
        tick_count: Ticks advanced so far
    """
    node_ids: List[str]
    positions: np.ndarray
    velocities: np.ndarray
    links: np.ndarray
    rng: np.random.Generator
    alpha: float = 1.0
    tick_count: int = 0
    index: Dict[str, int] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.index:
            self.index = {node_id: i for i, node_id in enumerate(self.node_ids)}

    @property
    def size(self) -> int:
        return len(self.node_ids)

    def jiggle(self) -> float:
        """Tiny non-zero offset used when two coordinates coincide exactly."""
        return (float(self.rng.random()) - 0.5) * 1e-6

    def jiggle_array(self, count: int) -> np.ndarray:
        return (self.rng.random(count) - 0.5) * 1e-6

    def particle(self, node_id: str) -> Optional[SimulationParticle]:
        i = self.index.get(node_id)
        if i is None:
            return None
        x, y = self.positions[i]
        vx, vy = self.velocities[i]
        return SimulationParticle(node_id=node_id, x=float(x), y=float(y), vx=float(vx), vy=float(vy))

    def particles(self) -> List[SimulationParticle]:
        return [
            SimulationParticle(
                node_id=node_id,
                x=float(self.positions[i, 0]),
                y=float(self.positions[i, 1]),
                vx=float(self.velocities[i, 0]),
                vy=float(self.velocities[i, 1]),
            )
            for i, node_id in enumerate(self.node_ids)
        ]

    def positions_by_id(self) -> Dict[str, Tuple[float, float]]:
        return {
            node_id: (float(self.positions[i, 0]), float(self.positions[i, 1]))
            for i, node_id in enumerate(self.node_ids)
        }
