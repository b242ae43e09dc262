"""Force contributions evaluated by the simulation on every tick.

Each force reads particle positions and adds to particle velocities in place.
The engine evaluates them in a fixed order: link, charge, x, y, collision.
"""

from __future__ import annotations

import math
from typing import List, Optional, Protocol

import numpy as np

from .config import LayoutConfig
from .quadtree import QuadTree, SpatialGrid
from .simulation_state import SimulationState


class Force(Protocol):
    """Protocol for a single force contribution."""

    def initialize(self, state: SimulationState) -> None:
        """Precompute per-particle or per-link constants."""
        ...

    def apply(self, state: SimulationState, alpha: float) -> None:
        """Add this force's contribution to ``state.velocities``."""
        ...


class LinkForce:
    """Spring force pulling linked particles toward a target distance."""

    def __init__(self, distance: float = 100.0, strength: Optional[float] = None) -> None:
        self.distance = distance
        self.strength = strength
        self._source = np.empty(0, dtype=np.intp)
        self._target = np.empty(0, dtype=np.intp)
        self._strengths = np.empty(0)
        self._bias = np.empty(0)

    def initialize(self, state: SimulationState) -> None:
        links = state.links
        self._source = links[:, 0]
        self._target = links[:, 1]
        if not len(links):
            self._strengths = np.empty(0)
            self._bias = np.empty(0)
            return

        degree = np.bincount(links.ravel(), minlength=state.size).astype(float)
        source_degree = degree[self._source]
        target_degree = degree[self._target]
        if self.strength is None:
            self._strengths = 1.0 / np.minimum(source_degree, target_degree)
        else:
            self._strengths = np.full(len(links), float(self.strength))
        self._bias = source_degree / (source_degree + target_degree)

    def apply(self, state: SimulationState, alpha: float) -> None:
        if not len(self._source):
            return
        pos = state.positions
        vel = state.velocities
        delta = (pos[self._target] + vel[self._target]) - (pos[self._source] + vel[self._source])
        zero = delta == 0
        if zero.any():
            delta[zero] = state.jiggle_array(int(zero.sum()))

        length = np.sqrt((delta * delta).sum(axis=1))
        factor = (length - self.distance) / length * alpha * self._strengths
        delta *= factor[:, None]

        np.add.at(vel, self._target, -delta * self._bias[:, None])
        np.add.at(vel, self._source, delta * (1.0 - self._bias)[:, None])


class ManyBodyForce:
    """
    Pairwise charge between all particles.

    Negative strength repels. Small graphs use an exact vectorised sum; larger
    graphs use the Barnes-Hut approximation over a QuadTree rebuilt every
    tick, which treats any cell whose width is small relative to its distance
    (``width / distance < theta``) as a single aggregate charge.
    """

    def __init__(
        self,
        strength: float = -100.0,
        theta: float = 0.9,
        distance_min: float = 1.0,
        distance_max: float = math.inf,
        exact_max_nodes: int = 64,
    ) -> None:
        self.strength = strength
        self.theta2 = theta * theta
        self.distance_min2 = distance_min * distance_min
        self.distance_max2 = distance_max * distance_max
        self.exact_max_nodes = exact_max_nodes
        self._strengths = np.empty(0)

    def initialize(self, state: SimulationState) -> None:
        self._strengths = np.full(state.size, float(self.strength))

    def apply(self, state: SimulationState, alpha: float) -> None:
        if state.size < 2:
            return
        if state.size <= self.exact_max_nodes:
            self._apply_exact(state, alpha)
        else:
            self._apply_barnes_hut(state, alpha)

    def _apply_exact(self, state: SimulationState, alpha: float) -> None:
        pos = state.positions
        n = state.size
        # dx[i, j] points from particle i toward particle j.
        dx = pos[None, :, 0] - pos[:, None, 0]
        dy = pos[None, :, 1] - pos[:, None, 1]
        off_diagonal = ~np.eye(n, dtype=bool)

        zero_x = (dx == 0) & off_diagonal
        if zero_x.any():
            dx[zero_x] = state.jiggle_array(int(zero_x.sum()))
        zero_y = (dy == 0) & off_diagonal
        if zero_y.any():
            dy[zero_y] = state.jiggle_array(int(zero_y.sum()))

        l = dx * dx + dy * dy
        l = np.where(l < self.distance_min2, np.sqrt(self.distance_min2 * l), l)
        within = off_diagonal & (l < self.distance_max2)
        weight = np.where(within, self._strengths[None, :] * alpha / np.where(within, l, 1.0), 0.0)

        state.velocities[:, 0] += (dx * weight).sum(axis=1)
        state.velocities[:, 1] += (dy * weight).sum(axis=1)

    def _apply_barnes_hut(self, state: SimulationState, alpha: float) -> None:
        xs = state.positions[:, 0].tolist()
        ys = state.positions[:, 1].tolist()
        weights = self._strengths.tolist()
        tree = QuadTree(xs, ys, weights)
        theta2 = self.theta2
        dmin2 = self.distance_min2
        dmax2 = self.distance_max2
        n = state.size
        dvx = [0.0] * n
        dvy = [0.0] * n

        for i in range(n):
            xi = xs[i]
            yi = ys[i]
            fx = 0.0
            fy = 0.0
            stack = [tree.root]
            while stack:
                quad = stack.pop()
                if not quad.value:
                    continue
                dx = quad.cx - xi
                dy = quad.cy - yi
                l = dx * dx + dy * dy
                width = quad.width

                # Far enough away: treat the whole cell as one charge.
                if width * width < theta2 * l:
                    if l < dmax2:
                        if dx == 0:
                            dx = state.jiggle()
                            l += dx * dx
                        if dy == 0:
                            dy = state.jiggle()
                            l += dy * dy
                        if l < dmin2:
                            l = math.sqrt(dmin2 * l)
                        fx += dx * quad.value * alpha / l
                        fy += dy * quad.value * alpha / l
                    continue

                if quad.children is not None:
                    stack.extend(quad.children)
                    continue
                if l >= dmax2:
                    continue

                for j in quad.indices:
                    if j == i:
                        continue
                    dx = xs[j] - xi
                    dy = ys[j] - yi
                    l = dx * dx + dy * dy
                    if dx == 0:
                        dx = state.jiggle()
                        l += dx * dx
                    if dy == 0:
                        dy = state.jiggle()
                        l += dy * dy
                    if l < dmin2:
                        l = math.sqrt(dmin2 * l)
                    w = weights[j] * alpha / l
                    fx += dx * w
                    fy += dy * w

            dvx[i] = fx
            dvy[i] = fy

        state.velocities[:, 0] += np.asarray(dvx)
        state.velocities[:, 1] += np.asarray(dvy)


class PositionForce:
    """Pull every particle toward ``target`` along one axis."""

    def __init__(self, axis: int, target: float = 0.0, strength: float = 0.1) -> None:
        if axis not in (0, 1):
            raise ValueError("axis must be 0 (x) or 1 (y)")
        self.axis = axis
        self.target = target
        self.strength = strength

    def initialize(self, state: SimulationState) -> None:
        pass

    def apply(self, state: SimulationState, alpha: float) -> None:
        coords = state.positions[:, self.axis]
        state.velocities[:, self.axis] += (self.target - coords) * self.strength * alpha


class CollideForce:
    """
    Push apart particles whose circles overlap.

    Overlap is tested on predicted positions (position + velocity). The
    correction is split evenly between both particles and is not scaled by
    alpha, so separation is enforced even as the simulation cools.
    """

    def __init__(self, radius: float = 50.0, strength: float = 1.0) -> None:
        self.radius = radius
        self.strength = strength

    def initialize(self, state: SimulationState) -> None:
        pass

    def apply(self, state: SimulationState, alpha: float) -> None:
        n = state.size
        if n < 2:
            return
        xs = state.positions[:, 0].tolist()
        ys = state.positions[:, 1].tolist()
        vxs = state.velocities[:, 0].tolist()
        vys = state.velocities[:, 1].tolist()
        reach = 2.0 * self.radius
        reach2 = reach * reach
        grid = SpatialGrid(
            [x + vx for x, vx in zip(xs, vxs)],
            [y + vy for y, vy in zip(ys, vys)],
            reach,
        )

        for i in range(n):
            xi = xs[i] + vxs[i]
            yi = ys[i] + vys[i]
            for j in grid.neighbors(xi, yi):
                if j <= i:
                    continue
                dx = xi - xs[j] - vxs[j]
                dy = yi - ys[j] - vys[j]
                l = dx * dx + dy * dy
                if l >= reach2:
                    continue
                if dx == 0:
                    dx = state.jiggle()
                    l += dx * dx
                if dy == 0:
                    dy = state.jiggle()
                    l += dy * dy
                l = math.sqrt(l)
                k = (reach - l) / l * self.strength
                dx *= k
                dy *= k
                # Equal radii: each side takes half of the correction.
                vxs[i] += dx * 0.5
                vys[i] += dy * 0.5
                vxs[j] -= dx * 0.5
                vys[j] -= dy * 0.5

        state.velocities[:, 0] = vxs
        state.velocities[:, 1] = vys


def build_forces(config: LayoutConfig) -> List[Force]:
    """Build the fixed force pipeline for one simulation pass."""
    return [
        LinkForce(distance=config.link_distance, strength=config.link_strength),
        ManyBodyForce(
            strength=config.charge_strength,
            theta=config.charge_theta,
            distance_min=config.charge_distance_min,
            distance_max=config.charge_distance_max,
            exact_max_nodes=config.exact_charge_max_nodes,
        ),
        PositionForce(axis=0, strength=config.center_strength),
        PositionForce(axis=1, strength=config.center_strength),
        CollideForce(radius=config.collision_radius, strength=config.collision_strength),
    ]


__all__ = [
    "Force",
    "LinkForce",
    "ManyBodyForce",
    "PositionForce",
    "CollideForce",
    "build_forces",
]
