"""Spatial indexes for the force simulation.

QuadTree partitions particles for the Barnes-Hut charge approximation: every
cell carries the summed charge of the particles beneath it and their
charge-weighted centroid. SpatialGrid buckets particles into square cells for
fixed-radius neighbour queries during collision resolution.

Both are rebuilt from scratch on every tick and are read-only afterwards.
"""

from __future__ import annotations

import math
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

MAX_DEPTH = 32


class QuadNode:
    """A square cell of the quadtree."""

    __slots__ = ("x0", "y0", "x1", "y1", "children", "indices", "value", "cx", "cy")

    def __init__(self, x0: float, y0: float, x1: float, y1: float) -> None:
        self.x0 = x0
        self.y0 = y0
        self.x1 = x1
        self.y1 = y1
        self.children: Optional[List["QuadNode"]] = None
        self.indices: List[int] = []
        self.value = 0.0
        self.cx = 0.0
        self.cy = 0.0

    @property
    def width(self) -> float:
        return self.x1 - self.x0

    @property
    def is_leaf(self) -> bool:
        return self.children is None


class QuadTree:
    """Barnes-Hut quadtree over a fixed set of weighted points."""

    def __init__(self, xs: Sequence[float], ys: Sequence[float], weights: Sequence[float]) -> None:
        self.xs = list(xs)
        self.ys = list(ys)
        self.weights = list(weights)
        if len(self.xs) != len(self.ys) or len(self.xs) != len(self.weights):
            raise ValueError("xs, ys and weights must have the same length")
        self.root = self._build_root()

    def __len__(self) -> int:
        return len(self.xs)

    def _build_root(self) -> Optional[QuadNode]:
        if not self.xs:
            return None
        x0, x1 = min(self.xs), max(self.xs)
        y0, y1 = min(self.ys), max(self.ys)
        side = max(x1 - x0, y1 - y0) or 1.0
        # Widen slightly so points on the far edge fall inside.
        side *= 1.0 + 1e-9
        root = QuadNode(x0, y0, x0 + side, y0 + side)
        self._subdivide(root, list(range(len(self.xs))), 0)
        self._accumulate(root)
        return root

    def _coincident(self, indices: List[int]) -> bool:
        x, y = self.xs[indices[0]], self.ys[indices[0]]
        return all(self.xs[i] == x and self.ys[i] == y for i in indices)

    def _subdivide(self, node: QuadNode, indices: List[int], depth: int) -> None:
        if len(indices) <= 1 or depth >= MAX_DEPTH or self._coincident(indices):
            node.indices = indices
            return

        xm = (node.x0 + node.x1) / 2.0
        ym = (node.y0 + node.y1) / 2.0
        buckets: List[List[int]] = [[], [], [], []]
        for i in indices:
            quadrant = (1 if self.xs[i] >= xm else 0) | (2 if self.ys[i] >= ym else 0)
            buckets[quadrant].append(i)

        node.children = []
        for quadrant, bucket in enumerate(buckets):
            if not bucket:
                continue
            cx0, cx1 = (xm, node.x1) if quadrant & 1 else (node.x0, xm)
            cy0, cy1 = (ym, node.y1) if quadrant & 2 else (node.y0, ym)
            child = QuadNode(cx0, cy0, cx1, cy1)
            self._subdivide(child, bucket, depth + 1)
            node.children.append(child)

    def _accumulate(self, node: QuadNode) -> None:
        if node.children is None:
            parts = [(self.weights[i], self.xs[i], self.ys[i]) for i in node.indices]
        else:
            for child in node.children:
                self._accumulate(child)
            parts = [(child.value, child.cx, child.cy) for child in node.children]

        value = 0.0
        weight = 0.0
        sx = 0.0
        sy = 0.0
        for v, x, y in parts:
            value += v
            weight += abs(v)
            sx += abs(v) * x
            sy += abs(v) * y
        node.value = value
        if weight > 0:
            node.cx = sx / weight
            node.cy = sy / weight
        else:
            node.cx = (node.x0 + node.x1) / 2.0
            node.cy = (node.y0 + node.y1) / 2.0


class SpatialGrid:
    """Uniform grid hash for fixed-radius neighbour lookups."""

    def __init__(self, xs: Sequence[float], ys: Sequence[float], cell_size: float) -> None:
        if cell_size <= 0:
            raise ValueError("cell_size must be positive")
        self.cell_size = cell_size
        self.cells: Dict[Tuple[int, int], List[int]] = {}
        for i, (x, y) in enumerate(zip(xs, ys)):
            self.cells.setdefault(self.cell_of(x, y), []).append(i)

    def cell_of(self, x: float, y: float) -> Tuple[int, int]:
        return (math.floor(x / self.cell_size), math.floor(y / self.cell_size))

    def neighbors(self, x: float, y: float) -> Iterator[int]:
        """Yield indices in the 3x3 block of cells around (x, y)."""
        cx, cy = self.cell_of(x, y)
        for gx in (cx - 1, cx, cx + 1):
            for gy in (cy - 1, cy, cy + 1):
                yield from self.cells.get((gx, gy), ())
