"""
Spatial hash grid for fast node lookup.

Provides nearest-node candidate queries for snapping world positions onto the
navigation graph, replacing a linear scan of every node with a 3x3 cell lookup.
"""

import math
from typing import Dict, List, Sequence, Tuple

import numpy as np

from ..utils.geometry import Vec2

Cell = Tuple[int, int]


class SpatialGrid:
    """
    2D spatial hash grid over node ids.

    Cells are keyed by floor((position - bounds_min) / cell_size). A query
    gathers every node id stored in the 3x3 block of cells around the query
    position's cell. An empty result means the caller must fall back to a
    full scan.

    Performance:
    - Build: O(N) where N is number of nodes
    - Query: O(1) in practice (checks at most 9 cells with few nodes each)
    """

    def __init__(self, cell_size: float):
        """
        Initialize spatial hash grid.

        Args:
            cell_size: Edge length of a square grid cell in world units
        """
        if cell_size <= 0:
            raise ValueError("cell_size must be positive")
        self.cell_size = cell_size
        self.cells: Dict[Cell, List[int]] = {}
        self.bounds: Tuple[Vec2, Vec2] = ((0.0, 0.0), (0.0, 0.0))

    def cell_of(self, position: Vec2) -> Cell:
        """Convert a world position to a grid cell coordinate."""
        min_x, min_y = self.bounds[0]
        cell_x = int(math.floor((position[0] - min_x) / self.cell_size))
        cell_y = int(math.floor((position[1] - min_y) / self.cell_size))
        return (cell_x, cell_y)

    def build(self, positions: Sequence[Vec2]):
        """
        Build the grid from node positions, where a position's index is its node id.

        Args:
            positions: Node positions ordered by node id
        """
        self.cells.clear()

        if len(positions) == 0:
            self.bounds = ((0.0, 0.0), (0.0, 0.0))
            return

        points = np.asarray(positions, dtype=float)
        lo = points.min(axis=0)
        hi = points.max(axis=0)
        self.bounds = ((float(lo[0]), float(lo[1])), (float(hi[0]), float(hi[1])))

        for node_id, position in enumerate(positions):
            self.cells.setdefault(self.cell_of(position), []).append(node_id)

    def nearby(self, position: Vec2) -> List[int]:
        """
        Get node ids in the 3x3 block of cells around a position.

        Args:
            position: Query position in world units

        Returns:
            Node ids in the surrounding cells, possibly empty
        """
        cell_x, cell_y = self.cell_of(position)
        node_ids: List[int] = []

        for dx in (-1, 0, 1):
            for dy in (-1, 0, 1):
                node_ids.extend(self.cells.get((cell_x + dx, cell_y + dy), ()))

        return node_ids

    def __len__(self) -> int:
        return len(self.cells)
