"""
Level geometry structure for navigation graph processing.

A level is an ordered list of polygons. Each polygon is a point sequence whose
consecutive pairs are its edges (a closed polygon repeats its first point at the
end) and is tagged either as a container (outer boundary, even-odd fill) or as a
solid obstacle. The geometry must stay unchanged for the lifetime of any graph
built from it.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple, Union

import numpy as np

from .utils.geometry import Vec2

EdgeKey = Tuple[int, int]  # (polygon_index, edge_index)


@dataclass
class Polygon:
    """A polygon of level geometry."""

    points: List[Vec2]
    is_container: bool = False

    def __post_init__(self):
        self.points = [(float(x), float(y)) for x, y in self.points]

    @property
    def edge_count(self) -> int:
        return max(0, len(self.points) - 1)

    def edge(self, edge_index: int) -> Tuple[Vec2, Vec2]:
        """Return the (start, end) points of an edge."""
        return self.points[edge_index], self.points[edge_index + 1]

    def edges(self) -> Iterator[Tuple[int, Vec2, Vec2]]:
        """Yield (edge_index, start, end) for each edge in order."""
        for edge_index in range(self.edge_count):
            yield edge_index, self.points[edge_index], self.points[edge_index + 1]


@dataclass
class Level:
    """
    Complete level geometry.

    edge_array() flattens every polygon edge into one numpy array so that
    line-of-sight and sweep checks can test against all edges at once.
    """

    polygons: List[Polygon] = field(default_factory=list)

    _edge_array: Optional[np.ndarray] = field(default=None, init=False, repr=False, compare=False)
    _edge_keys: Optional[List[EdgeKey]] = field(default=None, init=False, repr=False, compare=False)

    def edge_array(self) -> Tuple[np.ndarray, List[EdgeKey]]:
        """
        Get all level edges as an (E, 4) array of (x0, y0, x1, y1) rows.

        Returns:
            Tuple of (edge array, list of (polygon_index, edge_index) keys per row)
        """
        if self._edge_array is None:
            rows = []
            keys = []
            for polygon_index, polygon in enumerate(self.polygons):
                for edge_index, start, end in polygon.edges():
                    rows.append((start[0], start[1], end[0], end[1]))
                    keys.append((polygon_index, edge_index))
            self._edge_array = np.array(rows, dtype=float).reshape(-1, 4)
            self._edge_keys = keys
        return self._edge_array, self._edge_keys

    def edge_points(self, key: EdgeKey) -> Tuple[Vec2, Vec2]:
        polygon_index, edge_index = key
        return self.polygons[polygon_index].edge(edge_index)

    @classmethod
    def from_polygons(
        cls, polygons: Sequence[Union[Polygon, Tuple[Sequence[Vec2], bool]]]
    ) -> "Level":
        """Create a level from Polygon objects or (points, is_container) pairs."""
        converted = []
        for polygon in polygons:
            if isinstance(polygon, Polygon):
                converted.append(polygon)
            else:
                points, is_container = polygon
                converted.append(Polygon(list(points), is_container))
        return cls(converted)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Level":
        """
        Create a level from its plain-data form.

        Args:
            data: {"polygons": [{"points": [[x, y], ...], "is_container": bool}, ...]}
        """
        polygons = []
        for entry in data.get("polygons", []):
            points = [(float(p[0]), float(p[1])) for p in entry["points"]]
            polygons.append(Polygon(points, bool(entry.get("is_container", False))))
        return cls(polygons)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "polygons": [
                {
                    "points": [[x, y] for x, y in polygon.points],
                    "is_container": polygon.is_container,
                }
                for polygon in self.polygons
            ]
        }


def load_level(path: Union[str, Path]) -> Level:
    """Load level geometry from a JSON file in the Level.to_dict() layout."""
    with open(path, "r") as f:
        return Level.from_dict(json.load(f))


def save_level(level: Level, path: Union[str, Path]):
    """Write level geometry to a JSON file loadable by load_level()."""
    with open(path, "w") as f:
        json.dump(level.to_dict(), f, indent=2)
