"""
A* pathfinding over the platformer navigation graph.

Walkable, jumpable and droppable connections are all traversable. A
connection costs its distance plus its effort scaled by the effort weight, so
jumps cost more than walks of the same length and drops cost less than jumps.

The heuristic is anisotropic: vertical distance toward a goal above the node
is weighted up since getting there needs jumps, while distance toward a goal
below is left unweighted. This makes the heuristic inadmissible, so returned
paths are not guaranteed optimal in general.
"""

import heapq
import itertools
import logging
import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set

from ..config import SearchConfig
from ..utils.geometry import Vec2, distance_squared
from .navigation_graph import NavGraph

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PathNode:
    """A waypoint on a path."""

    id: int
    position: Vec2


@dataclass
class Path:
    """
    Result of a successful search.

    nodes runs from the node after the start node up to and including the
    goal node. An empty node list means the agent is already at the goal.
    """

    nodes: List[PathNode] = field(default_factory=list)
    total_cost: float = 0.0

    def __len__(self) -> int:
        return len(self.nodes)

    def __getitem__(self, index: int) -> PathNode:
        return self.nodes[index]

    def __iter__(self):
        return iter(self.nodes)

    @property
    def is_empty(self) -> bool:
        return not self.nodes

    @property
    def node_ids(self) -> List[int]:
        return [node.id for node in self.nodes]

    @property
    def positions(self) -> List[Vec2]:
        return [node.position for node in self.nodes]


class PlatformerAStar:
    """A* search specialized for platformer movement costs."""

    def __init__(self, graph: NavGraph, config: Optional[SearchConfig] = None):
        self.graph = graph
        self.config = config or SearchConfig()
        self.nodes_expanded = 0

    def heuristic(self, from_pos: Vec2, to_pos: Vec2) -> float:
        """Estimate remaining cost, penalizing upward travel."""
        dx = abs(to_pos[0] - from_pos[0])
        dy = to_pos[1] - from_pos[1]

        if dy > 0.0:
            vertical = dy * self.config.vertical_heuristic_weight
        else:
            vertical = -dy

        return math.sqrt(dx * dx + vertical * vertical)

    def goal_node_id(self, goal_position: Vec2) -> Optional[int]:
        """Snap a goal position to the nearest node."""
        best_id: Optional[int] = None
        best_distance = math.inf

        for node_id in self.graph.candidate_node_ids(goal_position):
            dist = distance_squared(goal_position, self.graph.nodes[node_id].position)
            if dist < best_distance:
                best_distance = dist
                best_id = node_id

        return best_id

    def start_node_id(self, start_position: Vec2, goal_position: Vec2) -> Optional[int]:
        """
        Snap a start position to the nearest node.

        Among equally near candidates, the one nearer the goal position wins.
        """
        best_id: Optional[int] = None
        best_distance = math.inf

        for node_id in self.graph.candidate_node_ids(start_position):
            position = self.graph.nodes[node_id].position
            dist = distance_squared(start_position, position)

            if dist > best_distance:
                continue

            if dist == best_distance and best_id is not None:
                best_to_goal = distance_squared(goal_position, self.graph.nodes[best_id].position)
                if distance_squared(goal_position, position) > best_to_goal:
                    continue

            best_distance = dist
            best_id = node_id

        return best_id

    def find_path(self, start_position: Vec2, goal_position: Vec2) -> Optional[Path]:
        """
        Find a lowest-cost node sequence between two world positions.

        Args:
            start_position: Agent position
            goal_position: Target position

        Returns:
            Path excluding the start node, an empty Path if start and goal snap
            to the same node, or None if no path exists
        """
        self.nodes_expanded = 0

        goal_id = self.goal_node_id(goal_position)
        if goal_id is None:
            return None
        start_id = self.start_node_id(start_position, goal_position)
        if start_id is None:
            return None

        if start_id == goal_id:
            return Path()

        return self.search(start_id, goal_id, goal_position)

    def search(
        self, start_id: int, goal_id: int, goal_position: Optional[Vec2] = None
    ) -> Optional[Path]:
        """
        Run A* between two node ids.

        The heuristic measures toward goal_position, the requested target,
        which may lie off the graph. It defaults to the goal node's position.
        Open entries are ordered by f cost, then lower h, then lower g. Parents
        are recorded when a node is popped, not when it is pushed.
        """
        nodes = self.graph.nodes
        if goal_position is None:
            goal_position = nodes[goal_id].position
        effort_weight = self.config.effort_weight
        counter = itertools.count()

        start_h = self.heuristic(nodes[start_id].position, goal_position)
        # (f_cost, h_cost, g_cost, insertion order, node id, parent id)
        open_set = [(start_h, start_h, 0.0, next(counter), start_id, None)]
        closed: Set[int] = set()
        came_from: Dict[int, int] = {}

        while open_set:
            _, _, g_cost, _, node_id, parent_id = heapq.heappop(open_set)

            if node_id in closed:
                continue

            if parent_id is not None:
                came_from[node_id] = parent_id

            if node_id == goal_id:
                return self._reconstruct(came_from, start_id, goal_id, g_cost)

            closed.add(node_id)
            self.nodes_expanded += 1

            for connection in nodes[node_id].connections():
                neighbor_id = connection.target_id
                if neighbor_id in closed:
                    continue

                new_g = g_cost + connection.distance + effort_weight * connection.effort
                new_h = self.heuristic(nodes[neighbor_id].position, goal_position)
                heapq.heappush(
                    open_set,
                    (new_g + new_h, new_h, new_g, next(counter), neighbor_id, node_id),
                )

        logger.debug(
            "No path from node %d to node %d after expanding %d nodes",
            start_id,
            goal_id,
            self.nodes_expanded,
        )
        return None

    def _reconstruct(
        self, came_from: Dict[int, int], start_id: int, goal_id: int, total_cost: float
    ) -> Path:
        path_ids = []
        node_id = goal_id
        while node_id != start_id:
            path_ids.append(node_id)
            node_id = came_from[node_id]
        path_ids.reverse()

        nodes = self.graph.nodes
        return Path(
            nodes=[PathNode(node_id, nodes[node_id].position) for node_id in path_ids],
            total_cost=total_cost,
        )


def find_path(
    graph: NavGraph,
    start_position: Vec2,
    goal_position: Vec2,
    config: Optional[SearchConfig] = None,
) -> Optional[Path]:
    """Find a path between two world positions on a graph."""
    return PlatformerAStar(graph, config).find_path(start_position, goal_position)
