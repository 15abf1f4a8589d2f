"""
Navigation graph for platformer agents.

Nodes are points spaced along the walkable edges of level polygons. They are
linked by Walkable connections along a surface, and by directed Jumpable and
Droppable connections between polygons when a ballistic arc or a fall between
them clears all level geometry.

The graph is an arena: nodes live in a list and refer to each other only by
integer id, which always equals the node's list index once building finishes.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Sequence

import numpy as np

from ..config import GraphBuildConfig, NavConfig, PhysicsConfig
from ..level import EdgeKey, Level
from ..utils.geometry import (
    ZERO,
    Vec2,
    add,
    distance,
    dot,
    length,
    normalize_or_zero,
    perpendicular,
    scale,
    segment_edge_hits,
    sub,
)
from .movement_types import ConnectionType
from .physics_validator import PhysicsValidator
from .spatial_hash import SpatialGrid

logger = logging.getLogger(__name__)

HORIZONTAL_AXIS: Vec2 = (1.0, 0.0)


@dataclass
class NavConnection:
    """A traversal option from one node to another."""

    target_id: int
    distance: float
    kind: ConnectionType
    effort: float = 0.0  # Cost beyond distance: 0 walking, launch speed jumping, scaled fall dropping


@dataclass
class NavNode:
    """A point on walkable level geometry usable as a path waypoint."""

    id: int
    position: Vec2
    polygon_index: int
    edge_indices: List[EdgeKey]  # (polygon_index, edge_index) of every source edge
    normal: Vec2 = ZERO
    is_corner: bool = False
    is_external_corner: Optional[bool] = None
    walkable: List[NavConnection] = field(default_factory=list)
    jumpable: List[NavConnection] = field(default_factory=list)
    droppable: List[NavConnection] = field(default_factory=list)

    def connections(self) -> Iterator[NavConnection]:
        """Iterate over walkable, jumpable and droppable connections in that order."""
        yield from self.walkable
        yield from self.jumpable
        yield from self.droppable

    def connections_of(self, kind: ConnectionType) -> List[NavConnection]:
        if kind == ConnectionType.WALKABLE:
            return self.walkable
        if kind == ConnectionType.JUMPABLE:
            return self.jumpable
        return self.droppable

    def has_connection(self, target_id: int, kind: ConnectionType) -> bool:
        return any(c.target_id == target_id for c in self.connections_of(kind))


class NavGraph:
    """
    Immutable-after-build navigation graph with a spatial index.

    Safe to share read-only between any number of agents.
    """

    def __init__(self, nodes: List[NavNode], cell_size: float):
        self.nodes = nodes
        self.grid = SpatialGrid(cell_size)
        self.grid.build([node.position for node in nodes])

    @property
    def grid_bounds(self):
        return self.grid.bounds

    @property
    def cell_size(self) -> float:
        return self.grid.cell_size

    def __len__(self) -> int:
        return len(self.nodes)

    def __getitem__(self, node_id: int) -> NavNode:
        return self.nodes[node_id]

    def nearby_node_ids(self, position: Vec2) -> List[int]:
        """Node ids in the 3x3 grid cells around a position (may be empty)."""
        return self.grid.nearby(position)

    def candidate_node_ids(self, position: Vec2) -> Sequence[int]:
        """Nearby node ids, falling back to every node id if none are nearby."""
        nearby = self.grid.nearby(position)
        if nearby:
            return nearby
        return range(len(self.nodes))

    def find_connection(
        self, source_id: int, target_id: int, kind: Optional[ConnectionType] = None
    ) -> Optional[NavConnection]:
        """First connection from source to target, optionally of a given kind."""
        for connection in self.nodes[source_id].connections():
            if connection.target_id == target_id and (kind is None or connection.kind == kind):
                return connection
        return None

    def is_jump(self, source_id: int, target_id: int) -> bool:
        return self.nodes[source_id].has_connection(target_id, ConnectionType.JUMPABLE)

    def connection_count(self, kind: ConnectionType) -> int:
        return sum(len(node.connections_of(kind)) for node in self.nodes)

    def validate(self):
        """
        Check arena invariants.

        Raises:
            ValueError: If ids are not dense indices or a connection targets an invalid id
        """
        node_count = len(self.nodes)
        for index, node in enumerate(self.nodes):
            if node.id != index:
                raise ValueError(f"Node at index {index} has id {node.id}")
            for connection in node.connections():
                if not 0 <= connection.target_id < node_count:
                    raise ValueError(
                        f"Node {index} connects to invalid id {connection.target_id}"
                    )


class NavGraphBuilder:
    """
    Builds a navigation graph from level geometry.

    Steps, in order: place nodes along walkable edges, make walkable
    connections two-way, merge coincident nodes, reassign dense ids, add jump
    and drop connections, compute normals, classify corners, then index nodes
    spatially.
    """

    def __init__(self, level: Level, config: Optional[NavConfig] = None):
        self.level = level
        self.config = config or NavConfig()
        self.graph_config: GraphBuildConfig = self.config.graph
        self.physics: PhysicsConfig = self.config.physics
        self.validator = PhysicsValidator(
            level,
            self.physics,
            agent_radius=self.graph_config.agent_radius,
            divisions=self.graph_config.trajectory_divisions,
        )
        self.nodes: List[NavNode] = []

    def build(self) -> NavGraph:
        """Construct the navigation graph."""
        self.nodes = []
        self.place_nodes()
        self.make_walkable_connections_two_way()
        merged = self.remove_duplicate_nodes()
        self.reindex_nodes()
        self.make_jumpable_connections()
        self.make_droppable_connections()
        self.calculate_normals()
        self.setup_corners()

        graph = NavGraph(self.nodes, self.graph_config.cell_size)
        graph.validate()

        logger.info(
            "Navigation graph built: %d nodes (%d merged), %d walkable, %d jumpable, "
            "%d droppable connections in %d grid cells",
            len(graph),
            merged,
            graph.connection_count(ConnectionType.WALKABLE),
            graph.connection_count(ConnectionType.JUMPABLE),
            graph.connection_count(ConnectionType.DROPPABLE),
            len(graph.grid),
        )
        return graph

    def place_nodes(self):
        """Create nodes at regular intervals along every walkable polygon edge."""
        spacing = self.graph_config.node_spacing
        threshold = self.graph_config.direction_threshold
        outer_container_seen = False

        for polygon_index, polygon in enumerate(self.level.polygons):
            # Even-odd: every other container is the outside of a filled region
            if polygon.is_container:
                outer_container_seen = not outer_container_seen
                if outer_container_seen:
                    continue

            for edge_index, start, end in polygon.edges():
                start_to_end = sub(end, start)
                edge_length = length(start_to_end)

                if edge_length == 0.0:
                    logger.debug(
                        "Skipping zero-length edge %d of polygon %d", edge_index, polygon_index
                    )
                    continue

                direction = scale(start_to_end, 1.0 / edge_length)
                if dot(direction, HORIZONTAL_AXIS) <= threshold:
                    continue

                segment_count = int(math.ceil(edge_length / spacing))
                step = edge_length / segment_count
                previous_id: Optional[int] = None

                for j in range(segment_count + 1):
                    if j == segment_count:
                        position = end
                    else:
                        position = add(start, scale(direction, j * step))

                    node = NavNode(
                        id=len(self.nodes),
                        position=position,
                        polygon_index=polygon_index,
                        edge_indices=[(polygon_index, edge_index)],
                    )
                    if previous_id is not None:
                        node.walkable.append(
                            NavConnection(previous_id, step, ConnectionType.WALKABLE)
                        )
                    self.nodes.append(node)
                    previous_id = node.id

        logger.debug("Placed %d nodes", len(self.nodes))

    def make_walkable_connections_two_way(self):
        """Mirror every walkable connection onto the node it points at."""
        node_by_id = {node.id: node for node in self.nodes}
        original = [(node.id, list(node.walkable)) for node in self.nodes]

        for node_id, connections in original:
            for connection in connections:
                node_by_id[connection.target_id].walkable.append(
                    NavConnection(node_id, connection.distance, ConnectionType.WALKABLE)
                )

    def remove_duplicate_nodes(self) -> int:
        """
        Merge nodes that lie within the merge tolerance of each other.

        The earlier node in placement order survives. It takes over the removed
        node's walkable connections and edge keys, and every connection that
        pointed at the removed node is redirected to it. Ids keep their gaps
        until reindex_nodes() runs.

        Returns:
            Number of nodes removed
        """
        removed_total = 0
        while True:
            removed = self._merge_pass()
            if removed == 0:
                break
            removed_total += removed

        logger.debug("Merged %d duplicate nodes", removed_total)
        return removed_total

    def _merge_pass(self) -> int:
        if len(self.nodes) < 2:
            return 0

        tolerance = self.graph_config.merge_tolerance_sq
        positions = np.array([node.position for node in self.nodes], dtype=float)
        alive = np.ones(len(self.nodes), dtype=bool)
        survivor_of: Dict[int, int] = {}

        for i in range(len(self.nodes)):
            if not alive[i]:
                continue
            deltas = positions[i + 1:] - positions[i]
            close = (deltas[:, 0] ** 2 + deltas[:, 1] ** 2) < tolerance
            close &= alive[i + 1:]
            for offset in np.nonzero(close)[0]:
                j = i + 1 + int(offset)
                alive[j] = False
                self._absorb(self.nodes[i], self.nodes[j])
                survivor_of[self.nodes[j].id] = self.nodes[i].id

        if not survivor_of:
            return 0

        self.nodes = [node for node, keep in zip(self.nodes, alive) if keep]

        for node in self.nodes:
            rewritten = []
            for connection in node.walkable:
                connection.target_id = survivor_of.get(connection.target_id, connection.target_id)
                if connection.target_id == node.id:
                    continue
                if any(
                    c.target_id == connection.target_id and c.distance == connection.distance
                    for c in rewritten
                ):
                    continue
                rewritten.append(connection)
            node.walkable = rewritten

        return len(survivor_of)

    @staticmethod
    def _absorb(survivor: NavNode, removed: NavNode):
        survivor.walkable.extend(removed.walkable)
        for key in removed.edge_indices:
            if key not in survivor.edge_indices:
                survivor.edge_indices.append(key)

    def reindex_nodes(self):
        """Reassign node ids to list positions and rewrite every connection target."""
        new_id_of = {node.id: index for index, node in enumerate(self.nodes)}

        for index, node in enumerate(self.nodes):
            node.id = index
            for connection in node.connections():
                connection.target_id = new_id_of[connection.target_id]

    def _line_of_sight_blocked(self, source_index: int, owned: np.ndarray) -> np.ndarray:
        """
        Straight-line visibility from one node to every node.

        Args:
            source_index: Id of the node looking out
            owned: (N, E) boolean matrix, True where node n owns level edge e

        Returns:
            Boolean array over node ids, True where a level edge owned by
            neither endpoint crosses the straight segment between them
        """
        source = self.nodes[source_index].position
        targets = np.array([node.position for node in self.nodes], dtype=float)

        segments = np.empty((len(targets), 4), dtype=float)
        segments[:, 0] = source[0]
        segments[:, 1] = source[1]
        segments[:, 2:4] = targets

        hits = segment_edge_hits(segments, self.validator.edges)
        hits &= ~owned
        hits &= ~owned[source_index]
        return hits.any(axis=1)

    def _edge_ownership(self) -> np.ndarray:
        owned = np.zeros((len(self.nodes), len(self.validator.edges)), dtype=bool)
        for index, node in enumerate(self.nodes):
            owned[index, self.validator.owned_edge_rows(node.edge_indices)] = True
        return owned

    def make_jumpable_connections(self):
        """Add a directed jumpable connection for every feasible jump between polygons."""
        owned = self._edge_ownership()

        for i, main_node in enumerate(self.nodes):
            blocked = self._line_of_sight_blocked(i, owned)
            connections: List[NavConnection] = []

            for j, other_node in enumerate(self.nodes):
                if i == j or main_node.polygon_index == other_node.polygon_index:
                    continue
                if blocked[j]:
                    continue

                launch_speed = self.validator.check_jump(main_node, other_node)
                if launch_speed is None:
                    continue

                connections.append(
                    NavConnection(
                        j,
                        distance(main_node.position, other_node.position),
                        ConnectionType.JUMPABLE,
                        launch_speed,
                    )
                )

            main_node.jumpable = connections

    def make_droppable_connections(self):
        """Add a directed droppable connection for every feasible fall onto a node below."""
        owned = self._edge_ownership()
        max_offset = self.graph_config.max_drop_offset
        multiplier = self.graph_config.drop_effort_multiplier

        for i, main_node in enumerate(self.nodes):
            candidates = [
                j
                for j, other_node in enumerate(self.nodes)
                if i != j
                and main_node.polygon_index != other_node.polygon_index
                and other_node.position[1] < main_node.position[1]
                and abs(other_node.position[0] - main_node.position[0]) <= max_offset
            ]
            if not candidates:
                main_node.droppable = []
                continue

            blocked = self._line_of_sight_blocked(i, owned)
            connections: List[NavConnection] = []

            for j in candidates:
                if blocked[j]:
                    continue

                other_node = self.nodes[j]
                drop_distance = self.validator.check_drop(main_node, other_node)
                if drop_distance is None:
                    continue

                connections.append(
                    NavConnection(
                        j,
                        drop_distance,
                        ConnectionType.DROPPABLE,
                        drop_distance * multiplier,
                    )
                )

            main_node.droppable = connections

    def calculate_normals(self):
        """Set each node's normal from the outward perpendiculars of its source edges."""
        for node in self.nodes:
            normal = ZERO
            for key in node.edge_indices:
                start, end = self.level.edge_points(key)
                normal = add(normal, normalize_or_zero(perpendicular(sub(end, start))))
            node.normal = normalize_or_zero(normal)

    def setup_corners(self):
        """Flag corner nodes and classify them as external or internal."""
        for node in self.nodes:
            node.is_corner = len(node.edge_indices) > 1
            if not node.is_corner:
                node.is_external_corner = None
                continue

            walk_direction = ZERO
            for connection in node.walkable:
                walk_direction = add(
                    walk_direction, sub(self.nodes[connection.target_id].position, node.position)
                )
            node.is_external_corner = dot(walk_direction, node.normal) < 0.0


def build_nav_graph(level: Level, config: Optional[NavConfig] = None) -> NavGraph:
    """
    Build a navigation graph for a level.

    Args:
        level: Level geometry, unchanged for the lifetime of the graph
        config: Navigation configuration, defaults if omitted

    Returns:
        The built graph
    """
    return NavGraphBuilder(level, config).build()
