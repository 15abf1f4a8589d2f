#!/usr/bin/env python3
"""
Unit tests for navigation graph construction.

The single-block fixture is small enough to check by hand. A 100 x 20 block
wound clockwise keeps its top and both walls and discards its bottom, giving
six top nodes plus two per wall, of which the two top corners merge away.
"""

import math
import os
import sys
import unittest

import numpy as np

# Add the project root to the path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from platnav.config import NavConfig
from platnav.level import Level, Polygon
from platnav.level_generation import box_room, solid_block
from platnav.pathfinding.movement_types import ConnectionType
from platnav.pathfinding.navigation_graph import (
    NavConnection,
    NavGraph,
    NavGraphBuilder,
    NavNode,
    build_nav_graph,
)


def connection_set(graph):
    return sorted(
        (node.id, c.target_id, int(c.kind), round(c.distance, 9), round(c.effort, 9))
        for node in graph.nodes
        for c in node.connections()
    )


class TestSingleBlockGraph(unittest.TestCase):
    """Test cases for a graph built over one solid block."""

    def setUp(self):
        """Set up test fixtures."""
        self.level = Level([solid_block(0.0, 0.0, 100.0, 20.0)])
        self.graph = build_nav_graph(self.level)

    def test_node_positions(self):
        positions = [node.position for node in self.graph.nodes]

        self.assertEqual(positions, [
            (0.0, 20.0), (20.0, 20.0), (40.0, 20.0), (60.0, 20.0), (80.0, 20.0),
            (100.0, 20.0), (100.0, 0.0), (0.0, 0.0),
        ])

    def test_ids_are_dense(self):
        self.assertEqual([node.id for node in self.graph.nodes], list(range(len(self.graph))))
        for node in self.graph.nodes:
            for connection in node.connections():
                self.assertLess(connection.target_id, len(self.graph))

    def test_walkable_chain(self):
        neighbours = {
            node.id: sorted(c.target_id for c in node.walkable) for node in self.graph.nodes
        }

        self.assertEqual(neighbours[0], [1, 7])
        self.assertEqual(neighbours[2], [1, 3])
        self.assertEqual(neighbours[5], [4, 6])
        self.assertEqual(neighbours[6], [5])
        self.assertEqual(self.graph.connection_count(ConnectionType.WALKABLE), 14)

    def test_walkable_distances(self):
        for node in self.graph.nodes:
            for connection in node.walkable:
                self.assertAlmostEqual(connection.distance, 20.0)

    def test_same_polygon_has_no_jumps_or_drops(self):
        self.assertEqual(self.graph.connection_count(ConnectionType.JUMPABLE), 0)
        self.assertEqual(self.graph.connection_count(ConnectionType.DROPPABLE), 0)

    def test_normals(self):
        top = self.graph.nodes[2].normal
        wall = self.graph.nodes[6].normal
        corner = self.graph.nodes[0].normal

        self.assertAlmostEqual(top[0], 0.0)
        self.assertAlmostEqual(top[1], 1.0)
        self.assertAlmostEqual(wall[0], 1.0)
        self.assertAlmostEqual(wall[1], 0.0)
        self.assertAlmostEqual(corner[0], -math.sqrt(0.5))
        self.assertAlmostEqual(corner[1], math.sqrt(0.5))

    def test_corners(self):
        self.assertTrue(self.graph.nodes[0].is_corner)
        self.assertTrue(self.graph.nodes[0].is_external_corner)
        self.assertTrue(self.graph.nodes[5].is_external_corner)
        self.assertFalse(self.graph.nodes[2].is_corner)
        self.assertIsNone(self.graph.nodes[2].is_external_corner)
        self.assertIsNone(self.graph.nodes[6].is_external_corner)

    def test_merged_corner_keeps_both_edges(self):
        self.assertEqual(sorted(self.graph.nodes[0].edge_indices), [(0, 0), (0, 3)])

    def test_spatial_index(self):
        self.assertEqual(self.graph.grid_bounds, ((0.0, 0.0), (100.0, 20.0)))
        self.assertIn(2, self.graph.nearby_node_ids((40.0, 25.0)))


class TestGraphProperties(unittest.TestCase):
    """Test cases for invariants of multi-polygon graphs."""

    def setUp(self):
        """Set up test fixtures."""
        self.level = Level([
            solid_block(0.0, 0.0, 200.0, 20.0),
            solid_block(60.0, 60.0, 140.0, 80.0),
        ])
        self.graph = build_nav_graph(self.level)

    def test_determinism(self):
        again = build_nav_graph(self.level)

        self.assertEqual(
            [n.position for n in self.graph.nodes], [n.position for n in again.nodes]
        )
        self.assertEqual(connection_set(self.graph), connection_set(again))

    def test_walkable_symmetry(self):
        for node in self.graph.nodes:
            for connection in node.walkable:
                back = [
                    c for c in self.graph.nodes[connection.target_id].walkable
                    if c.target_id == node.id
                ]
                self.assertTrue(back, f"{node.id} -> {connection.target_id} has no mirror")
                self.assertAlmostEqual(back[0].distance, connection.distance)

    def test_no_duplicate_nodes(self):
        positions = np.array([node.position for node in self.graph.nodes])
        deltas = positions[:, None, :] - positions[None, :, :]
        dist_sq = (deltas ** 2).sum(axis=2)
        np.fill_diagonal(dist_sq, np.inf)

        self.assertTrue(np.all(dist_sq >= 1.0))

    def test_droppable_targets_are_below(self):
        for node in self.graph.nodes:
            for connection in node.droppable:
                self.assertLess(self.graph.nodes[connection.target_id].position[1], node.position[1])
                self.assertLessEqual(
                    abs(self.graph.nodes[connection.target_id].position[0] - node.position[0]),
                    30.0,
                )

    def test_drop_effort_is_discounted_distance(self):
        for node in self.graph.nodes:
            for connection in node.droppable:
                self.assertAlmostEqual(connection.effort, connection.distance * 0.5)

    def test_platform_reachable_both_ways(self):
        ground = {n.id for n in self.graph.nodes if n.polygon_index == 0}
        platform = {n.id for n in self.graph.nodes if n.polygon_index == 1}

        jumps_up = [
            (n.id, c.target_id) for n in self.graph.nodes if n.id in ground
            for c in n.jumpable if c.target_id in platform
        ]
        drops_down = [
            (n.id, c.target_id) for n in self.graph.nodes if n.id in platform
            for c in n.droppable if c.target_id in ground
        ]

        self.assertTrue(jumps_up)
        self.assertTrue(drops_down)

    def test_jump_effort_is_launch_speed(self):
        for node in self.graph.nodes:
            for connection in node.jumpable:
                target = self.graph.nodes[connection.target_id]
                dx = target.position[0] - node.position[0]
                dy = target.position[1] - node.position[1]
                # |v|^2 = g * (|dp| + dy) for the minimum-energy arc
                expected = math.sqrt(0.5 * (math.hypot(dx, dy) + dy))
                self.assertAlmostEqual(connection.effort, expected)
                self.assertLessEqual(connection.effort, 8.0 + 1e-9)

    def test_no_jumps_through_platform(self):
        # Ground nodes under the platform cannot see its top
        under = [n for n in self.graph.nodes if n.polygon_index == 0 and 70.0 <= n.position[0] <= 130.0
                 and n.position[1] == 20.0]
        self.assertTrue(under)
        for node in under:
            for connection in node.jumpable:
                target = self.graph.nodes[connection.target_id]
                self.assertFalse(target.position[1] == 80.0 and 70.0 <= target.position[0] <= 130.0)


class TestNodePlacement(unittest.TestCase):
    """Test cases for edge filtering during node placement."""

    def test_outer_container_has_no_nodes(self):
        graph = build_nav_graph(box_room(200.0, 100.0))

        self.assertTrue(len(graph) > 0)
        self.assertTrue(all(node.polygon_index == 1 for node in graph.nodes))

    def test_second_container_has_nodes(self):
        outer = Polygon([(0, 0), (300, 0), (300, 300), (0, 300), (0, 0)], is_container=True)
        inner = Polygon([(50, 50), (150, 50), (150, 150), (50, 150), (50, 50)], is_container=True)
        graph = build_nav_graph(Level([outer, inner]))

        self.assertTrue(len(graph) > 0)
        self.assertTrue(all(node.polygon_index == 1 for node in graph.nodes))

    def test_leftward_edges_are_not_walkable(self):
        graph = build_nav_graph(Level([Polygon([(100.0, 0.0), (0.0, 0.0)])]))
        self.assertEqual(len(graph), 0)

    def test_zero_length_edges_are_skipped(self):
        graph = build_nav_graph(Level([Polygon([(0.0, 0.0), (0.0, 0.0), (50.0, 0.0)])]))

        self.assertEqual(len(graph), 4)
        self.assertEqual(graph.nodes[-1].position, (50.0, 0.0))

    def test_degenerate_polygon(self):
        graph = build_nav_graph(Level([Polygon([(5.0, 5.0)])]))
        self.assertEqual(len(graph), 0)

    def test_uneven_edge_is_split_evenly(self):
        graph = build_nav_graph(Level([Polygon([(0.0, 0.0), (50.0, 0.0)])]))
        distances = {round(c.distance, 6) for n in graph.nodes for c in n.walkable}

        self.assertEqual(distances, {round(50.0 / 3.0, 6)})

    def test_custom_spacing(self):
        config = NavConfig()
        config.graph.node_spacing = 50.0
        graph = NavGraphBuilder(Level([Polygon([(0.0, 0.0), (100.0, 0.0)])]), config).build()

        self.assertEqual(len(graph), 3)

    def test_empty_level(self):
        graph = build_nav_graph(Level())

        self.assertEqual(len(graph), 0)
        self.assertEqual(graph.nearby_node_ids((0.0, 0.0)), [])


class TestNavGraphValidation(unittest.TestCase):
    """Test cases for hand-built graph validation."""

    def test_invalid_target_raises(self):
        node = NavNode(0, (0.0, 0.0), 0, [])
        node.walkable.append(NavConnection(5, 1.0, ConnectionType.WALKABLE))

        with self.assertRaises(ValueError):
            NavGraph([node], 50.0).validate()

    def test_sparse_ids_raise(self):
        with self.assertRaises(ValueError):
            NavGraph([NavNode(3, (0.0, 0.0), 0, [])], 50.0).validate()

    def test_find_connection(self):
        a = NavNode(0, (0.0, 0.0), 0, [])
        b = NavNode(1, (10.0, 0.0), 1, [])
        a.jumpable.append(NavConnection(1, 10.0, ConnectionType.JUMPABLE, 3.0))
        graph = NavGraph([a, b], 50.0)

        self.assertTrue(graph.is_jump(0, 1))
        self.assertFalse(graph.is_jump(1, 0))
        self.assertEqual(graph.find_connection(0, 1).kind, ConnectionType.JUMPABLE)
        self.assertIsNone(graph.find_connection(0, 1, ConnectionType.WALKABLE))


if __name__ == '__main__':
    unittest.main()
