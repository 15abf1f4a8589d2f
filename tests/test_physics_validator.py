#!/usr/bin/env python3
"""
Unit tests for jump and drop feasibility checks.
"""

import math
import os
import sys
import unittest

import numpy as np

# Add the project root to the path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from platnav.level import Level, Polygon
from platnav.level_generation import solid_block
from platnav.pathfinding.navigation_graph import NavNode
from platnav.pathfinding.physics_validator import (
    PhysicsValidator,
    jump_is_reachable,
    minimum_energy_flight_time,
    minimum_energy_launch,
)


def make_node(node_id, position, edge_indices=None):
    return NavNode(
        id=node_id,
        position=position,
        polygon_index=node_id,
        edge_indices=list(edge_indices or []),
    )


class TestBallistics(unittest.TestCase):
    """Test cases for the closed-form ballistic helpers."""

    def test_horizontal_reach_boundary(self):
        # With g = 0.5 and v_max = 8 the longest flat jump is exactly 128
        self.assertTrue(jump_is_reachable((127.0, 0.0), 0.5, 8.0))
        self.assertTrue(jump_is_reachable((128.0, 0.0), 0.5, 8.0))
        self.assertFalse(jump_is_reachable((129.0, 0.0), 0.5, 8.0))

    def test_vertical_reach_boundary(self):
        self.assertTrue(jump_is_reachable((0.0, 64.0), 0.5, 8.0))
        self.assertFalse(jump_is_reachable((0.0, 65.0), 0.5, 8.0))

    def test_downward_reach_is_longer(self):
        self.assertTrue(jump_is_reachable((150.0, -60.0), 0.5, 8.0))

    def test_flight_time(self):
        self.assertAlmostEqual(minimum_energy_flight_time((100.0, 0.0), 0.5), 20.0)

    def test_minimum_energy_launch(self):
        (vx, vy), flight_time = minimum_energy_launch((100.0, 0.0), 0.5)

        self.assertAlmostEqual(flight_time, 20.0)
        self.assertAlmostEqual(vx, 5.0)
        self.assertAlmostEqual(vy, 5.0)

    def test_launch_lands_on_target(self):
        delta = (60.0, 30.0)
        (vx, vy), t = minimum_energy_launch(delta, 0.5)

        self.assertAlmostEqual(vx * t, delta[0])
        self.assertAlmostEqual(vy * t - 0.5 * t * t / 2.0, delta[1])

    def test_time_multiplier_scales_flight(self):
        _, t = minimum_energy_launch((100.0, 0.0), 0.5, time_multiplier=1.5)
        self.assertAlmostEqual(t, 30.0)

    def test_zero_delta_has_no_launch(self):
        self.assertIsNone(minimum_energy_launch((0.0, 0.0), 0.5))


class TestPhysicsValidator(unittest.TestCase):
    """Test cases for PhysicsValidator sweeps."""

    def test_open_jump_returns_launch_speed(self):
        validator = PhysicsValidator(Level())

        speed = validator.check_jump(make_node(0, (0.0, 0.0)), make_node(1, (100.0, 0.0)))

        self.assertIsNotNone(speed)
        self.assertAlmostEqual(speed, math.sqrt(50.0))

    def test_jump_beyond_max_speed_rejected(self):
        validator = PhysicsValidator(Level())

        self.assertIsNotNone(validator.check_jump(make_node(0, (0.0, 0.0)), make_node(1, (127.0, 0.0))))
        self.assertIsNone(validator.check_jump(make_node(0, (0.0, 0.0)), make_node(1, (129.0, 0.0))))

    def test_zero_length_jump_rejected(self):
        validator = PhysicsValidator(Level())
        self.assertIsNone(validator.check_jump(make_node(0, (5.0, 5.0)), make_node(1, (5.0, 5.0))))

    def test_wall_blocks_jump(self):
        level = Level([solid_block(45.0, -50.0, 55.0, 200.0)])
        validator = PhysicsValidator(level)

        self.assertIsNone(validator.check_jump(make_node(0, (0.0, 0.0)), make_node(1, (100.0, 0.0))))

    def test_owned_edges_are_ignored(self):
        # A wall through the goal itself does not block landing on it
        level = Level([Polygon([(100.0, -20.0), (100.0, 20.0)])])
        validator = PhysicsValidator(level)
        start = make_node(0, (0.0, 0.0))

        self.assertIsNone(validator.check_jump(start, make_node(1, (100.0, 0.0))))
        self.assertIsNotNone(validator.check_jump(start, make_node(1, (100.0, 0.0), [(0, 0)])))

    def test_radius_sweep_catches_near_miss(self):
        # The arc apex passes below the spike tip, the agent's body does not
        level = Level([Polygon([(45.0, 60.0), (45.0, 28.0)])])
        start = make_node(0, (0.0, 0.0))
        goal = make_node(1, (100.0, 0.0))

        self.assertIsNotNone(PhysicsValidator(level, agent_radius=0.0).check_jump(start, goal))
        self.assertIsNone(PhysicsValidator(level, agent_radius=8.0).check_jump(start, goal))

    def test_open_drop_returns_distance(self):
        validator = PhysicsValidator(Level())

        result = validator.check_drop(make_node(0, (0.0, 100.0)), make_node(1, (10.0, 60.0)))

        self.assertIsNotNone(result)
        self.assertAlmostEqual(result, math.hypot(10.0, 40.0))

    def test_drop_requires_goal_below(self):
        validator = PhysicsValidator(Level())

        self.assertIsNone(validator.check_drop(make_node(0, (0.0, 60.0)), make_node(1, (10.0, 60.0))))
        self.assertIsNone(validator.check_drop(make_node(0, (0.0, 60.0)), make_node(1, (10.0, 80.0))))

    def test_floor_between_blocks_drop(self):
        level = Level([Polygon([(-50.0, 50.0), (50.0, 50.0)])])
        validator = PhysicsValidator(level)

        self.assertIsNone(validator.check_drop(make_node(0, (0.0, 100.0)), make_node(1, (0.0, 0.0))))

    def test_jump_arc_samples(self):
        validator = PhysicsValidator(Level(), divisions=10)

        points = validator.sample_jump_arc((0.0, 0.0), (100.0, 0.0))

        self.assertEqual(points.shape, (12, 2))
        np.testing.assert_allclose(points[0], [0.0, 0.0])
        np.testing.assert_allclose(points[-1], [100.0, 0.0])
        # Apex at t = 10: x = 50, y = 5 * 10 - 0.25 * 100
        np.testing.assert_allclose(points[5], [50.0, 25.0])

    def test_drop_arc_stays_above_goal(self):
        validator = PhysicsValidator(Level())

        points = validator.sample_drop_arc((0.0, 100.0), (20.0, 40.0))

        np.testing.assert_allclose(points[-1], [20.0, 40.0])
        self.assertTrue(np.all(points[:, 1] >= 40.0))
        self.assertTrue(np.all(np.diff(points[:, 1]) <= 0.0))

    def test_edge_mask(self):
        level = Level([Polygon([(0.0, 0.0), (10.0, 0.0), (10.0, 10.0)])])
        validator = PhysicsValidator(level)

        mask = validator.edge_mask(make_node(0, (0.0, 0.0), [(0, 1)]))

        self.assertEqual(list(mask), [True, False])


if __name__ == '__main__':
    unittest.main()
