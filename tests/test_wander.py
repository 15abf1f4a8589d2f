#!/usr/bin/env python3
"""
Unit tests for wander goal selection.
"""

import os
import random
import sys
import unittest

# Add the project root to the path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from platnav.pathfinding.navigation_graph import NavGraph, NavNode
from platnav.pathfinding.wander import WanderState, pick_wander_goal, update_wander


class FirstNodeRandom(random.Random):
    """Random source that always samples node 0."""

    def randrange(self, *args, **kwargs):
        return 0


class TestWander(unittest.TestCase):
    """Test cases for wander goals."""

    def setUp(self):
        """Set up test fixtures."""
        self.graph = NavGraph(
            [NavNode(i, (100.0 * i, 0.0), 0, []) for i in range(3)], 50.0
        )

    def test_farthest_sample_wins(self):
        goal = pick_wander_goal(self.graph, (0.0, 0.0), random.Random(1), sample_count=50)
        self.assertEqual(goal, 2)

    def test_seeded_choice_is_repeatable(self):
        first = pick_wander_goal(self.graph, (100.0, 0.0), random.Random(7))
        second = pick_wander_goal(self.graph, (100.0, 0.0), random.Random(7))
        self.assertEqual(first, second)

    def test_empty_graph(self):
        self.assertIsNone(pick_wander_goal(NavGraph([], 50.0), (0.0, 0.0), random.Random(0)))

    def test_far_goal_is_kept(self):
        state = WanderState(goal_node_id=2)

        position = update_wander(state, self.graph, (0.0, 0.0), FirstNodeRandom())

        self.assertEqual(state.goal_node_id, 2)
        self.assertEqual(position, (200.0, 0.0))

    def test_reached_goal_is_replaced(self):
        state = WanderState(goal_node_id=1)
        update_wander(state, self.graph, (90.0, 0.0), FirstNodeRandom())

        self.assertEqual(state.goal_node_id, 0)

    def test_invalid_goal_is_replaced(self):
        state = WanderState(goal_node_id=99)

        position = update_wander(state, self.graph, (0.0, 0.0), FirstNodeRandom())

        self.assertEqual(state.goal_node_id, 0)
        self.assertEqual(position, (0.0, 0.0))


if __name__ == '__main__':
    unittest.main()
