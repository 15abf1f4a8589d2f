"""
Trajectory feasibility validation for navigation graph construction.

This module decides whether a jump or a drop between two navigation nodes is
physically achievable under gravity and a maximum launch speed, without the
agent's swept body touching level geometry.

Jumps use the minimum-energy ballistic solution: among all launch velocities
that reach the goal, the one with the lowest launch speed (and the longest
airtime). Its flight time has the closed form

    t = (4 * |dp|^2 / g^2) ** (1/4)

and its launch velocity is v = dp / t - a * t / 2 with a = (0, -g).
"""

import math
from typing import Dict, Iterable, Optional, Tuple

import numpy as np

from ..config import PhysicsConfig
from ..constants.nav_constants import AGENT_RADIUS, TRAJECTORY_DIVISIONS
from ..level import EdgeKey, Level
from ..utils.geometry import (
    Vec2,
    capsule_sweep_segments,
    distance,
    length_squared,
    segments_intersect_any,
    sub,
)


def jump_is_reachable(delta: Vec2, gravity: float, max_speed: float) -> bool:
    """
    Ballistic reachability test.

    Some launch velocity with magnitude <= max_speed reaches a target offset by
    delta under downward gravity iff the discriminant of the launch-speed
    quadratic is non-negative.

    Args:
        delta: Goal position minus start position
        gravity: Magnitude of downward gravity
        max_speed: Maximum launch speed

    Returns:
        True if the jump is reachable
    """
    # a = (0, -g), so dp . a = -g * dy and a . a = g^2
    b1 = -gravity * delta[1] + max_speed * max_speed
    discriminant = b1 * b1 - gravity * gravity * length_squared(delta)
    return discriminant >= 0.0


def minimum_energy_flight_time(delta: Vec2, gravity: float) -> float:
    """Flight time of the minimum-energy arc covering delta."""
    return math.sqrt(math.sqrt(4.0 * length_squared(delta) / (gravity * gravity)))


def minimum_energy_launch(
    delta: Vec2, gravity: float, time_multiplier: float = 1.0
) -> Optional[Tuple[Vec2, float]]:
    """
    Launch velocity of the minimum-energy arc covering delta.

    Args:
        delta: Goal position minus start position
        gravity: Magnitude of downward gravity
        time_multiplier: Scale applied to the closed-form flight time

    Returns:
        Tuple of (launch velocity, flight time), or None for a zero-length delta
    """
    flight_time = time_multiplier * minimum_energy_flight_time(delta, gravity)
    if flight_time <= 0.0 or not math.isfinite(flight_time):
        return None

    velocity = (
        delta[0] / flight_time,
        delta[1] / flight_time + gravity * flight_time / 2.0,
    )
    return velocity, flight_time


class PhysicsValidator:
    """
    Validates jump and drop connections against level geometry.

    Every check samples the motion into a fixed number of sub-steps, sweeps a
    capsule of the agent's radius along each step and rejects the connection
    if either side of the capsule crosses a level edge. Edges owned by the
    start or goal node are ignored since the agent stands on them.
    """

    def __init__(
        self,
        level: Level,
        physics: Optional[PhysicsConfig] = None,
        agent_radius: float = AGENT_RADIUS,
        divisions: int = TRAJECTORY_DIVISIONS,
    ):
        self.level = level
        self.physics = physics or PhysicsConfig()
        self.agent_radius = agent_radius
        self.divisions = divisions

        self.edges, edge_keys = level.edge_array()
        self._edge_rows: Dict[EdgeKey, int] = {
            key: row for row, key in enumerate(edge_keys)
        }

    def edge_mask(self, *nodes) -> np.ndarray:
        """
        Boolean mask over level edges that are not owned by any of the nodes.

        Args:
            nodes: Objects exposing edge_indices as (polygon_index, edge_index) keys
        """
        mask = np.ones(len(self.edges), dtype=bool)
        for node in nodes:
            for key in node.edge_indices:
                row = self._edge_rows.get(key)
                if row is not None:
                    mask[row] = False
        return mask

    def owned_edge_rows(self, keys: Iterable[EdgeKey]) -> np.ndarray:
        """Row indices into the edge array for the given edge keys."""
        rows = [self._edge_rows[key] for key in keys if key in self._edge_rows]
        return np.array(rows, dtype=int)

    def sample_jump_arc(self, start: Vec2, goal: Vec2) -> Optional[np.ndarray]:
        """
        Sample the minimum-energy jump arc from start to goal.

        Returns:
            (divisions + 2, 2) array: start, every sub-step position, then the
            exact goal. None if the arc is degenerate.
        """
        delta = sub(goal, start)
        launch = minimum_energy_launch(delta, self.physics.gravity)
        if launch is None:
            return None

        (vx, vy), flight_time = launch
        times = np.arange(1, self.divisions + 1) * (flight_time / self.divisions)
        xs = start[0] + vx * times
        ys = start[1] + vy * times - self.physics.gravity * times * times / 2.0

        points = np.empty((self.divisions + 2, 2), dtype=float)
        points[0] = start
        points[1:-1, 0] = xs
        points[1:-1, 1] = ys
        points[-1] = goal
        return points

    def sample_drop_arc(self, start: Vec2, goal: Vec2) -> Optional[np.ndarray]:
        """
        Sample a drop from start to a goal strictly below it.

        The agent leaves start with zero vertical velocity and the constant
        horizontal velocity that lands it on the goal's x coordinate.

        Returns:
            (K, 2) array of start, sub-step positions above the goal, then the
            exact goal. None if the goal is not below start or the fall is
            numerically degenerate.
        """
        drop_height = start[1] - goal[1]
        if drop_height <= 0.0:
            return None

        fall_time = math.sqrt(2.0 * drop_height / self.physics.gravity)
        if not math.isfinite(fall_time):
            return None
        horizontal_velocity = (goal[0] - start[0]) / fall_time if fall_time > 0.0 else 0.0

        times = np.arange(1, self.divisions + 1) * (fall_time / self.divisions)
        xs = start[0] + horizontal_velocity * times
        ys = start[1] - self.physics.gravity * times * times / 2.0

        # Rounding can carry the last sample just past the goal
        above_goal = ys >= goal[1]
        xs = xs[above_goal]
        ys = ys[above_goal]

        points = np.empty((len(xs) + 2, 2), dtype=float)
        points[0] = start
        points[1:-1, 0] = xs
        points[1:-1, 1] = ys
        points[-1] = goal
        return points

    def sweep_is_clear(self, points: np.ndarray, edge_mask: Optional[np.ndarray] = None) -> bool:
        """Check that a capsule swept through the sampled points touches no edge."""
        if not np.all(np.isfinite(points)):
            return False
        segments = capsule_sweep_segments(points, self.agent_radius)
        return not segments_intersect_any(segments, self.edges, edge_mask)

    def check_jump(self, start_node, goal_node) -> Optional[float]:
        """
        Check whether start_node can jump to goal_node.

        Args:
            start_node: Node exposing position and edge_indices
            goal_node: Node exposing position and edge_indices

        Returns:
            Launch speed of the minimum-energy arc if the jump is feasible, else None
        """
        start = start_node.position
        goal = goal_node.position
        delta = sub(goal, start)

        if length_squared(delta) == 0.0:
            return None

        if not jump_is_reachable(delta, self.physics.gravity, self.physics.max_jump_speed):
            return None

        points = self.sample_jump_arc(start, goal)
        if points is None:
            return None

        if not self.sweep_is_clear(points, self.edge_mask(start_node, goal_node)):
            return None

        launch = minimum_energy_launch(delta, self.physics.gravity)
        velocity, _ = launch
        return math.hypot(velocity[0], velocity[1])

    def check_drop(self, start_node, goal_node) -> Optional[float]:
        """
        Check whether start_node can drop onto goal_node.

        The caller guarantees the goal is strictly below the start; this check
        still refuses anything else.

        Returns:
            Straight-line start-to-goal distance if the drop is feasible, else None
        """
        start = start_node.position
        goal = goal_node.position

        points = self.sample_drop_arc(start, goal)
        if points is None:
            return None

        if not self.sweep_is_clear(points, self.edge_mask(start_node, goal_node)):
            return None

        return distance(start, goal)
