"""
Per-tick path following for platformer agents.

Each tick the follower decides whether its cached path is still usable,
replans with A* when it is not, then picks an aim point from the current and
next path nodes, or steers onto the node itself when it is the last one left.
Choosing the aim strategy and turning a strategy into a displacement are
separate functions so each can be exercised on its own.

Offset points are node positions pushed out along the node normal by the
agent radius, which is where the agent's centre sits when touching the node.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..config import FollowerConfig, NavConfig
from ..constants.nav_constants import (
    AGENT_RADIUS,
    VELOCITY_MAGNITUDE_THRESHOLD,
    WALL_NORMAL_Y_THRESHOLD,
)
from ..utils.geometry import (
    ZERO,
    Vec2,
    add,
    distance_squared,
    length_squared,
    normalize_or_zero,
    scale,
    signum,
    sub,
)
from .astar_pathfinder import Path, PathNode, PlatformerAStar
from .navigation_graph import NavGraph, NavNode
from .physics_validator import minimum_energy_launch

logger = logging.getLogger(__name__)


class PathFollowingStrategy(Enum):
    """Which pair of points the steering direction is taken between."""

    CURRENT_NODE_TO_NEXT_NODE = "current_node_to_next_node"
    CURRENT_NODE_OFFSET_TO_NEXT_NODE_OFFSET = "current_node_offset_to_next_node_offset"
    AGENT_TO_CURRENT_NODE = "agent_to_current_node"
    AGENT_TO_CURRENT_NODE_OFFSET = "agent_to_current_node_offset"
    AGENT_TO_NEXT_NODE = "agent_to_next_node"
    AGENT_TO_NEXT_NODE_OFFSET = "agent_to_next_node_offset"
    AGENT_TO_GOAL = "agent_to_goal"
    NONE = "none"


JUMP_STRATEGIES = (
    PathFollowingStrategy.AGENT_TO_NEXT_NODE,
    PathFollowingStrategy.AGENT_TO_NEXT_NODE_OFFSET,
)


@dataclass
class AgentPhysicsState:
    """
    Physics state of one agent.

    normal points toward the surface the agent touches; a zero normal means
    the agent is airborne. walled is -1 or 1 for the wall side, 0 when not
    touching a wall.
    """

    position: Vec2
    velocity: Vec2 = ZERO
    normal: Vec2 = ZERO
    grounded: bool = False
    walled: int = 0
    radius: float = AGENT_RADIUS
    acceleration: Vec2 = ZERO
    prev_position: Optional[Vec2] = None
    has_wall_jumped: bool = False

    @property
    def is_falling(self) -> bool:
        return length_squared(self.normal) <= 0.0

    @property
    def on_wall(self) -> bool:
        return self.normal[1] > WALL_NORMAL_Y_THRESHOLD


@dataclass
class AgentNavState:
    """Path cache owned by a single agent."""

    cached_path: Optional[Path] = None
    current_path_index: int = 0
    last_goal_position: Optional[Vec2] = None
    jump_from: Optional[Vec2] = None
    jump_to: Optional[Vec2] = None
    replan_count: int = 0

    @property
    def has_path(self) -> bool:
        return self.cached_path is not None and self.current_path_index < len(self.cached_path)


@dataclass
class MoveDecision:
    """Steering output for one tick."""

    direction: Vec2 = ZERO
    jump_velocity: Vec2 = ZERO
    jump_from: Optional[Vec2] = None
    jump_to: Optional[Vec2] = None
    strategy: PathFollowingStrategy = PathFollowingStrategy.NONE
    replanned: bool = False

    @property
    def wants_jump(self) -> bool:
        return length_squared(self.jump_velocity) > 0.0


def should_recalculate_path(
    nav_state: AgentNavState,
    agent_position: Vec2,
    goal_position: Vec2,
    config: Optional[FollowerConfig] = None,
) -> bool:
    """
    Decide whether the cached path must be replaced.

    True when there is no cached path, it is empty or exhausted, the goal has
    moved beyond the goal-change threshold, or the agent has strayed beyond
    the deviation threshold from its current path node.
    """
    config = config or FollowerConfig()
    path = nav_state.cached_path

    if path is None:
        return True

    if path.is_empty or nav_state.current_path_index >= len(path):
        return True

    if nav_state.last_goal_position is None:
        return True

    if distance_squared(goal_position, nav_state.last_goal_position) > config.goal_change_threshold_sq:
        return True

    current_node = path[nav_state.current_path_index]
    if distance_squared(agent_position, current_node.position) > config.path_deviation_threshold_sq:
        return True

    return False


def agent_on_other_side_next_frame(
    agent_position: Vec2, agent_velocity: Vec2, node_position: Vec2, vertical: bool
) -> bool:
    """Check whether one tick of motion carries the agent across a node's x (or y) line."""
    axis = 1 if vertical else 0
    next_position = add(agent_position, agent_velocity)

    side_now = signum(agent_position[axis] - node_position[axis])
    side_next = signum(next_position[axis] - node_position[axis])
    return side_now != side_next


def node_offset(node: NavNode, radius: float) -> Vec2:
    """Position of an agent of the given radius touching the node."""
    return add(node.position, scale(node.normal, radius))


def choose_strategy(
    physics: AgentPhysicsState,
    current_node: NavNode,
    next_node: NavNode,
    is_jump: bool,
    velocity_threshold_sq: float = VELOCITY_MAGNITUDE_THRESHOLD,
) -> PathFollowingStrategy:
    """
    Pick where to aim for this tick.

    Args:
        physics: Agent physics state
        current_node: Path node the agent is heading through
        next_node: Path node after it
        is_jump: Whether current_node reaches next_node by a jumpable connection
        velocity_threshold_sq: Squared speed below which the agent counts as stalled

    Returns:
        The strategy to steer by
    """
    if physics.is_falling:
        return PathFollowingStrategy.AGENT_TO_NEXT_NODE_OFFSET

    if is_jump:
        crossing = agent_on_other_side_next_frame(
            physics.position, physics.velocity, current_node.position, physics.on_wall
        )
        stalled = length_squared(physics.velocity) < velocity_threshold_sq
        if crossing or stalled:
            return PathFollowingStrategy.AGENT_TO_NEXT_NODE_OFFSET
        return PathFollowingStrategy.AGENT_TO_CURRENT_NODE_OFFSET

    if current_node.is_external_corner is not None:
        return PathFollowingStrategy.AGENT_TO_NEXT_NODE

    current_offset = node_offset(current_node, physics.radius)
    next_offset = node_offset(next_node, physics.radius)
    if distance_squared(physics.position, next_offset) <= distance_squared(current_offset, next_offset):
        return PathFollowingStrategy.AGENT_TO_NEXT_NODE_OFFSET
    return PathFollowingStrategy.AGENT_TO_CURRENT_NODE_OFFSET


def strategy_displacement(
    strategy: PathFollowingStrategy,
    physics: AgentPhysicsState,
    current_node: Optional[NavNode],
    next_node: Optional[NavNode],
    goal_position: Optional[Vec2] = None,
) -> Vec2:
    """Un-normalized displacement a strategy steers along."""
    agent = physics.position
    radius = physics.radius

    if strategy == PathFollowingStrategy.AGENT_TO_GOAL:
        return sub(goal_position, agent) if goal_position is not None else ZERO

    if strategy == PathFollowingStrategy.NONE or current_node is None:
        return ZERO

    if strategy == PathFollowingStrategy.AGENT_TO_CURRENT_NODE:
        return sub(current_node.position, agent)
    if strategy == PathFollowingStrategy.AGENT_TO_CURRENT_NODE_OFFSET:
        return sub(node_offset(current_node, radius), agent)

    if next_node is None:
        return ZERO

    if strategy == PathFollowingStrategy.CURRENT_NODE_TO_NEXT_NODE:
        return sub(next_node.position, current_node.position)
    if strategy == PathFollowingStrategy.CURRENT_NODE_OFFSET_TO_NEXT_NODE_OFFSET:
        return sub(node_offset(next_node, radius), node_offset(current_node, radius))
    if strategy == PathFollowingStrategy.AGENT_TO_NEXT_NODE:
        return sub(next_node.position, agent)
    return sub(node_offset(next_node, radius), agent)


def advance_path_index(
    nav_state: AgentNavState, agent_position: Vec2, reached_threshold_sq: float
) -> int:
    """
    Step past every leading path node the agent is within reach of.

    Returns:
        Number of nodes advanced
    """
    path = nav_state.cached_path
    if path is None:
        return 0

    advanced = 0
    while nav_state.current_path_index < len(path):
        node = path[nav_state.current_path_index]
        if distance_squared(agent_position, node.position) > reached_threshold_sq:
            break
        nav_state.current_path_index += 1
        advanced += 1
    return advanced


class PathFollower:
    """
    Path-following controller.

    Holds no per-agent state: every call takes the agent's AgentNavState and
    AgentPhysicsState explicitly, so one follower can serve any number of
    agents sharing a graph.
    """

    def __init__(self, graph: NavGraph, config: Optional[NavConfig] = None):
        self.graph = graph
        self.config = config or NavConfig()
        self.pathfinder = PlatformerAStar(graph, self.config.search)

    def update(
        self, nav_state: AgentNavState, physics: AgentPhysicsState, goal_position: Vec2
    ) -> MoveDecision:
        """
        Compute the steering decision for one tick.

        Args:
            nav_state: The agent's path cache, updated in place
            physics: The agent's current physics state, read only
            goal_position: Where the agent wants to go

        Returns:
            Steering direction and optional jump for this tick
        """
        follower = self.config.follower
        decision = MoveDecision()

        if should_recalculate_path(nav_state, physics.position, goal_position, follower):
            self.replan(nav_state, physics.position, goal_position)
            decision.replanned = True

        path = nav_state.cached_path
        if path is None:
            return decision

        index = nav_state.current_path_index
        if index + 1 < len(path):
            current_node = self.graph.nodes[path[index].id]
            next_node = self.graph.nodes[path[index + 1].id]
            is_jump = self.graph.is_jump(current_node.id, next_node.id)

            strategy = choose_strategy(
                physics, current_node, next_node, is_jump, follower.velocity_threshold_sq
            )
            decision.strategy = strategy
            decision.direction = normalize_or_zero(
                strategy_displacement(strategy, physics, current_node, next_node, goal_position)
            )

            if is_jump and strategy in JUMP_STRATEGIES:
                self._plan_jump(decision, physics, current_node, next_node)
        elif index < len(path):
            # Last hop: settle onto the final node
            current_node = self.graph.nodes[path[index].id]
            decision.strategy = PathFollowingStrategy.AGENT_TO_CURRENT_NODE_OFFSET
            decision.direction = normalize_or_zero(
                strategy_displacement(decision.strategy, physics, current_node, None)
            )

        advance_path_index(nav_state, physics.position, follower.node_reached_threshold_sq)
        return decision

    def replan(self, nav_state: AgentNavState, agent_position: Vec2, goal_position: Vec2):
        """
        Replace the agent's cached path with a fresh search result.

        When the agent and goal snap to the same node the search path is empty;
        the cache then holds that node alone so the agent still steers onto it.
        """
        path = self.pathfinder.find_path(agent_position, goal_position)
        if path is not None and path.is_empty:
            goal_id = self.pathfinder.goal_node_id(goal_position)
            path = Path([PathNode(goal_id, self.graph.nodes[goal_id].position)])
        nav_state.cached_path = path
        nav_state.last_goal_position = goal_position
        nav_state.current_path_index = 0
        nav_state.replan_count += 1

        if path is None:
            logger.debug("Replan from %s to %s found no path", agent_position, goal_position)
        else:
            logger.debug(
                "Replanned from %s to %s: %d nodes, cost %.2f, %d expanded",
                agent_position,
                goal_position,
                len(path),
                path.total_cost,
                self.pathfinder.nodes_expanded,
            )

    def _plan_jump(
        self,
        decision: MoveDecision,
        physics: AgentPhysicsState,
        current_node: NavNode,
        next_node: NavNode,
    ):
        launch = minimum_energy_launch(
            sub(next_node.position, current_node.position),
            self.config.physics.gravity,
            self.config.follower.jump_time_multiplier,
        )
        if launch is None:
            return

        decision.jump_velocity, _ = launch
        decision.jump_from = node_offset(current_node, physics.radius)
        decision.jump_to = node_offset(next_node, physics.radius)
