"""
Wander goal selection for idle agents.

An idle agent picks a far-away node as its goal and hands that node's
position to the path follower until it gets close, then picks another.
"""

import random
from dataclasses import dataclass
from typing import Optional

from ..constants.nav_constants import WANDER_GOAL_REACHED_THRESHOLD, WANDER_SAMPLE_COUNT
from ..utils.geometry import Vec2, distance_squared
from .navigation_graph import NavGraph


@dataclass
class WanderState:
    """Current wander goal of one agent."""

    goal_node_id: Optional[int] = None


def pick_wander_goal(
    graph: NavGraph,
    agent_position: Vec2,
    rng: Optional[random.Random] = None,
    sample_count: int = WANDER_SAMPLE_COUNT,
) -> Optional[int]:
    """
    Sample random nodes and return the id of the one farthest from the agent.

    Args:
        graph: Navigation graph to sample from
        agent_position: Current agent position
        rng: Random source, module-level random if omitted
        sample_count: Number of nodes to sample

    Returns:
        Node id, or None for an empty graph
    """
    if len(graph) == 0:
        return None

    rng = rng or random.Random()
    best_id: Optional[int] = None
    best_distance = -1.0

    for _ in range(max(1, sample_count)):
        node_id = rng.randrange(len(graph))
        dist = distance_squared(agent_position, graph.nodes[node_id].position)
        if dist > best_distance:
            best_distance = dist
            best_id = node_id

    return best_id


def update_wander(
    state: WanderState,
    graph: NavGraph,
    agent_position: Vec2,
    rng: Optional[random.Random] = None,
    reached_threshold: float = WANDER_GOAL_REACHED_THRESHOLD,
) -> Optional[Vec2]:
    """
    Keep the wander goal fresh and return its position.

    A goal within reached_threshold of the agent, or one that is no longer a
    valid node id, is dropped and replaced.

    Returns:
        Position to steer to, or None for an empty graph
    """
    if state.goal_node_id is not None:
        if not 0 <= state.goal_node_id < len(graph):
            state.goal_node_id = None
        elif (
            distance_squared(agent_position, graph.nodes[state.goal_node_id].position)
            <= reached_threshold * reached_threshold
        ):
            state.goal_node_id = None

    if state.goal_node_id is None:
        state.goal_node_id = pick_wander_goal(graph, agent_position, rng)

    if state.goal_node_id is None:
        return None
    return graph.nodes[state.goal_node_id].position
