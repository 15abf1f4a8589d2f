"""
Platformer navigation system

Builds walk/jump/drop navigation graphs from level geometry, searches them
with a platformer-aware A*, and steers agents along the resulting paths.
"""

from .movement_types import ConnectionType
from .navigation_graph import NavConnection, NavNode, NavGraph, NavGraphBuilder, build_nav_graph
from .physics_validator import PhysicsValidator
from .astar_pathfinder import Path, PathNode, PlatformerAStar, find_path
from .path_follower import (
    AgentNavState,
    AgentPhysicsState,
    MoveDecision,
    PathFollower,
    PathFollowingStrategy,
)

__all__ = [
    'ConnectionType',
    'NavConnection',
    'NavNode',
    'NavGraph',
    'NavGraphBuilder',
    'build_nav_graph',
    'PhysicsValidator',
    'Path',
    'PathNode',
    'PlatformerAStar',
    'find_path',
    'AgentNavState',
    'AgentPhysicsState',
    'MoveDecision',
    'PathFollower',
    'PathFollowingStrategy',
]
