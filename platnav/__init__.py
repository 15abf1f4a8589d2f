# This file makes this a Python package

from .config import (
    NavConfig,
    PhysicsConfig,
    GraphBuildConfig,
    SearchConfig,
    FollowerConfig,
    MotionConfig,
)
from .level import Level, Polygon, load_level, save_level
from .pathfinding import (
    NavGraph,
    NavGraphBuilder,
    build_nav_graph,
    find_path,
    PathFollower,
)

__all__ = [
    # Configuration
    "NavConfig",
    "PhysicsConfig",
    "GraphBuildConfig",
    "SearchConfig",
    "FollowerConfig",
    "MotionConfig",
    # Level geometry
    "Level",
    "Polygon",
    "load_level",
    "save_level",
    # Navigation
    "NavGraph",
    "NavGraphBuilder",
    "build_nav_graph",
    "find_path",
    "PathFollower",
]
