"""
Configuration classes for the platformer navigation system.

This module provides structured configuration for graph building, trajectory
validation, search and path following, replacing loose keyword arguments with
validated dataclasses.
"""

from dataclasses import dataclass, field
import logging

from .constants.nav_constants import (
    ACCELERATION_SCALERS,
    AGENT_RADIUS,
    CELL_SIZE_MULTIPLIER,
    DROP_EFFORT_MULTIPLIER,
    EFFORT_WEIGHT,
    GOAL_CHANGE_THRESHOLD,
    GRAVITY_STRENGTH,
    JUMP_TIME_MULTIPLIER,
    MAX_DROP_OFFSET_MULTIPLIER,
    MAX_JUMP_SPEED,
    MERGE_TOLERANCE_SQ,
    NODE_REACHED_THRESHOLD,
    NODE_SPACING,
    PATH_DEVIATION_THRESHOLD,
    TRAJECTORY_DIVISIONS,
    VELOCITY_MAGNITUDE_THRESHOLD,
    VERTICAL_HEURISTIC_WEIGHT,
    WALKABLE_DIRECTION_THRESHOLD,
    WANDER_MAX_SPEED,
)


@dataclass
class PhysicsConfig:
    """World physics shared by graph building and path following."""

    gravity: float = GRAVITY_STRENGTH
    max_jump_speed: float = MAX_JUMP_SPEED

    def __post_init__(self):
        """Validate physics configuration."""
        if self.gravity <= 0:
            raise ValueError("gravity must be positive")

        if self.max_jump_speed <= 0:
            raise ValueError("max_jump_speed must be positive")


@dataclass
class GraphBuildConfig:
    """Configuration for navigation graph construction.

    The spatial grid cell size is derived from the node spacing so that a
    3x3 cell query always covers several neighbouring nodes.
    """

    node_spacing: float = NODE_SPACING
    direction_threshold: float = WALKABLE_DIRECTION_THRESHOLD
    merge_tolerance_sq: float = MERGE_TOLERANCE_SQ
    cell_size_multiplier: float = CELL_SIZE_MULTIPLIER
    trajectory_divisions: int = TRAJECTORY_DIVISIONS
    drop_effort_multiplier: float = DROP_EFFORT_MULTIPLIER
    max_drop_offset_multiplier: float = MAX_DROP_OFFSET_MULTIPLIER
    agent_radius: float = AGENT_RADIUS

    def __post_init__(self):
        """Validate graph build configuration."""
        if self.node_spacing <= 0:
            raise ValueError("node_spacing must be positive")

        if not -1.0 <= self.direction_threshold <= 1.0:
            raise ValueError("direction_threshold must be between -1.0 and 1.0")

        if self.merge_tolerance_sq <= 0:
            raise ValueError("merge_tolerance_sq must be positive")

        if self.cell_size_multiplier <= 0:
            raise ValueError("cell_size_multiplier must be positive")

        if self.trajectory_divisions < 1:
            raise ValueError("trajectory_divisions must be at least 1")

        if self.drop_effort_multiplier < 0:
            raise ValueError("drop_effort_multiplier must be non-negative")

        if self.max_drop_offset_multiplier < 0:
            raise ValueError("max_drop_offset_multiplier must be non-negative")

        if self.agent_radius < 0:
            raise ValueError("agent_radius must be non-negative")

    @property
    def cell_size(self) -> float:
        return self.node_spacing * self.cell_size_multiplier

    @property
    def max_drop_offset(self) -> float:
        return self.node_spacing * self.max_drop_offset_multiplier


@dataclass
class SearchConfig:
    """Configuration for the A* cost model."""

    effort_weight: float = EFFORT_WEIGHT
    vertical_heuristic_weight: float = VERTICAL_HEURISTIC_WEIGHT

    def __post_init__(self):
        """Validate search configuration."""
        if self.effort_weight < 0:
            raise ValueError("effort_weight must be non-negative")

        if self.vertical_heuristic_weight < 1.0:
            raise ValueError("vertical_heuristic_weight must be at least 1.0")


@dataclass
class FollowerConfig:
    """Configuration for the path-following controller.

    Distance thresholds are given as plain distances and compared squared.
    """

    goal_change_threshold: float = GOAL_CHANGE_THRESHOLD
    path_deviation_threshold: float = PATH_DEVIATION_THRESHOLD
    node_reached_threshold: float = NODE_REACHED_THRESHOLD
    velocity_threshold_sq: float = VELOCITY_MAGNITUDE_THRESHOLD
    jump_time_multiplier: float = JUMP_TIME_MULTIPLIER

    def __post_init__(self):
        """Validate follower configuration."""
        for name in (
            "goal_change_threshold",
            "path_deviation_threshold",
            "node_reached_threshold",
            "velocity_threshold_sq",
        ):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be non-negative")

        if self.jump_time_multiplier <= 0:
            raise ValueError("jump_time_multiplier must be positive")

    @property
    def goal_change_threshold_sq(self) -> float:
        return self.goal_change_threshold * self.goal_change_threshold

    @property
    def path_deviation_threshold_sq(self) -> float:
        return self.path_deviation_threshold * self.path_deviation_threshold

    @property
    def node_reached_threshold_sq(self) -> float:
        return self.node_reached_threshold * self.node_reached_threshold


@dataclass
class MotionConfig:
    """Configuration for agent-side steering acceleration."""

    max_speed: float = WANDER_MAX_SPEED
    accelerate_scaler: float = ACCELERATION_SCALERS[0]
    decelerate_scaler: float = ACCELERATION_SCALERS[1]

    def __post_init__(self):
        """Validate motion configuration."""
        if self.max_speed < 0:
            raise ValueError("max_speed must be non-negative")

        for name in ("accelerate_scaler", "decelerate_scaler"):
            if not 0.0 <= getattr(self, name) <= 1.0:
                raise ValueError(f"{name} must be between 0.0 and 1.0")


@dataclass
class NavConfig:
    """Main configuration class for the navigation system."""

    physics: PhysicsConfig = field(default_factory=PhysicsConfig)
    graph: GraphBuildConfig = field(default_factory=GraphBuildConfig)
    search: SearchConfig = field(default_factory=SearchConfig)
    follower: FollowerConfig = field(default_factory=FollowerConfig)
    motion: MotionConfig = field(default_factory=MotionConfig)
    debug: bool = False

    def __post_init__(self):
        if self.debug:
            logging.info("Navigation debug mode enabled")

    @classmethod
    def default(cls) -> "NavConfig":
        """Create the default configuration."""
        return cls()
