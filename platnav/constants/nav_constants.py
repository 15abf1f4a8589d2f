"""
Centralized navigation constants for graph building, search and path following.
All tunable defaults should be defined here to avoid duplication.

World space is y-up: gravity pulls along (0, -GRAVITY_STRENGTH).
"""

# === WORLD PHYSICS ===
GRAVITY_STRENGTH = 0.5  # Downward acceleration in units/tick²
MAX_JUMP_SPEED = 8.0  # Maximum launch speed of a jump in units/tick
AGENT_RADIUS = 8.0  # Collision radius of a navigating agent

# === GRAPH CONSTRUCTION ===
NODE_SPACING = 20.0  # Nominal distance between nodes along a walkable edge
WALKABLE_DIRECTION_THRESHOLD = -0.1  # Edge kept iff unit_dir . (1, 0) > threshold
MERGE_TOLERANCE_SQ = 1.0  # Nodes closer than this (squared) are merged
TRAJECTORY_DIVISIONS = 10  # Sub-steps when sampling a jump or drop arc
CELL_SIZE_MULTIPLIER = 2.5
SPATIAL_CELL_SIZE = NODE_SPACING * CELL_SIZE_MULTIPLIER  # 50.0

# Drops
DROP_EFFORT_MULTIPLIER = 0.5  # Falling is cheaper than jumping
MAX_DROP_OFFSET_MULTIPLIER = 1.5  # Horizontal drop offset limit, in node spacings

# === SEARCH ===
EFFORT_WEIGHT = 1.0  # Weight of connection effort in g_cost
VERTICAL_HEURISTIC_WEIGHT = 1.5  # Penalty on upward distance in the heuristic

# === PATH FOLLOWING ===
# Thresholds are compared against squared distances
GOAL_CHANGE_THRESHOLD = 5.0
PATH_DEVIATION_THRESHOLD = 10.0
NODE_REACHED_THRESHOLD = 8.0
VELOCITY_MAGNITUDE_THRESHOLD = 0.1  # Compared against squared speed
JUMP_TIME_MULTIPLIER = 1.0
WALL_NORMAL_Y_THRESHOLD = -0.01  # Contact normal y above this counts as a wall

# === AGENT MOTION ===
WANDER_MAX_SPEED = 3.0
ACCELERATION_SCALERS = (0.2, 0.4)  # (accelerating, decelerating)

# === WANDER ===
WANDER_SAMPLE_COUNT = 3
WANDER_GOAL_REACHED_THRESHOLD = 30.0
