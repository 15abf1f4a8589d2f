"""
Agent-side movement integration for path-following agents.

These helpers turn a MoveDecision into velocity and position changes for one
tick. Contact resolution against level geometry is left to the caller's
collision system, which is expected to refresh normal, grounded and walled
on the AgentPhysicsState between ticks.
"""

from typing import Optional

from ..config import MotionConfig, PhysicsConfig
from ..utils.geometry import ZERO, Vec2, add, length_squared, scale, sub
from .path_follower import AgentNavState, AgentPhysicsState, MoveDecision


def apply_movement_acceleration(
    physics: AgentPhysicsState,
    direction: Vec2,
    motion: Optional[MotionConfig] = None,
):
    """
    Steer velocity toward direction * max_speed.

    Airborne agents get no steering. A zero direction brakes with the
    decelerate scaler, otherwise the accelerate scaler applies.
    """
    motion = motion or MotionConfig()

    if physics.is_falling:
        physics.acceleration = ZERO
        return

    no_direction = length_squared(direction) == 0.0
    scaler = motion.decelerate_scaler if no_direction else motion.accelerate_scaler
    target_velocity = scale(direction, motion.max_speed)
    physics.acceleration = scale(sub(target_velocity, physics.velocity), scaler)


def apply_gravity_toward_normal(physics: AgentPhysicsState, gravity: float):
    """Pull airborne agents down and pin touching agents against their contact surface."""
    if physics.is_falling:
        physics.acceleration = (physics.acceleration[0], -gravity)
    else:
        physics.acceleration = add(physics.acceleration, scale(physics.normal, gravity))


def apply_jump(
    physics: AgentPhysicsState,
    decision: MoveDecision,
    gravity: float,
    nav_state: Optional[AgentNavState] = None,
) -> bool:
    """
    Launch the agent if the decision carries a jump and the agent has footing.

    Ground jumps clear has_wall_jumped, wall jumps set it. The jump anchors are
    recorded on nav_state when given.

    Returns:
        True if a jump was applied
    """
    if not decision.wants_jump or physics.is_falling:
        return False

    if physics.grounded:
        physics.has_wall_jumped = False
    elif physics.walled != 0:
        physics.has_wall_jumped = True
    else:
        return False

    physics.velocity = decision.jump_velocity
    physics.acceleration = (0.0, -gravity)
    physics.grounded = False
    physics.walled = 0

    if nav_state is not None:
        nav_state.jump_from = decision.jump_from
        nav_state.jump_to = decision.jump_to
    return True


def integrate(physics: AgentPhysicsState):
    """Advance one tick: velocity += acceleration, then position += velocity."""
    physics.velocity = add(physics.velocity, physics.acceleration)
    physics.prev_position = physics.position
    physics.position = add(physics.position, physics.velocity)


def step_agent(
    physics: AgentPhysicsState,
    decision: MoveDecision,
    nav_state: Optional[AgentNavState] = None,
    motion: Optional[MotionConfig] = None,
    world: Optional[PhysicsConfig] = None,
) -> bool:
    """
    Apply one controller decision for one tick.

    Returns:
        True if the agent jumped this tick
    """
    world = world or PhysicsConfig()

    apply_movement_acceleration(physics, decision.direction, motion)
    apply_gravity_toward_normal(physics, world.gravity)
    jumped = apply_jump(physics, decision, world.gravity, nav_state)
    integrate(physics)
    return jumped
