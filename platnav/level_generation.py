"""
Procedural sample levels.

All levels are y-up. The first container polygon of a level is its outer
bound: it collides but carries no nodes, so every level here stands its
floor on a solid ground slab.

Winding matters for which faces become walkable. Solid blocks are wound
clockwise so their top faces run rightward and their normals point out of
the block; containers are wound counter-clockwise so their normals point into
the room.
"""

import random
from typing import Callable, Dict, List, Optional, Tuple

from .level import Level, Polygon

DEFAULT_WIDTH = 800.0
DEFAULT_HEIGHT = 400.0
GROUND_HEIGHT = 20.0
PLATFORM_THICKNESS = 20.0


def solid_block(x0: float, y0: float, x1: float, y1: float) -> Polygon:
    """Closed clockwise rectangle spanning (x0, y0) to (x1, y1)."""
    left, right = min(x0, x1), max(x0, x1)
    bottom, top = min(y0, y1), max(y0, y1)
    return Polygon(
        [(left, top), (right, top), (right, bottom), (left, bottom), (left, top)]
    )


def container(x0: float, y0: float, x1: float, y1: float) -> Polygon:
    """Closed counter-clockwise boundary spanning (x0, y0) to (x1, y1)."""
    left, right = min(x0, x1), max(x0, x1)
    bottom, top = min(y0, y1), max(y0, y1)
    return Polygon(
        [(left, bottom), (right, bottom), (right, top), (left, top), (left, bottom)],
        is_container=True,
    )


def box_room(
    width: float = DEFAULT_WIDTH,
    height: float = DEFAULT_HEIGHT,
    ground_height: float = GROUND_HEIGHT,
) -> Level:
    """Empty room: an outer bound and a ground slab along its floor."""
    return Level(
        [
            container(0.0, 0.0, width, height),
            solid_block(0.0, 0.0, width, ground_height),
        ]
    )


def platform_level() -> Level:
    """Room with floating platforms at several heights, reachable by jumps and drops."""
    level = box_room()
    platforms: List[Tuple[float, float, float]] = [
        # (left, right, top)
        (100.0, 200.0, 60.0),
        (260.0, 360.0, 100.0),
        (420.0, 500.0, 140.0),
        (560.0, 680.0, 90.0),
    ]
    for left, right, top in platforms:
        level.polygons.append(solid_block(left, top - PLATFORM_THICKNESS, right, top))
    return level


def stairs_level(steps: int = 4, step_width: float = 60.0, step_rise: float = 30.0) -> Level:
    """Room with an ascending staircase of adjoining blocks standing on the ground."""
    level = box_room()
    start_x = 100.0
    for i in range(steps):
        left = start_x + i * step_width
        level.polygons.append(
            solid_block(left, GROUND_HEIGHT, left + step_width, GROUND_HEIGHT + (i + 1) * step_rise)
        )
    return level


def random_platform_level(
    seed: int = 0,
    count: int = 6,
    width: float = DEFAULT_WIDTH,
    height: float = DEFAULT_HEIGHT,
    rng: Optional[random.Random] = None,
) -> Level:
    """
    Room with randomly placed floating platforms.

    The same seed always produces the same level. Platforms may overlap.
    """
    rng = rng or random.Random(seed)
    level = box_room(width, height)

    for _ in range(count):
        platform_width = rng.uniform(60.0, 160.0)
        left = rng.uniform(20.0, width - platform_width - 20.0)
        top = rng.uniform(GROUND_HEIGHT + 40.0, min(height - 40.0, GROUND_HEIGHT + 200.0))
        level.polygons.append(
            solid_block(left, top - PLATFORM_THICKNESS, left + platform_width, top)
        )

    return level


SAMPLE_LEVELS: Dict[str, Callable[[], Level]] = {
    "box": box_room,
    "platforms": platform_level,
    "stairs": stairs_level,
    "random": random_platform_level,
}
