"""
Connection types for the platformer navigation graph.

This module defines the ways an agent can travel between two graph nodes.
"""

from enum import IntEnum


class ConnectionType(IntEnum):
    """
    Traversal options between navigation nodes.

    These correspond to the movement capabilities of a physically simulated
    platformer agent.
    """

    WALKABLE = 0  # Along a surface, undirected
    JUMPABLE = 1  # Ballistic launch to another polygon, directed
    DROPPABLE = 2  # Fall to a node below, directed
