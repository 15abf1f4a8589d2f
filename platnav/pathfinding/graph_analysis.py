"""
Connectivity analysis of navigation graphs via networkx.

Used by tooling and tests to inspect a built graph: which nodes an agent can
reach from a start node, how the walkable surfaces split into islands, and
summary counts per connection kind.
"""

from typing import Any, Dict, List, Set

import networkx as nx

from .movement_types import ConnectionType
from .navigation_graph import NavGraph


def to_networkx(graph: NavGraph, effort_weight: float = 1.0) -> nx.DiGraph:
    """
    Export a navigation graph as a directed networkx graph.

    Where several connections join the same ordered pair of nodes, the
    cheapest one is kept. Edge weight matches the A* step cost.
    """
    digraph = nx.DiGraph()

    for node in graph.nodes:
        digraph.add_node(
            node.id,
            position=node.position,
            normal=node.normal,
            is_corner=node.is_corner,
            is_external_corner=node.is_external_corner,
            polygon_index=node.polygon_index,
        )

    for node in graph.nodes:
        for connection in node.connections():
            weight = connection.distance + effort_weight * connection.effort
            existing = digraph.get_edge_data(node.id, connection.target_id)
            if existing is not None and existing["weight"] <= weight:
                continue
            digraph.add_edge(
                node.id,
                connection.target_id,
                weight=weight,
                kind=connection.kind,
                move_type=connection.kind.name.lower(),
                distance=connection.distance,
                effort=connection.effort,
            )

    return digraph


def reachable_node_ids(graph: NavGraph, start_id: int) -> Set[int]:
    """Ids of every node reachable from start_id by any connection kind, start included."""
    if not 0 <= start_id < len(graph):
        return set()
    return set(nx.descendants(to_networkx(graph), start_id)) | {start_id}


def walkable_graph(graph: NavGraph) -> nx.Graph:
    """Undirected networkx graph of walkable connections only."""
    undirected = nx.Graph()
    undirected.add_nodes_from(node.id for node in graph.nodes)
    for node in graph.nodes:
        for connection in node.walkable:
            undirected.add_edge(node.id, connection.target_id, weight=connection.distance)
    return undirected


def connected_components(graph: NavGraph) -> List[Set[int]]:
    """Walkable surface islands, largest first."""
    components = [set(c) for c in nx.connected_components(walkable_graph(graph))]
    components.sort(key=lambda c: (-len(c), min(c)))
    return components


def graph_summary(graph: NavGraph) -> Dict[str, Any]:
    """Counts describing a navigation graph."""
    corners = [node for node in graph.nodes if node.is_corner]
    return {
        "nodes": len(graph),
        "walkable": graph.connection_count(ConnectionType.WALKABLE),
        "jumpable": graph.connection_count(ConnectionType.JUMPABLE),
        "droppable": graph.connection_count(ConnectionType.DROPPABLE),
        "corners": len(corners),
        "external_corners": sum(1 for node in corners if node.is_external_corner),
        "walkable_components": len(connected_components(graph)) if len(graph) else 0,
        "grid_cells": len(graph.grid),
    }
