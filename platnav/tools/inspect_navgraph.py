#!/usr/bin/env python3
"""
Navigation graph inspector

Builds the navigation graph for a level and reports what it contains:
node and connection counts, walkable surface islands, and optionally the
path between two points.

Usage:
    python -m platnav.tools.inspect_navgraph level.json
    python -m platnav.tools.inspect_navgraph --sample platforms --path 40 20 470 140
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from platnav.config import NavConfig
from platnav.level import load_level, save_level
from platnav.level_generation import SAMPLE_LEVELS
from platnav.pathfinding.astar_pathfinder import PlatformerAStar
from platnav.pathfinding.graph_analysis import connected_components, graph_summary
from platnav.pathfinding.navigation_graph import build_nav_graph

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Build and inspect a platformer navigation graph",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Summarize the graph of a level file
  python -m platnav.tools.inspect_navgraph level.json

  # Find a path across a sample level
  python -m platnav.tools.inspect_navgraph --sample platforms --path 40 20 470 140

  # Export a sample level to JSON
  python -m platnav.tools.inspect_navgraph --sample stairs --save-level stairs.json
""",
    )

    parser.add_argument("level_file", nargs="?", type=str, help="Level JSON file")
    parser.add_argument(
        "--sample",
        choices=sorted(SAMPLE_LEVELS),
        help="Use a generated sample level instead of a file",
    )
    parser.add_argument(
        "--path",
        nargs=4,
        type=float,
        metavar=("X0", "Y0", "X1", "Y1"),
        help="Find and print a path from (X0, Y0) to (X1, Y1)",
    )
    parser.add_argument("--save-level", type=str, help="Write the level geometry to a JSON file")
    parser.add_argument("--verbose", action="store_true", help="Enable verbose logging")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if args.sample:
        level = SAMPLE_LEVELS[args.sample]()
    elif args.level_file:
        level_path = Path(args.level_file)
        if not level_path.exists():
            logger.error("Level file not found: %s", level_path)
            return 1
        level = load_level(level_path)
    else:
        parser.error("either a level file or --sample is required")

    if args.save_level:
        save_level(level, args.save_level)
        logger.info("Saved level to %s", args.save_level)

    config = NavConfig(debug=args.verbose)
    graph = build_nav_graph(level, config)

    summary = graph_summary(graph)
    print("Navigation graph:")
    for key, value in summary.items():
        print(f"  {key:20s} {value}")

    components = connected_components(graph)
    if len(components) > 1:
        print(f"  Walkable islands: {[len(c) for c in components]}")

    if args.path:
        x0, y0, x1, y1 = args.path
        pathfinder = PlatformerAStar(graph, config.search)
        path = pathfinder.find_path((x0, y0), (x1, y1))

        if path is None:
            print(f"No path from ({x0}, {y0}) to ({x1}, {y1})")
            return 2

        print(
            f"Path: {len(path)} nodes, cost {path.total_cost:.2f}, "
            f"{pathfinder.nodes_expanded} nodes expanded"
        )
        previous = None
        for node in path:
            kind = ""
            if previous is not None:
                connection = graph.find_connection(previous, node.id)
                kind = connection.kind.name.lower() if connection else ""
            print(f"  {node.id:5d} ({node.position[0]:8.2f}, {node.position[1]:8.2f}) {kind}")
            previous = node.id

    return 0


if __name__ == "__main__":
    sys.exit(main())
