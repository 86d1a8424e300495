"""
Command-line entry point: detect communities in an edge-list file.

Usage:
  netcluster edges.txt
  netcluster edges.txt --communities 3 --history
  netcluster edges.txt --weighted --log-level DEBUG
"""

from __future__ import annotations

import argparse
import json
import sys
from typing import List, Optional

from .algorithms.fast_newman import FastNewman, FastNewmanConfig
from .config import config
from .graph.adjacency import AdjacencyMatrix
from .utils.logging_config import get_logger, setup_logging

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="netcluster",
        description="Greedy modularity community detection on an edge-list file",
    )
    parser.add_argument("edge_file", help="Whitespace-separated 'source target [weight]' lines")
    parser.add_argument(
        "--communities",
        type=int,
        default=None,
        help="Stop merging at this many communities (default: NETCLUSTER_TARGET_COMMUNITIES or 1)",
    )
    parser.add_argument(
        "--weighted",
        action="store_true",
        help="Count repeated edges as multiplicities",
    )
    parser.add_argument(
        "--history",
        action="store_true",
        help="Include the modularity of every merge step in the output",
    )
    parser.add_argument("--log-level", default=None, help="Override NETCLUSTER_LOG_LEVEL")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)

    target = args.communities if args.communities is not None else config.detection.number_of_communities
    try:
        cfg = FastNewmanConfig(number_of_communities=target)
        graph = AdjacencyMatrix.from_edge_list_file(args.edge_file, weighted=args.weighted)
        result = FastNewman(cfg).fit(graph.get_matrix())
    except FileNotFoundError:
        logger.error("Edge list file not found: %s", args.edge_file)
        print(f"ERROR: edge list file not found: {args.edge_file}", file=sys.stderr)
        return 1
    except ValueError as e:
        logger.error("Invalid input: %s", e)
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    output = {
        "communities": graph.label_communities(result.communities),
        "modularity": result.modularity,
        "n_merges": result.n_merges,
    }
    if args.history:
        output["history"] = [step.q for step in result.modularity_history]

    print(json.dumps(output, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
