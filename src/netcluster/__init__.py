"""
netcluster - Core Package

Greedy modularity community detection over adjacency matrices, with the
companion routines used around it.

This package provides:
- Community detection (greedy modularity with full merge trajectory)
- Graph loading from edge lists
- PageRank, distance functions, point-cloud clustering and
  dimensionality reduction
"""

__version__ = "0.1.0"

from .algorithms import FastNewman, FastNewmanConfig, FastNewmanResult, ModularityStep
from .graph import AdjacencyMatrix

# Explicitly import subpackages to ensure they're discoverable
from . import algorithms
from . import graph
from . import utils

__all__ = [
    "FastNewman",
    "FastNewmanConfig",
    "FastNewmanResult",
    "ModularityStep",
    "AdjacencyMatrix",
    "algorithms",
    "graph",
    "utils",
]
