"""Graph construction utilities."""

from .adjacency import AdjacencyMatrix

__all__ = ["AdjacencyMatrix"]
