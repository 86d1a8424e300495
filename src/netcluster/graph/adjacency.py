"""
Adjacency-matrix construction from edge lists.

Turns labelled edges (from memory or from a whitespace-separated file) into a
dense matrix over dense integer node indices, keeping a legend back to the
original labels.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterable, List, Sequence, Tuple, Union

import numpy as np

from ..utils.logging_config import get_logger

logger = get_logger(__name__)

NodeLabel = Union[str, int]
Edge = Union[Tuple[NodeLabel, NodeLabel], Tuple[NodeLabel, NodeLabel, float]]


def _parse_token(token: str) -> NodeLabel:
    """Integer-looking tokens become ints, everything else stays a string."""
    try:
        return int(token)
    except ValueError:
        return token


class AdjacencyMatrix:
    """
    Dense adjacency matrix plus a legend of node labels.

    Use :meth:`from_edge_list` or :meth:`from_edge_list_file` to build one.
    """

    def __init__(self, matrix: np.ndarray, node_mapping: Sequence[NodeLabel]):
        self._matrix = matrix
        self._node_mapping: List[NodeLabel] = list(node_mapping)

    @property
    def node_count(self) -> int:
        return len(self._node_mapping)

    def get_matrix(self) -> np.ndarray:
        """The ``(n, n)`` adjacency matrix."""
        return self._matrix

    def get_legend(self) -> Dict[int, NodeLabel]:
        """Mapping from matrix index to original node label."""
        return dict(enumerate(self._node_mapping))

    def get_node_name(self, index: int) -> NodeLabel:
        return self._node_mapping[index]

    def label_communities(self, communities: Iterable[Iterable[int]]) -> List[List[NodeLabel]]:
        """Translate a partition of node indices into a partition of node labels."""
        return [[self._node_mapping[i] for i in community] for community in communities]

    @classmethod
    def from_edge_list(
        cls,
        edge_list: Iterable[Edge],
        *,
        symmetric: bool = True,
        weighted: bool = False,
    ) -> "AdjacencyMatrix":
        """
        Build a matrix from ``(source, target)`` or ``(source, target, weight)`` edges.

        Nodes are indexed in order of first appearance.

        Args:
            edge_list: Edges; labels may be ints or strings.
            symmetric: Also set the mirror entry (undirected graph).
            weighted: Accumulate repeated edges as multiplicities instead of
                marking each present edge with 1. An explicit third element is
                always treated as a weight and accumulated.

        Raises:
            ValueError: If an edge does not have two or three elements.
        """
        edges = list(edge_list)
        index: Dict[NodeLabel, int] = {}
        parsed: List[Tuple[int, int, float, bool]] = []
        for edge in edges:
            if len(edge) not in (2, 3):
                raise ValueError(f"Edge must be (source, target[, weight]), got {edge!r}")
            source, target = edge[0], edge[1]
            for node in (source, target):
                if node not in index:
                    index[node] = len(index)
            has_weight = len(edge) == 3
            weight = float(edge[2]) if has_weight else 1.0
            parsed.append((index[source], index[target], weight, has_weight))

        n = len(index)
        matrix = np.zeros((n, n), dtype=np.float64)
        for i, j, weight, has_weight in parsed:
            pairs = [(i, j)] if not symmetric or i == j else [(i, j), (j, i)]
            for a, b in pairs:
                if weighted or has_weight:
                    matrix[a, b] += weight
                else:
                    matrix[a, b] = 1.0

        logger.debug("Built %dx%d adjacency matrix from %d edges", n, n, len(edges))
        return cls(matrix, list(index))

    @classmethod
    def from_edge_list_file(
        cls,
        path: Union[str, Path],
        *,
        symmetric: bool = True,
        weighted: bool = False,
    ) -> "AdjacencyMatrix":
        """
        Read a whitespace-separated edge list file.

        Each non-blank line holds ``source target [weight]``; lines starting
        with ``#`` are comments.

        Raises:
            FileNotFoundError: If *path* does not exist.
            ValueError: If a line has fewer than two tokens or a bad weight.
        """
        path = Path(path)
        edges: List[Edge] = []
        with open(path, "r", encoding="utf-8") as f:
            for line_no, raw in enumerate(f, start=1):
                line = raw.strip()
                if not line or line.startswith("#"):
                    continue
                parts = line.split()
                if len(parts) < 2:
                    raise ValueError(f"{path}:{line_no}: expected 'source target [weight]', got {line!r}")
                source, target = _parse_token(parts[0]), _parse_token(parts[1])
                if len(parts) >= 3:
                    try:
                        edges.append((source, target, float(parts[2])))
                    except ValueError as e:
                        raise ValueError(f"{path}:{line_no}: invalid weight {parts[2]!r}") from e
                else:
                    edges.append((source, target))

        logger.info("Loaded %d edges from %s", len(edges), path)
        return cls.from_edge_list(edges, symmetric=symmetric, weighted=weighted)
