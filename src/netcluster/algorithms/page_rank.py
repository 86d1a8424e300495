"""
PageRank by damped power iteration over an adjacency matrix.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Sequence, Union

import numpy as np

from ..utils.logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class PageRankResult:
    """Stationary rank of each node (sums to 1) and iterations used."""

    ranks: List[float] = field(default_factory=list)
    n_iter: int = 0


class PageRank:
    """
    PageRank over a (possibly directed, possibly weighted) adjacency matrix.

    ``adjacency[i][j]`` is the number of edges from node i to node j. Rows are
    normalised into transition probabilities; dangling rows stay zero and are
    covered by the teleport term ``(1 - beta) / n``.

    Args:
        beta: Damping factor in [0, 1].
        max_iterations: Upper bound on power iterations.
        tolerance: Stop once the L1 change between iterations drops below this.
    """

    def __init__(self, beta: float = 0.85, max_iterations: int = 100, tolerance: float = 1e-6):
        if not 0.0 <= beta <= 1.0:
            raise ValueError(f"beta must be in [0, 1], got {beta}")
        if max_iterations < 1:
            raise ValueError(f"max_iterations must be >= 1, got {max_iterations}")
        if tolerance <= 0:
            raise ValueError(f"tolerance must be > 0, got {tolerance}")
        self.beta = beta
        self.max_iterations = max_iterations
        self.tolerance = tolerance

    def fit(self, adjacency: Union[np.ndarray, Sequence[Sequence[float]]]) -> PageRankResult:
        A = np.asarray(adjacency, dtype=np.float64)
        n = A.shape[0] if A.ndim == 2 else 0
        if n == 0:
            return PageRankResult()
        if A.shape != (n, n):
            raise ValueError(f"Adjacency matrix must be square, got shape {A.shape}")

        M = self._build_transition_matrix(A)
        # Column i of A_t holds the probabilities of arriving at node i
        A_t = (M * self.beta + (1.0 - self.beta) / n).T

        ranks = np.full(n, 1.0 / n)
        n_iter = 0
        for n_iter in range(1, self.max_iterations + 1):
            new_ranks = self._normalize(A_t @ ranks)
            delta = float(np.abs(new_ranks - ranks).sum())
            ranks = new_ranks
            if delta < self.tolerance:
                break
        else:
            logger.debug("PageRank hit max_iterations=%d before converging", self.max_iterations)

        return PageRankResult(ranks=ranks.tolist(), n_iter=n_iter)

    @staticmethod
    def _build_transition_matrix(A: np.ndarray) -> np.ndarray:
        """Row-stochastic matrix: M[i, j] = probability of moving from i to j."""
        row_sums = A.sum(axis=1, keepdims=True)
        M = np.zeros_like(A)
        np.divide(A, row_sums, out=M, where=row_sums != 0)
        return M

    @staticmethod
    def _normalize(ranks: np.ndarray) -> np.ndarray:
        total = ranks.sum()
        if total == 0:
            return np.full(ranks.shape[0], 1.0 / ranks.shape[0])
        return ranks / total
