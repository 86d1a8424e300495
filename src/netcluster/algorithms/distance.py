"""
Elementary distance functions shared by the clustering and embedding routines.
"""

from __future__ import annotations

from typing import Callable, Sequence, Union

import numpy as np

Vector = Union[np.ndarray, Sequence[float]]
DistanceFunction = Callable[[Vector, Vector], float]


def _check_same_dimension(a: np.ndarray, b: np.ndarray) -> None:
    if a.shape != b.shape:
        raise ValueError("Points must have the same dimension")


def euclidean_distance(a: Vector, b: Vector) -> float:
    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)
    _check_same_dimension(a, b)
    return float(np.sqrt(np.sum((a - b) ** 2)))


def squared_euclidean_distance(a: Vector, b: Vector) -> float:
    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)
    _check_same_dimension(a, b)
    return float(np.sum((a - b) ** 2))


def manhattan_distance(a: Vector, b: Vector) -> float:
    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)
    _check_same_dimension(a, b)
    return float(np.sum(np.abs(a - b)))


def levenshtein_distance(
    first: str,
    second: str,
    *,
    deletion_cost: float = 1,
    insertion_cost: float = 1,
    substitution_cost: float = 1,
) -> float:
    """
    Weighted edit distance turning *first* into *second*.

    Args:
        first: Source string.
        second: Target string.
        deletion_cost: Cost of deleting a character from *first*.
        insertion_cost: Cost of inserting a character from *second*.
        substitution_cost: Cost of replacing one character with another.

    Returns:
        Minimum total cost of edits.
    """
    # prev[j] = cost of turning first[:i-1] into second[:j]
    prev = [j * insertion_cost for j in range(len(second) + 1)]
    for i in range(1, len(first) + 1):
        curr = [i * deletion_cost] + [0] * len(second)
        for j in range(1, len(second) + 1):
            sub = 0 if first[i - 1] == second[j - 1] else substitution_cost
            curr[j] = min(
                prev[j] + deletion_cost,
                curr[j - 1] + insertion_cost,
                prev[j - 1] + sub,
            )
        prev = curr
    return prev[-1]


def pairwise_distances(X, distance: DistanceFunction = euclidean_distance) -> np.ndarray:
    """
    Symmetric ``(n, n)`` matrix of distances between the rows of *X*.

    Euclidean and squared-Euclidean distances are vectorised; any other
    callable is applied to each pair.
    """
    X = np.asarray(X, dtype=np.float64)
    n = X.shape[0]
    if distance is euclidean_distance or distance is squared_euclidean_distance:
        sq = np.sum(X ** 2, axis=1)
        d2 = np.maximum(sq[:, None] + sq[None, :] - 2.0 * (X @ X.T), 0.0)
        np.fill_diagonal(d2, 0.0)
        return np.sqrt(d2) if distance is euclidean_distance else d2

    D = np.zeros((n, n), dtype=np.float64)
    for i in range(n):
        for j in range(i + 1, n):
            D[i, j] = D[j, i] = distance(X[i], X[j])
    return D
