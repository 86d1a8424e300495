"""
Pytest configuration and shared fixtures.

This file is automatically discovered by pytest and provides fixtures
available to all test modules.
"""

import numpy as np
import pytest


def modularity_of(adjacency, communities) -> float:
    """
    Reference modularity of a partition, computed directly from the matrix.

    Degrees are full row sums (self-loops included); only off-diagonal
    entries count as internal edges.
    """
    A = np.asarray(adjacency, dtype=np.float64)
    degrees = A.sum(axis=1)
    m = degrees.sum() / 2.0
    if m == 0:
        return 0.0
    off_diagonal = A - np.diag(np.diag(A))
    q = 0.0
    for members in communities:
        idx = np.asarray(members, dtype=int)
        internal = off_diagonal[np.ix_(idx, idx)].sum() / 2.0
        q += internal / m - (degrees[idx].sum() / (2.0 * m)) ** 2
    return float(q)


@pytest.fixture
def modularity():
    """Reference modularity function: ``modularity(adjacency, communities)``."""
    return modularity_of


@pytest.fixture
def two_triangles():
    """Six nodes forming two disjoint 3-cliques: {0, 1, 2} and {3, 4, 5}."""
    A = np.zeros((6, 6))
    for a, b in [(0, 1), (1, 2), (0, 2), (3, 4), (4, 5), (3, 5)]:
        A[a, b] = A[b, a] = 1
    return A


@pytest.fixture
def single_edge():
    """Two nodes joined by one edge."""
    return [[0, 1], [1, 0]]


@pytest.fixture
def edgeless():
    """Five isolated nodes."""
    return np.zeros((5, 5))


@pytest.fixture
def ring_of_cliques():
    """
    Four 4-cliques joined in a ring by single bridge edges.

    Nodes 4k..4k+3 form clique k; node 4k+3 links to node 4(k+1) mod 16.
    """
    n_cliques, size = 4, 4
    n = n_cliques * size
    A = np.zeros((n, n))
    for k in range(n_cliques):
        base = k * size
        for i in range(size):
            for j in range(i + 1, size):
                A[base + i, base + j] = A[base + j, base + i] = 1
        a, b = base + size - 1, ((k + 1) % n_cliques) * size
        A[a, b] = A[b, a] = 1
    return A


@pytest.fixture
def weighted_random_graph():
    """Dense symmetric graph with distinct random weights (no equal-gain ties)."""
    rng = np.random.default_rng(7)
    n = 12
    W = np.triu(rng.uniform(0.1, 5.0, size=(n, n)), k=1)
    mask = np.triu(rng.random((n, n)) < 0.4, k=1)
    W = W * mask
    return W + W.T


@pytest.fixture
def blobs():
    """Three well-separated 2-D Gaussian blobs of 20 points each, with labels."""
    rng = np.random.default_rng(42)
    centers = np.array([[0.0, 0.0], [10.0, 10.0], [-10.0, 10.0]])
    X = np.vstack([c + rng.standard_normal((20, 2)) * 0.5 for c in centers])
    y = np.repeat(np.arange(3), 20)
    return X, y
