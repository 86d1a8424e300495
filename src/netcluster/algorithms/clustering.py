"""
Clustering algorithms for point clouds and partition comparison metrics.

Provides k-means, DBSCAN and agglomerative hierarchical clustering over
``(n_samples, n_features)`` data, plus helpers to score a partition against a
reference labelling.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence
import numpy as np

from ..config import resolve_seed
from .distance import DistanceFunction, euclidean_distance, pairwise_distances

Array2D = np.ndarray

LINKAGES = ("single", "complete", "average")


@dataclass
class KMeansResult:
    """Result of a k-means run."""

    clusters: List[List[List[float]]]
    centroids: List[List[float]]
    labels: np.ndarray
    n_iter: int = 0


@dataclass
class DBSCANResult:
    """Clusters as lists of point indices, plus indices of unassigned points."""

    clusters: List[List[int]] = field(default_factory=list)
    noise: List[int] = field(default_factory=list)


@dataclass
class HierarchicalResult:
    """Clusters as lists of points, plus the label of each input row."""

    clusters: List[List[List[float]]]
    labels: np.ndarray


def _as_data(data) -> Array2D:
    X = np.asarray(data, dtype=np.float64)
    if X.ndim != 2:
        raise ValueError(f"data must be 2-D (n_samples, n_features), got shape {X.shape}")
    return X


def _assign(X: Array2D, centroids: Array2D, distance: DistanceFunction) -> np.ndarray:
    """Assign each row of *X* to its nearest centroid."""
    if distance is euclidean_distance:
        # ||x - c||² = ||x||² + ||c||² - 2·x·c
        X_sq = np.sum(X ** 2, axis=1, keepdims=True)             # (n, 1)
        C_sq = np.sum(centroids ** 2, axis=1, keepdims=True).T   # (1, K)
        dists = X_sq + C_sq - 2.0 * (X @ centroids.T)            # (n, K)
        return np.argmin(dists, axis=1)
    dists = np.array([[distance(x, c) for c in centroids] for x in X])
    return np.argmin(dists, axis=1)


def _kmeanspp_init(X: Array2D, k: int, rng: np.random.Generator) -> Array2D:
    """Return (k, d) initial centroids chosen by the k-means++ rule."""
    n, d = X.shape
    centroids = np.empty((k, d), dtype=X.dtype)
    centroids[0] = X[int(rng.integers(0, n))]

    for j in range(1, k):
        diffs = X[:, None, :] - centroids[None, :j, :]  # (n, j, d)
        min_sq = np.sum(diffs ** 2, axis=2).min(axis=1)  # (n,)
        total = min_sq.sum()
        if total == 0.0:
            centroids[j] = X[int(rng.integers(0, n))]
        else:
            centroids[j] = X[int(rng.choice(n, p=min_sq / total))]
    return centroids


class KMeans:
    """
    Lloyd's k-means with k-means++ initialisation.

    Args:
        k: Number of clusters.
        max_iterations: Maximum assign/update rounds.
        distance: Point distance used for assignment.
        seed: Random seed for choosing the initial centroids. Defaults to
            ``NETCLUSTER_RANDOM_SEED`` when unset.
    """

    def __init__(
        self,
        k: int = 3,
        max_iterations: int = 100,
        distance: DistanceFunction = euclidean_distance,
        seed: Optional[int] = None,
    ):
        if k < 1:
            raise ValueError(f"k must be >= 1, got {k}")
        if max_iterations < 1:
            raise ValueError(f"max_iterations must be >= 1, got {max_iterations}")
        self.k = k
        self.max_iterations = max_iterations
        self.distance = distance
        self.seed = seed

    def fit(self, data) -> KMeansResult:
        X = _as_data(data)
        n = X.shape[0]
        if self.k > n:
            raise ValueError(f"k ({self.k}) cannot exceed number of samples ({n})")

        rng = np.random.default_rng(resolve_seed(self.seed))
        centroids = _kmeanspp_init(X, self.k, rng)

        labels = np.full(n, -1)
        n_iter = 0
        for n_iter in range(1, self.max_iterations + 1):
            new_labels = _assign(X, centroids, self.distance)
            if np.array_equal(new_labels, labels):
                break
            labels = new_labels
            for j in range(self.k):
                members = labels == j
                # Empty clusters keep their previous centroid
                if members.any():
                    centroids[j] = X[members].mean(axis=0)

        clusters = [X[labels == j].tolist() for j in range(self.k)]
        return KMeansResult(
            clusters=clusters,
            centroids=centroids.tolist(),
            labels=labels.astype(int),
            n_iter=n_iter,
        )


class DBSCAN:
    """
    Density-based clustering.

    A point is a core point when at least ``min_points`` other points lie
    strictly closer than ``epsilon``. Clusters grow from core points through
    their neighborhoods; points never reached are noise.

    Args:
        epsilon: Neighborhood radius.
        min_points: Minimum neighbor count for a core point.
        distance: Point distance.
    """

    def __init__(
        self,
        epsilon: float = 0.2,
        min_points: int = 20,
        distance: DistanceFunction = euclidean_distance,
    ):
        if epsilon <= 0:
            raise ValueError(f"epsilon must be > 0, got {epsilon}")
        if min_points < 1:
            raise ValueError(f"min_points must be >= 1, got {min_points}")
        self.epsilon = epsilon
        self.min_points = min_points
        self.distance = distance

    def fit(self, data) -> DBSCANResult:
        X = _as_data(data)
        n = X.shape[0]
        if n == 0:
            return DBSCANResult()

        dist = pairwise_distances(X, self.distance)
        visited = np.zeros(n, dtype=bool)
        assigned = np.zeros(n, dtype=bool)
        clusters: List[List[int]] = []

        for i in range(n):
            if visited[i]:
                continue
            visited[i] = True
            neighbors = self._range_query(dist, i)
            if len(neighbors) < self.min_points:
                continue
            assigned[i] = True
            clusters.append([i] + self._expand(dist, neighbors, visited, assigned))

        noise = [i for i in range(n) if not assigned[i]]
        return DBSCANResult(clusters=clusters, noise=noise)

    def _range_query(self, dist: Array2D, point: int) -> List[int]:
        within = np.flatnonzero(dist[point] < self.epsilon)
        return [int(j) for j in within if j != point]

    def _expand(
        self,
        dist: Array2D,
        neighbors: List[int],
        visited: np.ndarray,
        assigned: np.ndarray,
    ) -> List[int]:
        cluster: List[int] = []
        queue = list(neighbors)
        seen = set(queue)
        idx = 0
        while idx < len(queue):
            point = queue[idx]
            idx += 1
            if not visited[point]:
                visited[point] = True
                expanded = self._range_query(dist, point)
                if len(expanded) >= self.min_points:
                    for q in expanded:
                        if q not in seen:
                            seen.add(q)
                            queue.append(q)
            if not assigned[point]:
                assigned[point] = True
                cluster.append(point)
        return cluster


class Hierarchical:
    """
    Agglomerative (bottom-up) hierarchical clustering.

    Starts with one cluster per point and repeatedly merges the closest pair
    under the chosen linkage until ``clusters`` groups remain.

    Args:
        clusters: Number of clusters to cut the hierarchy at.
        linkage: ``"single"``, ``"complete"`` or ``"average"``.
        distance: Point distance.
    """

    def __init__(
        self,
        clusters: int = 2,
        linkage: str = "complete",
        distance: DistanceFunction = euclidean_distance,
    ):
        if clusters < 1:
            raise ValueError(f"clusters must be >= 1, got {clusters}")
        if linkage not in LINKAGES:
            raise ValueError(f"linkage must be one of {LINKAGES}, got {linkage!r}")
        self.clusters = clusters
        self.linkage = linkage
        self.distance = distance

    def fit(self, data) -> HierarchicalResult:
        X = _as_data(data)
        n = X.shape[0]
        if n == 0:
            return HierarchicalResult(clusters=[], labels=np.zeros(0, dtype=int))

        D = pairwise_distances(X, self.distance)
        np.fill_diagonal(D, np.inf)
        members = {i: [i] for i in range(n)}
        active = np.ones(n, dtype=bool)

        while len(members) > self.clusters:
            masked = np.where(active[:, None] & active[None, :], D, np.inf)
            a, b = np.unravel_index(np.argmin(masked), masked.shape)
            a, b = (int(a), int(b)) if a < b else (int(b), int(a))

            # Lance-Williams update: row a becomes the merged cluster
            if self.linkage == "single":
                merged = np.minimum(D[a], D[b])
            elif self.linkage == "complete":
                merged = np.maximum(D[a], D[b])
            else:
                size_a, size_b = len(members[a]), len(members[b])
                merged = (size_a * D[a] + size_b * D[b]) / (size_a + size_b)
            D[a, :] = merged
            D[:, a] = merged
            D[a, a] = np.inf

            members[a].extend(members.pop(b))
            active[b] = False

        labels = np.empty(n, dtype=int)
        groups = sorted(members.values(), key=min)
        for label, group in enumerate(groups):
            labels[group] = label
        clusters = [X[sorted(group)].tolist() for group in groups]
        return HierarchicalResult(clusters=clusters, labels=labels)


def partition_to_labels(communities: Sequence[Sequence[int]], n: int) -> np.ndarray:
    """
    Convert a partition (lists of node indices) into a label vector.

    Raises:
        ValueError: If a node is missing, duplicated, or out of range.
    """
    labels = np.full(n, -1, dtype=int)
    for label, members in enumerate(communities):
        for node in members:
            if not 0 <= node < n:
                raise ValueError(f"Node index {node} out of range for n={n}")
            if labels[node] != -1:
                raise ValueError(f"Node {node} appears in more than one community")
            labels[node] = label
    if np.any(labels == -1):
        missing = np.flatnonzero(labels == -1).tolist()
        raise ValueError(f"Nodes {missing} are not assigned to any community")
    return labels


def adjusted_rand_index(labels_a: np.ndarray, labels_b: np.ndarray) -> float:
    """
    Compute Adjusted Rand Index between two clusterings.

    ARI measures agreement between two clusterings, adjusted for chance.
    Returns 1.0 for identical clusterings, ~0.0 for random agreement.

    Args:
        labels_a: First clustering labels
        labels_b: Second clustering labels

    Returns:
        ARI score in [-1, 1], typically in [0, 1]
    """
    labels_a = np.asarray(labels_a)
    labels_b = np.asarray(labels_b)
    if labels_a.shape != labels_b.shape:
        raise ValueError("labels_a and labels_b must have the same length")
    n = len(labels_a)
    if n == 0:
        return 1.0
    _, a = np.unique(labels_a, return_inverse=True)
    _, b = np.unique(labels_b, return_inverse=True)

    contingency = np.zeros((a.max() + 1, b.max() + 1), dtype=np.int64)
    np.add.at(contingency, (a, b), 1)

    sum_comb = (contingency * (contingency - 1) / 2.0).sum()
    sum_comb_c = (contingency.sum(axis=1) * (contingency.sum(axis=1) - 1) / 2.0).sum()
    sum_comb_k = (contingency.sum(axis=0) * (contingency.sum(axis=0) - 1) / 2.0).sum()
    comb_n = n * (n - 1) / 2.0

    if comb_n == 0:
        return 1.0

    expected_index = (sum_comb_c * sum_comb_k) / comb_n
    max_index = 0.5 * (sum_comb_c + sum_comb_k)
    denom = max_index - expected_index
    if denom == 0:
        return 1.0
    return float((sum_comb - expected_index) / denom)
