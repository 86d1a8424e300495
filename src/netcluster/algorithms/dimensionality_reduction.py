"""
Dimensionality reduction for point clouds.

Provides PCA, Sammon mapping and t-SNE.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Union
import numpy as np

from ..config import resolve_seed
from ..utils.logging_config import get_logger
from .distance import (
    DistanceFunction,
    euclidean_distance,
    pairwise_distances,
    squared_euclidean_distance,
)

logger = get_logger(__name__)

Array2D = np.ndarray


@dataclass
class PCAResult:
    """Projection plus the fitted principal axes."""

    projection: List[List[float]] = field(default_factory=list)
    components: List[List[float]] = field(default_factory=list)  # (k, n_features)
    eigenvalues: List[float] = field(default_factory=list)
    explained_variance: List[float] = field(default_factory=list)


@dataclass
class SammonMappingResult:
    projection: List[List[float]] = field(default_factory=list)
    stress: float = 0.0


@dataclass
class TSNEResult:
    embedding: List[List[float]] = field(default_factory=list)


class PCA:
    """
    Principal Component Analysis via SVD of the centered (optionally scaled) data.

    Args:
        projection_dimension: Number of principal components to keep.
        center: Subtract the per-feature mean before fitting.
        scale: Divide by the per-feature standard deviation after centering.
    """

    def __init__(self, projection_dimension: int = 2, center: bool = True, scale: bool = False):
        if projection_dimension < 1:
            raise ValueError(f"projection_dimension must be >= 1, got {projection_dimension}")
        self.projection_dimension = projection_dimension
        self.center = center
        self.scale = scale

        self.means_: Optional[np.ndarray] = None
        self.std_devs_: Optional[np.ndarray] = None
        self.components_: Optional[np.ndarray] = None

    def fit(self, data) -> PCAResult:
        """
        Fit the principal axes on *data* and return its projection.

        Args:
            data: ``(n_samples, n_features)`` array-like.
        """
        X = np.asarray(data, dtype=np.float64)
        if X.size == 0:
            return PCAResult()
        if X.ndim != 2:
            raise ValueError(f"data must be 2-D (n_samples, n_features), got shape {X.shape}")

        n_samples, n_features = X.shape
        dof = max(n_samples - 1, 1)

        self.means_ = X.mean(axis=0) if self.center else np.zeros(n_features)
        Xt = X - self.means_
        if self.scale:
            self.std_devs_ = np.sqrt(np.sum(Xt ** 2, axis=0) / dof)
        else:
            self.std_devs_ = np.ones(n_features)
        Xt = Xt / np.where(self.std_devs_ == 0, 1.0, self.std_devs_)

        # Xt = U S Vt: rows of Vt are the principal axes and S**2 / dof the
        # covariance eigenvalues, already sorted in descending order
        _, S, Vt = np.linalg.svd(Xt, full_matrices=False)
        eigenvalues = S ** 2 / dof

        k = min(self.projection_dimension, Vt.shape[0])
        self.components_ = Vt[:k]
        total_var = eigenvalues.sum()
        kept = eigenvalues[:k]
        explained = kept / total_var if total_var > 0 else np.zeros(k)

        return PCAResult(
            projection=self.transform(X),
            components=self.components_.tolist(),
            eigenvalues=kept.tolist(),
            explained_variance=explained.tolist(),
        )

    def transform(self, data) -> List[List[float]]:
        """Project *data* with the means, scales and axes learned by :meth:`fit`."""
        if self.components_ is None:
            raise RuntimeError("PCA.transform called before fit")
        X = np.asarray(data, dtype=np.float64)
        if X.size == 0:
            return []
        std = np.where(self.std_devs_ == 0, 1.0, self.std_devs_)
        return (((X - self.means_) / std) @ self.components_.T).tolist()


class SammonMapping:
    """
    Sammon's non-linear mapping.

    Minimises Sammon stress with the classic pseudo-Newton update
    ``y -= learning_rate * dE/dy / |d2E/dy2|``. Pairs at zero distance in
    either space are left out of the derivatives.

    Args:
        max_iterations: Number of update sweeps.
        learning_rate: Step size ("magic factor").
        projection_dimension: Output dimensionality.
        seed: Seed for the random initial layout (falls back to
            ``NETCLUSTER_RANDOM_SEED``).
        distance: Distance used in both spaces.
    """

    def __init__(
        self,
        max_iterations: int = 20,
        learning_rate: float = 0.3,
        projection_dimension: int = 2,
        seed: Optional[int] = None,
        distance: DistanceFunction = euclidean_distance,
    ):
        if projection_dimension < 1:
            raise ValueError(f"projection_dimension must be >= 1, got {projection_dimension}")
        self.max_iterations = max_iterations
        self.learning_rate = learning_rate
        self.projection_dimension = projection_dimension
        self.seed = seed
        self.distance = distance

    def fit(self, data) -> SammonMappingResult:
        X = np.asarray(data, dtype=np.float64)
        n = X.shape[0] if X.ndim == 2 else 0
        if n == 0:
            return SammonMappingResult()

        d_star = pairwise_distances(X, self.distance)
        c = float(np.triu(d_star, k=1).sum())
        rng = np.random.default_rng(resolve_seed(self.seed))
        Y = rng.random((n, self.projection_dimension))
        if c == 0:
            logger.debug("All points coincide; Sammon mapping returns the initial layout")
            return SammonMappingResult(projection=Y.tolist(), stress=0.0)

        off_diag = ~np.eye(n, dtype=bool)
        for _ in range(self.max_iterations):
            d_proj = pairwise_distances(Y, self.distance)
            valid = off_diag & (d_star > 0) & (d_proj > 0)
            safe_star = np.where(valid, d_star, 1.0)
            safe_proj = np.where(valid, d_proj, 1.0)

            base = np.where(valid, 1.0 / (safe_star * safe_proj), 0.0)
            gap = np.where(valid, d_star - d_proj, 0.0)
            coord_diff = Y[:, None, :] - Y[None, :, :]  # (n, n, dim)

            first = (-2.0 / c) * np.einsum("pj,pjq->pq", base * gap, coord_diff)
            curvature = base * (1.0 + gap / safe_proj) / safe_proj
            second = (-2.0 / c) * (
                (base * gap).sum(axis=1)[:, None]
                - np.einsum("pj,pjq->pq", curvature, coord_diff ** 2)
            )
            Y = Y - self.learning_rate * first / (np.abs(second) + 1e-12)

        return SammonMappingResult(projection=Y.tolist(), stress=self._stress(d_star, Y, c))

    def _stress(self, d_star: Array2D, Y: Array2D, c: float) -> float:
        d_proj = pairwise_distances(Y, self.distance)
        upper = np.triu(np.ones_like(d_star, dtype=bool), k=1) & (d_star > 0)
        return float(np.sum((d_star[upper] - d_proj[upper]) ** 2 / d_star[upper]) / c)


class TSNE:
    """
    t-Distributed Stochastic Neighbor Embedding.

    Gradient descent uses momentum plus per-coordinate adaptive gains: a
    coordinate's gain grows while its gradient keeps pointing the same way
    and shrinks when the step overshoots.

    Args:
        dimension: Output dimensionality.
        perplexity: Target perplexity of each conditional distribution.
        learning_rate: Gradient step size, or ``"auto"`` for
            ``max(n / early_exaggeration / 4, 50)``.
        max_iterations: Total gradient descent iterations.
        early_exaggeration: Factor applied to P during the first stage.
        early_exaggeration_iter: Length of the exaggerated stage.
        seed: Seed for the random initial embedding (falls back to
            ``NETCLUSTER_RANDOM_SEED``).
        distance: High-dimensional distance (squared Euclidean by default).
    """

    MOMENTUM_SWITCH_ITER = 250
    MIN_GAIN = 0.01

    def __init__(
        self,
        dimension: int = 2,
        perplexity: float = 30,
        learning_rate: Union[float, str] = 200,
        max_iterations: int = 1000,
        early_exaggeration: float = 12,
        early_exaggeration_iter: int = 250,
        seed: Optional[int] = None,
        distance: DistanceFunction = squared_euclidean_distance,
    ):
        if perplexity <= 0:
            raise ValueError(f"perplexity must be > 0, got {perplexity}")
        if isinstance(learning_rate, str):
            if learning_rate != "auto":
                raise ValueError(f"learning_rate must be a number or 'auto', got {learning_rate!r}")
        elif learning_rate <= 0:
            raise ValueError(f"learning_rate must be > 0, got {learning_rate}")
        self.dimension = dimension
        self.perplexity = perplexity
        self.learning_rate = learning_rate
        self.max_iterations = max_iterations
        self.early_exaggeration = early_exaggeration
        self.early_exaggeration_iter = early_exaggeration_iter
        self.seed = seed
        self.distance = distance

    def fit(self, data) -> TSNEResult:
        X = np.asarray(data, dtype=np.float64)
        n = X.shape[0] if X.ndim == 2 else 0
        if n == 0:
            return TSNEResult()
        if n == 1:
            return TSNEResult(embedding=[[0.0] * self.dimension])

        P = self._joint_probabilities(pairwise_distances(X, self.distance))
        rng = np.random.default_rng(resolve_seed(self.seed))
        Y = (rng.random((n, self.dimension)) - 0.5) * 1e-3
        velocity = np.zeros_like(Y)
        gains = np.ones_like(Y)
        learning_rate = self._effective_learning_rate(n)

        stage_one = min(self.early_exaggeration_iter, self.max_iterations)
        P_exag = P * self.early_exaggeration
        for iteration in range(self.max_iterations):
            target = P_exag if iteration < stage_one else P
            self._gradient_step(Y, velocity, gains, target, iteration, learning_rate)

        return TSNEResult(embedding=Y.tolist())

    def _effective_learning_rate(self, n: int) -> float:
        if self.learning_rate == "auto":
            return max(n / self.early_exaggeration / 4.0, 50.0)
        return float(self.learning_rate)

    def _gradient_step(
        self,
        Y: Array2D,
        velocity: Array2D,
        gains: Array2D,
        P: Array2D,
        iteration: int,
        learning_rate: float,
    ) -> None:
        momentum = 0.5 if iteration < self.MOMENTUM_SWITCH_ITER else 0.8

        sq = np.sum(Y ** 2, axis=1)
        emb_dist = np.maximum(sq[:, None] + sq[None, :] - 2.0 * (Y @ Y.T), 0.0)
        num = 1.0 / (1.0 + emb_dist)
        np.fill_diagonal(num, 0.0)
        Q = np.maximum(num / num.sum(), 1e-12)

        # dC/dy_i = 4 * sum_j (P_ij - Q_ij) (y_i - y_j) / (1 + |y_i - y_j|^2)
        W = 4.0 * (P - Q) * num
        grads = W.sum(axis=1)[:, None] * Y - W @ Y

        same_direction = velocity * grads < 0
        gains[same_direction] += 0.2
        gains[~same_direction] *= 0.8
        np.clip(gains, self.MIN_GAIN, None, out=gains)

        velocity *= momentum
        velocity -= learning_rate * gains * grads
        Y += velocity
        Y -= Y.mean(axis=0)

    def _joint_probabilities(self, distances: Array2D) -> Array2D:
        """
        Calibrate each row's precision by binary search so its entropy matches
        log(perplexity), then symmetrise: P_ij = (P_j|i + P_i|j) / 2n.
        """
        n = distances.shape[0]
        log_u = np.log(self.perplexity)
        conditional = np.zeros((n, n))

        for i in range(n):
            row = np.delete(distances[i], i)
            beta, beta_min, beta_max = 1.0, -np.inf, np.inf
            probs = np.exp(-row * beta)
            for _ in range(50):
                probs = np.exp(-row * beta)
                total = probs.sum()
                if total == 0:
                    # Precision too high for every neighbor; relax it
                    beta_max = beta
                    beta = beta / 2 if not np.isfinite(beta_min) else (beta + beta_min) / 2
                    continue
                p = probs / total
                nz = p > 1e-12
                entropy = -np.sum(p[nz] * np.log(p[nz]))
                diff = entropy - log_u
                if abs(diff) < 1e-5:
                    break
                if diff > 0:
                    beta_min = beta
                    beta = beta * 2 if not np.isfinite(beta_max) else (beta + beta_max) / 2
                else:
                    beta_max = beta
                    beta = beta / 2 if not np.isfinite(beta_min) else (beta + beta_min) / 2

            total = probs.sum()
            row_p = probs / total if total > 0 else np.full(n - 1, 1.0 / max(n - 1, 1))
            conditional[i] = np.insert(row_p, i, 0.0)

        return (conditional + conditional.T) / (2.0 * n)
