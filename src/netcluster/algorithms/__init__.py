"""
Algorithm core library - greedy modularity community detection plus the
numeric routines that feed it or consume its output.

Designed for reuse and testing: every routine takes plain matrices/arrays and
returns dataclass results.
"""

from .max_heap import MaxHeap
from .community_manager import CommunityManager
from .fast_newman import (
    FastNewman,
    FastNewmanConfig,
    FastNewmanResult,
    MergeCandidate,
    ModularityStep,
)
from .page_rank import PageRank, PageRankResult
from .distance import (
    DistanceFunction,
    euclidean_distance,
    squared_euclidean_distance,
    manhattan_distance,
    levenshtein_distance,
    pairwise_distances,
)
from .clustering import (
    KMeans,
    KMeansResult,
    DBSCAN,
    DBSCANResult,
    Hierarchical,
    HierarchicalResult,
    adjusted_rand_index,
    partition_to_labels,
)
from .dimensionality_reduction import (
    PCA,
    PCAResult,
    SammonMapping,
    SammonMappingResult,
    TSNE,
    TSNEResult,
)

__all__ = [
    # Community detection
    "MaxHeap",
    "CommunityManager",
    "FastNewman",
    "FastNewmanConfig",
    "FastNewmanResult",
    "MergeCandidate",
    "ModularityStep",
    # Network ranking
    "PageRank",
    "PageRankResult",
    # Distances
    "DistanceFunction",
    "euclidean_distance",
    "squared_euclidean_distance",
    "manhattan_distance",
    "levenshtein_distance",
    "pairwise_distances",
    # Clustering
    "KMeans",
    "KMeansResult",
    "DBSCAN",
    "DBSCANResult",
    "Hierarchical",
    "HierarchicalResult",
    "adjusted_rand_index",
    "partition_to_labels",
    # Dimensionality reduction
    "PCA",
    "PCAResult",
    "SammonMapping",
    "SammonMappingResult",
    "TSNE",
    "TSNEResult",
]
