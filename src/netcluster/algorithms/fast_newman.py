"""
Greedy agglomerative modularity maximisation (Clauset-Newman-Moore style).

Starting from singleton communities, repeatedly merges the pair of adjacent
communities with the largest modularity gain until no merge improves
modularity or the requested number of communities is reached. Every accepted
merge is recorded so the whole trajectory can be inspected afterwards.

Pipeline:
1. Node degrees and ``m`` from the adjacency matrix
2. Community-level crossing-edge multigraph from the original edges
3. Max-heap of merge candidates, one per adjacent community pair
4. Pop / validate / merge / re-key / re-seed until done
5. Return the best-scoring partition plus the full history
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Set, Tuple, Union

import numpy as np

from ..utils.logging_config import get_logger
from .community_manager import CommunityManager
from .max_heap import MaxHeap

logger = get_logger(__name__)

AdjacencyInput = Union[np.ndarray, Sequence[Sequence[float]]]
# community id -> {neighbor community id -> crossing-edge count}
CommunityEdges = Dict[int, Dict[int, float]]


@dataclass
class MergeCandidate:
    """A potential merge of two communities and its modularity gain at insertion time."""

    delta_q: float
    comm_a: int
    comm_b: int


@dataclass
class ModularityStep:
    """One entry of the modularity trajectory."""

    q: float
    communities: List[List[int]]


@dataclass
class FastNewmanConfig:
    """Configuration for greedy modularity community detection."""

    number_of_communities: int = 1  # stop merging once this many communities remain

    def __post_init__(self):
        """Validate the target community count."""
        if self.number_of_communities < 1:
            raise ValueError(
                f"number_of_communities must be >= 1, got {self.number_of_communities}"
            )


@dataclass
class FastNewmanResult:
    """Best partition found plus the full merge trajectory."""

    communities: List[List[int]]
    modularity_history: List[ModularityStep] = field(default_factory=list)
    modularity: float = 0.0
    n_merges: int = 0


def _pair_key(a: int, b: int) -> Tuple[int, int]:
    return (a, b) if a < b else (b, a)


def _as_square_matrix(adjacency: AdjacencyInput) -> Optional[np.ndarray]:
    """
    Convert *adjacency* to a float matrix, or return ``None`` if it is not a
    non-empty square matrix.

    Raises:
        ValueError: If entries are negative or non-finite, or the matrix is
            not symmetric.
    """
    if isinstance(adjacency, np.ndarray):
        if adjacency.ndim != 2:
            return None
        A = adjacency.astype(np.float64, copy=False)
    else:
        rows = list(adjacency)
        n = len(rows)
        if any(len(row) != n for row in rows):
            return None
        A = np.asarray(rows, dtype=np.float64).reshape(n, n)

    n_rows, n_cols = A.shape
    if n_rows == 0 or n_rows != n_cols:
        return None

    if not np.all(np.isfinite(A)):
        raise ValueError("Adjacency matrix contains non-finite entries")
    if np.any(A < 0):
        raise ValueError("Adjacency matrix entries must be non-negative edge multiplicities")
    if not np.allclose(A, A.T):
        raise ValueError("Adjacency matrix must be symmetric (undirected graph)")
    return A


class FastNewman:
    """
    Greedy modularity community detection.

    Each call to :meth:`fit` owns its own community manager, candidate heap
    and coarsened multigraph, so one instance can be reused for many graphs.

    Equal-gain candidates are popped in whatever order the heap yields them;
    on graphs with ties the sequence of merges (and so which of several
    equally good partitions is returned) is not canonical.

    Args:
        cfg: Detection configuration. Defaults to ``FastNewmanConfig()``.
    """

    def __init__(self, cfg: Optional[FastNewmanConfig] = None):
        self.cfg = cfg if cfg is not None else FastNewmanConfig()

    async def fit_async(self, adjacency_matrix: AdjacencyInput) -> FastNewmanResult:
        """Awaitable wrapper around :meth:`fit`; runs synchronously."""
        return self.fit(adjacency_matrix)

    def fit(self, adjacency_matrix: AdjacencyInput) -> FastNewmanResult:
        """
        Detect communities in an undirected graph.

        Args:
            adjacency_matrix: Symmetric ``(n, n)`` matrix of non-negative edge
                multiplicities. Diagonal entries (self-loops) count towards
                their node's degree but never become merge candidates.

        Returns:
            FastNewmanResult with the best partition (lists of node indices)
            and the modularity history, one step for the singleton partition
            plus one per accepted merge. A non-square or empty matrix yields
            a result with no communities and an empty history.

        Raises:
            ValueError: If the matrix is asymmetric or has negative or
                non-finite entries.
        """
        A = _as_square_matrix(adjacency_matrix)
        if A is None:
            logger.warning("Adjacency matrix is empty or not square; returning no communities")
            return FastNewmanResult(communities=[])

        n = A.shape[0]
        degrees = A.sum(axis=1)
        edge_count = float(degrees.sum()) / 2.0
        cm = CommunityManager(n, degrees.tolist(), edge_count)
        history: List[ModularityStep] = []

        logger.info(
            "Starting greedy modularity: n=%d, m=%g, target=%d",
            n, edge_count, self.cfg.number_of_communities,
        )

        if edge_count == 0:
            history.append(ModularityStep(q=0.0, communities=cm.communities()))
            logger.info("Graph has no edges; nothing to merge")
            return self._build_result(history, n_merges=0)

        comm_edges = self._build_community_edges(A, cm)
        heap = self._seed_heap(comm_edges, cm)

        current_q = self._initial_modularity(cm)
        history.append(ModularityStep(q=current_q, communities=cm.communities()))

        n_merges = 0
        stop_reason = "candidate queue exhausted"
        while heap.size() > 0:
            if cm.community_count <= self.cfg.number_of_communities:
                stop_reason = "target community count reached"
                break

            candidate = heap.extract_max()
            if candidate.delta_q <= 0:
                stop_reason = "no positive modularity gain remains"
                break
            if not (cm.is_active(candidate.comm_a) and cm.is_active(candidate.comm_b)):
                logger.debug(
                    "Discarding stale candidate (%d, %d)", candidate.comm_a, candidate.comm_b
                )
                continue

            merged_id = cm.merge_communities(candidate.comm_a, candidate.comm_b)
            n_merges += 1
            current_q += candidate.delta_q
            history.append(ModularityStep(q=current_q, communities=cm.communities()))
            logger.debug(
                "Merged %d + %d -> %d (dQ=%.6f, Q=%.6f)",
                candidate.comm_a, candidate.comm_b, merged_id, candidate.delta_q, current_q,
            )

            new_neighbors = self._rekey(comm_edges, candidate.comm_a, candidate.comm_b, merged_id)
            for nbr, edges_between in new_neighbors.items():
                heap.insert(
                    MergeCandidate(
                        delta_q=cm.delta_q(merged_id, nbr, edges_between),
                        comm_a=merged_id,
                        comm_b=nbr,
                    )
                )

        result = self._build_result(history, n_merges)
        logger.info(
            "Stopped after %d merges (%s); best Q=%.6f with %d communities",
            n_merges, stop_reason, result.modularity, len(result.communities),
        )
        return result

    @staticmethod
    def _build_community_edges(A: np.ndarray, cm: CommunityManager) -> CommunityEdges:
        """Crossing-edge counts between communities, visiting each undirected edge once."""
        comm_edges: CommunityEdges = {}
        rows, cols = np.nonzero(np.triu(A, k=1))
        for node, neighbor in zip(rows.tolist(), cols.tolist()):
            comm_a = cm.node_to_comm[node]
            comm_b = cm.node_to_comm[neighbor]
            if comm_a == comm_b:
                continue
            weight = float(A[node, neighbor])
            edges_a = comm_edges.setdefault(comm_a, {})
            edges_b = comm_edges.setdefault(comm_b, {})
            edges_a[comm_b] = edges_a.get(comm_b, 0.0) + weight
            edges_b[comm_a] = edges_b.get(comm_a, 0.0) + weight
        return comm_edges

    @staticmethod
    def _seed_heap(comm_edges: CommunityEdges, cm: CommunityManager) -> MaxHeap[MergeCandidate]:
        """One candidate per unordered pair of adjacent communities."""
        heap: MaxHeap[MergeCandidate] = MaxHeap(key="delta_q")
        inserted: Set[Tuple[int, int]] = set()
        for comm, neighbor_map in comm_edges.items():
            for nbr, edges_between in neighbor_map.items():
                key = _pair_key(comm, nbr)
                if key in inserted:
                    continue
                inserted.add(key)
                heap.insert(
                    MergeCandidate(
                        delta_q=cm.delta_q(comm, nbr, edges_between),
                        comm_a=comm,
                        comm_b=nbr,
                    )
                )
        return heap

    @staticmethod
    def _rekey(comm_edges: CommunityEdges, comm_a: int, comm_b: int, merged_id: int) -> Dict[int, float]:
        """
        Fold the neighbor maps of *comm_a* and *comm_b* into *merged_id*.

        Neighbors shared by both sides get their counts summed; the entry
        linking the merged pair to each other is dropped. Each neighbor's own
        map is repointed at *merged_id*.
        """
        new_neighbors: Dict[int, float] = {}
        for old_comm in (comm_a, comm_b):
            for nbr, count in comm_edges.pop(old_comm, {}).items():
                if nbr == comm_a or nbr == comm_b:
                    continue
                new_neighbors[nbr] = new_neighbors.get(nbr, 0.0) + count
                neighbor_map = comm_edges.get(nbr)
                if neighbor_map is not None:
                    neighbor_map.pop(comm_a, None)
                    neighbor_map.pop(comm_b, None)
                    neighbor_map[merged_id] = neighbor_map.get(merged_id, 0.0) + count
        comm_edges[merged_id] = new_neighbors
        return new_neighbors

    @staticmethod
    def _initial_modularity(cm: CommunityManager) -> float:
        """
        Modularity of the all-singleton partition.

        No community has internal edges yet, so Q = -sum((deg(c) / 2m) ** 2).
        """
        two_m = 2 * cm.total_edges
        return -sum((deg / two_m) ** 2 for deg in cm.comm_degree.values())

    @staticmethod
    def _build_result(history: List[ModularityStep], n_merges: int) -> FastNewmanResult:
        best = history[0]
        for step in history[1:]:
            if step.q > best.q:
                best = step
        return FastNewmanResult(
            communities=best.communities,
            modularity_history=history,
            modularity=best.q,
            n_merges=n_merges,
        )
