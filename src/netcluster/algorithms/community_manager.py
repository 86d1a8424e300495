"""
Partition and degree bookkeeping for greedy modularity optimisation.

Tracks which community every node belongs to and the aggregate degree of each
live community, computes the modularity gain of a prospective merge, and
performs merges.
"""

from __future__ import annotations

from typing import Dict, List, Sequence


class CommunityManager:
    """
    Live node -> community mapping plus per-community aggregate degree.

    Every node starts in its own singleton community whose id equals the node
    index. Each merge allocates a fresh id from a counter owned by this
    instance; ids are never reused, so a merged-away id is gone for good.

    Args:
        node_count: Number of nodes in the graph.
        degrees: Degree of each node (length ``node_count``).
        total_edges: Edge count ``m`` of the graph (half the degree sum).
    """

    def __init__(self, node_count: int, degrees: Sequence[float], total_edges: float):
        if len(degrees) != node_count:
            raise ValueError(
                f"degrees has length {len(degrees)}, expected {node_count}"
            )
        self.node_to_comm: List[int] = list(range(node_count))
        self.comm_degree: Dict[int, float] = {i: degrees[i] for i in range(node_count)}
        self.total_edges = total_edges
        self._next_comm_id = node_count

    @property
    def community_count(self) -> int:
        """Number of live communities."""
        return len(self.comm_degree)

    def is_active(self, comm: int) -> bool:
        """True if *comm* is a live community id."""
        return comm in self.comm_degree

    def delta_q(self, comm_a: int, comm_b: int, edges_between: float) -> float:
        """
        Modularity gain of merging *comm_a* and *comm_b*.

        ``edges_between / m - deg(a) * deg(b) / (2 * m**2)``. Both ids must be
        live and ``m`` must be positive; the caller checks both.
        """
        m = self.total_edges
        deg_a = self.comm_degree[comm_a]
        deg_b = self.comm_degree[comm_b]
        return edges_between / m - (deg_a * deg_b) / (2 * m * m)

    def merge_communities(self, comm_a: int, comm_b: int) -> int:
        """
        Merge two live communities into a new one and return its id.

        The new community's degree is the sum of both; every node that pointed
        at either old id is moved to the new id.

        Raises:
            ValueError: If the ids are equal or either is not live.
        """
        if comm_a == comm_b:
            raise ValueError(f"Cannot merge community {comm_a} with itself")
        for comm in (comm_a, comm_b):
            if comm not in self.comm_degree:
                raise ValueError(f"Community {comm} is not active")

        merged_id = self._next_comm_id
        self._next_comm_id += 1
        self.comm_degree[merged_id] = self.comm_degree.pop(comm_a) + self.comm_degree.pop(comm_b)

        for node, comm in enumerate(self.node_to_comm):
            if comm == comm_a or comm == comm_b:
                self.node_to_comm[node] = merged_id
        return merged_id

    def communities(self) -> List[List[int]]:
        """Current partition as lists of node indices, ordered by lowest member."""
        groups: Dict[int, List[int]] = {}
        for node, comm in enumerate(self.node_to_comm):
            groups.setdefault(comm, []).append(node)
        return list(groups.values())
