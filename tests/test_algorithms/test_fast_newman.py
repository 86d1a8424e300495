"""
Tests for greedy modularity community detection.
"""

import logging

import numpy as np
import pytest

from netcluster.algorithms.fast_newman import (
    FastNewman,
    FastNewmanConfig,
    FastNewmanResult,
    ModularityStep,
)


def _assert_valid_partition(communities, n):
    nodes = sorted(node for members in communities for node in members)
    assert nodes == list(range(n))


# ------------------------------------------------------------------
# Reference scenarios
# ------------------------------------------------------------------


def test_two_disjoint_triangles(two_triangles):
    """Each triangle collapses into one community; the two never merge."""
    result = FastNewman().fit(two_triangles)

    assert isinstance(result, FastNewmanResult)
    assert sorted(sorted(c) for c in result.communities) == [[0, 1, 2], [3, 4, 5]]
    assert result.n_merges == 4
    assert len(result.modularity_history) == 5
    assert result.modularity == pytest.approx(0.5)
    # The final step is the best one and no cross-triangle merge happened
    assert len(result.modularity_history[-1].communities) == 2


def test_single_edge(single_edge):
    """n=2, m=1: Q0 = -0.5, one merge of gain 0.5, best Q = 0."""
    result = FastNewman().fit(single_edge)

    history = result.modularity_history
    assert len(history) == 2
    assert history[0].q == pytest.approx(-0.5)
    assert history[0].communities == [[0], [1]]
    assert history[1].q == pytest.approx(0.0)
    assert history[1].communities == [[0, 1]]
    assert result.n_merges == 1
    assert result.modularity == pytest.approx(0.0)
    assert result.communities == [[0, 1]]


def test_edgeless_graph(edgeless):
    """No edges: a single singleton step scored 0 and no merges."""
    result = FastNewman().fit(edgeless)

    assert result.n_merges == 0
    assert len(result.modularity_history) == 1
    assert result.modularity_history[0].q == 0.0
    assert result.modularity_history[0].communities == [[i] for i in range(5)]
    assert result.communities == [[i] for i in range(5)]
    assert result.modularity == 0.0


def test_ring_of_cliques_recovers_cliques(ring_of_cliques):
    result = FastNewman().fit(ring_of_cliques)
    expected = [[4 * k + i for i in range(4)] for k in range(4)]
    assert sorted(sorted(c) for c in result.communities) == expected


# ------------------------------------------------------------------
# Trajectory invariants
# ------------------------------------------------------------------


@pytest.mark.parametrize(
    "fixture_name", ["two_triangles", "ring_of_cliques", "weighted_random_graph"]
)
def test_history_invariants(request, modularity, fixture_name):
    A = np.asarray(request.getfixturevalue(fixture_name), dtype=float)
    n = A.shape[0]
    result = FastNewman().fit(A)
    history = result.modularity_history

    # Termination bound and one history step per accepted merge
    assert result.n_merges <= n - 1
    assert len(history) == result.n_merges + 1

    for k, step in enumerate(history):
        assert isinstance(step, ModularityStep)
        _assert_valid_partition(step.communities, n)
        # Each merge reduces the community count by exactly one
        assert len(step.communities) == n - k
        # Running score matches modularity recomputed from scratch
        assert step.q == pytest.approx(modularity(A, step.communities), abs=1e-9)

    # Monotonic acceptance: every accepted gain is strictly positive
    for prev, curr in zip(history, history[1:]):
        assert curr.q > prev.q

    assert result.modularity == pytest.approx(max(step.q for step in history))


def test_best_is_first_occurrence_on_ties():
    """When two steps share the best score, the earlier one is returned."""
    history = [
        ModularityStep(q=-0.2, communities=[[0], [1], [2]]),
        ModularityStep(q=0.3, communities=[[0, 1], [2]]),
        ModularityStep(q=0.3, communities=[[0, 1, 2]]),
    ]
    result = FastNewman._build_result(history, n_merges=2)
    assert result.communities == [[0, 1], [2]]
    assert result.modularity == 0.3


def test_target_community_count_stops_early(ring_of_cliques):
    result = FastNewman(FastNewmanConfig(number_of_communities=10)).fit(ring_of_cliques)
    assert len(result.modularity_history[-1].communities) == 10
    assert result.n_merges == 6


def test_target_reached_before_any_merge(two_triangles):
    result = FastNewman(FastNewmanConfig(number_of_communities=6)).fit(two_triangles)
    assert result.n_merges == 0
    assert len(result.modularity_history) == 1


def test_invalid_target_count():
    with pytest.raises(ValueError, match="number_of_communities must be >= 1"):
        FastNewmanConfig(number_of_communities=0)


def test_multiplicities_act_as_weights(modularity):
    """A heavier edge is merged first and scores are computed with weights."""
    A = np.array(
        [
            [0, 3, 1, 0],
            [3, 0, 0, 1],
            [1, 0, 0, 3],
            [0, 1, 3, 0],
        ],
        dtype=float,
    )
    result = FastNewman().fit(A)
    assert sorted(sorted(c) for c in result.communities) == [[0, 1], [2, 3]]
    assert result.modularity == pytest.approx(modularity(A, [[0, 1], [2, 3]]))


def test_self_loops_count_towards_degree(modularity):
    """Row sums include the diagonal: degrees 3 and 1, m = 2."""
    A = [[2, 1], [1, 0]]
    history = FastNewman().fit(A).modularity_history

    assert history[0].q == pytest.approx(-((3 / 4) ** 2 + (1 / 4) ** 2))
    assert len(history) == 2
    assert history[1].communities == [[0, 1]]
    assert history[1].q == pytest.approx(modularity(A, [[0, 1]]))


def test_self_loops_never_become_candidates(two_triangles, modularity):
    with_loops = two_triangles.copy()
    np.fill_diagonal(with_loops, 2)
    result = FastNewman().fit(with_loops)

    assert result.n_merges == 4
    assert sorted(sorted(c) for c in result.communities) == [[0, 1, 2], [3, 4, 5]]
    for step in result.modularity_history:
        assert step.q == pytest.approx(modularity(with_loops, step.communities), abs=1e-9)


def test_stale_candidates_are_discarded(two_triangles, caplog):
    """
    Merging a triangle's first pair leaves its two other seeded pairs in the
    heap pointing at dead ids. Both triangles do this, and nothing else is
    left to merge, so exactly four stale entries get popped and dropped.
    """
    caplog.set_level(logging.DEBUG, logger="netcluster.algorithms.fast_newman")
    result = FastNewman().fit(two_triangles)

    discarded = [r for r in caplog.records if r.getMessage().startswith("Discarding stale candidate")]
    assert len(discarded) == 4
    assert result.n_merges == 4
    assert sorted(sorted(c) for c in result.communities) == [[0, 1, 2], [3, 4, 5]]


def test_tie_free_best_score_independent_of_node_order(weighted_random_graph):
    """Relabelling nodes changes heap layout but not the best score."""
    A = weighted_random_graph
    perm = np.random.default_rng(3).permutation(A.shape[0])
    permuted = A[np.ix_(perm, perm)]

    original = FastNewman().fit(A)
    relabelled = FastNewman().fit(permuted)

    assert relabelled.modularity == pytest.approx(original.modularity)
    assert relabelled.n_merges == original.n_merges
    mapped = sorted(sorted(int(perm[i]) for i in c) for c in relabelled.communities)
    assert mapped == sorted(sorted(c) for c in original.communities)


def test_instance_is_reusable(two_triangles, single_edge):
    """Each fit owns its state; results do not leak between runs."""
    detector = FastNewman()
    first = detector.fit(two_triangles)
    second = detector.fit(single_edge)
    assert len(first.modularity_history) == 5
    assert len(second.modularity_history) == 2


# ------------------------------------------------------------------
# Input handling
# ------------------------------------------------------------------


@pytest.mark.parametrize(
    "matrix",
    [
        [],
        np.zeros((0, 0)),
        [[0, 1, 0], [1, 0, 1]],
        [[0, 1], [1, 0, 0]],
        np.zeros((2, 3)),
        np.zeros(4),
    ],
)
def test_malformed_shape_returns_empty_result(matrix):
    result = FastNewman().fit(matrix)
    assert result.communities == []
    assert result.modularity_history == []
    assert result.n_merges == 0


def test_asymmetric_matrix_rejected():
    with pytest.raises(ValueError, match="symmetric"):
        FastNewman().fit([[0, 1], [0, 0]])


def test_negative_entries_rejected():
    with pytest.raises(ValueError, match="non-negative"):
        FastNewman().fit([[0, -1], [-1, 0]])


def test_non_finite_entries_rejected():
    with pytest.raises(ValueError, match="non-finite"):
        FastNewman().fit([[0, np.nan], [np.nan, 0]])


def test_accepts_nested_lists(two_triangles):
    result = FastNewman().fit(two_triangles.astype(int).tolist())
    assert result.modularity == pytest.approx(0.5)


@pytest.mark.asyncio
async def test_fit_async_matches_fit(ring_of_cliques):
    detector = FastNewman()
    async_result = await detector.fit_async(ring_of_cliques)
    sync_result = detector.fit(ring_of_cliques)
    assert async_result.modularity == pytest.approx(sync_result.modularity)
    assert len(async_result.modularity_history) == len(sync_result.modularity_history)
