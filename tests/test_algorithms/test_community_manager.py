"""
Tests for partition and degree bookkeeping.
"""

import pytest

from netcluster.algorithms.community_manager import CommunityManager


def test_initial_singletons():
    cm = CommunityManager(4, [1, 2, 2, 1], 3)
    assert cm.node_to_comm == [0, 1, 2, 3]
    assert cm.comm_degree == {0: 1, 1: 2, 2: 2, 3: 1}
    assert cm.community_count == 4
    assert cm.communities() == [[0], [1], [2], [3]]


def test_degrees_length_mismatch():
    with pytest.raises(ValueError, match="degrees has length"):
        CommunityManager(3, [1, 1], 1)


def test_delta_q_formula():
    """dQ = e_ab / m - deg(a) * deg(b) / (2 m^2)."""
    cm = CommunityManager(2, [1, 1], 1)
    assert cm.delta_q(0, 1, 1) == pytest.approx(0.5)

    cm = CommunityManager(3, [2, 3, 1], 3)
    assert cm.delta_q(0, 1, 2) == pytest.approx(2 / 3 - 6 / 18)


def test_merge_allocates_fresh_ids():
    cm = CommunityManager(4, [1, 2, 2, 1], 3)
    first = cm.merge_communities(0, 1)
    second = cm.merge_communities(2, 3)
    third = cm.merge_communities(first, second)

    assert (first, second, third) == (4, 5, 6)
    assert cm.node_to_comm == [6, 6, 6, 6]
    assert cm.comm_degree == {6: 6}
    for dead in (0, 1, 2, 3, 4, 5):
        assert not cm.is_active(dead)


def test_merge_conserves_degree_and_drops_one_community():
    degrees = [3, 1, 2, 2, 4]
    cm = CommunityManager(5, degrees, sum(degrees) / 2)
    total = sum(degrees)

    merged = cm.merge_communities(1, 3)
    assert sum(cm.comm_degree.values()) == total
    assert cm.community_count == 4
    assert cm.comm_degree[merged] == 3
    assert cm.node_to_comm == [0, merged, 2, merged, 4]

    cm.merge_communities(merged, 0)
    assert sum(cm.comm_degree.values()) == total
    assert cm.community_count == 3


def test_merge_rejects_self_and_dead_ids():
    cm = CommunityManager(3, [1, 1, 0], 1)
    with pytest.raises(ValueError, match="itself"):
        cm.merge_communities(1, 1)

    cm.merge_communities(0, 1)
    with pytest.raises(ValueError, match="not active"):
        cm.merge_communities(0, 2)


def test_id_counter_is_per_instance():
    """Two managers never share an id sequence."""
    a = CommunityManager(2, [1, 1], 1)
    b = CommunityManager(2, [1, 1], 1)
    assert a.merge_communities(0, 1) == 2
    assert b.merge_communities(0, 1) == 2


def test_communities_ordered_by_lowest_member():
    cm = CommunityManager(5, [1] * 5, 2.5)
    x = cm.merge_communities(3, 1)
    cm.merge_communities(4, 0)
    assert cm.communities() == [[0, 4], [1, 3], [2]]
    assert cm.is_active(x)
