"""
Tests for the all-pairs distance cache

Author: Olivier Vitrac, PhD, HDR | olivier.vitrac@adservio.fr | Adservio | 2026-10-19
"""

import itertools
import math

import pytest

from stateviz_core.distances import UNREACHABLE, DistanceCache
from stateviz_core.state_graph import GraphBuilder, build_state_graph


@pytest.fixture
def player_graph(player_descriptor):
    return build_state_graph(player_descriptor)


class TestDistanceProperties:
    def test_reflexive(self, player_graph):
        for node in player_graph.nodes:
            assert player_graph.distance_cache.get_distance(node.id, node.id) == 0

    def test_symmetric(self, player_graph):
        cache = player_graph.distance_cache
        for a, b in itertools.product(player_graph.nodes, repeat=2):
            assert cache.get_distance(a.id, b.id) == cache.get_distance(b.id, a.id)

    def test_triangle_inequality(self, player_graph):
        cache = player_graph.distance_cache
        ids = [node.id for node in player_graph.nodes]
        for x, y, z in itertools.product(ids, repeat=3):
            assert cache.get_distance(x, z) <= cache.get_distance(x, y) + cache.get_distance(y, z)

    def test_direction_ignored(self):
        graph = GraphBuilder().build("A", [("A", "B"), ("B", "C")])
        assert graph.distance_cache.get_distance("C", "A") == 2

    def test_player_rings(self, player_graph):
        cache = player_graph.distance_cache
        assert sorted(cache.nodes_at_distance("Idle", 1)) == ["Jump", "Land", "Walk"]
        assert sorted(cache.nodes_at_distance("Idle", 2)) == ["Fall", "Run"]
        assert cache.max_finite_distance("Idle") == 2


class TestUnreachable:
    @pytest.fixture
    def split_graph(self):
        return GraphBuilder().build("A", [("A", "B"), ("C", "D")])

    def test_infinite_between_components(self, split_graph):
        cache = split_graph.distance_cache
        assert cache.get_distance("A", "D") == UNREACHABLE
        assert not cache.has_path("A", "D")
        assert cache.has_path("C", "D")

    def test_reachable_nodes_are_finite(self, split_graph):
        cache = split_graph.distance_cache
        assert math.isfinite(cache.get_distance("A", "B"))

    def test_unknown_identities(self, split_graph):
        cache = split_graph.distance_cache
        assert math.isinf(cache.get_distance("A", "Nowhere"))
        assert cache.all_distances("Nowhere") == {}
        assert cache.max_finite_distance("Nowhere") == 0
        assert "Nowhere" not in cache

    def test_max_finite_ignores_infinity(self, split_graph):
        assert split_graph.distance_cache.max_finite_distance("A") == 1


class TestDistanceCache:
    def test_all_distances_is_a_copy(self, player_graph):
        cache = player_graph.distance_cache
        row = cache.all_distances("Idle")
        row["Fall"] = 99
        assert cache.get_distance("Idle", "Fall") == 2

    def test_len_and_contains(self, player_graph):
        cache = player_graph.distance_cache
        assert len(cache) == 6
        assert "Land" in cache

    def test_self_loop_does_not_shorten(self):
        graph = GraphBuilder().build("A", [("A", "A"), ("A", "B")])
        assert graph.distance_cache.get_distance("A", "A") == 0
        assert graph.distance_cache.get_distance("A", "B") == 1

    def test_empty_cache(self):
        cache = DistanceCache()
        assert len(cache) == 0
        assert math.isinf(cache.get_distance("A", "B"))
