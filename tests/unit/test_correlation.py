"""Unit tests for correlated cluster lookup."""

from __future__ import annotations

import pytest

from clustermatrix.core.correlation import CorrelatedClusterResolver, correlated_clusters
from clustermatrix.core.match_filter import immediate_family_indexes
from clustermatrix.core.tree import Leaf, resolve_leaf_order
from clustermatrix.models.match import Match
from tests.factories import ClusterDataFactory, ClusterDataset


class TestCorrelatedClusters:
    """Tests for correlated_clusters."""

    def test_reference_example(
        self,
        four_leaves: list[Leaf],
        four_matches: dict[int, Match],
        four_assignment: dict[int, int],
    ) -> None:
        """B counts; C is in the same cluster and below 1; D is family."""
        family = immediate_family_indexes(four_matches)
        assert family == frozenset({4})

        result = correlated_clusters(four_leaves[0], four_leaves, four_assignment, family)
        assert result == [2]

    def test_sorted_and_distinct(self) -> None:
        leaf = Leaf(0, {1: 1.0, 2: 2.0, 3: 1.0, 4: 1.5})
        leaves = [leaf] + [Leaf(i) for i in range(1, 5)]
        assignment = {0: 9, 1: 5, 2: 3, 3: 5, 4: 1}
        assert correlated_clusters(leaf, leaves, assignment, frozenset()) == [1, 3, 5]

    def test_unassigned_neighbors_dropped(self) -> None:
        leaf = Leaf(0, {1: 2.0, 2: 2.0})
        leaves = [leaf, Leaf(1), Leaf(2)]
        assert correlated_clusters(leaf, leaves, {0: 1, 2: 4}, frozenset()) == [4]

    def test_unassigned_leaf_lists_all_neighbor_clusters(self) -> None:
        """A leaf with no cluster of its own reports every neighbor's cluster."""
        leaf = Leaf(0, {0: 2.0, 1: 1.0, 2: 1.0})
        leaves = [leaf, Leaf(1), Leaf(2)]
        assert correlated_clusters(leaf, leaves, {1: 1, 2: 2}, frozenset()) == [1, 2]

    def test_only_tree_leaves_count(self) -> None:
        """Coordinates pointing outside the leaf set are ignored."""
        leaf = Leaf(0, {1: 1.0, 50: 2.0})
        leaves = [leaf, Leaf(1)]
        assert correlated_clusters(leaf, leaves, {1: 2, 50: 3}, frozenset()) == [2]

    def test_no_symmetry_assumed(self) -> None:
        """Only the inspected leaf's own coordinates matter."""
        a = Leaf(0, {})
        b = Leaf(1, {0: 2.0})
        assignment = {0: 1, 1: 2}
        assert correlated_clusters(a, [a, b], assignment, frozenset()) == []
        assert correlated_clusters(b, [a, b], assignment, frozenset()) == [1]

    def test_custom_minimum(self) -> None:
        leaf = Leaf(0, {1: 0.5})
        leaves = [leaf, Leaf(1)]
        assert correlated_clusters(leaf, leaves, {1: 2}, frozenset(), correlation_min=0.5) == [2]


class TestCorrelatedClusterResolver:
    """Tests for the sparse, cached resolver."""

    def test_reference_example(
        self,
        four_leaves: list[Leaf],
        four_matches: dict[int, Match],
        four_assignment: dict[int, int],
    ) -> None:
        resolver = CorrelatedClusterResolver(
            four_leaves, four_assignment, immediate_family_indexes(four_matches)
        )
        assert resolver.resolve(four_leaves[0]) == [2]

    @pytest.mark.parametrize("seed", [1, 2, 3])
    def test_agrees_with_exhaustive_lookup(self, seed: int) -> None:
        """Sparse lookup gives the same answer as scanning every leaf."""
        dataset = ClusterDataFactory(seed=seed).create(num_clusters=4, cluster_size=5)
        leaves = resolve_leaf_order(dataset.tree())
        family = immediate_family_indexes(dataset.matches)
        resolver = CorrelatedClusterResolver(leaves, dataset.assignment, family)

        for leaf in leaves:
            expected = correlated_clusters(leaf, leaves, dataset.assignment, family)
            assert resolver.resolve(leaf) == expected

    def test_generated_links(self, cluster_dataset: ClusterDataset) -> None:
        """Weak links to the next cluster count; sub-threshold links do not."""
        leaves = resolve_leaf_order(cluster_dataset.tree())
        family = immediate_family_indexes(cluster_dataset.matches)
        resolver = CorrelatedClusterResolver(leaves, cluster_dataset.assignment, family)
        by_index = {leaf.index: leaf for leaf in leaves}
        first, second, third = (group[0] for group in cluster_dataset.groups[:3])

        assert resolver.resolve(by_index[first]) == [2]
        assert resolver.resolve(by_index[second]) == [3]
        assert resolver.resolve(by_index[third]) == []
        for distant in cluster_dataset.distant:
            assert resolver.resolve(by_index[distant]) == [1]

    def test_results_are_cached(self) -> None:
        leaf = Leaf(0, {1: 1.0})
        resolver = CorrelatedClusterResolver([leaf, Leaf(1)], {1: 2}, frozenset())
        assert resolver.resolve(leaf) is resolver.resolve(leaf)
