"""
Correlated cluster lookup.

For each match, lists the other clusters it correlates with: the clusters of
every match it has a correlation value of at least 1 against, excluding its
own cluster, unassigned matches, and immediate family.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence, Set

from clustermatrix.core.constants import CORRELATION_MIN
from clustermatrix.core.tree import Leaf


def correlated_clusters(
    leaf: Leaf,
    all_leaves: Sequence[Leaf],
    assignment: Mapping[int, int],
    immediate_family: Set[int],
    correlation_min: float = CORRELATION_MIN,
) -> list[int]:
    """
    Clusters correlated with a leaf.

    Args:
        leaf: Leaf to inspect.
        all_leaves: Every leaf of the tree.
        assignment: Cluster number per leaf index; absent means unassigned.
        immediate_family: Indices excluded from the lookup.
        correlation_min: Smallest coordinate value counted as a correlation.

    Returns:
        Distinct cluster numbers in ascending order.
    """
    own_cluster = assignment.get(leaf.index, 0)
    clusters = set()
    for other in all_leaves:
        if other.index == leaf.index or other.index in immediate_family:
            continue
        if leaf.coord(other.index) < correlation_min:
            continue
        cluster = assignment.get(other.index, 0)
        if cluster != 0 and cluster != own_cluster:
            clusters.add(cluster)
    return sorted(clusters)


class CorrelatedClusterResolver:
    """Resolve correlated clusters for many leaves of the same tree.

    Walks each leaf's sparse coordinates instead of every other leaf, which
    gives the same result as correlated_clusters() at a cost proportional to
    the number of correlations. Results are cached per leaf index because
    every output partition repeats the full set of rows.
    """

    def __init__(
        self,
        all_leaves: Sequence[Leaf],
        assignment: Mapping[int, int],
        immediate_family: Set[int],
        correlation_min: float = CORRELATION_MIN,
    ) -> None:
        self._leaf_indexes = frozenset(leaf.index for leaf in all_leaves)
        self._assignment = assignment
        self._immediate_family = immediate_family
        self._correlation_min = correlation_min
        self._cache: dict[int, list[int]] = {}

    def resolve(self, leaf: Leaf) -> list[int]:
        cached = self._cache.get(leaf.index)
        if cached is not None:
            return cached

        own_cluster = self._assignment.get(leaf.index, 0)
        clusters = set()
        for other_index, value in leaf.coords.items():
            if (
                other_index == leaf.index
                or value < self._correlation_min
                or other_index not in self._leaf_indexes
                or other_index in self._immediate_family
            ):
                continue
            cluster = self._assignment.get(other_index, 0)
            if cluster != 0 and cluster != own_cluster:
                clusters.add(cluster)

        result = sorted(clusters)
        self._cache[leaf.index] = result
        return result
