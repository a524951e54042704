"""
Shared pytest fixtures for clustermatrix tests.

Provides reusable clustering data, trees, and input files for unit and
integration testing.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from clustermatrix.core.tree import ClusterTree, Leaf
from clustermatrix.models.match import Match
from tests.factories import ClusterDataFactory, ClusterDataset


# =============================================================================
# Small Hand-built Data
# =============================================================================


@pytest.fixture
def four_matches() -> dict[int, Match]:
    """Four matches A=1, B=2, C=3, D=4; D is immediate family."""
    return {
        1: Match(index=1, name="A", test_id="guid-a", shared_centimorgans=50.0),
        2: Match(index=2, name="B", test_id="guid-b", shared_centimorgans=30.0),
        3: Match(index=3, name="C", test_id="guid-c", shared_centimorgans=20.0),
        4: Match(index=4, name="D", test_id="guid-d", shared_centimorgans=250.0),
    }


@pytest.fixture
def four_leaves() -> list[Leaf]:
    """Leaves for four_matches; A links to B (1.0), C (0.5), and D (2.0)."""
    return [
        Leaf(1, {1: 2.0, 2: 1.0, 3: 0.5, 4: 2.0}),
        Leaf(2, {2: 2.0, 1: 1.0}),
        Leaf(3, {1: 1.0, 2: 1.5}),
        Leaf(4, {4: 2.0, 1: 2.0}),
    ]


@pytest.fixture
def four_assignment() -> dict[int, int]:
    return {1: 1, 2: 2, 3: 1, 4: 3}


@pytest.fixture
def nested_tree() -> ClusterTree:
    """Tree ((1,(2,3)),(4,5)) built bottom-up."""
    tree = ClusterTree()
    n1 = tree.add_leaf(1)
    n2 = tree.add_leaf(2)
    n3 = tree.add_leaf(3)
    inner = tree.add_internal([n2, n3])
    left = tree.add_internal([n1, inner])
    n4 = tree.add_leaf(4)
    n5 = tree.add_leaf(5)
    right = tree.add_internal([n4, n5])
    tree.add_internal([left, right])
    return tree


# =============================================================================
# Generated Data
# =============================================================================


@pytest.fixture
def cluster_dataset() -> ClusterDataset:
    """Three clusters of four, two distant matches, one family match."""
    return ClusterDataFactory(seed=42).create()


@pytest.fixture
def detailed_dataset() -> ClusterDataset:
    """Like cluster_dataset, with optional match details filled in."""
    return ClusterDataFactory(seed=7).create(with_details=True)


@pytest.fixture
def dataset_files(cluster_dataset: ClusterDataset, tmp_path: Path) -> dict[str, Path]:
    """cluster_dataset written to CSV and Newick files."""
    return cluster_dataset.write(tmp_path / "inputs")
