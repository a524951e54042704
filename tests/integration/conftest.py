"""Shared conftest for integration tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from tests.factories import ClusterDataFactory


@pytest.fixture
def wide_dataset_files(tmp_path: Path) -> dict[str, Path]:
    """Input files for 6 clusters of 5, enough columns to force a split."""
    dataset = ClusterDataFactory(seed=5).create(num_clusters=6, cluster_size=5)
    return dataset.write(tmp_path / "wide")
