"""Unit tests for splitting wide matrices into output partitions."""

from __future__ import annotations

from pathlib import Path

import pytest

from clustermatrix.core.exceptions import InvalidPartitionSizeError
from clustermatrix.core.partition import (
    partition_columns,
    partition_count,
    partition_output_path,
)
from clustermatrix.core.tree import Leaf
from clustermatrix.models.match import Match


def _columns(count: int) -> list[Match]:
    return [
        Match(index=i, name=f"M{i}", test_id=f"g{i}", shared_centimorgans=30.0)
        for i in range(count)
    ]


@pytest.fixture
def rows() -> list[Leaf]:
    return [Leaf(i) for i in range(3)]


class TestPartitionCount:
    """Tests for the partition count policy."""

    def test_at_limit_single_file(self) -> None:
        assert partition_count(16000) == 1

    def test_small_matrix_single_file(self) -> None:
        assert partition_count(0) == 1
        assert partition_count(12) == 1

    def test_just_over_limit(self) -> None:
        assert partition_count(16001) == 2

    def test_17000(self) -> None:
        assert partition_count(17000) == 2

    def test_25000(self) -> None:
        assert partition_count(25000) == 3

    def test_exact_multiple_adds_extra_partition(self) -> None:
        """20000 columns give 20000 // 10000 + 1 = 3 partitions."""
        assert partition_count(20000) == 3

    def test_invalid_split_size(self) -> None:
        with pytest.raises(InvalidPartitionSizeError):
            partition_count(10, max_columns=5, max_columns_per_split=0)
        with pytest.raises(InvalidPartitionSizeError):
            partition_count(10, max_columns=5, max_columns_per_split=6)


class TestPartitionColumns:
    """Tests for partition_columns."""

    def test_single_partition_holds_everything(self, rows: list[Leaf]) -> None:
        columns = _columns(40)
        partitions = partition_columns(columns, rows)

        assert len(partitions) == 1
        assert list(partitions[0].columns) == columns
        assert partitions[0].file_suffix == 1

    def test_25000_columns(self, rows: list[Leaf]) -> None:
        """Sizes 10000, 10000, 5000 with suffixes 1, 2, 3."""
        partitions = partition_columns(_columns(25000), rows, 16000, 10000)

        assert [len(p.columns) for p in partitions] == [10000, 10000, 5000]
        assert [p.file_suffix for p in partitions] == [1, 2, 3]

    def test_17000_columns(self, rows: list[Leaf]) -> None:
        partitions = partition_columns(_columns(17000), rows, 16000, 10000)
        assert [len(p.columns) for p in partitions] == [10000, 7000]

    def test_exact_multiple_leaves_trailing_empty_partition(self, rows: list[Leaf]) -> None:
        partitions = partition_columns(_columns(20000), rows, 16000, 10000)
        assert [len(p.columns) for p in partitions] == [10000, 10000, 0]

    def test_every_partition_has_all_rows(self, rows: list[Leaf]) -> None:
        partitions = partition_columns(_columns(25), rows, max_columns=10, max_columns_per_split=7)
        assert all(list(p.rows) == rows for p in partitions)

    def test_columns_appear_exactly_once(self, rows: list[Leaf]) -> None:
        """Consecutive chunks cover every column once, in order."""
        columns = _columns(25)
        partitions = partition_columns(columns, rows, max_columns=10, max_columns_per_split=7)

        assert [len(p.columns) for p in partitions] == [7, 7, 7, 4]
        flattened = [m.index for p in partitions for m in p.columns]
        assert flattened == [m.index for m in columns]


class TestPartitionOutputPath:
    """Tests for partition file naming."""

    def test_first_partition_unsuffixed(self) -> None:
        assert partition_output_path(Path("out/base.xlsx"), 1) == Path("out/base.xlsx")

    def test_later_partitions_suffixed(self) -> None:
        base = Path("out/base.xlsx")
        assert partition_output_path(base, 2) == Path("out/base-2.xlsx")
        assert partition_output_path(base, 3) == Path("out/base-3.xlsx")

    def test_suffix_before_last_extension(self) -> None:
        assert partition_output_path(Path("my.clusters.csv"), 2) == Path("my.clusters-2.csv")

    def test_no_extension(self) -> None:
        assert partition_output_path(Path("base"), 2) == Path("base-2")
