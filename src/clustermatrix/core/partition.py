"""
Partitioning of wide correlation matrices into several output files.

Spreadsheets cannot hold more than 16,384 columns. When the number of
heatmap columns exceeds the configured maximum, the columns are split into
consecutive chunks and each chunk is written to its own file. Every file
keeps the full set of rows.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from clustermatrix.core.constants import MAX_COLUMNS, MAX_COLUMNS_PER_SPLIT
from clustermatrix.core.exceptions import InvalidPartitionSizeError
from clustermatrix.core.tree import Leaf
from clustermatrix.models.match import Match

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OutputPartition:
    """One column-bounded slice of the correlation matrix.

    Attributes:
        rows: All leaves, in tree order.
        columns: Consecutive sub-range of the heatmap columns.
        file_suffix: 1-based partition number used in the file name.
    """

    rows: Sequence[Leaf]
    columns: Sequence[Match]
    file_suffix: int


def partition_count(
    num_columns: int,
    max_columns: int = MAX_COLUMNS,
    max_columns_per_split: int = MAX_COLUMNS_PER_SPLIT,
) -> int:
    """
    Number of output files for a matrix with num_columns columns.

    Above max_columns this is num_columns // max_columns_per_split + 1, which
    yields one trailing empty partition when num_columns is an exact multiple
    of max_columns_per_split.
    """
    if max_columns_per_split < 1 or max_columns_per_split > max_columns:
        raise InvalidPartitionSizeError(max_columns, max_columns_per_split)
    if num_columns <= max_columns:
        return 1
    return num_columns // max_columns_per_split + 1


def partition_columns(
    columns: Sequence[Match],
    rows: Sequence[Leaf],
    max_columns: int = MAX_COLUMNS,
    max_columns_per_split: int = MAX_COLUMNS_PER_SPLIT,
) -> list[OutputPartition]:
    """
    Split the heatmap columns into output partitions.

    Args:
        columns: Heatmap columns in display order.
        rows: Row leaves, shared unchanged by every partition.
        max_columns: Largest column count written to a single file.
        max_columns_per_split: Chunk size once max_columns is exceeded.

    Returns:
        Partitions in order, numbered from 1.

    Raises:
        InvalidPartitionSizeError: If max_columns_per_split is not in
            [1, max_columns].
    """
    count = partition_count(len(columns), max_columns, max_columns_per_split)
    if count == 1:
        return [OutputPartition(rows=rows, columns=columns, file_suffix=1)]

    partitions = [
        OutputPartition(
            rows=rows,
            columns=columns[i * max_columns_per_split:(i + 1) * max_columns_per_split],
            file_suffix=i + 1,
        )
        for i in range(count)
    ]
    logger.info(
        f"{len(columns)} columns exceed the limit of {max_columns}; "
        f"splitting into {count} files of at most {max_columns_per_split} columns"
    )
    if not partitions[-1].columns:
        logger.warning(f"Partition {count} has no columns and will only contain row details")
    return partitions


def partition_output_path(base: Path, file_suffix: int) -> Path:
    """
    Output path for a partition.

    The first partition uses the base path; later ones insert "-N" before
    the extension, e.g. clusters.xlsx -> clusters-2.xlsx.
    """
    if file_suffix <= 1:
        return base
    return base.with_name(f"{base.stem}-{file_suffix}{base.suffix}")
