"""
Export of a clustered correlation matrix to one or more tabular files.

The exporter ties the pipeline together:

1. Flatten the clustering tree into ordered leaves (every leaf is a row).
2. Select the non-distant matches that become heatmap columns.
3. Split the columns into partitions when there are too many.
4. For each partition, assemble the rows on a background worker thread,
   then persist the sheet through a tabular sink on the calling thread.

Writes are serialized. When a write fails, a caller-supplied decider chooses
between retrying and aborting; aborting stops the remaining partitions while
files already written are kept.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Mapping
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Protocol

from clustermatrix.core.correlation import CorrelatedClusterResolver
from clustermatrix.core.exceptions import PersistenceError
from clustermatrix.core.match_filter import immediate_family_indexes, select_columns
from clustermatrix.core.partition import (
    OutputPartition,
    partition_columns,
    partition_output_path,
)
from clustermatrix.core.tree import ClusterTree, resolve_leaf_order
from clustermatrix.export.layout import ColumnCapabilities, TabularDocument, assemble_document
from clustermatrix.export.sinks import TabularSink, sink_for_path
from clustermatrix.models.config import ExportConfig
from clustermatrix.models.match import Match

logger = logging.getLogger(__name__)


class RetryDecision(str, Enum):
    """What to do after a failed write."""

    RETRY = "retry"
    ABORT = "abort"


RetryDecider = Callable[[PersistenceError], RetryDecision]


def abort_on_error(error: PersistenceError) -> RetryDecision:
    """Default decider: never retry."""
    return RetryDecision.ABORT


class ProgressSink(Protocol):
    """Receives export progress, one step per assembled row."""

    def reset(self, description: str, total: int) -> None: ...

    def increment(self, amount: int = 1) -> None: ...


class ProgressCounter:
    """Thread-safe progress counter.

    Can be used on its own or subclassed to forward updates, e.g. to a
    progress bar.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.description = ""
        self.total = 0
        self.completed = 0

    def reset(self, description: str, total: int) -> None:
        with self._lock:
            self.description = description
            self.total = total
            self.completed = 0

    def increment(self, amount: int = 1) -> None:
        with self._lock:
            self.completed += amount


@dataclass
class ExportResult:
    """Summary of an export run.

    Attributes:
        paths: Files written, in partition order.
        num_rows: Rows per file (tree leaves).
        num_columns: Heatmap columns across all files.
        threshold: Clusterable shared-centimorgan threshold, None when
            nothing was exported.
    """

    paths: list[Path] = field(default_factory=list)
    num_rows: int = 0
    num_columns: int = 0
    threshold: float | None = None


class CorrelationExporter:
    """
    Write a clustered correlation matrix through a tabular sink.

    Example:
        >>> exporter = CorrelationExporter(Path("clusters.xlsx"))
        >>> result = exporter.export(tree, matches_by_index, cluster_numbers)
        >>> result.paths
        [PosixPath('clusters.xlsx')]
    """

    def __init__(
        self,
        output_path: Path | str | None,
        config: ExportConfig | None = None,
        sink: TabularSink | None = None,
        progress: ProgressSink | None = None,
        on_error: RetryDecider | None = None,
    ) -> None:
        """
        Initialize the exporter.

        Args:
            output_path: Base output file. An empty or None path disables
                the export.
            config: Export configuration (defaults apply when omitted).
            sink: Tabular sink; chosen from the file extension if omitted.
            progress: Progress receiver.
            on_error: Decides whether a failed write is retried. Defaults to
                aborting on the first failure.
        """
        self.output_path = Path(output_path) if output_path else None
        self.config = config or ExportConfig()
        self._sink = sink
        self.progress = progress or ProgressCounter()
        self.on_error = on_error or abort_on_error

    @property
    def sink(self) -> TabularSink:
        if self._sink is None:
            if self.output_path is None:
                raise ValueError("No output path to choose a sink from")
            self._sink = sink_for_path(self.output_path)
        return self._sink

    def export(
        self,
        tree: ClusterTree,
        matches_by_index: Mapping[int, Match],
        assignment: Mapping[int, int],
    ) -> ExportResult:
        """
        Export the correlation matrix of a clustering tree.

        Args:
            tree: Clustering tree; its leaves become rows.
            matches_by_index: Match details keyed by leaf index.
            assignment: Cluster number per leaf index.

        Returns:
            ExportResult listing the files written. Empty when the output
            path is empty or the tree has no leaves.

        Raises:
            MalformedTreeError: If the tree is structurally invalid.
            NoClusterableMatchesError: If no match correlates with another.
            UnsupportedOutputFormatError: If no sink handles the output extension.
            PersistenceError: If a write fails and the decider aborts.
        """
        if self.output_path is None:
            logger.info("No output file given; skipping correlation export")
            return ExportResult()

        # Fail on an unsupported extension before any rows are assembled
        sink = self.sink
        logger.debug(f"Writing through {type(sink).__name__}")

        leaves = resolve_leaf_order(tree)
        if not leaves:
            logger.info("Clustering tree has no leaves; nothing to export")
            return ExportResult()

        selection = select_columns(leaves, matches_by_index)
        partitions = partition_columns(
            selection.columns,
            leaves,
            max_columns=self.config.max_columns,
            max_columns_per_split=self.config.max_columns_per_split,
        )
        immediate_family = immediate_family_indexes(
            matches_by_index, self.config.immediate_family_min_cm
        )
        resolver = CorrelatedClusterResolver(
            leaves, assignment, immediate_family, self.config.correlation_min
        )
        capabilities = ColumnCapabilities.from_matches(selection.matches)

        logger.info(
            f"Exporting {len(leaves)} rows x {len(selection.columns)} columns "
            f"to {len(partitions)} file(s); {len(immediate_family)} immediate family matches excluded "
            "from correlated clusters"
        )
        self.progress.reset("Saving clusters", len(leaves) * len(partitions))

        result = ExportResult(
            num_rows=len(leaves),
            num_columns=len(selection.columns),
            threshold=selection.threshold,
        )
        with ThreadPoolExecutor(max_workers=1, thread_name_prefix="clustermatrix-rows") as executor:
            for partition in partitions:
                future = executor.submit(
                    self._assemble,
                    partition,
                    matches_by_index,
                    assignment,
                    resolver,
                    capabilities,
                )
                document = future.result()
                result.paths.append(self._persist(document))

        return result

    def export_partition(
        self,
        partition: OutputPartition,
        matches_by_index: Mapping[int, Match],
        assignment: Mapping[int, int],
        immediate_family: frozenset[int],
    ) -> TabularDocument:
        """
        Assemble and persist a single partition.

        Capabilities are derived from the partition's own rows, so prefer
        export() for multi-partition runs where every file must share the
        same fixed columns.

        Returns:
            The assembled document.

        Raises:
            PersistenceError: If the write fails and the decider aborts.
        """
        resolver = CorrelatedClusterResolver(
            partition.rows, assignment, immediate_family, self.config.correlation_min
        )
        capabilities = ColumnCapabilities.from_matches(
            [matches_by_index[leaf.index] for leaf in partition.rows if leaf.index in matches_by_index]
        )
        document = self._assemble(partition, matches_by_index, assignment, resolver, capabilities)
        if self.output_path is not None:
            self._persist(document)
        return document

    def _assemble(
        self,
        partition: OutputPartition,
        matches_by_index: Mapping[int, Match],
        assignment: Mapping[int, int],
        resolver: CorrelatedClusterResolver,
        capabilities: ColumnCapabilities,
    ) -> TabularDocument:
        logger.debug(
            f"Assembling partition {partition.file_suffix}: "
            f"{len(partition.rows)} rows x {len(partition.columns)} columns"
        )
        return assemble_document(
            partition,
            matches_by_index,
            assignment,
            resolver,
            capabilities,
            self.config,
            on_row=self.progress.increment,
        )

    def _persist(self, document: TabularDocument) -> Path:
        """Write a document, asking the decider after every failure."""
        path = partition_output_path(self.output_path, document.file_suffix)
        while True:
            try:
                self.sink.write(document, path)
                break
            except PersistenceError as e:
                decision = self.on_error(e)
                if decision != RetryDecision.RETRY:
                    logger.error(f"Aborting export after failing to save {path}")
                    raise
                logger.warning(f"Retrying save of {path} after error: {e.cause}")

        logger.info(f"Saved {path}")
        return path
