"""
Core algorithms for building the correlation matrix.

This module contains the leaf ordering of the clustering tree, the selection
of heatmap columns, column partitioning, and correlated cluster lookup.
"""

from clustermatrix.core.correlation import CorrelatedClusterResolver, correlated_clusters
from clustermatrix.core.match_filter import (
    ColumnSelection,
    immediate_family_indexes,
    select_columns,
)
from clustermatrix.core.partition import (
    OutputPartition,
    partition_columns,
    partition_output_path,
)
from clustermatrix.core.tree import ClusterTree, Leaf, load_cluster_tree, resolve_leaf_order

__all__ = [
    "ClusterTree",
    "ColumnSelection",
    "CorrelatedClusterResolver",
    "Leaf",
    "OutputPartition",
    "correlated_clusters",
    "immediate_family_indexes",
    "load_cluster_tree",
    "partition_columns",
    "partition_output_path",
    "resolve_leaf_order",
    "select_columns",
]
