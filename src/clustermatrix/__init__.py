"""
Clustermatrix: correlation heatmaps for clustered DNA matches.

Renders the output of a genetic-genealogy hierarchical clustering run as a
partitioned, color-coded correlation matrix for spreadsheet inspection.
"""

__version__ = "0.1.0"
__author__ = "Clustermatrix Team"

from clustermatrix.core.tree import ClusterTree, Leaf, resolve_leaf_order
from clustermatrix.export.exporter import CorrelationExporter, ExportResult, RetryDecision
from clustermatrix.models.config import ExportConfig
from clustermatrix.models.match import Match, TreeType

__all__ = [
    "ClusterTree",
    "CorrelationExporter",
    "ExportConfig",
    "ExportResult",
    "Leaf",
    "Match",
    "RetryDecision",
    "TreeType",
    "__version__",
    "resolve_leaf_order",
]
